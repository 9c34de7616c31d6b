"""SQLModel implementation of punishment template and assignment queries."""

from __future__ import annotations

from typing import Callable, Optional

from sqlmodel import Session, select

from ...models.enums import AssignmentStatus
from ...models.punishment import Punishment, PunishmentAssignment


class SQLModelPunishmentRepository:
    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def get_by_id(self, punishment_id: int) -> Optional[Punishment]:
        with self.session_factory() as session:
            obj = session.get(Punishment, punishment_id)
            if obj:
                session.expunge(obj)
            return obj

    def list_for_user(self, *, user_id: int, include_inactive: bool = False) -> list[Punishment]:
        with self.session_factory() as session:
            statement = (
                select(Punishment).where(Punishment.for_user == user_id).order_by(Punishment.title)  # type: ignore
            )
            if not include_inactive:
                statement = statement.where(Punishment.is_active == True)  # noqa: E712
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def get_assignment(self, assignment_id: int) -> Optional[PunishmentAssignment]:
        with self.session_factory() as session:
            obj = session.get(PunishmentAssignment, assignment_id)
            if obj:
                session.expunge(obj)
            return obj

    def list_assignments(
        self, *, user_id: int, status: Optional[AssignmentStatus] = None
    ) -> list[PunishmentAssignment]:
        """Assignments levied on ``user_id``, newest first."""
        with self.session_factory() as session:
            statement = (
                select(PunishmentAssignment)
                .where(PunishmentAssignment.assigned_to == user_id)
                .order_by(PunishmentAssignment.assigned_at.desc(), PunishmentAssignment.id.desc())  # type: ignore
            )
            if status is not None:
                statement = statement.where(PunishmentAssignment.status == status)
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows
