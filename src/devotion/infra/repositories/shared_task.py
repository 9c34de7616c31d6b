"""SQLModel implementation of shared task queries."""

from __future__ import annotations

from typing import Callable, Optional

from sqlmodel import Session, select

from ...models.shared_task import SharedTask, TaskContribution


class SQLModelSharedTaskRepository:
    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def get_by_id(self, task_id: int) -> Optional[SharedTask]:
        with self.session_factory() as session:
            obj = session.get(SharedTask, task_id)
            if obj:
                session.expunge(obj)
            return obj

    def list_for_partnership(self, *, partnership_id: int, include_completed: bool = True) -> list[SharedTask]:
        with self.session_factory() as session:
            statement = (
                select(SharedTask)
                .where(SharedTask.partnership_id == partnership_id)
                .order_by(SharedTask.created_at.desc(), SharedTask.id.desc())  # type: ignore
            )
            if not include_completed:
                statement = statement.where(SharedTask.completed_at == None)  # noqa: E711
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def list_contributions(self, *, task_id: int) -> list[TaskContribution]:
        with self.session_factory() as session:
            rows = list(
                session.exec(
                    select(TaskContribution)
                    .where(TaskContribution.shared_task_id == task_id)
                    .order_by(TaskContribution.created_at, TaskContribution.id)  # type: ignore
                ).all()
            )
            session.expunge_all()
            return rows
