"""SQLModel implementation of the points ledger repository (read-only)."""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

from sqlalchemy import func
from sqlmodel import Session, select

from ...models.enums import TransactionType
from ...models.transaction import PointsTransaction


class SQLModelTransactionRepository:
    """Queries over ``points_transaction``; writes go through the ledger service."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, transaction_id: int, *, user_id: int) -> Optional[PointsTransaction]:
        with self.session_factory() as session:
            obj = session.exec(
                select(PointsTransaction)
                .where(PointsTransaction.id == transaction_id)
                .where(PointsTransaction.user_id == user_id)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_all(self, *, user_id: int, limit: int = 100, offset: int = 0) -> list[PointsTransaction]:
        """List a user's transactions, newest first."""
        with self.session_factory() as session:
            statement = (
                select(PointsTransaction)
                .where(PointsTransaction.user_id == user_id)
                .order_by(PointsTransaction.created_at.desc(), PointsTransaction.id.desc())  # type: ignore
                .offset(offset)
                .limit(limit)
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def search(
        self,
        *,
        user_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        txn_type: Optional[TransactionType] = None,
        reference_id: Optional[int] = None,
        text: Optional[str] = None,
    ) -> list[PointsTransaction]:
        """Filter a user's transactions."""
        with self.session_factory() as session:
            statement = select(PointsTransaction).where(PointsTransaction.user_id == user_id)

            if start:
                statement = statement.where(PointsTransaction.created_at >= start)
            if end:
                statement = statement.where(PointsTransaction.created_at <= end)
            if txn_type:
                statement = statement.where(PointsTransaction.type == txn_type)
            if reference_id is not None:
                statement = statement.where(PointsTransaction.reference_id == reference_id)
            if text:
                statement = statement.where(PointsTransaction.reason.contains(text))  # type: ignore

            statement = statement.order_by(PointsTransaction.created_at.desc())  # type: ignore
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def balance(self, *, user_id: int) -> int:
        with self.session_factory() as session:
            total = session.exec(
                select(func.coalesce(func.sum(PointsTransaction.points), 0)).where(
                    PointsTransaction.user_id == user_id
                )
            ).one()
            return int(total)

    def totals(self, *, user_id: int) -> dict[str, int]:
        """Return earned (credits), spent (debits) and net for a user."""
        with self.session_factory() as session:
            points = list(
                session.exec(
                    select(PointsTransaction.points).where(PointsTransaction.user_id == user_id)
                ).all()
            )
        earned = sum(p for p in points if p > 0)
        spent = sum(-p for p in points if p < 0)
        return {"earned": earned, "spent": spent, "net": earned - spent}
