"""SQLModel implementation of the reward catalogue and purchase queries."""

from __future__ import annotations

from typing import Callable, Optional

from sqlmodel import Session, select

from ...models.enums import PurchaseStatus
from ...models.reward import Reward, RewardPurchase


class SQLModelRewardRepository:
    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def get_by_id(self, reward_id: int) -> Optional[Reward]:
        with self.session_factory() as session:
            obj = session.get(Reward, reward_id)
            if obj:
                session.expunge(obj)
            return obj

    def list_for_user(self, *, user_id: int, include_inactive: bool = False) -> list[Reward]:
        """Rewards offered to ``user_id``, cheapest first."""
        with self.session_factory() as session:
            statement = (
                select(Reward).where(Reward.for_user == user_id).order_by(Reward.points_cost)  # type: ignore
            )
            if not include_inactive:
                statement = statement.where(Reward.is_active == True)  # noqa: E712
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def get_purchase(self, purchase_id: int) -> Optional[RewardPurchase]:
        with self.session_factory() as session:
            obj = session.get(RewardPurchase, purchase_id)
            if obj:
                session.expunge(obj)
            return obj

    def list_purchases(
        self, *, user_id: int, status: Optional[PurchaseStatus] = None
    ) -> list[RewardPurchase]:
        """Purchases made by ``user_id``, newest first."""
        with self.session_factory() as session:
            statement = (
                select(RewardPurchase)
                .where(RewardPurchase.user_id == user_id)
                .order_by(RewardPurchase.purchased_at.desc(), RewardPurchase.id.desc())  # type: ignore
            )
            if status is not None:
                statement = statement.where(RewardPurchase.status == status)
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def pending_for_validator(self, *, creator_id: int) -> list[RewardPurchase]:
        """Pending purchases of rewards ``creator_id`` offered."""
        with self.session_factory() as session:
            statement = (
                select(RewardPurchase)
                .join(Reward, Reward.id == RewardPurchase.reward_id)  # type: ignore[arg-type]
                .where(Reward.created_by == creator_id)
                .where(RewardPurchase.status == PurchaseStatus.PENDING)
                .order_by(RewardPurchase.purchased_at)  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows
