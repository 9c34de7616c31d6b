"""Reward repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.enums import PurchaseStatus
from ...models.reward import Reward, RewardPurchase


class RewardRepository(Protocol):
    def get_by_id(self, reward_id: int) -> Optional[Reward]:
        ...

    def list_for_user(self, *, user_id: int, include_inactive: bool = False) -> list[Reward]:
        ...

    def get_purchase(self, purchase_id: int) -> Optional[RewardPurchase]:
        ...

    def list_purchases(
        self, *, user_id: int, status: Optional[PurchaseStatus] = None
    ) -> list[RewardPurchase]:
        ...

    def pending_for_validator(self, *, creator_id: int) -> list[RewardPurchase]:
        ...
