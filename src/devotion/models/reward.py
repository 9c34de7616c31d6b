"""Reward catalogue and purchase records."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

from .enums import PurchaseStatus


class Reward(SQLModel, table=True):
    """Something ``for_user`` can buy with points; priced by its creator."""

    __tablename__: ClassVar[str] = "reward"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(nullable=False, max_length=100)
    description: str = Field(default="", max_length=400)
    points_cost: int = Field(nullable=False)
    category: Optional[str] = Field(default=None, max_length=40)
    created_by: int = Field(foreign_key="profile.id", nullable=False, index=True)
    for_user: int = Field(foreign_key="profile.id", nullable=False, index=True)
    is_active: bool = Field(default=True, nullable=False)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    purchases: list["RewardPurchase"] = Relationship(
        back_populates="reward",
        sa_relationship=relationship("RewardPurchase", back_populates="reward"),
    )


class RewardPurchase(SQLModel, table=True):
    """A reward bought by ``user_id``; ``points_spent`` snapshots the price."""

    __tablename__: ClassVar[str] = "reward_purchase"

    id: Optional[int] = Field(default=None, primary_key=True)
    reward_id: int = Field(foreign_key="reward.id", nullable=False, index=True)
    user_id: int = Field(foreign_key="profile.id", nullable=False, index=True)
    points_spent: int = Field(nullable=False)
    status: PurchaseStatus = Field(default=PurchaseStatus.PENDING, nullable=False, index=True)
    purchased_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    validated_by: Optional[int] = Field(default=None, foreign_key="profile.id")
    validated_at: Optional[datetime] = Field(default=None)
    used_at: Optional[datetime] = Field(default=None)
    refusal_reason: Optional[str] = Field(default=None, max_length=255)

    reward: "Reward" = Relationship(
        back_populates="purchases",
        sa_relationship=relationship("Reward", back_populates="purchases"),
    )
