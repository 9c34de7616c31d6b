"""SQLModel definition for points ledger entries."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel

from .enums import TransactionType

# Fits a full refusal: 100-char title plus 255-char reason and the template.
REASON_MAX_LENGTH = 500


class PointsTransaction(SQLModel, table=True):
    """A single immutable ledger entry; corrections are new offsetting rows."""

    __tablename__: ClassVar[str] = "points_transaction"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="profile.id", nullable=False, index=True)
    created_by: int = Field(foreign_key="profile.id", nullable=False)
    points: int = Field(nullable=False, description="Positive for credit, negative for debit")
    type: TransactionType = Field(nullable=False, index=True)
    reason: str = Field(default="", max_length=REASON_MAX_LENGTH)
    # Habit, purchase or shared-task id that caused the entry.
    reference_id: Optional[int] = Field(default=None, index=True)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )
