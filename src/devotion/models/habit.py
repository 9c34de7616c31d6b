"""Habits tracking data structures."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import ClassVar, Optional

from sqlalchemy import UniqueConstraint
from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

from .enums import HabitFrequency


class Habit(SQLModel, table=True):
    """A habit a partner assigns; deactivated instead of deleted."""

    __tablename__: ClassVar[str] = "habit"

    id: Optional[int] = Field(default=None, primary_key=True)
    assigned_to: int = Field(foreign_key="profile.id", nullable=False, index=True)
    created_by: int = Field(foreign_key="profile.id", nullable=False, index=True)
    title: str = Field(nullable=False, max_length=100)
    description: str = Field(default="", max_length=400)
    frequency: HabitFrequency = Field(default=HabitFrequency.DAILY, nullable=False)
    points_value: int = Field(default=1, nullable=False)
    is_active: bool = Field(default=True, nullable=False)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    completions: list["HabitCompletion"] = Relationship(
        back_populates="habit",
        sa_relationship=relationship("HabitCompletion", back_populates="habit"),
    )


class HabitCompletion(SQLModel, table=True):
    """Completion record for a habit on a calendar day."""

    __tablename__: ClassVar[str] = "habit_completion"
    __table_args__ = (
        UniqueConstraint("habit_id", "user_id", "completed_on", name="uq_habit_completion_day"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    habit_id: int = Field(foreign_key="habit.id", nullable=False, index=True)
    user_id: int = Field(foreign_key="profile.id", nullable=False, index=True)
    points_earned: int = Field(default=0, nullable=False)
    completed_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    # Local calendar day of the completion; carries the one-per-day constraint.
    completed_on: date = Field(default_factory=date.today, nullable=False, index=True)
    notes: Optional[str] = Field(default=None, max_length=255)

    habit: "Habit" = Relationship(
        back_populates="completions",
        sa_relationship=relationship("Habit", back_populates="completions"),
    )
