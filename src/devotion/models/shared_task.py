"""Partnership-scoped collaborative goals."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel


class SharedTask(SQLModel, table=True):
    """Goal both partners push toward; each earns ``points_value`` on completion."""

    __tablename__: ClassVar[str] = "shared_task"

    id: Optional[int] = Field(default=None, primary_key=True)
    partnership_id: int = Field(foreign_key="partnership.id", nullable=False, index=True)
    created_by: int = Field(foreign_key="profile.id", nullable=False)
    title: str = Field(nullable=False, max_length=100)
    description: str = Field(default="", max_length=400)
    points_value: int = Field(default=1, nullable=False)
    completion_target: int = Field(default=1, nullable=False)
    current_progress: int = Field(default=0, nullable=False)
    due_date: Optional[date] = Field(default=None)
    completed_at: Optional[datetime] = Field(default=None)
    # Bumped on every progress write; guards the conditional update.
    version: int = Field(default=0, nullable=False)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    contributions: list["TaskContribution"] = Relationship(
        back_populates="task",
        sa_relationship=relationship("TaskContribution", back_populates="task"),
    )

    @property
    def is_complete(self) -> bool:
        return self.current_progress >= self.completion_target


class TaskContribution(SQLModel, table=True):
    """Incremental progress added by one partner."""

    __tablename__: ClassVar[str] = "task_contribution"

    id: Optional[int] = Field(default=None, primary_key=True)
    shared_task_id: int = Field(foreign_key="shared_task.id", nullable=False, index=True)
    user_id: int = Field(foreign_key="profile.id", nullable=False, index=True)
    amount: int = Field(nullable=False)
    notes: Optional[str] = Field(default=None, max_length=255)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    task: "SharedTask" = Relationship(
        back_populates="contributions",
        sa_relationship=relationship("SharedTask", back_populates="contributions"),
    )
