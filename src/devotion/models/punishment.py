"""Punishment templates and their assignments."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

from .enums import AssignmentStatus, Severity


class Punishment(SQLModel, table=True):
    """Reusable template; levying it creates a ``PunishmentAssignment``."""

    __tablename__: ClassVar[str] = "punishment"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(nullable=False, max_length=100)
    description: str = Field(default="", max_length=400)
    severity: Severity = Field(default=Severity.MILD, nullable=False)
    category: Optional[str] = Field(default=None, max_length=40)
    created_by: int = Field(foreign_key="profile.id", nullable=False, index=True)
    for_user: int = Field(foreign_key="profile.id", nullable=False, index=True)
    is_active: bool = Field(default=True, nullable=False)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    assignments: list["PunishmentAssignment"] = Relationship(
        back_populates="punishment",
        sa_relationship=relationship("PunishmentAssignment", back_populates="punishment"),
    )


class PunishmentAssignment(SQLModel, table=True):
    """One instance of a punishment levied on ``assigned_to``."""

    __tablename__: ClassVar[str] = "punishment_assignment"

    id: Optional[int] = Field(default=None, primary_key=True)
    punishment_id: int = Field(foreign_key="punishment.id", nullable=False, index=True)
    assigned_to: int = Field(foreign_key="profile.id", nullable=False, index=True)
    assigned_by: int = Field(foreign_key="profile.id", nullable=False, index=True)
    status: AssignmentStatus = Field(default=AssignmentStatus.ASSIGNED, nullable=False, index=True)
    assigned_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    completed_at: Optional[datetime] = Field(default=None)
    validated_by: Optional[int] = Field(default=None, foreign_key="profile.id")
    validated_at: Optional[datetime] = Field(default=None)
    notes: Optional[str] = Field(default=None, max_length=255)

    punishment: "Punishment" = Relationship(
        back_populates="assignments",
        sa_relationship=relationship("Punishment", back_populates="assignments"),
    )
