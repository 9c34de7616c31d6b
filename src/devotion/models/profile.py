"""Profile model: one row per user identity."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel

from .enums import Role


class Profile(SQLModel, table=True):
    """A user's public profile and partnership role."""

    __tablename__: ClassVar[str] = "profile"

    id: Optional[int] = Field(default=None, primary_key=True)
    display_name: str = Field(nullable=False, max_length=80, index=True)
    role: Role = Field(default=Role.SUBMISSIVE, nullable=False, index=True)
    theme_color: Optional[str] = Field(default=None, max_length=16)
    bio: str = Field(default="", max_length=500)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
