"""In-store inbox rows written alongside workflow events."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel


class Notification(SQLModel, table=True):
    __tablename__: ClassVar[str] = "notification"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="profile.id", nullable=False, index=True)
    title: str = Field(nullable=False, max_length=100)
    message: str = Field(default="", max_length=255)
    type: Optional[str] = Field(default=None, max_length=40)
    is_read: bool = Field(default=False, nullable=False)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
