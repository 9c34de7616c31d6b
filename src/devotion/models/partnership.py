"""Partnership pairing between a dominant-side and a submissive-side profile."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar, Optional

from sqlalchemy import Index, text
from sqlmodel import Field, SQLModel

from .enums import PartnershipStatus

# Enum columns store member names.
_OPEN_CLAUSE = "status IN ('{}', '{}')".format(
    PartnershipStatus.PENDING.name, PartnershipStatus.ACCEPTED.name
)


class Partnership(SQLModel, table=True):
    """Directed pairing; ``proposed_by`` is whichever side sent the request."""

    __tablename__: ClassVar[str] = "partnership"
    # At most one pending or accepted row per (dominant, submissive) pair.
    __table_args__ = (
        Index(
            "uq_partnership_open_pair",
            "dominant_id",
            "submissive_id",
            unique=True,
            sqlite_where=text(_OPEN_CLAUSE),
            postgresql_where=text(_OPEN_CLAUSE),
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    dominant_id: int = Field(foreign_key="profile.id", nullable=False, index=True)
    submissive_id: int = Field(foreign_key="profile.id", nullable=False, index=True)
    proposed_by: int = Field(foreign_key="profile.id", nullable=False)
    status: PartnershipStatus = Field(default=PartnershipStatus.PENDING, nullable=False, index=True)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def involves(self, profile_id: int) -> bool:
        return profile_id in (self.dominant_id, self.submissive_id)

    def other_party(self, profile_id: int) -> int:
        """Return the partner of ``profile_id`` in this pairing."""

        if profile_id == self.dominant_id:
            return self.submissive_id
        if profile_id == self.submissive_id:
            return self.dominant_id
        raise ValueError(f"Profile {profile_id} is not part of partnership {self.id}")
