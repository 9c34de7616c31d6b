"""Profile and partnership repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.enums import PartnershipStatus, Role
from ...models.partnership import Partnership
from ...models.profile import Profile


class PartnershipRepository(Protocol):
    """Repository for profiles and the partnerships between them."""

    def get_profile(self, profile_id: int) -> Optional[Profile]:
        ...

    def list_profiles(self, *, role: Optional[Role] = None) -> list[Profile]:
        ...

    def search_candidates(self, *, user_id: int, term: str = "", limit: int = 20) -> list[Profile]:
        """Profiles the user could propose to, filtered by display name."""
        ...

    def get_by_id(self, partnership_id: int) -> Optional[Partnership]:
        ...

    def list_for_profile(
        self, *, user_id: int, status: Optional[PartnershipStatus] = None
    ) -> list[Partnership]:
        """Partnerships where the user is either side."""
        ...

    def partner_of(self, *, user_id: int) -> Optional[int]:
        """The accepted partner of a user, if any."""
        ...
