"""SQLModel implementation of profile and partnership queries."""

from __future__ import annotations

from typing import Callable, Optional

from sqlalchemy import case, or_
from sqlmodel import Session, select

from ...models.enums import PartnershipStatus, Role
from ...models.partnership import Partnership
from ...models.profile import Profile

_OPEN_STATUSES = (PartnershipStatus.PENDING, PartnershipStatus.ACCEPTED)
_COUNTERPART_ROLES = {
    Role.DOMINANT: (Role.SUBMISSIVE, Role.SWITCH),
    Role.SUBMISSIVE: (Role.DOMINANT, Role.SWITCH),
    Role.SWITCH: (Role.DOMINANT, Role.SUBMISSIVE, Role.SWITCH),
}


class SQLModelPartnershipRepository:
    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def get_profile(self, profile_id: int) -> Optional[Profile]:
        with self.session_factory() as session:
            obj = session.get(Profile, profile_id)
            if obj:
                session.expunge(obj)
            return obj

    def list_profiles(self, *, role: Optional[Role] = None) -> list[Profile]:
        with self.session_factory() as session:
            statement = select(Profile).order_by(Profile.display_name)  # type: ignore
            if role is not None:
                statement = statement.where(Profile.role == role)
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def search_candidates(self, *, user_id: int, term: str = "", limit: int = 20) -> list[Profile]:
        """Profiles ``user_id`` could propose to, matched on display name.

        Only roles that can sit opposite the user's role are returned; the
        user and anyone already pending or accepted with them are excluded.
        """
        with self.session_factory() as session:
            user = session.get(Profile, user_id)
            if user is None:
                return []
            linked = select(
                case(
                    (Partnership.dominant_id == user_id, Partnership.submissive_id),
                    else_=Partnership.dominant_id,
                )
            ).where(
                or_(Partnership.dominant_id == user_id, Partnership.submissive_id == user_id),
                Partnership.status.in_(_OPEN_STATUSES),  # type: ignore[union-attr]
            )
            statement = (
                select(Profile)
                .where(Profile.id != user_id)
                .where(Profile.role.in_(_COUNTERPART_ROLES[user.role]))  # type: ignore[attr-defined]
                .where(Profile.id.not_in(linked))  # type: ignore[union-attr]
            )
            term = term.strip()
            if term:
                statement = statement.where(Profile.display_name.ilike(f"%{term}%"))  # type: ignore[attr-defined]
            statement = statement.order_by(Profile.display_name, Profile.id).limit(limit)  # type: ignore
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def get_by_id(self, partnership_id: int) -> Optional[Partnership]:
        with self.session_factory() as session:
            obj = session.get(Partnership, partnership_id)
            if obj:
                session.expunge(obj)
            return obj

    def list_for_profile(
        self, *, user_id: int, status: Optional[PartnershipStatus] = None
    ) -> list[Partnership]:
        """Partnerships where ``user_id`` is either side."""
        with self.session_factory() as session:
            statement = (
                select(Partnership)
                .where(or_(Partnership.dominant_id == user_id, Partnership.submissive_id == user_id))
                .order_by(Partnership.updated_at.desc(), Partnership.id.desc())  # type: ignore
            )
            if status is not None:
                statement = statement.where(Partnership.status == status)
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def partner_of(self, *, user_id: int) -> Optional[int]:
        """Return the accepted partner of ``user_id``, if any."""
        accepted = self.list_for_profile(user_id=user_id, status=PartnershipStatus.ACCEPTED)
        return accepted[0].other_party(user_id) if accepted else None
