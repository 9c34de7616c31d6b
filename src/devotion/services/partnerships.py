"""Profiles and the partnership lifecycle.

A partnership is proposed by one side and answered by the other. Only one
pending or accepted pairing may exist per (dominant, submissive) pair;
``rejected`` and ``dissolved`` are terminal, so pairing again means a new
proposal row.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import and_, or_
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..cache import Mutation, ProjectionCache, invalidate
from ..domain.transitions import PARTNERSHIP_TRANSITIONS, ensure_transition
from ..errors import NotAuthorized, NotFound, ValidationError
from ..forms import ProfileForm, validate_form
from ..infra.database import SessionFactory, unit_of_work
from ..logging_config import get_logger
from ..models.enums import PartnershipStatus, Role
from ..models.partnership import Partnership
from ..models.profile import Profile
from . import notifications

logger = get_logger("services.partnerships")

_OPEN_STATUSES = (PartnershipStatus.PENDING, PartnershipStatus.ACCEPTED)
_DOMINANT_SIDE = {Role.DOMINANT, Role.SWITCH}
_SUBMISSIVE_SIDE = {Role.SUBMISSIVE, Role.SWITCH}


def create_profile(
    *,
    display_name: str,
    role: Role | str = Role.SUBMISSIVE,
    theme_color: Optional[str] = None,
    bio: str = "",
    session_factory: SessionFactory,
) -> Profile:
    """Create a profile for a freshly authenticated identity."""

    form = validate_form(
        ProfileForm, display_name=display_name, role=role, theme_color=theme_color, bio=bio
    )
    with unit_of_work(session_factory) as session:
        profile = Profile(**form.model_dump())
        session.add(profile)
        session.flush()
    logger.info("Profile created", extra={"profile_id": profile.id, "role": profile.role.value})
    return profile


def get_profile(session: Session, profile_id: int) -> Profile:
    profile = session.get(Profile, profile_id)
    if profile is None:
        raise NotFound("Profile", profile_id)
    return profile


def accepted_between(session: Session, first_id: int, second_id: int) -> Optional[Partnership]:
    """Return the accepted partnership linking two profiles in either direction."""

    return session.exec(
        select(Partnership)
        .where(Partnership.status == PartnershipStatus.ACCEPTED)
        .where(
            or_(
                and_(Partnership.dominant_id == first_id, Partnership.submissive_id == second_id),
                and_(Partnership.dominant_id == second_id, Partnership.submissive_id == first_id),
            )
        )
    ).first()


def require_partners(session: Session, first_id: int, second_id: int) -> Partnership:
    """Raise ``NotAuthorized`` unless the two profiles are accepted partners."""

    partnership = accepted_between(session, first_id, second_id)
    if partnership is None:
        raise NotAuthorized(f"Profiles {first_id} and {second_id} are not partners")
    return partnership


def _sides(proposer: Profile, partner: Profile) -> tuple[int, int]:
    """Return (dominant_id, submissive_id) for a proposal."""

    if proposer.role == Role.DOMINANT:
        dominant, submissive = proposer, partner
    else:
        dominant, submissive = partner, proposer

    if dominant.role not in _DOMINANT_SIDE or submissive.role not in _SUBMISSIVE_SIDE:
        raise ValidationError(
            f"Roles {proposer.role.value!r} and {partner.role.value!r} cannot form a partnership"
        )
    return dominant.id, submissive.id  # type: ignore[return-value]


def propose(
    *,
    proposer_id: int,
    partner_id: int,
    session_factory: SessionFactory,
    cache: ProjectionCache | None = None,
) -> Partnership:
    """Send a partnership request from ``proposer_id`` to ``partner_id``."""

    if proposer_id == partner_id:
        raise ValidationError("A profile cannot partner with itself")

    with unit_of_work(session_factory) as session:
        proposer = get_profile(session, proposer_id)
        partner = get_profile(session, partner_id)
        dominant_id, submissive_id = _sides(proposer, partner)

        existing = session.exec(
            select(Partnership)
            .where(Partnership.dominant_id == dominant_id)
            .where(Partnership.submissive_id == submissive_id)
            .where(Partnership.status.in_(_OPEN_STATUSES))  # type: ignore[union-attr]
        ).first()
        if existing is not None:
            raise ValidationError(
                f"Partnership {existing.id} is already {existing.status.value} for this pair"
            )

        partnership = Partnership(
            dominant_id=dominant_id,
            submissive_id=submissive_id,
            proposed_by=proposer_id,
        )
        session.add(partnership)
        try:
            session.flush()
        except IntegrityError as exc:
            raise ValidationError("A partnership is already open for this pair") from exc
        notifications.push(
            session,
            user_id=partner_id,
            title="Partnership request",
            message=f"{proposer.display_name} wants to partner with you.",
            type="partnership",
        )
        session.flush()

    logger.info(
        "Partnership proposed",
        extra={"partnership_id": partnership.id, "proposer_id": proposer_id},
    )
    invalidate(cache, Mutation.CHANGE_PARTNERSHIP, proposer_id, partner_id)
    return partnership


def _answer(
    partnership_id: int,
    *,
    actor_id: int,
    target: PartnershipStatus,
    session_factory: SessionFactory,
    cache: ProjectionCache | None,
) -> Partnership:
    with unit_of_work(session_factory) as session:
        partnership = session.get(Partnership, partnership_id)
        if partnership is None:
            raise NotFound("Partnership", partnership_id)
        if not partnership.involves(actor_id):
            raise NotAuthorized("Only a member of the partnership can change it")
        if target != PartnershipStatus.DISSOLVED and actor_id == partnership.proposed_by:
            raise NotAuthorized("Only the invited party can answer a partnership request")
        ensure_transition("Partnership", PARTNERSHIP_TRANSITIONS, partnership.status, target)

        partnership.status = target
        partnership.updated_at = datetime.now(timezone.utc)
        session.add(partnership)
        other = partnership.other_party(actor_id)
        notifications.push(
            session,
            user_id=other,
            title=f"Partnership {target.value}",
            type="partnership",
        )

    logger.info(
        "Partnership updated",
        extra={"partnership_id": partnership_id, "status": target.value, "actor_id": actor_id},
    )
    invalidate(cache, Mutation.CHANGE_PARTNERSHIP, actor_id, other)
    return partnership


def accept(
    partnership_id: int,
    *,
    actor_id: int,
    session_factory: SessionFactory,
    cache: ProjectionCache | None = None,
) -> Partnership:
    return _answer(
        partnership_id,
        actor_id=actor_id,
        target=PartnershipStatus.ACCEPTED,
        session_factory=session_factory,
        cache=cache,
    )


def reject(
    partnership_id: int,
    *,
    actor_id: int,
    session_factory: SessionFactory,
    cache: ProjectionCache | None = None,
) -> Partnership:
    return _answer(
        partnership_id,
        actor_id=actor_id,
        target=PartnershipStatus.REJECTED,
        session_factory=session_factory,
        cache=cache,
    )


def dissolve(
    partnership_id: int,
    *,
    actor_id: int,
    session_factory: SessionFactory,
    cache: ProjectionCache | None = None,
) -> Partnership:
    """Either member may end an accepted partnership."""

    return _answer(
        partnership_id,
        actor_id=actor_id,
        target=PartnershipStatus.DISSOLVED,
        session_factory=session_factory,
        cache=cache,
    )


__all__ = [
    "accept",
    "accepted_between",
    "create_profile",
    "dissolve",
    "get_profile",
    "propose",
    "reject",
    "require_partners",
]
