"""Punishment templates and the assignment workflow.

Assignments move ``assigned -> completed -> validated``: only the assignee
completes, only the original assigner validates. No ledger entry is written;
the cost of a punishment is behavioural.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Session

from ..cache import Mutation, ProjectionCache, invalidate
from ..domain.transitions import ASSIGNMENT_TRANSITIONS, ensure_transition
from ..errors import NotAuthorized, NotFound, ValidationError
from ..forms import PunishmentForm, validate_form
from ..infra.database import SessionFactory, unit_of_work
from ..logging_config import get_logger
from ..models.enums import AssignmentStatus, Severity
from ..models.punishment import Punishment, PunishmentAssignment
from . import notifications
from .partnerships import require_partners

logger = get_logger("services.punishments")


def create_punishment(
    *,
    creator_id: int,
    for_user: int,
    title: str,
    severity: Severity | str = Severity.MILD,
    description: str = "",
    category: Optional[str] = None,
    session_factory: SessionFactory,
    cache: ProjectionCache | None = None,
) -> Punishment:
    form = validate_form(
        PunishmentForm, title=title, severity=severity, description=description, category=category
    )
    with unit_of_work(session_factory) as session:
        require_partners(session, creator_id, for_user)
        punishment = Punishment(created_by=creator_id, for_user=for_user, **form.model_dump())
        session.add(punishment)
        session.flush()

    logger.info("Punishment created", extra={"punishment_id": punishment.id, "for_user": for_user})
    invalidate(cache, Mutation.SAVE_PUNISHMENT, for_user, creator_id)
    return punishment


def assign(
    punishment_id: int,
    *,
    target_id: int,
    assigner_id: int,
    notes: Optional[str] = None,
    session_factory: SessionFactory,
    cache: ProjectionCache | None = None,
) -> PunishmentAssignment:
    """Levy a punishment template on ``target_id``."""

    with unit_of_work(session_factory) as session:
        punishment = session.get(Punishment, punishment_id)
        if punishment is None:
            raise NotFound("Punishment", punishment_id)
        if not punishment.is_active:
            raise ValidationError(f"Punishment {punishment_id} is no longer active")
        if punishment.for_user != target_id:
            raise ValidationError("This punishment is not defined for the target")
        require_partners(session, assigner_id, target_id)

        assignment = PunishmentAssignment(
            punishment_id=punishment_id,
            assigned_to=target_id,
            assigned_by=assigner_id,
            notes=notes,
        )
        session.add(assignment)
        notifications.push(
            session,
            user_id=target_id,
            title="Punishment assigned",
            message=f"{punishment.title} ({punishment.severity.value})",
            type="punishment",
        )
        session.flush()

    logger.info(
        "Punishment assigned",
        extra={"assignment_id": assignment.id, "target_id": target_id, "assigner_id": assigner_id},
    )
    invalidate(cache, Mutation.ASSIGN_PUNISHMENT, target_id, assigner_id)
    return assignment


def _load_assignment(session: Session, assignment_id: int) -> PunishmentAssignment:
    assignment = session.get(PunishmentAssignment, assignment_id)
    if assignment is None:
        raise NotFound("PunishmentAssignment", assignment_id)
    return assignment


def complete(
    assignment_id: int,
    *,
    actor_id: int,
    session_factory: SessionFactory,
    cache: ProjectionCache | None = None,
) -> PunishmentAssignment:
    """Assignee reports the punishment done."""

    with unit_of_work(session_factory) as session:
        assignment = _load_assignment(session, assignment_id)
        if actor_id != assignment.assigned_to:
            raise NotAuthorized("Only the assignee can complete a punishment")
        ensure_transition(
            "PunishmentAssignment",
            ASSIGNMENT_TRANSITIONS,
            assignment.status,
            AssignmentStatus.COMPLETED,
        )
        assignment.status = AssignmentStatus.COMPLETED
        assignment.completed_at = datetime.now(timezone.utc)
        session.add(assignment)
        notifications.push(
            session,
            user_id=assignment.assigned_by,
            title="Punishment completed",
            message="Waiting for your validation.",
            type="punishment",
        )

    logger.info("Punishment completed", extra={"assignment_id": assignment_id})
    invalidate(cache, Mutation.SETTLE_ASSIGNMENT, assignment.assigned_to, assignment.assigned_by)
    return assignment


def validate(
    assignment_id: int,
    *,
    actor_id: int,
    session_factory: SessionFactory,
    cache: ProjectionCache | None = None,
) -> PunishmentAssignment:
    """Original assigner confirms a completed punishment."""

    with unit_of_work(session_factory) as session:
        assignment = _load_assignment(session, assignment_id)
        if actor_id != assignment.assigned_by:
            raise NotAuthorized("Only the assigner can validate a punishment")
        ensure_transition(
            "PunishmentAssignment",
            ASSIGNMENT_TRANSITIONS,
            assignment.status,
            AssignmentStatus.VALIDATED,
        )
        assignment.status = AssignmentStatus.VALIDATED
        assignment.validated_by = actor_id
        assignment.validated_at = datetime.now(timezone.utc)
        session.add(assignment)
        notifications.push(
            session,
            user_id=assignment.assigned_to,
            title="Punishment validated",
            type="punishment",
        )

    logger.info("Punishment validated", extra={"assignment_id": assignment_id})
    invalidate(cache, Mutation.SETTLE_ASSIGNMENT, assignment.assigned_to, assignment.assigned_by)
    return assignment


__all__ = ["assign", "complete", "create_punishment", "validate"]
