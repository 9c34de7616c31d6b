"""Shared tasks: partnership goals completed through contributions.

Progress is written with a conditional update on ``version`` so concurrent
contributions cannot overwrite each other; a lost race is retried from a
fresh read. The update that carries progress to the target also stamps
``completed_at`` and credits both partners, all in one transaction, so the
completion bonus is paid exactly once per task.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import update

from ..cache import Mutation, ProjectionCache, invalidate
from ..config import BaseConfig
from ..errors import ConcurrencyConflict, NotAuthorized, NotFound, ValidationError
from ..forms import ContributionForm, SharedTaskForm, validate_form
from ..infra.database import SessionFactory, unit_of_work
from ..logging_config import get_logger
from ..models.enums import PartnershipStatus, TransactionType
from ..models.partnership import Partnership
from ..models.shared_task import SharedTask, TaskContribution
from . import notifications
from .ledger_service import append_transaction

logger = get_logger("services.shared_tasks")

COMPLETION_REASON = "Shared task accomplished: {title}"


def create_task(
    *,
    partnership_id: int,
    creator_id: int,
    title: str,
    points_value: int = 1,
    completion_target: int = 1,
    description: str = "",
    due_date: Optional[date] = None,
    session_factory: SessionFactory,
    cache: ProjectionCache | None = None,
) -> SharedTask:
    form = validate_form(
        SharedTaskForm,
        title=title,
        points_value=points_value,
        completion_target=completion_target,
        description=description,
        due_date=due_date,
    )
    with unit_of_work(session_factory) as session:
        partnership = session.get(Partnership, partnership_id)
        if partnership is None:
            raise NotFound("Partnership", partnership_id)
        if partnership.status != PartnershipStatus.ACCEPTED or not partnership.involves(creator_id):
            raise NotAuthorized("Shared tasks need an accepted partnership the creator belongs to")
        task = SharedTask(partnership_id=partnership_id, created_by=creator_id, **form.model_dump())
        session.add(task)
        session.flush()

    logger.info("Shared task created", extra={"task_id": task.id, "partnership_id": partnership_id})
    invalidate(cache, Mutation.SAVE_SHARED_TASK, partnership.dominant_id, partnership.submissive_id)
    return task


def contribute(
    task_id: int,
    *,
    user_id: int,
    amount: int,
    notes: Optional[str] = None,
    retries: int = BaseConfig.CONTRIBUTION_RETRIES,
    session_factory: SessionFactory,
    cache: ProjectionCache | None = None,
) -> TaskContribution:
    """Add progress to a shared task, paying both partners when it completes.

    The applied increment is ``min(amount, target - progress)``; the recorded
    contribution carries the applied amount.
    """

    form = validate_form(ContributionForm, amount=amount, notes=notes)
    attempts = max(1, retries)
    for attempt in range(1, attempts + 1):
        try:
            contribution, task, partnership, crossed = _contribute_once(
                task_id, user_id=user_id, form=form, session_factory=session_factory
            )
        except ConcurrencyConflict:
            logger.warning(
                "Shared task progress conflict",
                extra={"task_id": task_id, "attempt": attempt},
            )
            if attempt == attempts:
                raise
            continue
        break

    logger.info(
        "Contribution recorded",
        extra={
            "task_id": task_id,
            "user_id": user_id,
            "applied": contribution.amount,
            "completed": crossed,
        },
    )
    invalidate(cache, Mutation.CONTRIBUTE, partnership.dominant_id, partnership.submissive_id)
    return contribution


def _contribute_once(
    task_id: int,
    *,
    user_id: int,
    form: ContributionForm,
    session_factory: SessionFactory,
) -> tuple[TaskContribution, SharedTask, Partnership, bool]:
    with unit_of_work(session_factory) as session:
        task = session.get(SharedTask, task_id)
        if task is None:
            raise NotFound("SharedTask", task_id)
        partnership = session.get(Partnership, task.partnership_id)
        if partnership is None:
            raise NotFound("Partnership", task.partnership_id)
        if partnership.status != PartnershipStatus.ACCEPTED or not partnership.involves(user_id):
            raise NotAuthorized("Only partners in an accepted partnership can contribute")
        if task.completed_at is not None or task.is_complete:
            raise ValidationError(f"Shared task {task_id} is already complete")

        applied = min(form.amount, task.completion_target - task.current_progress)
        new_progress = task.current_progress + applied
        crossed = new_progress >= task.completion_target
        values: dict[str, object] = {
            "current_progress": new_progress,
            "version": task.version + 1,
        }
        if crossed:
            values["completed_at"] = datetime.now(timezone.utc)

        result = session.execute(
            update(SharedTask)
            .where(SharedTask.id == task_id)
            .where(SharedTask.version == task.version)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise ConcurrencyConflict(f"Shared task {task_id} changed while contributing")
        session.refresh(task)

        contribution = TaskContribution(
            shared_task_id=task_id,
            user_id=user_id,
            amount=applied,
            notes=form.notes,
        )
        session.add(contribution)

        if crossed:
            for partner_id in (partnership.dominant_id, partnership.submissive_id):
                append_transaction(
                    session,
                    user_id=partner_id,
                    actor_id=user_id,
                    points=task.points_value,
                    type=TransactionType.BONUS,
                    reason=COMPLETION_REASON.format(title=task.title),
                    reference_id=task_id,
                )
                notifications.push(
                    session,
                    user_id=partner_id,
                    title="Shared task accomplished",
                    message=f"{task.title}: +{task.points_value} pts",
                    type="shared_task",
                )
        session.flush()

    return contribution, task, partnership, crossed


__all__ = [
    "COMPLETION_REASON",
    "contribute",
    "create_task",
]
