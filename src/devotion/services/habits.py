"""Habit assignment, completion and streak helpers."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..cache import Mutation, ProjectionCache, invalidate
from ..errors import HabitAlreadyCompleted, NotAuthorized, NotFound, ValidationError
from ..forms import HabitForm, validate_form
from ..infra.database import SessionFactory, unit_of_work
from ..logging_config import get_logger
from ..models.enums import HabitFrequency, TransactionType
from ..models.habit import Habit, HabitCompletion
from . import notifications
from .ledger_service import append_transaction
from .partnerships import require_partners

logger = get_logger("services.habits")

COMPLETION_REASON = "Habit accomplished: {title}"


def compute_streaks(days: Iterable[date], *, today: date | None = None) -> tuple[int, int]:
    """Return (current_streak, longest_streak) from completion days."""

    today = today or date.today()
    completed = set(days)

    # Current streak: walk backwards from today until a gap.
    current = 0
    cursor = today
    while cursor in completed:
        current += 1
        cursor -= timedelta(days=1)

    # Longest streak: sweep through sorted days, counting consecutive runs.
    longest = 0
    run = 0
    last_day: date | None = None
    for d in sorted(completed):
        if last_day is None or d == last_day + timedelta(days=1):
            run += 1
        else:
            longest = max(longest, run)
            run = 1
        last_day = d
    longest = max(longest, run)

    return current, longest


def create_habit(
    *,
    creator_id: int,
    assignee_id: int,
    title: str,
    description: str = "",
    frequency: HabitFrequency | str = HabitFrequency.DAILY,
    points_value: int = 1,
    session_factory: SessionFactory,
    cache: ProjectionCache | None = None,
) -> Habit:
    """Assign a new habit to the creator's partner."""

    form = validate_form(
        HabitForm,
        title=title,
        description=description,
        frequency=frequency,
        points_value=points_value,
    )
    with unit_of_work(session_factory) as session:
        require_partners(session, creator_id, assignee_id)
        habit = Habit(assigned_to=assignee_id, created_by=creator_id, **form.model_dump())
        session.add(habit)
        notifications.push(
            session,
            user_id=assignee_id,
            title="New habit",
            message=f"{habit.title} ({habit.points_value} pts)",
            type="habit",
        )
        session.flush()

    logger.info("Habit created", extra={"habit_id": habit.id, "assigned_to": assignee_id})
    invalidate(cache, Mutation.SAVE_HABIT, assignee_id, creator_id)
    return habit


def deactivate_habit(
    habit_id: int,
    *,
    actor_id: int,
    session_factory: SessionFactory,
    cache: ProjectionCache | None = None,
) -> Habit:
    """Soft-delete a habit; completions and ledger rows stay untouched."""

    with unit_of_work(session_factory) as session:
        habit = session.get(Habit, habit_id)
        if habit is None:
            raise NotFound("Habit", habit_id)
        if actor_id != habit.created_by:
            raise NotAuthorized("Only the habit's creator can deactivate it")
        habit.is_active = False
        session.add(habit)

    logger.info("Habit deactivated", extra={"habit_id": habit_id})
    invalidate(cache, Mutation.SAVE_HABIT, habit.assigned_to, habit.created_by)
    return habit


def _completion_for_day(
    session: Session, habit_id: int, user_id: int, day: date
) -> Optional[HabitCompletion]:
    return session.exec(
        select(HabitCompletion)
        .where(HabitCompletion.habit_id == habit_id)
        .where(HabitCompletion.user_id == user_id)
        .where(HabitCompletion.completed_on == day)
    ).first()


def is_completed_today(
    habit_id: int,
    *,
    user_id: int,
    session_factory: SessionFactory,
    today: date | None = None,
) -> bool:
    with session_factory() as session:
        return _completion_for_day(session, habit_id, user_id, today or date.today()) is not None


def complete_habit(
    habit_id: int,
    *,
    user_id: int,
    notes: Optional[str] = None,
    on: date | None = None,
    session_factory: SessionFactory,
    cache: ProjectionCache | None = None,
) -> HabitCompletion:
    """Mark a habit done for the day and credit its points.

    The completion row and the ``bonus`` transaction commit together. A second
    completion for the same habit, user and day raises ``HabitAlreadyCompleted``;
    the unique constraint on ``habit_completion`` backs the pre-check when two
    sessions race.
    """

    day = on or date.today()
    with unit_of_work(session_factory) as session:
        habit = session.get(Habit, habit_id)
        if habit is None:
            raise NotFound("Habit", habit_id)
        if not habit.is_active:
            raise ValidationError(f"Habit {habit_id} is no longer active")
        if habit.assigned_to != user_id:
            raise NotAuthorized("Only the assignee can complete this habit")
        if _completion_for_day(session, habit_id, user_id, day) is not None:
            raise HabitAlreadyCompleted(f"Habit {habit_id} already completed on {day.isoformat()}")

        completion = HabitCompletion(
            habit_id=habit_id,
            user_id=user_id,
            points_earned=habit.points_value,
            completed_on=day,
            notes=notes,
        )
        session.add(completion)
        try:
            session.flush()
        except IntegrityError as exc:
            raise HabitAlreadyCompleted(
                f"Habit {habit_id} already completed on {day.isoformat()}"
            ) from exc

        append_transaction(
            session,
            user_id=user_id,
            actor_id=user_id,
            points=habit.points_value,
            type=TransactionType.BONUS,
            reason=COMPLETION_REASON.format(title=habit.title),
            reference_id=habit_id,
        )
        notifications.push(
            session,
            user_id=habit.created_by,
            title="Habit completed",
            message=habit.title,
            type="habit",
        )
        session.flush()

    logger.info(
        "Habit completed",
        extra={"habit_id": habit_id, "user_id": user_id, "points": completion.points_earned},
    )
    invalidate(cache, Mutation.COMPLETE_HABIT, user_id, habit.created_by)
    return completion


__all__ = [
    "COMPLETION_REASON",
    "complete_habit",
    "compute_streaks",
    "create_habit",
    "deactivate_habit",
    "is_completed_today",
]
