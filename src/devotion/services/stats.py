"""Per-profile statistics composed from repository reads."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta

from ..cache import CacheKey, Entity, ProjectionCache
from ..domain.repositories import HabitRepository, TransactionRepository
from .habits import compute_streaks


@dataclass(slots=True, frozen=True)
class PartnerStats:
    """Lightweight DTO for the dashboard header."""

    user_id: int
    balance: int
    earned: int
    spent: int
    completions_today: int
    total_completions: int
    habits_assigned: int
    completion_rate: float


def completion_rate(completed: int, total: int) -> float:
    """Percentage of ``total`` that is ``completed``; 0 when there is nothing to do."""

    if total <= 0:
        return 0.0
    return round(completed / total * 100, 1)


def partner_stats(
    user_id: int,
    *,
    transactions: TransactionRepository,
    habits: HabitRepository,
    today: date | None = None,
    cache: ProjectionCache | None = None,
) -> PartnerStats:
    """Balance, ledger totals and today's habit progress for one profile."""

    today = today or date.today()

    def _load() -> PartnerStats:
        totals = transactions.totals(user_id=user_id)
        assigned = habits.count_assigned(user_id=user_id)
        done_today = habits.count_completions(user_id=user_id, on=today)
        return PartnerStats(
            user_id=user_id,
            balance=totals["net"],
            earned=totals["earned"],
            spent=totals["spent"],
            completions_today=done_today,
            total_completions=habits.count_completions(user_id=user_id),
            habits_assigned=assigned,
            completion_rate=completion_rate(min(done_today, assigned), assigned),
        )

    if cache is None:
        return _load()
    return cache.get_or_load(CacheKey(Entity.STATS, user_id), _load)


def completion_calendar(
    user_id: int, start: date, end: date, *, habits: HabitRepository
) -> dict[date, list[int]]:
    """Map each day in ``[start, end]`` with completions to the habit ids completed."""

    if end < start:
        start, end = end, start

    calendar: dict[date, list[int]] = defaultdict(list)
    for completion in habits.completions_between(start, end, user_id=user_id):
        calendar[completion.completed_on].append(completion.habit_id)
    return dict(calendar)


def daily_completion_rates(
    user_id: int, start: date, end: date, *, habits: HabitRepository
) -> dict[date, float]:
    """Percentage of the user's active habits completed on every day of ``[start, end]``.

    Days without completions are present with a rate of 0.0.
    """

    if end < start:
        start, end = end, start

    active = {habit.id for habit in habits.list_for_assignee(user_id=user_id)}
    calendar = completion_calendar(user_id, start, end, habits=habits)
    rates: dict[date, float] = {}
    day = start
    while day <= end:
        done = active.intersection(calendar.get(day, ()))
        rates[day] = completion_rate(len(done), len(active))
        day += timedelta(days=1)
    return rates


def habit_streaks(
    habit_id: int, *, user_id: int, habits: HabitRepository, today: date | None = None
) -> tuple[int, int]:
    """(current, longest) consecutive-day streaks for one habit."""

    return compute_streaks(habits.completion_days(habit_id, user_id=user_id), today=today)


__all__ = [
    "PartnerStats",
    "completion_calendar",
    "completion_rate",
    "daily_completion_rates",
    "habit_streaks",
    "partner_stats",
]
