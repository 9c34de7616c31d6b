"""Demo data seeding for local exploration."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

from sqlalchemy import func
from sqlmodel import Session, select

from ..infra.database import SessionFactory
from ..logging_config import get_logger
from ..models import (
    Habit,
    HabitCompletion,
    HabitFrequency,
    Partnership,
    PointsTransaction,
    Profile,
    Punishment,
    Reward,
    Role,
    Severity,
    SharedTask,
)
from . import habits, partnerships, punishments, rewards, shared_tasks

logger = get_logger("services.demo_seed")

DEMO_DOMINANT = "Mistress Demo"
DEMO_SUBMISSIVE = "Pet Demo"


@dataclass
class SeedSummary:
    """Aggregate counts returned after demo seeding."""

    profiles: int
    partnerships: int
    habits: int
    completions: int
    rewards: int
    punishments: int
    shared_tasks: int
    transactions: int


def _count(session: Session, column) -> int:
    return int(session.exec(select(func.count(column))).one())


def _build_seed_summary(session_factory: SessionFactory) -> SeedSummary:
    """Compile counts for tables populated by the demo seed."""

    with session_factory() as session:
        return SeedSummary(
            profiles=_count(session, Profile.id),
            partnerships=_count(session, Partnership.id),
            habits=_count(session, Habit.id),
            completions=_count(session, HabitCompletion.id),
            rewards=_count(session, Reward.id),
            punishments=_count(session, Punishment.id),
            shared_tasks=_count(session, SharedTask.id),
            transactions=_count(session, PointsTransaction.id),
        )


def run_demo_seed(session_factory: SessionFactory, *, today: date | None = None) -> SeedSummary:
    """Seed an accepted couple with a few habits, rewards and a shared task.

    Re-running on a database that already holds the demo dominant is a no-op.
    """

    with session_factory() as session:
        existing = session.exec(
            select(Profile.id).where(Profile.display_name == DEMO_DOMINANT)
        ).first()
    if existing is not None:
        return _build_seed_summary(session_factory)

    today = today or date.today()
    dom = partnerships.create_profile(
        display_name=DEMO_DOMINANT, role=Role.DOMINANT, session_factory=session_factory
    )
    sub = partnerships.create_profile(
        display_name=DEMO_SUBMISSIVE, role=Role.SUBMISSIVE, session_factory=session_factory
    )
    pairing = partnerships.propose(
        proposer_id=dom.id, partner_id=sub.id, session_factory=session_factory
    )
    partnerships.accept(pairing.id, actor_id=sub.id, session_factory=session_factory)

    morning = habits.create_habit(
        creator_id=dom.id,
        assignee_id=sub.id,
        title="Morning check-in",
        frequency=HabitFrequency.DAILY,
        points_value=5,
        session_factory=session_factory,
    )
    habits.create_habit(
        creator_id=dom.id,
        assignee_id=sub.id,
        title="Weekly journal",
        frequency=HabitFrequency.WEEKLY,
        points_value=20,
        session_factory=session_factory,
    )
    # A short streak ending today.
    for offset in range(3, -1, -1):
        habits.complete_habit(
            morning.id,
            user_id=sub.id,
            on=today - timedelta(days=offset),
            session_factory=session_factory,
        )

    rewards.create_reward(
        creator_id=dom.id,
        for_user=sub.id,
        title="Movie night pick",
        points_cost=10,
        category="treat",
        session_factory=session_factory,
    )
    rewards.create_reward(
        creator_id=dom.id,
        for_user=sub.id,
        title="Sleep in",
        points_cost=40,
        session_factory=session_factory,
    )
    punishments.create_punishment(
        creator_id=dom.id,
        for_user=sub.id,
        title="Lines",
        severity=Severity.MILD,
        description="Write 50 lines before bed",
        session_factory=session_factory,
    )
    shared_tasks.create_task(
        partnership_id=pairing.id,
        creator_id=dom.id,
        title="Cook dinner together",
        points_value=15,
        completion_target=3,
        session_factory=session_factory,
    )

    summary = _build_seed_summary(session_factory)
    logger.info("Demo data seeded", extra={"transactions": summary.transactions})
    return summary


__all__ = ["DEMO_DOMINANT", "DEMO_SUBMISSIVE", "SeedSummary", "run_demo_seed"]
