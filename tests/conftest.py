"""Pytest configuration and shared fixtures for Devotion tests.

This module provides database fixtures, test data factories, and helper utilities
for testing the ledger, workflow services and repositories without touching a
real data directory.
"""

from __future__ import annotations

import tempfile
from pathlib import Path
from types import SimpleNamespace

import pytest
from sqlalchemy import func
from sqlmodel import Session, SQLModel, create_engine, select

# Import all models to ensure they're registered with SQLModel metadata
from devotion.models import (
    Habit,
    HabitFrequency,
    Partnership,
    PartnershipStatus,
    PointsTransaction,
    Profile,
    Punishment,
    Reward,
    Role,
    Severity,
    SharedTask,
    TransactionType,
)

# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine connected to test database
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def db_session(db_engine):
    """Database session used by the factories to persist fixtures."""
    session = Session(db_engine, expire_on_commit=False)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory matching ``Callable[[], Session]`` used by services and repositories."""

    def factory():
        """Create a new Session with expire_on_commit disabled."""
        return Session(db_engine, expire_on_commit=False)

    return factory


@pytest.fixture
def count_rows(session_factory):
    """Count rows of a model in a fresh session, optionally filtered."""

    def _count(model, *criteria) -> int:
        with session_factory() as session:
            statement = select(func.count()).select_from(model)
            for criterion in criteria:
                statement = statement.where(criterion)
            return int(session.exec(statement).one())

    return _count


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def profile_factory(db_session):
    """Factory for creating test profiles."""

    def _create_profile(display_name: str = "Tester", role: Role = Role.SUBMISSIVE) -> Profile:
        profile = Profile(display_name=display_name, role=role)
        db_session.add(profile)
        db_session.commit()
        db_session.refresh(profile)
        return profile

    return _create_profile


@pytest.fixture
def partnership_factory(db_session):
    """Factory for partnerships; accepted unless told otherwise."""

    def _create_partnership(
        dominant: Profile,
        submissive: Profile,
        status: PartnershipStatus = PartnershipStatus.ACCEPTED,
    ) -> Partnership:
        partnership = Partnership(
            dominant_id=dominant.id,
            submissive_id=submissive.id,
            proposed_by=dominant.id,
            status=status,
        )
        db_session.add(partnership)
        db_session.commit()
        db_session.refresh(partnership)
        return partnership

    return _create_partnership


@pytest.fixture
def couple(profile_factory, partnership_factory):
    """An accepted dominant/submissive pair.

    Returns:
        SimpleNamespace with ``dom``, ``sub`` and ``partnership``
    """
    dom = profile_factory(display_name="Dom", role=Role.DOMINANT)
    sub = profile_factory(display_name="Sub", role=Role.SUBMISSIVE)
    partnership = partnership_factory(dom, sub)
    return SimpleNamespace(dom=dom, sub=sub, partnership=partnership)


@pytest.fixture
def credit(db_session):
    """Write a raw ledger row for a profile."""

    def _credit(
        user: Profile,
        points: int,
        txn_type: TransactionType = TransactionType.BONUS,
        reason: str = "test credit",
    ) -> PointsTransaction:
        txn = PointsTransaction(
            user_id=user.id,
            created_by=user.id,
            points=points,
            type=txn_type,
            reason=reason,
        )
        db_session.add(txn)
        db_session.commit()
        db_session.refresh(txn)
        return txn

    return _credit


@pytest.fixture
def habit_factory(db_session, couple):
    """Factory for habits the couple's dominant assigns to the submissive."""

    def _create_habit(
        title: str = "Morning check-in",
        points_value: int = 5,
        frequency: HabitFrequency = HabitFrequency.DAILY,
        is_active: bool = True,
    ) -> Habit:
        habit = Habit(
            assigned_to=couple.sub.id,
            created_by=couple.dom.id,
            title=title,
            points_value=points_value,
            frequency=frequency,
            is_active=is_active,
        )
        db_session.add(habit)
        db_session.commit()
        db_session.refresh(habit)
        return habit

    return _create_habit


@pytest.fixture
def reward_factory(db_session, couple):
    """Factory for rewards offered by the dominant to the submissive."""

    def _create_reward(title: str = "Movie night", points_cost: int = 5, is_active: bool = True) -> Reward:
        reward = Reward(
            title=title,
            points_cost=points_cost,
            created_by=couple.dom.id,
            for_user=couple.sub.id,
            is_active=is_active,
        )
        db_session.add(reward)
        db_session.commit()
        db_session.refresh(reward)
        return reward

    return _create_reward


@pytest.fixture
def punishment_factory(db_session, couple):
    def _create_punishment(title: str = "Lines", severity: Severity = Severity.MILD) -> Punishment:
        punishment = Punishment(
            title=title,
            severity=severity,
            created_by=couple.dom.id,
            for_user=couple.sub.id,
        )
        db_session.add(punishment)
        db_session.commit()
        db_session.refresh(punishment)
        return punishment

    return _create_punishment


@pytest.fixture
def task_factory(db_session, couple):
    def _create_task(
        title: str = "Cook dinner together", points_value: int = 10, completion_target: int = 3
    ) -> SharedTask:
        task = SharedTask(
            partnership_id=couple.partnership.id,
            created_by=couple.dom.id,
            title=title,
            points_value=points_value,
            completion_target=completion_target,
        )
        db_session.add(task)
        db_session.commit()
        db_session.refresh(task)
        return task

    return _create_task
