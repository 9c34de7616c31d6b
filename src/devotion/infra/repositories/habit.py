"""SQLModel implementation of Habit repository."""

from __future__ import annotations

from datetime import date
from typing import Callable, Optional

from sqlalchemy import func
from sqlmodel import Session, select

from ...models.habit import Habit, HabitCompletion


class SQLModelHabitRepository:
    """SQLModel-based habit repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, habit_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        with self.session_factory() as session:
            obj = session.get(Habit, habit_id)
            if obj:
                session.expunge(obj)
            return obj

    def list_for_assignee(self, *, user_id: int, include_inactive: bool = False) -> list[Habit]:
        """List habits assigned to a user, optionally including inactive ones."""
        with self.session_factory() as session:
            statement = (
                select(Habit).where(Habit.assigned_to == user_id).order_by(Habit.title)  # type: ignore
            )

            if not include_inactive:
                statement = statement.where(Habit.is_active == True)  # noqa: E712

            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def list_created_by(self, *, user_id: int) -> list[Habit]:
        with self.session_factory() as session:
            rows = list(
                session.exec(
                    select(Habit).where(Habit.created_by == user_id).order_by(Habit.title)  # type: ignore
                ).all()
            )
            session.expunge_all()
            return rows

    def count_assigned(self, *, user_id: int, active_only: bool = True) -> int:
        with self.session_factory() as session:
            statement = select(func.count(Habit.id)).where(Habit.assigned_to == user_id)
            if active_only:
                statement = statement.where(Habit.is_active == True)  # noqa: E712
            return int(session.exec(statement).one())

    # Completion operations
    def completions_between(
        self, start_date: date, end_date: date, *, user_id: int, habit_id: Optional[int] = None
    ) -> list[HabitCompletion]:
        """Completions within an inclusive day range, oldest first."""
        with self.session_factory() as session:
            statement = (
                select(HabitCompletion)
                .where(HabitCompletion.user_id == user_id)
                .where(HabitCompletion.completed_on >= start_date)
                .where(HabitCompletion.completed_on <= end_date)
                .order_by(HabitCompletion.completed_on, HabitCompletion.id)  # type: ignore
            )
            if habit_id is not None:
                statement = statement.where(HabitCompletion.habit_id == habit_id)
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def completion_days(self, habit_id: int, *, user_id: int) -> list[date]:
        with self.session_factory() as session:
            return list(
                session.exec(
                    select(HabitCompletion.completed_on)
                    .where(HabitCompletion.habit_id == habit_id)
                    .where(HabitCompletion.user_id == user_id)
                    .order_by(HabitCompletion.completed_on)  # type: ignore
                ).all()
            )

    def count_completions(self, *, user_id: int, on: Optional[date] = None) -> int:
        with self.session_factory() as session:
            statement = select(func.count(HabitCompletion.id)).where(HabitCompletion.user_id == user_id)
            if on is not None:
                statement = statement.where(HabitCompletion.completed_on == on)
            return int(session.exec(statement).one())
