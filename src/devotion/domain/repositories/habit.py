"""Habit repository protocol."""

from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from ...models.habit import Habit, HabitCompletion


class HabitRepository(Protocol):
    """Repository for reading habits and their completions."""

    def get_by_id(self, habit_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        ...

    def list_for_assignee(self, *, user_id: int, include_inactive: bool = False) -> list[Habit]:
        """List habits assigned to a user."""
        ...

    def list_created_by(self, *, user_id: int) -> list[Habit]:
        """List habits a user created for their partner."""
        ...

    def count_assigned(self, *, user_id: int, active_only: bool = True) -> int:
        """Count habits assigned to a user."""
        ...

    # Completion operations
    def completions_between(
        self, start_date: date, end_date: date, *, user_id: int, habit_id: Optional[int] = None
    ) -> list[HabitCompletion]:
        """Get completions within an inclusive date range."""
        ...

    def completion_days(self, habit_id: int, *, user_id: int) -> list[date]:
        """Days on which a habit was completed."""
        ...

    def count_completions(self, *, user_id: int, on: Optional[date] = None) -> int:
        """Count completions, optionally for a single day."""
        ...
