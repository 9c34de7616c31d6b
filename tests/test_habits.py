"""Tests for habit assignment, completion and streaks."""

from __future__ import annotations

from datetime import date, timedelta

import pytest
from sqlmodel import select

from devotion.errors import HabitAlreadyCompleted, NotAuthorized, NotFound, ValidationError
from devotion.models import Habit, HabitCompletion, Notification, PointsTransaction, TransactionType
from devotion.services import habits, ledger_service
from devotion.services.habits import compute_streaks

DAY = date(2024, 3, 15)


class TestCreateHabit:
    def test_partner_assigns_habit(self, session_factory, couple, count_rows):
        habit = habits.create_habit(
            creator_id=couple.dom.id,
            assignee_id=couple.sub.id,
            title="  Stretch  ",
            points_value=3,
            session_factory=session_factory,
        )

        assert habit.id is not None
        assert habit.title == "Stretch"
        assert habit.assigned_to == couple.sub.id
        assert count_rows(Notification, Notification.user_id == couple.sub.id) == 1

    def test_non_partner_cannot_assign(self, session_factory, couple, profile_factory, count_rows):
        stranger = profile_factory(display_name="Stranger")
        with pytest.raises(NotAuthorized):
            habits.create_habit(
                creator_id=stranger.id,
                assignee_id=couple.sub.id,
                title="Stretch",
                session_factory=session_factory,
            )
        assert count_rows(Habit) == 0

    def test_blank_title_rejected(self, session_factory, couple):
        with pytest.raises(ValidationError) as excinfo:
            habits.create_habit(
                creator_id=couple.dom.id,
                assignee_id=couple.sub.id,
                title="",
                session_factory=session_factory,
            )
        assert "title" in excinfo.value.fields

    def test_creator_deactivates(self, session_factory, habit_factory, couple):
        habit = habit_factory()
        with pytest.raises(NotAuthorized):
            habits.deactivate_habit(habit.id, actor_id=couple.sub.id, session_factory=session_factory)

        updated = habits.deactivate_habit(habit.id, actor_id=couple.dom.id, session_factory=session_factory)
        assert updated.is_active is False


class TestCompleteHabit:
    def test_completion_writes_one_completion_and_one_bonus(
        self, session_factory, habit_factory, couple, count_rows
    ):
        habit = habit_factory(points_value=5)

        completion = habits.complete_habit(
            habit.id, user_id=couple.sub.id, on=DAY, session_factory=session_factory
        )

        assert completion.points_earned == 5
        assert completion.completed_on == DAY
        assert count_rows(HabitCompletion) == 1
        assert count_rows(PointsTransaction, PointsTransaction.type == TransactionType.BONUS) == 1
        assert ledger_service.get_balance(couple.sub.id, session_factory=session_factory) == 5
        assert count_rows(Notification, Notification.user_id == couple.dom.id) == 1

    def test_bonus_references_habit(self, session_factory, habit_factory, couple):
        habit = habit_factory(title="Journal", points_value=2)
        habits.complete_habit(habit.id, user_id=couple.sub.id, on=DAY, session_factory=session_factory)

        with session_factory() as session:
            txn = session.exec(select(PointsTransaction)).one()
        assert txn.reference_id == habit.id
        assert txn.reason == "Habit accomplished: Journal"

    def test_second_completion_same_day_rejected_without_writes(
        self, session_factory, habit_factory, couple, count_rows
    ):
        habit = habit_factory()
        habits.complete_habit(habit.id, user_id=couple.sub.id, on=DAY, session_factory=session_factory)

        with pytest.raises(HabitAlreadyCompleted):
            habits.complete_habit(habit.id, user_id=couple.sub.id, on=DAY, session_factory=session_factory)

        assert count_rows(HabitCompletion) == 1
        assert count_rows(PointsTransaction) == 1

    def test_next_day_completion_allowed(self, session_factory, habit_factory, couple):
        habit = habit_factory(points_value=4)
        habits.complete_habit(habit.id, user_id=couple.sub.id, on=DAY, session_factory=session_factory)
        habits.complete_habit(
            habit.id, user_id=couple.sub.id, on=DAY + timedelta(days=1), session_factory=session_factory
        )

        assert ledger_service.get_balance(couple.sub.id, session_factory=session_factory) == 8

    def test_inactive_habit_rejected(self, session_factory, habit_factory, couple, count_rows):
        habit = habit_factory(is_active=False)
        with pytest.raises(ValidationError):
            habits.complete_habit(habit.id, user_id=couple.sub.id, session_factory=session_factory)
        assert count_rows(PointsTransaction) == 0

    def test_only_assignee_completes(self, session_factory, habit_factory, couple, count_rows):
        habit = habit_factory()
        with pytest.raises(NotAuthorized):
            habits.complete_habit(habit.id, user_id=couple.dom.id, session_factory=session_factory)
        assert count_rows(HabitCompletion) == 0

    def test_missing_habit(self, session_factory, couple):
        with pytest.raises(NotFound):
            habits.complete_habit(404, user_id=couple.sub.id, session_factory=session_factory)

    def test_is_completed_today(self, session_factory, habit_factory, couple):
        habit = habit_factory()
        assert not habits.is_completed_today(
            habit.id, user_id=couple.sub.id, session_factory=session_factory, today=DAY
        )
        habits.complete_habit(habit.id, user_id=couple.sub.id, on=DAY, session_factory=session_factory)
        assert habits.is_completed_today(
            habit.id, user_id=couple.sub.id, session_factory=session_factory, today=DAY
        )


class TestStreaks:
    def test_no_days(self):
        assert compute_streaks([], today=DAY) == (0, 0)

    def test_current_run_ending_today(self):
        days = [DAY - timedelta(days=i) for i in range(4)]
        assert compute_streaks(days, today=DAY) == (4, 4)

    def test_gap_breaks_current_streak(self):
        days = [DAY - timedelta(days=i) for i in range(1, 6)]
        current, longest = compute_streaks(days, today=DAY)
        assert current == 0
        assert longest == 5

    def test_longest_run_in_the_past(self):
        past = [DAY - timedelta(days=i) for i in range(10, 17)]
        recent = [DAY, DAY - timedelta(days=1)]
        assert compute_streaks(past + recent, today=DAY) == (2, 7)

    def test_duplicates_ignored(self):
        assert compute_streaks([DAY, DAY, DAY], today=DAY) == (1, 1)
