"""Tests for the notification inbox."""

from __future__ import annotations

import pytest

from devotion.errors import NotAuthorized, NotFound
from devotion.services import habits, notifications


def test_workflow_events_land_in_the_inbox(session_factory, couple, habit_factory):
    habit = habit_factory(title="Stretch")
    habits.complete_habit(habit.id, user_id=couple.sub.id, session_factory=session_factory)

    inbox = notifications.list_unread(couple.dom.id, session_factory=session_factory)

    assert len(inbox) == 1
    assert inbox[0].title == "Habit completed"
    assert inbox[0].message == "Stretch"


def test_mark_read(session_factory, couple, habit_factory):
    habit = habit_factory()
    habits.complete_habit(habit.id, user_id=couple.sub.id, session_factory=session_factory)
    note = notifications.list_unread(couple.dom.id, session_factory=session_factory)[0]

    with pytest.raises(NotAuthorized):
        notifications.mark_read(note.id, user_id=couple.sub.id, session_factory=session_factory)

    read = notifications.mark_read(note.id, user_id=couple.dom.id, session_factory=session_factory)

    assert read.is_read
    assert notifications.list_unread(couple.dom.id, session_factory=session_factory) == []


def test_mark_read_missing(session_factory, couple):
    with pytest.raises(NotFound):
        notifications.mark_read(123, user_id=couple.dom.id, session_factory=session_factory)
