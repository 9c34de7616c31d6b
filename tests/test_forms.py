"""Tests for input forms and their conversion to ValidationError."""

from __future__ import annotations

import pytest

from devotion.errors import ValidationError
from devotion.forms import (
    AdjustmentForm,
    ContributionForm,
    HabitForm,
    RewardForm,
    SharedTaskForm,
    validate_form,
)
from devotion.models import HabitFrequency


def test_habit_form_defaults_and_stripping():
    form = validate_form(HabitForm, title="  Read  ")
    assert form.title == "Read"
    assert form.frequency == HabitFrequency.DAILY
    assert form.points_value == 1


def test_habit_form_rejects_negative_points():
    with pytest.raises(ValidationError) as excinfo:
        validate_form(HabitForm, title="Read", points_value=-1)
    assert list(excinfo.value.fields) == ["points_value"]


def test_reward_form_requires_positive_cost():
    with pytest.raises(ValidationError):
        validate_form(RewardForm, title="Treat", points_cost=0)


@pytest.mark.parametrize("points", [1, -1, 999, -999])
def test_adjustment_within_bounds(points):
    assert validate_form(AdjustmentForm, points=points, reason="ok").points == points


@pytest.mark.parametrize("points", [0, 1000, -1000])
def test_adjustment_out_of_bounds(points):
    with pytest.raises(ValidationError) as excinfo:
        validate_form(AdjustmentForm, points=points, reason="ok")
    assert "points" in excinfo.value.fields


def test_multiple_field_errors_collected():
    with pytest.raises(ValidationError) as excinfo:
        validate_form(SharedTaskForm, title="", completion_target=0)
    assert {"title", "completion_target"} <= set(excinfo.value.fields)


def test_contribution_requires_positive_amount():
    with pytest.raises(ValidationError):
        validate_form(ContributionForm, amount=0)


def test_validation_error_is_value_error():
    with pytest.raises(ValueError):
        validate_form(ContributionForm, amount=-5)
