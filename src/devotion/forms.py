"""Input forms validated before any workflow writes."""

from __future__ import annotations

from datetime import date
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .config import BaseConfig
from .errors import ValidationError
from .models.enums import HabitFrequency, Role, Severity

FormT = TypeVar("FormT", bound=BaseModel)


class _Form(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)


def _require_text(value: str, label: str) -> str:
    if not value or not value.strip():
        raise ValueError(f"Please provide a {label}.")
    return value


class ProfileForm(_Form):
    display_name: str = Field(max_length=80)
    role: Role = Role.SUBMISSIVE
    theme_color: Optional[str] = Field(default=None, max_length=16)
    bio: str = Field(default="", max_length=500)

    @field_validator("display_name")
    @classmethod
    def validate_display_name(cls, value: str) -> str:
        return _require_text(value, "display name")


class HabitForm(_Form):
    """Habit a partner assigns."""

    title: str = Field(max_length=100)
    description: str = Field(default="", max_length=400)
    frequency: HabitFrequency = HabitFrequency.DAILY
    points_value: int = Field(default=1, ge=0, le=1000)

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str) -> str:
        return _require_text(value, "habit title")


class RewardForm(_Form):
    title: str = Field(max_length=100)
    description: str = Field(default="", max_length=400)
    points_cost: int = Field(default=10, ge=1)
    category: Optional[str] = Field(default=None, max_length=40)

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str) -> str:
        return _require_text(value, "reward title")


class PunishmentForm(_Form):
    title: str = Field(max_length=100)
    description: str = Field(default="", max_length=400)
    severity: Severity = Severity.MILD
    category: Optional[str] = Field(default=None, max_length=40)

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str) -> str:
        return _require_text(value, "punishment title")


class AdjustmentForm(_Form):
    """Manual points grant or removal; bounded by ``BaseConfig.ADJUSTMENT_LIMIT``."""

    points: int = Field(ge=-BaseConfig.ADJUSTMENT_LIMIT, le=BaseConfig.ADJUSTMENT_LIMIT)
    reason: str = Field(max_length=255)

    @field_validator("points")
    @classmethod
    def validate_points(cls, value: int) -> int:
        if value == 0:
            raise ValueError("Adjustment cannot be zero.")
        return value

    @field_validator("reason")
    @classmethod
    def validate_reason(cls, value: str) -> str:
        return _require_text(value, "reason")


class SharedTaskForm(_Form):
    title: str = Field(max_length=100)
    description: str = Field(default="", max_length=400)
    points_value: int = Field(default=1, ge=0)
    completion_target: int = Field(default=1, ge=1)
    due_date: Optional[date] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str) -> str:
        return _require_text(value, "task title")


class ContributionForm(_Form):
    amount: int = Field(ge=1)
    notes: Optional[str] = Field(default=None, max_length=255)


class RefusalForm(_Form):
    reason: str = Field(max_length=255)

    @field_validator("reason")
    @classmethod
    def validate_reason(cls, value: str) -> str:
        return _require_text(value, "refusal reason")


def validate_form(form_cls: Type[FormT], **data: Any) -> FormT:
    """Validate ``data`` against ``form_cls`` or raise ``ValidationError``.

    Field errors are collected into ``{field: [messages]}``.
    """

    try:
        return form_cls.model_validate(data)
    except PydanticValidationError as exc:
        structured: dict[str, list[str]] = {}
        for error in exc.errors(include_url=False):
            loc = error.get("loc", ())
            key = str(loc[0]) if loc else "__root__"
            structured.setdefault(key, []).append(error.get("msg", "Invalid value"))
        raise ValidationError(f"Invalid {form_cls.__name__}", fields=structured) from exc


__all__ = [
    "AdjustmentForm",
    "ContributionForm",
    "HabitForm",
    "ProfileForm",
    "PunishmentForm",
    "RefusalForm",
    "RewardForm",
    "SharedTaskForm",
    "validate_form",
]
