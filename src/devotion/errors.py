"""Exception taxonomy raised by the ledger and workflow services."""

from __future__ import annotations

from typing import Mapping, Optional


class DevotionError(Exception):
    """Base class for every error the services raise on purpose."""

    error_code = "DEVOTION_ERROR"


class ValidationError(DevotionError, ValueError):
    """Input rejected before any write happened."""

    error_code = "VALIDATION_ERROR"

    def __init__(self, detail: str, *, fields: Optional[Mapping[str, list[str]]] = None):
        super().__init__(detail)
        self.detail = detail
        self.fields: dict[str, list[str]] = dict(fields or {})


class InsufficientPoints(ValidationError):
    """Balance does not cover the requested spend."""

    error_code = "INSUFFICIENT_POINTS"

    def __init__(self, *, balance: int, required: int):
        super().__init__(f"Balance {balance} is below the required {required} points")
        self.balance = balance
        self.required = required


class HabitAlreadyCompleted(ValidationError):
    """The habit already has a completion for that user and day."""

    error_code = "HABIT_ALREADY_COMPLETED"


class NotFound(DevotionError, LookupError):
    error_code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: object):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class NotAuthorized(DevotionError):
    """Actor is not the party allowed to perform the action."""

    error_code = "NOT_AUTHORIZED"


class InvalidTransition(DevotionError):
    """Requested status change is not listed in the entity's transition table."""

    error_code = "INVALID_TRANSITION"

    def __init__(self, entity: str, current: str, target: str):
        super().__init__(f"{entity} cannot move from {current!r} to {target!r}")
        self.entity = entity
        self.current = current
        self.target = target


class ConcurrencyConflict(DevotionError):
    """Optimistic update lost the race too many times."""

    error_code = "CONCURRENCY_CONFLICT"


class StoreError(DevotionError):
    """The persistent store rejected or failed a read/write."""

    error_code = "STORE_ERROR"


__all__ = [
    "ConcurrencyConflict",
    "DevotionError",
    "HabitAlreadyCompleted",
    "InsufficientPoints",
    "InvalidTransition",
    "NotAuthorized",
    "NotFound",
    "StoreError",
    "ValidationError",
]
