"""Closed enumerations for roles, statuses and ledger entry types."""

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Role a profile plays inside a partnership."""

    DOMINANT = "dominant"
    SUBMISSIVE = "submissive"
    SWITCH = "switch"


class PartnershipStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    DISSOLVED = "dissolved"


class TransactionType(str, Enum):
    """Kind of ledger entry; the sign of ``points`` carries the direction."""

    BONUS = "bonus"
    PENALTY = "penalty"
    REWARD = "reward"
    PUNISHMENT = "punishment"


class HabitFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    CUSTOM = "custom"


class PurchaseStatus(str, Enum):
    PENDING = "pending"
    GRANTED = "granted"
    USED = "used"
    REFUSED = "refused"


class Severity(str, Enum):
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"


class AssignmentStatus(str, Enum):
    ASSIGNED = "assigned"
    COMPLETED = "completed"
    VALIDATED = "validated"


__all__ = [
    "AssignmentStatus",
    "HabitFrequency",
    "PartnershipStatus",
    "PurchaseStatus",
    "Role",
    "Severity",
    "TransactionType",
]
