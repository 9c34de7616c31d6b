"""Exhaustive status transition tables for the workflow entities.

Anything not listed is rejected with ``InvalidTransition``.
"""

from __future__ import annotations

from enum import Enum
from typing import Mapping, TypeVar

from ..errors import InvalidTransition
from ..models.enums import AssignmentStatus, PartnershipStatus, PurchaseStatus

StatusT = TypeVar("StatusT", bound=Enum)

PURCHASE_TRANSITIONS: Mapping[PurchaseStatus, frozenset[PurchaseStatus]] = {
    PurchaseStatus.PENDING: frozenset({PurchaseStatus.GRANTED, PurchaseStatus.REFUSED}),
    PurchaseStatus.GRANTED: frozenset({PurchaseStatus.USED}),
    PurchaseStatus.USED: frozenset(),
    PurchaseStatus.REFUSED: frozenset(),
}

ASSIGNMENT_TRANSITIONS: Mapping[AssignmentStatus, frozenset[AssignmentStatus]] = {
    AssignmentStatus.ASSIGNED: frozenset({AssignmentStatus.COMPLETED}),
    AssignmentStatus.COMPLETED: frozenset({AssignmentStatus.VALIDATED}),
    AssignmentStatus.VALIDATED: frozenset(),
}

PARTNERSHIP_TRANSITIONS: Mapping[PartnershipStatus, frozenset[PartnershipStatus]] = {
    PartnershipStatus.PENDING: frozenset({PartnershipStatus.ACCEPTED, PartnershipStatus.REJECTED}),
    PartnershipStatus.ACCEPTED: frozenset({PartnershipStatus.DISSOLVED}),
    PartnershipStatus.REJECTED: frozenset(),
    PartnershipStatus.DISSOLVED: frozenset(),
}


def can_transition(
    table: Mapping[StatusT, frozenset[StatusT]], current: StatusT, target: StatusT
) -> bool:
    return target in table.get(current, frozenset())


def ensure_transition(
    entity: str,
    table: Mapping[StatusT, frozenset[StatusT]],
    current: StatusT,
    target: StatusT,
) -> None:
    """Raise ``InvalidTransition`` unless ``current -> target`` is listed."""

    if not can_transition(table, current, target):
        raise InvalidTransition(entity, current.value, target.value)


def is_terminal(table: Mapping[StatusT, frozenset[StatusT]], status: StatusT) -> bool:
    return not table.get(status)


__all__ = [
    "ASSIGNMENT_TRANSITIONS",
    "PARTNERSHIP_TRANSITIONS",
    "PURCHASE_TRANSITIONS",
    "can_transition",
    "ensure_transition",
    "is_terminal",
]
