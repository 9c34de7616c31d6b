"""Transition tables are exhaustive: anything not listed is rejected."""

from __future__ import annotations

import itertools

import pytest

from devotion.domain.transitions import (
    ASSIGNMENT_TRANSITIONS,
    PARTNERSHIP_TRANSITIONS,
    PURCHASE_TRANSITIONS,
    can_transition,
    ensure_transition,
    is_terminal,
)
from devotion.errors import InvalidTransition
from devotion.models import AssignmentStatus, PartnershipStatus, PurchaseStatus

ALLOWED = {
    "purchase": {
        (PurchaseStatus.PENDING, PurchaseStatus.GRANTED),
        (PurchaseStatus.PENDING, PurchaseStatus.REFUSED),
        (PurchaseStatus.GRANTED, PurchaseStatus.USED),
    },
    "assignment": {
        (AssignmentStatus.ASSIGNED, AssignmentStatus.COMPLETED),
        (AssignmentStatus.COMPLETED, AssignmentStatus.VALIDATED),
    },
    "partnership": {
        (PartnershipStatus.PENDING, PartnershipStatus.ACCEPTED),
        (PartnershipStatus.PENDING, PartnershipStatus.REJECTED),
        (PartnershipStatus.ACCEPTED, PartnershipStatus.DISSOLVED),
    },
}

TABLES = {
    "purchase": (PURCHASE_TRANSITIONS, PurchaseStatus),
    "assignment": (ASSIGNMENT_TRANSITIONS, AssignmentStatus),
    "partnership": (PARTNERSHIP_TRANSITIONS, PartnershipStatus),
}


@pytest.mark.parametrize("name", sorted(TABLES))
def test_every_pair_matches_allowed_set(name):
    table, enum_cls = TABLES[name]
    for current, target in itertools.product(enum_cls, repeat=2):
        assert can_transition(table, current, target) == ((current, target) in ALLOWED[name])


@pytest.mark.parametrize("name", sorted(TABLES))
def test_every_status_has_a_row(name):
    table, enum_cls = TABLES[name]
    assert set(table) == set(enum_cls)


def test_terminal_states():
    assert is_terminal(PURCHASE_TRANSITIONS, PurchaseStatus.USED)
    assert is_terminal(PURCHASE_TRANSITIONS, PurchaseStatus.REFUSED)
    assert not is_terminal(PURCHASE_TRANSITIONS, PurchaseStatus.GRANTED)
    assert is_terminal(ASSIGNMENT_TRANSITIONS, AssignmentStatus.VALIDATED)
    assert is_terminal(PARTNERSHIP_TRANSITIONS, PartnershipStatus.REJECTED)
    assert is_terminal(PARTNERSHIP_TRANSITIONS, PartnershipStatus.DISSOLVED)


def test_ensure_transition_error_carries_states():
    with pytest.raises(InvalidTransition) as excinfo:
        ensure_transition(
            "PunishmentAssignment",
            ASSIGNMENT_TRANSITIONS,
            AssignmentStatus.ASSIGNED,
            AssignmentStatus.VALIDATED,
        )
    assert excinfo.value.current == "assigned"
    assert excinfo.value.target == "validated"
    assert excinfo.value.error_code == "INVALID_TRANSITION"
