"""Tests for the points ledger: balances, summaries and manual adjustments."""

from __future__ import annotations

import random

import pytest

from devotion.cache import CacheKey, Entity, ProjectionCache
from devotion.errors import NotAuthorized, NotFound, ValidationError
from devotion.models import Notification, PointsTransaction, TransactionType
from devotion.services import ledger_service


class TestBalance:
    def test_empty_ledger_has_zero_balance(self, session_factory, couple):
        assert ledger_service.get_balance(couple.sub.id, session_factory=session_factory) == 0

    def test_balance_is_sum_of_points(self, session_factory, couple, credit):
        credit(couple.sub, 10)
        credit(couple.sub, -3, TransactionType.PENALTY)
        credit(couple.sub, 7)
        # Other profile's rows never leak in
        credit(couple.dom, 100)

        assert ledger_service.get_balance(couple.sub.id, session_factory=session_factory) == 14
        assert ledger_service.get_balance(couple.dom.id, session_factory=session_factory) == 100

    def test_record_transaction_increases_balance_by_points(self, session_factory, couple):
        before = ledger_service.get_balance(couple.sub.id, session_factory=session_factory)
        txn = ledger_service.record_transaction(
            user_id=couple.sub.id,
            actor_id=couple.dom.id,
            points=12,
            type="bonus",
            reason="Good job",
            session_factory=session_factory,
        )
        after = ledger_service.get_balance(couple.sub.id, session_factory=session_factory)

        assert txn.id is not None
        assert txn.type == TransactionType.BONUS
        assert after - before == 12

    def test_unknown_transaction_type_rejected(self, session_factory, couple, count_rows):
        with pytest.raises(ValidationError):
            ledger_service.record_transaction(
                user_id=couple.sub.id,
                actor_id=couple.sub.id,
                points=1,
                type="gift",
                session_factory=session_factory,
            )
        assert count_rows(PointsTransaction) == 0

    def test_overlong_reason_rejected_not_truncated(self, session_factory, couple, count_rows):
        txn = ledger_service.record_transaction(
            user_id=couple.sub.id,
            actor_id=couple.dom.id,
            points=1,
            type="bonus",
            reason="a" * 500,
            session_factory=session_factory,
        )
        assert len(txn.reason) == 500

        with pytest.raises(ValidationError):
            ledger_service.record_transaction(
                user_id=couple.sub.id,
                actor_id=couple.dom.id,
                points=1,
                type="bonus",
                reason="a" * 501,
                session_factory=session_factory,
            )
        assert count_rows(PointsTransaction) == 1

    def test_balance_independent_of_insertion_order(self, session_factory, profile_factory, credit):
        rng = random.Random(20240501)
        amounts = [rng.randint(-50, 80) for _ in range(40)]
        expected = sum(amounts)

        for attempt in range(3):
            user = profile_factory(display_name=f"Shuffled {attempt}")
            shuffled = amounts[:]
            rng.shuffle(shuffled)
            for points in shuffled:
                credit(user, points, TransactionType.BONUS if points >= 0 else TransactionType.PENALTY)
            assert ledger_service.get_balance(user.id, session_factory=session_factory) == expected

    def test_balance_may_go_negative_through_penalties(self, session_factory, couple, credit):
        credit(couple.sub, -20, TransactionType.PENALTY)
        assert ledger_service.get_balance(couple.sub.id, session_factory=session_factory) == -20


class TestPureHelpers:
    def test_compute_balance_and_summary(self):
        rows = [
            PointsTransaction(user_id=1, created_by=1, points=10, type=TransactionType.BONUS),
            PointsTransaction(user_id=1, created_by=1, points=-4, type=TransactionType.REWARD),
            PointsTransaction(user_id=1, created_by=2, points=-1, type=TransactionType.PENALTY),
        ]

        summary = ledger_service.summarize(rows)

        assert ledger_service.compute_balance(rows) == 5
        assert summary.earned == 10
        assert summary.spent == 5
        assert summary.net == 5

    def test_compute_balance_empty(self):
        assert ledger_service.compute_balance([]) == 0
        assert ledger_service.summarize([]).net == 0


class TestBalanceCache:
    def test_cached_balance_is_invalidated_after_write(self, session_factory, couple):
        cache = ProjectionCache()
        assert ledger_service.get_balance(couple.sub.id, session_factory=session_factory, cache=cache) == 0
        assert CacheKey(Entity.BALANCE, couple.sub.id) in cache

        ledger_service.record_transaction(
            user_id=couple.sub.id,
            actor_id=couple.sub.id,
            points=3,
            type=TransactionType.BONUS,
            session_factory=session_factory,
            cache=cache,
        )

        assert CacheKey(Entity.BALANCE, couple.sub.id) not in cache
        assert ledger_service.get_balance(couple.sub.id, session_factory=session_factory, cache=cache) == 3


class TestAdjustPoints:
    def test_positive_adjustment_is_bonus(self, session_factory, couple, count_rows):
        txn = ledger_service.adjust_points(
            actor_id=couple.dom.id,
            target_id=couple.sub.id,
            points=999,
            reason="Exceptional week",
            session_factory=session_factory,
        )

        assert txn.type == TransactionType.BONUS
        assert txn.created_by == couple.dom.id
        assert ledger_service.get_balance(couple.sub.id, session_factory=session_factory) == 999
        assert count_rows(Notification, Notification.user_id == couple.sub.id) == 1

    def test_negative_adjustment_is_penalty(self, session_factory, couple):
        txn = ledger_service.adjust_points(
            actor_id=couple.dom.id,
            target_id=couple.sub.id,
            points=-999,
            reason="Broke a rule",
            session_factory=session_factory,
        )

        assert txn.type == TransactionType.PENALTY
        assert ledger_service.get_balance(couple.sub.id, session_factory=session_factory) == -999

    @pytest.mark.parametrize("points", [0, 1000, -1000])
    def test_out_of_range_or_zero_rejected(self, session_factory, couple, count_rows, points):
        with pytest.raises(ValidationError) as excinfo:
            ledger_service.adjust_points(
                actor_id=couple.dom.id,
                target_id=couple.sub.id,
                points=points,
                reason="Nope",
                session_factory=session_factory,
            )
        assert "points" in excinfo.value.fields
        assert count_rows(PointsTransaction) == 0

    def test_reason_required(self, session_factory, couple):
        with pytest.raises(ValidationError) as excinfo:
            ledger_service.adjust_points(
                actor_id=couple.dom.id,
                target_id=couple.sub.id,
                points=5,
                reason="   ",
                session_factory=session_factory,
            )
        assert "reason" in excinfo.value.fields

    def test_stranger_cannot_adjust(self, session_factory, couple, profile_factory, count_rows):
        stranger = profile_factory(display_name="Stranger")
        with pytest.raises(NotAuthorized):
            ledger_service.adjust_points(
                actor_id=stranger.id,
                target_id=couple.sub.id,
                points=5,
                reason="Sneaky",
                session_factory=session_factory,
            )
        assert count_rows(PointsTransaction) == 0

    def test_missing_target(self, session_factory, couple):
        with pytest.raises(NotFound):
            ledger_service.adjust_points(
                actor_id=couple.dom.id,
                target_id=9999,
                points=5,
                reason="Ghost",
                session_factory=session_factory,
            )
