"""Points ledger: append-only transactions, balances and summaries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from sqlalchemy import func
from sqlmodel import Session, select

from ..cache import CacheKey, Entity, Mutation, ProjectionCache, invalidate
from ..errors import ValidationError
from ..forms import AdjustmentForm, validate_form
from ..infra.database import SessionFactory, unit_of_work
from ..logging_config import get_logger
from ..models.enums import TransactionType
from ..models.transaction import REASON_MAX_LENGTH, PointsTransaction
from . import notifications
from .partnerships import get_profile, require_partners

logger = get_logger("services.ledger")


@dataclass(slots=True, frozen=True)
class LedgerSummary:
    """Totals over a set of transactions."""

    earned: int
    spent: int

    @property
    def net(self) -> int:
        return self.earned - self.spent


def _coerce_type(value: TransactionType | str) -> TransactionType:
    try:
        return TransactionType(value)
    except ValueError as exc:
        raise ValidationError(f"Unknown transaction type: {value!r}") from exc


def append_transaction(
    session: Session,
    *,
    user_id: int,
    actor_id: int,
    points: int,
    type: TransactionType | str,
    reason: str = "",
    reference_id: Optional[int] = None,
) -> PointsTransaction:
    """Stage one ledger entry on the caller's session.

    No balance check happens here; callers that spend points check first.
    """

    reason = reason or ""
    if len(reason) > REASON_MAX_LENGTH:
        raise ValidationError(f"Transaction reason exceeds {REASON_MAX_LENGTH} characters")
    txn = PointsTransaction(
        user_id=user_id,
        created_by=actor_id,
        points=int(points),
        type=_coerce_type(type),
        reason=reason,
        reference_id=reference_id,
    )
    session.add(txn)
    return txn


def balance_in_session(session: Session, user_id: int) -> int:
    """Sum of all of ``user_id``'s transactions as seen by ``session``."""

    total = session.exec(
        select(func.coalesce(func.sum(PointsTransaction.points), 0)).where(
            PointsTransaction.user_id == user_id
        )
    ).one()
    return int(total)


def record_transaction(
    *,
    user_id: int,
    actor_id: int,
    points: int,
    type: TransactionType | str,
    reason: str = "",
    reference_id: Optional[int] = None,
    session_factory: SessionFactory,
    cache: ProjectionCache | None = None,
) -> PointsTransaction:
    """Append a transaction in its own store transaction."""

    with unit_of_work(session_factory) as session:
        txn = append_transaction(
            session,
            user_id=user_id,
            actor_id=actor_id,
            points=points,
            type=type,
            reason=reason,
            reference_id=reference_id,
        )
        session.flush()

    logger.info(
        "Transaction recorded",
        extra={"transaction_id": txn.id, "user_id": user_id, "points": txn.points},
    )
    invalidate(cache, Mutation.RECORD_TRANSACTION, user_id)
    return txn


def get_balance(
    user_id: int,
    *,
    session_factory: SessionFactory,
    cache: ProjectionCache | None = None,
) -> int:
    """Return Σ points for ``user_id``; 0 when the ledger is empty."""

    def _load() -> int:
        with session_factory() as session:
            return balance_in_session(session, user_id)

    if cache is None:
        return _load()
    return cache.get_or_load(CacheKey(Entity.BALANCE, user_id), _load)


def compute_balance(transactions: Iterable[PointsTransaction]) -> int:
    """Pure balance over already-loaded transactions."""

    return sum(t.points for t in transactions)


def summarize(transactions: Iterable[PointsTransaction]) -> LedgerSummary:
    """Compute earned (credits) and spent (debits) totals."""

    earned = 0
    spent = 0
    for txn in transactions:
        if txn.points >= 0:
            earned += txn.points
        else:
            spent += -txn.points
    return LedgerSummary(earned=earned, spent=spent)


def adjust_points(
    *,
    actor_id: int,
    target_id: int,
    points: int,
    reason: str,
    session_factory: SessionFactory,
    cache: ProjectionCache | None = None,
) -> PointsTransaction:
    """Grant or remove points by hand; only the target's partner may do this."""

    form = validate_form(AdjustmentForm, points=points, reason=reason)
    txn_type = TransactionType.BONUS if form.points >= 0 else TransactionType.PENALTY

    with unit_of_work(session_factory) as session:
        get_profile(session, target_id)
        require_partners(session, actor_id, target_id)
        txn = append_transaction(
            session,
            user_id=target_id,
            actor_id=actor_id,
            points=form.points,
            type=txn_type,
            reason=form.reason,
        )
        notifications.push(
            session,
            user_id=target_id,
            title="Points adjusted",
            message=f"{form.points:+d} points: {form.reason}",
            type="points",
        )
        session.flush()

    logger.info(
        "Points adjusted",
        extra={"transaction_id": txn.id, "user_id": target_id, "actor_id": actor_id, "points": form.points},
    )
    invalidate(cache, Mutation.ADJUST_POINTS, target_id)
    return txn


__all__ = [
    "LedgerSummary",
    "adjust_points",
    "append_transaction",
    "balance_in_session",
    "compute_balance",
    "get_balance",
    "record_transaction",
    "summarize",
]
