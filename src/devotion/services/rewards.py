"""Reward catalogue, purchases and purchase settlement.

Purchase states::

    pending -> granted -> used
    pending -> refused            (always refunded)

A purchase debits ``points_cost`` in the same store transaction that creates
the purchase row. The balance is read under a row lock on the buyer's profile
and read again once the debit is written; a negative result rolls the whole
purchase back, so two concurrent purchases can never overdraw the buyer. A
refusal writes the compensating credit in the same transaction as the status
change.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Session, select

from ..cache import Mutation, ProjectionCache, invalidate
from ..domain.transitions import PURCHASE_TRANSITIONS, ensure_transition
from ..errors import InsufficientPoints, NotAuthorized, NotFound, ValidationError
from ..forms import RefusalForm, RewardForm, validate_form
from ..infra.database import SessionFactory, unit_of_work
from ..logging_config import get_logger
from ..models.enums import PurchaseStatus, TransactionType
from ..models.profile import Profile
from ..models.reward import Reward, RewardPurchase
from . import notifications
from .ledger_service import append_transaction, balance_in_session
from .partnerships import require_partners

logger = get_logger("services.rewards")

PURCHASE_REASON = "Reward purchased: {title}"
REFUND_REASON = "Reward refused: {title} ({reason})"


def create_reward(
    *,
    creator_id: int,
    for_user: int,
    title: str,
    points_cost: int,
    description: str = "",
    category: Optional[str] = None,
    session_factory: SessionFactory,
    cache: ProjectionCache | None = None,
) -> Reward:
    """Offer a reward to the creator's partner."""

    form = validate_form(
        RewardForm, title=title, points_cost=points_cost, description=description, category=category
    )
    with unit_of_work(session_factory) as session:
        require_partners(session, creator_id, for_user)
        reward = Reward(created_by=creator_id, for_user=for_user, **form.model_dump())
        session.add(reward)
        session.flush()

    logger.info("Reward created", extra={"reward_id": reward.id, "for_user": for_user})
    invalidate(cache, Mutation.SAVE_REWARD, for_user, creator_id)
    return reward


def deactivate_reward(
    reward_id: int,
    *,
    actor_id: int,
    session_factory: SessionFactory,
    cache: ProjectionCache | None = None,
) -> Reward:
    with unit_of_work(session_factory) as session:
        reward = session.get(Reward, reward_id)
        if reward is None:
            raise NotFound("Reward", reward_id)
        if reward.created_by != actor_id:
            raise NotAuthorized("Only the reward's creator can withdraw it")
        reward.is_active = False
        session.add(reward)
    invalidate(cache, Mutation.SAVE_REWARD, reward.for_user, reward.created_by)
    return reward


def _lock_profile(session: Session, profile_id: int) -> Profile:
    """Take a row lock on the profile so balance checks serialize per buyer."""

    profile = session.exec(
        select(Profile).where(Profile.id == profile_id).with_for_update()
    ).first()
    if profile is None:
        raise NotFound("Profile", profile_id)
    return profile


def purchase(
    reward_id: int,
    *,
    buyer_id: int,
    session_factory: SessionFactory,
    cache: ProjectionCache | None = None,
) -> RewardPurchase:
    """Spend points on a reward; rejected with no writes when the balance is short."""

    with unit_of_work(session_factory) as session:
        reward = session.get(Reward, reward_id)
        if reward is None:
            raise NotFound("Reward", reward_id)
        if not reward.is_active:
            raise ValidationError(f"Reward {reward_id} is no longer available")
        if reward.for_user != buyer_id:
            raise NotAuthorized("This reward is not offered to the buyer")

        _lock_profile(session, buyer_id)
        balance = balance_in_session(session, buyer_id)
        if balance < reward.points_cost:
            logger.warning(
                "Purchase refused: insufficient points",
                extra={"reward_id": reward_id, "buyer_id": buyer_id, "balance": balance},
            )
            raise InsufficientPoints(balance=balance, required=reward.points_cost)

        record = RewardPurchase(
            reward_id=reward_id,
            user_id=buyer_id,
            points_spent=reward.points_cost,
            status=PurchaseStatus.PENDING,
        )
        session.add(record)
        session.flush()
        append_transaction(
            session,
            user_id=buyer_id,
            actor_id=buyer_id,
            points=-reward.points_cost,
            type=TransactionType.REWARD,
            reason=PURCHASE_REASON.format(title=reward.title),
            reference_id=record.id,
        )
        session.flush()
        # The debit holds the write lock now; a concurrent spend that committed
        # after the first read shows up here and undoes this purchase.
        remaining = balance_in_session(session, buyer_id)
        if remaining < 0:
            logger.warning(
                "Purchase refused: balance spent concurrently",
                extra={"reward_id": reward_id, "buyer_id": buyer_id, "balance": remaining + reward.points_cost},
            )
            raise InsufficientPoints(
                balance=remaining + reward.points_cost, required=reward.points_cost
            )
        notifications.push(
            session,
            user_id=reward.created_by,
            title="Reward purchased",
            message=f"{reward.title} is waiting for your approval.",
            type="reward",
        )
        session.flush()

    logger.info(
        "Reward purchased",
        extra={"purchase_id": record.id, "buyer_id": buyer_id, "points_spent": record.points_spent},
    )
    invalidate(cache, Mutation.PURCHASE_REWARD, buyer_id, reward.created_by)
    return record


def _load_purchase(session: Session, purchase_id: int) -> tuple[RewardPurchase, Reward]:
    record = session.get(RewardPurchase, purchase_id)
    if record is None:
        raise NotFound("RewardPurchase", purchase_id)
    reward = session.get(Reward, record.reward_id)
    if reward is None:
        raise NotFound("Reward", record.reward_id)
    return record, reward


def _require_counterpart(session: Session, record: RewardPurchase, actor_id: int) -> None:
    """The buyer never settles their own purchase; the actor must be their partner."""

    if actor_id == record.user_id:
        raise NotAuthorized("The buyer cannot settle their own purchase")
    require_partners(session, actor_id, record.user_id)


def validate(
    purchase_id: int,
    *,
    validator_id: int,
    session_factory: SessionFactory,
    cache: ProjectionCache | None = None,
) -> RewardPurchase:
    """Grant a pending purchase."""

    with unit_of_work(session_factory) as session:
        record, reward = _load_purchase(session, purchase_id)
        ensure_transition("RewardPurchase", PURCHASE_TRANSITIONS, record.status, PurchaseStatus.GRANTED)
        _require_counterpart(session, record, validator_id)

        record.status = PurchaseStatus.GRANTED
        record.validated_by = validator_id
        record.validated_at = datetime.now(timezone.utc)
        session.add(record)
        notifications.push(
            session,
            user_id=record.user_id,
            title="Reward granted",
            message=reward.title,
            type="reward",
        )

    logger.info("Purchase granted", extra={"purchase_id": purchase_id, "validator_id": validator_id})
    invalidate(cache, Mutation.SETTLE_PURCHASE, record.user_id, validator_id)
    return record


def mark_used(
    purchase_id: int,
    *,
    actor_id: int,
    session_factory: SessionFactory,
    cache: ProjectionCache | None = None,
) -> RewardPurchase:
    """Acknowledge a granted reward as consumed; terminal."""

    with unit_of_work(session_factory) as session:
        record, reward = _load_purchase(session, purchase_id)
        ensure_transition("RewardPurchase", PURCHASE_TRANSITIONS, record.status, PurchaseStatus.USED)
        if actor_id not in (record.user_id, reward.created_by):
            raise NotAuthorized("Only the buyer or the reward's creator can mark it used")

        record.status = PurchaseStatus.USED
        record.used_at = datetime.now(timezone.utc)
        session.add(record)

    logger.info("Purchase used", extra={"purchase_id": purchase_id, "actor_id": actor_id})
    invalidate(cache, Mutation.SETTLE_PURCHASE, record.user_id, reward.created_by)
    return record


def refuse(
    purchase_id: int,
    *,
    validator_id: int,
    reason: str,
    session_factory: SessionFactory,
    cache: ProjectionCache | None = None,
) -> RewardPurchase:
    """Refuse a pending purchase and refund ``points_spent`` to the buyer."""

    form = validate_form(RefusalForm, reason=reason)
    with unit_of_work(session_factory) as session:
        record, reward = _load_purchase(session, purchase_id)
        ensure_transition("RewardPurchase", PURCHASE_TRANSITIONS, record.status, PurchaseStatus.REFUSED)
        _require_counterpart(session, record, validator_id)

        record.status = PurchaseStatus.REFUSED
        record.refusal_reason = form.reason
        record.validated_by = validator_id
        record.validated_at = datetime.now(timezone.utc)
        session.add(record)
        append_transaction(
            session,
            user_id=record.user_id,
            actor_id=validator_id,
            points=record.points_spent,
            type=TransactionType.REWARD,
            reason=REFUND_REASON.format(title=reward.title, reason=form.reason),
            reference_id=record.id,
        )
        notifications.push(
            session,
            user_id=record.user_id,
            title="Reward refused",
            message=f"{reward.title}: {form.reason}",
            type="reward",
        )

    logger.warning(
        "Purchase refused and refunded",
        extra={"purchase_id": purchase_id, "validator_id": validator_id, "refund": record.points_spent},
    )
    invalidate(cache, Mutation.REFUSE_PURCHASE, record.user_id, validator_id)
    return record


__all__ = [
    "PURCHASE_REASON",
    "REFUND_REASON",
    "create_reward",
    "deactivate_reward",
    "mark_used",
    "purchase",
    "refuse",
    "validate",
]
