"""Typed projection cache with declared invalidation edges.

Read models (balances, listings, stats) are cached under ``CacheKey(entity, id)``
where ``id`` is the profile the projection belongs to. Each mutation lists the
entities it invalidates in ``INVALIDATION_EDGES``; services call
``invalidate(mutation, ids)`` once their transaction has committed.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, TypeVar

from .logging_config import get_logger

logger = get_logger("cache")

T = TypeVar("T")


class Entity(str, Enum):
    BALANCE = "balance"
    TRANSACTIONS = "transactions"
    HABITS = "habits"
    COMPLETIONS = "completions"
    REWARDS = "rewards"
    PURCHASES = "purchases"
    PUNISHMENTS = "punishments"
    ASSIGNMENTS = "assignments"
    SHARED_TASKS = "shared_tasks"
    PARTNERSHIPS = "partnerships"
    NOTIFICATIONS = "notifications"
    STATS = "stats"


class Mutation(str, Enum):
    RECORD_TRANSACTION = "record_transaction"
    ADJUST_POINTS = "adjust_points"
    SAVE_HABIT = "save_habit"
    COMPLETE_HABIT = "complete_habit"
    SAVE_REWARD = "save_reward"
    PURCHASE_REWARD = "purchase_reward"
    SETTLE_PURCHASE = "settle_purchase"
    REFUSE_PURCHASE = "refuse_purchase"
    SAVE_PUNISHMENT = "save_punishment"
    ASSIGN_PUNISHMENT = "assign_punishment"
    SETTLE_ASSIGNMENT = "settle_assignment"
    SAVE_SHARED_TASK = "save_shared_task"
    CONTRIBUTE = "contribute"
    CHANGE_PARTNERSHIP = "change_partnership"
    READ_NOTIFICATION = "read_notification"


_LEDGER = (Entity.BALANCE, Entity.TRANSACTIONS, Entity.STATS)

INVALIDATION_EDGES: Mapping[Mutation, frozenset[Entity]] = {
    Mutation.RECORD_TRANSACTION: frozenset(_LEDGER),
    Mutation.ADJUST_POINTS: frozenset(_LEDGER + (Entity.NOTIFICATIONS,)),
    Mutation.SAVE_HABIT: frozenset({Entity.HABITS, Entity.STATS}),
    Mutation.COMPLETE_HABIT: frozenset(_LEDGER + (Entity.COMPLETIONS, Entity.NOTIFICATIONS)),
    Mutation.SAVE_REWARD: frozenset({Entity.REWARDS}),
    Mutation.PURCHASE_REWARD: frozenset(_LEDGER + (Entity.PURCHASES, Entity.NOTIFICATIONS)),
    Mutation.SETTLE_PURCHASE: frozenset({Entity.PURCHASES, Entity.NOTIFICATIONS}),
    Mutation.REFUSE_PURCHASE: frozenset(_LEDGER + (Entity.PURCHASES, Entity.NOTIFICATIONS)),
    Mutation.SAVE_PUNISHMENT: frozenset({Entity.PUNISHMENTS}),
    Mutation.ASSIGN_PUNISHMENT: frozenset({Entity.ASSIGNMENTS, Entity.NOTIFICATIONS}),
    Mutation.SETTLE_ASSIGNMENT: frozenset({Entity.ASSIGNMENTS, Entity.NOTIFICATIONS}),
    Mutation.SAVE_SHARED_TASK: frozenset({Entity.SHARED_TASKS}),
    Mutation.CONTRIBUTE: frozenset(_LEDGER + (Entity.SHARED_TASKS, Entity.NOTIFICATIONS)),
    Mutation.CHANGE_PARTNERSHIP: frozenset({Entity.PARTNERSHIPS, Entity.NOTIFICATIONS}),
    Mutation.READ_NOTIFICATION: frozenset({Entity.NOTIFICATIONS}),
}


@dataclass(frozen=True)
class CacheKey:
    entity: Entity
    id: int


class ProjectionCache:
    """Disposable in-process projection of store reads."""

    def __init__(self) -> None:
        self._entries: dict[CacheKey, Any] = {}
        # Bumped whenever a key is invalidated; loads that straddle a bump are not stored.
        self._generations: dict[CacheKey, int] = {}
        self._epoch = 0
        self._lock = threading.Lock()
        self.stats = {"hits": 0, "misses": 0, "invalidations": 0}

    def get(self, key: CacheKey) -> Any:
        with self._lock:
            if key in self._entries:
                self.stats["hits"] += 1
                return self._entries[key]
            self.stats["misses"] += 1
            return None

    def set(self, key: CacheKey, value: Any) -> None:
        with self._lock:
            self._entries[key] = value

    def get_or_load(self, key: CacheKey, loader: Callable[[], T]) -> T:
        """Return the cached projection, loading and storing it on a miss."""

        with self._lock:
            if key in self._entries:
                self.stats["hits"] += 1
                return self._entries[key]
            self.stats["misses"] += 1
            started = (self._epoch, self._generations.get(key, 0))
        value = loader()
        with self._lock:
            if started == (self._epoch, self._generations.get(key, 0)):
                self._entries[key] = value
        return value

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._entries

    def invalidate(self, mutation: Mutation, ids: Iterable[int]) -> int:
        """Drop every projection the mutation touches for the given profiles."""

        entities = INVALIDATION_EDGES[mutation]
        scope = set(ids)
        with self._lock:
            for entity in entities:
                for profile_id in scope:
                    key = CacheKey(entity, profile_id)
                    self._generations[key] = self._generations.get(key, 0) + 1
            stale = [k for k in self._entries if k.entity in entities and k.id in scope]
            for key in stale:
                del self._entries[key]
            self.stats["invalidations"] += len(stale)
        if stale:
            logger.debug(
                "Invalidated projections",
                extra={"mutation": mutation.value, "count": len(stale)},
            )
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._generations.clear()
            self._epoch += 1


def invalidate(cache: ProjectionCache | None, mutation: Mutation, *ids: int) -> None:
    """No-op helper so services can pass an optional cache."""

    if cache is not None:
        cache.invalidate(mutation, ids)


__all__ = [
    "CacheKey",
    "Entity",
    "INVALIDATION_EDGES",
    "Mutation",
    "ProjectionCache",
    "invalidate",
]
