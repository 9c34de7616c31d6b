"""Service module exports."""

from . import (
    demo_seed,
    habits,
    ledger_service,
    notifications,
    partnerships,
    punishments,
    rewards,
    shared_tasks,
    stats,
)

__all__ = [
    "demo_seed",
    "habits",
    "ledger_service",
    "notifications",
    "partnerships",
    "punishments",
    "rewards",
    "shared_tasks",
    "stats",
]
