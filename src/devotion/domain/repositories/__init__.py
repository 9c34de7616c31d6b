"""Repository protocol definitions for domain layer."""

from .habit import HabitRepository
from .partnership import PartnershipRepository
from .punishment import PunishmentRepository
from .reward import RewardRepository
from .shared_task import SharedTaskRepository
from .transaction import TransactionRepository

__all__ = [
    "HabitRepository",
    "PartnershipRepository",
    "PunishmentRepository",
    "RewardRepository",
    "SharedTaskRepository",
    "TransactionRepository",
]
