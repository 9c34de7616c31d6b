"""Concrete repository implementations using SQLModel."""

from .habit import SQLModelHabitRepository
from .partnership import SQLModelPartnershipRepository
from .punishment import SQLModelPunishmentRepository
from .reward import SQLModelRewardRepository
from .shared_task import SQLModelSharedTaskRepository
from .transaction import SQLModelTransactionRepository

__all__ = [
    "SQLModelHabitRepository",
    "SQLModelPartnershipRepository",
    "SQLModelPunishmentRepository",
    "SQLModelRewardRepository",
    "SQLModelSharedTaskRepository",
    "SQLModelTransactionRepository",
]
