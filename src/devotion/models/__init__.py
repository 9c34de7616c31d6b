"""SQLModel table exports."""

from .enums import (
    AssignmentStatus,
    HabitFrequency,
    PartnershipStatus,
    PurchaseStatus,
    Role,
    Severity,
    TransactionType,
)
from .habit import Habit, HabitCompletion
from .notification import Notification
from .partnership import Partnership
from .profile import Profile
from .punishment import Punishment, PunishmentAssignment
from .reward import Reward, RewardPurchase
from .shared_task import SharedTask, TaskContribution
from .transaction import PointsTransaction

__all__ = [
    "AssignmentStatus",
    "Habit",
    "HabitCompletion",
    "HabitFrequency",
    "Notification",
    "Partnership",
    "PartnershipStatus",
    "PointsTransaction",
    "Profile",
    "Punishment",
    "PunishmentAssignment",
    "PurchaseStatus",
    "Reward",
    "RewardPurchase",
    "Role",
    "Severity",
    "SharedTask",
    "TaskContribution",
    "TransactionType",
]
