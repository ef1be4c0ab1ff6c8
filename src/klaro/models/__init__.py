"""Domain records and the snapshot table."""

from .category import Category, CategoryType
from .goal import Goal, GoalType
from .liability import Liability, LiabilityType
from .project import Project, slugify_tag
from .recurring import Frequency, RecurringTransaction
from .snapshot import StateSnapshot
from .state import (
    ALL,
    AmountRange,
    AppState,
    CategoryStatus,
    DateRange,
    DateRangePreset,
    Filters,
    UserProfile,
    ViewMode,
)
from .transaction import Transaction, TransactionType

__all__ = [
    "ALL",
    "AmountRange",
    "AppState",
    "Category",
    "CategoryStatus",
    "CategoryType",
    "DateRange",
    "DateRangePreset",
    "Filters",
    "Frequency",
    "Goal",
    "GoalType",
    "Liability",
    "LiabilityType",
    "Project",
    "RecurringTransaction",
    "StateSnapshot",
    "Transaction",
    "TransactionType",
    "UserProfile",
    "ViewMode",
    "slugify_tag",
]
