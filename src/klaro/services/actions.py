"""Commands accepted by the ledger reducer.

Each action is a small frozen dataclass; the reducer dispatches on its type.
Payload records for ``Add*`` actions may carry any id, the reducer replaces it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from ..models import (
    Category,
    Goal,
    Liability,
    Project,
    RecurringTransaction,
    Transaction,
)


class Action:
    """Marker base class for reducer commands."""


# Transactions


@dataclass(frozen=True, slots=True)
class AddTransaction(Action):
    transaction: Transaction


@dataclass(frozen=True, slots=True)
class UpdateTransaction(Action):
    transaction: Transaction


@dataclass(frozen=True, slots=True)
class DeleteTransactions(Action):
    ids: frozenset[str]


@dataclass(frozen=True, slots=True)
class MergeTransactions(Action):
    ids: tuple[str, ...]
    new_description: str


@dataclass(frozen=True, slots=True)
class CategorizeTransactions(Action):
    ids: frozenset[str]
    category_id: Optional[str]


# Categories


@dataclass(frozen=True, slots=True)
class AddCategory(Action):
    category: Category


@dataclass(frozen=True, slots=True)
class UpdateCategory(Action):
    category: Category


@dataclass(frozen=True, slots=True)
class DeleteCategory(Action):
    category_id: str


@dataclass(frozen=True, slots=True)
class DeleteUnusedCategories(Action):
    pass


@dataclass(frozen=True, slots=True)
class ReorderCategories(Action):
    category_ids: tuple[str, ...]


# Goals


@dataclass(frozen=True, slots=True)
class AddGoal(Action):
    goal: Goal


@dataclass(frozen=True, slots=True)
class UpdateGoal(Action):
    goal: Goal


@dataclass(frozen=True, slots=True)
class DeleteGoal(Action):
    goal_id: str


# Liabilities


@dataclass(frozen=True, slots=True)
class AddLiability(Action):
    liability: Liability


@dataclass(frozen=True, slots=True)
class UpdateLiability(Action):
    liability: Liability


@dataclass(frozen=True, slots=True)
class DeleteLiability(Action):
    liability_id: str


# Projects


@dataclass(frozen=True, slots=True)
class AddProject(Action):
    project: Project


@dataclass(frozen=True, slots=True)
class UpdateProject(Action):
    project: Project


@dataclass(frozen=True, slots=True)
class DeleteProject(Action):
    project_id: str


# Recurring rules


@dataclass(frozen=True, slots=True)
class AddRecurring(Action):
    recurring: RecurringTransaction


@dataclass(frozen=True, slots=True)
class UpdateRecurring(Action):
    recurring: RecurringTransaction


@dataclass(frozen=True, slots=True)
class DeleteRecurring(Action):
    recurring_id: str


# Whole-state


@dataclass(frozen=True, slots=True)
class ImportData(Action):
    """Replace any subset of top-level collections; values may be raw dicts."""

    data: Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class ResetState(Action):
    pass


# Preferences and transient UI state


@dataclass(frozen=True, slots=True)
class SetTheme(Action):
    theme: str


@dataclass(frozen=True, slots=True)
class SetViewMode(Action):
    view_mode: str


@dataclass(frozen=True, slots=True)
class UpdateFilters(Action):
    changes: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class SetIsSubscribed(Action):
    is_subscribed: bool


@dataclass(frozen=True, slots=True)
class UpdateUserProfile(Action):
    changes: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class OpenModal(Action):
    modal: str


@dataclass(frozen=True, slots=True)
class CloseModal(Action):
    pass


@dataclass(frozen=True, slots=True)
class SetSelectedTransactions(Action):
    ids: frozenset[str]


@dataclass(frozen=True, slots=True)
class ToggleTransactionSelection(Action):
    transaction_id: str


# Actions that only touch transient or query state never trigger a save.
TRANSIENT_ACTIONS: frozenset[type[Action]] = frozenset(
    {
        SetSelectedTransactions,
        ToggleTransactionSelection,
        OpenModal,
        CloseModal,
        UpdateFilters,
    }
)


def is_persistent(action: Action) -> bool:
    return type(action) not in TRANSIENT_ACTIONS
