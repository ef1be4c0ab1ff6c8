"""Ledger reducer: the single writer of AppState.

``apply(state, action)`` is pure and total. Degenerate actions (unknown ids,
merging fewer than two transactions, invalid import payloads) return the input
state unchanged instead of raising.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterable, Mapping, Optional, TypeVar
from uuid import uuid4

from pydantic import ValidationError
from sqlmodel import SQLModel

from ..logging_config import get_logger
from ..models import (
    AppState,
    Category,
    Filters,
    Goal,
    Liability,
    Project,
    RecurringTransaction,
    Transaction,
    TransactionType,
    UserProfile,
    ViewMode,
    slugify_tag,
)
from . import actions as a
from .seed import seed_state

logger = get_logger("ledger")

IdFactory = Callable[[], str]
RecordT = TypeVar("RecordT", bound=SQLModel)


def new_id() -> str:
    return uuid4().hex


@dataclass(frozen=True, slots=True)
class _Context:
    new_id: IdFactory
    today: Optional[date]


# =============================================================================
# Derived fields
# =============================================================================


def recalculate_goal_amounts(
    transactions: Iterable[Transaction], goals: Iterable[Goal]
) -> tuple[Goal, ...]:
    """Set each goal's current amount to the sum of its SAVING transactions."""

    totals: dict[str, float] = defaultdict(float)
    for txn in transactions:
        if txn.type == TransactionType.SAVING and txn.goal_id:
            totals[txn.goal_id] += txn.amount
    return tuple(g.model_copy(update={"current_amount": totals.get(g.id, 0.0)}) for g in goals)


def recalculate_liability_amounts(
    transactions: Iterable[Transaction], liabilities: Iterable[Liability]
) -> tuple[Liability, ...]:
    """Set paid amounts: expenses pay debts down, incomes pay loans back."""

    liabilities = tuple(liabilities)
    by_id = {liability.id: liability for liability in liabilities}
    totals: dict[str, float] = defaultdict(float)
    for txn in transactions:
        liability = by_id.get(txn.liability_id) if txn.liability_id else None
        if liability is not None and liability.counts_payment(txn.type):
            totals[liability.id] += txn.amount
    return tuple(
        item.model_copy(update={"paid_amount": totals.get(item.id, 0.0)}) for item in liabilities
    )


def recompute_derived(state: AppState) -> AppState:
    """Rebuild goal and liability totals from the full transaction collection."""

    return state.model_copy(
        update={
            "goals": recalculate_goal_amounts(state.transactions, state.goals),
            "liabilities": recalculate_liability_amounts(state.transactions, state.liabilities),
        }
    )


# =============================================================================
# Helpers
# =============================================================================


def _contains(items: Iterable[SQLModel], record_id: str) -> bool:
    return any(item.id == record_id for item in items)


def _replace_by_id(items: tuple[RecordT, ...], record: RecordT) -> tuple[RecordT, ...]:
    return tuple(record if item.id == record.id else item for item in items)


def _clear_reference(items: tuple[RecordT, ...], field: str, record_id: str) -> tuple[RecordT, ...]:
    return tuple(
        item.model_copy(update={field: None}) if getattr(item, field) == record_id else item
        for item in items
    )


def _with_transactions(state: AppState, transactions: tuple[Transaction, ...], **extra) -> AppState:
    return recompute_derived(state.model_copy(update={"transactions": transactions, **extra}))


# =============================================================================
# Transactions
# =============================================================================


def _add_transaction(state: AppState, action: a.AddTransaction, ctx: _Context) -> AppState:
    txn = action.transaction.model_copy(update={"id": ctx.new_id()})
    logger.debug("Adding transaction", extra={"transaction_id": txn.id, "type": txn.type.value})
    return _with_transactions(state, state.transactions + (txn,), active_modal=None)


def _update_transaction(state: AppState, action: a.UpdateTransaction, ctx: _Context) -> AppState:
    if not _contains(state.transactions, action.transaction.id):
        return state
    return _with_transactions(
        state, _replace_by_id(state.transactions, action.transaction), active_modal=None
    )


def _delete_transactions(state: AppState, action: a.DeleteTransactions, ctx: _Context) -> AppState:
    ids = set(action.ids)
    remaining = tuple(t for t in state.transactions if t.id not in ids)
    if len(remaining) == len(state.transactions):
        return state
    return _with_transactions(state, remaining, selected_transactions=frozenset())


def _merge_transactions(state: AppState, action: a.MergeTransactions, ctx: _Context) -> AppState:
    ids = set(action.ids)
    to_merge = [t for t in state.transactions if t.id in ids]
    if len(to_merge) < 2:
        logger.debug("Merge ignored", extra={"matched": len(to_merge)})
        return state

    # Earliest-dated transaction decides type and references; min() keeps collection order on ties.
    primary = min(to_merge, key=lambda t: t.date)
    merged = Transaction(
        id=ctx.new_id(),
        type=primary.type,
        amount=sum(t.amount for t in to_merge),
        description=action.new_description,
        date=max(t.date for t in to_merge),
        category_id=primary.category_id,
        goal_id=primary.goal_id,
        liability_id=primary.liability_id,
        tags=list(dict.fromkeys(tag for t in to_merge for tag in t.tags)),
    )
    remaining = tuple(t for t in state.transactions if t.id not in ids)
    logger.debug("Merged transactions", extra={"count": len(to_merge), "transaction_id": merged.id})
    return _with_transactions(
        state,
        remaining + (merged,),
        active_modal=None,
        selected_transactions=frozenset(),
    )


def _categorize_transactions(
    state: AppState, action: a.CategorizeTransactions, ctx: _Context
) -> AppState:
    ids = set(action.ids)
    transactions = tuple(
        t.model_copy(update={"category_id": action.category_id}) if t.id in ids else t
        for t in state.transactions
    )
    # Categories do not feed goal or liability totals.
    return state.model_copy(
        update={"transactions": transactions, "selected_transactions": frozenset()}
    )


# =============================================================================
# Categories
# =============================================================================


def _add_category(state: AppState, action: a.AddCategory, ctx: _Context) -> AppState:
    category = action.category.model_copy(update={"id": ctx.new_id()})
    return state.model_copy(update={"categories": state.categories + (category,)})


def _update_category(state: AppState, action: a.UpdateCategory, ctx: _Context) -> AppState:
    if not _contains(state.categories, action.category.id):
        return state
    return state.model_copy(
        update={"categories": _replace_by_id(state.categories, action.category)}
    )


def _delete_category(state: AppState, action: a.DeleteCategory, ctx: _Context) -> AppState:
    cid = action.category_id
    if not _contains(state.categories, cid):
        return state
    return state.model_copy(
        update={
            "categories": tuple(c for c in state.categories if c.id != cid),
            "transactions": _clear_reference(state.transactions, "category_id", cid),
            "recurring_transactions": _clear_reference(
                state.recurring_transactions, "category_id", cid
            ),
        }
    )


def _delete_unused_categories(
    state: AppState, action: a.DeleteUnusedCategories, ctx: _Context
) -> AppState:
    used = {t.category_id for t in state.transactions}
    used.update(r.category_id for r in state.recurring_transactions)
    kept = tuple(c for c in state.categories if c.id in used)
    if len(kept) == len(state.categories):
        return state
    return state.model_copy(update={"categories": kept})


def _reorder_categories(state: AppState, action: a.ReorderCategories, ctx: _Context) -> AppState:
    by_id = {c.id: c for c in state.categories}
    ordered = [by_id[cid] for cid in dict.fromkeys(action.category_ids) if cid in by_id]
    placed = {c.id for c in ordered}
    ordered.extend(c for c in state.categories if c.id not in placed)
    return state.model_copy(update={"categories": tuple(ordered)})


# =============================================================================
# Goals
# =============================================================================


def _add_goal(state: AppState, action: a.AddGoal, ctx: _Context) -> AppState:
    goal = action.goal.model_copy(update={"id": ctx.new_id(), "current_amount": 0.0})
    return recompute_derived(state.model_copy(update={"goals": state.goals + (goal,)}))


def _update_goal(state: AppState, action: a.UpdateGoal, ctx: _Context) -> AppState:
    existing = next((g for g in state.goals if g.id == action.goal.id), None)
    if existing is None:
        return state
    # current_amount is derived; whatever the caller sent is discarded.
    changes = action.goal.model_dump(exclude={"id", "current_amount"})
    updated = existing.model_copy(update=changes)
    return recompute_derived(
        state.model_copy(update={"goals": _replace_by_id(state.goals, updated)})
    )


def _delete_goal(state: AppState, action: a.DeleteGoal, ctx: _Context) -> AppState:
    gid = action.goal_id
    if not _contains(state.goals, gid):
        return state
    return state.model_copy(
        update={
            "goals": tuple(g for g in state.goals if g.id != gid),
            "transactions": _clear_reference(state.transactions, "goal_id", gid),
            "recurring_transactions": _clear_reference(state.recurring_transactions, "goal_id", gid),
        }
    )


# =============================================================================
# Liabilities
# =============================================================================


def _add_liability(state: AppState, action: a.AddLiability, ctx: _Context) -> AppState:
    liability = action.liability.model_copy(update={"id": ctx.new_id(), "paid_amount": 0.0})
    return recompute_derived(
        state.model_copy(update={"liabilities": state.liabilities + (liability,)})
    )


def _update_liability(state: AppState, action: a.UpdateLiability, ctx: _Context) -> AppState:
    existing = next((item for item in state.liabilities if item.id == action.liability.id), None)
    if existing is None:
        return state
    changes = action.liability.model_dump(exclude={"id", "paid_amount"})
    updated = existing.model_copy(update=changes)
    # A type change flips which transactions count, so recompute from scratch.
    return recompute_derived(
        state.model_copy(update={"liabilities": _replace_by_id(state.liabilities, updated)})
    )


def _delete_liability(state: AppState, action: a.DeleteLiability, ctx: _Context) -> AppState:
    lid = action.liability_id
    if not _contains(state.liabilities, lid):
        return state
    return state.model_copy(
        update={
            "liabilities": tuple(item for item in state.liabilities if item.id != lid),
            "transactions": _clear_reference(state.transactions, "liability_id", lid),
        }
    )


# =============================================================================
# Projects
# =============================================================================


def _add_project(state: AppState, action: a.AddProject, ctx: _Context) -> AppState:
    project = action.project.model_copy(
        update={"id": ctx.new_id(), "tag": slugify_tag(action.project.tag or action.project.name)}
    )
    return state.model_copy(update={"projects": state.projects + (project,)})


def _update_project(state: AppState, action: a.UpdateProject, ctx: _Context) -> AppState:
    if not _contains(state.projects, action.project.id):
        return state
    return state.model_copy(update={"projects": _replace_by_id(state.projects, action.project)})


def _delete_project(state: AppState, action: a.DeleteProject, ctx: _Context) -> AppState:
    if not _contains(state.projects, action.project_id):
        return state
    # Transactions keep the tag; it simply stops being a project.
    return state.model_copy(
        update={"projects": tuple(p for p in state.projects if p.id != action.project_id)}
    )


# =============================================================================
# Recurring rules
# =============================================================================


def _add_recurring(state: AppState, action: a.AddRecurring, ctx: _Context) -> AppState:
    rule = action.recurring.model_copy(
        update={"id": ctx.new_id(), "next_due_date": action.recurring.start_date}
    )
    return state.model_copy(
        update={"recurring_transactions": state.recurring_transactions + (rule,)}
    )


def _update_recurring(state: AppState, action: a.UpdateRecurring, ctx: _Context) -> AppState:
    existing = next(
        (r for r in state.recurring_transactions if r.id == action.recurring.id), None
    )
    if existing is None:
        return state
    next_due = existing.next_due_date or action.recurring.start_date
    updated = action.recurring.model_copy(update={"next_due_date": next_due})
    return state.model_copy(
        update={"recurring_transactions": _replace_by_id(state.recurring_transactions, updated)}
    )


def _delete_recurring(state: AppState, action: a.DeleteRecurring, ctx: _Context) -> AppState:
    if not _contains(state.recurring_transactions, action.recurring_id):
        return state
    return state.model_copy(
        update={
            "recurring_transactions": tuple(
                r for r in state.recurring_transactions if r.id != action.recurring_id
            )
        }
    )


# =============================================================================
# Whole-state actions
# =============================================================================

_IMPORTABLE_COLLECTIONS: dict[str, type[SQLModel]] = {
    "transactions": Transaction,
    "categories": Category,
    "goals": Goal,
    "projects": Project,
    "recurring_transactions": RecurringTransaction,
    "liabilities": Liability,
}


def _import_data(state: AppState, action: a.ImportData, ctx: _Context) -> AppState:
    data = action.data
    if not isinstance(data, Mapping):
        return state
    updates: dict[str, object] = {}
    try:
        for key, model in _IMPORTABLE_COLLECTIONS.items():
            if data.get(key) is not None:
                updates[key] = tuple(model.model_validate(item) for item in data[key])
        if data.get("user_profile") is not None:
            updates["user_profile"] = UserProfile.model_validate(data["user_profile"])
        if data.get("filters") is not None:
            updates["filters"] = Filters.model_validate(data["filters"])
        if data.get("view_mode") is not None:
            updates["view_mode"] = ViewMode(data["view_mode"])
        if data.get("theme") is not None:
            updates["theme"] = str(data["theme"])
        if data.get("is_subscribed") is not None:
            updates["is_subscribed"] = bool(data["is_subscribed"])
    except (ValidationError, ValueError, TypeError) as exc:
        logger.warning("Import rejected: %s", exc)
        return state

    ignored = sorted(set(data) - set(_IMPORTABLE_COLLECTIONS) - {
        "user_profile", "filters", "view_mode", "theme", "is_subscribed"
    })
    if ignored:
        logger.debug("Import ignored keys", extra={"keys": ignored})

    # Imported goal and liability totals are never trusted.
    updates["active_modal"] = None
    return recompute_derived(state.model_copy(update=updates))


def _reset_state(state: AppState, action: a.ResetState, ctx: _Context) -> AppState:
    seeded = recompute_derived(seed_state(ctx.today))
    return seeded.model_copy(update={"theme": state.theme})


# =============================================================================
# Preferences and transient state
# =============================================================================


def _set_theme(state: AppState, action: a.SetTheme, ctx: _Context) -> AppState:
    return state.model_copy(update={"theme": action.theme})


def _set_view_mode(state: AppState, action: a.SetViewMode, ctx: _Context) -> AppState:
    try:
        mode = ViewMode(action.view_mode)
    except ValueError:
        return state
    return state.model_copy(update={"view_mode": mode})


def _update_filters(state: AppState, action: a.UpdateFilters, ctx: _Context) -> AppState:
    try:
        filters = Filters.model_validate({**state.filters.model_dump(), **dict(action.changes)})
    except ValidationError as exc:
        logger.debug("Filter update rejected: %s", exc)
        return state
    return state.model_copy(update={"filters": filters})


def _set_is_subscribed(state: AppState, action: a.SetIsSubscribed, ctx: _Context) -> AppState:
    return state.model_copy(update={"is_subscribed": bool(action.is_subscribed)})


def _update_user_profile(state: AppState, action: a.UpdateUserProfile, ctx: _Context) -> AppState:
    try:
        profile = UserProfile.model_validate(
            {**state.user_profile.model_dump(), **dict(action.changes)}
        )
    except ValidationError:
        return state
    return state.model_copy(update={"user_profile": profile})


def _open_modal(state: AppState, action: a.OpenModal, ctx: _Context) -> AppState:
    return state.model_copy(update={"active_modal": action.modal})


def _close_modal(state: AppState, action: a.CloseModal, ctx: _Context) -> AppState:
    return state.model_copy(update={"active_modal": None})


def _set_selected(state: AppState, action: a.SetSelectedTransactions, ctx: _Context) -> AppState:
    return state.model_copy(update={"selected_transactions": frozenset(action.ids)})


def _toggle_selection(
    state: AppState, action: a.ToggleTransactionSelection, ctx: _Context
) -> AppState:
    return state.model_copy(
        update={"selected_transactions": state.selected_transactions ^ {action.transaction_id}}
    )


_HANDLERS: dict[type[a.Action], Callable[[AppState, a.Action, _Context], AppState]] = {
    a.AddTransaction: _add_transaction,
    a.UpdateTransaction: _update_transaction,
    a.DeleteTransactions: _delete_transactions,
    a.MergeTransactions: _merge_transactions,
    a.CategorizeTransactions: _categorize_transactions,
    a.AddCategory: _add_category,
    a.UpdateCategory: _update_category,
    a.DeleteCategory: _delete_category,
    a.DeleteUnusedCategories: _delete_unused_categories,
    a.ReorderCategories: _reorder_categories,
    a.AddGoal: _add_goal,
    a.UpdateGoal: _update_goal,
    a.DeleteGoal: _delete_goal,
    a.AddLiability: _add_liability,
    a.UpdateLiability: _update_liability,
    a.DeleteLiability: _delete_liability,
    a.AddProject: _add_project,
    a.UpdateProject: _update_project,
    a.DeleteProject: _delete_project,
    a.AddRecurring: _add_recurring,
    a.UpdateRecurring: _update_recurring,
    a.DeleteRecurring: _delete_recurring,
    a.ImportData: _import_data,
    a.ResetState: _reset_state,
    a.SetTheme: _set_theme,
    a.SetViewMode: _set_view_mode,
    a.UpdateFilters: _update_filters,
    a.SetIsSubscribed: _set_is_subscribed,
    a.UpdateUserProfile: _update_user_profile,
    a.OpenModal: _open_modal,
    a.CloseModal: _close_modal,
    a.SetSelectedTransactions: _set_selected,
    a.ToggleTransactionSelection: _toggle_selection,
}


def apply(
    state: AppState,
    action: a.Action,
    *,
    id_factory: Optional[IdFactory] = None,
    today: Optional[date] = None,
) -> AppState:
    """Return the state that results from ``action``; never raises for domain input."""

    handler = _HANDLERS.get(type(action))
    if handler is None:
        logger.warning("Unknown action ignored", extra={"action": type(action).__name__})
        return state
    return handler(state, action, _Context(new_id=id_factory or new_id, today=today))


def initial_state(today: Optional[date] = None) -> AppState:
    """Seed dataset with derived totals filled in."""

    return recompute_derived(seed_state(today))


__all__ = [
    "apply",
    "initial_state",
    "new_id",
    "recalculate_goal_amounts",
    "recalculate_liability_amounts",
    "recompute_derived",
]
