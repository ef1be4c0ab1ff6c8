"""Budgeting views over a filtered transaction list."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from ..models import Category, Transaction, TransactionType

UNCATEGORIZED = "uncategorized"


@dataclass(slots=True)
class BudgetRow:
    """Budget vs spend for one expense category."""

    id: str
    name: str
    spent: float
    budget: float
    percentage: float

    @property
    def remaining(self) -> float:
        return self.budget - self.spent

    @property
    def over_budget(self) -> bool:
        return self.spent > self.budget


@dataclass(slots=True)
class CategorySlice:
    name: str
    value: float
    percent: float


def budget_overview(
    transactions: Iterable[Transaction], categories: Iterable[Category]
) -> list[BudgetRow]:
    """One row per expense category with a positive budget, in category order.

    ``percentage`` is not capped; overspending shows as values above 100.
    """

    spent_by_category: dict[str, float] = {}
    for txn in transactions:
        if txn.type == TransactionType.EXPENSE and txn.category_id:
            spent_by_category[txn.category_id] = (
                spent_by_category.get(txn.category_id, 0.0) + txn.amount
            )

    rows: list[BudgetRow] = []
    for category in categories:
        if not category.has_budget:
            continue
        spent = spent_by_category.get(category.id, 0.0)
        rows.append(
            BudgetRow(
                id=category.id,
                name=category.name,
                spent=spent,
                budget=category.budget,
                percentage=spent / category.budget * 100,
            )
        )
    return rows


def expense_by_category(
    transactions: Iterable[Transaction], categories: Iterable[Category]
) -> list[CategorySlice]:
    """Roll up expense totals by category name, largest first.

    Transactions without a category, or pointing at a deleted one, land in the
    ``"uncategorized"`` bucket.
    """

    lookup = {c.id: c.name for c in categories}
    totals: dict[str, float] = {}
    for txn in transactions:
        if txn.type != TransactionType.EXPENSE:
            continue
        name = lookup.get(txn.category_id, UNCATEGORIZED) if txn.category_id else UNCATEGORIZED
        totals[name] = totals.get(name, 0.0) + txn.amount

    grand_total = sum(totals.values())
    slices = [
        CategorySlice(
            name=name,
            value=value,
            percent=(value / grand_total * 100) if grand_total > 0 else 0.0,
        )
        for name, value in totals.items()
    ]
    slices.sort(key=lambda item: item.value, reverse=True)
    return slices


__all__ = ["BudgetRow", "CategorySlice", "UNCATEGORIZED", "budget_overview", "expense_by_category"]
