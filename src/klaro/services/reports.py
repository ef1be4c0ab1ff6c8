"""Reporting utilities for Klaro.

All functions are pure; they take either the filtered view or, where noted,
the full transaction collection.
"""

from __future__ import annotations

from calendar import month_abbr
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, Optional

from ..models import (
    Category,
    DateRangePreset,
    Filters,
    Goal,
    Project,
    Transaction,
    TransactionType,
    ViewMode,
)
from .dates import add_months, month_bounds, month_key, year_bounds
from .filters import filtered_view

INCOME_NODE = "Income"
SAVINGS_NODE = "Savings"
OTHER_NODE = "Other"
CASHFLOW_MONTHS = 12


@dataclass(slots=True)
class PeriodTotals:
    income: float = 0.0
    expense: float = 0.0
    saving: float = 0.0

    @property
    def balance(self) -> float:
        return self.income - self.expense


@dataclass(slots=True)
class DashboardStats:
    income: float
    expense: float
    saving: float
    balance: float
    income_trend: float
    expense_trend: float
    saving_trend: float
    balance_trend: float


@dataclass(slots=True)
class ProjectRow:
    name: str
    tag: str
    income: float
    expense: float

    @property
    def profit(self) -> float:
        return self.income - self.expense


@dataclass(slots=True)
class CashflowPoint:
    month: str
    label: str
    income: float = 0.0
    expense: float = 0.0


@dataclass(slots=True)
class FlowLink:
    source: int
    target: int
    value: float


@dataclass(slots=True)
class FlowGraph:
    """Income-to-category flow, suitable for a Sankey style chart."""

    nodes: list[str] = field(default_factory=list)
    links: list[FlowLink] = field(default_factory=list)


@dataclass(slots=True)
class GoalProgress:
    id: str
    name: str
    current: float
    target: float

    @property
    def percentage(self) -> float:
        return self.current / self.target * 100 if self.target > 0 else 0.0

    @property
    def remaining(self) -> float:
        return max(self.target - self.current, 0.0)


def trend(current: float, previous: float) -> float:
    """Percentage change from ``previous``; a zero baseline yields 100 or 0."""

    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return (current - previous) / abs(previous) * 100


def summarize(transactions: Iterable[Transaction]) -> PeriodTotals:
    totals = PeriodTotals()
    for txn in transactions:
        if txn.type == TransactionType.INCOME:
            totals.income += txn.amount
        elif txn.type == TransactionType.EXPENSE:
            totals.expense += txn.amount
        elif txn.type == TransactionType.SAVING:
            totals.saving += txn.amount
    return totals


def previous_period(filters: Filters, today: Optional[date] = None) -> Optional[tuple[date, date]]:
    """Window immediately before the current one, or ``None`` when no trend applies.

    Unbounded windows (``all_time`` or a custom range missing a bound) have no
    previous period.
    """

    today = today or date.today()
    preset = filters.date_range.preset
    if preset == DateRangePreset.THIS_MONTH:
        return month_bounds(add_months(today, -1))
    if preset == DateRangePreset.LAST_MONTH:
        return month_bounds(add_months(today, -2))
    if preset == DateRangePreset.THIS_YEAR:
        return year_bounds(date(today.year - 1, 1, 1))
    if preset == DateRangePreset.CUSTOM:
        start, end = filters.date_range.start, filters.date_range.end
        if start is None or end is None:
            return None
        duration = end - start
        previous_end = start - timedelta(days=1)
        return previous_end - duration, previous_end
    return None


def dashboard_stats(
    transactions: Iterable[Transaction],
    filters: Filters,
    view_mode: str = ViewMode.ALL,
    today: Optional[date] = None,
) -> DashboardStats:
    """Totals for the filtered window plus trends against the previous period.

    The previous period is aggregated over the whole collection by date only;
    the other filters apply to the current window alone.
    """

    transactions = list(transactions)
    current = summarize(filtered_view(transactions, filters, view_mode, today=today))

    window = previous_period(filters, today)
    if window is None:
        trends = (0.0, 0.0, 0.0, 0.0)
    else:
        start, end = window
        previous = summarize(t for t in transactions if start <= t.date <= end)
        trends = (
            trend(current.income, previous.income),
            trend(current.expense, previous.expense),
            trend(current.saving, previous.saving),
            trend(current.balance, previous.balance),
        )

    return DashboardStats(
        income=current.income,
        expense=current.expense,
        saving=current.saving,
        balance=current.balance,
        income_trend=trends[0],
        expense_trend=trends[1],
        saving_trend=trends[2],
        balance_trend=trends[3],
    )


def project_report(
    transactions: Iterable[Transaction], projects: Iterable[Project]
) -> list[ProjectRow]:
    """Income and expense per project, matched on the project's tag."""

    transactions = list(transactions)
    rows: list[ProjectRow] = []
    for project in projects:
        tagged = summarize(t for t in transactions if t.has_tag(project.tag))
        rows.append(
            ProjectRow(name=project.name, tag=project.tag, income=tagged.income, expense=tagged.expense)
        )
    return rows


def cashflow_series(
    transactions: Iterable[Transaction], today: Optional[date] = None
) -> list[CashflowPoint]:
    """Income and expense for the trailing twelve calendar months, oldest first.

    Always computed over the unfiltered collection.
    """

    today = today or date.today()
    buckets: dict[str, CashflowPoint] = {}
    for offset in range(CASHFLOW_MONTHS - 1, -1, -1):
        anchor = add_months(today, -offset)
        key = month_key(anchor)
        buckets[key] = CashflowPoint(
            month=key, label=f"{month_abbr[anchor.month]} {anchor.year % 100:02d}"
        )

    for txn in transactions:
        point = buckets.get(month_key(txn.date))
        if point is None:
            continue
        if txn.type == TransactionType.INCOME:
            point.income += txn.amount
        elif txn.type == TransactionType.EXPENSE:
            point.expense += txn.amount
    return list(buckets.values())


def flow_graph(
    transactions: Iterable[Transaction], categories: Iterable[Category]
) -> FlowGraph:
    """Route income into expense categories, with the residual as savings.

    Uncategorized expenses are left out; a category id that no longer resolves
    is shown as ``"Other"``.
    """

    lookup = {c.id: c.name for c in categories}
    graph = FlowGraph()
    # keyed by category id so a category label never collides with a fixed node
    index: dict[tuple[str, str], int] = {}

    def node(key: tuple[str, str], label: str) -> int:
        if key not in index:
            index[key] = len(graph.nodes)
            graph.nodes.append(label)
        return index[key]

    income_node = node(("fixed", INCOME_NODE), INCOME_NODE)
    links: dict[int, FlowLink] = {}
    total_income = 0.0
    for txn in transactions:
        if txn.type == TransactionType.INCOME:
            total_income += txn.amount
        elif txn.type == TransactionType.EXPENSE and txn.category_id:
            if txn.category_id in lookup:
                target = node(("category", txn.category_id), lookup[txn.category_id])
            else:
                target = node(("fixed", OTHER_NODE), OTHER_NODE)
            link = links.get(target)
            if link is None:
                link = links[target] = FlowLink(source=income_node, target=target, value=0.0)
                graph.links.append(link)
            link.value += txn.amount

    residual = total_income - sum(link.value for link in graph.links)
    if residual > 0:
        savings = node(("fixed", SAVINGS_NODE), SAVINGS_NODE)
        graph.links.append(FlowLink(source=income_node, target=savings, value=residual))
    return graph


def goal_progress(goals: Iterable[Goal]) -> list[GoalProgress]:
    return [
        GoalProgress(id=g.id, name=g.name, current=g.current_amount, target=g.target_amount)
        for g in goals
    ]


__all__ = [
    "CashflowPoint",
    "DashboardStats",
    "FlowGraph",
    "FlowLink",
    "GoalProgress",
    "PeriodTotals",
    "ProjectRow",
    "cashflow_series",
    "dashboard_stats",
    "flow_graph",
    "goal_progress",
    "previous_period",
    "project_report",
    "summarize",
    "trend",
]
