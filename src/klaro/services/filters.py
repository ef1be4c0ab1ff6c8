"""Query layer: resolve a Filters record against the transaction collection."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterable, Optional

from ..models import (
    ALL,
    CategoryStatus,
    DateRange,
    DateRangePreset,
    Filters,
    Transaction,
    ViewMode,
)
from .dates import add_months, month_bounds, year_bounds

BUSINESS_TAG = "business"

Predicate = Callable[[Transaction], bool]


def resolve_date_range(date_range: DateRange, today: Optional[date] = None) -> tuple[date, date]:
    """Return the inclusive ``(start, end)`` window for a preset.

    Relative presets are computed against ``today``. ``all_time`` and missing
    custom bounds are unbounded on the corresponding side.
    """

    today = today or date.today()
    preset = date_range.preset
    if preset == DateRangePreset.THIS_MONTH:
        return month_bounds(today)
    if preset == DateRangePreset.LAST_MONTH:
        return month_bounds(add_months(today, -1))
    if preset == DateRangePreset.THIS_YEAR:
        return year_bounds(today)
    if preset == DateRangePreset.CUSTOM:
        return date_range.start or date.min, date_range.end or date.max
    return date.min, date.max


def build_predicates(
    filters: Filters, view_mode: str = ViewMode.ALL, today: Optional[date] = None
) -> list[Predicate]:
    """Translate filters into predicates, in evaluation order."""

    start, end = resolve_date_range(filters.date_range, today)
    predicates: list[Predicate] = [lambda t: start <= t.date <= end]

    if filters.transaction_type != ALL:
        wanted_type = filters.transaction_type
        predicates.append(lambda t: t.type == wanted_type)

    low, high = filters.amount_range.min, filters.amount_range.max
    if low is not None:
        predicates.append(lambda t: t.amount >= low)
    if high is not None:
        predicates.append(lambda t: t.amount <= high)

    term = filters.search_term.lower()
    if term:
        predicates.append(
            lambda t: term in t.description.lower()
            or any(term in tag.lower() for tag in t.tags)
        )

    if filters.tags:
        required = set(filters.tags)
        predicates.append(lambda t: required.issubset(t.tags))

    if view_mode == ViewMode.PRIVATE:
        predicates.append(lambda t: BUSINESS_TAG not in t.tags)
    elif view_mode == ViewMode.BUSINESS:
        predicates.append(lambda t: BUSINESS_TAG in t.tags)

    if filters.category_status == CategoryStatus.CATEGORIZED:
        predicates.append(lambda t: bool(t.category_id))
    elif filters.category_status == CategoryStatus.UNCATEGORIZED:
        predicates.append(lambda t: not t.category_id)

    if filters.goal_id != ALL:
        goal_id = filters.goal_id
        predicates.append(lambda t: t.goal_id == goal_id)
    if filters.liability_id != ALL:
        liability_id = filters.liability_id
        predicates.append(lambda t: t.liability_id == liability_id)

    return predicates


def filtered_view(
    transactions: Iterable[Transaction],
    filters: Filters,
    view_mode: str = ViewMode.ALL,
    *,
    today: Optional[date] = None,
) -> list[Transaction]:
    """Return matching transactions, newest first; equal dates keep collection order."""

    predicates = build_predicates(filters, view_mode, today)
    matched = [t for t in transactions if all(p(t) for p in predicates)]
    return sorted(matched, key=lambda t: t.date, reverse=True)


@dataclass(slots=True)
class Page:
    """A cumulative "load more" window over a result list."""

    items: list[Transaction]
    total: int

    @property
    def has_more(self) -> bool:
        return len(self.items) < self.total


def paginate(transactions: list[Transaction], page: int = 1, per_page: int = 20) -> Page:
    """Return the first ``page * per_page`` transactions."""

    page = max(1, page)
    per_page = max(1, per_page)
    return Page(items=transactions[: page * per_page], total=len(transactions))


def group_by_date(transactions: Iterable[Transaction]) -> dict[date, list[Transaction]]:
    """Group transactions by day, newest day first."""

    groups: dict[date, list[Transaction]] = {}
    for txn in transactions:
        groups.setdefault(txn.date, []).append(txn)
    return {day: groups[day] for day in sorted(groups, reverse=True)}


def all_tags(transactions: Iterable[Transaction]) -> list[str]:
    return sorted({tag for txn in transactions for tag in txn.tags})


__all__ = [
    "BUSINESS_TAG",
    "Page",
    "all_tags",
    "build_predicates",
    "filtered_view",
    "group_by_date",
    "paginate",
    "resolve_date_range",
]
