"""Calendar helpers shared by filters, reports and the seed data."""

from __future__ import annotations

from calendar import monthrange
from datetime import date


def add_months(value: date, months: int) -> date:
    """Shift by whole months, clamping the day to the target month's length."""

    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    last_day = monthrange(year, month)[1]
    return date(year, month, min(value.day, last_day))


def month_bounds(value: date) -> tuple[date, date]:
    """Return the first and last day of ``value``'s month."""

    last_day = monthrange(value.year, value.month)[1]
    return value.replace(day=1), value.replace(day=last_day)


def year_bounds(value: date) -> tuple[date, date]:
    return date(value.year, 1, 1), date(value.year, 12, 31)


def month_key(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}"
