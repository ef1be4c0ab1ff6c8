"""Service module exports."""

from . import (
    actions,
    budgeting,
    dates,
    debts,
    filters,
    ledger,
    persistence,
    reports,
    seed,
)

__all__ = [
    "actions",
    "budgeting",
    "dates",
    "debts",
    "filters",
    "ledger",
    "persistence",
    "reports",
    "seed",
]
