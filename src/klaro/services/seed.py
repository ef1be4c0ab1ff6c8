"""Seed dataset used on first start and by RESET_STATE."""

from __future__ import annotations

from datetime import date
from typing import Optional

from ..models import (
    AppState,
    Category,
    CategoryType,
    DateRange,
    DateRangePreset,
    Filters,
    Frequency,
    Goal,
    GoalType,
    Liability,
    LiabilityType,
    Project,
    RecurringTransaction,
    Transaction,
    TransactionType,
    UserProfile,
)
from .dates import add_months, month_bounds


def _on_day(anchor: date, day: int) -> date:
    start, end = month_bounds(anchor)
    return start.replace(day=min(day, end.day))


def seed_state(today: Optional[date] = None) -> AppState:
    """Return the demo ledger, with dates placed around ``today``.

    Derived fields are left at zero; callers run the ledger recompute step.
    """

    today = today or date.today()
    last_month = add_months(today, -1)

    categories_seed = [
        {"id": "c1", "name": "Salary", "type": CategoryType.INCOME},
        {"id": "c2", "name": "Housing", "type": CategoryType.EXPENSE, "budget": 1000.0},
        {"id": "c3", "name": "Groceries", "type": CategoryType.EXPENSE, "budget": 400.0},
        {"id": "c4", "name": "Investments", "type": CategoryType.EXPENSE},
        {"id": "c5", "name": "Freelance", "type": CategoryType.INCOME},
        {"id": "c6", "name": "Software", "type": CategoryType.EXPENSE, "budget": 100.0},
    ]
    transactions_seed = [
        {"id": "1", "type": TransactionType.INCOME, "amount": 3200.0, "description": "Salary",
         "date": today, "category_id": "c1"},
        {"id": "2", "type": TransactionType.EXPENSE, "amount": 850.0, "description": "Rent",
         "date": _on_day(today, 1), "category_id": "c2", "tags": ["private"]},
        {"id": "3", "type": TransactionType.EXPENSE, "amount": 75.5, "description": "Weekly groceries",
         "date": _on_day(last_month, 20), "category_id": "c3", "tags": ["private"]},
        {"id": "4", "type": TransactionType.SAVING, "amount": 200.0, "description": "ETF savings plan",
         "date": _on_day(today, 15), "category_id": "c4", "goal_id": "g1"},
        {"id": "5", "type": TransactionType.INCOME, "amount": 500.0, "description": "Freelance project",
         "date": _on_day(today, 10), "category_id": "c5", "tags": ["business", "project-alpha"]},
        {"id": "6", "type": TransactionType.EXPENSE, "amount": 49.99, "description": "Software subscription",
         "date": _on_day(today, 5), "category_id": "c6", "tags": ["business", "project-alpha"]},
        {"id": "7", "type": TransactionType.EXPENSE, "amount": 120.0, "description": "Insurance",
         "date": _on_day(today, 2), "category_id": "c2", "tags": ["private"]},
    ]
    goals_seed = [
        {"id": "g1", "name": "New car", "target_amount": 20000.0, "type": GoalType.GOAL},
        {"id": "g2", "name": "Vacation", "target_amount": 1500.0, "type": GoalType.SINKING_FUND},
    ]
    liabilities_seed = [
        {"id": "l1", "name": "Student loan", "type": LiabilityType.DEBT, "initial_amount": 15000.0,
         "interest_rate": 3.5, "creditor": "KfW Bank", "start_date": date(2022, 10, 1)},
        {"id": "l2", "name": "Loan to Max", "type": LiabilityType.LOAN, "initial_amount": 1000.0,
         "interest_rate": 0.0, "debtor": "Max Mustermann", "start_date": date(2023, 5, 15)},
    ]

    start, end = month_bounds(today)
    return AppState(
        user_profile=UserProfile(),
        transactions=tuple(Transaction(**payload) for payload in transactions_seed),
        categories=tuple(Category(**payload) for payload in categories_seed),
        goals=tuple(Goal(**payload) for payload in goals_seed),
        projects=(Project(id="p1", name="Project Alpha", tag="project-alpha"),),
        recurring_transactions=(
            RecurringTransaction(
                id="r1",
                description="Rent",
                amount=850.0,
                type=TransactionType.EXPENSE,
                category_id="c2",
                frequency=Frequency.MONTHLY,
                interval=1,
                start_date=date(2023, 1, 1),
                next_due_date=_on_day(today, 1),
                is_bill=True,
            ),
        ),
        liabilities=tuple(Liability(**payload) for payload in liabilities_seed),
        filters=Filters(
            date_range=DateRange(preset=DateRangePreset.THIS_MONTH, start=start, end=end)
        ),
    )


__all__ = ["seed_state"]
