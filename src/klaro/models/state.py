"""Aggregate application state and the transient filter record."""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import field_validator
from sqlmodel import Field, SQLModel

from .category import Category
from .goal import Goal
from .liability import Liability
from .project import Project
from .recurring import RecurringTransaction
from .transaction import Transaction

ALL = "all"


class DateRangePreset(str, Enum):
    THIS_MONTH = "this_month"
    LAST_MONTH = "last_month"
    THIS_YEAR = "this_year"
    ALL_TIME = "all_time"
    CUSTOM = "custom"


class ViewMode(str, Enum):
    ALL = "all"
    PRIVATE = "private"
    BUSINESS = "business"


class CategoryStatus(str, Enum):
    ALL = "all"
    CATEGORIZED = "categorized"
    UNCATEGORIZED = "uncategorized"


class DateRange(SQLModel):
    """Preset window; ``start``/``end`` are only read for ``custom``. ``None`` means unbounded."""

    preset: DateRangePreset = Field(default=DateRangePreset.THIS_MONTH)
    start: Optional[dt.date] = Field(default=None)
    end: Optional[dt.date] = Field(default=None)


class AmountRange(SQLModel):
    min: Optional[float] = Field(default=None)
    max: Optional[float] = Field(default=None)

    @field_validator("min", "max", mode="before")
    @classmethod
    def blank_is_unbounded(cls, value):
        """Treat an empty string as no bound."""

        if isinstance(value, str) and not value.strip():
            return None
        return value


class Filters(SQLModel):
    """Declarative query over the transaction collection.

    String fields accept ``"all"`` to disable the predicate.
    """

    date_range: DateRange = Field(default_factory=DateRange)
    search_term: str = Field(default="")
    transaction_type: str = Field(default=ALL)
    amount_range: AmountRange = Field(default_factory=AmountRange)
    tags: list[str] = Field(default_factory=list)
    liability_id: str = Field(default=ALL)
    goal_id: str = Field(default=ALL)
    category_status: CategoryStatus = Field(default=CategoryStatus.ALL)


class UserProfile(SQLModel):
    name: str = Field(default="User")
    email: str = Field(default="")
    currency: str = Field(default="EUR", max_length=3)
    language: str = Field(default="en")


class AppState(SQLModel):
    """Aggregate root. Only the ledger reducer produces new instances."""

    user_profile: UserProfile = Field(default_factory=UserProfile)
    transactions: tuple[Transaction, ...] = Field(default=())
    categories: tuple[Category, ...] = Field(default=())
    goals: tuple[Goal, ...] = Field(default=())
    projects: tuple[Project, ...] = Field(default=())
    recurring_transactions: tuple[RecurringTransaction, ...] = Field(default=())
    liabilities: tuple[Liability, ...] = Field(default=())
    theme: str = Field(default="grandeur")
    view_mode: ViewMode = Field(default=ViewMode.ALL)
    filters: Filters = Field(default_factory=Filters)
    is_subscribed: bool = Field(default=False)

    # transient, never persisted
    active_modal: Optional[str] = Field(default=None)
    selected_transactions: frozenset[str] = Field(default=frozenset())
