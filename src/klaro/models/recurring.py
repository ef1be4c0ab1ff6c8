"""Recurring transaction rules."""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel

from .transaction import TransactionType


class Frequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class RecurringTransaction(SQLModel):
    """A rule describing a repeating transaction; it is not materialized here."""

    id: str = Field(default="")
    description: str = Field(default="")
    amount: float = Field(ge=0)
    type: TransactionType = Field(default=TransactionType.EXPENSE)
    category_id: Optional[str] = Field(default=None)
    goal_id: Optional[str] = Field(default=None)
    frequency: Frequency = Field(default=Frequency.MONTHLY)
    interval: int = Field(default=1, ge=1)
    start_date: dt.date
    end_date: Optional[dt.date] = Field(default=None)
    next_due_date: Optional[dt.date] = Field(default=None)
    is_bill: bool = Field(default=False)
