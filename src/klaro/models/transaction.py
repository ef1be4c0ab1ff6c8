"""Ledger transaction records."""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"
    SAVING = "saving"


class Transaction(SQLModel):
    """A single ledger entry.

    ``amount`` is always a non-negative magnitude; direction comes from ``type``.
    Category, goal and liability ids are weak references and may dangle.
    """

    id: str = Field(default="")
    type: TransactionType
    amount: float = Field(ge=0)
    description: str = Field(default="")
    date: dt.date
    category_id: Optional[str] = Field(default=None)
    goal_id: Optional[str] = Field(default=None)
    liability_id: Optional[str] = Field(default=None)
    tags: list[str] = Field(default_factory=list)

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags
