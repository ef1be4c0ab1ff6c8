"""Transaction categories and their optional budgets."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel


class CategoryType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class Category(SQLModel):
    """Transaction category used for budgeting and reporting.

    Only expense categories with a positive ``budget`` take part in budget views.
    """

    id: str = Field(default="")
    name: str = Field(max_length=64)
    type: CategoryType = Field(default=CategoryType.EXPENSE)
    budget: Optional[float] = Field(default=None, ge=0)

    @property
    def has_budget(self) -> bool:
        return self.type == CategoryType.EXPENSE and bool(self.budget and self.budget > 0)
