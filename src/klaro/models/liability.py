"""Debt and loan entities."""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel


class LiabilityType(str, Enum):
    DEBT = "debt"  # money I owe
    LOAN = "loan"  # money owed to me


class Liability(SQLModel):
    """Installment debt or an outstanding loan tracked in Klaro.

    Payments are ledger transactions pointing at the liability: expenses count
    towards a debt, incomes towards a loan. ``paid_amount`` is derived from them.
    """

    id: str = Field(default="")
    name: str = Field(max_length=80)
    type: LiabilityType = Field(default=LiabilityType.DEBT)
    initial_amount: float = Field(ge=0)
    paid_amount: float = Field(default=0.0)
    interest_rate: float = Field(default=0.0, ge=0, description="Annual rate in percent")
    creditor: Optional[str] = Field(default=None)
    debtor: Optional[str] = Field(default=None)
    start_date: dt.date
    due_date: Optional[dt.date] = Field(default=None)

    @property
    def outstanding(self) -> float:
        """Remaining balance; negative when overpaid."""
        return self.initial_amount - self.paid_amount

    def counts_payment(self, transaction_type: str) -> bool:
        """Whether a transaction of the given type pays this liability down."""

        if self.type == LiabilityType.DEBT:
            return transaction_type == "expense"
        return transaction_type == "income"
