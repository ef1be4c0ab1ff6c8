"""Debt payoff simulator (snowball and avalanche)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..logging_config import get_logger
from ..models import Liability, LiabilityType

logger = get_logger("debts")

AVALANCHE = "avalanche"
SNOWBALL = "snowball"
STRATEGIES = (AVALANCHE, SNOWBALL)
MAX_MONTHS = 1200


@dataclass(slots=True)
class _OpenDebt:
    liability_id: str
    name: str
    interest_rate: float
    balance: float


@dataclass(slots=True)
class DebtPayment:
    """One debt's line in a monthly record."""

    liability_id: str
    name: str
    payment: float
    interest_paid: float
    principal_paid: float
    remaining_balance: float


@dataclass(slots=True)
class MonthRecord:
    month: int
    payments: list[DebtPayment] = field(default_factory=list)
    total_interest: float = 0.0

    @property
    def total_paid(self) -> float:
        return sum(p.payment for p in self.payments)


@dataclass(slots=True)
class PaydownSummary:
    total_months: int
    total_interest: float
    total_principal: float
    cap_reached: bool = False


@dataclass(slots=True)
class PaydownResult:
    plan: list[MonthRecord]
    summary: PaydownSummary


def _priority_order(debts: list[_OpenDebt], strategy: str) -> list[_OpenDebt]:
    if strategy == SNOWBALL:
        return sorted(debts, key=lambda d: d.balance)
    if strategy != AVALANCHE:
        logger.debug("Unknown strategy %r, using avalanche", strategy)
    return sorted(debts, key=lambda d: d.interest_rate, reverse=True)


def simulate(
    liabilities: Iterable[Liability], strategy: str = AVALANCHE, monthly_extra: float = 0.0
) -> Optional[PaydownResult]:
    """Simulate paying off open debts with a fixed monthly amount.

    Only ``debt`` liabilities with a positive outstanding balance take part;
    ``None`` means there is nothing to pay off. The priority order is fixed
    once before the first month. Each month every open debt accrues simple
    monthly interest, then ``monthly_extra`` is paid out down the priority
    list, interest first. The loop stops when everything is paid or after
    ``MAX_MONTHS`` months, in which case ``summary.cap_reached`` is set.
    """

    debts = [
        _OpenDebt(
            liability_id=item.id,
            name=item.name,
            interest_rate=item.interest_rate,
            balance=item.outstanding,
        )
        for item in liabilities
        if item.type == LiabilityType.DEBT and item.outstanding > 0
    ]
    if not debts:
        return None

    debts = _priority_order(debts, strategy)
    extra = max(monthly_extra, 0.0)
    total_principal = sum(d.balance for d in debts)
    total_interest = 0.0
    plan: list[MonthRecord] = []

    while debts and len(plan) < MAX_MONTHS:
        record = MonthRecord(month=len(plan) + 1)

        accrued: dict[str, float] = {}
        for debt in debts:
            interest = debt.balance * (debt.interest_rate / 100) / 12
            debt.balance += interest
            accrued[debt.liability_id] = interest
            record.total_interest += interest

        pool = extra
        for debt in debts:
            interest = accrued[debt.liability_id]
            payment = min(debt.balance, pool) if pool > 0 else 0.0
            # an unpaid debt still shows the interest it accrued
            interest_paid = min(payment, interest) if payment > 0 else interest
            principal_paid = payment - interest_paid if payment > 0 else 0.0
            debt.balance -= payment
            pool -= payment
            record.payments.append(
                DebtPayment(
                    liability_id=debt.liability_id,
                    name=debt.name,
                    payment=payment,
                    interest_paid=interest_paid,
                    principal_paid=principal_paid,
                    remaining_balance=debt.balance,
                )
            )

        total_interest += record.total_interest
        plan.append(record)
        debts = [d for d in debts if d.balance > 0]

    cap_reached = bool(debts)
    if cap_reached:
        logger.debug("Paydown stopped at month cap", extra={"open_debts": len(debts)})

    return PaydownResult(
        plan=plan,
        summary=PaydownSummary(
            total_months=len(plan),
            total_interest=total_interest,
            total_principal=total_principal,
            cap_reached=cap_reached,
        ),
    )


__all__ = [
    "AVALANCHE",
    "DebtPayment",
    "MAX_MONTHS",
    "MonthRecord",
    "PaydownResult",
    "PaydownSummary",
    "SNOWBALL",
    "STRATEGIES",
    "simulate",
]
