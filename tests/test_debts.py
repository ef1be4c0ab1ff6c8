"""Debt paydown simulator tests."""

from __future__ import annotations

import pytest

from klaro.models import LiabilityType
from klaro.services.debts import AVALANCHE, MAX_MONTHS, SNOWBALL, simulate
from tests.conftest import assert_float_equal


@pytest.fixture
def two_debts(liability_factory):
    return [
        liability_factory("B", 500.0, 5.0, id="B"),
        liability_factory("A", 1000.0, 10.0, id="A"),
    ]


def _payment(record, liability_id):
    return next(p for p in record.payments if p.liability_id == liability_id)


class TestNothingToSimulate:
    def test_no_liabilities(self):
        assert simulate([], AVALANCHE, 100.0) is None

    def test_loans_and_settled_debts_are_ignored(self, liability_factory):
        liabilities = [
            liability_factory("Loan to friend", 300.0, id="loan", type=LiabilityType.LOAN),
            liability_factory("Settled", 200.0, 5.0, id="done", paid_amount=200.0),
            liability_factory("Overpaid", 200.0, 5.0, id="over", paid_amount=250.0),
        ]
        assert simulate(liabilities, AVALANCHE, 100.0) is None


class TestAvalanche:
    def test_first_month_accrues_both_and_pays_highest_rate(self, two_debts):
        result = simulate(two_debts, AVALANCHE, 100.0)
        first = result.plan[0]

        a = _payment(first, "A")
        b = _payment(first, "B")
        assert [p.liability_id for p in first.payments] == ["A", "B"]
        assert a.payment == 100.0
        assert_float_equal(a.interest_paid, 1000.0 * 0.10 / 12)
        assert_float_equal(a.principal_paid, 100.0 - 1000.0 * 0.10 / 12)
        assert_float_equal(a.remaining_balance, 1000.0 + 1000.0 * 0.10 / 12 - 100.0)
        # B accrues but gets nothing while A is open
        assert b.payment == 0.0
        assert_float_equal(b.interest_paid, 500.0 * 0.05 / 12)
        assert b.principal_paid == 0.0
        assert_float_equal(b.remaining_balance, 500.0 + 500.0 * 0.05 / 12)
        assert_float_equal(first.total_interest, 1000.0 * 0.10 / 12 + 500.0 * 0.05 / 12)

    def test_capacity_rolls_over_to_next_debt(self, two_debts):
        result = simulate(two_debts, AVALANCHE, 100.0)

        payoff_index = next(
            i for i, record in enumerate(result.plan) if _payment(record, "A").remaining_balance <= 0
        )
        payoff_month = result.plan[payoff_index]
        leftover = 100.0 - _payment(payoff_month, "A").payment
        assert_float_equal(_payment(payoff_month, "B").payment, leftover)

        following = result.plan[payoff_index + 1]
        assert [p.liability_id for p in following.payments] == ["B"]
        assert _payment(following, "B").payment > 0

    def test_waiting_debt_reports_accrued_interest_each_month(self, two_debts):
        result = simulate(two_debts, AVALANCHE, 100.0)

        waiting = [record for record in result.plan if _payment(record, "B").payment == 0.0]
        assert waiting
        for record in waiting:
            b = _payment(record, "B")
            assert b.interest_paid > 0
            assert b.principal_paid == 0.0
            assert_float_equal(record.total_interest, sum(p.interest_paid for p in record.payments))

    def test_terminates_with_everything_paid(self, two_debts):
        result = simulate(two_debts, AVALANCHE, 100.0)
        summary = result.summary

        assert not summary.cap_reached
        assert summary.total_months == len(result.plan) < MAX_MONTHS
        assert all(p.remaining_balance <= 0 for p in result.plan[-1].payments)
        assert_float_equal(summary.total_principal, 1500.0)
        assert_float_equal(summary.total_interest, sum(r.total_interest for r in result.plan))
        total_paid = sum(r.total_paid for r in result.plan)
        assert_float_equal(total_paid, summary.total_principal + summary.total_interest)

    def test_uses_outstanding_balance(self, liability_factory):
        result = simulate([liability_factory("Car", 1000.0, 0.0, paid_amount=600.0)], AVALANCHE, 100.0)
        assert result.summary.total_months == 4
        assert result.summary.total_principal == 400.0
        assert result.summary.total_interest == 0.0


class TestSnowball:
    def test_smallest_balance_first(self, liability_factory):
        liabilities = [
            liability_factory("Big", 1000.0, 10.0, id="big"),
            liability_factory("Small", 500.0, 5.0, id="small"),
        ]
        first = simulate(liabilities, SNOWBALL, 100.0).plan[0]
        assert _payment(first, "small").payment == 100.0
        assert _payment(first, "big").payment == 0.0

    def test_order_is_fixed_for_whole_run(self, liability_factory):
        liabilities = [
            liability_factory("Grows", 100.0, 24.0, id="grows"),
            liability_factory("Steady", 101.0, 0.0, id="steady"),
        ]
        plan = simulate(liabilities, SNOWBALL, 1.0).plan

        fifth = plan[4]
        # balances have crossed, priority has not
        assert _payment(fifth, "grows").remaining_balance > _payment(fifth, "steady").remaining_balance
        assert _payment(fifth, "grows").payment == 1.0
        assert _payment(fifth, "steady").payment == 0.0


class TestSafetyCap:
    def test_zero_extra_hits_cap(self, liability_factory):
        result = simulate([liability_factory("Stuck", 100.0, 5.0)], AVALANCHE, 0.0)
        assert result.summary.cap_reached
        assert result.summary.total_months == MAX_MONTHS

    def test_interest_outpacing_payment_hits_cap(self, liability_factory):
        result = simulate([liability_factory("Shark", 10000.0, 60.0)], AVALANCHE, 100.0)
        assert result.summary.cap_reached
        assert len(result.plan) == MAX_MONTHS

    def test_negative_extra_treated_as_zero(self, liability_factory):
        result = simulate([liability_factory("Debt", 100.0, 0.0)], AVALANCHE, -50.0)
        assert result.summary.cap_reached
        assert result.plan[0].total_paid == 0.0


def test_unknown_strategy_falls_back_to_avalanche(two_debts):
    first = simulate(two_debts, "fastest", 100.0).plan[0]
    assert _payment(first, "A").payment == 100.0
