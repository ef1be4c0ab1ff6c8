"""Dashboard, project, cashflow and flow graph report tests."""

from __future__ import annotations

from datetime import date

import pytest

from klaro.models import DateRange, DateRangePreset, Filters, Goal, Project, TransactionType, ViewMode
from klaro.services.reports import (
    INCOME_NODE,
    OTHER_NODE,
    SAVINGS_NODE,
    cashflow_series,
    dashboard_stats,
    flow_graph,
    goal_progress,
    previous_period,
    project_report,
    trend,
)
from tests.conftest import TODAY, assert_float_equal


def _filters(preset: DateRangePreset, **extra) -> Filters:
    return Filters(date_range=DateRange(preset=preset, **extra))


class TestTrend:
    def test_zero_baseline_with_growth_is_100(self):
        assert trend(50.0, 0.0) == 100.0

    def test_both_zero_is_zero(self):
        assert trend(0.0, 0.0) == 0.0

    def test_zero_baseline_with_negative_current_is_zero(self):
        assert trend(-20.0, 0.0) == 0.0

    def test_relative_change_uses_absolute_baseline(self):
        assert_float_equal(trend(150.0, 100.0), 50.0)
        assert_float_equal(trend(50.0, -100.0), 150.0)


class TestPreviousPeriod:
    @pytest.mark.parametrize(
        ("preset", "expected"),
        [
            (DateRangePreset.THIS_MONTH, (date(2024, 4, 1), date(2024, 4, 30))),
            (DateRangePreset.LAST_MONTH, (date(2024, 3, 1), date(2024, 3, 31))),
            (DateRangePreset.THIS_YEAR, (date(2023, 1, 1), date(2023, 12, 31))),
            (DateRangePreset.ALL_TIME, None),
        ],
    )
    def test_presets(self, preset, expected):
        assert previous_period(_filters(preset), TODAY) == expected

    def test_custom_window_has_same_day_count(self):
        filters = _filters(DateRangePreset.CUSTOM, start=date(2024, 5, 11), end=date(2024, 5, 20))
        assert previous_period(filters, TODAY) == (date(2024, 5, 1), date(2024, 5, 10))

    def test_open_custom_window_has_no_trend(self):
        assert previous_period(_filters(DateRangePreset.CUSTOM, start=date(2024, 5, 1)), TODAY) is None


class TestDashboardStats:
    def test_totals_and_trends(self, transaction_factory):
        transactions = [
            transaction_factory(1000.0, TransactionType.INCOME, on=date(2024, 5, 1)),
            transaction_factory(400.0, on=date(2024, 5, 3)),
            transaction_factory(100.0, TransactionType.SAVING, on=date(2024, 5, 4)),
            transaction_factory(500.0, TransactionType.INCOME, on=date(2024, 4, 1)),
            transaction_factory(400.0, on=date(2024, 4, 2)),
        ]

        stats = dashboard_stats(transactions, _filters(DateRangePreset.THIS_MONTH), today=TODAY)

        assert stats.income == 1000.0
        assert stats.expense == 400.0
        assert stats.saving == 100.0
        assert stats.balance == 600.0
        assert_float_equal(stats.income_trend, 100.0)
        assert_float_equal(stats.expense_trend, 0.0)
        # no savings last month
        assert stats.saving_trend == 100.0
        assert_float_equal(stats.balance_trend, 500.0)

    def test_all_time_has_zero_trends(self, transaction_factory):
        transactions = [transaction_factory(100.0, TransactionType.INCOME, on=date(2020, 1, 1))]
        stats = dashboard_stats(transactions, _filters(DateRangePreset.ALL_TIME), today=TODAY)
        assert stats.income == 100.0
        assert (stats.income_trend, stats.expense_trend, stats.saving_trend, stats.balance_trend) == (
            0.0, 0.0, 0.0, 0.0,
        )

    def test_view_mode_limits_current_window(self, transaction_factory):
        transactions = [
            transaction_factory(100.0, TransactionType.INCOME, on=date(2024, 5, 2), tags=["business"]),
            transaction_factory(300.0, TransactionType.INCOME, on=date(2024, 5, 2)),
        ]
        stats = dashboard_stats(
            transactions, _filters(DateRangePreset.THIS_MONTH), ViewMode.BUSINESS, today=TODAY
        )
        assert stats.income == 100.0

    def test_empty_ledger(self):
        stats = dashboard_stats([], _filters(DateRangePreset.THIS_MONTH), today=TODAY)
        assert stats.balance == 0.0
        assert stats.balance_trend == 0.0


def test_project_report_partitions_by_tag(transaction_factory):
    projects = [Project(id="p1", name="Alpha", tag="project-alpha"), Project(id="p2", name="Idle", tag="idle")]
    transactions = [
        transaction_factory(500.0, TransactionType.INCOME, tags=["business", "project-alpha"]),
        transaction_factory(49.99, tags=["project-alpha"]),
        transaction_factory(10.0, TransactionType.SAVING, tags=["project-alpha"]),
        transaction_factory(70.0, tags=["other"]),
    ]

    rows = project_report(transactions, projects)

    alpha, idle = rows
    assert (alpha.name, alpha.tag) == ("Alpha", "project-alpha")
    assert alpha.income == 500.0
    assert alpha.expense == 49.99
    assert_float_equal(alpha.profit, 450.01)
    assert (idle.income, idle.expense, idle.profit) == (0.0, 0.0, 0.0)


class TestCashflow:
    def test_twelve_months_oldest_first(self):
        series = cashflow_series([], today=TODAY)
        assert len(series) == 12
        assert series[0].month == "2023-06"
        assert series[-1].month == "2024-05"
        assert series[-1].label == "May 24"

    def test_buckets_income_and_expense_ignoring_other_types(self, transaction_factory):
        transactions = [
            transaction_factory(100.0, TransactionType.INCOME, on=date(2024, 5, 1)),
            transaction_factory(40.0, on=date(2024, 5, 31)),
            transaction_factory(25.0, on=date(2023, 6, 1)),
            transaction_factory(999.0, TransactionType.SAVING, on=date(2024, 5, 2)),
            transaction_factory(999.0, on=date(2023, 5, 31)),
            transaction_factory(999.0, on=date(2024, 6, 1)),
        ]

        series = {point.month: point for point in cashflow_series(transactions, today=TODAY)}

        assert series["2024-05"].income == 100.0
        assert series["2024-05"].expense == 40.0
        assert series["2023-06"].expense == 25.0
        assert sum(point.expense for point in series.values()) == 65.0


class TestFlowGraph:
    def test_links_categories_and_savings_residual(self, transaction_factory, category_factory):
        categories = [category_factory("Rent", id="c1"), category_factory("Food", id="c2")]
        transactions = [
            transaction_factory(3000.0, TransactionType.INCOME),
            transaction_factory(800.0, category_id="c1"),
            transaction_factory(150.0, category_id="c2"),
            transaction_factory(50.0, category_id="c2"),
            transaction_factory(500.0),  # uncategorized, left out
        ]

        graph = flow_graph(transactions, categories)

        assert graph.nodes == [INCOME_NODE, "Rent", "Food", SAVINGS_NODE]
        flows = {graph.nodes[link.target]: link.value for link in graph.links}
        assert flows == {"Rent": 800.0, "Food": 200.0, SAVINGS_NODE: 2000.0}
        assert all(link.source == 0 for link in graph.links)

    def test_no_savings_when_expenses_exceed_income(self, transaction_factory, category_factory):
        graph = flow_graph(
            [
                transaction_factory(100.0, TransactionType.INCOME),
                transaction_factory(300.0, category_id="gone"),
            ],
            [category_factory(id="c1")],
        )
        assert graph.nodes == [INCOME_NODE, OTHER_NODE]
        assert [link.value for link in graph.links] == [300.0]

    def test_category_named_like_fixed_node_gets_its_own_node(self, transaction_factory, category_factory):
        categories = [
            category_factory(INCOME_NODE, id="c1"),
            category_factory(SAVINGS_NODE, id="c2"),
        ]
        graph = flow_graph(
            [
                transaction_factory(1000.0, TransactionType.INCOME),
                transaction_factory(100.0, category_id="c1"),
                transaction_factory(50.0, category_id="c2"),
            ],
            categories,
        )

        assert graph.nodes == [INCOME_NODE, INCOME_NODE, SAVINGS_NODE, SAVINGS_NODE]
        assert [(link.source, link.target, link.value) for link in graph.links] == [
            (0, 1, 100.0),
            (0, 2, 50.0),
            (0, 3, 850.0),
        ]

    def test_income_only(self, transaction_factory):
        graph = flow_graph([transaction_factory(10.0, TransactionType.INCOME)], [])
        assert graph.nodes == [INCOME_NODE, SAVINGS_NODE]
        assert graph.links[0].value == 10.0


def test_goal_progress():
    goals = [
        Goal(id="g1", name="Car", target_amount=20000.0, current_amount=5000.0),
        Goal(id="g2", name="Trip", target_amount=1000.0, current_amount=1200.0),
    ]
    car, trip = goal_progress(goals)
    assert_float_equal(car.percentage, 25.0)
    assert car.remaining == 15000.0
    assert trip.remaining == 0.0
