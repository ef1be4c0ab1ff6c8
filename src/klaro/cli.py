"""Command line interface for Klaro."""

from __future__ import annotations

from typing import Optional

import click

from .config import BaseConfig
from .logging_config import setup_logging
from .models import DateRange, DateRangePreset, ViewMode
from .services import actions
from .services.budgeting import budget_overview, expense_by_category
from .services.debts import STRATEGIES, simulate
from .services.filters import filtered_view
from .services.reports import cashflow_series, dashboard_stats
from .store import LedgerStore, create_store

PRESETS = [preset.value for preset in DateRangePreset if preset != DateRangePreset.CUSTOM]
VIEW_MODES = [mode.value for mode in ViewMode]


def _store(ctx: click.Context) -> LedgerStore:
    store = ctx.obj.get("store")
    if store is None:
        store = create_store(ctx.obj["config"])
        ctx.obj["store"] = store
        ctx.call_on_close(store.close)
    return store


def _filters(store: LedgerStore, preset: Optional[str]):
    filters = store.state.filters
    if preset:
        filters = filters.model_copy(update={"date_range": DateRange(preset=preset)})
    return filters


def _money(value: float) -> str:
    return f"{value:,.2f}"


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Klaro ledger tools."""

    config = BaseConfig()
    setup_logging(config)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@cli.command()
@click.option("--preset", type=click.Choice(PRESETS), default=None, help="Date range preset")
@click.option("--view-mode", type=click.Choice(VIEW_MODES), default=None, help="Private/business view")
@click.pass_context
def summary(ctx: click.Context, preset: Optional[str], view_mode: Optional[str]) -> None:
    """Show income, expense, saving and balance with trends."""

    store = _store(ctx)
    stats = dashboard_stats(
        store.state.transactions,
        _filters(store, preset),
        view_mode or store.state.view_mode,
    )
    rows = [
        ("Income", stats.income, stats.income_trend),
        ("Expense", stats.expense, stats.expense_trend),
        ("Saving", stats.saving, stats.saving_trend),
        ("Balance", stats.balance, stats.balance_trend),
    ]
    for label, amount, change in rows:
        click.echo(f"{label:<8} {_money(amount):>14}  {change:+.1f}%")


@cli.command()
@click.option("--preset", type=click.Choice(PRESETS), default=None, help="Date range preset")
@click.pass_context
def budgets(ctx: click.Context, preset: Optional[str]) -> None:
    """Show budget usage per expense category."""

    store = _store(ctx)
    filtered = filtered_view(store.state.transactions, _filters(store, preset), store.state.view_mode)
    rows = budget_overview(filtered, store.state.categories)
    if not rows:
        click.echo("No budgets defined.")
    for row in rows:
        flag = "  OVER" if row.over_budget else ""
        click.echo(
            f"{row.name:<16} {_money(row.spent):>12} / {_money(row.budget):>12}"
            f"  {row.percentage:5.1f}%{flag}"
        )

    slices = expense_by_category(filtered, store.state.categories)
    if slices:
        click.echo("")
        click.echo("Expenses by category:")
        for item in slices:
            click.echo(f"  {item.name:<16} {_money(item.value):>12}  {item.percent:5.1f}%")


@cli.command()
@click.pass_context
def cashflow(ctx: click.Context) -> None:
    """Show income and expense for the last twelve months."""

    store = _store(ctx)
    for point in cashflow_series(store.state.transactions):
        click.echo(f"{point.label:<7} {_money(point.income):>12} {_money(point.expense):>12}")


@cli.command()
@click.option("--strategy", type=click.Choice(STRATEGIES), default="avalanche", show_default=True)
@click.option("--extra", type=click.FloatRange(min=0), required=True, help="Monthly payment amount")
@click.option("--months", type=click.IntRange(min=0), default=12, show_default=True,
              help="Number of monthly rows to print")
@click.pass_context
def debts(ctx: click.Context, strategy: str, extra: float, months: int) -> None:
    """Simulate paying off open debts."""

    store = _store(ctx)
    result = simulate(store.state.liabilities, strategy, extra)
    if result is None:
        click.echo("No open debts to pay off.")
        return

    for record in result.plan[:months]:
        click.echo(f"Month {record.month}: paid {_money(record.total_paid)}, "
                   f"interest {_money(record.total_interest)}")
        for line in record.payments:
            click.echo(f"  {line.name:<20} {_money(line.payment):>12}  "
                       f"left {_money(line.remaining_balance)}")

    summary_ = result.summary
    click.echo(f"Months: {summary_.total_months}")
    click.echo(f"Total interest: {_money(summary_.total_interest)}")
    click.echo(f"Total principal: {_money(summary_.total_principal)}")
    if summary_.cap_reached:
        click.echo("Stopped at the month limit; the payment does not cover the interest.")


@cli.command()
@click.confirmation_option(prompt="Replace all data with the demo dataset?")
@click.pass_context
def reset(ctx: click.Context) -> None:
    """Restore the demo dataset."""

    store = _store(ctx)
    store.dispatch(actions.ResetState())
    store.flush()
    click.echo(f"Reset complete: {len(store.state.transactions)} transactions.")


__all__ = ["cli"]
