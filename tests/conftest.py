"""Pytest configuration and shared fixtures for Klaro tests.

Provides a fixed calendar date, record factories, an isolated in-memory
database and a store wired to a synchronous scheduler.
"""

from __future__ import annotations

import logging
from datetime import date
from itertools import count

import pytest
from sqlmodel import Session, SQLModel, create_engine
from sqlalchemy.pool import StaticPool

from klaro.infra.database import create_session_factory
from klaro.infra.repositories import SQLModelSnapshotRepository
from klaro.logging_config import ROOT_LOGGER_NAME
from klaro.models import (
    AppState,
    Category,
    CategoryType,
    Goal,
    Liability,
    LiabilityType,
    Transaction,
    TransactionType,
)
from klaro.scheduler import ManualScheduler
from klaro.services.persistence import DebouncedSaver, SnapshotStore
from klaro.store import LedgerStore

TODAY = date(2024, 5, 15)


# =============================================================================
# Environment
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep config reads away from the working directory and the real database."""

    monkeypatch.setenv("KLARO_DATA_DIR", str(tmp_path / "instance"))
    monkeypatch.setenv("KLARO_DATABASE_URL", f"sqlite:///{tmp_path / 'klaro-test.db'}")
    monkeypatch.setenv("KLARO_SAVE_DEBOUNCE_MS", "0")
    yield
    # setup_logging attaches handlers to streams and files that die with the test
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def id_factory():
    """Deterministic ids: ``id-1``, ``id-2``, ..."""

    counter = count(1)
    return lambda: f"id-{next(counter)}"


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def db_engine():
    """Isolated in-memory SQLite database with all tables created."""

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    session = Session(db_engine, expire_on_commit=False)
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def session_factory(db_engine):
    return create_session_factory(db_engine)


@pytest.fixture
def snapshot_repo(session_factory):
    return SQLModelSnapshotRepository(session_factory)


@pytest.fixture
def snapshot_store(snapshot_repo):
    return SnapshotStore(snapshot_repo, key="test-state")


@pytest.fixture
def manual_scheduler():
    return ManualScheduler()


@pytest.fixture
def store_factory(snapshot_store, manual_scheduler, id_factory, today):
    """Build a LedgerStore over a given state with a 500ms manual debounce."""

    def _create(state: AppState | None = None, delay_ms: int = 500) -> LedgerStore:
        saver = DebouncedSaver(snapshot_store, manual_scheduler, delay_ms=delay_ms)
        return LedgerStore(state or AppState(), saver, id_factory=id_factory, today=today)

    return _create


# =============================================================================
# Record factories
# =============================================================================


@pytest.fixture
def transaction_factory():
    counter = count(1)

    def _create(
        amount: float = 10.0,
        type: TransactionType | str = TransactionType.EXPENSE,
        *,
        id: str | None = None,
        description: str = "Test transaction",
        on: date = TODAY,
        category_id: str | None = None,
        goal_id: str | None = None,
        liability_id: str | None = None,
        tags: list[str] | None = None,
    ) -> Transaction:
        return Transaction(
            id=id or f"t{next(counter)}",
            type=type,
            amount=amount,
            description=description,
            date=on,
            category_id=category_id,
            goal_id=goal_id,
            liability_id=liability_id,
            tags=tags or [],
        )

    return _create


@pytest.fixture
def category_factory():
    counter = count(1)

    def _create(
        name: str = "Test Category",
        *,
        id: str | None = None,
        type: CategoryType | str = CategoryType.EXPENSE,
        budget: float | None = None,
    ) -> Category:
        return Category(id=id or f"c{next(counter)}", name=name, type=type, budget=budget)

    return _create


@pytest.fixture
def goal_factory():
    counter = count(1)

    def _create(name: str = "Test Goal", target_amount: float = 1000.0, *, id: str | None = None) -> Goal:
        return Goal(id=id or f"g{next(counter)}", name=name, target_amount=target_amount)

    return _create


@pytest.fixture
def liability_factory():
    counter = count(1)

    def _create(
        name: str = "Test Debt",
        initial_amount: float = 1000.0,
        interest_rate: float = 0.0,
        *,
        id: str | None = None,
        type: LiabilityType | str = LiabilityType.DEBT,
        paid_amount: float = 0.0,
    ) -> Liability:
        return Liability(
            id=id or f"l{next(counter)}",
            name=name,
            type=type,
            initial_amount=initial_amount,
            paid_amount=paid_amount,
            interest_rate=interest_rate,
            start_date=date(2023, 1, 1),
        )

    return _create


# =============================================================================
# Helpers
# =============================================================================


def assert_float_equal(actual: float, expected: float, tolerance: float = 0.01):
    """Assert that two floats are equal within a tolerance (default one cent)."""

    assert abs(actual - expected) <= tolerance, (
        f"Expected {expected}, got {actual} (difference: {abs(actual - expected)})"
    )
