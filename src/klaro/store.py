"""Ledger store: the current AppState plus its debounced persistence effect."""

from __future__ import annotations

from datetime import date
from typing import Callable, Optional

from .config import BaseConfig
from .infra.database import bootstrap_database
from .infra.repositories import SQLModelSnapshotRepository
from .logging_config import get_logger
from .models import AppState, Transaction
from .scheduler import APSchedulerDebouncer, Debouncer
from .services import actions
from .services.filters import filtered_view
from .services.ledger import IdFactory, apply, initial_state
from .services.persistence import DebouncedSaver, SnapshotStore

logger = get_logger("store")

Listener = Callable[[AppState], None]


class LedgerStore:
    """Single writer for application state.

    ``dispatch`` runs the pure reducer and, for persistent actions that changed
    something, hands the new state to the saver.
    """

    def __init__(
        self,
        state: AppState,
        saver: Optional[DebouncedSaver] = None,
        *,
        id_factory: Optional[IdFactory] = None,
        today: Optional[date] = None,
    ):
        self._state = state
        self.saver = saver
        self.id_factory = id_factory
        self.today = today
        self._listeners: list[Listener] = []

    @property
    def state(self) -> AppState:
        return self._state

    def dispatch(self, action: actions.Action) -> AppState:
        logger.debug("Dispatching %s", type(action).__name__)
        new_state = apply(self._state, action, id_factory=self.id_factory, today=self.today)
        if new_state is self._state:
            return new_state

        self._state = new_state
        if self.saver is not None and actions.is_persistent(action):
            self.saver.request(new_state)
        for listener in list(self._listeners):
            listener(new_state)
        return new_state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns a function that removes it."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def filtered_transactions(self) -> list[Transaction]:
        return filtered_view(
            self._state.transactions,
            self._state.filters,
            self._state.view_mode,
            today=self.today,
        )

    def flush(self) -> None:
        if self.saver is not None:
            self.saver.flush()

    def close(self) -> None:
        if self.saver is not None:
            self.saver.close()


def create_store(
    config: Optional[BaseConfig] = None,
    scheduler: Optional[Debouncer] = None,
    *,
    today: Optional[date] = None,
) -> LedgerStore:
    """Wire database, snapshot repository and saver around the loaded state.

    Starts from the seed dataset when no usable snapshot is stored.
    """

    if config is None:
        config = BaseConfig()

    _, session_factory = bootstrap_database(config)
    snapshots = SnapshotStore(SQLModelSnapshotRepository(session_factory), config.STATE_KEY)

    state = snapshots.load()
    if state is None:
        logger.info("Starting from seed data")
        state = initial_state(today)

    saver = DebouncedSaver(snapshots, scheduler or APSchedulerDebouncer(), config.SAVE_DEBOUNCE_MS)
    return LedgerStore(state, saver, today=today)


__all__ = ["LedgerStore", "create_store"]
