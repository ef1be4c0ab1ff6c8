"""Snapshot persistence for AppState.

The whole state is written as one JSON payload under a single key. Transient
UI fields are zeroed before every write, and goal/liability totals are rebuilt
after every read.
"""

from __future__ import annotations

import json
import threading
from typing import Any, Mapping, Optional, Protocol, Union

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from ..logging_config import get_logger
from ..models import AppState, StateSnapshot
from ..scheduler import Debouncer
from .ledger import recompute_derived

logger = get_logger("persistence")

SAVE_JOB_ID = "klaro-snapshot-save"
TRANSIENT_FIELDS = {"active_modal": None, "selected_transactions": []}


class SnapshotRepository(Protocol):
    def get(self, key: str) -> Optional[StateSnapshot]:  # pragma: no cover - interface
        ...

    def set(self, key: str, payload: str) -> StateSnapshot:  # pragma: no cover - interface
        ...

    def delete(self, key: str) -> None:  # pragma: no cover - interface
        ...


def to_snapshot(state: AppState) -> dict[str, Any]:
    """Serialize to JSON-compatible data with transient fields zeroed."""

    data = state.model_dump(mode="json")
    data.update(TRANSIENT_FIELDS)
    return data


def from_snapshot(raw: Union[str, bytes, Mapping[str, Any], None]) -> Optional[AppState]:
    """Rebuild state from a snapshot; ``None`` when the data is unusable."""

    if raw is None:
        return None
    try:
        data = json.loads(raw) if isinstance(raw, (str, bytes)) else dict(raw)
        if not isinstance(data, dict):
            raise ValueError(f"snapshot root must be an object, got {type(data).__name__}")
        state = AppState.model_validate({**data, **TRANSIENT_FIELDS})
    except (json.JSONDecodeError, ValidationError, ValueError, TypeError) as exc:
        logger.warning("Discarding unreadable snapshot: %s", exc)
        return None
    return recompute_derived(state)


class SnapshotStore:
    """Load and save one AppState snapshot through a repository."""

    def __init__(self, repository: SnapshotRepository, key: str):
        self.repository = repository
        self.key = key

    def load(self) -> Optional[AppState]:
        try:
            record = self.repository.get(self.key)
        except SQLAlchemyError as exc:
            logger.warning("Snapshot load failed: %s", exc, exc_info=True)
            return None
        if record is None:
            logger.info("No snapshot stored", extra={"key": self.key})
            return None
        return from_snapshot(record.payload)

    def save(self, state: AppState) -> None:
        payload = json.dumps(to_snapshot(state))
        self.repository.set(self.key, payload)
        logger.info(
            "Snapshot saved",
            extra={"key": self.key, "transactions": len(state.transactions)},
        )

    def clear(self) -> None:
        self.repository.delete(self.key)


class DebouncedSaver:
    """Coalesce save requests into one trailing write per quiet period.

    Only the latest requested state is written. A zero delay writes
    synchronously. Write failures are logged and dropped.
    """

    def __init__(self, store: SnapshotStore, scheduler: Debouncer, delay_ms: int = 500):
        self.store = store
        self.scheduler = scheduler
        self.delay_ms = max(delay_ms, 0)
        self._pending: Optional[AppState] = None
        self._lock = threading.Lock()

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def request(self, state: AppState) -> None:
        with self._lock:
            self._pending = state
        if self.delay_ms == 0:
            self._write_pending()
            return
        self.scheduler.call_later(SAVE_JOB_ID, self.delay_ms, self._write_pending)

    def flush(self) -> None:
        """Write any pending state now."""
        self.scheduler.cancel(SAVE_JOB_ID)
        self._write_pending()

    def close(self) -> None:
        self.flush()
        self.scheduler.shutdown(wait=True)

    def _write_pending(self) -> None:
        with self._lock:
            state, self._pending = self._pending, None
        if state is None:
            return
        try:
            self.store.save(state)
        except SQLAlchemyError as exc:
            logger.error("Snapshot save failed: %s", exc, exc_info=True)


__all__ = [
    "DebouncedSaver",
    "SAVE_JOB_ID",
    "SnapshotRepository",
    "SnapshotStore",
    "from_snapshot",
    "to_snapshot",
]
