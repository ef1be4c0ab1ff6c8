"""Snapshot repository: one serialized state payload per key."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

from sqlmodel import Session, select

from ...models.snapshot import StateSnapshot


class SQLModelSnapshotRepository:
    """SQLModel-based snapshot repository."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def get(self, key: str) -> Optional[StateSnapshot]:
        with self.session_factory() as session:
            return session.exec(select(StateSnapshot).where(StateSnapshot.key == key)).first()

    def set(self, key: str, payload: str) -> StateSnapshot:
        with self.session_factory() as session:
            snapshot = session.get(StateSnapshot, key)
            if snapshot:
                snapshot.payload = payload
                snapshot.saved_at = datetime.now(timezone.utc)
            else:
                snapshot = StateSnapshot(key=key, payload=payload)
                session.add(snapshot)
            session.commit()
            session.refresh(snapshot)
            return snapshot

    def delete(self, key: str) -> None:
        with self.session_factory() as session:
            snapshot = session.get(StateSnapshot, key)
            if snapshot:
                session.delete(snapshot)
                session.commit()


__all__ = ["SQLModelSnapshotRepository"]
