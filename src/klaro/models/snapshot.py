"""Key/value table holding persisted state snapshots."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar

from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StateSnapshot(SQLModel, table=True):
    """One serialized AppState per key; the latest write wins."""

    __tablename__: ClassVar[str] = "state_snapshot"

    key: str = Field(primary_key=True, max_length=64)
    payload: str = Field(nullable=False)
    saved_at: datetime = Field(default_factory=_utcnow, nullable=False)
