"""Concrete repository implementations using SQLModel."""

from .snapshot import SQLModelSnapshotRepository

__all__ = ["SQLModelSnapshotRepository"]
