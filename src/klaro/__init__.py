"""Klaro personal finance ledger engine."""

from __future__ import annotations

from .config import BaseConfig, TestConfig
from .store import LedgerStore, create_store

__all__ = ["BaseConfig", "LedgerStore", "TestConfig", "create_store"]
