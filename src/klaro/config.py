"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    """Read an integer environment variable, ignoring malformed values."""

    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "Klaro"
    DB_FILENAME = "klaro.db"
    DEFAULT_STATE_KEY = "klaro-state"
    DEFAULT_DEBOUNCE_MS = 500

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("KLARO_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("KLARO_DATABASE_URL", self._build_sqlite_url())
        self.SAVE_DEBOUNCE_MS = max(
            _env_int("KLARO_SAVE_DEBOUNCE_MS", self.DEFAULT_DEBOUNCE_MS), 0
        )
        self.STATE_KEY = os.getenv("KLARO_STATE_KEY", self.DEFAULT_STATE_KEY)

    def _resolve_data_dir(self) -> Path:
        """Return the directory holding the snapshot database and logs."""

        data_root = os.getenv("KLARO_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        db_path = self.DATA_DIR / self.DB_FILENAME
        return f"sqlite:///{db_path}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        if self.DATABASE_URL.startswith("sqlite"):
            return {"connect_args": {"check_same_thread": False}}
        return {}


class TestConfig(BaseConfig):
    """In-memory database with synchronous saves, for tests and scripting."""

    __test__ = False  # keep pytest from collecting this class

    def __init__(self) -> None:
        super().__init__()
        self.DEV_MODE = True
        self.DATABASE_URL = "sqlite://"
        self.SAVE_DEBOUNCE_MS = 0

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        from sqlalchemy.pool import StaticPool

        # A single shared connection keeps the in-memory database alive.
        return {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
