"""Schedulers behind the debounced snapshot save."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Protocol

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.date import DateTrigger

logger = logging.getLogger("klaro.scheduler")


class Debouncer(Protocol):
    """Runs one pending call per job id; a new request replaces the old one."""

    def call_later(
        self, job_id: str, delay_ms: int, func: Callable[[], None]
    ) -> None:  # pragma: no cover - interface
        ...

    def cancel(self, job_id: str) -> None:  # pragma: no cover - interface
        ...

    def shutdown(self, wait: bool = True) -> None:  # pragma: no cover - interface
        ...


class APSchedulerDebouncer:
    """Trailing-edge debounce on top of APScheduler's background scheduler.

    Every request re-adds a one-shot ``DateTrigger`` job under the same id with
    ``replace_existing=True``, which pushes the run date back.
    """

    def __init__(self, scheduler: Optional[BackgroundScheduler] = None):
        self.scheduler = scheduler or BackgroundScheduler(timezone=timezone.utc)

    def call_later(self, job_id: str, delay_ms: int, func: Callable[[], None]) -> None:
        if not self.scheduler.running:
            self.scheduler.start()
            logger.info("Background scheduler started")

        run_date = datetime.now(timezone.utc) + timedelta(milliseconds=delay_ms)
        self.scheduler.add_job(
            func=func,
            trigger=DateTrigger(run_date=run_date),
            id=job_id,
            name="Debounced snapshot save",
            replace_existing=True,
            misfire_grace_time=None,
        )

    def cancel(self, job_id: str) -> None:
        try:
            self.scheduler.remove_job(job_id)
        except JobLookupError:
            pass

    def shutdown(self, wait: bool = True) -> None:
        """Stop the background scheduler gracefully."""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=wait)
            logger.info("Background scheduler stopped")


class ManualScheduler:
    """Synchronous stand-in: pending calls only run on ``run_pending()``."""

    def __init__(self) -> None:
        self.pending: dict[str, Callable[[], None]] = {}
        self.requests = 0

    def call_later(self, job_id: str, delay_ms: int, func: Callable[[], None]) -> None:
        self.pending[job_id] = func
        self.requests += 1

    def cancel(self, job_id: str) -> None:
        self.pending.pop(job_id, None)

    def run_pending(self) -> int:
        jobs, self.pending = self.pending, {}
        for func in jobs.values():
            func()
        return len(jobs)

    def shutdown(self, wait: bool = True) -> None:
        self.pending.clear()


__all__ = ["APSchedulerDebouncer", "Debouncer", "ManualScheduler"]
