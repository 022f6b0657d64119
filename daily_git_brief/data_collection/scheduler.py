"""
Run exclusivity and daily scheduling of collection runs
"""

import asyncio
import datetime as dt
import logging
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from daily_git_brief.exceptions import RunAlreadyActive


class RunGuard:
    """Single-slot exclusive flag: at most one collection run process-wide.

    Acquisition is a non-blocking test-and-set; a second caller is rejected
    instead of waiting.
    """

    def __init__(self):
        self._lock = threading.Lock()

    @property
    def is_active(self) -> bool:
        return self._lock.locked()

    def try_acquire(self) -> bool:
        return self._lock.acquire(blocking=False)

    def release(self) -> None:
        self._lock.release()

    @contextmanager
    def hold(self) -> Iterator[None]:
        if not self.try_acquire():
            raise RunAlreadyActive("a collection run is already active")
        try:
            yield
        finally:
            self.release()


def seconds_until(now: dt.datetime, hour: int, minute: int) -> float:
    """Seconds from ``now`` to the next occurrence of hour:minute (same tz as now)."""
    scheduled = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    # If the time has already passed today, schedule for tomorrow
    if scheduled <= now:
        scheduled += dt.timedelta(days=1)
    return (scheduled - now).total_seconds()


class CollectionScheduler:
    """Triggers a collection once a day at a fixed UTC time"""

    def __init__(
        self,
        start_collection: Callable[[], bool],
        hour: int = 0,
        minute: int = 0,
        error_backoff_seconds: int = 3600,
        now: Callable[[], dt.datetime] = lambda: dt.datetime.now(dt.timezone.utc),
    ):
        self.start_collection = start_collection
        self.hour = hour
        self.minute = minute
        self.error_backoff_seconds = error_backoff_seconds
        self.now = now
        self.running = False
        self._stop_event: Optional[asyncio.Event] = None
        self.logger = logging.getLogger("collection_scheduler")

    async def start_schedule(self) -> None:
        """Loop until stop() is called, firing once per day"""
        self.running = True
        self._stop_event = asyncio.Event()
        self.logger.info(f"Scheduler started (daily at UTC {self.hour:02d}:{self.minute:02d})")

        try:
            while self.running:
                try:
                    if not await self._wait(seconds_until(self.now(), self.hour, self.minute)):
                        break
                    self.trigger()
                except Exception as e:
                    self.logger.error(f"Scheduler error: {e}")
                    if not await self._wait(self.error_backoff_seconds):
                        break
        finally:
            self.running = False

    def trigger(self) -> bool:
        self.logger.info("Scheduled data collection starting")
        started = self.start_collection()
        if not started:
            self.logger.warning("Scheduled collection skipped: a collection run is already active")
        return started

    async def _wait(self, seconds: float) -> bool:
        """Sleep for ``seconds``; False if stop() was called in the meantime."""
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=seconds)
            return False
        except asyncio.TimeoutError:
            return self.running

    def stop(self) -> None:
        self.running = False
        if self._stop_event:
            self._stop_event.set()
        self.logger.info("Collection scheduler stopped")


__all__: list[str] = ["RunGuard", "RunAlreadyActive", "CollectionScheduler", "seconds_until"]
