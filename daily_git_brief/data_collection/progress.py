"""
Progress broadcasting for collection runs.

Every subscriber owns a bounded queue. Publishing never blocks and never
raises: when a subscriber's queue is full the event is dropped for that
subscriber only. Subscribers must tolerate gaps and treat the store as the
source of truth.
"""

import asyncio
import logging
from typing import AsyncIterator, Optional

from daily_git_brief.domain.models import ProgressEvent


class ProgressBroadcaster:
    """Lossy publish/subscribe fan-out of ProgressEvent"""

    def __init__(self, queue_size: int = 100):
        self.queue_size = queue_size
        self._subscribers: set[asyncio.Queue] = set()
        self._latest: Optional[ProgressEvent] = None
        self.dropped_events = 0
        self.logger = logging.getLogger("progress_broadcaster")

    @property
    def latest(self) -> ProgressEvent:
        return self._latest or ProgressEvent.idle()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, event: ProgressEvent) -> None:
        self._latest = event
        for queue in list(self._subscribers):
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                self.dropped_events += 1
                self.logger.debug("Dropped progress event for slow subscriber")

    def subscribe(self) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.queue_size)
        self._subscribers.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        self._subscribers.discard(queue)

    async def stream(self) -> AsyncIterator[ProgressEvent]:
        """Yield the current status, then live events until the run finishes.

        When no run is active only the current (idle or terminal) status is
        yielded.
        """
        queue = self.subscribe()
        try:
            current = self.latest
            yield current
            if not current.is_running:
                return
            while True:
                event = await queue.get()
                yield event
                if not event.is_running:
                    return
        finally:
            self.unsubscribe(queue)
