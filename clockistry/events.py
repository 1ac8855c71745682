"""Per-user change notifications for timer state."""
import asyncio
import logging
from collections import defaultdict
from contextlib import asynccontextmanager
from typing import AsyncIterator

logger = logging.getLogger(__name__)


class TimerEventBroker:
    """
    In-process fan-out of timer events keyed by user id.

    Subscribers get a bounded queue each. When a queue is full the oldest
    event is dropped, so a slow listener never blocks a writer. This is a
    notification channel only and says nothing about timer consistency.
    """

    def __init__(self, queue_size: int = 100):
        self.queue_size = queue_size
        self._subscribers: dict[str, set[asyncio.Queue]] = defaultdict(set)

    def subscriber_count(self, user_id: str) -> int:
        """Number of open subscriptions for a user."""
        return len(self._subscribers.get(user_id, ()))

    def publish(self, user_id: str, event: dict) -> None:
        """Deliver event to every subscriber of user_id."""
        for queue in self._subscribers.get(user_id, ()):
            if queue.full():
                queue.get_nowait()
                logger.debug("Dropped oldest event for slow subscriber of %s", user_id)
            queue.put_nowait(event)

    @asynccontextmanager
    async def subscribe(self, user_id: str) -> AsyncIterator[asyncio.Queue]:
        """
        Subscribe to events for user_id for the duration of the block.

        Example:
            async with broker.subscribe("user123") as queue:
                event = await queue.get()
        """
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.queue_size)
        self._subscribers[user_id].add(queue)
        try:
            yield queue
        finally:
            self._subscribers[user_id].discard(queue)
            if not self._subscribers[user_id]:
                del self._subscribers[user_id]


# Global broker instance
broker = TimerEventBroker()
