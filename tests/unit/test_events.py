"""Tests for TimerEventBroker."""
import pytest

from clockistry.events import TimerEventBroker


@pytest.mark.asyncio
class TestTimerEventBroker:
    """Tests for per-user event fan-out."""

    async def test_publish_reaches_all_subscribers(self):
        """Test every subscriber of a user receives the event."""
        broker = TimerEventBroker()

        async with broker.subscribe("u1") as first, broker.subscribe("u1") as second:
            broker.publish("u1", {"type": "started"})

            assert (await first.get())["type"] == "started"
            assert (await second.get())["type"] == "started"

    async def test_publish_without_subscribers(self):
        """Test publishing to a user nobody listens to is a no-op."""
        broker = TimerEventBroker()

        broker.publish("nobody", {"type": "started"})

        assert broker.subscriber_count("nobody") == 0

    async def test_full_queue_drops_oldest(self):
        """Test a slow subscriber keeps only the newest events."""
        broker = TimerEventBroker(queue_size=2)

        async with broker.subscribe("u1") as queue:
            for i in range(3):
                broker.publish("u1", {"type": "updated", "n": i})

            assert [queue.get_nowait()["n"] for _ in range(2)] == [1, 2]

    async def test_subscription_cleanup(self):
        """Test leaving the block unsubscribes."""
        broker = TimerEventBroker()

        async with broker.subscribe("u1"):
            assert broker.subscriber_count("u1") == 1

        assert broker.subscriber_count("u1") == 0
