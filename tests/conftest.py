"""Pytest configuration and fixtures."""
import os

os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from tests.helpers import FakeClock


@pytest.fixture
def clock():
    """Fake clock starting at the test epoch."""
    return FakeClock()


@pytest.fixture
def store():
    """Empty in-memory time entry store."""
    from clockistry.store.memory import InMemoryTimeEntryStore

    return InMemoryTimeEntryStore()


@pytest.fixture
def broker():
    """Fresh event broker."""
    from clockistry.events import TimerEventBroker

    return TimerEventBroker(queue_size=10)


@pytest.fixture
def service(store, clock, broker):
    """TimerService over the in-memory store and fake clock."""
    from clockistry.services.timer_service import TimerService

    return TimerService(store, clock=clock, events=broker)


@pytest.fixture
def auth_headers():
    """Build bearer headers for a user id."""
    from clockistry.utils.auth import create_access_token

    def _headers(user_id: str = "user123") -> dict:
        return {"Authorization": f"Bearer {create_access_token(user_id=user_id)}"}

    return _headers


@pytest_asyncio.fixture
async def app_client(store):
    """
    Create a test client backed by a clean in-memory store.

    This fixture:
    - Points the app's store at a fresh InMemoryTimeEntryStore
    - Yields an async HTTP client for testing
    - Restores the original store afterwards
    """
    from clockistry.database import database
    from clockistry.main import app

    original_store = database.store
    database.store = store

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client

    database.store = original_store
