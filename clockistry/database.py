"""Time entry store wiring: MongoDB via Motor, or in-memory."""
import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from clockistry.config import settings
from clockistry.store.base import TimeEntryStore
from clockistry.store.memory import InMemoryTimeEntryStore
from clockistry.store.mongo import MongoTimeEntryStore

logger = logging.getLogger(__name__)


class Database:
    """Store connection manager."""

    client: AsyncIOMotorClient | None = None
    db: AsyncIOMotorDatabase | None = None
    store: TimeEntryStore | None = None

    async def connect(self) -> None:
        """Open the configured persistence backend."""
        if settings.persistence_backend == "memory":
            self.store = InMemoryTimeEntryStore()
            logger.info("Using in-memory time entry store")
            return

        self.client = AsyncIOMotorClient(settings.mongodb_url, tz_aware=True)
        self.db = self.client[settings.mongodb_db_name]
        store = MongoTimeEntryStore(
            self.db[settings.time_entries_collection],
            timeout=settings.store_timeout_seconds,
        )
        await store.ensure_indexes()
        self.store = store
        logger.info("Connected to MongoDB: %s", settings.mongodb_db_name)

    async def disconnect(self) -> None:
        """Disconnect from MongoDB."""
        if self.client:
            self.client.close()
            logger.info("Disconnected from MongoDB")
        self.client = None
        self.db = None
        self.store = None


# Global database instance
database = Database()


async def get_store() -> TimeEntryStore:
    """Dependency to get the time entry store."""
    if database.store is None:
        raise RuntimeError("Database not connected")
    return database.store
