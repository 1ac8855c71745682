"""MongoDB time entry store using Motor (async driver)."""
import asyncio
import logging
from typing import Any, Awaitable, Mapping, Optional

from bson import ObjectId
from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from clockistry.errors import StoreUnavailable, TimerAlreadyRunning
from clockistry.store.base import TimeEntryStore

logger = logging.getLogger(__name__)

RUNNING_INDEX_NAME = "one_running_timer_per_user"


class MongoTimeEntryStore(TimeEntryStore):
    """Time entries stored in a single MongoDB collection."""

    def __init__(self, collection, timeout: float = 5.0):
        """
        Initialize store with a Motor collection.

        Args:
            collection: AsyncIOMotorCollection holding time entries
            timeout: Seconds to wait on any single driver call
        """
        self.collection = collection
        self.timeout = timeout

    async def _call(self, operation: str, awaitable: Awaitable) -> Any:
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout)
        except DuplicateKeyError:
            raise
        except asyncio.TimeoutError as e:
            logger.warning("%s timed out after %ss", operation, self.timeout)
            raise StoreUnavailable(f"{operation} timed out") from e
        except PyMongoError as e:
            logger.warning("%s failed: %s", operation, e)
            raise StoreUnavailable(f"{operation} failed") from e

    async def ensure_indexes(self) -> None:
        """
        Create the indexes the timer lifecycle depends on.

        The partial unique index is what makes the single running timer per
        user hold under concurrent starts.
        """
        await self._call(
            "create_index",
            self.collection.create_index(
                [("user_id", ASCENDING), ("is_running", ASCENDING)],
            ),
        )
        await self._call(
            "create_index",
            self.collection.create_index(
                [("user_id", ASCENDING)],
                name=RUNNING_INDEX_NAME,
                unique=True,
                partialFilterExpression={"is_running": True},
            ),
        )
        logger.info("Time entry indexes ensured")

    def new_id(self) -> str:
        return str(ObjectId())

    async def get(self, entry_id: str) -> Optional[dict]:
        return await self._call("find_one", self.collection.find_one({"_id": entry_id}))

    async def set(self, entry_id: str, doc: Mapping[str, Any]) -> None:
        await self._call(
            "replace_one",
            self.collection.replace_one(
                {"_id": entry_id}, {**doc, "_id": entry_id}, upsert=True
            ),
        )

    async def update(
        self,
        entry_id: str,
        fields: Mapping[str, Any],
        expect: Optional[Mapping[str, Any]] = None,
    ) -> Optional[dict]:
        selector = {"_id": entry_id, **(expect or {})}
        return await self._call(
            "find_one_and_update",
            self.collection.find_one_and_update(
                selector,
                {"$set": dict(fields)},
                return_document=ReturnDocument.AFTER,
            ),
        )

    async def query(self, **field_equals: Any) -> list[dict]:
        cursor = self.collection.find(field_equals)
        return await self._call("find", cursor.to_list(length=None))

    async def insert_running(self, doc: Mapping[str, Any]) -> dict:
        doc = dict(doc)
        try:
            await self._call("insert_one", self.collection.insert_one(doc))
        except DuplicateKeyError as e:
            raise TimerAlreadyRunning(doc["user_id"]) from e
        return doc

    async def delete(self, entry_id: str) -> int:
        result = await self._call("delete_one", self.collection.delete_one({"_id": entry_id}))
        return result.deleted_count
