"""In-memory time entry store."""
import asyncio
import copy
import uuid
from typing import Any, Mapping, Optional

from clockistry.errors import TimerAlreadyRunning
from clockistry.store.base import TimeEntryStore


class InMemoryTimeEntryStore(TimeEntryStore):
    """
    Dict-backed store suitable for tests and local runs.

    Writes that must check before acting (the running-entry insert and
    conditional updates) hold an asyncio lock, so they behave atomically for
    every coroutine sharing this store.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._docs: dict[str, dict] = {}

    def new_id(self) -> str:
        return uuid.uuid4().hex

    def _matches(self, doc: Mapping[str, Any], field_equals: Mapping[str, Any]) -> bool:
        return all(doc.get(key) == value for key, value in field_equals.items())

    async def get(self, entry_id: str) -> Optional[dict]:
        doc = self._docs.get(entry_id)
        return None if doc is None else copy.deepcopy(doc)

    async def set(self, entry_id: str, doc: Mapping[str, Any]) -> None:
        self._docs[entry_id] = {**copy.deepcopy(dict(doc)), "_id": entry_id}

    async def update(
        self,
        entry_id: str,
        fields: Mapping[str, Any],
        expect: Optional[Mapping[str, Any]] = None,
    ) -> Optional[dict]:
        async with self._lock:
            existing = self._docs.get(entry_id)
            if existing is None or not self._matches(existing, expect or {}):
                return None
            existing.update(copy.deepcopy(dict(fields)))
            return copy.deepcopy(existing)

    async def query(self, **field_equals: Any) -> list[dict]:
        return [
            copy.deepcopy(doc)
            for doc in self._docs.values()
            if self._matches(doc, field_equals)
        ]

    async def insert_running(self, doc: Mapping[str, Any]) -> dict:
        async with self._lock:
            for existing in self._docs.values():
                if existing["user_id"] == doc["user_id"] and existing.get("is_running"):
                    raise TimerAlreadyRunning(doc["user_id"], existing["_id"])
            self._docs[doc["_id"]] = copy.deepcopy(dict(doc))
        return copy.deepcopy(dict(doc))

    async def delete(self, entry_id: str) -> int:
        return 1 if self._docs.pop(entry_id, None) is not None else 0
