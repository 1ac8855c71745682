"""Tests for InMemoryTimeEntryStore."""
import pytest

from clockistry.errors import TimerAlreadyRunning


@pytest.mark.asyncio
class TestInMemoryStore:
    """Tests for the in-memory store."""

    async def test_set_get_round_trip(self, store):
        """Test set documents can be read back by id."""
        await store.set("e1", {"user_id": "u1", "tags": ["a"]})

        doc = await store.get("e1")

        assert doc == {"_id": "e1", "user_id": "u1", "tags": ["a"]}

    async def test_get_returns_copies(self, store):
        """Test mutating a returned document does not touch the store."""
        await store.set("e1", {"user_id": "u1", "tags": ["a"]})

        doc = await store.get("e1")
        doc["tags"].append("b")

        assert (await store.get("e1"))["tags"] == ["a"]

    async def test_update_expectation_not_met(self, store):
        """Test a conditional update is skipped when the expectation fails."""
        await store.set("e1", {"user_id": "u1", "is_running": False})

        result = await store.update("e1", {"duration": 5}, expect={"is_running": True})

        assert result is None
        assert "duration" not in await store.get("e1")

    async def test_query_by_fields(self, store):
        """Test query matches on every given field."""
        await store.set("e1", {"user_id": "u1", "is_running": True})
        await store.set("e2", {"user_id": "u1", "is_running": False})
        await store.set("e3", {"user_id": "u2", "is_running": True})

        docs = await store.query(user_id="u1", is_running=True)

        assert [d["_id"] for d in docs] == ["e1"]

    async def test_insert_running_rejects_second(self, store):
        """Test a second running entry for the same user is rejected."""
        await store.insert_running({"_id": "e1", "user_id": "u1", "is_running": True})

        with pytest.raises(TimerAlreadyRunning) as exc_info:
            await store.insert_running({"_id": "e2", "user_id": "u1", "is_running": True})

        assert exc_info.value.entry_id == "e1"
        assert await store.get("e2") is None

    async def test_delete(self, store):
        """Test delete reports how many documents were removed."""
        await store.set("e1", {"user_id": "u1"})

        assert await store.delete("e1") == 1
        assert await store.delete("e1") == 0
