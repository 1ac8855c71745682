"""Tests for Pydantic models and record shaping."""
import pytest
from datetime import datetime, timezone
from pydantic import ValidationError


class TestTimeEntryModel:
    """Tests for TimeEntry model."""

    def test_time_entry_from_document(self):
        """Test a stored document with _id loads and serializes as id."""
        from clockistry.models.time_entry import TimeEntry

        now = datetime(2025, 11, 3, tzinfo=timezone.utc)
        entry = TimeEntry(
            _id="e1",
            user_id="u1",
            start_time=now,
            is_running=True,
            created_at=now,
            updated_at=now,
        )

        assert entry.id == "e1"
        assert entry.duration == 0
        assert entry.tags == []
        assert entry.is_billable is False
        assert entry.model_dump(by_alias=True)["id"] == "e1"

    def test_time_entry_rejects_negative_duration(self):
        """Test duration can never be negative."""
        from clockistry.models.time_entry import TimeEntry

        now = datetime(2025, 11, 3, tzinfo=timezone.utc)
        with pytest.raises(ValidationError):
            TimeEntry(
                _id="e1",
                user_id="u1",
                start_time=now,
                duration=-1,
                is_running=False,
                created_at=now,
                updated_at=now,
            )


class TestTimerUpdateModel:
    """Tests for TimerUpdate model."""

    def test_timer_update_drops_unknown_fields(self):
        """Test start/stop owned fields are discarded on validation."""
        from clockistry.models.time_entry import TimerUpdate

        update = TimerUpdate.model_validate({
            "description": "x",
            "start_time": "2025-01-01T00:00:00Z",
            "duration": 5,
            "is_running": False,
        })

        dumped = update.model_dump()
        assert dumped["description"] == "x"
        assert "start_time" not in dumped
        assert "duration" not in dumped
        assert "is_running" not in dumped

    def test_timer_start_defaults(self):
        """Test a bare start payload is not billable and has no tags."""
        from clockistry.models.time_entry import TimerStart

        start = TimerStart()

        assert start.is_billable is False
        assert start.tags == []

    def test_timer_start_null_means_default(self):
        """Test explicit nulls validate to the same defaults as omitted fields."""
        from clockistry.models.time_entry import TimeEntryCreate, TimerStart

        start = TimerStart.model_validate({"tags": None, "is_billable": None})
        create = TimeEntryCreate.model_validate(
            {"start_time": "2024-01-01T00:00:00Z", "tags": None}
        )

        assert start.is_billable is False
        assert start.tags == []
        assert create.tags == []


class TestStripUnset:
    """Tests for sparse record shaping."""

    def test_strip_unset_drops_none_and_empty_lists(self):
        """Test None and [] are omitted while falsy real values are kept."""
        from clockistry.store.base import strip_unset

        result = strip_unset({
            "description": None,
            "tags": [],
            "is_billable": False,
            "duration": 0,
            "project_id": "p1",
        })

        assert result == {"is_billable": False, "duration": 0, "project_id": "p1"}
