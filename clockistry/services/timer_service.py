"""Timer service - business logic for time tracking."""
import logging
import math
from datetime import datetime
from typing import Any, Mapping, Optional, Union

from clockistry.errors import InvalidState, NotFound, TimerAlreadyRunning
from clockistry.events import TimerEventBroker
from clockistry.models.time_entry import (
    EDITABLE_FIELDS,
    STOPPED_EDITABLE_FIELDS,
    TimeEntry,
    TimeEntryCreate,
    TimerStart,
    TimerUpdate,
)
from clockistry.store.base import TimeEntryStore, strip_unset
from clockistry.utils.clock import Clock, ensure_utc, utcnow

logger = logging.getLogger(__name__)


def _whole_seconds(start: datetime, end: datetime) -> int:
    """Floor of the seconds between start and end, never negative."""
    delta = ensure_utc(end) - ensure_utc(start)
    return max(0, math.floor(delta.total_seconds()))


def elapsed_seconds(entry: TimeEntry, now: datetime) -> int:
    """
    Elapsed time of an entry as of now.

    A running entry stores no duration, so it is derived from start_time.
    A stopped entry always reports its stored duration.

    Args:
        entry: Time entry
        now: Current time

    Returns:
        Elapsed whole seconds, clamped to 0 under clock skew
    """
    if not entry.is_running:
        return entry.duration
    return _whole_seconds(entry.start_time, now)


class TimerService:
    """Service for handling time tracking operations."""

    def __init__(
        self,
        store: TimeEntryStore,
        clock: Clock = utcnow,
        events: Optional[TimerEventBroker] = None,
    ):
        """
        Initialize service with a time entry store.

        Args:
            store: Document store holding time entries
            clock: Callable returning the current time
            events: Optional broker notified after every write
        """
        self.store = store
        self.clock = clock
        self.events = events

    def _doc_to_entry(self, doc: dict) -> TimeEntry:
        """
        Convert database document to TimeEntry model.
        """
        return TimeEntry(**doc)

    def _publish(self, event_type: str, entry: TimeEntry) -> None:
        if self.events is None:
            return
        self.events.publish(
            entry.user_id,
            {"type": event_type, "entry": entry.model_dump(mode="json", by_alias=True)},
        )

    async def _get_owned(self, entry_id: str, user_id: Optional[str]) -> TimeEntry:
        doc = await self.store.get(entry_id)
        if doc is None or (user_id is not None and doc["user_id"] != user_id):
            raise NotFound(entry_id)
        return self._doc_to_entry(doc)

    async def get_running_timer(self, user_id: str) -> Optional[TimeEntry]:
        """
        Get the currently running timer, if any.

        Args:
            user_id: User ID

        Returns:
            Current running time entry, or None
        """
        docs = await self.store.query(user_id=user_id, is_running=True)
        if not docs:
            return None
        return self._doc_to_entry(docs[0])

    async def _insert_running(self, user_id: str, doc: dict) -> TimeEntry:
        running = await self.get_running_timer(user_id)
        if running:
            raise TimerAlreadyRunning(user_id, running.id)

        # The store re-checks atomically before inserting
        created = await self.store.insert_running(doc)
        entry = self._doc_to_entry(created)

        logger.info("Started timer %s for user %s", entry.id, user_id)
        self._publish("started", entry)
        return entry

    async def start_timer(
        self,
        user_id: str,
        fields: Union[TimerStart, Mapping[str, Any], None] = None,
    ) -> TimeEntry:
        """
        Start a new timer.

        Args:
            user_id: User ID
            fields: Optional labels (project, client, description, tags,
                is_billable)

        Returns:
            Created time entry

        Raises:
            TimerAlreadyRunning: If the user already has a running timer
        """
        if fields is None:
            fields = TimerStart()
        elif not isinstance(fields, TimerStart):
            fields = TimerStart.model_validate(dict(fields))

        now = self.clock()
        entry_doc = strip_unset({
            **fields.model_dump(),
            "_id": self.store.new_id(),
            "user_id": user_id,
            "start_time": now,
            "duration": 0,
            "is_running": True,
            "created_at": now,
            "updated_at": now,
        })

        return await self._insert_running(user_id, entry_doc)

    async def update_timer(
        self,
        entry_id: str,
        update: Union[TimerUpdate, Mapping[str, Any]],
        user_id: Optional[str] = None,
    ) -> TimeEntry:
        """
        Update the editable fields of a time entry.

        Only labels, description, tags and is_billable can change here. Start
        time, end time, duration and running state are ignored if passed.
        After stop only project_id, description, tags and is_billable change.
        An update that carries no values writes nothing.

        Args:
            entry_id: Time entry ID
            update: Partial update
            user_id: If given, the entry must belong to this user

        Returns:
            Updated time entry

        Raises:
            NotFound: If entry not found
        """
        if not isinstance(update, TimerUpdate):
            update = TimerUpdate.model_validate(dict(update))

        existing = await self._get_owned(entry_id, user_id)

        editable = EDITABLE_FIELDS if existing.is_running else STOPPED_EDITABLE_FIELDS
        update_doc = strip_unset(update.model_dump(include=set(editable)))
        if not update_doc:
            logger.debug("Empty update for time entry %s", entry_id)
            return existing

        update_doc["updated_at"] = self.clock()

        updated_doc = await self.store.update(entry_id, update_doc)
        if updated_doc is None:
            raise NotFound(entry_id)

        entry = self._doc_to_entry(updated_doc)
        self._publish("updated", entry)
        return entry

    async def stop_timer(
        self,
        entry_id: str,
        user_id: Optional[str] = None,
        update: Union[TimerUpdate, Mapping[str, Any], None] = None,
    ) -> TimeEntry:
        """
        Stop a running timer.

        The entry is re-read so the duration is always computed from the
        stored start time. Stopping an entry that is already stopped returns
        it unchanged.

        Args:
            entry_id: Time entry ID
            user_id: If given, the entry must belong to this user
            update: Optional editable fields written together with the stop

        Returns:
            Stopped time entry with end_time and duration

        Raises:
            NotFound: If entry not found
        """
        existing = await self._get_owned(entry_id, user_id)

        if not existing.is_running:
            logger.debug("Time entry %s already stopped", entry_id)
            return existing

        update_doc = {}
        if update is not None:
            if not isinstance(update, TimerUpdate):
                update = TimerUpdate.model_validate(dict(update))
            update_doc = strip_unset(update.model_dump(include=set(EDITABLE_FIELDS)))

        end_time = self.clock()
        update_doc.update({
            "end_time": end_time,
            "duration": _whole_seconds(existing.start_time, end_time),
            "is_running": False,
            "updated_at": end_time,
        })

        updated_doc = await self.store.update(
            entry_id, update_doc, expect={"is_running": True}
        )
        if updated_doc is None:
            # Stopped (or deleted) by someone else since the read above
            return await self._get_owned(entry_id, user_id)

        entry = self._doc_to_entry(updated_doc)
        logger.info(
            "Stopped timer %s for user %s after %ss", entry.id, entry.user_id, entry.duration
        )
        self._publish("stopped", entry)
        return entry

    async def stop_running_timer(self, user_id: str) -> TimeEntry:
        """
        Stop the currently running timer.

        Args:
            user_id: User ID

        Returns:
            Stopped time entry

        Raises:
            NotFound: If no timer is running
        """
        running = await self.get_running_timer(user_id)
        if not running:
            raise NotFound(message="No timer running")

        return await self.stop_timer(running.id, user_id=user_id)

    async def get_entry(self, entry_id: str, user_id: Optional[str] = None) -> TimeEntry:
        """
        Get a time entry by ID.

        Raises:
            NotFound: If entry not found
        """
        return await self._get_owned(entry_id, user_id)

    async def list_entries(
        self,
        user_id: str,
        project_id: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> list[TimeEntry]:
        """
        List time entries for a user with optional filtering.

        Args:
            user_id: User ID
            project_id: Optional project filter
            start_date: Optional lower bound on start_time
            end_date: Optional upper bound on start_time

        Returns:
            List of time entries, newest first
        """
        query = {"user_id": user_id}
        if project_id:
            query["project_id"] = project_id

        entries = [self._doc_to_entry(doc) for doc in await self.store.query(**query)]

        if start_date:
            start_date = ensure_utc(start_date)
            entries = [e for e in entries if ensure_utc(e.start_time) >= start_date]
        if end_date:
            end_date = ensure_utc(end_date)
            entries = [e for e in entries if ensure_utc(e.start_time) <= end_date]

        return sorted(entries, key=lambda e: ensure_utc(e.created_at), reverse=True)

    async def create_entry(
        self,
        user_id: str,
        entry_create: TimeEntryCreate,
    ) -> TimeEntry:
        """
        Create a manual time entry.

        An entry without end_time is created running and is subject to the
        same single running timer rule as start_timer.

        Args:
            user_id: User ID
            entry_create: Time entry creation data

        Returns:
            Created time entry

        Raises:
            InvalidState: If end_time is before start_time
            TimerAlreadyRunning: If a running entry is requested while one exists
        """
        start_time = ensure_utc(entry_create.start_time)
        end_time = ensure_utc(entry_create.end_time) if entry_create.end_time else None

        if end_time is not None and end_time < start_time:
            raise InvalidState("End time must not be before start time")

        now = self.clock()
        labels = entry_create.model_dump(exclude={"start_time", "end_time"})
        entry_doc = strip_unset({
            **labels,
            "_id": self.store.new_id(),
            "user_id": user_id,
            "start_time": start_time,
            "end_time": end_time,
            "duration": _whole_seconds(start_time, end_time) if end_time else 0,
            "is_running": end_time is None,
            "created_at": now,
            "updated_at": now,
        })

        if end_time is None:
            return await self._insert_running(user_id, entry_doc)

        await self.store.set(entry_doc["_id"], entry_doc)
        entry = self._doc_to_entry(entry_doc)
        self._publish("created", entry)
        return entry

    async def delete_entry(
        self,
        entry_id: str,
        user_id: Optional[str] = None,
    ) -> dict:
        """
        Delete a time entry.

        Args:
            entry_id: Time entry ID
            user_id: If given, the entry must belong to this user

        Returns:
            Dictionary with deleted_count

        Raises:
            NotFound: If entry not found
        """
        existing = await self._get_owned(entry_id, user_id)

        # Delete (hard delete for time entries)
        deleted_count = await self.store.delete(entry_id)

        self._publish("deleted", existing)
        return {"deleted_count": deleted_count}
