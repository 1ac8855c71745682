"""Document store contract for time entries."""
from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional


def strip_unset(fields: Mapping[str, Any]) -> dict:
    """
    Drop fields that carry no value before they are written.

    None values and empty lists are omitted entirely rather than stored, so
    records stay sparse: a running entry has no end_time key at all and an
    entry without tags has no tags key.

    Example:
        >>> strip_unset({"description": None, "tags": [], "is_billable": False})
        {'is_billable': False}
    """
    return {
        key: value
        for key, value in fields.items()
        if value is not None and not (isinstance(value, list) and not value)
    }


class TimeEntryStore(ABC):
    """
    Abstract store of time entry documents keyed by entry id.

    Documents are plain dicts with the entry id under "_id". Every method is
    a suspension point and may raise StoreUnavailable.
    """

    @abstractmethod
    def new_id(self) -> str:
        """Generate an id for a new entry."""

    @abstractmethod
    async def get(self, entry_id: str) -> Optional[dict]:
        """Return the document for entry_id, or None."""

    @abstractmethod
    async def set(self, entry_id: str, doc: Mapping[str, Any]) -> None:
        """Create or replace the document for entry_id."""

    @abstractmethod
    async def update(
        self,
        entry_id: str,
        fields: Mapping[str, Any],
        expect: Optional[Mapping[str, Any]] = None,
    ) -> Optional[dict]:
        """
        Set fields on an existing document.

        When expect is given the write only happens if every expected field
        currently holds the expected value.

        Returns:
            The updated document, or None if the entry is missing or the
            expectation did not hold
        """

    @abstractmethod
    async def query(self, **field_equals: Any) -> list[dict]:
        """Return all documents whose fields equal the given values."""

    @abstractmethod
    async def insert_running(self, doc: Mapping[str, Any]) -> dict:
        """
        Insert a running entry unless its user already has one.

        Raises:
            TimerAlreadyRunning: If another running entry exists for the user
        """

    @abstractmethod
    async def delete(self, entry_id: str) -> int:
        """Delete the document for entry_id and return the number removed."""
