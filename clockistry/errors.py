"""Timer error taxonomy."""
from typing import Optional


class TimerError(Exception):
    """Base class for timer lifecycle errors."""


class TimerAlreadyRunning(TimerError):
    """Raised when a user tries to start a second running timer."""

    def __init__(self, user_id: str, entry_id: Optional[str] = None):
        self.user_id = user_id
        self.entry_id = entry_id
        super().__init__(
            "Timer already running. Stop the current timer before starting a new one."
        )


class NotFound(TimerError):
    """Raised when a time entry does not exist (or belongs to another user)."""

    def __init__(self, entry_id: Optional[str] = None, message: str = "Time entry not found"):
        self.entry_id = entry_id
        super().__init__(message)


class StoreUnavailable(TimerError):
    """Raised when the document store cannot be reached or times out."""


class InvalidState(TimerError):
    """Raised when an entry would end up with an impossible time range."""
