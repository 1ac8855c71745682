"""Time helpers shared by tests."""
from datetime import datetime, timedelta, timezone

EPOCH = datetime(2025, 11, 3, 9, 0, tzinfo=timezone.utc)


def at(seconds: float) -> datetime:
    """Datetime `seconds` after a fixed test epoch."""
    return EPOCH + timedelta(seconds=seconds)


class FakeClock:
    """Controllable clock; call it to read the time."""

    def __init__(self, start: datetime = EPOCH):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def set(self, seconds: float) -> None:
        self.now = at(seconds)

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)
