"""Time entry model definitions."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

# Fields a caller may change on a running entry. Everything else is owned by
# the start/stop operations.
EDITABLE_FIELDS = (
    "project_id",
    "project_name",
    "description",
    "is_billable",
    "tags",
    "client_id",
    "client_name",
)

# Once stopped, only these stay editable; the denormalized project/client
# names and client id are frozen with the terminal state.
STOPPED_EDITABLE_FIELDS = (
    "project_id",
    "description",
    "is_billable",
    "tags",
)


class TimeEntryLabels(BaseModel):
    """Denormalized labels shared by entry payloads."""

    company_id: Optional[str] = None
    project_id: Optional[str] = None
    project_name: Optional[str] = None
    client_id: Optional[str] = None
    client_name: Optional[str] = None
    description: Optional[str] = None


class TimerStart(TimeEntryLabels):
    """Fields accepted when starting a timer."""

    is_billable: bool = False
    tags: list[str] = Field(default_factory=list)

    @field_validator("is_billable", "tags", mode="before")
    @classmethod
    def _none_means_default(cls, value, info):
        """Treat an explicit null like an omitted field."""
        if value is not None:
            return value
        return False if info.field_name == "is_billable" else []


class TimeEntryCreate(TimerStart):
    """Manual time entry creation model."""

    start_time: datetime
    end_time: Optional[datetime] = None


class TimerUpdate(BaseModel):
    """
    Partial update of a time entry.

    Unknown keys (start_time, duration, is_running, ...) are dropped on
    validation, so they can never reach the store through this model.
    """

    project_id: Optional[str] = None
    project_name: Optional[str] = None
    description: Optional[str] = None
    is_billable: Optional[bool] = None
    tags: Optional[list[str]] = None
    client_id: Optional[str] = None
    client_name: Optional[str] = None

    model_config = {"extra": "ignore"}


class TimeEntry(TimeEntryLabels):
    """Full time entry model with database fields."""

    id: str = Field(alias="_id", serialization_alias="id")
    user_id: str
    start_time: datetime
    end_time: Optional[datetime] = None
    duration: int = Field(default=0, ge=0)
    is_running: bool
    is_billable: bool = False
    tags: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = {"populate_by_name": True}


class TimerStatus(BaseModel):
    """Running timer together with its live elapsed time."""

    entry: TimeEntry
    elapsed_seconds: int
