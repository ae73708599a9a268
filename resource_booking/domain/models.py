"""Domain models for resources, bookings and their activity history."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

try:
    from enum import StrEnum
except ImportError:  # pragma: no cover - fallback for older Python runtimes

    class StrEnum(str, Enum):
        pass


class BookingStatus(StrEnum):
    UPCOMING = "upcoming"
    ACTIVE = "active"
    COMPLETED = "completed"


class HistoryEntryType(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    REJECTED = "rejected"
    DELETED = "deleted"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so stored and candidate instants compare."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


def _new_id() -> str:
    return str(uuid.uuid4())


class CamelModel(BaseModel):
    """Base for API-facing models: camelCase on the wire, snake_case in code."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class Resource(CamelModel):
    id: int
    name: str = Field(min_length=1)
    description: str | None = None
    location: str
    capacity: int = Field(gt=0)
    is_available: bool = True


class Booking(CamelModel):
    id: int
    resource_id: int
    start_time: UtcDatetime
    end_time: UtcDatetime
    booked_by: str = Field(min_length=1)
    purpose: str

    @model_validator(mode="after")
    def _end_after_start(self) -> Booking:
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self

    def status_at(self, now: datetime) -> BookingStatus:
        """Where *now* falls relative to the booking's half-open interval."""
        if self.start_time > now:
            return BookingStatus.UPCOMING
        if now < self.end_time:
            return BookingStatus.ACTIVE
        return BookingStatus.COMPLETED


class HistoryEntry(BaseModel):
    id: str = Field(default_factory=_new_id)
    booking_id: int
    timestamp: datetime = Field(default_factory=utcnow)
    type: HistoryEntryType
    payload: dict = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class ResourceCreate(CamelModel):
    name: str = Field(min_length=1)
    description: str | None = None
    location: str
    capacity: int = Field(gt=0)
    is_available: bool = True


class ResourceUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    location: str | None = None
    capacity: int | None = Field(default=None, gt=0)
    is_available: bool | None = None

    def changes(self) -> dict:
        """Fields the client actually sent; ``description`` may be cleared."""
        sent = self.model_dump(exclude_unset=True)
        return {k: v for k, v in sent.items() if v is not None or k == "description"}


class BookingCreate(CamelModel):
    """Incoming booking.

    The interval is not validated here. The booking service reports an
    inverted or empty interval as ``InvalidInterval``.
    """

    resource_id: int
    start_time: UtcDatetime
    end_time: UtcDatetime
    booked_by: str = Field(min_length=1)
    purpose: str


class BookingUpdate(CamelModel):
    resource_id: int | None = None
    start_time: UtcDatetime | None = None
    end_time: UtcDatetime | None = None
    booked_by: str | None = Field(default=None, min_length=1)
    purpose: str | None = None

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude_none=True)


class BookingWithResource(CamelModel):
    booking: Booking
    resource: Resource | None = None
    status: BookingStatus


class AvailabilityResponse(CamelModel):
    resource_id: int
    available: bool


class DashboardStats(CamelModel):
    total_resources: int
    available_now: int
    today_bookings: int
    upcoming_bookings: int
