"""Domain events emitted during the booking lifecycle."""

from __future__ import annotations

from pydantic import BaseModel, Field


class BookingCreated(BaseModel):
    """Fired when a new Booking is persisted."""

    booking_id: int
    resource_id: int


class BookingUpdated(BaseModel):
    """Fired after an existing booking has been rewritten."""

    booking_id: int
    resource_id: int
    changed_fields: list[str]


class BookingDeleted(BaseModel):
    """Fired when a booking is removed, either directly or with its resource."""

    booking_id: int
    resource_id: int
    reason: str = "cancelled"


class BookingRejected(BaseModel):
    """Fired when a create or update is refused.

    ``booking_id`` is only set for updates; a refused create has no id yet.
    """

    resource_id: int
    reason: str
    booking_id: int | None = None
    conflicting_booking_ids: list[int] = Field(default_factory=list)
