"""Errors raised when a booking or resource mutation is rejected."""

from __future__ import annotations


class BookingError(Exception):
    """Base class for expected, user-facing rejections."""

    kind = "booking_error"


class InvalidInterval(BookingError):
    kind = "invalid_interval"

    def __init__(self, message: str = "End time must be after start time") -> None:
        super().__init__(message)


class BookingConflict(BookingError):
    kind = "conflict"

    def __init__(self, resource_id: int, conflicting_ids: list[int] | None = None) -> None:
        super().__init__(
            "This resource is already booked during the requested time. "
            "Please choose another slot or resource, or adjust your times."
        )
        self.resource_id = resource_id
        self.conflicting_ids = conflicting_ids or []


class NotFound(BookingError):
    kind = "not_found"


class ResourceNotFound(NotFound):
    def __init__(self, resource_id: int) -> None:
        super().__init__("Resource not found")
        self.resource_id = resource_id


class BookingNotFound(NotFound):
    def __init__(self, booking_id: int) -> None:
        super().__init__("Booking not found")
        self.booking_id = booking_id
