"""Service for detecting booking conflicts on a single resource.

Intervals are half-open, ``[start, end)``: a booking ending at 14:00 does not
conflict with one starting at 14:00. The usual three overlap cases (the
candidate starts inside an existing booking, ends inside one, or encloses
one) are all covered by the single inequality in :func:`intervals_overlap`.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from resource_booking.domain.models import Booking
from resource_booking.repos.memory import BookingRepository


def intervals_overlap(
    start_a: datetime,
    end_a: datetime,
    start_b: datetime,
    end_b: datetime,
) -> bool:
    """Return True if ``[start_a, end_a)`` and ``[start_b, end_b)`` share an instant."""
    return start_a < end_b and start_b < end_a


def _candidates(
    existing: Iterable[Booking], exclude_booking_id: int | None
) -> Iterable[Booking]:
    return (b for b in existing if exclude_booking_id is None or b.id != exclude_booking_id)


def find_conflicts(
    new_start: datetime,
    new_end: datetime,
    existing_bookings: Iterable[Booking],
    exclude_booking_id: int | None = None,
) -> list[Booking]:
    """Return existing bookings that overlap with the given time range."""
    return [
        booking
        for booking in _candidates(existing_bookings, exclude_booking_id)
        if intervals_overlap(new_start, new_end, booking.start_time, booking.end_time)
    ]


def check_conflict(
    bookings: BookingRepository,
    resource_id: int,
    start: datetime,
    end: datetime,
    exclude_booking_id: int | None = None,
) -> bool:
    """Return True if any booking on *resource_id* overlaps ``[start, end)``.

    Pass ``exclude_booking_id`` when re-checking a booking that is being
    updated, so it is not compared against itself. The caller is responsible
    for checking that the resource exists and that ``end > start``.
    """
    return any(
        intervals_overlap(start, end, booking.start_time, booking.end_time)
        for booking in _candidates(
            bookings.list_for_resource(resource_id), exclude_booking_id
        )
    )
