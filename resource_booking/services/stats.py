"""Dashboard statistics over resources and bookings."""

from __future__ import annotations

from datetime import datetime, timedelta

from resource_booking.domain.models import Booking, BookingStatus, DashboardStats, Resource


def compute_stats(
    resources: list[Resource],
    bookings: list[Booking],
    now: datetime,
) -> DashboardStats:
    """Summarize the store as of *now*.

    "Today" is the calendar day of *now* in *now*'s own timezone.
    """
    day_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    day_end = day_start + timedelta(days=1)

    return DashboardStats(
        total_resources=len(resources),
        available_now=sum(1 for r in resources if r.is_available),
        today_bookings=sum(1 for b in bookings if day_start <= b.start_time < day_end),
        upcoming_bookings=sum(
            1 for b in bookings if b.status_at(now) == BookingStatus.UPCOMING
        ),
    )
