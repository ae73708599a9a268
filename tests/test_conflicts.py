"""Tests for the conflict-detection service."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from resource_booking.domain.models import Booking
from resource_booking.repos.memory import BookingRepository
from resource_booking.services.conflicts import (
    check_conflict,
    find_conflicts,
    intervals_overlap,
)


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime(2025, 1, 1, hour, minute, tzinfo=timezone.utc)


def _make_booking(
    start: datetime, end: datetime, booking_id: int = 1, resource_id: int = 1
) -> Booking:
    return Booking(
        id=booking_id,
        resource_id=resource_id,
        start_time=start,
        end_time=end,
        booked_by="tester",
        purpose="Existing",
    )


@pytest.fixture()
def bookings() -> BookingRepository:
    """Resource 1 holds a single booking, id=5, over [10:00, 11:00)."""
    repo = BookingRepository()
    repo.add(_make_booking(_at(10), _at(11), booking_id=5, resource_id=1))
    return repo


# ---------------------------------------------------------------------------
# Overlap predicate
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("start_b", "end_b", "expected"),
    [
        (_at(11), _at(12), False),  # abuts after
        (_at(9), _at(10), False),  # abuts before
        (_at(10, 59), _at(12), True),  # one minute shared at the end
        (_at(9), _at(10, 1), True),  # one minute shared at the start
        (_at(9), _at(12), True),  # encloses
        (_at(10, 15), _at(10, 45), True),  # enclosed
        (_at(10), _at(11), True),  # identical
        (_at(12), _at(13), False),  # disjoint
    ],
)
def test_intervals_overlap_half_open(start_b, end_b, expected):
    assert intervals_overlap(_at(10), _at(11), start_b, end_b) is expected


@pytest.mark.parametrize(
    ("start_b", "end_b"),
    [
        (_at(11), _at(12)),
        (_at(10, 59), _at(12)),
        (_at(9), _at(12)),
        (_at(9), _at(10)),
    ],
)
def test_intervals_overlap_is_symmetric(start_b, end_b):
    assert intervals_overlap(_at(10), _at(11), start_b, end_b) == intervals_overlap(
        start_b, end_b, _at(10), _at(11)
    )


# ---------------------------------------------------------------------------
# find_conflicts
# ---------------------------------------------------------------------------


def test_no_overlap():
    """Bookings that don't overlap should not be returned as conflicts."""
    existing = [_make_booking(_at(8), _at(9))]
    assert find_conflicts(_at(10), _at(11), existing) == []


def test_partial_overlap():
    """A booking that partially overlaps should be returned as a conflict."""
    existing = [_make_booking(_at(9), _at(10, 30))]
    conflicts = find_conflicts(_at(10), _at(11), existing)
    assert len(conflicts) == 1
    assert conflicts[0].start_time == _at(9)


def test_exact_boundary_no_conflict():
    """When existing.end_time == new_start, there is no conflict (boundary touch)."""
    existing = [_make_booking(_at(9), _at(10))]
    assert find_conflicts(_at(10), _at(11), existing) == []


def test_find_conflicts_skips_excluded_booking():
    existing = [
        _make_booking(_at(9), _at(10, 30), booking_id=1),
        _make_booking(_at(10, 30), _at(12), booking_id=2),
    ]
    conflicts = find_conflicts(_at(10), _at(11), existing, exclude_booking_id=1)
    assert [b.id for b in conflicts] == [2]


# ---------------------------------------------------------------------------
# check_conflict
# ---------------------------------------------------------------------------


def test_check_conflict_empty_resource():
    assert check_conflict(BookingRepository(), 1, _at(10), _at(11)) is False


def test_check_conflict_exact_abutment(bookings):
    assert check_conflict(bookings, 1, _at(11), _at(12)) is False
    assert check_conflict(bookings, 1, _at(9), _at(10)) is False


def test_check_conflict_overlap_by_one_minute(bookings):
    assert check_conflict(bookings, 1, _at(10, 59), _at(12)) is True
    assert check_conflict(bookings, 1, _at(9), _at(10, 1)) is True


def test_check_conflict_enclosure(bookings):
    assert check_conflict(bookings, 1, _at(9), _at(12)) is True


def test_check_conflict_other_resource_never_conflicts(bookings):
    assert check_conflict(bookings, 2, _at(10), _at(11)) is False


def test_check_conflict_self_exclusion(bookings):
    assert check_conflict(bookings, 1, _at(10, 30), _at(11, 30), exclude_booking_id=5) is False
    assert check_conflict(bookings, 1, _at(10, 30), _at(11, 30)) is True


def test_check_conflict_exclusion_only_removes_that_booking(bookings):
    bookings.add(_make_booking(_at(11, 15), _at(12), booking_id=6, resource_id=1))
    assert check_conflict(bookings, 1, _at(10, 30), _at(11, 30), exclude_booking_id=5) is True


def test_check_conflict_is_idempotent(bookings):
    results = {check_conflict(bookings, 1, _at(10, 30), _at(12)) for _ in range(5)}
    assert results == {True}
    assert len(bookings.list_for_resource(1)) == 1
