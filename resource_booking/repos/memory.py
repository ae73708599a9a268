"""In-memory repositories for resources, bookings and booking history."""

from __future__ import annotations

import itertools
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone

from resource_booking.domain.models import Booking, HistoryEntry, Resource


class ResourceRepository:
    """Dict-backed store for Resource instances, keyed by id."""

    def __init__(self) -> None:
        self._store: dict[int, Resource] = {}
        self._ids = itertools.count(1)

    def next_id(self) -> int:
        return next(self._ids)

    def add(self, resource: Resource) -> None:
        self._store[resource.id] = resource

    def get(self, resource_id: int) -> Resource | None:
        return self._store.get(resource_id)

    def exists(self, resource_id: int) -> bool:
        return resource_id in self._store

    def list_all(self) -> list[Resource]:
        return sorted(self._store.values(), key=lambda r: r.id)

    def delete(self, resource_id: int) -> bool:
        return self._store.pop(resource_id, None) is not None

    def clear(self) -> None:
        self._store.clear()
        self._ids = itertools.count(1)


class BookingRepository:
    """Dict-backed store for Booking instances, keyed by id."""

    def __init__(self) -> None:
        self._store: dict[int, Booking] = {}
        self._ids = itertools.count(1)

    def next_id(self) -> int:
        return next(self._ids)

    def add(self, booking: Booking) -> None:
        self._store[booking.id] = booking

    def update(self, booking: Booking) -> None:
        """Replace the stored booking with the same id."""
        self._store[booking.id] = booking

    def get(self, booking_id: int) -> Booking | None:
        return self._store.get(booking_id)

    def list_all(self) -> list[Booking]:
        return sorted(self._store.values(), key=lambda b: (b.start_time, b.id))

    def list_for_resource(self, resource_id: int) -> list[Booking]:
        return sorted(
            (b for b in self._store.values() if b.resource_id == resource_id),
            key=lambda b: (b.start_time, b.id),
        )

    def delete(self, booking_id: int) -> bool:
        return self._store.pop(booking_id, None) is not None

    def delete_for_resource(self, resource_id: int) -> list[Booking]:
        """Delete every booking on a resource (cascade) and return them."""
        removed = [b for b in self._store.values() if b.resource_id == resource_id]
        for booking in removed:
            del self._store[booking.id]
        return removed

    def clear(self) -> None:
        self._store.clear()
        self._ids = itertools.count(1)


class HistoryRepository:
    """List-backed store for HistoryEntry instances."""

    def __init__(self) -> None:
        self._entries: list[HistoryEntry] = []

    def add(self, entry: HistoryEntry) -> None:
        self._entries.append(entry)

    def list_for_booking(self, booking_id: int) -> list[HistoryEntry]:
        return sorted(
            [e for e in self._entries if e.booking_id == booking_id],
            key=lambda e: e.timestamp,
        )


class ResourceLocks:
    """One lock per resource id: the serialization point for check-then-write."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[int, threading.Lock] = {}

    def for_resource(self, resource_id: int) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(resource_id)
            if lock is None:
                lock = self._locks[resource_id] = threading.Lock()
            return lock

    def discard(self, resource_id: int) -> None:
        """Forget the lock of a deleted resource."""
        with self._guard:
            self._locks.pop(resource_id, None)

    @contextmanager
    def hold(self, *resource_ids: int) -> Iterator[None]:
        """Hold the locks of all given resources, acquired in ascending id order."""
        locks = [self.for_resource(rid) for rid in sorted(set(resource_ids))]
        for lock in locks:
            lock.acquire()
        try:
            yield
        finally:
            for lock in reversed(locks):
                lock.release()


# ---------------------------------------------------------------------------
# Seed data: a few resources and near-future bookings for the dashboard
# ---------------------------------------------------------------------------


def seed_sample_data(resources: ResourceRepository, bookings: BookingRepository) -> None:
    now = datetime.now(timezone.utc).replace(minute=0, second=0, microsecond=0)

    samples = [
        Resource(
            id=resources.next_id(),
            name="Conference Room A",
            description="Projector and whiteboard",
            location="Building 1, Floor 2",
            capacity=12,
        ),
        Resource(
            id=resources.next_id(),
            name="Company Car",
            location="Parking Garage, Bay 4",
            capacity=5,
        ),
        Resource(
            id=resources.next_id(),
            name="Laptop Cart",
            description="20 loaner laptops",
            location="IT Office",
            capacity=20,
            is_available=False,
        ),
    ]
    for resource in samples:
        resources.add(resource)

    room, car = samples[0], samples[1]
    bookings.add(
        Booking(
            id=bookings.next_id(),
            resource_id=room.id,
            start_time=now + timedelta(hours=1),
            end_time=now + timedelta(hours=2),
            booked_by="Dana",
            purpose="Sprint planning",
        )
    )
    bookings.add(
        Booking(
            id=bookings.next_id(),
            resource_id=room.id,
            start_time=now + timedelta(hours=2),
            end_time=now + timedelta(hours=3),
            booked_by="Sam",
            purpose="Design review",
        )
    )
    bookings.add(
        Booking(
            id=bookings.next_id(),
            resource_id=car.id,
            start_time=now + timedelta(days=1, hours=1),
            end_time=now + timedelta(days=1, hours=5),
            booked_by="Alex",
            purpose="Client visit",
        )
    )
