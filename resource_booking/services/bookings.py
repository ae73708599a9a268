"""Booking validation gate: interval check, conflict check, then commit."""

from __future__ import annotations

from datetime import datetime

from resource_booking.domain.bus import EventBus
from resource_booking.domain.errors import (
    BookingConflict,
    BookingNotFound,
    InvalidInterval,
    ResourceNotFound,
)
from resource_booking.domain.events import (
    BookingCreated,
    BookingDeleted,
    BookingRejected,
    BookingUpdated,
)
from resource_booking.domain.models import Booking, BookingCreate, BookingUpdate
from resource_booking.repos.memory import BookingRepository, ResourceLocks, ResourceRepository
from resource_booking.services.conflicts import check_conflict, find_conflicts


class BookingService:
    """Creates, updates and deletes bookings without breaking per-resource exclusivity.

    Every create or update goes through the same three steps:

    1. reject an empty or inverted interval (``InvalidInterval``), before any
       other booking is looked at;
    2. under the target resource's lock, reject the write if it overlaps an
       existing booking on that resource (``BookingConflict``);
    3. commit while still holding the lock.

    A missing booking or resource raises ``NotFound``.
    """

    def __init__(
        self,
        resources: ResourceRepository,
        bookings: BookingRepository,
        locks: ResourceLocks,
        bus: EventBus,
    ) -> None:
        self.resources = resources
        self.bookings = bookings
        self.locks = locks
        self.bus = bus

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, booking_id: int) -> Booking:
        booking = self.bookings.get(booking_id)
        if booking is None:
            raise BookingNotFound(booking_id)
        return booking

    def list_all(self) -> list[Booking]:
        return self.bookings.list_all()

    def list_for_resource(self, resource_id: int) -> list[Booking]:
        self._require_resource(resource_id)
        return self.bookings.list_for_resource(resource_id)

    def is_available(
        self,
        resource_id: int,
        start: datetime,
        end: datetime,
        exclude_booking_id: int | None = None,
    ) -> bool:
        """Answer whether ``[start, end)`` could be booked on the resource right now."""
        if end <= start:
            raise InvalidInterval()
        self._require_resource(resource_id)
        return not check_conflict(
            self.bookings, resource_id, start, end, exclude_booking_id=exclude_booking_id
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(self, payload: BookingCreate) -> Booking:
        self._validate_interval(payload.resource_id, payload.start_time, payload.end_time)

        with self.locks.hold(payload.resource_id):
            self._require_resource(payload.resource_id)
            self._reject_conflicts(
                payload.resource_id, payload.start_time, payload.end_time
            )
            booking = Booking(id=self.bookings.next_id(), **payload.model_dump())
            self.bookings.add(booking)

        self.bus.publish(BookingCreated(booking_id=booking.id, resource_id=booking.resource_id))
        return booking

    def update(self, booking_id: int, payload: BookingUpdate) -> Booking:
        changes = payload.changes()

        while True:
            current = self.get(booking_id)
            resource_id = changes.get("resource_id", current.resource_id)

            with self.locks.hold(current.resource_id, resource_id):
                latest = self.get(booking_id)
                if latest.resource_id != current.resource_id:
                    # Moved to another resource while we waited; lock the right pair.
                    continue

                merged = {**latest.model_dump(), **changes}
                self._validate_interval(
                    resource_id,
                    merged["start_time"],
                    merged["end_time"],
                    booking_id=booking_id,
                )
                self._require_resource(resource_id)
                self._reject_conflicts(
                    resource_id,
                    merged["start_time"],
                    merged["end_time"],
                    booking_id=booking_id,
                )
                updated = Booking(**merged)
                self.bookings.update(updated)
            break

        self.bus.publish(
            BookingUpdated(
                booking_id=updated.id,
                resource_id=updated.resource_id,
                changed_fields=sorted(changes),
            )
        )
        return updated

    def delete(self, booking_id: int) -> None:
        """Delete a booking. Deleting can never create a conflict."""
        booking = self.get(booking_id)
        with self.locks.hold(booking.resource_id):
            if not self.bookings.delete(booking_id):
                raise BookingNotFound(booking_id)
        self.bus.publish(BookingDeleted(booking_id=booking_id, resource_id=booking.resource_id))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require_resource(self, resource_id: int) -> None:
        if not self.resources.exists(resource_id):
            raise ResourceNotFound(resource_id)

    def _validate_interval(
        self,
        resource_id: int,
        start: datetime,
        end: datetime,
        booking_id: int | None = None,
    ) -> None:
        if end <= start:
            self.bus.publish(
                BookingRejected(
                    resource_id=resource_id,
                    booking_id=booking_id,
                    reason=InvalidInterval.kind,
                )
            )
            raise InvalidInterval()

    def _reject_conflicts(
        self,
        resource_id: int,
        start: datetime,
        end: datetime,
        booking_id: int | None = None,
    ) -> None:
        conflicts = find_conflicts(
            start,
            end,
            self.bookings.list_for_resource(resource_id),
            exclude_booking_id=booking_id,
        )
        if conflicts:
            conflicting_ids = [b.id for b in conflicts]
            self.bus.publish(
                BookingRejected(
                    resource_id=resource_id,
                    booking_id=booking_id,
                    reason=BookingConflict.kind,
                    conflicting_booking_ids=conflicting_ids,
                )
            )
            raise BookingConflict(resource_id, conflicting_ids)
