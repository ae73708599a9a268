"""Domain event handlers, wired up at application startup."""

from __future__ import annotations

import logging

from resource_booking.domain.bus import EventBus
from resource_booking.domain.events import (
    BookingCreated,
    BookingDeleted,
    BookingRejected,
    BookingUpdated,
)
from resource_booking.domain.models import HistoryEntry, HistoryEntryType
from resource_booking.repos.memory import BookingRepository, HistoryRepository

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """Wires booking-event handlers to the bus with access to the repositories."""

    def __init__(
        self,
        bus: EventBus,
        booking_repo: BookingRepository,
        history_repo: HistoryRepository,
    ) -> None:
        self.bus = bus
        self.booking_repo = booking_repo
        self.history_repo = history_repo
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(BookingCreated, self.on_booking_created)
        self.bus.subscribe(BookingUpdated, self.on_booking_updated)
        self.bus.subscribe(BookingDeleted, self.on_booking_deleted)
        self.bus.subscribe(BookingRejected, self.on_booking_rejected)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_booking_created(self, event: BookingCreated) -> None:
        stored = self.booking_repo.get(event.booking_id)
        if stored is None:
            return

        logger.info(
            "Booking %s created on resource %s [%s, %s) by %s",
            stored.id,
            stored.resource_id,
            stored.start_time.isoformat(),
            stored.end_time.isoformat(),
            stored.booked_by,
        )
        self.history_repo.add(
            HistoryEntry(
                booking_id=stored.id,
                type=HistoryEntryType.CREATED,
                payload={
                    "resource_id": stored.resource_id,
                    "start_time": stored.start_time.isoformat(),
                    "end_time": stored.end_time.isoformat(),
                },
            )
        )

    def on_booking_updated(self, event: BookingUpdated) -> None:
        logger.info(
            "Booking %s updated on resource %s (fields: %s)",
            event.booking_id,
            event.resource_id,
            ", ".join(event.changed_fields) or "none",
        )
        self.history_repo.add(
            HistoryEntry(
                booking_id=event.booking_id,
                type=HistoryEntryType.UPDATED,
                payload={
                    "resource_id": event.resource_id,
                    "changed_fields": event.changed_fields,
                },
            )
        )

    def on_booking_deleted(self, event: BookingDeleted) -> None:
        logger.info(
            "Booking %s on resource %s deleted (%s)",
            event.booking_id,
            event.resource_id,
            event.reason,
        )
        self.history_repo.add(
            HistoryEntry(
                booking_id=event.booking_id,
                type=HistoryEntryType.DELETED,
                payload={"resource_id": event.resource_id, "reason": event.reason},
            )
        )

    def on_booking_rejected(self, event: BookingRejected) -> None:
        logger.info(
            "Booking %s on resource %s rejected: %s (conflicts with %s)",
            event.booking_id if event.booking_id is not None else "<new>",
            event.resource_id,
            event.reason,
            event.conflicting_booking_ids or "-",
        )
        # Refused creates have no booking to attach history to.
        if event.booking_id is None:
            return

        self.history_repo.add(
            HistoryEntry(
                booking_id=event.booking_id,
                type=HistoryEntryType.REJECTED,
                payload={
                    "resource_id": event.resource_id,
                    "reason": event.reason,
                    "conflicting_booking_ids": event.conflicting_booking_ids,
                },
            )
        )
