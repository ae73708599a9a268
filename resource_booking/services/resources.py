"""Service for managing bookable resources."""

from __future__ import annotations

import logging

from resource_booking.domain.bus import EventBus
from resource_booking.domain.errors import ResourceNotFound
from resource_booking.domain.events import BookingDeleted
from resource_booking.domain.models import Resource, ResourceCreate, ResourceUpdate
from resource_booking.repos.memory import BookingRepository, ResourceLocks, ResourceRepository

logger = logging.getLogger(__name__)


class ResourceService:
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

    def get(self, resource_id: int) -> Resource:
        resource = self.resources.get(resource_id)
        if resource is None:
            raise ResourceNotFound(resource_id)
        return resource

    def list_all(self) -> list[Resource]:
        return self.resources.list_all()

    def create(self, payload: ResourceCreate) -> Resource:
        resource = Resource(id=self.resources.next_id(), **payload.model_dump())
        self.resources.add(resource)
        logger.info("Resource %s created (%s)", resource.id, resource.name)
        return resource

    def update(self, resource_id: int, payload: ResourceUpdate) -> Resource:
        with self.locks.hold(resource_id):
            current = self.get(resource_id)
            updated = Resource(**{**current.model_dump(), **payload.changes()})
            self.resources.add(updated)
        logger.info("Resource %s updated", resource_id)
        return updated

    def delete(self, resource_id: int) -> None:
        """Delete a resource together with every booking that references it."""
        with self.locks.hold(resource_id):
            if not self.resources.delete(resource_id):
                raise ResourceNotFound(resource_id)
            removed = self.bookings.delete_for_resource(resource_id)
        self.locks.discard(resource_id)

        logger.info("Resource %s deleted with %d booking(s)", resource_id, len(removed))
        for booking in removed:
            self.bus.publish(
                BookingDeleted(
                    booking_id=booking.id,
                    resource_id=resource_id,
                    reason="resource_deleted",
                )
            )
