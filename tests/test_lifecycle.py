"""Tests for the event bus lifecycle: handlers, history, logging."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import pytest

from resource_booking.domain.bus import EventBus
from resource_booking.domain.events import (
    BookingCreated,
    BookingDeleted,
    BookingRejected,
    BookingUpdated,
)
from resource_booking.domain.handlers import HandlerRegistry
from resource_booking.domain.models import Booking, HistoryEntryType
from resource_booking.repos.memory import BookingRepository, HistoryRepository

_NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def env():
    """Fresh bus + repos + registry for each test."""
    bus = EventBus()
    booking_repo = BookingRepository()
    history_repo = HistoryRepository()
    registry = HandlerRegistry(bus=bus, booking_repo=booking_repo, history_repo=history_repo)

    class Env:
        pass

    e = Env()
    e.bus = bus
    e.booking_repo = booking_repo
    e.history_repo = history_repo
    e.registry = registry
    return e


def _make_booking(**overrides) -> Booking:
    defaults = dict(
        id=1,
        resource_id=1,
        start_time=_NOW + timedelta(days=1),
        end_time=_NOW + timedelta(days=1, hours=1),
        booked_by="alice",
        purpose="Planning",
    )
    defaults.update(overrides)
    return Booking(**defaults)


def test_bus_calls_handlers_in_order():
    bus = EventBus()
    calls: list[str] = []
    bus.subscribe(BookingCreated, lambda e: calls.append("first"))
    bus.subscribe(BookingCreated, lambda e: calls.append("second"))
    bus.subscribe(BookingDeleted, lambda e: calls.append("other"))

    bus.publish(BookingCreated(booking_id=1, resource_id=1))

    assert calls == ["first", "second"]


def test_created_records_history(env):
    booking = _make_booking()
    env.booking_repo.add(booking)

    env.bus.publish(BookingCreated(booking_id=booking.id, resource_id=booking.resource_id))

    entries = env.history_repo.list_for_booking(booking.id)
    assert [e.type for e in entries] == [HistoryEntryType.CREATED]
    assert entries[0].payload["resource_id"] == 1


def test_created_for_missing_booking_is_ignored(env):
    env.bus.publish(BookingCreated(booking_id=99, resource_id=1))
    assert env.history_repo.list_for_booking(99) == []


def test_full_history_order(env):
    booking = _make_booking()
    env.booking_repo.add(booking)

    env.bus.publish(BookingCreated(booking_id=1, resource_id=1))
    env.bus.publish(BookingUpdated(booking_id=1, resource_id=1, changed_fields=["purpose"]))
    env.bus.publish(
        BookingRejected(
            booking_id=1, resource_id=1, reason="conflict", conflicting_booking_ids=[2]
        )
    )
    env.bus.publish(BookingDeleted(booking_id=1, resource_id=1))

    types = [e.type for e in env.history_repo.list_for_booking(1)]
    assert types == [
        HistoryEntryType.CREATED,
        HistoryEntryType.UPDATED,
        HistoryEntryType.REJECTED,
        HistoryEntryType.DELETED,
    ]


def test_rejected_create_has_no_history(env):
    env.bus.publish(BookingRejected(resource_id=1, reason="invalid_interval"))
    assert env.history_repo._entries == []


def test_rejection_is_logged(env, caplog):
    with caplog.at_level(logging.INFO, logger="resource_booking"):
        env.bus.publish(
            BookingRejected(resource_id=3, reason="conflict", conflicting_booking_ids=[7])
        )
    assert "rejected: conflict" in caplog.text


def test_deleted_reason_recorded(env):
    env.bus.publish(BookingDeleted(booking_id=4, resource_id=2, reason="resource_deleted"))
    entries = env.history_repo.list_for_booking(4)
    assert entries[0].payload == {"resource_id": 2, "reason": "resource_deleted"}
