"""FastAPI application: entry point for the resource booking service."""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from resource_booking.config import get_settings
from resource_booking.domain.bus import EventBus
from resource_booking.domain.errors import (
    BookingConflict,
    BookingError,
    BookingNotFound,
    InvalidInterval,
    NotFound,
)
from resource_booking.domain.handlers import HandlerRegistry
from resource_booking.domain.models import (
    AvailabilityResponse,
    Booking,
    BookingCreate,
    BookingUpdate,
    BookingWithResource,
    DashboardStats,
    HistoryEntry,
    Resource,
    ResourceCreate,
    ResourceUpdate,
    as_utc,
    utcnow,
)
from resource_booking.logging_setup import add_request_logging, configure_logging
from resource_booking.repos.memory import (
    BookingRepository,
    HistoryRepository,
    ResourceLocks,
    ResourceRepository,
    seed_sample_data,
)
from resource_booking.services.bookings import BookingService
from resource_booking.services.resources import ResourceService
from resource_booking.services.stats import compute_stats

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_title)
add_request_logging(app)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Singletons (created at import time for simplicity) ────────────────
event_bus = EventBus()
resource_repo = ResourceRepository()
booking_repo = BookingRepository()
history_repo = HistoryRepository()
resource_locks = ResourceLocks()

handler_registry = HandlerRegistry(
    bus=event_bus,
    booking_repo=booking_repo,
    history_repo=history_repo,
)
resource_service = ResourceService(resource_repo, booking_repo, resource_locks, event_bus)
booking_service = BookingService(resource_repo, booking_repo, resource_locks, event_bus)

if settings.seed_sample_data:
    seed_sample_data(resource_repo, booking_repo)
    logger.info("Loaded sample data")


# ── Error mapping ─────────────────────────────────────────────────────

_STATUS_BY_ERROR: list[tuple[type[BookingError], int]] = [
    (InvalidInterval, 400),
    (NotFound, 404),
    (BookingConflict, 409),
    (BookingError, 400),
]


def status_for(exc: BookingError) -> int:
    return next(code for error_type, code in _STATUS_BY_ERROR if isinstance(exc, error_type))


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    status_code = status_for(exc)
    logger.info(
        "%s %s rejected with %s: %s", request.method, request.url.path, status_code, exc
    )
    return JSONResponse(status_code=status_code, content={"detail": str(exc), "error": exc.kind})


# ── Routes ────────────────────────────────────────────────────────────

router = APIRouter(prefix=settings.api_prefix)


def _with_resource(booking: Booking, now: datetime) -> BookingWithResource:
    return BookingWithResource(
        booking=booking,
        resource=resource_repo.get(booking.resource_id),
        status=booking.status_at(now),
    )


@router.get("/resources", response_model=list[Resource])
def list_resources() -> list[Resource]:
    return resource_service.list_all()


@router.get("/resources/{resource_id}", response_model=Resource)
def get_resource(resource_id: int) -> Resource:
    return resource_service.get(resource_id)


@router.post("/resources", response_model=Resource, status_code=201)
def create_resource(payload: ResourceCreate) -> Resource:
    return resource_service.create(payload)


@router.put("/resources/{resource_id}", response_model=Resource)
def update_resource(resource_id: int, payload: ResourceUpdate) -> Resource:
    return resource_service.update(resource_id, payload)


@router.delete("/resources/{resource_id}", status_code=204, response_class=Response)
def delete_resource(resource_id: int) -> Response:
    """Delete a resource and, with it, all of its bookings."""
    resource_service.delete(resource_id)
    return Response(status_code=204)


@router.get("/resources/{resource_id}/bookings", response_model=list[BookingWithResource])
def list_resource_bookings(resource_id: int) -> list[BookingWithResource]:
    now = utcnow()
    return [_with_resource(b, now) for b in booking_service.list_for_resource(resource_id)]


@router.get("/resources/{resource_id}/availability", response_model=AvailabilityResponse)
def check_availability(
    resource_id: int,
    start: datetime,
    end: datetime,
    exclude_booking_id: int | None = None,
) -> AvailabilityResponse:
    """Report whether ``[start, end)`` is free on the resource, without booking it."""
    available = booking_service.is_available(
        resource_id, as_utc(start), as_utc(end), exclude_booking_id=exclude_booking_id
    )
    return AvailabilityResponse(resource_id=resource_id, available=available)


@router.get("/bookings", response_model=list[BookingWithResource])
def list_bookings() -> list[BookingWithResource]:
    now = utcnow()
    return [_with_resource(b, now) for b in booking_service.list_all()]


@router.get("/bookings/{booking_id}", response_model=BookingWithResource)
def get_booking(booking_id: int) -> BookingWithResource:
    return _with_resource(booking_service.get(booking_id), utcnow())


@router.get("/bookings/{booking_id}/history", response_model=list[HistoryEntry])
def get_booking_history(booking_id: int) -> list[HistoryEntry]:
    """Return the activity history of a booking, including after it was deleted."""
    entries = history_repo.list_for_booking(booking_id)
    if not entries and booking_repo.get(booking_id) is None:
        raise BookingNotFound(booking_id)
    return entries


@router.post("/bookings", response_model=Booking, status_code=201)
def create_booking(payload: BookingCreate) -> Booking:
    return booking_service.create(payload)


@router.put("/bookings/{booking_id}", response_model=Booking)
def update_booking(booking_id: int, payload: BookingUpdate) -> Booking:
    return booking_service.update(booking_id, payload)


@router.delete("/bookings/{booking_id}", status_code=204, response_class=Response)
def delete_booking(booking_id: int) -> Response:
    booking_service.delete(booking_id)
    return Response(status_code=204)


@router.get("/dashboard/stats", response_model=DashboardStats)
def dashboard_stats(now: datetime | None = None) -> DashboardStats:
    """Summary counts for the dashboard.

    Pass *now* as a query param to control the reference instant.
    """
    current_time = as_utc(now) if now is not None else utcnow()
    return compute_stats(resource_service.list_all(), booking_service.list_all(), current_time)


app.include_router(router)
