"""
Trip endpoints
==============

POST  /api/v1/trips                   -- book a trip (passenger)
GET   /api/v1/trips?limit=N           -- the actor's trips, newest first
GET   /api/v1/trips/pending           -- unclaimed requests (driver)
GET   /api/v1/trips/active            -- the actor's accepted / in-progress trips
GET   /api/v1/trips/{trip_id}         -- trip details (passenger or driver of the trip)
PATCH /api/v1/trips/{trip_id}/accept  -- claim a pending trip (driver)
PATCH /api/v1/trips/{trip_id}/status  -- move a trip along its lifecycle
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from ridebook.api.dependencies import (
    Actor,
    get_actor,
    get_trip_service,
    require_driver,
    require_passenger,
)
from ridebook.api.middleware import limiter
from ridebook.api.schemas import (
    BookTripRequest,
    Envelope,
    StatusUpdateRequest,
    TripResponse,
)
from ridebook.config import settings
from ridebook.services.trip_lifecycle import TripLifecycleService

router = APIRouter(prefix="/trips", tags=["trips"])


def _envelope(trips) -> dict:
    if isinstance(trips, list):
        return {"success": True, "data": [TripResponse.model_validate(t) for t in trips]}
    return {"success": True, "data": TripResponse.model_validate(trips)}


@router.post(
    "",
    status_code=201,
    response_model=Envelope[TripResponse],
    summary="Book a trip",
)
@limiter.limit(settings.rate_limit)
async def book_trip(
    request: Request,
    body: BookTripRequest,
    actor: Actor = Depends(require_passenger),
    service: TripLifecycleService = Depends(get_trip_service),
):
    trip = await service.book_trip(
        user_id=actor.id,
        from_location_id=body.from_location_id,
        to_location_id=body.to_location_id,
        ride_class=body.ride_class,
        idempotency_key=body.idempotency_key,
    )
    return _envelope(trip)


@router.get(
    "",
    response_model=Envelope[list[TripResponse]],
    summary="List the caller's trips",
)
@limiter.limit(settings.rate_limit)
async def list_trips(
    request: Request,
    limit: Optional[int] = Query(None),
    actor: Actor = Depends(get_actor),
    service: TripLifecycleService = Depends(get_trip_service),
):
    return _envelope(await service.list_trips(actor.id, actor.role, limit))


@router.get(
    "/pending",
    response_model=Envelope[list[TripResponse]],
    summary="List unclaimed trip requests",
)
@limiter.limit(settings.rate_limit)
async def list_pending(
    request: Request,
    actor: Actor = Depends(require_driver),
    service: TripLifecycleService = Depends(get_trip_service),
):
    return _envelope(await service.list_pending())


@router.get(
    "/active",
    response_model=Envelope[list[TripResponse]],
    summary="List the caller's accepted and in-progress trips",
)
@limiter.limit(settings.rate_limit)
async def list_active(
    request: Request,
    actor: Actor = Depends(get_actor),
    service: TripLifecycleService = Depends(get_trip_service),
):
    return _envelope(await service.list_active(actor.id, actor.role))


@router.get(
    "/{trip_id}",
    response_model=Envelope[TripResponse],
    summary="Get trip details",
)
@limiter.limit(settings.rate_limit)
async def get_trip(
    request: Request,
    trip_id: int,
    actor: Actor = Depends(get_actor),
    service: TripLifecycleService = Depends(get_trip_service),
):
    return _envelope(await service.get_trip(trip_id, actor.id))


@router.patch(
    "/{trip_id}/accept",
    response_model=Envelope[TripResponse],
    summary="Accept a pending trip",
    description=(
        "Assigns the calling driver to a PENDING trip.  Exactly one of "
        "several concurrent callers wins; the others get 409."
    ),
)
@limiter.limit(settings.rate_limit)
async def accept_trip(
    request: Request,
    trip_id: int,
    actor: Actor = Depends(require_driver),
    service: TripLifecycleService = Depends(get_trip_service),
):
    return _envelope(await service.accept_trip(trip_id, actor.id))


@router.patch(
    "/{trip_id}/status",
    response_model=Envelope[TripResponse],
    summary="Update trip status",
)
@limiter.limit(settings.rate_limit)
async def update_status(
    request: Request,
    trip_id: int,
    body: StatusUpdateRequest,
    actor: Actor = Depends(get_actor),
    service: TripLifecycleService = Depends(get_trip_service),
):
    return _envelope(await service.update_status(trip_id, actor.id, body.status))
