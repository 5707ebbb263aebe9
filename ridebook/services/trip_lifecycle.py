"""
Trip Lifecycle Service
======================

Orchestrates booking, acceptance and status changes for trips.

    pending --accept--> accepted --> in_progress --> completed
       |                   |
       +----> cancelled <--+

Every method works inside the caller's unit of work (one ``AsyncSession``
per HTTP request); committing is the caller's job.  Failures are raised as
``ridebook.domain.errors`` exceptions.

Concurrency safety
------------------
``accept_trip`` never reads before it writes: it issues one conditional
``UPDATE`` (see ``TripRepository.claim_pending``) so two drivers racing for
the same request cannot both win.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional, Union

from ridebook.domain.distance import lookup_distance
from ridebook.domain.entities import FareQuote, check_transition, parse_status
from ridebook.domain.enums import (
    ACTIVE_STATUSES,
    TERMINAL_STATUSES,
    ActorRole,
    RideClass,
    TripStatus,
)
from ridebook.domain.errors import (
    IdempotencyConflict,
    InvalidInput,
    InvalidLocation,
    InvalidTransition,
    SameLocation,
    TripNotFound,
    TripNotPending,
    Unauthorized,
)
from ridebook.domain.pricing import FareCalculator, parse_ride_class
from ridebook.infrastructure.location_store import LocationStore
from ridebook.infrastructure.models import TripModel, utcnow
from ridebook.infrastructure.repositories import TripRepository

logger = logging.getLogger(__name__)


def parse_role(value: Union[str, ActorRole]) -> ActorRole:
    try:
        return ActorRole(value)
    except ValueError:
        raise InvalidInput(f"Unknown actor role: {value!r}") from None


class TripLifecycleService:
    def __init__(
        self,
        trips: TripRepository,
        locations: LocationStore,
        fares: FareCalculator,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.trips = trips
        self.locations = locations
        self.fares = fares
        self.clock = clock

    # ── Pricing ───────────────────────────────────────────────────────

    async def quote_fare(
        self,
        from_location_id: int,
        to_location_id: int,
        ride_class: Union[str, RideClass],
    ) -> FareQuote:
        """Price a route without booking it."""
        if from_location_id == to_location_id:
            raise SameLocation("Pickup and destination cannot be the same")

        ride_class = parse_ride_class(ride_class)

        from_location = await self.locations.get_location(from_location_id)
        if from_location is None:
            raise InvalidLocation("Invalid pickup location")
        if await self.locations.get_location(to_location_id) is None:
            raise InvalidLocation("Invalid destination location")

        distance = lookup_distance(from_location, to_location_id)
        return self.fares.compute_fare(distance, ride_class)

    # ── Passenger operations ──────────────────────────────────────────

    async def book_trip(
        self,
        user_id: int,
        from_location_id: int,
        to_location_id: int,
        ride_class: Union[str, RideClass],
        idempotency_key: Optional[str] = None,
    ) -> TripModel:
        """
        Create a ``pending`` trip with no driver.

        Raises:
            SameLocation: pickup equals destination
            InvalidRideClass: unknown vehicle category
            InvalidLocation: either location is not in the store
            DistanceNotFound: the distance table has no usable entry

        An ``idempotency_key`` is scoped to *user_id*: replaying it returns
        that passenger's earlier trip, never another passenger's.
        """
        if idempotency_key:
            existing = await self.trips.get_by_idempotency_key(user_id, idempotency_key)
            if existing is not None:
                return existing

        quote = await self.quote_fare(from_location_id, to_location_id, ride_class)
        try:
            trip = await self.trips.create(
                user_id=user_id,
                from_location_id=from_location_id,
                to_location_id=to_location_id,
                ride_class=quote.ride_class,
                distance_km=quote.distance_km,
                fare=quote.total_price,
                idempotency_key=idempotency_key,
            )
        except IdempotencyConflict:
            # a concurrent request with the same key committed first
            existing = await self.trips.get_by_idempotency_key(user_id, idempotency_key)
            if existing is None:
                raise
            logger.info(
                "Trip %s replayed for user %s (idempotency key %r)",
                existing.id, user_id, idempotency_key,
            )
            return existing

        logger.info(
            "Trip %s booked by user %s: %s -> %s (%s, fare=%s)",
            trip.id, user_id, from_location_id, to_location_id,
            quote.ride_class.value, quote.total_price,
        )
        return trip

    # ── Queries ───────────────────────────────────────────────────────

    async def list_trips(
        self,
        actor_id: int,
        role: Union[str, ActorRole],
        limit: Optional[int] = None,
    ) -> list[TripModel]:
        """Trips the actor booked (passenger) or drives (driver), newest first."""
        if limit is not None and limit <= 0:
            raise InvalidInput("limit must be a positive integer")
        if parse_role(role) is ActorRole.DRIVER:
            return await self.trips.list_for_driver(actor_id, limit=limit)
        return await self.trips.list_for_user(actor_id, limit=limit)

    async def list_pending(self) -> list[TripModel]:
        return await self.trips.list_by_status(TripStatus.PENDING)

    async def list_active(
        self, actor_id: int, role: Union[str, ActorRole]
    ) -> list[TripModel]:
        if parse_role(role) is ActorRole.DRIVER:
            return await self.trips.list_for_driver(actor_id, statuses=ACTIVE_STATUSES)
        return await self.trips.list_for_user(actor_id, statuses=ACTIVE_STATUSES)

    async def get_trip(self, trip_id: int, actor_id: int) -> TripModel:
        trip = await self.trips.get_by_id(trip_id)
        if trip is None:
            raise TripNotFound("Trip not found")
        self._ensure_party(trip, actor_id)
        return trip

    # ── Driver operations ─────────────────────────────────────────────

    async def accept_trip(self, trip_id: int, driver_id: int) -> TripModel:
        if await self.trips.claim_pending(trip_id, driver_id):
            trip = await self.trips.get_by_id(trip_id, refresh=True)
            logger.info("Trip %s accepted by driver %s", trip_id, driver_id)
            return trip

        trip = await self.trips.get_by_id(trip_id, refresh=True)
        if trip is None:
            raise TripNotFound("Trip not found")
        logger.info(
            "Driver %s could not accept trip %s (status=%s)",
            driver_id, trip_id, trip.status.value,
        )
        raise TripNotPending("Trip is no longer available")

    # ── Shared ────────────────────────────────────────────────────────

    async def update_status(
        self,
        trip_id: int,
        actor_id: int,
        new_status: Union[str, TripStatus],
    ) -> TripModel:
        trip = await self.trips.get_by_id(trip_id)
        if trip is None:
            raise TripNotFound("Trip not found")
        self._ensure_party(trip, actor_id)

        target = parse_status(new_status)
        if target is TripStatus.ACCEPTED:
            raise InvalidTransition("Trips can only be accepted by a driver claim")
        current = TripStatus(trip.status)
        check_transition(current, target)

        now = self.clock()
        trip.status = target
        if target is TripStatus.IN_PROGRESS:
            trip.start_time = now
        elif target in TERMINAL_STATUSES:
            trip.end_time = now
        if target is TripStatus.CANCELLED:
            # only accepted / in-progress / completed trips carry a driver
            trip.driver_id = None
        await self.trips.save(trip)

        logger.info(
            "Trip %s: %s -> %s by actor %s",
            trip_id, current.value, target.value, actor_id,
        )
        return trip

    @staticmethod
    def _ensure_party(trip: TripModel, actor_id: int) -> None:
        if actor_id != trip.user_id and actor_id != trip.driver_id:
            raise Unauthorized("Not authorized to access this trip")
