"""FastAPI dependency injection helpers."""

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from ridebook.config import settings
from ridebook.domain.enums import ActorRole
from ridebook.domain.pricing import FareCalculator
from ridebook.infrastructure.catalog import default_locations
from ridebook.infrastructure.database import async_session_factory
from ridebook.infrastructure.location_store import (
    CachedLocationStore,
    DatabaseLocationStore,
    LocationStore,
    StaticLocationStore,
)
from ridebook.infrastructure.redis_client import get_redis
from ridebook.infrastructure.repositories import LocationRepository, TripRepository
from ridebook.services.trip_lifecycle import TripLifecycleService


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Yield an async DB session; commit on success, rollback on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


# ── Identity ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Actor:
    id: int
    role: ActorRole


async def get_actor(
    x_actor_id: Optional[str] = Header(None),
    x_actor_role: Optional[str] = Header(None),
) -> Actor:
    """Identity forwarded by the upstream auth layer; trusted as-is."""
    if not x_actor_id or not x_actor_role:
        raise HTTPException(status_code=401, detail="Missing actor identity")
    try:
        return Actor(id=int(x_actor_id), role=ActorRole(x_actor_role))
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid actor identity")


async def require_passenger(actor: Actor = Depends(get_actor)) -> Actor:
    if actor.role is not ActorRole.PASSENGER:
        raise HTTPException(status_code=403, detail="Passengers only")
    return actor


async def require_driver(actor: Actor = Depends(get_actor)) -> Actor:
    if actor.role is not ActorRole.DRIVER:
        raise HTTPException(status_code=403, detail="Drivers only")
    return actor


# ── Services ──────────────────────────────────────────────────────────


@lru_cache
def _static_location_store() -> StaticLocationStore:
    return StaticLocationStore(default_locations())


async def get_location_store(db: AsyncSession = Depends(get_db)) -> LocationStore:
    """Pick the location backend from configuration."""
    if settings.location_backend == "static":
        return _static_location_store()

    store: LocationStore = DatabaseLocationStore(LocationRepository(db))
    if settings.location_cache_ttl_seconds > 0:
        store = CachedLocationStore(
            store, await get_redis(), settings.location_cache_ttl_seconds
        )
    return store


@lru_cache
def _fare_calculator() -> FareCalculator:
    return FareCalculator.from_prices(
        settings.fare_base_prices, settings.fare_per_km_rates
    )


def get_fare_calculator() -> FareCalculator:
    return _fare_calculator()


async def get_trip_service(
    db: AsyncSession = Depends(get_db),
    locations: LocationStore = Depends(get_location_store),
    fares: FareCalculator = Depends(get_fare_calculator),
) -> TripLifecycleService:
    return TripLifecycleService(TripRepository(db), locations, fares)
