"""
Location Store implementations  (Strategy Pattern)
==================================================

The trip lifecycle only sees the ``LocationStore`` interface.  Which
implementation backs it is decided once, from configuration:

* ``StaticLocationStore``   -- constant in-memory table (the seeded catalog)
* ``DatabaseLocationStore`` -- the ``locations`` table
* ``CachedLocationStore``   -- Redis read-through cache around another store

Locations are immutable after seeding, so cached entries never need
invalidation; the TTL only bounds how long a re-seed takes to show up.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Iterable, Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from .repositories import LocationRepository
from ridebook.domain.entities import Location

logger = logging.getLogger(__name__)


class LocationStore(ABC):
    @abstractmethod
    async def get_location(self, location_id: int) -> Optional[Location]: ...

    @abstractmethod
    async def list_locations(self) -> list[Location]: ...


class StaticLocationStore(LocationStore):
    def __init__(self, locations: Iterable[Location]):
        self._locations = {loc.id: loc for loc in locations}

    async def get_location(self, location_id: int) -> Optional[Location]:
        return self._locations.get(location_id)

    async def list_locations(self) -> list[Location]:
        return sorted(self._locations.values(), key=lambda loc: loc.id)


class DatabaseLocationStore(LocationStore):
    def __init__(self, repo: LocationRepository):
        self.repo = repo

    async def get_location(self, location_id: int) -> Optional[Location]:
        model = await self.repo.get_by_id(location_id)
        return model.to_entity() if model else None

    async def list_locations(self) -> list[Location]:
        return [m.to_entity() for m in await self.repo.list_all()]


class CachedLocationStore(LocationStore):
    """Cache-aside in front of *inner*; Redis failures degrade to a miss."""

    LIST_KEY = "locations:all"

    def __init__(
        self, inner: LocationStore, client: aioredis.Redis, ttl_seconds: int = 300
    ):
        self.inner = inner
        self.redis = client
        self.ttl = ttl_seconds

    @staticmethod
    def _key(location_id: int) -> str:
        return f"location:{location_id}"

    async def _cache_get(self, key: str) -> Optional[str]:
        try:
            return await self.redis.get(key)
        except RedisError as exc:
            logger.warning("Location cache read failed for %s: %s", key, exc)
            return None

    async def _cache_set(self, key: str, value: str) -> None:
        try:
            await self.redis.set(key, value, ex=self.ttl)
        except RedisError as exc:
            logger.warning("Location cache write failed for %s: %s", key, exc)

    async def get_location(self, location_id: int) -> Optional[Location]:
        key = self._key(location_id)
        cached = await self._cache_get(key)
        if cached:
            return Location.from_dict(json.loads(cached))

        location = await self.inner.get_location(location_id)
        if location is not None:
            await self._cache_set(key, json.dumps(location.to_dict()))
        return location

    async def list_locations(self) -> list[Location]:
        cached = await self._cache_get(self.LIST_KEY)
        if cached:
            return [Location.from_dict(d) for d in json.loads(cached)]

        locations = await self.inner.list_locations()
        if locations:
            await self._cache_set(
                self.LIST_KEY, json.dumps([loc.to_dict() for loc in locations])
            )
        return locations
