"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and exposes
domain-relevant queries only.  SQLAlchemy failures leave the repository as
``StorageError`` so callers never depend on driver exception types.
"""

from __future__ import annotations

import functools
from typing import Iterable, Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .models import LocationModel, TripModel, utcnow
from ridebook.domain.entities import Location
from ridebook.domain.enums import RideClass, TripStatus
from ridebook.domain.errors import IdempotencyConflict, StorageError


def _storage_errors(func):
    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc

    return wrapper


class TripRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    @_storage_errors
    async def create(
        self,
        *,
        user_id: int,
        from_location_id: int,
        to_location_id: int,
        ride_class: RideClass,
        distance_km: float,
        fare: int,
        idempotency_key: str | None = None,
    ) -> TripModel:
        """
        Insert a ``pending`` trip.

        Keyed inserts run inside a SAVEPOINT so that losing the
        ``(user_id, idempotency_key)`` unique race leaves the outer
        transaction usable; the loser gets ``IdempotencyConflict``.
        """
        now = utcnow()
        trip = TripModel(
            user_id=user_id,
            driver_id=None,
            from_location_id=from_location_id,
            to_location_id=to_location_id,
            ride_class=ride_class,
            distance_km=distance_km,
            fare=fare,
            status=TripStatus.PENDING,
            idempotency_key=idempotency_key,
            created_at=now,
            booking_time=now,
        )
        if idempotency_key is None:
            self.session.add(trip)
            await self.session.flush()
            return trip

        try:
            async with self.session.begin_nested():
                self.session.add(trip)
                await self.session.flush()
        except IntegrityError as exc:
            raise IdempotencyConflict(
                f"Idempotency key {idempotency_key!r} already used by user {user_id}"
            ) from exc
        return trip

    @_storage_errors
    async def get_by_id(
        self, trip_id: int, *, refresh: bool = False
    ) -> Optional[TripModel]:
        return await self.session.get(TripModel, trip_id, populate_existing=refresh)

    @_storage_errors
    async def get_by_idempotency_key(
        self, user_id: int, key: str
    ) -> Optional[TripModel]:
        result = await self.session.execute(
            select(TripModel).where(
                TripModel.user_id == user_id,
                TripModel.idempotency_key == key,
            )
        )
        return result.scalar_one_or_none()

    async def list_for_user(
        self,
        user_id: int,
        *,
        statuses: Iterable[TripStatus] | None = None,
        limit: int | None = None,
    ) -> list[TripModel]:
        return await self._list(TripModel.user_id == user_id, statuses, limit)

    async def list_for_driver(
        self,
        driver_id: int,
        *,
        statuses: Iterable[TripStatus] | None = None,
        limit: int | None = None,
    ) -> list[TripModel]:
        return await self._list(TripModel.driver_id == driver_id, statuses, limit)

    async def list_by_status(self, status: TripStatus) -> list[TripModel]:
        return await self._list(TripModel.status == status, None, None)

    @_storage_errors
    async def _list(
        self,
        criterion,
        statuses: Iterable[TripStatus] | None,
        limit: int | None,
    ) -> list[TripModel]:
        query = (
            select(TripModel)
            .where(criterion)
            .order_by(TripModel.created_at.desc(), TripModel.id.desc())
        )
        if statuses is not None:
            query = query.where(TripModel.status.in_(list(statuses)))
        if limit:
            query = query.limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    @_storage_errors
    async def claim_pending(self, trip_id: int, driver_id: int) -> bool:
        """
        Atomically assign *driver_id* to a pending, unassigned trip.

        A single conditional ``UPDATE`` -- the row lock taken by the database
        serialises concurrent claims, and only the first one still matches
        the ``status = pending AND driver_id IS NULL`` predicate.  Returns
        ``True`` when this call won the trip.
        """
        result = await self.session.execute(
            update(TripModel)
            .where(
                TripModel.id == trip_id,
                TripModel.status == TripStatus.PENDING,
                TripModel.driver_id.is_(None),
            )
            .values(
                driver_id=driver_id,
                status=TripStatus.ACCEPTED,
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    @_storage_errors
    async def save(self, trip: TripModel) -> TripModel:
        self.session.add(trip)
        await self.session.flush()
        return trip


class LocationRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    @_storage_errors
    async def get_by_id(self, location_id: int) -> Optional[LocationModel]:
        return await self.session.get(LocationModel, location_id)

    @_storage_errors
    async def list_all(self) -> list[LocationModel]:
        result = await self.session.execute(
            select(LocationModel).order_by(LocationModel.id)
        )
        return list(result.scalars().all())

    @_storage_errors
    async def add_many(self, locations: Sequence[Location]) -> list[LocationModel]:
        models = [
            LocationModel(
                id=loc.id,
                name=loc.name,
                address=loc.address,
                distances=loc.to_dict()["distances"],
            )
            for loc in locations
        ]
        self.session.add_all(models)
        await self.session.flush()
        return models
