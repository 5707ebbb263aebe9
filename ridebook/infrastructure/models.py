"""
SQLAlchemy ORM models.

Tables
------
* ``locations`` -- seeded pickup / drop-off points with a JSON distance map
* ``trips``     -- ride requests and their lifecycle

Indexes
-------
* **B-Tree** on ``status``, ``user_id``, ``driver_id`` and ``created_at`` for
  the passenger / driver / pending-pool listings.
* **Unique** on ``(user_id, idempotency_key)``: a key is scoped to the
  passenger who sent it.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    Float,
    Index,
    Integer,
    String,
    UniqueConstraint,
)

from .database import Base
from ridebook.domain.entities import Location
from ridebook.domain.enums import RideClass, TripStatus


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LocationModel(Base):
    __tablename__ = "locations"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(120), nullable=False)
    address = Column(String(255), nullable=False)
    # {"<destination id>": km}
    distances = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    def to_entity(self) -> Location:
        return Location.from_dict(
            {
                "id": self.id,
                "name": self.name,
                "address": self.address,
                "distances": self.distances,
            }
        )


class TripModel(Base):
    __tablename__ = "trips"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False)
    driver_id = Column(Integer, nullable=True)

    from_location_id = Column(Integer, nullable=False)
    to_location_id = Column(Integer, nullable=False)
    ride_class = Column(Enum(RideClass), nullable=False)
    distance_km = Column(Float, nullable=False)
    fare = Column(Integer, nullable=False)

    status = Column(Enum(TripStatus), default=TripStatus.PENDING, nullable=False)
    idempotency_key = Column(String(64), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    booking_time = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    start_time = Column(DateTime(timezone=True), nullable=True)
    end_time = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("fare >= 0", name="ck_trips_fare_non_negative"),
        CheckConstraint(
            "from_location_id <> to_location_id", name="ck_trips_distinct_route"
        ),
        Index("idx_trips_status", "status"),
        Index("idx_trips_user", "user_id"),
        Index("idx_trips_driver", "driver_id"),
        Index("idx_trips_created", "created_at"),
        UniqueConstraint(
            "user_id", "idempotency_key", name="uq_trips_user_idempotency"
        ),
    )
