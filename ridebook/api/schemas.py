"""Pydantic request / response schemas for the REST API.

Every response is wrapped in an envelope: ``{"success": true, "data": ...}``
on success, ``{"success": false, "message": ...}`` on failure.
"""

from __future__ import annotations

from datetime import datetime
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

from ridebook.domain.enums import RideClass, TripStatus

T = TypeVar("T")


# ── Envelopes ─────────────────────────────────────────────────────────


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    data: T


class ErrorResponse(BaseModel):
    success: bool = False
    message: str


# ── Requests ──────────────────────────────────────────────────────────


class BookTripRequest(BaseModel):
    from_location_id: int = Field(..., ge=1)
    to_location_id: int = Field(..., ge=1)
    ride_class: RideClass
    idempotency_key: Optional[str] = Field(
        None,
        max_length=64,
        description="Client-generated UUID to prevent double-booking on retries.",
    )


class StatusUpdateRequest(BaseModel):
    status: str = Field(..., description="Next status: in_progress, completed or cancelled")


# ── Responses ─────────────────────────────────────────────────────────


class TripResponse(BaseModel):
    id: int
    user_id: int
    driver_id: Optional[int] = None
    from_location_id: int
    to_location_id: int
    ride_class: RideClass
    distance_km: float
    fare: int
    status: TripStatus
    created_at: Optional[datetime] = None
    booking_time: Optional[datetime] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    model_config = {"from_attributes": True}


class FareQuoteResponse(BaseModel):
    distance_km: float
    ride_class: RideClass
    base_price: float
    distance_price: float
    total_price: int

    model_config = {"from_attributes": True}


class HealthResponse(BaseModel):
    status: str = "ok"
