"""
Fare endpoints
==============

GET /api/v1/fares/quote -- price a route for a ride class without booking it
"""

from fastapi import APIRouter, Depends, Query, Request

from ridebook.api.dependencies import get_trip_service
from ridebook.api.middleware import limiter
from ridebook.api.schemas import Envelope, FareQuoteResponse
from ridebook.config import settings
from ridebook.services.trip_lifecycle import TripLifecycleService

router = APIRouter(prefix="/fares", tags=["fares"])


@router.get(
    "/quote",
    response_model=Envelope[FareQuoteResponse],
    summary="Quote a fare",
)
@limiter.limit(settings.rate_limit)
async def quote_fare(
    request: Request,
    from_location_id: int = Query(...),
    to_location_id: int = Query(...),
    ride_class: str = Query(...),
    service: TripLifecycleService = Depends(get_trip_service),
):
    quote = await service.quote_fare(from_location_id, to_location_id, ride_class)
    return {"success": True, "data": FareQuoteResponse.model_validate(quote)}
