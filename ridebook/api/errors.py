"""
Exception handlers: translate failures into the ``{"success": false}``
envelope.

Domain errors map onto HTTP statuses by class (most specific first along
the MRO); anything unexpected is logged with its traceback and returned
as a bare 500.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from ridebook.domain.errors import (
    IdempotencyConflict,
    InvalidInput,
    InvalidTransition,
    RideBookingError,
    StorageError,
    TripNotFound,
    TripNotPending,
    Unauthorized,
)

logger = logging.getLogger(__name__)

STATUS_CODES: dict[type, int] = {
    InvalidInput: status.HTTP_400_BAD_REQUEST,
    InvalidTransition: status.HTTP_400_BAD_REQUEST,
    Unauthorized: status.HTTP_403_FORBIDDEN,
    TripNotFound: status.HTTP_404_NOT_FOUND,
    TripNotPending: status.HTTP_409_CONFLICT,
    IdempotencyConflict: status.HTTP_409_CONFLICT,
    StorageError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for(exc: RideBookingError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
    )


async def domain_error_handler(request: Request, exc: RideBookingError):
    code = status_for(exc)
    if isinstance(exc, StorageError):
        logger.error("Storage failure on %s: %s", request.url.path, exc)
        return failure(code, "Storage failure")
    return failure(code, str(exc))


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return failure(exc.status_code, str(exc.detail))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{field}: {first.get('msg')}" if field else first.get("msg")
    else:
        message = "Invalid request"
    return failure(status.HTTP_400_BAD_REQUEST, message)


async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return failure(
        status.HTTP_429_TOO_MANY_REQUESTS, f"Rate limit exceeded: {exc.detail}"
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s: %s", request.url, exc, exc_info=True)
    return failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RideBookingError, domain_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
