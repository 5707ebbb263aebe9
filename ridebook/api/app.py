"""
FastAPI application factory.

* Registers routes for trips, fares and admin.
* Registers the envelope-producing exception handlers.
* Applies rate-limiting (slowapi).
* Disposes the DB engine and Redis pool on shutdown.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI

from ridebook.api.errors import register_exception_handlers
from ridebook.api.middleware import limiter
from ridebook.api.routes import admin, fares, trips
from ridebook.config import settings
from ridebook.infrastructure.database import engine
from ridebook.infrastructure.redis_client import close_redis

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Starting %s (locations=%s)", settings.app_name, settings.location_backend
    )
    yield
    await close_redis()
    await engine.dispose()
    logger.info("Shutdown complete")


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        description=(
            "Passengers book trips between fixed locations, drivers accept "
            "and progress them, and fares come from a distance table."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.limiter = limiter
    register_exception_handlers(app)

    app.include_router(trips.router, prefix="/api/v1")
    app.include_router(fares.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
