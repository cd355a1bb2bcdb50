"""
FastAPI application factory.

* Registers routes for trips, vehicles, drivers and admin.
* Maps domain errors onto a uniform JSON error body.
* Applies rate-limiting and request-logging middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

import logging

from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from fleetflow.api.errors import register_exception_handlers
from fleetflow.api.middleware import RequestLoggingMiddleware, limiter
from fleetflow.api.routes import admin, drivers, trips, vehicles
from fleetflow.config import settings

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)


def create_app() -> FastAPI:
    app = FastAPI(
        title="FleetFlow Trip Lifecycle API",
        description=(
            "Moves delivery trips through DRAFT, DISPATCHED, COMPLETED and "
            "CANCELLED while keeping vehicle and driver availability "
            "consistent with the trips that hold them."
        ),
        version="1.0.0",
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    register_exception_handlers(app)
    app.add_middleware(RequestLoggingMiddleware)

    # Routers
    app.include_router(trips.router, prefix="/api/v1")
    app.include_router(vehicles.router, prefix="/api/v1")
    app.include_router(drivers.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
