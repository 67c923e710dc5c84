"""
FastAPI application factory.

* Registers routes for connections, network elements and admin.
* Maps domain validation errors to 422 and lifecycle conflicts to 409.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from src.api.middleware import limiter
from src.api.routes import admin, connections, network_elements
from src.domain.errors import ConnectionSimulationError, InvalidStateTransition
from src.infrastructure.locks import LockNotAcquired

logging.basicConfig(level=logging.INFO)


async def _simulation_error_handler(
    request: Request, exc: ConnectionSimulationError
) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc), "error": type(exc).__name__},
    )


async def _conflict_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=409, content={"detail": str(exc)})


def create_app() -> FastAPI:
    app = FastAPI(
        title="Fiber Last-Mile Connection Simulator API",
        description=(
            "Estimates the length and installation cost of last-mile fiber "
            "connections from an existing aggregation point to a client, "
            "plans the poles and drop cable they need, and keeps the "
            "network inventory they are built from."
        ),
        version="1.0.0",
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Domain errors
    app.add_exception_handler(ConnectionSimulationError, _simulation_error_handler)
    app.add_exception_handler(InvalidStateTransition, _conflict_handler)
    app.add_exception_handler(LockNotAcquired, _conflict_handler)

    # Routers
    app.include_router(connections.router, prefix="/api/v1")
    app.include_router(network_elements.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
