"""FastAPI application for the Voya REST API.

This package provides REST endpoints for:
- Health checks
- Catalog browsing and property search
- Booking quotes, submission and cancellation
- The notification feed
- Client analytics events
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from mangum import Mangum

from voya import __version__
from voya.config import Settings
from voya.utils.logging import configure_logging, get_logger
from voya_api.dependencies import reset_container
from voya_api.exceptions import register_exception_handlers
from voya_api.middleware import CorrelationIdMiddleware
from voya_api.routes import (
    analytics_router,
    bookings_router,
    catalog_router,
    health_router,
    notifications_router,
    reports_router,
)

configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    # Release open change-feed subscriptions
    reset_container(app)
    logger.info("Voya API shut down")


app = FastAPI(
    title="Voya API",
    description="REST API for travel browsing, bookings and notifications",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=Settings.from_env().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(CorrelationIdMiddleware)

register_exception_handlers(app)

# Include routers under /api prefix
# This matches CloudFront routing: /api/* → API Gateway
app.include_router(health_router, prefix="/api")
app.include_router(catalog_router, prefix="/api")
app.include_router(bookings_router, prefix="/api")
app.include_router(notifications_router, prefix="/api")
app.include_router(analytics_router, prefix="/api")
app.include_router(reports_router, prefix="/api")


@app.get("/api/ping")
async def ping() -> dict[str, Any]:
    """Liveness check that touches no AWS service."""
    return {
        "status": "ok",
        "timestamp": datetime.now(UTC).isoformat(),
        "service": "voya-api",
    }


# Lambda handler - Mangum wraps FastAPI for AWS Lambda + API Gateway
handler = Mangum(app, lifespan="off")


def run_server(host: str = "0.0.0.0", port: int = 8080, reload: bool = True) -> None:
    """Run the API locally with uvicorn.

    Args:
        host: Host to bind to
        port: Port to listen on
        reload: Restart on source changes
    """
    import uvicorn

    if reload:
        uvicorn.run(
            "voya_api.main:app",
            host=host,
            port=port,
            reload=True,
            reload_dirs=["api/src", "shared/src"],
        )
    else:
        uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
