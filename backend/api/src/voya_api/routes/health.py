"""Health check endpoint."""

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends

from voya import __version__
from voya.services.container import ServiceContainer
from voya_api.dependencies import get_container

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    summary="Service health",
    description="Reports the deployment environment and package version.",
)
async def health(container: ServiceContainer = Depends(get_container)) -> dict[str, Any]:
    return {
        "status": "healthy",
        "environment": container.settings.environment,
        "version": __version__,
        "timestamp": datetime.now(UTC).isoformat(),
    }
