"""FastAPI dependency providers.

Every route gets its services from the application's ServiceContainer,
created on first use and stored on ``app.state``. Tests replace it with
``app.dependency_overrides[get_container]``.

Usage in routes:
    @router.get("/bookings")
    async def list_bookings(container: ServiceContainer = Depends(get_container)):
        ...
"""

from fastapi import FastAPI, Request

from voya.models.errors import AuthenticationError
from voya.services.container import ServiceContainer

# Header set by API Gateway after JWT validation
USER_SUB_HEADER = "x-user-sub"


def get_container(request: Request) -> ServiceContainer:
    """Application-scoped service container, created lazily."""
    container: ServiceContainer | None = getattr(request.app.state, "container", None)
    if container is None or container.closed:
        container = ServiceContainer.create()
        request.app.state.container = container
    return container


def get_current_user_id(request: Request) -> str:
    """Cognito sub of the caller.

    Raises:
        AuthenticationError: If the gateway did not pass a user identity.
    """
    user_sub = request.headers.get(USER_SUB_HEADER)
    if not user_sub:
        raise AuthenticationError()
    return user_sub


def reset_container(app: FastAPI) -> None:
    """Close and forget the container of an app (tests and shutdown)."""
    container: ServiceContainer | None = getattr(app.state, "container", None)
    if container is not None:
        container.close()
    app.state.container = None
