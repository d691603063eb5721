"""Notification feed endpoints for the current user.

Reads and mutations go through the user's NotificationStore, so the unread
count returned always matches the notifications returned.
"""

from fastapi import APIRouter, Depends
from starlette.status import HTTP_201_CREATED

from voya.models.errors import AuthenticationError, ErrorCode
from voya.models.notification import Notification, NotificationCreate, NotificationSnapshot
from voya.services.container import ServiceContainer
from voya_api.dependencies import get_container, get_current_user_id
from voya_api.models.notifications import (
    NotificationCreateRequest,
    NotificationUpdateResponse,
)

router = APIRouter(tags=["notifications"])


def _require_owner(container: ServiceContainer, user_id: str, notification_id: str) -> None:
    """Reject acting on another user's notification."""
    notification = container.notifications.get(notification_id)
    if notification is not None and notification.user_id != user_id:
        raise AuthenticationError(
            code=ErrorCode.UNAUTHORIZED, details={"notification_id": notification_id}
        )


@router.get(
    "/notifications",
    summary="List notifications",
    description="The 50 most recent notifications, newest first, with the unread count.",
    response_model=NotificationSnapshot,
    responses={503: {"description": "Notifications could not be loaded"}},
)
async def list_notifications(
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(get_container),
) -> NotificationSnapshot:
    return container.notification_store(user_id).load(user_id)


@router.post(
    "/notifications",
    summary="Create notification",
    response_model=Notification,
    status_code=HTTP_201_CREATED,
)
async def create_notification(
    body: NotificationCreateRequest,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(get_container),
) -> Notification:
    notification = container.notifications.create(
        NotificationCreate(
            user_id=user_id, type=body.type, title=body.title, message=body.message
        )
    )
    # The change feed delivers it again later; the store drops the duplicate
    container.notification_store(user_id).on_push(notification)
    return notification


@router.post(
    "/notifications/read-all",
    summary="Mark all notifications read",
    response_model=NotificationUpdateResponse,
    responses={503: {"description": "Update failed; nothing was marked read"}},
)
async def mark_all_read(
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(get_container),
) -> NotificationUpdateResponse:
    store = container.notification_store(user_id)
    updated = store.mark_all_read()
    return NotificationUpdateResponse(updated=updated, unread_count=store.unread_count)


@router.post(
    "/notifications/{notification_id}/read",
    summary="Mark notification read",
    response_model=NotificationUpdateResponse,
    responses={
        403: {"description": "Notification belongs to another user"},
        503: {"description": "Update failed; the notification stays unread"},
    },
)
async def mark_read(
    notification_id: str,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(get_container),
) -> NotificationUpdateResponse:
    _require_owner(container, user_id, notification_id)
    store = container.notification_store(user_id)
    updated = store.mark_read(notification_id)
    return NotificationUpdateResponse(updated=int(updated), unread_count=store.unread_count)


@router.delete(
    "/notifications/{notification_id}",
    summary="Delete notification",
    response_model=NotificationUpdateResponse,
    responses={
        403: {"description": "Notification belongs to another user"},
        503: {"description": "Delete failed; the notification is kept"},
    },
)
async def delete_notification(
    notification_id: str,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(get_container),
) -> NotificationUpdateResponse:
    _require_owner(container, user_id, notification_id)
    store = container.notification_store(user_id)
    before = len(store.notifications)
    store.delete(notification_id)
    return NotificationUpdateResponse(
        updated=before - len(store.notifications), unread_count=store.unread_count
    )
