"""API models for notification endpoints."""

from pydantic import BaseModel, ConfigDict, Field

from voya.models.enums import NotificationType


class NotificationCreateRequest(BaseModel):
    """Create a notification for the current user."""

    model_config = ConfigDict(
        strict=False,
        json_schema_extra={
            "examples": [
                {"type": "reminder", "title": "Check-in tomorrow", "message": "Safe travels!"}
            ]
        },
    )

    type: NotificationType = NotificationType.SYSTEM
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(default="", max_length=2000)


class NotificationUpdateResponse(BaseModel):
    """Result of a read/read-all/delete call."""

    model_config = ConfigDict(strict=True)

    updated: int = Field(..., description="Number of notifications changed")
    unread_count: int
