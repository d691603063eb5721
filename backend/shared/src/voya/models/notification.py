"""Notification models for the in-app notification feed."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .enums import EmailStatus, NotificationType


class Notification(BaseModel):
    """A notification row owned by one user."""

    model_config = ConfigDict(strict=True)

    id: str
    user_id: str
    type: NotificationType
    title: str
    message: str
    read: bool = False
    created_at: datetime


class NotificationCreate(BaseModel):
    """Data required to create a notification."""

    model_config = ConfigDict(strict=True)

    user_id: str
    type: NotificationType
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(default="", max_length=2000)


class NotificationSnapshot(BaseModel):
    """Read-only view of a notification store."""

    model_config = ConfigDict(strict=True)

    user_id: str | None
    notifications: list[Notification]
    unread_count: int


class EmailNotification(BaseModel):
    """Audit record for an outbound email."""

    model_config = ConfigDict(strict=True)

    id: str
    template_name: str
    recipient_email: str
    subject: str
    variables: dict[str, str] = Field(default_factory=dict)
    status: EmailStatus
    provider_message_id: str | None = None
    error_message: str | None = None
    created_at: datetime
    sent_at: datetime | None = None
