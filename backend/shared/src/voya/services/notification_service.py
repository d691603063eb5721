"""Notification repository backed by the notifications table."""

import datetime as dt
import uuid
from typing import TYPE_CHECKING, Any

from boto3.dynamodb.conditions import Attr

from voya.models.enums import NotificationType
from voya.models.errors import FetchError, NotificationError, StoreError
from voya.models.notification import Notification, NotificationCreate
from voya.utils.logging import get_logger

if TYPE_CHECKING:
    from .dynamodb import DynamoDBService

logger = get_logger(__name__)

DEFAULT_PAGE_SIZE = 50


def notification_from_item(item: dict[str, Any]) -> Notification:
    """Convert a notifications table item (or stream image) to a Notification."""
    return Notification(
        id=item["id"],
        user_id=item["user_id"],
        type=NotificationType(item["type"]),
        title=item["title"],
        message=item.get("message", ""),
        read=bool(item.get("read", False)),
        created_at=dt.datetime.fromisoformat(item["created_at"]),
    )


class NotificationService:
    """CRUD for notification rows.

    Store failures are re-raised as FetchError for reads and NotificationError
    for writes, the two errors the notification feed reports.
    """

    TABLE = "notifications"
    USER_INDEX = "user_id-index"

    def __init__(self, db: "DynamoDBService") -> None:
        self.db = db

    def list_recent(self, user_id: str, limit: int = DEFAULT_PAGE_SIZE) -> list[Notification]:
        """Most recent notifications of a user, newest first.

        Raises:
            FetchError: If the notifications could not be read.
        """
        try:
            items = self.db.query_by_gsi(
                self.TABLE,
                self.USER_INDEX,
                "user_id",
                user_id,
                limit=limit,
                scan_index_forward=False,
            )
        except StoreError as e:
            raise FetchError(details={"user_id": user_id}) from e
        return [notification_from_item(item) for item in items]

    def get(self, notification_id: str) -> Notification | None:
        try:
            item = self.db.get_item(self.TABLE, {"id": notification_id})
        except StoreError as e:
            raise FetchError(details={"notification_id": notification_id}) from e
        return notification_from_item(item) if item else None

    def create(self, data: NotificationCreate) -> Notification:
        """Insert an unread notification.

        Raises:
            NotificationError: If the row could not be written.
        """
        notification = Notification(
            id=str(uuid.uuid4()),
            user_id=data.user_id,
            type=data.type,
            title=data.title,
            message=data.message,
            read=False,
            created_at=dt.datetime.now(dt.UTC),
        )
        try:
            self.db.put_item(self.TABLE, self._notification_to_item(notification))
        except StoreError as e:
            raise NotificationError(
                details={"operation": "create", "user_id": data.user_id}
            ) from e
        logger.info("Created %s notification %s", data.type.value, notification.id)
        return notification

    def mark_read(self, notification_id: str) -> None:
        """Set read on one notification.

        Raises:
            NotificationError: If the row is missing or the write failed.
        """
        try:
            attrs = self.db.update_fields(
                self.TABLE,
                {"id": notification_id},
                {"read": True},
                condition_expression="attribute_exists(#id)",
            )
        except StoreError as e:
            raise NotificationError(
                details={"operation": "mark_read", "notification_id": notification_id}
            ) from e
        if attrs is None:
            raise NotificationError(
                details={
                    "operation": "mark_read",
                    "notification_id": notification_id,
                    "reason": "not_found",
                }
            )

    def mark_all_read(self, user_id: str, notification_ids: list[str] | None = None) -> int:
        """Set read on every unread notification of a user in one transaction.

        Args:
            user_id: Owner of the notifications
            notification_ids: Restrict to these ids; by default every unread row

        Returns:
            Number of notifications updated

        Raises:
            NotificationError: If the bulk update failed, a notification no
                longer exists, or there are more ids than one transaction
                holds. No notification is updated in any of these cases.
        """
        try:
            if notification_ids is None:
                items = self.db.query_by_gsi(
                    self.TABLE,
                    self.USER_INDEX,
                    "user_id",
                    user_id,
                    filter_expression=Attr("read").eq(False),
                )
                notification_ids = [item["id"] for item in items]
            if not notification_ids:
                return 0
            self.db.transact_update_fields(
                self.TABLE,
                [{"id": notification_id} for notification_id in notification_ids],
                {"read": True},
            )
        except StoreError as e:
            raise NotificationError(
                details={"operation": "mark_all_read", "user_id": user_id}
            ) from e
        return len(notification_ids)

    def delete(self, notification_id: str) -> None:
        """Delete one notification.

        Raises:
            NotificationError: If the delete failed.
        """
        try:
            self.db.delete_item(self.TABLE, {"id": notification_id})
        except StoreError as e:
            raise NotificationError(
                details={"operation": "delete", "notification_id": notification_id}
            ) from e

    def _notification_to_item(self, notification: Notification) -> dict[str, Any]:
        return {
            "id": notification.id,
            "user_id": notification.user_id,
            "type": notification.type.value,
            "title": notification.title,
            "message": notification.message,
            "read": notification.read,
            "created_at": notification.created_at.isoformat(),
        }
