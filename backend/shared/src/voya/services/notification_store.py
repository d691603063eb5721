"""In-memory mirror of one user's notifications with an unread counter.

The mirror is loaded in bulk, grown by pushed inserts, and mutated through
four operations that apply locally first, commit to the record store, and
roll back on failure. The mirror keeps at most MAX_MIRROR_SIZE entries,
dropping the oldest when a push overflows it. ``unread_count`` equals the
number of unread entries after every operation, failed ones included.
"""

import threading
from collections.abc import Callable
from typing import TYPE_CHECKING

from voya.models.enums import ChangeEventType
from voya.models.errors import FetchError, NotificationError
from voya.models.notification import Notification, NotificationSnapshot
from voya.utils.logging import get_logger, log_notification_event

from .dynamodb import DynamoDBService
from .notification_service import DEFAULT_PAGE_SIZE, notification_from_item

if TYPE_CHECKING:
    from .notification_service import NotificationService
    from .realtime import Subscription

logger = get_logger(__name__)

Listener = Callable[[NotificationSnapshot], None]

# mark_all_read commits the whole mirror in one transaction
MAX_MIRROR_SIZE = DynamoDBService.TRANSACT_MAX_ITEMS


class NotificationStore:
    """Eventually consistent view of a user's notification feed.

    All mutations hold a re-entrant lock, so a thread draining the change
    feed and request handlers never interleave inside an operation.
    """

    def __init__(
        self,
        repository: "NotificationService",
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self._repository = repository
        self._page_size = min(page_size, MAX_MIRROR_SIZE)
        self._lock = threading.RLock()
        self._user_id: str | None = None
        self._notifications: list[Notification] = []
        self._unread_count = 0
        self._listeners: list[Listener] = []

    @property
    def user_id(self) -> str | None:
        return self._user_id

    @property
    def notifications(self) -> tuple[Notification, ...]:
        """Mirror contents, newest first."""
        with self._lock:
            return tuple(self._notifications)

    @property
    def unread_count(self) -> int:
        with self._lock:
            return self._unread_count

    def snapshot(self) -> NotificationSnapshot:
        with self._lock:
            return NotificationSnapshot(
                user_id=self._user_id,
                notifications=list(self._notifications),
                unread_count=self._unread_count,
            )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with a snapshot after every change.

        Returns:
            A function that removes the listener.
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def load(self, user_id: str) -> NotificationSnapshot:
        """Replace the mirror with the user's most recent notifications.

        Raises:
            FetchError: If the fetch failed. The previous mirror is kept.
        """
        with self._lock:
            try:
                fetched = self._repository.list_recent(user_id, limit=self._page_size)
            except FetchError as e:
                log_notification_event(
                    logger, "load", None, user_id=user_id, result="error", error=e.message
                )
                raise

            self._user_id = user_id
            self._notifications = fetched
            self._unread_count = sum(1 for n in fetched if not n.read)
            log_notification_event(
                logger,
                "load",
                None,
                user_id=user_id,
                result="applied",
                unread_count=self._unread_count,
                count=len(fetched),
            )
            self._publish()
            return self.snapshot()

    def on_push(self, notification: Notification) -> bool:
        """Apply one pushed insert; deliveries may repeat.

        Returns:
            True if the notification was added, False for duplicates and
            notifications of another user.
        """
        with self._lock:
            if notification.user_id != self._user_id:
                log_notification_event(
                    logger,
                    "push",
                    notification.id,
                    user_id=notification.user_id,
                    result="ignored",
                )
                return False
            if self._find(notification.id) is not None:
                log_notification_event(
                    logger, "push", notification.id, user_id=self._user_id, result="duplicate"
                )
                return False

            self._notifications.insert(0, notification)
            if not notification.read:
                self._unread_count += 1
            if len(self._notifications) > MAX_MIRROR_SIZE:
                evicted = self._notifications.pop()
                if not evicted.read:
                    self._unread_count -= 1
            log_notification_event(
                logger,
                "push",
                notification.id,
                user_id=self._user_id,
                result="applied",
                unread_count=self._unread_count,
            )
            self._publish()
            return True

    def consume(self, subscription: "Subscription") -> int:
        """Drain one poll of a notifications feed subscription.

        Returns:
            Number of notifications added to the mirror.
        """
        applied = 0
        for event in subscription.poll():
            if event.event_type != ChangeEventType.INSERT:
                continue
            if self.on_push(notification_from_item(event.record)):
                applied += 1
        return applied

    def mark_read(self, notification_id: str) -> bool:
        """Mark one notification read.

        Returns:
            False when the id is unknown or already read (nothing to do).

        Raises:
            NotificationError: If the update failed; the local flip is undone.
        """
        with self._lock:
            index = self._find(notification_id)
            if index is None or self._notifications[index].read:
                return False

            def apply() -> None:
                current = self._notifications[index]
                self._notifications[index] = current.model_copy(update={"read": True})
                self._unread_count = max(0, self._unread_count - 1)

            self._run_optimistic(
                "mark_read",
                notification_id,
                apply,
                lambda: self._repository.mark_read(notification_id),
            )
            return True

    def mark_all_read(self) -> int:
        """Mark every unread entry read, all or nothing.

        The mirror never exceeds one transaction, so a single bulk update
        covers every unread entry.

        Returns:
            Number of notifications flipped.

        Raises:
            NotificationError: If the bulk update failed; every entry stays unread.
        """
        with self._lock:
            unread_ids = [n.id for n in self._notifications if not n.read]
            if not unread_ids or self._user_id is None:
                return 0
            user_id = self._user_id

            def apply() -> None:
                self._notifications = [
                    n if n.read else n.model_copy(update={"read": True})
                    for n in self._notifications
                ]
                self._unread_count = 0

            self._run_optimistic(
                "mark_all_read",
                None,
                apply,
                lambda: self._repository.mark_all_read(user_id, unread_ids),
            )
            return len(unread_ids)

    def delete(self, notification_id: str) -> None:
        """Remove a notification from the mirror and the record store.

        Raises:
            NotificationError: If the delete failed; the entry is restored.
        """
        with self._lock:

            def apply() -> None:
                index = self._find(notification_id)
                if index is None:
                    return
                removed = self._notifications.pop(index)
                if not removed.read:
                    self._unread_count = max(0, self._unread_count - 1)

            self._run_optimistic(
                "delete",
                notification_id,
                apply,
                lambda: self._repository.delete(notification_id),
            )

    # Two-phase mutation

    def _run_optimistic(
        self,
        action: str,
        notification_id: str | None,
        apply: Callable[[], None],
        commit: Callable[[], object],
    ) -> None:
        """Apply locally, commit durably, restore the checkpoint on failure.

        Must be called with the lock held.
        """
        checkpoint = (list(self._notifications), self._unread_count)
        apply()
        try:
            commit()
        except NotificationError as e:
            self._notifications, self._unread_count = checkpoint
            log_notification_event(
                logger,
                action,
                notification_id,
                user_id=self._user_id,
                result="rolled_back",
                unread_count=self._unread_count,
                error=e.message,
            )
            raise
        log_notification_event(
            logger,
            action,
            notification_id,
            user_id=self._user_id,
            result="applied",
            unread_count=self._unread_count,
        )
        self._publish()

    def _find(self, notification_id: str) -> int | None:
        for index, notification in enumerate(self._notifications):
            if notification.id == notification_id:
                return index
        return None

    def _publish(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Notification listener failed")
