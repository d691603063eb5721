"""Explicitly constructed service graph with a defined teardown."""

from typing import Any

import boto3

from voya.config import Settings
from voya.models.enums import ChangeEventType
from voya.models.errors import FetchError, StoreError
from voya.models.notification import Notification
from voya.utils.logging import get_logger

from .analytics_service import AnalyticsService
from .booking_lifecycle import BookingLifecycleController
from .booking_service import BookingService
from .catalog_service import CatalogService
from .dynamodb import DynamoDBService
from .email_service import EmailService
from .notification_service import NotificationService
from .notification_store import NotificationStore
from .payment_service import PaymentGateway, PaymentService
from .realtime import ChangeFeed, Subscription
from .report_service import ReportService
from .session_manager import SessionManager
from .storage_service import StorageService

logger = get_logger(__name__)


class ServiceContainer:
    """Owns one instance of every service for an application scope.

    Build it once at startup (``create``) and ``close`` it at shutdown;
    tests build a fresh container per test.
    """

    def __init__(
        self,
        settings: Settings,
        db: DynamoDBService,
        storage: StorageService,
        feed: ChangeFeed,
        emails: EmailService,
        payment_gateway: PaymentGateway | None = None,
        cognito_client: Any | None = None,
    ) -> None:
        self.settings = settings
        self.db = db
        self.storage = storage
        self.feed = feed
        self.emails = emails
        self._cognito_client = cognito_client
        self.bookings = BookingService(db)
        self.payments = PaymentService(db, gateway=payment_gateway)
        self.notifications = NotificationService(db)
        self.catalog = CatalogService(db)
        self.analytics = AnalyticsService(db)
        self.reports = ReportService(db, self.bookings)
        self._stores: dict[str, NotificationStore] = {}
        self._subscriptions: dict[str, Subscription] = {}
        self._controllers: dict[str, BookingLifecycleController] = {}
        self.closed = False

    @classmethod
    def create(
        cls,
        settings: Settings | None = None,
        payment_gateway: PaymentGateway | None = None,
    ) -> "ServiceContainer":
        """Build every AWS-backed service from settings."""
        settings = settings or Settings.from_env()
        session = boto3.Session(region_name=settings.aws_region)
        db = DynamoDBService(
            settings.table_prefix,
            resource=session.resource("dynamodb"),
            client=session.client("dynamodb"),
        )
        container = cls(
            settings=settings,
            db=db,
            storage=StorageService(
                settings.storage_bucket,
                region_name=settings.aws_region,
                client=session.client("s3"),
            ),
            feed=ChangeFeed(db, client=session.client("dynamodbstreams")),
            emails=EmailService(
                db, settings.email_sender, client=session.client("ses")
            ),
            payment_gateway=payment_gateway,
            cognito_client=session.client("cognito-idp"),
        )
        logger.info(
            "Service container created for %s (tables %s-*)",
            settings.environment,
            settings.table_prefix,
        )
        return container

    def booking_controller(self, owner_id: str | None = None) -> BookingLifecycleController:
        """Booking controller, shared per owner so one user has one submission in flight.

        Without an owner a fresh controller is returned.
        """
        if owner_id is not None and owner_id in self._controllers:
            return self._controllers[owner_id]
        controller = BookingLifecycleController(
            bookings=self.bookings,
            payments=self.payments,
            emails=self.emails,
            notifications=self.notifications,
            catalog=self.catalog,
            analytics=self.analytics,
            on_notification=self.deliver_notification,
        )
        if owner_id is not None:
            self._controllers[owner_id] = controller
        return controller

    def session_manager(self) -> SessionManager:
        """A new session holder, one per client."""
        return SessionManager(
            self.settings.cognito_user_pool_id,
            self.settings.cognito_client_id,
            self.db,
            storage=self.storage,
            client=self._cognito_client,
            region_name=self.settings.aws_region,
        )

    def deliver_notification(self, notification: Notification) -> None:
        """Push a notification written by this process into its owner's store.

        Users whose store is not loaded yet pick it up on their first load.
        """
        store = self._stores.get(notification.user_id)
        if store is not None:
            store.on_push(notification)

    def notification_store(self, user_id: str) -> NotificationStore:
        """The notification mirror of a user.

        The first access loads the mirror and subscribes it to the user's
        notification inserts; every later access drains that subscription
        first, so rows written by other processes are visible before the
        store serves a read or mutation.
        """
        store = self._stores.get(user_id)
        if store is not None:
            self._drain_feed(user_id, store)
            return store

        store = NotificationStore(
            self.notifications, page_size=self.settings.notifications_page_size
        )
        # Subscribe before loading; inserts seen by both are deduplicated
        self._follow_feed(user_id)
        try:
            store.load(user_id)
        except FetchError:
            self._unfollow_feed(user_id)
            raise
        self._stores[user_id] = store
        return store

    def _follow_feed(self, user_id: str) -> None:
        try:
            self._subscriptions[user_id] = self.feed.open_subscription(
                NotificationService.TABLE,
                {"user_id": user_id},
                event_types=[ChangeEventType.INSERT],
            )
        except StoreError as e:
            logger.warning(
                "Notification feed unavailable for %s, serving loads only: %s",
                user_id,
                e.details,
            )

    def _unfollow_feed(self, user_id: str) -> None:
        subscription = self._subscriptions.pop(user_id, None)
        if subscription is not None:
            self.feed.release(subscription)

    def _drain_feed(self, user_id: str, store: NotificationStore) -> None:
        subscription = self._subscriptions.get(user_id)
        if subscription is None:
            return
        try:
            store.consume(subscription)
        except StoreError as e:
            logger.warning("Notification feed poll failed for %s: %s", user_id, e.details)

    def close(self) -> None:
        """Release feed subscriptions and drop cached state."""
        if self.closed:
            return
        self.feed.close()
        self._subscriptions.clear()
        self._stores.clear()
        self._controllers.clear()
        self.closed = True
        logger.info("Service container closed")
