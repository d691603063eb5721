"""Unit tests for ServiceContainer wiring and teardown."""

from unittest.mock import MagicMock, patch

from boto3.dynamodb.types import TypeSerializer

from voya.config import Settings
from voya.models.booking import BookingRequest
from voya.models.enums import LifecycleState, NotificationType
from voya.models.notification import NotificationCreate
from voya.services.catalog_service import CatalogService
from voya.services.container import ServiceContainer
from voya.services.notification_service import NotificationService
from voya.services.session_manager import SessionManager

from conftest import TRAVELER_ID


def test_booking_controller_is_shared_per_owner(container: ServiceContainer) -> None:
    first = container.booking_controller(TRAVELER_ID)

    assert container.booking_controller(TRAVELER_ID) is first
    assert container.booking_controller("traveler-002") is not first
    assert container.booking_controller() is not container.booking_controller()


def test_controller_uses_container_services(container: ServiceContainer) -> None:
    controller = container.booking_controller(TRAVELER_ID)

    assert controller.bookings is container.bookings
    assert controller.payments is container.payments
    assert controller.emails is container.emails
    assert controller.catalog is container.catalog


def test_notification_store_loaded_once(container: ServiceContainer) -> None:
    NotificationService(container.db).create(
        NotificationCreate(
            user_id=TRAVELER_ID, type=NotificationType.SYSTEM, title="Welcome", message="Hello"
        )
    )

    store = container.notification_store(TRAVELER_ID)

    assert store.user_id == TRAVELER_ID
    assert store.unread_count == 1
    assert container.notification_store(TRAVELER_ID) is store


def test_session_manager_is_per_client(
    container: ServiceContainer, mock_cognito_idp: MagicMock
) -> None:
    manager = container.session_manager()

    assert isinstance(manager, SessionManager)
    assert manager.client_id == "test-client-id-123"
    assert manager.storage is container.storage
    assert container.session_manager() is not manager

    manager.sign_in("ada@example.com", "Secret123!")
    mock_cognito_idp.initiate_auth.assert_called_once()


def test_close_releases_subscriptions(
    container: ServiceContainer, mock_streams_client: MagicMock
) -> None:
    subscription = container.feed.open_subscription("notifications", {"user_id": TRAVELER_ID})
    container.notification_store(TRAVELER_ID)
    assert container.feed.active_subscriptions == 2

    container.close()
    container.close()

    assert container.closed
    assert subscription.closed
    assert container.feed.active_subscriptions == 0
    assert mock_streams_client.describe_stream.call_count == 2


def test_controller_notifications_reach_loaded_store(
    container: ServiceContainer, booking_request: BookingRequest, seeded_catalog: CatalogService
) -> None:
    store = container.notification_store(TRAVELER_ID)

    outcome = container.booking_controller(TRAVELER_ID).submit_booking(booking_request)

    assert outcome.status == LifecycleState.COMPLETED
    assert [n.title for n in store.notifications] == ["Booking confirmed"]
    assert store.unread_count == 1


def test_later_access_drains_feed(
    container: ServiceContainer, mock_streams_client: MagicMock
) -> None:
    store = container.notification_store(TRAVELER_ID)
    item = {
        "id": "n-remote",
        "user_id": TRAVELER_ID,
        "type": "system",
        "title": "Written elsewhere",
        "message": "",
        "read": False,
        "created_at": "2024-06-01T12:00:00+00:00",
    }
    mock_streams_client.get_records.return_value = {
        "Records": [
            {
                "eventID": "evt-1",
                "eventName": "INSERT",
                "dynamodb": {"NewImage": {k: TypeSerializer().serialize(v) for k, v in item.items()}},
            }
        ],
        "NextShardIterator": "iterator-0003",
    }

    assert container.notification_store(TRAVELER_ID) is store
    assert [n.id for n in store.notifications] == ["n-remote"]
    assert store.unread_count == 1


def test_store_works_without_feed(container: ServiceContainer) -> None:
    with patch.object(container.db, "stream_arn", return_value=None):
        store = container.notification_store(TRAVELER_ID)

    assert store.user_id == TRAVELER_ID
    assert container.feed.active_subscriptions == 0
    assert container.notification_store(TRAVELER_ID) is store


def test_create_from_settings(mocked_aws: None, test_settings: Settings) -> None:
    container = ServiceContainer.create(test_settings)

    assert container.settings is test_settings
    assert container.db.name_prefix == "voya-test"
    assert container.storage.bucket == "voya-test-media"
    assert container.emails.sender == "bookings@voya.test"

    container.close()
    assert container.closed
