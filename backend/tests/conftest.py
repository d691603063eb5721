"""Pytest configuration and fixtures for Voya backend tests.

This module provides reusable fixtures for testing:
- DynamoDB and S3 mocking with moto
- MagicMock stand-ins for SES, Cognito and DynamoDB Streams
- Sample catalog and booking data
- A fully wired ServiceContainer over the mocked tables
- A FastAPI TestClient bound to that container
"""

import base64
import datetime as dt
import json
import os
from decimal import Decimal
from typing import Any, Generator
from unittest.mock import MagicMock

import boto3
import pytest
from fastapi.testclient import TestClient
from moto import mock_aws

# === Environment Setup ===

# Set environment variables for testing before imports
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-1")
os.environ.setdefault("DYNAMODB_TABLE_PREFIX", "voya-test")
if not os.environ.get("AWS_PROFILE") and not os.environ.get("AWS_ACCESS_KEY_ID"):
    os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
    os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")

from voya.config import Settings  # noqa: E402
from voya.models.booking import BookingRequest  # noqa: E402
from voya.models.catalog import Destination, Property  # noqa: E402
from voya.services.catalog_service import CatalogService  # noqa: E402
from voya.services.container import ServiceContainer  # noqa: E402
from voya.services.dynamodb import DynamoDBService  # noqa: E402
from voya.services.email_service import EmailService  # noqa: E402
from voya.services.realtime import ChangeFeed  # noqa: E402
from voya.services.storage_service import StorageService  # noqa: E402
from voya_api.dependencies import get_container  # noqa: E402
from voya_api.main import app  # noqa: E402

TEST_PREFIX = "voya-test"
TEST_REGION = "eu-west-1"
TEST_BUCKET = "voya-test-media"
TEST_SENDER = "bookings@voya.test"

TRAVELER_ID = "traveler-001"
HOST_ID = "host-001"
PROPERTY_ID = "prop-001"


def _gsi(name: str, hash_key: str, range_key: str | None = None) -> dict[str, Any]:
    key_schema = [{"AttributeName": hash_key, "KeyType": "HASH"}]
    if range_key:
        key_schema.append({"AttributeName": range_key, "KeyType": "RANGE"})
    return {
        "IndexName": name,
        "KeySchema": key_schema,
        "Projection": {"ProjectionType": "ALL"},
    }


# table -> (extra string attributes, GSIs, streams enabled)
TABLE_LAYOUT: dict[str, tuple[list[str], list[dict[str, Any]], bool]] = {
    "profiles": ([], [], False),
    "destinations": ([], [], False),
    "properties": ([], [], False),
    "bookings": (
        ["traveler_id", "property_id", "created_at"],
        [
            _gsi("traveler_id-index", "traveler_id", "created_at"),
            _gsi("property_id-index", "property_id", "created_at"),
        ],
        False,
    ),
    "payments": (["booking_id"], [_gsi("booking_id-index", "booking_id")], False),
    "notifications": (
        ["user_id", "created_at"],
        [_gsi("user_id-index", "user_id", "created_at")],
        True,
    ),
    "reviews": (
        ["property_id", "created_at"],
        [_gsi("property_id-index", "property_id", "created_at")],
        False,
    ),
    "analytics-events": ([], [], False),
    "email-notifications": ([], [], False),
}


def make_jwt(claims: dict[str, Any]) -> str:
    """Unsigned JWT (header.payload.signature) carrying ``claims``."""
    encoded_header = base64.urlsafe_b64encode(b'{"alg":"RS256"}').decode().rstrip("=")
    encoded_payload = (
        base64.urlsafe_b64encode(json.dumps(claims).encode()).decode().rstrip("=")
    )
    return f"{encoded_header}.{encoded_payload}.mock-signature"


# === AWS Fixtures ===


@pytest.fixture
def aws_credentials() -> None:
    """Mocked AWS Credentials for moto."""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = TEST_REGION


@pytest.fixture
def mocked_aws(aws_credentials: None) -> Generator[None, None, None]:
    with mock_aws():
        yield


@pytest.fixture
def create_tables(mocked_aws: None) -> None:
    """Create every Voya table with its GSIs under the test prefix."""
    client = boto3.client("dynamodb", region_name=TEST_REGION)
    for table, (attributes, indexes, streams) in TABLE_LAYOUT.items():
        kwargs: dict[str, Any] = {
            "TableName": f"{TEST_PREFIX}-{table}",
            "KeySchema": [{"AttributeName": "id", "KeyType": "HASH"}],
            "AttributeDefinitions": [
                {"AttributeName": name, "AttributeType": "S"}
                for name in ["id", *attributes]
            ],
            "BillingMode": "PAY_PER_REQUEST",
        }
        if indexes:
            kwargs["GlobalSecondaryIndexes"] = indexes
        if streams:
            kwargs["StreamSpecification"] = {
                "StreamEnabled": True,
                "StreamViewType": "NEW_AND_OLD_IMAGES",
            }
        client.create_table(**kwargs)


@pytest.fixture
def db(create_tables: None) -> DynamoDBService:
    """DynamoDBService over the mocked tables."""
    return DynamoDBService(TEST_PREFIX, region_name=TEST_REGION)


@pytest.fixture
def s3_bucket(mocked_aws: None) -> Any:
    """Mocked S3 client with the media bucket created."""
    client = boto3.client("s3", region_name=TEST_REGION)
    client.create_bucket(
        Bucket=TEST_BUCKET,
        CreateBucketConfiguration={"LocationConstraint": TEST_REGION},
    )
    return client


@pytest.fixture
def mock_ses_client() -> MagicMock:
    """Mock SES client for email testing."""
    mock_ses = MagicMock()
    mock_ses.send_email.return_value = {"MessageId": "mock-message-id"}
    return mock_ses


@pytest.fixture
def mock_streams_client() -> MagicMock:
    """Mock DynamoDB Streams client with one open shard and no records."""
    client = MagicMock()
    client.describe_stream.return_value = {
        "StreamDescription": {
            "Shards": [
                {
                    "ShardId": "shard-0001",
                    "SequenceNumberRange": {"StartingSequenceNumber": "100"},
                }
            ]
        }
    }
    client.get_shard_iterator.return_value = {"ShardIterator": "iterator-0001"}
    client.get_records.return_value = {"Records": [], "NextShardIterator": "iterator-0002"}
    return client


@pytest.fixture
def id_token() -> str:
    """ID token of the test traveler as issued by Cognito."""
    return make_jwt(
        {
            "sub": TRAVELER_ID,
            "email": "ada@example.com",
            "email_verified": True,
            "given_name": "Ada",
            "family_name": "Lovelace",
            "iss": "https://cognito-idp.eu-west-1.amazonaws.com/eu-west-1_TestPool",
            "aud": "test-client-id-123",
        }
    )


@pytest.fixture
def mock_cognito_idp(id_token: str) -> MagicMock:
    """Mock Cognito IDP client answering USER_PASSWORD_AUTH with tokens."""
    mock_client = MagicMock()
    mock_client.initiate_auth.return_value = {
        "AuthenticationResult": {
            "AccessToken": "mock-access-token",
            "IdToken": id_token,
            "RefreshToken": "mock-refresh-token",
            "ExpiresIn": 3600,
            "TokenType": "Bearer",
        },
    }
    mock_client.sign_up.return_value = {"UserSub": TRAVELER_ID, "UserConfirmed": False}
    return mock_client


# === Sample Data Fixtures ===


@pytest.fixture
def sample_property() -> Property:
    """Two-bedroom apartment sleeping 4 at 100 a night."""
    return Property(
        id=PROPERTY_ID,
        host_id=HOST_ID,
        destination_id="dest-lisbon",
        name="Alfama Loft",
        description="Sunny loft above the old town",
        property_type="apartment",
        price_per_night=Decimal("100"),
        max_guests=4,
        bedrooms=2,
        bathrooms=1,
        amenities=["wifi", "kitchen"],
        created_at=dt.datetime(2024, 1, 1, tzinfo=dt.UTC),
    )


@pytest.fixture
def sample_destination() -> Destination:
    return Destination(id="dest-lisbon", name="Lisbon", country="Portugal")


@pytest.fixture
def seeded_catalog(
    db: DynamoDBService, sample_property: Property, sample_destination: Destination
) -> CatalogService:
    """Catalog with the sample destination and property stored."""
    catalog = CatalogService(db)
    catalog.save_property(sample_property)
    db.put_item(
        CatalogService.DESTINATIONS_TABLE, sample_destination.model_dump(exclude_none=True)
    )
    return catalog


@pytest.fixture
def booking_request() -> BookingRequest:
    """Valid request: 2024-06-01 to 2024-06-04 for 2 guests."""
    return BookingRequest(
        property_id=PROPERTY_ID,
        traveler_id=TRAVELER_ID,
        check_in=dt.date(2024, 6, 1),
        check_out=dt.date(2024, 6, 4),
        guests=2,
        first_name="Ada",
        last_name="Lovelace",
        email="ada@example.com",
    )


# === Container Fixtures ===


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        environment="test",
        table_prefix=TEST_PREFIX,
        aws_region=TEST_REGION,
        cognito_user_pool_id="eu-west-1_TestPool",
        cognito_client_id="test-client-id-123",
        email_sender=TEST_SENDER,
        storage_bucket=TEST_BUCKET,
    )


@pytest.fixture
def container(
    db: DynamoDBService,
    s3_bucket: Any,
    test_settings: Settings,
    mock_ses_client: MagicMock,
    mock_streams_client: MagicMock,
    mock_cognito_idp: MagicMock,
) -> Generator[ServiceContainer, None, None]:
    """ServiceContainer over moto tables with mocked SES, Streams and Cognito."""
    container = ServiceContainer(
        settings=test_settings,
        db=db,
        storage=StorageService(TEST_BUCKET, region_name=TEST_REGION, client=s3_bucket),
        feed=ChangeFeed(db, client=mock_streams_client),
        emails=EmailService(db, TEST_SENDER, client=mock_ses_client),
        cognito_client=mock_cognito_idp,
    )
    yield container
    container.close()


@pytest.fixture
def api_client(container: ServiceContainer) -> Generator[TestClient, None, None]:
    """TestClient whose routes resolve to the mocked container."""
    app.dependency_overrides[get_container] = lambda: container
    yield TestClient(app)
    app.dependency_overrides.clear()
