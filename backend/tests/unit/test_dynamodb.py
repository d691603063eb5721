"""Unit tests for the DynamoDB wrapper: value conversion, error translation, transactions."""

import datetime as dt
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from voya.models.enums import BookingStatus
from voya.models.errors import ErrorCode, StoreError
from voya.services.dynamodb import DynamoDBService, to_dynamodb_value, to_item

from conftest import TEST_PREFIX, TEST_REGION


def _client_error(code: str, operation: str = "TransactWriteItems") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": "boom"}}, operation)


class TestValueConversion:
    def test_converts_python_types(self) -> None:
        value = {
            "status": BookingStatus.CONFIRMED,
            "day": dt.date(2024, 6, 1),
            "rate": 99.5,
            "flag": True,
            "tags": [1.5, "x"],
        }

        assert to_dynamodb_value(value) == {
            "status": "confirmed",
            "day": "2024-06-01",
            "rate": Decimal("99.5"),
            "flag": True,
            "tags": [Decimal("1.5"), "x"],
        }

    def test_to_item_drops_none(self) -> None:
        assert to_item({"id": "a", "phone": None}) == {"id": "a"}


class TestCrud:
    def test_put_and_get(self, db: DynamoDBService) -> None:
        assert db.put_item("profiles", {"id": "u1", "email": "a@b.com"}) is True
        assert db.get_item("profiles", {"id": "u1"}) == {"id": "u1", "email": "a@b.com"}

    def test_conditional_put_failure_returns_false(self, db: DynamoDBService) -> None:
        db.put_item("profiles", {"id": "u1"})

        created = db.put_item(
            "profiles", {"id": "u1"}, condition_expression="attribute_not_exists(id)"
        )

        assert created is False

    def test_update_fields_handles_reserved_words(self, db: DynamoDBService) -> None:
        db.put_item("bookings", {"id": "b1", "status": "pending"})

        attrs = db.update_fields("bookings", {"id": "b1"}, {"status": BookingStatus.CONFIRMED})

        assert attrs is not None
        assert attrs["status"] == "confirmed"

    def test_update_fields_condition_failure_returns_none(self, db: DynamoDBService) -> None:
        db.put_item("bookings", {"id": "b1", "status": "cancelled"})

        attrs = db.update_fields(
            "bookings",
            {"id": "b1"},
            {"status": "confirmed"},
            condition_expression="#status = :expected",
            condition_values={":expected": "pending"},
        )

        assert attrs is None
        assert db.get_item("bookings", {"id": "b1"})["status"] == "cancelled"

    def test_missing_table_raises_store_error(self, create_tables: None) -> None:
        db = DynamoDBService("no-such-prefix", region_name=TEST_REGION)

        with pytest.raises(StoreError) as exc_info:
            db.get_item("bookings", {"id": "b1"})

        assert exc_info.value.code == ErrorCode.STORE_ERROR
        assert exc_info.value.details["operation"] == "get_item"
        assert exc_info.value.details["aws_error"] == "ResourceNotFoundException"

    def test_scan_with_filter(self, db: DynamoDBService) -> None:
        from boto3.dynamodb.conditions import Attr

        db.put_item("properties", {"id": "p1", "is_available": True})
        db.put_item("properties", {"id": "p2", "is_available": False})

        items = db.scan("properties", filter_expression=Attr("is_available").eq(True))

        assert [item["id"] for item in items] == ["p1"]

    def test_batch_get(self, db: DynamoDBService) -> None:
        db.put_item("profiles", {"id": "u1"})
        db.put_item("profiles", {"id": "u2"})

        items = db.batch_get("profiles", [{"id": "u1"}, {"id": "u2"}, {"id": "u3"}])

        assert sorted(item["id"] for item in items) == ["u1", "u2"]
        assert db.batch_get("profiles", []) == []


class TestTransactions:
    def test_updates_every_item(self, db: DynamoDBService) -> None:
        for notification_id in ("n1", "n2", "n3"):
            db.put_item("notifications", {"id": notification_id, "read": False})

        db.transact_update_fields(
            "notifications", [{"id": "n1"}, {"id": "n2"}, {"id": "n3"}], {"read": True}
        )

        assert all(
            db.get_item("notifications", {"id": n})["read"] is True for n in ("n1", "n2", "n3")
        )

    def test_missing_item_cancels_whole_transaction(self, db: DynamoDBService) -> None:
        db.put_item("notifications", {"id": "n1", "user_id": "u1", "read": False})

        with pytest.raises(StoreError):
            db.transact_update_fields(
                "notifications", [{"id": "n1"}, {"id": "gone"}], {"read": True}
            )

        assert db.get_item("notifications", {"id": "n1"})["read"] is False
        assert db.get_item("notifications", {"id": "gone"}) is None

    def test_single_call_with_existence_condition(self) -> None:
        client = MagicMock()
        db = DynamoDBService(TEST_PREFIX, resource=MagicMock(), client=client)
        keys = [{"id": f"n{i}"} for i in range(DynamoDBService.TRANSACT_MAX_ITEMS)]

        db.transact_update_fields("notifications", keys, {"read": True})

        client.transact_write_items.assert_called_once()
        items = client.transact_write_items.call_args.kwargs["TransactItems"]
        assert len(items) == 100
        update = items[0]["Update"]
        assert update["TableName"] == f"{TEST_PREFIX}-notifications"
        assert update["Key"] == {"id": {"S": "n0"}}
        assert update["ConditionExpression"] == "attribute_exists(#k0)"
        assert update["ExpressionAttributeNames"] == {"#f0": "read", "#k0": "id"}
        assert update["ExpressionAttributeValues"] == {":v0": {"BOOL": True}}

    def test_too_many_items_writes_nothing(self) -> None:
        client = MagicMock()
        db = DynamoDBService(TEST_PREFIX, resource=MagicMock(), client=client)
        keys = [{"id": f"n{i}"} for i in range(150)]

        with pytest.raises(StoreError) as exc_info:
            db.transact_update_fields("notifications", keys, {"read": True})

        assert exc_info.value.details["reason"] == "too_many_items"
        client.transact_write_items.assert_not_called()

    def test_rejected_transaction_raises_store_error(self) -> None:
        client = MagicMock()
        client.transact_write_items.side_effect = _client_error("TransactionCanceledException")
        db = DynamoDBService(TEST_PREFIX, resource=MagicMock(), client=client)

        with pytest.raises(StoreError) as exc_info:
            db.transact_update_fields("notifications", [{"id": "n1"}], {"read": True})

        assert exc_info.value.details["aws_error"] == "TransactionCanceledException"


class TestStreams:
    def test_stream_arn_for_streamed_table(self, db: DynamoDBService) -> None:
        arn = db.stream_arn("notifications")

        assert arn is not None
        assert "voya-test-notifications" in arn

    def test_no_stream_arn_without_streams(self, db: DynamoDBService) -> None:
        assert db.stream_arn("bookings") is None
