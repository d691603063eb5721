"""Unit tests for AnalyticsService."""

import datetime as dt
import re
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from voya.models.enums import AnalyticsMetric
from voya.models.errors import InvalidDateRange, StoreError
from voya.services.analytics_service import AnalyticsService
from voya.services.dynamodb import DynamoDBService


def _stored_events(db: DynamoDBService) -> list[dict]:
    return db.scan(AnalyticsService.TABLE)


def test_generates_session_id(db: DynamoDBService) -> None:
    assert re.match(r"^session_[0-9a-f]{12}$", AnalyticsService(db).session_id)


def test_track_event_persists(db: DynamoDBService) -> None:
    service = AnalyticsService(db, session_id="session_test")

    assert service.track_event("action", "open_map", {"zoom": 3}, user_id="user-001") is True

    [event] = _stored_events(db)
    assert event["session_id"] == "session_test"
    assert event["user_id"] == "user-001"
    assert event["action"] == "open_map"
    assert event["properties"] == {"zoom": 3}


def test_track_page_view(db: DynamoDBService) -> None:
    AnalyticsService(db).track_page_view("/search", {"referrer": "home"})

    [event] = _stored_events(db)
    assert event["event_type"] == "page_view"
    assert event["properties"] == {"page": "/search", "referrer": "home"}


def test_track_booking_stores_amount_as_text(db: DynamoDBService) -> None:
    AnalyticsService(db).track_booking("BKG-1", "prop-001", Decimal("300.00"), "EUR")

    [event] = _stored_events(db)
    assert event["action"] == "booking_created"
    assert event["properties"]["amount"] == "300.00"
    assert event["properties"]["currency"] == "EUR"


def test_track_error(db: DynamoDBService) -> None:
    AnalyticsService(db).track_error(ValueError("bad input"), {"page": "/book"})

    [event] = _stored_events(db)
    assert event["properties"]["error_type"] == "ValueError"
    assert event["properties"]["context"] == {"page": "/book"}


def test_store_failure_is_reported_not_raised() -> None:
    db = MagicMock()
    db.put_item.side_effect = StoreError()

    assert AnalyticsService(db).track_search({"guests": 2}, 0) is False


def test_track_action(db: DynamoDBService) -> None:
    service = AnalyticsService(db, session_id="session_test")

    assert service.track_action("generate_report", {"report_type": "users"}) is True

    [event] = _stored_events(db)
    assert event["event_type"] == "action"
    assert event["action"] == "generate_report"


def _put_event(db: DynamoDBService, event_id: str, event_type: str, day: str, session: str) -> None:
    db.put_item(
        AnalyticsService.TABLE,
        {
            "id": event_id,
            "session_id": session,
            "event_type": event_type,
            "action": "x",
            "properties": {},
            "created_at": f"{day}T10:00:00+00:00",
        },
    )


class TestSummarize:
    @pytest.fixture
    def service(self, db: DynamoDBService) -> AnalyticsService:
        _put_event(db, "e1", "page_view", "2024-06-01", "s1")
        _put_event(db, "e2", "page_view", "2024-06-02", "s2")
        _put_event(db, "e3", "search", "2024-06-02", "s2")
        _put_event(db, "e4", "booking", "2024-06-03", "s2")
        _put_event(db, "e5", "error", "2024-06-03", "s1")
        _put_event(db, "e6", "page_view", "2024-07-01", "s3")
        return AnalyticsService(db)

    def test_counts_every_metric_in_period(self, service: AnalyticsService) -> None:
        summary = service.summarize(dt.date(2024, 6, 1), dt.date(2024, 6, 3))

        assert summary.total_events == 5
        assert summary.unique_sessions == 2
        assert summary.metrics == {
            AnalyticsMetric.PAGE_VIEWS: 2,
            AnalyticsMetric.SEARCHES: 1,
            AnalyticsMetric.ACTIONS: 0,
            AnalyticsMetric.CONVERSIONS: 1,
            AnalyticsMetric.ERRORS: 1,
        }

    def test_requested_metrics_only(self, service: AnalyticsService) -> None:
        summary = service.summarize(
            dt.date(2024, 6, 2), dt.date(2024, 6, 2), [AnalyticsMetric.PAGE_VIEWS]
        )

        assert summary.metrics == {AnalyticsMetric.PAGE_VIEWS: 1}
        assert summary.total_events == 2

    def test_end_before_start(self, service: AnalyticsService) -> None:
        with pytest.raises(InvalidDateRange):
            service.summarize(dt.date(2024, 6, 3), dt.date(2024, 6, 1))
