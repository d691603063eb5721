"""Unit tests for environment settings and correlation-aware logging."""

import logging

import pytest

from voya.config import Settings
from voya.utils.logging import (
    CorrelationIdFilter,
    StructuredFormatter,
    clear_correlation_id,
    get_correlation_id,
    get_logger,
    log_booking_operation,
    log_notification_event,
    set_correlation_id,
)


class TestSettings:
    def test_defaults_follow_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ENVIRONMENT", "staging")
        monkeypatch.delenv("DYNAMODB_TABLE_PREFIX", raising=False)
        monkeypatch.delenv("STORAGE_BUCKET", raising=False)
        monkeypatch.delenv("CORS_ORIGINS", raising=False)

        settings = Settings.from_env()

        assert settings.environment == "staging"
        assert settings.table_prefix == "voya-staging"
        assert settings.storage_bucket == "voya-staging-media"
        assert settings.notifications_page_size == 50
        assert "http://localhost:3000" in settings.cors_origins

    def test_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DYNAMODB_TABLE_PREFIX", "custom")
        monkeypatch.setenv("COGNITO_CLIENT_ID", "client-xyz")
        monkeypatch.setenv("CORS_ORIGINS", "https://voya.travel, https://admin.voya.travel,")

        settings = Settings.from_env()

        assert settings.table_prefix == "custom"
        assert settings.cognito_client_id == "client-xyz"
        assert settings.cors_origins == ["https://voya.travel", "https://admin.voya.travel"]


class TestCorrelationId:
    def teardown_method(self) -> None:
        clear_correlation_id()

    def test_generates_when_missing(self) -> None:
        cid = set_correlation_id()

        assert len(cid) == 36
        assert get_correlation_id() == cid

    def test_keeps_supplied_id(self) -> None:
        assert set_correlation_id("req-123") == "req-123"

        clear_correlation_id()
        assert get_correlation_id() is None

    def test_formatter_prefixes_id(self) -> None:
        set_correlation_id("req-abc")
        record = logging.LogRecord("voya", logging.INFO, __file__, 1, "hello", None, None)
        CorrelationIdFilter().filter(record)

        formatted = StructuredFormatter("%(levelname)s %(message)s").format(record)

        assert formatted == "[req-abc] INFO hello"

    def test_get_logger_adds_filter_once(self) -> None:
        logger = get_logger("voya.tests.filters")
        get_logger("voya.tests.filters")

        assert sum(isinstance(f, CorrelationIdFilter) for f in logger.filters) == 1


class TestStructuredHelpers:
    def test_booking_operation_error_logged_as_error(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        logger = get_logger("voya.tests.booking")

        with caplog.at_level(logging.INFO, logger="voya.tests.booking"):
            log_booking_operation(logger, "submit_payment", booking_id="BKG-1", amount=300)
            log_booking_operation(logger, "submit_payment", booking_id="BKG-2", error="declined")

        first, second = caplog.records
        assert first.levelno == logging.INFO
        assert first.getMessage() == "Booking operation: submit_payment | booking_id=BKG-1 | amount=300"
        assert second.levelno == logging.ERROR
        assert second.error == "declined"

    def test_notification_event_levels(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = get_logger("voya.tests.notifications")

        with caplog.at_level(logging.INFO, logger="voya.tests.notifications"):
            log_notification_event(logger, "push", "n1", result="applied", unread_count=1)
            log_notification_event(logger, "push", "n1", result="duplicate")
            log_notification_event(logger, "mark_read", "n2", result="rolled_back")

        assert [r.levelno for r in caplog.records] == [
            logging.INFO,
            logging.WARNING,
            logging.ERROR,
        ]
        assert caplog.records[0].getMessage() == "Notification push | id=n1 | result=applied | unread=1"
