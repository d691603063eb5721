"""Tests for app-level behaviour: health, correlation IDs and error mapping."""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_402_PAYMENT_REQUIRED,
    HTTP_403_FORBIDDEN,
    HTTP_409_CONFLICT,
    HTTP_503_SERVICE_UNAVAILABLE,
)

from voya.models.errors import ErrorCode
from voya.services.container import ServiceContainer
from voya_api.dependencies import get_container
from voya_api.exceptions import ERROR_CODE_TO_HTTP_STATUS, get_http_status_for_error
from voya_api.main import app
from voya_api.middleware.correlation import CORRELATION_ID_HEADER


class TestHealth:
    def test_ping_needs_no_container(self) -> None:
        response = TestClient(app).get("/api/ping")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["service"] == "voya-api"

    def test_health_reports_environment(self, api_client: TestClient) -> None:
        response = api_client.get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["environment"] == "test"
        assert "version" in body


class TestCorrelationId:
    def test_echoes_supplied_id(self, api_client: TestClient) -> None:
        response = api_client.get("/api/health", headers={CORRELATION_ID_HEADER: "req-42"})

        assert response.headers[CORRELATION_ID_HEADER] == "req-42"

    def test_generates_id(self, api_client: TestClient) -> None:
        first = api_client.get("/api/ping").headers[CORRELATION_ID_HEADER]
        second = api_client.get("/api/ping").headers[CORRELATION_ID_HEADER]

        assert len(first) == 36
        assert first != second


class TestErrorMapping:
    @pytest.mark.parametrize(
        ("code", "status"),
        [
            (ErrorCode.GUEST_LIMIT_EXCEEDED, HTTP_400_BAD_REQUEST),
            (ErrorCode.PAYMENT_FAILED, HTTP_402_PAYMENT_REQUIRED),
            (ErrorCode.UNAUTHORIZED, HTTP_403_FORBIDDEN),
            (ErrorCode.BOOKING_IN_PROGRESS, HTTP_409_CONFLICT),
            (ErrorCode.FETCH_FAILED, HTTP_503_SERVICE_UNAVAILABLE),
        ],
    )
    def test_status_for_code(self, code: ErrorCode, status: int) -> None:
        assert get_http_status_for_error(code) == status

    def test_every_code_is_mapped(self) -> None:
        assert set(ERROR_CODE_TO_HTTP_STATUS) == set(ErrorCode)

    def test_missing_identity_is_401(self, api_client: TestClient) -> None:
        response = api_client.get("/api/bookings")

        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["error_code"] == ErrorCode.AUTH_REQUIRED.value
        assert body["recovery"]

    def test_unexpected_error_is_500_without_details(self, container: ServiceContainer) -> None:
        app.dependency_overrides[get_container] = lambda: container
        try:
            client = TestClient(app, raise_server_exceptions=False)
            with patch.object(
                container.catalog, "list_destinations", side_effect=RuntimeError("boom")
            ):
                response = client.get("/api/destinations")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        body = response.json()
        assert body["error_code"] == "ERR_INTERNAL"
        assert "boom" not in body["message"]
