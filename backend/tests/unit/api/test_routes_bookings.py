"""Tests for booking endpoints."""

from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from voya.models.errors import BookingInProgressError, ErrorCode
from voya.services.catalog_service import CatalogService
from voya.services.container import ServiceContainer
from voya.services.payment_service import MockPaymentGateway
from voya_api.dependencies import USER_SUB_HEADER

from conftest import HOST_ID, PROPERTY_ID, TRAVELER_ID

TRAVELER = {USER_SUB_HEADER: TRAVELER_ID}

BOOKING_FORM: dict[str, Any] = {
    "property_id": PROPERTY_ID,
    "check_in": "2024-06-01",
    "check_out": "2024-06-04",
    "guests": 2,
    "first_name": "Ada",
    "last_name": "Lovelace",
    "email": "ada@example.com",
}


@pytest.fixture
def client(api_client: TestClient, seeded_catalog: CatalogService) -> TestClient:
    return api_client


def _submit(client: TestClient, **changes: Any) -> Any:
    return client.post("/api/bookings", json={**BOOKING_FORM, **changes}, headers=TRAVELER)


class TestQuote:
    def test_prices_stay(self, client: TestClient) -> None:
        response = client.post(
            "/api/bookings/quote",
            json={"property_id": PROPERTY_ID, "check_in": "2024-06-01", "check_out": "2024-06-04"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["nights"] == 3
        assert body["total_price"] == "300"
        assert body["nightly_rate"] == "100"

    def test_check_out_before_check_in(self, client: TestClient) -> None:
        response = client.post(
            "/api/bookings/quote",
            json={"property_id": PROPERTY_ID, "check_in": "2024-06-04", "check_out": "2024-06-04"},
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == ErrorCode.INVALID_DATE_RANGE.value

    def test_unknown_property(self, client: TestClient) -> None:
        response = client.post(
            "/api/bookings/quote",
            json={"property_id": "prop-missing", "check_in": "2024-06-01", "check_out": "2024-06-04"},
        )

        assert response.status_code == 404


class TestSubmitBooking:
    def test_requires_identity(self, client: TestClient) -> None:
        response = client.post("/api/bookings", json=BOOKING_FORM)

        assert response.status_code == 401

    def test_completed(self, client: TestClient, container: ServiceContainer) -> None:
        response = _submit(client)

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "completed"
        assert body["total_price"] == "300"
        assert body["booking_id"].startswith("BKG-")

        booking = container.bookings.require_booking(body["booking_id"])
        assert booking.traveler_id == TRAVELER_ID
        [payment] = container.payments.get_payments_for_booking(booking.id)
        assert payment.currency == "USD"

    def test_rejected_lists_errors(self, client: TestClient) -> None:
        response = _submit(client, guests=6, first_name=None)

        assert response.status_code == 400
        body = response.json()
        assert body["status"] == "rejected"
        assert {e["error_code"] for e in body["errors"]} == {
            ErrorCode.GUEST_LIMIT_EXCEEDED.value,
            ErrorCode.MISSING_REQUIRED_FIELD.value,
        }

    def test_payment_declined(self, client: TestClient, container: ServiceContainer) -> None:
        container.payments.gateway = MockPaymentGateway(succeed=False)

        response = _submit(client)

        assert response.status_code == 402
        body = response.json()
        assert body["status"] == "partially_failed"
        assert "contact support" in body["message"]
        booking = container.bookings.require_booking(body["booking_id"])
        assert booking.status.value == "pending"

    def test_in_progress(self, client: TestClient, container: ServiceContainer) -> None:
        controller = MagicMock()
        controller.submit_booking.side_effect = BookingInProgressError()

        with patch.object(container, "booking_controller", return_value=controller):
            response = _submit(client)

        assert response.status_code == 409
        assert response.json()["error_code"] == ErrorCode.BOOKING_IN_PROGRESS.value

    def test_invalid_email_is_422(self, client: TestClient) -> None:
        response = _submit(client, email="not-an-email")

        assert response.status_code == 422


class TestReadBookings:
    @pytest.fixture
    def booking_id(self, client: TestClient) -> str:
        return _submit(client).json()["booking_id"]

    def test_list_mine(self, client: TestClient, booking_id: str) -> None:
        response = client.get("/api/bookings", headers=TRAVELER)

        assert response.status_code == 200
        body = response.json()
        assert body["total_count"] == 1
        assert body["bookings"][0]["id"] == booking_id
        assert body["bookings"][0]["status"] == "confirmed"

    def test_other_traveler_sees_none(self, client: TestClient, booking_id: str) -> None:
        response = client.get("/api/bookings", headers={USER_SUB_HEADER: "traveler-002"})

        assert response.json()["total_count"] == 0

    def test_get_as_traveler_and_host(self, client: TestClient, booking_id: str) -> None:
        as_traveler = client.get(f"/api/bookings/{booking_id}", headers=TRAVELER)
        as_host = client.get(f"/api/bookings/{booking_id}", headers={USER_SUB_HEADER: HOST_ID})

        assert as_traveler.status_code == 200
        assert as_traveler.json()["check_in_date"] == "2024-06-01"
        assert as_host.status_code == 200

    def test_get_as_stranger(self, client: TestClient, booking_id: str) -> None:
        response = client.get(
            f"/api/bookings/{booking_id}", headers={USER_SUB_HEADER: "someone-else"}
        )

        assert response.status_code == 403
        assert response.json()["error_code"] == ErrorCode.UNAUTHORIZED.value

    def test_get_missing(self, client: TestClient) -> None:
        response = client.get("/api/bookings/BKG-2024-MISSING0", headers=TRAVELER)

        assert response.status_code == 404
        assert response.json()["error_code"] == ErrorCode.BOOKING_NOT_FOUND.value


class TestCancelBooking:
    def test_cancel_then_conflict(self, client: TestClient) -> None:
        booking_id = _submit(client).json()["booking_id"]

        first = client.post(f"/api/bookings/{booking_id}/cancel", headers=TRAVELER)
        second = client.post(f"/api/bookings/{booking_id}/cancel", headers=TRAVELER)

        assert first.status_code == 200
        assert first.json()["status"] == "cancelled"
        assert second.status_code == 409
        assert second.json()["error_code"] == ErrorCode.INVALID_STATUS_TRANSITION.value

    def test_stranger_cannot_cancel(self, client: TestClient) -> None:
        booking_id = _submit(client).json()["booking_id"]

        response = client.post(
            f"/api/bookings/{booking_id}/cancel", headers={USER_SUB_HEADER: "someone-else"}
        )

        assert response.status_code == 403
