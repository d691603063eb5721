"""API models for booking endpoints.

The traveler id is not part of any request body; it comes from the
x-user-sub header.
"""

from datetime import date

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from voya.models.booking import Booking
from voya.models.enums import PaymentMethod


class QuoteRequest(BaseModel):
    """Request to price a stay before booking."""

    model_config = ConfigDict(
        # JSON has no date type; ISO strings must coerce
        strict=False,
        json_schema_extra={
            "examples": [
                {"property_id": "prop-123", "check_in": "2024-06-01", "check_out": "2024-06-04"}
            ]
        },
    )

    property_id: str = Field(..., description="Property to price")
    check_in: date = Field(..., description="Check-in date (YYYY-MM-DD)")
    check_out: date = Field(..., description="Check-out date (YYYY-MM-DD)")


class BookingSubmitRequest(BaseModel):
    """Booking form submission.

    Fields other than property_id are optional so that missing values are
    reported together with every other validation failure.
    """

    model_config = ConfigDict(
        strict=False,
        json_schema_extra={
            "examples": [
                {
                    "property_id": "prop-123",
                    "check_in": "2024-06-01",
                    "check_out": "2024-06-04",
                    "guests": 2,
                    "first_name": "Ada",
                    "last_name": "Lovelace",
                    "email": "ada@example.com",
                    "payment_method": "card",
                }
            ]
        },
    )

    property_id: str
    check_in: date | None = None
    check_out: date | None = None
    guests: int = Field(default=1, description="Number of guests")
    first_name: str | None = None
    last_name: str | None = None
    email: EmailStr | None = None
    phone: str | None = None
    special_requests: str | None = Field(default=None, max_length=1000)
    payment_method: PaymentMethod = PaymentMethod.CARD
    currency: str | None = Field(default=None, description="Defaults to the service currency")


class BookingListResponse(BaseModel):
    """Bookings of the current traveler, newest first."""

    model_config = ConfigDict(strict=True)

    bookings: list[Booking]
    total_count: int
