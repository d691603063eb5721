"""Booking models: persisted records, submission requests and outcomes."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from .enums import BookingStatus, LifecycleState, PaymentMethod
from .errors import ErrorResponse


class Booking(BaseModel):
    """A reservation of one property by one traveler for a date range.

    Bookings are never deleted; cancellation is a status change.
    """

    model_config = ConfigDict(strict=True)

    id: str = Field(..., description="Booking ID assigned on creation")
    property_id: str = Field(..., description="Reference to Property")
    traveler_id: str = Field(..., description="Reference to traveler Profile")
    check_in_date: date
    check_out_date: date
    guests: int = Field(..., ge=1)
    nights: int = Field(..., ge=1)
    total_price: Decimal = Field(..., ge=0, description="nights x nightly rate")
    status: BookingStatus = Field(default=BookingStatus.PENDING)
    special_requests: str | None = None
    created_at: datetime
    updated_at: datetime


class BookingCreate(BaseModel):
    """Data required to persist a new pending booking."""

    model_config = ConfigDict(strict=True)

    property_id: str
    traveler_id: str
    check_in_date: date
    check_out_date: date
    guests: int = Field(..., ge=1)
    nights: int = Field(..., ge=1)
    total_price: Decimal = Field(..., ge=0)
    special_requests: str | None = None


class BookingRequest(BaseModel):
    """A booking form submission as entered by the traveler.

    Fields are optional so that missing values are reported by validation
    instead of failing model construction.
    """

    model_config = ConfigDict(strict=False)

    property_id: str
    traveler_id: str
    check_in: date | None = None
    check_out: date | None = None
    guests: int = 1
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    special_requests: str | None = Field(default=None, max_length=1000)
    payment_method: PaymentMethod = PaymentMethod.CARD
    currency: str = "USD"


class PriceQuote(BaseModel):
    """Computed stay price for a date range."""

    model_config = ConfigDict(strict=True)

    check_in: date
    check_out: date
    nights: int
    nightly_rate: Decimal
    total_price: Decimal


class BookingOutcome(BaseModel):
    """Terminal result of one booking submission attempt."""

    model_config = ConfigDict(strict=True)

    status: LifecycleState
    booking_id: str | None = None
    total_price: Decimal | None = None
    errors: list[ErrorResponse] = Field(default_factory=list)
    notification_errors: list[ErrorResponse] = Field(default_factory=list)
    message: str | None = None
    states: list[LifecycleState] = Field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status == LifecycleState.COMPLETED


class BookingReport(BaseModel):
    """Aggregate of bookings created within a period."""

    model_config = ConfigDict(strict=True)

    start: date
    end: date
    total_bookings: int
    total_revenue: Decimal
    by_status: dict[str, int] = Field(default_factory=dict)
