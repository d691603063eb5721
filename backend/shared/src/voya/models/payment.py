"""Payment model for transaction records."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from .enums import PaymentMethod, PaymentStatus


class Payment(BaseModel):
    """A payment transaction against a booking.

    Created as processing, terminal once completed or failed.
    """

    model_config = ConfigDict(strict=True)

    id: str = Field(..., description="Unique payment ID")
    booking_id: str = Field(..., description="Reference to Booking")
    amount: Decimal = Field(..., ge=0)
    currency: str = Field(default="USD", description="Currency code")
    method: PaymentMethod
    status: PaymentStatus
    transaction_id: str | None = Field(
        default=None, description="External transaction reference from the gateway"
    )
    error_message: str | None = Field(default=None, description="Error details if failed")
    created_at: datetime
    completed_at: datetime | None = None


class GatewayResult(BaseModel):
    """Response from a payment gateway charge attempt."""

    model_config = ConfigDict(strict=True)

    success: bool
    transaction_id: str | None = None
    error_code: str | None = None
    error_message: str | None = None
