"""Standard error codes for Voya booking and notification operations.

Every failure surfaced by the services carries one of these codes so the
presentation layer can pick remediation copy (fix the form, retry, or
contact support) without parsing messages.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ErrorCode(str, Enum):
    """Standard error codes."""

    # Booking validation error codes (ERR_VAL_001-ERR_VAL_004)
    INVALID_DATE_RANGE = "ERR_VAL_001"
    INVALID_RATE = "ERR_VAL_002"
    GUEST_LIMIT_EXCEEDED = "ERR_VAL_003"
    MISSING_REQUIRED_FIELD = "ERR_VAL_004"

    # Collaborator boundary error codes (ERR_001-ERR_004)
    STORE_ERROR = "ERR_001"
    PAYMENT_FAILED = "ERR_002"
    NOTIFICATION_FAILED = "ERR_003"
    FETCH_FAILED = "ERR_004"

    # Booking state error codes (ERR_BKG_001-ERR_BKG_004)
    BOOKING_NOT_FOUND = "ERR_BKG_001"
    PROPERTY_NOT_FOUND = "ERR_BKG_002"
    INVALID_STATUS_TRANSITION = "ERR_BKG_003"
    BOOKING_IN_PROGRESS = "ERR_BKG_004"

    # Authentication error codes (ERR_AUTH_001-ERR_AUTH_004)
    AUTH_REQUIRED = "ERR_AUTH_001"
    INVALID_CREDENTIALS = "ERR_AUTH_002"
    SESSION_EXPIRED = "ERR_AUTH_003"
    UNAUTHORIZED = "ERR_AUTH_004"


# Human-readable error messages
ERROR_MESSAGES: dict[ErrorCode, str] = {
    # Validation errors
    ErrorCode.INVALID_DATE_RANGE: "Check-out date must be after check-in date",
    ErrorCode.INVALID_RATE: "Nightly rate must be greater than zero",
    ErrorCode.GUEST_LIMIT_EXCEEDED: "Number of guests is outside the allowed range",
    ErrorCode.MISSING_REQUIRED_FIELD: "A required field is missing",
    # Collaborator errors
    ErrorCode.STORE_ERROR: "The booking could not be saved",
    ErrorCode.PAYMENT_FAILED: "Booking created but payment failed",
    ErrorCode.NOTIFICATION_FAILED: "The notification could not be updated",
    ErrorCode.FETCH_FAILED: "Notifications could not be loaded",
    # Booking state errors
    ErrorCode.BOOKING_NOT_FOUND: "Booking not found",
    ErrorCode.PROPERTY_NOT_FOUND: "Property not found",
    ErrorCode.INVALID_STATUS_TRANSITION: "Booking cannot move to the requested status",
    ErrorCode.BOOKING_IN_PROGRESS: "A booking submission is already in progress",
    # Authentication errors
    ErrorCode.AUTH_REQUIRED: "Authentication required to perform this action",
    ErrorCode.INVALID_CREDENTIALS: "Email or password is incorrect",
    ErrorCode.SESSION_EXPIRED: "Authentication session has expired",
    ErrorCode.UNAUTHORIZED: "User not authorized for this action",
}

# Remediation hints for the presentation layer
ERROR_RECOVERY: dict[ErrorCode, str] = {
    # Validation error recovery
    ErrorCode.INVALID_DATE_RANGE: "Pick a check-out date after the check-in date",
    ErrorCode.INVALID_RATE: "Choose a different property or contact the host",
    ErrorCode.GUEST_LIMIT_EXCEEDED: "Adjust the number of guests to the property limit",
    ErrorCode.MISSING_REQUIRED_FIELD: "Fill in all required fields",
    # Collaborator error recovery
    ErrorCode.STORE_ERROR: "Try again in a moment",
    ErrorCode.PAYMENT_FAILED: "Please contact support to complete your booking",
    ErrorCode.NOTIFICATION_FAILED: "Try again in a moment",
    ErrorCode.FETCH_FAILED: "Notifications will refresh on the next load",
    # Booking state error recovery
    ErrorCode.BOOKING_NOT_FOUND: "Verify the booking ID",
    ErrorCode.PROPERTY_NOT_FOUND: "Verify the property ID",
    ErrorCode.INVALID_STATUS_TRANSITION: "Refresh the booking to see its current status",
    ErrorCode.BOOKING_IN_PROGRESS: "Wait for the current submission to finish",
    # Authentication error recovery
    ErrorCode.AUTH_REQUIRED: "Sign in and try again",
    ErrorCode.INVALID_CREDENTIALS: "Check your email and password",
    ErrorCode.SESSION_EXPIRED: "Sign in again",
    ErrorCode.UNAUTHORIZED: "Verify you own this resource",
}


class ErrorResponse(BaseModel):
    """Standard error payload for failed operations.

    Used both for HTTP error bodies and for the aggregated validation list
    returned by the booking calculator.
    """

    model_config = ConfigDict(strict=True)

    success: bool = False
    error_code: ErrorCode
    message: str
    recovery: str
    details: Optional[dict[str, str]] = None

    @classmethod
    def from_code(
        cls,
        code: ErrorCode,
        details: Optional[dict[str, str]] = None,
    ) -> "ErrorResponse":
        """Create an ErrorResponse from an error code.

        Args:
            code: The error code
            details: Optional additional context about the error

        Returns:
            An ErrorResponse with the message and recovery hint for the code.
        """
        return cls(
            error_code=code,
            message=ERROR_MESSAGES[code],
            recovery=ERROR_RECOVERY[code],
            details=details,
        )


class VoyaError(Exception):
    """Base exception raised by Voya services.

    Can be caught and converted to an ErrorResponse for API responses.
    """

    default_code: ErrorCode = ErrorCode.STORE_ERROR

    def __init__(
        self,
        code: Optional[ErrorCode] = None,
        details: Optional[dict[str, str]] = None,
    ):
        self.code = code or self.default_code
        self.message = ERROR_MESSAGES[self.code]
        self.recovery = ERROR_RECOVERY[self.code]
        self.details = details
        super().__init__(self.message)

    def to_error_response(self) -> ErrorResponse:
        """Convert this exception to an ErrorResponse."""
        return ErrorResponse.from_code(self.code, self.details)


class InvalidDateRange(VoyaError):
    default_code = ErrorCode.INVALID_DATE_RANGE


class InvalidRate(VoyaError):
    default_code = ErrorCode.INVALID_RATE


class GuestLimitExceeded(VoyaError):
    default_code = ErrorCode.GUEST_LIMIT_EXCEEDED


class MissingRequiredField(VoyaError):
    default_code = ErrorCode.MISSING_REQUIRED_FIELD


class StoreError(VoyaError):
    """Record store call failed (network, throttling, permissions)."""

    default_code = ErrorCode.STORE_ERROR


class PaymentError(VoyaError):
    """Payment could not be completed for a booking."""

    default_code = ErrorCode.PAYMENT_FAILED


class NotificationError(VoyaError):
    """Notification or email side effect failed."""

    default_code = ErrorCode.NOTIFICATION_FAILED


class FetchError(VoyaError):
    """Bulk notification fetch failed; previous state is kept."""

    default_code = ErrorCode.FETCH_FAILED


class BookingNotFound(VoyaError):
    default_code = ErrorCode.BOOKING_NOT_FOUND


class PropertyNotFound(VoyaError):
    default_code = ErrorCode.PROPERTY_NOT_FOUND


class InvalidStatusTransition(VoyaError):
    default_code = ErrorCode.INVALID_STATUS_TRANSITION


class BookingInProgressError(VoyaError):
    default_code = ErrorCode.BOOKING_IN_PROGRESS


class AuthenticationError(VoyaError):
    default_code = ErrorCode.AUTH_REQUIRED
