"""Pydantic models for Voya data entities."""

from .analytics import AnalyticsEvent, AnalyticsSummary
from .booking import (
    Booking,
    BookingCreate,
    BookingOutcome,
    BookingReport,
    BookingRequest,
    PriceQuote,
)
from .catalog import Destination, Property, PropertyFilters, Review
from .enums import (
    AnalyticsMetric,
    BookingStatus,
    ChangeEventType,
    EmailStatus,
    LifecycleState,
    NotificationType,
    PaymentMethod,
    PaymentStatus,
    ReportType,
    SessionEvent,
    UserRole,
)
from .errors import (
    ERROR_MESSAGES,
    ERROR_RECOVERY,
    AuthenticationError,
    BookingInProgressError,
    BookingNotFound,
    ErrorCode,
    ErrorResponse,
    FetchError,
    GuestLimitExceeded,
    InvalidDateRange,
    InvalidRate,
    InvalidStatusTransition,
    MissingRequiredField,
    NotificationError,
    PaymentError,
    PropertyNotFound,
    StoreError,
    VoyaError,
)
from .notification import (
    EmailNotification,
    Notification,
    NotificationCreate,
    NotificationSnapshot,
)
from .payment import GatewayResult, Payment
from .profile import AuthUser, Profile, ProfileUpdate, Session, SignUpResult
from .realtime import ChangeEvent
from .report import GroupedReport

__all__ = [
    # Enums
    "AnalyticsMetric",
    "BookingStatus",
    "ChangeEventType",
    "EmailStatus",
    "LifecycleState",
    "NotificationType",
    "PaymentMethod",
    "PaymentStatus",
    "ReportType",
    "SessionEvent",
    "UserRole",
    # Booking
    "Booking",
    "BookingCreate",
    "BookingOutcome",
    "BookingReport",
    "BookingRequest",
    "PriceQuote",
    # Catalog
    "Destination",
    "Property",
    "PropertyFilters",
    "Review",
    # Payment
    "GatewayResult",
    "Payment",
    # Notifications
    "EmailNotification",
    "Notification",
    "NotificationCreate",
    "NotificationSnapshot",
    # Auth
    "AuthUser",
    "Profile",
    "ProfileUpdate",
    "Session",
    "SignUpResult",
    # Analytics / reports / realtime
    "AnalyticsEvent",
    "AnalyticsSummary",
    "GroupedReport",
    "ChangeEvent",
    # Errors
    "ERROR_MESSAGES",
    "ERROR_RECOVERY",
    "AuthenticationError",
    "BookingInProgressError",
    "BookingNotFound",
    "ErrorCode",
    "ErrorResponse",
    "FetchError",
    "GuestLimitExceeded",
    "InvalidDateRange",
    "InvalidRate",
    "InvalidStatusTransition",
    "MissingRequiredField",
    "NotificationError",
    "PaymentError",
    "PropertyNotFound",
    "StoreError",
    "VoyaError",
]
