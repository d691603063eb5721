"""Enumeration types for Voya data models."""

from enum import Enum


class BookingStatus(str, Enum):
    """Status of a booking record."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    """Status of a payment transaction."""

    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class PaymentMethod(str, Enum):
    """Supported payment methods."""

    CARD = "card"
    STRIPE = "stripe"
    PAYPAL = "paypal"
    BANK_TRANSFER = "bank_transfer"


class NotificationType(str, Enum):
    """Category of a user notification."""

    BOOKING = "booking"
    PAYMENT = "payment"
    MESSAGE = "message"
    REMINDER = "reminder"
    PROMOTION = "promotion"
    SYSTEM = "system"


class UserRole(str, Enum):
    """Role stored on a user profile."""

    TRAVELER = "traveler"
    HOST = "host"
    ADMIN = "admin"


class EmailStatus(str, Enum):
    """Delivery status of an outbound email."""

    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class SessionEvent(str, Enum):
    """Auth state change delivered to session listeners."""

    SIGNED_IN = "signed_in"
    SIGNED_OUT = "signed_out"
    TOKEN_REFRESHED = "token_refreshed"
    USER_UPDATED = "user_updated"


class ChangeEventType(str, Enum):
    """Kind of change delivered by the record change feed."""

    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


class LifecycleState(str, Enum):
    """States visited by one booking submission attempt."""

    IDLE = "idle"
    VALIDATING = "validating"
    REJECTED = "rejected"
    PERSISTING = "persisting"
    FAILED = "failed"
    PAYING_FOR_BOOKING = "paying_for_booking"
    PARTIALLY_FAILED = "partially_failed"
    CONFIRMING = "confirming"
    NOTIFYING_USER = "notifying_user"
    COMPLETED = "completed"

    @property
    def is_terminal(self) -> bool:
        return self in (
            LifecycleState.REJECTED,
            LifecycleState.FAILED,
            LifecycleState.PARTIALLY_FAILED,
            LifecycleState.COMPLETED,
        )


class ReportType(str, Enum):
    """Aggregate reports over records created in a period."""

    BOOKINGS = "bookings"
    USERS = "users"
    PROPERTIES = "properties"


class AnalyticsMetric(str, Enum):
    """Event counts available from the analytics summary."""

    PAGE_VIEWS = "page_views"
    SEARCHES = "searches"
    ACTIONS = "actions"
    CONVERSIONS = "conversions"
    ERRORS = "errors"
