"""Voya services: record store access, booking lifecycle and notifications."""

from .analytics_service import AnalyticsService
from .booking_lifecycle import BookingLifecycleController
from .booking_service import BookingService
from .catalog_service import CatalogService
from .container import ServiceContainer
from .dynamodb import DynamoDBService
from .email_service import EmailService
from .notification_service import NotificationService
from .notification_store import NotificationStore
from .payment_service import MockPaymentGateway, PaymentGateway, PaymentService
from .realtime import ChangeFeed, Subscription
from .session_manager import SessionListener, SessionManager
from .storage_service import StorageService

__all__ = [
    "AnalyticsService",
    "BookingLifecycleController",
    "BookingService",
    "CatalogService",
    "ChangeFeed",
    "DynamoDBService",
    "EmailService",
    "MockPaymentGateway",
    "NotificationService",
    "NotificationStore",
    "PaymentGateway",
    "PaymentService",
    "ServiceContainer",
    "SessionListener",
    "SessionManager",
    "StorageService",
    "Subscription",
]
