"""API request/response models.

Domain models (Booking, Notification, Property, ...) live in voya.models;
these cover HTTP-specific shapes only.
"""

from voya_api.models.bookings import BookingListResponse, BookingSubmitRequest, QuoteRequest
from voya_api.models.catalog import (
    AnalyticsEventRequest,
    AnalyticsEventResponse,
    DestinationListResponse,
    PropertyDetailResponse,
    PropertyListResponse,
)
from voya_api.models.notifications import NotificationCreateRequest, NotificationUpdateResponse
from voya_api.models.reports import ReportRequest

__all__ = [
    "AnalyticsEventRequest",
    "AnalyticsEventResponse",
    "BookingListResponse",
    "BookingSubmitRequest",
    "DestinationListResponse",
    "NotificationCreateRequest",
    "NotificationUpdateResponse",
    "PropertyDetailResponse",
    "PropertyListResponse",
    "QuoteRequest",
    "ReportRequest",
]
