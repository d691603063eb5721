"""API routes package.

Routers are organized by domain:

- health: Health check endpoint
- bookings: Quotes, booking submission, listing and cancellation
- notifications: The caller's notification feed
- catalog: Destinations and property search
- analytics: Client event ingestion and period summaries
- reports: Booking, user and property reports

All routers are registered in main.py with /api prefix.
"""

from voya_api.routes.analytics import router as analytics_router
from voya_api.routes.bookings import router as bookings_router
from voya_api.routes.catalog import router as catalog_router
from voya_api.routes.health import router as health_router
from voya_api.routes.notifications import router as notifications_router
from voya_api.routes.reports import router as reports_router

__all__ = [
    "analytics_router",
    "bookings_router",
    "catalog_router",
    "health_router",
    "notifications_router",
    "reports_router",
]
