"""Analytics event tracking and period summaries.

Tracking never interrupts the caller: a failed write is logged and reported
as False. Summaries are reads and raise like any other query.
"""

import datetime as dt
import uuid
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from boto3.dynamodb.conditions import Attr

from voya.models.analytics import AnalyticsEvent, AnalyticsSummary
from voya.models.enums import AnalyticsMetric
from voya.models.errors import InvalidDateRange, StoreError
from voya.utils.logging import get_logger

if TYPE_CHECKING:
    from .dynamodb import DynamoDBService

logger = get_logger(__name__)

# Event type counted by each metric; a completed booking is the conversion
METRIC_EVENT_TYPES: dict[AnalyticsMetric, str] = {
    AnalyticsMetric.PAGE_VIEWS: "page_view",
    AnalyticsMetric.SEARCHES: "search",
    AnalyticsMetric.ACTIONS: "action",
    AnalyticsMetric.CONVERSIONS: "booking",
    AnalyticsMetric.ERRORS: "error",
}


class AnalyticsService:
    """Records analytics events under one tracking session id."""

    TABLE = "analytics-events"

    def __init__(self, db: "DynamoDBService", session_id: str | None = None) -> None:
        self.db = db
        self.session_id = session_id or f"session_{uuid.uuid4().hex[:12]}"

    def track_event(
        self,
        event_type: str,
        action: str,
        properties: dict[str, Any] | None = None,
        user_id: str | None = None,
    ) -> bool:
        """Persist one event.

        Returns:
            True if stored, False if the write failed
        """
        event = AnalyticsEvent(
            id=str(uuid.uuid4()),
            session_id=self.session_id,
            user_id=user_id,
            event_type=event_type,
            action=action,
            properties=properties or {},
            created_at=dt.datetime.now(dt.UTC),
        )
        try:
            self.db.put_item(self.TABLE, self._event_to_item(event))
        except StoreError as e:
            logger.warning(
                "Analytics event %s/%s not recorded: %s",
                event_type,
                action,
                e.details,
            )
            return False
        return True

    def track_page_view(
        self, page: str, properties: dict[str, Any] | None = None, user_id: str | None = None
    ) -> bool:
        return self.track_event(
            "page_view", "view", {"page": page, **(properties or {})}, user_id
        )

    def track_action(
        self, action: str, properties: dict[str, Any] | None = None, user_id: str | None = None
    ) -> bool:
        return self.track_event("action", action, properties, user_id)

    def track_search(
        self,
        filters: dict[str, Any],
        results_count: int,
        user_id: str | None = None,
    ) -> bool:
        return self.track_event(
            "search",
            "search",
            {"filters": filters, "results_count": results_count},
            user_id,
        )

    def track_booking(
        self,
        booking_id: str,
        property_id: str,
        amount: Decimal,
        currency: str = "USD",
        user_id: str | None = None,
    ) -> bool:
        return self.track_event(
            "booking",
            "booking_created",
            {
                "booking_id": booking_id,
                "property_id": property_id,
                "amount": str(amount),
                "currency": currency,
            },
            user_id,
        )

    def track_error(
        self,
        error: Exception,
        context: dict[str, Any] | None = None,
        user_id: str | None = None,
    ) -> bool:
        return self.track_event(
            "error",
            "error_occurred",
            {
                "error_type": type(error).__name__,
                "error_message": str(error),
                "context": context or {},
            },
            user_id,
        )

    def summarize(
        self,
        start: dt.date,
        end: dt.date,
        metrics: list[AnalyticsMetric] | None = None,
    ) -> AnalyticsSummary:
        """Count events recorded between two dates (inclusive).

        Args:
            start: First day of the period
            end: Last day of the period
            metrics: Metrics to report, all when None

        Raises:
            InvalidDateRange: If end is before start.
            StoreError: If the events could not be read.
        """
        if end < start:
            raise InvalidDateRange(details={"start": start.isoformat(), "end": end.isoformat()})

        items = self.db.scan(
            self.TABLE,
            filter_expression=Attr("created_at").between(
                start.isoformat(), (end + dt.timedelta(days=1)).isoformat()
            ),
        )
        by_type: dict[str, int] = {}
        for item in items:
            by_type[item["event_type"]] = by_type.get(item["event_type"], 0) + 1

        requested = metrics or list(AnalyticsMetric)
        return AnalyticsSummary(
            start=start,
            end=end,
            total_events=len(items),
            unique_sessions=len({item["session_id"] for item in items}),
            metrics={m: by_type.get(METRIC_EVENT_TYPES[m], 0) for m in requested},
        )

    def _event_to_item(self, event: AnalyticsEvent) -> dict[str, Any]:
        return {
            "id": event.id,
            "session_id": event.session_id,
            "user_id": event.user_id,
            "event_type": event.event_type,
            "action": event.action,
            "properties": event.properties,
            "created_at": event.created_at.isoformat(),
        }
