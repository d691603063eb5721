"""Period reports over bookings, profiles and properties."""

import datetime as dt
from typing import TYPE_CHECKING, Any

from boto3.dynamodb.conditions import Attr

from voya.models.booking import BookingReport
from voya.models.enums import ReportType
from voya.models.errors import InvalidDateRange
from voya.models.report import GroupedReport
from voya.utils.logging import get_logger

from .catalog_service import CatalogService
from .session_manager import SessionManager

if TYPE_CHECKING:
    from .booking_service import BookingService
    from .dynamodb import DynamoDBService

logger = get_logger(__name__)


class ReportService:
    """Builds the report of one type for records created in a period."""

    def __init__(self, db: "DynamoDBService", bookings: "BookingService") -> None:
        self.db = db
        self.bookings = bookings

    def generate(
        self, report_type: ReportType, start: dt.date, end: dt.date
    ) -> BookingReport | GroupedReport:
        """Build a report for the inclusive period ``start`` to ``end``.

        Raises:
            InvalidDateRange: If end is before start.
            StoreError: If the records could not be read.
        """
        if end < start:
            raise InvalidDateRange(details={"start": start.isoformat(), "end": end.isoformat()})

        logger.info("Generating %s report for %s..%s", report_type.value, start, end)
        if report_type == ReportType.BOOKINGS:
            return self.bookings.generate_report(start, end)
        if report_type == ReportType.USERS:
            return self._grouped(
                report_type, SessionManager.PROFILES_TABLE, "role", "traveler", start, end
            )
        return self._grouped(
            report_type, CatalogService.PROPERTIES_TABLE, "property_type", "apartment", start, end
        )

    def _grouped(
        self,
        report_type: ReportType,
        table: str,
        group_by: str,
        default_group: str,
        start: dt.date,
        end: dt.date,
    ) -> GroupedReport:
        items = self._created_between(table, start, end)
        breakdown: dict[str, int] = {}
        for item in items:
            group = item.get(group_by, default_group)
            breakdown[group] = breakdown.get(group, 0) + 1
        return GroupedReport(
            report_type=report_type,
            start=start,
            end=end,
            total=len(items),
            breakdown=breakdown,
        )

    def _created_between(self, table: str, start: dt.date, end: dt.date) -> list[dict[str, Any]]:
        return self.db.scan(
            table,
            filter_expression=Attr("created_at").between(
                start.isoformat(), (end + dt.timedelta(days=1)).isoformat()
            ),
        )
