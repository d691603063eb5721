"""Report endpoints.

- Bookings: count, revenue and status breakdown
- Users: profiles created, grouped by role
- Properties: listings created, grouped by property type
"""

from fastapi import APIRouter, Depends

from voya.models.booking import BookingReport
from voya.models.report import GroupedReport
from voya.services.container import ServiceContainer
from voya_api.dependencies import get_container, get_current_user_id
from voya_api.models.reports import ReportRequest

router = APIRouter(tags=["reports"])


@router.post(
    "/reports",
    summary="Generate report",
    description="""
Aggregate the records created between `start_date` and `end_date` (inclusive).

**Requires user identity.**
""",
    response_model=BookingReport | GroupedReport,
    responses={
        400: {"description": "end_date before start_date"},
        401: {"description": "User identity required"},
        422: {"description": "Unknown report type"},
    },
)
async def generate_report(
    body: ReportRequest,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(get_container),
) -> BookingReport | GroupedReport:
    report = container.reports.generate(body.report_type, body.start_date, body.end_date)
    container.analytics.track_action(
        "generate_report", {"report_type": body.report_type.value}, user_id=user_id
    )
    return report
