"""Client analytics ingestion (public, identity optional) and period summaries."""

from datetime import date

from fastapi import APIRouter, Depends, Query, Request
from starlette.status import HTTP_202_ACCEPTED

from voya.models.analytics import AnalyticsSummary
from voya.models.enums import AnalyticsMetric
from voya.services.analytics_service import AnalyticsService
from voya.services.container import ServiceContainer
from voya_api.dependencies import USER_SUB_HEADER, get_container, get_current_user_id
from voya_api.models.catalog import AnalyticsEventRequest, AnalyticsEventResponse

router = APIRouter(tags=["analytics"])


@router.post(
    "/analytics/events",
    summary="Record analytics event",
    description="Best effort: `recorded` is false when the event could not be stored.",
    response_model=AnalyticsEventResponse,
    status_code=HTTP_202_ACCEPTED,
)
async def record_event(
    body: AnalyticsEventRequest,
    request: Request,
    container: ServiceContainer = Depends(get_container),
) -> AnalyticsEventResponse:
    analytics = container.analytics
    if body.session_id:
        analytics = AnalyticsService(container.db, session_id=body.session_id)
    recorded = analytics.track_event(
        body.event_type,
        body.action,
        properties=body.properties,
        user_id=request.headers.get(USER_SUB_HEADER),
    )
    return AnalyticsEventResponse(recorded=recorded)


@router.get(
    "/analytics",
    summary="Analytics summary",
    description="""
Event counts for a period (inclusive). Repeat `metrics` to pick several;
every metric is reported when omitted.

**Requires user identity.**
""",
    response_model=AnalyticsSummary,
    dependencies=[Depends(get_current_user_id)],
    responses={
        400: {"description": "end_date before start_date"},
        401: {"description": "User identity required"},
    },
)
async def analytics_summary(
    start_date: date,
    end_date: date,
    metrics: list[AnalyticsMetric] | None = Query(default=None),
    container: ServiceContainer = Depends(get_container),
) -> AnalyticsSummary:
    return container.analytics.summarize(start_date, end_date, metrics)
