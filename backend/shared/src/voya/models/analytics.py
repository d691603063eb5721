"""Analytics event and summary models."""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .enums import AnalyticsMetric


class AnalyticsEvent(BaseModel):
    """One tracked user interaction."""

    model_config = ConfigDict(strict=True)

    id: str
    session_id: str
    user_id: str | None = None
    event_type: str = Field(..., description="page_view, action, search, booking, error, ...")
    action: str
    properties: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime


class AnalyticsSummary(BaseModel):
    """Event counts for a period, one entry per requested metric."""

    model_config = ConfigDict(strict=True)

    start: date
    end: date
    total_events: int
    unique_sessions: int
    metrics: dict[AnalyticsMetric, int] = Field(default_factory=dict)
