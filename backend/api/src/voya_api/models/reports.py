"""API models for report endpoints."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field

from voya.models.enums import ReportType


class ReportRequest(BaseModel):
    """Report type and inclusive creation-date period."""

    model_config = ConfigDict(
        strict=False,
        json_schema_extra={
            "examples": [
                {"report_type": "bookings", "start_date": "2024-06-01", "end_date": "2024-06-30"}
            ]
        },
    )

    report_type: ReportType
    start_date: date = Field(..., description="First day of the period (YYYY-MM-DD)")
    end_date: date = Field(..., description="Last day of the period (YYYY-MM-DD)")
