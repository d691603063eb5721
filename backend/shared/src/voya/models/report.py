"""Aggregate reports over profiles and properties."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field

from .enums import ReportType


class GroupedReport(BaseModel):
    """Records created in a period, counted per group.

    Users are grouped by role and properties by property type.
    """

    model_config = ConfigDict(strict=True)

    report_type: ReportType
    start: date
    end: date
    total: int
    breakdown: dict[str, int] = Field(default_factory=dict)
