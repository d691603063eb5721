"""API models for catalog and analytics endpoints."""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from voya.models.catalog import Destination, Property, Review


class PropertyListResponse(BaseModel):
    model_config = ConfigDict(strict=True)

    properties: list[Property]
    total_count: int


class PropertyDetailResponse(BaseModel):
    """A property with its reviews."""

    model_config = ConfigDict(strict=True)

    property: Property
    reviews: list[Review]
    average_rating: Decimal | None = None


class DestinationListResponse(BaseModel):
    model_config = ConfigDict(strict=True)

    destinations: list[Destination]


class AnalyticsEventRequest(BaseModel):
    """One client-side analytics event."""

    model_config = ConfigDict(
        strict=False,
        json_schema_extra={
            "examples": [
                {
                    "session_id": "session_abc123",
                    "event_type": "page_view",
                    "action": "view",
                    "properties": {"page": "/search"},
                }
            ]
        },
    )

    session_id: str | None = Field(default=None, description="Client tracking session")
    event_type: str = Field(..., min_length=1, max_length=50)
    action: str = Field(..., min_length=1, max_length=100)
    properties: dict[str, Any] = Field(default_factory=dict)


class AnalyticsEventResponse(BaseModel):
    model_config = ConfigDict(strict=True)

    recorded: bool
