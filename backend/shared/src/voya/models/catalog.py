"""Catalog models: destinations, properties and reviews."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class Destination(BaseModel):
    """A travel destination grouping properties."""

    model_config = ConfigDict(strict=True)

    id: str
    name: str
    country: str
    region: str | None = None
    description: str | None = None
    image_url: str | None = None


class Property(BaseModel):
    """A bookable property listed by a host."""

    model_config = ConfigDict(strict=True)

    id: str
    host_id: str
    destination_id: str | None = None
    name: str
    description: str = ""
    property_type: str = "apartment"
    price_per_night: Decimal = Field(..., description="Nightly rate")
    max_guests: int = Field(..., ge=1)
    bedrooms: int = Field(default=1, ge=0)
    bathrooms: int = Field(default=1, ge=0)
    amenities: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    is_available: bool = True
    created_at: datetime


class PropertyFilters(BaseModel):
    """Search filters for property listings."""

    model_config = ConfigDict(strict=False)

    destination_id: str | None = None
    property_type: str | None = None
    guests: int | None = Field(default=None, ge=1)
    min_price: Decimal | None = Field(default=None, ge=0)
    max_price: Decimal | None = Field(default=None, ge=0)


class Review(BaseModel):
    """A traveler review of a property."""

    model_config = ConfigDict(strict=True)

    id: str
    property_id: str
    reviewer_id: str
    booking_id: str | None = None
    rating: int = Field(..., ge=1, le=5)
    comment: str = ""
    created_at: datetime
