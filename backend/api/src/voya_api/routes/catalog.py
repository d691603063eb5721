"""Catalog endpoints: destinations and property search (public)."""

from decimal import Decimal

from fastapi import APIRouter, Depends, Query

from voya.models.catalog import PropertyFilters
from voya.services.catalog_service import average_rating
from voya.services.container import ServiceContainer
from voya_api.dependencies import get_container
from voya_api.models.catalog import (
    DestinationListResponse,
    PropertyDetailResponse,
    PropertyListResponse,
)

router = APIRouter(tags=["catalog"])


@router.get(
    "/properties",
    summary="Search properties",
    description="Available properties matching every given filter, newest first.",
    response_model=PropertyListResponse,
)
async def search_properties(
    destination_id: str | None = Query(default=None),
    property_type: str | None = Query(default=None),
    guests: int | None = Query(default=None, ge=1, description="Minimum capacity"),
    min_price: Decimal | None = Query(default=None, ge=0),
    max_price: Decimal | None = Query(default=None, ge=0),
    container: ServiceContainer = Depends(get_container),
) -> PropertyListResponse:
    filters = PropertyFilters(
        destination_id=destination_id,
        property_type=property_type,
        guests=guests,
        min_price=min_price,
        max_price=max_price,
    )
    properties = container.catalog.search_properties(filters)
    container.analytics.track_search(
        filters.model_dump(mode="json", exclude_none=True), len(properties)
    )
    return PropertyListResponse(properties=properties, total_count=len(properties))


@router.get(
    "/properties/{property_id}",
    summary="Get property",
    response_model=PropertyDetailResponse,
    responses={404: {"description": "Property not found"}},
)
async def get_property(
    property_id: str,
    container: ServiceContainer = Depends(get_container),
) -> PropertyDetailResponse:
    listing = container.catalog.require_property(property_id)
    reviews = container.catalog.list_reviews(property_id)
    return PropertyDetailResponse(
        property=listing, reviews=reviews, average_rating=average_rating(reviews)
    )


@router.get(
    "/destinations",
    summary="List destinations",
    response_model=DestinationListResponse,
)
async def list_destinations(
    container: ServiceContainer = Depends(get_container),
) -> DestinationListResponse:
    return DestinationListResponse(destinations=container.catalog.list_destinations())
