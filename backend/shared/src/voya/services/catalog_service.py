"""Catalog of destinations, properties and reviews."""

import datetime as dt
import uuid
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from boto3.dynamodb.conditions import Attr

from voya.models.catalog import Destination, Property, PropertyFilters, Review
from voya.models.errors import PropertyNotFound
from voya.utils.logging import get_logger

if TYPE_CHECKING:
    from .dynamodb import DynamoDBService

logger = get_logger(__name__)


def average_rating(reviews: list[Review]) -> Decimal | None:
    """Mean rating to one decimal place, None without reviews."""
    if not reviews:
        return None
    total = sum(Decimal(r.rating) for r in reviews)
    return (total / len(reviews)).quantize(Decimal("0.1"))


class CatalogService:
    """Read and write access to the browseable catalog."""

    DESTINATIONS_TABLE = "destinations"
    PROPERTIES_TABLE = "properties"
    REVIEWS_TABLE = "reviews"

    def __init__(self, db: "DynamoDBService") -> None:
        self.db = db

    # Destinations

    def list_destinations(self) -> list[Destination]:
        """All destinations ordered by name."""
        items = self.db.scan(self.DESTINATIONS_TABLE)
        destinations = [self._item_to_destination(item) for item in items]
        return sorted(destinations, key=lambda d: d.name)

    def get_destination(self, destination_id: str) -> Destination | None:
        item = self.db.get_item(self.DESTINATIONS_TABLE, {"id": destination_id})
        return self._item_to_destination(item) if item else None

    # Properties

    def search_properties(self, filters: PropertyFilters | None = None) -> list[Property]:
        """Available properties matching the filters, newest first.

        ``guests`` keeps properties that sleep at least that many people;
        the price bounds are inclusive.
        """
        filters = filters or PropertyFilters()
        condition = Attr("is_available").eq(True)
        if filters.destination_id:
            condition = condition & Attr("destination_id").eq(filters.destination_id)
        if filters.property_type:
            condition = condition & Attr("property_type").eq(filters.property_type)
        if filters.guests is not None:
            condition = condition & Attr("max_guests").gte(filters.guests)
        if filters.min_price is not None:
            condition = condition & Attr("price_per_night").gte(filters.min_price)
        if filters.max_price is not None:
            condition = condition & Attr("price_per_night").lte(filters.max_price)

        items = self.db.scan(self.PROPERTIES_TABLE, filter_expression=condition)
        properties = [self._item_to_property(item) for item in items]
        return sorted(properties, key=lambda p: p.created_at, reverse=True)

    def get_property(self, property_id: str) -> Property | None:
        item = self.db.get_item(self.PROPERTIES_TABLE, {"id": property_id})
        return self._item_to_property(item) if item else None

    def require_property(self, property_id: str) -> Property:
        """Get a property or raise PropertyNotFound."""
        listing = self.get_property(property_id)
        if listing is None:
            raise PropertyNotFound(details={"property_id": property_id})
        return listing

    def list_host_properties(self, host_id: str) -> list[Property]:
        items = self.db.scan(
            self.PROPERTIES_TABLE, filter_expression=Attr("host_id").eq(host_id)
        )
        properties = [self._item_to_property(item) for item in items]
        return sorted(properties, key=lambda p: p.created_at, reverse=True)

    def save_property(self, listing: Property) -> Property:
        self.db.put_item(self.PROPERTIES_TABLE, self._property_to_item(listing))
        return listing

    # Reviews

    def list_reviews(self, property_id: str) -> list[Review]:
        """Reviews of a property, newest first."""
        items = self.db.query_by_gsi(
            self.REVIEWS_TABLE,
            "property_id-index",
            "property_id",
            property_id,
            scan_index_forward=False,
        )
        return [self._item_to_review(item) for item in items]

    def add_review(
        self,
        property_id: str,
        reviewer_id: str,
        rating: int,
        comment: str = "",
        booking_id: str | None = None,
    ) -> Review:
        """Store a review for an existing property.

        Raises:
            PropertyNotFound: If the property does not exist.
        """
        self.require_property(property_id)
        review = Review(
            id=str(uuid.uuid4()),
            property_id=property_id,
            reviewer_id=reviewer_id,
            booking_id=booking_id,
            rating=rating,
            comment=comment,
            created_at=dt.datetime.now(dt.UTC),
        )
        self.db.put_item(
            self.REVIEWS_TABLE,
            {
                "id": review.id,
                "property_id": review.property_id,
                "reviewer_id": review.reviewer_id,
                "booking_id": review.booking_id,
                "rating": review.rating,
                "comment": review.comment,
                "created_at": review.created_at.isoformat(),
            },
        )
        logger.info("Review %s added to property %s", review.id, property_id)
        return review

    # Conversion helpers

    def _item_to_destination(self, item: dict[str, Any]) -> Destination:
        return Destination(
            id=item["id"],
            name=item["name"],
            country=item["country"],
            region=item.get("region"),
            description=item.get("description"),
            image_url=item.get("image_url"),
        )

    def _property_to_item(self, listing: Property) -> dict[str, Any]:
        return {
            "id": listing.id,
            "host_id": listing.host_id,
            "destination_id": listing.destination_id,
            "name": listing.name,
            "description": listing.description,
            "property_type": listing.property_type,
            "price_per_night": listing.price_per_night,
            "max_guests": listing.max_guests,
            "bedrooms": listing.bedrooms,
            "bathrooms": listing.bathrooms,
            "amenities": listing.amenities,
            "images": listing.images,
            "is_available": listing.is_available,
            "created_at": listing.created_at.isoformat(),
        }

    def _item_to_property(self, item: dict[str, Any]) -> Property:
        return Property(
            id=item["id"],
            host_id=item["host_id"],
            destination_id=item.get("destination_id"),
            name=item["name"],
            description=item.get("description", ""),
            property_type=item.get("property_type", "apartment"),
            price_per_night=Decimal(str(item["price_per_night"])),
            max_guests=int(item["max_guests"]),
            bedrooms=int(item.get("bedrooms", 1)),
            bathrooms=int(item.get("bathrooms", 1)),
            amenities=list(item.get("amenities", [])),
            images=list(item.get("images", [])),
            is_available=bool(item.get("is_available", True)),
            created_at=dt.datetime.fromisoformat(item["created_at"]),
        )

    def _item_to_review(self, item: dict[str, Any]) -> Review:
        return Review(
            id=item["id"],
            property_id=item["property_id"],
            reviewer_id=item["reviewer_id"],
            booking_id=item.get("booking_id"),
            rating=int(item["rating"]),
            comment=item.get("comment", ""),
            created_at=dt.datetime.fromisoformat(item["created_at"]),
        )
