#!/usr/bin/env python3
"""Seed a Voya environment with catalog data for local development.

Populates destinations and properties so the search, detail and booking
endpoints have something to work with. Optionally clears the catalog and
booking tables first.

Usage:
    voya-seed --env dev
    voya-seed --env dev --clear-first
    voya-seed --env staging --region eu-central-1
"""

import argparse
import datetime as dt
import os
import sys
from decimal import Decimal

from voya.models.catalog import Destination, Property
from voya.models.errors import StoreError
from voya.services.catalog_service import CatalogService
from voya.services.dynamodb import DynamoDBService

# Tables emptied by --clear-first; profiles and payments are never touched
CLEARABLE_TABLES = ["destinations", "properties", "reviews", "bookings", "notifications"]

SAMPLE_HOST_ID = "host-sample-001"

DESTINATIONS = [
    Destination(
        id="dest-lisbon",
        name="Lisbon",
        country="Portugal",
        region="Lisboa",
        description="Hilly old town, trams and miradouros",
    ),
    Destination(
        id="dest-algarve",
        name="Algarve",
        country="Portugal",
        region="Faro",
        description="Cliffs, coves and long beaches",
    ),
    Destination(
        id="dest-reykjavik",
        name="Reykjavik",
        country="Iceland",
        description="Gateway to the Golden Circle",
    ),
]


def sample_properties(host_id: str = SAMPLE_HOST_ID) -> list[Property]:
    """Listings spread over the sample destinations."""
    created = dt.datetime(2025, 1, 1, tzinfo=dt.UTC)
    rows = [
        # id, destination, name, type, nightly rate, max guests, bedrooms
        ("prop-alfama-loft", "dest-lisbon", "Alfama Loft", "apartment", "95", 4, 2),
        ("prop-belem-studio", "dest-lisbon", "Belem Studio", "studio", "60", 2, 1),
        ("prop-lagos-villa", "dest-algarve", "Lagos Cliff Villa", "villa", "420", 8, 4),
        ("prop-tavira-house", "dest-algarve", "Tavira Townhouse", "house", "150", 6, 3),
        ("prop-harbour-flat", "dest-reykjavik", "Harbour Flat", "apartment", "180", 3, 1),
    ]
    listings = []
    for index, (property_id, destination_id, name, kind, rate, guests, bedrooms) in enumerate(rows):
        listings.append(
            Property(
                id=property_id,
                host_id=host_id,
                destination_id=destination_id,
                name=name,
                property_type=kind,
                price_per_night=Decimal(rate),
                max_guests=guests,
                bedrooms=bedrooms,
                amenities=["wifi", "kitchen"],
                created_at=created + dt.timedelta(days=index),
            )
        )
    return listings


def seed_catalog(db: DynamoDBService, host_id: str = SAMPLE_HOST_ID) -> dict[str, int]:
    """Write the sample destinations and properties.

    Returns:
        Number of items written per table
    """
    catalog = CatalogService(db)

    print(f"Seeding destinations table: {db.name_prefix}-{CatalogService.DESTINATIONS_TABLE}")
    for destination in DESTINATIONS:
        db.put_item(
            CatalogService.DESTINATIONS_TABLE, destination.model_dump(exclude_none=True)
        )
        print(f"  ✓ {destination.name} ({destination.country})")

    listings = sample_properties(host_id)
    print(f"Seeding properties table: {db.name_prefix}-{CatalogService.PROPERTIES_TABLE}")
    for listing in listings:
        catalog.save_property(listing)
        print(f"  ✓ {listing.name} @ {listing.price_per_night}/night")

    return {
        CatalogService.DESTINATIONS_TABLE: len(DESTINATIONS),
        CatalogService.PROPERTIES_TABLE: len(listings),
    }


def clear_table(db: DynamoDBService, table: str) -> int:
    """Delete every item of a table keyed by ``id``.

    Returns:
        Number of items deleted
    """
    items = db.scan(table)
    for item in items:
        db.delete_item(table, {"id": item["id"]})
    return len(items)


def main(argv: list[str] | None = None) -> int:
    """Run the seed script."""
    parser = argparse.ArgumentParser(description="Seed a Voya environment with catalog data")
    parser.add_argument(
        "--env",
        choices=["dev", "staging", "prod"],
        default="dev",
        help="Target environment (default: dev)",
    )
    parser.add_argument(
        "--region",
        default=os.environ.get("AWS_DEFAULT_REGION", "eu-west-1"),
        help="AWS region (default: eu-west-1 or AWS_DEFAULT_REGION env var)",
    )
    parser.add_argument(
        "--clear-first",
        action="store_true",
        help="Clear catalog and booking tables before seeding",
    )
    parser.add_argument(
        "--yes",
        action="store_true",
        help="Skip the production confirmation prompt",
    )
    args = parser.parse_args(argv)

    if args.env == "prod" and not args.yes:
        confirm = input("⚠️  WARNING: You are about to modify PRODUCTION data. Type 'yes' to continue: ")
        if confirm.lower() != "yes":
            print("Aborted.")
            return 1

    prefix = os.environ.get("DYNAMODB_TABLE_PREFIX", f"voya-{args.env}")
    db = DynamoDBService(prefix, region_name=args.region)

    print(f"\n🌱 Seeding {args.env} environment (tables {prefix}-*, region: {args.region})\n")

    if args.clear_first:
        print("Clearing existing data...")
        for table in CLEARABLE_TABLES:
            try:
                count = clear_table(db, table)
                print(f"  Cleared {count} items from {table}")
            except StoreError as e:
                print(f"  Could not clear {table}: {e.details}")
        print()

    try:
        seed_catalog(db)
    except StoreError as e:
        print(f"  ❌ Failed to seed catalog: {e.details}")
        return 1

    print("\n✅ Seed completed successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
