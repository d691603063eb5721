"""Tests for the catalog seed script."""

import pytest

from voya.scripts import seed_data
from voya.services.catalog_service import CatalogService
from voya.services.dynamodb import DynamoDBService

from conftest import TEST_REGION


def test_seed_catalog_is_searchable(db: DynamoDBService) -> None:
    counts = seed_data.seed_catalog(db)

    catalog = CatalogService(db)
    assert counts == {"destinations": 3, "properties": 5}
    assert [d.name for d in catalog.list_destinations()] == ["Algarve", "Lisbon", "Reykjavik"]
    results = catalog.search_properties()
    assert results[0].id == "prop-harbour-flat"
    assert {p.host_id for p in results} == {seed_data.SAMPLE_HOST_ID}


def test_seed_is_repeatable(db: DynamoDBService) -> None:
    seed_data.seed_catalog(db)
    seed_data.seed_catalog(db)

    assert len(db.scan("properties")) == 5


def test_clear_table(db: DynamoDBService) -> None:
    seed_data.seed_catalog(db)

    assert seed_data.clear_table(db, "properties") == 5
    assert db.scan("properties") == []


def test_main_clears_then_seeds(
    db: DynamoDBService, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    db.put_item("bookings", {"id": "BKG-OLD", "traveler_id": "t", "property_id": "p", "created_at": "x"})
    monkeypatch.setenv("DYNAMODB_TABLE_PREFIX", "voya-test")

    assert seed_data.main(["--env", "dev", "--region", TEST_REGION, "--clear-first"]) == 0

    assert db.scan("bookings") == []
    assert len(db.scan("properties")) == 5
    assert "Seed completed" in capsys.readouterr().out


def test_main_production_needs_confirmation(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr("builtins.input", lambda prompt: "no")

    assert seed_data.main(["--env", "prod"]) == 1
    assert "Aborted" in capsys.readouterr().out
