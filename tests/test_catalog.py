import json

import pytest

from services.catalog import (
    CatalogFacilityRepository,
    ChainedFacilityRepository,
    Facility,
    SqlFacilityRepository,
    facility_from_document,
    is_store_id,
    parse_ranges,
    resolve,
)
from services.errors import NotFound, ValidationError


def test_is_store_id():
    assert is_store_id("64b7f0c2a1b2c3d4e5f60718")
    assert not is_store_id("ground-001")
    assert not is_store_id("64b7f0c2a1b2c3d4e5f6071")
    assert not is_store_id(None)


def test_document_is_normalized():
    facility = facility_from_document({
        "_id": "ground-9",
        "name": "Night Turf",
        "location": {"address": "MG Road"},
        "price": {"ranges": [{"start": "8:00", "end": "20:00", "perHour": 600}], "discount": 20},
        "owner": {"userId": 7},
    })

    assert facility.id == "ground-9"
    assert facility.location == "MG Road"
    assert facility.ranges[0].start == "08:00"
    assert facility.discount == 20
    assert facility.owner_user_id == 7
    assert facility.source == "catalog"


def test_invalid_ranges_are_rejected():
    with pytest.raises(ValidationError):
        parse_ranges([{"start": "8am", "end": "20:00", "perHour": 600}])
    with pytest.raises(ValidationError):
        parse_ranges([{"start": "08:00", "end": "20:00", "perHour": -1}])


def test_chained_lookup_prefers_first_repository():
    primary = CatalogFacilityRepository([Facility(id="g1", name="Primary")])
    fallback = CatalogFacilityRepository([Facility(id="g1", name="Fallback"), Facility(id="g2", name="Only fallback")])
    repo = ChainedFacilityRepository(primary, fallback)

    assert repo.get("g1").name == "Primary"
    assert repo.get("g2").name == "Only fallback"
    assert repo.get("missing") is None


def test_resolve_not_found():
    with pytest.raises(NotFound):
        resolve(CatalogFacilityRepository(), "nope")


def test_catalog_from_file(tmp_path):
    path = tmp_path / "grounds.json"
    path.write_text(json.dumps([{"_id": "a", "name": "A", "price": {"perHour": 700}}]))

    repo = CatalogFacilityRepository.from_file(str(path), default_currency="NPR")

    assert len(repo) == 1
    assert repo.get("a").per_hour == 700
    assert repo.get("a").currency == "NPR"


def test_catalog_from_missing_file_is_empty(tmp_path):
    assert len(CatalogFacilityRepository.from_file(str(tmp_path / "missing.json"))) == 0


def test_sql_repository_reads_active_grounds(make_user, make_ground):
    owner = make_user("owner@example.com", "GROUND_OWNER")
    ground = make_ground(owner, price_per_hour=900, price_ranges=[{"start": "06:00", "end": "10:00", "perHour": 400}])
    make_ground(owner, name="Closed", is_active=False)
    repo = SqlFacilityRepository()

    facility = repo.get(ground.id)
    assert facility.name == "Central Turf"
    assert facility.per_hour == 900
    assert facility.ranges[0].per_hour == 400
    assert facility.owner_user_id == owner.id
    assert facility.source == "store"

    assert repo.get(ground.id.upper()) is not None
    assert repo.get("ground-001") is None
    assert [f.id for f in repo.list_owned_by(owner.id)] == [ground.id]


def test_app_resolver_falls_back_to_catalog(app):
    facilities = app.extensions["booking_service"].facilities

    facility = resolve(facilities, "ground-002")
    assert facility.source == "catalog"
    assert facility.ranges[0].per_hour == 300

    with pytest.raises(NotFound):
        resolve(facilities, "64b7f0c2a1b2c3d4e5f60718")
