from __future__ import annotations

import uuid

import pytest

from store_service.domain.models import (
    KeyStrategy,
    QuerySpec,
    Store,
    StoreUpdate,
    parse_area_id,
    search_specs,
)
from store_service.errors import InvalidInputError

ALPHA_UUID = "11111111-1111-1111-1111-111111111111"


def test_int_strategy_parses_numeric_strings() -> None:
    assert KeyStrategy.INT.parse_id("42") == 42
    assert KeyStrategy.COMPOSITE.parse_id(7) == 7


@pytest.mark.parametrize("raw", ["abc", "1.5", "", True])
def test_int_strategy_rejects_malformed_ids(raw) -> None:
    with pytest.raises(InvalidInputError, match="invalid id"):
        KeyStrategy.INT.parse_id(raw)


def test_uuid_strategy_parses_and_rejects() -> None:
    assert KeyStrategy.UUID.parse_id(ALPHA_UUID) == uuid.UUID(ALPHA_UUID)
    with pytest.raises(InvalidInputError):
        KeyStrategy.UUID.parse_id("42")


def test_assign_id_generates_uuid_only_for_uuid_strategy() -> None:
    store = Store(area_id=1, name="New")

    assigned = KeyStrategy.UUID.assign_id(store)
    assert isinstance(assigned.id, uuid.UUID)
    assert assigned.name == "New"

    with pytest.raises(InvalidInputError, match="id is required"):
        KeyStrategy.INT.assign_id(store)


def test_parse_area_id() -> None:
    assert parse_area_id("3") == 3
    assert parse_area_id("-1") == -1
    with pytest.raises(InvalidInputError, match="invalid area ID"):
        parse_area_id("north")


def test_store_json_uses_camel_case_area() -> None:
    store = Store.model_validate({"id": 5, "areaId": 2, "name": "Store", "location": "Harbor"})

    assert store.area_id == 2
    assert store.to_json() == {"id": 5, "areaId": 2, "name": "Store", "location": "Harbor"}


def test_store_update_changes_only_set_fields() -> None:
    update = StoreUpdate.model_validate({"id": 1, "name": "Renamed", "location": None})

    assert update.changes() == {"name": "Renamed"}
    assert StoreUpdate().changes() == {}


def test_query_spec_normalizes_wildcards() -> None:
    spec = QuerySpec(area_id=-1, name="", location="")

    assert spec.area_id is None
    assert spec.name is None
    assert spec.location is None


def test_query_spec_matching_is_case_sensitive_substring() -> None:
    store = Store(id=1, area_id=2, name="Corner Mart", location="Downtown")

    assert QuerySpec(area_id=2, name="Mart").matches(store)
    assert not QuerySpec(area_id=2, name="mart").matches(store)
    assert not QuerySpec(area_id=3).matches(store)
    assert QuerySpec(location="town").matches(store)
    assert QuerySpec().matches(store)


def test_search_specs_one_per_area() -> None:
    specs = search_specs([2, 1, 2], name="Mart")

    assert [spec.area_id for spec in specs] == [2, 1]
    assert all(spec.name == "Mart" for spec in specs)


@pytest.mark.parametrize("area_ids", [[], [-1], [3, -1]])
def test_search_specs_without_area_filter(area_ids) -> None:
    specs = search_specs(area_ids, location="Uptown")

    assert specs == [QuerySpec(area_id=None, location="Uptown")]
