"""Tests for the nutrition cache and value stores."""

import json
from datetime import UTC, datetime

import pytest

from colruyt_nutrition.adapters.json_file_value_store import JsonFileValueStore
from colruyt_nutrition.domain.nutrition import NutritionRecord
from colruyt_nutrition.services.cache import InMemoryValueStore, NutritionCache

FETCHED_AT = datetime(2024, 5, 1, 12, 0, 0, 123000, tzinfo=UTC)


def test_put_then_get_returns_equal_record() -> None:
    cache = NutritionCache(InMemoryValueStore())
    record = NutritionRecord(
        timestamp=FETCHED_AT,
        per_unit="100g",
        en_kj=209,
        en_kcal=50,
        sat_fat=1.2,
        protein=3,
    )

    cache.put(12345, record)

    assert cache.get(12345) == record


def test_negative_entry_round_trips_as_timestamp_only() -> None:
    store = InMemoryValueStore()
    cache = NutritionCache(store)

    cache.put(7, NutritionRecord(timestamp=FETCHED_AT))

    assert list(json.loads(store.values["cache_7"])) == ["timestamp"]
    cached = cache.get(7)
    assert cached is not None
    assert cached.is_negative
    assert not cached.is_usable


def test_stored_keys_use_camel_case() -> None:
    store = InMemoryValueStore()
    NutritionCache(store).put(
        1, NutritionRecord(timestamp=FETCHED_AT, per_unit="100ml", en_kcal=42, sat_fat=2)
    )

    payload = json.loads(store.values["cache_1"])

    assert payload["perUnit"] == "100ml"
    assert payload["enKcal"] == 42
    assert payload["satFat"] == 2
    assert "enKj" not in payload


def test_get_missing_key_returns_none() -> None:
    assert NutritionCache(InMemoryValueStore()).get(99) is None


@pytest.mark.parametrize(
    "raw",
    ["not json", "[]", "null", "{}", '{"timestamp": "yesterday"}'],
)
def test_unreadable_entries_are_misses(raw: str) -> None:
    store = InMemoryValueStore(values={"cache_5": raw})

    assert NutritionCache(store).get(5) is None


def test_reads_epoch_millisecond_timestamps() -> None:
    store = InMemoryValueStore(
        values={"cache_5": json.dumps({"timestamp": 1714564800000, "enKcal": 80})}
    )

    cached = NutritionCache(store).get(5)

    assert cached is not None
    assert cached.timestamp == datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
    assert cached.en_kcal == 80


def test_naive_timestamps_are_treated_as_utc() -> None:
    store = InMemoryValueStore(values={"cache_5": '{"timestamp": "2024-05-01T12:00:00"}'})

    cached = NutritionCache(store).get(5)

    assert cached is not None
    assert cached.timestamp.tzinfo is not None


def test_custom_key_prefix() -> None:
    store = InMemoryValueStore()
    NutritionCache(store, key_prefix="nutrition:").put(3, NutritionRecord(timestamp=FETCHED_AT))

    assert list(store.values) == ["nutrition:3"]


def test_json_file_store_persists_between_instances(tmp_path) -> None:
    path = tmp_path / "cache.json"
    first = JsonFileValueStore(path)
    first.set_value("cache_1", '{"timestamp": "2024-05-01T12:00:00+00:00"}')

    second = JsonFileValueStore(path)

    assert second.get_value("cache_1", "{}") == '{"timestamp": "2024-05-01T12:00:00+00:00"}'
    assert second.get_value("cache_2", "{}") == "{}"


def test_json_file_store_ignores_corrupt_file(tmp_path) -> None:
    path = tmp_path / "cache.json"
    path.write_text("{broken", encoding="utf-8")

    store = JsonFileValueStore(path)

    assert store.get_value("cache_1", "{}") == "{}"
