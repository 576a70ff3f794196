"""Tests for the persisted exchange-rate cache stores."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest

from food_export.currency.cache import (
    InMemoryRateCache,
    JsonFileRateCache,
    RateCacheEntry,
    cache_key,
)


def test_cache_key_uses_currency_and_iso_day() -> None:
    assert cache_key("USD", date(2024, 3, 7)) == "USD_2024-03-07"


def test_json_cache_roundtrip(tmp_path: Path) -> None:
    store = JsonFileRateCache(tmp_path / "nested" / "rates.json")
    cache = {
        "USD_2024-01-01": RateCacheEntry(rate=450.25, timestamp=1_704_067_200_000),
        "EUR_2024-01-02": RateCacheEntry(rate=495.0, timestamp=1_704_153_600_000),
    }

    store.save(cache)

    assert store.load() == cache


def test_json_cache_writes_documented_layout(tmp_path: Path) -> None:
    path = tmp_path / "rates.json"
    JsonFileRateCache(path).save({"USD_2024-01-01": RateCacheEntry(rate=2.5, timestamp=42)})

    assert json.loads(path.read_text()) == {"USD_2024-01-01": {"rate": 2.5, "timestamp": 42}}


def test_json_cache_missing_file_is_empty(tmp_path: Path) -> None:
    assert JsonFileRateCache(tmp_path / "absent.json").load() == {}


@pytest.mark.parametrize("content", ["{not json", "[1, 2, 3]", ""])
def test_json_cache_corrupt_file_is_empty(tmp_path: Path, content: str) -> None:
    path = tmp_path / "rates.json"
    path.write_text(content)

    assert JsonFileRateCache(path).load() == {}


def test_json_cache_skips_malformed_entries(tmp_path: Path) -> None:
    path = tmp_path / "rates.json"
    path.write_text(
        json.dumps(
            {
                "USD_2024-01-01": {"rate": 3, "timestamp": 10},
                "EUR_2024-01-01": {"rate": "oops", "timestamp": 10},
                "GBP_2024-01-01": "bad",
            }
        )
    )

    assert JsonFileRateCache(path).load() == {
        "USD_2024-01-01": RateCacheEntry(rate=3.0, timestamp=10)
    }


def test_entry_freshness_window() -> None:
    hour = 60 * 60 * 1000
    now = 100 * hour
    assert RateCacheEntry(rate=1.0, timestamp=now - hour).is_fresh(now)
    assert not RateCacheEntry(rate=1.0, timestamp=now - 24 * hour).is_fresh(now)


def test_in_memory_cache_isolates_callers() -> None:
    store = InMemoryRateCache({"USD_2024-01-01": RateCacheEntry(rate=1.5, timestamp=1)})

    loaded = store.load()
    loaded["USD_2024-01-01"].rate = 99.0

    assert store.load()["USD_2024-01-01"].rate == 1.5
    assert store.saves == 0
