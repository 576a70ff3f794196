"""Persistent exchange-rate cache stores."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Dict, Mapping

from food_export.config import DEFAULT_CACHE_PATH
from food_export.utils.logger import get_logger

LOGGER = get_logger(__name__)

CACHE_DURATION_MS = 24 * 60 * 60 * 1000


@dataclass(slots=True)
class RateCacheEntry:
    """Rate captured for one currency/day pair."""

    rate: float
    timestamp: int

    def is_fresh(self, now_ms: int, max_age_ms: int = CACHE_DURATION_MS) -> bool:
        """Return True when the entry was captured less than ``max_age_ms`` ago."""

        return now_ms - self.timestamp < max_age_ms

    def to_dict(self) -> dict[str, float | int]:
        return {"rate": self.rate, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, payload: Mapping[str, object]) -> "RateCacheEntry":
        rate = payload.get("rate")
        timestamp = payload.get("timestamp")
        if not isinstance(rate, (int, float)) or isinstance(rate, bool):
            raise ValueError(f"Invalid cached rate: {rate!r}")
        if not isinstance(timestamp, (int, float)) or isinstance(timestamp, bool):
            timestamp = 0
        return cls(rate=float(rate), timestamp=int(timestamp))


RateCache = Dict[str, RateCacheEntry]


def cache_key(currency: str, day: date) -> str:
    """Return the ``"{currency}_{YYYY-MM-DD}"`` key for a cache entry."""

    return f"{currency}_{day.isoformat()}"


class RateCacheStore(ABC):
    """Load/save boundary for the rate cache."""

    @abstractmethod
    def load(self) -> RateCache:
        """Return the full cache; missing or unreadable storage yields ``{}``."""

    @abstractmethod
    def save(self, cache: Mapping[str, RateCacheEntry]) -> None:
        """Persist ``cache`` in full, replacing what was stored before."""


class JsonFileRateCache(RateCacheStore):
    """Rate cache kept in a single JSON document on disk."""

    def __init__(self, path: str | Path = DEFAULT_CACHE_PATH) -> None:
        self.path = Path(path)

    def load(self) -> RateCache:
        if not self.path.exists():
            return {}
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            LOGGER.error("Error loading exchange rate cache %s: %s", self.path, exc)
            return {}
        if not isinstance(payload, dict):
            LOGGER.error("Ignoring exchange rate cache %s: expected a JSON object", self.path)
            return {}

        cache: RateCache = {}
        for key, value in payload.items():
            if not isinstance(value, dict):
                LOGGER.warning("Skipping malformed cache entry %s", key)
                continue
            try:
                cache[key] = RateCacheEntry.from_dict(value)
            except ValueError as exc:
                LOGGER.warning("Skipping malformed cache entry %s: %s", key, exc)
        return cache

    def save(self, cache: Mapping[str, RateCacheEntry]) -> None:
        payload = {key: entry.to_dict() for key, entry in cache.items()}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as exc:
            LOGGER.error("Error saving exchange rate cache %s: %s", self.path, exc)


class InMemoryRateCache(RateCacheStore):
    """Process-local store, mostly useful for tests and dry runs."""

    def __init__(self, entries: Mapping[str, RateCacheEntry] | None = None) -> None:
        self._entries = self._copy(entries or {})
        self.saves = 0

    @staticmethod
    def _copy(cache: Mapping[str, RateCacheEntry]) -> RateCache:
        return {
            key: RateCacheEntry(rate=entry.rate, timestamp=entry.timestamp)
            for key, entry in cache.items()
        }

    def load(self) -> RateCache:
        return self._copy(self._entries)

    def save(self, cache: Mapping[str, RateCacheEntry]) -> None:
        self._entries = self._copy(cache)
        self.saves += 1


__all__ = [
    "CACHE_DURATION_MS",
    "InMemoryRateCache",
    "JsonFileRateCache",
    "RateCache",
    "RateCacheEntry",
    "RateCacheStore",
    "cache_key",
]
