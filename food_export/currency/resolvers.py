"""Ordered rate-resolution strategies.

The converter walks a list of resolvers and stops at the first one that
yields a rate. The default chain is::

    fresh cache -> cached rate when no API key -> historical API
    -> latest API -> cached rate of any age

and an exhausted chain means the rate is unresolved.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Protocol, Sequence

from food_export.currency.cache import (
    CACHE_DURATION_MS,
    RateCache,
    RateCacheEntry,
    RateCacheStore,
)
from food_export.currency.client import ExchangeRateError, ExchangeRatesClient
from food_export.utils.logger import get_logger

LOGGER = get_logger(__name__)


@dataclass(slots=True)
class RateLookup:
    """State shared by the resolvers during a single resolution."""

    currency: str
    base_currency: str
    day: date
    key: str
    cache: RateCache
    now_ms: int

    def cached(self) -> RateCacheEntry | None:
        return self.cache.get(self.key)


class RateResolver(Protocol):
    """Contract for one step of the fallback chain."""

    name: str

    def resolve(self, lookup: RateLookup) -> float | None:
        ...  # pragma: no cover - protocol definition


class FreshCacheResolver:
    """Serve cache entries captured within the freshness window."""

    name = "fresh-cache"

    def __init__(self, max_age_ms: int = CACHE_DURATION_MS) -> None:
        self.max_age_ms = max_age_ms

    def resolve(self, lookup: RateLookup) -> float | None:
        entry = lookup.cached()
        if entry is not None and entry.is_fresh(lookup.now_ms, self.max_age_ms):
            return entry.rate
        return None


class CachedRateResolver:
    """Serve a cached rate regardless of age.

    With ``only_without_api_key`` the resolver only answers when remote
    lookups are disabled, which lets stale data win over no data at all.
    """

    def __init__(self, *, api_key_configured: bool = True, only_without_api_key: bool = False) -> None:
        self.api_key_configured = api_key_configured
        self.only_without_api_key = only_without_api_key
        self.name = "stale-cache-no-key" if only_without_api_key else "stale-cache"

    def resolve(self, lookup: RateLookup) -> float | None:
        if self.only_without_api_key and self.api_key_configured:
            return None
        entry = lookup.cached()
        if entry is not None:
            reason = " (no API key)" if self.only_without_api_key else ""
            LOGGER.info(
                "Using cached rate for %s from %s%s", lookup.currency, lookup.day, reason
            )
            return entry.rate
        if self.only_without_api_key:
            LOGGER.info(
                "No API key available and no cached rate for %s on %s",
                lookup.currency,
                lookup.day,
            )
        return None


class RemoteRateResolver:
    """Fetch a rate from the API and write it through to the cache store."""

    def __init__(
        self,
        client: ExchangeRatesClient,
        store: RateCacheStore,
        *,
        historical: bool = True,
    ) -> None:
        self.client = client
        self.store = store
        self.historical = historical
        self.name = "historical-remote" if historical else "latest-remote"

    def resolve(self, lookup: RateLookup) -> float | None:
        rate_date = lookup.day if self.historical else None
        try:
            rate = self.client.pair_rate(lookup.currency, lookup.base_currency, rate_date)
        except ExchangeRateError as exc:
            label = lookup.day.isoformat() if self.historical else "latest"
            LOGGER.error(
                "Error fetching %s exchange rate for %s: %s", label, lookup.currency, exc
            )
            return None

        lookup.cache[lookup.key] = RateCacheEntry(rate=rate, timestamp=lookup.now_ms)
        self.store.save(lookup.cache)
        return rate


def build_default_chain(
    store: RateCacheStore,
    client: ExchangeRatesClient | None,
    *,
    max_age_ms: int = CACHE_DURATION_MS,
) -> list[RateResolver]:
    """Return the standard resolver order for ``store`` and ``client``."""

    api_key_configured = client is not None
    chain: list[RateResolver] = [
        FreshCacheResolver(max_age_ms),
        CachedRateResolver(api_key_configured=api_key_configured, only_without_api_key=True),
    ]
    if client is not None:
        chain.extend(
            [
                RemoteRateResolver(client, store, historical=True),
                RemoteRateResolver(client, store, historical=False),
                CachedRateResolver(),
            ]
        )
    return chain


def run_chain(resolvers: Sequence[RateResolver], lookup: RateLookup) -> float | None:
    """Return the first rate produced by ``resolvers`` or None."""

    for resolver in resolvers:
        rate = resolver.resolve(lookup)
        if rate is not None:
            LOGGER.debug("Resolved %s via %s", lookup.key, resolver.name)
            return rate
    return None


__all__ = [
    "CachedRateResolver",
    "FreshCacheResolver",
    "RateLookup",
    "RateResolver",
    "RemoteRateResolver",
    "build_default_chain",
    "run_chain",
]
