"""Currency normalization with a persisted exchange-rate cache."""

from __future__ import annotations

from food_export.currency.cache import (
    InMemoryRateCache,
    JsonFileRateCache,
    RateCacheEntry,
    RateCacheStore,
    cache_key,
)
from food_export.currency.client import ExchangeRateError, ExchangeRatesClient
from food_export.currency.converter import ConvertedAmount, CurrencyConverter, format_currency

__all__ = [
    "ConvertedAmount",
    "CurrencyConverter",
    "ExchangeRateError",
    "ExchangeRatesClient",
    "InMemoryRateCache",
    "JsonFileRateCache",
    "RateCacheEntry",
    "RateCacheStore",
    "cache_key",
    "format_currency",
]
