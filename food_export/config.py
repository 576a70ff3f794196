"""Environment-driven configuration for food_export."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

DEFAULT_BASE_CURRENCY = "KZT"
DEFAULT_EXCHANGE_API_URL = "https://api.exchangeratesapi.io/v1"
DEFAULT_CACHE_PATH = Path("data") / "exchange_rates_cache.json"
DEFAULT_DATA_DIR = Path("data") / "wolt"


@dataclass(frozen=True, slots=True)
class Settings:
    """Runtime settings shared by the exporter, converter and report."""

    base_currency: str = DEFAULT_BASE_CURRENCY
    exchange_rates_api_key: str | None = None
    exchange_rates_api_url: str = DEFAULT_EXCHANGE_API_URL
    exchange_rates_cache: Path = DEFAULT_CACHE_PATH
    wolt_token: str | None = None
    data_dir: Path = DEFAULT_DATA_DIR

    @property
    def has_api_key(self) -> bool:
        """Return True when remote exchange-rate lookups are enabled."""

        return bool(self.exchange_rates_api_key)


def _optional(name: str) -> str | None:
    value = os.getenv(name, "").strip()
    return value or None


def load_settings(*, dotenv: bool = True) -> Settings:
    """Build :class:`Settings` from the process environment.

    A ``.env`` file in the working directory is loaded first unless
    ``dotenv`` is False; variables already present in the environment win.
    """

    if dotenv:
        load_dotenv(find_dotenv(usecwd=True))
    return Settings(
        base_currency=(_optional("BASE_CURRENCY") or DEFAULT_BASE_CURRENCY).upper(),
        exchange_rates_api_key=_optional("EXCHANGE_RATES_API_KEY"),
        exchange_rates_api_url=_optional("EXCHANGE_RATES_API_URL") or DEFAULT_EXCHANGE_API_URL,
        exchange_rates_cache=Path(_optional("EXCHANGE_RATES_CACHE") or DEFAULT_CACHE_PATH),
        wolt_token=_optional("WOLT_TOKEN"),
        data_dir=Path(_optional("WOLT_DATA_DIR") or DEFAULT_DATA_DIR),
    )


__all__ = ["DEFAULT_BASE_CURRENCY", "Settings", "load_settings"]
