"""Public interface for the food_export package."""

from __future__ import annotations

from importlib import metadata as importlib_metadata

from food_export.config import Settings, load_settings
from food_export.currency.converter import ConvertedAmount, CurrencyConverter, format_currency

__all__ = [
    "__version__",
    "ConvertedAmount",
    "CurrencyConverter",
    "Settings",
    "format_currency",
    "load_settings",
]

try:
    __version__ = importlib_metadata.version("food-export")
except importlib_metadata.PackageNotFoundError:  # pragma: no cover - fallback for local runs
    __version__ = "0.1.0"
