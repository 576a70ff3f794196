"""Normalize monetary amounts into a single base currency."""

from __future__ import annotations

import math
import re
import time
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Sequence

from babel.numbers import format_currency as _format_currency

from food_export.config import DEFAULT_BASE_CURRENCY, Settings
from food_export.currency.cache import JsonFileRateCache, RateCacheStore, cache_key
from food_export.currency.client import ExchangeRatesClient
from food_export.currency.resolvers import (
    RateLookup,
    RateResolver,
    build_default_chain,
    run_chain,
)
from food_export.utils.date_range import DateLike, to_day
from food_export.utils.logger import get_logger

LOGGER = get_logger(__name__)

ZERO_DECIMAL_CURRENCIES: frozenset[str] = frozenset({"KZT"})
FORMAT_LOCALE = "en_US"

_CURRENCY_CODE = re.compile(r"[A-Za-z]{3}")


def _now_ms() -> int:
    return int(time.time() * 1000)


def normalise_currency(code: object) -> str:
    """Return ``code`` as an upper-case three-letter currency code.

    Raises ``ValueError`` for anything else, including ``None`` and the NaN
    pandas uses for missing cells.
    """

    if isinstance(code, float) and math.isnan(code):
        raise ValueError("Currency code is missing")
    if not isinstance(code, str) or not _CURRENCY_CODE.fullmatch(code.strip()):
        raise ValueError(f"Invalid currency code: {code!r}")
    return code.strip().upper()


def format_currency(
    amount: float,
    currency: str,
    *,
    zero_decimal_currencies: frozenset[str] = ZERO_DECIMAL_CURRENCIES,
) -> str:
    """Render ``amount`` like ``$1,234.50`` with the en_US currency symbols.

    Zero-decimal currencies drop the fraction; halves round away from zero.
    """

    places = 0 if currency in zero_decimal_currencies else 2
    value = Decimal(str(amount)).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
    pattern = "¤#,##0" if places == 0 else "¤#,##0.00"
    return _format_currency(
        value,
        currency,
        format=pattern,
        locale=FORMAT_LOCALE,
        currency_digits=False,
    )


@dataclass(frozen=True, slots=True)
class ConvertedAmount:
    """Amount re-denominated into the base currency.

    ``approximate`` marks a passthrough: no rate was available so ``amount``
    still carries the source currency's value.
    """

    amount: float
    currency: str
    approximate: bool = False


class CurrencyConverter:
    """Resolve exchange rates through the cache/API chain and convert amounts."""

    def __init__(
        self,
        base_currency: str = DEFAULT_BASE_CURRENCY,
        *,
        store: RateCacheStore | None = None,
        client: ExchangeRatesClient | None = None,
        resolvers: Sequence[RateResolver] | None = None,
        clock: Callable[[], int] = _now_ms,
        zero_decimal_currencies: frozenset[str] = ZERO_DECIMAL_CURRENCIES,
    ) -> None:
        self.base_currency = base_currency.upper()
        self.store = store or JsonFileRateCache()
        self.client = client
        self.resolvers: list[RateResolver] = (
            list(resolvers) if resolvers is not None else build_default_chain(self.store, client)
        )
        self.clock = clock
        self.zero_decimal_currencies = zero_decimal_currencies

    @classmethod
    def from_settings(cls, settings: Settings) -> "CurrencyConverter":
        """Wire a converter with the file cache and, when keyed, the rate API."""

        client = None
        if settings.has_api_key:
            client = ExchangeRatesClient(
                settings.exchange_rates_api_key or "",
                base_url=settings.exchange_rates_api_url,
            )
        return cls(
            settings.base_currency,
            store=JsonFileRateCache(settings.exchange_rates_cache),
            client=client,
        )

    @property
    def has_api_key(self) -> bool:
        return self.client is not None

    def close(self) -> None:
        """Release the rate API session, if one was configured."""

        if self.client is not None:
            self.client.close()

    def __enter__(self) -> "CurrencyConverter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def resolve_rate(self, source_currency: str, rate_date: DateLike) -> float | None:
        """Return base units per one ``source_currency`` unit, or None when unresolved.

        Raises ``ValueError`` when ``source_currency`` is not a three-letter code.
        """

        currency = normalise_currency(source_currency)
        if currency == self.base_currency:
            return 1.0

        day = to_day(rate_date)
        lookup = RateLookup(
            currency=currency,
            base_currency=self.base_currency,
            day=day,
            key=cache_key(currency, day),
            cache=self.store.load(),
            now_ms=self.clock(),
        )
        return run_chain(self.resolvers, lookup)

    def convert(self, amount: float, source_currency: str, rate_date: DateLike) -> ConvertedAmount:
        """Convert ``amount`` and report whether the result is a passthrough."""

        rate = self.resolve_rate(source_currency, rate_date)
        if rate is None:
            LOGGER.warning(
                "Could not convert %s %s to %s", amount, source_currency, self.base_currency
            )
            return ConvertedAmount(amount=amount, currency=self.base_currency, approximate=True)
        return ConvertedAmount(amount=amount * rate, currency=self.base_currency)

    def convert_to_base(self, amount: float, source_currency: str, rate_date: DateLike) -> float:
        """Return ``amount`` in the base currency; unresolved rates pass it through unchanged."""

        return self.convert(amount, source_currency, rate_date).amount

    def format(self, amount: float, currency: str | None = None) -> str:
        return format_currency(
            amount,
            (currency or self.base_currency).upper(),
            zero_decimal_currencies=self.zero_decimal_currencies,
        )


__all__ = [
    "ConvertedAmount",
    "CurrencyConverter",
    "ZERO_DECIMAL_CURRENCIES",
    "format_currency",
    "normalise_currency",
]
