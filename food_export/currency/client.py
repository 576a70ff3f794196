"""HTTP client for the exchangeratesapi.io style rate endpoints."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any, Mapping

from food_export.config import DEFAULT_EXCHANGE_API_URL
from food_export.utils.logger import get_logger

if TYPE_CHECKING:  # pragma: no cover - imported only for type checking
    import requests

LOGGER = get_logger(__name__)

INTERMEDIATE_CURRENCY = "EUR"


class ExchangeRateError(RuntimeError):
    """Raised when the rate API cannot produce a usable rate."""


def compute_pair_rate(
    rates: Mapping[str, Any],
    source_currency: str,
    target_currency: str,
    *,
    anchor: str = INTERMEDIATE_CURRENCY,
) -> float:
    """Derive ``1 source = x target`` from rates quoted against ``anchor``.

    With ``1 anchor = s source`` and ``1 anchor = t target`` the pair rate is
    ``t / s``.
    """

    def _lookup(code: str) -> float:
        value = rates.get(code)
        if value is None and code == anchor:
            return 1.0
        if not isinstance(value, (int, float)) or isinstance(value, bool) or value <= 0:
            raise ExchangeRateError(f"Rate for {code} missing from response")
        return float(value)

    source_rate = _lookup(source_currency)
    target_rate = _lookup(target_currency)
    return target_rate / source_rate


class ExchangeRatesClient:
    """Fetch historical and latest rates anchored on a single currency."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_EXCHANGE_API_URL,
        anchor: str = INTERMEDIATE_CURRENCY,
        timeout: int = 30,
        session: "requests.Session | None" = None,
    ) -> None:
        if not api_key:
            raise ValueError("api_key is required for remote exchange rate lookups")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.anchor = anchor
        self.timeout = timeout
        if session is None:
            import requests

            session = requests.Session()
        self.session = session

    def fetch_rates(self, symbols: list[str], rate_date: date | None = None) -> dict[str, Any]:
        """Return the ``rates`` mapping for ``rate_date`` or the latest publication."""

        import requests

        endpoint = rate_date.isoformat() if rate_date is not None else "latest"
        url = f"{self.base_url}/{endpoint}"
        params = {
            "access_key": self.api_key,
            "base": self.anchor,
            "symbols": ",".join(symbols),
        }
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else "unknown"
            raise ExchangeRateError(f"Rate API responded with HTTP {status} for {url}") from exc
        except requests.RequestException as exc:
            raise ExchangeRateError(f"Rate API request to {url} failed: {exc}") from exc
        except ValueError as exc:
            raise ExchangeRateError(f"Rate API returned invalid JSON for {url}") from exc

        LOGGER.debug("Exchange rates API response for %s: %s", endpoint, payload)
        rates = payload.get("rates") if isinstance(payload, dict) else None
        if not isinstance(rates, dict):
            raise ExchangeRateError(f"Rate API response for {endpoint} has no rates")
        return rates

    def pair_rate(
        self,
        source_currency: str,
        target_currency: str,
        rate_date: date | None = None,
    ) -> float:
        """Return how many ``target_currency`` units one ``source_currency`` buys."""

        rates = self.fetch_rates([source_currency, target_currency], rate_date)
        rate = compute_pair_rate(rates, source_currency, target_currency, anchor=self.anchor)
        LOGGER.info(
            "1 %s = %s %s (1 %s = %s %s, 1 %s = %s %s)",
            source_currency,
            rate,
            target_currency,
            self.anchor,
            rates.get(source_currency),
            source_currency,
            self.anchor,
            rates.get(target_currency),
            target_currency,
        )
        return rate

    def close(self) -> None:  # pragma: no cover - trivial delegator
        self.session.close()

    def __enter__(self) -> "ExchangeRatesClient":  # pragma: no cover - trivial
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # pragma: no cover - trivial
        self.close()


__all__ = ["INTERMEDIATE_CURRENCY", "ExchangeRateError", "ExchangeRatesClient", "compute_pair_rate"]
