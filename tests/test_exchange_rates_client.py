"""Tests for the rate API client and the transitive pair computation."""

from __future__ import annotations

from datetime import date

import pytest
import requests

from food_export.currency.client import (
    ExchangeRateError,
    ExchangeRatesClient,
    compute_pair_rate,
)


def test_compute_pair_rate_divides_through_anchor() -> None:
    assert compute_pair_rate({"USD": 2, "KZT": 10}, "USD", "KZT") == 5


def test_compute_pair_rate_treats_missing_anchor_as_one() -> None:
    assert compute_pair_rate({"KZT": 500.0}, "EUR", "KZT") == 500.0


@pytest.mark.parametrize("rates", [{"KZT": 10}, {"USD": 0, "KZT": 10}, {"USD": None, "KZT": 10}])
def test_compute_pair_rate_rejects_missing_rates(rates) -> None:
    with pytest.raises(ExchangeRateError):
        compute_pair_rate(rates, "USD", "KZT")


def test_client_requires_api_key() -> None:
    with pytest.raises(ValueError):
        ExchangeRatesClient("")


def test_pair_rate_queries_historical_endpoint(dummy_session_factory, dummy_response_factory) -> None:
    session = dummy_session_factory([dummy_response_factory({"rates": {"USD": 1.1, "KZT": 495.0}})])
    client = ExchangeRatesClient("secret", base_url="https://rates.test/v1/", session=session)

    rate = client.pair_rate("USD", "KZT", date(2024, 2, 1))

    assert rate == pytest.approx(450.0)
    call = session.calls[0]
    assert call["url"] == "https://rates.test/v1/2024-02-01"
    assert call["params"] == {"access_key": "secret", "base": "EUR", "symbols": "USD,KZT"}


def test_pair_rate_without_date_uses_latest(dummy_session_factory, dummy_response_factory) -> None:
    session = dummy_session_factory([dummy_response_factory({"rates": {"USD": 2, "KZT": 10}})])
    client = ExchangeRatesClient("secret", base_url="https://rates.test/v1", session=session)

    assert client.pair_rate("USD", "KZT") == 5
    assert session.calls[0]["url"] == "https://rates.test/v1/latest"


@pytest.mark.parametrize(
    "outcome",
    [
        requests.ConnectionError("offline"),
        "http-error",
        "no-rates",
        "bad-json",
    ],
)
def test_fetch_rates_wraps_failures(outcome, dummy_session_factory, dummy_response_factory) -> None:
    if outcome == "http-error":
        response = dummy_response_factory({"error": "nope"}, status_code=429)
    elif outcome == "no-rates":
        response = dummy_response_factory({"success": False})
    elif outcome == "bad-json":
        response = dummy_response_factory(ValueError("not json"))
    else:
        response = outcome
    client = ExchangeRatesClient("secret", session=dummy_session_factory([response]))

    with pytest.raises(ExchangeRateError):
        client.fetch_rates(["USD", "KZT"], date(2024, 1, 1))
