from __future__ import annotations

from pathlib import Path

import pytest

from food_export.config import DEFAULT_BASE_CURRENCY, load_settings

ENV_VARS = [
    "BASE_CURRENCY",
    "EXCHANGE_RATES_API_KEY",
    "EXCHANGE_RATES_API_URL",
    "EXCHANGE_RATES_CACHE",
    "WOLT_TOKEN",
    "WOLT_DATA_DIR",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    # setenv+delenv registers each variable for removal on undo
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


def test_load_settings_defaults() -> None:
    settings = load_settings(dotenv=False)

    assert settings.base_currency == DEFAULT_BASE_CURRENCY
    assert settings.exchange_rates_api_key is None
    assert settings.has_api_key is False
    assert settings.exchange_rates_cache == Path("data") / "exchange_rates_cache.json"
    assert settings.data_dir == Path("data") / "wolt"


def test_load_settings_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BASE_CURRENCY", "eur")
    monkeypatch.setenv("EXCHANGE_RATES_API_KEY", "secret")
    monkeypatch.setenv("WOLT_TOKEN", "token")
    monkeypatch.setenv("WOLT_DATA_DIR", "/tmp/wolt")

    settings = load_settings(dotenv=False)

    assert settings.base_currency == "EUR"
    assert settings.has_api_key is True
    assert settings.wolt_token == "token"
    assert settings.data_dir == Path("/tmp/wolt")


def test_blank_api_key_disables_remote_lookups(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXCHANGE_RATES_API_KEY", "   ")

    assert load_settings(dotenv=False).has_api_key is False


def test_load_settings_reads_dotenv_file(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    (tmp_path / ".env").write_text("BASE_CURRENCY=USD\n")
    monkeypatch.chdir(tmp_path)

    assert load_settings().base_currency == "USD"
