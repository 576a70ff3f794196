"""Tests for the JSON exporter and its CLI."""

from __future__ import annotations

import json
import runpy
from datetime import datetime
from pathlib import Path

import pytest

from food_export import exporter as exporter_module
from food_export.config import Settings
from food_export.ingestion.models import OrderItemRecord, OrderRecord
from food_export.ingestion.wolt import FetchResult


def _result() -> FetchResult:
    return FetchResult(
        orders=[
            OrderRecord(
                order_id="o1",
                total_price=4500.0,
                currency="KZT",
                latitude=43.2,
                longitude=76.9,
                venue_name="Burger Place | Downtown",
                venue_name_fixed="Burger Place",
                venue_timezone="Asia/Almaty",
                delivery_time=1_705_320_000_000,
                year_month="2024-01",
            )
        ],
        items=[
            OrderItemRecord(
                order_id="o1",
                item_id="i1",
                name="Burger",
                price=3000.0,
                currency="KZT",
                venue_name_fixed="Burger Place",
                count=2,
            )
        ],
    )


class DummyClient:
    def __init__(self, result: FetchResult) -> None:
        self.result = result
        self.cutoffs: list[datetime | None] = []

    def fetch_orders(self, cutoff: datetime | None = None) -> FetchResult:
        self.cutoffs.append(cutoff)
        return self.result

    def close(self) -> None:
        return None


def test_export_orders_writes_recent_files(tmp_path: Path) -> None:
    client = DummyClient(_result())

    outcome = exporter_module.export_orders(
        client, tmp_path / "wolt", now=datetime(2024, 6, 18, 9, 30)
    )

    assert client.cutoffs == [datetime(2023, 6, 1)]
    assert outcome.orders == 1 and outcome.items == 1
    orders = json.loads((tmp_path / "wolt" / "wolt_orders.json").read_text())
    items = json.loads((tmp_path / "wolt" / "wolt_items.json").read_text())
    assert orders[0]["year-month"] == "2024-01"
    assert orders[0]["venue_name_fixed"] == "Burger Place"
    assert items[0]["count"] == 2


def test_export_orders_all_uses_prefix_and_no_cutoff(tmp_path: Path) -> None:
    client = DummyClient(_result())

    outcome = exporter_module.export_orders(client, tmp_path, fetch_all=True)

    assert client.cutoffs == [None]
    assert outcome.orders_path == tmp_path / "all_wolt_orders.json"
    assert (tmp_path / "all_wolt_items.json").exists()


def test_export_orders_skips_writing_without_orders(tmp_path: Path) -> None:
    outcome = exporter_module.export_orders(DummyClient(FetchResult()), tmp_path / "out")

    assert outcome.orders_path is None
    assert not (tmp_path / "out").exists()


def test_main_exits_without_token(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(exporter_module, "load_settings", lambda: Settings(wolt_token=None))

    with pytest.raises(SystemExit) as excinfo:
        exporter_module.main([])

    assert excinfo.value.code == 1


def test_main_wires_client_and_data_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    created: dict[str, object] = {}

    def _fake_client(token: str) -> DummyClient:
        created["token"] = token
        return DummyClient(_result())

    monkeypatch.setattr(
        exporter_module, "load_settings", lambda: Settings(wolt_token="tkn", data_dir=tmp_path)
    )
    monkeypatch.setattr(exporter_module, "WoltOrdersClient", _fake_client)

    exporter_module.main(["--all"])

    assert created["token"] == "tkn"
    assert (tmp_path / "all_wolt_orders.json").exists()


def test_export_orders_script_invokes_main(monkeypatch: pytest.MonkeyPatch) -> None:
    called = {"value": False}

    def _fake_main() -> None:
        called["value"] = True

    monkeypatch.setattr(exporter_module, "main", _fake_main)

    runpy.run_module("food_export.scripts.export_orders", run_name="__main__")

    assert called["value"] is True
