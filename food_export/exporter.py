"""Download the Wolt order history and save orders and items as JSON."""

from __future__ import annotations

import argparse
import json
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Sequence

from food_export.config import load_settings
from food_export.ingestion.wolt import FetchResult, WoltOrdersClient
from food_export.utils.date_range import recent_window_start
from food_export.utils.logger import get_logger

LOGGER = get_logger(__name__)

__all__ = ["ExportResult", "data_file_paths", "export_orders", "parse_args", "main"]


@dataclass(slots=True)
class ExportResult:
    """Paths written by an export run and how many rows each holds."""

    orders_path: Path | None = None
    items_path: Path | None = None
    orders: int = 0
    items: int = 0


def data_file_paths(data_dir: str | Path, fetch_all: bool = False) -> tuple[Path, Path]:
    """Return the ``(orders, items)`` JSON paths for a data directory."""

    prefix = "all_" if fetch_all else ""
    root = Path(data_dir)
    return root / f"{prefix}wolt_orders.json", root / f"{prefix}wolt_items.json"


def _write_json(path: Path, rows: list[dict[str, Any]]) -> None:
    path.write_text(json.dumps(rows, indent=2, ensure_ascii=False), encoding="utf-8")


def save_fetch_result(
    result: FetchResult,
    data_dir: str | Path,
    *,
    fetch_all: bool = False,
) -> ExportResult:
    """Persist ``result``; nothing is written when no orders were collected."""

    if not result.orders:
        LOGGER.info("No orders found.")
        return ExportResult()

    orders_path, items_path = data_file_paths(data_dir, fetch_all)
    orders_path.parent.mkdir(parents=True, exist_ok=True)

    _write_json(orders_path, [order.to_dict() for order in result.orders])
    LOGGER.info("Saved %s orders to %s", len(result.orders), orders_path.name)
    _write_json(items_path, [item.to_dict() for item in result.items])
    LOGGER.info("Saved %s items to %s", len(result.items), items_path.name)
    return ExportResult(
        orders_path=orders_path,
        items_path=items_path,
        orders=len(result.orders),
        items=len(result.items),
    )


def export_orders(
    client: WoltOrdersClient,
    data_dir: str | Path,
    *,
    fetch_all: bool = False,
    now: datetime | None = None,
) -> ExportResult:
    """Fetch orders with ``client`` and write them under ``data_dir``."""

    cutoff = None if fetch_all else recent_window_start(now)
    result = client.fetch_orders(cutoff)
    return save_fetch_result(result, data_dir, fetch_all=fetch_all)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--all",
        dest="fetch_all",
        action="store_true",
        help="Fetch the full order history instead of the last year",
    )
    parser.add_argument(
        "--data-dir",
        dest="data_dir",
        default=None,
        help="Directory receiving the JSON files (defaults to WOLT_DATA_DIR or data/wolt)",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    settings = load_settings()
    if not settings.wolt_token:
        LOGGER.error("WOLT_TOKEN environment variable is not set")
        raise SystemExit(1)

    client = WoltOrdersClient(settings.wolt_token)
    try:
        export_orders(client, args.data_dir or settings.data_dir, fetch_all=args.fetch_all)
    finally:
        client.close()


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    main()
