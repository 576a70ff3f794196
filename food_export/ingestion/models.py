"""Flattened order and line-item records written by the exporter."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(slots=True)
class OrderRecord:
    """One delivered order with its total in major currency units."""

    order_id: str
    total_price: float
    currency: str
    latitude: float | None
    longitude: float | None
    venue_name: str | None
    venue_name_fixed: str | None
    venue_timezone: str | None
    delivery_time: int
    year_month: str

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["year-month"] = payload.pop("year_month")
        return payload


@dataclass(slots=True)
class OrderItemRecord:
    """A line item of an order; ``price`` is the per-line end amount."""

    order_id: str
    item_id: str | None
    name: str | None
    price: float
    currency: str
    venue_name_fixed: str | None
    count: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


__all__ = ["OrderItemRecord", "OrderRecord"]
