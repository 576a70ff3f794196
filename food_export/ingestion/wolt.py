"""Paginated download of the Wolt order history."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Mapping

from food_export.ingestion.models import OrderItemRecord, OrderRecord
from food_export.utils.date_range import from_epoch_ms, parse_epoch_ms, to_epoch_ms
from food_export.utils.logger import get_logger

if TYPE_CHECKING:  # pragma: no cover - imported only for type checking
    import requests

LOGGER = get_logger(__name__)

WOLT_ORDERS_URL = "https://restaurant-api.wolt.com/v2/order_details/"
PAGE_SIZE = 100


@dataclass(slots=True)
class FetchResult:
    """Orders and items collected across all pages."""

    orders: list[OrderRecord] = field(default_factory=list)
    items: list[OrderItemRecord] = field(default_factory=list)


def _fix_venue_name(venue_name: str | None) -> str | None:
    if not venue_name:
        return venue_name
    head = venue_name.split("|")[0].strip()
    return head or venue_name


def _coordinate(coordinates: Any, index: int) -> float | None:
    if not coordinates:
        return None
    return round(float(coordinates[index]), 10)


def _delivery_time(order: Mapping[str, Any]) -> Any:
    delivery = order.get("delivery_time")
    if isinstance(delivery, Mapping):
        return delivery.get("$date")
    return None


def process_order(order: Mapping[str, Any]) -> tuple[OrderRecord, list[OrderItemRecord]]:
    """Flatten a raw API order into an :class:`OrderRecord` and its items.

    Prices arrive in minor units. The shared total (the user's part of a
    group order) wins over the full total when it is positive.
    """

    venue_name = order.get("venue_name")
    venue_name_fixed = _fix_venue_name(venue_name)
    share = order.get("total_price_share") or 0
    total_minor = share if share > 0 else order.get("total_price") or 0
    delivery_ms = parse_epoch_ms(_delivery_time(order))
    coordinates = order.get("venue_coordinates")
    currency = order.get("currency")

    record = OrderRecord(
        order_id=order.get("order_id"),
        total_price=total_minor / 100,
        currency=currency,
        latitude=_coordinate(coordinates, 1),
        longitude=_coordinate(coordinates, 0),
        venue_name=venue_name,
        venue_name_fixed=venue_name_fixed,
        venue_timezone=order.get("venue_timezone"),
        delivery_time=delivery_ms,
        year_month=from_epoch_ms(delivery_ms).strftime("%Y-%m"),
    )
    items = [
        OrderItemRecord(
            order_id=record.order_id,
            item_id=item.get("id"),
            name=item.get("name"),
            price=(item.get("end_amount") or 0) / 100,
            currency=currency,
            venue_name_fixed=venue_name_fixed,
            count=item.get("count") or 0,
        )
        for item in order.get("items") or []
    ]
    return record, items


class WoltOrdersClient:
    """Download delivered orders page by page with a bearer token."""

    def __init__(
        self,
        token: str,
        *,
        url: str = WOLT_ORDERS_URL,
        page_size: int = PAGE_SIZE,
        timeout: int = 30,
        session: "requests.Session | None" = None,
    ) -> None:
        if not token:
            raise ValueError("WOLT_TOKEN is required to fetch order history")
        self.url = url
        self.page_size = page_size
        self.timeout = timeout
        if session is None:
            import requests

            session = requests.Session()
        self.session = session
        self.session.headers.update({"Authorization": f"Bearer {token}"})

    def fetch_page(self, skip: int) -> Any:
        response = self.session.get(
            self.url,
            params={"limit": self.page_size, "skip": skip},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    def fetch_orders(self, cutoff: datetime | None = None) -> FetchResult:
        """Collect delivered orders, newest first.

        With ``cutoff`` the walk stops at the first order delivered before it;
        without one the full history is downloaded. Request failures end the
        walk early and keep whatever was already collected. Orders whose delivery
        time cannot be read are skipped.
        """

        import requests

        cutoff_ms = to_epoch_ms(cutoff) if cutoff is not None else None
        if cutoff is None:
            LOGGER.info("Fetching all historical orders...")
        else:
            LOGGER.info("Fetching orders from: %s", cutoff)

        result = FetchResult()
        skip = 0
        has_more = True
        while has_more:
            LOGGER.info("Fetching orders with skip=%s...", skip)
            try:
                orders = self.fetch_page(skip)
            except (requests.RequestException, ValueError) as exc:
                LOGGER.error("Error fetching orders: %s", exc)
                break

            if not isinstance(orders, list):
                LOGGER.warning("Unexpected response format: %s", type(orders).__name__)
                break
            if not orders:
                LOGGER.info("No more orders to process")
                break

            for order in orders:
                delivery_time = _delivery_time(order)
                if order.get("status") != "delivered" or not delivery_time:
                    LOGGER.info(
                        "Skipping order %s: status=%s, deliveryTime=%s",
                        order.get("order_id"),
                        order.get("status"),
                        delivery_time,
                    )
                    continue

                try:
                    delivery_ms = parse_epoch_ms(delivery_time)
                    delivered_at = from_epoch_ms(delivery_ms).isoformat()
                except (ValueError, OverflowError) as exc:
                    LOGGER.warning(
                        "Skipping order %s: invalid delivery time %r (%s)",
                        order.get("order_id"),
                        delivery_time,
                        exc,
                    )
                    continue

                if cutoff_ms is not None and delivery_ms < cutoff_ms:
                    LOGGER.info("Skipping old order %s: %s", order.get("order_id"), delivered_at)
                    has_more = False
                    break

                record, items = process_order(order)
                result.orders.append(record)
                result.items.extend(items)
                LOGGER.info("Processed order %s from %s", record.order_id, delivered_at)

            skip += self.page_size
            LOGGER.info(
                "Processed batch: %s orders, %s items so far",
                len(result.orders),
                len(result.items),
            )
            if len(orders) < self.page_size:
                has_more = False

        return result

    def close(self) -> None:  # pragma: no cover - trivial delegator
        self.session.close()


__all__ = ["FetchResult", "PAGE_SIZE", "WOLT_ORDERS_URL", "WoltOrdersClient", "process_order"]
