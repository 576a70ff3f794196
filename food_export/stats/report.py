"""Print descriptive statistics for exported Wolt orders."""

from __future__ import annotations

import argparse
import json
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Callable, Sequence

import pandas as pd

from food_export.config import load_settings
from food_export.currency.converter import ConvertedAmount, CurrencyConverter
from food_export.exporter import data_file_paths
from food_export.utils.date_range import DateRange, format_long_date, months_between, to_epoch_ms
from food_export.utils.logger import get_logger

LOGGER = get_logger(__name__)

ORDER_COLUMNS = [
    "order_id",
    "total_price",
    "currency",
    "latitude",
    "longitude",
    "venue_name",
    "venue_name_fixed",
    "venue_timezone",
    "delivery_time",
    "year-month",
]
ITEM_COLUMNS = [
    "order_id",
    "item_id",
    "name",
    "price",
    "currency",
    "venue_name_fixed",
    "count",
]
TOP_N = 5
MISSING_CURRENCY = "?"

Formatter = Callable[..., str]


@dataclass(slots=True)
class RankedTotal:
    name: str
    count: int
    total: float


@dataclass(slots=True)
class MonthSummary:
    month: str
    total: float
    count: int
    items: int

    @property
    def avg_per_order(self) -> float:
        return self.total / self.count


@dataclass(slots=True)
class OrderHighlight:
    venue: str
    total: float
    delivered: date
    item_count: int


@dataclass(slots=True)
class CurrencySummary:
    currency: str
    count: int
    total: float
    total_base: float


@dataclass(slots=True)
class OrderStatistics:
    """Aggregates printed by the report, all totals in the base currency."""

    date_range: DateRange
    total_orders: int
    total_items: int
    total_spent: float
    months_covered: int
    most_active_month: tuple[str, int]
    most_active_day: tuple[str, int]
    top_venues: list[RankedTotal]
    top_items: list[RankedTotal]
    monthly: list[MonthSummary]
    most_expensive_order: OrderHighlight
    most_items_order: OrderHighlight
    cheapest_order: OrderHighlight | None
    currencies: list[CurrencySummary]
    approximate_conversions: int = 0
    approximate_currencies: list[str] = field(default_factory=list)

    @property
    def avg_items_per_order(self) -> float:
        return self.total_items / self.total_orders

    @property
    def avg_order_value(self) -> float:
        return self.total_spent / self.total_orders

    @property
    def avg_orders_per_month(self) -> float:
        return self.total_orders / self.months_covered

    @property
    def top_spending_month(self) -> MonthSummary:
        return max(self.monthly, key=lambda month: month.total)

    @property
    def lowest_spending_month(self) -> MonthSummary:
        return min(self.monthly, key=lambda month: month.total)

    @property
    def highest_avg_order_month(self) -> MonthSummary:
        return max(self.monthly, key=lambda month: month.avg_per_order)

    @property
    def lowest_avg_order_month(self) -> MonthSummary:
        return min(self.monthly, key=lambda month: month.avg_per_order)

    @property
    def avg_monthly_spending(self) -> float:
        return sum(month.total for month in self.monthly) / len(self.monthly)

    @property
    def avg_monthly_orders(self) -> float:
        return sum(month.count for month in self.monthly) / len(self.monthly)

    @property
    def avg_monthly_items(self) -> float:
        return sum(month.items for month in self.monthly) / len(self.monthly)


def load_frames(data_dir: str | Path, show_all: bool = False) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Read the exported JSON files into ``(orders, items)`` DataFrames."""

    orders_path, items_path = data_file_paths(data_dir, show_all)
    orders = json.loads(orders_path.read_text(encoding="utf-8"))
    items = json.loads(items_path.read_text(encoding="utf-8"))
    return (
        pd.DataFrame(orders, columns=ORDER_COLUMNS),
        pd.DataFrame(items, columns=ITEM_COLUMNS),
    )


def _convert(
    converter: CurrencyConverter, amount: float, currency: str, delivered_ms: int
) -> ConvertedAmount:
    try:
        return converter.convert(amount, currency, delivered_ms)
    except ValueError as exc:
        LOGGER.warning("Keeping %s unconverted: %s", amount, exc)
        return ConvertedAmount(amount=amount, currency=converter.base_currency, approximate=True)


def convert_frames(
    orders: pd.DataFrame,
    items: pd.DataFrame,
    converter: CurrencyConverter,
    *,
    now: datetime | None = None,
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Add base-currency columns and ``approximate`` flags to both frames.

    Items are converted at their parent order's delivery time. Rows without a
    valid currency code keep their amount, are flagged approximate and are
    labelled ``?``.
    """

    LOGGER.info("Converting all amounts to %s...", converter.base_currency)
    orders = orders.copy()
    items = items.copy()
    orders["currency"] = orders["currency"].fillna(MISSING_CURRENCY)
    items["currency"] = items["currency"].fillna(MISSING_CURRENCY)

    converted_orders = [
        _convert(converter, float(row.total_price), row.currency, int(row.delivery_time))
        for row in orders.itertuples(index=False)
    ]
    orders["total_price_base"] = [value.amount for value in converted_orders]
    orders["approximate"] = [value.approximate for value in converted_orders]

    fallback_ms = to_epoch_ms(now or datetime.now())
    delivery_by_order = dict(zip(orders["order_id"], orders["delivery_time"]))
    converted_items = [
        _convert(
            converter,
            float(row.price),
            row.currency,
            int(delivery_by_order.get(row.order_id, fallback_ms)),
        )
        for row in items.itertuples(index=False)
    ]
    items["price_base"] = [value.amount for value in converted_items]
    items["approximate"] = [value.approximate for value in converted_items]
    return orders, items


def _first_ranked(counts: pd.Series) -> tuple[str, int]:
    ranked = counts.sort_values(ascending=False, kind="stable")
    return str(ranked.index[0]), int(ranked.iloc[0])


def _highlight(row: pd.Series) -> OrderHighlight:
    return OrderHighlight(
        venue=str(row["venue_name_fixed"]),
        total=float(row["total_price_base"]),
        delivered=row["delivered_at"].date(),
        item_count=int(row["item_count"]),
    )


def compute_statistics(orders: pd.DataFrame, items: pd.DataFrame) -> OrderStatistics:
    """Aggregate converted frames produced by :func:`convert_frames`."""

    if orders.empty:
        raise ValueError("At least one order is required to compute statistics")

    orders = orders.copy()
    items = items.copy()
    orders["delivered_at"] = pd.to_datetime(orders["delivery_time"].astype("int64"), unit="ms", utc=True)
    items["line_total"] = items["price_base"].astype(float) * items["count"].astype(float)

    item_counts = items.groupby("order_id", sort=False)["count"].sum()
    orders["item_count"] = orders["order_id"].map(item_counts).fillna(0).astype(int)

    first = orders["delivered_at"].min().to_pydatetime()
    last = orders["delivered_at"].max().to_pydatetime()

    venues = (
        orders.groupby("venue_name_fixed", sort=False, dropna=False)
        .agg(count=("order_id", "size"), total=("total_price_base", "sum"))
        .sort_values("count", ascending=False, kind="stable")
        .head(TOP_N)
    )
    top_items: list[RankedTotal] = []
    if not items.empty:
        item_stats = (
            items.groupby("name", sort=False, dropna=False)
            .agg(count=("count", "sum"), total=("line_total", "sum"))
            .sort_values("count", ascending=False, kind="stable")
            .head(TOP_N)
        )
        top_items = [
            RankedTotal(name=str(name), count=int(row["count"]), total=float(row["total"]))
            for name, row in item_stats.iterrows()
        ]

    monthly = orders.groupby("year-month", sort=False).agg(
        total=("total_price_base", "sum"),
        count=("order_id", "size"),
        items=("item_count", "sum"),
    )

    by_total = orders.sort_values("total_price_base", ascending=False, kind="stable")
    by_items = orders.sort_values("item_count", ascending=False, kind="stable")
    positive = orders[orders["total_price_base"] > 0].sort_values(
        "total_price_base", ascending=True, kind="stable"
    )

    currencies = orders.groupby("currency", sort=False, dropna=False).agg(
        count=("order_id", "size"),
        total=("total_price", "sum"),
        total_base=("total_price_base", "sum"),
    )

    approximate_orders = orders[orders["approximate"].astype(bool)]
    approximate_items = items[items["approximate"].astype(bool)]
    approximate_currencies = sorted(
        {str(code) for code in approximate_orders["currency"]}
        | {str(code) for code in approximate_items["currency"]}
    )

    return OrderStatistics(
        date_range=DateRange(start=first.date(), end=last.date()),
        total_orders=len(orders),
        total_items=len(items),
        total_spent=float(orders["total_price_base"].sum()),
        months_covered=months_between(first, last) + 1,
        most_active_month=_first_ranked(orders.groupby("year-month", sort=False).size()),
        most_active_day=_first_ranked(
            orders.groupby(orders["delivered_at"].dt.day_name(), sort=False).size()
        ),
        top_venues=[
            RankedTotal(name=str(name), count=int(row["count"]), total=float(row["total"]))
            for name, row in venues.iterrows()
        ],
        top_items=top_items,
        monthly=[
            MonthSummary(
                month=str(month),
                total=float(row["total"]),
                count=int(row["count"]),
                items=int(row["items"]),
            )
            for month, row in monthly.iterrows()
        ],
        most_expensive_order=_highlight(by_total.iloc[0]),
        most_items_order=_highlight(by_items.iloc[0]),
        cheapest_order=_highlight(positive.iloc[0]) if not positive.empty else None,
        currencies=[
            CurrencySummary(
                currency=str(code),
                count=int(row["count"]),
                total=float(row["total"]),
                total_base=float(row["total_base"]),
            )
            for code, row in currencies.iterrows()
        ],
        approximate_conversions=len(approximate_orders) + len(approximate_items),
        approximate_currencies=approximate_currencies,
    )


def _section(title: str) -> list[str]:
    return ["", f"=== {title} ==="]


def render_report(stats: OrderStatistics, fmt: Formatter) -> list[str]:
    """Return the report as printable lines; ``fmt`` formats money amounts."""

    lines = [
        "📊 Wolt Order Statistics",
        f"📅 Date Range: {stats.date_range.describe()}",
    ]

    lines += _section("Basic Order Statistics")
    lines += [
        f"📦 Total Orders: {stats.total_orders}",
        f"🍽️ Total Items: {stats.total_items}",
        f"💰 Total Spent: {fmt(stats.total_spent)}",
        f"📊 Average Items per Order: {stats.avg_items_per_order:.1f}",
        f"💵 Average Order Value: {fmt(stats.avg_order_value)}",
        f"📈 Average Orders per Month: {stats.avg_orders_per_month:.1f}",
    ]

    lines += _section("Time-based Analysis")
    month, month_count = stats.most_active_month
    day, day_count = stats.most_active_day
    lines += [
        f"📅 Most Active Month: {month} ({month_count} orders)",
        f"📆 Most Active Day: {day} ({day_count} orders)",
    ]

    lines += _section("Venue Analysis")
    lines.append(f"🏪 Top {TOP_N} Most Ordered Places:")
    for index, venue in enumerate(stats.top_venues, start=1):
        lines.append(f"   {index}. {venue.name} ({venue.count} orders, {fmt(venue.total)})")

    lines += _section("Item Analysis")
    lines.append(f"🍔 Top {TOP_N} Most Ordered Items:")
    for index, item in enumerate(stats.top_items, start=1):
        lines.append(f"   {index}. {item.name} (ordered {item.count} times, {fmt(item.total)})")

    lines += _section("Spending Patterns")
    lines.append("💰 Monthly Spending Analysis:")
    for label, summary in (
        ("Top Spending Month", stats.top_spending_month),
        ("Lowest Spending Month", stats.lowest_spending_month),
    ):
        lines += [
            f"   {label}: {summary.month}",
            f"      Total: {fmt(summary.total)}",
            f"      Orders: {summary.count}",
            f"      Items: {summary.items}",
            f"      Average per Order: {fmt(summary.avg_per_order)}",
        ]
    lines += [
        "   Monthly Averages:",
        f"      Spending: {fmt(stats.avg_monthly_spending)}",
        f"      Orders: {stats.avg_monthly_orders:.1f}",
        f"      Items: {stats.avg_monthly_items:.1f}",
        "",
        "💳 Order Value Patterns:",
        f"   Highest Average Order: {stats.highest_avg_order_month.month} "
        f"({fmt(stats.highest_avg_order_month.avg_per_order)} per order)",
        f"   Lowest Average Order: {stats.lowest_avg_order_month.month} "
        f"({fmt(stats.lowest_avg_order_month.avg_per_order)} per order)",
    ]

    lines += _section("Fun Facts")
    priciest = stats.most_expensive_order
    fullest = stats.most_items_order
    lines += [
        "🏆 Most Expensive Order:",
        f"   {fmt(priciest.total)} at {priciest.venue}",
        f"   Date: {format_long_date(priciest.delivered)}",
        "",
        "🎯 Most Items in One Order:",
        f"   {fullest.item_count} items at {fullest.venue}",
        f"   Total: {fmt(fullest.total)}",
    ]
    if stats.cheapest_order is not None:
        lines += [
            "",
            "💝 Budget-Friendly Order:",
            f"   {fmt(stats.cheapest_order.total)} at {stats.cheapest_order.venue}",
        ]

    lines += _section("Currency Distribution")
    lines.append("💱 Orders by Currency:")
    for summary in stats.currencies:
        lines.append(
            f"   {summary.currency}: {summary.count} orders "
            f"({fmt(summary.total, summary.currency)} / {fmt(summary.total_base)})"
        )

    if stats.approximate_conversions:
        lines.append(
            f"⚠️ {stats.approximate_conversions} amounts in "
            f"{', '.join(stats.approximate_currencies)} could not be converted; "
            "totals above mix currencies."
        )
    return lines


def generate_report(
    data_dir: str | Path,
    converter: CurrencyConverter,
    *,
    show_all: bool = False,
) -> list[str]:
    """Load, convert and summarise exported orders into report lines."""

    orders, items = load_frames(data_dir, show_all)
    if orders.empty:
        return ["No orders found."]
    orders, items = convert_frames(orders, items, converter)
    return render_report(compute_statistics(orders, items), converter.format)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--all",
        dest="show_all",
        action="store_true",
        help="Report on the full-history export (all_ prefixed files)",
    )
    parser.add_argument(
        "--data-dir",
        dest="data_dir",
        default=None,
        help="Directory holding the exported JSON files",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    settings = load_settings()
    converter = CurrencyConverter.from_settings(settings)
    try:
        lines = generate_report(args.data_dir or settings.data_dir, converter, show_all=args.show_all)
    except FileNotFoundError as exc:
        LOGGER.error("Exported data not found: %s (run the exporter first)", exc.filename)
        raise SystemExit(1) from exc
    finally:
        converter.close()
    print("\n".join(lines))


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    main()
