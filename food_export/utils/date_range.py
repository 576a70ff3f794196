"""Date helpers shared by the exporter, the converter and the report."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from numbers import Real

DateLike = date | datetime | int | float | str


@dataclass(frozen=True)
class DateRange:
    """Container representing a closed date range."""

    start: date
    end: date

    def describe(self) -> str:
        """Render the range as ``January 5, 2024 - March 1, 2024``."""
        return f"{format_long_date(self.start)} - {format_long_date(self.end)}"


def from_epoch_ms(value: int | float) -> datetime:
    """Return the UTC instant for an epoch-millisecond timestamp."""

    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def to_epoch_ms(moment: datetime) -> int:
    """Return ``moment`` as integer milliseconds since the epoch."""

    return int(moment.timestamp() * 1000)


def parse_epoch_ms(value: object) -> int:
    """Coerce a numeric or numeric-string timestamp to integer milliseconds."""

    if isinstance(value, bool):
        raise ValueError(f"Unsupported timestamp value: {value!r}")
    if isinstance(value, Real):
        return int(value)
    if isinstance(value, str):
        return int(float(value.strip()))
    raise ValueError(f"Unsupported timestamp value: {value!r}")


def to_day(value: DateLike) -> date:
    """Truncate ``value`` to its calendar day.

    ``date`` objects pass through and ``datetime`` objects keep their own
    calendar day. Epoch milliseconds and ISO strings carrying an offset are
    read in UTC.
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return from_epoch_ms(value).date()
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return from_epoch_ms(int(text)).date()
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc)
        return parsed.date()
    raise ValueError(f"Unsupported date value: {value!r}")


def recent_window_start(now: datetime | None = None) -> datetime:
    """Return the first day of the current month, one year back."""

    current = now or datetime.now()
    month_start = current.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return month_start.replace(year=month_start.year - 1)


def months_between(start: datetime, end: datetime) -> int:
    """Return the number of whole months elapsed from ``start`` to ``end``."""

    if end < start:
        return -months_between(end, start)
    months = (end.year - start.year) * 12 + (end.month - start.month)
    anchor = (start.day, start.time())
    if (end.day, end.time()) < anchor:
        months -= 1
    return months


def format_long_date(day: date) -> str:
    """Format ``day`` as ``January 5, 2024``."""

    return f"{day:%B} {day.day}, {day.year}"


__all__ = [
    "DateLike",
    "DateRange",
    "format_long_date",
    "from_epoch_ms",
    "months_between",
    "parse_epoch_ms",
    "recent_window_start",
    "to_day",
    "to_epoch_ms",
]
