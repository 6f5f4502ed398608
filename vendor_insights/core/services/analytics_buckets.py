"""
Time-bucketing engine - contiguous, gap-filled day series.

Key behaviors:
- One bucket per calendar day in [window_start, window_end], ascending
- Days with no events still get a bucket (count = 0)
- An event's day is taken in a fixed reference time zone from config
- Events outside the window are ignored, never clamped
- No hidden state: the same inputs always give the same output
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta, tzinfo
from zoneinfo import ZoneInfo

from vendor_insights.core.errors import InvalidWindowError
from vendor_insights.domain.entities import Event


@dataclass(frozen=True)
class DayBucket:
    """Event count for one calendar day."""

    date: date
    count: int


# --- Time zone helpers ---


def resolve_timezone(tz: tzinfo | str) -> tzinfo:
    """Accept an IANA name or a tzinfo."""
    if isinstance(tz, str):
        return ZoneInfo(tz)
    return tz


def local_day(ts: datetime, tz: tzinfo | str) -> date:
    """
    Calendar day of a timestamp in the reference zone.

    Naive timestamps are treated as UTC.
    """
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=UTC)
    return ts.astimezone(resolve_timezone(tz)).date()


# --- Windows ---


def validate_window(window_start: date, window_end: date) -> None:
    """Raise InvalidWindowError unless both bounds are set and ordered."""
    if window_start is None or window_end is None:
        raise InvalidWindowError(window_start, window_end, "both bounds are required")
    if window_start > window_end:
        raise InvalidWindowError(window_start, window_end, "start is after end")


def iter_days(window_start: date, window_end: date) -> Iterator[date]:
    """Yield every day in the closed interval, ascending."""
    day = window_start
    while day <= window_end:
        yield day
        day += timedelta(days=1)


def trailing_window(today: date, days: int) -> tuple[date, date]:
    """
    Window of `days` days ending on (and including) today.

    Raises InvalidWindowError for days < 1.
    """
    if days < 1:
        raise InvalidWindowError(None, today, f"days must be >= 1, got {days}")
    return today - timedelta(days=days - 1), today


def day_bounds_utc(
    window_start: date,
    window_end: date,
    tz: tzinfo | str,
) -> tuple[datetime, datetime]:
    """
    Convert an inclusive local-day window to a half-open UTC range.

    Used to narrow store queries; bucketing still filters by local day.
    """
    validate_window(window_start, window_end)
    zone = resolve_timezone(tz)
    start = datetime.combine(window_start, time.min, tzinfo=zone)
    end = datetime.combine(window_end + timedelta(days=1), time.min, tzinfo=zone)
    return start.astimezone(UTC), end.astimezone(UTC)


# --- Bucketing ---


def bucketize(
    events: Iterable[Event],
    window_start: date,
    window_end: date,
    tz: tzinfo | str = "UTC",
) -> list[DayBucket]:
    """
    Count events per local calendar day over a closed window.

    Returns exactly (window_end - window_start).days + 1 buckets.
    """
    validate_window(window_start, window_end)
    zone = resolve_timezone(tz)

    counts: Counter[date] = Counter()
    for event in events:
        day = local_day(event.occurred_at, zone)
        if window_start <= day <= window_end:
            counts[day] += 1

    return [DayBucket(date=day, count=counts[day]) for day in iter_days(window_start, window_end)]


def count_in_window(
    events: Iterable[Event],
    window_start: date,
    window_end: date,
    tz: tzinfo | str = "UTC",
) -> int:
    """Total number of events whose local day falls in the window."""
    return sum(bucket.count for bucket in bucketize(events, window_start, window_end, tz))
