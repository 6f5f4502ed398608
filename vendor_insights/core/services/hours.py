"""
Operating-hours normalizer - canonical weekly schedules from stored JSON.

Stored vendor hours come in several shapes: canonical objects, the string
"closed", 12-hour range strings such as "9:00 AM - 5:00 PM", null, or
garbage. Each day value is classified into a tagged variant first, and a
single resolution order turns the variant into DayHours:

1. CanonicalEntry  - object with str open, str close, bool closed: kept
2. ClosedEntry     - "closed" (any case): placeholder times, closed=True
3. RangeEntry      - 12-hour range: converted to 24-hour HH:MM
4. OtherEntry      - anything else, or missing: the day's default

normalize_schedule never raises and always returns all seven days.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

logger = logging.getLogger(__name__)

DAYS_OF_WEEK: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

DEFAULT_OPEN = "09:00"
DEFAULT_CLOSE = "17:00"

_RANGE_RE = re.compile(
    r"(\d{1,2}):(\d{2})\s*(AM|PM)?\s*-\s*(\d{1,2}):(\d{2})\s*(AM|PM)?",
    re.IGNORECASE,
)
_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


# --- Canonical Model ---


@dataclass(frozen=True)
class DayHours:
    """Canonical hours for one day. Times are ignored when closed."""

    open: str = DEFAULT_OPEN
    close: str = DEFAULT_CLOSE
    closed: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"open": self.open, "close": self.close, "closed": self.closed}


WeeklySchedule = dict[str, DayHours]

DEFAULT_DAY = DayHours()


# --- Raw Entry Variants ---


@dataclass(frozen=True)
class CanonicalEntry:
    """Value already in canonical shape."""

    hours: DayHours


@dataclass(frozen=True)
class ClosedEntry:
    """The literal string "closed"."""


@dataclass(frozen=True)
class RangeEntry:
    """A parsed 12-hour range, already converted to 24-hour times."""

    open: str
    close: str


@dataclass(frozen=True)
class OtherEntry:
    """Anything unrecognised (including None)."""

    value: Any = None


RawDayEntry = CanonicalEntry | ClosedEntry | RangeEntry | OtherEntry


# --- Time Conversion ---


def to_24_hour(hour: int | str, minute: str, meridiem: str | None = None) -> str:
    """
    Convert a 12-hour clock reading to zero-padded HH:MM.

    12 AM -> 00, 1-11 PM -> +12; every other combination keeps the hour.
    Minutes pass through unchanged.
    """
    h = int(hour)
    suffix = meridiem.lower() if meridiem else None
    if suffix == "pm" and 1 <= h <= 11:
        h += 12
    elif suffix == "am" and h == 12:
        h = 0
    return f"{h:02d}:{minute}"


def format_time_12h(value: str) -> str:
    """
    Format a 24-hour HH:MM time for display ("13:30" -> "1:30 PM").

    Values that are not HH:MM are returned as given.
    """
    match = _TIME_RE.match(value) if isinstance(value, str) else None
    if not match:
        return value

    hour = int(match.group(1))
    minute = int(match.group(2))

    if hour == 0:
        label, suffix = 12, "AM"
    elif hour == 12:
        label, suffix = 12, "PM"
    elif hour < 12:
        label, suffix = hour, "AM"
    else:
        label, suffix = hour - 12, "PM"

    return f"{label}:{minute:02d} {suffix}"


def format_day_hours(hours: DayHours) -> str:
    """Display string for one day: "9:00 AM - 5:00 PM" or "Closed"."""
    if hours.closed:
        return "Closed"
    return f"{format_time_12h(hours.open)} - {format_time_12h(hours.close)}"


def summarize_schedule(schedule: Mapping[str, DayHours] | None) -> str:
    """
    One-line summary for profile cards.

    "Not set" when nothing is stored, "Closed" when no day is open,
    "Open 7 days" for a full week, otherwise "Open N days".
    """
    if not schedule:
        return "Not set"

    open_days = sum(1 for hours in schedule.values() if not hours.closed)
    if open_days == 0:
        return "Closed"
    if open_days == 1:
        return "Open 1 day"
    return f"Open {open_days} days"


def time_options(step_minutes: int = 30) -> list[tuple[str, str]]:
    """(HH:MM, 12-hour label) pairs covering one day, for time pickers."""
    if step_minutes <= 0 or 60 % step_minutes:
        raise ValueError(f"step_minutes must divide 60, got {step_minutes}")

    options: list[tuple[str, str]] = []
    for hour in range(24):
        for minute in range(0, 60, step_minutes):
            value = f"{hour:02d}:{minute:02d}"
            options.append((value, format_time_12h(value)))
    return options


# --- Classification ---


def classify_day_entry(value: Any) -> RawDayEntry:
    """Tag a raw stored day value with the variant it represents."""
    if isinstance(value, DayHours):
        return CanonicalEntry(value)

    if isinstance(value, Mapping):
        open_ = value.get("open")
        close = value.get("close")
        closed = value.get("closed")
        if isinstance(open_, str) and isinstance(close, str) and isinstance(closed, bool):
            return CanonicalEntry(DayHours(open=open_, close=close, closed=closed))
        return OtherEntry(value)

    if isinstance(value, str):
        if value.lower() == "closed":
            return ClosedEntry()

        match = _RANGE_RE.search(value)
        if match:
            open_hour, open_min, open_ampm, close_hour, close_min, close_ampm = match.groups()
            return RangeEntry(
                open=to_24_hour(open_hour, open_min, open_ampm),
                close=to_24_hour(close_hour, close_min, close_ampm),
            )

    return OtherEntry(value)


def resolve_day_entry(entry: RawDayEntry, default: DayHours) -> DayHours:
    """Turn a classified entry into canonical hours."""
    if isinstance(entry, CanonicalEntry):
        return entry.hours
    if isinstance(entry, ClosedEntry):
        return DayHours(open=DEFAULT_OPEN, close=DEFAULT_CLOSE, closed=True)
    if isinstance(entry, RangeEntry):
        return DayHours(open=entry.open, close=entry.close, closed=False)
    return default


# --- Normalization ---


def default_schedule(default_day: DayHours = DEFAULT_DAY) -> WeeklySchedule:
    """Seven days of the same default hours."""
    return {day: default_day for day in DAYS_OF_WEEK}


def normalize_schedule_with_report(
    raw: Any,
    defaults: Mapping[str, DayHours] | None = None,
) -> tuple[WeeklySchedule, tuple[str, ...]]:
    """
    Normalize stored hours and report which days fell back to defaults.

    A day is reported when it was missing or unrecognised. Canonical form
    itself carries no such flag.
    """
    table: Mapping[str, DayHours] = defaults or default_schedule()

    values: dict[str, Any] = {}
    if isinstance(raw, Mapping):
        for key, value in raw.items():
            if isinstance(key, str) and key.lower() in DAYS_OF_WEEK:
                values.setdefault(key.lower(), value)

    schedule: WeeklySchedule = {}
    corrected: list[str] = []
    for day in DAYS_OF_WEEK:
        default = table.get(day, DEFAULT_DAY)
        if day not in values:
            schedule[day] = default
            corrected.append(day)
            continue

        entry = classify_day_entry(values[day])
        if isinstance(entry, OtherEntry):
            corrected.append(day)
        schedule[day] = resolve_day_entry(entry, default)

    if corrected and raw is not None:
        logger.debug("Operating hours fell back to defaults for: %s", ", ".join(corrected))

    return schedule, tuple(corrected)


def normalize_schedule(
    raw: Any,
    defaults: Mapping[str, DayHours] | None = None,
) -> WeeklySchedule:
    """
    Normalize any stored operating-hours value to a full WeeklySchedule.

    Total: never raises, always returns monday..sunday in order.
    """
    schedule, _ = normalize_schedule_with_report(raw, defaults)
    return schedule


def schedule_to_dict(schedule: Mapping[str, DayHours]) -> dict[str, dict[str, Any]]:
    """JSON-ready rendering of a schedule."""
    return {day: schedule[day].to_dict() for day in DAYS_OF_WEEK if day in schedule}


# --- Editing Helpers ---


DEFAULT_TEMPLATES: dict[str, dict[str, Any]] = {
    "business": {"open": "09:00", "close": "17:00", "closed_days": ["sunday"]},
    "retail": {"open": "10:00", "close": "20:00", "closed_days": []},
    "restaurant": {"open": "11:00", "close": "22:00", "closed_days": []},
}


def apply_template(
    name: str,
    templates: Mapping[str, Mapping[str, Any]] | None = None,
) -> WeeklySchedule:
    """
    Build a schedule from a named template.

    Raises KeyError for an unknown template name.
    """
    source = templates if templates is not None else DEFAULT_TEMPLATES
    template = source[name]
    closed_days = set(template.get("closed_days", ()))
    base = DayHours(open=template["open"], close=template["close"], closed=False)
    return {day: replace(base, closed=day in closed_days) for day in DAYS_OF_WEEK}


def copy_day_to_all(schedule: Mapping[str, DayHours], source_day: str) -> WeeklySchedule:
    """Copy one day's hours onto every other day."""
    if source_day not in DAYS_OF_WEEK:
        raise KeyError(source_day)
    hours = schedule.get(source_day, DEFAULT_DAY)
    return {day: hours for day in DAYS_OF_WEEK}
