"""
Analytics aggregator - dashboard summaries over an event snapshot.

Every function here is pure and total over well-formed event lists: empty
input gives empty or zero results, never an exception.

Key behaviors:
- Source breakdown with whole-number percentages
- Top-N ranking, ties kept in input order
- Period-over-period trend that never divides by zero
- Overview counts, contact-method summary and recent activity feed
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any, TypeVar
from uuid import UUID

from vendor_insights.core.services.analytics_attrib import DIRECT, resolve_attribution_key
from vendor_insights.domain.entities import CONTACT_METHODS, EVENT_KINDS, Event

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)

CONTACT_METHOD_LABELS: dict[str, str] = {
    "phone": "Phone Calls",
    "whatsapp": "WhatsApp",
    "email": "Email",
    "location": "Location/Maps",
    "social": "Social Media",
}


# --- Result Models ---


@dataclass(frozen=True)
class SourceShare:
    """One attribution key's share of events."""

    key: str
    count: int
    percentage: int


@dataclass(frozen=True)
class RankedEntry:
    """A ranked label with its metric value (rank is 1-based)."""

    label: str
    count: int
    rank: int


@dataclass(frozen=True)
class Trend:
    """Change between two period counts."""

    delta: int
    percent_change: int


@dataclass(frozen=True)
class KindOverview:
    """All-time and recent totals for one event kind."""

    kind: str
    total: int
    recent: int


@dataclass(frozen=True)
class ContactMethodCount:
    """Contact attempts for one method over three horizons."""

    method: str
    label: str
    total: int
    week: int
    month: int


@dataclass(frozen=True)
class ActivityItem:
    """Single entry in the recent activity feed."""

    event_id: UUID
    kind: str
    occurred_at: datetime
    title: str
    description: str


# --- Arithmetic ---


def round_half_up(numerator: int, denominator: int) -> int:
    """
    Round numerator / denominator to the nearest int, halves going up.

    Integer arithmetic, so 62.5 -> 63 and -2.5 -> -2 exactly.
    """
    return (2 * numerator + denominator) // (2 * denominator)


def percentage(count: int, total: int) -> int:
    """Whole-number percentage; 0 when total is 0."""
    if total <= 0:
        return 0
    return round_half_up(100 * count, total)


# --- Grouping ---


def count_by(items: Iterable[T], key_fn: Callable[[T], K | None]) -> dict[K, int]:
    """
    Count items per key, keys in first-seen order.

    Items whose key is None are skipped.
    """
    counts: dict[K, int] = {}
    for item in items:
        key = key_fn(item)
        if key is None:
            continue
        counts[key] = counts.get(key, 0) + 1
    return counts


# --- Source Breakdown ---


def source_breakdown(events: Iterable[Event]) -> list[SourceShare]:
    """
    Group events by attribution key.

    Sorted by count descending; equal counts keep first-seen order.
    """
    counts = count_by(events, lambda e: resolve_attribution_key(e.attribution))
    total = sum(counts.values())
    if total == 0:
        return []

    ordered = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    return [
        SourceShare(key=key, count=count, percentage=percentage(count, total))
        for key, count in ordered
    ]


# --- Top-N ---


def rank_top(entries: Iterable[tuple[str, int]], n: int) -> list[RankedEntry]:
    """
    Top n entries by metric value, descending.

    sorted() is stable, so ties keep their input order. n <= 0 gives [].
    """
    if n <= 0:
        return []

    ordered = sorted(entries, key=lambda entry: entry[1], reverse=True)
    return [
        RankedEntry(label=label, count=count, rank=index)
        for index, (label, count) in enumerate(ordered[:n], start=1)
    ]


def product_view_entries(events: Iterable[Event]) -> list[tuple[str, int]]:
    """
    Page views per product, first-seen order.

    Grouped by subject["product_id"]; labelled with the first product_name
    seen for that id, falling back to the id itself.
    """
    labels: dict[str, str] = {}
    counts: dict[str, int] = {}
    for event in events:
        if event.kind != "page_view":
            continue
        product_id = event.subject.get("product_id")
        if product_id is None:
            continue
        product_key = str(product_id)
        if product_key not in labels:
            name = event.subject.get("product_name")
            labels[product_key] = str(name) if name else product_key
        counts[product_key] = counts.get(product_key, 0) + 1

    return [(labels[key], count) for key, count in counts.items()]


def contact_method_entries(events: Iterable[Event]) -> list[tuple[str, int]]:
    """Contact events per method, first-seen order."""
    contacts = (e for e in events if e.kind == "contact")
    counts = count_by(contacts, lambda e: _subject_str(e.subject, "method"))
    return list(counts.items())


def source_entries(events: Iterable[Event]) -> list[tuple[str, int]]:
    """Events per attribution key, first-seen order."""
    counts = count_by(events, lambda e: resolve_attribution_key(e.attribution))
    return list(counts.items())


# --- Trend ---


def trend_delta(current: int, previous: int) -> Trend:
    """
    Compare two period counts.

    previous == 0 reports 100 when anything happened, otherwise 0.
    """
    delta = current - previous
    if previous == 0:
        return Trend(delta=delta, percent_change=100 if current > 0 else 0)
    return Trend(delta=delta, percent_change=round_half_up(100 * delta, previous))


# --- Overview ---


def overview_counts(events: Sequence[Event], since: datetime) -> list[KindOverview]:
    """All-time and since-cutoff totals per event kind, in kind order."""
    result: list[KindOverview] = []
    for kind in EVENT_KINDS:
        of_kind = [e for e in events if e.kind == kind]
        recent = sum(1 for e in of_kind if e.occurred_at >= since)
        result.append(KindOverview(kind=kind, total=len(of_kind), recent=recent))
    return result


def contact_method_summary(
    events: Sequence[Event],
    week_start: datetime,
    month_start: datetime,
) -> list[ContactMethodCount]:
    """
    Contact attempts per method: all time, since week_start, since month_start.

    Every known method is listed, zero or not; unknown methods follow in
    first-seen order.
    """
    contacts = [e for e in events if e.kind == "contact"]

    def method_of(event: Event) -> str | None:
        return _subject_str(event.subject, "method")

    totals = count_by(contacts, method_of)
    week = count_by((e for e in contacts if e.occurred_at >= week_start), method_of)
    month = count_by((e for e in contacts if e.occurred_at >= month_start), method_of)

    methods = list(CONTACT_METHODS) + [m for m in totals if m not in CONTACT_METHODS]
    return [
        ContactMethodCount(
            method=method,
            label=CONTACT_METHOD_LABELS.get(method, method.title()),
            total=totals.get(method, 0),
            week=week.get(method, 0),
            month=month.get(method, 0),
        )
        for method in methods
    ]


# --- Recent Activity ---


def describe_event(event: Event) -> tuple[str, str]:
    """Human-readable (title, description) for an activity feed entry."""
    if event.kind == "scan":
        key = resolve_attribution_key(event.attribution)
        if key == DIRECT:
            return "QR Code Scanned", "Direct scan"
        return "QR Code Scanned", f"From {key.replace('_', ' ')}"

    if event.kind == "contact":
        method = _subject_str(event.subject, "method") or "unknown"
        return "Contact Interaction", f"{method[:1].upper()}{method[1:]} contact attempted"

    if event.kind == "page_view":
        path = _subject_str(event.subject, "page_path")
        return "Page Viewed", path or "Vendor page"

    return "Unknown Activity", ""


def recent_activity(events: Iterable[Event], limit: int) -> list[ActivityItem]:
    """Events of every kind, newest first, truncated to limit."""
    if limit <= 0:
        return []

    newest = sorted(events, key=lambda e: e.occurred_at, reverse=True)[:limit]
    items: list[ActivityItem] = []
    for event in newest:
        title, description = describe_event(event)
        items.append(
            ActivityItem(
                event_id=event.id,
                kind=event.kind,
                occurred_at=event.occurred_at,
                title=title,
                description=description,
            )
        )
    return items


def _subject_str(subject: dict[str, Any], key: str) -> str | None:
    value = subject.get(key)
    if value is None or value == "":
        return None
    return str(value)
