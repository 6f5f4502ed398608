"""
Analytics component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Literal

from vendor_insights.core.services.analytics_aggregate import (
    ActivityItem,
    ContactMethodCount,
    KindOverview,
    RankedEntry,
    SourceShare,
    Trend,
)
from vendor_insights.core.services.analytics_buckets import DayBucket
from vendor_insights.domain.entities import Event

TopMetric = Literal["product_views", "contact_methods", "sources"]

TOP_METRICS: tuple[str, ...] = ("product_views", "contact_methods", "sources")


# --- Shared ---


@dataclass(frozen=True)
class DateWindow:
    """Inclusive range of calendar days in the reference zone."""

    start: date
    end: date

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1


@dataclass(frozen=True)
class IngestionError:
    """Reason an incoming row was quarantined."""

    code: str
    message: str
    field_name: str | None = None


# --- Input Models ---


@dataclass(frozen=True)
class DailySeriesInput:
    """Input for a gap-filled daily series ending today."""

    tenant_id: str
    kind: str
    days: int | None = None


@dataclass(frozen=True)
class SourceBreakdownInput:
    """Input for the attribution source breakdown."""

    tenant_id: str
    kind: str | None = None
    window: DateWindow | None = None


@dataclass(frozen=True)
class TopEntriesInput:
    """Input for a top-N ranking."""

    tenant_id: str
    metric: TopMetric
    limit: int | None = None
    window: DateWindow | None = None


@dataclass(frozen=True)
class TrendInput:
    """Input for a period-over-period trend."""

    tenant_id: str
    kind: str
    current: DateWindow
    # Defaults to the same-length window immediately before current
    previous: DateWindow | None = None


@dataclass(frozen=True)
class OverviewInput:
    """Input for overview totals."""

    tenant_id: str


@dataclass(frozen=True)
class ContactSummaryInput:
    """Input for the contact-method summary."""

    tenant_id: str


@dataclass(frozen=True)
class RecentActivityInput:
    """Input for the recent activity feed."""

    tenant_id: str
    limit: int | None = None


@dataclass(frozen=True)
class IngestEventInput:
    """Input for ingesting one raw event payload."""

    data: dict[str, Any]


# --- Output Models ---


@dataclass(frozen=True)
class DailySeriesOutput:
    """Daily buckets, ascending, one per day in the window."""

    window: DateWindow
    buckets: tuple[DayBucket, ...]

    @property
    def total(self) -> int:
        return sum(b.count for b in self.buckets)


@dataclass(frozen=True)
class SourceBreakdownOutput:
    """Per-source counts and percentages."""

    items: tuple[SourceShare, ...]

    @property
    def total(self) -> int:
        return sum(i.count for i in self.items)


@dataclass(frozen=True)
class TopEntriesOutput:
    """Ranked entries for one metric."""

    metric: str
    items: tuple[RankedEntry, ...]


@dataclass(frozen=True)
class TrendOutput:
    """Counts for both windows and the derived trend."""

    current: DateWindow
    previous: DateWindow
    current_count: int
    previous_count: int
    trend: Trend


@dataclass(frozen=True)
class OverviewOutput:
    """Per-kind totals."""

    kinds: tuple[KindOverview, ...]


@dataclass(frozen=True)
class ContactSummaryOutput:
    """Per-method contact counts."""

    methods: tuple[ContactMethodCount, ...]


@dataclass(frozen=True)
class RecentActivityOutput:
    """Newest-first activity feed."""

    items: tuple[ActivityItem, ...]


@dataclass(frozen=True)
class IngestOutput:
    """Output for ingestion result."""

    event: Event | None
    accepted: bool
    errors: list[IngestionError] = field(default_factory=list)
