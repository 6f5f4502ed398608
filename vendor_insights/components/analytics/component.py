"""
Analytics component - dashboard aggregation and event ingestion.

Every entry point takes its ports as keyword arguments and reads events
through EventStorePort only; nothing is cached between calls.

Invariants:
- Daily series are gap-filled: one bucket per day, ascending
- Breakdown counts sum to the number of events considered
- Days are taken in the configured reference zone
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from vendor_insights.core.services.analytics_aggregate import (
    contact_method_entries,
    contact_method_summary,
    overview_counts,
    product_view_entries,
    rank_top,
    recent_activity,
    source_breakdown,
    source_entries,
    trend_delta,
)
from vendor_insights.core.services.analytics_buckets import (
    bucketize,
    count_in_window,
    day_bounds_utc,
    trailing_window,
    validate_window,
)
from vendor_insights.domain.entities import EVENT_KINDS, Event
from vendor_insights.rules.models import Rules

from ._impl import AnalyticsIngestionService, IngestionConfig
from .models import (
    TOP_METRICS,
    ContactSummaryInput,
    ContactSummaryOutput,
    DailySeriesInput,
    DailySeriesOutput,
    DateWindow,
    IngestEventInput,
    IngestOutput,
    OverviewInput,
    OverviewOutput,
    RecentActivityInput,
    RecentActivityOutput,
    SourceBreakdownInput,
    SourceBreakdownOutput,
    TopEntriesInput,
    TopEntriesOutput,
    TrendInput,
    TrendOutput,
)
from .ports import EventStorePort, TimePort

# --- Configuration ---


@dataclass(frozen=True)
class AnalyticsConfig:
    """Aggregation settings."""

    timezone: str = "UTC"
    default_days: int = 7
    max_days: int = 365
    top_n: int = 5
    recent_activity_limit: int = 10
    week_days: int = 7
    month_days: int = 30
    ingestion: IngestionConfig = field(default_factory=IngestionConfig)


DEFAULT_ANALYTICS_CONFIG = AnalyticsConfig()


def config_from_rules(rules: Rules) -> AnalyticsConfig:
    """Build component config from loaded rules."""
    analytics = rules.analytics
    ingestion = rules.ingestion
    return AnalyticsConfig(
        timezone=analytics.timezone,
        default_days=analytics.default_days,
        max_days=analytics.max_days,
        top_n=analytics.top_n,
        recent_activity_limit=analytics.recent_activity_limit,
        week_days=analytics.week_days,
        month_days=analytics.month_days,
        ingestion=IngestionConfig(
            enabled=ingestion.enabled,
            allowed_kinds=frozenset(ingestion.allowed_kinds),
            forbidden_fields=frozenset(ingestion.forbidden_fields),
            max_future_seconds=ingestion.max_future_seconds,
        ),
    )


# --- Helpers ---


def _require_kind(kind: str | None) -> None:
    if kind is not None and kind not in EVENT_KINDS:
        raise ValueError(f"Unknown event kind: {kind}")


def _check_span(window: DateWindow, config: AnalyticsConfig) -> None:
    validate_window(window.start, window.end)
    if window.days > config.max_days:
        raise ValueError(f"Window of {window.days} days exceeds max_days ({config.max_days})")


def _events_in(
    store: EventStorePort,
    tenant_id: str,
    kind: str | None,
    window: DateWindow | None,
    config: AnalyticsConfig,
) -> list[Event]:
    """Events of a kind, optionally narrowed to a local-day window."""
    if window is None:
        return store.query_events(tenant_id, kind=kind)

    _check_span(window, config)
    start, end = day_bounds_utc(window.start, window.end, config.timezone)
    return store.query_events(tenant_id, kind=kind, start=start, end=end)


def _since(now: datetime, days: int) -> datetime:
    return now - timedelta(days=days)


# --- Component Entry Points ---


def run_daily_series(
    inp: DailySeriesInput,
    *,
    store: EventStorePort,
    time_port: TimePort,
    config: AnalyticsConfig | None = None,
) -> DailySeriesOutput:
    """
    Gap-filled daily counts for the trailing window ending today.

    Args:
        inp: Tenant, event kind and number of days (config default if None).
        store: Event store port.
        time_port: Supplies "today" in the reference zone.
        config: Optional aggregation settings.

    Raises:
        ValueError: Unknown kind, or more days than max_days.
        InvalidWindowError: days < 1.
    """
    cfg = config or DEFAULT_ANALYTICS_CONFIG
    _require_kind(inp.kind)

    days = inp.days if inp.days is not None else cfg.default_days
    if days > cfg.max_days:
        raise ValueError(f"days must not exceed max_days ({cfg.max_days}), got {days}")
    start, end = trailing_window(time_port.today_local(), days)
    window = DateWindow(start=start, end=end)

    events = _events_in(store, inp.tenant_id, inp.kind, window, cfg)
    buckets = bucketize(events, window.start, window.end, cfg.timezone)

    return DailySeriesOutput(window=window, buckets=tuple(buckets))


def run_source_breakdown(
    inp: SourceBreakdownInput,
    *,
    store: EventStorePort,
    config: AnalyticsConfig | None = None,
) -> SourceBreakdownOutput:
    """
    Count events per attribution key, with integer percentages.

    All kinds when inp.kind is None; all time when inp.window is None.
    """
    cfg = config or DEFAULT_ANALYTICS_CONFIG
    _require_kind(inp.kind)

    events = _events_in(store, inp.tenant_id, inp.kind, inp.window, cfg)
    return SourceBreakdownOutput(items=tuple(source_breakdown(events)))


def run_top_entries(
    inp: TopEntriesInput,
    *,
    store: EventStorePort,
    config: AnalyticsConfig | None = None,
) -> TopEntriesOutput:
    """
    Top-N entries for a metric.

    Metrics:
        product_views: page views by product
        contact_methods: contact events by method
        sources: events of any kind by attribution key
    """
    cfg = config or DEFAULT_ANALYTICS_CONFIG
    if inp.metric not in TOP_METRICS:
        raise ValueError(f"Unknown metric: {inp.metric}")

    limit = inp.limit if inp.limit is not None else cfg.top_n

    if inp.metric == "product_views":
        events = _events_in(store, inp.tenant_id, "page_view", inp.window, cfg)
        entries = product_view_entries(events)
    elif inp.metric == "contact_methods":
        events = _events_in(store, inp.tenant_id, "contact", inp.window, cfg)
        entries = contact_method_entries(events)
    else:
        events = _events_in(store, inp.tenant_id, None, inp.window, cfg)
        entries = source_entries(events)

    return TopEntriesOutput(metric=inp.metric, items=tuple(rank_top(entries, limit)))


def run_trend(
    inp: TrendInput,
    *,
    store: EventStorePort,
    config: AnalyticsConfig | None = None,
) -> TrendOutput:
    """
    Compare event counts between two local-day windows.

    When no previous window is given, the same-length window ending the
    day before the current one is used.
    """
    cfg = config or DEFAULT_ANALYTICS_CONFIG
    _require_kind(inp.kind)
    _check_span(inp.current, cfg)

    previous = inp.previous
    if previous is None:
        previous = DateWindow(
            start=inp.current.start - timedelta(days=inp.current.days),
            end=inp.current.start - timedelta(days=1),
        )

    current_events = _events_in(store, inp.tenant_id, inp.kind, inp.current, cfg)
    previous_events = _events_in(store, inp.tenant_id, inp.kind, previous, cfg)

    current_count = count_in_window(current_events, inp.current.start, inp.current.end, cfg.timezone)
    previous_count = count_in_window(previous_events, previous.start, previous.end, cfg.timezone)

    return TrendOutput(
        current=inp.current,
        previous=previous,
        current_count=current_count,
        previous_count=previous_count,
        trend=trend_delta(current_count, previous_count),
    )


def run_overview(
    inp: OverviewInput,
    *,
    store: EventStorePort,
    time_port: TimePort,
    config: AnalyticsConfig | None = None,
) -> OverviewOutput:
    """All-time totals per kind plus the count over the last week_days."""
    cfg = config or DEFAULT_ANALYTICS_CONFIG
    events = store.query_events(inp.tenant_id)
    since = _since(time_port.now_utc(), cfg.week_days)
    return OverviewOutput(kinds=tuple(overview_counts(events, since)))


def run_contact_summary(
    inp: ContactSummaryInput,
    *,
    store: EventStorePort,
    time_port: TimePort,
    config: AnalyticsConfig | None = None,
) -> ContactSummaryOutput:
    """Contact attempts per method: all time, last week, last month."""
    cfg = config or DEFAULT_ANALYTICS_CONFIG
    events = store.query_events(inp.tenant_id, kind="contact")
    now = time_port.now_utc()
    methods = contact_method_summary(
        events,
        week_start=_since(now, cfg.week_days),
        month_start=_since(now, cfg.month_days),
    )
    return ContactSummaryOutput(methods=tuple(methods))


def run_recent_activity(
    inp: RecentActivityInput,
    *,
    store: EventStorePort,
    config: AnalyticsConfig | None = None,
) -> RecentActivityOutput:
    """Newest events across all kinds, described for display."""
    cfg = config or DEFAULT_ANALYTICS_CONFIG
    limit = inp.limit if inp.limit is not None else cfg.recent_activity_limit
    events = store.query_events(inp.tenant_id)
    return RecentActivityOutput(items=tuple(recent_activity(events, limit)))


def run_ingest(
    inp: IngestEventInput,
    *,
    store: EventStorePort,
    time_port: TimePort | None = None,
    config: AnalyticsConfig | None = None,
) -> IngestOutput:
    """
    Validate one raw payload and append it to the store.

    Rejected payloads come back with errors and are not stored.
    """
    cfg = config or DEFAULT_ANALYTICS_CONFIG
    service = AnalyticsIngestionService(
        event_store=store,
        time_port=time_port,
        config=cfg.ingestion,
    )

    event, errors = service.ingest(inp.data)

    return IngestOutput(
        event=event,
        accepted=event is not None,
        errors=errors,
    )


AnalyticsInput = (
    DailySeriesInput
    | SourceBreakdownInput
    | TopEntriesInput
    | TrendInput
    | OverviewInput
    | ContactSummaryInput
    | RecentActivityInput
    | IngestEventInput
)

AnalyticsOutput = (
    DailySeriesOutput
    | SourceBreakdownOutput
    | TopEntriesOutput
    | TrendOutput
    | OverviewOutput
    | ContactSummaryOutput
    | RecentActivityOutput
    | IngestOutput
)


def run(
    inp: AnalyticsInput,
    *,
    store: EventStorePort,
    time_port: TimePort | None = None,
    config: AnalyticsConfig | None = None,
) -> AnalyticsOutput:
    """
    Main entry point for the analytics component.

    Dispatches to appropriate handler based on input type.
    """
    if isinstance(inp, IngestEventInput):
        return run_ingest(inp, store=store, time_port=time_port, config=config)
    elif isinstance(inp, SourceBreakdownInput):
        return run_source_breakdown(inp, store=store, config=config)
    elif isinstance(inp, TopEntriesInput):
        return run_top_entries(inp, store=store, config=config)
    elif isinstance(inp, TrendInput):
        return run_trend(inp, store=store, config=config)
    elif isinstance(inp, RecentActivityInput):
        return run_recent_activity(inp, store=store, config=config)

    if time_port is None:
        raise ValueError("TimePort is required for this operation")

    if isinstance(inp, DailySeriesInput):
        return run_daily_series(inp, store=store, time_port=time_port, config=config)
    elif isinstance(inp, OverviewInput):
        return run_overview(inp, store=store, time_port=time_port, config=config)
    elif isinstance(inp, ContactSummaryInput):
        return run_contact_summary(inp, store=store, time_port=time_port, config=config)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
