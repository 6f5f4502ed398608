"""
Vendor Analytics Dashboard API.

Read-only endpoints over the event store: daily series, source breakdown,
top-N rankings, trends, overview totals and the recent activity feed.
"""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from vendor_insights.api.deps import (
    get_analytics_config,
    get_event_store,
    get_time_port,
)
from vendor_insights.components.analytics import (
    AnalyticsConfig,
    ContactSummaryInput,
    DailySeriesInput,
    DateWindow,
    OverviewInput,
    RecentActivityInput,
    SourceBreakdownInput,
    TopEntriesInput,
    TrendInput,
    run_contact_summary,
    run_daily_series,
    run_overview,
    run_recent_activity,
    run_source_breakdown,
    run_top_entries,
    run_trend,
)
from vendor_insights.core.ports.events import EventStorePort
from vendor_insights.core.ports.time import TimePort

router = APIRouter()


# --- Response Models ---


class DayBucketItem(BaseModel):
    """Count for one local day."""

    date: date
    count: int


class SeriesResponse(BaseModel):
    """Gap-filled daily series."""

    kind: str
    start: date
    end: date
    total: int
    buckets: list[DayBucketItem]


class SourceItem(BaseModel):
    """Share of events for one attribution key."""

    key: str
    count: int
    percentage: int


class SourcesResponse(BaseModel):
    """Source breakdown."""

    total: int
    items: list[SourceItem]


class RankedItem(BaseModel):
    """One ranked entry."""

    rank: int
    label: str
    count: int


class TopResponse(BaseModel):
    """Top-N ranking."""

    metric: str
    items: list[RankedItem]


class WindowModel(BaseModel):
    start: date
    end: date


class TrendResponse(BaseModel):
    """Period-over-period comparison."""

    kind: str
    current: WindowModel
    previous: WindowModel
    current_count: int
    previous_count: int
    delta: int
    percent_change: int


class KindTotal(BaseModel):
    kind: str
    total: int
    recent: int


class ContactMethodItem(BaseModel):
    method: str
    label: str
    total: int
    week: int
    month: int


class OverviewResponse(BaseModel):
    """Dashboard overview totals."""

    kinds: list[KindTotal]
    contacts: list[ContactMethodItem]


class ActivityEntry(BaseModel):
    """One item of the recent activity feed."""

    id: str
    kind: str
    occurred_at: str
    title: str
    description: str


class ActivityResponse(BaseModel):
    items: list[ActivityEntry]


# --- Helper Functions ---


def parse_window(start: date | None, end: date | None) -> DateWindow | None:
    """Both bounds or neither."""
    if start is None and end is None:
        return None
    if start is None or end is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Both start and end are required for a window",
        )
    return DateWindow(start=start, end=end)


def bad_request(e: ValueError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


# --- Routes ---


@router.get("/series", response_model=SeriesResponse)
def get_series(
    tenant_id: str,
    kind: str = Query("scan", description="Event kind: scan, page_view, contact"),
    days: int | None = Query(None, description="Trailing days ending today"),
    store: EventStorePort = Depends(get_event_store),
    time_port: TimePort = Depends(get_time_port),
    config: AnalyticsConfig = Depends(get_analytics_config),
) -> SeriesResponse:
    """Daily counts with one bucket per day, zeros included."""
    try:
        result = run_daily_series(
            DailySeriesInput(tenant_id=tenant_id, kind=kind, days=days),
            store=store,
            time_port=time_port,
            config=config,
        )
    except ValueError as e:
        raise bad_request(e) from e

    return SeriesResponse(
        kind=kind,
        start=result.window.start,
        end=result.window.end,
        total=result.total,
        buckets=[DayBucketItem(date=b.date, count=b.count) for b in result.buckets],
    )


@router.get("/sources", response_model=SourcesResponse)
def get_sources(
    tenant_id: str,
    kind: str | None = Query(None, description="Event kind; all kinds if omitted"),
    start: date | None = Query(None, description="First day (inclusive)"),
    end: date | None = Query(None, description="Last day (inclusive)"),
    store: EventStorePort = Depends(get_event_store),
    config: AnalyticsConfig = Depends(get_analytics_config),
) -> SourcesResponse:
    """Events per attribution source, with integer percentages."""
    window = parse_window(start, end)
    try:
        result = run_source_breakdown(
            SourceBreakdownInput(tenant_id=tenant_id, kind=kind, window=window),
            store=store,
            config=config,
        )
    except ValueError as e:
        raise bad_request(e) from e

    return SourcesResponse(
        total=result.total,
        items=[SourceItem(key=s.key, count=s.count, percentage=s.percentage) for s in result.items],
    )


@router.get("/top", response_model=TopResponse)
def get_top(
    tenant_id: str,
    metric: str = Query(..., description="product_views, contact_methods or sources"),
    limit: int | None = Query(None, description="Maximum entries"),
    start: date | None = Query(None),
    end: date | None = Query(None),
    store: EventStorePort = Depends(get_event_store),
    config: AnalyticsConfig = Depends(get_analytics_config),
) -> TopResponse:
    """Top-N ranking for a metric."""
    window = parse_window(start, end)
    try:
        result = run_top_entries(
            TopEntriesInput(tenant_id=tenant_id, metric=metric, limit=limit, window=window),  # type: ignore[arg-type]
            store=store,
            config=config,
        )
    except ValueError as e:
        raise bad_request(e) from e

    return TopResponse(
        metric=result.metric,
        items=[RankedItem(rank=i.rank, label=i.label, count=i.count) for i in result.items],
    )


@router.get("/trend", response_model=TrendResponse)
def get_trend(
    tenant_id: str,
    metric: str = Query(..., description="Event kind to compare"),
    current_start: date = Query(...),
    current_end: date = Query(...),
    previous_start: date | None = Query(None),
    previous_end: date | None = Query(None),
    store: EventStorePort = Depends(get_event_store),
    config: AnalyticsConfig = Depends(get_analytics_config),
) -> TrendResponse:
    """
    Compare two windows.

    The previous window defaults to the same length just before current.
    """
    previous = parse_window(previous_start, previous_end)
    try:
        result = run_trend(
            TrendInput(
                tenant_id=tenant_id,
                kind=metric,
                current=DateWindow(start=current_start, end=current_end),
                previous=previous,
            ),
            store=store,
            config=config,
        )
    except ValueError as e:
        raise bad_request(e) from e

    return TrendResponse(
        kind=metric,
        current=WindowModel(start=result.current.start, end=result.current.end),
        previous=WindowModel(start=result.previous.start, end=result.previous.end),
        current_count=result.current_count,
        previous_count=result.previous_count,
        delta=result.trend.delta,
        percent_change=result.trend.percent_change,
    )


@router.get("/overview", response_model=OverviewResponse)
def get_overview(
    tenant_id: str,
    store: EventStorePort = Depends(get_event_store),
    time_port: TimePort = Depends(get_time_port),
    config: AnalyticsConfig = Depends(get_analytics_config),
) -> OverviewResponse:
    """Totals per kind and per contact method."""
    overview = run_overview(OverviewInput(tenant_id=tenant_id), store=store, time_port=time_port, config=config)
    contacts = run_contact_summary(
        ContactSummaryInput(tenant_id=tenant_id),
        store=store,
        time_port=time_port,
        config=config,
    )

    return OverviewResponse(
        kinds=[KindTotal(kind=k.kind, total=k.total, recent=k.recent) for k in overview.kinds],
        contacts=[
            ContactMethodItem(method=m.method, label=m.label, total=m.total, week=m.week, month=m.month)
            for m in contacts.methods
        ],
    )


@router.get("/activity", response_model=ActivityResponse)
def get_activity(
    tenant_id: str,
    limit: int | None = Query(None, ge=0, le=100),
    store: EventStorePort = Depends(get_event_store),
    config: AnalyticsConfig = Depends(get_analytics_config),
) -> ActivityResponse:
    """Recent activity feed, newest first."""
    result = run_recent_activity(
        RecentActivityInput(tenant_id=tenant_id, limit=limit),
        store=store,
        config=config,
    )

    return ActivityResponse(
        items=[
            ActivityEntry(
                id=str(item.event_id),
                kind=item.kind,
                occurred_at=item.occurred_at.isoformat(),
                title=item.title,
                description=item.description,
            )
            for item in result.items
        ]
    )
