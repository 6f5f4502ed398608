"""
Tests for the analytics component entry points.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta

import pytest

from tests.conftest import FROZEN_NOW, TENANT, make_event
from vendor_insights.adapters.time_zone import FrozenTimeAdapter
from vendor_insights.components.analytics import (
    AnalyticsConfig,
    ContactSummaryInput,
    DailySeriesInput,
    DateWindow,
    IngestEventInput,
    InMemoryEventStore,
    OverviewInput,
    RecentActivityInput,
    SourceBreakdownInput,
    TopEntriesInput,
    TrendInput,
    run,
    run_contact_summary,
    run_daily_series,
    run_ingest,
    run_overview,
    run_recent_activity,
    run_source_breakdown,
    run_top_entries,
    run_trend,
)
from vendor_insights.core.errors import InvalidWindowError


def day(d: int, hour: int = 12) -> datetime:
    return datetime(2024, 1, d, hour, tzinfo=UTC)


@pytest.fixture
def store() -> InMemoryEventStore:
    """Store with a few days of scans for TENANT and one foreign event."""
    return InMemoryEventStore(
        [
            make_event("scan", day(4), source="flyer"),
            make_event("scan", day(6)),
            make_event("scan", day(6), source="flyer"),
            make_event("scan", day(10), source="instagram"),
            make_event("page_view", day(9), product_id="p1", product_name="Tacos"),
            make_event("contact", day(9), method="phone"),
            make_event("scan", day(8), tenant_id="someone-else"),
        ]
    )


# --- Daily Series ---


class TestRunDailySeries:
    """run_daily_series."""

    def test_default_seven_days(self, store: InMemoryEventStore, frozen_time: FrozenTimeAdapter) -> None:
        """Seven gap-filled buckets ending today."""
        result = run_daily_series(DailySeriesInput(tenant_id=TENANT, kind="scan"), store=store, time_port=frozen_time)

        assert result.window == DateWindow(date(2024, 1, 4), date(2024, 1, 10))
        assert [b.count for b in result.buckets] == [1, 0, 2, 0, 0, 0, 1]
        assert result.total == 4

    def test_tenant_isolation(self, store: InMemoryEventStore, frozen_time: FrozenTimeAdapter) -> None:
        """Other tenants' events are not counted."""
        result = run_daily_series(DailySeriesInput(tenant_id="someone-else", kind="scan"), store=store, time_port=frozen_time)
        assert result.total == 1

    def test_custom_days(self, store: InMemoryEventStore, frozen_time: FrozenTimeAdapter) -> None:
        """days controls the window length."""
        result = run_daily_series(
            DailySeriesInput(tenant_id=TENANT, kind="scan", days=30),
            store=store,
            time_port=frozen_time,
        )
        assert len(result.buckets) == 30

    def test_unknown_kind(self, store: InMemoryEventStore, frozen_time: FrozenTimeAdapter) -> None:
        """Unknown kinds raise ValueError."""
        with pytest.raises(ValueError):
            run_daily_series(DailySeriesInput(tenant_id=TENANT, kind="click"), store=store, time_port=frozen_time)

    def test_zero_days(self, store: InMemoryEventStore, frozen_time: FrozenTimeAdapter) -> None:
        """days=0 is an invalid window."""
        with pytest.raises(InvalidWindowError):
            run_daily_series(DailySeriesInput(tenant_id=TENANT, kind="scan", days=0), store=store, time_port=frozen_time)

    def test_too_many_days(self, store: InMemoryEventStore, frozen_time: FrozenTimeAdapter) -> None:
        """days above max_days raise ValueError."""
        with pytest.raises(ValueError):
            run_daily_series(
                DailySeriesInput(tenant_id=TENANT, kind="scan", days=400),
                store=store,
                time_port=frozen_time,
            )

    def test_reference_zone(self, frozen_time: FrozenTimeAdapter) -> None:
        """A late UTC event lands on the next local day in the configured zone."""
        store = InMemoryEventStore([make_event("scan", day(9, hour=23))])
        config = AnalyticsConfig(timezone="Asia/Tokyo")
        tokyo_time = FrozenTimeAdapter(FROZEN_NOW, "Asia/Tokyo")

        result = run_daily_series(
            DailySeriesInput(tenant_id=TENANT, kind="scan", days=2),
            store=store,
            time_port=tokyo_time,
            config=config,
        )
        assert [(b.date, b.count) for b in result.buckets] == [(date(2024, 1, 9), 0), (date(2024, 1, 10), 1)]


# --- Source Breakdown ---


class TestRunSourceBreakdown:
    """run_source_breakdown."""

    def test_all_time(self, store: InMemoryEventStore) -> None:
        """Without a window every scan counts."""
        result = run_source_breakdown(SourceBreakdownInput(tenant_id=TENANT, kind="scan"), store=store)
        assert [(s.key, s.count, s.percentage) for s in result.items] == [
            ("flyer", 2, 50),
            ("Direct", 1, 25),
            ("instagram", 1, 25),
        ]
        assert result.total == 4

    def test_window(self, store: InMemoryEventStore) -> None:
        """A window narrows the events considered."""
        result = run_source_breakdown(
            SourceBreakdownInput(tenant_id=TENANT, kind="scan", window=DateWindow(date(2024, 1, 6), date(2024, 1, 6))),
            store=store,
        )
        assert [(s.key, s.count) for s in result.items] == [("Direct", 1), ("flyer", 1)]

    def test_all_kinds(self, store: InMemoryEventStore) -> None:
        """kind=None considers every kind."""
        result = run_source_breakdown(SourceBreakdownInput(tenant_id=TENANT), store=store)
        assert result.total == 6

    def test_reversed_window(self, store: InMemoryEventStore) -> None:
        """Reversed windows raise InvalidWindowError."""
        with pytest.raises(InvalidWindowError):
            run_source_breakdown(
                SourceBreakdownInput(tenant_id=TENANT, window=DateWindow(date(2024, 1, 6), date(2024, 1, 1))),
                store=store,
            )


# --- Top Entries ---


class TestRunTopEntries:
    """run_top_entries."""

    def test_sources(self, store: InMemoryEventStore) -> None:
        """Sources rank every kind by attribution key."""
        result = run_top_entries(TopEntriesInput(tenant_id=TENANT, metric="sources", limit=1), store=store)
        assert [(e.label, e.count, e.rank) for e in result.items] == [("Direct", 3, 1)]

    def test_product_views(self, store: InMemoryEventStore) -> None:
        """Products are labelled by name."""
        result = run_top_entries(TopEntriesInput(tenant_id=TENANT, metric="product_views"), store=store)
        assert [(e.label, e.count) for e in result.items] == [("Tacos", 1)]

    def test_contact_methods(self, store: InMemoryEventStore) -> None:
        """Contact methods rank by count."""
        result = run_top_entries(TopEntriesInput(tenant_id=TENANT, metric="contact_methods"), store=store)
        assert [(e.label, e.count) for e in result.items] == [("phone", 1)]

    def test_default_limit(self) -> None:
        """The configured top_n applies when no limit is given."""
        store = InMemoryEventStore([make_event(source=f"s{i}") for i in range(8)])
        result = run_top_entries(TopEntriesInput(tenant_id=TENANT, metric="sources"), store=store)
        assert len(result.items) == 5

    def test_unknown_metric(self, store: InMemoryEventStore) -> None:
        """Unknown metrics raise ValueError."""
        with pytest.raises(ValueError):
            run_top_entries(TopEntriesInput(tenant_id=TENANT, metric="likes"), store=store)  # type: ignore[arg-type]


# --- Trend ---


class TestRunTrend:
    """run_trend."""

    def test_default_previous_window(self, store: InMemoryEventStore) -> None:
        """Previous defaults to the same length just before current."""
        result = run_trend(
            TrendInput(tenant_id=TENANT, kind="scan", current=DateWindow(date(2024, 1, 6), date(2024, 1, 10))),
            store=store,
        )
        assert result.previous == DateWindow(date(2024, 1, 1), date(2024, 1, 5))
        assert (result.current_count, result.previous_count) == (3, 1)
        assert result.trend.delta == 2
        assert result.trend.percent_change == 200

    def test_explicit_previous(self, store: InMemoryEventStore) -> None:
        """An explicit previous window is used as given."""
        result = run_trend(
            TrendInput(
                tenant_id=TENANT,
                kind="scan",
                current=DateWindow(date(2024, 1, 10), date(2024, 1, 10)),
                previous=DateWindow(date(2023, 12, 1), date(2023, 12, 31)),
            ),
            store=store,
        )
        assert result.previous_count == 0
        assert result.trend.percent_change == 100


# --- Supplementary Views ---


class TestOverviewAndActivity:
    """Overview, contact summary and activity feed."""

    def test_overview(self, store: InMemoryEventStore, frozen_time: FrozenTimeAdapter) -> None:
        """Totals per kind."""
        result = run_overview(OverviewInput(tenant_id=TENANT), store=store, time_port=frozen_time)
        assert {k.kind: k.total for k in result.kinds} == {"scan": 4, "page_view": 1, "contact": 1}

    def test_contact_summary(self, store: InMemoryEventStore, frozen_time: FrozenTimeAdapter) -> None:
        """Phone has one contact this week."""
        result = run_contact_summary(ContactSummaryInput(tenant_id=TENANT), store=store, time_port=frozen_time)
        phone = result.methods[0]
        assert (phone.method, phone.total, phone.week, phone.month) == ("phone", 1, 1, 1)

    def test_recent_activity(self, store: InMemoryEventStore) -> None:
        """Newest first, limited."""
        result = run_recent_activity(RecentActivityInput(tenant_id=TENANT, limit=2), store=store)
        assert [i.kind for i in result.items][0] == "scan"
        assert result.items[0].description == "From instagram"
        assert len(result.items) == 2


# --- Ingest and Dispatch ---


class TestRunIngest:
    """run_ingest and run."""

    def test_accepted(self, frozen_time: FrozenTimeAdapter) -> None:
        """Valid payloads are stored and reported as accepted."""
        store = InMemoryEventStore()
        result = run_ingest(
            IngestEventInput(data={"tenant_id": TENANT, "kind": "contact", "subject": {"method": "email"}}),
            store=store,
            time_port=frozen_time,
        )
        assert result.accepted
        assert store.query_events(TENANT) == [result.event]

    def test_rejected(self, frozen_time: FrozenTimeAdapter) -> None:
        """Rejected payloads carry errors."""
        result = run_ingest(
            IngestEventInput(data={"tenant_id": TENANT, "kind": "scan", "user_agent": "x"}),
            store=InMemoryEventStore(),
            time_port=frozen_time,
        )
        assert not result.accepted
        assert result.errors[0].code == "forbidden_field"

    def test_dispatch(self, store: InMemoryEventStore, frozen_time: FrozenTimeAdapter) -> None:
        """run routes by input type."""
        series = run(DailySeriesInput(tenant_id=TENANT, kind="scan"), store=store, time_port=frozen_time)
        breakdown = run(SourceBreakdownInput(tenant_id=TENANT), store=store)
        assert series.total == 4  # type: ignore[union-attr]
        assert breakdown.total == 6  # type: ignore[union-attr]

    def test_dispatch_needs_time(self, store: InMemoryEventStore) -> None:
        """Clock-dependent inputs need a TimePort."""
        with pytest.raises(ValueError):
            run(OverviewInput(tenant_id=TENANT), store=store)

    def test_window_helper(self) -> None:
        """DateWindow.days is inclusive."""
        assert DateWindow(date(2024, 1, 1), date(2024, 1, 1) + timedelta(days=6)).days == 7
