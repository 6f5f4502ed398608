"""
Tests for the analytics dashboard API.
"""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from fastapi.testclient import TestClient

from tests.conftest import TENANT, make_event
from vendor_insights.api.deps import get_event_store
from vendor_insights.api.main import app as main_app
from vendor_insights.components.analytics import InMemoryEventStore
from vendor_insights.core.errors import StoreUnavailableError

BASE = f"/api/tenants/{TENANT}/analytics"


def day(d: int) -> datetime:
    return datetime(2024, 1, d, 12, tzinfo=UTC)


@pytest.fixture(autouse=True)
def seed(event_store: InMemoryEventStore) -> None:
    for event in (
        make_event("scan", day(8), source="flyer"),
        make_event("scan", day(9), source="flyer"),
        make_event("scan", day(10)),
        make_event("page_view", day(10), product_id="p1", product_name="Tacos"),
        make_event("contact", day(10), method="whatsapp"),
    ):
        event_store.insert_event(event)


class TestSeriesEndpoint:
    """GET /series."""

    def test_default_window(self, client: TestClient) -> None:
        """Seven buckets ending on the frozen today."""
        response = client.get(f"{BASE}/series", params={"kind": "scan"})

        assert response.status_code == 200
        data = response.json()
        assert data["start"] == "2024-01-04"
        assert data["end"] == "2024-01-10"
        assert [b["count"] for b in data["buckets"]] == [0, 0, 0, 0, 1, 1, 1]
        assert data["total"] == 3

    def test_unknown_kind(self, client: TestClient) -> None:
        """Unknown kinds are a 400."""
        assert client.get(f"{BASE}/series", params={"kind": "click"}).status_code == 400

    def test_zero_days(self, client: TestClient) -> None:
        """days=0 is an invalid window (400)."""
        assert client.get(f"{BASE}/series", params={"days": 0}).status_code == 400


class TestSourcesEndpoint:
    """GET /sources."""

    def test_breakdown(self, client: TestClient) -> None:
        """Scans by source with percentages."""
        data = client.get(f"{BASE}/sources", params={"kind": "scan"}).json()
        assert data["total"] == 3
        assert data["items"] == [
            {"key": "flyer", "count": 2, "percentage": 67},
            {"key": "Direct", "count": 1, "percentage": 33},
        ]

    def test_half_window(self, client: TestClient) -> None:
        """start without end is a 400."""
        assert client.get(f"{BASE}/sources", params={"start": "2024-01-01"}).status_code == 400

    def test_reversed_window(self, client: TestClient) -> None:
        """Reversed windows are a 400."""
        response = client.get(f"{BASE}/sources", params={"start": "2024-01-09", "end": "2024-01-01"})
        assert response.status_code == 400
        assert "Invalid window" in response.json()["detail"]


class TestTopEndpoint:
    """GET /top."""

    def test_products(self, client: TestClient) -> None:
        """Product views ranked by name."""
        data = client.get(f"{BASE}/top", params={"metric": "product_views"}).json()
        assert data["items"] == [{"rank": 1, "label": "Tacos", "count": 1}]

    def test_unknown_metric(self, client: TestClient) -> None:
        """Unknown metrics are a 400."""
        assert client.get(f"{BASE}/top", params={"metric": "likes"}).status_code == 400


class TestTrendEndpoint:
    """GET /trend."""

    def test_trend(self, client: TestClient) -> None:
        """Two days against the two before."""
        data = client.get(
            f"{BASE}/trend",
            params={"metric": "scan", "current_start": "2024-01-09", "current_end": "2024-01-10"},
        ).json()
        assert data["previous"] == {"start": "2024-01-07", "end": "2024-01-08"}
        assert (data["current_count"], data["previous_count"]) == (2, 1)
        assert (data["delta"], data["percent_change"]) == (1, 100)


class TestOverviewEndpoints:
    """GET /overview and /activity."""

    def test_overview(self, client: TestClient) -> None:
        """Kinds and contact methods."""
        data = client.get(f"{BASE}/overview").json()
        assert {k["kind"]: k["total"] for k in data["kinds"]} == {"scan": 3, "page_view": 1, "contact": 1}
        whatsapp = next(m for m in data["contacts"] if m["method"] == "whatsapp")
        assert whatsapp["week"] == 1

    def test_activity(self, client: TestClient) -> None:
        """Newest first, limited."""
        data = client.get(f"{BASE}/activity", params={"limit": 2}).json()
        assert len(data["items"]) == 2
        assert all(item["occurred_at"].startswith("2024-01-10") for item in data["items"])


class TestStoreFailure:
    """Store outages."""

    def test_503(self, client: TestClient) -> None:
        """StoreUnavailableError maps to 503."""

        class BrokenStore(InMemoryEventStore):
            def query_events(self, *args: object, **kwargs: object) -> list:  # type: ignore[override]
                raise StoreUnavailableError("query_events")

        main_app.dependency_overrides[get_event_store] = lambda: BrokenStore()
        response = client.get(f"{BASE}/series")
        assert response.status_code == 503
