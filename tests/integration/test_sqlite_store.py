"""
Integration tests for the SQLite event store and vendor config repo.
"""

from __future__ import annotations

import sqlite3
from datetime import UTC, datetime, timedelta, timezone
from pathlib import Path

import pytest

from tests.conftest import FROZEN_NOW, ROOT, TENANT, make_event
from vendor_insights.adapters.sqlite.migrator import SQLiteMigrator
from vendor_insights.adapters.sqlite_db import SQLiteEventStore, SQLiteVendorConfigRepo
from vendor_insights.core.errors import StoreUnavailableError
from vendor_insights.core.services.hours import normalize_schedule
from vendor_insights.domain.entities import Attribution


class TestMigrations:
    """Schema migrations."""

    def test_applies_once(self, tmp_path: Path) -> None:
        """Re-running applies nothing new."""
        path = str(tmp_path / "m.db")
        migrator = SQLiteMigrator(path, str(ROOT / "migrations"))

        assert migrator.run_migrations() == ["0001_events.sql"]
        assert migrator.run_migrations() == []

    def test_tables_created(self, db_path: str) -> None:
        """events and vendors exist."""
        conn = sqlite3.connect(db_path)
        tables = {r[0] for r in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
        conn.close()
        assert {"events", "vendors"} <= tables


class TestSQLiteEventStore:
    """SQLiteEventStore."""

    def test_round_trip(self, db_path: str) -> None:
        """Stored events come back equal."""
        store = SQLiteEventStore(db_path)
        event = make_event("contact", source="flyer", method="phone")
        store.insert_event(event)

        assert store.query_events(TENANT) == [event]

    def test_filters_and_order(self, db_path: str) -> None:
        """Tenant, kind and half-open range filters; oldest first."""
        store = SQLiteEventStore(db_path)
        later = make_event("scan", FROZEN_NOW)
        earlier = make_event("scan", FROZEN_NOW - timedelta(hours=1))
        for event in (
            later,
            earlier,
            make_event("page_view", FROZEN_NOW),
            make_event("scan", FROZEN_NOW, tenant_id="other"),
        ):
            store.insert_event(event)

        assert store.query_events(TENANT, kind="scan") == [earlier, later]
        assert store.query_events(TENANT, kind="scan", start=FROZEN_NOW) == [later]
        assert store.query_events(TENANT, kind="scan", end=FROZEN_NOW) == [earlier]

    def test_non_utc_input_normalized(self, db_path: str) -> None:
        """Offsets are converted to UTC before storage."""
        store = SQLiteEventStore(db_path)
        tokyo = timezone(timedelta(hours=9))
        store.insert_event(make_event("scan", datetime(2024, 1, 10, 21, tzinfo=tokyo)))

        got = store.query_events(TENANT, start=datetime(2024, 1, 10, 12, tzinfo=UTC))
        assert len(got) == 1
        assert got[0].occurred_at == datetime(2024, 1, 10, 12, tzinfo=UTC)
        assert got[0].occurred_at.utcoffset() == timedelta(0)

    def test_attribution_fields_kept(self, db_path: str) -> None:
        """All UTM fields survive storage."""
        store = SQLiteEventStore(db_path)
        event = make_event("scan").model_copy(
            update={"attribution": Attribution(source="a", medium="b", campaign="c", content="d", term="e")}
        )
        store.insert_event(event)
        assert store.query_events(TENANT)[0].attribution == event.attribution

    def test_unavailable(self, tmp_path: Path) -> None:
        """Missing schema surfaces as StoreUnavailableError."""
        store = SQLiteEventStore(str(tmp_path / "empty.db"))
        with pytest.raises(StoreUnavailableError) as exc_info:
            store.query_events(TENANT)
        assert exc_info.value.operation == "query_events"

    def test_external_connection(self) -> None:
        """A shared connection can be injected."""
        conn = sqlite3.connect(":memory:")
        conn.executescript((ROOT / "migrations" / "0001_events.sql").read_text().split("-- Down")[0])
        store = SQLiteEventStore(":memory:", connection=conn)
        store.insert_event(make_event())
        assert len(store.query_events(TENANT)) == 1
        conn.close()


class TestSQLiteVendorConfigRepo:
    """SQLiteVendorConfigRepo."""

    def test_missing_vendor(self, db_path: str) -> None:
        """Unknown tenants have no hours."""
        assert SQLiteVendorConfigRepo(db_path).read_operating_hours(TENANT) is None

    def test_save_and_read(self, db_path: str) -> None:
        """Saved JSON reads back, and saving again replaces it."""
        repo = SQLiteVendorConfigRepo(db_path)
        repo.save_operating_hours(TENANT, {"monday": "closed"})
        repo.save_operating_hours(TENANT, {"monday": "9:00 AM - 1:00 PM"})
        assert repo.read_operating_hours(TENANT) == {"monday": "9:00 AM - 1:00 PM"}

    def test_bad_json_degrades(self, db_path: str) -> None:
        """Unparseable stored hours normalize to defaults."""
        conn = sqlite3.connect(db_path)
        conn.execute("INSERT INTO vendors (id, operating_hours) VALUES (?, ?)", (TENANT, "{not json"))
        conn.commit()
        conn.close()

        raw = SQLiteVendorConfigRepo(db_path).read_operating_hours(TENANT)
        assert raw == "{not json"
        assert normalize_schedule(raw)["monday"].open == "09:00"
