"""
SQLite Database Adapter (event store and vendor config).

Implements EventStorePort and VendorConfigPort using SQLite.
Schema lives in migrations/ and is applied by SQLiteMigrator.

Every sqlite3 failure is re-raised as StoreUnavailableError; the analytics
core does not catch it.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from vendor_insights.core.errors import StoreUnavailableError
from vendor_insights.domain.entities import Attribution, Event

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def format_ts(dt: datetime) -> str:
    """Fixed-width UTC ISO timestamp, so text ordering matches time ordering."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat(timespec="microseconds")


def parse_dt(s: str | None) -> datetime | None:
    """Parse ISO datetime string."""
    return datetime.fromisoformat(s) if s else None


# -----------------------------------------------------------------------------
# Base SQLite Repository
# -----------------------------------------------------------------------------


class SQLiteRepoBase:
    """Base class for SQLite repositories."""

    def __init__(self, db_path: str, connection: sqlite3.Connection | None = None):
        self.db_path = db_path
        self._external_conn = connection
        if connection is not None:
            connection.row_factory = dict_factory

    def _get_conn(self) -> sqlite3.Connection:
        """Get database connection (uses external if provided)."""
        if self._external_conn is not None:
            return self._external_conn

        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        return conn

    def _should_close(self) -> bool:
        """Whether to close connection after use."""
        return self._external_conn is None

    @contextmanager
    def _session(self, operation: str, write: bool = False) -> Iterator[sqlite3.Connection]:
        """Open a connection, translating sqlite errors to StoreUnavailableError."""
        conn: sqlite3.Connection | None = None
        try:
            conn = self._get_conn()
            yield conn
            if write and self._should_close():
                conn.commit()
        except sqlite3.Error as e:
            logger.exception("SQLite %s failed on %s", operation, self.db_path)
            raise StoreUnavailableError(operation, e) from e
        finally:
            if conn is not None and self._should_close():
                conn.close()


# -----------------------------------------------------------------------------
# Event Store
# -----------------------------------------------------------------------------


class SQLiteEventStore(SQLiteRepoBase):
    """SQLite implementation of EventStorePort (append-only)."""

    def insert_event(self, event: Event) -> None:
        attribution = event.attribution.model_dump() if event.attribution else None
        with self._session("insert_event", write=True) as conn:
            conn.execute(
                """
                INSERT INTO events (id, tenant_id, kind, occurred_at, attribution_json, subject_json)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    str(event.id),
                    event.tenant_id,
                    event.kind,
                    format_ts(event.occurred_at),
                    json.dumps(attribution) if attribution is not None else None,
                    json.dumps(event.subject),
                ),
            )

    def query_events(
        self,
        tenant_id: str,
        kind: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Event]:
        query = "SELECT * FROM events WHERE tenant_id = ?"
        params: list[Any] = [tenant_id]

        if kind:
            query += " AND kind = ?"
            params.append(kind)

        if start:
            query += " AND occurred_at >= ?"
            params.append(format_ts(start))

        if end:
            query += " AND occurred_at < ?"
            params.append(format_ts(end))

        query += " ORDER BY occurred_at ASC, rowid ASC"

        with self._session("query_events") as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._map_row(row) for row in rows]

    def _map_row(self, row: dict[str, Any]) -> Event:
        attribution_json = row.get("attribution_json")
        return Event(
            id=UUID(row["id"]),
            tenant_id=row["tenant_id"],
            kind=row["kind"],
            occurred_at=parse_dt(row["occurred_at"]),
            attribution=Attribution(**json.loads(attribution_json)) if attribution_json else None,
            subject=json.loads(row.get("subject_json") or "{}"),
        )


# -----------------------------------------------------------------------------
# Vendor Configuration
# -----------------------------------------------------------------------------


class SQLiteVendorConfigRepo(SQLiteRepoBase):
    """SQLite implementation of VendorConfigPort."""

    def read_operating_hours(self, tenant_id: str) -> Any:
        with self._session("read_operating_hours") as conn:
            row = conn.execute(
                "SELECT operating_hours FROM vendors WHERE id = ?", (tenant_id,)
            ).fetchone()

        if not row or row["operating_hours"] is None:
            return None

        try:
            return json.loads(row["operating_hours"])
        except json.JSONDecodeError:
            # Unparseable JSON is handed on as the raw string; the normalizer
            # degrades it to defaults.
            return row["operating_hours"]

    def save_operating_hours(self, tenant_id: str, hours: Any) -> None:
        now = format_ts(datetime.now(UTC))
        with self._session("save_operating_hours", write=True) as conn:
            conn.execute(
                """
                INSERT INTO vendors (id, operating_hours, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    operating_hours=excluded.operating_hours,
                    updated_at=excluded.updated_at
                """,
                (tenant_id, json.dumps(hours), now),
            )
