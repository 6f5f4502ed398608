"""
Event store and vendor configuration ports.

The store is append-only: the core reads events back and appends new ones,
it never updates or deletes. Implementations raise StoreUnavailableError
when the backing store fails; the core lets that propagate.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol

from vendor_insights.domain.entities import Event


class EventStorePort(Protocol):
    """Append-only event store queryable by tenant, kind and time range."""

    def query_events(
        self,
        tenant_id: str,
        kind: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Event]:
        """
        Return a tenant's events ordered by occurred_at ascending.

        Args:
            tenant_id: Owning tenant.
            kind: Optional event kind filter.
            start: Inclusive UTC lower bound.
            end: Exclusive UTC upper bound.
        """
        ...

    def insert_event(self, event: Event) -> None:
        """Append an event."""
        ...


class VendorConfigPort(Protocol):
    """Read access to stored vendor configuration."""

    def read_operating_hours(self, tenant_id: str) -> Any:
        """Return the raw stored operating-hours value (JSON-like, may be None)."""
        ...
