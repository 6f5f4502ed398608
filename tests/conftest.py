from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest

from vendor_insights.adapters.sqlite.migrator import SQLiteMigrator
from vendor_insights.adapters.time_zone import FrozenTimeAdapter
from vendor_insights.components.analytics import InMemoryEventStore, InMemoryVendorConfigRepo
from vendor_insights.domain.entities import Attribution, Event
from vendor_insights.rules.loader import load_rules
from vendor_insights.rules.models import Rules

ROOT = Path(__file__).resolve().parent.parent

TENANT = "vendor-1"

# Wednesday
FROZEN_NOW = datetime(2024, 1, 10, 12, 0, tzinfo=UTC)


def make_event(
    kind: str = "scan",
    occurred_at: datetime | None = None,
    source: str | None = None,
    tenant_id: str = TENANT,
    **subject: Any,
) -> Event:
    """Build an event; subject fields go in as keyword arguments."""
    return Event(
        tenant_id=tenant_id,
        kind=kind,
        occurred_at=occurred_at or FROZEN_NOW,
        attribution=Attribution(source=source) if source is not None else None,
        subject=subject,
    )


@pytest.fixture
def event_factory() -> Callable[..., Event]:
    return make_event


@pytest.fixture
def frozen_time() -> FrozenTimeAdapter:
    """Clock frozen at FROZEN_NOW, UTC reference zone."""
    return FrozenTimeAdapter(FROZEN_NOW)


@pytest.fixture
def event_store() -> InMemoryEventStore:
    """Fresh event store."""
    return InMemoryEventStore()


@pytest.fixture
def vendor_repo() -> InMemoryVendorConfigRepo:
    """Fresh vendor config repo."""
    return InMemoryVendorConfigRepo()


@pytest.fixture
def rules() -> Rules:
    """Rules loaded from the project rules file."""
    return load_rules(ROOT / "rules.yaml")


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    """Migrated SQLite database in a temp dir."""
    path = str(tmp_path / "vendor_insights.db")
    SQLiteMigrator(path, str(ROOT / "migrations")).run_migrations()
    return path
