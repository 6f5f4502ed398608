from collections.abc import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from vendor_insights.adapters.time_zone import FrozenTimeAdapter
from vendor_insights.api import deps
from vendor_insights.api.main import app as main_app
from vendor_insights.components.analytics import InMemoryEventStore, InMemoryVendorConfigRepo
from vendor_insights.rules.models import Rules


@pytest.fixture
def app(
    event_store: InMemoryEventStore,
    vendor_repo: InMemoryVendorConfigRepo,
    frozen_time: FrozenTimeAdapter,
    rules: Rules,
) -> Iterator[FastAPI]:
    """Application with in-memory stores and a frozen clock."""
    main_app.dependency_overrides[deps.get_rules] = lambda: rules
    main_app.dependency_overrides[deps.get_event_store] = lambda: event_store
    main_app.dependency_overrides[deps.get_vendor_config_repo] = lambda: vendor_repo
    main_app.dependency_overrides[deps.get_time_port] = lambda: frozen_time
    yield main_app
    main_app.dependency_overrides.clear()


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Test client (lifespan not run)."""
    return TestClient(app)
