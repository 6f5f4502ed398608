import os
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from typing import Any

from fastapi import Depends

from vendor_insights.adapters.sqlite_db import SQLiteEventStore, SQLiteVendorConfigRepo
from vendor_insights.adapters.time_zone import ZonedTimeAdapter
from vendor_insights.components.analytics import AnalyticsConfig, config_from_rules
from vendor_insights.core.ports.events import EventStorePort, VendorConfigPort
from vendor_insights.core.ports.time import TimePort
from vendor_insights.core.services.hours import DEFAULT_TEMPLATES, DayHours
from vendor_insights.rules.loader import load_rules
from vendor_insights.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("VENDOR_INSIGHTS_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "vendor_insights.db")
        self.rules_path = Path(os.environ.get("VENDOR_INSIGHTS_RULES", str(self.base_dir / "rules.yaml")))
        self.migrations_dir = self.base_dir / "migrations"


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return load_rules(settings.rules_path)


def get_analytics_config(rules: Rules = Depends(get_rules)) -> AnalyticsConfig:
    return config_from_rules(rules)


def get_hours_defaults(rules: Rules = Depends(get_rules)) -> dict[str, DayHours]:
    return rules.hours.default_table()


def get_hours_templates(rules: Rules = Depends(get_rules)) -> Mapping[str, Mapping[str, Any]]:
    return rules.hours.template_table() or DEFAULT_TEMPLATES


# --- Repos ---
def get_event_store(settings: Settings = Depends(get_settings)) -> EventStorePort:
    return SQLiteEventStore(settings.db_path)


def get_vendor_config_repo(settings: Settings = Depends(get_settings)) -> VendorConfigPort:
    return SQLiteVendorConfigRepo(settings.db_path)


# --- Time ---
def get_time_port(rules: Rules = Depends(get_rules)) -> TimePort:
    return ZonedTimeAdapter(rules.analytics.timezone)
