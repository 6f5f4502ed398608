"""
Analytics component - event ingestion and dashboard aggregation.
"""

from ._impl import (
    AnalyticsIngestionService,
    IngestionConfig,
    InMemoryEventStore,
    InMemoryVendorConfigRepo,
    QuarantinedRow,
    create_analytics_ingestion_service,
    event_from_row,
    payload_from_row,
    validate_allowed_fields,
    validate_event_payload,
    validate_forbidden_fields,
    validate_kind,
    validate_timestamp,
)
from .component import (
    AnalyticsConfig,
    config_from_rules,
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
from .models import (
    TOP_METRICS,
    ContactSummaryInput,
    ContactSummaryOutput,
    DailySeriesInput,
    DailySeriesOutput,
    DateWindow,
    IngestEventInput,
    IngestionError,
    IngestOutput,
    OverviewInput,
    OverviewOutput,
    RecentActivityInput,
    RecentActivityOutput,
    SourceBreakdownInput,
    SourceBreakdownOutput,
    TopEntriesInput,
    TopEntriesOutput,
    TopMetric,
    TrendInput,
    TrendOutput,
)
from .ports import EventStorePort, TimePort, VendorConfigPort

__all__ = [
    # Entry points
    "run",
    "run_contact_summary",
    "run_daily_series",
    "run_ingest",
    "run_overview",
    "run_recent_activity",
    "run_source_breakdown",
    "run_top_entries",
    "run_trend",
    "AnalyticsConfig",
    "config_from_rules",
    # Input models
    "ContactSummaryInput",
    "DailySeriesInput",
    "DateWindow",
    "IngestEventInput",
    "OverviewInput",
    "RecentActivityInput",
    "SourceBreakdownInput",
    "TopEntriesInput",
    "TopMetric",
    "TOP_METRICS",
    "TrendInput",
    # Output models
    "ContactSummaryOutput",
    "DailySeriesOutput",
    "IngestionError",
    "IngestOutput",
    "OverviewOutput",
    "RecentActivityOutput",
    "SourceBreakdownOutput",
    "TopEntriesOutput",
    "TrendOutput",
    # Ports
    "EventStorePort",
    "TimePort",
    "VendorConfigPort",
    # Ingestion
    "AnalyticsIngestionService",
    "IngestionConfig",
    "InMemoryEventStore",
    "InMemoryVendorConfigRepo",
    "QuarantinedRow",
    "create_analytics_ingestion_service",
    "event_from_row",
    "payload_from_row",
    "validate_allowed_fields",
    "validate_event_payload",
    "validate_forbidden_fields",
    "validate_kind",
    "validate_timestamp",
]
