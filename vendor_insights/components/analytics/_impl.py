"""
AnalyticsIngestionService - validated event boundary.

Loosely typed rows (dashboard posts, legacy table rows) are validated here
and turned into immutable Event records. Rows that fail are quarantined
with their errors and never reach aggregation.

Key behaviors:
- tenant_id required, kind must be an allowed kind
- PII fields (IP, user agent, cookies) rejected
- Unknown top-level fields rejected
- occurred_at parsed from ISO string, epoch seconds/ms or datetime
- Flat utm_* fields or a nested attribution object accepted
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from pydantic import ValidationError

from vendor_insights.adapters.time_zone import ZonedTimeAdapter
from vendor_insights.components.analytics.models import IngestionError
from vendor_insights.core.ports.events import EventStorePort
from vendor_insights.core.ports.time import TimePort
from vendor_insights.core.services.analytics_attrib import UTM_FIELDS, parse_utm_params
from vendor_insights.domain.entities import EVENT_KINDS, Attribution, Event

logger = logging.getLogger(__name__)

# --- Configuration ---


@dataclass(frozen=True)
class IngestionConfig:
    """Event ingestion configuration."""

    enabled: bool = True

    allowed_kinds: frozenset[str] = field(default_factory=lambda: frozenset(EVENT_KINDS))
    allowed_fields: frozenset[str] = field(
        default_factory=lambda: frozenset(
            {
                "id",
                "tenant_id",
                "kind",
                "occurred_at",
                "ts",
                "attribution",
                "subject",
            }
            | {f"utm_{key}" for key in UTM_FIELDS}
        ),
    )
    forbidden_fields: frozenset[str] = field(
        default_factory=lambda: frozenset(
            {
                "ip",
                "ip_address",
                "user_ip",
                "user_agent",
                "cookie",
                "visitor_id",
                "session_id",
            }
        ),
    )

    # Clock skew tolerated for client-supplied timestamps
    max_future_seconds: int = 300


DEFAULT_CONFIG = IngestionConfig()


# --- Default Implementations ---


class InMemoryEventStore:
    """In-memory event store for testing/dev."""

    def __init__(self, events: list[Event] | None = None) -> None:
        self._events: list[Event] = list(events or [])

    def insert_event(self, event: Event) -> None:
        """Append an event."""
        self._events.append(event)

    def query_events(
        self,
        tenant_id: str,
        kind: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Event]:
        """Filter by tenant, kind and half-open UTC range; oldest first."""
        matched = [
            e
            for e in self._events
            if e.tenant_id == tenant_id
            and (kind is None or e.kind == kind)
            and (start is None or e.occurred_at >= start)
            and (end is None or e.occurred_at < end)
        ]
        return sorted(matched, key=lambda e: e.occurred_at)

    def get_all(self) -> list[Event]:
        """Get all stored events (for testing)."""
        return list(self._events)


class InMemoryVendorConfigRepo:
    """In-memory vendor configuration for testing/dev."""

    def __init__(self, hours: dict[str, Any] | None = None) -> None:
        self._hours: dict[str, Any] = dict(hours or {})

    def read_operating_hours(self, tenant_id: str) -> Any:
        return self._hours.get(tenant_id)

    def save_operating_hours(self, tenant_id: str, hours: Any) -> None:
        self._hours[tenant_id] = hours


# --- Validation Functions ---


def validate_tenant(tenant_id: Any) -> list[IngestionError]:
    """Tenant id must be a non-empty string."""
    if not isinstance(tenant_id, str) or not tenant_id.strip():
        return [
            IngestionError(
                code="tenant_required",
                message="tenant_id is required",
                field_name="tenant_id",
            )
        ]
    return []


def validate_kind(
    kind: Any,
    config: IngestionConfig = DEFAULT_CONFIG,
) -> list[IngestionError]:
    """Validate event kind."""
    if not kind:
        return [
            IngestionError(
                code="kind_required",
                message="Event kind is required",
                field_name="kind",
            )
        ]

    if not isinstance(kind, str):
        return [
            IngestionError(
                code="invalid_kind",
                message="Event kind must be a string",
                field_name="kind",
            )
        ]

    if kind not in config.allowed_kinds:
        return [
            IngestionError(
                code="invalid_kind",
                message=f"Event kind '{kind}' is not allowed",
                field_name="kind",
            )
        ]

    return []


def validate_forbidden_fields(
    data: Mapping[str, Any],
    config: IngestionConfig = DEFAULT_CONFIG,
) -> list[IngestionError]:
    """Reject PII at the top level and inside subject."""
    errors: list[IngestionError] = []

    subject = data.get("subject")
    scopes: list[tuple[str, Mapping[str, Any]]] = [("", data)]
    if isinstance(subject, Mapping):
        scopes.append(("subject.", subject))

    for prefix, scope in scopes:
        for field_name in sorted(config.forbidden_fields):
            if field_name in scope:
                errors.append(
                    IngestionError(
                        code="forbidden_field",
                        message=f"Field '{prefix}{field_name}' is not allowed (PII)",
                        field_name=f"{prefix}{field_name}",
                    )
                )

    return errors


def validate_allowed_fields(
    data: Mapping[str, Any],
    config: IngestionConfig = DEFAULT_CONFIG,
) -> list[IngestionError]:
    """Validate only allowed top-level fields are present."""
    errors: list[IngestionError] = []

    for field_name in data:
        if field_name not in config.allowed_fields and field_name not in config.forbidden_fields:
            errors.append(
                IngestionError(
                    code="unknown_field",
                    message=f"Field '{field_name}' is not recognized",
                    field_name=field_name,
                )
            )

    return errors


def validate_timestamp(
    ts: Any,
    now: datetime,
    config: IngestionConfig = DEFAULT_CONFIG,
) -> tuple[datetime | None, list[IngestionError]]:
    """Validate and parse occurred_at. Missing means now."""
    if ts is None:
        return now, []

    parsed: datetime | None = None

    if isinstance(ts, datetime):
        parsed = ts
    elif isinstance(ts, str):
        try:
            parsed = datetime.fromisoformat(ts.replace("Z", "+00:00"))
        except ValueError:
            return None, [
                IngestionError(
                    code="invalid_timestamp",
                    message="Timestamp must be ISO 8601 format",
                    field_name="occurred_at",
                )
            ]
    elif isinstance(ts, (int, float)) and not isinstance(ts, bool):
        try:
            # Unix timestamp (seconds or milliseconds)
            if ts > 1e12:
                parsed = datetime.fromtimestamp(ts / 1000, tz=UTC)
            else:
                parsed = datetime.fromtimestamp(ts, tz=UTC)
        except (ValueError, OSError, OverflowError):
            return None, [
                IngestionError(
                    code="invalid_timestamp",
                    message="Invalid Unix timestamp",
                    field_name="occurred_at",
                )
            ]
    else:
        return None, [
            IngestionError(
                code="invalid_timestamp",
                message="Timestamp must be ISO string or Unix timestamp",
                field_name="occurred_at",
            )
        ]

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)

    if (parsed - now).total_seconds() > config.max_future_seconds:
        return parsed, [
            IngestionError(
                code="timestamp_in_future",
                message=f"Timestamp is too far in future (max {config.max_future_seconds}s)",
                field_name="occurred_at",
            )
        ]

    return parsed, []


def parse_attribution(data: Mapping[str, Any]) -> tuple[Attribution | None, list[IngestionError]]:
    """Nested attribution object wins over flat utm_* fields."""
    if "attribution" not in data:
        return parse_utm_params(data), []

    raw = data["attribution"]
    if raw is None:
        return None, []

    if not isinstance(raw, Mapping):
        return None, [
            IngestionError(
                code="invalid_attribution",
                message="attribution must be an object",
                field_name="attribution",
            )
        ]

    errors: list[IngestionError] = []
    values: dict[str, str | None] = {}
    for key in UTM_FIELDS:
        value = raw.get(key)
        if value is not None and not isinstance(value, str):
            errors.append(
                IngestionError(
                    code="invalid_attribution",
                    message=f"attribution.{key} must be a string",
                    field_name=f"attribution.{key}",
                )
            )
            continue
        values[key] = value

    if errors:
        return None, errors

    attribution = Attribution(**values)
    return (attribution if attribution.has_any() else None), []


def parse_event_id(value: Any) -> tuple[UUID | None, list[IngestionError]]:
    """Parse an optional client-supplied event id."""
    if value is None:
        return None, []

    if isinstance(value, UUID):
        return value, []

    if isinstance(value, str):
        try:
            return UUID(value), []
        except ValueError:
            pass

    return None, [
        IngestionError(
            code="invalid_uuid",
            message="Field 'id' must be a valid UUID",
            field_name="id",
        )
    ]


def validate_event_payload(
    data: Mapping[str, Any],
    now: datetime,
    config: IngestionConfig = DEFAULT_CONFIG,
) -> tuple[Event | None, list[IngestionError]]:
    """
    Build an Event from a raw payload.

    Returns:
        Tuple of (event, errors). Event is None if validation fails.
    """
    if not isinstance(data, Mapping):
        return None, [IngestionError(code="invalid_payload", message="Payload must be an object")]

    if not config.enabled:
        return None, [IngestionError(code="ingestion_disabled", message="Ingestion is disabled")]

    errors: list[IngestionError] = []

    # PII first; reject immediately
    errors.extend(validate_forbidden_fields(data, config))
    if errors:
        return None, errors

    errors.extend(validate_tenant(data.get("tenant_id")))
    errors.extend(validate_kind(data.get("kind"), config))
    errors.extend(validate_allowed_fields(data, config))

    ts_value = data.get("occurred_at", data.get("ts"))
    occurred_at, ts_errors = validate_timestamp(ts_value, now, config)
    errors.extend(ts_errors)

    attribution, attr_errors = parse_attribution(data)
    errors.extend(attr_errors)

    event_id, id_errors = parse_event_id(data.get("id"))
    errors.extend(id_errors)

    subject = data.get("subject")
    if subject is None:
        subject = {}
    elif not isinstance(subject, Mapping):
        errors.append(
            IngestionError(
                code="invalid_subject",
                message="subject must be an object",
                field_name="subject",
            )
        )

    if errors:
        return None, errors

    fields: dict[str, Any] = {
        "tenant_id": data["tenant_id"],
        "kind": data["kind"],
        "occurred_at": occurred_at,
        "attribution": attribution,
        "subject": dict(subject),
    }
    if event_id is not None:
        fields["id"] = event_id

    try:
        return Event(**fields), []
    except ValidationError as e:
        return None, [
            IngestionError(
                code="invalid_event",
                message=err["msg"],
                field_name=".".join(str(p) for p in err["loc"]) or None,
            )
            for err in e.errors()
        ]



# --- Legacy Rows ---


_LEGACY_TABLES: dict[str, tuple[str, str]] = {
    "qr_scans": ("scan", "scanned_at"),
    "page_views": ("page_view", "viewed_at"),
    "contact_interactions": ("contact", "created_at"),
}

_LEGACY_SUBJECT_FIELDS: dict[str, dict[str, str]] = {
    "qr_scans": {"referrer": "referrer", "country": "country", "city": "city"},
    "page_views": {
        "page_path": "page_path",
        "page_title": "page_title",
        "product_id": "product_id",
        "product_name": "product_name",
        "referrer": "referrer",
    },
    "contact_interactions": {
        "interaction_type": "method",
        "interaction_value": "value",
        "referrer": "referrer",
    },
}


def payload_from_row(table: str, row: Mapping[str, Any]) -> dict[str, Any]:
    """
    Map a row from a legacy table onto an ingestion payload.

    Only known columns are carried over, so PII columns (ip_address,
    user_agent, ...) are dropped rather than rejected.
    """
    if table not in _LEGACY_TABLES:
        raise ValueError(f"Unknown legacy table: {table}")

    kind, ts_column = _LEGACY_TABLES[table]
    subject = {
        target: row[source]
        for source, target in _LEGACY_SUBJECT_FIELDS[table].items()
        if row.get(source) is not None
    }

    payload: dict[str, Any] = {
        "tenant_id": row.get("vendor_id"),
        "kind": kind,
        "occurred_at": row.get(ts_column),
        "subject": subject,
    }
    if row.get("id") is not None:
        payload["id"] = row["id"]
    for key in UTM_FIELDS:
        if row.get(f"utm_{key}") is not None:
            payload[f"utm_{key}"] = row[f"utm_{key}"]

    return payload



def event_from_row(
    table: str,
    row: Mapping[str, Any],
    now: datetime,
    config: IngestionConfig = DEFAULT_CONFIG,
) -> tuple[Event | None, list[IngestionError]]:
    """Validate a legacy table row as an Event."""
    return validate_event_payload(payload_from_row(table, row), now, config)


# --- Analytics Ingestion Service ---


@dataclass(frozen=True)
class QuarantinedRow:
    """A payload that failed validation, with the reasons."""

    data: dict[str, Any]
    errors: tuple[IngestionError, ...]


class AnalyticsIngestionService:
    """
    Event ingestion service.

    Validates payloads and appends accepted events to the store.
    Rejected payloads are kept in a quarantine list.
    """

    def __init__(
        self,
        event_store: EventStorePort,
        time_port: TimePort | None = None,
        config: IngestionConfig | None = None,
    ) -> None:
        """Initialize service."""
        self._event_store = event_store
        self._time = time_port or ZonedTimeAdapter()
        self._config = config or DEFAULT_CONFIG
        self._quarantine: list[QuarantinedRow] = []

    @property
    def quarantined(self) -> list[QuarantinedRow]:
        """Rows rejected by this service instance."""
        return list(self._quarantine)

    def ingest(self, data: Mapping[str, Any]) -> tuple[Event | None, list[IngestionError]]:
        """
        Validate and store one payload.

        Store failures (StoreUnavailableError) propagate to the caller.
        """
        event, errors = validate_event_payload(data, self._time.now_utc(), self._config)

        if event is None:
            self._quarantine_row(data, errors)
            return None, errors

        self._event_store.insert_event(event)
        logger.info("Accepted %s event for tenant %s", event.kind, event.tenant_id)
        return event, []

    def ingest_rows(
        self,
        table: str,
        rows: list[Mapping[str, Any]],
    ) -> tuple[list[Event], list[QuarantinedRow]]:
        """
        Import rows from a legacy table.

        Returns:
            Tuple of (accepted events, rows quarantined by this call).
        """
        accepted: list[Event] = []
        rejected: list[QuarantinedRow] = []
        for row in rows:
            payload = payload_from_row(table, row)
            event, errors = self.ingest(payload)
            if event is None:
                rejected.append(self._quarantine[-1])
            else:
                accepted.append(event)

        if rejected:
            logger.warning("Quarantined %d of %d %s rows", len(rejected), len(rows), table)
        return accepted, rejected

    def _quarantine_row(self, data: Any, errors: list[IngestionError]) -> None:
        row = QuarantinedRow(
            data=dict(data) if isinstance(data, Mapping) else {},
            errors=tuple(errors),
        )
        self._quarantine.append(row)
        logger.warning(
            "Quarantined event payload: %s",
            ", ".join(e.code for e in errors),
        )


# --- Factory ---


def create_analytics_ingestion_service(
    event_store: EventStorePort,
    time_port: TimePort | None = None,
    config: IngestionConfig | None = None,
) -> AnalyticsIngestionService:
    """Create an AnalyticsIngestionService."""
    return AnalyticsIngestionService(
        event_store=event_store,
        time_port=time_port,
        config=config,
    )
