"""
Event Ingestion API Routes.

Accepts one raw interaction event per request. Invalid payloads, including
any carrying PII fields, are rejected with 400 and never stored.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from vendor_insights.api.deps import get_analytics_config, get_event_store, get_time_port
from vendor_insights.components.analytics import (
    AnalyticsConfig,
    IngestEventInput,
    run_ingest,
)
from vendor_insights.core.ports.events import EventStorePort
from vendor_insights.core.ports.time import TimePort

router = APIRouter()


# --- Response Models ---


class EventResponse(BaseModel):
    """Success response."""

    ok: bool = True
    id: str


class ErrorResponse(BaseModel):
    """Error response."""

    ok: bool = False
    errors: list[dict[str, Any]]


# --- Routes ---


@router.post(
    "",
    response_model=EventResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 503: {"description": "Event store unavailable"}},
)
def ingest_event(
    body: dict[str, Any],
    store: EventStorePort = Depends(get_event_store),
    time_port: TimePort = Depends(get_time_port),
    config: AnalyticsConfig = Depends(get_analytics_config),
) -> EventResponse:
    """
    Ingest one event.

    Validates kind, tenant and timestamp; rejects forbidden (PII) fields.
    """
    result = run_ingest(IngestEventInput(data=body), store=store, time_port=time_port, config=config)

    if result.event is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "ok": False,
                "errors": [
                    {
                        "code": e.code,
                        "message": e.message,
                        "field": e.field_name,
                    }
                    for e in result.errors
                ],
            },
        )

    return EventResponse(ok=True, id=str(result.event.id))
