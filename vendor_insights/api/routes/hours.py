"""
Operating Hours API Routes.

Serves a vendor's weekly schedule in canonical form, whatever shape it
was stored in, plus the schedule templates offered in the editor.
"""

from collections.abc import Mapping
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from vendor_insights.api.deps import get_hours_defaults, get_hours_templates, get_vendor_config_repo
from vendor_insights.components.hours import (
    ApplyTemplateInput,
    GetScheduleInput,
    ScheduleOutput,
    run_apply_template,
    run_get_schedule,
)
from vendor_insights.core.ports.events import VendorConfigPort
from vendor_insights.core.services.hours import DayHours

router = APIRouter()


class DayHoursModel(BaseModel):
    """Canonical hours for one day."""

    open: str
    close: str
    closed: bool
    display: str


class ScheduleResponse(BaseModel):
    """Full monday..sunday schedule."""

    days: dict[str, DayHoursModel]
    corrected_days: list[str] = []
    summary: str = ""


def to_response(result: ScheduleOutput) -> ScheduleResponse:
    return ScheduleResponse(
        days={
            d.day: DayHoursModel(
                open=d.hours.open,
                close=d.hours.close,
                closed=d.hours.closed,
                display=d.display,
            )
            for d in result.days
        },
        corrected_days=list(result.corrected_days),
        summary=result.summary,
    )


@router.get("/tenants/{tenant_id}/hours", response_model=ScheduleResponse)
def get_hours(
    tenant_id: str,
    config_repo: VendorConfigPort = Depends(get_vendor_config_repo),
    defaults: dict[str, DayHours] = Depends(get_hours_defaults),
) -> ScheduleResponse:
    """Normalized operating hours; unreadable days fall back to defaults."""
    result = run_get_schedule(
        GetScheduleInput(tenant_id=tenant_id),
        config_repo=config_repo,
        defaults=defaults,
    )
    return to_response(result)


@router.get("/hours/templates/{name}", response_model=ScheduleResponse)
def get_template(
    name: str,
    templates: Mapping[str, Mapping[str, Any]] = Depends(get_hours_templates),
) -> ScheduleResponse:
    """Schedule built from a named template."""
    try:
        result = run_apply_template(ApplyTemplateInput(name=name), templates=templates)
    except KeyError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown template: {name}",
        ) from None
    return to_response(result)
