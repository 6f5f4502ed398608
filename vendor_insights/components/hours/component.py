"""
Hours component - normalized operating hours for vendor pages.

Stored hours are read through VendorConfigPort and always come back as a
complete monday..sunday schedule, whatever shape they were saved in.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from vendor_insights.core.services.hours import (
    DAYS_OF_WEEK,
    DayHours,
    apply_template,
    format_day_hours,
    normalize_schedule_with_report,
    summarize_schedule,
)

from .models import ApplyTemplateInput, GetScheduleInput, ScheduleDay, ScheduleOutput
from .ports import VendorConfigPort


def _to_output(
    schedule: Mapping[str, DayHours],
    corrected: tuple[str, ...] = (),
    summary: str | None = None,
) -> ScheduleOutput:
    days = tuple(
        ScheduleDay(day=day, hours=schedule[day], display=format_day_hours(schedule[day]))
        for day in DAYS_OF_WEEK
    )
    if summary is None:
        summary = summarize_schedule(schedule)
    return ScheduleOutput(days=days, corrected_days=corrected, summary=summary)


def run_get_schedule(
    inp: GetScheduleInput,
    *,
    config_repo: VendorConfigPort,
    defaults: Mapping[str, DayHours] | None = None,
) -> ScheduleOutput:
    """
    Read and normalize a tenant's operating hours.

    Args:
        inp: Input naming the tenant.
        config_repo: Vendor configuration port.
        defaults: Per-day default table (uniform 09:00-17:00 if None).

    Returns:
        ScheduleOutput with all seven days. Never fails on bad data;
        store errors propagate.
    """
    raw = config_repo.read_operating_hours(inp.tenant_id)
    schedule, corrected = normalize_schedule_with_report(raw, defaults)
    # Nothing stored reads as "Not set" even though defaults fill the week
    summary = summarize_schedule(None) if raw is None else None
    return _to_output(schedule, corrected, summary)


def run_apply_template(
    inp: ApplyTemplateInput,
    *,
    templates: Mapping[str, Mapping[str, Any]] | None = None,
) -> ScheduleOutput:
    """
    Build a schedule from a named template.

    Raises:
        KeyError: Unknown template name.
    """
    return _to_output(apply_template(inp.name, templates))


def run(
    inp: GetScheduleInput | ApplyTemplateInput,
    *,
    config_repo: VendorConfigPort | None = None,
    defaults: Mapping[str, DayHours] | None = None,
    templates: Mapping[str, Mapping[str, Any]] | None = None,
) -> ScheduleOutput:
    """
    Main entry point for the hours component.

    Dispatches to appropriate handler based on input type.
    """
    if isinstance(inp, GetScheduleInput):
        if config_repo is None:
            raise ValueError("VendorConfigPort is required for schedule reads")
        return run_get_schedule(inp, config_repo=config_repo, defaults=defaults)
    elif isinstance(inp, ApplyTemplateInput):
        return run_apply_template(inp, templates=templates)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
