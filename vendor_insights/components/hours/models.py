"""
Hours component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass

from vendor_insights.core.services.hours import DayHours

# --- Input Models ---


@dataclass(frozen=True)
class GetScheduleInput:
    """Input for reading a tenant's normalized weekly schedule."""

    tenant_id: str


@dataclass(frozen=True)
class ApplyTemplateInput:
    """Input for building a schedule from a named template."""

    name: str


# --- Output Models ---


@dataclass(frozen=True)
class ScheduleDay:
    """One day of a schedule with its display string."""

    day: str
    hours: DayHours
    display: str


@dataclass(frozen=True)
class ScheduleOutput:
    """A full monday..sunday schedule."""

    days: tuple[ScheduleDay, ...]
    # Days that fell back to defaults because they were missing or unreadable
    corrected_days: tuple[str, ...] = ()
    summary: str = ""

    def as_mapping(self) -> dict[str, DayHours]:
        return {d.day: d.hours for d in self.days}
