"""
Hours component - operating-hours normalization.
"""

from .component import run, run_apply_template, run_get_schedule
from .models import ApplyTemplateInput, GetScheduleInput, ScheduleDay, ScheduleOutput
from .ports import VendorConfigPort

__all__ = [
    "run",
    "run_apply_template",
    "run_get_schedule",
    "ApplyTemplateInput",
    "GetScheduleInput",
    "ScheduleDay",
    "ScheduleOutput",
    "VendorConfigPort",
]
