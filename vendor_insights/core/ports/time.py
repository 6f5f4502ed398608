"""
Time/Timezone adapter interface.

All timestamps are stored in UTC. Day bucketing happens in a single
reference time zone chosen by configuration, never inferred from the
event or the client.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Protocol


class TimePort(Protocol):
    """Time provider interface."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...

    def today_local(self) -> date:
        """Get the current calendar day in the reference time zone."""
        ...

    def to_local(self, utc_dt: datetime) -> datetime:
        """
        Convert UTC to the reference time zone.

        Args:
            utc_dt: Datetime in UTC (naive treated as UTC)

        Returns:
            Datetime in the reference time zone (timezone-aware)
        """
        ...

    @property
    def timezone_name(self) -> str:
        """Get the reference timezone name (e.g., 'Europe/London')."""
        ...
