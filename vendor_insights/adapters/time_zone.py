"""
Reference Time Zone Adapter (TimePort implementation).

Day bucketing needs one fixed zone, supplied by configuration rather than
inferred from events or clients. Timestamps stay in UTC everywhere else.

Key behaviors:
- now_utc: Returns current UTC time
- today_local: Current calendar day in the reference zone
- to_local: Converts UTC to the reference zone (DST-aware)
"""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
from zoneinfo import ZoneInfo


class ZonedTimeAdapter:
    """
    Time adapter for a configured IANA time zone.

    DST transitions are handled by zoneinfo.
    """

    def __init__(self, tz_name: str = "UTC") -> None:
        """
        Initialize with specified timezone.

        Args:
            tz_name: IANA timezone name (default: UTC)
        """
        self._tz_name = tz_name
        self._tz = ZoneInfo(tz_name)

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        return datetime.now(UTC)

    def now_local(self) -> datetime:
        """Get current time in the reference zone."""
        return datetime.now(self._tz)

    def today_local(self) -> date:
        """Get today's date in the reference zone."""
        return self.now_local().date()

    def to_local(self, utc_dt: datetime) -> datetime:
        """
        Convert UTC to the reference zone.

        If utc_dt is naive, it's assumed to be UTC.
        """
        if utc_dt.tzinfo is None:
            utc_dt = utc_dt.replace(tzinfo=UTC)

        return utc_dt.astimezone(self._tz)

    @property
    def timezone_name(self) -> str:
        """Get the reference timezone name."""
        return self._tz_name


class FrozenTimeAdapter:
    """
    Time adapter that returns a fixed time.

    Useful for deterministic testing.
    """

    def __init__(self, frozen_utc: datetime, tz_name: str = "UTC") -> None:
        """
        Initialize with frozen time.

        Args:
            frozen_utc: The UTC time to return from now_utc()
            tz_name: IANA timezone name for local conversions
        """
        if frozen_utc.tzinfo is None:
            frozen_utc = frozen_utc.replace(tzinfo=UTC)
        self._frozen_utc = frozen_utc.astimezone(UTC)
        self._tz_name = tz_name
        self._tz = ZoneInfo(tz_name)

    def now_utc(self) -> datetime:
        """Get frozen UTC time."""
        return self._frozen_utc

    def now_local(self) -> datetime:
        """Get frozen time in the reference zone."""
        return self._frozen_utc.astimezone(self._tz)

    def today_local(self) -> date:
        """Get the frozen date in the reference zone."""
        return self.now_local().date()

    def to_local(self, utc_dt: datetime) -> datetime:
        """Convert UTC to the reference zone."""
        if utc_dt.tzinfo is None:
            utc_dt = utc_dt.replace(tzinfo=UTC)
        return utc_dt.astimezone(self._tz)

    @property
    def timezone_name(self) -> str:
        """Get the reference timezone name."""
        return self._tz_name

    def advance(self, delta: timedelta) -> None:
        """Advance frozen time by delta (for testing)."""
        self._frozen_utc = self._frozen_utc + delta


def create_time_adapter(tz_name: str = "UTC") -> ZonedTimeAdapter:
    """Factory function to create a time adapter."""
    return ZonedTimeAdapter(tz_name)
