"""
Error taxonomy for the analytics core.

Only two conditions are exceptions:
- InvalidWindowError: a bucketing window whose start is after its end
- StoreUnavailableError: the event store or vendor config store failed

Malformed operating hours are not an error; the normalizer degrades them
to defaults. Ingestion validation failures are returned as values.
"""

from __future__ import annotations

from datetime import date


class InsightsError(Exception):
    """Base class for vendor-insights errors."""


class InvalidWindowError(InsightsError):
    """Raised when a day window is empty or reversed."""

    def __init__(self, start: date | None, end: date | None, reason: str = "") -> None:
        self.start = start
        self.end = end
        self.reason = reason
        msg = f"Invalid window: {start} -> {end}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class StoreUnavailableError(InsightsError):
    """Raised by store adapters when the backing store cannot be reached."""

    def __init__(self, operation: str, cause: Exception | None = None) -> None:
        self.operation = operation
        self.cause = cause
        msg = f"Event store unavailable during '{operation}'"
        if cause is not None:
            msg += f": {cause}"
        super().__init__(msg)
