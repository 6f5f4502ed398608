"""
Analytics component port definitions.
"""

from __future__ import annotations

from vendor_insights.core.ports.events import EventStorePort, VendorConfigPort
from vendor_insights.core.ports.time import TimePort

__all__ = ["EventStorePort", "TimePort", "VendorConfigPort"]
