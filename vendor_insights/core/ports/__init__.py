# vendor-insights - Ports (Protocol Interfaces)
# Abstract interfaces for adapters; no implementations here

from vendor_insights.core.ports.events import EventStorePort, VendorConfigPort
from vendor_insights.core.ports.time import TimePort

__all__ = [
    "EventStorePort",
    "TimePort",
    "VendorConfigPort",
]
