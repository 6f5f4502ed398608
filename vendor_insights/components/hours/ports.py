"""
Hours component port definitions.
"""

from __future__ import annotations

from vendor_insights.core.ports.events import VendorConfigPort

__all__ = ["VendorConfigPort"]
