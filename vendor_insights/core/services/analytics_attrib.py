"""
Attribution key resolution and UTM handling.

Key behaviors:
- Resolve an event's attribution to the key used for grouping
- Absent, empty or whitespace-only source collapses to "Direct"
- Source values are otherwise kept verbatim (no case-folding, no trimming)
- Extract UTM fields from raw payloads and build tracked vendor URLs
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import urlencode

from vendor_insights.domain.entities import Attribution

DIRECT = "Direct"

UTM_FIELDS: tuple[str, ...] = ("source", "medium", "campaign", "content", "term")


# --- Resolution ---


def resolve_attribution_key(attribution: Attribution | Mapping[str, Any] | None) -> str:
    """
    Resolve the attribution key for an event.

    Accepts an Attribution, a plain mapping with a "source" entry, or None.
    Never fails; anything without a usable source resolves to DIRECT.
    """
    if attribution is None:
        return DIRECT

    if isinstance(attribution, Attribution):
        source: Any = attribution.source
    elif isinstance(attribution, Mapping):
        source = attribution.get("source")
    else:
        return DIRECT

    if not isinstance(source, str) or not source.strip():
        return DIRECT

    return source


# --- Parsing ---


def parse_utm_params(data: Mapping[str, Any]) -> Attribution | None:
    """
    Parse UTM parameters from a raw payload.

    Handles both prefixed (utm_source) and unprefixed (source) keys, the
    prefixed form taking priority. Values are kept as given. Returns None
    when no field is present at all.
    """

    def get_param(key: str) -> str | None:
        value = data.get(f"utm_{key}")
        if value is None:
            value = data.get(key)
        if isinstance(value, str) and value != "":
            return value
        return None

    attribution = Attribution(**{key: get_param(key) for key in UTM_FIELDS})
    return attribution if attribution.has_any() else None


# --- Tracking URLs ---


def build_tracking_url(
    base_url: str,
    slug: str,
    attribution: Attribution | None = None,
) -> str:
    """
    Build a vendor page URL carrying UTM parameters.

    Only non-empty fields are emitted, in source/medium/campaign/content/term
    order, so scans of the generated QR code attribute back to the campaign.
    """
    url = f"{base_url.rstrip('/')}/vendors/{slug}"

    if attribution is None:
        return url

    params: list[tuple[str, str]] = []
    for key in UTM_FIELDS:
        value = getattr(attribution, key)
        if value:
            params.append((f"utm_{key}", value))

    if not params:
        return url

    return f"{url}?{urlencode(params)}"
