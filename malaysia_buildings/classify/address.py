"""Postal address formatting."""

from __future__ import annotations

from malaysia_buildings.common import tags as keys
from malaysia_buildings.common.tags import OsmTags

ADDRESS_PLACEHOLDER = "Address not available"

ADDRESS_KEYS = (
    keys.HOUSENUMBER,
    keys.STREET,
    keys.SUBURB,
    keys.CITY,
    keys.DISTRICT,
    keys.POSTCODE,
    keys.STATE,
)


def format_address(tags: OsmTags) -> str:
    parts = [value for value in (tags.value(key) for key in ADDRESS_KEYS) if value]
    if not parts:
        return ADDRESS_PLACEHOLDER
    return ", ".join(parts)
