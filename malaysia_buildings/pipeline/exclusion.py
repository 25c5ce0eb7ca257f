"""Country and region exclusion checks applied before classification."""

from __future__ import annotations

from malaysia_buildings.common.constants import COUNTRY_CODES
from malaysia_buildings.common.models import ExclusionZone, Region
from malaysia_buildings.common.tags import OsmTags

FOREIGN_MARKER = "singapore"


def is_foreign(tags: OsmTags) -> bool:
    country = tags.country
    if country and country.upper() not in COUNTRY_CODES:
        return True
    city = (tags.city or "").lower()
    state = (tags.state or "").lower()
    return FOREIGN_MARKER in city or FOREIGN_MARKER in state


def matching_zone(region: Region, lat: float, lon: float) -> ExclusionZone | None:
    for zone in region.exclusions:
        if zone.excludes(lat, lon):
            return zone
    return None
