"""Best-effort city, district and area inference.

Explicit address tags win. Without them the region's keyword table is
matched against the free text of the element (name, street, suburb and so
on), and the region default is used when nothing matches. This is keyword
guessing, not geocoding.
"""

from __future__ import annotations

from typing import Iterable

from malaysia_buildings.common import tags as keys
from malaysia_buildings.common.models import Locality, Region
from malaysia_buildings.common.tags import OsmTags

CITY_KEYS = (keys.CITY, keys.SUBDISTRICT, keys.SUBURB, keys.IS_IN_CITY, keys.PLAIN_CITY)
DISTRICT_KEYS = (keys.DISTRICT, keys.STATE_DISTRICT, keys.IS_IN_DISTRICT, keys.PLAIN_DISTRICT)
AREA_KEYS = (keys.STATE_DISTRICT, keys.DISTRICT)
SETTLEMENT_PLACES = ("city", "town", "village")

TEXT_KEYS = (keys.NAME, keys.CITY, keys.SUBDISTRICT, keys.STREET, keys.SUBURB, keys.AMENITY)


def search_text(tags: OsmTags) -> str:
    return " ".join(tags.lowered(key) for key in TEXT_KEYS if tags.value(key))


def match_locality(text: str, table: Iterable[Locality]) -> str | None:
    """Locality whose longest keyword occurs in ``text``; earlier entries win ties."""
    best_name: str | None = None
    best_length = 0
    for locality in table:
        for keyword in locality.keywords:
            if len(keyword) > best_length and keyword in text:
                best_name = locality.name
                best_length = len(keyword)
    return best_name


def infer_city(tags: OsmTags, region: Region) -> str:
    explicit = tags.first(*CITY_KEYS)
    if explicit:
        return explicit
    if tags.lowered(keys.PLACE) in SETTLEMENT_PLACES and tags.name:
        return tags.name
    return match_locality(search_text(tags), region.localities.cities) or region.localities.default_city


def infer_district(tags: OsmTags, region: Region) -> str:
    explicit = tags.first(*DISTRICT_KEYS)
    if explicit:
        return explicit
    return match_locality(search_text(tags), region.localities.districts) or region.localities.default_district


def infer_area(tags: OsmTags, region: Region) -> str:
    explicit = tags.first(*AREA_KEYS)
    if explicit:
        return explicit
    return match_locality(search_text(tags), region.localities.areas) or region.localities.default_area
