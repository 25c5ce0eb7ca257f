"""Display name extraction."""

from __future__ import annotations

from malaysia_buildings.classify.rules import Rule, any_of, first_match, humanize, tag_in, tag_present
from malaysia_buildings.common import tags as keys
from malaysia_buildings.common.tags import OsmTags

DEFAULT_NAME = "Building"

NAME_KEYS = (
    keys.NAME,
    keys.NAME_EN,
    keys.NAME_MS,
    keys.BRAND,
    keys.OPERATOR,
    keys.HOUSENAME,
)

# Specific feature types outrank the generic building key.
SPECIFIC_TYPE_KEYS = (
    keys.AMENITY,
    keys.SHOP,
    keys.OFFICE,
    keys.TOURISM,
    keys.LEISURE,
    keys.HEALTHCARE,
    keys.PUBLIC_TRANSPORT,
)

RESIDENTIAL_BUILDINGS = (
    "residential",
    "house",
    "apartments",
    "detached",
    "semidetached_house",
    "terrace",
    "bungalow",
    "dormitory",
)


def _place_of_worship(tags: OsmTags) -> str:
    religion = tags.meaningful(keys.RELIGION)
    if religion is None:
        return "Place of Worship"
    return f"{humanize(religion)} Place of Worship"


def _specific_type(tags: OsmTags) -> str | None:
    for key in SPECIFIC_TYPE_KEYS:
        value = tags.meaningful(key)
        if value is not None:
            return value
    return None


FALLBACK_RULES = (
    Rule(tag_in(keys.AMENITY, ["place_of_worship"]), _place_of_worship),
    Rule(
        any_of(
            tag_in(keys.BUILDING, RESIDENTIAL_BUILDINGS),
            tag_in(keys.AMENITY, ["housing"]),
            tag_in(keys.LANDUSE, ["residential"]),
        ),
        "Residential Building",
    ),
    Rule(lambda tags: _specific_type(tags) is not None, lambda tags: humanize(_specific_type(tags) or "")),
    Rule(any_of(tag_in(keys.BUILDING, ["commercial", "retail"]), tag_in(keys.SHOP, ["yes"])), "Commercial Building"),
    Rule(any_of(tag_in(keys.BUILDING, ["office"]), tag_in(keys.OFFICE, ["yes"])), "Office Building"),
    Rule(tag_in(keys.BUILDING, ["industrial", "warehouse"]), "Industrial Building"),
    Rule(tag_present(keys.HOUSENUMBER), "Residence"),
    Rule(lambda tags: tags.meaningful(keys.BUILDING) is not None, lambda tags: humanize(tags.building or "")),
)


def explicit_name(tags: OsmTags) -> str | None:
    for key in NAME_KEYS:
        value = tags.meaningful(key)
        if value is not None:
            return value
    number = tags.meaningful(keys.HOUSENUMBER)
    street = tags.meaningful(keys.STREET)
    if number and street:
        return f"{number} {street}"
    return None


def building_name(tags: OsmTags) -> str:
    return explicit_name(tags) or first_match(FALLBACK_RULES, tags) or DEFAULT_NAME
