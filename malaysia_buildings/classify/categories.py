"""Category mapping over OSM feature tags.

Keys are checked in a fixed order and the first key present decides the
category. Amenity comes first because it says more about what a place is
than the generic ``building`` key does; ``building`` comes last.
"""

from __future__ import annotations

from malaysia_buildings.classify.rules import Rule, first_match, humanize, tag_present
from malaysia_buildings.common import tags as keys
from malaysia_buildings.common.tags import PLACEHOLDER_VALUE, OsmTags

UNKNOWN_CATEGORY = "Unknown"
GENERIC_BUILDING = "Building"

AMENITY_CATEGORIES = {
    "hospital": "Healthcare",
    "clinic": "Healthcare",
    "doctors": "Healthcare",
    "dentist": "Healthcare",
    "pharmacy": "Healthcare",
    "school": "Educational Institution",
    "university": "Educational Institution",
    "college": "Educational Institution",
    "kindergarten": "Educational Institution",
    "restaurant": "Food & Beverage",
    "cafe": "Food & Beverage",
    "fast_food": "Food & Beverage",
    "food_court": "Food & Beverage",
    "bank": "Financial Services",
    "atm": "Financial Services",
    "fuel": "Gas Station",
    "place_of_worship": "Religious Site",
    "police": "Government Building",
    "fire_station": "Government Building",
    "townhall": "Government Building",
    "post_office": "Postal Services",
    "library": "Public Services",
    "parking": "Parking",
}

SHOP_CATEGORIES = {
    "mall": "Shopping Mall",
    "department_store": "Shopping Mall",
    "supermarket": "Retail Store",
    "convenience": "Retail Store",
}

TOURISM_CATEGORIES = {
    "hotel": "Hotel",
    "motel": "Hotel",
    "hostel": "Hotel",
    "guest_house": "Hotel",
    "attraction": "Tourist Attraction",
    "museum": "Tourist Attraction",
    "gallery": "Tourist Attraction",
}

LEISURE_CATEGORIES = {
    "sports_centre": "Sports & Recreation",
    "fitness_centre": "Sports & Recreation",
    "swimming_pool": "Sports & Recreation",
    "stadium": "Sports & Recreation",
    "park": "Park & Recreation",
    "playground": "Park & Recreation",
}

BUILDING_CATEGORIES = {
    "hotel": "Hotel",
    "hospital": "Healthcare",
    "school": "Educational Institution",
    "university": "Educational Institution",
    "commercial": "Commercial Building",
    "retail": "Commercial Building",
    "industrial": "Industrial Building",
    "warehouse": "Industrial Building",
    "residential": "Residential Building",
    "apartments": "Residential Building",
    "house": "Residential Building",
    "detached": "Residential Building",
    "terrace": "Residential Building",
    "office": "Office Building",
    "government": "Government Building",
    "religious": "Religious Site",
    "mosque": "Religious Site",
    "church": "Religious Site",
    "temple": "Religious Site",
}

CATEGORY_ICONS = {
    "Healthcare": "\U0001F3E5",
    "Educational Institution": "\U0001F3EB",
    "Food & Beverage": "\U0001F37D️",
    "Financial Services": "\U0001F3E6",
    "Religious Site": "\U0001F54C",
    "Government Building": "\U0001F3DB️",
    "Hotel": "\U0001F3E8",
    "Tourist Attraction": "\U0001F3AF",
    "Shopping Mall": "\U0001F3EC",
    "Retail Store": "\U0001F3EA",
    "Shop": "\U0001F6CD️",
    "Office Building": "\U0001F3E2",
    "Commercial Building": "\U0001F3EC",
    "Industrial Building": "\U0001F3ED",
    "Residential Building": "\U0001F3E0",
    "Sports & Recreation": "⚽",
    "Park & Recreation": "\U0001F3DE️",
    "Gas Station": "⛽",
    "Postal Services": "\U0001F4EE",
    "Public Services": "\U0001F3DB️",
    "Parking": "\U0001F17F️",
    "Public Amenity": "\U0001F3E2",
    "Public Transport": "\U0001F68F",
    "Tourism": "\U0001F9F3",
    "Leisure": "\U0001F3AE",
    "Building": "\U0001F3E2",
    "Unknown": "❓",
}
DEFAULT_ICON = "\U0001F3D7️"


def _mapped(key: str, table: dict[str, str], default: str):
    def _resolve(tags: OsmTags) -> str:
        return table.get(tags.lowered(key), default)

    return _resolve


def _building_category(tags: OsmTags) -> str:
    value = tags.lowered(keys.BUILDING)
    if value in BUILDING_CATEGORIES:
        return BUILDING_CATEGORIES[value]
    if value == PLACEHOLDER_VALUE:
        return GENERIC_BUILDING
    return f"{humanize(value)} {GENERIC_BUILDING}"


CATEGORY_RULES = (
    Rule(tag_present(keys.AMENITY), _mapped(keys.AMENITY, AMENITY_CATEGORIES, "Public Amenity")),
    Rule(tag_present(keys.SHOP), _mapped(keys.SHOP, SHOP_CATEGORIES, "Shop")),
    Rule(tag_present(keys.TOURISM), _mapped(keys.TOURISM, TOURISM_CATEGORIES, "Tourism")),
    Rule(tag_present(keys.LEISURE), _mapped(keys.LEISURE, LEISURE_CATEGORIES, "Leisure")),
    Rule(tag_present(keys.OFFICE), "Office Building"),
    Rule(tag_present(keys.HEALTHCARE), "Healthcare"),
    Rule(tag_present(keys.PUBLIC_TRANSPORT), "Public Transport"),
    Rule(tag_present(keys.BUILDING), _building_category),
)


def building_category(tags: OsmTags) -> str:
    return first_match(CATEGORY_RULES, tags) or UNKNOWN_CATEGORY


def category_icon(category: str) -> str:
    return CATEGORY_ICONS.get(category, DEFAULT_ICON)
