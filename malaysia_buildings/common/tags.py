"""OpenStreetMap tag keys and a typed read-only view over element tags."""

from __future__ import annotations

from typing import Any, Iterator, Mapping

PLACEHOLDER_VALUE = "yes"

NAME = "name"
NAME_EN = "name:en"
NAME_MS = "name:ms"
BRAND = "brand"
OPERATOR = "operator"
HOUSENAME = "addr:housename"
HOUSENUMBER = "addr:housenumber"
STREET = "addr:street"
SUBURB = "addr:suburb"
CITY = "addr:city"
SUBDISTRICT = "addr:subdistrict"
DISTRICT = "addr:district"
STATE_DISTRICT = "addr:state_district"
POSTCODE = "addr:postcode"
STATE = "addr:state"
COUNTRY = "addr:country"
IS_IN_CITY = "is_in:city"
IS_IN_DISTRICT = "is_in:district"
IS_IN_STATE = "is_in:state"
IS_IN_COUNTRY = "is_in:country"
PLAIN_CITY = "city"
PLAIN_DISTRICT = "district"
PLACE = "place"

BUILDING = "building"
AMENITY = "amenity"
SHOP = "shop"
OFFICE = "office"
TOURISM = "tourism"
LEISURE = "leisure"
HEALTHCARE = "healthcare"
PUBLIC_TRANSPORT = "public_transport"
LANDUSE = "landuse"
RELIGION = "religion"


class OsmTags(Mapping[str, str]):
    """Tags of one element with whitespace-trimmed, string-only values."""

    __slots__ = ("_tags",)

    def __init__(self, raw: Mapping[str, Any] | None = None) -> None:
        tags: dict[str, str] = {}
        for key, value in (raw or {}).items():
            if value is None:
                continue
            tags[str(key)] = str(value).strip()
        self._tags = tags

    def __getitem__(self, key: str) -> str:
        return self._tags[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._tags)

    def __len__(self) -> int:
        return len(self._tags)

    def __repr__(self) -> str:
        return f"OsmTags({self._tags!r})"

    def value(self, key: str) -> str | None:
        value = self._tags.get(key)
        return value or None

    def meaningful(self, key: str) -> str | None:
        """Value of ``key`` unless it is missing, empty or the ``yes`` placeholder."""
        value = self.value(key)
        if value is None or value.lower() == PLACEHOLDER_VALUE:
            return None
        return value

    def first(self, *keys: str) -> str | None:
        for key in keys:
            value = self.value(key)
            if value is not None:
                return value
        return None

    def lowered(self, key: str) -> str:
        return (self.value(key) or "").lower()

    def to_dict(self) -> dict[str, str]:
        return dict(self._tags)

    @property
    def name(self) -> str | None:
        return self.value(NAME)

    @property
    def building(self) -> str | None:
        return self.value(BUILDING)

    @property
    def country(self) -> str | None:
        return self.first(COUNTRY, IS_IN_COUNTRY)

    @property
    def state(self) -> str | None:
        return self.first(STATE, IS_IN_STATE)

    @property
    def city(self) -> str | None:
        return self.first(CITY, SUBDISTRICT)
