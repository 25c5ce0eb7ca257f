"""Hand-specified outlines for well-known places."""

from __future__ import annotations

from malaysia_buildings.common.errors import PolygonUnavailable
from malaysia_buildings.common.geometry import close_ring
from malaysia_buildings.common.models import PolygonDescriptor, SourceKind


class KnownPolygons:
    def __init__(self, places: dict[str, list[dict]] | None = None) -> None:
        self._places: dict[str, list[PolygonDescriptor]] = {}
        for place, rings in (places or {}).items():
            self._places[place] = [
                PolygonDescriptor(
                    label=str(item.get("label") or place),
                    ring=tuple(close_ring([(float(lat), float(lon)) for lat, lon in item["ring"]])),
                    source_kind=SourceKind.KNOWN_LITERAL,
                )
                for item in rings
            ]

    def lookup(self, place: str) -> list[PolygonDescriptor]:
        descriptors = self._places.get(place)
        if not descriptors:
            raise PolygonUnavailable(f"No known outline for {place}")
        return list(descriptors)

    def __contains__(self, place: object) -> bool:
        return place in self._places
