"""Named-place boundary lookup against Nominatim."""

from __future__ import annotations

from malaysia_buildings.common.constants import COUNTRY_NAME, NOMINATIM_ENDPOINT
from malaysia_buildings.common.errors import PolygonUnavailable
from malaysia_buildings.common.geometry import close_ring, swap_lon_lat
from malaysia_buildings.common.http import HttpClient, TimeoutConfig
from malaysia_buildings.common.models import PolygonDescriptor, SourceKind

POLYGON_TYPES = {"Polygon", "MultiPolygon"}


def _outer_rings(geometry: dict) -> list[list]:
    coordinates = geometry.get("coordinates") or []
    if geometry.get("type") == "Polygon":
        return [coordinates[0]] if coordinates else []
    return [polygon[0] for polygon in coordinates if polygon]


def descriptors_from_geojson(payload: dict, label: str) -> list[PolygonDescriptor]:
    """Outer rings of the first polygonal feature, converted to (lat, lon)."""
    for feature in payload.get("features") or []:
        geometry = feature.get("geometry") or {}
        if geometry.get("type") not in POLYGON_TYPES:
            continue
        descriptors = []
        for ring in _outer_rings(geometry):
            points = close_ring(swap_lon_lat(ring))
            if len(points) >= 4:
                descriptors.append(
                    PolygonDescriptor(label=label, ring=tuple(points), source_kind=SourceKind.NAMED_LOOKUP)
                )
        if descriptors:
            return descriptors
    raise PolygonUnavailable(f"No polygon feature returned for {label}")


def lookup_place_polygon(
    place: str,
    region_display_name: str,
    http_client: HttpClient,
    *,
    endpoint: str = NOMINATIM_ENDPOINT,
) -> list[PolygonDescriptor]:
    payload = http_client.get_json(
        endpoint,
        source_type="nominatim",
        params={
            "q": f"{place}, {region_display_name}, {COUNTRY_NAME}",
            "format": "geojson",
            "polygon_geojson": 1,
            "limit": 5,
        },
        timeout=TimeoutConfig(connect=10, read=30),
    )
    if not isinstance(payload, dict):
        raise PolygonUnavailable(f"Unexpected boundary payload for {place}")
    return descriptors_from_geojson(payload, place)
