"""Geometry helpers."""

from __future__ import annotations

import math
from typing import Any, Iterable, Sequence

LatLon = tuple[float, float]


def safe_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def is_usable_coordinate(lat: float | None, lon: float | None) -> bool:
    if lat is None or lon is None:
        return False
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return False
    return lat != 0 and lon != 0


def extract_element_point(element: dict[str, Any]) -> tuple[float | None, float | None]:
    """Center of an Overpass element; ways and relations carry ``center``, nodes bare lat/lon."""
    center = element.get("center") or {}
    lat = safe_float(center.get("lat"))
    lon = safe_float(center.get("lon"))
    if lat is None or lon is None:
        lat = safe_float(element.get("lat"))
        lon = safe_float(element.get("lon"))
    if lat is None or lon is None:
        return None, None
    return lat, lon


def close_ring(points: Sequence[LatLon]) -> list[LatLon]:
    ring = list(points)
    if ring and ring[0] != ring[-1]:
        ring.append(ring[0])
    return ring


def swap_lon_lat(coordinates: Iterable[Sequence[float]]) -> list[LatLon]:
    # GeoJSON positions are (lon, lat[, alt]).
    return [(float(position[1]), float(position[0])) for position in coordinates]


def bounding_ring(points: Iterable[LatLon]) -> list[LatLon] | None:
    lats: list[float] = []
    lons: list[float] = []
    for lat, lon in points:
        lats.append(lat)
        lons.append(lon)
    if not lats:
        return None
    south, north = min(lats), max(lats)
    west, east = min(lons), max(lons)
    # Always five points, even when the corners coincide.
    return [(south, west), (south, east), (north, east), (north, west), (south, west)]
