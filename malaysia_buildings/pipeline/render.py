"""GeoJSON hand-off for map rendering."""

from __future__ import annotations

from typing import Iterable, Sequence

from malaysia_buildings.classify.categories import category_icon
from malaysia_buildings.common.constants import MAP_MARKER_LIMIT
from malaysia_buildings.common.models import BuildingRecord, PolygonDescriptor


def record_feature(record: BuildingRecord) -> dict:
    return {
        "type": "Feature",
        "id": record.id,
        "geometry": {"type": "Point", "coordinates": [record.longitude, record.latitude]},
        "properties": {
            "name": record.name,
            "category": record.category,
            "icon": category_icon(record.category),
            "address": record.address,
            "place": record.city,
            "district": record.district,
            "state": record.state,
        },
    }


def polygon_feature(descriptor: PolygonDescriptor) -> dict:
    return {
        "type": "Feature",
        "geometry": {
            "type": "Polygon",
            "coordinates": [[[lon, lat] for lat, lon in descriptor.ring]],
        },
        "properties": {"label": descriptor.label, "source_kind": descriptor.source_kind},
    }


def to_feature_collection(
    records: Sequence[BuildingRecord],
    polygons: Iterable[PolygonDescriptor] = (),
    *,
    limit: int = MAP_MARKER_LIMIT,
) -> dict:
    features = [record_feature(record) for record in records[:limit]]
    features.extend(polygon_feature(descriptor) for descriptor in polygons)
    return {
        "type": "FeatureCollection",
        "features": features,
        "properties": {
            "total_records": len(records),
            "rendered_records": min(len(records), limit),
            "truncated": len(records) > limit,
        },
    }
