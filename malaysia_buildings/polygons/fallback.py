"""Rectangle around the loaded records of a place."""

from __future__ import annotations

from typing import Iterable

from malaysia_buildings.common.errors import PolygonUnavailable
from malaysia_buildings.common.geometry import bounding_ring
from malaysia_buildings.common.models import BuildingRecord, PolygonDescriptor, SourceKind


def records_in_place(place: str, records: Iterable[BuildingRecord]) -> list[BuildingRecord]:
    return [record for record in records if place in (record.city, record.district, record.area)]


def bounding_box_polygon(place: str, records: Iterable[BuildingRecord]) -> PolygonDescriptor:
    members = records_in_place(place, records)
    ring = bounding_ring((record.latitude, record.longitude) for record in members)
    if ring is None:
        raise PolygonUnavailable(f"No loaded records for {place}")
    return PolygonDescriptor(label=place, ring=tuple(ring), source_kind=SourceKind.BOUNDING_BOX)
