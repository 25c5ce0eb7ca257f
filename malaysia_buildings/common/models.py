"""Data models used across the pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from malaysia_buildings.common.geometry import LatLon, extract_element_point, safe_float
from malaysia_buildings.common.tags import OsmTags


@dataclass(frozen=True)
class BoundingBox:
    south: float
    west: float
    north: float
    east: float

    def contains(self, lat: float, lon: float) -> bool:
        return self.south <= lat <= self.north and self.west <= lon <= self.east

    def overpass_clause(self) -> str:
        return f"{self.south},{self.west},{self.north},{self.east}"

    @classmethod
    def from_dict(cls, payload: dict) -> "BoundingBox":
        return cls(
            south=float(payload["south"]),
            west=float(payload["west"]),
            north=float(payload["north"]),
            east=float(payload["east"]),
        )


@dataclass(frozen=True)
class ExclusionZone:
    label: str
    kind: str
    box: BoundingBox | None = None
    latitude: float | None = None

    def excludes(self, lat: float, lon: float) -> bool:
        if self.kind == "inside_box":
            return self.box is not None and self.box.contains(lat, lon)
        if self.kind == "outside_box":
            return self.box is not None and not self.box.contains(lat, lon)
        if self.kind == "south_of":
            return self.latitude is not None and lat < self.latitude
        if self.kind == "north_of":
            return self.latitude is not None and lat > self.latitude
        return False


@dataclass(frozen=True)
class Locality:
    name: str
    keywords: tuple[str, ...]


@dataclass(frozen=True)
class LocalityTable:
    default_city: str
    default_district: str
    default_area: str
    cities: tuple[Locality, ...] = ()
    districts: tuple[Locality, ...] = ()
    areas: tuple[Locality, ...] = ()


@dataclass(frozen=True)
class Region:
    key: str
    display_name: str
    localities: LocalityTable
    area_id: int | None = None
    bbox: BoundingBox | None = None
    timeout_seconds: int | None = None
    exclusions: tuple[ExclusionZone, ...] = ()

    @property
    def boundary(self) -> int | BoundingBox | None:
        if self.area_id is not None:
            return self.area_id
        return self.bbox


@dataclass(frozen=True)
class RawElement:
    type: str
    id: int | None
    lat: float | None
    lon: float | None
    tags: OsmTags
    nodes: tuple[int, ...] = ()
    members: tuple[dict, ...] = ()

    @property
    def has_center(self) -> bool:
        return self.lat is not None and self.lon is not None

    @classmethod
    def from_payload(cls, element: dict[str, Any]) -> "RawElement":
        lat, lon = extract_element_point(element)
        raw_id = element.get("id")
        return cls(
            type=str(element.get("type") or "node"),
            id=int(raw_id) if isinstance(raw_id, int) else None,
            lat=lat,
            lon=lon,
            tags=OsmTags(element.get("tags") if isinstance(element.get("tags"), dict) else None),
            nodes=tuple(n for n in element.get("nodes") or () if isinstance(n, int)),
            members=tuple(m for m in element.get("members") or () if isinstance(m, dict)),
        )


@dataclass
class BuildingRecord:
    id: int
    name: str
    category: str
    address: str
    city: str
    district: str
    area: str
    state: str
    latitude: float
    longitude: float
    source_tags: dict[str, str] = field(default_factory=dict)
    polygon: list["PolygonDescriptor"] | None = None

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        if self.polygon is None:
            payload["polygon"] = None
        else:
            payload["polygon"] = [descriptor.to_dict() for descriptor in self.polygon]
        return payload

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "BuildingRecord":
        latitude = safe_float(payload.get("latitude"))
        longitude = safe_float(payload.get("longitude"))
        polygon = payload.get("polygon")
        return cls(
            id=int(payload["id"]),
            name=str(payload["name"]),
            category=str(payload["category"]),
            address=str(payload["address"]),
            city=str(payload["city"]),
            district=str(payload["district"]),
            area=str(payload["area"]),
            state=str(payload["state"]),
            latitude=latitude if latitude is not None else 0.0,
            longitude=longitude if longitude is not None else 0.0,
            source_tags=dict(payload.get("source_tags") or {}),
            polygon=[PolygonDescriptor.from_dict(item) for item in polygon] if polygon else None,
        )


@dataclass(frozen=True)
class FilterState:
    region: str | None = None
    place: str | None = None
    category: str | None = None
    search: str | None = None


class SourceKind:
    NAMED_LOOKUP = "named-lookup"
    ASSEMBLED_BOUNDARY = "assembled-boundary"
    KNOWN_LITERAL = "known-literal"
    BOUNDING_BOX = "bounding-box"


@dataclass(frozen=True)
class PolygonDescriptor:
    label: str
    ring: tuple[LatLon, ...]
    source_kind: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "ring": [[lat, lon] for lat, lon in self.ring],
            "source_kind": self.source_kind,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "PolygonDescriptor":
        return cls(
            label=str(payload["label"]),
            ring=tuple((float(lat), float(lon)) for lat, lon in payload["ring"]),
            source_kind=str(payload["source_kind"]),
        )
