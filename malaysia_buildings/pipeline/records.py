"""Turn raw Overpass elements into classified, deduplicated building records."""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from malaysia_buildings.classify.address import format_address
from malaysia_buildings.classify.categories import building_category
from malaysia_buildings.classify.names import building_name
from malaysia_buildings.classify.places import infer_area, infer_city, infer_district
from malaysia_buildings.common.constants import CHUNK_SIZE, DEDUP_DEGREES
from malaysia_buildings.common.errors import ContractError
from malaysia_buildings.common.geometry import is_usable_coordinate
from malaysia_buildings.common.logging import log_event
from malaysia_buildings.common.models import BuildingRecord, RawElement, Region
from malaysia_buildings.common.tags import PLACEHOLDER_VALUE, OsmTags
from malaysia_buildings.pipeline.exclusion import is_foreign, matching_zone

PLACEHOLDER_NAMES = {"", "building", PLACEHOLDER_VALUE}

SKIP_MISSING = "missing_center_or_tags"
SKIP_FOREIGN = "foreign_country"
SKIP_ZONE = "exclusion_zone"
SKIP_PLACEHOLDER = "placeholder_name"
SKIP_COORDINATES = "invalid_coordinates"
SKIP_DUPLICATE = "duplicate"


@dataclass(frozen=True)
class Classification:
    name: str
    category: str
    address: str
    city: str
    district: str
    area: str


@dataclass
class ProcessResult:
    records: list[BuildingRecord]
    raw_count: int
    skipped: dict[str, int] = field(default_factory=dict)

    @property
    def skipped_count(self) -> int:
        return sum(self.skipped.values())


def classify_tags(tags: OsmTags, region: Region) -> Classification:
    return Classification(
        name=building_name(tags),
        category=building_category(tags),
        address=format_address(tags),
        city=infer_city(tags, region),
        district=infer_district(tags, region),
        area=infer_area(tags, region),
    )


class NameProximityIndex:
    """Accepted coordinates per name, for the same-name-nearby duplicate check."""

    def __init__(self, tolerance: float = DEDUP_DEGREES) -> None:
        self.tolerance = tolerance
        self._points: dict[str, list[tuple[float, float]]] = defaultdict(list)

    def is_duplicate(self, name: str, lat: float, lon: float) -> bool:
        return any(
            abs(lat - seen_lat) < self.tolerance and abs(lon - seen_lon) < self.tolerance
            for seen_lat, seen_lon in self._points.get(name, ())
        )

    def add(self, name: str, lat: float, lon: float) -> None:
        self._points[name].append((lat, lon))


def _chunks(items: Sequence[dict], size: int) -> Iterable[Sequence[dict]]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


def process_elements(
    elements: Sequence[dict] | None,
    region: Region,
    *,
    chunk_size: int = CHUNK_SIZE,
    start_id: int = 1,
    logger: logging.Logger | None = None,
) -> ProcessResult:
    if elements is None:
        raise ContractError("No element array to process")
    if chunk_size < 1:
        raise ValueError("chunk_size must be positive")

    records: list[BuildingRecord] = []
    skipped: Counter[str] = Counter()
    seen = NameProximityIndex()
    next_id = start_id
    total_chunks = (len(elements) + chunk_size - 1) // chunk_size

    for chunk_number, chunk in enumerate(_chunks(elements, chunk_size), start=1):
        log_event(
            logger,
            f"processing chunk {chunk_number}/{total_chunks}",
            level=logging.DEBUG,
            stage="process",
            region=region.key,
            event="CHUNK",
            rows_in=len(chunk),
        )
        for payload in chunk:
            element = RawElement.from_payload(payload) if isinstance(payload, dict) else None
            if element is None or not element.has_center or not element.tags:
                skipped[SKIP_MISSING] += 1
                continue

            tags = element.tags
            if is_foreign(tags):
                skipped[SKIP_FOREIGN] += 1
                continue

            lat, lon = element.lat, element.lon
            if matching_zone(region, lat, lon) is not None:
                skipped[SKIP_ZONE] += 1
                continue

            classified = classify_tags(tags, region)
            if classified.name.strip().lower() in PLACEHOLDER_NAMES:
                skipped[SKIP_PLACEHOLDER] += 1
                continue

            if not is_usable_coordinate(lat, lon):
                skipped[SKIP_COORDINATES] += 1
                continue

            if seen.is_duplicate(classified.name, lat, lon):
                skipped[SKIP_DUPLICATE] += 1
                continue

            seen.add(classified.name, lat, lon)
            records.append(
                BuildingRecord(
                    id=next_id,
                    name=classified.name,
                    category=classified.category,
                    address=classified.address,
                    city=classified.city,
                    district=classified.district,
                    area=classified.area,
                    state=region.display_name,
                    latitude=lat,
                    longitude=lon,
                    source_tags=tags.to_dict(),
                )
            )
            next_id += 1

    result = ProcessResult(records=records, raw_count=len(elements), skipped=dict(sorted(skipped.items())))
    log_event(
        logger,
        f"processed {len(records)} buildings for {region.display_name}, skipped {result.skipped_count}",
        stage="process",
        region=region.key,
        event="PROCESS_END",
        status="ok",
        rows_in=len(elements),
        rows_out=len(records),
    )
    return result
