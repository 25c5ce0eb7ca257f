"""Fetch summary reporting."""

from __future__ import annotations

from collections import Counter
from pathlib import Path
from typing import Sequence

from malaysia_buildings.common.fs import write_json
from malaysia_buildings.common.models import BuildingRecord

TOP_CATEGORY_COUNT = 5


def _coordinate_range(records: Sequence[BuildingRecord]) -> dict | None:
    if not records:
        return None
    lats = [record.latitude for record in records]
    lons = [record.longitude for record in records]
    return {
        "min_lat": round(min(lats), 3),
        "max_lat": round(max(lats), 3),
        "min_lon": round(min(lons), 3),
        "max_lon": round(max(lons), 3),
    }


def build_fetch_summary(state_name: str, records: Sequence[BuildingRecord], skipped: dict | None = None) -> dict:
    categories = Counter(record.category for record in records)
    # Ties keep alphabetical order so reports are stable.
    top = sorted(categories.items(), key=lambda item: (-item[1], item[0]))[:TOP_CATEGORY_COUNT]
    return {
        "state": state_name,
        "total_buildings": len(records),
        "areas": len({record.area for record in records}),
        "districts": len({record.district for record in records}),
        "cities": len({record.city for record in records}),
        "categories": len(categories),
        "top_categories": [{"category": name, "count": count} for name, count in top],
        "coordinate_range": _coordinate_range(records),
        "skipped": dict(skipped or {}),
    }


def write_fetch_summary(data_dir: Path, region_key: str, summary: dict) -> Path:
    out_path = data_dir / "out" / "reports" / f"{region_key}_summary.json"
    write_json(out_path, summary)
    return out_path
