from __future__ import annotations

import json
from pathlib import Path

import pytest

from malaysia_buildings.pipeline.records import process_elements
from malaysia_buildings.regions.registry import RegionRegistry

FIXTURE = Path("tests/fixtures/overpass/johor_sample.json")


def _elements():
    return json.loads(FIXTURE.read_text(encoding="utf-8"))["elements"]


def _snapshot(result) -> str:
    return json.dumps(
        {"records": [record.to_dict() for record in result.records], "skipped": result.skipped},
        sort_keys=True,
    )


@pytest.mark.regression
@pytest.mark.parametrize("chunk_size", [1, 3, 7, 1000])
def test_processing_output_does_not_depend_on_chunk_size(chunk_size):
    region = RegionRegistry.from_config_dir(Path("config")).lookup("johor")

    baseline = process_elements(_elements(), region)
    chunked = process_elements(_elements(), region, chunk_size=chunk_size)

    assert _snapshot(chunked) == _snapshot(baseline)


@pytest.mark.regression
def test_repeated_runs_are_identical():
    region = RegionRegistry.from_config_dir(Path("config")).lookup("johor")
    snapshots = {_snapshot(process_elements(_elements(), region)) for _ in range(3)}
    assert len(snapshots) == 1


@pytest.mark.regression
def test_duplicate_split_across_chunk_boundary_is_still_dropped():
    region = RegionRegistry.from_config_dir(Path("config")).lookup("perak")
    elements = [
        {"type": "node", "id": 1, "lat": 4.5975, "lon": 101.0901, "tags": {"amenity": "bank", "name": "Maybank"}},
        {"type": "node", "id": 2, "lat": 4.5, "lon": 101.0, "tags": {"amenity": "cafe", "name": "Kedai Kopi"}},
        {"type": "node", "id": 3, "lat": 4.5978, "lon": 101.0904, "tags": {"amenity": "bank", "name": "Maybank"}},
    ]

    result = process_elements(elements, region, chunk_size=2)

    assert [record.name for record in result.records] == ["Maybank", "Kedai Kopi"]
    assert result.skipped == {"duplicate": 1}
