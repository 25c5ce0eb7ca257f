import csv
import json
from pathlib import Path

import pytest
from openpyxl import load_workbook

from malaysia_buildings.common.models import BuildingRecord, PolygonDescriptor, SourceKind
from malaysia_buildings.pipeline.export import (
    EXPORT_HEADERS,
    export_filename,
    to_export_row,
    write_export,
    write_export_csv,
    write_export_xlsx,
)
from malaysia_buildings.pipeline.render import to_feature_collection
from malaysia_buildings.pipeline.reports import build_fetch_summary, write_fetch_summary


def _record(record_id, category="Healthcare", city="Ipoh"):
    return BuildingRecord(
        id=record_id,
        name=f"Klinik {record_id}",
        category=category,
        address="Jalan Sultan Idris Shah, Ipoh",
        city=city,
        district="Kinta",
        area="Perak",
        state="Perak",
        latitude=4.5972,
        longitude=101.0901,
    )


def test_export_row_and_filename():
    row = to_export_row(_record(1))
    assert list(row) == EXPORT_HEADERS
    assert row["Place Name"] == "Ipoh"
    assert row["Building"] == "Klinik 1"
    assert export_filename("Negeri Sembilan", "2026-02-17") == "malaysia_buildings_negeri_sembilan_2026-02-17.csv"
    assert export_filename("Johor", "2026-02-17", extension="xlsx") == "malaysia_buildings_johor_2026-02-17.xlsx"


def test_write_export_csv(tmp_path: Path):
    out_path = write_export_csv(tmp_path / "out" / "x.csv", [to_export_row(_record(1)), to_export_row(_record(2))])

    with out_path.open(encoding="utf-8", newline="") as f:
        rows = list(csv.DictReader(f))

    assert len(rows) == 2
    assert rows[0]["Latitude"] == "4.5972"
    assert rows[1]["Address"] == "Jalan Sultan Idris Shah, Ipoh"


def test_write_export_xlsx_reads_back(tmp_path: Path):
    out_path = write_export_xlsx(tmp_path / "out" / "x.xlsx", [to_export_row(_record(1)), to_export_row(_record(2, city="Taiping"))])

    workbook = load_workbook(out_path)
    assert workbook.sheetnames == ["Malaysia Buildings"]
    rows = list(workbook["Malaysia Buildings"].iter_rows(values_only=True))

    assert list(rows[0]) == EXPORT_HEADERS
    assert len(rows) == 3
    assert rows[1][3] == "Klinik 1"
    assert rows[2][1] == "Taiping"
    assert rows[1][6] == 4.5972


def test_write_export_rejects_unknown_format(tmp_path: Path):
    with pytest.raises(ValueError):
        write_export(tmp_path / "x.ods", [], "ods")
    assert not (tmp_path / "x.ods").exists()


def test_feature_collection_truncates_markers_and_appends_polygons():
    records = [_record(idx) for idx in range(1, 6)]
    polygon = PolygonDescriptor("Ipoh", ((4.5, 101.0), (4.5, 101.2), (4.7, 101.2), (4.5, 101.0)), SourceKind.BOUNDING_BOX)

    collection = to_feature_collection(records, [polygon], limit=3)

    assert [f["geometry"]["type"] for f in collection["features"]] == ["Point"] * 3 + ["Polygon"]
    assert collection["features"][0]["geometry"]["coordinates"] == [101.0901, 4.5972]
    assert collection["features"][-1]["geometry"]["coordinates"][0][0] == [101.0, 4.5]
    assert collection["properties"] == {"total_records": 5, "rendered_records": 3, "truncated": True}


def test_fetch_summary_counts_and_top_categories(tmp_path: Path):
    records = [_record(1), _record(2), _record(3, category="Hotel", city="Taiping")]

    summary = build_fetch_summary("Perak", records, {"duplicate": 2})

    assert summary["total_buildings"] == 3
    assert summary["cities"] == 2
    assert summary["top_categories"][0] == {"category": "Healthcare", "count": 2}
    assert summary["coordinate_range"]["min_lat"] == 4.597
    assert summary["skipped"] == {"duplicate": 2}

    path = write_fetch_summary(tmp_path, "perak", summary)
    assert json.loads(path.read_text(encoding="utf-8"))["state"] == "Perak"
    assert build_fetch_summary("Perak", [])["coordinate_range"] is None
