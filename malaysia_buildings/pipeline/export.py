"""Spreadsheet-style export of selected building records."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable

from openpyxl import Workbook

from malaysia_buildings.common.fs import ensure_dir, write_csv
from malaysia_buildings.common.models import BuildingRecord

EXPORT_HEADERS = [
    "State",
    "Place Name",
    "District",
    "Building",
    "Address",
    "Category",
    "Latitude",
    "Longitude",
    "Area",
]

EXPORT_SHEET_TITLE = "Malaysia Buildings"
EXPORT_FORMATS = ("csv", "xlsx")

_WHITESPACE_RE = re.compile(r"\s+")


def to_export_row(record: BuildingRecord) -> dict:
    return {
        "State": record.state,
        "Place Name": record.city,
        "District": record.district,
        "Building": record.name,
        "Address": record.address,
        "Category": record.category,
        "Latitude": record.latitude,
        "Longitude": record.longitude,
        "Area": record.area,
    }


def export_filename(state_name: str, run_date: str, extension: str = "csv") -> str:
    slug = _WHITESPACE_RE.sub("_", state_name.strip()).lower() or "all"
    return f"malaysia_buildings_{slug}_{run_date}.{extension}"


def write_export_csv(out_path: Path, rows: Iterable[dict]) -> Path:
    return write_csv(out_path, EXPORT_HEADERS, rows)


def write_export_xlsx(out_path: Path, rows: Iterable[dict], sheet_title: str = EXPORT_SHEET_TITLE) -> Path:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = sheet_title
    sheet.append(EXPORT_HEADERS)
    for row in rows:
        sheet.append([row.get(header) for header in EXPORT_HEADERS])
    ensure_dir(out_path.parent)
    workbook.save(out_path)
    return out_path


def write_export(out_path: Path, rows: Iterable[dict], export_format: str = "csv") -> Path:
    if export_format == "xlsx":
        return write_export_xlsx(out_path, rows)
    if export_format == "csv":
        return write_export_csv(out_path, rows)
    raise ValueError(f"Unsupported export format: {export_format}")
