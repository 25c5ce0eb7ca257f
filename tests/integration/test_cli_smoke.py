from __future__ import annotations

import csv
import json
from pathlib import Path

import pytest
from openpyxl import load_workbook

from malaysia_buildings.cli import parse_args, run_command

FIXTURE = Path("tests/fixtures/overpass/johor_sample.json")


class FakeHttpClient:
    def __init__(self, overpass_payload):
        self.overpass_payload = overpass_payload

    def post_form_json(self, url, *, source_type, data, headers=None, timeout=None):
        return self.overpass_payload

    def get_json(self, url, *, source_type, params=None, headers=None, timeout=None):
        return {"type": "FeatureCollection", "features": []}

    def close(self):
        pass


def _args(command: str, data_dir: Path, *extra: str):
    return parse_args(
        [
            command,
            "--config-dir",
            "config",
            "--data-dir",
            str(data_dir),
            "--run-date",
            "2026-02-17",
            "--session-id",
            "session-test",
            *extra,
        ]
    )


@pytest.mark.integration
def test_cli_fetch_export_polygon_generate_expected_artifacts(tmp_path: Path):
    data_dir = tmp_path / "data"
    client = FakeHttpClient(json.loads(FIXTURE.read_text(encoding="utf-8")))

    assert run_command(_args("fetch", data_dir, "--region", "johor"), http_client=client) == 0
    assert (data_dir / "records" / "johor_records.json").exists()
    assert (data_dir / "out" / "johor_map.geojson").exists()
    summary = json.loads((data_dir / "out" / "reports" / "johor_summary.json").read_text(encoding="utf-8"))
    assert summary["total_buildings"] == 3
    assert (data_dir / "run_meta" / "session-test.log.jsonl").exists()

    assert run_command(_args("export", data_dir, "--region", "johor", "--category", "Retail Store"), http_client=client) == 0
    export_path = data_dir / "out" / "malaysia_buildings_johor_2026-02-17.csv"
    with export_path.open(encoding="utf-8", newline="") as f:
        rows = list(csv.DictReader(f))
    assert [row["Building"] for row in rows] == ["Econsave Muar"]

    assert run_command(_args("polygon", data_dir, "--region", "johor", "--place", "Muar"), http_client=client) == 0
    polygon = json.loads((data_dir / "out" / "polygons" / "johor_muar.json").read_text(encoding="utf-8"))
    assert polygon["polygons"][0]["source_kind"] == "bounding-box"
    stored = json.loads((data_dir / "records" / "johor_records.json").read_text(encoding="utf-8"))
    assert [r["polygon"] is not None for r in stored["records"]] == [False, True, False]


@pytest.mark.integration
def test_cli_export_by_ids(tmp_path: Path):
    data_dir = tmp_path / "data"
    client = FakeHttpClient(json.loads(FIXTURE.read_text(encoding="utf-8")))
    run_command(_args("fetch", data_dir, "--region", "johor"), http_client=client)

    assert run_command(_args("export", data_dir, "--region", "johor", "--ids", "1,3"), http_client=client) == 0
    with (data_dir / "out" / "malaysia_buildings_johor_2026-02-17.csv").open(encoding="utf-8", newline="") as f:
        rows = list(csv.DictReader(f))
    assert [row["Building"] for row in rows] == ["Restoran Kopi Jaya", "Muslim Place of Worship"]


@pytest.mark.integration
def test_cli_export_xlsx(tmp_path: Path):
    data_dir = tmp_path / "data"
    client = FakeHttpClient(json.loads(FIXTURE.read_text(encoding="utf-8")))
    run_command(_args("fetch", data_dir, "--region", "johor"), http_client=client)

    assert run_command(_args("export", data_dir, "--region", "johor", "--format", "xlsx"), http_client=client) == 0

    workbook = load_workbook(data_dir / "out" / "malaysia_buildings_johor_2026-02-17.xlsx")
    rows = list(workbook["Malaysia Buildings"].iter_rows(values_only=True))
    assert rows[0][0] == "State"
    assert len(rows) == 4
    assert not (data_dir / "out" / "malaysia_buildings_johor_2026-02-17.csv").exists()


@pytest.mark.integration
def test_cli_failures_map_to_hard_fail(tmp_path: Path):
    data_dir = tmp_path / "data"
    empty_client = FakeHttpClient({"elements": []})

    assert run_command(_args("fetch", data_dir, "--region", "johor"), http_client=empty_client) == 20
    assert run_command(_args("fetch", data_dir, "--region", "sabah"), http_client=empty_client) == 20
    assert run_command(_args("export", data_dir, "--region", "johor"), http_client=empty_client) == 20
    assert run_command(_args("fetch", data_dir, "--region", "johor"), http_client=FakeHttpClient({"remark": "x"})) == 20


@pytest.mark.integration
def test_cli_polygon_without_records_for_place_is_partial(tmp_path: Path):
    data_dir = tmp_path / "data"
    client = FakeHttpClient(json.loads(FIXTURE.read_text(encoding="utf-8")))
    run_command(_args("fetch", data_dir, "--region", "johor"), http_client=client)

    exit_code = run_command(_args("polygon", data_dir, "--region", "johor", "--place", "Mersing", "--offline"), http_client=client)

    assert exit_code == 10
    polygon = json.loads((data_dir / "out" / "polygons" / "johor_mersing.json").read_text(encoding="utf-8"))
    assert polygon["polygons"] == []


@pytest.mark.integration
def test_cli_regions_and_query_print_to_stdout(tmp_path: Path, capsys):
    data_dir = tmp_path / "data"

    assert run_command(_args("regions", data_dir)) == 0
    listed = capsys.readouterr().out
    assert "johor\tJohor\tarea 3602939653" in listed
    assert "penang\tPenang\tbbox" in listed

    assert run_command(_args("query", data_dir, "--region", "malacca")) == 0
    assert "area(3602939673)->.searchArea;" in capsys.readouterr().out
