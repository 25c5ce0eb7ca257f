import json
import logging
import math

import pytest

from malaysia_buildings.common.geometry import (
    bounding_ring,
    close_ring,
    extract_element_point,
    is_usable_coordinate,
    safe_float,
    swap_lon_lat,
)
from malaysia_buildings.common.ids import generate_session_id
from malaysia_buildings.common.logging import JsonLineFormatter
from malaysia_buildings.common.tags import OsmTags
from malaysia_buildings.common.time_utils import parse_run_date
from malaysia_buildings.classify.rules import humanize


def test_extract_element_point_prefers_center():
    assert extract_element_point({"center": {"lat": 1.5, "lon": 103.7}, "lat": 9, "lon": 9}) == (1.5, 103.7)
    assert extract_element_point({"lat": "2.0", "lon": 102.5}) == (2.0, 102.5)
    assert extract_element_point({"lat": 1.0}) == (None, None)
    assert extract_element_point({}) == (None, None)


def test_coordinate_helpers():
    assert safe_float("x") is None
    assert safe_float(True) is None
    assert is_usable_coordinate(1.5, 103.7)
    assert not is_usable_coordinate(0.0, 103.7)
    assert not is_usable_coordinate(math.nan, 103.7)
    assert not is_usable_coordinate(None, 103.7)


def test_ring_helpers():
    assert close_ring([(1, 1), (1, 2), (2, 2)]) == [(1, 1), (1, 2), (2, 2), (1, 1)]
    assert close_ring([(1, 1), (1, 2), (1, 1)]) == [(1, 1), (1, 2), (1, 1)]
    assert swap_lon_lat([[103.2, 1.9, 0.0]]) == [(1.9, 103.2)]
    assert bounding_ring([]) is None
    assert len(bounding_ring([(1.0, 2.0)])) == 5


def test_osm_tags_trims_and_ignores_placeholder():
    tags = OsmTags({"name": "  Wisma  ", "building": "yes", "level": None, "height": 12})
    assert tags.name == "Wisma"
    assert tags.meaningful("building") is None
    assert tags.value("building") == "yes"
    assert tags["height"] == "12"
    assert "level" not in tags


def test_humanize():
    assert humanize("fast_food") == "Fast Food"
    assert humanize("place_of_worship") == "Place Of Worship"


def test_generate_session_id_prefix():
    assert generate_session_id().startswith("session-")


def test_parse_run_date_defaults_and_iso():
    assert parse_run_date("2026-02-17") == "2026-02-17"
    assert len(parse_run_date(None)) == 10
    with pytest.raises(ValueError):
        parse_run_date("17/02/2026")


def test_json_line_formatter_emits_schema_fields():
    record = logging.LogRecord("malaysia_buildings", logging.INFO, __file__, 1, "hello", None, None)
    record.stage = "fetch"
    record.rows_out = 3

    payload = json.loads(JsonLineFormatter().format(record))

    assert payload["message"] == "hello"
    assert payload["stage"] == "fetch"
    assert payload["rows_out"] == 3
    assert payload["error_code"] is None
    assert "timestamp" in payload
