import json
import threading
from pathlib import Path

import pytest

from malaysia_buildings.common.errors import EmptyResultError, EmptySelection, FetchInProgress, UnknownRegion
from malaysia_buildings.common.models import SourceKind
from malaysia_buildings.pipeline.session import BuildingSession
from malaysia_buildings.polygons.resolver import PolygonResolver
from malaysia_buildings.regions.registry import RegionRegistry

FIXTURE = Path("tests/fixtures/overpass/johor_sample.json")


class FakeOverpassClient:
    def __init__(self, payload):
        self.payload = payload
        self.requests: list[dict] = []

    def post_form_json(self, url, *, source_type, data, headers=None, timeout=None):
        self.requests.append({"url": url, "source_type": source_type, "data": data, "timeout": timeout})
        return self.payload

    def get_json(self, url, *, source_type, params=None, headers=None, timeout=None):
        return {"features": []}

    def close(self):
        pass


def _session(payload=None):
    if payload is None:
        payload = json.loads(FIXTURE.read_text(encoding="utf-8"))
    client = FakeOverpassClient(payload)
    registry = RegionRegistry.from_config_dir(Path("config"))
    return BuildingSession(registry, http_client=client, resolver=PolygonResolver(use_network=False)), client


def test_fetch_loads_records_and_scopes_filter_to_state():
    session, client = _session()

    result = session.fetch("johor")

    assert len(result.records) == 3
    assert session.records == result.records
    assert session.filter.region == "Johor"
    assert len(session.filtered) == 3
    assert client.requests[0]["source_type"] == "overpass"
    assert "area(3602939653)" in client.requests[0]["data"]["data"]
    assert client.requests[0]["timeout"].read == 960


def test_fetch_requires_known_region():
    session, client = _session()
    with pytest.raises(UnknownRegion):
        session.fetch(None)
    with pytest.raises(UnknownRegion):
        session.fetch("sabah")
    assert client.requests == []


def test_empty_fetch_raises_and_keeps_previous_records():
    session, _client = _session()
    session.fetch("johor")
    previous = list(session.records)

    session.http_client.payload = {"elements": []}
    with pytest.raises(EmptyResultError):
        session.fetch("johor")

    assert session.records == previous


def test_concurrent_fetch_is_rejected():
    session, _client = _session()
    entered = threading.Event()
    release = threading.Event()
    original = session.http_client.post_form_json

    def slow_post(*args, **kwargs):
        entered.set()
        release.wait(5)
        return original(*args, **kwargs)

    session.http_client.post_form_json = slow_post
    worker = threading.Thread(target=session.fetch, args=("johor",))
    worker.start()
    try:
        assert entered.wait(5)
        assert session.busy
        with pytest.raises(FetchInProgress):
            session.fetch("johor")
    finally:
        release.set()
        worker.join(5)
    assert not session.busy
    assert len(session.records) == 3


def test_filter_selection_and_export():
    session, _client = _session()
    session.fetch("johor")

    with pytest.raises(EmptySelection):
        session.export_rows()

    session.apply_filter(category="Food & Beverage")
    assert [record.name for record in session.filtered] == ["Restoran Kopi Jaya"]

    session.select_all()
    rows = session.export_rows()
    assert rows[0]["Building"] == "Restoran Kopi Jaya"
    assert rows[0]["State"] == "Johor"

    session.apply_filter()
    assert len(session.selection) == 0


def test_options_and_summary():
    session, _client = _session()
    session.fetch("johor")

    assert session.place_options() == {"Johor Bahru": 1, "Muar": 1, "Skudai": 1}
    assert session.category_options()["Retail Store"] == 1

    summary = session.summary()
    assert summary["state"] == "Johor"
    assert summary["total_buildings"] == 3
    assert summary["skipped"]["foreign_country"] == 2


def test_highlight_attaches_polygon_to_place_records():
    session, _client = _session()
    session.fetch("johor")

    descriptors = session.highlight("Muar")

    assert descriptors[0].source_kind == SourceKind.BOUNDING_BOX
    muar = [record for record in session.records if record.city == "Muar"]
    assert muar[0].polygon == descriptors
    assert all(record.polygon is None for record in session.records if record.city != "Muar")


def test_change_region_resets_state():
    session, _client = _session()
    session.fetch("johor")
    session.select_all()

    session.change_region("penang")

    assert session.records == []
    assert session.filter.region == "Penang"
    assert len(session.selection) == 0


def test_change_region_to_unknown_key_keeps_state():
    session, _client = _session()
    session.fetch("johor")

    with pytest.raises(UnknownRegion):
        session.change_region("bogus")

    assert session.region.key == "johor"
    assert len(session.records) == 3
    assert session.filter.region == "Johor"
