from pathlib import Path

import pytest

from malaysia_buildings.common.errors import ContractError
from malaysia_buildings.harvest.overpass_fetch import extract_elements, fetch_region_elements
from malaysia_buildings.regions.registry import RegionRegistry


class FakeHttpClient:
    def __init__(self, payload):
        self.payload = payload
        self.calls = []

    def post_form_json(self, url, *, source_type, data, headers=None, timeout=None):
        self.calls.append({"url": url, "source_type": source_type, "data": data, "timeout": timeout})
        return self.payload


def test_extract_elements_contract():
    assert extract_elements({"elements": []}) == []
    with pytest.raises(ContractError):
        extract_elements({"remark": "runtime error: Query timed out"})
    with pytest.raises(ContractError):
        extract_elements({"elements": {"a": 1}})
    with pytest.raises(ContractError):
        extract_elements(["not", "an", "object"])


def test_fetch_region_elements_posts_bbox_query_with_local_timeout():
    region = RegionRegistry.from_config_dir(Path("config")).lookup("penang")
    client = FakeHttpClient({"elements": [{"type": "node", "id": 1}]})

    elements = fetch_region_elements(region, client, endpoint="https://overpass.example/api")

    assert elements == [{"type": "node", "id": 1}]
    call = client.calls[0]
    assert call["url"] == "https://overpass.example/api"
    assert call["source_type"] == "overpass"
    assert "[maxsize:1073741824]" in call["data"]["data"]
    assert call["timeout"].read == 180
