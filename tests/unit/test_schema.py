import copy

import pytest

from malaysia_buildings.common.errors import ConfigError
from malaysia_buildings.common.schema import (
    validate_exclusion_config,
    validate_known_polygons_config,
    validate_regions_config,
)

BASE_REGIONS = {
    "regions": {
        "perlis": {
            "name": "Perlis",
            "bbox": {"south": 6.3, "west": 100.1, "north": 6.75, "east": 100.35},
            "localities": {
                "default_city": "Kangar",
                "default_district": "Perlis",
                "cities": [{"name": "Arau", "keywords": ["arau"]}],
            },
        }
    }
}


def test_validate_regions_config_accepts_valid_shape():
    validated = validate_regions_config(copy.deepcopy(BASE_REGIONS))
    assert validated["regions"]["perlis"]["name"] == "Perlis"


def test_validate_regions_config_rejects_unknown_key_by_default():
    bad = copy.deepcopy(BASE_REGIONS)
    bad["regions"]["perlis"]["unexpected"] = True
    with pytest.raises(ConfigError):
        validate_regions_config(bad)
    validate_regions_config(bad, allow_unknown=True)


def test_validate_regions_config_requires_a_boundary():
    bad = copy.deepcopy(BASE_REGIONS)
    del bad["regions"]["perlis"]["bbox"]
    with pytest.raises(ConfigError):
        validate_regions_config(bad)


def test_validate_regions_config_rejects_inverted_bbox_and_empty_keywords():
    inverted = copy.deepcopy(BASE_REGIONS)
    inverted["regions"]["perlis"]["bbox"]["south"] = 7.0
    with pytest.raises(ConfigError):
        validate_regions_config(inverted)

    empty = copy.deepcopy(BASE_REGIONS)
    empty["regions"]["perlis"]["localities"]["cities"][0]["keywords"] = []
    with pytest.raises(ConfigError):
        validate_regions_config(empty)


def test_validate_exclusion_config():
    ok = {"zones": {"perlis": [{"label": "Thai border", "kind": "north_of", "latitude": 6.7}]}}
    assert validate_exclusion_config(ok, region_keys={"perlis"}) is ok

    with pytest.raises(ConfigError):
        validate_exclusion_config(ok, region_keys={"johor"})
    with pytest.raises(ConfigError):
        validate_exclusion_config({"zones": {"perlis": [{"label": "x", "kind": "sideways"}]}}, region_keys={"perlis"})
    with pytest.raises(ConfigError):
        validate_exclusion_config({"zones": {"perlis": [{"label": "x", "kind": "inside_box"}]}}, region_keys={"perlis"})


def test_validate_known_polygons_config():
    validate_known_polygons_config({"places": {"Kangar": [{"ring": [[6.4, 100.1], [6.4, 100.2], [6.5, 100.2]]}]}})
    with pytest.raises(ConfigError):
        validate_known_polygons_config({"places": {"Kangar": [{"ring": [[6.4, 100.1]]}]}})
