"""Overpass QL query construction for state fetches and boundary relations."""

from __future__ import annotations

from typing import Iterable

from malaysia_buildings.common.constants import (
    AREA_QUERY_TIMEOUT,
    BBOX_QUERY_MAXSIZE,
    BBOX_QUERY_TIMEOUT,
    QUERY_TAG_KEYS,
)
from malaysia_buildings.common.errors import ConfigError
from malaysia_buildings.common.models import Region

RELATION_AREA_OFFSET = 3600000000


def to_area_id(osm_id: int) -> int:
    return osm_id if osm_id >= RELATION_AREA_OFFSET else osm_id + RELATION_AREA_OFFSET


def escape_ql_string(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _tag_filters(tags: Iterable[str], area_clause: str) -> str:
    return "".join(f'  nwr["{tag}"]({area_clause});\n' for tag in tags)


def query_timeout(region: Region, override: int | None = None) -> int:
    if override is not None:
        return int(override)
    if region.timeout_seconds is not None:
        return region.timeout_seconds
    return AREA_QUERY_TIMEOUT if region.area_id is not None else BBOX_QUERY_TIMEOUT


def build_overpass_query(
    region: Region,
    *,
    timeout_seconds: int | None = None,
    tag_keys: Iterable[str] = QUERY_TAG_KEYS,
) -> str:
    timeout = query_timeout(region, timeout_seconds)
    tags = list(tag_keys)

    if region.area_id is not None:
        return (
            f"[out:json][timeout:{timeout}];\n"
            f"area({to_area_id(region.area_id)})->.searchArea;\n"
            "(\n"
            f"{_tag_filters(tags, 'area.searchArea')}"
            ");\n"
            "out center tags;"
        )

    if region.bbox is not None:
        return (
            f"[out:json][timeout:{timeout}][maxsize:{BBOX_QUERY_MAXSIZE}];\n"
            "(\n"
            f"{_tag_filters(tags, region.bbox.overpass_clause())}"
            ");\n"
            "out center tags;"
        )

    raise ConfigError(f"Region {region.key} has neither an area id nor a bounding box")


def build_boundary_relation_query(name: str, region: Region | None = None, *, timeout_seconds: int = 60) -> str:
    selector = f'relation["boundary"="administrative"]["name"="{escape_ql_string(name)}"]'
    if region is not None and region.area_id is not None:
        return (
            f"[out:json][timeout:{timeout_seconds}];\n"
            f"area({to_area_id(region.area_id)})->.searchArea;\n"
            f"{selector}(area.searchArea);\n"
            "out body;\n"
            ">;\n"
            "out skel qt;"
        )
    scope = f"({region.bbox.overpass_clause()})" if region is not None and region.bbox is not None else ""
    return (
        f"[out:json][timeout:{timeout_seconds}];\n"
        f"{selector}{scope};\n"
        "out body;\n"
        ">;\n"
        "out skel qt;"
    )
