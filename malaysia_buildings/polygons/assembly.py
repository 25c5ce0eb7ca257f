"""Boundary assembly from an Overpass administrative relation.

Member ways are stitched end to end through an index of their endpoint
node ids. A way may have to be reversed to continue the ring. When no
unused way touches the open end, the ring is closed as-is and any ways
left over start another ring. Broken relations therefore give partial
rings rather than errors.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Sequence

from malaysia_buildings.common.constants import OVERPASS_ENDPOINT
from malaysia_buildings.common.errors import PolygonUnavailable
from malaysia_buildings.common.geometry import LatLon, safe_float
from malaysia_buildings.common.http import HttpClient, TimeoutConfig
from malaysia_buildings.common.models import PolygonDescriptor, Region, SourceKind
from malaysia_buildings.harvest.overpass_fetch import extract_elements
from malaysia_buildings.harvest.overpass_query import build_boundary_relation_query

OUTER_ROLES = {"outer", ""}


def stitch_rings(ways: Sequence[Sequence[int]]) -> list[list[int]]:
    segments = [list(way) for way in ways if len(way) >= 2]
    by_endpoint: dict[int, list[int]] = defaultdict(list)
    for idx, segment in enumerate(segments):
        by_endpoint[segment[0]].append(idx)
        if segment[-1] != segment[0]:
            by_endpoint[segment[-1]].append(idx)

    used = [False] * len(segments)
    rings: list[list[int]] = []
    for start, segment in enumerate(segments):
        if used[start]:
            continue
        used[start] = True
        ring = list(segment)
        while ring[0] != ring[-1]:
            tail = ring[-1]
            follower = next((idx for idx in by_endpoint[tail] if not used[idx]), None)
            if follower is None:
                break
            used[follower] = True
            piece = segments[follower]
            if piece[0] != tail:
                piece = piece[::-1]
            ring.extend(piece[1:])
        if ring[0] != ring[-1]:
            ring.append(ring[0])
        rings.append(ring)
    return rings


def _outer_way_ids(relation: dict) -> list[int]:
    return [
        member["ref"]
        for member in relation.get("members") or []
        if member.get("type") == "way" and (member.get("role") or "") in OUTER_ROLES and "ref" in member
    ]


def assemble_boundary(elements: Sequence[dict], label: str) -> list[PolygonDescriptor]:
    nodes: dict[int, LatLon] = {}
    ways: dict[int, list[int]] = {}
    relations: list[dict] = []
    for element in elements:
        kind = element.get("type")
        if kind == "node":
            lat, lon = safe_float(element.get("lat")), safe_float(element.get("lon"))
            if lat is not None and lon is not None:
                nodes[element["id"]] = (lat, lon)
        elif kind == "way":
            ways[element["id"]] = list(element.get("nodes") or [])
        elif kind == "relation":
            relations.append(element)

    if not relations:
        raise PolygonUnavailable(f"No boundary relation found for {label}")

    member_ways = [ways[way_id] for way_id in _outer_way_ids(relations[0]) if way_id in ways]
    descriptors = []
    for ring_nodes in stitch_rings(member_ways):
        points = [nodes[node_id] for node_id in ring_nodes if node_id in nodes]
        if len(points) >= 4:
            descriptors.append(
                PolygonDescriptor(label=label, ring=tuple(points), source_kind=SourceKind.ASSEMBLED_BOUNDARY)
            )
    if not descriptors:
        raise PolygonUnavailable(f"Boundary relation for {label} has no usable ways")
    return descriptors


def fetch_assembled_boundary(
    place: str,
    region: Region | None,
    http_client: HttpClient,
    *,
    endpoint: str = OVERPASS_ENDPOINT,
) -> list[PolygonDescriptor]:
    payload = http_client.post_form_json(
        endpoint,
        source_type="overpass",
        data={"data": build_boundary_relation_query(place, region)},
        timeout=TimeoutConfig(connect=20, read=120),
    )
    return assemble_boundary(extract_elements(payload), place)
