"""Overpass fetch for one region."""

from __future__ import annotations

import logging
import time

from malaysia_buildings.common.constants import OVERPASS_ENDPOINT
from malaysia_buildings.common.errors import ContractError
from malaysia_buildings.common.http import HttpClient, TimeoutConfig
from malaysia_buildings.common.logging import log_event
from malaysia_buildings.common.models import Region
from malaysia_buildings.harvest.overpass_query import build_overpass_query, query_timeout

# The server-side timeout is advisory; the local read timeout bounds a hung request.
LOCAL_TIMEOUT_MARGIN_SECONDS = 60


def extract_elements(payload) -> list[dict]:
    if not isinstance(payload, dict):
        raise ContractError("Overpass payload is not a JSON object")
    elements = payload.get("elements")
    if elements is None:
        raise ContractError("Overpass payload has no elements array")
    if not isinstance(elements, list):
        raise ContractError("Overpass elements is not an array")
    return elements


def fetch_region_elements(
    region: Region,
    http_client: HttpClient | None = None,
    *,
    endpoint: str = OVERPASS_ENDPOINT,
    timeout_seconds: int | None = None,
    logger: logging.Logger | None = None,
) -> list[dict]:
    query = build_overpass_query(region, timeout_seconds=timeout_seconds)
    read_timeout = query_timeout(region, timeout_seconds) + LOCAL_TIMEOUT_MARGIN_SECONDS
    method = "area" if region.area_id is not None else "bbox"
    log_event(
        logger,
        f"fetching {region.display_name} using {method} query",
        stage="fetch",
        region=region.key,
        source="overpass",
        event="FETCH_START",
        status="ok",
    )

    started = time.monotonic()
    owns_client = http_client is None
    client = http_client or HttpClient()
    try:
        payload = client.post_form_json(
            endpoint,
            source_type="overpass",
            data={"data": query},
            timeout=TimeoutConfig(connect=20, read=read_timeout),
        )
    finally:
        if owns_client:
            client.close()

    elements = extract_elements(payload)
    log_event(
        logger,
        f"received {len(elements)} raw elements",
        stage="fetch",
        region=region.key,
        source="overpass",
        event="FETCH_END",
        status="ok",
        duration_ms=int((time.monotonic() - started) * 1000),
        rows_out=len(elements),
    )
    return elements
