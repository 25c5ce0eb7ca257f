"""Boundary polygon resolution for a selected place name."""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from malaysia_buildings.common.constants import NOMINATIM_ENDPOINT, OVERPASS_ENDPOINT
from malaysia_buildings.common.errors import PipelineError, PolygonUnavailable
from malaysia_buildings.common.http import HttpClient
from malaysia_buildings.common.logging import log_event
from malaysia_buildings.common.models import BuildingRecord, PolygonDescriptor, Region
from malaysia_buildings.polygons.assembly import fetch_assembled_boundary
from malaysia_buildings.polygons.fallback import bounding_box_polygon
from malaysia_buildings.polygons.known import KnownPolygons
from malaysia_buildings.polygons.nominatim import lookup_place_polygon

Strategy = Callable[[], Sequence[PolygonDescriptor]]


class PolygonResolver:
    """Tries known outlines, Nominatim, relation assembly, then a record bounding box.

    Results are cached per place name until :meth:`clear_cache`. Network
    failures fall through to the next strategy; :meth:`resolve` never raises.
    """

    def __init__(
        self,
        known: KnownPolygons | None = None,
        http_client: HttpClient | None = None,
        *,
        logger: logging.Logger | None = None,
        nominatim_endpoint: str = NOMINATIM_ENDPOINT,
        overpass_endpoint: str = OVERPASS_ENDPOINT,
        use_network: bool = True,
    ) -> None:
        self.known = known or KnownPolygons()
        self.http_client = http_client
        self.logger = logger
        self.nominatim_endpoint = nominatim_endpoint
        self.overpass_endpoint = overpass_endpoint
        self.use_network = use_network and http_client is not None
        self._cache: dict[str, list[PolygonDescriptor] | None] = {}

    def clear_cache(self) -> None:
        self._cache.clear()

    def _strategies(
        self,
        place: str,
        region_display_name: str,
        records: Sequence[BuildingRecord],
        region: Region | None,
    ) -> list[tuple[str, Strategy]]:
        strategies: list[tuple[str, Strategy]] = [("known", lambda: self.known.lookup(place))]
        if self.use_network and self.http_client is not None:
            client = self.http_client
            strategies.append(
                (
                    "nominatim",
                    lambda: lookup_place_polygon(
                        place, region_display_name, client, endpoint=self.nominatim_endpoint
                    ),
                )
            )
            strategies.append(
                (
                    "assembly",
                    lambda: fetch_assembled_boundary(place, region, client, endpoint=self.overpass_endpoint),
                )
            )
        strategies.append(("bounding_box", lambda: [bounding_box_polygon(place, records)]))
        return strategies

    def resolve(
        self,
        place: str,
        region_display_name: str,
        records: Sequence[BuildingRecord] = (),
        region: Region | None = None,
    ) -> list[PolygonDescriptor] | None:
        if place in self._cache:
            return self._cache[place]

        result: list[PolygonDescriptor] | None = None
        for source, strategy in self._strategies(place, region_display_name, records, region):
            try:
                descriptors = list(strategy())
            except PolygonUnavailable as exc:
                log_event(
                    self.logger,
                    str(exc),
                    level=logging.DEBUG,
                    stage="polygon",
                    source=source,
                    event="POLYGON_MISS",
                    status="skipped",
                )
                continue
            except PipelineError as exc:
                log_event(
                    self.logger,
                    f"{source} lookup failed for {place}: {exc}",
                    level=logging.WARNING,
                    stage="polygon",
                    source=source,
                    event="POLYGON_FAIL",
                    status="error",
                    error_code=exc.error_code,
                )
                continue
            except Exception as exc:
                log_event(
                    self.logger,
                    f"{source} lookup failed for {place}: {exc}",
                    level=logging.WARNING,
                    stage="polygon",
                    source=source,
                    event="POLYGON_FAIL",
                    status="error",
                    error_code="UNEXPECTED_ERROR",
                )
                continue
            if descriptors:
                result = descriptors
                log_event(
                    self.logger,
                    f"resolved {len(descriptors)} polygon(s) for {place}",
                    stage="polygon",
                    source=source,
                    event="POLYGON_RESOLVED",
                    status="ok",
                    rows_out=len(descriptors),
                )
                break

        self._cache[place] = result
        return result
