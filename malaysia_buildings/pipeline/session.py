"""Single-writer session state: loaded records, filters, selection and highlight."""

from __future__ import annotations

import logging
import threading
from typing import Sequence

from malaysia_buildings.common.constants import OVERPASS_ENDPOINT, TABLE_ROW_LIMIT
from malaysia_buildings.common.errors import EmptyResultError, EmptySelection, FetchInProgress
from malaysia_buildings.common.http import HttpClient
from malaysia_buildings.common.logging import log_event
from malaysia_buildings.common.models import BuildingRecord, FilterState, PolygonDescriptor, Region
from malaysia_buildings.harvest.overpass_fetch import fetch_region_elements
from malaysia_buildings.pipeline.export import to_export_row
from malaysia_buildings.pipeline.filtering import SelectionSet, count_by, display_window, filter_records
from malaysia_buildings.pipeline.records import ProcessResult, process_elements
from malaysia_buildings.pipeline.reports import build_fetch_summary
from malaysia_buildings.polygons.fallback import records_in_place
from malaysia_buildings.polygons.resolver import PolygonResolver
from malaysia_buildings.regions.registry import RegionRegistry


class BuildingSession:
    """Owns everything one user works with between fetches.

    Only one fetch may run at a time; a second call while one is in flight
    is rejected with :class:`FetchInProgress`. A failed fetch leaves the
    previously loaded records untouched.
    """

    def __init__(
        self,
        registry: RegionRegistry,
        *,
        http_client: HttpClient | None = None,
        resolver: PolygonResolver | None = None,
        logger: logging.Logger | None = None,
        overpass_endpoint: str = OVERPASS_ENDPOINT,
    ) -> None:
        self.registry = registry
        self.http_client = http_client
        self.resolver = resolver or PolygonResolver(http_client=http_client, logger=logger)
        self.logger = logger
        self.overpass_endpoint = overpass_endpoint
        self.region: Region | None = None
        self.records: list[BuildingRecord] = []
        self.filtered: list[BuildingRecord] = []
        self.filter = FilterState()
        self.selection = SelectionSet()
        self.highlighted: list[PolygonDescriptor] = []
        self.highlighted_place: str | None = None
        self.last_result: ProcessResult | None = None
        self._fetch_lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._fetch_lock.locked()

    def fetch(self, region_key: str | None) -> ProcessResult:
        region = self.registry.lookup(region_key)
        if not self._fetch_lock.acquire(blocking=False):
            raise FetchInProgress("A fetch is already running; wait for it to finish")
        try:
            elements = fetch_region_elements(
                region,
                self.http_client,
                endpoint=self.overpass_endpoint,
                logger=self.logger,
            )
            result = process_elements(elements, region, logger=self.logger)
            if not result.records:
                raise EmptyResultError(
                    f"No buildings found for {region.display_name}. "
                    "This might be due to API limits or the area having no mapped buildings."
                )
            self.last_result = result
            self._replace_records(region, result.records)
            return result
        finally:
            self._fetch_lock.release()

    def load_records(self, region_key: str, records: Sequence[BuildingRecord]) -> None:
        self._replace_records(self.registry.lookup(region_key), list(records))

    def _replace_records(self, region: Region, records: list[BuildingRecord]) -> None:
        self.region = region
        self.records = records
        self.filter = FilterState(region=region.display_name)
        self.resolver.clear_cache()
        self.highlighted = []
        self.highlighted_place = None
        self._refilter()
        log_event(
            self.logger,
            f"loaded {len(records)} buildings for {region.display_name}",
            stage="session",
            region=region.key,
            event="RECORDS_REPLACED",
            status="ok",
            rows_out=len(records),
        )

    def _refilter(self) -> None:
        self.filtered = filter_records(self.records, self.filter)
        self.selection.rescope(self.filtered)

    def apply_filter(
        self,
        *,
        place: str | None = None,
        category: str | None = None,
        search: str | None = None,
    ) -> list[BuildingRecord]:
        region_name = self.region.display_name if self.region is not None else None
        self.filter = FilterState(region=region_name, place=place, category=category, search=search)
        self._refilter()
        return self.filtered

    def change_region(self, region_key: str | None) -> None:
        region = self.registry.lookup(region_key) if region_key else None
        self.reset()
        if region is not None:
            self.region = region
            self.filter = FilterState(region=region.display_name)

    def reset(self) -> None:
        self.region = None
        self.records = []
        self.filter = FilterState()
        self.highlighted = []
        self.highlighted_place = None
        self.last_result = None
        self.resolver.clear_cache()
        self._refilter()

    def select_all(self) -> None:
        self.selection.select_all()

    def clear_selection(self) -> None:
        self.selection.clear()

    def toggle(self, record_id: int) -> bool:
        return self.selection.toggle(record_id)

    def select(self, record_id: int) -> bool:
        return self.selection.select(record_id)

    def deselect(self, record_id: int) -> None:
        self.selection.deselect(record_id)

    def selected_records(self) -> list[BuildingRecord]:
        return [record for record in self.filtered if record.id in self.selection]

    def export_rows(self) -> list[dict]:
        selected = self.selected_records()
        if not selected:
            raise EmptySelection("Please select at least one building to export")
        return [to_export_row(record) for record in selected]

    def table_rows(self, limit: int = TABLE_ROW_LIMIT) -> list[BuildingRecord]:
        return display_window(self.filtered, limit)

    def place_options(self) -> dict[str, int]:
        return count_by(self.records, "city")

    def category_options(self) -> dict[str, int]:
        return count_by(self.records, "category")

    def highlight(self, place: str) -> list[PolygonDescriptor] | None:
        region_name = self.region.display_name if self.region is not None else ""
        descriptors = self.resolver.resolve(place, region_name, self.records, self.region)
        self.highlighted = list(descriptors or [])
        self.highlighted_place = place
        if descriptors:
            for record in records_in_place(place, self.records):
                record.polygon = list(descriptors)
        return descriptors

    def summary(self) -> dict:
        state_name = self.region.display_name if self.region is not None else "-"
        skipped = self.last_result.skipped if self.last_result is not None else None
        summary = build_fetch_summary(state_name, self.records, skipped)
        summary["filtered"] = len(self.filtered)
        summary["selected"] = len(self.selection)
        return summary
