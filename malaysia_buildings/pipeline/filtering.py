"""In-memory filtering, counting and selection over building records."""

from __future__ import annotations

from collections import Counter
from typing import Iterable, Iterator, Sequence

from malaysia_buildings.common.models import BuildingRecord, FilterState

SEARCH_FIELDS = ("name", "address", "city", "district", "category")


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


def matches(record: BuildingRecord, state: FilterState) -> bool:
    if not _blank(state.region) and record.state != state.region:
        return False
    if not _blank(state.place) and record.city != state.place:
        return False
    if not _blank(state.category) and record.category != state.category:
        return False
    if not _blank(state.search):
        term = state.search.strip().lower()
        return any(term in getattr(record, field).lower() for field in SEARCH_FIELDS)
    return True


def filter_records(records: Iterable[BuildingRecord], state: FilterState) -> list[BuildingRecord]:
    return [record for record in records if matches(record, state)]


def count_by(records: Iterable[BuildingRecord], field: str) -> dict[str, int]:
    counts = Counter(getattr(record, field) for record in records)
    return dict(sorted(counts.items()))


def display_window(records: Sequence[BuildingRecord], limit: int) -> list[BuildingRecord]:
    return list(records[:limit])


class SelectionSet:
    """Checked record ids. Always scoped to the full filtered set, not a display window."""

    def __init__(self) -> None:
        self._ids: set[int] = set()
        self._scope: set[int] = set()

    def rescope(self, records: Iterable[BuildingRecord]) -> None:
        self._scope = {record.id for record in records}
        self._ids.clear()

    def select(self, record_id: int) -> bool:
        if record_id not in self._scope:
            return False
        self._ids.add(record_id)
        return True

    def deselect(self, record_id: int) -> None:
        self._ids.discard(record_id)

    def toggle(self, record_id: int) -> bool:
        if record_id in self._ids:
            self._ids.discard(record_id)
            return False
        return self.select(record_id)

    def select_all(self) -> None:
        self._ids = set(self._scope)

    def clear(self) -> None:
        self._ids.clear()

    def state(self) -> str:
        """``none``, ``all`` or ``partial``, for a select-all checkbox."""
        if not self._ids:
            return "none"
        if self._ids == self._scope:
            return "all"
        return "partial"

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._ids

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._ids))

    def __len__(self) -> int:
        return len(self._ids)
