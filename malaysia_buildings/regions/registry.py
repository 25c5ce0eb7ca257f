"""Registry of the supported Malaysian states."""

from __future__ import annotations

from pathlib import Path

from malaysia_buildings.common.config_loader import ConfigBundle, load_all_configs
from malaysia_buildings.common.errors import UnknownRegion
from malaysia_buildings.common.models import BoundingBox, ExclusionZone, Locality, LocalityTable, Region


def _localities(items: list[dict] | None) -> tuple[Locality, ...]:
    return tuple(
        Locality(name=str(item["name"]), keywords=tuple(str(k).lower() for k in item["keywords"]))
        for item in items or []
    )


def _locality_table(cfg: dict, display_name: str) -> LocalityTable:
    return LocalityTable(
        default_city=str(cfg["default_city"]),
        default_district=str(cfg["default_district"]),
        default_area=str(cfg.get("default_area") or display_name),
        cities=_localities(cfg.get("cities")),
        districts=_localities(cfg.get("districts")),
        areas=_localities(cfg.get("areas")),
    )


def _exclusion_zone(cfg: dict) -> ExclusionZone:
    box = cfg.get("box")
    latitude = cfg.get("latitude")
    return ExclusionZone(
        label=str(cfg["label"]),
        kind=str(cfg["kind"]),
        box=BoundingBox.from_dict(box) if box else None,
        latitude=float(latitude) if latitude is not None else None,
    )


def build_region(key: str, cfg: dict, zones: list[dict] | None = None) -> Region:
    display_name = str(cfg["name"])
    area_id = cfg.get("area_id")
    bbox = BoundingBox.from_dict(cfg["bbox"]) if cfg.get("bbox") else None
    timeout = cfg.get("timeout_seconds")
    exclusions = [_exclusion_zone(zone) for zone in zones or []]
    if area_id is None and bbox is not None:
        # Rectangle-queried regions keep only points inside the rectangle.
        exclusions.append(ExclusionZone(label=f"Outside the {display_name} query box", kind="outside_box", box=bbox))
    return Region(
        key=key,
        display_name=display_name,
        localities=_locality_table(cfg["localities"], display_name),
        area_id=int(area_id) if area_id is not None else None,
        bbox=bbox,
        timeout_seconds=int(timeout) if timeout is not None else None,
        exclusions=tuple(exclusions),
    )


class RegionRegistry:
    def __init__(self, regions: list[Region]) -> None:
        self._regions = {region.key: region for region in regions}

    @classmethod
    def from_bundle(cls, bundle: ConfigBundle) -> "RegionRegistry":
        return cls(
            [build_region(key, cfg, bundle.exclusion_zones.get(key)) for key, cfg in bundle.regions.items()]
        )

    @classmethod
    def from_config_dir(cls, config_dir: Path, *, overlay_config_dir: Path | None = None) -> "RegionRegistry":
        return cls.from_bundle(load_all_configs(config_dir, overlay_config_dir=overlay_config_dir))

    def lookup(self, key: str | None) -> Region:
        if not key:
            raise UnknownRegion("Please select a state first")
        region = self._regions.get(key.strip().lower())
        if region is None:
            known = ", ".join(self._regions)
            raise UnknownRegion(f"Unknown region {key!r}; expected one of: {known}")
        return region

    def keys(self) -> list[str]:
        return list(self._regions)

    def regions(self) -> list[Region]:
        return list(self._regions.values())

    def __contains__(self, key: object) -> bool:
        return key in self._regions

    def __len__(self) -> int:
        return len(self._regions)
