"""Minimal strict schemas for YAML config validation."""

from __future__ import annotations

from malaysia_buildings.common.errors import ConfigError

EXCLUSION_KINDS = {"inside_box", "outside_box", "south_of", "north_of"}


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _validate_box(box: dict, ctx: str) -> None:
    _assert_required_keys(box, {"south", "west", "north", "east"}, ctx)
    if float(box["south"]) > float(box["north"]) or float(box["west"]) > float(box["east"]):
        raise ConfigError(f"{ctx} has inverted corners")


def _validate_locality_list(items, ctx: str) -> None:
    if not isinstance(items, list):
        raise ConfigError(f"{ctx} must be a list")
    for idx, item in enumerate(items):
        _assert_required_keys(item, {"name", "keywords"}, f"{ctx}[{idx}]")
        if not item["keywords"]:
            raise ConfigError(f"{ctx}[{idx}].keywords must not be empty")


def validate_regions_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    _assert_required_keys(cfg, {"regions"}, "regions config")
    regions = cfg["regions"]
    if not isinstance(regions, dict) or not regions:
        raise ConfigError("regions must be a non-empty mapping")

    region_known = {"name", "area_id", "bbox", "timeout_seconds", "localities"}
    locality_known = {"default_city", "default_district", "default_area", "cities", "districts", "areas"}
    for key, region in regions.items():
        ctx = f"regions.{key}"
        _assert_required_keys(region, {"name", "localities"}, ctx)
        _assert_no_unknown_keys(region, region_known, ctx, allow_unknown)
        if region.get("area_id") is None and region.get("bbox") is None:
            raise ConfigError(f"{ctx} needs an area_id or a bbox")
        if region.get("bbox") is not None:
            _validate_box(region["bbox"], f"{ctx}.bbox")

        localities = region["localities"]
        _assert_required_keys(localities, {"default_city", "default_district"}, f"{ctx}.localities")
        _assert_no_unknown_keys(localities, locality_known, f"{ctx}.localities", allow_unknown)
        for table in ("cities", "districts", "areas"):
            if table in localities:
                _validate_locality_list(localities[table], f"{ctx}.localities.{table}")

    return cfg


def validate_exclusion_config(cfg: dict, *, region_keys: set[str]) -> dict:
    _assert_required_keys(cfg, {"zones"}, "exclusion_zones config")
    zones = cfg["zones"] or {}
    unknown_regions = set(zones) - region_keys
    if unknown_regions:
        raise ConfigError(f"Exclusion zones for unknown regions: {', '.join(sorted(unknown_regions))}")

    for region_key, items in zones.items():
        for idx, zone in enumerate(items or []):
            ctx = f"zones.{region_key}[{idx}]"
            _assert_required_keys(zone, {"label", "kind"}, ctx)
            kind = zone["kind"]
            if kind not in EXCLUSION_KINDS:
                raise ConfigError(f"{ctx}.kind must be one of {', '.join(sorted(EXCLUSION_KINDS))}")
            if kind in {"inside_box", "outside_box"}:
                _assert_required_keys(zone, {"box"}, ctx)
                _validate_box(zone["box"], f"{ctx}.box")
            else:
                _assert_required_keys(zone, {"latitude"}, ctx)
    return cfg


def validate_known_polygons_config(cfg: dict) -> dict:
    _assert_required_keys(cfg, {"places"}, "known_polygons config")
    places = cfg["places"] or {}
    for place, rings in places.items():
        if not isinstance(rings, list) or not rings:
            raise ConfigError(f"places.{place} must be a non-empty list of rings")
        for idx, ring in enumerate(rings):
            _assert_required_keys(ring, {"ring"}, f"places.{place}[{idx}]")
            if len(ring["ring"]) < 3:
                raise ConfigError(f"places.{place}[{idx}].ring needs at least 3 points")
    return cfg
