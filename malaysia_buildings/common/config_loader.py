"""Configuration loading and validation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from malaysia_buildings.common.errors import ConfigError
from malaysia_buildings.common.fs import read_yaml
from malaysia_buildings.common.schema import (
    validate_exclusion_config,
    validate_known_polygons_config,
    validate_regions_config,
)

DEFAULT_CONFIG_DIR = Path("config")


@dataclass(frozen=True)
class ConfigBundle:
    regions: dict[str, dict]
    exclusion_zones: dict[str, list[dict]]
    known_polygons: dict[str, list[dict]]


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _load_yaml_with_overlay(path: Path, overlay_dir: Path | None) -> dict:
    if not path.exists():
        raise ConfigError(f"Missing config file: {path}")
    base = read_yaml(path) or {}
    if overlay_dir is None:
        return base
    overlay_path = overlay_dir / path.name
    if not overlay_path.exists():
        return base
    overlay = read_yaml(overlay_path)
    if overlay is None:
        return base
    return _deep_merge(base, overlay)


def load_all_configs(
    config_dir: Path = DEFAULT_CONFIG_DIR,
    *,
    allow_unknown: bool = False,
    overlay_config_dir: Path | None = None,
) -> ConfigBundle:
    regions = validate_regions_config(
        _load_yaml_with_overlay(config_dir / "regions.yml", overlay_config_dir),
        allow_unknown=allow_unknown,
    )
    exclusions = validate_exclusion_config(
        _load_yaml_with_overlay(config_dir / "exclusion_zones.yml", overlay_config_dir),
        region_keys=set(regions["regions"]),
    )
    known = validate_known_polygons_config(
        _load_yaml_with_overlay(config_dir / "known_polygons.yml", overlay_config_dir),
    )
    return ConfigBundle(
        regions=regions["regions"],
        exclusion_zones=exclusions["zones"] or {},
        known_polygons=known["places"] or {},
    )
