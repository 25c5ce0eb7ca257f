"""CLI entrypoint for the Malaysian building database."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from malaysia_buildings.common.config_loader import load_all_configs
from malaysia_buildings.common.constants import COMMANDS, EXIT_HARD_FAIL, EXIT_PARTIAL, EXIT_SUCCESS
from malaysia_buildings.common.errors import ContractError, PipelineError, TransportError
from malaysia_buildings.common.fs import read_json, write_json
from malaysia_buildings.common.http import HttpClient
from malaysia_buildings.common.ids import generate_session_id
from malaysia_buildings.common.logging import build_logger, log_event
from malaysia_buildings.common.models import BuildingRecord
from malaysia_buildings.common.time_utils import parse_run_date
from malaysia_buildings.harvest.overpass_query import build_overpass_query
from malaysia_buildings.pipeline.export import EXPORT_FORMATS, export_filename, write_export
from malaysia_buildings.pipeline.render import to_feature_collection
from malaysia_buildings.pipeline.reports import write_fetch_summary
from malaysia_buildings.pipeline.session import BuildingSession
from malaysia_buildings.polygons.known import KnownPolygons
from malaysia_buildings.polygons.resolver import PolygonResolver
from malaysia_buildings.regions.registry import RegionRegistry


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("command", choices=COMMANDS)
    parser.add_argument("--region", default=None)
    parser.add_argument("--place", default=None)
    parser.add_argument("--category", default=None)
    parser.add_argument("--search", default=None)
    parser.add_argument("--ids", default=None, help="comma separated record ids to export")
    parser.add_argument("--format", dest="export_format", default="csv", choices=EXPORT_FORMATS)
    parser.add_argument("--offline", action="store_true", help="skip network polygon lookups")
    parser.add_argument("--run-date", default=None)
    parser.add_argument("--session-id", default=None)
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--data-dir", default="./data")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARN", "ERROR"])
    return parser.parse_args(argv)


def records_path(data_dir: Path, region_key: str) -> Path:
    return data_dir / "records" / f"{region_key}_records.json"


def write_records(data_dir: Path, region_key: str, session_id: str, records: list[BuildingRecord]) -> Path:
    path = records_path(data_dir, region_key)
    write_json(
        path,
        {
            "region": region_key,
            "session_id": session_id,
            "row_count": len(records),
            "records": [record.to_dict() for record in records],
        },
    )
    return path


def read_records(data_dir: Path, region_key: str) -> list[BuildingRecord]:
    path = records_path(data_dir, region_key)
    if not path.exists():
        raise ContractError(f"No fetched records at {path}; run fetch first")
    payload = read_json(path)
    return [BuildingRecord.from_dict(item) for item in payload.get("records", [])]


def _parse_ids(raw: str | None) -> list[int]:
    if not raw:
        return []
    return [int(part) for part in raw.split(",") if part.strip()]


def _list_regions(registry: RegionRegistry) -> int:
    for region in registry.regions():
        method = f"area {region.area_id}" if region.area_id is not None else "bbox"
        print(f"{region.key}\t{region.display_name}\t{method}")
    return EXIT_SUCCESS


def execute_command(args: argparse.Namespace, session: BuildingSession, data_dir: Path, session_id: str) -> int:
    if args.command == "regions":
        return _list_regions(session.registry)

    if args.command == "query":
        print(build_overpass_query(session.registry.lookup(args.region)))
        return EXIT_SUCCESS

    region = session.registry.lookup(args.region)

    if args.command == "fetch":
        result = session.fetch(region.key)
        write_records(data_dir, region.key, session_id, session.records)
        write_fetch_summary(data_dir, region.key, session.summary())
        write_json(data_dir / "out" / f"{region.key}_map.geojson", to_feature_collection(session.filtered))
        log_event(
            session.logger,
            f"fetched {len(result.records)} buildings for {region.display_name}",
            session_id=session_id,
            stage="fetch",
            region=region.key,
            event="FETCH_SUMMARY",
            status="ok",
            rows_in=result.raw_count,
            rows_out=len(result.records),
        )
        return EXIT_SUCCESS

    session.load_records(region.key, read_records(data_dir, region.key))

    if args.command == "export":
        session.apply_filter(place=args.place, category=args.category, search=args.search)
        ids = _parse_ids(args.ids)
        if ids:
            for record_id in ids:
                session.select(record_id)
        else:
            session.select_all()
        rows = session.export_rows()
        run_date = parse_run_date(args.run_date)
        out_path = data_dir / "out" / export_filename(region.display_name, run_date, extension=args.export_format)
        write_export(out_path, rows, args.export_format)
        log_event(
            session.logger,
            f"exported {len(rows)} buildings to {out_path}",
            session_id=session_id,
            stage="export",
            region=region.key,
            event="EXPORT_END",
            status="ok",
            rows_out=len(rows),
        )
        return EXIT_SUCCESS

    if args.command == "polygon":
        if not args.place:
            raise ContractError("--place is required for the polygon command")
        descriptors = session.highlight(args.place)
        if descriptors:
            write_records(data_dir, region.key, session_id, session.records)
        slug = args.place.strip().lower().replace(" ", "_")
        write_json(
            data_dir / "out" / "polygons" / f"{region.key}_{slug}.json",
            {
                "place": args.place,
                "region": region.key,
                "polygons": [descriptor.to_dict() for descriptor in descriptors or []],
            },
        )
        return EXIT_SUCCESS if descriptors else EXIT_PARTIAL

    raise ValueError(f"Unknown command: {args.command}")


def run_command(args: argparse.Namespace, http_client: HttpClient | None = None) -> int:
    session_id = args.session_id or generate_session_id()
    config_dir = Path(args.config_dir)
    overlay_config_dir = Path(args.overlay_config_dir) if args.overlay_config_dir else None
    data_dir = Path(args.data_dir)

    logger = build_logger(session_id, data_dir=data_dir, level=args.log_level)
    bundle = load_all_configs(config_dir, overlay_config_dir=overlay_config_dir)
    registry = RegionRegistry.from_bundle(bundle)

    owns_client = http_client is None
    client = http_client or HttpClient(logger=logger)
    resolver = PolygonResolver(
        KnownPolygons(bundle.known_polygons),
        client,
        logger=logger,
        use_network=not args.offline,
    )
    session = BuildingSession(registry, http_client=client, resolver=resolver, logger=logger)

    try:
        return execute_command(args, session, data_dir, session_id)
    except TransportError as exc:
        log_event(
            logger,
            f"{exc} This might be due to network issues or API limits. Please try again in a few minutes.",
            session_id=session_id,
            stage=args.command,
            region=args.region,
            event="COMMAND_FAIL",
            status="error",
            error_code=exc.error_code,
        )
        return EXIT_HARD_FAIL
    except PipelineError as exc:
        log_event(
            logger,
            str(exc),
            session_id=session_id,
            stage=args.command,
            region=args.region,
            event="COMMAND_FAIL",
            status="error",
            error_code=exc.error_code,
        )
        return EXIT_HARD_FAIL
    finally:
        if owns_client:
            client.close()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv or sys.argv[1:])
    try:
        return run_command(args)
    except PipelineError:
        return EXIT_HARD_FAIL
    except Exception:
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
