"""Build the enriched seismic catalog from boundary data and the two event catalogs."""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
from collections import Counter
from pathlib import Path
from typing import Sequence

from quake_atlas.config import PipelineContext, Settings
from quake_atlas.data.catalogs import load_historical_catalog, load_instrumental_catalog
from quake_atlas.data.events import EnrichedEvent
from quake_atlas.data.exporter import smart_export_csv
from quake_atlas.data.merger import merge_datasets
from quake_atlas.data.processors import process_historical, process_instrumental
from quake_atlas.data.spatial_ops import compute_district_centroids, filter_coastal_centroids
from quake_atlas.data.topology import load_geography
from quake_atlas.errors import QuakeAtlasError

LOGGER = logging.getLogger(__name__)
LOG_PATH = Path("logs/build_catalog.log")


def _configure_logging(level: str = "INFO") -> None:
    LOG_PATH.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=[logging.FileHandler(LOG_PATH), logging.StreamHandler()],
    )


def _build_report(events: Sequence[EnrichedEvent], context: PipelineContext, output_path: Path) -> None:
    report = {
        "rows": len(events),
        "rows_by_type": dict(sorted(Counter(event.type.value for event in events).items())),
        "offshore_events": sum(1 for event in events if event.distance_from_coast_km),
        "unresolved_events": sum(1 for event in events if event.district_id is None),
        "record_defects": context.defect_counts(),
        "output": str(context.settings.output_path),
    }
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(report, indent=2))


def run_pipeline(settings: Settings, context: PipelineContext | None = None) -> Path:
    """Run every stage and write the table; nothing is written if a stage fails."""

    context = context or PipelineContext(settings=settings)

    geography = load_geography(settings.geo_data_path)
    centroids = compute_district_centroids(geography.districts)
    coastal_centroids = filter_coastal_centroids(centroids)

    instrumental = process_instrumental(
        load_instrumental_catalog(settings.instrumental_data_path, encoding=settings.catalog_encoding),
        context,
    )
    historical = process_historical(
        load_historical_catalog(settings.historical_data_path, encoding=settings.catalog_encoding),
        context,
    )

    enriched = merge_datasets(
        instrumental,
        historical,
        geography.districts,
        geography.departments,
        coastal_centroids,
        context,
    )
    output_path = smart_export_csv(
        enriched,
        settings.output_path,
        stream_threshold=settings.stream_threshold,
        chunk_size=settings.chunk_size,
    )
    if settings.report_path is not None:
        try:
            _build_report(enriched, context, settings.report_path)
        except OSError as exc:
            context.logger.warning("Could not write run report %s: %s", settings.report_path, exc)
    context.logger.info("Wrote %d events to %s", len(enriched), output_path)
    return output_path


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build the enriched seismic catalog CSV.")
    parser.add_argument("--geo", type=Path, default=None, help="TopoJSON with district and department layers.")
    parser.add_argument("--instrumental", type=Path, default=None, help="Instrumental catalog CSV.")
    parser.add_argument("--historical", type=Path, default=None, help="Historical catalog CSV.")
    parser.add_argument("--output", type=Path, default=None)
    parser.add_argument("--report", type=Path, default=None, help="Optional JSON run report.")
    parser.add_argument("--log-level", type=str, default=None)
    return parser.parse_args(argv)


def _settings_from_args(args: argparse.Namespace) -> Settings:
    overrides = {
        "geo_data_path": args.geo,
        "instrumental_data_path": args.instrumental,
        "historical_data_path": args.historical,
        "output_path": args.output,
        "report_path": args.report,
        "log_level": args.log_level.upper() if args.log_level else None,
    }
    return dataclasses.replace(
        Settings.from_env(),
        **{key: value for key, value in overrides.items() if value is not None},
    )


def _cause_chain(exc: BaseException) -> str:
    messages = []
    current: BaseException | None = exc
    while current is not None:
        messages.append(f"{type(current).__name__}: {current}")
        current = current.__cause__
    return " <- ".join(messages)


def main(argv: Sequence[str] | None = None) -> int:
    settings = _settings_from_args(parse_args(argv))
    _configure_logging(settings.log_level)
    try:
        run_pipeline(settings)
    except (QuakeAtlasError, OSError) as exc:
        LOGGER.error("Catalog build failed: %s", _cause_chain(exc))
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
