"""Merge processed catalogs and enrich every event with geographic context."""

from __future__ import annotations

from typing import Sequence

import geopandas as gpd

from quake_atlas.config import PipelineContext
from quake_atlas.data.events import EnrichedEvent, HistoricalEvent, InstrumentalEvent, RawEvent
from quake_atlas.data.resolver import GeoResolver, Resolution
from quake_atlas.data.spatial_ops import department_code
from quake_atlas.errors import InvalidInputError

BOUNDARY_COLUMNS = ("id", "name", "geometry")
CENTROID_COLUMNS = ("id", "geometry")


def _validate_events(events, expected: type, label: str) -> None:
    if not isinstance(events, (list, tuple)):
        raise InvalidInputError(f"{label} events must be a list, got {type(events).__name__}.")
    wrong = [event for event in events if not isinstance(event, expected)]
    if wrong:
        raise InvalidInputError(f"{label} events contain {len(wrong)} records of the wrong type.")


def _validate_frame(frame, label: str, columns: Sequence[str]) -> None:
    if not isinstance(frame, gpd.GeoDataFrame):
        raise InvalidInputError(f"{label} must be a GeoDataFrame, got {type(frame).__name__}.")
    missing = [col for col in columns if col not in frame.columns]
    if missing:
        raise InvalidInputError(f"{label} missing columns: {missing}")


def _validate_hierarchy(districts: gpd.GeoDataFrame, departments: gpd.GeoDataFrame) -> None:
    """Every district id prefix must name a known department."""

    department_ids = {value for value in departments["id"] if isinstance(value, str)}
    orphans = sorted(
        {
            department_code(value)
            for value in districts["id"]
            if isinstance(value, str) and department_code(value) not in department_ids
        }
    )
    if orphans:
        raise InvalidInputError(f"District prefixes with no matching department: {orphans}")


def _validate_inputs(instrumental, historical, districts, departments, coastal_centroids) -> None:
    _validate_events(instrumental, InstrumentalEvent, "Instrumental")
    _validate_events(historical, HistoricalEvent, "Historical")
    _validate_frame(districts, "Districts", BOUNDARY_COLUMNS)
    _validate_frame(departments, "Departments", BOUNDARY_COLUMNS)
    _validate_frame(coastal_centroids, "Coastal centroids", CENTROID_COLUMNS)
    _validate_hierarchy(districts, departments)


def _enrich(event: RawEvent, resolution: Resolution) -> EnrichedEvent:
    return EnrichedEvent(
        event_id=event.event_id,
        utc_date=event.utc_date,
        longitude=event.longitude,
        latitude=event.latitude,
        depth=event.depth,
        magnitude=event.magnitude,
        year=event.year,
        type=event.type,
        district_id=resolution.district_id,
        distance_from_coast_km=resolution.distance_from_coast_km,
        department=resolution.department,
        description=resolution.description,
    )


def merge_datasets(
    instrumental: Sequence[InstrumentalEvent],
    historical: Sequence[HistoricalEvent],
    districts: gpd.GeoDataFrame,
    departments: gpd.GeoDataFrame,
    coastal_centroids: gpd.GeoDataFrame,
    context: PipelineContext | None = None,
) -> list[EnrichedEvent]:
    """Resolve every event and return historical events first, then instrumental.

    Each group keeps its incoming order.
    """

    context = context or PipelineContext()
    _validate_inputs(instrumental, historical, districts, departments, coastal_centroids)

    events: list[RawEvent] = [*historical, *instrumental]
    resolver = GeoResolver(districts, departments, coastal_centroids)
    resolutions = resolver.resolve_many(
        [event.longitude for event in events],
        [event.latitude for event in events],
    )
    merged = [_enrich(event, resolution) for event, resolution in zip(events, resolutions)]

    offshore = sum(1 for resolution in resolutions if resolution.offshore)
    unresolved = sum(1 for resolution in resolutions if resolution.district_id is None)
    context.logger.info(
        "Merged %d historical and %d instrumental events (%d offshore, %d unresolved)",
        len(historical),
        len(instrumental),
        offshore,
        unresolved,
    )
    return merged
