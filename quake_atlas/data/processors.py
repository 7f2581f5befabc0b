"""Convert raw catalog rows into typed, date-sorted events."""

from __future__ import annotations

import math

import pandas as pd

from quake_atlas.config import (
    DATE_COLUMN,
    DEPTH_COLUMN,
    LATITUDE_COLUMN,
    LONGITUDE_COLUMN,
    MAGNITUDE_COLUMN,
    MAGNITUDE_MB_COLUMN,
    MAGNITUDE_MS_COLUMN,
    MAGNITUDE_MW_COLUMN,
    TIME_COLUMN,
    PipelineContext,
)
from quake_atlas.data.events import HistoricalEvent, InstrumentalEvent
from quake_atlas.data.transformers import (
    instrumental_time,
    pad_historical_time,
    parse_datetime,
    strip_noise,
    to_numeric,
)
from quake_atlas.errors import RecordParseDefect

INSTRUMENTAL = "instrumental"
HISTORICAL = "historical"


def _coordinate(value: float, raw: str, row: int, field: str, catalog: str, context: PipelineContext):
    if math.isnan(value):
        context.record_defect(RecordParseDefect(catalog, row, field, raw, "kept without coordinates"))
        return None
    return float(value)


def _non_negative(value: float, raw: str, row: int, field: str, catalog: str, context: PipelineContext) -> float:
    if math.isnan(value) or value < 0:
        context.record_defect(RecordParseDefect(catalog, row, field, raw, "defaulted to 0"))
        return 0.0
    return float(value)


def _cleaned(value: float, raw: str, row: int, field: str, catalog: str, context: PipelineContext) -> float:
    # Blank or pure "-" placeholders are expected in the historical catalog.
    if math.isnan(value):
        if raw.replace("-", "").strip():
            context.record_defect(RecordParseDefect(catalog, row, field, raw, "defaulted to 0"))
        return 0.0
    return float(value)


def _log_summary(context: PipelineContext, catalog: str, total: int, kept: int) -> None:
    defects = sum(1 for defect in context.defects if defect.catalog == catalog)
    context.logger.info("Processed %d of %d %s records", kept, total, catalog)
    if defects:
        context.logger.warning("%s catalog: %d field defects recovered or dropped", catalog, defects)


def process_instrumental(rows: pd.DataFrame, context: PipelineContext | None = None) -> list[InstrumentalEvent]:
    """Parse instrumental rows; records with an unparseable date/time are dropped."""

    context = context or PipelineContext()
    longitudes = to_numeric(rows[LONGITUDE_COLUMN])
    latitudes = to_numeric(rows[LATITUDE_COLUMN])
    depths = to_numeric(rows[DEPTH_COLUMN])
    magnitudes = to_numeric(rows[MAGNITUDE_COLUMN])

    events = []
    for row, (date_text, time_text) in enumerate(zip(rows[DATE_COLUMN], rows[TIME_COLUMN])):
        utc_date = parse_datetime(date_text, instrumental_time(time_text))
        if utc_date is None:
            context.record_defect(RecordParseDefect(INSTRUMENTAL, row, "date", f"{date_text} {time_text}", "dropped"))
            continue
        events.append(
            InstrumentalEvent(
                event_id=row,
                utc_date=utc_date,
                longitude=_coordinate(
                    longitudes.iat[row], rows[LONGITUDE_COLUMN].iat[row], row, "longitude", INSTRUMENTAL, context
                ),
                latitude=_coordinate(
                    latitudes.iat[row], rows[LATITUDE_COLUMN].iat[row], row, "latitude", INSTRUMENTAL, context
                ),
                depth=_non_negative(depths.iat[row], rows[DEPTH_COLUMN].iat[row], row, "depth", INSTRUMENTAL, context),
                magnitude=_non_negative(
                    magnitudes.iat[row], rows[MAGNITUDE_COLUMN].iat[row], row, "magnitude", INSTRUMENTAL, context
                ),
            )
        )

    events.sort(key=lambda event: event.utc_date)
    _log_summary(context, INSTRUMENTAL, len(rows), len(events))
    return events


def process_historical(rows: pd.DataFrame, context: PipelineContext | None = None) -> list[HistoricalEvent]:
    """Parse historical rows: noisy depth/magnitudes are cleaned, undated rows dropped."""

    context = context or PipelineContext()
    longitudes = to_numeric(rows[LONGITUDE_COLUMN])
    latitudes = to_numeric(rows[LATITUDE_COLUMN])
    cleaned = {
        column: strip_noise(rows[column])
        for column in (DEPTH_COLUMN, MAGNITUDE_MB_COLUMN, MAGNITUDE_MS_COLUMN, MAGNITUDE_MW_COLUMN)
    }

    def reading(column: str, field: str, row: int) -> float:
        return _cleaned(cleaned[column].iat[row], rows[column].iat[row], row, field, HISTORICAL, context)

    events = []
    for row, (date_text, time_text) in enumerate(zip(rows[DATE_COLUMN], rows[TIME_COLUMN])):
        utc_date = parse_datetime(date_text, pad_historical_time(time_text))
        if utc_date is None:
            context.record_defect(RecordParseDefect(HISTORICAL, row, "date", f"{date_text} {time_text}", "dropped"))
            continue
        events.append(
            HistoricalEvent(
                event_id=row,
                utc_date=utc_date,
                longitude=_coordinate(
                    longitudes.iat[row], rows[LONGITUDE_COLUMN].iat[row], row, "longitude", HISTORICAL, context
                ),
                latitude=_coordinate(
                    latitudes.iat[row], rows[LATITUDE_COLUMN].iat[row], row, "latitude", HISTORICAL, context
                ),
                depth=reading(DEPTH_COLUMN, "depth", row),
                magnitude_mb=reading(MAGNITUDE_MB_COLUMN, "magnitude_mb", row),
                magnitude_ms=reading(MAGNITUDE_MS_COLUMN, "magnitude_ms", row),
                magnitude_mw=reading(MAGNITUDE_MW_COLUMN, "magnitude_mw", row),
            )
        )

    events.sort(key=lambda event: event.utc_date)
    _log_summary(context, HISTORICAL, len(rows), len(events))
    return events
