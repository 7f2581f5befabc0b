"""Contract validation for the exported event table."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

import pandas as pd

from quake_atlas.config import DEFAULT_OUTPUT_PATH, LATITUDE_BOUNDS
from quake_atlas.data.events import EXPORT_COLUMNS, EventType
from quake_atlas.data.exporter import read_enriched_csv

LOGGER = logging.getLogger(__name__)

NUMERIC_COLUMNS = ["eventId", "longitude", "latitude", "depth", "magnitude", "year", "distanceFromCoastKm"]
NON_NEGATIVE_COLUMNS = ["depth", "magnitude"]
# Columns that may be blank when an event has no usable coordinates
NULLABLE_COLUMNS = {"longitude", "latitude", "districtId", "distanceFromCoastKm", "department", "description"}
REPORT_COLUMNS = ["year", "eventId", "department", "latitude", "longitude", "magnitude", "depth"]


def _require_cols(df: pd.DataFrame, required: list[str], label: str) -> None:
    missing = set(required) - set(df.columns)
    if missing:
        raise AssertionError(f"{label}: missing required columns: {sorted(missing)}")
    if list(df.columns) != required:
        raise AssertionError(f"{label}: columns out of order: {list(df.columns)}")


def _numeric(df: pd.DataFrame, column: str) -> pd.Series:
    text = df[column].astype(str).str.strip()
    values = pd.to_numeric(text, errors="coerce")
    blank = text == ""
    if column not in NULLABLE_COLUMNS and blank.any():
        raise AssertionError(f"{column} cannot be blank")
    unparseable = values.isna() & ~blank
    if unparseable.any():
        raise AssertionError(f"{column} has {int(unparseable.sum())} values that are not numbers")
    return values


def validate_enriched_table(df: pd.DataFrame, label: str = "enriched table") -> None:
    """Raise AssertionError when the table breaks the downstream contract."""

    _require_cols(df, EXPORT_COLUMNS, label)
    if df.empty:
        raise AssertionError(f"{label} must not be empty")

    allowed_types = {event_type.value for event_type in EventType}
    bad_types = set(df["type"]) - allowed_types
    if bad_types:
        raise AssertionError(f"type must be one of {sorted(allowed_types)}, got {sorted(bad_types)}")

    numbers = {column: _numeric(df, column) for column in NUMERIC_COLUMNS}
    for column in NON_NEGATIVE_COLUMNS:
        if (numbers[column] < 0).any():
            raise AssertionError(f"{column} must be non-negative")

    if df[["type", "eventId"]].duplicated().any():
        raise AssertionError("type/eventId combinations must be unique")

    distance = numbers["distanceFromCoastKm"]
    has_district = df["districtId"].astype(str).str.strip() != ""
    if (has_district != distance.notna()).any():
        raise AssertionError("districtId and distanceFromCoastKm must be both set or both blank")
    if (distance < 0).any():
        raise AssertionError("distanceFromCoastKm must be non-negative")

    has_department = df["department"].astype(str).str.strip() != ""
    if (has_department & ~has_district).any():
        raise AssertionError("department requires a districtId")


def find_out_of_bounds(df: pd.DataFrame, bounds: tuple[float, float] = LATITUDE_BOUNDS) -> pd.DataFrame:
    """Rows whose latitude falls outside the national latitude bounds."""

    min_lat, max_lat = bounds
    latitude = pd.to_numeric(df["latitude"], errors="coerce")
    outside = (latitude < min_lat) | (latitude > max_lat)
    return df.loc[outside, [col for col in REPORT_COLUMNS if col in df.columns]]


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Validate an exported seismic catalog.")
    parser.add_argument("path", nargs="?", type=Path, default=DEFAULT_OUTPUT_PATH)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    if not args.path.exists():
        LOGGER.error("Missing output table: %s", args.path)
        return 1

    df = read_enriched_csv(args.path)
    try:
        validate_enriched_table(df, label=str(args.path))
    except AssertionError as exc:
        LOGGER.error("Contract violation: %s", exc)
        return 1

    outside = find_out_of_bounds(df)
    if outside.empty:
        LOGGER.info("No records found outside the national latitude bounds")
    else:
        LOGGER.warning(
            "Found %d records outside the national latitude bounds:\n%s",
            len(outside),
            outside.to_string(index=False),
        )
    print("Output contracts validated")
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    raise SystemExit(main())
