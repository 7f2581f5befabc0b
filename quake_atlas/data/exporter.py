"""CSV export of the enriched event table."""

from __future__ import annotations

import json
import logging
import math
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Sequence, Union

import numpy as np
import pandas as pd

from quake_atlas.config import EXPORT_CHUNK_SIZE, STREAM_EXPORT_THRESHOLD
from quake_atlas.data.events import EnrichedEvent
from quake_atlas.errors import ExportError

LOGGER = logging.getLogger(__name__)

Record = Union[EnrichedEvent, Mapping[str, Any]]

# Outside this range numbers are written in exponent form ("1e-7", "1e+21")
POSITIONAL_MIN = 1e-6
POSITIONAL_MAX = 1e21


def _as_mapping(record: Record) -> Mapping[str, Any]:
    if isinstance(record, EnrichedEvent):
        return record.to_record()
    if isinstance(record, Mapping):
        return record
    raise ExportError(f"Cannot export a {type(record).__name__} record.")


def _format_datetime(value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat(timespec="milliseconds") + "Z"


def _format_number(value: float) -> str:
    """Shortest round-trip digits, positional between 1e-6 and 1e21 like the legacy exports."""

    if math.isnan(value):
        return ""
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    magnitude = abs(value)
    if magnitude != 0 and (magnitude < POSITIONAL_MIN or magnitude >= POSITIONAL_MAX):
        return np.format_float_scientific(value, trim="-", exp_digits=1)
    if value.is_integer():
        return str(int(value))
    return np.format_float_positional(value, trim="-")


def format_csv_value(value: Any) -> str:
    """Render one cell. Quoting is left to the CSV writer."""

    if value is None:
        return ""
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, (bool, np.bool_)):
        return "true" if value else "false"
    if isinstance(value, datetime):
        if pd.isna(value):
            return ""
        return _format_datetime(value)
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False).replace(",", ";")
    if isinstance(value, (float, np.floating)):
        return _format_number(float(value))
    if isinstance(value, np.integer):
        return str(int(value))
    return str(value)


def _headers(records: Sequence[Record]) -> list[str]:
    if not records:
        raise ExportError("Nothing to export: expected a non-empty list of records.")
    return list(_as_mapping(records[0]).keys())


def convert_to_frame(records: Sequence[Record], columns: Sequence[str] | None = None) -> pd.DataFrame:
    """Format records into a frame of strings; the header comes from the first record."""

    columns = list(columns) if columns is not None else _headers(records)
    rows = []
    for record in records:
        mapping = _as_mapping(record)
        rows.append([format_csv_value(mapping.get(column)) for column in columns])
    return pd.DataFrame(rows, columns=columns, dtype=object)


def _temporary_path(path: Path) -> Path:
    return path.with_name(f".{path.name}.partial")


def _write(path: str | Path, write_chunks) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    partial = _temporary_path(path)
    try:
        with partial.open("w", encoding="utf-8", newline="") as handle:
            write_chunks(handle)
        partial.replace(path)
    except OSError as exc:
        partial.unlink(missing_ok=True)
        raise ExportError(f"Failed to write {path}: {exc}") from exc
    except BaseException:
        partial.unlink(missing_ok=True)
        raise
    return path


def export_csv(records: Sequence[Record], path: str | Path) -> Path:
    """Write the whole table in one pass."""

    frame = convert_to_frame(records)
    path = _write(path, lambda handle: frame.to_csv(handle, index=False, lineterminator="\n"))
    LOGGER.info("Exported %d rows to %s", len(frame), path)
    return path


def stream_export_csv(records: Sequence[Record], path: str | Path, chunk_size: int = EXPORT_CHUNK_SIZE) -> Path:
    """Write the table chunk by chunk; output is identical to ``export_csv``."""

    if chunk_size < 1:
        raise ExportError(f"chunk_size must be positive, got {chunk_size}.")
    columns = _headers(records)

    def write_chunks(handle) -> None:
        for start in range(0, len(records), chunk_size):
            chunk = convert_to_frame(records[start : start + chunk_size], columns=columns)
            chunk.to_csv(handle, index=False, header=start == 0, lineterminator="\n")

    path = _write(path, write_chunks)
    LOGGER.info("Streamed %d rows to %s in chunks of %d", len(records), path, chunk_size)
    return path


def smart_export_csv(
    records: Sequence[Record],
    path: str | Path,
    stream_threshold: int = STREAM_EXPORT_THRESHOLD,
    chunk_size: int = EXPORT_CHUNK_SIZE,
) -> Path:
    """Stream large tables, write small ones in one pass."""

    if len(records) > stream_threshold:
        LOGGER.info("Large dataset detected (%d records); using streaming export", len(records))
        return stream_export_csv(records, path, chunk_size=chunk_size)
    return export_csv(records, path)


def read_enriched_csv(path: str | Path) -> pd.DataFrame:
    """Read an exported table back as untyped strings."""

    return pd.read_csv(path, dtype=str, keep_default_na=False)
