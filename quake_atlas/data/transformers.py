"""Date, time and numeric parsing rules for the two catalogs."""

from __future__ import annotations

from datetime import datetime, timezone

import numpy as np
import pandas as pd

from quake_atlas.config import DATETIME_FORMAT

TIME_LENGTH = 8  # HH:MM:SS


def parse_datetime(date_text: str, time_text: str) -> datetime | None:
    """Parse DD/MM/YYYY plus HH:MM:SS as a UTC datetime, or None if it does not parse."""

    try:
        stamp = f"{str(date_text).strip()} {str(time_text).strip()}"
        return datetime.strptime(stamp, DATETIME_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        return None


def instrumental_time(time_text: str) -> str:
    """Instrumental times may carry fractional seconds; keep HH:MM:SS."""

    return str(time_text).strip()[:TIME_LENGTH]


def pad_historical_time(time_text: str) -> str:
    """Normalize a historical time fragment to eight characters.

    Seven-character fragments get a literal "1" appended ("14:30:1" ->
    "14:30:11"); shorter ones are right-padded with zeros.
    """

    text = str(time_text).strip()
    if len(text) >= TIME_LENGTH:
        return text[:TIME_LENGTH]
    if len(text) == TIME_LENGTH - 1:
        return text + "1"
    return text.ljust(TIME_LENGTH, "0")


def to_numeric(series: pd.Series) -> pd.Series:
    """Coerce text to floats; blanks, garbage and non-finite values become NaN."""

    values = pd.to_numeric(series.astype(str).str.strip(), errors="coerce").astype(float)
    return values.where(np.isfinite(values))


def strip_noise(series: pd.Series) -> pd.Series:
    """Remove every "-" noise marker, then coerce to floats.

    A genuine negative sign is indistinguishable from noise and is removed too.
    """

    return to_numeric(series.astype(str).str.replace("-", "", regex=False))


def clean_magnitude(value) -> float:
    """Clean one historical magnitude or depth reading; unparseable values become 0."""

    if value is None:
        return 0.0
    return float(strip_noise(pd.Series([value])).fillna(0.0).iat[0])
