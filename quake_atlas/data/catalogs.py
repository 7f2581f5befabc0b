"""Raw CSV loading and column validation for the seismic catalogs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

import pandas as pd

from quake_atlas.config import HISTORICAL_REQUIRED, INSTRUMENTAL_REQUIRED
from quake_atlas.errors import SchemaValidationError

LOGGER = logging.getLogger(__name__)


def _require_cols(df: pd.DataFrame, required: Iterable[str], label: str) -> None:
    missing = set(required) - set(df.columns)
    if missing:
        raise SchemaValidationError(label, missing)


def read_catalog(path: str | Path, required: Iterable[str], label: str, encoding: str = "utf-8") -> pd.DataFrame:
    """Read a comma-delimited catalog as untyped strings and validate its columns."""

    path = Path(path)
    try:
        df = pd.read_csv(path, dtype=str, keep_default_na=False, encoding=encoding)
    except pd.errors.EmptyDataError as exc:
        raise SchemaValidationError(f"{label}: {path} is empty") from exc
    except (pd.errors.ParserError, UnicodeDecodeError) as exc:
        raise SchemaValidationError(f"{label}: cannot parse {path}: {exc}") from exc

    df = df.rename(columns=lambda col: str(col).strip().lstrip("\ufeff"))
    _require_cols(df, required, label)
    LOGGER.info("Loaded %d %s rows from %s", len(df), label, path)
    return df


def load_instrumental_catalog(path: str | Path, encoding: str = "utf-8") -> pd.DataFrame:
    return read_catalog(path, INSTRUMENTAL_REQUIRED, "instrumental catalog", encoding=encoding)


def load_historical_catalog(path: str | Path, encoding: str = "utf-8") -> pd.DataFrame:
    return read_catalog(path, HISTORICAL_REQUIRED, "historical catalog", encoding=encoding)
