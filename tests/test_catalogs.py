"""Unit tests for catalog loading."""

from __future__ import annotations

import pytest

from quake_atlas.config import HISTORICAL_REQUIRED, INSTRUMENTAL_REQUIRED
from quake_atlas.data.catalogs import load_historical_catalog, load_instrumental_catalog
from quake_atlas.errors import SchemaValidationError


def test_instrumental_rows_stay_as_strings(instrumental_path) -> None:
    rows = load_instrumental_catalog(instrumental_path)
    assert len(rows) == 2
    assert rows["magnitud (M)"].tolist() == ["5.1", "7.9"]
    assert rows["hora UTC"].iloc[0] == "10:00:00.50"


def test_historical_noise_markers_are_kept(historical_path) -> None:
    rows = load_historical_catalog(historical_path)
    assert rows["profundidad (km)"].iloc[0] == "-"
    assert rows["magnitud (Ms)"].iloc[0] == "8.6-"


def test_header_whitespace_is_stripped(catalog_writer) -> None:
    header = tuple(f" {column} " for column in INSTRUMENTAL_REQUIRED)
    path = catalog_writer("padded.csv", header, [["15/08/2007", "18:40:57", "-12", "-77", "39", "7.9"]])
    rows = load_instrumental_catalog(path)
    assert list(rows.columns) == list(INSTRUMENTAL_REQUIRED)


def test_missing_columns_are_listed(catalog_writer) -> None:
    header = tuple(column for column in HISTORICAL_REQUIRED if column != "magnitud (Mw)")
    path = catalog_writer("short.csv", header, [["28/10/1746", "22:30:00", "-12", "-77", "-", "-", "8.6"]])
    with pytest.raises(SchemaValidationError, match=r"magnitud \(Mw\)") as excinfo:
        load_historical_catalog(path)
    assert excinfo.value.missing == ["magnitud (Mw)"]


def test_empty_file_is_a_schema_error(tmp_path) -> None:
    path = tmp_path / "empty.csv"
    path.write_text("", encoding="utf-8")
    with pytest.raises(SchemaValidationError, match="empty"):
        load_instrumental_catalog(path)


def test_missing_file_propagates(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_instrumental_catalog(tmp_path / "nope.csv")
