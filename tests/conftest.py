"""Shared fixtures: a three-district topology and catalog file writers."""

from __future__ import annotations

import csv
import json
from pathlib import Path

import pytest

from quake_atlas.config import HISTORICAL_REQUIRED, INSTRUMENTAL_REQUIRED
from quake_atlas.data.topology import load_geography


def _square(x0: float, y0: float, x1: float, y1: float) -> list[list[float]]:
    return [[x0, y0], [x1, y0], [x1, y1], [x0, y1], [x0, y0]]


# Lima (coastal), Arequipa (coastal) and Ayacucho (inland)
DISTRICTS = [
    ("150101", "LIMA", _square(-77.2, -12.2, -76.8, -11.8)),
    ("040101", "AREQUIPA", _square(-71.7, -16.6, -71.3, -16.2)),
    ("050101", "AYACUCHO", _square(-74.4, -13.3, -74.0, -12.9)),
]
DEPARTMENTS = [("15", "LIMA"), ("04", "AREQUIPA"), ("05", "AYACUCHO")]


def make_topology() -> dict:
    return {
        "type": "Topology",
        "arcs": [ring for _, _, ring in DISTRICTS],
        "objects": {
            "level4": {
                "type": "GeometryCollection",
                "geometries": [
                    {"type": "Polygon", "id": code, "properties": {"name": name}, "arcs": [[k]]}
                    for k, (code, name, _) in enumerate(DISTRICTS)
                ],
            },
            "level2": {
                "type": "GeometryCollection",
                "geometries": [
                    {"type": "Polygon", "id": code, "properties": {"name": name}, "arcs": [[k]]}
                    for k, (code, name) in enumerate(DEPARTMENTS)
                ],
            },
        },
    }


def write_catalog(path: Path, header: tuple[str, ...], rows: list[list[str]]) -> Path:
    with path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.writer(handle)
        writer.writerow(header)
        writer.writerows(rows)
    return path


@pytest.fixture
def topology_path(tmp_path: Path) -> Path:
    path = tmp_path / "peru.json"
    path.write_text(json.dumps(make_topology()), encoding="utf-8")
    return path


@pytest.fixture
def geography(topology_path: Path):
    return load_geography(topology_path)


@pytest.fixture
def instrumental_path(tmp_path: Path) -> Path:
    return write_catalog(
        tmp_path / "instrumental.csv",
        INSTRUMENTAL_REQUIRED,
        [
            ["01/01/2010", "10:00:00.50", "-14.0", "-80.0", "20", "5.1"],
            ["15/08/2007", "18:40:57", "-12.0", "-77.0", "39", "7.9"],
        ],
    )


@pytest.fixture
def historical_path(tmp_path: Path) -> Path:
    return write_catalog(
        tmp_path / "historical.csv",
        HISTORICAL_REQUIRED,
        [
            ["28/10/1746", "22:30:0", "-12.0", "-77.1", "-", "-", "8.6-", "-"],
        ],
    )


@pytest.fixture
def catalog_writer(tmp_path: Path):
    def _write(name: str, header: tuple[str, ...], rows: list[list[str]]) -> Path:
        return write_catalog(tmp_path / name, header, rows)

    return _write
