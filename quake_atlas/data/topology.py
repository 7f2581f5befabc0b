"""TopoJSON boundary loading for districts and departments."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import geopandas as gpd
import pandas as pd
from pyogrio.errors import DataLayerError, DataSourceError

from quake_atlas.config import DEPARTMENT_LAYER, DISTRICT_LAYER
from quake_atlas.data.spatial_ops import CRS
from quake_atlas.errors import GeoFormatError

LOGGER = logging.getLogger(__name__)

BOUNDARY_COLUMNS = ["id", "name", "geometry"]


@dataclass(frozen=True)
class Geography:
    """District and department feature sets decoded from one topology."""

    districts: gpd.GeoDataFrame
    departments: gpd.GeoDataFrame


def validate_topology(topology: Any, required_layers: tuple[str, ...]) -> None:
    """Raise GeoFormatError listing every structural problem found."""

    if not isinstance(topology, Mapping):
        raise GeoFormatError("Geographic data must be a JSON object.")

    errors: list[str] = []
    if topology.get("type") not in (None, "Topology"):
        errors.append(f'expected type "Topology", got {topology.get("type")!r}')
    objects = topology.get("objects")
    if not isinstance(objects, Mapping):
        errors.append('missing or invalid "objects" property')
    else:
        missing = [layer for layer in required_layers if layer not in objects]
        if missing:
            errors.append(f"missing required layers: {missing}")
    if not isinstance(topology.get("arcs"), list):
        errors.append('missing or invalid "arcs" array')
    if errors:
        raise GeoFormatError("Invalid topology: " + "; ".join(errors))


def _read_layer(path: Path, layer: str) -> gpd.GeoDataFrame:
    """Read one topology object as id/name/geometry features in WGS84."""

    try:
        gdf = gpd.read_file(path, layer=layer, engine="pyogrio")
    except (DataSourceError, DataLayerError) as exc:
        raise GeoFormatError(f"Cannot decode layer {layer!r} of {path}: {exc}") from exc

    if gdf.crs is None:
        gdf = gdf.set_crs(CRS.wgs84)
    elif gdf.crs.to_string() != CRS.wgs84:
        gdf = gdf.to_crs(CRS.wgs84)
    if "id" not in gdf.columns:
        raise GeoFormatError(f"Layer {layer!r} of {path} has no feature ids.")
    if "name" not in gdf.columns:
        gdf["name"] = None

    gdf["id"] = [str(value) if pd.notna(value) else None for value in gdf["id"]]
    return gdf[BOUNDARY_COLUMNS].reset_index(drop=True)


def load_geography(
    path: str | Path,
    district_layer: str = DISTRICT_LAYER,
    department_layer: str = DEPARTMENT_LAYER,
) -> Geography:
    """Load a TopoJSON file and read its district and department layers."""

    path = Path(path)
    try:
        topology = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise GeoFormatError(f"Failed to parse geographic data {path}: {exc}") from exc

    validate_topology(topology, (district_layer, department_layer))
    districts = _read_layer(path, district_layer)
    departments = _read_layer(path, department_layer)
    LOGGER.info(
        "Loaded %d districts and %d departments from %s",
        len(districts),
        len(departments),
        path,
    )
    return Geography(districts=districts, departments=departments)
