"""Spatial operations and CRS utilities for seismic event enrichment."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

import geopandas as gpd
import numpy as np
import pandas as pd
from shapely.geometry import MultiPolygon, Point, Polygon
from shapely.geometry.polygon import orient

from quake_atlas.config import (
    COASTAL_DEPARTMENT_CODES,
    DEPARTMENT_CODE_LENGTH,
    EARTH_RADIUS_KM,
)
from quake_atlas.errors import InvalidGeometryError

LOGGER = logging.getLogger(__name__)

# Rows per block when building event x target distance matrices
DISTANCE_BLOCK_ROWS = 2048


@dataclass(frozen=True)
class CRSConfig:
    """Centralized CRS configuration."""

    wgs84: str = "EPSG:4326"
    equal_area: str = "EPSG:6933"


CRS = CRSConfig()


def _ensure_crs(gdf: gpd.GeoDataFrame, target_crs: str) -> gpd.GeoDataFrame:
    if gdf.crs is None:
        raise ValueError("GeoDataFrame missing CRS; please set a CRS before operations.")
    if gdf.crs.to_string() != target_crs:
        return gdf.to_crs(target_crs)
    return gdf


def capitalize_words(text: str) -> str:
    """Lower-case a name, then upper-case the first letter of each space-separated word."""

    return " ".join(word[:1].upper() + word[1:] for word in text.lower().split(" "))


def department_code(district_id: str) -> str:
    return district_id[:DEPARTMENT_CODE_LENGTH]


def _is_missing(value) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and np.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def rewind_geometry(geometry):
    """Orient polygon rings consistently: exterior counter-clockwise, holes clockwise."""

    if isinstance(geometry, Polygon):
        return orient(geometry, sign=1.0)
    if isinstance(geometry, MultiPolygon):
        return MultiPolygon([orient(part, sign=1.0) for part in geometry.geoms])
    return geometry


def compute_district_centroids(districts_gdf: gpd.GeoDataFrame) -> gpd.GeoDataFrame:
    """Compute one centroid point per district, carrying its id and capitalized name."""

    for position, row in enumerate(districts_gdf.itertuples(index=False)):
        if _is_missing(row.id):
            raise InvalidGeometryError(f"District at position {position} has no id.")
        if not isinstance(row.name, str) or not row.name.strip():
            raise InvalidGeometryError(f"District {row.id!r} has no name.")
        if row.geometry is None or row.geometry.is_empty:
            raise InvalidGeometryError(f"District {row.id!r} has no coordinates.")
        if not isinstance(row.geometry, (Polygon, MultiPolygon)):
            raise InvalidGeometryError(f"District {row.id!r} is a {row.geometry.geom_type}, not a polygon.")

    districts = _ensure_crs(districts_gdf, CRS.wgs84)
    rewound = gpd.GeoSeries(
        [rewind_geometry(geom) for geom in districts.geometry],
        crs=CRS.wgs84,
    )
    centroids = rewound.to_crs(CRS.equal_area).centroid.to_crs(CRS.wgs84)
    result = gpd.GeoDataFrame(
        {
            "id": [str(value) for value in districts["id"]],
            "name": [capitalize_words(name) for name in districts["name"]],
        },
        geometry=list(centroids),
        crs=CRS.wgs84,
    )
    LOGGER.info("Computed %d district centroids", len(result))
    return result


def filter_coastal_centroids(
    centroids_gdf: gpd.GeoDataFrame,
    coastal_codes: Iterable[str] = COASTAL_DEPARTMENT_CODES,
) -> gpd.GeoDataFrame:
    """Keep centroids whose department prefix belongs to a coastal department."""

    codes = sorted(coastal_codes)
    ids = centroids_gdf["id"]
    valid = ids.map(lambda value: isinstance(value, str) and len(value) >= DEPARTMENT_CODE_LENGTH)
    if not valid.all():
        LOGGER.warning("Skipping %d centroids without a valid string id", int((~valid).sum()))
    prefixes = ids.where(valid, "").astype(str).str[:DEPARTMENT_CODE_LENGTH]
    coastal = centroids_gdf.loc[valid & prefixes.isin(codes)].reset_index(drop=True)
    LOGGER.info("Identified %d coastal district centroids", len(coastal))
    return coastal


def make_points_from_lonlat(lons: Sequence[float], lats: Sequence[float]) -> gpd.GeoDataFrame:
    """Create a point GeoDataFrame from parallel longitude/latitude sequences."""

    if len(lons) != len(lats):
        raise ValueError(f"Got {len(lons)} longitudes but {len(lats)} latitudes.")
    geometry = [Point(xy) for xy in zip(lons, lats)]
    return gpd.GeoDataFrame(geometry=geometry, crs=CRS.wgs84)


def assign_points_to_district(points_gdf: gpd.GeoDataFrame, districts_gdf: gpd.GeoDataFrame) -> pd.Series:
    """Return the id of the first district (in feature order) containing each point.

    Points on a district boundary count as contained. Points outside every
    district get None.
    """

    points = _ensure_crs(points_gdf, CRS.wgs84).reset_index(drop=True)
    if points.empty:
        return pd.Series([], dtype=object)
    districts = _ensure_crs(districts_gdf, CRS.wgs84)
    ordered = gpd.GeoDataFrame(
        {"district_id": list(districts["id"]), "district_pos": np.arange(len(districts))},
        geometry=list(districts.geometry),
        crs=CRS.wgs84,
    )
    joined = gpd.sjoin(points, ordered, how="left", predicate="intersects")
    # Several matches only happen on shared borders; lowest feature position wins.
    first = joined.groupby(level=0)["district_pos"].min().reindex(points.index)
    district_ids = ordered["district_id"].to_numpy(dtype=object)
    ids = pd.Series(
        [district_ids[int(pos)] if pd.notna(pos) else None for pos in first],
        index=points.index,
        dtype=object,
    )
    join_rate = first.notna().mean()
    LOGGER.info("District join rate: %.2f%%", join_rate * 100)
    return ids


def haversine_km(lat1, lon1, lat2, lon2):
    """Vectorized great-circle distance in km; inputs broadcast against each other."""

    phi1, phi2 = np.radians(lat1), np.radians(lat2)
    dphi = phi2 - phi1
    dlam = np.radians(lon2) - np.radians(lon1)
    a = np.sin(dphi / 2.0) ** 2 + np.cos(phi1) * np.cos(phi2) * np.sin(dlam / 2.0) ** 2
    return 2.0 * EARTH_RADIUS_KM * np.arctan2(np.sqrt(a), np.sqrt(1.0 - a))


def nearest_point_distance(
    lons: Sequence[float],
    lats: Sequence[float],
    targets_gdf: gpd.GeoDataFrame,
) -> tuple[np.ndarray, np.ndarray]:
    """Find the nearest target point for each location.

    Returns the target ids and great-circle distances in km. Ties go to
    the earlier target.
    """

    targets = _ensure_crs(targets_gdf, CRS.wgs84)
    if targets.empty:
        raise ValueError("Targets must be non-empty to compute nearest distances.")
    target_lon = targets.geometry.x.to_numpy()
    target_lat = targets.geometry.y.to_numpy()
    target_ids = targets["id"].to_numpy(dtype=object)

    lons = np.asarray(lons, dtype=float)
    lats = np.asarray(lats, dtype=float)
    ids = np.empty(len(lons), dtype=object)
    distances = np.empty(len(lons), dtype=float)
    for start in range(0, len(lons), DISTANCE_BLOCK_ROWS):
        stop = start + DISTANCE_BLOCK_ROWS
        block = haversine_km(
            lats[start:stop, None],
            lons[start:stop, None],
            target_lat[None, :],
            target_lon[None, :],
        )
        nearest = block.argmin(axis=1)
        ids[start:stop] = target_ids[nearest]
        distances[start:stop] = block[np.arange(len(nearest)), nearest]
    return ids, distances
