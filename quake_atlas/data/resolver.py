"""Attach administrative context (district, department, coast distance) to event locations."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import geopandas as gpd
import numpy as np
import pandas as pd

from quake_atlas.config import DISTANCE_DECIMALS
from quake_atlas.data.spatial_ops import (
    assign_points_to_district,
    capitalize_words,
    department_code,
    make_points_from_lonlat,
    nearest_point_distance,
)
from quake_atlas.errors import NoCoastalCentroidError

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    """Geographic context for one event location."""

    district_id: Optional[str]
    distance_from_coast_km: Optional[float]
    department: Optional[str]
    description: Optional[str]

    @property
    def offshore(self) -> bool:
        return bool(self.distance_from_coast_km)


UNRESOLVED = Resolution(None, None, None, None)


def _name_lookup(features: gpd.GeoDataFrame) -> dict[str, str]:
    lookup: dict[str, str] = {}
    for feature_id, name in zip(features["id"], features["name"]):
        if isinstance(feature_id, str) and isinstance(name, str) and name:
            lookup.setdefault(feature_id, name)
    return lookup


def _as_float_array(values: Sequence[Optional[float]]) -> np.ndarray:
    return np.asarray([np.nan if value is None else value for value in values], dtype=float)


class GeoResolver:
    """Resolve event coordinates against districts, departments and coastal centroids.

    Points inside a district take that district with a distance of 0.
    Points outside every district are treated as offshore and take the
    nearest coastal centroid together with the great-circle distance to it
    (km, one decimal). Department and description are looked up from the
    resulting district id.
    """

    def __init__(
        self,
        districts: gpd.GeoDataFrame,
        departments: gpd.GeoDataFrame,
        coastal_centroids: gpd.GeoDataFrame,
    ) -> None:
        self.districts = districts
        self.coastal_centroids = coastal_centroids
        self._district_names = _name_lookup(districts)
        self._department_names = _name_lookup(departments)

    def department_for(self, district_id: str) -> Optional[str]:
        name = self._department_names.get(department_code(district_id))
        return capitalize_words(name) if name else None

    def description_for(self, district_id: str) -> Optional[str]:
        if not district_id.isdigit():
            return None
        name = self._district_names.get(district_id)
        return capitalize_words(name) if name else None

    def _resolution(self, district_id: Optional[str], distance: float) -> Resolution:
        if district_id is None:
            return UNRESOLVED
        return Resolution(
            district_id=district_id,
            distance_from_coast_km=float(distance),
            department=self.department_for(district_id),
            description=self.description_for(district_id),
        )

    def resolve_many(
        self,
        lons: Sequence[Optional[float]],
        lats: Sequence[Optional[float]],
    ) -> list[Resolution]:
        """Resolve many locations at once; results follow input order."""

        lons = _as_float_array(lons)
        lats = _as_float_array(lats)
        if len(lons) != len(lats):
            raise ValueError(f"Got {len(lons)} longitudes but {len(lats)} latitudes.")

        district_ids = np.full(len(lons), None, dtype=object)
        distances = np.full(len(lons), np.nan)
        located = np.flatnonzero(np.isfinite(lons) & np.isfinite(lats))

        if located.size:
            points = make_points_from_lonlat(lons[located], lats[located])
            contained = assign_points_to_district(points, self.districts).to_numpy(dtype=object)
            inside = ~pd.isna(contained)
            district_ids[located[inside]] = contained[inside]
            distances[located[inside]] = 0.0

            offshore = located[~inside]
            if offshore.size:
                if self.coastal_centroids.empty:
                    raise NoCoastalCentroidError(
                        f"{offshore.size} offshore events need a coastal fallback but no coastal centroids exist."
                    )
                nearest_ids, nearest_km = nearest_point_distance(
                    lons[offshore], lats[offshore], self.coastal_centroids
                )
                district_ids[offshore] = nearest_ids
                distances[offshore] = np.round(nearest_km, DISTANCE_DECIMALS)

            LOGGER.info(
                "Resolved %d events: %d inside a district, %d offshore",
                located.size,
                int(inside.sum()),
                offshore.size,
            )
        if located.size < len(lons):
            LOGGER.warning("%d events have no usable coordinates and stay unresolved", len(lons) - located.size)

        return [self._resolution(district_id, distance) for district_id, distance in zip(district_ids, distances)]

    def resolve(self, lon: Optional[float], lat: Optional[float]) -> Resolution:
        return self.resolve_many([lon], [lat])[0]
