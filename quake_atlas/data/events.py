"""Typed event records flowing through the pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Optional, Union


class EventType(str, Enum):
    INSTRUMENTAL = "Instrumental"
    HISTORICAL = "Historical"


# Column order of the exported table, consumed by the visualization layer
EXPORT_COLUMNS = [
    "eventId",
    "utcDate",
    "longitude",
    "latitude",
    "depth",
    "magnitude",
    "year",
    "type",
    "districtId",
    "distanceFromCoastKm",
    "department",
    "description",
]


class _EventMixin:
    utc_date: datetime

    @property
    def year(self) -> int:
        return self.utc_date.year


@dataclass(frozen=True)
class InstrumentalEvent(_EventMixin):
    """Instrument-recorded event with a single magnitude reading."""

    event_id: int
    utc_date: datetime
    longitude: Optional[float]
    latitude: Optional[float]
    depth: float
    magnitude: float

    type: ClassVar[EventType] = EventType.INSTRUMENTAL


@dataclass(frozen=True)
class HistoricalEvent(_EventMixin):
    """Pre-instrumental event with up to three magnitude scales (mb, Ms, Mw)."""

    event_id: int
    utc_date: datetime
    longitude: Optional[float]
    latitude: Optional[float]
    depth: float
    magnitude_mb: float
    magnitude_ms: float
    magnitude_mw: float

    type: ClassVar[EventType] = EventType.HISTORICAL

    @property
    def magnitude(self) -> float:
        return max(self.magnitude_mb, self.magnitude_ms, self.magnitude_mw)


RawEvent = Union[InstrumentalEvent, HistoricalEvent]


@dataclass(frozen=True)
class EnrichedEvent:
    """One row of the exported table."""

    event_id: int
    utc_date: datetime
    longitude: Optional[float]
    latitude: Optional[float]
    depth: float
    magnitude: float
    year: int
    type: EventType
    district_id: Optional[str]
    distance_from_coast_km: Optional[float]
    department: Optional[str]
    description: Optional[str]

    def to_record(self) -> dict[str, Any]:
        """Flat mapping keyed by export column name, in export order."""

        return {
            "eventId": self.event_id,
            "utcDate": self.utc_date,
            "longitude": self.longitude,
            "latitude": self.latitude,
            "depth": self.depth,
            "magnitude": self.magnitude,
            "year": self.year,
            "type": self.type.value,
            "districtId": self.district_id,
            "distanceFromCoastKm": self.distance_from_coast_km,
            "department": self.department,
            "description": self.description,
        }
