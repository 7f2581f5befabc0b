"""Error taxonomy for the catalog build."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


class QuakeAtlasError(Exception):
    """Base class for fatal pipeline errors."""


class SchemaValidationError(QuakeAtlasError):
    """A catalog file is unreadable or lacks required columns."""

    def __init__(self, label: str, missing: Iterable[str] = ()) -> None:
        self.label = label
        self.missing = sorted(missing)
        if self.missing:
            message = f"{label}: missing required columns: {self.missing}"
        else:
            message = label
        super().__init__(message)


class GeoFormatError(QuakeAtlasError):
    """The topology file is malformed or lacks required layers."""


class InvalidGeometryError(QuakeAtlasError):
    """A boundary feature lacks an id, a name or a usable geometry."""


class NoCoastalCentroidError(QuakeAtlasError):
    """An offshore event needs a coastal fallback but none are available."""


class InvalidInputError(QuakeAtlasError):
    """Merge inputs are not well-formed."""


class ExportError(QuakeAtlasError):
    """The enriched table could not be serialized."""


@dataclass(frozen=True)
class RecordParseDefect:
    """A single unparseable field in a catalog row.

    Non-fatal: collected on the run context and reported, never raised.
    """

    catalog: str
    row: int
    field: str
    value: str
    action: str
