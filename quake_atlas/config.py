"""Project-wide configuration constants and run settings."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

# TopoJSON object names for the two administrative levels
DISTRICT_LAYER = "level4"
DEPARTMENT_LAYER = "level2"

# Department codes for coastal regions:
# Ancash (02), Arequipa (04), Callao (07), Ica (11), La Libertad (13),
# Lambayeque (14), Lima (15), Moquegua (18), Piura (20), Tacna (23), Tumbes (24)
COASTAL_DEPARTMENT_CODES = frozenset(
    {"02", "04", "07", "11", "13", "14", "15", "18", "20", "23", "24"}
)
DEPARTMENT_CODE_LENGTH = 2

# Mean earth radius used for great-circle distances (km)
EARTH_RADIUS_KM = 6371.0088
DISTANCE_DECIMALS = 1

# Catalog columns
DATE_COLUMN = "fecha UTC"
TIME_COLUMN = "hora UTC"
LATITUDE_COLUMN = "latitud (º)"
LONGITUDE_COLUMN = "longitud (º)"
DEPTH_COLUMN = "profundidad (km)"
MAGNITUDE_COLUMN = "magnitud (M)"
MAGNITUDE_MB_COLUMN = "magnitud (mb)"
MAGNITUDE_MS_COLUMN = "magnitud (Ms)"
MAGNITUDE_MW_COLUMN = "magnitud (Mw)"

INSTRUMENTAL_REQUIRED = (
    DATE_COLUMN,
    TIME_COLUMN,
    LATITUDE_COLUMN,
    LONGITUDE_COLUMN,
    DEPTH_COLUMN,
    MAGNITUDE_COLUMN,
)
HISTORICAL_REQUIRED = (
    DATE_COLUMN,
    TIME_COLUMN,
    LATITUDE_COLUMN,
    LONGITUDE_COLUMN,
    DEPTH_COLUMN,
    MAGNITUDE_MB_COLUMN,
    MAGNITUDE_MS_COLUMN,
    MAGNITUDE_MW_COLUMN,
)

DATETIME_FORMAT = "%d/%m/%Y %H:%M:%S"

# Export
STREAM_EXPORT_THRESHOLD = 10_000
EXPORT_CHUNK_SIZE = 1_000

# Approximate national latitude bounds used by the output validator
LATITUDE_BOUNDS = (-18.5, 0.0)

DEFAULT_GEO_DATA_PATH = Path("data/input/peru-100k.json")
DEFAULT_INSTRUMENTAL_DATA_PATH = Path("data/IGP_datos_sismicos.csv")
DEFAULT_HISTORICAL_DATA_PATH = Path("data/IGP_datos_sismicos-historical.csv")
DEFAULT_OUTPUT_PATH = Path("data/output/output.csv")


def _env_path(name: str, default: Path | None) -> Path | None:
    value = os.getenv(name)
    if value:
        return Path(value)
    return default


@dataclass(frozen=True)
class Settings:
    """Input/output locations and run options for one pipeline run."""

    geo_data_path: Path = DEFAULT_GEO_DATA_PATH
    instrumental_data_path: Path = DEFAULT_INSTRUMENTAL_DATA_PATH
    historical_data_path: Path = DEFAULT_HISTORICAL_DATA_PATH
    output_path: Path = DEFAULT_OUTPUT_PATH
    report_path: Path | None = None
    log_level: str = "INFO"
    catalog_encoding: str = "utf-8"
    stream_threshold: int = STREAM_EXPORT_THRESHOLD
    chunk_size: int = EXPORT_CHUNK_SIZE

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment overrides, falling back to project defaults."""

        return cls(
            geo_data_path=_env_path("GEO_DATA_PATH", DEFAULT_GEO_DATA_PATH),
            instrumental_data_path=_env_path("INSTRUMENTAL_DATA_PATH", DEFAULT_INSTRUMENTAL_DATA_PATH),
            historical_data_path=_env_path("HISTORICAL_DATA_PATH", DEFAULT_HISTORICAL_DATA_PATH),
            output_path=_env_path("OUTPUT_PATH", DEFAULT_OUTPUT_PATH),
            report_path=_env_path("REPORT_PATH", None),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            catalog_encoding=os.getenv("CATALOG_ENCODING", "utf-8"),
        )


@dataclass
class PipelineContext:
    """Explicit run state passed through the pipeline stages.

    Carries the settings, the logger the stages write to, and the
    non-fatal record defects collected while parsing the catalogs.
    """

    settings: Settings = field(default_factory=Settings)
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("quake_atlas"))
    defects: list = field(default_factory=list)

    def record_defect(self, defect) -> None:
        self.defects.append(defect)
        self.logger.debug(
            "%s row %s: unparseable %s=%r (%s)",
            defect.catalog,
            defect.row,
            defect.field,
            defect.value,
            defect.action,
        )

    def defect_counts(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for defect in self.defects:
            key = f"{defect.catalog}.{defect.field}"
            counts[key] = counts.get(key, 0) + 1
        return dict(sorted(counts.items()))
