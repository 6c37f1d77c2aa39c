"""
Centralized configuration for the Oregon plot analysis.

Holds the fixed analysis constants, map viewport defaults and file locations,
with environment overrides for paths and logging only.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional


# Column order matters for the scatter matrices and correlation plots
EXPLORE_COLUMNS = [
    "year",
    "biomass",
    "diameter",
    "height",
    "elevation",
    "tree_count",
    "burned",
]
RELEVANT_COLUMNS = ["biomass", "diameter", "height", "elevation", "tree_count"]

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class AnalysisConfig:
    """Analysis constants and column selections."""

    # Cutoffs picked by eye from the scatter matrix; kept fixed for reproducibility
    max_height: float = 7000.0
    max_diameter: float = 120.0
    significance_level: float = 0.05

    focus_year: Optional[int] = None  # None = latest year in the data
    explore_columns: List[str] = field(default_factory=lambda: list(EXPLORE_COLUMNS))
    relevant_columns: List[str] = field(default_factory=lambda: list(RELEVANT_COLUMNS))
    group_column: str = "burned"
    anova_response: str = "elevation"
    regression_response: str = "height"
    regression_predictor: str = "elevation"

    # Source field name -> canonical column name
    column_rename: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_env(cls) -> "AnalysisConfig":
        """Load analysis config; only the focus year may come from the environment."""
        year = os.getenv("FOCUS_YEAR")
        return cls(focus_year=int(year) if year else None)


@dataclass(frozen=True)
class MapConfig:
    """Residual map rendering defaults."""

    center_lon: float = -120.5
    center_lat: float = 43.5
    zoom: int = 6
    map_style: str = "carto-positron"
    colorscale: str = "RdBu_r"
    colormap: str = "RdBu_r"
    marker_size: int = 8
    height: int = 650

    @property
    def center(self) -> Dict[str, float]:
        return {"lat": self.center_lat, "lon": self.center_lon}


@dataclass(frozen=True)
class PathsConfig:
    """Input and output file locations."""

    plots_path: Path
    boundary_path: Path
    output_dir: Path

    @classmethod
    def from_env(cls, root_dir: Path) -> "PathsConfig":
        """Load paths from environment variables, relative to the project root."""
        data_dir = root_dir / "data"
        return cls(
            plots_path=Path(os.getenv("PLOTS_PATH", data_dir / "oregon_plots.shp")),
            boundary_path=Path(os.getenv("BOUNDARY_PATH", data_dir / "oregon_boundary.shp")),
            output_dir=Path(os.getenv("OUTPUT_DIR", root_dir / "output")),
        )


class Config:
    """Global configuration manager."""

    _instance: Optional["Config"] = None

    def __init__(self):
        self.root_dir = Path(__file__).parent.parent
        self.data_dir = self.root_dir / "data"
        self.analysis = AnalysisConfig.from_env()
        self.maps = MapConfig()
        self.paths = PathsConfig.from_env(self.root_dir)
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    @classmethod
    def load(cls) -> "Config":
        """Singleton pattern - load or return existing config."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance


def configure_logging(level: str = "INFO") -> None:
    """Attach a single stream handler to the root logger."""
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
