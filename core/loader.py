"""Load the plot point layer and the state outline from vector files."""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

import geopandas as gpd
import pandas as pd

from core.cleaning import drop_incomplete


logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

WGS84 = "EPSG:4326"

REQUIRED_COLUMNS: List[str] = [
    "plot_id",
    "year",
    "biomass",
    "diameter",
    "height",
    "elevation",
    "tree_count",
    "burned",
]
INTEGER_COLUMNS: List[str] = ["year", "tree_count", "burned"]
FLOAT_COLUMNS: List[str] = ["biomass", "diameter", "height", "elevation"]
COORDINATE_COLUMNS: List[str] = ["longitude", "latitude"]


def load_plots(
    path: PathLike,
    rename: Optional[Dict[str, str]] = None,
    drop_missing: bool = True,
) -> pd.DataFrame:
    """
    Load plot records from a point layer into a DataFrame.

    Args:
        path: Shapefile / GeoPackage / GeoJSON holding point geometries
        rename: Optional source field -> canonical column mapping
        drop_missing: Drop rows with any null value (the default policy)
            and validate the result with ``validate_schema``. When False the
            table comes back as read, nulls and source types included, and
            the caller must run ``drop_incomplete`` then ``validate_schema``
            before analysis (``run_analysis`` does).

    Returns:
        DataFrame of the canonical columns plus longitude and latitude
    """
    gdf = _read_layer(path)

    geom_types = set(gdf.geometry.dropna().geom_type.unique())
    if geom_types - {"Point"}:
        raise ValueError(f"Expected point geometries, found: {sorted(geom_types)}")

    gdf = gdf.rename(columns={col: col.lower() for col in gdf.columns if col != gdf.geometry.name})
    if rename:
        gdf = gdf.rename(columns={src.lower(): dst for src, dst in rename.items()})

    df = pd.DataFrame(gdf.drop(columns=gdf.geometry.name))
    df["longitude"] = gdf.geometry.x.values
    df["latitude"] = gdf.geometry.y.values
    logger.info("Loaded %d plots from %s", len(df), path)

    missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise ValueError(f"Plot layer is missing required columns: {', '.join(missing)}")

    df = df[REQUIRED_COLUMNS + COORDINATE_COLUMNS]
    if drop_missing:
        df = drop_incomplete(df)
        return validate_schema(df)
    return df


def validate_schema(df: pd.DataFrame) -> pd.DataFrame:
    """
    Check required columns and coerce column types on a null-free table.

    Integer columns must hold whole numbers and ``burned`` must be 0 or 1.
    The returned copy carries a fresh 0..n-1 index.
    """
    missing = [col for col in REQUIRED_COLUMNS + COORDINATE_COLUMNS if col not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {', '.join(missing)}")

    if df[REQUIRED_COLUMNS].isna().any().any():
        raise ValueError("Schema validation requires a table without missing values")

    typed = df.copy()
    for col in FLOAT_COLUMNS + COORDINATE_COLUMNS:
        typed[col] = pd.to_numeric(typed[col], errors="raise").astype("float64")
    for col in INTEGER_COLUMNS:
        values = pd.to_numeric(typed[col], errors="raise")
        fractional = values % 1 != 0
        if fractional.any():
            raise ValueError(
                f"'{col}' must hold whole numbers, found {sorted(values[fractional].unique().tolist())}"
            )
        typed[col] = values.astype("int64")

    bad_flags = sorted(set(typed["burned"].unique()) - {0, 1})
    if bad_flags:
        raise ValueError(f"'burned' must be 0 or 1, found {bad_flags}")

    # Later stages join results back by row label
    return typed.reset_index(drop=True)


def load_boundary(path: PathLike) -> gpd.GeoDataFrame:
    """Load the region outline polygons in WGS84."""
    boundary = _read_layer(path)
    geom_types = set(boundary.geometry.dropna().geom_type.unique())
    if not geom_types <= {"Polygon", "MultiPolygon"}:
        raise ValueError(f"Boundary layer must hold polygons, found: {sorted(geom_types)}")
    return boundary


def _read_layer(path: PathLike) -> gpd.GeoDataFrame:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")

    gdf = gpd.read_file(path)
    if gdf.crs is not None and gdf.crs.to_epsg() != 4326:
        logger.info("Reprojecting %s from %s to %s", path.name, gdf.crs, WGS84)
        gdf = gdf.to_crs(WGS84)
    return gdf
