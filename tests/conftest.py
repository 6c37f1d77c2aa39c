"""Test fixtures and configuration for pytest."""

import matplotlib

matplotlib.use("Agg")

import geopandas as gpd
import numpy as np
import pandas as pd
import pytest
from shapely.geometry import box


OREGON_BOUNDS = (-124.6, 41.99, -116.46, 46.29)


def make_plots(n: int = 300, seed: int = 42) -> pd.DataFrame:
    """Synthetic plot table with a weak height ~ elevation relationship."""
    rng = np.random.RandomState(seed)
    burned = rng.choice([0, 1], n, p=[0.75, 0.25])
    elevation = rng.uniform(100, 2000, n) + 200 * burned
    return pd.DataFrame({
        "plot_id": [f"P{i:04d}" for i in range(n)],
        "year": rng.choice([2016, 2017, 2018, 2019], n),
        "biomass": rng.gamma(4, 20, n),
        "diameter": rng.uniform(5, 60, n),
        "height": 40 + 0.01 * elevation + rng.normal(0, 12, n),
        "elevation": elevation,
        "tree_count": rng.randint(1, 80, n),
        "burned": burned,
        "longitude": rng.uniform(-124, -117, n),
        "latitude": rng.uniform(42.2, 46, n),
    })


def to_points(df: pd.DataFrame, crs: str = "EPSG:4326") -> gpd.GeoDataFrame:
    attributes = df.drop(columns=["longitude", "latitude"])
    return gpd.GeoDataFrame(
        attributes,
        geometry=gpd.points_from_xy(df["longitude"], df["latitude"]),
        crs=crs,
    )


@pytest.fixture
def plots_factory():
    """Build plot tables of any size."""
    return make_plots


@pytest.fixture
def sample_plots_df():
    """Complete plot table without outliers."""
    return make_plots()


@pytest.fixture
def raw_plots_df():
    """Plot table with missing values and a handful of outliers."""
    df = make_plots()
    df.loc[0:9, "diameter"] = np.nan
    df.loc[10:14, "biomass"] = np.nan
    df.loc[20:24, "height"] = 8000.0
    df.loc[25:27, "diameter"] = 150.0
    return df


@pytest.fixture
def plots_shapefile(tmp_path, sample_plots_df):
    """Complete plot table written as a point shapefile."""
    path = tmp_path / "plots.shp"
    to_points(sample_plots_df).to_file(path)
    return path


@pytest.fixture
def plots_gpkg_with_nulls(tmp_path, raw_plots_df):
    """Plot table with nulls written as a GeoPackage."""
    path = tmp_path / "plots.gpkg"
    to_points(raw_plots_df).to_file(path, driver="GPKG")
    return path


@pytest.fixture
def boundary_gdf():
    """Rectangular stand-in for the Oregon outline."""
    return gpd.GeoDataFrame({"name": ["Oregon"]}, geometry=[box(*OREGON_BOUNDS)], crs="EPSG:4326")


@pytest.fixture
def boundary_file(tmp_path, boundary_gdf):
    path = tmp_path / "boundary.shp"
    boundary_gdf.to_file(path)
    return path
