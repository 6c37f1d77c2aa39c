"""Tests for the vector file loader."""

import geopandas as gpd
import numpy as np
import pandas as pd
import pytest
from shapely.geometry import box

from core.cleaning import drop_incomplete
from core.loader import (
    COORDINATE_COLUMNS,
    REQUIRED_COLUMNS,
    load_boundary,
    load_plots,
    validate_schema,
)


class TestLoadPlots:
    """Tests for reading plot layers."""

    def test_adds_coordinates_from_geometry(self, plots_shapefile, sample_plots_df):
        df = load_plots(plots_shapefile)

        assert list(df.columns) == REQUIRED_COLUMNS + COORDINATE_COLUMNS
        assert len(df) == len(sample_plots_df)
        np.testing.assert_allclose(df["longitude"].values, sample_plots_df["longitude"].values)
        np.testing.assert_allclose(df["latitude"].values, sample_plots_df["latitude"].values)

    def test_coerces_column_types(self, plots_shapefile):
        df = load_plots(plots_shapefile)

        assert df["year"].dtype == "int64"
        assert df["tree_count"].dtype == "int64"
        assert df["burned"].dtype == "int64"
        assert df["height"].dtype == "float64"

    def test_field_names_matched_case_insensitively(self, tmp_path, sample_plots_df):
        gdf = gpd.GeoDataFrame(
            sample_plots_df.drop(columns=["longitude", "latitude"]).rename(columns=str.upper),
            geometry=gpd.points_from_xy(sample_plots_df["longitude"], sample_plots_df["latitude"]),
            crs="EPSG:4326",
        )
        path = tmp_path / "upper.gpkg"
        gdf.to_file(path, driver="GPKG")

        df = load_plots(path)

        assert "elevation" in df.columns
        assert len(df) == len(sample_plots_df)

    def test_rename_map_applied(self, tmp_path, sample_plots_df):
        gdf = gpd.GeoDataFrame(
            sample_plots_df.drop(columns=["longitude", "latitude"]).rename(columns={"elevation": "ELEV"}),
            geometry=gpd.points_from_xy(sample_plots_df["longitude"], sample_plots_df["latitude"]),
            crs="EPSG:4326",
        )
        path = tmp_path / "renamed.gpkg"
        gdf.to_file(path, driver="GPKG")

        df = load_plots(path, rename={"ELEV": "elevation"})

        np.testing.assert_allclose(df["elevation"].values, sample_plots_df["elevation"].values)

    def test_drops_rows_with_missing_values(self, plots_gpkg_with_nulls, raw_plots_df):
        df = load_plots(plots_gpkg_with_nulls)

        assert len(df) == len(raw_plots_df.dropna())
        assert not df.isna().any().any()

    def test_keeps_missing_values_when_asked(self, plots_gpkg_with_nulls, raw_plots_df):
        df = load_plots(plots_gpkg_with_nulls, drop_missing=False)

        assert len(df) == len(raw_plots_df)
        assert df["diameter"].isna().sum() == 10

    def test_unvalidated_table_validates_like_default_load(self, plots_gpkg_with_nulls):
        kept = load_plots(plots_gpkg_with_nulls, drop_missing=False)

        with pytest.raises(ValueError, match="missing values"):
            validate_schema(kept)

        pd.testing.assert_frame_equal(
            validate_schema(drop_incomplete(kept)),
            load_plots(plots_gpkg_with_nulls),
        )

    def test_reprojects_to_wgs84(self, tmp_path, sample_plots_df):
        gdf = gpd.GeoDataFrame(
            sample_plots_df.drop(columns=["longitude", "latitude"]),
            geometry=gpd.points_from_xy(sample_plots_df["longitude"], sample_plots_df["latitude"]),
            crs="EPSG:4326",
        ).to_crs("EPSG:3857")
        path = tmp_path / "mercator.gpkg"
        gdf.to_file(path, driver="GPKG")

        df = load_plots(path)

        np.testing.assert_allclose(df["longitude"].values, sample_plots_df["longitude"].values, atol=1e-6)
        np.testing.assert_allclose(df["latitude"].values, sample_plots_df["latitude"].values, atol=1e-6)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_plots(tmp_path / "nope.shp")

    def test_missing_required_column_raises(self, tmp_path, sample_plots_df):
        gdf = gpd.GeoDataFrame(
            sample_plots_df.drop(columns=["longitude", "latitude", "burned"]),
            geometry=gpd.points_from_xy(sample_plots_df["longitude"], sample_plots_df["latitude"]),
            crs="EPSG:4326",
        )
        path = tmp_path / "no_burned.gpkg"
        gdf.to_file(path, driver="GPKG")

        with pytest.raises(ValueError, match="burned"):
            load_plots(path)

    def test_non_point_geometry_raises(self, boundary_file):
        with pytest.raises(ValueError, match="point"):
            load_plots(boundary_file)


class TestValidateSchema:
    """Tests for schema checks on an in-memory table."""

    def test_rejects_non_binary_burned(self, sample_plots_df):
        df = sample_plots_df.copy()
        df.loc[0, "burned"] = 2

        with pytest.raises(ValueError, match="burned"):
            validate_schema(df)

    def test_rejects_missing_values(self, raw_plots_df):
        with pytest.raises(ValueError):
            validate_schema(raw_plots_df)

    def test_rejects_fractional_year(self, plots_factory):
        df = plots_factory(n=5).assign(year=[2016.5, 2017, 2017, 2018, 2019])

        with pytest.raises(ValueError, match="year"):
            validate_schema(df)

    def test_accepts_whole_float_counts(self, plots_factory):
        df = plots_factory(n=5).assign(tree_count=[3.0, 4.0, 5.0, 6.0, 7.0])

        typed = validate_schema(df)

        assert typed["tree_count"].dtype == "int64"
        assert typed["tree_count"].tolist() == [3, 4, 5, 6, 7]

    def test_resets_index(self, sample_plots_df):
        doubled = pd.concat([sample_plots_df.head(3), sample_plots_df.tail(3)])

        typed = validate_schema(doubled)

        assert typed.index.tolist() == list(range(6))
        assert typed["plot_id"].tolist() == doubled["plot_id"].tolist()

    def test_returns_new_frame(self, sample_plots_df):
        typed = validate_schema(sample_plots_df)

        assert typed is not sample_plots_df
        pd.testing.assert_frame_equal(
            typed[["height", "elevation"]], sample_plots_df[["height", "elevation"]]
        )


class TestLoadBoundary:
    """Tests for the region outline loader."""

    def test_loads_polygons(self, boundary_file):
        boundary = load_boundary(boundary_file)

        assert len(boundary) == 1
        assert boundary.crs.to_epsg() == 4326

    def test_rejects_points(self, plots_shapefile):
        with pytest.raises(ValueError, match="polygons"):
            load_boundary(plots_shapefile)

    def test_accepts_multipolygon_layers(self, tmp_path):
        gdf = gpd.GeoDataFrame(
            {"name": ["a", "b"]},
            geometry=[box(-124, 42, -122, 44), box(-120, 43, -118, 45)],
            crs="EPSG:4326",
        )
        path = tmp_path / "parts.gpkg"
        gdf.to_file(path, driver="GPKG")

        assert len(load_boundary(path)) == 2
