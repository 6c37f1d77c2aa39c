"""Tests for configuration loading."""

import inspect
from pathlib import Path

from config.settings import AnalysisConfig, Config, MapConfig, PathsConfig
from core.cleaning import filter_outliers
from core.geospatial import create_interactive_residual_map
from core.statistics import anova_test, linear_regression_analysis


class TestAnalysisConfig:

    def test_fixed_constants(self):
        config = AnalysisConfig()

        assert config.max_height == 7000
        assert config.max_diameter == 120
        assert config.significance_level == 0.05

    def test_focus_year_from_env(self, monkeypatch):
        monkeypatch.setenv("FOCUS_YEAR", "2018")

        assert AnalysisConfig.from_env().focus_year == 2018

    def test_focus_year_defaults_to_none(self, monkeypatch):
        monkeypatch.delenv("FOCUS_YEAR", raising=False)

        assert AnalysisConfig.from_env().focus_year is None


class TestPathsConfig:

    def test_defaults_under_root(self, monkeypatch, tmp_path):
        for name in ("PLOTS_PATH", "BOUNDARY_PATH", "OUTPUT_DIR"):
            monkeypatch.delenv(name, raising=False)

        paths = PathsConfig.from_env(tmp_path)

        assert paths.plots_path == tmp_path / "data" / "oregon_plots.shp"
        assert paths.output_dir == tmp_path / "output"

    def test_env_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("PLOTS_PATH", str(tmp_path / "plots.gpkg"))

        paths = PathsConfig.from_env(tmp_path)

        assert paths.plots_path == Path(tmp_path / "plots.gpkg")


class TestConfig:

    def test_singleton(self, monkeypatch):
        monkeypatch.setattr(Config, "_instance", None)

        assert Config.load() is Config.load()

    def test_map_defaults(self):
        maps = MapConfig()

        assert maps.center == {"lat": 43.5, "lon": -120.5}
        assert maps.zoom == 6


class TestSharedDefaults:
    """Function defaults come from the config dataclasses."""

    def test_cleaning_cutoffs(self):
        params = inspect.signature(filter_outliers).parameters

        assert params["max_height"].default == AnalysisConfig().max_height
        assert params["max_diameter"].default == AnalysisConfig().max_diameter

    def test_significance_level(self):
        for func in (anova_test, linear_regression_analysis):
            params = inspect.signature(func).parameters
            assert params["significance_level"].default == AnalysisConfig().significance_level

    def test_map_viewport(self):
        params = inspect.signature(create_interactive_residual_map).parameters
        maps = MapConfig()

        assert params["center"].default == (maps.center_lon, maps.center_lat)
        assert params["zoom"].default == maps.zoom
        assert params["map_style"].default == maps.map_style
