"""
End-to-end analysis pipeline.

Each stage returns a new table or result; the frozen ``AnalysisReport``
keeps the whole lineage (raw -> loaded -> filtered -> year subset) so every
chart and model can be traced to the table it came from.

Run headless with ``python -m core.pipeline`` to write the report artifacts.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Union

import geopandas as gpd
import pandas as pd
import plotly.graph_objects as go
from matplotlib.figure import Figure

from config.settings import AnalysisConfig, Config, MapConfig, configure_logging
from core.cleaning import drop_incomplete, filter_outliers, latest_year, select_year
from core.geospatial import (
    create_interactive_residual_map,
    create_location_map,
    create_static_residual_map,
)
from core.insights import InsightGenerator
from core.loader import load_boundary, load_plots, validate_schema
from core.profiling import DatasetProfile, profile_dataset
from core.statistics import (
    ANOVAResult,
    RegressionResult,
    anova_test,
    attach_residuals,
    correlation_matrix,
    linear_regression_analysis,
)
from core.visualizations import (
    create_correlation_ellipse_plot,
    create_group_box_plots,
    create_regression_plot,
    create_scatter_matrix,
)


logger = logging.getLogger(__name__)

AnyFigure = Union[go.Figure, Figure]


@dataclass(frozen=True)
class AnalysisReport:
    """Every intermediate table and model result of one analysis run."""

    raw: pd.DataFrame
    profile: DatasetProfile
    loaded: pd.DataFrame
    filtered: pd.DataFrame
    focus_year: int
    year_subset: pd.DataFrame
    correlation_all: pd.DataFrame
    correlation_year: pd.DataFrame
    anova: ANOVAResult
    regression_year: RegressionResult
    regression_all: RegressionResult
    residuals_year: pd.DataFrame
    residuals_all: pd.DataFrame
    config: AnalysisConfig


def run_analysis(raw: pd.DataFrame, config: Optional[AnalysisConfig] = None) -> AnalysisReport:
    """
    Run cleaning, exploration statistics and model fits over a raw plot table.

    Args:
        raw: Plot table as loaded, before any rows are dropped
        config: Analysis constants (defaults when None)

    Returns:
        AnalysisReport holding every stage's output
    """
    config = config or AnalysisConfig()

    profile = profile_dataset(raw, name="Oregon plots")
    loaded = validate_schema(drop_incomplete(raw))
    filtered = filter_outliers(loaded, config.max_height, config.max_diameter)

    focus_year = config.focus_year if config.focus_year is not None else latest_year(filtered)
    year_subset = select_year(filtered, focus_year)

    # year is constant within a single-year subset
    year_columns = [col for col in config.explore_columns if col != "year"]

    anova = anova_test(
        filtered,
        numeric_col=config.anova_response,
        group_col=config.group_column,
        significance_level=config.significance_level,
    )
    regression_year = linear_regression_analysis(
        year_subset,
        dependent_var=config.regression_response,
        independent_var=config.regression_predictor,
        significance_level=config.significance_level,
    )
    regression_all = linear_regression_analysis(
        filtered,
        dependent_var=config.regression_response,
        independent_var=config.regression_predictor,
        significance_level=config.significance_level,
    )

    return AnalysisReport(
        raw=raw,
        profile=profile,
        loaded=loaded,
        filtered=filtered,
        focus_year=focus_year,
        year_subset=year_subset,
        correlation_all=correlation_matrix(filtered, config.explore_columns),
        correlation_year=correlation_matrix(year_subset, year_columns),
        anova=anova,
        regression_year=regression_year,
        regression_all=regression_all,
        residuals_year=attach_residuals(year_subset, regression_year),
        residuals_all=attach_residuals(filtered, regression_all),
        config=config,
    )


def run_from_file(plots_path: Union[str, Path], config: Optional[AnalysisConfig] = None) -> AnalysisReport:
    """Load the plot layer without dropping rows, then run the analysis."""
    config = config or AnalysisConfig()
    raw = load_plots(plots_path, rename=config.column_rename, drop_missing=False)
    return run_analysis(raw, config)


def build_figures(
    report: AnalysisReport,
    boundary: gpd.GeoDataFrame,
    map_config: Optional[MapConfig] = None,
) -> Dict[str, AnyFigure]:
    """Render every chart of the report, keyed by artifact name."""
    map_config = map_config or MapConfig()
    cfg = report.config
    year = report.focus_year

    return {
        "plot_locations": create_location_map(boundary, report.loaded, title="Oregon inventory plots"),
        "scatter_matrix_full": create_scatter_matrix(
            report.loaded, cfg.explore_columns, title="All variables"
        ),
        "scatter_matrix_relevant": create_scatter_matrix(
            report.loaded, cfg.relevant_columns, title="Relevant variables"
        ),
        "scatter_matrix_filtered": create_scatter_matrix(
            report.filtered, cfg.relevant_columns, title="Relevant variables, outliers removed"
        ),
        "correlation_all_years": create_correlation_ellipse_plot(
            report.correlation_all, title="Correlation, all years"
        ),
        f"correlation_{year}": create_correlation_ellipse_plot(
            report.correlation_year, title=f"Correlation, {year}"
        ),
        "burned_boxplots": create_group_box_plots(
            report.filtered, cfg.relevant_columns, group_col=cfg.group_column
        ),
        f"regression_fit_{year}": create_regression_plot(
            report.year_subset,
            cfg.regression_predictor,
            cfg.regression_response,
            report.regression_year.fitted_values,
        ),
        "regression_fit_all_years": create_regression_plot(
            report.filtered,
            cfg.regression_predictor,
            cfg.regression_response,
            report.regression_all.fitted_values,
        ),
        f"residual_map_{year}": create_static_residual_map(
            boundary,
            report.residuals_year,
            title=f"Residuals of {cfg.regression_response} ~ {cfg.regression_predictor}, {year}",
            cmap=map_config.colormap,
        ),
        "residual_map_all_years": create_interactive_residual_map(
            boundary,
            report.residuals_all,
            center=(map_config.center_lon, map_config.center_lat),
            zoom=map_config.zoom,
            title=f"Residuals of {cfg.regression_response} ~ {cfg.regression_predictor}, all years",
            colorscale=map_config.colorscale,
            map_style=map_config.map_style,
            marker_size=map_config.marker_size,
            height=map_config.height,
        ),
    }


def build_summaries(report: AnalysisReport) -> Dict[str, str]:
    """Textual model summaries keyed by artifact name."""
    year = report.focus_year
    return {
        "anova_summary": InsightGenerator.format_anova_table(report.anova),
        f"regression_{year}": InsightGenerator.format_regression_summary(
            report.regression_year, label=str(year)
        ),
        "regression_all_years": InsightGenerator.format_regression_summary(
            report.regression_all, label="all years"
        ),
    }


def write_artifacts(
    report: AnalysisReport,
    boundary: gpd.GeoDataFrame,
    output_dir: Union[str, Path],
    map_config: Optional[MapConfig] = None,
) -> Dict[str, Path]:
    """
    Write charts and summaries to ``output_dir``.

    Plotly figures become standalone HTML files, matplotlib figures PNG
    images and model summaries plain text.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    written: Dict[str, Path] = {}

    for name, fig in build_figures(report, boundary, map_config).items():
        if isinstance(fig, Figure):
            path = output_dir / f"{name}.png"
            fig.savefig(path, dpi=150)
        else:
            path = output_dir / f"{name}.html"
            fig.write_html(path, include_plotlyjs="cdn")
        written[name] = path

    for name, text in build_summaries(report).items():
        path = output_dir / f"{name}.txt"
        path.write_text(text + "\n", encoding="utf-8")
        written[name] = path

    logger.info("Wrote %d artifacts to %s", len(written), output_dir)
    return written


def main() -> None:
    config = Config.load()
    configure_logging(config.log_level)

    report = run_from_file(config.paths.plots_path, config.analysis)
    boundary = load_boundary(config.paths.boundary_path)
    written = write_artifacts(report, boundary, config.paths.output_dir, config.maps)
    for name, path in written.items():
        logger.info("%s -> %s", name, path)


if __name__ == "__main__":
    main()
