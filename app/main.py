"""
Oregon Forest Plot Analysis - Streamlit report

Renders the analysis as a single narrative page, top to bottom.
"""

from pathlib import Path
import sys

import geopandas as gpd
import pandas as pd
import streamlit as st

# Ensure project root is on path
sys.path.insert(0, str(Path(__file__).parent.parent))

from config.settings import Config, configure_logging
from core.insights import InsightGenerator
from core.loader import load_boundary, load_plots
from core.pipeline import AnalysisReport, build_figures, run_analysis
from core.profiling import summary_table
from core.visualizations import create_residual_diagnostic_plot


# ------------------------------------------------------------------
# Page configuration
# ------------------------------------------------------------------
st.set_page_config(
    page_title="Oregon Forest Plots",
    page_icon="🌲",
    layout="wide",
)


# ------------------------------------------------------------------
# Cached helpers
# ------------------------------------------------------------------
@st.cache_data(show_spinner=False)
def cached_raw_plots(path: str) -> pd.DataFrame:
    config = Config.load()
    return load_plots(path, rename=config.analysis.column_rename, drop_missing=False)


@st.cache_data(show_spinner=False)
def cached_boundary(path: str) -> gpd.GeoDataFrame:
    return load_boundary(path)


@st.cache_data(show_spinner="Running analysis...")
def cached_report(path: str) -> AnalysisReport:
    return run_analysis(cached_raw_plots(path), Config.load().analysis)


def render_bullets(lines) -> None:
    for text in lines:
        st.markdown(f"- {text}")


# ------------------------------------------------------------------
# Report sections
# ------------------------------------------------------------------
def render_data_section(report: AnalysisReport, figures: dict) -> None:
    st.header("Data")
    st.markdown(
        "Forest inventory plots sampled across Oregon. Each plot carries mean "
        "biomass per acre, tree diameter and height, elevation, a tree count and "
        "a burned flag."
    )
    st.pyplot(figures["plot_locations"])
    render_bullets(InsightGenerator.generate_dataset_overview(report.profile))
    st.dataframe(summary_table(report.profile), use_container_width=True)


def render_exploration_section(report: AnalysisReport, figures: dict) -> None:
    cfg = report.config
    st.header("Pairwise relationships")
    st.plotly_chart(figures["scatter_matrix_full"], use_container_width=False)
    st.markdown("Narrowing to the variables of interest:")
    st.plotly_chart(figures["scatter_matrix_relevant"], use_container_width=False)

    st.subheader("Outliers")
    render_bullets(
        InsightGenerator.generate_cleaning_insights(
            len(report.loaded), len(report.filtered), cfg.max_height, cfg.max_diameter
        )
    )
    st.plotly_chart(figures["scatter_matrix_filtered"], use_container_width=False)

    st.subheader("Correlation")
    cols = st.columns(2)
    with cols[0]:
        st.plotly_chart(figures["correlation_all_years"], use_container_width=True)
    with cols[1]:
        st.plotly_chart(figures[f"correlation_{report.focus_year}"], use_container_width=True)


def render_anova_section(report: AnalysisReport, figures: dict) -> None:
    cfg = report.config
    st.header(f"Does burning relate to {cfg.anova_response}?")
    st.plotly_chart(figures["burned_boxplots"], use_container_width=True)
    st.code(InsightGenerator.format_anova_table(report.anova), language="text")
    render_bullets(InsightGenerator.generate_anova_insights(report.anova, cfg.significance_level))


def render_regression_section(report: AnalysisReport, figures: dict) -> None:
    cfg = report.config
    year = report.focus_year
    st.header(f"{cfg.regression_response.capitalize()} explained by {cfg.regression_predictor}")

    for label, result, fig_key in (
        (str(year), report.regression_year, f"regression_fit_{year}"),
        ("all years", report.regression_all, "regression_fit_all_years"),
    ):
        st.subheader(f"Linear model, {label}")
        st.plotly_chart(figures[fig_key], use_container_width=True)
        st.code(InsightGenerator.format_regression_summary(result, label=label), language="text")
        render_bullets(InsightGenerator.generate_regression_insights(result, cfg.significance_level))
        with st.expander("Residual diagnostics", expanded=False):
            st.plotly_chart(create_residual_diagnostic_plot(result.residuals), use_container_width=True)


def render_residual_maps(report: AnalysisReport, figures: dict) -> None:
    year = report.focus_year
    st.header("Where does the model miss?")
    st.subheader(f"Residuals, {year}")
    st.pyplot(figures[f"residual_map_{year}"])
    st.subheader("Residuals, all years")
    st.plotly_chart(figures["residual_map_all_years"], use_container_width=True)


# ------------------------------------------------------------------
# Main
# ------------------------------------------------------------------
def main() -> None:
    config = Config.load()
    configure_logging(config.log_level)

    st.title("🌲 Oregon Forest Inventory Plots")

    try:
        report = cached_report(str(config.paths.plots_path))
        boundary = cached_boundary(str(config.paths.boundary_path))
    except FileNotFoundError as exc:
        st.error(str(exc))
        st.stop()

    figures = build_figures(report, boundary, config.maps)

    render_data_section(report, figures)
    render_exploration_section(report, figures)
    render_anova_section(report, figures)
    render_regression_section(report, figures)
    render_residual_maps(report, figures)


if __name__ == "__main__":
    main()
