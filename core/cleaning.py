"""
Row-level cleaning for the plot table.

Two separate policies: rows with any missing value are dropped when the data
is loaded, and rows above the fixed height / diameter cutoffs are dropped as
an explicit later step. Both return new DataFrames.
"""

import logging

import pandas as pd

from config.settings import AnalysisConfig
from core.filtering import apply_filters


logger = logging.getLogger(__name__)


def drop_incomplete(df: pd.DataFrame) -> pd.DataFrame:
    """Drop every row holding a null in any column."""
    cleaned = df.dropna()
    removed = len(df) - len(cleaned)
    if removed:
        logger.info("Dropped %d of %d rows with missing values", removed, len(df))
    return cleaned


def filter_outliers(
    df: pd.DataFrame,
    max_height: float = AnalysisConfig.max_height,
    max_diameter: float = AnalysisConfig.max_diameter,
) -> pd.DataFrame:
    """
    Keep rows with height below ``max_height`` and diameter below ``max_diameter``.

    Args:
        df: Plot table with ``height`` and ``diameter`` columns
        max_height: Exclusive upper bound on height
        max_diameter: Exclusive upper bound on diameter

    Returns:
        New DataFrame without the outlying rows
    """
    filtered = apply_filters(
        df,
        [
            {"column": "height", "operator": "<", "value": max_height},
            {"column": "diameter", "operator": "<", "value": max_diameter},
        ],
    )
    logger.info(
        "Outlier filter (height < %s, diameter < %s) kept %d of %d rows",
        max_height,
        max_diameter,
        len(filtered),
        len(df),
    )
    return filtered


def clean_plots(
    df: pd.DataFrame,
    max_height: float = AnalysisConfig.max_height,
    max_diameter: float = AnalysisConfig.max_diameter,
) -> pd.DataFrame:
    """Apply both cleaning policies in order."""
    return filter_outliers(drop_incomplete(df), max_height, max_diameter)


def select_year(df: pd.DataFrame, year: int) -> pd.DataFrame:
    """Return a copy holding only the plots sampled in ``year``."""
    available = sorted(df["year"].dropna().unique().tolist())
    if year not in available:
        raise ValueError(f"Year {year} not present in data (available: {available})")
    return apply_filters(df, [{"column": "year", "operator": "==", "value": year}])


def latest_year(df: pd.DataFrame) -> int:
    if df.empty:
        raise ValueError("Cannot pick a year from an empty table")
    return int(df["year"].max())
