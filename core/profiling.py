"""
Data profiling for the raw plot table.

Summarizes column completeness and numeric distributions before any rows
are dropped, so the report can state what the missing-value policy costs.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

import pandas as pd
from scipy import stats


@dataclass
class ColumnProfile:
    """Statistical profile for a single column."""

    name: str
    dtype: str
    count: int
    null_count: int
    null_percentage: float
    unique_count: int
    numeric_stats: Optional[Dict[str, float]] = None
    quality_issues: Optional[List[str]] = None


@dataclass
class DatasetProfile:
    """Profile for an entire dataset."""

    name: str
    row_count: int
    column_count: int
    complete_rows: int
    columns: List[ColumnProfile]
    completeness_score: float  # 0-1, share of non-null cells
    quality_issues: List[str]


def profile_column(series: pd.Series) -> ColumnProfile:
    """
    Generate a profile for a single column.

    Args:
        series: Pandas series to profile

    Returns:
        ColumnProfile with null counts and, for numeric data, summary stats
    """
    count = len(series)
    null_count = int(series.isna().sum())
    null_pct = (null_count / count * 100) if count > 0 else 0.0
    non_null = series.dropna()
    unique_count = int(non_null.nunique())

    numeric_stats = None
    quality_issues = []

    if pd.api.types.is_numeric_dtype(series) and not pd.api.types.is_bool_dtype(series) and len(non_null):
        numeric_stats = {
            "mean": float(non_null.mean()),
            "median": float(non_null.median()),
            "std": float(non_null.std()),
            "min": float(non_null.min()),
            "max": float(non_null.max()),
            "q25": float(non_null.quantile(0.25)),
            "q75": float(non_null.quantile(0.75)),
            "skewness": float(stats.skew(non_null)),
        }

    if null_count:
        quality_issues.append(f"{null_count} missing values ({null_pct:.1f}%)")

    if unique_count == 1:
        quality_issues.append("Only one unique value (constant column)")

    return ColumnProfile(
        name=str(series.name),
        dtype=str(series.dtype),
        count=count,
        null_count=null_count,
        null_percentage=null_pct,
        unique_count=unique_count,
        numeric_stats=numeric_stats,
        quality_issues=quality_issues or None,
    )


def profile_dataset(df: pd.DataFrame, name: str = "Dataset") -> DatasetProfile:
    """Profile every column and the table as a whole."""
    column_profiles = [profile_column(df[col]) for col in df.columns]

    total_cells = df.shape[0] * df.shape[1]
    null_cells = int(df.isna().sum().sum())
    completeness = 1 - (null_cells / total_cells) if total_cells > 0 else 0.0
    complete_rows = int(df.notna().all(axis=1).sum())

    quality_issues = []
    incomplete = len(df) - complete_rows
    if incomplete:
        quality_issues.append(f"{incomplete} rows contain at least one missing value")

    duplicate_rows = int(df.duplicated().sum())
    if duplicate_rows > 0:
        quality_issues.append(f"{duplicate_rows} duplicate rows detected")

    return DatasetProfile(
        name=name,
        row_count=len(df),
        column_count=len(df.columns),
        complete_rows=complete_rows,
        columns=column_profiles,
        completeness_score=completeness,
        quality_issues=quality_issues,
    )


def summary_table(profile: DatasetProfile) -> pd.DataFrame:
    """Flatten numeric column profiles into a display table."""
    rows = []
    for column in profile.columns:
        row = {"column": column.name, "nulls": column.null_count}
        if column.numeric_stats:
            row.update(column.numeric_stats)
        rows.append(row)
    return pd.DataFrame(rows).set_index("column")
