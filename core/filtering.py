"""Utility helpers for applying cascading row filters to pandas DataFrames."""

from __future__ import annotations

from typing import Any, Dict, Sequence

import pandas as pd


FilterDict = Dict[str, Any]


def apply_filters(df: pd.DataFrame, filters: Sequence[FilterDict]) -> pd.DataFrame:
    """Apply a sequence of filter definitions, returning a new dataframe."""
    if df is None:
        raise ValueError("No dataframe to filter")

    filtered = df.copy()
    for raw_filter in filters:
        column = raw_filter.get("column")
        operator = raw_filter.get("operator") or ""

        if column not in filtered.columns:
            raise ValueError(f"Column '{column}' not found for filtering")

        mask = _apply_numeric_filter(filtered[column], operator, raw_filter)
        filtered = filtered.loc[mask]

    return filtered


def _apply_numeric_filter(series: pd.Series, operator: str, raw_filter: FilterDict) -> pd.Series:
    # Outlier cutoffs use "<", year subsets use "=="
    value = raw_filter.get("value")
    if value is None:
        raise ValueError("Numeric filters require a value")

    numeric_series = pd.to_numeric(series, errors="coerce")
    value = float(value)
    if operator == "<":
        return numeric_series < value
    if operator == "==":
        return numeric_series == value

    raise ValueError(f"Unsupported numeric operator '{operator}'")
