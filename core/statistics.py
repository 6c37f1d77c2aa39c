"""
Statistical analysis for the plot table: correlation, one-way ANOVA and
simple linear regression.

Model fitting goes through statsmodels so that every summary statistic
(standard errors, t and F statistics, p-values) comes from one routine.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Union

import numpy as np
import pandas as pd
from statsmodels.formula.api import ols
from statsmodels.stats.anova import anova_lm

from config.settings import AnalysisConfig


logger = logging.getLogger(__name__)


@dataclass
class ANOVAResult:
    """Result of a one-way ANOVA test."""

    dependent_var: str
    group_col: str
    groups: List[str]
    group_means: Dict[str, float]
    df: float
    sum_sq: float
    mean_sq: float
    f_statistic: float
    p_value: float
    residual_df: float
    residual_sum_sq: float
    anova_table: pd.DataFrame
    significant: bool


@dataclass
class RegressionResult:
    """Result of a simple ordinary least squares regression."""

    dependent_var: str
    independent_var: str
    intercept: float
    slope: float
    std_errors: Dict[str, float]
    t_values: Dict[str, float]
    p_values: Dict[str, float]
    r_squared: float
    adj_r_squared: float
    f_statistic: float
    f_p_value: float
    n_obs: int
    residual_std_error: float
    residuals: pd.Series  # indexed like the fitted rows
    fitted_values: pd.Series
    significant: bool

    @property
    def coefficients(self) -> Dict[str, float]:
        return {"Intercept": self.intercept, self.independent_var: self.slope}


ModelResult = Union[ANOVAResult, RegressionResult]


def correlation_matrix(
    df: pd.DataFrame,
    columns: Optional[List[str]] = None,
    method: str = "pearson"
) -> pd.DataFrame:
    """
    Calculate a correlation matrix over named columns.

    Each entry uses the rows where both columns are non-null (pairwise
    complete observations), independent of nulls elsewhere in the row.

    Args:
        df: DataFrame containing the data
        columns: Ordered column names (None = all numeric)
        method: pearson, spearman, or kendall

    Returns:
        DataFrame with correlation matrix in the given column order
    """
    if columns is None:
        columns = df.select_dtypes(include=[np.number]).columns.tolist()

    missing = [col for col in columns if col not in df.columns]
    if missing:
        raise ValueError(f"Columns not found: {', '.join(missing)}")

    numeric = df[columns].apply(pd.to_numeric, errors="coerce")
    return numeric.corr(method=method)


def anova_test(
    df: pd.DataFrame,
    numeric_col: str = "elevation",
    group_col: str = "burned",
    significance_level: float = AnalysisConfig.significance_level,
) -> ANOVAResult:
    """
    Perform a one-way ANOVA of a numeric response across a categorical factor.

    Args:
        df: DataFrame containing the data
        numeric_col: Numeric response variable
        group_col: Categorical grouping variable
        significance_level: Reject the null of equal means below this p-value

    Returns:
        ANOVAResult with the factor row of the ANOVA table
    """
    subset = df[[numeric_col, group_col]].dropna()
    if subset[group_col].nunique() < 2:
        raise ValueError(
            f"ANOVA needs at least two levels of '{group_col}', "
            f"found {subset[group_col].nunique()}"
        )

    model = ols(f"{numeric_col} ~ C({group_col})", data=subset).fit()
    table = anova_lm(model, typ=1)

    term = f"C({group_col})"
    factor_row = table.loc[term]
    residual_row = table.loc["Residual"]
    p_value = float(factor_row["PR(>F)"])

    group_means = subset.groupby(group_col)[numeric_col].mean()

    result = ANOVAResult(
        dependent_var=numeric_col,
        group_col=group_col,
        groups=[str(g) for g in group_means.index],
        group_means={str(g): float(m) for g, m in group_means.items()},
        df=float(factor_row["df"]),
        sum_sq=float(factor_row["sum_sq"]),
        mean_sq=float(factor_row["mean_sq"]),
        f_statistic=float(factor_row["F"]),
        p_value=p_value,
        residual_df=float(residual_row["df"]),
        residual_sum_sq=float(residual_row["sum_sq"]),
        anova_table=table,
        significant=bool(p_value < significance_level),
    )
    logger.info(
        "ANOVA %s ~ %s: F=%.3f, p=%.4g (n=%d)",
        numeric_col, group_col, result.f_statistic, result.p_value, len(subset),
    )
    return result


def linear_regression_analysis(
    df: pd.DataFrame,
    dependent_var: str = "height",
    independent_var: str = "elevation",
    significance_level: float = AnalysisConfig.significance_level,
) -> RegressionResult:
    """
    Fit ``dependent_var ~ independent_var`` by ordinary least squares.

    Rows with a null in either column are left out; residuals keep the
    index of the rows that were fitted so they can be joined back to
    coordinates.

    Args:
        df: DataFrame containing the data
        dependent_var: Response variable name
        independent_var: Predictor variable name
        significance_level: Threshold for the slope's p-value

    Returns:
        RegressionResult with coefficients, fit statistics and residuals
    """
    clean_df = df[[dependent_var, independent_var]].dropna()

    if len(clean_df) < 2:
        raise ValueError("Insufficient data points for regression")
    if clean_df[independent_var].nunique() < 2:
        raise ValueError(f"Predictor '{independent_var}' has a single distinct value")

    model = ols(f"{dependent_var} ~ {independent_var}", data=clean_df).fit()

    slope_p = float(model.pvalues[independent_var])
    result = RegressionResult(
        dependent_var=dependent_var,
        independent_var=independent_var,
        intercept=float(model.params["Intercept"]),
        slope=float(model.params[independent_var]),
        std_errors={k: float(v) for k, v in model.bse.items()},
        t_values={k: float(v) for k, v in model.tvalues.items()},
        p_values={k: float(v) for k, v in model.pvalues.items()},
        r_squared=float(model.rsquared),
        adj_r_squared=float(model.rsquared_adj),
        f_statistic=float(model.fvalue),
        f_p_value=float(model.f_pvalue),
        n_obs=int(model.nobs),
        residual_std_error=float(np.sqrt(model.scale)),
        residuals=model.resid.rename("residual"),
        fitted_values=model.fittedvalues.rename("fitted"),
        significant=bool(slope_p < significance_level),
    )
    logger.info(
        "OLS %s ~ %s: slope=%.4g, R2=%.3f, adj R2=%.3f (n=%d)",
        dependent_var, independent_var, result.slope,
        result.r_squared, result.adj_r_squared, result.n_obs,
    )
    return result


def attach_residuals(df: pd.DataFrame, result: RegressionResult) -> pd.DataFrame:
    """Join a regression's residuals back onto plot ids and coordinates."""
    if not df.index.is_unique:
        raise ValueError("Residuals can only be joined onto a table with a unique index")
    located = df.loc[result.residuals.index, ["plot_id", "longitude", "latitude"]].copy()
    located["residual"] = result.residuals.values
    return located
