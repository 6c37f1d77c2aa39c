"""
Insight generation that turns model results into report text.

Produces both the plain-English interpretation and the fixed-width
summary tables written next to the charts.
"""

from typing import List

import pandas as pd

from config.settings import AnalysisConfig
from core.profiling import DatasetProfile
from core.statistics import ANOVAResult, RegressionResult


class InsightGenerator:
    """
    Generates human-readable insights and model summaries for the report.
    """

    @staticmethod
    def _format_p(p_value: float) -> str:
        if pd.isna(p_value):
            return "NA"
        if p_value < 2e-16:
            return "< 2e-16"
        return f"{p_value:.4g}"

    @staticmethod
    def generate_dataset_overview(profile: DatasetProfile) -> List[str]:
        """
        Generate high-level insights about the raw dataset.

        Args:
            profile: DatasetProfile object

        Returns:
            List of insight strings
        """
        insights = [
            f"Dataset contains {profile.row_count:,} plots and "
            f"{profile.column_count} columns.",
            f"{profile.complete_rows:,} plots have a value in every column "
            f"({profile.completeness_score * 100:.1f}% of cells are non-null).",
        ]

        incomplete = profile.row_count - profile.complete_rows
        if incomplete:
            insights.append(
                f"{incomplete:,} incomplete plots are dropped rather than imputed; "
                f"results describe complete records only."
            )

        for column in profile.columns:
            if column.null_count:
                insights.append(
                    f"'{column.name}' is missing {column.null_count:,} values "
                    f"({column.null_percentage:.1f}%)."
                )

        return insights

    @staticmethod
    def generate_cleaning_insights(
        loaded_rows: int,
        filtered_rows: int,
        max_height: float,
        max_diameter: float,
    ) -> List[str]:
        removed = loaded_rows - filtered_rows
        return [
            f"Outlier filter keeps plots with height < {max_height:g} and "
            f"diameter < {max_diameter:g}.",
            f"{removed:,} of {loaded_rows:,} complete plots removed, "
            f"{filtered_rows:,} remain.",
        ]

    @staticmethod
    def generate_anova_insights(
        result: ANOVAResult,
        significance_level: float = AnalysisConfig.significance_level,
    ) -> List[str]:
        """
        Generate insights from a one-way ANOVA.

        Args:
            result: ANOVAResult object
            significance_level: Threshold the p-value is compared against

        Returns:
            List of insight strings
        """
        insights = []
        p_text = InsightGenerator._format_p(result.p_value)

        if result.significant:
            insights.append(
                f"✓ Mean '{result.dependent_var}' differs between '{result.group_col}' groups "
                f"(F={result.f_statistic:.3f}, p={p_text} < {significance_level}); "
                f"reject the null of no association."
            )
        else:
            insights.append(
                f"✗ No significant difference in '{result.dependent_var}' between "
                f"'{result.group_col}' groups (F={result.f_statistic:.3f}, p={p_text}); "
                f"fail to reject the null."
            )

        insights.append("Group means:")
        for group, mean in result.group_means.items():
            insights.append(f"  • {result.group_col} = {group}: {mean:.2f}")

        return insights

    @staticmethod
    def generate_regression_insights(
        result: RegressionResult,
        significance_level: float = AnalysisConfig.significance_level,
    ) -> List[str]:
        """
        Generate insights from a simple regression.

        Args:
            result: RegressionResult object
            significance_level: Threshold the slope p-value is compared against

        Returns:
            List of insight strings
        """
        insights = []

        r2_pct = result.r_squared * 100
        insights.append(
            f"Model explains {r2_pct:.1f}% of variance in '{result.dependent_var}' "
            f"(R² = {result.r_squared:.3f}, Adjusted R² = {result.adj_r_squared:.3f}, "
            f"n = {result.n_obs:,})."
        )

        if result.r_squared >= 0.7:
            quality = "strong"
        elif result.r_squared >= 0.4:
            quality = "moderate"
        else:
            quality = "weak"
        insights.append(f"Model fit is {quality}.")

        p_val = result.p_values[result.independent_var]
        p_text = InsightGenerator._format_p(p_val)
        if result.significant:
            direction = "increases" if result.slope > 0 else "decreases"
            insights.append(
                f"• One unit increase in '{result.independent_var}' {direction} "
                f"'{result.dependent_var}' by {abs(result.slope):.4g} "
                f"(p={p_text} < {significance_level})."
            )
        else:
            insights.append(
                f"⚠️ '{result.independent_var}' is not a significant predictor (p={p_text})."
            )

        return insights

    @staticmethod
    def format_anova_table(result: ANOVAResult) -> str:
        """Render the ANOVA table the way aov summaries read."""
        table = result.anova_table.rename(
            columns={"df": "Df", "sum_sq": "Sum Sq", "mean_sq": "Mean Sq", "F": "F value", "PR(>F)": "Pr(>F)"}
        )
        lines = [
            f"One-way ANOVA: {result.dependent_var} ~ {result.group_col}",
            "",
            table.to_string(float_format=lambda v: f"{v:.6g}", na_rep=""),
            "",
            f"Decision: {'reject' if result.significant else 'fail to reject'} "
            f"the null of equal means.",
        ]
        return "\n".join(lines)

    @staticmethod
    def format_regression_summary(result: RegressionResult, label: str = "") -> str:
        """Render coefficient table and fit statistics as plain text."""
        terms = ["Intercept", result.independent_var]
        coef_table = pd.DataFrame(
            {
                "Estimate": [result.coefficients[t] for t in terms],
                "Std. Error": [result.std_errors[t] for t in terms],
                "t value": [result.t_values[t] for t in terms],
                "Pr(>|t|)": [InsightGenerator._format_p(result.p_values[t]) for t in terms],
            },
            index=terms,
        )
        residuals = result.residuals
        header = f"OLS regression: {result.dependent_var} ~ {result.independent_var}"
        if label:
            header += f" ({label})"

        lines = [
            header,
            "",
            "Residuals:",
            residuals.describe()[["min", "25%", "50%", "75%", "max"]].to_string(
                float_format=lambda v: f"{v:.4g}"
            ),
            "",
            "Coefficients:",
            coef_table.to_string(float_format=lambda v: f"{v:.6g}"),
            "",
            f"Residual standard error: {result.residual_std_error:.4g} "
            f"on {result.n_obs - 2} degrees of freedom",
            f"Multiple R-squared: {result.r_squared:.4f}, "
            f"Adjusted R-squared: {result.adj_r_squared:.4f}",
            f"F-statistic: {result.f_statistic:.4g} on 1 and {result.n_obs - 2} DF, "
            f"p-value: {InsightGenerator._format_p(result.f_p_value)}",
        ]
        return "\n".join(lines)
