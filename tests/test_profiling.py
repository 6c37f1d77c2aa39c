"""Tests for data profiling module."""

import pandas as pd

from core.profiling import profile_column, profile_dataset, summary_table


class TestProfileColumn:
    """Tests for column profiling."""

    def test_profile_numeric_column(self, sample_plots_df):
        profile = profile_column(sample_plots_df["height"])

        assert profile.name == "height"
        assert profile.count == len(sample_plots_df)
        assert profile.null_count == 0
        assert profile.numeric_stats is not None
        assert "median" in profile.numeric_stats
        assert profile.quality_issues is None

    def test_profile_column_with_nulls(self, raw_plots_df):
        profile = profile_column(raw_plots_df["diameter"])

        assert profile.null_count == 10
        assert profile.null_percentage == 10 / len(raw_plots_df) * 100
        assert profile.quality_issues == ["10 missing values (3.3%)"]

    def test_text_column_has_no_numeric_stats(self, sample_plots_df):
        profile = profile_column(sample_plots_df["plot_id"])

        assert profile.numeric_stats is None
        assert profile.unique_count == len(sample_plots_df)

    def test_constant_column_flagged(self):
        profile = profile_column(pd.Series([3, 3, 3], name="c"))

        assert "Only one unique value (constant column)" in profile.quality_issues


class TestProfileDataset:
    """Tests for dataset profiling."""

    def test_complete_rows(self, raw_plots_df):
        profile = profile_dataset(raw_plots_df, name="raw")

        assert profile.name == "raw"
        assert profile.row_count == len(raw_plots_df)
        assert profile.complete_rows == len(raw_plots_df) - 15
        assert profile.completeness_score < 1
        assert "15 rows contain at least one missing value" in profile.quality_issues

    def test_complete_dataset(self, sample_plots_df):
        profile = profile_dataset(sample_plots_df)

        assert profile.completeness_score == 1.0
        assert profile.quality_issues == []

    def test_summary_table(self, raw_plots_df):
        table = summary_table(profile_dataset(raw_plots_df))

        assert table.loc["diameter", "nulls"] == 10
        assert "mean" in table.columns
