"""
Visualization components using Plotly for the exploratory charts.

Scatter matrices, the ellipse-encoded correlation plot, grouped box plots
and regression diagnostics.
"""

from typing import List, Optional

import numpy as np
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
from plotly.colors import make_colorscale, sample_colorscale
from plotly.subplots import make_subplots
from scipy import stats as scipy_stats


CORRELATION_COLORSCALE = make_colorscale(px.colors.diverging.RdBu)
ELLIPSE_SCALE = 0.45
ELLIPSE_POINTS = 60


def create_scatter_matrix(
    df: pd.DataFrame,
    columns: List[str],
    title: str = "Scatter Matrix",
    color_col: Optional[str] = None,
) -> go.Figure:
    """
    Create an all-pairs scatter plot matrix.

    Args:
        df: DataFrame containing the data
        columns: Ordered numeric columns to plot against each other
        title: Chart title
        color_col: Column for color grouping (optional)

    Returns:
        Plotly figure object
    """
    missing = [col for col in columns if col not in df.columns]
    if missing:
        raise ValueError(f"Columns not found: {', '.join(missing)}")

    fig = px.scatter_matrix(
        df,
        dimensions=columns,
        color=color_col,
        title=title,
        opacity=0.5,
    )
    fig.update_traces(diagonal_visible=False, marker=dict(size=3))
    fig.update_layout(
        height=180 * len(columns) + 100,
        width=180 * len(columns) + 100,
        hovermode="closest",
    )
    return fig


def ellipse_path(r: float, cx: float, cy: float, scale: float = ELLIPSE_SCALE) -> np.ndarray:
    """
    Outline of the ellipse that encodes correlation ``r`` centred on (cx, cy).

    Positive r leans the ellipse up-right, negative r up-left, and |r| -> 1
    collapses it toward a line. r = 0 gives a circle.
    """
    t = np.linspace(0, 2 * np.pi, ELLIPSE_POINTS)
    d = np.arccos(np.clip(r, -1.0, 1.0))
    x = np.cos(t + d / 2) * scale + cx
    y = np.cos(t - d / 2) * scale + cy
    return np.column_stack([x, y])


def create_correlation_ellipse_plot(
    corr_matrix: pd.DataFrame,
    title: str = "Correlation Matrix"
) -> go.Figure:
    """
    Create an ellipse-encoded correlation plot.

    Each cell carries an ellipse whose tilt gives the sign and whose
    narrowness gives the strength of the correlation, filled on a diverging
    scale over [-1, 1]. Undefined (NaN) correlations are left blank.

    Args:
        corr_matrix: Square correlation matrix DataFrame
        title: Chart title

    Returns:
        Plotly figure object
    """
    labels = list(corr_matrix.columns)
    n = len(labels)
    fig = go.Figure()

    for i, row_name in enumerate(corr_matrix.index):
        for j, col_name in enumerate(labels):
            r = corr_matrix.iloc[i, j]
            if pd.isna(r):
                continue
            # Rows run top to bottom
            outline = ellipse_path(float(r), j, n - 1 - i)
            color = sample_colorscale(CORRELATION_COLORSCALE, [(float(r) + 1) / 2])[0]
            fig.add_trace(
                go.Scatter(
                    x=outline[:, 0],
                    y=outline[:, 1],
                    mode="lines",
                    fill="toself",
                    fillcolor=color,
                    line=dict(color="#555555", width=0.5),
                    name=f"{row_name} / {col_name}: r = {r:.2f}",
                    hoverinfo="name",
                    hoveron="fills",
                    showlegend=False,
                )
            )

    # Invisible trace carrying the colour bar
    fig.add_trace(
        go.Scatter(
            x=[None],
            y=[None],
            mode="markers",
            marker=dict(
                colorscale=CORRELATION_COLORSCALE,
                cmin=-1,
                cmax=1,
                color=[0],
                showscale=True,
                colorbar=dict(title="r"),
            ),
            hoverinfo="skip",
            showlegend=False,
        )
    )

    fig.update_layout(
        title=title,
        xaxis=dict(
            tickmode="array",
            tickvals=list(range(n)),
            ticktext=labels,
            side="top",
            showgrid=False,
            zeroline=False,
            range=[-0.6, n - 0.4],
        ),
        yaxis=dict(
            tickmode="array",
            tickvals=list(range(n)),
            ticktext=list(reversed(list(corr_matrix.index))),
            showgrid=False,
            zeroline=False,
            scaleanchor="x",
            range=[-0.6, n - 0.4],
        ),
        width=120 * n + 200,
        height=120 * n + 150,
        plot_bgcolor="rgba(0,0,0,0)",
    )

    return fig


def create_group_box_plots(
    df: pd.DataFrame,
    columns: List[str],
    group_col: str = "burned",
    facet_col_wrap: int = 3,
) -> go.Figure:
    """
    Create one box plot panel per numeric column, split by a grouping column.

    Args:
        df: DataFrame containing the data
        columns: Numeric columns, one facet each
        group_col: Categorical grouping column
        facet_col_wrap: Facets per row

    Returns:
        Plotly figure object
    """
    long_df = df[[group_col] + columns].melt(
        id_vars=group_col,
        value_vars=columns,
        var_name="variable",
        value_name="value",
    )
    long_df[group_col] = long_df[group_col].astype(str)

    fig = px.box(
        long_df,
        x=group_col,
        y="value",
        color=group_col,
        facet_col="variable",
        facet_col_wrap=facet_col_wrap,
        category_orders={"variable": columns},
        points="outliers",
        title=f"Distribution by {group_col}",
    )
    # Each variable keeps its own scale
    fig.update_yaxes(matches=None, showticklabels=True)
    fig.for_each_annotation(lambda a: a.update(text=a.text.split("=")[-1]))
    fig.update_layout(height=300 * int(np.ceil(len(columns) / facet_col_wrap)) + 100)

    return fig


def create_regression_plot(
    df: pd.DataFrame,
    x_col: str,
    y_col: str,
    predictions: Optional[pd.Series] = None
) -> go.Figure:
    """
    Create regression visualization with residuals.

    Args:
        df: DataFrame containing the data
        x_col: Independent variable column
        y_col: Dependent variable column
        predictions: Fitted values indexed like ``df`` (optional)

    Returns:
        Plotly figure object
    """
    fig = make_subplots(
        rows=1, cols=2,
        subplot_titles=("Regression Plot", "Residual Plot")
    )

    fig.add_trace(
        go.Scatter(
            x=df[x_col],
            y=df[y_col],
            mode='markers',
            name='Actual',
            opacity=0.6
        ),
        row=1, col=1
    )

    if predictions is not None:
        fitted = df.loc[predictions.index]
        order = fitted[x_col].argsort().values
        fig.add_trace(
            go.Scatter(
                x=fitted[x_col].iloc[order],
                y=predictions.iloc[order],
                mode='lines',
                name='Predicted',
                line=dict(color='red', width=2)
            ),
            row=1, col=1
        )

        residuals = fitted[y_col] - predictions
        fig.add_trace(
            go.Scatter(
                x=predictions,
                y=residuals,
                mode='markers',
                name='Residuals',
                opacity=0.6
            ),
            row=1, col=2
        )

        fig.add_hline(y=0, line_dash="dash", line_color="red", row=1, col=2)

    fig.update_xaxes(title_text=x_col, row=1, col=1)
    fig.update_yaxes(title_text=y_col, row=1, col=1)
    fig.update_xaxes(title_text="Predicted", row=1, col=2)
    fig.update_yaxes(title_text="Residuals", row=1, col=2)

    fig.update_layout(
        title=f"{y_col} ~ {x_col}",
        showlegend=True,
        height=400
    )

    return fig


def create_residual_diagnostic_plot(residuals: pd.Series) -> go.Figure:
    """Render residual distribution and Q-Q diagnostics."""

    clean = residuals.dropna()
    if clean.empty:
        clean = pd.Series([0.0], name="residuals")

    fig = make_subplots(rows=1, cols=2, subplot_titles=("Residual Distribution", "Residual Q-Q"))

    fig.add_trace(
        go.Histogram(
            x=clean,
            nbinsx=30,
            marker_color="#1f77b4",
            name="Residuals",
        ),
        row=1,
        col=1,
    )

    sorted_res = np.sort(clean.values)
    probs = (np.arange(1, len(sorted_res) + 1) - 0.5) / len(sorted_res)
    theoretical = scipy_stats.norm.ppf(probs)
    # Reference line through the quartiles, as in R's qqline
    q_sample = np.percentile(sorted_res, [25, 75])
    q_theory = scipy_stats.norm.ppf([0.25, 0.75])
    slope = (q_sample[1] - q_sample[0]) / (q_theory[1] - q_theory[0])
    intercept = q_sample[0] - slope * q_theory[0]

    fig.add_trace(
        go.Scatter(
            x=theoretical,
            y=sorted_res,
            mode="markers",
            marker=dict(color="#1f77b4"),
            name="Q-Q",
        ),
        row=1,
        col=2,
    )

    fig.add_trace(
        go.Scatter(
            x=theoretical,
            y=intercept + slope * theoretical,
            mode="lines",
            line=dict(color="orange", dash="dash"),
            name="Reference",
        ),
        row=1,
        col=2,
    )

    fig.update_xaxes(title_text="Residuals", row=1, col=1)
    fig.update_yaxes(title_text="Count", row=1, col=1)
    fig.update_xaxes(title_text="Theoretical quantiles", row=1, col=2)
    fig.update_yaxes(title_text="Observed quantiles", row=1, col=2)
    fig.update_layout(showlegend=False, height=400)

    return fig
