"""Static and interactive maps of plot locations and regression residuals."""

from __future__ import annotations

import json
import logging
from typing import Optional, Tuple

import geopandas as gpd
import numpy as np
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
from matplotlib.colors import CenteredNorm
from matplotlib.figure import Figure

from config.settings import MapConfig


logger = logging.getLogger(__name__)


def validate_coordinates(
    df: pd.DataFrame,
    boundary: gpd.GeoDataFrame,
    lon_col: str = "longitude",
    lat_col: str = "latitude",
) -> dict:
    """Count points inside and outside the boundary's bounding box."""
    lon_series = pd.to_numeric(df[lon_col], errors="coerce")
    lat_series = pd.to_numeric(df[lat_col], errors="coerce")
    minx, miny, maxx, maxy = boundary.total_bounds

    inside_mask = lon_series.between(minx, maxx) & lat_series.between(miny, maxy)
    inside_points = int(inside_mask.sum())
    total_points = int(len(df))

    return {
        "inside_points": inside_points,
        "outside_points": total_points - inside_points,
        "inside_ratio": (inside_points / total_points) if total_points else 0.0,
    }


def _warn_outside(df: pd.DataFrame, boundary: gpd.GeoDataFrame) -> None:
    check = validate_coordinates(df, boundary)
    if check["outside_points"]:
        logger.warning(
            "%d of %d points fall outside the region bounding box",
            check["outside_points"],
            len(df),
        )


def create_location_map(
    boundary: gpd.GeoDataFrame,
    df: pd.DataFrame,
    title: str = "Plot locations",
) -> Figure:
    """Draw the region outline with every plot location on top."""
    _warn_outside(df, boundary)

    fig = Figure(figsize=(8, 6.5))
    ax = fig.subplots()
    boundary.boundary.plot(ax=ax, color="#333333", linewidth=1)
    ax.scatter(df["longitude"], df["latitude"], s=6, color="#2E7D32", alpha=0.7)
    ax.set_title(title)
    ax.set_xlabel("Longitude")
    ax.set_ylabel("Latitude")
    ax.set_aspect("equal")
    fig.tight_layout()
    return fig


def create_static_residual_map(
    boundary: gpd.GeoDataFrame,
    residuals: pd.DataFrame,
    title: str = "Regression residuals",
    cmap: str = MapConfig.colormap,
) -> Figure:
    """
    Draw residuals as points over the region outline.

    Colours run on a diverging colormap centred at zero so that over- and
    under-predicted plots read as opposite hues.

    Args:
        boundary: Region polygons in WGS84
        residuals: Frame with longitude, latitude and residual columns
        title: Figure title
        cmap: Matplotlib diverging colormap name

    Returns:
        Matplotlib figure
    """
    _warn_outside(residuals, boundary)

    fig = Figure(figsize=(8, 6.5))
    ax = fig.subplots()
    boundary.boundary.plot(ax=ax, color="#333333", linewidth=1)
    points = ax.scatter(
        residuals["longitude"],
        residuals["latitude"],
        c=residuals["residual"],
        cmap=cmap,
        norm=CenteredNorm(vcenter=0.0),
        s=12,
        edgecolors="#444444",
        linewidths=0.2,
    )
    fig.colorbar(points, ax=ax, label="Residual")
    ax.set_title(title)
    ax.set_xlabel("Longitude")
    ax.set_ylabel("Latitude")
    ax.set_aspect("equal")
    fig.tight_layout()
    return fig


def create_interactive_residual_map(
    boundary: gpd.GeoDataFrame,
    residuals: pd.DataFrame,
    center: Tuple[float, float] = (MapConfig.center_lon, MapConfig.center_lat),
    zoom: float = MapConfig.zoom,
    title: str = "Regression residuals",
    colorscale: str = MapConfig.colorscale,
    map_style: str = MapConfig.map_style,
    marker_size: int = MapConfig.marker_size,
    height: Optional[int] = MapConfig.height,
) -> go.Figure:
    """
    Build a pannable, zoomable residual map.

    The outline is drawn as a line layer under circle markers coloured on a
    diverging scale centred at zero; the colour bar serves as the legend.
    The initial viewport is fixed at ``center`` (lon, lat) and ``zoom``.
    """
    _warn_outside(residuals, boundary)

    lon, lat = center
    limit = float(np.nanmax(np.abs(residuals["residual"]))) if len(residuals) else 1.0
    hover_cols = [col for col in ("plot_id",) if col in residuals.columns]

    fig = px.scatter_map(
        residuals,
        lat="latitude",
        lon="longitude",
        color="residual",
        color_continuous_scale=colorscale,
        color_continuous_midpoint=0.0,
        range_color=(-limit, limit) if limit > 0 else None,
        hover_data=hover_cols,
        center={"lat": lat, "lon": lon},
        zoom=zoom,
        height=height,
        title=title,
    )
    fig.update_traces(marker=dict(size=marker_size))
    fig.update_layout(
        map=dict(
            style=map_style,
            center={"lat": lat, "lon": lon},
            zoom=zoom,
            layers=[
                {
                    "source": json.loads(boundary.to_json()),
                    "type": "line",
                    "color": "#333333",
                    "line": {"width": 1.5},
                }
            ],
        ),
        coloraxis_colorbar=dict(title="Residual"),
        margin=dict(l=0, r=0, t=40, b=0),
    )
    return fig
