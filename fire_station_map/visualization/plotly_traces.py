#!/usr/bin/env python3
"""
Plotly Trace Builders

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Convert attached RenderedFeatures into Plotly Scattermap
traces and build the map layout.

Trace Types:
- Polygon traces: one filled trace per feature, rings separated by None
- Station marker trace: one marker+text trace per station group

Only what a map widget would draw goes in: attached features of shown
groups. Hidden groups and detached features produce no traces.

Dependencies:
- plotly.graph_objects (Scattermap, needs plotly >= 5.24)

Navigation Guide:
- Use VS Code outline (Ctrl+Shift+O) to jump between functions
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

import plotly.graph_objects as go

from fire_station_map.config_types import MapExportConfig
from fire_station_map.models.data_models import GeometryKind
from fire_station_map.state.display_groups import DisplayGroup, RenderedFeature
from fire_station_map.visualization.geometry_utils import (
    bounds_to_center,
    bounds_to_zoom,
    expand_bounds,
    hex_to_rgba,
)


# ===========================================================================
# HOVER TEXT
# ===========================================================================


def _popup_hover_text(feature: RenderedFeature) -> str:
    """Popup fields as Plotly hover HTML."""
    lines = []
    for name, value in feature.popup.items():
        if name == "Layer":
            lines.append(f"<b>{value}</b>")
        else:
            lines.append(f"{name}: {value}")
    return "<br>".join(lines)


# ===========================================================================
# POLYGON TRACES
# ===========================================================================


def _polygon_coords(
    feature: RenderedFeature,
) -> Tuple[List[Optional[float]], List[Optional[float]]]:
    """Concatenate every ring as closed lon/lat runs separated by None."""
    lons: List[Optional[float]] = []
    lats: List[Optional[float]] = []
    for part in feature.latlngs:
        for ring in part:
            if lons:
                lons.append(None)
                lats.append(None)
            closed = list(ring)
            if closed[0] != closed[-1]:
                closed.append(closed[0])
            lats.extend(lat for lat, _ in closed)
            lons.extend(lon for _, lon in closed)
    return lons, lats


def build_polygon_trace(feature: RenderedFeature, name: str) -> go.Scattermap:
    """
    Build a Plotly trace for one polygon feature.

    Args:
        feature: Polygon feature with at least one ring
        name: Trace name (layer label)

    Returns:
        Plotly Scattermap trace
    """
    style = feature.style
    lons, lats = _polygon_coords(feature)
    filled = style.fill_opacity > 0

    return go.Scattermap(
        lon=lons,
        lat=lats,
        mode="lines",
        fill="toself" if filled else "none",
        fillcolor=hex_to_rgba(style.fill_color, style.fill_opacity),
        line=dict(
            color=hex_to_rgba(style.stroke_color, style.stroke_opacity),
            width=style.stroke_weight,
        ),
        name=name,
        legendgroup=feature.layer_key,
        showlegend=False,
        hovertext=_popup_hover_text(feature),
        hoverinfo="text",
    )


# ===========================================================================
# MARKER TRACES
# ===========================================================================


def build_station_marker_trace(
    features: Sequence[RenderedFeature], name: str
) -> Optional[go.Scattermap]:
    """
    Build one marker trace for point features, labelled with the station id.

    Args:
        features: Point features
        name: Trace name (layer label)

    Returns:
        Plotly Scattermap trace, or None when there are no points
    """
    points = [f for f in features if f.latlng is not None]
    if not points:
        return None

    return go.Scattermap(
        lat=[f.latlng[0] for f in points],
        lon=[f.latlng[1] for f in points],
        mode="markers+text",
        marker=dict(
            size=[2 * (f.style.radius or 0) for f in points],
            color=[hex_to_rgba(f.style.fill_color, f.style.fill_opacity) for f in points],
        ),
        text=[f.label or "" for f in points],
        textposition="top right",
        textfont=dict(size=12, color="#000000"),
        name=name,
        legendgroup=points[0].layer_key,
        showlegend=False,
        hovertext=[_popup_hover_text(f) for f in points],
        hoverinfo="text",
    )


# ===========================================================================
# GROUP TRACES
# ===========================================================================


def build_group_traces(group: DisplayGroup) -> List[go.Scattermap]:
    """
    Build traces for every attached feature of a shown group.

    Returns:
        Polygon traces first, then the marker trace; empty for hidden groups
    """
    if not group.is_shown():
        return []

    attached = group.attached_features()
    traces: List[go.Scattermap] = [
        build_polygon_trace(f, group.label)
        for f in attached
        if f.geometry_kind is GeometryKind.POLYGON and f.latlngs
    ]
    marker_trace = build_station_marker_trace(
        [f for f in attached if f.geometry_kind is GeometryKind.POINT], group.label
    )
    if marker_trace is not None:
        traces.append(marker_trace)
    return traces


# ===========================================================================
# LAYOUT
# ===========================================================================


def build_map_layout(
    export_config: MapExportConfig,
    fit_bounds: Optional[Tuple[float, float, float, float]] = None,
) -> Dict[str, Any]:
    """
    Build Plotly layout for the map.

    Args:
        export_config: Title, style, default center/zoom and height
        fit_bounds: (min_lon, min_lat, max_lon, max_lat) to frame; the
            configured center and zoom are used without it

    Returns:
        Dict of Plotly layout properties
    """
    if fit_bounds is not None:
        padded = expand_bounds(fit_bounds, factor=0.05)
        center_lon, center_lat = bounds_to_center(padded)
        zoom = bounds_to_zoom(padded)
    else:
        center_lat, center_lon = export_config.center
        zoom = export_config.zoom

    return dict(
        title=dict(
            text=export_config.title,
            x=0.5,
            font=dict(size=18),
        ),
        map=dict(
            style=export_config.map_style,
            center=dict(lat=center_lat, lon=center_lon),
            zoom=zoom,
        ),
        hovermode="closest",
        showlegend=False,
        height=export_config.figure_height,
        margin=dict(t=60, l=10, r=10, b=10),
    )
