#!/usr/bin/env python3
"""
HTML Snapshot Builder

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Write a self-contained HTML snapshot of the current map state:
a Plotly Scattermap figure of every attached feature in every shown group,
wrapped in a flex layout with the layers/station filter panels on the left
and the legend on the right.

The snapshot reflects state at the time of the call. Station selection,
layer visibility and the legend's collapsed flag are all read live.

Navigation Guide:
- build_figure: Plotly figure for a StationMap
- write_html: Figure + panels -> HTML file
"""

import logging
from pathlib import Path
from typing import Optional, Tuple

import plotly.graph_objects as go

from fire_station_map.visualization.html_panels import (
    DEFAULT_LEFT_PANEL_WIDTH,
    DEFAULT_RIGHT_PANEL_WIDTH,
    generate_layers_panel_html,
    generate_panel_styles_css,
    generate_station_filter_panel_html,
)
from fire_station_map.visualization.plotly_traces import (
    build_group_traces,
    build_map_layout,
)

logger = logging.getLogger(__name__)

SIDEBAR_SPACING = 20
PANEL_TOP_OFFSET = 60


def build_figure(station_map) -> go.Figure:
    """
    Build the Plotly figure for the current map state.

    Args:
        station_map: Loaded StationMap

    Returns:
        Plotly Figure
    """
    fig = go.Figure()
    for group in station_map.groups:
        for trace in build_group_traces(group):
            fig.add_trace(trace)

    fig.update_layout(
        **build_map_layout(station_map.config.map_export, station_map.fit_bounds)
    )
    return fig


def _build_flex_wrapper_html(
    left_sidebar_html: str,
    right_sidebar_html: str,
    left_sidebar_width: int,
    right_sidebar_width: int,
) -> Tuple[str, str]:
    """Build flex wrapper HTML for sidebars. Returns (wrapper_start, wrapper_end)."""
    flex_wrapper_start = f"""
<div id="plotPageWrapper" style="
    display: flex;
    flex-direction: row;
    min-height: 100vh;
    padding: 0 20px 20px 0;
    box-sizing: border-box;
">
    <div id="leftSidebar" style="
        display: flex;
        flex-direction: column;
        width: {left_sidebar_width}px;
        min-width: {left_sidebar_width}px;
        flex-shrink: 0;
        padding-top: {PANEL_TOP_OFFSET}px;
    ">
{left_sidebar_html}
    </div>
    <div id="plotContainer" style="
        flex-grow: 1;
        min-width: 0;
    ">
"""

    flex_wrapper_end = f"""
    </div>
    <div id="rightSidebar" style="
        display: flex;
        flex-direction: column;
        width: {right_sidebar_width}px;
        min-width: {right_sidebar_width}px;
        flex-shrink: 0;
        padding-top: {PANEL_TOP_OFFSET}px;
    ">
{right_sidebar_html}
    </div>
</div>
"""
    return flex_wrapper_start, flex_wrapper_end


def _assemble_final_html(plotly_html: str, station_map) -> str:
    """Wrap the Plotly HTML in the sidebar layout."""
    context = station_map.context
    left_sidebar_html = generate_layers_panel_html(
        station_map.groups
    ) + generate_station_filter_panel_html(
        context.style_resolver.legend_entries(),
        context.active_stations.snapshot(),
    )
    right_sidebar_html = context.legend.render_html()

    flex_wrapper_start, flex_wrapper_end = _build_flex_wrapper_html(
        left_sidebar_html,
        right_sidebar_html,
        DEFAULT_LEFT_PANEL_WIDTH + SIDEBAR_SPACING,
        DEFAULT_RIGHT_PANEL_WIDTH + SIDEBAR_SPACING,
    )

    final_html = plotly_html.replace("<head>", f"<head>{generate_panel_styles_css()}", 1)
    final_html = final_html.replace("<body>", f"<body>{flex_wrapper_start}", 1)
    final_html = final_html.replace("</body>", f"{flex_wrapper_end}</body>", 1)
    return final_html


def write_html(station_map, output_path: Optional[str] = None) -> Path:
    """
    Write the HTML snapshot.

    Args:
        station_map: Loaded StationMap
        output_path: Target file (defaults to map_export.output_html)

    Returns:
        Path of the written file
    """
    path = Path(output_path or station_map.config.map_export.output_html)
    path.parent.mkdir(parents=True, exist_ok=True)

    fig = build_figure(station_map)
    plotly_html = fig.to_html(
        include_plotlyjs="cdn",
        full_html=True,
        config={"displayModeBar": True, "scrollZoom": True},
    )
    path.write_text(_assemble_final_html(plotly_html, station_map), encoding="utf-8")

    logger.info(f"💾 HTML saved: {path} ({len(fig.data)} traces)")
    return path
