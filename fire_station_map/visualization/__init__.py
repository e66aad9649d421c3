#!/usr/bin/env python3
"""
Visualization Package

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Render the current map state as a static HTML snapshot.

- geometry_utils: Color and bounds helpers
- plotly_traces: Plotly Scattermap trace builders and map layout
- html_panels: HTML/CSS panel generators (legend, layers, station filter)
- html_builder: Figure + panels -> HTML file

Usage:
    from fire_station_map.visualization import write_html

    write_html(station_map, "Output/fire_station_map.html")
"""

from fire_station_map.visualization.html_builder import build_figure, write_html
from fire_station_map.visualization.html_panels import (
    generate_layers_panel_html,
    generate_legend_panel_html,
    generate_station_filter_panel_html,
)

__all__ = [
    "build_figure",
    "write_html",
    "generate_layers_panel_html",
    "generate_legend_panel_html",
    "generate_station_filter_panel_html",
]
