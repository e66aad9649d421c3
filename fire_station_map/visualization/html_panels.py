#!/usr/bin/env python3
"""
HTML Panel Generators

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Generate HTML strings for the sidebar panels of the map
snapshot. Pure functions that return HTML strings - no Plotly dependency.

Panels:
- Legend panel (collapsible; station swatches, heat gradient, layer keys)
- Layers panel (one checkbox per display group, checked when shown)
- Station filter panel (one checkbox per roster station, checked when active)

Navigation Guide:
- Use VS Code outline (Ctrl+Shift+O) to jump between functions
"""

from html import escape
from typing import Collection, Sequence, Tuple

from fire_station_map.state.display_groups import DisplayGroup
from fire_station_map.state.legend_state import LegendPresentation, LegendSection


# ===========================================================================
# STYLING CONSTANTS
# ===========================================================================

PANEL_STYLE_HEADER = (
    "font-family: Arial, sans-serif; "
    "font-size: 12px; "
    "font-weight: bold; "
    "color: rgb(42, 63, 95);"
)

DEFAULT_LEFT_PANEL_WIDTH = 200
DEFAULT_RIGHT_PANEL_WIDTH = 220
DEFAULT_PANEL_VERTICAL_GAP = 12

CARET_OPEN = "▾"
CARET_CLOSED = "▸"


# ===========================================================================
# LEGEND PANEL
# ===========================================================================


def _legend_section_html(section: LegendSection) -> str:
    header = f'<div class="legend-section"><b>{escape(section.label)}</b></div>'

    if section.section_type == "stations":
        items = [
            f'<div class="legend-item">'
            f'<span class="legend-swatch" style="background-color: {color};"></span>'
            f"<span>{escape(label)}</span>"
            f"</div>"
            for label, color in section.swatches
        ]
        return header + "".join(items)

    if section.section_type == "heat" and section.gradient and section.bounds:
        light, dark = section.gradient
        low, high = section.bounds
        return (
            header
            + '<div class="legend-item" style="gap: 6px;">'
            + f"<span>{low:.1f}</span>"
            + '<div class="legend-gradient" style="'
            + f'background: linear-gradient(90deg, {light}, {dark});"></div>'
            + f"<span>{high:.1f}</span>"
            + "</div>"
        )

    return header


def generate_legend_panel_html(
    presentation: LegendPresentation,
    panel_width: int = DEFAULT_RIGHT_PANEL_WIDTH,
) -> str:
    """
    Generate HTML for the collapsible legend panel.

    Sections appear in the presentation's (fixed) order. The body is hidden
    while the legend is collapsed; clicking the header toggles it.

    Args:
        presentation: Current legend presentation
        panel_width: Panel width in pixels

    Returns:
        HTML string for legend panel
    """
    body_display = "none" if presentation.collapsed else "block"
    caret = CARET_CLOSED if presentation.collapsed else CARET_OPEN
    sections_html = "".join(_legend_section_html(s) for s in presentation.sections)

    return f"""
<div id="legendPanel" class="panel legend" style="width: {panel_width}px;">
    <div class="legend-header" style="{PANEL_STYLE_HEADER}"
         onclick="var b=this.nextElementSibling;var open=b.style.display==='block';b.style.display=open?'none':'block';this.querySelector('.legend-caret').textContent=open?'{CARET_CLOSED}':'{CARET_OPEN}';">
        <span>{escape(presentation.title)}</span><span class="legend-caret">{caret}</span>
    </div>
    <div class="legend-body" style="display: {body_display};">
        {sections_html}
    </div>
</div>
"""


# ===========================================================================
# LAYERS PANEL
# ===========================================================================


def generate_layers_panel_html(
    groups: Sequence[DisplayGroup],
    panel_width: int = DEFAULT_LEFT_PANEL_WIDTH,
    vertical_gap: int = DEFAULT_PANEL_VERTICAL_GAP,
) -> str:
    """
    Generate HTML for the Layers panel.

    Args:
        groups: Display groups in panel order
        panel_width: Panel width in pixels
        vertical_gap: Vertical gap from previous panel

    Returns:
        HTML string for layers panel (empty when there are no groups)
    """
    if not groups:
        return ""

    checkbox_items = []
    for group in groups:
        checked = " checked" if group.is_shown() else ""
        checkbox_items.append(
            f'<div class="layer-toggle">'
            f'<label><input type="checkbox" data-layer="{escape(group.key)}"{checked}> '
            f"{escape(group.label)}</label>"
            f"</div>"
        )

    return f"""
<div id="layersPanel" class="panel" style="width: {panel_width}px; margin-top: {vertical_gap}px;">
    <h3>Layers</h3>
    {"".join(checkbox_items)}
</div>
"""


# ===========================================================================
# STATION FILTER PANEL
# ===========================================================================


def generate_station_filter_panel_html(
    station_entries: Sequence[Tuple[object, str]],
    active_stations: Collection[object],
    panel_width: int = DEFAULT_LEFT_PANEL_WIDTH,
    vertical_gap: int = DEFAULT_PANEL_VERTICAL_GAP,
) -> str:
    """
    Generate HTML for the station filter panel.

    Args:
        station_entries: (station_id, color) in roster order
        active_stations: Currently selected station ids
        panel_width: Panel width in pixels
        vertical_gap: Vertical gap from previous panel

    Returns:
        HTML string for station filter panel
    """
    checkbox_items = []
    for station_id, color in station_entries:
        checked = " checked" if station_id in active_stations else ""
        checkbox_items.append(
            f'<div class="filter-checkbox">'
            f'<label><input type="checkbox" data-station="{escape(str(station_id))}"{checked}> '
            f'<span class="legend-swatch" style="background-color: {color};"></span>'
            f"{escape(str(station_id))}</label>"
            f"</div>"
        )

    selected = sum(1 for station_id, _ in station_entries if station_id in active_stations)
    return f"""
<div id="stationFilterPanel" class="panel" style="width: {panel_width}px; margin-top: {vertical_gap}px;">
    <h3>Stations ({selected}/{len(station_entries)})</h3>
    {"".join(checkbox_items)}
</div>
"""


# ===========================================================================
# CSS
# ===========================================================================


def generate_panel_styles_css() -> str:
    """Generate CSS styles for all panels."""
    return """
    <style>
        .panel {
            background: rgba(255, 255, 255, 0.75);
            backdrop-filter: blur(12px) saturate(180%);
            -webkit-backdrop-filter: blur(12px) saturate(180%);
            border: 1px solid rgba(255, 255, 255, 0.4);
            border-radius: 16px;
            box-shadow: 0 8px 32px rgba(0, 0, 0, 0.1), inset 0 1px 1px rgba(255, 255, 255, 0.6);
            padding: 12px 16px;
            font-family: Arial, sans-serif;
            font-size: 11px;
            color: rgb(42, 63, 95);
        }

        .panel h3 {
            margin: 0 0 8px 0;
            font-size: 12px;
            font-weight: bold;
            color: rgb(42, 63, 95);
        }

        .legend-header {
            display: flex;
            align-items: center;
            justify-content: space-between;
            cursor: pointer;
            user-select: none;
        }

        .legend-body {
            max-height: 42vh;
            overflow: auto;
            margin-top: 6px;
        }

        .legend-section {
            margin-top: 6px;
        }

        .legend-item {
            display: flex;
            align-items: center;
            margin: 4px 0;
        }

        .legend-swatch {
            display: inline-block;
            width: 16px;
            height: 12px;
            border: 1px solid #999;
            margin-right: 6px;
        }

        .legend-gradient {
            height: 12px;
            flex: 1;
            border: 1px solid #999;
        }

        .layer-toggle,
        .filter-checkbox {
            margin: 6px 0;
        }
    </style>
"""
