#!/usr/bin/env python3
"""
Geometry and Color Utilities

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Small helpers shared by the Plotly trace builders.

- hex_to_rgba: Style colors with opacity for Plotly fills and lines
- bounds_to_center / expand_bounds / bounds_to_zoom: Initial map view from
  a (min_lon, min_lat, max_lon, max_lat) extent

Navigation Guide:
- Use VS Code outline (Ctrl+Shift+O) to jump between functions
"""

import math
from typing import Tuple

from fire_station_map.styling.heat_ramp import hex_to_rgb

MAX_ZOOM = 18.0


# ===========================================================================
# COLOR UTILITIES
# ===========================================================================


def hex_to_rgba(hex_color: str, opacity: float = 1.0) -> str:
    """
    Convert a hex color and opacity to a CSS rgba() string.

    Args:
        hex_color: Color string like "#08306b" or "#999"
        opacity: Alpha 0-1

    Returns:
        "rgba(r, g, b, a)"
    """
    r, g, b = hex_to_rgb(hex_color)
    return f"rgba({r}, {g}, {b}, {opacity})"


# ===========================================================================
# BOUNDS
# ===========================================================================


def bounds_to_center(
    bounds: Tuple[float, float, float, float],
) -> Tuple[float, float]:
    """
    Calculate center point from bounds.

    Args:
        bounds: (minx, miny, maxx, maxy)

    Returns:
        Tuple of (center_x, center_y)
    """
    center_x = (bounds[0] + bounds[2]) / 2
    center_y = (bounds[1] + bounds[3]) / 2
    return (center_x, center_y)


def expand_bounds(
    bounds: Tuple[float, float, float, float],
    factor: float = 0.1,
) -> Tuple[float, float, float, float]:
    """
    Expand bounds by a percentage factor.

    Args:
        bounds: (minx, miny, maxx, maxy)
        factor: Expansion factor (0.1 = 10% on each side)

    Returns:
        Expanded bounds tuple
    """
    minx, miny, maxx, maxy = bounds
    width = maxx - minx
    height = maxy - miny

    return (
        minx - width * factor,
        miny - height * factor,
        maxx + width * factor,
        maxy + height * factor,
    )


def bounds_to_zoom(bounds: Tuple[float, float, float, float]) -> float:
    """
    Approximate web-map zoom level that fits lon/lat bounds.

    A zero-size extent (single point) returns MAX_ZOOM.
    """
    lon_span = bounds[2] - bounds[0]
    lat_span = bounds[3] - bounds[1]
    candidates = []
    if lon_span > 0:
        candidates.append(math.log2(360.0 / lon_span))
    if lat_span > 0:
        candidates.append(math.log2(180.0 / lat_span))
    if not candidates:
        return MAX_ZOOM
    return max(0.0, min(MAX_ZOOM, min(candidates)))
