#!/usr/bin/env python3
"""
Heat Ramp Calculator

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Derive a per-feature fill color from a numeric attribute via
min/max normalization and two-stop linear RGB interpolation, plus the
dataset-wide (min, max) used by the legend gradient.

Algorithm:
1. min/max over all finite values (0, 1 when there are none)
2. t = clamp((value - min) / (max - min or 1), 0, 1)
3. Each RGB channel interpolated between the light and dark stops at t

Non-finite values get t = 0, the same color as the true minimum. Only the
underlying value tells them apart.

Navigation Guide:
- hex_to_rgb / rgb_to_hex / interpolate_color: Color utilities
- ramp_color: Color at parameter t
- compute_heat_ramp: Whole-dataset computation
"""

import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np


# ===========================================================================
# COLOR UTILITIES
# ===========================================================================


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    """
    Convert hex color string to RGB tuple.

    Args:
        hex_color: Color string like "#08306b", "08306b" or "#999"

    Returns:
        Tuple of (R, G, B) integers 0-255
    """
    hex_color = hex_color.lstrip("#")
    if len(hex_color) == 3:
        hex_color = "".join(c * 2 for c in hex_color)
    if len(hex_color) != 6:
        raise ValueError(f"Not a hex color: '#{hex_color}'")
    return tuple(int(hex_color[i : i + 2], 16) for i in (0, 2, 4))


def _channel(value: float) -> int:
    # Round half up, clamped to a byte
    return int(math.floor(max(0.0, min(255.0, value)) + 0.5))


def rgb_to_hex(r: float, g: float, b: float) -> str:
    """
    Convert RGB values to a lowercase hex color string.

    Fractional channels are rounded half up and clamped to 0-255.
    """
    return f"#{_channel(r):02x}{_channel(g):02x}{_channel(b):02x}"


def interpolate_color(
    color1: Tuple[int, int, int],
    color2: Tuple[int, int, int],
    t: float,
) -> Tuple[float, float, float]:
    """
    Interpolate between two RGB colors.

    Args:
        color1: Start color (RGB tuple)
        color2: End color (RGB tuple)
        t: Interpolation factor 0-1

    Returns:
        Unrounded interpolated RGB channels
    """
    return tuple(c1 + (c2 - c1) * t for c1, c2 in zip(color1, color2))


def ramp_color(t: float, light_color: str, dark_color: str) -> str:
    """Hex color at parameter t on the light -> dark ramp."""
    return rgb_to_hex(*interpolate_color(hex_to_rgb(light_color), hex_to_rgb(dark_color), t))


# ===========================================================================
# HEAT RAMP
# ===========================================================================


@dataclass(frozen=True)
class HeatRamp:
    """Result of a heat ramp computation.

    Attributes:
        min_value: Smallest finite value (0.0 when none)
        max_value: Largest finite value (1.0 when none)
        values: Input values as floats, in input order
        t_values: Normalized parameter per value
        colors: Fill color per value
    """

    min_value: float
    max_value: float
    values: Tuple[float, ...]
    t_values: Tuple[float, ...]
    colors: Tuple[str, ...]

    @property
    def bounds(self) -> Tuple[float, float]:
        return (self.min_value, self.max_value)


def compute_heat_ramp(
    values: Sequence[float],
    light_color: str = "#f7fbff",
    dark_color: str = "#08306b",
) -> HeatRamp:
    """
    Compute per-value ramp colors and the dataset bounds.

    Args:
        values: One numeric value per feature (NaN/inf allowed)
        light_color: Color of the minimum
        dark_color: Color of the maximum

    Returns:
        HeatRamp with colors aligned to values
    """
    arr = np.asarray(list(values), dtype=float)
    finite_mask = np.isfinite(arr)

    if finite_mask.any():
        min_value = float(arr[finite_mask].min())
        max_value = float(arr[finite_mask].max())
    else:
        min_value, max_value = 0.0, 1.0
    span = (max_value - min_value) or 1.0

    t = np.zeros_like(arr)
    t[finite_mask] = np.clip((arr[finite_mask] - min_value) / span, 0.0, 1.0)

    light_rgb = hex_to_rgb(light_color)
    dark_rgb = hex_to_rgb(dark_color)
    colors: List[str] = [
        rgb_to_hex(*interpolate_color(light_rgb, dark_rgb, float(ti))) for ti in t
    ]

    return HeatRamp(
        min_value=min_value,
        max_value=max_value,
        values=tuple(float(v) for v in arr),
        t_values=tuple(float(ti) for ti in t),
        colors=tuple(colors),
    )
