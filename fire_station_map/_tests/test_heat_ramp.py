#!/usr/bin/env python3
"""
Heat Ramp Tests

Run with: python -m pytest fire_station_map/_tests/test_heat_ramp.py -v
"""

import math

import pytest

from fire_station_map.styling.heat_ramp import (
    compute_heat_ramp,
    hex_to_rgb,
    ramp_color,
    rgb_to_hex,
)

LIGHT = "#f7fbff"
DARK = "#08306b"


class TestColorUtilities:
    def test_hex_to_rgb(self):
        assert hex_to_rgb("#08306b") == (8, 48, 107)
        assert hex_to_rgb("999") == (153, 153, 153)

    def test_invalid_hex(self):
        with pytest.raises(ValueError):
            hex_to_rgb("#12345")

    def test_rgb_to_hex_rounds_and_clamps(self):
        assert rgb_to_hex(127.5, -3, 300) == "#8000ff"

    def test_ramp_endpoints(self):
        assert ramp_color(0.0, LIGHT, DARK) == LIGHT
        assert ramp_color(1.0, LIGHT, DARK) == DARK


class TestComputeHeatRamp:
    def test_bounds_and_midpoint(self):
        ramp = compute_heat_ramp([10, 20, 30], LIGHT, DARK)

        assert ramp.bounds == (10.0, 30.0)
        assert ramp.t_values == (0.0, 0.5, 1.0)
        assert ramp.colors[0] == LIGHT
        assert ramp.colors[1] == ramp_color(0.5, LIGHT, DARK) == "#8096b5"
        assert ramp.colors[2] == DARK

    def test_ties_get_identical_colors(self):
        ramp = compute_heat_ramp([3, 7, 3, 7])
        assert ramp.colors[0] == ramp.colors[2]
        assert ramp.colors[1] == ramp.colors[3]

    def test_all_equal_values(self):
        ramp = compute_heat_ramp([5, 5])
        assert ramp.bounds == (5.0, 5.0)
        assert ramp.t_values == (0.0, 0.0)

    def test_no_finite_values_default_bounds(self):
        ramp = compute_heat_ramp([float("nan"), float("inf")])
        assert ramp.bounds == (0.0, 1.0)
        assert ramp.colors == (LIGHT, LIGHT)

    def test_empty(self):
        ramp = compute_heat_ramp([])
        assert ramp.bounds == (0.0, 1.0)
        assert ramp.colors == ()

    def test_non_finite_value_shares_minimum_color(self):
        ramp = compute_heat_ramp([0, float("nan"), 4])

        assert ramp.colors[1] == ramp.colors[0] == LIGHT
        assert ramp.t_values[1] == 0.0
        # Only the underlying value tells them apart
        assert ramp.values[0] == 0.0
        assert math.isnan(ramp.values[1])
