#!/usr/bin/env python3
"""
Legend State Aggregator Tests

Run with: python -m pytest fire_station_map/_tests/test_legend_state.py -v
"""

import pytest

from fire_station_map.config_types import HeatRampConfig, LegendConfig
from fire_station_map.state.legend_state import LegendStateAggregator


@pytest.fixture
def legend():
    return LegendStateAggregator(
        LegendConfig(),
        station_entries=[(101, "#8dd3c7"), (102, "#ffffb3")],
        heat_config=HeatRampConfig(),
    )


class TestLifecycle:
    def test_ensure_is_idempotent(self, legend):
        legend.ensure()
        legend.ensure()

        assert legend.created
        assert legend.revision == 1

    def test_every_mutation_regenerates(self, legend):
        legend.add_key("existing")
        legend.remove_key("existing")
        legend.set_heat_legend(False)

        # ensure + three mutations
        assert legend.revision == 4

    def test_subscribers_get_presentation(self, legend):
        seen = []
        legend.subscribe(lambda p: seen.append(p.section_keys))

        legend.add_key("nfpa")

        assert seen[-1] == ("stations", "nfpa")


class TestSections:
    def test_stations_always_on(self, legend):
        section = legend.presentation().sections[0]

        assert section.key == "stations"
        assert section.swatches == (("101", "#8dd3c7"), ("102", "#ffffb3"))

    def test_fixed_order_independent_of_events(self, legend):
        legend.add_key("bhigh")
        legend.add_key("existing")
        legend.set_section_visible("spread", True)

        assert legend.presentation().section_keys == (
            "stations",
            "spread",
            "existing",
            "bhigh",
        )

    def test_remove_key(self, legend):
        legend.add_key("aug")
        legend.remove_key("aug")
        legend.remove_key("never-added")

        assert legend.presentation().section_keys == ("stations",)

    def test_unknown_key_is_not_rendered(self, legend):
        legend.add_key("not-configured")
        assert "not-configured" not in legend.presentation().section_keys

    def test_heat_section(self, legend):
        legend.set_heat_legend(True, 2, 40)
        heat = [s for s in legend.presentation().sections if s.key == "heat"][0]

        assert heat.bounds == (2.0, 40.0)
        assert heat.gradient == ("#f7fbff", "#08306b")

        legend.set_heat_legend(False, None, None)
        assert "heat" not in legend.presentation().section_keys

    @pytest.mark.parametrize(
        "low, high", [(None, 5), (1, None), (float("nan"), 5), (1, float("inf"))]
    )
    def test_heat_needs_finite_bounds(self, legend, low, high):
        legend.set_heat_legend(True, low, high)
        assert "heat" not in legend.presentation().section_keys


class TestCollapsed:
    def test_set_collapsed_is_idempotent(self, legend):
        legend.set_collapsed(True)
        revision = legend.revision

        legend.set_collapsed(True)
        assert legend.revision == revision

        legend.set_collapsed(False)
        assert legend.revision == revision + 1
        assert not legend.presentation().collapsed


class TestRenderHtml:
    def test_collapsed_body_hidden(self, legend):
        legend.set_collapsed(True)
        html = legend.render_html()

        assert 'class="legend-body" style="display: none;"' in html
        assert "Fire Stations" in html

    def test_heat_bounds_one_decimal(self, legend):
        legend.set_heat_legend(True, 2, 40)
        html = legend.render_html()

        assert "2.0" in html
        assert "40.0" in html
        assert "linear-gradient(90deg, #f7fbff, #08306b)" in html
