#!/usr/bin/env python3
"""
Layer Builder Tests (ingestion end to end)

Tests:
1. Service areas: palette styling, exclusion, unknown owner, registry
2. Spread: pseudo-stations and the spread legend section
3. Heat: ramp colors and heat legend bounds
4. Stations: point identity, labels and centroid fallbacks
5. Boundary and Web-Mercator sources

Run with: python -m pytest fire_station_map/_tests/test_layer_builders.py -v
"""

import math

import pytest

from fire_station_map.config_types import LayerSourceConfig
from fire_station_map.ingest.format_normalizer import normalize_document
from fire_station_map.layer_builders import build_layer
from fire_station_map.models.data_models import GeometryKind, LayerKind

R = 6378137.0


def _source(key, kind, **kwargs):
    return LayerSourceConfig(
        key=key, label=key.title(), source=f"{key}.geojson", kind=kind, **kwargs
    )


class TestServiceAreaScenario:
    """Three polygons with Low_Hazard1 = "101", "113", "bad"."""

    @pytest.fixture
    def built(self, polygon_collection, service_area_source, context):
        doc = polygon_collection(
            [{"Low_Hazard1": "101"}, {"Low_Hazard1": "113"}, {"Low_Hazard1": "bad"}]
        )
        return build_layer(normalize_document(doc), service_area_source, context)

    def test_palette_color_for_station_101(self, built):
        first = built.group.features[0]

        assert first.feature_id == "existing-0"
        assert first.station_id == 101
        assert first.style.fill_color == "#8dd3c7"

    def test_excluded_station_suppressed(self, built, context):
        ids = [f.feature_id for f in built.group.features]

        assert ids == ["existing-0", "existing-2"]
        assert built.suppressed == 1
        assert len(context.registry) == 2
        assert all(e.station_id != 113 for e in context.registry.entries)

    def test_bad_value_gets_unknown_owner_style(self, built):
        third = built.group.features[1]

        assert third.station_id is None
        assert third.style.stroke_color == "#999"
        assert third.style.fill_opacity == 0.0
        assert third.popup["Station"] == "bad"

    def test_built_group_is_hidden_with_everything_attached(self, built):
        assert not built.group.is_shown()
        assert len(built.group.attached_features()) == 2

    def test_show_adds_legend_key_and_filters(self, built, context):
        built.group.show()

        assert "existing" in context.legend.presentation().section_keys
        # Unattributed features are not in the active station set
        assert [f.station_id for f in built.group.attached_features()] == [101]

    def test_station_toggle(self, built, context):
        built.group.show()
        first = built.group.features[0]

        context.active_stations.deselect(101)
        assert not built.group.has_feature(first)

        context.active_stations.select(101)
        assert built.group.has_feature(first)

    def test_hide_removes_legend_key(self, built, context):
        built.group.show()
        built.group.hide()
        assert "existing" not in context.legend.presentation().section_keys

    def test_popup_fields(self, polygon_collection, service_area_source, context):
        doc = polygon_collection(
            [{"Low_Hazard1": 104, "Shape__Area": 12.5, "Shape__Length": 3.0}]
        )
        built = build_layer(normalize_document(doc), service_area_source, context)

        assert built.group.features[0].popup == {
            "Layer": "Existing Service Areas",
            "Station": 104,
            "Area": 12.5,
            "Perimeter": 3.0,
        }

    def test_missing_station_shown_as_dash(
        self, polygon_collection, service_area_source, context
    ):
        doc = polygon_collection([{}])
        built = build_layer(normalize_document(doc), service_area_source, context)
        assert built.group.features[0].popup["Station"] == "—"


class TestWebMercatorSource:
    def test_esri_rings_are_projected(self, service_area_source, context):
        doc = {
            "spatialReference": {"wkid": 102100},
            "features": [
                {
                    "attributes": {"Low_Hazard1": 102},
                    "geometry": {
                        "rings": [[[0, 0], [R * math.pi / 2, 0], [0, 1000], [0, 0]]]
                    },
                },
                {
                    "attributes": {"Low_Hazard1": 103},
                    "geometry": {"rings": [[[0, 0], [1, 1]]]},
                },
            ],
        }
        built = build_layer(normalize_document(doc), service_area_source, context)
        feature = built.group.features[0]

        assert built.skipped == 1
        assert feature.latlngs[0][0][1][1] == pytest.approx(90.0)
        assert feature.latlngs[0][0][1][0] == pytest.approx(0.0)

    def test_group_bounds(self, polygon_collection, service_area_source, context):
        doc = polygon_collection([{"Low_Hazard1": 101}], origin=(-80.0, 43.0))
        built = build_layer(normalize_document(doc), service_area_source, context)

        assert built.group.bounds() == pytest.approx((-80.0, 43.0, -79.99, 43.01))


class TestSpread:
    def test_pseudo_station_and_legend(self, polygon_collection, context):
        doc = polygon_collection([{"STATION": "1CH"}, {"STATION": "102"}])
        built = build_layer(
            normalize_document(doc), _source("spread", LayerKind.SPREAD), context
        )
        first, second = built.group.features

        assert first.station_id == "1CH"
        assert first.style.fill_color == "#17becf"
        assert second.style.fill_color == "#ffffb3"
        assert len(context.registry) == 0

        built.group.show()
        assert "spread" in context.legend.presentation().section_keys
        built.group.hide()
        assert "spread" not in context.legend.presentation().section_keys


class TestHeat:
    @pytest.fixture
    def built(self, polygon_collection, context):
        doc = polygon_collection(
            [{"Incidents": 10}, {"incidents": "20"}, {"Incidents": 30}, {}]
        )
        return build_layer(
            normalize_document(doc), _source("heat", LayerKind.HEAT), context
        )

    def test_ramp_colors(self, built):
        colors = [f.style.fill_color for f in built.group.features]

        assert colors == ["#f7fbff", "#8096b5", "#08306b", "#f7fbff"]
        assert built.heat.bounds == (10.0, 30.0)

    def test_heat_style(self, built):
        style = built.group.features[0].style
        assert (style.stroke_color, style.stroke_weight, style.fill_opacity) == (
            "#333",
            0.4,
            0.55,
        )

    def test_missing_value_popup(self, built):
        assert built.group.features[3].popup["Incidents"] == "—"
        assert built.group.features[1].popup["Incidents"] == 20.0

    def test_legend_follows_visibility(self, built, context):
        built.group.show()
        heat = [s for s in context.legend.presentation().sections if s.key == "heat"]
        assert heat[0].bounds == (10.0, 30.0)

        built.group.hide()
        assert "heat" not in context.legend.presentation().section_keys


class TestStations:
    def test_points_labels_and_exclusion(self, point_collection, context):
        doc = point_collection(
            [
                ({"NAME": "Station 101"}, -79.6, 43.5),
                ({"NAME": "Station 113"}, -79.7, 43.6),
                ({"NAME": "Headquarters"}, -79.8, 43.7),
            ]
        )
        built = build_layer(
            normalize_document(doc), _source("stations", LayerKind.STATIONS), context
        )
        first, hq = built.group.features

        assert built.suppressed == 1
        assert first.geometry_kind is GeometryKind.POINT
        assert first.latlng == (43.5, -79.6)
        assert first.label == "101"
        assert first.style.radius == 6
        assert first.popup["Name"] == "Station 101"
        assert hq.station_id == "Headquarters"
        assert hq.label == "Headquarters"
        assert hq.style.fill_color == "#e41a1c"
        assert hq.style.stroke_color == "#222"
        assert hq.style.fill_opacity == 0.9

    def test_centroid_fallbacks(self, context):
        x = R * math.pi / 2
        doc = {
            "features": [
                {"attributes": {"NAME": "Stn 104", "CENT_X_385": x, "CENT_Y_385": 0}},
                {"attributes": {"NAME": "Stn 105", "CENT_X": -79.6, "CENT_Y": 43.5}},
                {"attributes": {"NAME": "Stn 106"}},
            ]
        }
        built = build_layer(
            normalize_document(doc), _source("stations", LayerKind.STATIONS), context
        )
        mercator, geographic = built.group.features

        assert mercator.latlng == pytest.approx((0.0, 90.0))
        assert geographic.latlng == (43.5, -79.6)
        assert built.skipped == 1


class TestBoundary:
    def test_outline_only(self, polygon_collection, context):
        doc = polygon_collection([{"NAME": "City"}])
        built = build_layer(
            normalize_document(doc), _source("boundary", LayerKind.BOUNDARY), context
        )
        style = built.group.features[0].style

        assert style.stroke_color == "#000000"
        assert style.stroke_weight == 2.0
        assert style.fill_opacity == 0.0
        assert built.group.features[0].station_id is None
        assert len(context.registry) == 0
