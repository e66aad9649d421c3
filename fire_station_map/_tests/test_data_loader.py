#!/usr/bin/env python3
"""
Data Loader and StationMap Tests

Tests:
1. decode_document: BOM stripping, invalid payloads
2. fetch_json: local files, HTTP status/transport errors, cache-busting
3. load_sources: per-source failure isolation
4. StationMap: load, initial view, toggles

Run with: python -m pytest fire_station_map/_tests/test_data_loader.py -v
"""

import dataclasses
import json
import logging
import math
from pathlib import Path

import pytest
import requests

from fire_station_map.config import CONFIG
from fire_station_map.config_types import AppConfig, FetchConfig
from fire_station_map.exceptions import FetchError, FormatError
from fire_station_map.ingest import data_loader
from fire_station_map.ingest.data_loader import (
    decode_document,
    fetch_json,
    load_sources,
)
from fire_station_map.main import LOGGER_NAME, StationMap, run_station_map


class _FakeResponse:
    def __init__(self, status_code=200, body="", reason="OK"):
        self.status_code = status_code
        self.reason = reason
        self.text = body
        self.content = body.encode("utf-8")


class _FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params, timeout))
        if self.error is not None:
            raise self.error
        return self.response


class TestDecodeDocument:
    def test_strips_bom(self):
        payload = b"\xef\xbb\xbf" + b'{"features": []}'
        assert decode_document(payload) == {"features": []}

    def test_text_payload(self):
        assert decode_document('{"a": 1}') == {"a": 1}

    def test_invalid_json(self):
        with pytest.raises(FormatError, match="invalid JSON"):
            decode_document(b"{not json", "x.json")

    def test_invalid_utf8(self):
        with pytest.raises(FormatError, match="not UTF-8"):
            decode_document(b"\xff\xfe\x00", "x.json")


class TestFetchJson:
    def test_local_file(self, tmp_path):
        path = tmp_path / "a.geojson"
        path.write_bytes(b"\xef\xbb\xbf" + b'{"type": "FeatureCollection"}')

        assert fetch_json(str(path)) == {"type": "FeatureCollection"}

    def test_missing_local_file(self, tmp_path):
        with pytest.raises(FetchError) as excinfo:
            fetch_json(str(tmp_path / "missing.geojson"))
        assert excinfo.value.status is None

    def test_http_error_status(self):
        body = "x" * 500
        session = _FakeSession(_FakeResponse(404, body, "Not Found"))

        with pytest.raises(FetchError) as excinfo:
            fetch_json("https://example.org/a.json", session=session)

        error = excinfo.value
        assert error.status == 404
        assert error.url == "https://example.org/a.json"
        assert len(error.body) == 200
        assert "404 Not Found" in str(error)

    def test_cache_bust_param(self):
        session = _FakeSession(_FakeResponse(200, '{"features": []}'))

        fetch_json("https://example.org/a.json", session=session)
        url, params, timeout = session.calls[0]

        assert url == "https://example.org/a.json"
        assert params["cb"].isdigit()
        assert timeout == 30.0

    def test_cache_bust_disabled(self):
        session = _FakeSession(_FakeResponse(200, '{"features": []}'))

        fetch_json(
            "https://example.org/a.json",
            session=session,
            config=FetchConfig(cache_bust=False, timeout_s=5),
        )

        assert session.calls[0][1:] == (None, 5)

    def test_transport_error(self):
        session = _FakeSession(error=requests.ConnectionError("refused"))

        with pytest.raises(FetchError, match="refused"):
            fetch_json("http://example.org/a.json", session=session)

    def test_bad_body_is_format_error(self):
        session = _FakeSession(_FakeResponse(200, "<html>"))
        with pytest.raises(FormatError):
            fetch_json("https://example.org/a.json", session=session)

    def test_unfollowed_redirect_is_fetch_error(self):
        session = _FakeSession(_FakeResponse(302, "", "Found"))

        with pytest.raises(FetchError) as excinfo:
            fetch_json("https://example.org/a.json", session=session)
        assert excinfo.value.status == 302


# ═══════════════════════════════════════════════════════════════════════════
# Multi-source loading
# ═══════════════════════════════════════════════════════════════════════════


def _polygon_doc(station_values, origin=(-79.7, 43.5)):
    features = []
    for i, value in enumerate(station_values):
        lon, lat = origin[0] + i * 0.02, origin[1]
        ring = [
            [lon, lat],
            [lon + 0.01, lat],
            [lon + 0.01, lat + 0.01],
            [lon, lat + 0.01],
            [lon, lat],
        ]
        features.append(
            {
                "type": "Feature",
                "properties": {"Low_Hazard1": value, "STATION": value},
                "geometry": {"type": "Polygon", "coordinates": [ring]},
            }
        )
    return {"type": "FeatureCollection", "features": features}


STATIONS_DOC = {
    "type": "FeatureCollection",
    "features": [
        {
            "type": "Feature",
            "properties": {"NAME": "Station 101"},
            "geometry": {"type": "Point", "coordinates": [-79.6, 43.55]},
        },
        {
            "type": "Feature",
            "properties": {"NAME": "Station 102"},
            "geometry": {"type": "Point", "coordinates": [-79.65, 43.56]},
        },
    ],
}


def _fake_fetch(documents):
    """location -> document, keyed by file name; anything else is a 404."""

    def fetch(location):
        name = Path(location).name
        if name not in documents:
            raise FetchError(f"{location}: 404 Not Found", url=location, status=404)
        document = documents[name]
        if isinstance(document, Exception):
            raise document
        return json.loads(json.dumps(document))

    return fetch


@pytest.fixture
def documents():
    return {
        "Fire_Stations.geojson": STATIONS_DOC,
        "City_Of_Mississauga_Boundary.geojson": _polygon_doc([None], (-79.8, 43.4)),
        "Incidents_Spread.geojson": _polygon_doc(["1CH", 101]),
        "Incidents_Heat_Map.geojson": {"features": "not a list"},
        "Existing_Service_Areas.geojson": _polygon_doc([101, 102, 113]),
        "Optimized_NFPA_Service_Areas.geojson": _polygon_doc([101, 102]),
    }


class TestLoadSources:
    def test_failures_are_isolated(self, documents, context):
        sources = AppConfig.from_dict(CONFIG).layers

        result = load_sources(sources, context, fetch=_fake_fetch(documents))

        assert set(result.layers) == {
            "stations",
            "boundary",
            "spread",
            "existing",
            "nfpa",
        }
        assert set(result.failures) == {"heat", "aug", "ful", "bmed", "bhigh"}
        assert isinstance(result.failures["heat"], FormatError)
        assert result.failures["aug"].status == 404
        assert not result.ok

    def test_unexpected_value_error_is_contained(self, documents, context):
        documents["Fire_Stations.geojson"] = ValueError("bad payload")
        sources = AppConfig.from_dict(CONFIG).layers[:1]

        result = load_sources(sources, context, fetch=_fake_fetch(documents))

        assert result.layers == {}
        assert "stations" in result.failures

    def test_unexpected_builder_error_is_contained(
        self, documents, context, monkeypatch
    ):
        real_build_layer = data_loader.build_layer

        def build_layer(feature_set, source, ctx):
            if source.key == "spread":
                raise AttributeError("builder broke")
            return real_build_layer(feature_set, source, ctx)

        monkeypatch.setattr(data_loader, "build_layer", build_layer)
        sources = AppConfig.from_dict(CONFIG).layers

        result = load_sources(sources, context, fetch=_fake_fetch(documents))

        assert isinstance(result.failures["spread"], AttributeError)
        assert {"stations", "boundary", "existing", "nfpa"} <= set(result.layers)

    def test_out_of_range_numbers_do_not_abort_siblings(self, documents, context):
        heat = _polygon_doc([None, None])
        heat["features"][0]["properties"]["Incidents"] = 10**400
        heat["features"][1]["properties"]["Incidents"] = 5
        documents["Incidents_Heat_Map.geojson"] = heat
        documents["Optimized_Augmented_Service_Areas.geojson"] = {
            "spatialReference": {"wkid": 102100},
            "features": [
                {
                    "attributes": {"Low_Hazard1": 101},
                    "geometry": {
                        "rings": [[[0, 0], [1000, 0], [0, 1e10], [0, 1000], [0, 0]]]
                    },
                }
            ],
        }
        sources = AppConfig.from_dict(CONFIG).layers

        result = load_sources(sources, context, fetch=_fake_fetch(documents))

        assert {"heat", "aug", "existing"} <= set(result.layers)
        heat_layer = result.layers["heat"]
        assert math.isnan(heat_layer.group.features[0].value)
        assert heat_layer.heat.bounds == (5.0, 5.0)
        (ring,) = result.layers["aug"].group.features[0].latlngs[0]
        assert len(ring) == 4

    def test_no_sources(self, context):
        result = load_sources((), context)
        assert result.ok and result.layers == {}

    def test_registry_filled_from_service_areas(self, documents, context):
        sources = AppConfig.from_dict(CONFIG).layers

        load_sources(sources, context, fetch=_fake_fetch(documents))

        # existing: 101, 102 (113 excluded); nfpa: 101, 102
        assert len(context.registry) == 4


# ═══════════════════════════════════════════════════════════════════════════
# StationMap
# ═══════════════════════════════════════════════════════════════════════════


@pytest.fixture
def station_map(documents):
    station_map = StationMap(
        AppConfig.from_dict(CONFIG), fetch=_fake_fetch(documents)
    )
    station_map.load()
    return station_map


class TestStationMap:
    def test_layers_in_config_order(self, station_map):
        assert list(station_map.layers) == [
            "stations",
            "boundary",
            "spread",
            "existing",
            "nfpa",
        ]
        assert "heat" in station_map.failures

    def test_initial_view(self, station_map):
        shown = [g.key for g in station_map.groups if g.is_shown()]
        presentation = station_map.context.legend.presentation()

        assert shown == ["stations", "boundary", "existing"]
        assert presentation.collapsed
        assert presentation.section_keys == ("stations", "existing")

    def test_fit_bounds_from_existing(self, station_map):
        assert station_map.fit_bounds == pytest.approx((-79.7, 43.5, -79.67, 43.51))

    def test_station_filter(self, station_map):
        existing = station_map.group("existing")

        station_map.deselect_station(101)
        assert [f.station_id for f in existing.attached_features()] == [102]

        station_map.select_none()
        assert existing.attached_features() == []

        station_map.select_all()
        assert len(existing.attached_features()) == 2

    def test_hidden_layer_catches_up_on_show(self, station_map):
        station_map.deselect_station(102)
        nfpa = station_map.group("nfpa")
        assert len(nfpa.attached_features()) == 2

        station_map.show_layer("nfpa")

        assert [f.station_id for f in nfpa.attached_features()] == [101]
        assert "nfpa" in station_map.context.legend.presentation().section_keys

    def test_hide_layer(self, station_map):
        station_map.hide_layer("existing")

        assert not station_map.group("existing").is_shown()
        assert "existing" not in station_map.context.legend.presentation().section_keys

    def test_unknown_layer(self, station_map):
        with pytest.raises(KeyError, match="No loaded layer"):
            station_map.group("heat")


# ═══════════════════════════════════════════════════════════════════════════
# Full run
# ═══════════════════════════════════════════════════════════════════════════


@pytest.fixture
def run_config(tmp_path):
    config = AppConfig.from_dict(CONFIG)
    export = dataclasses.replace(
        config.map_export,
        output_html=str(tmp_path / "map.html"),
        output_geojson=str(tmp_path / "visible.geojson"),
        log_dir=str(tmp_path / "logs"),
    )
    yield dataclasses.replace(config, map_export=export)

    package_logger = logging.getLogger(LOGGER_NAME)
    for handler in list(package_logger.handlers):
        handler.close()
        package_logger.removeHandler(handler)


class TestRunStationMap:
    def test_writes_html_and_visible_geojson(self, run_config, documents, tmp_path):
        run_station_map(run_config, fetch=_fake_fetch(documents))

        data = json.loads((tmp_path / "visible.geojson").read_text(encoding="utf-8"))
        layer_keys = [f["properties"]["layer_key"] for f in data["features"]]

        assert (tmp_path / "map.html").exists()
        # stations (2) + boundary (1) + existing (101, 102)
        assert sorted(layer_keys) == sorted(
            ["stations", "stations", "boundary", "existing", "existing"]
        )

    def test_geojson_export_can_be_disabled(self, run_config, documents, tmp_path):
        config = dataclasses.replace(
            run_config,
            map_export=dataclasses.replace(run_config.map_export, output_geojson=None),
        )

        run_station_map(config, fetch=_fake_fetch(documents))

        assert (tmp_path / "map.html").exists()
        assert not (tmp_path / "visible.geojson").exists()
