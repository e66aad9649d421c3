"""
Shared fixtures: small GeoJSON/ESRI documents and a fresh map context.
"""

import pytest

from fire_station_map.config_types import AppConfig, LayerSourceConfig
from fire_station_map.models.data_models import LayerKind
from fire_station_map.state.context import MapContext


def _square(lon: float, lat: float, size: float = 0.01):
    return [
        [lon, lat],
        [lon + size, lat],
        [lon + size, lat + size],
        [lon, lat + size],
        [lon, lat],
    ]


@pytest.fixture
def square():
    """Closed lon/lat square ring factory."""
    return _square


@pytest.fixture
def polygon_collection():
    """GeoJSON FeatureCollection factory: one square polygon per properties dict."""

    def make(properties_list, origin=(-79.7, 43.5)):
        features = []
        for i, properties in enumerate(properties_list):
            features.append(
                {
                    "type": "Feature",
                    "properties": properties,
                    "geometry": {
                        "type": "Polygon",
                        "coordinates": [_square(origin[0] + i * 0.02, origin[1])],
                    },
                }
            )
        return {"type": "FeatureCollection", "features": features}

    return make


@pytest.fixture
def point_collection():
    """GeoJSON FeatureCollection factory: one point per (properties, lon, lat)."""

    def make(points):
        return {
            "type": "FeatureCollection",
            "features": [
                {
                    "type": "Feature",
                    "properties": properties,
                    "geometry": {"type": "Point", "coordinates": [lon, lat]},
                }
                for properties, lon, lat in points
            ],
        }

    return make


@pytest.fixture
def context():
    """Fresh MapContext with default settings and no layers."""
    return MapContext(AppConfig())


@pytest.fixture
def service_area_source():
    return LayerSourceConfig(
        key="existing",
        label="Existing Service Areas",
        source="Existing_Service_Areas.geojson",
        kind=LayerKind.SERVICE_AREA,
        station_keys=("Low_Hazard1",),
    )
