"""
Data models for fire station geodata.

Exports the immutable ingestion types used across the package.
"""

from fire_station_map.models.data_models import (
    GeometryKind,
    LatLng,
    LayerKind,
    NormalizedFeatureSet,
    RawFeature,
    RawGeometry,
    SourceKind,
    StationIdentity,
    StyleSpec,
)

__all__ = [
    "GeometryKind",
    "LatLng",
    "LayerKind",
    "NormalizedFeatureSet",
    "RawFeature",
    "RawGeometry",
    "SourceKind",
    "StationIdentity",
    "StyleSpec",
]
