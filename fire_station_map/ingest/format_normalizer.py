#!/usr/bin/env python3
"""
Format Normalizer

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Detect which of the three upstream export families a parsed
document belongs to, extract its spatial reference id, and yield a canonical
NormalizedFeatureSet. Everything downstream is format-transparent.

Detection order (first match wins):
1. GeoJSON FeatureCollection -> reference fixed at 4326
2. ESRI feature set (features array and/or spatialReference object)
   -> document reference, else the first feature geometry's reference
3. Multi-layer wrapper (layers, or featureCollection.layers)
   -> merged features, first non-null reference across layers
4. Anything else -> FormatError

Geometry parsing is lenient: unsupported or malformed geometry becomes None
and the feature simply renders nothing.

Navigation Guide:
- normalize_document: Entry point
- extract_wkid: Spatial reference id from an ESRI reference object
- parse_feature: GeoJSON or ESRI feature -> RawFeature
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from fire_station_map.exceptions import FormatError
from fire_station_map.models.data_models import (
    GeometryKind,
    NormalizedFeatureSet,
    RawFeature,
    RawGeometry,
    SourceKind,
)

GEOGRAPHIC_WKID = 4326

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# 🌐 SPATIAL REFERENCE
# ═══════════════════════════════════════════════════════════════════════════


def extract_wkid(reference: Any) -> Optional[int]:
    """
    Read the reference id from an ESRI spatialReference object.

    Args:
        reference: Object like {"wkid": 102100, "latestWkid": 3857}

    Returns:
        wkid, else latestWkid, as int; None if neither is usable
    """
    if not isinstance(reference, dict):
        return None
    for key in ("wkid", "latestWkid"):
        value = reference.get(key)
        if value is None or isinstance(value, bool):
            continue
        try:
            return int(value)
        except (TypeError, ValueError):
            continue
    return None


def _first_feature_wkid(features: List[Any]) -> Optional[int]:
    if not features or not isinstance(features[0], dict):
        return None
    geometry = features[0].get("geometry")
    if not isinstance(geometry, dict):
        return None
    return extract_wkid(geometry.get("spatialReference"))


def _layer_wkid(layer: Dict[str, Any]) -> Optional[int]:
    """Reference declared by one wrapper layer, most specific declaration first."""
    layer_definition = layer.get("layerDefinition")
    if isinstance(layer_definition, dict):
        wkid = extract_wkid(layer_definition.get("spatialReference"))
        if wkid is not None:
            return wkid
    wkid = extract_wkid(layer.get("spatialReference"))
    if wkid is not None:
        return wkid
    feature_set = layer.get("featureSet")
    if isinstance(feature_set, dict):
        return extract_wkid(feature_set.get("spatialReference"))
    return None


# ═══════════════════════════════════════════════════════════════════════════
# 📐 GEOMETRY PARSING
# ═══════════════════════════════════════════════════════════════════════════


def _rings_part(rings: Any) -> Tuple[Tuple[Any, ...], ...]:
    if not isinstance(rings, list):
        return ()
    return tuple(tuple(ring) for ring in rings if isinstance(ring, list))


def _parse_geojson_geometry(geometry: Dict[str, Any]) -> Optional[RawGeometry]:
    geom_type = geometry.get("type")
    coords = geometry.get("coordinates")

    if geom_type == "Polygon":
        return RawGeometry(kind=GeometryKind.POLYGON, parts=(_rings_part(coords),))
    if geom_type == "MultiPolygon" and isinstance(coords, list):
        parts = tuple(_rings_part(polygon) for polygon in coords)
        return RawGeometry(kind=GeometryKind.POLYGON, parts=parts)
    if geom_type == "Point":
        return RawGeometry(kind=GeometryKind.POINT, point=coords)
    return None


def _parse_esri_geometry(geometry: Dict[str, Any]) -> Optional[RawGeometry]:
    rings = geometry.get("rings")
    if rings is None:
        rings = geometry.get("curveRings")
    if isinstance(rings, list):
        return RawGeometry(kind=GeometryKind.POLYGON, parts=(_rings_part(rings),))
    if "x" in geometry and "y" in geometry:
        return RawGeometry(
            kind=GeometryKind.POINT, point={"x": geometry["x"], "y": geometry["y"]}
        )
    return None


def parse_feature(feature: Any) -> RawFeature:
    """
    Convert a GeoJSON or ESRI feature into a RawFeature.

    Args:
        feature: Feature object from the source document

    Returns:
        RawFeature (geometry None when absent or unsupported)
    """
    if not isinstance(feature, dict):
        return RawFeature(geometry=None, attributes={})

    attributes = feature.get("attributes")
    if not isinstance(attributes, dict):
        attributes = feature.get("properties")
    if not isinstance(attributes, dict):
        attributes = {}

    geometry = feature.get("geometry")
    if not isinstance(geometry, dict):
        return RawFeature(geometry=None, attributes=attributes)

    if "type" in geometry:
        raw_geometry = _parse_geojson_geometry(geometry)
    else:
        raw_geometry = _parse_esri_geometry(geometry)
    return RawFeature(geometry=raw_geometry, attributes=attributes)


# ═══════════════════════════════════════════════════════════════════════════
# 🔎 SHAPE DETECTION
# ═══════════════════════════════════════════════════════════════════════════


def _wrapper_layers(data: Dict[str, Any]) -> Optional[List[Any]]:
    layers = data.get("layers")
    if isinstance(layers, list):
        return layers
    feature_collection = data.get("featureCollection")
    if isinstance(feature_collection, dict) and isinstance(
        feature_collection.get("layers"), list
    ):
        return feature_collection["layers"]
    return None


def _merge_layers(
    layers: List[Any], wkid: Optional[int]
) -> Tuple[List[Any], Optional[int]]:
    merged: List[Any] = []
    for layer in layers:
        if not isinstance(layer, dict):
            continue
        feature_set = layer.get("featureSet")
        features = feature_set.get("features") if isinstance(feature_set, dict) else None
        if not isinstance(features, list):
            features = layer.get("features")
        if isinstance(features, list):
            merged.extend(features)
        if wkid is None:
            wkid = _layer_wkid(layer)
    return merged, wkid


def normalize_document(data: Any) -> NormalizedFeatureSet:
    """
    Normalize a parsed source document into a NormalizedFeatureSet.

    Args:
        data: Parsed JSON document of unknown shape

    Returns:
        NormalizedFeatureSet with the reference resolved before any projection

    Raises:
        FormatError: If no recognized shape matches
    """
    if not isinstance(data, dict):
        raise FormatError("unsupported data format")

    features = data.get("features")

    # 1. GeoJSON
    if data.get("type") == "FeatureCollection" and isinstance(features, list):
        return NormalizedFeatureSet(
            spatial_reference_id=GEOGRAPHIC_WKID,
            features=tuple(parse_feature(f) for f in features),
            source_kind=SourceKind.GEOJSON,
        )

    wkid = extract_wkid(data.get("spatialReference"))
    layers = _wrapper_layers(data)

    # 2. ESRI feature set
    has_reference = isinstance(data.get("spatialReference"), dict)
    if isinstance(features, list) or (has_reference and layers is None):
        features = features if isinstance(features, list) else []
        if wkid is None:
            wkid = _first_feature_wkid(features)
        return NormalizedFeatureSet(
            spatial_reference_id=wkid,
            features=tuple(parse_feature(f) for f in features),
            source_kind=SourceKind.ESRI,
        )

    # 3. Multi-layer wrapper
    if layers is not None:
        merged, wkid = _merge_layers(layers, wkid)
        if merged:
            logger.debug(f"Merged {len(merged)} features from {len(layers)} layers")
            return NormalizedFeatureSet(
                spatial_reference_id=wkid,
                features=tuple(parse_feature(f) for f in merged),
                source_kind=SourceKind.ESRI,
            )

    raise FormatError("unsupported data format")
