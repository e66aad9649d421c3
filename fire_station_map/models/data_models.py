"""
Typed data models for fire station geodata.

Architectural Overview:
=======================
Immutable dataclasses for everything that flows through ingestion: the
normalized feature set, raw features and their geometry, and the resolved
style of a feature. Rendered features and display groups are mutable and live
in state/display_groups.py.

Data Flow:
----------
1. format_normalizer turns a parsed document into a NormalizedFeatureSet
2. projection turns each RawGeometry point into a (lat, lon) LatLng
3. styling resolves a StationIdentity and a StyleSpec per RawFeature
4. layer_builders emit RenderedFeature objects into DisplayGroups

MODIFICATION POINT: Add new LayerKind values here for new layer families
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

# (latitude, longitude) in decimal degrees, WGS84
LatLng = Tuple[float, float]

# Positive int, pseudo-station token, zero sentinel, or None (unresolved)
StationIdentity = Optional[Union[int, str]]


# ═══════════════════════════════════════════════════════════════════════════
# 🏷️ ENUMS SECTION
# ═══════════════════════════════════════════════════════════════════════════


class SourceKind(Enum):
    """Document family recognized by the format normalizer."""

    GEOJSON = "geojson"
    ESRI = "esri"


class LayerKind(Enum):
    """Which builder a data source goes through."""

    SERVICE_AREA = "service_area"
    SPREAD = "spread"
    HEAT = "heat"
    STATIONS = "stations"
    BOUNDARY = "boundary"


class GeometryKind(Enum):
    """Geometry families the map renders."""

    POLYGON = "polygon"
    POINT = "point"


# ═══════════════════════════════════════════════════════════════════════════
# 📦 RAW FEATURE SECTION
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class RawGeometry:
    """Unprojected geometry as it appeared in the source document.

    Attributes:
        kind: Polygon or point
        parts: Polygons -> rings -> raw points ([x, y] lists or {x, y} dicts).
            The first ring of each part is the outer ring.
        point: Raw point for point geometry
    """

    kind: GeometryKind
    parts: Tuple[Tuple[Tuple[Any, ...], ...], ...] = ()
    point: Any = None

    @property
    def rings(self) -> Tuple[Tuple[Any, ...], ...]:
        """All rings across all parts, in document order."""
        return tuple(ring for part in self.parts for ring in part)


@dataclass(frozen=True)
class RawFeature:
    """One feature from a source document.

    Attributes:
        geometry: Parsed geometry, or None when missing/unsupported
        attributes: Attribute mapping (GeoJSON properties or ESRI attributes)
    """

    geometry: Optional[RawGeometry]
    attributes: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class NormalizedFeatureSet:
    """Format-independent result of normalization.

    Attributes:
        spatial_reference_id: Declared reference id; None means geographic (4326)
        features: Features in document order
        source_kind: Which document family was detected
    """

    spatial_reference_id: Optional[int]
    features: Tuple[RawFeature, ...]
    source_kind: SourceKind = SourceKind.ESRI

    def __len__(self) -> int:
        return len(self.features)


# ═══════════════════════════════════════════════════════════════════════════
# 🎨 STYLE SECTION
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class StyleSpec:
    """Resolved rendering style for one feature.

    Frozen so that two resolutions for the same station compare equal and
    can be shared between features.

    Attributes:
        stroke_color: Outline color
        stroke_weight: Outline width in pixels
        fill_color: Fill color
        fill_opacity: Fill opacity 0-1
        radius: Marker radius in pixels (points only)
        stroke_opacity: Outline opacity 0-1
    """

    stroke_color: str
    stroke_weight: float
    fill_color: str
    fill_opacity: float
    radius: Optional[float] = None
    stroke_opacity: float = 1.0

    def as_dict(self) -> Dict[str, Any]:
        """Convert to a renderer-style option dict."""
        d = {
            "color": self.stroke_color,
            "weight": self.stroke_weight,
            "opacity": self.stroke_opacity,
            "fillColor": self.fill_color,
            "fillOpacity": self.fill_opacity,
        }
        if self.radius is not None:
            d["radius"] = self.radius
        return d
