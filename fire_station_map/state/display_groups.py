#!/usr/bin/env python3
"""
Display Groups and Rendered Features

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: The render-side interface the core hands to a map widget.

- RenderedFeature: one styled shape or marker, projected to (lat, lon)
- DisplayGroup: owns its features; each feature is attached (drawn) or
  detached; the group itself is shown or hidden on the map and raises
  "show"/"hide" events to registered handlers

A map widget renders the attached features of every shown group. Attaching or
detaching a feature never raises group events, so handlers that reconcile
attachment (the visibility registry) cannot recurse through them.

Navigation Guide:
- RenderedFeature.geometry: shapely view in (lon, lat)
- DisplayGroup.show / hide / is_shown: Group display state
- DisplayGroup.attach / detach / has_feature: Per-feature attachment
- DisplayGroup.bounds: Extent of attached features via geopandas
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

import geopandas as gpd
from shapely.errors import GEOSException
from shapely.geometry import MultiPoint, MultiPolygon, Point, Polygon
from shapely.geometry.base import BaseGeometry

from fire_station_map.models.data_models import (
    GeometryKind,
    LatLng,
    LayerKind,
    StationIdentity,
    StyleSpec,
)

GROUP_EVENTS = ("show", "hide")

GroupHandler = Callable[["DisplayGroup"], None]

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# 📍 RENDERED FEATURE
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(eq=False)
class RenderedFeature:
    """A styled, projected feature owned by exactly one DisplayGroup.

    Compared by identity; the visibility registry holds weak references.

    Attributes:
        feature_id: Unique id, "<layer key>-<source index>"
        layer_key: Key of the owning layer
        geometry_kind: Polygon or point
        style: Current style
        station_id: Resolved owner (None when unresolved)
        latlngs: Polygon parts -> rings -> (lat, lon)
        latlng: Point location (lat, lon)
        popup: Ordered popup fields
        label: Marker text for station points
        value: Numeric value behind a heat color
    """

    feature_id: str
    layer_key: str
    geometry_kind: GeometryKind
    style: StyleSpec
    station_id: StationIdentity = None
    latlngs: List[List[List[LatLng]]] = field(default_factory=list)
    latlng: Optional[LatLng] = None
    popup: Dict[str, Any] = field(default_factory=dict)
    label: Optional[str] = None
    value: Optional[float] = None

    def apply_style(self, style: StyleSpec) -> None:
        """Replace the feature's style."""
        self.style = style

    @property
    def geometry(self) -> BaseGeometry:
        """Shapely geometry in (lon, lat) order."""
        if self.geometry_kind is GeometryKind.POINT:
            lat, lon = self.latlng
            return Point(lon, lat)

        parts = [
            [[(lon, lat) for lat, lon in ring] for ring in part] for part in self.latlngs
        ]
        try:
            polygons = [Polygon(rings[0], rings[1:]) for rings in parts]
        except (ValueError, GEOSException):
            # Degenerate ring (e.g. closed with < 3 distinct points)
            return MultiPoint([pt for rings in parts for ring in rings for pt in ring])
        if len(polygons) == 1:
            return polygons[0]
        return MultiPolygon(polygons)


# ═══════════════════════════════════════════════════════════════════════════
# 🗂️ DISPLAY GROUP
# ═══════════════════════════════════════════════════════════════════════════


class DisplayGroup:
    """A layer's feature container with show/hide state and events."""

    def __init__(self, key: str, label: str, kind: LayerKind) -> None:
        self.key = key
        self.label = label
        self.kind = kind
        self._features: List[RenderedFeature] = []
        self._owned_ids: set = set()
        self._attached_ids: set = set()
        self._shown = False
        self._handlers: Dict[str, List[GroupHandler]] = {e: [] for e in GROUP_EVENTS}

    def __repr__(self) -> str:
        return (
            f"DisplayGroup(key={self.key!r}, features={len(self._features)}, "
            f"attached={len(self._attached_ids)}, shown={self._shown})"
        )

    # ── Events ────────────────────────────────────────────────────────────

    def on(self, event: str, handler: GroupHandler) -> None:
        """Register a handler for "show" or "hide"."""
        if event not in self._handlers:
            raise ValueError(f"event must be one of {GROUP_EVENTS}, got '{event}'")
        self._handlers[event].append(handler)

    def off(self, event: str, handler: GroupHandler) -> None:
        """Remove a previously registered handler."""
        if handler in self._handlers.get(event, []):
            self._handlers[event].remove(handler)

    def _emit(self, event: str) -> None:
        for handler in list(self._handlers[event]):
            handler(self)

    # ── Display state ─────────────────────────────────────────────────────

    def show(self) -> None:
        """Put the group on the map. No-op if already shown."""
        if self._shown:
            return
        self._shown = True
        logger.debug(f"Showing layer '{self.key}'")
        self._emit("show")

    def hide(self) -> None:
        """Take the group off the map. No-op if already hidden."""
        if not self._shown:
            return
        self._shown = False
        logger.debug(f"Hiding layer '{self.key}'")
        self._emit("hide")

    def is_shown(self) -> bool:
        return self._shown

    # ── Features ──────────────────────────────────────────────────────────

    @property
    def features(self) -> List[RenderedFeature]:
        """Every feature this group owns, attached or not."""
        return list(self._features)

    def add_feature(self, feature: RenderedFeature) -> None:
        """Take ownership of a new feature and attach it."""
        if self.owns(feature):
            return
        self._features.append(feature)
        self._owned_ids.add(id(feature))
        self._attached_ids.add(id(feature))

    def owns(self, feature: RenderedFeature) -> bool:
        return id(feature) in self._owned_ids

    def has_feature(self, feature: RenderedFeature) -> bool:
        """Whether the feature is currently attached."""
        return id(feature) in self._attached_ids

    def attach(self, feature: RenderedFeature) -> None:
        """Re-attach an owned feature."""
        if not self.owns(feature):
            raise ValueError(
                f"Feature {feature.feature_id} is not owned by group '{self.key}'"
            )
        self._attached_ids.add(id(feature))

    def detach(self, feature: RenderedFeature) -> None:
        """Detach an owned feature; it stays owned."""
        self._attached_ids.discard(id(feature))

    def attached_features(self) -> List[RenderedFeature]:
        """Attached features in ownership order."""
        return [f for f in self._features if id(f) in self._attached_ids]

    def bounds(self) -> Optional[Tuple[float, float, float, float]]:
        """
        (min_lon, min_lat, max_lon, max_lat) of attached features.

        Returns:
            Bounds tuple, or None when nothing is attached
        """
        attached = self.attached_features()
        if not attached:
            return None
        series = gpd.GeoSeries([f.geometry for f in attached], crs="EPSG:4326")
        total_bounds = series.total_bounds
        return (
            float(total_bounds[0]),
            float(total_bounds[1]),
            float(total_bounds[2]),
            float(total_bounds[3]),
        )
