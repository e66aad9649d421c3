#!/usr/bin/env python3
"""
Coordinate Projector

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Convert raw source points into (latitude, longitude) pairs in
WGS84 for the map renderer.

Rules:
- Web-Mercator aliases (3857, 102100, 102113): inverse spherical transform,
  R = 6378137 m
- Anything else: already geographic, (x, y) read as (lon, lat)
- Optional: when ProjectionConfig.reproject_other_crs is set, references other
  than 4326 go through a cached pyproj Transformer instead

Malformed points are dropped, never raised. A ring with fewer than 3 valid
points after projection is discarded; a polygon with no surviving rings
projects to an empty list.

Navigation Guide:
- mercator_to_latlng: The inverse Web-Mercator formula
- CoordinateProjector: Point/ring/polygon projection for one configuration
"""

import logging
import math
from functools import lru_cache
from typing import Any, List, Optional, Sequence, Tuple

from pyproj import Transformer
from pyproj.exceptions import CRSError

from fire_station_map.config_types import ProjectionConfig
from fire_station_map.models.data_models import LatLng

GEOGRAPHIC_WKID = 4326
MIN_RING_POINTS = 3

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# 🧮 TRANSFORMS
# ═══════════════════════════════════════════════════════════════════════════


def mercator_to_latlng(
    x: float, y: float, radius: float = 6378137.0
) -> Optional[LatLng]:
    """
    Inverse spherical Web-Mercator transform.

    Args:
        x: Easting in meters
        y: Northing in meters
        radius: Sphere radius in meters

    Returns:
        (lat, lon) in decimal degrees, or None when y is out of range
    """
    lon = (x / radius) * (180.0 / math.pi)
    try:
        growth = math.exp(y / radius)
    except OverflowError:
        return None
    lat = (2.0 * math.atan(growth) - math.pi / 2.0) * (180.0 / math.pi)
    return (lat, lon)


@lru_cache(maxsize=16)
def _transformer_to_wgs84(wkid: int) -> Optional[Transformer]:
    try:
        return Transformer.from_crs(f"EPSG:{wkid}", "EPSG:4326", always_xy=True)
    except CRSError as e:
        logger.warning(f"⚠️ Unknown spatial reference {wkid}, reading as lon/lat: {e}")
        return None


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def extract_xy(point: Any) -> Optional[Tuple[float, float]]:
    """
    Read (x, y) from an [x, y, ...] sequence or an {x, y} mapping.

    Returns:
        (x, y) floats, or None for anything malformed or non-finite
    """
    if isinstance(point, (list, tuple)) and len(point) >= 2:
        x, y = point[0], point[1]
    elif isinstance(point, dict) and "x" in point and "y" in point:
        x, y = point["x"], point["y"]
    else:
        return None
    fx, fy = _as_number(x), _as_number(y)
    if fx is None or fy is None:
        return None
    return (fx, fy)


# ═══════════════════════════════════════════════════════════════════════════
# 🌐 PROJECTOR
# ═══════════════════════════════════════════════════════════════════════════


class CoordinateProjector:
    """Projects raw points, rings and polygons into (lat, lon)."""

    def __init__(self, config: Optional[ProjectionConfig] = None) -> None:
        self.config = config or ProjectionConfig()
        self._web_mercator = frozenset(self.config.web_mercator_wkids)

    def is_web_mercator(self, wkid: Optional[int]) -> bool:
        """Whether wkid is one of the Web-Mercator aliases."""
        return wkid in self._web_mercator

    def project_point(self, point: Any, wkid: Optional[int]) -> Optional[LatLng]:
        """
        Project one raw point.

        Args:
            point: [x, y] / [lon, lat] sequence or {x, y} mapping
            wkid: Spatial reference id; None means geographic

        Returns:
            (lat, lon), or None if the point is malformed
        """
        xy = extract_xy(point)
        if xy is None:
            return None
        x, y = xy

        if self.is_web_mercator(wkid):
            return mercator_to_latlng(x, y, self.config.earth_radius_m)

        if (
            self.config.reproject_other_crs
            and wkid is not None
            and wkid != GEOGRAPHIC_WKID
        ):
            transformer = _transformer_to_wgs84(wkid)
            if transformer is not None:
                lon, lat = transformer.transform(x, y)
                if math.isfinite(lat) and math.isfinite(lon):
                    return (lat, lon)
                return None

        return (y, x)

    def project_ring(self, ring: Sequence[Any], wkid: Optional[int]) -> List[LatLng]:
        """Project a ring point by point, dropping malformed points."""
        projected = []
        for point in ring:
            latlng = self.project_point(point, wkid)
            if latlng is not None:
                projected.append(latlng)
        return projected

    def project_polygon(
        self,
        parts: Sequence[Sequence[Sequence[Any]]],
        wkid: Optional[int],
    ) -> List[List[List[LatLng]]]:
        """
        Project polygon parts, discarding rings with fewer than 3 valid points.

        Args:
            parts: Polygons -> rings -> raw points
            wkid: Spatial reference id

        Returns:
            Surviving parts (each with at least one ring); empty if nothing survives
        """
        projected_parts = []
        dropped = 0
        for part in parts:
            rings = []
            for ring in part:
                projected = self.project_ring(ring, wkid)
                if len(projected) >= MIN_RING_POINTS:
                    rings.append(projected)
                else:
                    dropped += 1
            if rings:
                projected_parts.append(rings)
        if dropped:
            logger.debug(f"Dropped {dropped} ring(s) with < {MIN_RING_POINTS} points")
        return projected_parts
