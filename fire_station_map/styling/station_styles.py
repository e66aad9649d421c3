#!/usr/bin/env python3
"""
Station Style Resolver

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Map a resolved StationIdentity to a deterministic StyleSpec.

Rules, in priority order:
1. Excluded station -> None (never rendered, never registered)
2. None or 0 -> neutral "unknown owner" style (gray outline, no fill)
3. Anything else -> palette color by roster position (cyclic), pseudo-station
   color for known tokens, or a fixed default for unrecognized ids

Polygons and point markers share the same palette lookup, so a station's
color is the same on every layer.

Navigation Guide:
- StationStyleResolver.polygon_style: Service area / spread polygons
- StationStyleResolver.point_style: Fire station markers
- StationStyleResolver.legend_entries: Roster swatches for the legend
"""

from typing import Dict, List, Optional, Tuple

from fire_station_map.config_types import StationPaletteConfig
from fire_station_map.models.data_models import StationIdentity, StyleSpec


class StationStyleResolver:
    """Deterministic station -> style mapping for one palette configuration."""

    def __init__(self, config: Optional[StationPaletteConfig] = None) -> None:
        self.config = config or StationPaletteConfig()
        palette = self.config.palette
        self._colors: Dict[str, str] = {
            str(station_id): palette[i % len(palette)]
            for i, station_id in enumerate(self.config.roster)
        }
        self._colors.update(self.config.pseudo_station_colors)
        self._pseudo_tokens = frozenset(self.config.pseudo_station_colors)

    @property
    def pseudo_tokens(self) -> frozenset:
        """Known pseudo-station tokens (upper case)."""
        return self._pseudo_tokens

    @property
    def roster(self) -> Tuple[int, ...]:
        return self.config.roster

    def is_excluded(self, station_id: StationIdentity) -> bool:
        """Whether features of this station are suppressed entirely."""
        if station_id is None:
            return False
        return str(station_id) == str(self.config.excluded_station_id)

    @staticmethod
    def is_unattributed(station_id: StationIdentity) -> bool:
        """None and the zero sentinel mark features with no known owner."""
        return station_id is None or str(station_id) == "0"

    def color_for(self, station_id: StationIdentity) -> Optional[str]:
        """Palette or pseudo-station color; None when the id is not recognized."""
        if station_id is None:
            return None
        key = station_id.upper() if isinstance(station_id, str) else str(station_id)
        return self._colors.get(key)

    def _unknown_owner_style(self, radius: Optional[float] = None) -> StyleSpec:
        cfg = self.config
        return StyleSpec(
            stroke_color=cfg.unknown_stroke_color,
            stroke_weight=cfg.unknown_stroke_weight,
            fill_color=cfg.unknown_fill_color,
            fill_opacity=cfg.unknown_fill_opacity,
            radius=radius,
        )

    def polygon_style(self, station_id: StationIdentity) -> Optional[StyleSpec]:
        """
        Translucent polygon style for a station.

        Args:
            station_id: Resolved station identity

        Returns:
            StyleSpec, or None when the station is excluded
        """
        if self.is_excluded(station_id):
            return None
        if self.is_unattributed(station_id):
            return self._unknown_owner_style()
        cfg = self.config
        return StyleSpec(
            stroke_color=cfg.polygon_stroke_color,
            stroke_weight=cfg.polygon_stroke_weight,
            fill_color=self.color_for(station_id) or cfg.default_polygon_color,
            fill_opacity=cfg.polygon_fill_opacity,
        )

    def point_style(self, station_id: StationIdentity) -> Optional[StyleSpec]:
        """
        Larger, near-opaque marker style for a station point.

        Args:
            station_id: Resolved station identity

        Returns:
            StyleSpec with radius set, or None when the station is excluded
        """
        if self.is_excluded(station_id):
            return None
        cfg = self.config
        if self.is_unattributed(station_id):
            return self._unknown_owner_style(radius=cfg.point_radius)
        return StyleSpec(
            stroke_color=cfg.point_stroke_color,
            stroke_weight=cfg.point_stroke_weight,
            fill_color=self.color_for(station_id) or cfg.default_point_color,
            fill_opacity=cfg.point_fill_opacity,
            radius=cfg.point_radius,
        )

    def legend_entries(self) -> List[Tuple[int, str]]:
        """(station_id, color) for every roster station, in roster order."""
        return [(sid, self._colors[str(sid)]) for sid in self.config.roster]
