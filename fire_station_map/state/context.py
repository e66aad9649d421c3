#!/usr/bin/env python3
"""
Map Context

The session-scoped objects every layer builder needs, bundled so they are
passed explicitly instead of living in module globals: style resolver,
projector, active station set, visibility registry and legend.
"""

from typing import Optional

from fire_station_map.config_types import AppConfig
from fire_station_map.ingest.projection import CoordinateProjector
from fire_station_map.state.legend_state import LegendStateAggregator
from fire_station_map.state.visibility_registry import (
    ActiveStationSet,
    VisibilityRegistry,
)
from fire_station_map.styling.station_styles import StationStyleResolver


class MapContext:
    """Constructor-injected session state for one map."""

    def __init__(self, config: Optional[AppConfig] = None) -> None:
        self.config = config or AppConfig()
        self.style_resolver = StationStyleResolver(self.config.stations)
        self.projector = CoordinateProjector(self.config.projection)
        self.active_stations = ActiveStationSet(self.config.stations.roster)
        self.registry = VisibilityRegistry(
            self.active_stations,
            keep_unattributed_visible=self.config.visibility.keep_unattributed_visible,
        )
        self.legend = LegendStateAggregator(
            self.config.legend,
            station_entries=self.style_resolver.legend_entries(),
            heat_config=self.config.heat_ramp,
        )
