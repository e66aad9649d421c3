"""
Session state: display groups, the station filter and the legend.
"""

from fire_station_map.state.context import MapContext
from fire_station_map.state.display_groups import DisplayGroup, RenderedFeature
from fire_station_map.state.legend_state import LegendState, LegendStateAggregator
from fire_station_map.state.visibility_registry import (
    ActiveStationSet,
    VisibilityRegistry,
)

__all__ = [
    "ActiveStationSet",
    "DisplayGroup",
    "LegendState",
    "LegendStateAggregator",
    "MapContext",
    "RenderedFeature",
    "VisibilityRegistry",
]
