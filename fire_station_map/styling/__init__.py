"""
Styling: attribute lookup, station styles and the incident heat ramp.
"""

from fire_station_map.styling.attributes import (
    get_attribute,
    parse_station_point_identity,
    resolve_station_identity,
)
from fire_station_map.styling.heat_ramp import HeatRamp, compute_heat_ramp
from fire_station_map.styling.station_styles import StationStyleResolver

__all__ = [
    "HeatRamp",
    "StationStyleResolver",
    "compute_heat_ramp",
    "get_attribute",
    "parse_station_point_identity",
    "resolve_station_identity",
]
