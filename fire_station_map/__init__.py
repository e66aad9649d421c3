"""
Fire Station Map

Fire-station service-area and incident geodata engine: normalizes GeoJSON and
ESRI exports, projects them to WGS84, styles features by owning station, and
keeps layer visibility, the station filter and the legend consistent.
"""

from fire_station_map.config import CONFIG
from fire_station_map.config_types import AppConfig
from fire_station_map.main import StationMap, run_station_map

__all__ = ["AppConfig", "CONFIG", "StationMap", "run_station_map"]
