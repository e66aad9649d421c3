#!/usr/bin/env python3
"""
Fire Station Map - Main Entry Point

Loads every configured service-area, incident and station source into
station-filterable display groups, then writes an HTML snapshot of the
initial map state.

Usage:
    python -m fire_station_map.main
"""

import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

# Fix Windows console encoding for emoji support
if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")
    sys.stderr.reconfigure(encoding="utf-8", errors="replace")

import requests

from fire_station_map.config import CONFIG
from fire_station_map.config_types import AppConfig
from fire_station_map.ingest.data_loader import LoadResult, load_sources
from fire_station_map.layer_builders import BuiltLayer
from fire_station_map.models.data_models import StationIdentity
from fire_station_map.state.context import MapContext
from fire_station_map.state.display_groups import DisplayGroup

LOGGER_NAME = "fire_station_map"

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# 📝 LOGGING
# ═══════════════════════════════════════════════════════════════════════════


def setup_logging(log_dir: Optional[str] = None) -> Tuple[logging.Logger, Path]:
    """Configure logging with file and console handlers.

    Handlers go on the package logger, so every module logger
    (fire_station_map.*) writes to both.

    Returns:
        Tuple of (logger, log_path)
    """
    log_root = Path(log_dir or AppConfig.from_dict(CONFIG).map_export.log_dir)
    log_root.mkdir(parents=True, exist_ok=True)

    # Compact timestamp: MMDD_HHMM
    timestamp = datetime.now().strftime("%m%d_%H%M")
    log_path = log_root / f"station_map_{timestamp}.log"

    package_logger = logging.getLogger(LOGGER_NAME)
    package_logger.setLevel(logging.INFO)
    package_logger.handlers.clear()

    # File handler
    fh = logging.FileHandler(log_path, encoding="utf-8")
    fh.setLevel(logging.INFO)
    fh.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
        )
    )

    # Console handler
    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(logging.INFO)
    ch.setFormatter(logging.Formatter("%(message)s"))

    package_logger.addHandler(fh)
    package_logger.addHandler(ch)

    return package_logger, log_path


# ═══════════════════════════════════════════════════════════════════════════
# 🗺️ STATION MAP
# ═══════════════════════════════════════════════════════════════════════════


class StationMap:
    """
    One map session: context, loaded layers and the user-facing toggles.

    Example:
        station_map = StationMap(AppConfig.from_dict(CONFIG))
        station_map.load()
        station_map.deselect_station(101)
        station_map.show_layer("nfpa")
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        fetch: Optional[Callable[[str], Any]] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config or AppConfig.from_dict(CONFIG)
        self.context = MapContext(self.config)
        self._fetch = fetch
        self._session = session
        self.layers: Dict[str, BuiltLayer] = {}
        self.failures: Dict[str, Exception] = {}
        self.fit_bounds: Optional[Tuple[float, float, float, float]] = None

    # ── Loading ───────────────────────────────────────────────────────────

    def load(self) -> LoadResult:
        """
        Load every configured source, then apply the initial view.

        After the join of all sources: the legend exists in its configured
        collapsed state, initially-shown layers are shown, and fit_bounds is
        taken from the fit-bounds layer.
        """
        result = load_sources(
            self.config.layers, self.context, fetch=self._fetch, session=self._session
        )
        # Panel order follows configuration, not completion order
        self.layers = {
            source.key: result.layers[source.key]
            for source in self.config.layers
            if source.key in result.layers
        }
        self.failures = dict(result.failures)

        legend = self.context.legend
        legend.ensure()
        legend.set_collapsed(self.config.legend.start_collapsed)

        for source in self.config.layers:
            if source.initially_shown and source.key in self.layers:
                self.layers[source.key].group.show()

        self.fit_bounds = self._initial_bounds()
        return result

    def _initial_bounds(self) -> Optional[Tuple[float, float, float, float]]:
        for source in self.config.layers:
            if source.fit_bounds and source.key in self.layers:
                bounds = self.layers[source.key].group.bounds()
                if bounds is not None:
                    return bounds
        return None

    # ── Lookup ────────────────────────────────────────────────────────────

    @property
    def groups(self) -> List[DisplayGroup]:
        """Display groups in layer-panel order."""
        return [built.group for built in self.layers.values()]

    def group(self, key: str) -> DisplayGroup:
        """
        Display group by layer key.

        Raises:
            KeyError: If no layer with that key was loaded
        """
        if key not in self.layers:
            raise KeyError(f"No loaded layer '{key}'")
        return self.layers[key].group

    # ── Station filter ────────────────────────────────────────────────────

    def select_station(self, station_id: StationIdentity) -> None:
        self.context.active_stations.select(station_id)

    def deselect_station(self, station_id: StationIdentity) -> None:
        self.context.active_stations.deselect(station_id)

    def select_all(self) -> None:
        self.context.active_stations.select_all()

    def select_none(self) -> None:
        self.context.active_stations.select_none()

    # ── Layer toggles ─────────────────────────────────────────────────────

    def show_layer(self, key: str) -> None:
        self.group(key).show()

    def hide_layer(self, key: str) -> None:
        self.group(key).hide()


# ═══════════════════════════════════════════════════════════════════════════
# 🚀 ENTRY POINT
# ═══════════════════════════════════════════════════════════════════════════


def run_station_map(
    config: Optional[AppConfig] = None,
    fetch: Optional[Callable[[str], Any]] = None,
) -> StationMap:
    """Load all sources, write the HTML snapshot and the visible-feature GeoJSON."""
    from fire_station_map.exporters import export_visible_features_to_geojson
    from fire_station_map.visualization.html_builder import write_html

    app_config = config or AppConfig.from_dict(CONFIG)
    run_logger, log_path = setup_logging(app_config.map_export.log_dir)
    run_logger.info("=" * 60)
    run_logger.info("🚒 Fire Station Map")
    run_logger.info("=" * 60)
    run_logger.info(f"   Log file: {log_path}")

    start = time.perf_counter()
    station_map = StationMap(app_config, fetch=fetch)
    station_map.load()

    for key, error in station_map.failures.items():
        run_logger.warning(f"   ⚠️ Layer '{key}' omitted: {error}")

    write_html(station_map)
    if app_config.map_export.output_geojson:
        export_visible_features_to_geojson(
            station_map.groups, app_config.map_export.output_geojson
        )
    run_logger.info(f"✅ Done in {time.perf_counter() - start:.1f}s")
    return station_map


if __name__ == "__main__":
    run_station_map()
