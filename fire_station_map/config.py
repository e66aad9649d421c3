#!/usr/bin/env python3
"""
Fire Station Map - Configuration

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Centralized configuration for the fire station map.
Single source of truth for the station roster, palette, styles, heat ramp,
projection constants, data sources, legend sections and export settings.

Configuration Sections:
1. stations: Roster, palette, exclusion and pseudo-station colors
2. heat_ramp: Two-stop incident heat ramp
3. projection: Web-Mercator aliases and optional pyproj reprojection
4. fetch: Fetch collaborator settings
5. visibility: Station filter behaviour
6. legend: Declarative legend section order
7. layers: Data sources (bottom - rarely changed)
8. map_export: HTML snapshot settings (bottom)

Edit values here; typed access goes through config_types.AppConfig.

Navigation Guide:
- Use VS Code outline (Ctrl+Shift+O) to jump between sections
"""

from typing import Any, Dict

CONFIG: Dict[str, Any] = {
    # ═══════════════════════════════════════════════════════════════════════
    # 🚒 1. STATIONS
    # ═══════════════════════════════════════════════════════════════════════
    "stations": {
        # Fixed, sorted roster. 113 is intentionally absent (excluded below).
        "roster": [
            101, 102, 103, 104, 105, 106, 107, 108, 109, 110, 111, 112,
            114, 115, 116, 117, 118, 119, 120, 121, 122,
        ],
        # Palette slots are assigned by roster position and repeat cyclically.
        "palette": [
            "#8dd3c7", "#ffffb3", "#bebada", "#fb8072", "#80b1d3",
            "#fdb462", "#b3de69", "#fccde5", "#d9d9d9", "#bc80bd",
            "#ccebc5", "#ffed6f", "#1b9e77", "#d95f02", "#7570b3",
            "#e7298a", "#66a61e", "#e6ab02", "#a6761d", "#666666",
            "#7fc97f",
        ],
        # Features owned by this station are never rendered.
        "excluded_station_id": 113,
        # Pseudo-stations appear in the incident spread layer only.
        "pseudo_stations": {"1CH": "#17becf"},
        "default_polygon_color": "#999",
        "default_point_color": "#e41a1c",
        "polygon_style": {
            "stroke_color": "#333",
            "stroke_weight": 0.6,
            "fill_opacity": 0.55,
        },
        "unknown_owner_style": {
            "stroke_color": "#999",
            "stroke_weight": 0.8,
            "fill_color": "#999",
            "fill_opacity": 0.0,
        },
        "point_style": {
            "radius": 6,
            "stroke_color": "#222",
            "stroke_weight": 1.0,
            "fill_opacity": 0.9,
        },
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 🔥 2. HEAT RAMP
    # ═══════════════════════════════════════════════════════════════════════
    "heat_ramp": {
        "light_color": "#f7fbff",
        "dark_color": "#08306b",
        "value_fields": ["Incidents"],
        "stroke_color": "#333",
        "stroke_weight": 0.4,
        "fill_opacity": 0.55,
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 🌐 3. PROJECTION
    # ═══════════════════════════════════════════════════════════════════════
    "projection": {
        "web_mercator_wkids": [3857, 102100, 102113],
        "earth_radius_m": 6378137.0,
        # When True, references other than 4326 and Web Mercator are
        # reprojected with pyproj instead of being read as lon/lat.
        "reproject_other_crs": False,
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 📡 4. FETCH
    # ═══════════════════════════════════════════════════════════════════════
    "fetch": {
        "base_location": "./data",
        "timeout_s": 30.0,
        "cache_bust": True,
        "error_body_chars": 200,
        "max_workers": 4,
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 👁️ 5. VISIBILITY
    # ═══════════════════════════════════════════════════════════════════════
    "visibility": {
        # Features with no resolvable owner are detached by the station
        # filter unless this is set.
        "keep_unattributed_visible": False,
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 🗂️ 6. LEGEND
    # ═══════════════════════════════════════════════════════════════════════
    "legend": {
        "start_collapsed": True,
        "title": "Legend",
        # Output order is this order, whatever order events arrive in.
        "sections": [
            {"type": "stations", "key": "stations", "label": "Fire Stations"},
            {"type": "keyed", "key": "spread", "label": "Incidents - Spread"},
            {"type": "heat", "key": "heat", "label": "Incidents - Heat Map"},
            {"type": "keyed", "key": "existing", "label": "Existing Service Areas"},
            {"type": "keyed", "key": "nfpa", "label": "Optimized NFPA Service Areas"},
            {"type": "keyed", "key": "aug", "label": "Optimized Augmented Service Areas"},
            {"type": "keyed", "key": "ful", "label": "Optimized Fulfilled Service Areas"},
            {"type": "keyed", "key": "bmed", "label": "Backups - Medium"},
            {"type": "keyed", "key": "bhigh", "label": "Backups - High"},
        ],
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 📂 7. LAYERS
    # ═══════════════════════════════════════════════════════════════════════
    # Listed in layer-panel order.
    "layers": [
        {
            "key": "stations",
            "label": "Fire Stations",
            "source": "Fire_Stations.geojson",
            "kind": "stations",
            "initially_shown": True,
        },
        {
            "key": "boundary",
            "label": "City of Mississauga Boundary",
            "source": "City_Of_Mississauga_Boundary.geojson",
            "kind": "boundary",
            "initially_shown": True,
        },
        {
            "key": "spread",
            "label": "Incidents - Spread",
            "source": "Incidents_Spread.geojson",
            "kind": "spread",
        },
        {
            "key": "heat",
            "label": "Incidents - Heat Map",
            "source": "Incidents_Heat_Map.geojson",
            "kind": "heat",
        },
        {
            "key": "existing",
            "label": "Existing Service Areas",
            "source": "Existing_Service_Areas.geojson",
            "kind": "service_area",
            "station_keys": ["Low_Hazard1"],
            "initially_shown": True,
            "fit_bounds": True,
        },
        {
            "key": "nfpa",
            "label": "Optimized NFPA Service Areas",
            "source": "Optimized_NFPA_Service_Areas.geojson",
            "kind": "service_area",
            "station_keys": ["Areas", "Low_Hazard1"],
        },
        {
            "key": "aug",
            "label": "Optimized Augmented Service Areas",
            "source": "Optimized_Augmented_Service_Areas.geojson",
            "kind": "service_area",
            "station_keys": ["Low_Hazard1"],
        },
        {
            "key": "ful",
            "label": "Optimized Fulfilled Service Areas",
            "source": "Optimized_Fulfilled_Service_Areas.geojson",
            "kind": "service_area",
            "station_keys": ["Low_Hazard1"],
        },
        {
            "key": "bmed",
            "label": "Backups - Medium",
            "source": "Service_Areas_Backups_Medium.geojson",
            "kind": "service_area",
            "station_keys": ["Low_Hazard2"],
        },
        {
            "key": "bhigh",
            "label": "Backups - High",
            "source": "Service_Areas_Backups_High.geojson",
            "kind": "service_area",
            "station_keys": ["High_Hazard2"],
        },
    ],
    # ═══════════════════════════════════════════════════════════════════════
    # 🗺️ 8. MAP EXPORT
    # ═══════════════════════════════════════════════════════════════════════
    "map_export": {
        "title": "Fire Station Service Areas",
        # Initial map center (lat, lon in WGS84)
        "center": [43.59, -79.64],
        "zoom": 11,
        "map_style": "open-street-map",
        "output_html": "Output/fire_station_map.html",
        "log_dir": "Output/logs",
        "figure_height": 900,
        # Visible features as GeoJSON for GIS tools (None to skip)
        "output_geojson": "Output/visible_features.geojson",
    },
}
