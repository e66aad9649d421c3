"""
Fire Station Map Export Module - GeoDataFrame and GeoJSON exports.

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Export the currently visible map state for GIS tools.

Only attached features of shown groups are exported, so the output matches
what the map shows under the current station selection.

Key Entry Points:
- visible_features_to_geodataframe(): One row per visible feature
- export_visible_features_to_geojson(): Same rows written as GeoJSON

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

import logging
from pathlib import Path
from typing import Iterable, Union

import geopandas as gpd

from fire_station_map.state.display_groups import DisplayGroup

logger = logging.getLogger(__name__)

CRS_WGS84 = "EPSG:4326"

EXPORT_COLUMNS = [
    "feature_id",
    "layer_key",
    "station_id",
    "fill_color",
    "stroke_color",
    "value",
]


# ═══════════════════════════════════════════════════════════════════════════
# 🗺️ GEODATAFRAME EXPORT
# ═══════════════════════════════════════════════════════════════════════════


def visible_features_to_geodataframe(
    groups: Iterable[DisplayGroup],
) -> gpd.GeoDataFrame:
    """
    Collect the attached features of every shown group.

    Args:
        groups: Display groups in layer order

    Returns:
        GeoDataFrame in EPSG:4326 with EXPORT_COLUMNS plus geometry.
        Station ids are stored as strings (pseudo-stations are not numeric).
    """
    records = []
    geometries = []
    for group in groups:
        if not group.is_shown():
            continue
        for feature in group.attached_features():
            records.append(
                {
                    "feature_id": feature.feature_id,
                    "layer_key": feature.layer_key,
                    "station_id": (
                        None if feature.station_id is None else str(feature.station_id)
                    ),
                    "fill_color": feature.style.fill_color,
                    "stroke_color": feature.style.stroke_color,
                    "value": feature.value,
                }
            )
            geometries.append(feature.geometry)

    if not records:
        return gpd.GeoDataFrame(
            columns=EXPORT_COLUMNS + ["geometry"], geometry="geometry", crs=CRS_WGS84
        )
    return gpd.GeoDataFrame(records, geometry=geometries, crs=CRS_WGS84)


def export_visible_features_to_geojson(
    groups: Iterable[DisplayGroup],
    output_path: Union[str, Path],
) -> Path:
    """
    Write the visible features as a GeoJSON FeatureCollection.

    Args:
        groups: Display groups in layer order
        output_path: Target .geojson file

    Returns:
        Path of the written file
    """
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    gdf = visible_features_to_geodataframe(groups)
    path.write_text(gdf.to_json(), encoding="utf-8")
    logger.info(f"💾 Exported {len(gdf)} visible feature(s) to {path}")
    return path
