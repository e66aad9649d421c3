#!/usr/bin/env python3
"""
Layer Builders

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Turn one NormalizedFeatureSet into one DisplayGroup of styled,
projected RenderedFeatures, and wire that group's show/hide events into the
legend and the visibility registry.

Key Interactions:
- Input: NormalizedFeatureSet from ingest.format_normalizer
- Uses: CoordinateProjector, attribute resolver, StationStyleResolver,
  compute_heat_ramp (all reached through MapContext)
- Output: BuiltLayer (group + heat bounds + counts)

Builder per LayerKind:
- SERVICE_AREA: station palette polygons, registered for station filtering;
  show -> legend.add_key + registry.apply_filter, hide -> legend.remove_key
- SPREAD: station palette polygons incl. pseudo-stations;
  show/hide -> legend.set_section_visible("spread", ...)
- HEAT: incident-count ramp polygons; show/hide -> legend.set_heat_legend
- STATIONS: circle markers with a station number label
- BOUNDARY: black outline, no fill

Excluded-station features are never added to a group. Features with no
surviving geometry are skipped.

Navigation Guide:
- build_layer: Dispatch on LayerKind
- _build_* functions: One per kind
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional

from fire_station_map.config_types import LayerSourceConfig
from fire_station_map.models.data_models import (
    GeometryKind,
    LatLng,
    LayerKind,
    NormalizedFeatureSet,
    RawFeature,
    StationIdentity,
    StyleSpec,
)
from fire_station_map.state.context import MapContext
from fire_station_map.state.display_groups import DisplayGroup, RenderedFeature
from fire_station_map.styling.attributes import (
    SERVICE_AREA_STATION_FIELDS,
    SPREAD_STATION_FIELDS,
    get_attribute,
    parse_station_point_identity,
    resolve_numeric,
    resolve_station_identity,
)
from fire_station_map.styling.heat_ramp import HeatRamp, compute_heat_ramp

logger = logging.getLogger(__name__)

MISSING_VALUE = "—"

AREA_FIELDS = ("Shape__Area", "Shape_Area")
PERIMETER_FIELDS = ("Shape__Length", "Shape_Length")
STATION_NAME_FIELDS = ("LANDMARKNA", "NAME", "STATION")
STATION_TYPE_FIELDS = ("LANDMARKTY",)

# Point location fallbacks when a station feature carries no point geometry
MERCATOR_CENTROID_FIELDS = (("CENT_X_385",), ("CENT_Y_385",))
GEOGRAPHIC_CENTROID_FIELDS = (("CENT_X",), ("CENT_Y",))
WEB_MERCATOR_WKID = 3857

BOUNDARY_STYLE = StyleSpec(
    stroke_color="#000000",
    stroke_weight=2.0,
    fill_color="#000000",
    fill_opacity=0.0,
)


@dataclass
class BuiltLayer:
    """Result of building one source.

    Attributes:
        config: Source configuration the layer was built from
        group: Display group holding the rendered features
        heat: Heat ramp result (heat layers only)
        suppressed: Features dropped because their station is excluded
        skipped: Features dropped because no geometry survived
    """

    config: LayerSourceConfig
    group: DisplayGroup
    heat: Optional[HeatRamp] = None
    suppressed: int = 0
    skipped: int = 0

    @property
    def key(self) -> str:
        return self.config.key

    @property
    def feature_count(self) -> int:
        return len(self.group.features)


# ═══════════════════════════════════════════════════════════════════════════
# 🧩 SHARED HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _display(value: Any) -> Any:
    """Popup value, with missing or non-finite numbers shown as an em dash."""
    if value is None:
        return MISSING_VALUE
    if isinstance(value, float) and not math.isfinite(value):
        return MISSING_VALUE
    if isinstance(value, str) and not value.strip():
        return MISSING_VALUE
    return value


def _polygon_popup(
    label: str, station_value: Any, attributes: Mapping[str, Any]
) -> Dict[str, Any]:
    popup = {"Layer": label, "Station": _display(station_value)}
    area = get_attribute(attributes, AREA_FIELDS)
    if area is not None:
        popup["Area"] = area
    perimeter = get_attribute(attributes, PERIMETER_FIELDS)
    if perimeter is not None:
        popup["Perimeter"] = perimeter
    return popup


def _project_polygon_feature(
    raw: RawFeature, wkid: Optional[int], context: MapContext
) -> Optional[List[List[List[LatLng]]]]:
    if raw.geometry is None or raw.geometry.kind is not GeometryKind.POLYGON:
        return None
    parts = context.projector.project_polygon(raw.geometry.parts, wkid)
    return parts or None


def _add_polygon_features(
    group: DisplayGroup,
    feature_set: NormalizedFeatureSet,
    config: LayerSourceConfig,
    context: MapContext,
    resolve_station: Callable[[Mapping[str, Any]], StationIdentity],
    station_fields: tuple,
) -> BuiltLayer:
    """Shared polygon path for service areas and spread."""
    resolver = context.style_resolver
    built = BuiltLayer(config=config, group=group)

    for index, raw in enumerate(feature_set.features):
        station_id = resolve_station(raw.attributes)
        style = resolver.polygon_style(station_id)
        if style is None:
            built.suppressed += 1
            continue

        latlngs = _project_polygon_feature(raw, feature_set.spatial_reference_id, context)
        if latlngs is None:
            built.skipped += 1
            continue

        raw_station = get_attribute(raw.attributes, station_fields)
        feature = RenderedFeature(
            feature_id=f"{config.key}-{index}",
            layer_key=config.key,
            geometry_kind=GeometryKind.POLYGON,
            style=style,
            station_id=station_id,
            latlngs=latlngs,
            popup=_polygon_popup(config.label, raw_station, raw.attributes),
        )
        group.add_feature(feature)
        if config.station_filtered:
            context.registry.register(feature, group)

    return built


# ═══════════════════════════════════════════════════════════════════════════
# 🗺️ BUILDERS
# ═══════════════════════════════════════════════════════════════════════════


def _build_service_area(
    feature_set: NormalizedFeatureSet, config: LayerSourceConfig, context: MapContext
) -> BuiltLayer:
    group = DisplayGroup(config.key, config.label, config.kind)
    pseudo_tokens = context.style_resolver.pseudo_tokens
    station_fields = tuple(config.station_keys) + SERVICE_AREA_STATION_FIELDS

    built = _add_polygon_features(
        group,
        feature_set,
        config,
        context,
        lambda attrs: resolve_station_identity(
            attrs, config.station_keys, pseudo_tokens, SERVICE_AREA_STATION_FIELDS
        ),
        station_fields,
    )

    legend = context.legend
    registry = context.registry

    def on_show(_group: DisplayGroup) -> None:
        legend.add_key(config.key)
        registry.apply_filter()

    def on_hide(_group: DisplayGroup) -> None:
        legend.remove_key(config.key)

    group.on("show", on_show)
    group.on("hide", on_hide)
    return built


def _build_spread(
    feature_set: NormalizedFeatureSet, config: LayerSourceConfig, context: MapContext
) -> BuiltLayer:
    group = DisplayGroup(config.key, config.label, config.kind)
    pseudo_tokens = context.style_resolver.pseudo_tokens
    station_fields = tuple(config.station_keys) + SPREAD_STATION_FIELDS

    built = _add_polygon_features(
        group,
        feature_set,
        config,
        context,
        lambda attrs: resolve_station_identity(
            attrs, config.station_keys, pseudo_tokens, SPREAD_STATION_FIELDS
        ),
        station_fields,
    )

    legend = context.legend
    group.on("show", lambda _g: legend.set_section_visible(config.key, True))
    group.on("hide", lambda _g: legend.set_section_visible(config.key, False))
    return built


def _build_heat(
    feature_set: NormalizedFeatureSet, config: LayerSourceConfig, context: MapContext
) -> BuiltLayer:
    heat_config = context.config.heat_ramp
    group = DisplayGroup(config.key, config.label, config.kind)

    values = [
        resolve_numeric(raw.attributes, heat_config.value_fields)
        for raw in feature_set.features
    ]
    ramp = compute_heat_ramp(values, heat_config.light_color, heat_config.dark_color)
    built = BuiltLayer(config=config, group=group, heat=ramp)

    for index, raw in enumerate(feature_set.features):
        latlngs = _project_polygon_feature(raw, feature_set.spatial_reference_id, context)
        if latlngs is None:
            built.skipped += 1
            continue
        value = ramp.values[index]
        style = StyleSpec(
            stroke_color=heat_config.stroke_color,
            stroke_weight=heat_config.stroke_weight,
            fill_color=ramp.colors[index],
            fill_opacity=heat_config.fill_opacity,
        )
        group.add_feature(
            RenderedFeature(
                feature_id=f"{config.key}-{index}",
                layer_key=config.key,
                geometry_kind=GeometryKind.POLYGON,
                style=style,
                latlngs=latlngs,
                popup={"Layer": config.label, "Incidents": _display(value)},
                value=value,
            )
        )

    legend = context.legend
    group.on(
        "show",
        lambda _g: legend.set_heat_legend(True, ramp.min_value, ramp.max_value),
    )
    group.on("hide", lambda _g: legend.set_heat_legend(False, None, None))
    return built


def _station_point_location(
    raw: RawFeature, wkid: Optional[int], context: MapContext
) -> Optional[LatLng]:
    """Point geometry first, then the centroid attribute pairs."""
    projector = context.projector
    if raw.geometry is not None and raw.geometry.kind is GeometryKind.POINT:
        latlng = projector.project_point(raw.geometry.point, wkid)
        if latlng is not None:
            return latlng

    for (x_fields, y_fields), field_wkid in (
        (MERCATOR_CENTROID_FIELDS, WEB_MERCATOR_WKID),
        (GEOGRAPHIC_CENTROID_FIELDS, None),
    ):
        x = get_attribute(raw.attributes, x_fields)
        y = get_attribute(raw.attributes, y_fields)
        if x is None or y is None:
            continue
        latlng = projector.project_point([x, y], field_wkid)
        if latlng is not None:
            return latlng
    return None


def _build_stations(
    feature_set: NormalizedFeatureSet, config: LayerSourceConfig, context: MapContext
) -> BuiltLayer:
    resolver = context.style_resolver
    group = DisplayGroup(config.key, config.label, config.kind)
    built = BuiltLayer(config=config, group=group)

    for index, raw in enumerate(feature_set.features):
        station_id = parse_station_point_identity(raw.attributes)
        style = resolver.point_style(station_id)
        if style is None:
            built.suppressed += 1
            continue

        latlng = _station_point_location(raw, feature_set.spatial_reference_id, context)
        if latlng is None:
            built.skipped += 1
            continue

        popup = {
            "Layer": config.label,
            "Station": _display(station_id),
            "Name": _display(get_attribute(raw.attributes, STATION_NAME_FIELDS)),
        }
        station_type = get_attribute(raw.attributes, STATION_TYPE_FIELDS)
        if station_type is not None:
            popup["Type"] = station_type

        feature = RenderedFeature(
            feature_id=f"{config.key}-{index}",
            layer_key=config.key,
            geometry_kind=GeometryKind.POINT,
            style=style,
            station_id=station_id,
            latlng=latlng,
            popup=popup,
            label=None if station_id is None else str(station_id),
        )
        group.add_feature(feature)
        if config.station_filtered:
            context.registry.register(feature, group)

    return built


def _build_boundary(
    feature_set: NormalizedFeatureSet, config: LayerSourceConfig, context: MapContext
) -> BuiltLayer:
    group = DisplayGroup(config.key, config.label, config.kind)
    built = BuiltLayer(config=config, group=group)

    for index, raw in enumerate(feature_set.features):
        latlngs = _project_polygon_feature(raw, feature_set.spatial_reference_id, context)
        if latlngs is None:
            built.skipped += 1
            continue
        group.add_feature(
            RenderedFeature(
                feature_id=f"{config.key}-{index}",
                layer_key=config.key,
                geometry_kind=GeometryKind.POLYGON,
                style=BOUNDARY_STYLE,
                latlngs=latlngs,
                popup={"Layer": config.label},
            )
        )
    return built


BUILDERS: Dict[LayerKind, Callable[..., BuiltLayer]] = {
    LayerKind.SERVICE_AREA: _build_service_area,
    LayerKind.SPREAD: _build_spread,
    LayerKind.HEAT: _build_heat,
    LayerKind.STATIONS: _build_stations,
    LayerKind.BOUNDARY: _build_boundary,
}


def build_layer(
    feature_set: NormalizedFeatureSet,
    config: LayerSourceConfig,
    context: MapContext,
) -> BuiltLayer:
    """
    Build the display group for one normalized source.

    The group starts hidden with every surviving feature attached; showing it
    reconciles attachment against the current station selection.

    Args:
        feature_set: Normalized source document
        config: Source configuration (selects the builder)
        context: Session context

    Returns:
        BuiltLayer
    """
    builder = BUILDERS[config.kind]
    built = builder(feature_set, config, context)

    logger.info(
        f"   ✅ {config.label}: {built.feature_count} feature(s)"
        + (f", {built.suppressed} suppressed" if built.suppressed else "")
        + (f", {built.skipped} without geometry" if built.skipped else "")
    )
    return built
