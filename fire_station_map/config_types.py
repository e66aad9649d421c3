"""
═══════════════════════════════════════════════════════════════════════════════
📋 UNIFIED CONFIGURATION TYPES
═══════════════════════════════════════════════════════════════════════════════

ARCHITECTURAL OVERVIEW
----------------------
Responsibility: Define all configuration dataclasses for the fire station map.
Replaces raw CONFIG dictionary access with typed, validated config objects.

Usage:
    from fire_station_map.config import CONFIG
    from fire_station_map.config_types import AppConfig

    # Create once at application startup
    app_config = AppConfig.from_dict(CONFIG)

For Navigation: Use VS Code outline (Ctrl+Shift+O)

NAVIGATION GUIDE
----------------
# ═════ 1. STATION PALETTE CONFIGURATION
# ═════ 2. HEAT RAMP CONFIGURATION
# ═════ 3. PROJECTION CONFIGURATION
# ═════ 4. FETCH CONFIGURATION
# ═════ 5. VISIBILITY / LEGEND CONFIGURATION
# ═════ 6. LAYER SOURCE CONFIGURATION
# ═════ 7. MAP EXPORT CONFIGURATION
# ═════ 8. APP CONFIG (MASTER FACADE)

═══════════════════════════════════════════════════════════════════════════════
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from fire_station_map.models.data_models import LayerKind


# ═══════════════════════════════════════════════════════════════════════════════
# 🚒 1. STATION PALETTE CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class StationPaletteConfig:
    """
    Station roster, palette and style constants.

    Attributes:
        roster: Sorted station ids; position selects the palette slot.
        palette: Hex colors, reused cyclically past the end.
        excluded_station_id: Station whose features are never rendered.
        pseudo_stations: Token -> color for non-numeric pseudo-stations.
        default_polygon_color: Fill for non-null ids missing from the roster.
        default_point_color: Marker fill for non-null ids missing from the roster.
        polygon_stroke_color: Outline of owned polygons.
        polygon_stroke_weight: Outline width of owned polygons.
        polygon_fill_opacity: Fill opacity of owned polygons.
        unknown_stroke_color: Outline of unowned (null/zero) features.
        unknown_stroke_weight: Outline width of unowned features.
        unknown_fill_color: Fill of unowned features.
        unknown_fill_opacity: Fill opacity of unowned features.
        point_radius: Station marker radius in pixels.
        point_stroke_color: Station marker outline.
        point_stroke_weight: Station marker outline width.
        point_fill_opacity: Station marker fill opacity.
    """

    roster: Tuple[int, ...] = (
        101, 102, 103, 104, 105, 106, 107, 108, 109, 110, 111, 112,
        114, 115, 116, 117, 118, 119, 120, 121, 122,
    )
    palette: Tuple[str, ...] = (
        "#8dd3c7", "#ffffb3", "#bebada", "#fb8072", "#80b1d3",
        "#fdb462", "#b3de69", "#fccde5", "#d9d9d9", "#bc80bd",
        "#ccebc5", "#ffed6f", "#1b9e77", "#d95f02", "#7570b3",
        "#e7298a", "#66a61e", "#e6ab02", "#a6761d", "#666666",
        "#7fc97f",
    )
    excluded_station_id: int = 113
    pseudo_stations: Tuple[Tuple[str, str], ...] = (("1CH", "#17becf"),)
    default_polygon_color: str = "#999"
    default_point_color: str = "#e41a1c"
    polygon_stroke_color: str = "#333"
    polygon_stroke_weight: float = 0.6
    polygon_fill_opacity: float = 0.55
    unknown_stroke_color: str = "#999"
    unknown_stroke_weight: float = 0.8
    unknown_fill_color: str = "#999"
    unknown_fill_opacity: float = 0.0
    point_radius: float = 6
    point_stroke_color: str = "#222"
    point_stroke_weight: float = 1.0
    point_fill_opacity: float = 0.9

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not self.palette:
            raise ValueError("palette must contain at least one color")
        if list(self.roster) != sorted(self.roster):
            raise ValueError(f"roster must be sorted, got {list(self.roster)}")

    @property
    def pseudo_station_colors(self) -> Dict[str, str]:
        """Pseudo-station token (upper case) -> color."""
        return {token.upper(): color for token, color in self.pseudo_stations}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "StationPaletteConfig":
        """Create StationPaletteConfig from the CONFIG["stations"] dict."""
        defaults = cls()
        polygon = d.get("polygon_style", {})
        unknown = d.get("unknown_owner_style", {})
        point = d.get("point_style", {})
        return cls(
            roster=tuple(d.get("roster", defaults.roster)),
            palette=tuple(d.get("palette", defaults.palette)),
            excluded_station_id=d.get(
                "excluded_station_id", defaults.excluded_station_id
            ),
            pseudo_stations=tuple(
                d.get("pseudo_stations", dict(defaults.pseudo_stations)).items()
            ),
            default_polygon_color=d.get(
                "default_polygon_color", defaults.default_polygon_color
            ),
            default_point_color=d.get(
                "default_point_color", defaults.default_point_color
            ),
            polygon_stroke_color=polygon.get(
                "stroke_color", defaults.polygon_stroke_color
            ),
            polygon_stroke_weight=polygon.get(
                "stroke_weight", defaults.polygon_stroke_weight
            ),
            polygon_fill_opacity=polygon.get(
                "fill_opacity", defaults.polygon_fill_opacity
            ),
            unknown_stroke_color=unknown.get(
                "stroke_color", defaults.unknown_stroke_color
            ),
            unknown_stroke_weight=unknown.get(
                "stroke_weight", defaults.unknown_stroke_weight
            ),
            unknown_fill_color=unknown.get("fill_color", defaults.unknown_fill_color),
            unknown_fill_opacity=unknown.get(
                "fill_opacity", defaults.unknown_fill_opacity
            ),
            point_radius=point.get("radius", defaults.point_radius),
            point_stroke_color=point.get("stroke_color", defaults.point_stroke_color),
            point_stroke_weight=point.get(
                "stroke_weight", defaults.point_stroke_weight
            ),
            point_fill_opacity=point.get("fill_opacity", defaults.point_fill_opacity),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# 🔥 2. HEAT RAMP CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class HeatRampConfig:
    """
    Two-stop linear heat ramp.

    Attributes:
        light_color: Color at t=0 (dataset minimum).
        dark_color: Color at t=1 (dataset maximum).
        value_fields: Candidate attribute names for the incident count.
        stroke_color: Outline of heat polygons.
        stroke_weight: Outline width of heat polygons.
        fill_opacity: Fill opacity of heat polygons.
    """

    light_color: str = "#f7fbff"
    dark_color: str = "#08306b"
    value_fields: Tuple[str, ...] = ("Incidents",)
    stroke_color: str = "#333"
    stroke_weight: float = 0.4
    fill_opacity: float = 0.55

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "HeatRampConfig":
        """Create HeatRampConfig from the CONFIG["heat_ramp"] dict."""
        return cls(
            light_color=d.get("light_color", "#f7fbff"),
            dark_color=d.get("dark_color", "#08306b"),
            value_fields=tuple(d.get("value_fields", ("Incidents",))),
            stroke_color=d.get("stroke_color", "#333"),
            stroke_weight=d.get("stroke_weight", 0.4),
            fill_opacity=d.get("fill_opacity", 0.55),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# 🌐 3. PROJECTION CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ProjectionConfig:
    """
    Coordinate projection settings.

    Attributes:
        web_mercator_wkids: Reference ids treated as spherical Web Mercator.
        earth_radius_m: Sphere radius for the inverse Web-Mercator transform.
        reproject_other_crs: Reproject any other non-4326 reference with pyproj.
    """

    web_mercator_wkids: Tuple[int, ...] = (3857, 102100, 102113)
    earth_radius_m: float = 6378137.0
    reproject_other_crs: bool = False

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ProjectionConfig":
        """Create ProjectionConfig from the CONFIG["projection"] dict."""
        return cls(
            web_mercator_wkids=tuple(d.get("web_mercator_wkids", (3857, 102100, 102113))),
            earth_radius_m=d.get("earth_radius_m", 6378137.0),
            reproject_other_crs=d.get("reproject_other_crs", False),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# 📡 4. FETCH CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class FetchConfig:
    """
    Fetch collaborator settings.

    Attributes:
        base_location: URL prefix or directory that relative sources resolve against.
        timeout_s: Per-request timeout in seconds.
        cache_bust: Append a cb=<millis> query parameter to HTTP requests.
        error_body_chars: Response body characters kept in FetchError messages.
        max_workers: Thread pool size for concurrent source loads.
    """

    base_location: str = "./data"
    timeout_s: float = 30.0
    cache_bust: bool = True
    error_body_chars: int = 200
    max_workers: int = 4

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.timeout_s <= 0:
            raise ValueError(f"timeout_s must be > 0, got {self.timeout_s}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")

    def resolve(self, source: str) -> str:
        """Resolve a source against base_location unless it is already absolute."""
        if source.startswith(("http://", "https://")) or Path(source).is_absolute():
            return source
        if self.base_location.startswith(("http://", "https://")):
            return f"{self.base_location.rstrip('/')}/{source}"
        return str(Path(self.base_location) / source)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "FetchConfig":
        """Create FetchConfig from the CONFIG["fetch"] dict."""
        return cls(
            base_location=d.get("base_location", "./data"),
            timeout_s=d.get("timeout_s", 30.0),
            cache_bust=d.get("cache_bust", True),
            error_body_chars=d.get("error_body_chars", 200),
            max_workers=d.get("max_workers", 4),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# 👁️ 5. VISIBILITY / LEGEND CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class VisibilityConfig:
    """
    Station filter behaviour.

    Attributes:
        keep_unattributed_visible: Keep features with a null station id
            attached regardless of the station selection.
    """

    keep_unattributed_visible: bool = False

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "VisibilityConfig":
        """Create VisibilityConfig from the CONFIG["visibility"] dict."""
        return cls(keep_unattributed_visible=d.get("keep_unattributed_visible", False))


LEGEND_SECTION_TYPES = ("stations", "heat", "keyed")


@dataclass(frozen=True)
class LegendSectionConfig:
    """
    One declaratively ordered legend section.

    Attributes:
        type: "stations" (always on), "heat" (conditional) or "keyed" (membership-gated).
        key: Section key matched against visible section keys.
        label: Header text.
    """

    type: str
    key: str
    label: str

    def __post_init__(self) -> None:
        """Validate section type."""
        if self.type not in LEGEND_SECTION_TYPES:
            raise ValueError(
                f"type must be one of {LEGEND_SECTION_TYPES}, got '{self.type}'"
            )

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "LegendSectionConfig":
        """Create LegendSectionConfig from dictionary."""
        return cls(type=d["type"], key=d["key"], label=d.get("label", d["key"]))


def _default_legend_sections() -> Tuple[LegendSectionConfig, ...]:
    from fire_station_map.config import CONFIG

    return tuple(
        LegendSectionConfig.from_dict(s) for s in CONFIG["legend"]["sections"]
    )


@dataclass(frozen=True)
class LegendConfig:
    """
    Legend presentation settings.

    Attributes:
        sections: Fixed output order of legend sections.
        start_collapsed: Whether the legend body starts closed.
        title: Legend header text.
    """

    sections: Tuple[LegendSectionConfig, ...] = field(
        default_factory=_default_legend_sections
    )
    start_collapsed: bool = True
    title: str = "Legend"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "LegendConfig":
        """Create LegendConfig from the CONFIG["legend"] dict."""
        if "sections" in d:
            sections = tuple(LegendSectionConfig.from_dict(s) for s in d["sections"])
        else:
            sections = _default_legend_sections()
        return cls(
            sections=sections,
            start_collapsed=d.get("start_collapsed", True),
            title=d.get("title", "Legend"),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# 📂 6. LAYER SOURCE CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class LayerSourceConfig:
    """
    One data source and how its layer is built.

    Attributes:
        key: Layer key (also the legend section key).
        label: Display name in the layer panel.
        source: File name, path or URL of the source document.
        kind: Layer kind, selects the builder.
        station_keys: Layer-specific station-id candidates, most specific first.
        station_filtered: Register features with the visibility registry.
            Defaults to True for service areas, False otherwise.
        initially_shown: Show the group once all sources have loaded.
        fit_bounds: Use this group's bounds as the initial map extent.
    """

    key: str
    label: str
    source: str
    kind: LayerKind
    station_keys: Tuple[str, ...] = ()
    station_filtered: Optional[bool] = None
    initially_shown: bool = False
    fit_bounds: bool = False

    def __post_init__(self) -> None:
        """Resolve station_filtered default from the layer kind."""
        if self.station_filtered is None:
            object.__setattr__(
                self, "station_filtered", self.kind is LayerKind.SERVICE_AREA
            )

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "LayerSourceConfig":
        """Create LayerSourceConfig from one CONFIG["layers"] entry."""
        kind = d.get("kind", "service_area")
        try:
            layer_kind = LayerKind(kind)
        except ValueError:
            valid = [k.value for k in LayerKind]
            raise ValueError(f"kind must be one of {valid}, got '{kind}'") from None
        return cls(
            key=d["key"],
            label=d.get("label", d["key"]),
            source=d["source"],
            kind=layer_kind,
            station_keys=tuple(d.get("station_keys", ())),
            station_filtered=d.get("station_filtered"),
            initially_shown=d.get("initially_shown", False),
            fit_bounds=d.get("fit_bounds", False),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# 🗺️ 7. MAP EXPORT CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class MapExportConfig:
    """
    HTML snapshot settings.

    Attributes:
        title: Page and figure title.
        center: Initial (lat, lon) when no fit bounds are available.
        zoom: Initial zoom level.
        map_style: Plotly map style name.
        output_html: Output path of the HTML snapshot.
        log_dir: Directory for run logs.
        figure_height: Figure height in pixels.
        output_geojson: GeoJSON of the initially visible features; None skips it.
    """

    title: str = "Fire Station Service Areas"
    center: Tuple[float, float] = (43.59, -79.64)
    zoom: float = 11
    map_style: str = "open-street-map"
    output_html: str = "Output/fire_station_map.html"
    log_dir: str = "Output/logs"
    figure_height: int = 900
    output_geojson: Optional[str] = "Output/visible_features.geojson"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "MapExportConfig":
        """Create MapExportConfig from the CONFIG["map_export"] dict."""
        return cls(
            title=d.get("title", "Fire Station Service Areas"),
            center=tuple(d.get("center", (43.59, -79.64))),
            zoom=d.get("zoom", 11),
            map_style=d.get("map_style", "open-street-map"),
            output_html=d.get("output_html", "Output/fire_station_map.html"),
            log_dir=d.get("log_dir", "Output/logs"),
            figure_height=d.get("figure_height", 900),
            output_geojson=d.get("output_geojson", "Output/visible_features.geojson"),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# 🎯 8. APP CONFIG (MASTER FACADE)
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class AppConfig:
    """
    Master configuration object for the fire station map.

    Create it once at application startup using AppConfig.from_dict(CONFIG)
    and pass it to everything that needs settings.

    Example:
        from fire_station_map.config import CONFIG
        from fire_station_map.config_types import AppConfig

        app_config = AppConfig.from_dict(CONFIG)
        palette = app_config.stations.palette
    """

    stations: StationPaletteConfig = field(default_factory=StationPaletteConfig)
    heat_ramp: HeatRampConfig = field(default_factory=HeatRampConfig)
    projection: ProjectionConfig = field(default_factory=ProjectionConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    visibility: VisibilityConfig = field(default_factory=VisibilityConfig)
    legend: LegendConfig = field(default_factory=LegendConfig)
    layers: Tuple[LayerSourceConfig, ...] = ()
    map_export: MapExportConfig = field(default_factory=MapExportConfig)

    def __post_init__(self) -> None:
        """Reject duplicate layer keys."""
        keys = [layer.key for layer in self.layers]
        duplicates = sorted({k for k in keys if keys.count(k) > 1})
        if duplicates:
            raise ValueError(f"duplicate layer keys: {duplicates}")

    def layer(self, key: str) -> Optional[LayerSourceConfig]:
        """Look up a layer source config by key."""
        for layer in self.layers:
            if layer.key == key:
                return layer
        return None

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "AppConfig":
        """
        Create AppConfig from the CONFIG dictionary.

        Args:
            config_dict: The CONFIG dictionary from config.py.

        Returns:
            AppConfig instance with all settings populated.
        """
        return cls(
            stations=StationPaletteConfig.from_dict(config_dict.get("stations", {})),
            heat_ramp=HeatRampConfig.from_dict(config_dict.get("heat_ramp", {})),
            projection=ProjectionConfig.from_dict(config_dict.get("projection", {})),
            fetch=FetchConfig.from_dict(config_dict.get("fetch", {})),
            visibility=VisibilityConfig.from_dict(config_dict.get("visibility", {})),
            legend=LegendConfig.from_dict(config_dict.get("legend", {})),
            layers=tuple(
                LayerSourceConfig.from_dict(d) for d in config_dict.get("layers", [])
            ),
            map_export=MapExportConfig.from_dict(config_dict.get("map_export", {})),
        )
