#!/usr/bin/env python3
"""
Legend State Aggregator

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Hold the legend's mutable state and regenerate its
presentation after every mutation.

Sections are rendered in the fixed configured order, never in event order:
- "stations": always on (roster swatches)
- "heat": on while the heat legend is active and both bounds are finite
- "keyed": on while the section key is in visible_section_keys

Every mutator ensures the legend exists, mutates, then regenerates
synchronously, so a mutation made from inside a group show/hide handler is
reflected immediately. Subscribers get the new LegendPresentation.

Navigation Guide:
- LegendState: Raw state
- LegendPresentation / LegendSection: Regenerated, immutable output
- LegendStateAggregator: ensure / add_key / remove_key / set_heat_legend /
  set_section_visible / set_collapsed
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Set, Tuple

from fire_station_map.config_types import (
    HeatRampConfig,
    LegendConfig,
    LegendSectionConfig,
)

logger = logging.getLogger(__name__)

LegendListener = Callable[["LegendPresentation"], None]


# ═══════════════════════════════════════════════════════════════════════════
# 📦 STATE AND PRESENTATION
# ═══════════════════════════════════════════════════════════════════════════


@dataclass
class LegendState:
    """Mutable legend state.

    Attributes:
        visible_section_keys: Keys of membership-gated sections currently on
        heat_active: Whether the heat layer is shown
        heat_min: Dataset minimum of the shown heat layer
        heat_max: Dataset maximum of the shown heat layer
        collapsed: Whether the legend body is closed
    """

    visible_section_keys: Set[str] = field(default_factory=set)
    heat_active: bool = False
    heat_min: Optional[float] = None
    heat_max: Optional[float] = None
    collapsed: bool = False


@dataclass(frozen=True)
class LegendSection:
    """One rendered legend section.

    Attributes:
        key: Section key
        label: Header text
        section_type: "stations", "heat" or "keyed"
        swatches: (label, color) pairs (stations section only)
        gradient: (light, dark) colors (heat section only)
        bounds: (min, max) shown beside the gradient (heat section only)
    """

    key: str
    label: str
    section_type: str
    swatches: Tuple[Tuple[str, str], ...] = ()
    gradient: Optional[Tuple[str, str]] = None
    bounds: Optional[Tuple[float, float]] = None


@dataclass(frozen=True)
class LegendPresentation:
    """Regenerated legend output."""

    title: str
    collapsed: bool
    sections: Tuple[LegendSection, ...]

    @property
    def section_keys(self) -> Tuple[str, ...]:
        return tuple(s.key for s in self.sections)


def _is_finite_number(value: Optional[float]) -> bool:
    if value is None or isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except TypeError:
        return False


# ═══════════════════════════════════════════════════════════════════════════
# 🗂️ AGGREGATOR
# ═══════════════════════════════════════════════════════════════════════════


class LegendStateAggregator:
    """Legend consumer interface backed by LegendState."""

    def __init__(
        self,
        config: Optional[LegendConfig] = None,
        station_entries: Sequence[Tuple[object, str]] = (),
        heat_config: Optional[HeatRampConfig] = None,
    ) -> None:
        self.config = config or LegendConfig()
        heat_config = heat_config or HeatRampConfig()
        self._station_swatches = tuple(
            (str(station_id), color) for station_id, color in station_entries
        )
        self._heat_gradient = (heat_config.light_color, heat_config.dark_color)
        self.state = LegendState()
        self._created = False
        self._revision = 0
        self._presentation: Optional[LegendPresentation] = None
        self._listeners: List[LegendListener] = []

    # ── Lifecycle ─────────────────────────────────────────────────────────

    def ensure(self) -> "LegendStateAggregator":
        """Create the legend once. Later calls return the same instance."""
        if not self._created:
            self._created = True
            self._regenerate()
        return self

    @property
    def created(self) -> bool:
        return self._created

    @property
    def revision(self) -> int:
        """Number of regenerations so far."""
        return self._revision

    def subscribe(self, listener: LegendListener) -> None:
        """Call listener(presentation) after every regeneration."""
        self._listeners.append(listener)

    # ── Mutators ──────────────────────────────────────────────────────────

    def add_key(self, key: str) -> None:
        self.ensure()
        self.state.visible_section_keys.add(key)
        self._regenerate()

    def remove_key(self, key: str) -> None:
        self.ensure()
        self.state.visible_section_keys.discard(key)
        self._regenerate()

    def set_section_visible(self, key: str, visible: bool) -> None:
        self.ensure()
        if visible:
            self.state.visible_section_keys.add(key)
        else:
            self.state.visible_section_keys.discard(key)
        self._regenerate()

    def set_heat_legend(
        self,
        active: bool,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
    ) -> None:
        """Set all heat fields at once."""
        self.ensure()
        self.state.heat_active = bool(active)
        self.state.heat_min = min_value
        self.state.heat_max = max_value
        self._regenerate()

    def set_collapsed(self, collapsed: bool) -> None:
        """Open or close the legend body. No-op when already in that state."""
        self.ensure()
        if self.state.collapsed == bool(collapsed):
            return
        self.state.collapsed = bool(collapsed)
        self._regenerate()

    # ── Presentation ──────────────────────────────────────────────────────

    def _section(
        self, section_config: LegendSectionConfig
    ) -> Optional[LegendSection]:
        state = self.state
        if section_config.type == "stations":
            return LegendSection(
                key=section_config.key,
                label=section_config.label,
                section_type="stations",
                swatches=self._station_swatches,
            )
        if section_config.type == "heat":
            if not (
                state.heat_active
                and _is_finite_number(state.heat_min)
                and _is_finite_number(state.heat_max)
            ):
                return None
            return LegendSection(
                key=section_config.key,
                label=section_config.label,
                section_type="heat",
                gradient=self._heat_gradient,
                bounds=(float(state.heat_min), float(state.heat_max)),
            )
        if section_config.key in state.visible_section_keys:
            return LegendSection(
                key=section_config.key,
                label=section_config.label,
                section_type="keyed",
            )
        return None

    def _regenerate(self) -> None:
        sections = []
        for section_config in self.config.sections:
            section = self._section(section_config)
            if section is not None:
                sections.append(section)

        self._presentation = LegendPresentation(
            title=self.config.title,
            collapsed=self.state.collapsed,
            sections=tuple(sections),
        )
        self._revision += 1
        logger.debug(
            f"Legend regenerated (rev {self._revision}): "
            f"{list(self._presentation.section_keys)}"
        )
        for listener in list(self._listeners):
            listener(self._presentation)

    def presentation(self) -> LegendPresentation:
        """Current presentation (ensures the legend first)."""
        self.ensure()
        return self._presentation

    def render_html(self) -> str:
        """Legend panel HTML for the current presentation."""
        from fire_station_map.visualization.html_panels import (
            generate_legend_panel_html,
        )

        return generate_legend_panel_html(self.presentation())
