#!/usr/bin/env python3
"""
Visibility Registry

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Keep rendered features consistent with two crossing filters,
the active-station selection and each layer's shown/hidden state.

- ActiveStationSet: the mutable "stations on" selection, initialized to the
  full roster and changed only by explicit selection events
- VisibilityRegistry: one entry per station-filtered feature (weak feature
  reference, denormalized station id, parent group)

apply_filter() is level-triggered: for every entry whose group is shown it
attaches the feature iff its station is active, and leaves hidden groups
untouched. It is idempotent and runs after every selection change and every
show/hide of a registered group. A call made while a pass is running (from a
handler inside that pass) is folded into one more pass instead of nesting.

Navigation Guide:
- ActiveStationSet.select / deselect / select_all / select_none
- VisibilityRegistry.register: Add a feature/group entry
- VisibilityRegistry.apply_filter: Reconcile attachment
"""

import logging
import weakref
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple

from fire_station_map.models.data_models import StationIdentity
from fire_station_map.state.display_groups import DisplayGroup, RenderedFeature

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# ✅ ACTIVE STATION SET
# ═══════════════════════════════════════════════════════════════════════════


class ActiveStationSet:
    """Process-wide selection of stations considered "on"."""

    def __init__(self, roster: Iterable[StationIdentity]) -> None:
        self._roster: Tuple[StationIdentity, ...] = tuple(roster)
        self._selected = set(self._roster)
        self._listeners: List[Callable[[], None]] = []

    def __contains__(self, station_id: StationIdentity) -> bool:
        return station_id in self._selected

    def __len__(self) -> int:
        return len(self._selected)

    @property
    def roster(self) -> Tuple[StationIdentity, ...]:
        return self._roster

    def snapshot(self) -> frozenset:
        """Immutable copy of the current selection."""
        return frozenset(self._selected)

    def subscribe(self, listener: Callable[[], None]) -> None:
        """Call listener() after every selection change."""
        self._listeners.append(listener)

    def _changed(self) -> None:
        for listener in list(self._listeners):
            listener()

    def select(self, station_id: StationIdentity) -> None:
        self._selected.add(station_id)
        self._changed()

    def deselect(self, station_id: StationIdentity) -> None:
        self._selected.discard(station_id)
        self._changed()

    def set_selected(self, station_id: StationIdentity, selected: bool) -> None:
        """Checkbox-style toggle."""
        if selected:
            self.select(station_id)
        else:
            self.deselect(station_id)

    def select_all(self) -> None:
        """Select every roster station."""
        self._selected = set(self._roster)
        self._changed()

    def select_none(self) -> None:
        self._selected = set()
        self._changed()


# ═══════════════════════════════════════════════════════════════════════════
# 📋 REGISTRY
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(eq=False)
class VisibilityRegistryEntry:
    """Non-owning link from a rendered feature to its station and group.

    Attributes:
        feature_ref: Weak reference to the rendered feature
        station_id: Owner copied at ingestion, so filtering never re-reads attributes
        parent_group: The group that owns the feature
    """

    feature_ref: "weakref.ReferenceType[RenderedFeature]"
    station_id: StationIdentity
    parent_group: DisplayGroup

    @property
    def feature(self) -> Optional[RenderedFeature]:
        return self.feature_ref()


class VisibilityRegistry:
    """Station-filter bookkeeping across every loaded layer."""

    def __init__(
        self,
        active_stations: ActiveStationSet,
        keep_unattributed_visible: bool = False,
    ) -> None:
        self.active_stations = active_stations
        self.keep_unattributed_visible = keep_unattributed_visible
        self._entries: List[VisibilityRegistryEntry] = []
        self._watched_groups: set = set()
        self._applying = False
        self._pending = False
        active_stations.subscribe(self.apply_filter)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, feature: RenderedFeature) -> bool:
        return self.entry_for(feature) is not None

    @property
    def entries(self) -> Tuple[VisibilityRegistryEntry, ...]:
        return tuple(self._entries)

    def entry_for(self, feature: RenderedFeature) -> Optional[VisibilityRegistryEntry]:
        """The entry registered for feature, if any."""
        for entry in self._entries:
            if entry.feature is feature:
                return entry
        return None

    def register(
        self, feature: RenderedFeature, group: DisplayGroup
    ) -> VisibilityRegistryEntry:
        """
        Register a styled feature that group owns.

        The first registration for a group also subscribes apply_filter to the
        group's show/hide events.

        Raises:
            ValueError: If group does not own feature
        """
        if not group.owns(feature):
            raise ValueError(
                f"Feature {feature.feature_id} is not owned by group '{group.key}'"
            )
        entry = VisibilityRegistryEntry(
            feature_ref=weakref.ref(feature),
            station_id=feature.station_id,
            parent_group=group,
        )
        self._entries.append(entry)

        if id(group) not in self._watched_groups:
            self._watched_groups.add(id(group))
            group.on("show", self._on_group_toggled)
            group.on("hide", self._on_group_toggled)
        return entry

    def unregister_group(self, group: DisplayGroup) -> int:
        """Drop every entry of a torn-down group. Returns the number removed."""
        before = len(self._entries)
        self._entries = [e for e in self._entries if e.parent_group is not group]
        if id(group) in self._watched_groups:
            self._watched_groups.discard(id(group))
            group.off("show", self._on_group_toggled)
            group.off("hide", self._on_group_toggled)
        return before - len(self._entries)

    def _on_group_toggled(self, group: DisplayGroup) -> None:
        self.apply_filter()

    def wants_on(self, station_id: StationIdentity) -> bool:
        """Whether a feature of this station should be attached."""
        if station_id is None and self.keep_unattributed_visible:
            return True
        return station_id in self.active_stations

    def apply_filter(self) -> int:
        """
        Reconcile attachment of every entry in a shown group.

        Returns:
            Number of attach + detach operations performed
        """
        if self._applying:
            self._pending = True
            return 0

        self._applying = True
        changes = 0
        try:
            while True:
                self._pending = False
                changes += self._reconcile()
                if not self._pending:
                    break
        finally:
            self._applying = False

        if changes:
            logger.debug(f"Station filter changed {changes} feature(s)")
        return changes

    def _reconcile(self) -> int:
        changes = 0
        alive = []
        for entry in list(self._entries):
            feature = entry.feature
            if feature is None:
                continue
            alive.append(entry)

            group = entry.parent_group
            if not group.is_shown():
                continue
            want_on = self.wants_on(entry.station_id)
            has_it = group.has_feature(feature)
            if want_on and not has_it:
                group.attach(feature)
                changes += 1
            elif not want_on and has_it:
                group.detach(feature)
                changes += 1

        if len(alive) != len(self._entries):
            self._entries = alive
        return changes
