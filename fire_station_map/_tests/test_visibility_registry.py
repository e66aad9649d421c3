#!/usr/bin/env python3
"""
Visibility Registry Tests

Tests:
1. Registration requires ownership
2. Hidden groups are never touched
3. Shown groups are reconciled on selection changes and on show
4. apply_filter is idempotent
5. Re-entrant calls fold into the running pass

Run with: python -m pytest fire_station_map/_tests/test_visibility_registry.py -v
"""

import pytest

from fire_station_map.models.data_models import GeometryKind, LayerKind, StyleSpec
from fire_station_map.state.display_groups import DisplayGroup, RenderedFeature
from fire_station_map.state.visibility_registry import (
    ActiveStationSet,
    VisibilityRegistry,
)

ROSTER = (101, 102, 103)
STYLE = StyleSpec("#333", 0.6, "#8dd3c7", 0.55)


def _feature(feature_id, station_id):
    return RenderedFeature(
        feature_id=feature_id,
        layer_key="sa",
        geometry_kind=GeometryKind.POINT,
        style=STYLE,
        station_id=station_id,
        latlng=(43.5, -79.6),
    )


def _group_with(registry, station_ids, key="sa"):
    group = DisplayGroup(key, key.upper(), LayerKind.SERVICE_AREA)
    features = []
    for i, station_id in enumerate(station_ids):
        feature = _feature(f"{key}-{i}", station_id)
        group.add_feature(feature)
        registry.register(feature, group)
        features.append(feature)
    return group, features


@pytest.fixture
def active():
    return ActiveStationSet(ROSTER)


@pytest.fixture
def registry(active):
    return VisibilityRegistry(active)


class TestActiveStationSet:
    def test_starts_with_full_roster(self, active):
        assert active.snapshot() == frozenset(ROSTER)

    def test_listeners_fire_on_every_change(self, active):
        calls = []
        active.subscribe(lambda: calls.append(active.snapshot()))

        active.deselect(101)
        active.select_none()
        active.select_all()

        assert calls == [
            frozenset({102, 103}),
            frozenset(),
            frozenset(ROSTER),
        ]

    def test_set_selected(self, active):
        active.set_selected(102, False)
        assert 102 not in active
        active.set_selected(102, True)
        assert 102 in active


class TestRegistration:
    def test_requires_ownership(self, registry):
        group = DisplayGroup("sa", "SA", LayerKind.SERVICE_AREA)
        with pytest.raises(ValueError, match="not owned"):
            registry.register(_feature("x", 101), group)

    def test_entry_keeps_station_and_group(self, registry):
        group, (feature,) = _group_with(registry, [102])
        entry = registry.entry_for(feature)

        assert entry.station_id == 102
        assert entry.parent_group is group
        assert entry.feature is feature
        assert feature in registry

    def test_unregister_group(self, registry, active):
        group, features = _group_with(registry, [101, 102])
        group.show()

        assert registry.unregister_group(group) == 2
        assert len(registry) == 0

        active.select_none()
        assert all(group.has_feature(f) for f in features)


class TestApplyFilter:
    def test_hidden_group_untouched(self, registry, active):
        group, features = _group_with(registry, [101, 102])

        active.deselect(101)

        assert not group.is_shown()
        assert all(group.has_feature(f) for f in features)

    def test_show_reconciles_immediately(self, registry, active):
        group, (f101, f102) = _group_with(registry, [101, 102])
        active.deselect(101)

        group.show()

        assert not group.has_feature(f101)
        assert group.has_feature(f102)

    def test_selection_changes_on_shown_group(self, registry, active):
        group, (f101, f102) = _group_with(registry, [101, 102])
        group.show()

        active.select_none()
        assert group.attached_features() == []

        active.select(102)
        assert group.attached_features() == [f102]

        active.select_all()
        assert group.attached_features() == [f101, f102]

    def test_idempotent(self, registry, active):
        group, _ = _group_with(registry, [101, 102, 103])
        group.show()
        active.deselect(103)

        assert registry.apply_filter() == 0
        assert registry.apply_filter() == 0

    def test_change_count(self, registry, active):
        group, _ = _group_with(registry, [101, 101, 102])
        group.show()
        active._selected.discard(101)  # bypass listeners

        assert registry.apply_filter() == 2

    def test_hide_keeps_last_attachment(self, registry, active):
        group, (f101, f102) = _group_with(registry, [101, 102])
        group.show()
        active.deselect(101)
        group.hide()

        active.select(101)
        assert not group.has_feature(f101)

        group.show()
        assert group.has_feature(f101)

    def test_unattributed_detached_by_default(self, registry):
        group, (owned, unowned) = _group_with(registry, [101, None])
        group.show()

        assert group.has_feature(owned)
        assert not group.has_feature(unowned)

    def test_keep_unattributed_visible(self, active):
        registry = VisibilityRegistry(active, keep_unattributed_visible=True)
        group, (_, unowned) = _group_with(registry, [101, None])
        group.show()
        active.select_none()

        assert group.attached_features() == [unowned]

    def test_multiple_groups(self, registry, active):
        shown, (a,) = _group_with(registry, [101], key="a")
        hidden, (b,) = _group_with(registry, [101], key="b")
        shown.show()

        active.deselect(101)

        assert not shown.has_feature(a)
        assert hidden.has_feature(b)


class _ReentrantGroup(DisplayGroup):
    """Calls back into the registry from inside a reconciliation pass."""

    registry = None

    def detach(self, feature):
        super().detach(feature)
        self.registry.apply_filter()


class TestReentrancy:
    def test_nested_call_folds_into_running_pass(self, registry, active):
        group = _ReentrantGroup("r", "R", LayerKind.SERVICE_AREA)
        group.registry = registry
        features = []
        for i, station_id in enumerate([101, 102, 103]):
            feature = _feature(f"r-{i}", station_id)
            group.add_feature(feature)
            registry.register(feature, group)
            features.append(feature)
        group.show()

        active._selected = {103}
        changes = registry.apply_filter()

        assert changes == 2
        assert group.attached_features() == [features[2]]
        assert registry.apply_filter() == 0
