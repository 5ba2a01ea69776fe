# -*- coding: utf-8 -*-
"""
Unit tests for level tables and the progression tracker.
"""

import pytest

from services.economy.checked_math import U32_MAX
from services.exceptions import CalculationOverflow, InvalidConfiguration
from services.inventory.progression import (
    LevelTable,
    ProgressionState,
    ProgressionTracker,
    UpgradeOutcome,
    upgrade_state,
)


class TestLevelTable:
    """Tests for level lookup and validation."""

    @pytest.mark.parametrize("count,level", [(0, 1), (29, 1), (30, 2), (99, 2), (100, 3), (499, 4), (500, 5), (10**6, 5)])
    def test_level_for(self, count, level):
        assert LevelTable().level_for(count) == level

    def test_lookups(self):
        table = LevelTable()
        assert table.max_level == 5
        assert table.capacity_for(3) == 8
        assert table.name_for(5) == "Master Farm"
        assert table.next_threshold(1) == 30
        assert table.next_threshold(5) is None

    @pytest.mark.parametrize("level", [0, 6])
    def test_level_out_of_range(self, level):
        with pytest.raises(InvalidConfiguration):
            LevelTable().capacity_for(level)

    @pytest.mark.parametrize("thresholds,capacities,names", [
        ((10, 30), (4, 6), ("a", "b")),
        ((0, 30, 30), (4, 6, 8), ("a", "b", "c")),
        ((0, 30), (6, 6), ("a", "b")),
        ((0, 30), (4, 6), ("a",)),
        ((0, 30), (0, 6), ("a", "b")),
        ((0, 30), (4, 256), ("a", "b")),
        ((), (), ()),
        (tuple(range(21)), tuple(range(1, 22)), tuple("l%d" % i for i in range(21))),
    ])
    def test_invalid_tables(self, thresholds, capacities, names):
        with pytest.raises(InvalidConfiguration):
            LevelTable(thresholds, capacities, names)

    def test_from_config_generates_names(self):
        table = LevelTable.from_config({'thresholds': [0, 10], 'capacities': [2, 3]})
        assert table.names == ("Level 1", "Level 2")

    def test_from_config_malformed(self):
        with pytest.raises(InvalidConfiguration):
            LevelTable.from_config({'thresholds': [0, "ten"], 'capacities': [2, 3]})


class TestAutoUpgrade:
    """Tests for purchase-count driven upgrades."""

    def test_initial_state(self):
        tracker = ProgressionTracker()
        assert tracker.state == ProgressionState(level=1, capacity=4, cumulative_purchase_count=0)
        assert tracker.level_name == "Starter Farm"

    def test_single_upgrade(self):
        tracker = ProgressionTracker()
        assert tracker.auto_upgrade(30) == UpgradeOutcome(level=2, capacity=6, upgraded=True)

    def test_repeat_is_a_noop(self):
        tracker = ProgressionTracker()
        tracker.auto_upgrade(30)
        assert tracker.auto_upgrade(30) == UpgradeOutcome(level=2, capacity=6, upgraded=False)

    def test_jump_lands_on_final_level(self, caplog):
        tracker = ProgressionTracker()
        with caplog.at_level("INFO", logger="sfe.inventory.progression"):
            outcome = tracker.auto_upgrade(350)

        assert outcome == UpgradeOutcome(level=4, capacity=10, upgraded=True)
        assert "from level 1 to 4" in caplog.text
        assert len(caplog.records) == 1

    def test_level_never_decreases(self):
        tracker = ProgressionTracker()
        tracker.auto_upgrade(500)
        outcome = tracker.auto_upgrade(10)

        assert outcome == UpgradeOutcome(level=5, capacity=12, upgraded=False)
        assert tracker.state.cumulative_purchase_count == 500

    @pytest.mark.parametrize("count", [-1, U32_MAX + 1])
    def test_count_must_fit_u32(self, count):
        with pytest.raises(InvalidConfiguration):
            ProgressionTracker().auto_upgrade(count)

    def test_upgrade_state_is_pure(self):
        table = LevelTable()
        state = ProgressionState.initial(table)
        new_state, outcome = upgrade_state(state, table, 100)

        assert state.level == 1
        assert new_state.level == 3
        assert outcome.upgraded


class TestRecordPurchases:
    """Tests for counting purchases."""

    def test_crossing_a_threshold(self):
        tracker = ProgressionTracker()
        assert not tracker.record_purchases(29).upgraded
        assert tracker.purchases_to_next_level() == 1
        assert tracker.record_purchases(1).upgraded
        assert tracker.level_name == "Growing Farm"

    def test_no_next_level_at_max(self):
        tracker = ProgressionTracker()
        tracker.record_purchases(1000)
        assert tracker.purchases_to_next_level() is None

    def test_counter_overflow(self):
        state = ProgressionState(level=5, capacity=12, cumulative_purchase_count=U32_MAX)
        tracker = ProgressionTracker(state=state)
        with pytest.raises(CalculationOverflow):
            tracker.record_purchases(1)

    def test_negative_quantity(self):
        with pytest.raises(InvalidConfiguration):
            ProgressionTracker().record_purchases(-3)

    def test_custom_table(self):
        table = LevelTable((0, 5), (1, 2), ("small", "large"))
        tracker = ProgressionTracker(level_table=table)
        assert tracker.state.capacity == 1
        assert tracker.record_purchases(5) == UpgradeOutcome(level=2, capacity=2, upgraded=True)
