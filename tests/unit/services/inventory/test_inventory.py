# -*- coding: utf-8 -*-
"""
Unit tests for the inventory manager and the item model.

Tests cover bounded insertion with same-category eviction, planting,
discarding and the count invariant.
"""

import logging
import random

import pytest

from services.exceptions import (
    CannotDiscardPlantedItem,
    DuplicateItem,
    InvalidConfiguration,
    InventoryError,
    ItemAlreadyPlanted,
    ItemNotFound,
    ItemNotPlanted,
    StorageFull,
)
from services.inventory.inventory import Inventory
from services.inventory.models import Item
from services.randomness.probability_table import Category


@pytest.fixture
def small_inventory():
    """Two categories of three, five items in total."""
    return Inventory(owner=7, per_category_max=3, global_max=5, category_count=2)


def _fill(inventory, category, item_ids):
    for item_id in item_ids:
        assert inventory.add(item_id, category) is None


class TestConstruction:
    """Tests for inventory bound validation."""

    @pytest.mark.parametrize("kwargs", [
        {'per_category_max': 0},
        {'global_max': 0},
        {'category_count': 0},
        {'category_count': 17},
        {'per_category_max': 2, 'global_max': 5, 'category_count': 2},
    ])
    def test_invalid_bounds(self, kwargs):
        with pytest.raises(InvalidConfiguration):
            Inventory(owner=1, **kwargs)

    def test_defaults(self):
        inventory = Inventory(owner=1)
        assert inventory.per_category_max == 100
        assert inventory.global_max == 1600
        assert inventory.per_category_count == (0,) * 16


class TestAdd:
    """Tests for bounded insertion."""

    def test_add_updates_counters(self, small_inventory):
        small_inventory.add(1, Category.SEED_1)
        small_inventory.add(2, Category.SEED_2)

        assert small_inventory.total_count == 2
        assert small_inventory.count(Category.SEED_1) == 1
        assert small_inventory.category_of(2) == Category.SEED_2
        assert 1 in small_inventory
        assert len(small_inventory) == 2

    def test_duplicate_id(self, small_inventory):
        small_inventory.add(1, Category.SEED_1)
        with pytest.raises(DuplicateItem):
            small_inventory.add(1, Category.SEED_2)

    def test_full_category_evicts_oldest_of_same_category(self, small_inventory, caplog):
        _fill(small_inventory, Category.SEED_1, [1, 2, 3])
        small_inventory.add(10, Category.SEED_2)

        with caplog.at_level(logging.INFO, logger="sfe.inventory"):
            evicted = small_inventory.add(4, Category.SEED_1)

        assert evicted == 1
        assert small_inventory.count(Category.SEED_1) == 3
        assert small_inventory.item_ids == [2, 3, 10, 4]
        assert "Evicted item 1" in caplog.text

    def test_planted_items_are_never_evicted(self, small_inventory):
        _fill(small_inventory, Category.SEED_1, [1, 2, 3])
        small_inventory.mark_planted(1)

        assert small_inventory.add(4, Category.SEED_1) == 2
        assert small_inventory.is_planted(1)

    def test_storage_full_when_category_is_all_planted(self, small_inventory):
        _fill(small_inventory, Category.SEED_1, [1, 2, 3])
        for item_id in (1, 2, 3):
            small_inventory.mark_planted(item_id)

        with pytest.raises(StorageFull):
            small_inventory.add(4, Category.SEED_1)
        assert small_inventory.total_count == 3

    def test_global_cap_evicts_within_category(self, small_inventory):
        _fill(small_inventory, Category.SEED_1, [1, 2, 3])
        _fill(small_inventory, Category.SEED_2, [4, 5])

        assert small_inventory.add(6, Category.SEED_2) == 4
        assert small_inventory.total_count == 5

    def test_global_cap_with_empty_category(self):
        inventory = Inventory(owner=1, per_category_max=3, global_max=5, category_count=3)
        _fill(inventory, Category.SEED_1, [1, 2, 3])
        _fill(inventory, Category.SEED_2, [4, 5])

        with pytest.raises(StorageFull) as exc_info:
            inventory.add(6, Category.SEED_3)
        assert exc_info.value.details['category'] == "SEED_3"

    @pytest.mark.parametrize("category", [Category.SEED_3, 16, -1])
    def test_category_outside_slots(self, small_inventory, category):
        with pytest.raises(InvalidConfiguration):
            small_inventory.add(1, category)


class TestRemove:
    """Tests for removal by id and category."""

    def test_remove_present_item(self, small_inventory):
        small_inventory.add(1, Category.SEED_1)
        assert small_inventory.remove(1, Category.SEED_1) is True
        assert small_inventory.total_count == 0
        assert small_inventory.count(Category.SEED_1) == 0

    def test_remove_missing_item_is_noop(self, small_inventory):
        assert small_inventory.remove(99, Category.SEED_1) is False

    def test_remove_with_wrong_category(self, small_inventory):
        small_inventory.add(1, Category.SEED_1)
        assert small_inventory.remove(1, Category.SEED_2) is False
        assert 1 in small_inventory


class TestPlantingAndDiscard:
    """Tests for plant state and item destruction."""

    def test_plant_twice(self, small_inventory):
        small_inventory.add(1, Category.SEED_1)
        small_inventory.mark_planted(1)
        with pytest.raises(ItemAlreadyPlanted):
            small_inventory.mark_planted(1)
        assert small_inventory.planted_count == 1

    def test_unplant_unplanted(self, small_inventory):
        small_inventory.add(1, Category.SEED_1)
        with pytest.raises(ItemNotPlanted):
            small_inventory.mark_unplanted(1)

    def test_plant_unknown(self, small_inventory):
        with pytest.raises(ItemNotFound):
            small_inventory.mark_planted(42)

    def test_discard_returns_category(self, small_inventory):
        small_inventory.add(1, Category.SEED_2)
        assert small_inventory.discard(1) == Category.SEED_2
        assert 1 not in small_inventory

    def test_discarding_planted_item_fails(self, small_inventory):
        small_inventory.add(1, Category.SEED_1)
        small_inventory.mark_planted(1)
        with pytest.raises(CannotDiscardPlantedItem):
            small_inventory.discard(1)
        assert 1 in small_inventory

    def test_discard_after_unplant(self, small_inventory):
        small_inventory.add(1, Category.SEED_1)
        small_inventory.mark_planted(1)
        small_inventory.mark_unplanted(1)
        small_inventory.discard(1)
        assert small_inventory.total_count == 0


class TestBatchDiscard:
    """Tests for all-or-nothing batch discard."""

    def test_discards_all(self, small_inventory):
        _fill(small_inventory, Category.SEED_1, [1, 2])
        assert small_inventory.discard_many([1, 2]) == [Category.SEED_1, Category.SEED_1]
        assert small_inventory.total_count == 0

    def test_one_planted_item_blocks_the_batch(self, small_inventory):
        _fill(small_inventory, Category.SEED_1, [1, 2])
        small_inventory.mark_planted(2)

        with pytest.raises(CannotDiscardPlantedItem):
            small_inventory.discard_many([1, 2])
        assert small_inventory.item_ids == [1, 2]

    def test_unknown_item_blocks_the_batch(self, small_inventory):
        small_inventory.add(1, Category.SEED_1)
        with pytest.raises(ItemNotFound):
            small_inventory.discard_many([1, 99])
        assert 1 in small_inventory

    @pytest.mark.parametrize("item_ids", [[], [1, 1], list(range(101))])
    def test_invalid_batches(self, small_inventory, item_ids):
        small_inventory.add(1, Category.SEED_1)
        with pytest.raises(InvalidConfiguration):
            small_inventory.discard_many(item_ids)


class TestInvariants:
    """The category counters always sum to the total and no bound is exceeded."""

    def test_random_operation_sequence(self):
        rng = random.Random(7)
        inventory = Inventory(owner=1, per_category_max=4, global_max=10, category_count=4)
        next_id = 1

        for _ in range(2_000):
            roll = rng.random()
            held = inventory.item_ids
            if roll < 0.6:
                try:
                    inventory.add(next_id, Category(rng.randrange(4)))
                except StorageFull:
                    pass
                next_id += 1
            elif roll < 0.75 and held:
                item_id = rng.choice(held)
                if inventory.is_planted(item_id):
                    inventory.mark_unplanted(item_id)
                else:
                    inventory.mark_planted(item_id)
            elif roll < 0.9 and held:
                item_id = rng.choice(held)
                if not inventory.is_planted(item_id):
                    inventory.discard(item_id)
            elif held:
                item_id = rng.choice(held)
                inventory.remove(item_id, inventory.category_of(item_id))

            inventory.check_invariants()
            assert sum(inventory.per_category_count) == inventory.total_count
            assert max(inventory.per_category_count) <= 4
            assert inventory.total_count <= 10

    def test_copy_is_independent(self, small_inventory):
        small_inventory.add(1, Category.SEED_1)
        clone = small_inventory.copy()
        clone.add(2, Category.SEED_1)
        clone.mark_planted(1)

        assert small_inventory.total_count == 1
        assert not small_inventory.is_planted(1)

    def test_snapshot_restores_order_and_planting(self, small_inventory):
        _fill(small_inventory, Category.SEED_2, [5, 3])
        small_inventory.add(9, Category.SEED_1)
        small_inventory.mark_planted(3)

        restored = Inventory.from_snapshot(small_inventory.snapshot())

        assert restored.item_ids == [5, 3, 9]
        assert restored.is_planted(3)
        assert restored.per_category_count == small_inventory.per_category_count

    def test_inconsistent_snapshot(self, small_inventory):
        data = small_inventory.snapshot()
        data['planted'] = [42]
        with pytest.raises(InventoryError):
            Inventory.from_snapshot(data)


class TestItem:
    """Tests for the item model."""

    def test_plant_cycle(self):
        item = Item(item_id=1, category=Category.SEED_4, power_value=720, owner=3)
        planted = item.plant()

        assert planted.planted
        assert not item.planted
        with pytest.raises(ItemAlreadyPlanted):
            planted.plant()
        assert planted.unplant() == item
        with pytest.raises(ItemNotPlanted):
            item.unplant()

    def test_dict_form_uses_category_name(self):
        item = Item(item_id=1, category=Category.SEED_4, power_value=720, owner=3, created_at=5)
        data = item.to_dict()
        assert data['category'] == "SEED_4"
        assert Item.from_dict(data) == item
