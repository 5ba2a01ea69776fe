# -*- coding: utf-8 -*-
# ============================================================================ #
# SeedFarm Economy (SFE) - Inventory Manager                                   #
# Copyright (c) 2025 MAX                                                       #
# Licensed under the MIT License                                               #
# ============================================================================ #

"""
Inventory Manager - capacity-bounded multi-category item storage

Bounds:
- ``per_category_max`` items of any one category
- ``global_max`` items in total

Adding to a full category evicts the oldest unplanted item of that same
category (insertion order), so an add never fails only because the category
is full. Planted items are never evicted. When nothing of the category can be
evicted and a bound would be exceeded the add fails with ``StorageFull``.

Invariant: the per-category counters always sum to ``total_count``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from services.economy.checked_math import require_u64
from services.economy.constants import (
    DEFAULT_GLOBAL_MAX,
    DEFAULT_PER_CATEGORY_MAX,
    MAX_BATCH_DISCARD,
)
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
from services.randomness.probability_table import CATEGORY_COUNT, Category

logger = logging.getLogger('sfe.inventory')


class Inventory:
    """Ordered item storage for one owner."""

    def __init__(self, owner: int, *, per_category_max: int = DEFAULT_PER_CATEGORY_MAX,
                 global_max: int = DEFAULT_GLOBAL_MAX, category_count: int = CATEGORY_COUNT):
        if per_category_max <= 0 or global_max <= 0:
            raise InvalidConfiguration(
                "Inventory bounds must be positive",
                details={'per_category_max': per_category_max, 'global_max': global_max},
            )
        if not 0 < category_count <= CATEGORY_COUNT:
            raise InvalidConfiguration(
                f"category_count must be within 1..{CATEGORY_COUNT}", details={'category_count': category_count}
            )
        if per_category_max * category_count < global_max:
            raise InvalidConfiguration(
                "per_category_max * category_count must cover global_max",
                details={
                    'per_category_max': per_category_max,
                    'category_count': category_count,
                    'global_max': global_max,
                },
            )
        self.owner = owner
        self.per_category_max = per_category_max
        self.global_max = global_max
        self.category_count = category_count
        # dict preserves insertion order, which is the eviction order
        self._items: Dict[int, Category] = {}
        self._per_category: List[int] = [0] * category_count
        self._planted: Set[int] = set()

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------
    @property
    def total_count(self) -> int:
        return len(self._items)

    @property
    def per_category_count(self) -> Tuple[int, ...]:
        return tuple(self._per_category)

    @property
    def item_ids(self) -> List[int]:
        return list(self._items)

    def count(self, category: Category) -> int:
        return self._per_category[self._slot(category)]

    def category_of(self, item_id: int) -> Optional[Category]:
        return self._items.get(item_id)

    @property
    def planted_count(self) -> int:
        return len(self._planted)

    def is_planted(self, item_id: int) -> bool:
        return item_id in self._planted

    def __contains__(self, item_id: int) -> bool:
        return item_id in self._items

    def __len__(self) -> int:
        return len(self._items)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def add(self, item_id: int, category: Category) -> Optional[int]:
        """Insert an item, evicting the oldest same-category item if needed.

        Returns:
            The id of the evicted item, or ``None`` when nothing was evicted.

        Raises:
            StorageFull: A bound is reached and no item of ``category`` can be evicted.
            DuplicateItem: ``item_id`` is already stored.
        """
        require_u64('item_id', item_id)
        slot = self._slot(category)
        if item_id in self._items:
            raise DuplicateItem(f"Item {item_id} is already in the inventory", details={'item_id': item_id})

        evicted = None
        if self._per_category[slot] >= self.per_category_max or self.total_count >= self.global_max:
            evicted = self._oldest_evictable(Category(slot))
            if evicted is None:
                raise StorageFull(
                    "Inventory is full and nothing of this category can be evicted",
                    details={
                        'owner': self.owner,
                        'category': Category(slot).name,
                        'category_count': self._per_category[slot],
                        'total_count': self.total_count,
                    },
                )
            self._delete(evicted)
            logger.info(
                "Evicted item %s (%s) from inventory of %s to make room for %s",
                evicted, Category(slot).name, self.owner, item_id,
            )

        self._items[item_id] = Category(slot)
        self._per_category[slot] += 1
        return evicted

    def remove(self, item_id: int, category: Category) -> bool:
        """Remove an item; ``False`` when it is not stored under ``category``."""
        slot = self._slot(category)
        if self._items.get(item_id) != Category(slot):
            return False
        self._delete(item_id)
        return True

    def mark_planted(self, item_id: int) -> None:
        self._require(item_id)
        if item_id in self._planted:
            raise ItemAlreadyPlanted(f"Item {item_id} is already planted", details={'item_id': item_id})
        self._planted.add(item_id)

    def mark_unplanted(self, item_id: int) -> None:
        self._require(item_id)
        if item_id not in self._planted:
            raise ItemNotPlanted(f"Item {item_id} is not planted", details={'item_id': item_id})
        self._planted.discard(item_id)

    def discard(self, item_id: int) -> Category:
        """Destroy an unplanted item and return its category."""
        category = self._require(item_id)
        if item_id in self._planted:
            raise CannotDiscardPlantedItem(
                f"Item {item_id} is planted and cannot be discarded", details={'item_id': item_id}
            )
        self._delete(item_id)
        return category

    def discard_many(self, item_ids: Iterable[int]) -> List[Category]:
        """Discard a batch; nothing is removed unless every id is discardable."""
        ids = list(item_ids)
        if not ids or len(ids) > MAX_BATCH_DISCARD:
            raise InvalidConfiguration(
                f"Batch discard must contain 1..{MAX_BATCH_DISCARD} items", details={'count': len(ids)}
            )
        if len(set(ids)) != len(ids):
            raise InvalidConfiguration("Batch discard contains duplicate item ids")
        for item_id in ids:
            self._require(item_id)
            if item_id in self._planted:
                raise CannotDiscardPlantedItem(
                    f"Item {item_id} is planted and cannot be discarded", details={'item_id': item_id}
                )
        return [self.discard(item_id) for item_id in ids]

    # ------------------------------------------------------------------
    # Integrity & persistence
    # ------------------------------------------------------------------
    def check_invariants(self) -> None:
        """Raise InventoryError if the bookkeeping is inconsistent."""
        problems = []
        if sum(self._per_category) != len(self._items):
            problems.append("category counts do not sum to total_count")
        if any(count > self.per_category_max for count in self._per_category):
            problems.append("a category exceeds per_category_max")
        if len(self._items) > self.global_max:
            problems.append("total_count exceeds global_max")
        if not self._planted <= set(self._items):
            problems.append("planted ids missing from inventory")
        if problems:
            raise InventoryError("Inventory bookkeeping is inconsistent", details={'problems': problems})

    def copy(self) -> "Inventory":
        clone = Inventory(
            self.owner,
            per_category_max=self.per_category_max,
            global_max=self.global_max,
            category_count=self.category_count,
        )
        clone._items = dict(self._items)
        clone._per_category = list(self._per_category)
        clone._planted = set(self._planted)
        return clone

    def snapshot(self) -> Dict[str, Any]:
        return {
            'owner': self.owner,
            'per_category_max': self.per_category_max,
            'global_max': self.global_max,
            'category_count': self.category_count,
            'items': [[item_id, category.name] for item_id, category in self._items.items()],
            'planted': sorted(self._planted),
        }

    @classmethod
    def from_snapshot(cls, data: Dict[str, Any]) -> "Inventory":
        inventory = cls(
            data['owner'],
            per_category_max=int(data.get('per_category_max', DEFAULT_PER_CATEGORY_MAX)),
            global_max=int(data.get('global_max', DEFAULT_GLOBAL_MAX)),
            category_count=int(data.get('category_count', CATEGORY_COUNT)),
        )
        for item_id, category in data.get('items', []):
            slot = inventory._slot(Category.parse(category))
            inventory._items[int(item_id)] = Category(slot)
            inventory._per_category[slot] += 1
        inventory._planted = {int(item_id) for item_id in data.get('planted', [])}
        inventory.check_invariants()
        return inventory

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _slot(self, category: Category) -> int:
        slot = int(Category.parse(category))
        if slot >= self.category_count:
            raise InvalidConfiguration(
                f"Category {category!r} is outside this inventory's {self.category_count} slots",
                details={'category': slot},
            )
        return slot

    def _require(self, item_id: int) -> Category:
        try:
            return self._items[item_id]
        except KeyError:
            raise ItemNotFound(f"Item {item_id} is not in the inventory", details={'item_id': item_id}) from None

    def _oldest_evictable(self, category: Category) -> Optional[int]:
        return next(
            (item_id for item_id, stored in self._items.items()
             if stored == category and item_id not in self._planted),
            None,
        )

    def _delete(self, item_id: int) -> None:
        category = self._items.pop(item_id)
        self._per_category[int(category)] -= 1
        self._planted.discard(item_id)
