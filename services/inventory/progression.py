# -*- coding: utf-8 -*-
# ============================================================================ #
# SeedFarm Economy (SFE) - Progression Tracker                                 #
# Copyright (c) 2025 MAX                                                       #
# Licensed under the MIT License                                               #
# ============================================================================ #

"""Purchase-driven progression.

The cumulative purchase counter decides the farm level: the level is the
highest one whose purchase threshold is at or below the counter, and the
planting capacity is looked up from the level. Levels never go down, and a
counter that jumps across several thresholds lands directly on the final
level.
"""

from __future__ import annotations

import logging
from bisect import bisect_right
from dataclasses import dataclass, replace
from typing import Any, Dict, NamedTuple, Optional, Sequence, Tuple

from services.economy.checked_math import U8_MAX, U32_MAX, require_u32
from services.exceptions import CalculationOverflow, InvalidConfiguration

logger = logging.getLogger('sfe.inventory.progression')

MAX_LEVEL = 20

DEFAULT_THRESHOLDS = (0, 30, 100, 300, 500)
DEFAULT_CAPACITIES = (4, 6, 8, 10, 12)
DEFAULT_LEVEL_NAMES = (
    "Starter Farm",
    "Growing Farm",
    "Expanding Farm",
    "Advanced Farm",
    "Master Farm",
)


@dataclass(frozen=True)
class LevelTable:
    """Level thresholds, capacities and display names (index 0 is level 1)."""

    thresholds: Tuple[int, ...] = DEFAULT_THRESHOLDS
    capacities: Tuple[int, ...] = DEFAULT_CAPACITIES
    names: Tuple[str, ...] = DEFAULT_LEVEL_NAMES

    def __post_init__(self) -> None:
        object.__setattr__(self, 'thresholds', tuple(self.thresholds))
        object.__setattr__(self, 'capacities', tuple(self.capacities))
        object.__setattr__(self, 'names', tuple(self.names))
        self.validate()

    @classmethod
    def from_config(cls, data: Dict[str, Any]) -> "LevelTable":
        try:
            thresholds = [int(value) for value in data.get('thresholds', DEFAULT_THRESHOLDS)]
            capacities = [int(value) for value in data.get('capacities', DEFAULT_CAPACITIES)]
        except (TypeError, ValueError) as e:
            raise InvalidConfiguration(f"Malformed progression config: {e}", details={'progression': data}) from e
        names = data.get('names') or [f"Level {index + 1}" for index in range(len(thresholds))]
        return cls(tuple(thresholds), tuple(capacities), tuple(str(name) for name in names))

    def validate(self) -> None:
        count = len(self.thresholds)
        if not 1 <= count <= MAX_LEVEL:
            raise InvalidConfiguration(f"Level table must have 1..{MAX_LEVEL} levels", details={'levels': count})
        if len(self.capacities) != count or len(self.names) != count:
            raise InvalidConfiguration(
                "thresholds, capacities and names must have the same length",
                details={
                    'thresholds': count,
                    'capacities': len(self.capacities),
                    'names': len(self.names),
                },
            )
        if self.thresholds[0] != 0:
            raise InvalidConfiguration("The first level threshold must be 0", details={'threshold': self.thresholds[0]})
        if self.thresholds[-1] > U32_MAX:
            raise InvalidConfiguration("Level thresholds must fit in u32")
        if self.capacities[0] <= 0 or self.capacities[-1] > U8_MAX:
            raise InvalidConfiguration(f"Capacities must be within 1..{U8_MAX}")
        for previous, current in zip(self.thresholds, self.thresholds[1:]):
            if current <= previous:
                raise InvalidConfiguration("Level thresholds must be strictly ascending")
        for previous, current in zip(self.capacities, self.capacities[1:]):
            if current <= previous:
                raise InvalidConfiguration("Level capacities must be strictly ascending")

    @property
    def max_level(self) -> int:
        return len(self.thresholds)

    def level_for(self, cumulative_count: int) -> int:
        """Highest level whose threshold is at or below ``cumulative_count``."""
        return bisect_right(self.thresholds, cumulative_count)

    def capacity_for(self, level: int) -> int:
        return self.capacities[self._index(level)]

    def name_for(self, level: int) -> str:
        return self.names[self._index(level)]

    def next_threshold(self, level: int) -> Optional[int]:
        """Purchases needed for the level after ``level``, ``None`` at max level."""
        index = self._index(level)
        if index + 1 >= len(self.thresholds):
            return None
        return self.thresholds[index + 1]

    def _index(self, level: int) -> int:
        if not 1 <= level <= self.max_level:
            raise InvalidConfiguration(f"Level {level} is out of range 1..{self.max_level}", details={'level': level})
        return level - 1


@dataclass(frozen=True)
class ProgressionState:
    level: int = 1
    capacity: int = DEFAULT_CAPACITIES[0]
    cumulative_purchase_count: int = 0

    @classmethod
    def initial(cls, table: LevelTable) -> "ProgressionState":
        return cls(level=1, capacity=table.capacity_for(1), cumulative_purchase_count=0)

    def to_dict(self) -> Dict[str, int]:
        return {
            'level': self.level,
            'capacity': self.capacity,
            'cumulative_purchase_count': self.cumulative_purchase_count,
        }


class UpgradeOutcome(NamedTuple):
    level: int
    capacity: int
    upgraded: bool


def upgrade_state(state: ProgressionState, table: LevelTable,
                  cumulative_count: int) -> Tuple[ProgressionState, UpgradeOutcome]:
    """Pure level recomputation for a new cumulative purchase count."""
    require_u32('cumulative_count', cumulative_count)

    count = max(state.cumulative_purchase_count, cumulative_count)
    target = table.level_for(count)
    if target <= state.level:
        new_state = replace(state, cumulative_purchase_count=count)
        return new_state, UpgradeOutcome(state.level, state.capacity, False)

    new_state = ProgressionState(
        level=target,
        capacity=table.capacity_for(target),
        cumulative_purchase_count=count,
    )
    logger.info(
        "Progression upgraded from level %d to %d (%s, capacity %d)",
        state.level, target, table.name_for(target), new_state.capacity,
    )
    return new_state, UpgradeOutcome(new_state.level, new_state.capacity, True)


class ProgressionTracker:
    """Tracks one owner's progression against a level table."""

    def __init__(self, level_table: Optional[LevelTable] = None, state: Optional[ProgressionState] = None):
        self.level_table = level_table or LevelTable()
        self._state = state or ProgressionState.initial(self.level_table)

    @property
    def state(self) -> ProgressionState:
        return self._state

    @property
    def level_name(self) -> str:
        return self.level_table.name_for(self._state.level)

    def auto_upgrade(self, cumulative_count: int) -> UpgradeOutcome:
        """Upgrade to the level reached by ``cumulative_count``; never downgrades."""
        self._state, outcome = upgrade_state(self._state, self.level_table, cumulative_count)
        return outcome

    def record_purchases(self, quantity: int) -> UpgradeOutcome:
        """Add ``quantity`` purchases to the counter and auto-upgrade."""
        if quantity < 0:
            raise InvalidConfiguration("Purchase quantity cannot be negative", details={'quantity': quantity})
        new_count = self._state.cumulative_purchase_count + quantity
        if new_count > U32_MAX:
            raise CalculationOverflow(
                "Cumulative purchase count exceeds u32",
                details={'count': self._state.cumulative_purchase_count, 'quantity': quantity},
            )
        return self.auto_upgrade(new_count)

    def purchases_to_next_level(self) -> Optional[int]:
        threshold = self.level_table.next_threshold(self._state.level)
        if threshold is None:
            return None
        return max(0, threshold - self._state.cumulative_purchase_count)
