# -*- coding: utf-8 -*-
# ============================================================================ #
# SeedFarm Economy (SFE) - Probability Tables                                  #
# Copyright (c) 2025 MAX                                                       #
# Licensed under the MIT License                                               #
# ============================================================================ #

"""Probability tables for pack openings.

A table is an ordered list of ``(category, power_value, cumulative_threshold)``
entries. Thresholds are strictly ascending and the final threshold equals
:data:`NORMALIZATION`, so a normalized random value in ``[0, NORMALIZATION)``
always lands in exactly one entry.

Tables are injected configuration. They are validated on load and replaced at
runtime through :class:`ProbabilityTableRegistry`, which keeps every published
version so that a pack bought under version ``N`` still resolves against
version ``N``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from threading import Lock
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from services.economy.checked_math import U64_MAX
from services.exceptions import InvalidConfiguration

logger = logging.getLogger("sfe.randomness.table")

NORMALIZATION = 10_000
MAX_TABLE_ENTRIES = 16


class Category(IntEnum):
    """Item categories. Values double as inventory slot indices."""

    SEED_1 = 0
    SEED_2 = 1
    SEED_3 = 2
    SEED_4 = 3
    SEED_5 = 4
    SEED_6 = 5
    SEED_7 = 6
    SEED_8 = 7
    SEED_9 = 8
    SEED_10 = 9
    SEED_11 = 10
    SEED_12 = 11
    SEED_13 = 12
    SEED_14 = 13
    SEED_15 = 14
    SEED_16 = 15

    @classmethod
    def from_index(cls, index: int) -> "Category":
        """Bounds-checked lookup; an out-of-range index is a hard failure."""
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(cls):
            raise InvalidConfiguration(
                f"Category index {index!r} is out of range",
                details={'index': index, 'category_count': len(cls)},
            )
        return cls(index)

    @classmethod
    def parse(cls, value: Any) -> "Category":
        """Accept a Category, an index or a member name such as ``"SEED_3"``."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.upper()]
            except KeyError:
                raise InvalidConfiguration(f"Unknown category {value!r}", details={'category': value}) from None
        return cls.from_index(value)


CATEGORY_COUNT = len(Category)


@dataclass(frozen=True)
class TableEntry:
    category: Category
    power_value: int
    threshold: int
    revealed: bool = True


@dataclass(frozen=True)
class ProbabilityTable:
    """Versioned cumulative-threshold table."""

    version: int
    name: str
    entries: Tuple[TableEntry, ...] = field(default_factory=tuple)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def from_lists(cls, version: int, name: str, powers: Sequence[int], thresholds: Sequence[int],
                   *, revealed: Optional[Sequence[bool]] = None) -> "ProbabilityTable":
        """Build and validate a table from parallel power/threshold lists."""
        if len(powers) != len(thresholds):
            raise InvalidConfiguration(
                "powers and thresholds must have the same length",
                details={'powers': len(powers), 'thresholds': len(thresholds)},
            )
        if revealed is None:
            revealed = [True] * len(powers)
        elif len(revealed) != len(powers):
            raise InvalidConfiguration("revealed flags must match the entry count")
        if len(powers) > MAX_TABLE_ENTRIES:
            raise InvalidConfiguration(
                f"Probability table has {len(powers)} entries (max {MAX_TABLE_ENTRIES})",
                details={'entries': len(powers)},
            )
        entries = tuple(
            TableEntry(Category.from_index(index), int(power), int(threshold), bool(flag))
            for index, (power, threshold, flag) in enumerate(zip(powers, thresholds, revealed))
        )
        table = cls(version=version, name=name, entries=entries)
        table.validate()
        return table

    @classmethod
    def from_percentages(cls, version: int, name: str, powers: Sequence[int],
                         percentages: Sequence[int]) -> "ProbabilityTable":
        """Build a table from per-entry probabilities in basis points."""
        thresholds: List[int] = []
        running = 0
        for value in percentages:
            running += int(value)
            thresholds.append(running)
        return cls.from_lists(version, name, powers, thresholds)

    @classmethod
    def load(cls, data: Dict[str, Any]) -> "ProbabilityTable":
        """Build and validate a table from its configuration dictionary.

        Accepts either an ``entries`` list of ``{"category", "power", "threshold"}``
        mappings or parallel ``powers``/``thresholds`` lists.
        """
        if not isinstance(data, dict):
            raise InvalidConfiguration("Probability table config must be a mapping")
        try:
            version = int(data.get('version', 1))
            name = str(data.get('name', 'custom'))
            if 'entries' in data:
                raw_entries = data['entries']
                if not isinstance(raw_entries, list):
                    raise InvalidConfiguration("Probability table entries must be a list")
                if len(raw_entries) > MAX_TABLE_ENTRIES:
                    raise InvalidConfiguration(
                        f"Probability table has {len(raw_entries)} entries (max {MAX_TABLE_ENTRIES})",
                        details={'entries': len(raw_entries)},
                    )
                entries = tuple(
                    TableEntry(
                        category=Category.parse(raw.get('category', index)),
                        power_value=int(raw['power']),
                        threshold=int(raw['threshold']),
                        revealed=bool(raw.get('revealed', True)),
                    )
                    for index, raw in enumerate(raw_entries)
                )
                table = cls(version=version, name=name, entries=entries)
                table.validate()
                return table
            return cls.from_lists(
                version, name, list(data['powers']), list(data['thresholds']),
                revealed=data.get('revealed'),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise InvalidConfiguration(f"Malformed probability table: {e}", details={'table': data}) from e

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------
    def validate(self) -> None:
        """Raise InvalidConfiguration unless the table is well formed."""
        if self.version < 1:
            raise InvalidConfiguration("Table version must be at least 1", details={'version': self.version})
        count = len(self.entries)
        if count == 0 or count > MAX_TABLE_ENTRIES:
            raise InvalidConfiguration(
                f"Probability table must have 1..{MAX_TABLE_ENTRIES} entries",
                details={'entries': count},
            )

        seen = set()
        previous = 0
        for index, entry in enumerate(self.entries):
            if entry.category in seen:
                raise InvalidConfiguration(
                    f"Duplicate category {entry.category.name}", details={'index': index}
                )
            seen.add(entry.category)
            if not 0 <= entry.power_value <= U64_MAX:
                raise InvalidConfiguration("power_value must fit in u64", details={'index': index})
            if entry.threshold <= previous:
                raise InvalidConfiguration(
                    "Thresholds must be strictly ascending and positive",
                    details={'index': index, 'threshold': entry.threshold, 'previous': previous},
                )
            previous = entry.threshold

        if previous != NORMALIZATION:
            raise InvalidConfiguration(
                f"Final threshold must equal {NORMALIZATION}",
                details={'final_threshold': previous},
            )

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def thresholds(self) -> Tuple[int, ...]:
        return tuple(entry.threshold for entry in self.entries)

    @property
    def categories(self) -> Tuple[Category, ...]:
        return tuple(entry.category for entry in self.entries)

    def percentages(self) -> List[int]:
        """Per-entry probabilities in basis points."""
        result = []
        previous = 0
        for entry in self.entries:
            result.append(entry.threshold - previous)
            previous = entry.threshold
        return result

    def expected_value(self) -> int:
        """Expected power of one draw, floored to an integer."""
        return sum(
            entry.power_value * width for entry, width in zip(self.entries, self.percentages())
        ) // NORMALIZATION

    def public_view(self) -> List[Dict[str, Any]]:
        """Entries with the power of unrevealed categories hidden."""
        return [
            {
                'category': entry.category.name,
                'power': entry.power_value if entry.revealed else None,
                'probability_bp': width,
                'revealed': entry.revealed,
            }
            for entry, width in zip(self.entries, self.percentages())
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'version': self.version,
            'name': self.name,
            'entries': [
                {
                    'category': entry.category.name,
                    'power': entry.power_value,
                    'threshold': entry.threshold,
                    'revealed': entry.revealed,
                }
                for entry in self.entries
            ],
        }


# ---------------------
# Presets
# ---------------------

STANDARD_POWERS = (100, 180, 420, 720, 1000, 5000, 15000, 30000)
STANDARD_THRESHOLDS = (3000, 5500, 7200, 8300, 9000, 9400, 9700, 10000)

ENHANCED_POWERS = (
    100, 180, 420, 720, 1000, 5000, 15000, 30000,
    60000, 120000, 250000, 500000, 1000000, 2000000, 4000000, 10000000,
)
ENHANCED_THRESHOLDS = (
    2500, 4500, 6200, 7500, 8400, 9000, 9350, 9550,
    9700, 9800, 9870, 9920, 9955, 9975, 9990, 10000,
)

LEGACY_POWERS = (100, 180, 420, 720, 1000, 5000, 15000, 30000, 60000)
LEGACY_THRESHOLDS = (4222, 6666, 7999, 8832, 9388, 9721, 9854, 9943, 10000)


def standard_table(version: int = 1) -> ProbabilityTable:
    """Default 8-category table."""
    return ProbabilityTable.from_lists(version, "standard", STANDARD_POWERS, STANDARD_THRESHOLDS)


def enhanced_table(version: int = 1) -> ProbabilityTable:
    """Full 16-category table."""
    return ProbabilityTable.from_lists(version, "enhanced", ENHANCED_POWERS, ENHANCED_THRESHOLDS)


def legacy_table(version: int = 1) -> ProbabilityTable:
    """9-category launch table."""
    return ProbabilityTable.from_lists(version, "legacy", LEGACY_POWERS, LEGACY_THRESHOLDS)


# ---------------------
# Versioned registry
# ---------------------

class ProbabilityTableRegistry:
    """Holds the active table and every previously published version."""

    def __init__(self, initial: Optional[ProbabilityTable] = None):
        self._lock = Lock()
        self._tables: Dict[int, ProbabilityTable] = {}
        self._current_version: Optional[int] = None
        if initial is not None:
            self.publish(initial)

    @property
    def current(self) -> ProbabilityTable:
        with self._lock:
            if self._current_version is None:
                raise InvalidConfiguration("No probability table has been published")
            return self._tables[self._current_version]

    def publish(self, table: ProbabilityTable) -> ProbabilityTable:
        """Validate ``table`` and make it the active version."""
        table.validate()
        with self._lock:
            if self._current_version is not None and table.version <= self._current_version:
                raise InvalidConfiguration(
                    "Probability table version must increase",
                    details={'current_version': self._current_version, 'new_version': table.version},
                )
            self._tables[table.version] = table
            self._current_version = table.version
        logger.info("Published probability table '%s' version %d", table.name, table.version)
        return table

    def get(self, version: int) -> ProbabilityTable:
        with self._lock:
            try:
                return self._tables[version]
            except KeyError:
                raise InvalidConfiguration(
                    f"Unknown probability table version {version}", details={'version': version}
                ) from None

    def versions(self) -> Iterable[int]:
        with self._lock:
            return sorted(self._tables)

    def powers_for(self, category: Category) -> FrozenSet[int]:
        """Every power value ``category`` has had in any published version."""
        with self._lock:
            return frozenset(
                entry.power_value
                for table in self._tables.values()
                for entry in table.entries
                if entry.category == category
            )
