# -*- coding: utf-8 -*-
# ============================================================================ #
# SeedFarm Economy (SFE) - Random Outcome Resolver                             #
# Copyright (c) 2025 MAX                                                       #
# Licensed under the MIT License                                               #
# ============================================================================ #
"""Entropy to outcome resolution.

``derive_subseed`` turns one base entropy value into a decorrelated 64-bit
subseed per batch index; ``resolve_outcome`` maps a subseed onto a probability
table. Both are deterministic: the same entropy and index always produce the
same item, so replaying a pack can never re-roll it.
"""

from __future__ import annotations

import logging
from typing import List, NamedTuple

from services.economy.checked_math import U64_MAX, U8_MAX, require_u64
from services.exceptions import InvalidConfiguration
from services.randomness.probability_table import NORMALIZATION, Category, ProbabilityTable

logger = logging.getLogger("sfe.randomness.resolver")

# PCG-style LCG step
LCG_MULTIPLIER = 6364136223846793005
LCG_INCREMENT = 1442695040888963407
# 2**64 / golden ratio
GOLDEN_GAMMA = 0x9E3779B97F4A7C15
# MurmurHash3 fmix64 finaliser
FMIX_C1 = 0xFF51AFD7ED558CCD
FMIX_C2 = 0xC4CEB9FE1A85EC53

ZERO_SUBSEED_FALLBACK = GOLDEN_GAMMA

MAX_BATCH_SIZE = U8_MAX + 1


class Outcome(NamedTuple):
    category: Category
    power_value: int


def derive_subseed(base_entropy: int, index: int) -> int:
    """Mix ``base_entropy`` with a batch ``index`` into a non-zero u64.

    Every round is a bijection on 64-bit values, so distinct indices under the
    same base entropy never collide before the zero remap.
    """
    require_u64('base_entropy', base_entropy)
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index <= U8_MAX:
        raise InvalidConfiguration(f"Batch index {index!r} must be within 0..{U8_MAX}", details={'index': index})

    x = (base_entropy + index) & U64_MAX
    x = (x * LCG_MULTIPLIER + LCG_INCREMENT) & U64_MAX
    x ^= x >> 32
    x = (x * GOLDEN_GAMMA) & U64_MAX
    x ^= x >> 32

    x ^= x >> 33
    x = (x * FMIX_C1) & U64_MAX
    x ^= x >> 33
    x = (x * FMIX_C2) & U64_MAX
    x ^= x >> 33

    if x == 0:
        return ZERO_SUBSEED_FALLBACK
    return x


def resolve_outcome(subseed: int, table: ProbabilityTable) -> Outcome:
    """Map a subseed onto the first entry whose threshold exceeds it."""
    if not table.entries:
        raise InvalidConfiguration("Cannot resolve against an empty probability table")

    normalized = subseed % NORMALIZATION
    for entry in table.entries:
        if normalized < entry.threshold:
            return Outcome(entry.category, entry.power_value)

    last = table.entries[-1]
    logger.warning(
        "Value %d matched no threshold in table '%s' v%d, using last category %s",
        normalized, table.name, table.version, last.category.name,
    )
    return Outcome(last.category, last.power_value)


def resolve(entropy: int, batch_index: int, table: ProbabilityTable) -> Outcome:
    """Resolve the item at ``batch_index`` of a batch opened with ``entropy``."""
    return resolve_outcome(derive_subseed(entropy, batch_index), table)


def resolve_batch(entropy: int, quantity: int, table: ProbabilityTable) -> List[Outcome]:
    """Resolve ``quantity`` items from one base entropy value."""
    if not 1 <= quantity <= MAX_BATCH_SIZE:
        raise InvalidConfiguration(
            f"Batch quantity must be within 1..{MAX_BATCH_SIZE}", details={'quantity': quantity}
        )
    return [resolve(entropy, index, table) for index in range(quantity)]
