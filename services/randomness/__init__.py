# -*- coding: utf-8 -*-
# ============================================================================ #
# SeedFarm Economy (SFE)                                                       #
# Copyright (c) 2025 MAX                                                       #
# Licensed under the MIT License                                               #
# ============================================================================ #
"""Randomness: probability tables, outcome resolution and the entropy gate."""

from services.randomness.entropy_quality import (
    EntropyQuality,
    EntropyScore,
    EntropySelection,
    OracleRandomness,
    fallback_entropy,
    score_entropy,
    select_base_entropy,
)
from services.randomness.probability_table import (
    NORMALIZATION,
    Category,
    ProbabilityTable,
    ProbabilityTableRegistry,
    TableEntry,
    enhanced_table,
    legacy_table,
    standard_table,
)
from services.randomness.resolver import Outcome, derive_subseed, resolve, resolve_batch, resolve_outcome

__all__ = [
    "NORMALIZATION",
    "Category",
    "EntropyQuality",
    "EntropyScore",
    "EntropySelection",
    "OracleRandomness",
    "Outcome",
    "ProbabilityTable",
    "ProbabilityTableRegistry",
    "TableEntry",
    "derive_subseed",
    "enhanced_table",
    "fallback_entropy",
    "legacy_table",
    "resolve",
    "resolve_batch",
    "resolve_outcome",
    "score_entropy",
    "select_base_entropy",
    "standard_table",
]
