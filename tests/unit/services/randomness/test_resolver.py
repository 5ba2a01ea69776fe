# -*- coding: utf-8 -*-
"""
Unit tests for subseed derivation and outcome resolution.
"""

import logging
import random
from collections import Counter

import pytest

from services.economy.checked_math import U64_MAX
from services.exceptions import InvalidConfiguration
from services.randomness.probability_table import NORMALIZATION, Category, ProbabilityTable, TableEntry
from services.randomness.resolver import (
    MAX_BATCH_SIZE,
    ZERO_SUBSEED_FALLBACK,
    derive_subseed,
    resolve,
    resolve_batch,
    resolve_outcome,
)

SIX_WAY_POWERS = [100, 200, 400, 800, 1600, 3200]
SIX_WAY_THRESHOLDS = [4300, 6800, 8200, 9100, 9700, 10000]


@pytest.fixture
def six_way():
    return ProbabilityTable.from_lists(1, "six-way", SIX_WAY_POWERS, SIX_WAY_THRESHOLDS)


class TestResolveOutcome:
    """Tests for threshold lookup."""

    @pytest.mark.parametrize("subseed,category", [
        (0, Category.SEED_1),
        (4299, Category.SEED_1),
        (4300, Category.SEED_2),
        (6799, Category.SEED_2),
        (6800, Category.SEED_3),
        (9699, Category.SEED_5),
        (9700, Category.SEED_6),
        (9999, Category.SEED_6),
        (NORMALIZATION + 4300, Category.SEED_2),
    ])
    def test_boundaries(self, six_way, subseed, category):
        outcome = resolve_outcome(subseed, six_way)
        assert outcome.category == category
        assert outcome.power_value == SIX_WAY_POWERS[category]

    def test_malformed_table_falls_back_to_last_category(self, caplog):
        malformed = ProbabilityTable(
            version=1,
            name="short",
            entries=(TableEntry(Category.SEED_1, 10, 3000), TableEntry(Category.SEED_2, 20, 6000)),
        )
        with caplog.at_level(logging.WARNING, logger="sfe.randomness.resolver"):
            outcome = resolve_outcome(7000, malformed)
        assert outcome.category == Category.SEED_2
        assert "matched no threshold" in caplog.text

    def test_empty_table(self):
        with pytest.raises(InvalidConfiguration):
            resolve_outcome(1, ProbabilityTable(version=1, name="empty"))


class TestDeriveSubseed:
    """Tests for per-index subseed mixing."""

    def test_deterministic(self):
        assert derive_subseed(123456789, 7) == derive_subseed(123456789, 7)

    def test_batch_indices_never_collide(self):
        for base in (1, 42, U64_MAX, 0x0123456789ABCDEF):
            subseeds = {derive_subseed(base, index) for index in range(MAX_BATCH_SIZE)}
            assert len(subseeds) == MAX_BATCH_SIZE

    def test_distinct_over_many_bases(self):
        rng = random.Random(1234)
        bases = {rng.getrandbits(64) for _ in range(10_000)}
        subseeds = {derive_subseed(base, 0) for base in bases}
        assert len(subseeds) == len(bases)

    def test_never_zero(self):
        rng = random.Random(99)
        for _ in range(2_000):
            assert derive_subseed(rng.getrandbits(64), rng.randrange(MAX_BATCH_SIZE)) != 0
        assert ZERO_SUBSEED_FALLBACK != 0

    def test_adjacent_indices_decorrelate(self):
        first = derive_subseed(1000, 0)
        second = derive_subseed(1000, 1)
        assert bin(first ^ second).count("1") > 10

    @pytest.mark.parametrize("index", [-1, MAX_BATCH_SIZE, True, 1.5])
    def test_index_out_of_range(self, index):
        with pytest.raises(InvalidConfiguration):
            derive_subseed(1, index)

    def test_entropy_must_be_u64(self):
        with pytest.raises(InvalidConfiguration):
            derive_subseed(U64_MAX + 1, 0)


class TestDistribution:
    """Resolved frequencies track the table percentages."""

    def test_frequencies_within_tolerance(self, six_way):
        rng = random.Random(20240601)
        samples = 100_000
        counts = Counter(resolve(rng.getrandbits(64), 0, six_way).category for _ in range(samples))

        for entry, width in zip(six_way.entries, six_way.percentages()):
            expected = width / NORMALIZATION
            observed = counts[entry.category] / samples
            assert abs(observed - expected) < 0.01, entry.category


class TestResolveBatch:
    """Tests for resolving whole packs."""

    def test_batch_matches_individual_resolution(self, table):
        batch = resolve_batch(987654321, 10, table)
        assert batch == [resolve(987654321, index, table) for index in range(10)]

    def test_replay_is_identical(self, table):
        assert resolve_batch(555, 50, table) == resolve_batch(555, 50, table)

    @pytest.mark.parametrize("quantity", [0, MAX_BATCH_SIZE + 1])
    def test_quantity_bounds(self, table, quantity):
        with pytest.raises(InvalidConfiguration):
            resolve_batch(1, quantity, table)
