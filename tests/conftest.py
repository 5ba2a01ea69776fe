# -*- coding: utf-8 -*-
# ============================================================================ #
# SeedFarm Economy (SFE) - Pytest Configuration & Fixtures                     #
# Copyright (c) 2025 MAX                                                       #
# Licensed under the MIT License                                               #
# ============================================================================ #
"""
Global pytest configuration and fixtures for all test suites.
"""

import os
import sys
from pathlib import Path

import pytest

# Add project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

# Test environment setup
os.environ["TESTING"] = "true"

from services.config.economy_config_service import reset_economy_config_service  # noqa: E402
from services.economy.models import GlobalEconomyState, Participant  # noqa: E402
from services.engine.economy_service import reset_economy_service  # noqa: E402
from services.infrastructure.event_manager import reset_event_manager  # noqa: E402
from services.randomness.probability_table import standard_table  # noqa: E402
from utils.observability import metrics  # noqa: E402

LAUNCH_TIME = 1_700_000_000
HOUR = 3600
DAY = 24 * HOUR


@pytest.fixture(autouse=True)
def isolated_economy(tmp_path, monkeypatch):
    """Point the config service at an empty temp dir and reset all singletons."""
    monkeypatch.setenv("SFE_ECONOMY_CONFIG", str(tmp_path / "economy.json"))
    for name in ("SFE_BASE_RATE", "SFE_HALVING_INTERVAL", "SFE_FRESHNESS_WINDOW", "SFE_MIN_ENTROPY_SCORE"):
        monkeypatch.delenv(name, raising=False)
    reset_economy_config_service()
    reset_economy_service()
    reset_event_manager()
    metrics.reset()
    yield
    reset_economy_config_service()
    reset_economy_service()
    reset_event_manager()


@pytest.fixture
def launch_time():
    return LAUNCH_TIME


@pytest.fixture
def global_state():
    """Economy launched at LAUNCH_TIME with 1000 total power."""
    return GlobalEconomyState(
        total_power=1000,
        rate=100,
        next_halving_time=LAUNCH_TIME + 6 * DAY,
        halving_interval=6 * DAY,
    )


@pytest.fixture
def referrer_chain():
    """Three participants: grandparent (2) <- parent (3) <- claimant (4)."""
    grandparent = Participant(participant_id=2, power=0, last_accrual_time=LAUNCH_TIME)
    parent = Participant(participant_id=3, power=0, last_accrual_time=LAUNCH_TIME, referrer_l1=2)
    claimant = Participant(
        participant_id=4, power=100, last_accrual_time=LAUNCH_TIME, referrer_l1=3, referrer_l2=2,
    )
    return claimant, parent, grandparent


@pytest.fixture
def table():
    return standard_table()


@pytest.fixture
def good_entropy_bytes():
    """32 distinct bytes with exactly four bits set each (perfect bit balance)."""
    return bytes([value for value in range(256) if bin(value).count("1") == 4][:32])


# Markers for test categorization
pytestmark = [
    pytest.mark.filterwarnings("ignore::DeprecationWarning"),
]
