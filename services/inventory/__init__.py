# -*- coding: utf-8 -*-
# ============================================================================ #
# SeedFarm Economy (SFE)                                                       #
# Copyright (c) 2025 MAX                                                       #
# Licensed under the MIT License                                               #
# ============================================================================ #
"""Inventory and progression."""

from services.inventory.inventory import Inventory
from services.inventory.models import Item
from services.inventory.progression import (
    LevelTable,
    ProgressionState,
    ProgressionTracker,
    UpgradeOutcome,
    upgrade_state,
)

__all__ = [
    "Inventory",
    "Item",
    "LevelTable",
    "ProgressionState",
    "ProgressionTracker",
    "UpgradeOutcome",
    "upgrade_state",
]
