# -*- coding: utf-8 -*-
# ============================================================================ #
# SeedFarm Economy (SFE) - Economy Constants                                   #
# Copyright (c) 2025 MAX                                                       #
# Licensed under the MIT License                                               #
# ============================================================================ #

"""
Economy Constants - Default values for rewards, halving, referrals and packs
All token amounts are integers in base units (6 decimals).
"""

TOKEN_DECIMALS = 6
TOKEN_UNIT = 10 ** TOKEN_DECIMALS

# ---------------------
# Emission & halving
# ---------------------

DEFAULT_BASE_RATE = 100                    # base units per second across the whole pool
DEFAULT_HALVING_INTERVAL = 6 * 24 * 60 * 60  # 6 days
MIN_HALVING_INTERVAL = 60 * 60             # 1 hour
MAX_HALVING_INTERVAL = 365 * 24 * 60 * 60  # 1 year

TOTAL_SUPPLY_CAP = 120_000_000 * TOKEN_UNIT
MIN_CLAIM_INTERVAL = 1

# grow power is quoted in thousandths in the base reward projection
BASE_REWARD_DIVISOR = 1000

# ---------------------
# Referral
# ---------------------

REFERRAL_LEVEL1_PERCENT = 10
REFERRAL_LEVEL2_PERCENT = 5
MAX_REFERRAL_DEPTH = 2

# ---------------------
# Packs
# ---------------------

SEED_PACK_COST = 300 * TOKEN_UNIT
MAX_PACK_QUANTITY = 100
MAX_BATCH_DISCARD = 100

# ---------------------
# Inventory
# ---------------------

# 16 categories * 100 per category covers the global cap exactly
DEFAULT_PER_CATEGORY_MAX = 100
DEFAULT_GLOBAL_MAX = 1600
