# -*- coding: utf-8 -*-
# ============================================================================ #
# SeedFarm Economy (SFE)                                                       #
# Copyright (c) 2025 MAX                                                       #
# Licensed under the MIT License                                               #
# ============================================================================ #
"""Economy core: reward accrual, halving schedule and referral distribution."""

from services.economy.models import GlobalEconomyState, Participant
from services.economy.referral import ReferralShares, accumulate_pending, link_referrer, split
from services.economy.rewards import (
    accrue,
    accrue_for,
    calculate_base_reward,
    check_and_apply_halving,
    current_emission,
    validate_claim_interval,
    validate_supply_cap,
)

__all__ = [
    "GlobalEconomyState",
    "Participant",
    "ReferralShares",
    "accrue",
    "accrue_for",
    "accumulate_pending",
    "calculate_base_reward",
    "check_and_apply_halving",
    "current_emission",
    "link_referrer",
    "split",
    "validate_claim_interval",
    "validate_supply_cap",
]
