# -*- coding: utf-8 -*-
# ============================================================================ #
# SeedFarm Economy (SFE) - Reward Accrual Engine                               #
# Copyright (c) 2025 MAX                                                       #
# Licensed under the MIT License                                               #
# ============================================================================ #

"""
Reward Accrual Engine - halving-aware proportional emission

A participant earns ``power * rate * elapsed / global_power`` base units for
every second between their last accrual and ``now``. The emission rate halves
(floor division by two) every ``halving_interval`` seconds, so the elapsed
window is walked in periods that never straddle a halving boundary.

Everything here is a pure function: time and state are explicit arguments,
nothing is read from module globals and nothing is mutated. All division
truncates and every ledger step is checked; the rate-halving shift is the only
intentional loss of precision.
"""

from __future__ import annotations

import logging
from typing import Tuple

from services.economy.checked_math import (
    checked_add,
    checked_mul,
    require_timestamp,
    require_u64,
)
from services.economy.constants import BASE_REWARD_DIVISOR, MIN_CLAIM_INTERVAL
from services.economy.models import GlobalEconomyState, Participant
from services.exceptions import (
    InvalidConfiguration,
    NoRewardAvailable,
    SupplyCapExceeded,
)

logger = logging.getLogger('sfe.economy.rewards')


def _halvings_passed(moment: int, next_halving_time: int, halving_interval: int) -> int:
    """Number of halving boundaries at or before ``moment``."""
    if moment < next_halving_time:
        return 0
    return (moment - next_halving_time) // halving_interval + 1


def check_and_apply_halving(now: int, next_halving_time: int, rate: int,
                            halving_interval: int) -> Tuple[bool, int, int]:
    """Catch the emission schedule up to ``now``.

    Returns:
        ``(applied, new_rate, new_next_halving_time)``. When no boundary has
        been reached the inputs are returned unchanged with ``applied=False``.
    """
    if halving_interval <= 0:
        raise InvalidConfiguration(
            "halving_interval must be positive", details={'halving_interval': halving_interval}
        )
    passed = _halvings_passed(now, next_halving_time, halving_interval)
    if passed == 0:
        return False, rate, next_halving_time

    new_rate = rate >> passed
    new_next = next_halving_time + passed * halving_interval
    logger.debug("Applied %d halving(s): rate %d -> %d, next halving at %d", passed, rate, new_rate, new_next)
    return True, new_rate, new_next


def accrue(participant_power: int, global_power: int, rate: int, last_time: int, now: int,
           next_halving_time: int, halving_interval: int) -> int:
    """Compute the reward earned between ``last_time`` and ``now``.

    Each period ``[start, end)`` is bounded by the next halving boundary and
    contributes ``floor(participant_power * rate * (end - start) / global_power)``.
    The product is formed in an unbounded intermediate; only the accumulated
    total must fit in u64.

    Returns:
        The reward in base units, ``0`` when there is nothing to accrue.

    Raises:
        CalculationOverflow: If the accumulated reward leaves the u64 range.
        InvalidConfiguration: For malformed inputs or a non-positive halving interval.
    """
    require_u64('participant_power', participant_power)
    require_u64('global_power', global_power)
    require_u64('rate', rate)
    require_timestamp('last_time', last_time)
    require_timestamp('now', now)
    require_timestamp('next_halving_time', next_halving_time)

    if global_power == 0 or participant_power == 0 or rate == 0 or now <= last_time:
        return 0

    if halving_interval <= 0:
        raise InvalidConfiguration(
            "halving_interval must be positive", details={'halving_interval': halving_interval}
        )

    start = last_time
    current_rate = rate
    boundary = next_halving_time

    # Halvings that already happened before the window opened
    passed = _halvings_passed(start, boundary, halving_interval)
    if passed:
        current_rate >>= passed
        boundary += passed * halving_interval

    total = 0
    while start < now and current_rate > 0:
        end = min(now, boundary)
        period_reward = participant_power * current_rate * (end - start) // global_power
        total = checked_add(total, period_reward)

        if end == boundary and now > boundary:
            current_rate //= 2
            boundary += halving_interval
        start = end

    return total


def accrue_for(participant: Participant, state: GlobalEconomyState, now: int) -> int:
    """Convenience wrapper around :func:`accrue` for model objects."""
    return accrue(
        participant.power,
        state.total_power,
        state.rate,
        participant.last_accrual_time,
        now,
        state.next_halving_time,
        state.halving_interval,
    )


def current_emission(state: GlobalEconomyState, now: int) -> int:
    """Effective emission rate at ``now`` without committing the halving."""
    _, rate, _ = check_and_apply_halving(now, state.next_halving_time, state.rate, state.halving_interval)
    return rate


def calculate_base_reward(elapsed: int, power: int, rate: int) -> int:
    """Un-shared reward ``elapsed * power * rate / 1000`` for projections."""
    if elapsed <= 0:
        return 0
    return checked_mul(checked_mul(elapsed, power), rate) // BASE_REWARD_DIVISOR


def validate_claim_interval(last_time: int, now: int, min_interval: int = MIN_CLAIM_INTERVAL) -> int:
    """Ensure enough time passed since the last claim.

    Returns:
        The elapsed seconds.
    """
    if now < last_time:
        raise InvalidConfiguration(
            "Claim timestamp is earlier than the last accrual",
            details={'last_time': last_time, 'now': now},
        )
    elapsed = now - last_time
    if elapsed < min_interval:
        raise NoRewardAvailable(
            f"Claim interval not reached ({elapsed}s < {min_interval}s)",
            details={'elapsed': elapsed, 'min_interval': min_interval},
        )
    return elapsed


def validate_supply_cap(state: GlobalEconomyState, amount: int) -> int:
    """Return the new minted supply if ``amount`` fits under the cap."""
    new_minted = checked_add(state.supply_minted, amount)
    if new_minted > state.supply_cap:
        raise SupplyCapExceeded(
            "Minting would exceed the supply cap",
            details={
                'supply_minted': state.supply_minted,
                'amount': amount,
                'supply_cap': state.supply_cap,
            },
        )
    return new_minted
