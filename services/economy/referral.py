# -*- coding: utf-8 -*-
# ============================================================================ #
# SeedFarm Economy (SFE) - Referral Distributor                                #
# Copyright (c) 2025 MAX                                                       #
# Licensed under the MIT License                                               #
# ============================================================================ #
"""Two-level referral commission split.

The referral chain is capped at two levels by the shape of
:class:`~services.economy.models.Participant` itself, so there is no graph to
walk here. Shares are computed with integer math and the claimant always
receives the remainder, which keeps ``claimant + l1 + l2 == base_reward``
exact for every branch.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import NamedTuple

from services.economy.checked_math import checked_add, require_u64
from services.economy.constants import REFERRAL_LEVEL1_PERCENT, REFERRAL_LEVEL2_PERCENT
from services.economy.models import Participant
from services.exceptions import InvalidConfiguration, InvalidReferralTopology

logger = logging.getLogger('sfe.economy.referral')


class ReferralShares(NamedTuple):
    claimant: int
    level1: int
    level2: int


def validate_percentages(level1_percent: int, level2_percent: int) -> None:
    """Raise InvalidConfiguration for percentages outside 0..100 or summing above 100."""
    for name, value in (('level1_percent', level1_percent), ('level2_percent', level2_percent)):
        if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 100:
            raise InvalidConfiguration(f"{name} must be an integer between 0 and 100", details={name: value})
    if level1_percent + level2_percent > 100:
        raise InvalidConfiguration(
            "Referral percentages exceed 100%",
            details={'level1_percent': level1_percent, 'level2_percent': level2_percent},
        )


def split(base_reward: int, has_l1: bool, has_l2: bool, l1_exempt: bool, l2_exempt: bool,
          claimant_exempt: bool, *, level1_percent: int = REFERRAL_LEVEL1_PERCENT,
          level2_percent: int = REFERRAL_LEVEL2_PERCENT) -> ReferralShares:
    """Split ``base_reward`` between the claimant and up to two referrers.

    An exempt claimant keeps everything. An exempt referrer's share reverts to
    the claimant; the other referrer is paid at its own fixed rate.
    """
    require_u64('base_reward', base_reward)
    validate_percentages(level1_percent, level2_percent)

    if claimant_exempt or not has_l1:
        return ReferralShares(base_reward, 0, 0)

    level1 = 0 if l1_exempt else base_reward * level1_percent // 100
    level2 = base_reward * level2_percent // 100 if has_l2 and not l2_exempt else 0
    return ReferralShares(base_reward - level1 - level2, level1, level2)


def link_referrer(participant: Participant, referrer: Participant) -> Participant:
    """Attach ``referrer`` as the direct referrer of ``participant``.

    The referrer's own direct referrer becomes the second level. Links are set
    once and never rewritten.

    Raises:
        InvalidReferralTopology: On self-referral, re-linking, or a cycle.
    """
    if participant.participant_id == referrer.participant_id:
        raise InvalidReferralTopology(
            "A participant cannot refer themselves",
            details={'participant_id': participant.participant_id},
        )
    if participant.referrer_l1 is not None:
        raise InvalidReferralTopology(
            "Participant already has a referrer",
            details={'participant_id': participant.participant_id, 'referrer_l1': participant.referrer_l1},
        )
    if participant.participant_id in (referrer.referrer_l1, referrer.referrer_l2):
        raise InvalidReferralTopology(
            "Referral link would form a cycle",
            details={'participant_id': participant.participant_id, 'referrer_id': referrer.participant_id},
        )

    logger.debug("Linked participant %s to referrer %s", participant.participant_id, referrer.participant_id)
    return replace(
        participant,
        referrer_l1=referrer.participant_id,
        referrer_l2=referrer.referrer_l1,
    )


def accumulate_pending(referrer: Participant, amount: int) -> Participant:
    """Credit a referral share to ``referrer``'s pending balance."""
    if amount == 0:
        return referrer
    return replace(
        referrer,
        pending_referral_balance=checked_add(referrer.pending_referral_balance, amount),
    )
