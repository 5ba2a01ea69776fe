# -*- coding: utf-8 -*-
# ============================================================================ #
# SeedFarm Economy (SFE)                                                       #
# Copyright (c) 2025 MAX                                                       #
# Licensed under the MIT License                                               #
# ============================================================================ #
"""State models shared by the reward and referral components."""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Optional

from services.economy.constants import (
    DEFAULT_BASE_RATE,
    DEFAULT_HALVING_INTERVAL,
    TOTAL_SUPPLY_CAP,
)
from services.exceptions import InvalidConfiguration


@dataclass(frozen=True)
class GlobalEconomyState:
    """Pool-wide emission state.

    ``rate`` only ever decreases through halving or an explicit admin change;
    ``supply_minted`` never exceeds ``supply_cap``.
    """

    total_power: int = 0
    rate: int = DEFAULT_BASE_RATE
    next_halving_time: int = 0
    halving_interval: int = DEFAULT_HALVING_INTERVAL
    supply_minted: int = 0
    supply_cap: int = TOTAL_SUPPLY_CAP

    def __post_init__(self) -> None:
        if self.supply_minted > self.supply_cap:
            raise InvalidConfiguration(
                "supply_minted exceeds supply_cap",
                details={'supply_minted': self.supply_minted, 'supply_cap': self.supply_cap},
            )

    @classmethod
    def initial(cls, now: int, *, rate: int = DEFAULT_BASE_RATE,
                halving_interval: int = DEFAULT_HALVING_INTERVAL,
                supply_cap: int = TOTAL_SUPPLY_CAP) -> "GlobalEconomyState":
        """Create the state for a freshly launched economy."""
        return cls(
            total_power=0,
            rate=rate,
            next_halving_time=now + halving_interval,
            halving_interval=halving_interval,
            supply_minted=0,
            supply_cap=supply_cap,
        )

    def with_admin_rate(self, rate: int) -> "GlobalEconomyState":
        """Return a copy with an admin-set emission rate."""
        if rate <= 0:
            raise InvalidConfiguration("rate must be positive", details={'rate': rate})
        return replace(self, rate=rate)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GlobalEconomyState":
        return cls(**{key: int(data[key]) for key in data if key in cls.__dataclass_fields__})


@dataclass(frozen=True)
class Participant:
    """A player account as seen by the economy core.

    The referral chain is a fixed two-slot structure: ``referrer_l1`` is the
    direct referrer, ``referrer_l2`` the referrer's referrer.
    ``unclaimed_reward`` holds accrual settled when the participant's power
    changed between claims.
    """

    participant_id: int
    power: int = 0
    last_accrual_time: int = 0
    referrer_l1: Optional[int] = None
    referrer_l2: Optional[int] = None
    pending_referral_balance: int = 0
    unclaimed_reward: int = 0
    total_claimed: int = 0

    @property
    def has_referrer(self) -> bool:
        return self.referrer_l1 is not None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Participant":
        return cls(
            participant_id=int(data['participant_id']),
            power=int(data.get('power', 0)),
            last_accrual_time=int(data.get('last_accrual_time', 0)),
            referrer_l1=data.get('referrer_l1'),
            referrer_l2=data.get('referrer_l2'),
            pending_referral_balance=int(data.get('pending_referral_balance', 0)),
            unclaimed_reward=int(data.get('unclaimed_reward', 0)),
            total_claimed=int(data.get('total_claimed', 0)),
        )
