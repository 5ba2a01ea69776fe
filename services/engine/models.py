# -*- coding: utf-8 -*-
# ============================================================================ #
# SeedFarm Economy (SFE)                                                       #
# Copyright (c) 2025 MAX                                                       #
# Licensed under the MIT License                                               #
# ============================================================================ #
"""Request and result models used by the economy service."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from services.economy.models import GlobalEconomyState, Participant
from services.inventory.inventory import Inventory
from services.inventory.models import Item
from services.inventory.progression import ProgressionState
from services.randomness.entropy_quality import OracleRandomness
from services.randomness.probability_table import Category


@dataclass(frozen=True)
class SeedPack:
    """A purchased pack, bound to the table version it was bought under."""

    pack_id: int
    owner: int
    quantity: int
    cost: int
    table_version: int
    entropy_sequence: int
    user_nonce: int
    purchased_at: int
    opened: bool = False
    final_entropy: Optional[int] = None
    entropy_source: Optional[str] = None


# ---------------------
# Requests
# ---------------------

@dataclass(frozen=True)
class ClaimRequest:
    """Claim accrued rewards for ``participant``.

    The referrer states must be supplied whenever the participant has the
    matching referral slot filled, so their pending balances can be credited
    in the same transaction.
    """

    participant: Participant
    global_state: GlobalEconomyState
    now: int
    referrer_l1: Optional[Participant] = None
    referrer_l2: Optional[Participant] = None
    source: str = "api"


@dataclass(frozen=True)
class PurchaseRequest:
    participant_id: int
    pack_id: int
    quantity: int
    user_nonce: int
    entropy_sequence: int
    now: int
    source: str = "api"


@dataclass(frozen=True)
class OpenPackRequest:
    pack: SeedPack
    inventory: Inventory
    progression: ProgressionState
    next_item_id: int
    now: int
    randomness: Optional[OracleRandomness] = None


@dataclass(frozen=True)
class PlantRequest:
    participant: Participant
    global_state: GlobalEconomyState
    inventory: Inventory
    progression: ProgressionState
    item: Item
    now: int


@dataclass(frozen=True)
class DiscardRequest:
    inventory: Inventory
    item_ids: Tuple[int, ...]


# ---------------------
# Results
# ---------------------

@dataclass(frozen=True)
class ClaimResult:
    success: bool
    base_reward: int = 0
    claimant_share: int = 0
    level1_share: int = 0
    level2_share: int = 0
    pending_paid: int = 0
    payout: int = 0
    participant: Optional[Participant] = None
    referrer_l1: Optional[Participant] = None
    referrer_l2: Optional[Participant] = None
    global_state: Optional[GlobalEconomyState] = None
    event_emitted: bool = False
    error_message: Optional[str] = None
    error_code: Optional[str] = None


@dataclass(frozen=True)
class PurchaseResult:
    success: bool
    pack: Optional[SeedPack] = None
    cost: int = 0
    event_emitted: bool = False
    error_message: Optional[str] = None
    error_code: Optional[str] = None


@dataclass(frozen=True)
class OpenPackResult:
    """Outcome of opening a pack.

    ``items`` lists every item created in order; ids in ``evicted_item_ids``
    (which may include items from this same pack) are no longer held.
    """

    success: bool
    pack: Optional[SeedPack] = None
    items: Tuple[Item, ...] = field(default_factory=tuple)
    evicted_item_ids: Tuple[int, ...] = field(default_factory=tuple)
    inventory: Optional[Inventory] = None
    progression: Optional[ProgressionState] = None
    upgraded: bool = False
    entropy_source: Optional[str] = None
    event_emitted: bool = False
    error_message: Optional[str] = None
    error_code: Optional[str] = None


@dataclass(frozen=True)
class PlantResult:
    success: bool
    item: Optional[Item] = None
    participant: Optional[Participant] = None
    global_state: Optional[GlobalEconomyState] = None
    inventory: Optional[Inventory] = None
    settled_reward: int = 0
    event_emitted: bool = False
    error_message: Optional[str] = None
    error_code: Optional[str] = None


@dataclass(frozen=True)
class DiscardResult:
    success: bool
    inventory: Optional[Inventory] = None
    discarded: Tuple[Tuple[int, Category], ...] = field(default_factory=tuple)
    event_emitted: bool = False
    error_message: Optional[str] = None
    error_code: Optional[str] = None
