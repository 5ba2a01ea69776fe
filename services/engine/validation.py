# -*- coding: utf-8 -*-
# ============================================================================ #
# SeedFarm Economy (SFE)                                                       #
# Copyright (c) 2025 MAX                                                       #
# Licensed under the MIT License                                               #
# ============================================================================ #
"""Validation helpers for the economy service."""

from __future__ import annotations

from services.config.economy_config_validation_service import EconomySettings
from services.economy.checked_math import U64_MAX
from services.engine.models import (
    ClaimRequest,
    DiscardRequest,
    OpenPackRequest,
    PlantRequest,
    PurchaseRequest,
)


class EconomyValidationError(ValueError):
    """Raised when a request fails validation checks."""


def _require_u64(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= U64_MAX:
        raise EconomyValidationError(f"{name} must be an unsigned 64-bit integer")


def validate_claim_request(request: ClaimRequest) -> None:
    """Validate a :class:`ClaimRequest`.

    Raises:
        EconomyValidationError: If the request contains invalid data.
    """
    participant = request.participant
    if participant is None or request.global_state is None:
        raise EconomyValidationError("Participant and global state are required")

    if participant.referrer_l1 is not None:
        if request.referrer_l1 is None:
            raise EconomyValidationError("Level 1 referrer state is required for this participant")
        if request.referrer_l1.participant_id != participant.referrer_l1:
            raise EconomyValidationError("Level 1 referrer does not match the participant's referrer")
    elif request.referrer_l1 is not None:
        raise EconomyValidationError("Participant has no level 1 referrer")

    if participant.referrer_l2 is not None:
        if request.referrer_l2 is None:
            raise EconomyValidationError("Level 2 referrer state is required for this participant")
        if request.referrer_l2.participant_id != participant.referrer_l2:
            raise EconomyValidationError("Level 2 referrer does not match the participant's referrer chain")
    elif request.referrer_l2 is not None:
        raise EconomyValidationError("Participant has no level 2 referrer")


def validate_purchase_request(request: PurchaseRequest, settings: EconomySettings) -> None:
    _require_u64("pack_id", request.pack_id)
    _require_u64("entropy_sequence", request.entropy_sequence)
    _require_u64("user_nonce", request.user_nonce)
    if request.user_nonce == 0:
        raise EconomyValidationError("user_nonce must be non-zero")
    quantity = request.quantity
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise EconomyValidationError("Quantity must be an integer")
    if not 1 <= quantity <= settings.max_pack_quantity:
        raise EconomyValidationError(f"Quantity must be between 1 and {settings.max_pack_quantity}")


def validate_open_request(request: OpenPackRequest) -> None:
    if request.inventory.owner != request.pack.owner:
        raise EconomyValidationError("Inventory does not belong to the pack owner")
    _require_u64("next_item_id", request.next_item_id)


def validate_plant_request(request: PlantRequest) -> None:
    if request.item.owner != request.participant.participant_id:
        raise EconomyValidationError("Item does not belong to the participant")
    if request.inventory.owner != request.participant.participant_id:
        raise EconomyValidationError("Inventory does not belong to the participant")


def validate_discard_request(request: DiscardRequest) -> None:
    if not request.item_ids:
        raise EconomyValidationError("At least one item id is required")
