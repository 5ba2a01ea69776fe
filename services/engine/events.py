# -*- coding: utf-8 -*-
# ============================================================================ #
# SeedFarm Economy (SFE)                                                       #
# Copyright (c) 2025 MAX                                                       #
# Licensed under the MIT License                                               #
# ============================================================================ #
"""Event emission helpers for the economy service."""

from __future__ import annotations

from typing import Any, Dict

from services.infrastructure.event_manager import (
    ITEM_DISCARDED,
    ITEM_PLANTED,
    ITEM_UNPLANTED,
    PACK_OPENED,
    PACK_PURCHASED,
    REWARD_CLAIMED,
)
from utils.logging_utils import get_module_logger

logger = get_module_logger("engine.events")

SOURCE_SERVICE = "economy_service"


def _emit(event_manager, event_type: str, data: Dict[str, Any]) -> bool:
    event_manager.emit_event(event_type=event_type, source_service=SOURCE_SERVICE, data=data)
    logger.debug("Economy event emitted: %s", event_type)
    return True


def emit_claim_event(event_manager, request, result) -> bool:
    return _emit(event_manager, REWARD_CLAIMED, {
        "participant_id": request.participant.participant_id,
        "base_reward": result.base_reward,
        "claimant_share": result.claimant_share,
        "level1_share": result.level1_share,
        "level2_share": result.level2_share,
        "pending_paid": result.pending_paid,
        "payout": result.payout,
        "source": request.source,
        "timestamp": request.now,
    })


def emit_purchase_event(event_manager, pack) -> bool:
    return _emit(event_manager, PACK_PURCHASED, {
        "pack_id": pack.pack_id,
        "owner": pack.owner,
        "quantity": pack.quantity,
        "cost": pack.cost,
        "table_version": pack.table_version,
        "entropy_sequence": pack.entropy_sequence,
        "timestamp": pack.purchased_at,
    })


def emit_open_event(event_manager, pack, items, evicted, upgraded: bool) -> bool:
    return _emit(event_manager, PACK_OPENED, {
        "pack_id": pack.pack_id,
        "owner": pack.owner,
        "entropy_source": pack.entropy_source,
        "items": [item.to_dict() for item in items],
        "evicted_item_ids": list(evicted),
        "level_upgraded": upgraded,
    })


def emit_plant_event(event_manager, item, planted: bool) -> bool:
    return _emit(event_manager, ITEM_PLANTED if planted else ITEM_UNPLANTED, {
        "item_id": item.item_id,
        "owner": item.owner,
        "category": item.category.name,
        "power_value": item.power_value,
    })


def emit_discard_event(event_manager, owner: int, discarded) -> bool:
    return _emit(event_manager, ITEM_DISCARDED, {
        "owner": owner,
        "items": [{"item_id": item_id, "category": category.name} for item_id, category in discarded],
    })
