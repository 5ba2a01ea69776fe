# -*- coding: utf-8 -*-
# ============================================================================ #
# SeedFarm Economy (SFE)                                                       #
# Copyright (c) 2025 MAX                                                       #
# Licensed under the MIT License                                               #
# ============================================================================ #
"""High level EconomyService implementation.

Every operation validates the request, computes all new states from copies,
and only then returns them together in a result object. A failure at any step
returns a failed result and leaves the caller's states untouched, so the host
can commit a successful result atomically.
"""

from __future__ import annotations

import time
from dataclasses import replace
from typing import Optional

from services.config.economy_config_service import EconomyConfigService, get_economy_config_service
from services.economy.checked_math import checked_add, checked_mul, checked_sub
from services.economy.models import GlobalEconomyState
from services.economy.referral import accumulate_pending, split
from services.economy.rewards import accrue_for, validate_claim_interval, validate_supply_cap
from services.engine import events
from services.engine.models import (
    ClaimRequest,
    ClaimResult,
    DiscardRequest,
    DiscardResult,
    OpenPackRequest,
    OpenPackResult,
    PlantRequest,
    PlantResult,
    PurchaseRequest,
    PurchaseResult,
    SeedPack,
)
from services.engine.validation import (
    EconomyValidationError,
    validate_claim_request,
    validate_discard_request,
    validate_open_request,
    validate_plant_request,
    validate_purchase_request,
)
from services.exceptions import (
    EconomyBaseException,
    FarmCapacityExceeded,
    ItemNotFound,
    ItemRecordMismatch,
    NoRewardAvailable,
    PackAlreadyOpened,
    should_alert_admin,
)
from services.infrastructure.event_manager import EventManager, get_event_manager
from services.inventory.inventory import Inventory
from services.inventory.models import Item
from services.inventory.progression import ProgressionState, ProgressionTracker
from services.randomness.entropy_quality import select_base_entropy
from services.randomness.resolver import resolve
from utils.logging_utils import get_module_logger
from utils.observability import get_structured_logger, metrics, timed

logger = get_module_logger("economy_service")
structured_logger = get_structured_logger(__name__, service_name="EconomyService")


class EconomyService:
    """Centralized orchestration of claims, pack openings and planting."""

    def __init__(self, config_service: Optional[EconomyConfigService] = None,
                 event_manager: Optional[EventManager] = None):
        self.config_service = config_service or get_economy_config_service()
        self.event_manager = event_manager or get_event_manager()

        logger.info("Economy Service initialized")

    # ------------------------------------------------------------------
    # Fresh state from configuration
    # ------------------------------------------------------------------
    def new_global_state(self, now: int) -> GlobalEconomyState:
        """Launch state using the configured rate, halving interval and supply cap."""
        settings = self.config_service.get_settings()
        return GlobalEconomyState.initial(
            now,
            rate=settings.base_rate,
            halving_interval=settings.halving_interval,
            supply_cap=settings.supply_cap,
        )

    def new_inventory(self, owner: int) -> Inventory:
        """Empty inventory with the configured storage bounds."""
        settings = self.config_service.get_settings()
        return Inventory(owner, per_category_max=settings.per_category_max, global_max=settings.global_max)

    def new_progression(self) -> ProgressionState:
        return ProgressionState.initial(self.config_service.get_level_table())

    # ------------------------------------------------------------------
    # Failure handling
    # ------------------------------------------------------------------
    def _validation_failure(self, result_cls, operation: str, exc: EconomyValidationError, start_time: float):
        metrics.increment(f"{operation}.validation_failed.total")
        structured_logger.warning(f"{operation}_validation_failed", extra={
            "error": str(exc),
            "duration_ms": (time.time() - start_time) * 1000,
        })
        return result_cls(success=False, error_message=str(exc), error_code="VALIDATION_FAILED")

    def _economy_failure(self, result_cls, operation: str, exc: EconomyBaseException, start_time: float):
        metrics.increment(f"{operation}.failed.total")
        if should_alert_admin(exc):
            logger.error("%s failed: %s", operation, exc.message, exc_info=True)
        else:
            logger.info("%s rejected: %s (%s)", operation, exc.message, exc.error_code)
        structured_logger.warning(f"{operation}_failed", extra={
            "error": exc.message,
            "error_code": exc.error_code,
            "details": exc.details,
            "duration_ms": (time.time() - start_time) * 1000,
        })
        return result_cls(success=False, error_message=exc.message, error_code=exc.error_code)

    # ------------------------------------------------------------------
    # Claims
    # ------------------------------------------------------------------
    def process_claim(self, request: ClaimRequest) -> ClaimResult:
        """Accrue, split and pay out a participant's rewards."""
        start_time = time.time()
        metrics.increment("claims.attempts.total", tags={"source": request.source})

        try:
            validate_claim_request(request)
        except EconomyValidationError as exc:
            return self._validation_failure(ClaimResult, "claims", exc, start_time)

        try:
            settings = self.config_service.get_settings()
            participant = request.participant
            state = request.global_state

            validate_claim_interval(participant.last_accrual_time, request.now, settings.min_claim_interval)
            if (participant.power == 0 or state.total_power == 0) and participant.unclaimed_reward == 0:
                raise NoRewardAvailable(
                    "No grow power to earn rewards",
                    details={'power': participant.power, 'total_power': state.total_power},
                )

            accrued = accrue_for(participant, state, request.now)
            base_reward = checked_add(accrued, participant.unclaimed_reward)

            exempt = settings.exempt_ids
            shares = split(
                base_reward,
                participant.referrer_l1 is not None,
                participant.referrer_l2 is not None,
                participant.referrer_l1 in exempt,
                participant.referrer_l2 in exempt,
                participant.participant_id in exempt,
                level1_percent=settings.level1_percent,
                level2_percent=settings.level2_percent,
            )

            pending = participant.pending_referral_balance
            payout = checked_add(shares.claimant, pending)
            new_minted = validate_supply_cap(state, payout)

            new_participant = replace(
                participant,
                last_accrual_time=request.now,
                pending_referral_balance=0,
                unclaimed_reward=0,
                total_claimed=checked_add(participant.total_claimed, payout),
            )
            new_l1 = accumulate_pending(request.referrer_l1, shares.level1) if request.referrer_l1 else None
            new_l2 = accumulate_pending(request.referrer_l2, shares.level2) if request.referrer_l2 else None
            new_state = replace(state, supply_minted=new_minted)
        except EconomyBaseException as exc:
            return self._economy_failure(ClaimResult, "claims", exc, start_time)

        result = ClaimResult(
            success=True,
            base_reward=base_reward,
            claimant_share=shares.claimant,
            level1_share=shares.level1,
            level2_share=shares.level2,
            pending_paid=pending,
            payout=payout,
            participant=new_participant,
            referrer_l1=new_l1,
            referrer_l2=new_l2,
            global_state=new_state,
        )
        event_emitted = events.emit_claim_event(self.event_manager, request, result)

        duration_ms = (time.time() - start_time) * 1000
        metrics.increment("claims.total", tags={"source": request.source})
        metrics.histogram("claims.payout", payout)
        metrics.gauge("economy.supply_minted", new_state.supply_minted)
        metrics.histogram("claims.processing_time.duration_ms", duration_ms)
        structured_logger.info("reward_claimed", extra={
            "participant_id": participant.participant_id,
            "base_reward": base_reward,
            "payout": payout,
            "level1_share": shares.level1,
            "level2_share": shares.level2,
            "duration_ms": duration_ms,
        })
        return replace(result, event_emitted=event_emitted)

    # ------------------------------------------------------------------
    # Packs
    # ------------------------------------------------------------------
    def purchase_pack(self, request: PurchaseRequest) -> PurchaseResult:
        """Record a pack purchase bound to the current table version."""
        start_time = time.time()
        metrics.increment("packs.purchase_attempts.total", tags={"source": request.source})

        try:
            settings = self.config_service.get_settings()
        except EconomyBaseException as exc:
            return self._economy_failure(PurchaseResult, "packs", exc, start_time)

        try:
            validate_purchase_request(request, settings)
        except EconomyValidationError as exc:
            return self._validation_failure(PurchaseResult, "packs", exc, start_time)

        try:
            cost = checked_mul(settings.seed_pack_cost, request.quantity)
            table = self.config_service.get_probability_table()
        except EconomyBaseException as exc:
            return self._economy_failure(PurchaseResult, "packs", exc, start_time)

        pack = SeedPack(
            pack_id=request.pack_id,
            owner=request.participant_id,
            quantity=request.quantity,
            cost=cost,
            table_version=table.version,
            entropy_sequence=request.entropy_sequence,
            user_nonce=request.user_nonce,
            purchased_at=request.now,
        )
        event_emitted = events.emit_purchase_event(self.event_manager, pack)

        metrics.increment("packs.purchased.total")
        metrics.histogram("packs.quantity", request.quantity)
        logger.info("Pack %s purchased by %s (%d items, cost %d)", pack.pack_id, pack.owner, pack.quantity, cost)
        return PurchaseResult(success=True, pack=pack, cost=cost, event_emitted=event_emitted)

    def open_pack(self, request: OpenPackRequest) -> OpenPackResult:
        """Resolve every item of a pack into the owner's inventory."""
        start_time = time.time()
        metrics.increment("packs.open_attempts.total")

        try:
            validate_open_request(request)
        except EconomyValidationError as exc:
            return self._validation_failure(OpenPackResult, "packs", exc, start_time)

        pack = request.pack
        try:
            if pack.opened:
                raise PackAlreadyOpened(
                    f"Pack {pack.pack_id} has already been opened", details={'pack_id': pack.pack_id}
                )
            settings = self.config_service.get_settings()
            table = self.config_service.get_table_registry().get(pack.table_version)
            entropy = select_base_entropy(
                request.randomness,
                now=request.now,
                nonce=pack.user_nonce,
                sequence=pack.entropy_sequence,
                requester_id=pack.owner,
                freshness_window=settings.freshness_window,
                min_score=settings.min_entropy_score,
                public_key_hex=settings.oracle_public_key,
                require_oracle=settings.require_oracle,
                fallback_time=pack.purchased_at,
            )

            inventory = request.inventory.copy()
            items = []
            evicted = []
            for index in range(pack.quantity):
                outcome = resolve(entropy.value, index, table)
                item = Item(
                    item_id=checked_add(request.next_item_id, index),
                    category=outcome.category,
                    power_value=outcome.power_value,
                    owner=pack.owner,
                    created_at=request.now,
                )
                evicted_id = inventory.add(item.item_id, item.category)
                if evicted_id is not None:
                    evicted.append(evicted_id)
                items.append(item)

            tracker = ProgressionTracker(self.config_service.get_level_table(), request.progression)
            upgrade = tracker.record_purchases(pack.quantity)
        except EconomyBaseException as exc:
            return self._economy_failure(OpenPackResult, "packs", exc, start_time)

        opened = replace(pack, opened=True, final_entropy=entropy.value, entropy_source=entropy.source)
        event_emitted = events.emit_open_event(self.event_manager, opened, items, evicted, upgrade.upgraded)

        duration_ms = (time.time() - start_time) * 1000
        metrics.increment("packs.opened.total", tags={"entropy_source": entropy.source})
        metrics.increment("inventory.evictions.total", value=len(evicted))
        metrics.histogram("packs.open_time.duration_ms", duration_ms)
        structured_logger.info("pack_opened", extra={
            "pack_id": pack.pack_id,
            "owner": pack.owner,
            "quantity": pack.quantity,
            "entropy_source": entropy.source,
            "evicted": len(evicted),
            "level": upgrade.level,
            "duration_ms": duration_ms,
        })
        return OpenPackResult(
            success=True,
            pack=opened,
            items=tuple(items),
            evicted_item_ids=tuple(evicted),
            inventory=inventory,
            progression=tracker.state,
            upgraded=upgrade.upgraded,
            entropy_source=entropy.source,
            event_emitted=event_emitted,
        )

    # ------------------------------------------------------------------
    # Planting
    # ------------------------------------------------------------------
    def plant_item(self, request: PlantRequest) -> PlantResult:
        """Plant an item, adding its power to the participant and the pool."""
        return self._change_planting(request, planting=True)

    def unplant_item(self, request: PlantRequest) -> PlantResult:
        """Unplant an item, removing its power from the participant and the pool."""
        return self._change_planting(request, planting=False)

    def _check_item_record(self, item: Item, stored_category) -> None:
        """Reject item records whose category or power was not issued by a pack."""
        if stored_category != item.category:
            raise ItemRecordMismatch(
                f"Item {item.item_id} is stored as {stored_category.name}, not {item.category.name}",
                details={'item_id': item.item_id, 'stored': stored_category.name, 'claimed': item.category.name},
            )
        issued = self.config_service.get_table_registry().powers_for(item.category)
        if item.power_value not in issued:
            raise ItemRecordMismatch(
                f"Item {item.item_id} power {item.power_value} was never issued for {item.category.name}",
                details={'item_id': item.item_id, 'power_value': item.power_value, 'issued': sorted(issued)},
            )

    def _change_planting(self, request: PlantRequest, *, planting: bool) -> PlantResult:
        start_time = time.time()
        operation = "planting"

        try:
            validate_plant_request(request)
        except EconomyValidationError as exc:
            return self._validation_failure(PlantResult, operation, exc, start_time)

        item = request.item
        participant = request.participant
        state = request.global_state
        try:
            if item.item_id not in request.inventory:
                raise ItemNotFound(f"Item {item.item_id} is not in the inventory", details={'item_id': item.item_id})
            self._check_item_record(item, request.inventory.category_of(item.item_id))

            inventory = request.inventory.copy()
            if planting:
                if inventory.planted_count >= request.progression.capacity:
                    raise FarmCapacityExceeded(
                        f"Farm capacity {request.progression.capacity} reached",
                        details={'capacity': request.progression.capacity, 'planted': inventory.planted_count},
                    )
                new_item = item.plant()
                inventory.mark_planted(item.item_id)
            else:
                new_item = item.unplant()
                inventory.mark_unplanted(item.item_id)

            # Settle accrual at the old power before the power changes
            settled = accrue_for(participant, state, request.now)
            if planting:
                new_power = checked_add(participant.power, item.power_value)
                new_total = checked_add(state.total_power, item.power_value)
            else:
                new_power = checked_sub(participant.power, item.power_value)
                new_total = checked_sub(state.total_power, item.power_value)

            new_participant = replace(
                participant,
                power=new_power,
                last_accrual_time=max(participant.last_accrual_time, request.now),
                unclaimed_reward=checked_add(participant.unclaimed_reward, settled),
            )
            new_state = replace(state, total_power=new_total)
        except EconomyBaseException as exc:
            return self._economy_failure(PlantResult, operation, exc, start_time)

        event_emitted = events.emit_plant_event(self.event_manager, new_item, planting)
        metrics.increment("items.planted.total" if planting else "items.unplanted.total")
        metrics.gauge("economy.total_power", new_total)
        logger.debug(
            "Item %s %s for %s (power %d -> %d)",
            item.item_id, "planted" if planting else "unplanted", participant.participant_id,
            participant.power, new_power,
        )
        return PlantResult(
            success=True,
            item=new_item,
            participant=new_participant,
            global_state=new_state,
            inventory=inventory,
            settled_reward=settled,
            event_emitted=event_emitted,
        )

    # ------------------------------------------------------------------
    # Discards
    # ------------------------------------------------------------------
    @timed("discards.processing_time")
    def discard_items(self, request: DiscardRequest) -> DiscardResult:
        """Discard unplanted items; all or nothing."""
        start_time = time.time()

        try:
            validate_discard_request(request)
        except EconomyValidationError as exc:
            return self._validation_failure(DiscardResult, "discards", exc, start_time)

        try:
            inventory = request.inventory.copy()
            categories = inventory.discard_many(request.item_ids)
        except EconomyBaseException as exc:
            return self._economy_failure(DiscardResult, "discards", exc, start_time)

        discarded = tuple(zip(request.item_ids, categories))
        event_emitted = events.emit_discard_event(self.event_manager, inventory.owner, discarded)
        metrics.increment("items.discarded.total", value=len(discarded))
        return DiscardResult(success=True, inventory=inventory, discarded=discarded, event_emitted=event_emitted)


_economy_service = None


def get_economy_service() -> EconomyService:
    """Get or create the singleton Economy Service instance."""
    global _economy_service
    if _economy_service is None:
        _economy_service = EconomyService()
    return _economy_service


def reset_economy_service() -> None:
    """Drop the singleton (tests)."""
    global _economy_service
    _economy_service = None
