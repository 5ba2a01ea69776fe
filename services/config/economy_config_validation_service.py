# -*- coding: utf-8 -*-
# ============================================================================ #
# SeedFarm Economy (SFE)                                                       #
# Copyright (c) 2025 MAX                                                       #
# Licensed under the MIT License                                               #
# ============================================================================ #
"""
Economy Configuration Validation Service - Handles config validation and extraction
Turns raw config sections into typed settings, raising InvalidConfiguration
for anything out of range.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional

from services.economy.constants import (
    DEFAULT_GLOBAL_MAX,
    DEFAULT_PER_CATEGORY_MAX,
    MAX_HALVING_INTERVAL,
    MAX_PACK_QUANTITY,
    MIN_HALVING_INTERVAL,
)
from services.economy.referral import validate_percentages
from services.exceptions import InvalidConfiguration
from services.inventory.progression import LevelTable
from services.randomness.probability_table import CATEGORY_COUNT, ProbabilityTable

logger = logging.getLogger('sfe.config_validation')


@dataclass(frozen=True)
class EconomySettings:
    """Typed view of the economy configuration."""

    base_rate: int
    halving_interval: int
    supply_cap: int
    seed_pack_cost: int
    min_claim_interval: int
    max_pack_quantity: int
    level1_percent: int
    level2_percent: int
    exempt_ids: FrozenSet[int] = field(default_factory=frozenset)
    freshness_window: int = 86400
    min_entropy_score: int = 50
    oracle_public_key: Optional[str] = None
    require_oracle: bool = False
    per_category_max: int = DEFAULT_PER_CATEGORY_MAX
    global_max: int = DEFAULT_GLOBAL_MAX


def _int(section: str, data: Dict[str, Any], key: str) -> int:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidConfiguration(f"{section}.{key} must be an integer", details={key: value})
    return value


class EconomyConfigValidationService:
    """
    Handles all economy configuration validation and extraction operations.

    Responsibilities:
    - Validate emission, referral, randomness, inventory and progression sections
    - Build typed settings, probability tables and level tables
    """

    @staticmethod
    def validate_economy_section(data: Dict[str, Any]) -> Dict[str, int]:
        base_rate = _int('economy', data, 'base_rate')
        if base_rate <= 0:
            raise InvalidConfiguration("economy.base_rate must be positive", details={'base_rate': base_rate})
        halving_interval = _int('economy', data, 'halving_interval')
        if not MIN_HALVING_INTERVAL <= halving_interval <= MAX_HALVING_INTERVAL:
            raise InvalidConfiguration(
                f"economy.halving_interval must be within {MIN_HALVING_INTERVAL}..{MAX_HALVING_INTERVAL} seconds",
                details={'halving_interval': halving_interval},
            )
        supply_cap = _int('economy', data, 'supply_cap')
        if supply_cap <= 0:
            raise InvalidConfiguration("economy.supply_cap must be positive", details={'supply_cap': supply_cap})
        seed_pack_cost = _int('economy', data, 'seed_pack_cost')
        if seed_pack_cost <= 0:
            raise InvalidConfiguration("economy.seed_pack_cost must be positive")
        min_claim_interval = _int('economy', data, 'min_claim_interval')
        if min_claim_interval < 0:
            raise InvalidConfiguration("economy.min_claim_interval cannot be negative")
        max_pack_quantity = _int('economy', data, 'max_pack_quantity')
        if not 1 <= max_pack_quantity <= MAX_PACK_QUANTITY:
            raise InvalidConfiguration(f"economy.max_pack_quantity must be within 1..{MAX_PACK_QUANTITY}")
        return {
            'base_rate': base_rate,
            'halving_interval': halving_interval,
            'supply_cap': supply_cap,
            'seed_pack_cost': seed_pack_cost,
            'min_claim_interval': min_claim_interval,
            'max_pack_quantity': max_pack_quantity,
        }

    @staticmethod
    def validate_referral_section(data: Dict[str, Any]) -> Dict[str, Any]:
        level1 = data.get('level1_percent')
        level2 = data.get('level2_percent')
        validate_percentages(level1, level2)
        exempt = data.get('exempt_ids', [])
        if not isinstance(exempt, list):
            raise InvalidConfiguration("referral.exempt_ids must be a list")
        try:
            exempt_ids = frozenset(int(value) for value in exempt)
        except (TypeError, ValueError) as e:
            raise InvalidConfiguration(f"referral.exempt_ids must contain integers: {e}") from e
        return {'level1_percent': level1, 'level2_percent': level2, 'exempt_ids': exempt_ids}

    @staticmethod
    def validate_randomness_section(data: Dict[str, Any]) -> Dict[str, Any]:
        freshness_window = _int('randomness', data, 'freshness_window')
        if freshness_window <= 0:
            raise InvalidConfiguration("randomness.freshness_window must be positive")
        min_entropy_score = _int('randomness', data, 'min_entropy_score')
        if not 0 <= min_entropy_score <= 100:
            raise InvalidConfiguration("randomness.min_entropy_score must be within 0..100")
        public_key = data.get('oracle_public_key')
        if public_key is not None:
            try:
                if len(bytes.fromhex(public_key)) != 32:
                    raise ValueError("expected 32 bytes")
            except (TypeError, ValueError) as e:
                raise InvalidConfiguration(f"randomness.oracle_public_key is not a hex Ed25519 key: {e}") from e
        return {
            'freshness_window': freshness_window,
            'min_entropy_score': min_entropy_score,
            'oracle_public_key': public_key,
            'require_oracle': bool(data.get('require_oracle', False)),
        }

    @staticmethod
    def validate_inventory_section(data: Dict[str, Any]) -> Dict[str, int]:
        per_category_max = _int('inventory', data, 'per_category_max')
        global_max = _int('inventory', data, 'global_max')
        if per_category_max <= 0 or global_max <= 0:
            raise InvalidConfiguration("inventory bounds must be positive")
        if per_category_max * CATEGORY_COUNT < global_max:
            raise InvalidConfiguration(
                "inventory.per_category_max * category count must cover inventory.global_max",
                details={'per_category_max': per_category_max, 'global_max': global_max},
            )
        return {'per_category_max': per_category_max, 'global_max': global_max}

    @staticmethod
    def build_probability_table(data: Dict[str, Any]) -> ProbabilityTable:
        return ProbabilityTable.load(data)

    @staticmethod
    def build_level_table(data: Dict[str, Any]) -> LevelTable:
        if not isinstance(data, dict):
            raise InvalidConfiguration("progression config must be a mapping")
        return LevelTable.from_config(data)

    @staticmethod
    def build_settings(config: Dict[str, Any]) -> EconomySettings:
        """Validate every section and return the typed settings."""
        values: Dict[str, Any] = {}
        values.update(EconomyConfigValidationService.validate_economy_section(config.get('economy', {})))
        values.update(EconomyConfigValidationService.validate_referral_section(config.get('referral', {})))
        values.update(EconomyConfigValidationService.validate_randomness_section(config.get('randomness', {})))
        values.update(EconomyConfigValidationService.validate_inventory_section(config.get('inventory', {})))
        logger.debug("Economy settings validated")
        return EconomySettings(**values)

    @staticmethod
    def validate_config(config: Dict[str, Any]) -> EconomySettings:
        """Validate a complete config, including the table and level sections."""
        settings = EconomyConfigValidationService.build_settings(config)
        table = config.get('randomness', {}).get('table')
        if table is not None:
            EconomyConfigValidationService.build_probability_table(table)
        if 'progression' in config:
            EconomyConfigValidationService.build_level_table(config['progression'])
        return settings
