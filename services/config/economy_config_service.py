# -*- coding: utf-8 -*-
# ============================================================================ #
# SeedFarm Economy (SFE) - Economy Config Service                              #
# Copyright (c) 2025 MAX                                                       #
# Licensed under the MIT License                                               #
# ============================================================================ #

"""
Economy Config Service - single source of truth for economy configuration

Loads ``config/economy.json`` (override with ``SFE_ECONOMY_CONFIG``), merges it
section by section over built-in defaults and applies environment overrides.
A missing, unreadable or corrupted file falls back to the defaults so the
economy can always start; invalid values raise ``InvalidConfiguration``.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional

from services.config.economy_config_validation_service import (
    EconomyConfigValidationService,
    EconomySettings,
)
from services.economy.constants import (
    DEFAULT_BASE_RATE,
    DEFAULT_GLOBAL_MAX,
    DEFAULT_HALVING_INTERVAL,
    DEFAULT_PER_CATEGORY_MAX,
    MAX_PACK_QUANTITY,
    MIN_CLAIM_INTERVAL,
    REFERRAL_LEVEL1_PERCENT,
    REFERRAL_LEVEL2_PERCENT,
    SEED_PACK_COST,
    TOTAL_SUPPLY_CAP,
)
from services.inventory.progression import (
    DEFAULT_CAPACITIES,
    DEFAULT_LEVEL_NAMES,
    DEFAULT_THRESHOLDS,
    LevelTable,
)
from services.randomness.probability_table import (
    ProbabilityTable,
    ProbabilityTableRegistry,
    standard_table,
)

logger = logging.getLogger('sfe.config')

CONFIG_PATH_ENV = 'SFE_ECONOMY_CONFIG'

# env var -> (section, key)
ENV_OVERRIDES = {
    'SFE_BASE_RATE': ('economy', 'base_rate'),
    'SFE_HALVING_INTERVAL': ('economy', 'halving_interval'),
    'SFE_FRESHNESS_WINDOW': ('randomness', 'freshness_window'),
    'SFE_MIN_ENTROPY_SCORE': ('randomness', 'min_entropy_score'),
}


def get_default_config() -> Dict[str, Any]:
    """Built-in configuration used when no config file is available."""
    return {
        'economy': {
            'base_rate': DEFAULT_BASE_RATE,
            'halving_interval': DEFAULT_HALVING_INTERVAL,
            'supply_cap': TOTAL_SUPPLY_CAP,
            'seed_pack_cost': SEED_PACK_COST,
            'min_claim_interval': MIN_CLAIM_INTERVAL,
            'max_pack_quantity': MAX_PACK_QUANTITY,
        },
        'referral': {
            'level1_percent': REFERRAL_LEVEL1_PERCENT,
            'level2_percent': REFERRAL_LEVEL2_PERCENT,
            'exempt_ids': [],
        },
        'randomness': {
            'freshness_window': 24 * 60 * 60,
            'min_entropy_score': 50,
            'oracle_public_key': None,
            'require_oracle': False,
            'table': standard_table().to_dict(),
        },
        'inventory': {
            'per_category_max': DEFAULT_PER_CATEGORY_MAX,
            'global_max': DEFAULT_GLOBAL_MAX,
        },
        'progression': {
            'thresholds': list(DEFAULT_THRESHOLDS),
            'capacities': list(DEFAULT_CAPACITIES),
            'names': list(DEFAULT_LEVEL_NAMES),
        },
    }


class EconomyConfigService:
    """Economy configuration service.

    Implemented as a singleton - use :func:`get_economy_config_service` to get
    the instance. All public methods are thread-safe.
    """

    _instance = None
    _lock = Lock()

    def __new__(cls, config_path: Optional[str] = None):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(EconomyConfigService, cls).__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[str] = None):
        if self._initialized:
            return

        if config_path:
            self.config_path = Path(config_path)
        elif os.environ.get(CONFIG_PATH_ENV):
            self.config_path = Path(os.environ[CONFIG_PATH_ENV])
        else:
            self.config_path = Path(__file__).parents[2] / "config" / "economy.json"

        self._cache_lock = Lock()
        self._config_cache: Optional[Dict[str, Any]] = None
        self._settings_cache: Optional[EconomySettings] = None
        self._registry: Optional[ProbabilityTableRegistry] = None
        self._registry_stale = True
        self._validation_service = EconomyConfigValidationService()
        self._initialized = True
        logger.info("Economy config service initialized (config: %s)", self.config_path)

    # === Loading ===

    def get_config(self, force_reload: bool = False) -> Dict[str, Any]:
        """Return the merged configuration dictionary."""
        with self._cache_lock:
            if self._config_cache is None or force_reload:
                config = self._load_json_file(self.config_path, get_default_config())
                self._apply_env_overrides(config)
                self._config_cache = config
                self._settings_cache = None
                self._registry_stale = True
            return copy.deepcopy(self._config_cache)

    def get_settings(self, force_reload: bool = False) -> EconomySettings:
        """Return validated, typed settings."""
        config = self.get_config(force_reload=force_reload)
        with self._cache_lock:
            if self._settings_cache is None:
                self._settings_cache = self._validation_service.build_settings(config)
            return self._settings_cache

    def get_probability_table(self) -> ProbabilityTable:
        """The currently published probability table."""
        return self.get_table_registry().current

    def get_table_registry(self) -> ProbabilityTableRegistry:
        """Versioned registry seeded with the configured table.

        After a reload the configured table is published when its version is
        newer than the active one. Older versions stay resolvable for packs
        bought under them.
        """
        config = self.get_config()
        with self._cache_lock:
            if self._registry is not None and not self._registry_stale:
                return self._registry
            table = self._validation_service.build_probability_table(
                config.get('randomness', {}).get('table', {})
            )
            if self._registry is None:
                self._registry = ProbabilityTableRegistry(table)
            elif table.version > self._registry.current.version:
                self._registry.publish(table)
            elif table.version < self._registry.current.version:
                logger.warning(
                    "Configured table version %d is older than active version %d, keeping the active table",
                    table.version, self._registry.current.version,
                )
            self._registry_stale = False
            return self._registry

    def get_level_table(self) -> LevelTable:
        return self._validation_service.build_level_table(self.get_config().get('progression', {}))

    def invalidate_cache(self) -> None:
        with self._cache_lock:
            self._config_cache = None
            self._settings_cache = None
            self._registry_stale = True

    # === Saving ===

    def save_config(self, config: Dict[str, Any]) -> bool:
        """Validate and persist ``config`` atomically."""
        self._validation_service.validate_config(config)
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            self._save_json_file(self.config_path, config)
        except (IOError, OSError) as e:
            logger.error(f"File I/O error saving economy config: {e}", exc_info=True)
            return False
        self.invalidate_cache()
        logger.info("Economy config saved: %s", self.config_path)
        return True

    # === Private Helper Methods ===

    def _load_json_file(self, file_path: Path, default: Dict[str, Any]) -> Dict[str, Any]:
        """Load JSON file and merge each section over the defaults."""
        try:
            if file_path.exists():
                with open(file_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                if not isinstance(data, dict):
                    logger.error("Economy config %s is not a JSON object, using defaults", file_path)
                    return default
                result = default
                for section, values in data.items():
                    if isinstance(values, dict) and isinstance(result.get(section), dict):
                        result[section].update(values)
                    else:
                        result[section] = values
                logger.debug("Economy config loaded from %s", file_path)
                return result
            logger.debug("No economy config at %s, using defaults", file_path)
            return default
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in {file_path}: {e}", exc_info=True)
            return default
        except (IOError, OSError) as e:
            logger.error(f"File access error loading {file_path}: {e}", exc_info=True)
            return default
        except UnicodeDecodeError as e:
            logger.error(f"Data format error loading {file_path}: {e}", exc_info=True)
            return default

    def _apply_env_overrides(self, config: Dict[str, Any]) -> None:
        for env_name, (section, key) in ENV_OVERRIDES.items():
            raw = os.environ.get(env_name)
            if raw is None or raw == '':
                continue
            try:
                config.setdefault(section, {})[key] = int(raw)
                logger.info("Config override from %s: %s.%s=%s", env_name, section, key, raw)
            except ValueError:
                logger.warning("Ignoring non-integer %s=%r", env_name, raw)

    def _save_json_file(self, file_path: Path, data: Dict[str, Any]) -> None:
        """Save data to JSON file atomically to prevent corruption."""
        fd, temp_path = tempfile.mkstemp(dir=str(file_path.parent), text=True, suffix='.json.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, file_path)
        except OSError:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise


_economy_config_service_instance = None


def get_economy_config_service() -> EconomyConfigService:
    """Get the global economy configuration service instance."""
    global _economy_config_service_instance
    if _economy_config_service_instance is None:
        _economy_config_service_instance = EconomyConfigService()
    return _economy_config_service_instance


def reset_economy_config_service() -> None:
    """Drop the singleton so tests can point it at another config file."""
    global _economy_config_service_instance
    _economy_config_service_instance = None
    EconomyConfigService._instance = None
