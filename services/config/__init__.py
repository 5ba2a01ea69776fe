# -*- coding: utf-8 -*-
# ============================================================================ #
# SeedFarm Economy (SFE)                                                       #
# Copyright (c) 2025 MAX                                                       #
# Licensed under the MIT License                                               #
# ============================================================================ #
"""
Config Services Package - Economy configuration service
"""

from .economy_config_service import EconomyConfigService, get_economy_config_service, reset_economy_config_service
from .economy_config_validation_service import EconomyConfigValidationService, EconomySettings

__all__ = [
    'get_economy_config_service', 'reset_economy_config_service', 'EconomyConfigService',
    'EconomyConfigValidationService', 'EconomySettings',
]
