# -*- coding: utf-8 -*-
"""
Services Package - Clean service architecture for SFE

This package contains the economy core organized by domain:
- economy: Reward accrual, halving schedule and referral distribution
- randomness: Probability tables, outcome resolution and entropy quality gate
- inventory: Bounded multi-category inventory and purchase-driven progression
- engine: Host orchestration for claims, pack purchases and planting
- config: Economy configuration loading and validation
- infrastructure: In-process event manager

All services follow clean architecture patterns:
- Immutable dataclasses for type safety
- Result wrappers for consistent error handling
- Singleton pattern for resource management
- Validate everything, then commit everything
"""

from .config.economy_config_service import get_economy_config_service
from .engine.economy_service import get_economy_service
from .infrastructure.event_manager import get_event_manager

__all__ = [
    # Config
    'get_economy_config_service',
    # Engine
    'get_economy_service',
    # Infrastructure
    'get_event_manager',
]
