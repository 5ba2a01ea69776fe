# -*- coding: utf-8 -*-
# ============================================================================ #
# SeedFarm Economy (SFE)                                                       #
# Copyright (c) 2025 MAX                                                       #
# Licensed under the MIT License                                               #
# ============================================================================ #
"""Economy service public API."""

from services.engine.economy_service import EconomyService, get_economy_service, reset_economy_service
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

__all__ = [
    "ClaimRequest",
    "ClaimResult",
    "DiscardRequest",
    "DiscardResult",
    "EconomyService",
    "OpenPackRequest",
    "OpenPackResult",
    "PlantRequest",
    "PlantResult",
    "PurchaseRequest",
    "PurchaseResult",
    "SeedPack",
    "get_economy_service",
    "reset_economy_service",
]
