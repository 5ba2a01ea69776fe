#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
SeedFarm Economy - Custom Exception Hierarchy
Structured error handling for all SFE services
"""

# ============================================================================
# BASE EXCEPTIONS
# ============================================================================

class EconomyBaseException(Exception):
    """
    Base exception for all SeedFarm Economy errors.

    All custom exceptions inherit from this to allow catching all SFE-specific errors.
    Includes structured error data support.
    """
    def __init__(self, message: str, error_code: str = None, details: dict = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self):
        """Convert exception to structured dictionary for logging/API responses."""
        return {
            'error': self.__class__.__name__,
            'error_code': self.error_code,
            'message': self.message,
            'details': self.details
        }


# ============================================================================
# CALCULATION EXCEPTIONS
# ============================================================================

class EconomyCalculationError(EconomyBaseException):
    """Base exception for arithmetic failures in economy calculations."""

class CalculationOverflow(EconomyCalculationError):
    """Raised when a checked arithmetic step leaves the unsigned 64-bit range."""


# ============================================================================
# CONFIGURATION EXCEPTIONS
# ============================================================================

class EconomyConfigError(EconomyBaseException):
    """Base exception for all economy configuration errors."""

class InvalidConfiguration(EconomyConfigError):
    """Raised for malformed probability tables, level tables or out-of-range settings."""


# ============================================================================
# INVENTORY EXCEPTIONS
# ============================================================================

class InventoryError(EconomyBaseException):
    """Base exception for all inventory and item errors."""

class StorageFull(InventoryError):
    """Raised when the inventory is at its global cap with nothing evictable."""

class ItemNotFound(InventoryError):
    """Raised when an item id is not held in the inventory."""

class DuplicateItem(InventoryError):
    """Raised when an item id is added twice."""

class ItemAlreadyPlanted(InventoryError):
    """Raised when planting an item that is already planted."""

class ItemNotPlanted(InventoryError):
    """Raised when unplanting an item that is not planted."""

class CannotDiscardPlantedItem(InventoryError):
    """Raised when discarding an item that is still planted."""

class FarmCapacityExceeded(InventoryError):
    """Raised when planting would exceed the capacity of the current level."""

class ItemRecordMismatch(InventoryError):
    """Raised when an item record disagrees with the inventory or the probability tables."""


# ============================================================================
# REFERRAL EXCEPTIONS
# ============================================================================

class ReferralError(EconomyBaseException):
    """Base exception for referral errors."""

class InvalidReferralTopology(ReferralError):
    """Raised on self-referral or any link that would form a cycle."""


# ============================================================================
# RANDOMNESS EXCEPTIONS
# ============================================================================

class RandomnessError(EconomyBaseException):
    """Base exception for randomness and pack opening errors."""

class StaleRandomness(RandomnessError):
    """Raised when external randomness is older than the freshness window."""

class LowEntropyQuality(RandomnessError):
    """Raised when external randomness fails the statistical quality gate."""

class InvalidOracleSignature(RandomnessError):
    """Raised when an oracle result does not carry a valid signature."""

class PackAlreadyOpened(RandomnessError):
    """Raised when a pack is opened a second time."""


# ============================================================================
# REWARD EXCEPTIONS
# ============================================================================

class RewardError(EconomyBaseException):
    """Base exception for reward claim errors."""

class NoRewardAvailable(RewardError):
    """Raised when there is zero power or the elapsed time is below the minimum."""

class SupplyCapExceeded(RewardError):
    """Raised when minting would push the supply past its cap."""


# ============================================================================
# UTILITY FUNCTIONS
# ============================================================================

def get_exception_info(exception: Exception) -> dict:
    """
    Extract structured information from any exception.

    Args:
        exception: The exception to extract info from

    Returns:
        Dictionary with exception details
    """
    if isinstance(exception, EconomyBaseException):
        return exception.to_dict()
    else:
        return {
            'error': exception.__class__.__name__,
            'error_code': exception.__class__.__name__,
            'message': str(exception),
            'details': {}
        }


def is_recoverable_error(exception: Exception) -> bool:
    """
    Determine if an error is recoverable (retry possible).

    Args:
        exception: The exception to check

    Returns:
        True if error is recoverable, False otherwise
    """
    # Waiting for fresh randomness or more elapsed time fixes these
    recoverable_types = (
        StaleRandomness,
        LowEntropyQuality,
        NoRewardAvailable,
    )

    return isinstance(exception, recoverable_types)


def should_alert_admin(exception: Exception) -> bool:
    """
    Determine if an error requires admin notification.

    Args:
        exception: The exception to check

    Returns:
        True if admin should be alerted, False otherwise
    """
    critical_types = (
        CalculationOverflow,
        InvalidConfiguration,
        SupplyCapExceeded,
        InvalidOracleSignature,
    )

    return isinstance(exception, critical_types)
