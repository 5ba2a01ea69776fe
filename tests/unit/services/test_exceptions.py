# -*- coding: utf-8 -*-
"""
Unit tests for the exception hierarchy and its helpers.
"""

import pytest

from services.exceptions import (
    CalculationOverflow,
    EconomyBaseException,
    InvalidConfiguration,
    InvalidOracleSignature,
    InventoryError,
    ItemRecordMismatch,
    LowEntropyQuality,
    NoRewardAvailable,
    RandomnessError,
    StaleRandomness,
    StorageFull,
    SupplyCapExceeded,
    get_exception_info,
    is_recoverable_error,
    should_alert_admin,
)


class TestEconomyBaseException:
    """Tests for structured exception data."""

    def test_error_code_defaults_to_class_name(self):
        exc = StorageFull("full", details={'owner': 1})
        assert exc.error_code == "StorageFull"
        assert exc.to_dict() == {
            'error': 'StorageFull',
            'error_code': 'StorageFull',
            'message': 'full',
            'details': {'owner': 1},
        }

    def test_explicit_error_code(self):
        exc = StaleRandomness("not ready", error_code="EntropyNotReady")
        assert exc.error_code == "EntropyNotReady"
        assert isinstance(exc, RandomnessError)
        assert isinstance(exc, EconomyBaseException)

    def test_groups(self):
        assert issubclass(StorageFull, InventoryError)
        assert issubclass(ItemRecordMismatch, InventoryError)
        assert str(CalculationOverflow("overflow")) == "overflow"


class TestHelpers:
    """Tests for exception classification helpers."""

    def test_exception_info_for_foreign_exceptions(self):
        info = get_exception_info(KeyError("x"))
        assert info['error'] == "KeyError"
        assert info['details'] == {}

    def test_exception_info_for_economy_exceptions(self):
        assert get_exception_info(NoRewardAvailable("none"))['error_code'] == "NoRewardAvailable"

    @pytest.mark.parametrize("exc,recoverable", [
        (StaleRandomness("x"), True),
        (LowEntropyQuality("x"), True),
        (NoRewardAvailable("x"), True),
        (StorageFull("x"), False),
        (CalculationOverflow("x"), False),
    ])
    def test_is_recoverable_error(self, exc, recoverable):
        assert is_recoverable_error(exc) is recoverable

    @pytest.mark.parametrize("exc,alert", [
        (CalculationOverflow("x"), True),
        (InvalidConfiguration("x"), True),
        (SupplyCapExceeded("x"), True),
        (InvalidOracleSignature("x"), True),
        (StaleRandomness("x"), False),
        (ValueError("x"), False),
    ])
    def test_should_alert_admin(self, exc, alert):
        assert should_alert_admin(exc) is alert
