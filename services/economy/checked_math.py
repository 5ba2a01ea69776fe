# -*- coding: utf-8 -*-
# ============================================================================ #
# SeedFarm Economy (SFE) - Checked Arithmetic                                  #
# Copyright (c) 2025 MAX                                                       #
# Licensed under the MIT License                                               #
# ============================================================================ #
"""Checked unsigned 64-bit arithmetic.

Python integers never wrap, so every ledger step that the economy treats as a
u64 operation goes through these helpers. A result outside ``0..U64_MAX``
raises :class:`CalculationOverflow` instead of silently producing a value the
ledger could not store.
"""

from __future__ import annotations

from services.exceptions import CalculationOverflow, InvalidConfiguration

U64_MAX = (1 << 64) - 1
U32_MAX = (1 << 32) - 1
U8_MAX = (1 << 8) - 1
I64_MIN = -(1 << 63)
I64_MAX = (1 << 63) - 1


def _check(value: int, operation: str, *operands: int) -> int:
    if value < 0 or value > U64_MAX:
        raise CalculationOverflow(
            f"u64 {operation} out of range",
            details={'operation': operation, 'operands': list(operands)},
        )
    return value


def checked_add(a: int, b: int) -> int:
    """Add two u64 values, raising on overflow."""
    return _check(a + b, 'add', a, b)


def checked_sub(a: int, b: int) -> int:
    """Subtract two u64 values, raising on underflow."""
    return _check(a - b, 'sub', a, b)


def checked_mul(a: int, b: int) -> int:
    """Multiply two u64 values, raising on overflow."""
    return _check(a * b, 'mul', a, b)


def checked_div(a: int, b: int) -> int:
    """Floor-divide two u64 values, raising on division by zero."""
    if b == 0:
        raise CalculationOverflow("u64 division by zero", details={'operation': 'div', 'operands': [a, b]})
    return _check(a // b, 'div', a, b)


def require_u64(name: str, value: int) -> int:
    """Validate that ``value`` is an int in the u64 range."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidConfiguration(f"{name} must be an integer", details={name: value})
    if value < 0 or value > U64_MAX:
        raise InvalidConfiguration(f"{name} must fit in an unsigned 64-bit integer", details={name: value})
    return value


def require_u32(name: str, value: int) -> int:
    """Validate that ``value`` is an int in the u32 range."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidConfiguration(f"{name} must be an integer", details={name: value})
    if value < 0 or value > U32_MAX:
        raise InvalidConfiguration(f"{name} must fit in an unsigned 32-bit integer", details={name: value})
    return value


def require_timestamp(name: str, value: int) -> int:
    """Validate a signed 64-bit Unix timestamp."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidConfiguration(f"{name} must be an integer timestamp", details={name: value})
    if value < I64_MIN or value > I64_MAX:
        raise InvalidConfiguration(f"{name} is outside the signed 64-bit range", details={name: value})
    return value
