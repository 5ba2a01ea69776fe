# -*- coding: utf-8 -*-
# ============================================================================ #
# SeedFarm Economy (SFE) - Entropy Quality Gate                                #
# Copyright (c) 2025 MAX                                                       #
# Licensed under the MIT License                                               #
# ============================================================================ #

"""
Entropy quality gate for external randomness.

Raw 32-byte oracle results are checked before they are folded into the base
entropy used by :mod:`services.randomness.resolver`:

- Signature: optional Ed25519 signature over value, publish time and sequence
- Freshness: results older than the freshness window or published in the
  future are rejected
- Quality: byte uniqueness, bit balance and repeat runs are scored 0..100

When the oracle result is rejected the caller falls back to an internally
derived SHA-256 mix of nonce, sequence counter, requester id and time. That
mix is predictable to anyone who knows those inputs, so it is weaker than
oracle randomness. Selections always report which source was used and why.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from services.economy.checked_math import U64_MAX, require_timestamp, require_u64
from services.exceptions import (
    InvalidConfiguration,
    InvalidOracleSignature,
    LowEntropyQuality,
    StaleRandomness,
)

logger = logging.getLogger("sfe.randomness.entropy")

RAW_RANDOMNESS_LENGTH = 32
DEFAULT_FRESHNESS_WINDOW = 24 * 60 * 60
DEFAULT_MIN_ENTROPY_SCORE = 50

SOURCE_ORACLE = "oracle"
SOURCE_FALLBACK = "fallback"

ZERO_ENTROPY_FALLBACK = 0x9E3779B97F4A7C15


class EntropyQuality(Enum):
    INVALID = "INVALID"
    POOR = "POOR"
    GOOD = "GOOD"
    HIGH = "HIGH"
    EXCEPTIONAL = "EXCEPTIONAL"

    @classmethod
    def from_score(cls, score: int) -> "EntropyQuality":
        if score > 80:
            return cls.EXCEPTIONAL
        if score > 60:
            return cls.HIGH
        if score > 40:
            return cls.GOOD
        if score > 20:
            return cls.POOR
        return cls.INVALID


@dataclass(frozen=True)
class EntropyScore:
    unique_bytes: int
    one_bits: int
    max_repeat_run: int
    score: int
    quality: EntropyQuality


@dataclass(frozen=True)
class OracleRandomness:
    """A raw oracle result with its publish time and request sequence."""

    value: bytes
    published_at: int
    sequence: int
    signature: Optional[str] = None  # hex-encoded Ed25519 signature

    def signing_payload(self) -> bytes:
        return (
            bytes(self.value)
            + self.published_at.to_bytes(8, "little", signed=True)
            + self.sequence.to_bytes(8, "little")
        )


@dataclass(frozen=True)
class EntropySelection:
    """Base entropy chosen for a batch and where it came from."""

    value: int
    source: str
    score: Optional[EntropyScore] = None
    reason: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.source == SOURCE_FALLBACK


# ------------------------------------------------------------------
# Scoring
# ------------------------------------------------------------------
def _validate_raw(raw: bytes) -> bytes:
    if not isinstance(raw, (bytes, bytearray)) or len(raw) != RAW_RANDOMNESS_LENGTH:
        raise InvalidConfiguration(
            f"Raw randomness must be exactly {RAW_RANDOMNESS_LENGTH} bytes",
            details={'length': len(raw) if isinstance(raw, (bytes, bytearray)) else None},
        )
    return bytes(raw)


def score_entropy(raw: bytes) -> EntropyScore:
    """Score 32 raw bytes for basic statistical sanity."""
    raw = _validate_raw(raw)

    unique_bytes = len(set(raw))
    one_bits = sum(bin(byte).count("1") for byte in raw)

    max_repeat_run = 0
    run = 0
    for previous, current in zip(raw, raw[1:]):
        run = run + 1 if current == previous else 0
        max_repeat_run = max(max_repeat_run, run)

    score = min(unique_bytes * 2, 50)
    score += max(0, 25 - abs(one_bits - 128) // 4)
    score -= min(max_repeat_run, 25)
    if unique_bytes > 28 and 120 < one_bits < 136 and max_repeat_run < 3:
        score += 25
    score = max(0, min(100, score))

    return EntropyScore(
        unique_bytes=unique_bytes,
        one_bits=one_bits,
        max_repeat_run=max_repeat_run,
        score=score,
        quality=EntropyQuality.from_score(score),
    )


def fold_to_u64(raw: bytes) -> int:
    """XOR the four little-endian 64-bit words of ``raw`` together."""
    raw = _validate_raw(raw)
    value = 0
    for offset in range(0, RAW_RANDOMNESS_LENGTH, 8):
        value ^= int.from_bytes(raw[offset:offset + 8], "little")
    return value


# ------------------------------------------------------------------
# Freshness & signature
# ------------------------------------------------------------------
def check_freshness(published_at: int, now: int, window: int = DEFAULT_FRESHNESS_WINDOW) -> int:
    """Return the age of a result or raise StaleRandomness."""
    if published_at > now:
        raise StaleRandomness(
            "Randomness is timestamped in the future",
            details={'published_at': published_at, 'now': now},
        )
    age = now - published_at
    if age > window:
        raise StaleRandomness(
            f"Randomness is {age}s old (window {window}s)",
            details={'published_at': published_at, 'now': now, 'window': window},
        )
    return age


def verify_oracle_signature(randomness: OracleRandomness, public_key_hex: str) -> bool:
    """Verify the Ed25519 signature of an oracle result."""
    if not randomness.signature:
        return False
    try:
        public_key = Ed25519PublicKey.from_public_bytes(bytes.fromhex(public_key_hex))
        public_key.verify(bytes.fromhex(randomness.signature), randomness.signing_payload())
        return True
    except (InvalidSignature, ValueError):
        return False


def evaluate_oracle_randomness(randomness: OracleRandomness, now: int, *,
                               freshness_window: int = DEFAULT_FRESHNESS_WINDOW,
                               min_score: int = DEFAULT_MIN_ENTROPY_SCORE,
                               public_key_hex: Optional[str] = None,
                               expected_sequence: Optional[int] = None) -> EntropySelection:
    """Run every gate on an oracle result and fold it into base entropy.

    Raises:
        InvalidOracleSignature: Signature missing or invalid while a key is configured.
        StaleRandomness: Result too old, from the future, or for another sequence.
        LowEntropyQuality: Score below ``min_score`` or a zero fold.
    """
    if public_key_hex and not verify_oracle_signature(randomness, public_key_hex):
        raise InvalidOracleSignature(
            "Oracle randomness signature is missing or invalid",
            details={'sequence': randomness.sequence},
        )
    if expected_sequence is not None and randomness.sequence != expected_sequence:
        raise StaleRandomness(
            "Oracle randomness belongs to a different request",
            error_code="EntropySequenceMismatch",
            details={'expected': expected_sequence, 'actual': randomness.sequence},
        )
    check_freshness(randomness.published_at, now, freshness_window)

    score = score_entropy(randomness.value)
    if score.score < min_score:
        raise LowEntropyQuality(
            f"Entropy score {score.score} below minimum {min_score}",
            details={'score': score.score, 'quality': score.quality.value},
        )
    value = fold_to_u64(randomness.value)
    if value == 0:
        raise LowEntropyQuality("Oracle randomness folds to zero")

    return EntropySelection(value=value, source=SOURCE_ORACLE, score=score)


# ------------------------------------------------------------------
# Fallback mix
# ------------------------------------------------------------------
def fallback_entropy(nonce: int, sequence: int, requester_id: int, now: int) -> int:
    """Derive base entropy from caller-supplied values.

    Weaker than oracle randomness: every input is known to the requester or
    observable, so the outcome can be predicted before the request is sent.
    """
    require_u64('nonce', nonce)
    require_u64('sequence', sequence)
    require_u64('requester_id', requester_id)
    require_timestamp('now', now)

    payload = (
        b"sfe-fallback-entropy"
        + nonce.to_bytes(8, "little")
        + sequence.to_bytes(8, "little")
        + requester_id.to_bytes(8, "little")
        + now.to_bytes(8, "little", signed=True)
    )
    value = int.from_bytes(hashlib.sha256(payload).digest()[:8], "little") & U64_MAX
    return value or ZERO_ENTROPY_FALLBACK


def select_base_entropy(randomness: Optional[OracleRandomness], *, now: int, nonce: int, sequence: int,
                        requester_id: int, freshness_window: int = DEFAULT_FRESHNESS_WINDOW,
                        min_score: int = DEFAULT_MIN_ENTROPY_SCORE, public_key_hex: Optional[str] = None,
                        require_oracle: bool = False, fallback_time: Optional[int] = None) -> EntropySelection:
    """Pick oracle entropy when it passes the gate, otherwise the fallback mix.

    With ``require_oracle`` the gate error is raised instead of falling back.
    ``fallback_time`` replaces ``now`` in the fallback mix, so a caller can bind
    the fallback to a fixed moment such as the purchase time.
    """
    try:
        if randomness is None:
            raise StaleRandomness(
                "No oracle randomness available", error_code="EntropyNotReady",
                details={'sequence': sequence},
            )
        return evaluate_oracle_randomness(
            randomness,
            now,
            freshness_window=freshness_window,
            min_score=min_score,
            public_key_hex=public_key_hex,
            expected_sequence=sequence,
        )
    except (StaleRandomness, LowEntropyQuality, InvalidOracleSignature) as exc:
        if require_oracle:
            raise
        logger.warning(
            "Oracle randomness rejected (%s: %s); using weaker fallback entropy for sequence %d",
            exc.error_code, exc.message, sequence,
        )
        return EntropySelection(
            value=fallback_entropy(nonce, sequence, requester_id, now if fallback_time is None else fallback_time),
            source=SOURCE_FALLBACK,
            reason=exc.error_code,
        )
