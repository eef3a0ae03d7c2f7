"""Slab decoder: raw account bytes -> Header / MarketConfig / RiskParams / EngineState.

Decoding is pure and performs no I/O. Validation order is fixed:

1. buffer length against ``MIN_SLAB_LEN`` (``BufferTooSmall``),
2. magic tag (``InvalidMagic``),
3. format version (``UnsupportedVersion``).

The input is never mutated and no reference to it is kept in the results.
"""

from __future__ import annotations

import logging
from typing import Iterator

from ..errors import BufferTooSmall, InvalidMagic, UnsupportedVersion
from .codec import Buffer, read_int, read_struct, read_u64, U32
from .layout import (
    BITMAP_WORDS,
    CONFIG_FIELDS,
    ENGINE_BITMAP_OFF,
    ENGINE_FIELDS,
    ENGINE_OFF,
    ENGINE_PARAMS_OFF,
    HEADER_FIELDS,
    MAX_ACCOUNTS,
    MIN_SLAB_LEN,
    RISK_PARAMS_FIELDS,
    SLAB_MAGIC,
    SUPPORTED_VERSIONS,
)
from .types import EngineState, Header, MarketConfig, RiskParams, SlabSnapshot, from_values

logger = logging.getLogger(__name__)


def validate_slab(buf: Buffer) -> None:
    """Raise the first applicable ``DecodeError`` for *buf*, or return None."""
    if len(buf) < MIN_SLAB_LEN:
        raise BufferTooSmall(MIN_SLAB_LEN, len(buf))
    magic = read_u64(buf, 0)
    if magic != SLAB_MAGIC:
        raise InvalidMagic(magic)
    version = read_int(buf, 8, U32)
    if version not in SUPPORTED_VERSIONS:
        raise UnsupportedVersion(version, SUPPORTED_VERSIONS)


def decode_header(buf: Buffer) -> Header:
    validate_slab(buf)
    return from_values(Header, read_struct(buf, 0, HEADER_FIELDS))


def decode_config(buf: Buffer) -> MarketConfig:
    validate_slab(buf)
    return from_values(MarketConfig, read_struct(buf, 0, CONFIG_FIELDS))


def decode_risk_params(buf: Buffer) -> RiskParams:
    validate_slab(buf)
    return from_values(RiskParams, read_struct(buf, ENGINE_OFF + ENGINE_PARAMS_OFF, RISK_PARAMS_FIELDS))


def decode_engine(buf: Buffer) -> EngineState:
    validate_slab(buf)
    return from_values(EngineState, read_struct(buf, ENGINE_OFF, ENGINE_FIELDS))


def decode_slab(buf: Buffer) -> SlabSnapshot:
    """Decode every fixed block of the slab in one pass (validates once)."""
    validate_slab(buf)
    return SlabSnapshot(
        header=from_values(Header, read_struct(buf, 0, HEADER_FIELDS)),
        config=from_values(MarketConfig, read_struct(buf, 0, CONFIG_FIELDS)),
        params=from_values(RiskParams, read_struct(buf, ENGINE_OFF + ENGINE_PARAMS_OFF, RISK_PARAMS_FIELDS)),
        engine=from_values(EngineState, read_struct(buf, ENGINE_OFF, ENGINE_FIELDS)),
    )


# -- Used-slot bitmap --------------------------------------------------------

def bitmap_words(buf: Buffer) -> tuple[int, ...]:
    """The 64 raw u64 words of the used-slot bitmap."""
    validate_slab(buf)
    base = ENGINE_OFF + ENGINE_BITMAP_OFF
    return tuple(read_u64(buf, base + 8 * i) for i in range(BITMAP_WORDS))


def is_used_bitmap(buf: Buffer, index: int) -> bool:
    """True when bit *index* of the used-slot bitmap is set."""
    if index < 0 or index >= MAX_ACCOUNTS:
        return False
    validate_slab(buf)
    word = read_u64(buf, ENGINE_OFF + ENGINE_BITMAP_OFF + 8 * (index >> 6))
    return bool((word >> (index & 63)) & 1)


def used_indices(buf: Buffer, capacity: int = MAX_ACCOUNTS) -> Iterator[int]:
    """Yield set bitmap indices in ascending order, stopping below *capacity*.

    Bits at or above *capacity* are ignored (logged at DEBUG).
    """
    for word_idx, word in enumerate(bitmap_words(buf)):
        while word:
            low = word & -word
            idx = word_idx * 64 + low.bit_length() - 1
            word ^= low
            if idx >= capacity:
                logger.debug("ignoring bitmap bit %d at or above capacity %d", idx, capacity)
                continue
            yield idx
