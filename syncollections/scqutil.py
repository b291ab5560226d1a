"""Bit-level helpers for the scalable circular queue: packed flags and slot remapping."""

from __future__ import annotations

from typing import NamedTuple

SCQ_SIZE = 1 << 16
CACHE_LINE_SIZE = 64

_BIT63 = 1 << 63
_BIT62 = 1 << 62
_LOW63 = _BIT63 - 1
_LOW62 = _BIT62 - 1
_SLOTS_PER_LINE = CACHE_LINE_SIZE // 2
_LINES = SCQ_SIZE // _SLOTS_PER_LINE


class SCQFlags(NamedTuple):
    """The decoded flags word of a queue slot."""

    is_safe: bool
    is_empty: bool
    cycle: int


def uint64_get63(value: int) -> int:
    """Return the low 63 bits of ``value``."""
    return value & _LOW63


def uint64_get1(value: int) -> bool:
    """Return True if the top (63rd) bit of ``value`` is set."""
    return (value & _BIT63) == _BIT63


def uint64_get_all(value: int) -> tuple[bool, int]:
    """Split ``value`` into its top bit and its low 63 bits."""
    return uint64_get1(value), uint64_get63(value)


def load_scq_flags(flags: int) -> SCQFlags:
    """Decode a slot flags word: safe bit, empty bit and 62-bit cycle."""
    return SCQFlags(
        is_safe=(flags & _BIT63) == _BIT63,
        is_empty=(flags & _BIT62) == _BIT62,
        cycle=flags & _LOW62,
    )


def new_scq_flags(is_safe: bool, is_empty: bool, cycle: int) -> int:
    """Encode a slot flags word; the cycle is truncated to 62 bits."""
    value = cycle & _LOW62
    if is_safe:
        value |= _BIT63
    if is_empty:
        value |= _BIT62
    return value


def cache_remap_16byte(index: int) -> int:
    """Map a queue position to a ring slot so neighbouring positions use different cache lines."""
    raw = index & (SCQ_SIZE - 1)
    line_num = raw % _LINES
    line_idx = raw // _LINES
    return line_num * _SLOTS_PER_LINE + line_idx