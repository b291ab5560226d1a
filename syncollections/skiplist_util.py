"""Shared pieces of the skip-list collections: node flags and level selection."""

from __future__ import annotations

import random
import threading

FULLY_LINKED = 1 << 0
MARKED = 1 << 1

MAX_LEVEL = 16
P = 0.25
DEFAULT_HIGHEST_LEVEL = 3

_BRANCHING = int(1 / P)


class BitFlag:
    """A thread-safe set of bit flags."""

    __slots__ = ("_data", "_lock")

    def __init__(self, data: int = 0) -> None:
        self._data = data
        self._lock = threading.Lock()

    def set_true(self, flags: int) -> None:
        """Set every bit in ``flags``."""
        with self._lock:
            self._data |= flags

    def set_false(self, flags: int) -> None:
        """Clear every bit in ``flags``."""
        with self._lock:
            self._data &= ~flags

    def get(self, flag: int) -> bool:
        """Return True if any bit of ``flag`` is set."""
        return (self._data & flag) != 0

    def mget(self, check: int, expect: int) -> bool:
        """Return True if the bits selected by ``check`` equal ``expect``."""
        return (self._data & check) == expect

    def __repr__(self) -> str:
        return f"BitFlag({self._data:#x})"


def random_level() -> int:
    """Pick a node level: 1 with probability 3/4, each further level 1/4 as likely."""
    level = 1
    while level < MAX_LEVEL and random.randrange(_BRANCHING) == 0:
        level += 1
    return level