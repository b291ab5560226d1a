"""A thread-safe ordered set built on a lazy, lock-based skip list."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterator
from typing import Any

from syncollections.skiplist_util import (
    DEFAULT_HIGHEST_LEVEL,
    FULLY_LINKED,
    MARKED,
    MAX_LEVEL,
    BitFlag,
    random_level,
)

_LIVE = FULLY_LINKED | MARKED


class _Node:
    __slots__ = ("value", "next", "lock", "flags", "level")

    def __init__(self, value: Any, level: int) -> None:
        self.value = value
        self.next: list[_Node | None] = [None] * level
        self.lock = threading.Lock()
        self.flags = BitFlag()
        self.level = level

    def is_live(self) -> bool:
        return self.flags.mget(_LIVE, FULLY_LINKED)


def _unlock(preds: list[_Node | None], highest_locked: int) -> None:
    """Release the locks taken on ``preds[0..highest_locked]``, once per node."""
    prev: _Node | None = None
    for layer in range(highest_locked, -1, -1):
        pred = preds[layer]
        if pred is not prev:
            pred.lock.release()
            prev = pred


class SkipSet:
    """A set of mutually comparable values, kept in ascending order.

    All operations may be called concurrently from several threads.
    """

    def __init__(self) -> None:
        self._header = _Node(None, MAX_LEVEL)
        self._header.flags.set_true(FULLY_LINKED)
        self._length = 0
        self._length_lock = threading.Lock()
        self._highest_level = DEFAULT_HIGHEST_LEVEL
        self._level_lock = threading.Lock()

    def _random_level(self) -> int:
        level = random_level()
        if level > self._highest_level:
            with self._level_lock:
                if level > self._highest_level:
                    self._highest_level = level
        return level

    def _adjust_length(self, delta: int) -> None:
        with self._length_lock:
            self._length += delta

    def _search(self, value: Any, preds: list, succs: list, stop_on_match: bool) -> int:
        """Fill ``preds``/``succs`` for ``value``; return the highest layer holding it, or -1."""
        found = -1
        x = self._header
        for layer in range(self._highest_level - 1, -1, -1):
            succ = x.next[layer]
            while succ is not None and succ.value < value:
                x = succ
                succ = x.next[layer]
            preds[layer] = x
            succs[layer] = succ
            if found == -1 and succ is not None and succ.value == value:
                found = layer
                if stop_on_match:
                    return found
        return found

    def add(self, value: Any) -> bool:
        """Insert ``value``; return False if it was already present."""
        level = self._random_level()
        preds: list[_Node | None] = [None] * MAX_LEVEL
        succs: list[_Node | None] = [None] * MAX_LEVEL
        while True:
            found = self._search(value, preds, succs, stop_on_match=True)
            if found != -1:
                node = succs[found]
                if not node.flags.get(MARKED):
                    while not node.flags.get(FULLY_LINKED):
                        time.sleep(0)
                    return False
                # Being removed by another thread: try again.
                continue

            highest_locked = -1
            valid = True
            prev_pred: _Node | None = None
            for layer in range(level):
                pred, succ = preds[layer], succs[layer]
                if pred is not prev_pred:
                    pred.lock.acquire()
                    highest_locked = layer
                    prev_pred = pred
                valid = (
                    not pred.flags.get(MARKED)
                    and (succ is None or not succ.flags.get(MARKED))
                    and pred.next[layer] is succ
                )
                if not valid:
                    break
            if not valid:
                _unlock(preds, highest_locked)
                continue

            node = _Node(value, level)
            for layer in range(level):
                node.next[layer] = succs[layer]
                preds[layer].next[layer] = node
            node.flags.set_true(FULLY_LINKED)
            _unlock(preds, highest_locked)
            self._adjust_length(1)
            return True

    def contains(self, value: Any) -> bool:
        """Return True if ``value`` is in the set."""
        x = self._header
        for layer in range(self._highest_level - 1, -1, -1):
            nxt = x.next[layer]
            while nxt is not None and nxt.value < value:
                x = nxt
                nxt = x.next[layer]
            if nxt is not None and nxt.value == value:
                return nxt.is_live()
        return False

    def remove(self, value: Any) -> bool:
        """Remove ``value``; return False if it was not present."""
        preds: list[_Node | None] = [None] * MAX_LEVEL
        succs: list[_Node | None] = [None] * MAX_LEVEL
        victim: _Node | None = None
        is_marked = False
        top_layer = -1
        while True:
            found = self._search(value, preds, succs, stop_on_match=False)
            if not is_marked and not (
                found != -1
                and succs[found].is_live()
                and succs[found].level - 1 == found
            ):
                return False

            if not is_marked:
                victim = succs[found]
                top_layer = found
                victim.lock.acquire()
                if victim.flags.get(MARKED):
                    victim.lock.release()
                    return False
                victim.flags.set_true(MARKED)
                is_marked = True

            highest_locked = -1
            valid = True
            prev_pred: _Node | None = None
            for layer in range(top_layer + 1):
                pred, succ = preds[layer], succs[layer]
                if pred is not prev_pred:
                    pred.lock.acquire()
                    highest_locked = layer
                    prev_pred = pred
                valid = not pred.flags.get(MARKED) and pred.next[layer] is succ
                if not valid:
                    break
            if not valid:
                _unlock(preds, highest_locked)
                continue

            for layer in range(top_layer, -1, -1):
                preds[layer].next[layer] = victim.next[layer]
            victim.lock.release()
            _unlock(preds, highest_locked)
            self._adjust_length(-1)
            return True

    def range(self, f: Callable[[Any], bool]) -> None:
        """Call ``f`` on each value in ascending order until it returns a false value."""
        for value in self:
            if not f(value):
                break

    def __len__(self) -> int:
        return self._length

    def __iter__(self) -> Iterator[Any]:
        x = self._header.next[0]
        while x is not None:
            if x.is_live():
                yield x.value
            x = x.next[0]

    def __contains__(self, value: object) -> bool:
        return self.contains(value)

    def __repr__(self) -> str:
        return f"SkipSet({list(self)!r})"