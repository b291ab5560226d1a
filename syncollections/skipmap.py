"""A thread-safe ordered map built on a lazy, lock-based skip list."""

from __future__ import annotations

import threading
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
    __slots__ = ("key", "value", "next", "lock", "flags", "level")

    def __init__(self, key: Any, value: Any, level: int) -> None:
        self.key = key
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


class SkipMap:
    """A map from mutually comparable keys to values, kept in ascending key order.

    All operations may be called concurrently from several threads.
    """

    def __init__(self) -> None:
        self._header = _Node(None, "", MAX_LEVEL)
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

    def _search(self, key: Any, preds: list, succs: list, stop_on_match: bool) -> int:
        """Fill ``preds``/``succs`` for ``key``; return the highest layer holding it, or -1."""
        found = -1
        x = self._header
        for layer in range(self._highest_level - 1, -1, -1):
            succ = x.next[layer]
            while succ is not None and succ.key < key:
                x = succ
                succ = x.next[layer]
            preds[layer] = x
            succs[layer] = succ
            if found == -1 and succ is not None and succ.key == key:
                found = layer
                if stop_on_match:
                    return found
        return found

    def _upsert(
        self, key: Any, make_value: Callable[[], Any], replace: bool
    ) -> tuple[Any, bool]:
        """Insert a value for ``key`` or deal with the existing one.

        With ``replace`` an existing value is overwritten; otherwise it is
        returned untouched. ``make_value`` is called at most once.
        """
        level = self._random_level()
        preds: list[_Node | None] = [None] * MAX_LEVEL
        succs: list[_Node | None] = [None] * MAX_LEVEL
        while True:
            found = self._search(key, preds, succs, stop_on_match=True)
            if found != -1:
                node = succs[found]
                if not node.flags.get(MARKED):
                    if replace:
                        value = make_value()
                        node.value = value
                        return value, True
                    return node.value, True
                # Being deleted by another thread: try again.
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

            value = make_value()
            node = _Node(key, value, level)
            for layer in range(level):
                node.next[layer] = succs[layer]
                preds[layer].next[layer] = node
            node.flags.set_true(FULLY_LINKED)
            _unlock(preds, highest_locked)
            self._adjust_length(1)
            return value, False

    def _remove(self, key: Any) -> _Node | None:
        """Unlink the node for ``key``; return it, or None if this call removed nothing."""
        preds: list[_Node | None] = [None] * MAX_LEVEL
        succs: list[_Node | None] = [None] * MAX_LEVEL
        victim: _Node | None = None
        is_marked = False
        top_layer = -1
        while True:
            found = self._search(key, preds, succs, stop_on_match=False)
            if not is_marked and not (
                found != -1
                and succs[found].is_live()
                and succs[found].level - 1 == found
            ):
                return None

            if not is_marked:
                victim = succs[found]
                top_layer = found
                victim.lock.acquire()
                if victim.flags.get(MARKED):
                    victim.lock.release()
                    return None
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
            return victim

    def store(self, key: Any, value: Any) -> None:
        """Set the value for ``key``."""
        self._upsert(key, lambda: value, replace=True)

    def load(self, key: Any) -> tuple[Any, bool]:
        """Return ``(value, True)`` for a present key, else ``(None, False)``."""
        x = self._header
        for layer in range(self._highest_level - 1, -1, -1):
            nxt = x.next[layer]
            while nxt is not None and nxt.key < key:
                x = nxt
                nxt = x.next[layer]
            if nxt is not None and nxt.key == key:
                if nxt.is_live():
                    return nxt.value, True
                return None, False
        return None, False

    def load_and_delete(self, key: Any) -> tuple[Any, bool]:
        """Delete ``key``, returning ``(previous value, True)`` or ``(None, False)``."""
        node = self._remove(key)
        if node is None:
            return None, False
        return node.value, True

    def load_or_store(self, key: Any, value: Any) -> tuple[Any, bool]:
        """Return ``(existing, True)`` if present, else store ``value`` and return ``(value, False)``."""
        return self._upsert(key, lambda: value, replace=False)

    def load_or_store_lazy(self, key: Any, f: Callable[[], Any]) -> tuple[Any, bool]:
        """Like :meth:`load_or_store`, but the value comes from ``f``, called only when storing."""
        return self._upsert(key, f, replace=False)

    def delete(self, key: Any) -> bool:
        """Delete ``key``; return True if this call removed it."""
        return self._remove(key) is not None

    def range(self, f: Callable[[Any, Any], bool]) -> None:
        """Call ``f(key, value)`` in ascending key order until it returns a false value."""
        for key, value in self.items():
            if not f(key, value):
                break

    def items(self) -> Iterator[tuple[Any, Any]]:
        """Yield ``(key, value)`` pairs in ascending key order."""
        x = self._header.next[0]
        while x is not None:
            if x.is_live():
                yield x.key, x.value
            x = x.next[0]

    def __len__(self) -> int:
        return self._length

    def __iter__(self) -> Iterator[Any]:
        for key, _ in self.items():
            yield key

    def __repr__(self) -> str:
        return f"SkipMap({dict(self.items())!r})"