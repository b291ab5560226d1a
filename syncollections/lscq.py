"""Scalable circular queues: a bounded ring and an unbounded chain of rings.

``BoundedQueue`` holds at most ``SCQ_SIZE`` items in a ring of slots whose
packed flags (safe bit, empty bit, cycle number) decide which positions may be
filled or drained. ``Queue`` links bounded rings together: when the ring at the
tail fills up it is closed and a fresh ring is appended, and the head moves on
once a closed ring is drained.

Each ring step runs under the ring's own lock, standing in for the atomic
instructions the algorithm is defined with, so both classes are safe to share
between threads.
"""

from __future__ import annotations

import threading
from typing import Any

from syncollections.scqutil import (
    SCQ_SIZE,
    cache_remap_16byte,
    load_scq_flags,
    new_scq_flags,
    uint64_get1,
    uint64_get63,
)

_MASK64 = (1 << 64) - 1
_CLOSED_BIT = 1 << 63
_INITIAL_FLAGS = new_scq_flags(True, True, 0)
_THRESHOLD_MAX = 2 * SCQ_SIZE - 1


class BoundedQueue:
    """A FIFO queue of at most ``SCQ_SIZE`` items.

    ``enqueue`` returns False when the queue is full or closed; ``dequeue``
    returns ``(item, True)`` or ``(None, False)`` when nothing is available.
    """

    __slots__ = (
        "_flags",
        "_data",
        "_head",
        "_tail",
        "_threshold",
        "_next",
        "_lock",
        "_link_lock",
    )

    def __init__(self) -> None:
        self._flags = [_INITIAL_FLAGS] * SCQ_SIZE
        self._data: list[Any] = [None] * SCQ_SIZE
        self._head = SCQ_SIZE
        # Top bit: closed; low 63 bits: tail position.
        self._tail = SCQ_SIZE
        self._threshold = -1
        self._next: BoundedQueue | None = None
        self._lock = threading.Lock()
        self._link_lock = threading.Lock()

    def enqueue(self, data: Any) -> bool:
        """Append ``data``; return False if the queue is full or closed."""
        with self._lock:
            return self._enqueue(data)

    def dequeue(self) -> tuple[Any, bool]:
        """Remove the oldest item, returning ``(item, True)`` or ``(None, False)``."""
        with self._lock:
            return self._dequeue()

    def _enqueue(self, data: Any) -> bool:
        while True:
            tail_value = self._tail
            self._tail = (tail_value + 1) & _MASK64
            if uint64_get1(tail_value):
                # Closed: the caller must put the item elsewhere.
                return False
            position = uint64_get63(tail_value)
            slot = cache_remap_16byte(position)
            cycle_t = position // SCQ_SIZE
            is_safe, is_empty, cycle = load_scq_flags(self._flags[slot])
            if cycle < cycle_t and is_empty and (is_safe or self._head <= position):
                self._flags[slot] = new_scq_flags(True, False, cycle_t)
                self._data[slot] = data
                self._threshold = _THRESHOLD_MAX
                return True
            if position + 1 >= self._head + SCQ_SIZE:
                return False

    def _dequeue(self) -> tuple[Any, bool]:
        if self._threshold < 0:
            return None, False
        while True:
            position = self._head
            self._head = position + 1
            slot = cache_remap_16byte(position)
            cycle_h = position // SCQ_SIZE
            is_safe, is_empty, cycle = load_scq_flags(self._flags[slot])
            if cycle == cycle_h:
                data = self._data[slot]
                self._flags[slot] = new_scq_flags(is_safe, True, cycle)
                self._data[slot] = None
                return data, True
            if cycle < cycle_h:
                if is_empty:
                    self._flags[slot] = new_scq_flags(is_safe, True, cycle_h)
                else:
                    self._flags[slot] = new_scq_flags(False, False, cycle)
            tail_position = uint64_get63(self._tail)
            if tail_position <= position + 1:
                self._fix_state(position + 1)
                self._threshold -= 1
                return None, False
            previous = self._threshold
            self._threshold -= 1
            if previous <= 0:
                return None, False

    def _fix_state(self, original_head: int) -> None:
        head = self._head
        if original_head < head:
            return
        if self._tail >= head:
            # Closed, or already consistent.
            return
        self._tail = head

    def _close(self) -> None:
        """Make every later enqueue on this ring fail."""
        with self._lock:
            self._tail |= _CLOSED_BIT

    def _reset_threshold(self) -> None:
        with self._lock:
            self._threshold = _THRESHOLD_MAX

    def __repr__(self) -> str:
        return f"BoundedQueue(head={self._head}, tail={uint64_get63(self._tail)})"


class Queue:
    """An unbounded FIFO queue made of linked ``BoundedQueue`` rings."""

    __slots__ = ("_head", "_tail", "_ptr_lock")

    def __init__(self) -> None:
        ring = BoundedQueue()
        self._head = ring
        self._tail = ring
        self._ptr_lock = threading.Lock()

    def _advance_head(self, old: BoundedQueue, new: BoundedQueue) -> None:
        with self._ptr_lock:
            if self._head is old:
                self._head = new

    def _advance_tail(self, old: BoundedQueue, new: BoundedQueue) -> None:
        with self._ptr_lock:
            if self._tail is old:
                self._tail = new

    def enqueue(self, data: Any) -> bool:
        """Append ``data``. Always returns True."""
        while True:
            ring = self._tail
            following = ring._next
            if following is not None:
                self._advance_tail(ring, following)
                continue
            if ring.enqueue(data):
                return True
            ring._close()
            with ring._link_lock:
                if ring._next is not None:
                    continue
                fresh = BoundedQueue()
                fresh.enqueue(data)
                ring._next = fresh
                self._advance_tail(ring, fresh)
                return True

    def dequeue(self) -> tuple[Any, bool]:
        """Remove the oldest item, returning ``(item, True)`` or ``(None, False)``."""
        while True:
            ring = self._head
            data, ok = ring.dequeue()
            if ok:
                return data, True
            following = ring._next
            if following is None:
                return None, False
            # No more items will arrive in this ring; drain what is left.
            ring._reset_threshold()
            data, ok = ring.dequeue()
            if ok:
                return data, True
            self._advance_head(ring, following)

    def __repr__(self) -> str:
        return "Queue()"