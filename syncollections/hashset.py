"""A plain hash set with a callback-style range operation."""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable, Iterator


class HashSet:
    """An unordered set of hashable values."""

    __slots__ = ("_items",)

    def __init__(self, values: Iterable[Hashable] | None = None) -> None:
        self._items: set[Hashable] = set(values) if values is not None else set()

    def add(self, value: Hashable) -> bool:
        """Add ``value``. Always returns True."""
        self._items.add(value)
        return True

    def contains(self, value: Hashable) -> bool:
        """Return True if ``value`` is in the set."""
        return value in self._items

    def remove(self, value: Hashable) -> bool:
        """Remove ``value`` if present. Always returns True."""
        self._items.discard(value)
        return True

    def range(self, f: Callable[[Hashable], bool]) -> None:
        """Call ``f`` for each value until it returns a false value."""
        for value in list(self._items):
            if not f(value):
                break

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(list(self._items))

    def __contains__(self, value: object) -> bool:
        return value in self._items

    def __repr__(self) -> str:
        return f"HashSet({sorted(self._items, key=repr)!r})"