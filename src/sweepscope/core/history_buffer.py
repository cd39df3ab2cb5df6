from __future__ import annotations

from collections.abc import Iterator
from typing import Generic, Optional, TypeVar

T = TypeVar("T")

DEFAULT_HIGH_WATER = 1000
DEFAULT_LOW_WATER = 800


class HistoryBuffer(Generic[T]):
    """
    Bounded, insertion-ordered history for live display.

    Once the buffer grows past ``high_water`` it is cut back to the newest
    ``low_water`` entries in a single slice, so the front is never popped one
    element at a time.
    """

    def __init__(
        self,
        high_water: int = DEFAULT_HIGH_WATER,
        low_water: int = DEFAULT_LOW_WATER,
    ) -> None:
        if low_water <= 0:
            raise ValueError("low_water must be positive")
        if high_water < low_water:
            raise ValueError("high_water must be >= low_water")
        self._high_water = int(high_water)
        self._low_water = int(low_water)
        self._items: list[T] = []

    @property
    def high_water(self) -> int:
        return self._high_water

    @property
    def low_water(self) -> int:
        return self._low_water

    def push(self, item: T) -> None:
        items = self._items
        items.append(item)
        if len(items) > self._high_water:
            # Rebind, never mutate in place: snapshots must not see a half-cut list.
            self._items = items[len(items) - self._low_water :]

    def snapshot(self) -> tuple[T, ...]:
        """Return an immutable copy of the current contents, oldest first."""
        return tuple(self._items)

    def latest(self) -> Optional[T]:
        if not self._items:
            return None
        return self._items[-1]

    def clear(self) -> None:
        self._items = []

    def __len__(self) -> int:  # pragma: no cover - trivial
        return len(self._items)

    def __getitem__(self, index: int) -> T:
        return self._items[index]

    def __iter__(self) -> Iterator[T]:
        return iter(tuple(self._items))


__all__ = ["DEFAULT_HIGH_WATER", "DEFAULT_LOW_WATER", "HistoryBuffer"]
