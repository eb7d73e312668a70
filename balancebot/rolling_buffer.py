"""Fixed-capacity buffer where the oldest items fall off the front."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator
from typing import Generic, TypeVar

T = TypeVar("T")


class RollingBuffer(Generic[T]):
    """Items are appended at the back; once full, the oldest item is dropped."""

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._items: deque[T] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._items.maxlen or 0

    def append(self, value: T) -> None:
        self._items.append(value)

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> T:
        """Return an item by position, 0 being the oldest."""
        return self._items[index]

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)