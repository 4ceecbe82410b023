"""Binary min-heap keyed by numeric distance.

Entries with equal distance pop in insertion order, which keeps Dijkstra
tie-breaking deterministic.
"""

from __future__ import annotations

import heapq
from itertools import count
from typing import Generic, TypeVar

T = TypeVar("T")


class MinHeap(Generic[T]):
    """Min-priority queue of `(item, dist)` pairs."""

    def __init__(self) -> None:
        self._heap: list[tuple[float, int, T]] = []
        self._counter = count()

    def push(self, item: T, dist: float) -> None:
        heapq.heappush(self._heap, (float(dist), next(self._counter), item))

    def pop(self) -> tuple[T, float]:
        """Remove and return the entry with the smallest distance.

        Raises:
            IndexError: If the heap is empty.
        """
        if not self._heap:
            raise IndexError("pop from empty MinHeap")
        dist, _, item = heapq.heappop(self._heap)
        return item, dist

    def peek(self) -> tuple[T, float]:
        if not self._heap:
            raise IndexError("peek at empty MinHeap")
        dist, _, item = self._heap[0]
        return item, dist

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)
