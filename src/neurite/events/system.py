"""
Event types and the time-ordered event queue.

Cell groups exchange spikes as discrete events. A spike leaving one cell
becomes one ``PostsynapticSpikeEvent`` per synapse it reaches; the group
owning the target cell queues those events until the interval in which
they are due, and hands them to its lowered cell in time order.

Sampling uses the same machinery: each scheduled sample is a
``SampleEvent`` in its own ``TimeOrderedQueue``.

Author: Neurite Project
Date: January 2026
"""

from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass
from typing import Generic, Iterable, List, Optional, Protocol, Tuple, TypeVar

from neurite.typing import CellMember, TimeMs


@dataclass(frozen=True)
class PostsynapticSpikeEvent:
    """A spike arriving at a synaptic target.

    Attributes:
        target: Target cell gid and the target index on that cell
        time: Delivery time (ms)
        weight: Synaptic weight applied on delivery
    """

    target: CellMember
    time: TimeMs
    weight: float


@dataclass(frozen=True)
class SampleEvent:
    """A pending sample: which sampler entry, and when."""

    sampler_index: int
    time: TimeMs


@dataclass(frozen=True)
class Spike:
    """A threshold crossing with its global source identity."""

    source: CellMember
    time: TimeMs


@dataclass(frozen=True)
class ThresholdCrossing:
    """A threshold crossing as recorded by a lowered cell (local source index)."""

    index: int
    time: TimeMs


class _Timed(Protocol):
    time: TimeMs


T = TypeVar("T", bound=_Timed)


class TimeOrderedQueue(Generic[T]):
    """Min-time priority queue over items with a ``time`` attribute.

    Items with equal times come out in insertion order. The queue knows
    nothing about what it holds, so it serves synaptic events, sample
    events and lowered-cell event lists alike.

    Example:
        >>> queue = TimeOrderedQueue()
        >>> queue.push(SampleEvent(0, 2.0))
        >>> queue.pop_if_before(1.0) is None
        True
        >>> queue.pop_if_before(3.0)
        SampleEvent(sampler_index=0, time=2.0)
    """

    def __init__(self, items: Optional[Iterable[T]] = None):
        self._heap: List[Tuple[TimeMs, int, T]] = []
        self._counter = itertools.count()
        if items is not None:
            self.push_many(items)

    def push(self, item: T) -> None:
        """Add an item in O(log n)."""
        heapq.heappush(self._heap, (item.time, next(self._counter), item))

    def push_many(self, items: Iterable[T]) -> None:
        for item in items:
            self.push(item)

    def pop_if_before(self, threshold: TimeMs) -> Optional[T]:
        """Remove and return the earliest item if its time is < ``threshold``.

        Returns None, leaving the queue untouched, otherwise.
        """
        if self._heap and self._heap[0][0] < threshold:
            return heapq.heappop(self._heap)[2]
        return None

    def time_if_before(self, threshold: TimeMs) -> Optional[TimeMs]:
        """Time of the earliest item if it is < ``threshold``, else None."""
        if self._heap and self._heap[0][0] < threshold:
            return self._heap[0][0]
        return None

    def peek_time(self) -> Optional[TimeMs]:
        """Time of the earliest item, None when empty."""
        if self._heap:
            return self._heap[0][0]
        return None

    def clear(self) -> None:
        self._heap.clear()

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)
