"""Bounded rolling history of circuit samples for charting."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Iterator

DEFAULT_CAPACITY: int = 50


@dataclass(frozen=True)
class HistorySample:
    """One charted point.

    Attributes:
        time: Tick index the sample was taken on.
        voltage: Source voltage in volts.
        current: Loop current in amps.
    """

    time: int
    voltage: float
    current: float


class HistoryBuffer:
    """FIFO of the most recent samples; the oldest is evicted first."""

    __slots__ = ("_samples",)

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        """Create an empty buffer.

        Raises:
            ValueError: If capacity < 1.
        """
        if capacity < 1:
            raise ValueError("capacity must be >= 1.")
        self._samples: deque[HistorySample] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._samples.maxlen or 0

    def append(self, sample: HistorySample) -> None:
        self._samples.append(sample)

    def clear(self) -> None:
        self._samples.clear()

    def samples(self) -> tuple[HistorySample, ...]:
        """Return an immutable, chronologically ordered copy."""
        return tuple(self._samples)

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[HistorySample]:
        return iter(tuple(self._samples))
