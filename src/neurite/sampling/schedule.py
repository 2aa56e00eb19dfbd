"""
Time schedules for samplers.

A schedule produces the sample times that fall inside an interval. The
group engine asks each sampler's schedule for the times in
``[tstart, tfinal)`` once per ``advance`` call, so intervals are requested
in increasing, non-overlapping order; ``reset`` rewinds a schedule to its
initial state.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

import numpy as np

from neurite.errors import ConfigurationError, validate_finite, validate_positive
from neurite.typing import TimeMs


class Schedule(ABC):
    """Source of sample times."""

    @abstractmethod
    def events(self, t0: TimeMs, t1: TimeMs) -> List[TimeMs]:
        """Sorted times in ``[t0, t1)``."""

    def reset(self) -> None:
        """Rewind to the initial state."""


class RegularSchedule(Schedule):
    """Times ``tstart + k*dt`` for k = 0, 1, ... strictly before ``tstop``.

    Args:
        tstart: First time (ms)
        dt: Spacing (ms)
        tstop: End of the schedule (ms), exclusive
    """

    def __init__(self, tstart: TimeMs, dt: TimeMs, tstop: TimeMs = math.inf):
        validate_finite(tstart, "tstart")
        validate_positive(dt, "dt")
        self.tstart = tstart
        self.dt = dt
        self.tstop = tstop

    def events(self, t0: TimeMs, t1: TimeMs) -> List[TimeMs]:
        t0 = max(t0, self.tstart)
        t1 = min(t1, self.tstop)
        if t0 >= t1:
            return []

        # floor then walk forward, so rounding in the division cannot skip a time
        k = math.floor((t0 - self.tstart) / self.dt)
        t = self.tstart + k * self.dt
        while t < t0:
            k += 1
            t = self.tstart + k * self.dt

        times = []
        while t < t1:
            times.append(t)
            k += 1
            t = self.tstart + k * self.dt
        return times

    def __repr__(self) -> str:
        return f"RegularSchedule(tstart={self.tstart}, dt={self.dt}, tstop={self.tstop})"


class ExplicitSchedule(Schedule):
    """A fixed list of times, consumed through a cursor."""

    def __init__(self, times: Iterable[TimeMs]):
        self.times = np.sort(np.asarray(list(times), dtype=np.float64))
        self._start = 0

    def events(self, t0: TimeMs, t1: TimeMs) -> List[TimeMs]:
        lo = self._start + int(np.searchsorted(self.times[self._start:], t0, side="left"))
        hi = lo + int(np.searchsorted(self.times[lo:], t1, side="left"))
        self._start = hi
        return self.times[lo:hi].tolist()

    def reset(self) -> None:
        self._start = 0

    def __repr__(self) -> str:
        return f"ExplicitSchedule(n={len(self.times)})"


class PoissonSchedule(Schedule):
    """Poisson process starting at ``tstart`` with rate ``rate_khz`` (events per ms).

    The random stream is reproducible: ``reset`` reseeds the generator.
    """

    def __init__(self, tstart: TimeMs, rate_khz: float, seed: Optional[int] = None):
        validate_finite(tstart, "tstart")
        validate_positive(rate_khz, "rate_khz")
        if seed is not None and seed < 0:
            raise ConfigurationError(f"seed must be non-negative, got {seed}")
        self.tstart = tstart
        self.rate_khz = rate_khz
        self.seed = seed
        self.reset()

    def _step(self) -> None:
        self._next = self._next + float(self._rng.exponential(1.0 / self.rate_khz))

    def reset(self) -> None:
        self._rng = np.random.default_rng(self.seed)
        self._next = self.tstart
        self._step()

    def events(self, t0: TimeMs, t1: TimeMs) -> List[TimeMs]:
        while self._next < t0:
            self._step()
        times = []
        while self._next < t1:
            times.append(self._next)
            self._step()
        return times

    def __repr__(self) -> str:
        return f"PoissonSchedule(tstart={self.tstart}, rate_khz={self.rate_khz}, seed={self.seed})"
