"""
Event time binning.

Synaptic events from other groups arrive with delivery times that carry
floating-point jitter. Binning snaps those times onto a coarser grid so that
the order in which a lowered cell sees its events does not depend on that
jitter. A binned time is never earlier than the floor it is given, which is
the time the lowered cell has already reached.

Policies:
- NONE: keep the time as is
- REGULAR: round down onto a grid of bin-interval multiples. Each key has
  its own grid, anchored at the first time binned for that key, so the bins
  of different cells do not coincide
- FOLLOWING: reuse the previous binned time of the same key when the new
  time falls within one bin interval of it
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Hashable

from neurite.errors import ConfigurationError, validate_finite, validate_positive
from neurite.typing import TimeMs


class BinningKind(Enum):
    """Event binning policies."""

    NONE = "none"
    REGULAR = "regular"
    FOLLOWING = "following"


class EventBinner:
    """Quantize event delivery times according to a binning policy.

    Args:
        policy: Binning policy
        bin_interval: Width of a bin (ms); must be positive unless the
            policy is NONE

    Raises:
        ConfigurationError: If the interval does not suit the policy
    """

    def __init__(self, policy: BinningKind = BinningKind.NONE, bin_interval: TimeMs = 0.0):
        policy = BinningKind(policy)
        validate_finite(bin_interval, "bin_interval")
        validate_positive(bin_interval, "bin_interval", allow_zero=True)
        if policy is not BinningKind.NONE and bin_interval <= 0:
            raise ConfigurationError(
                f"bin_interval must be positive for {policy.value} binning, got {bin_interval}"
            )

        self.policy = policy
        self.bin_interval = bin_interval
        self._last_event_time: Dict[Hashable, TimeMs] = {}
        self._grid_anchor: Dict[Hashable, TimeMs] = {}

    def reset(self) -> None:
        """Forget the per-key anchors so binning starts afresh from time 0."""
        self._last_event_time.clear()
        self._grid_anchor.clear()

    def bin(self, key: Hashable, time: TimeMs, floor: TimeMs) -> TimeMs:
        """Binned delivery time of an event for ``key`` (typically the target gid).

        Args:
            key: Identity the event belongs to
            time: Raw delivery time (ms)
            floor: Earliest admissible result (ms)
        """
        binned = time

        if self.policy is BinningKind.REGULAR:
            anchor = self._grid_anchor.setdefault(key, time)
            binned = anchor + ((time - anchor) // self.bin_interval) * self.bin_interval
        elif self.policy is BinningKind.FOLLOWING:
            last = self._last_event_time.get(key)
            if last is not None and last <= time < last + self.bin_interval:
                binned = last
            else:
                self._last_event_time[key] = time

        return max(binned, floor)

    def __repr__(self) -> str:
        return f"EventBinner(policy={self.policy.value}, bin_interval={self.bin_interval})"
