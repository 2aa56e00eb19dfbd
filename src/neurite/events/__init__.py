"""
Discrete events for cell groups.

Usage:
======

    from neurite.events import (
        PostsynapticSpikeEvent, SampleEvent, Spike, ThresholdCrossing,
        TimeOrderedQueue, EventBinner, BinningKind,
    )

Author: Neurite Project
Date: January 2026
"""

from neurite.events.binning import BinningKind, EventBinner
from neurite.events.system import (
    PostsynapticSpikeEvent,
    SampleEvent,
    Spike,
    ThresholdCrossing,
    TimeOrderedQueue,
)

__all__ = [
    # Event types
    "PostsynapticSpikeEvent",
    "SampleEvent",
    "Spike",
    "ThresholdCrossing",
    # Queueing and binning
    "TimeOrderedQueue",
    "EventBinner",
    "BinningKind",
]
