"""
Shared type definitions for Neurite.

Cells are identified globally by a ``gid``; everything attached to a cell
(synaptic targets, spike detectors, probes) is identified by a
``CellMember``: the owning gid plus an index local to that cell.
"""

from __future__ import annotations

from typing import Any, Callable, NamedTuple, Sequence

# Simulated time in milliseconds
TimeMs = float

# Global cell identifier
CellGid = int

# Index of an item local to one cell
CellLid = int


class CellMember(NamedTuple):
    """An item (target, source or probe) on a specific cell."""

    gid: CellGid
    index: CellLid


class SampleRecord(NamedTuple):
    """One sampled value and the cell-local time at which it was taken."""

    time: TimeMs
    value: float


# Sampler callback: (probe_id, tag, count, records)
SamplerFunction = Callable[[CellMember, Any, int, Sequence[SampleRecord]], None]

# Predicate used to select probe ids when registering a sampler
ProbePredicate = Callable[[CellMember], bool]

# Opaque identifier of a sampler association chosen by the caller
SamplerHandle = Any
