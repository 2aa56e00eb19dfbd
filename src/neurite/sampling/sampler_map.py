"""
Sampler registry.

A sampler association ties a caller-chosen handle to a schedule, a set of
probe ids and a callback. Probe predicates are resolved once, when the
sampler is added, against the probe ids the group actually owns; a
predicate that matches nothing registers nothing.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Tuple

from neurite.sampling.schedule import Schedule
from neurite.typing import (
    CellGid,
    CellMember,
    ProbePredicate,
    SamplerFunction,
    SamplerHandle,
)


class SamplingPolicy(Enum):
    """How strictly sample times must be honoured.

    LAX samples at the first time the cell reaches or passes the scheduled
    time; EXACT is accepted for interface compatibility and currently
    sampled the same way.
    """

    LAX = "lax"
    EXACT = "exact"


@dataclass
class SamplerAssociation:
    """A registered sampler: schedule, callback and the probes it reads."""

    schedule: Schedule
    sampler: SamplerFunction
    probe_ids: Tuple[CellMember, ...]
    policy: SamplingPolicy = SamplingPolicy.LAX


def all_probes(probe_id: CellMember) -> bool:
    return True


def one_probe(target: CellMember) -> ProbePredicate:
    """Predicate selecting a single probe id."""
    return lambda probe_id: probe_id == target


def probes_on_cell(gid: CellGid) -> ProbePredicate:
    """Predicate selecting every probe on cell ``gid``."""
    return lambda probe_id: probe_id.gid == gid


class SamplerRegistry:
    """Sampler associations of one cell group, in insertion order.

    Args:
        probe_ids: Probe ids owned by the group, in group order
    """

    def __init__(self, probe_ids: Iterable[CellMember] = ()):
        self.probe_ids: List[CellMember] = list(probe_ids)
        self._associations: Dict[SamplerHandle, SamplerAssociation] = {}

    def add(
        self,
        handle: SamplerHandle,
        schedule: Schedule,
        predicate: ProbePredicate,
        sampler: SamplerFunction,
        policy: SamplingPolicy = SamplingPolicy.LAX,
    ) -> bool:
        """Register a sampler against the probes matching ``predicate``.

        Returns:
            True if at least one probe matched and the sampler was added.
            Re-using a handle replaces the previous association.
        """
        matched = tuple(p for p in self.probe_ids if predicate(p))
        if not matched:
            return False

        self._associations.pop(handle, None)
        self._associations[handle] = SamplerAssociation(
            schedule=schedule,
            sampler=sampler,
            probe_ids=matched,
            policy=SamplingPolicy(policy),
        )
        return True

    def remove(self, handle: SamplerHandle) -> None:
        """Remove one association; unknown handles are ignored."""
        self._associations.pop(handle, None)

    def remove_all(self) -> None:
        self._associations.clear()

    def reset(self) -> None:
        """Rewind every association's schedule."""
        for assoc in self._associations.values():
            assoc.schedule.reset()

    def __iter__(self) -> Iterator[SamplerAssociation]:
        return iter(list(self._associations.values()))

    def __len__(self) -> int:
        return len(self._associations)

    def __contains__(self, handle: SamplerHandle) -> bool:
        return handle in self._associations
