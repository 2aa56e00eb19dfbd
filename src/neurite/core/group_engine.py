"""
Group Engine - event-driven advance of a group of multicompartment cells.

A group engine owns a fixed set of cells that share one lowered cell (the
numerical back end). Each call to ``advance`` takes the group through one
simulation interval ``[tstart, tfinal)``:

    enqueue_events ──► event queue ──► binner ──► lowered.add_event
                                                        │
    samplers ──► schedules ──► sample queue ──┐         ▼
                                              ├──► step loop ──► spikes
                              lowered.probe ◄─┘

1. Synaptic events due before ``tfinal`` are binned and handed to the
   lowered cell (events at or after ``tfinal`` stay queued).
2. Each sampler's schedule is expanded over the interval into sample events.
3. The lowered cell is stepped until it reaches ``tfinal``. Before every
   step, samples that are due are taken; a sample whose own cell has not yet
   reached its time is put back and retried after a later step.
4. Threshold crossings are translated to spikes with global source ids.

Threading: an engine is driven by one thread at a time. Separate engines
share no state and can run in parallel.

Author: Neurite Project
Date: January 2026
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import accumulate
from typing import Any, Dict, Iterable, List, Optional, Sequence

from neurite.config.engine_config import EngineConfig
from neurite.core.lowered_cell import LoweredCell, ProbeAssociation
from neurite.core.recipe import Recipe
from neurite.errors import expects, validate_positive
from neurite.events.binning import BinningKind, EventBinner
from neurite.events.system import PostsynapticSpikeEvent, SampleEvent, Spike, TimeOrderedQueue
from neurite.sampling.sampler_map import SamplerRegistry, SamplingPolicy
from neurite.sampling.schedule import Schedule
from neurite.typing import (
    CellGid,
    CellMember,
    ProbePredicate,
    SampleRecord,
    SamplerFunction,
    SamplerHandle,
    TimeMs,
)

logger = logging.getLogger(__name__)


@dataclass
class _SamplerEntry:
    """A sampler bound to one probe for the current interval."""

    handle: Any
    tag: Any
    probe_id: CellMember
    sampler: SamplerFunction
    cell_index: int


class GroupEngine:
    """Advance a group of cells through time, exchanging events and spikes.

    Args:
        gids: Global ids of the cells in this group
        recipe: Model description used to build the cells
        lowered: Numerical back end; defaults to a ``LIFLoweredCell``
        config: Engine configuration (default ``EngineConfig()``)

    Example:
        >>> group = GroupEngine([0, 1], recipe)
        >>> group.enqueue_events([PostsynapticSpikeEvent(CellMember(0, 0), 1.0, 20.0)])
        >>> group.advance(tfinal=5.0, dt=0.025)
        >>> for spike in group.spikes():
        ...     print(spike.source, spike.time)
    """

    def __init__(
        self,
        gids: Sequence[CellGid],
        recipe: Recipe,
        lowered: Optional[LoweredCell] = None,
        config: Optional[EngineConfig] = None,
    ):
        self.config = config or EngineConfig()
        self._gids: List[CellGid] = list(gids)

        # Lookup table for gid to local index
        self._gid_index_map: Dict[CellGid, int] = {gid: i for i, gid in enumerate(self._gids)}
        expects(
            len(self._gid_index_map) == len(self._gids),
            f"cell group gids must be unique, got {self._gids}",
        )

        # Prefix sums of target counts: targets of cell i start at divisions[i]
        self._target_divisions: List[int] = list(
            accumulate((recipe.num_targets(gid) for gid in self._gids), initial=0)
        )

        if lowered is None:
            from neurite.components.neurons.lif_cell import LIFLoweredCell

            lowered = LIFLoweredCell(self.config)
        self.lowered = lowered

        target_handles, probe_map = self.lowered.initialize(self._gids, recipe)
        self._target_handles: List[Any] = list(target_handles)
        self._probe_map: Dict[CellMember, ProbeAssociation] = dict(probe_map)
        expects(
            len(self._target_handles) == self._target_divisions[-1],
            f"lowered cell built {len(self._target_handles)} target handles, "
            f"recipe describes {self._target_divisions[-1]}",
        )

        # Global identifiers of the spike sources, in lowered-cell order
        self._spike_sources: List[CellMember] = [
            CellMember(gid, lid)
            for gid in self._gids
            for lid in range(recipe.num_sources(gid))
        ]

        self._spikes: List[Spike] = []
        self._events: TimeOrderedQueue[PostsynapticSpikeEvent] = TimeOrderedQueue()
        self._sample_events: TimeOrderedQueue[SampleEvent] = TimeOrderedQueue()
        self._sampler_map = SamplerRegistry(self._probe_map.keys())
        self._binner = EventBinner(self.config.binning_policy, self.config.bin_interval_ms)

        logger.debug(
            "Built cell group: %d cells, %d targets, %d sources, %d probes",
            len(self._gids), len(self._target_handles),
            len(self._spike_sources), len(self._probe_map),
        )

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def gids(self) -> List[CellGid]:
        return list(self._gids)

    @property
    def spike_sources(self) -> List[CellMember]:
        return list(self._spike_sources)

    @property
    def num_pending_events(self) -> int:
        return len(self._events)

    @property
    def binner(self) -> EventBinner:
        return self._binner

    # =========================================================================
    # Simulation
    # =========================================================================

    def reset(self) -> None:
        """Return the group to its initial state at t = 0."""
        self._spikes.clear()
        self._events.clear()
        self._reset_samplers()
        self._binner.reset()
        self.lowered.reset()
        logger.debug("Reset cell group %s", self._gids)

    def set_binning_policy(self, policy: BinningKind, bin_interval: TimeMs) -> None:
        self._binner = EventBinner(policy, bin_interval)

    def advance(self, tfinal: TimeMs, dt: Optional[TimeMs] = None) -> None:
        """Integrate every cell of the group up to ``tfinal``.

        Args:
            tfinal: End of the interval (ms)
            dt: Maximum integration step (ms); defaults to ``config.dt_ms``

        Raises:
            ContractViolation: If the lowered cell is not synchronized, or an
                event or sampler refers to something this group does not own
        """
        expects(
            self.lowered.state_synchronized(),
            "cells must be synchronized before advance",
        )
        dt = self.config.dt_ms if dt is None else dt
        validate_positive(dt, "dt")
        tstart = self.lowered.min_time()

        # Bin pending events and enqueue on lowered state
        ev_min_time = self.lowered.max_time()
        ev = self._events.pop_if_before(tfinal)
        while ev is not None:
            handle = self._target_handle(ev.target)
            binned_time = self._binner.bin(ev.target.gid, ev.time, ev_min_time)
            self.lowered.add_event(binned_time, handle, ev.weight)
            ev = self._events.pop_if_before(tfinal)

        self.lowered.setup_integration(tfinal, dt)

        samplers = self._schedule_samples(tstart, tfinal)

        first_sample_time = self._sample_events.time_if_before(tfinal)
        while not self.lowered.integration_complete():
            if first_sample_time is not None:
                self._take_samples(samplers, self.lowered.max_time())
                first_sample_time = self._sample_events.time_if_before(tfinal)

            # Integrate one step; events that are due take effect here
            self.lowered.step_integration()

            if self.config.debug and not self.lowered.is_physical_solution():
                logger.warning(
                    "Solution out of bounds at (max) t %.6g ms", self.lowered.max_time()
                )

        # Every cell is at tfinal now, so whatever is left of this interval's
        # samples can be taken
        if first_sample_time is not None:
            self._take_samples(samplers, self.lowered.max_time())

        # Threshold crossings record the local source index; translate to
        # global ids, then clear them for the next interval
        for crossing in self.lowered.get_spikes():
            self._spikes.append(Spike(self._spike_sources[crossing.index], float(crossing.time)))
        self.lowered.clear_spikes()

    def enqueue_events(self, events: Iterable[PostsynapticSpikeEvent]) -> None:
        """Queue synaptic events for delivery in a later ``advance``."""
        self._events.push_many(events)

    def spikes(self) -> List[Spike]:
        """Spikes generated since the last ``clear_spikes``, in generation order."""
        return list(self._spikes)

    def clear_spikes(self) -> None:
        self._spikes.clear()

    # =========================================================================
    # Samplers
    # =========================================================================

    def add_sampler(
        self,
        handle: SamplerHandle,
        probe_ids: ProbePredicate,
        schedule: Schedule,
        sampler: SamplerFunction,
        policy: SamplingPolicy = SamplingPolicy.LAX,
    ) -> bool:
        """Attach ``sampler`` to every probe of this group matching ``probe_ids``.

        Returns:
            False if no probe matched (nothing is registered)
        """
        return self._sampler_map.add(handle, schedule, probe_ids, sampler, policy)

    def remove_sampler(self, handle: SamplerHandle) -> None:
        self._sampler_map.remove(handle)

    def remove_all_samplers(self) -> None:
        self._sampler_map.remove_all()

    def _reset_samplers(self) -> None:
        # clear all pending sample events and reset to start at time 0
        self._sample_events.clear()
        self._sampler_map.reset()

    def _schedule_samples(self, tstart: TimeMs, tfinal: TimeMs) -> List[_SamplerEntry]:
        """Expand every sampler's schedule over the interval into sample events."""
        # Sample events index into the entry list of the current interval only
        self._sample_events.clear()

        samplers: List[_SamplerEntry] = []
        for assoc in self._sampler_map:
            times = assoc.schedule.events(tstart, tfinal)
            if not times:
                continue

            for probe_id in assoc.probe_ids:
                expects(probe_id in self._probe_map, f"unknown probe id {probe_id}")
                index = len(samplers)
                info = self._probe_map[probe_id]
                samplers.append(
                    _SamplerEntry(
                        handle=info.handle,
                        tag=info.tag,
                        probe_id=probe_id,
                        sampler=assoc.sampler,
                        cell_index=self._gid_to_index(probe_id.gid),
                    )
                )
                self._sample_events.push_many(SampleEvent(index, t) for t in times)
        return samplers

    def _take_samples(self, samplers: List[_SamplerEntry], until: TimeMs) -> None:
        """Take every sample due before ``until`` whose cell has reached it."""
        requeue: List[SampleEvent] = []

        event = self._sample_events.pop_if_before(until)
        while event is not None:
            entry = samplers[event.sampler_index]
            cell_time = self.lowered.time(entry.cell_index)
            if cell_time < event.time:
                # This cell hasn't reached this sample time yet
                requeue.append(event)
            else:
                value = float(self.lowered.probe(entry.handle))
                entry.sampler(entry.probe_id, entry.tag, 1, [SampleRecord(cell_time, value)])
            event = self._sample_events.pop_if_before(until)

        self._sample_events.push_many(requeue)

    # =========================================================================
    # Lookup
    # =========================================================================

    def _gid_to_index(self, gid: CellGid) -> int:
        index = self._gid_index_map.get(gid)
        expects(index is not None, f"cell {gid} is not in this group")
        return index

    def _target_handle(self, target: CellMember) -> Any:
        i = self._gid_to_index(target.gid)
        first, last = self._target_divisions[i], self._target_divisions[i + 1]
        expects(
            0 <= target.index < last - first,
            f"cell {target.gid} has no target {target.index}",
        )
        return self._target_handles[first + target.index]

    def __repr__(self) -> str:
        return f"GroupEngine(cells={len(self._gids)}, pending_events={len(self._events)})"
