"""Leaky Integrate-and-Fire Lowered Cell.

This module implements a reference lowered cell: the numerical back end a
``GroupEngine`` drives. Each cell is a single leaky integrate-and-fire
membrane; the cell's morphology is still turned into a ``BranchTree`` at
initialization (and balanced on request) so the structural pipeline from
SWC records to solver is the same as for a full cable model.

**Membrane Dynamics**:
=====================
.. math::

    \\tau_m \\frac{dV}{dt} = (E_L + I_{bias}) - V

Integrated exactly between events:

    V(t + h) = V_inf + (V(t) - V_inf) * exp(-h / tau_m)

**Synapses**: a delivered event adds its weight to V (delta synapse).

**Spike Generation**:
When V ≥ V_threshold:
- Record a threshold crossing for every spike detector on the cell
- Reset: V → V_reset
- Hold at V_reset for the refractory period (τ_ref ms); a period that ends
  inside a step lets the leak act for the rest of that step

**Local Time**:
Every cell keeps its own clock. A step advances a cell by at most ``dt``
but stops early at the cell's next pending event, so within one
integration period cells reach different times.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

import torch

from neurite.config.engine_config import EngineConfig
from neurite.core.lowered_cell import ProbeAssociation
from neurite.core.recipe import Recipe
from neurite.errors import expects, validate_positive
from neurite.events.system import ThresholdCrossing, TimeOrderedQueue
from neurite.global_config import GlobalConfig
from neurite.morphology.branch_tree import BranchTree
from neurite.typing import CellGid, CellMember, TimeMs

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================


@dataclass
class LIFCellConfig:
    """Membrane parameters of one LIF cell (potentials in mV, times in ms).

    Attributes:
        tau_m: Membrane time constant (default: 10.0)
            Controls how quickly the membrane potential decays toward rest.
        E_L: Leak reversal / resting potential (default: -65.0)
        v_reset: Potential after a spike (default: -65.0)
        v_threshold: Spike threshold (default: -50.0)
        tau_ref: Absolute refractory period (default: 2.0)
        bias: Constant depolarising drive added to E_L (default: 0.0)
            With bias > v_threshold - E_L the cell fires tonically.
        v_bounds: Voltages outside this range are reported as unphysical
    """

    tau_m: float = 10.0
    E_L: float = -65.0
    v_reset: float = -65.0
    v_threshold: float = -50.0
    tau_ref: float = 2.0
    bias: float = 0.0
    v_bounds: Tuple[float, float] = GlobalConfig.PHYSICAL_VOLTAGE_BOUNDS

    def __post_init__(self) -> None:
        validate_positive(self.tau_m, "tau_m")
        validate_positive(self.tau_ref, "tau_ref", allow_zero=True)


@dataclass
class LIFCellDescription:
    """Recipe cell description understood by ``LIFLoweredCell``.

    Attributes:
        morphology: Compartment parent index (empty = single compartment)
        params: Membrane parameters
    """

    morphology: Sequence[int] = ()
    params: LIFCellConfig = field(default_factory=LIFCellConfig)


class LIFProbe(Enum):
    """Quantities a probe can read from a LIF cell."""

    VOLTAGE = "voltage"
    INPUT = "input"  # total synaptic weight delivered so far


@dataclass(frozen=True)
class _PendingEvent:
    time: TimeMs
    weight: float


# =============================================================================
# LOWERED CELL
# =============================================================================


class LIFLoweredCell:
    """Torch-backed LIF back end for a ``GroupEngine``.

    Target handles are group-local cell indices; probe handles are
    ``(cell_index, LIFProbe)`` pairs.

    Args:
        config: Engine configuration (device, dtype, morphology balancing)
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self.device = self.config.get_torch_device()
        self.dtype = self.config.get_torch_dtype()
        self._tensor_options = self.config.tensor_options()

        self.trees: List[BranchTree] = []
        self.n_cells = 0
        self._source_offsets: List[int] = []
        self._num_sources: List[int] = []
        self._queues: List[TimeOrderedQueue[_PendingEvent]] = []
        self._crossings: List[ThresholdCrossing] = []

        self._tfinal: TimeMs = 0.0
        self._dt: TimeMs = GlobalConfig.DEFAULT_DT_MS
        self._empty_time: TimeMs = 0.0

    # =========================================================================
    # Construction
    # =========================================================================

    def initialize(
        self, gids: Sequence[CellGid], recipe: Recipe
    ) -> Tuple[List[int], Dict[CellMember, ProbeAssociation]]:
        target_handles: List[int] = []
        probe_map: Dict[CellMember, ProbeAssociation] = {}
        params: List[LIFCellConfig] = []

        self.trees = []
        self._source_offsets = []
        self._num_sources = []
        n_sources = 0

        for i, gid in enumerate(gids):
            description = recipe.get_cell_description(gid)
            if not isinstance(description, LIFCellDescription):
                raise TypeError(
                    f"LIFLoweredCell needs LIFCellDescription for cell {gid}, "
                    f"got {type(description).__name__}"
                )

            tree = BranchTree.from_parent_index(description.morphology)
            if self.config.balance_morphologies:
                tree.balance()
            self.trees.append(tree)
            params.append(description.params)

            target_handles.extend([i] * recipe.num_targets(gid))

            self._source_offsets.append(n_sources)
            self._num_sources.append(recipe.num_sources(gid))
            n_sources += recipe.num_sources(gid)

            for lid in range(recipe.num_probes(gid)):
                info = recipe.get_probe(CellMember(gid, lid))
                probe_map[info.id] = ProbeAssociation(handle=(i, LIFProbe(info.address)), tag=info.tag)

        self.n_cells = len(gids)
        self._queues = [TimeOrderedQueue() for _ in range(self.n_cells)]

        def column(name: str) -> torch.Tensor:
            return torch.tensor(
                [getattr(p, name) for p in params], **self._tensor_options
            )

        self.tau_m = column("tau_m")
        self.E_L = column("E_L")
        self.v_reset = column("v_reset")
        self.v_threshold = column("v_threshold")
        self.tau_ref = column("tau_ref")
        self.bias = column("bias")
        self.v_min = torch.tensor([p.v_bounds[0] for p in params], **self._tensor_options)
        self.v_max = torch.tensor([p.v_bounds[1] for p in params], **self._tensor_options)

        self.reset()
        return target_handles, probe_map

    def reset(self) -> None:
        self.v = self.E_L.clone() if self.n_cells else torch.zeros(0, **self._tensor_options)
        self.t = torch.zeros(self.n_cells, dtype=torch.float64, device=self.device)
        self.refractory_until = torch.full(
            (self.n_cells,), -math.inf, dtype=torch.float64, device=self.device
        )
        self.input_total = torch.zeros(self.n_cells, **self._tensor_options)
        for queue in self._queues:
            queue.clear()
        self._crossings.clear()
        self._tfinal = 0.0
        self._empty_time = 0.0

    # =========================================================================
    # Time
    # =========================================================================

    def state_synchronized(self) -> bool:
        if self.n_cells == 0:
            return True
        return bool((self.t == self.t[0]).all())

    def min_time(self) -> TimeMs:
        if self.n_cells == 0:
            return self._empty_time
        return float(self.t.min())

    def max_time(self) -> TimeMs:
        if self.n_cells == 0:
            return self._empty_time
        return float(self.t.max())

    def time(self, cell_index: int) -> TimeMs:
        return float(self.t[cell_index])

    # =========================================================================
    # Integration
    # =========================================================================

    def add_event(self, time: TimeMs, handle: int, weight: float) -> None:
        expects(0 <= handle < self.n_cells, f"invalid target handle {handle}")
        self._queues[handle].push(_PendingEvent(time, weight))

    def setup_integration(self, tfinal: TimeMs, dt: TimeMs) -> None:
        validate_positive(dt, "dt")
        self._tfinal = tfinal
        self._dt = dt
        self._empty_time = max(self._empty_time, tfinal)

    def integration_complete(self) -> bool:
        if self.n_cells == 0:
            return True
        return bool((self.t >= self._tfinal).all())

    def step_integration(self) -> None:
        active = self.t < self._tfinal
        if not bool(active.any()):
            return

        t_end = torch.clamp(self.t + self._dt, max=self._tfinal)
        t_end = torch.where(active, t_end, self.t)

        for i in torch.nonzero(active).flatten().tolist():
            t_i = float(self.t[i])
            self._deliver_events(i, t_i)

            # Stop early at the next pending event so it lands on a step boundary
            next_time = self._queues[i].peek_time()
            if next_time is not None and t_i < next_time < float(t_end[i]):
                t_end[i] = next_time

        # Events can push a cell over threshold on delivery
        self._detect_crossings(active, self.t)

        # A refractory cell stays at v_reset; integration resumes from the
        # moment the refractory period ends, even inside a step
        h = torch.clamp(t_end - torch.maximum(self.t, self.refractory_until), min=0.0)
        v_inf = self.E_L + self.bias
        decay = torch.exp(-h.to(self.dtype) / self.tau_m)
        v_next = v_inf + (self.v - v_inf) * decay
        self.v = torch.where(active, v_next, self.v)

        self.t = t_end
        self._detect_crossings(active, self.t)

    def _deliver_events(self, i: int, t_i: TimeMs) -> None:
        queue = self._queues[i]
        next_time = queue.peek_time()
        while next_time is not None and next_time <= t_i:
            event = queue.pop_if_before(math.inf)
            if float(self.refractory_until[i]) <= t_i:
                self.v[i] += event.weight
            self.input_total[i] += event.weight
            next_time = queue.peek_time()

    def _detect_crossings(self, mask: torch.Tensor, times: torch.Tensor) -> None:
        crossed = mask & (self.v >= self.v_threshold) & (self.refractory_until <= times)
        for i in torch.nonzero(crossed).flatten().tolist():
            t_spike = float(times[i])
            offset = self._source_offsets[i]
            for k in range(self._num_sources[i]):
                self._crossings.append(ThresholdCrossing(offset + k, t_spike))
            self.v[i] = self.v_reset[i]
            self.refractory_until[i] = t_spike + float(self.tau_ref[i])

    def is_physical_solution(self) -> bool:
        if self.n_cells == 0:
            return True
        finite = bool(torch.isfinite(self.v).all())
        return finite and bool(((self.v >= self.v_min) & (self.v <= self.v_max)).all())

    # =========================================================================
    # Output
    # =========================================================================

    def probe(self, handle: Tuple[int, LIFProbe]) -> float:
        cell_index, kind = handle
        if kind is LIFProbe.VOLTAGE:
            return float(self.v[cell_index])
        return float(self.input_total[cell_index])

    def get_spikes(self) -> List[ThresholdCrossing]:
        return list(self._crossings)

    def clear_spikes(self) -> None:
        self._crossings.clear()

    def get_diagnostics(self) -> Dict[str, Any]:
        """Summary of the current state for monitoring."""
        return {
            "n_cells": self.n_cells,
            "t_min": self.min_time(),
            "t_max": self.max_time(),
            "v_mean": float(self.v.mean()) if self.n_cells else 0.0,
            "pending_events": sum(len(q) for q in self._queues),
            "branches": [tree.num_branches() for tree in self.trees],
        }
