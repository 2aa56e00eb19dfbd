"""
Lowered cell protocol.

A lowered cell is the numerical back end of a cell group: it owns the state
of every cell in the group (for a cable model, the discretised membrane
equations over each cell's branch tree) and integrates it forward. The
group engine drives it only through the operations listed here, so any
implementation can be substituted without touching the engine.

Time Model:
===========
Every cell keeps its own clock. Within one ``advance`` the lowered cell may
step cells by different amounts, so between ``setup_integration`` and
``integration_complete`` the cells of one group can sit at different times:

    min_time() <= time(i) <= max_time()

Outside of an integration period all cells are at the same time and
``state_synchronized()`` is True.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Protocol, Sequence, Tuple, TypeVar, runtime_checkable

from neurite.core.recipe import Recipe
from neurite.events.system import ThresholdCrossing
from neurite.typing import CellGid, CellMember, TimeMs

H = TypeVar("H")


@dataclass(frozen=True)
class ProbeAssociation(Generic[H]):
    """Lowered-cell probe handle paired with the recipe's probe tag."""

    handle: H
    tag: Any


@runtime_checkable
class LoweredCell(Protocol):
    """Numerical back end of a cell group."""

    def initialize(
        self, gids: Sequence[CellGid], recipe: Recipe
    ) -> Tuple[List[Any], Dict[CellMember, ProbeAssociation]]:
        """Build state for ``gids``.

        Returns:
            target_handles: One handle per synaptic target, cell by cell in
                ``gids`` order and target index order within a cell
            probe_map: Probe id to (handle, tag) for every probe of every cell
        """
        ...

    def reset(self) -> None:
        """Return every cell to its initial state at t = 0."""
        ...

    def state_synchronized(self) -> bool:
        ...

    def min_time(self) -> TimeMs:
        ...

    def max_time(self) -> TimeMs:
        ...

    def time(self, cell_index: int) -> TimeMs:
        """Time reached by the cell at group-local index ``cell_index``."""
        ...

    def add_event(self, time: TimeMs, handle: Any, weight: float) -> None:
        ...

    def setup_integration(self, tfinal: TimeMs, dt: TimeMs) -> None:
        ...

    def step_integration(self) -> None:
        """Advance by one bounded step, delivering events that are due."""
        ...

    def integration_complete(self) -> bool:
        ...

    def is_physical_solution(self) -> bool:
        ...

    def probe(self, handle: Any) -> float:
        ...

    def get_spikes(self) -> List[ThresholdCrossing]:
        ...

    def clear_spikes(self) -> None:
        ...
