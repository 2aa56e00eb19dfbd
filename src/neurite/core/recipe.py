"""
Recipe interface.

A recipe describes a model cell by cell: what each cell is made of, how many
synaptic targets and spike sources it carries, and which probes can be
attached to it. Cell groups and lowered cells only ever read a recipe; how
it is loaded or generated is up to the caller.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from neurite.typing import CellGid, CellMember


@dataclass(frozen=True)
class ProbeInfo:
    """Description of one probe.

    Attributes:
        id: Cell gid and probe index on that cell
        tag: Opaque value passed back to samplers of this probe
        address: What to measure, interpreted by the lowered cell
    """

    id: CellMember
    tag: Any
    address: Any


class Recipe(ABC):
    """Per-cell model description consumed by cell groups."""

    @abstractmethod
    def num_cells(self) -> int:
        """Total number of cells in the model."""

    @abstractmethod
    def get_cell_description(self, gid: CellGid) -> Any:
        """Description of cell ``gid``, interpreted by the lowered cell."""

    @abstractmethod
    def num_sources(self, gid: CellGid) -> int:
        """Number of spike detectors on cell ``gid``."""

    @abstractmethod
    def num_targets(self, gid: CellGid) -> int:
        """Number of synaptic targets on cell ``gid``."""

    def num_probes(self, gid: CellGid) -> int:
        """Number of probes on cell ``gid``."""
        return 0

    def get_probe(self, probe_id: CellMember) -> ProbeInfo:
        """Description of probe ``probe_id``."""
        raise IndexError(f"cell {probe_id.gid} has no probe {probe_id.index}")
