"""
NEURITE - event-driven simulation of morphologically detailed neurons.

Cells are grouped; each group shares one numerical back end (a "lowered
cell") and is advanced interval by interval, exchanging spikes with other
groups as discrete events.

Quick Start:
============

    from neurite import GroupEngine, EngineConfig, BranchTree
    from neurite.events import PostsynapticSpikeEvent
    from neurite.sampling import RegularSchedule, all_probes

    # Branch topology of one morphology
    tree = BranchTree.from_parent_index([0, 0, 1, 2, 0, 4])
    tree.balance()

    # Advance a group of cells described by a recipe
    group = GroupEngine(gids=[0, 1], recipe=my_recipe, config=EngineConfig(dt_ms=0.025))
    group.add_sampler("v", all_probes, RegularSchedule(0.0, 0.5), on_sample)
    group.enqueue_events(incoming_events)
    group.advance(tfinal=10.0)
    spikes = group.spikes()
    group.clear_spikes()

Internal Development:
====================

Internal code should use explicit imports for clarity:

    from neurite.morphology.branch_tree import BranchTree
    from neurite.core.group_engine import GroupEngine
    from neurite.components.neurons.lif_cell import LIFLoweredCell
"""

__version__ = "0.1.0"

# ============================================================================
# PUBLIC API
# ============================================================================

# Configuration
from neurite.config import EngineConfig, GlobalConfig

# Morphology
from neurite.morphology import BranchTree, SWCRecord, parent_index, read_swc

# Events
from neurite.events import (
    BinningKind,
    EventBinner,
    PostsynapticSpikeEvent,
    Spike,
    TimeOrderedQueue,
)

# Cell groups
from neurite.core import GroupEngine, LoweredCell, ProbeInfo, Recipe

# Sampling
from neurite.sampling import RegularSchedule, SamplerRegistry, SamplingPolicy

# Errors
from neurite.errors import (
    ConfigurationError,
    ContractViolation,
    NeuriteError,
    ParseError,
    StructuralError,
)

# Typing
from neurite.typing import CellMember, SampleRecord

__all__ = [
    "__version__",
    # Configuration
    "EngineConfig",
    "GlobalConfig",
    # Morphology
    "BranchTree",
    "SWCRecord",
    "parent_index",
    "read_swc",
    # Events
    "BinningKind",
    "EventBinner",
    "PostsynapticSpikeEvent",
    "Spike",
    "TimeOrderedQueue",
    # Cell groups
    "GroupEngine",
    "LoweredCell",
    "ProbeInfo",
    "Recipe",
    # Sampling
    "RegularSchedule",
    "SamplerRegistry",
    "SamplingPolicy",
    # Errors
    "ConfigurationError",
    "ContractViolation",
    "NeuriteError",
    "ParseError",
    "StructuralError",
    # Typing
    "CellMember",
    "SampleRecord",
]
