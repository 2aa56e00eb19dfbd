"""
Core cell group machinery: recipes, the lowered-cell protocol and the
group engine that drives it.
"""

from neurite.core.group_engine import GroupEngine
from neurite.core.lowered_cell import LoweredCell, ProbeAssociation
from neurite.core.recipe import ProbeInfo, Recipe

__all__ = [
    "GroupEngine",
    "LoweredCell",
    "ProbeAssociation",
    "ProbeInfo",
    "Recipe",
]
