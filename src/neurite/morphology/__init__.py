"""
Cell morphology: SWC records and branch topology.

    from neurite.morphology import BranchTree, read_swc, parent_index

    tree = BranchTree.from_parent_index(parent_index(read_swc("cell.swc")))
    tree.balance()
"""

from neurite.morphology.branch_tree import Branch, BranchTree
from neurite.morphology.swc import (
    SWCParser,
    SWCRecord,
    SWCType,
    clean_records,
    loads_swc,
    morphology_from_swc,
    parent_index,
    parse_swc_lines,
    read_swc,
    write_swc,
)

__all__ = [
    "Branch",
    "BranchTree",
    "SWCParser",
    "SWCRecord",
    "SWCType",
    "clean_records",
    "loads_swc",
    "morphology_from_swc",
    "parent_index",
    "parse_swc_lines",
    "read_swc",
    "write_swc",
]
