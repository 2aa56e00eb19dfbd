"""
Branch Tree - Branch topology of a multicompartment cell.

A cell's morphology arrives as a flat parent-index array over compartments:
``parent_index[0] == 0`` marks the root and every other entry points at an
earlier compartment. ``BranchTree`` groups that compartment tree into
branches (maximal unbranched runs of compartments) and can rebalance the
resulting branch tree so that the solver's elimination passes, which run
branch by branch from the leaves towards the root, have the shortest
possible critical path.

Branch Assignment:
==================

    parent_index = [0, 0, 1, 2, 0, 4]

    compartments            branches
         0                     0  {0}
        / \\                   / \\
       1   4                 1   2
       |   |           {1,2,3}   {4,5}
       2   5
       |
       3

- Compartment 0 is always a branch of its own (the root branch)
- A compartment starts a new branch when its parent is the root or a fork
- Otherwise it extends its parent's branch
- Branch ids follow the order of each branch's first compartment, so every
  branch is numbered after its parent

Rebalancing:
============
``balance()`` re-roots the branch tree at its center (the branch with the
smallest distance to its farthest branch; the smaller id wins a tie) and
renumbers branches breadth first from the new root. Compartment membership
is untouched.

Author: Neurite Project
Date: January 2026
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Union

import numpy as np

from neurite.errors import StructuralError

logger = logging.getLogger(__name__)


@dataclass
class Branch:
    """One branch of a cell: an unbranched run of compartments.

    Attributes:
        id: Dense branch id, 0 for the root branch
        parent: Id of the parent branch, None for the root
        children: Ids of the child branches, ascending
        compartments: Member compartment indices in morphology order
    """

    id: int
    parent: Optional[int]
    children: List[int] = field(default_factory=list)
    compartments: List[int] = field(default_factory=list)

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def is_leaf(self) -> bool:
        return not self.children


def _validate_parent_index(parent_index: Sequence[int]) -> np.ndarray:
    """Check the parent-index contract and return it as an int array.

    An empty sequence stands for a single compartment.

    Raises:
        StructuralError: If the root is not its own parent, an entry is not
            an integer, or a parent does not precede its compartment
    """
    if len(parent_index) == 0:
        return np.zeros(1, dtype=np.int64)

    index = np.asarray(parent_index)
    if index.ndim != 1:
        raise StructuralError("parent index must be one-dimensional", value=index.shape)
    if not np.issubdtype(index.dtype, np.integer):
        raise StructuralError("parent index entries must be integers", value=index.dtype)
    index = index.astype(np.int64)

    if index[0] != 0:
        raise StructuralError("root compartment must be its own parent", value=int(index[0]), index=0)

    positions = np.arange(1, len(index))
    bad = np.nonzero((index[1:] < 0) | (index[1:] >= positions))[0]
    if bad.size:
        i = int(bad[0]) + 1
        raise StructuralError(
            "parent must be an earlier compartment", value=int(index[i]), index=i
        )
    return index


class BranchTree:
    """Branch topology of one cell, built from a compartment parent index.

    Branches are stored in an arena (a list indexed by branch id); parent and
    child links are branch ids into the same list.

    Args:
        parent_index: Parent of each compartment; entry 0 must be 0 and every
            other entry must be smaller than its position. Empty means a
            single compartment.

    Raises:
        StructuralError: If ``parent_index`` violates the contract above

    Example:
        >>> tree = BranchTree.from_parent_index([0, 0, 1, 2, 0, 4])
        >>> tree.num_branches(), tree.num_children(0)
        (3, 2)
    """

    def __init__(self, parent_index: Sequence[int] = ()):
        index = _validate_parent_index(parent_index)
        self._build(index)
        self.check_invariants()

    @classmethod
    def from_parent_index(cls, parent_index: Sequence[int]) -> "BranchTree":
        """Build the branch tree of a compartment parent-index array."""
        return cls(parent_index)

    # =========================================================================
    # Construction
    # =========================================================================

    def _build(self, index: np.ndarray) -> None:
        n = len(index)
        child_count = np.bincount(index[1:], minlength=n)

        branches = [Branch(id=0, parent=None, compartments=[0])]
        branch_of = np.zeros(n, dtype=np.int64)

        for i in range(1, n):
            p = int(index[i])
            if p == 0 or child_count[p] > 1:
                b = len(branches)
                pb = int(branch_of[p])
                branches.append(Branch(id=b, parent=pb, compartments=[i]))
                branches[pb].children.append(b)
            else:
                b = int(branch_of[p])
                branches[b].compartments.append(i)
            branch_of[i] = b

        self._branches = branches
        self._branch_of = branch_of
        self._refresh_child_counts()

    def _refresh_child_counts(self) -> None:
        self._num_children = np.array(
            [len(b.children) for b in self._branches], dtype=np.int64
        )

    # =========================================================================
    # Queries
    # =========================================================================

    def num_branches(self) -> int:
        """Number of branches (at least 1)."""
        return len(self._branches)

    def num_children(self, b: int) -> int:
        """Number of child branches of branch ``b``."""
        return int(self._num_children[b])

    def num_compartments(self) -> int:
        return len(self._branch_of)

    def branch(self, b: int) -> Branch:
        return self._branches[b]

    def parent(self, b: int) -> Optional[int]:
        return self._branches[b].parent

    def children(self, b: int) -> List[int]:
        return list(self._branches[b].children)

    def compartments(self, b: int) -> List[int]:
        return list(self._branches[b].compartments)

    def branch_parents(self) -> np.ndarray:
        """Parent branch id of every branch, -1 for the root."""
        return np.array(
            [-1 if b.parent is None else b.parent for b in self._branches], dtype=np.int64
        )

    def branch_index(self) -> np.ndarray:
        """Branch id of every compartment."""
        return self._branch_of.copy()

    def depths(self) -> np.ndarray:
        """Number of branch edges between each branch and the root."""
        depth = np.zeros(len(self._branches), dtype=np.int64)
        for branch in self._branches[1:]:
            depth[branch.id] = depth[branch.parent] + 1
        return depth

    def height(self) -> int:
        """Longest root-to-leaf path, counted in branch edges."""
        return int(self.depths().max())

    def __iter__(self) -> Iterator[Branch]:
        return iter(self._branches)

    def __len__(self) -> int:
        return len(self._branches)

    def __repr__(self) -> str:
        return (
            f"BranchTree(branches={self.num_branches()}, "
            f"compartments={self.num_compartments()}, height={self.height()})"
        )

    # =========================================================================
    # Rebalancing
    # =========================================================================

    def _adjacency(self) -> List[List[int]]:
        neighbours: List[List[int]] = [[] for _ in self._branches]
        for branch in self._branches[1:]:
            neighbours[branch.id].append(branch.parent)
            neighbours[branch.parent].append(branch.id)
        for adj in neighbours:
            adj.sort()
        return neighbours

    @staticmethod
    def _farthest(adjacency: List[List[int]], start: int) -> tuple:
        """BFS from ``start``; return the farthest branch and the BFS predecessors."""
        previous = [-1] * len(adjacency)
        seen = [False] * len(adjacency)
        seen[start] = True
        queue = deque([start])
        last = start
        while queue:
            last = queue.popleft()
            for nb in adjacency[last]:
                if not seen[nb]:
                    seen[nb] = True
                    previous[nb] = last
                    queue.append(nb)
        return last, previous

    def find_center(self) -> int:
        """Branch whose farthest branch is nearest (smallest id on a tie)."""
        adjacency = self._adjacency()
        u, _ = self._farthest(adjacency, 0)
        v, previous = self._farthest(adjacency, u)

        # Walk the diameter path back from v to u
        path = [v]
        while path[-1] != u:
            path.append(previous[path[-1]])

        length = len(path) - 1
        if length % 2 == 0:
            return path[length // 2]
        return min(path[length // 2], path[length // 2 + 1])

    def balance(self) -> None:
        """Re-root the tree at its center and renumber branches breadth first.

        The tree height never grows. Branch count and compartment membership
        are unchanged. A tree already rooted at its center is left as is.
        """
        center = self.find_center()
        if center == 0:
            return

        adjacency = self._adjacency()
        order = [center]
        new_parent = {center: None}
        queue = deque([center])
        while queue:
            b = queue.popleft()
            for nb in adjacency[b]:
                if nb not in new_parent:
                    new_parent[nb] = b
                    order.append(nb)
                    queue.append(nb)

        remap = np.empty(len(order), dtype=np.int64)
        remap[order] = np.arange(len(order))

        old_height = self.height()
        branches = []
        for new_id, old_id in enumerate(order):
            old_parent = new_parent[old_id]
            parent = None if old_parent is None else int(remap[old_parent])
            branches.append(
                Branch(id=new_id, parent=parent, compartments=self._branches[old_id].compartments)
            )
            if parent is not None:
                branches[parent].children.append(new_id)

        self._branches = branches
        self._branch_of = remap[self._branch_of]
        self._refresh_child_counts()
        self.check_invariants()

        logger.debug(
            "Rebalanced branch tree around branch %d: height %d -> %d",
            center, old_height, self.height(),
        )

    # =========================================================================
    # Invariants and export
    # =========================================================================

    def check_invariants(self) -> None:
        """Verify ordering, linkage and membership invariants.

        Raises:
            StructuralError: If any invariant is broken
        """
        if not self._branches or self._branches[0].parent is not None:
            raise StructuralError("branch 0 must be the root")

        for position, branch in enumerate(self._branches):
            if branch.id != position:
                raise StructuralError("branch ids must be dense", value=branch.id, index=position)
            if branch.parent is not None:
                if not 0 <= branch.parent < branch.id:
                    raise StructuralError(
                        "parent branch must be numbered before its child",
                        value=branch.parent, index=branch.id,
                    )
                if branch.id not in self._branches[branch.parent].children:
                    raise StructuralError(
                        "branch missing from its parent's children",
                        value=branch.parent, index=branch.id,
                    )
            for child in branch.children:
                if self._branches[child].parent != branch.id:
                    raise StructuralError(
                        "child branch does not point back at its parent",
                        value=child, index=branch.id,
                    )

        members = sorted(c for branch in self._branches for c in branch.compartments)
        if members != list(range(len(self._branch_of))):
            raise StructuralError("every compartment must belong to exactly one branch")

    def to_graphviz(self, path: Optional[Union[str, Path]] = None) -> str:
        """Render the branch tree in DOT format, optionally writing it to ``path``."""
        lines = ["digraph cell {"]
        for branch in self._branches:
            lines.append(f'  {branch.id} [label="{branch.id} ({len(branch.compartments)})"];')
        for branch in self._branches[1:]:
            lines.append(f"  {branch.parent} -> {branch.id};")
        lines.append("}")
        text = "\n".join(lines) + "\n"

        if path is not None:
            Path(path).write_text(text)
        return text
