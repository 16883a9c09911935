"""
pgibbs/graph/records.py

Mutable records attached to the pairwise graph.

VertexData holds the current sample, belief tables, update count and the
tree-growth state. EdgeData holds the priority weight, the BP message
toward the target and the pairwise edge factor.

Every field except `child_candidates` (and the suitor list it guards) is
written by one worker at a time under the host engine's locks.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from pgibbs.algebra.domain import Assignment, Domain, Variable
from pgibbs.algebra.factor import NEG_MAX, TableFactor
from pgibbs.graph.tree import (
    AtomicCounter,
    Available,
    Boundary,
    Calibrated,
    Candidate,
    InvalidTransitionError,
    NULL_VID,
    TreeNode,
    TreeState,
    VertexState,
)


class VertexData:
    """
    Per-variable vertex record.

    Attributes:
        variable: The variable this vertex stands for (id == vertex id)
        asg: Current sample over the single-variable domain
        factor_ids: Ids of model factors touching the variable
        belief: Running marginal estimate (log space)
        tmp_bp_belief: Scratch belief for tree-local message passing
        updates: Number of completed block samples touching this vertex
        tree: Tree-growth state variant
        child_candidates: Number of concurrent suitors this round
    """

    def __init__(
        self,
        variable: Variable,
        factor_ids: Sequence[int],
        asg: Optional[Assignment] = None,
        *,
        rng: Optional[np.random.Generator] = None,
        belief_init: float = NEG_MAX,
    ):
        if not factor_ids:
            raise ValueError(f"Variable {variable.id} has no factors")
        domain = Domain([variable])
        self.variable = variable
        self.asg = asg if asg is not None else Assignment.uniform_sample(domain, rng)
        self.factor_ids: List[int] = list(factor_ids)
        self.belief = TableFactor.constant(domain, belief_init)
        self.tmp_bp_belief = TableFactor.constant(domain, belief_init)
        self.updates = 0
        self.tree: TreeState = Available()
        self.child_candidates = AtomicCounter()
        self._suitors: List[Tuple[int, int]] = []
        self._suitor_lock = threading.Lock()

    # Read-only views of the tree state

    @property
    def state(self) -> VertexState:
        return self.tree.state

    @property
    def parent(self) -> Optional[int]:
        return getattr(self.tree, "parent", None)

    @property
    def height(self) -> int:
        return getattr(self.tree, "height", 0)

    @property
    def marked_up(self) -> int:
        return getattr(self.tree, "marked_up", 0)

    @property
    def parent_vid(self) -> int:
        """Parent as an integer, NULL_VID when there is none."""
        p = self.parent
        return NULL_VID if p is None else p

    @property
    def suitors(self) -> Tuple[Tuple[int, int], ...]:
        """(proposer vid, proposer height) pairs recorded this round."""
        with self._suitor_lock:
            return tuple(self._suitors)

    def record_update(self) -> int:
        self.updates += 1
        return self.updates

    # Transitions

    def _require(self, *states: VertexState) -> None:
        if self.tree.state not in states:
            names = "/".join(s.name for s in states)
            raise InvalidTransitionError(
                f"Vertex {self.variable.id} is {self.tree.state.name}, expected {names}"
            )

    def make_root(self) -> None:
        """AVAILABLE -> BOUNDARY as the root of a new tree."""
        self._require(VertexState.AVAILABLE)
        self.tree = Boundary(None, 0)

    def propose(self, proposer: int, proposer_height: int) -> bool:
        """
        Record a BOUNDARY neighbour's bid to adopt this vertex as a child.

        Safe to call from several proposers at once. Returns False when the
        vertex already belongs to a tree.
        """
        with self._suitor_lock:
            if self.tree.state not in (VertexState.AVAILABLE, VertexState.CANDIDATE):
                return False
            self.child_candidates.increment()
            self._suitors.append((proposer, proposer_height))
            if isinstance(self.tree, Available) or proposer < self.tree.parent:
                self.tree = Candidate(proposer)
            return True

    def restore_suitor(self, proposer: int, proposer_height: int) -> None:
        """
        Re-record the tentative parent of a CANDIDATE vertex loaded from a
        checkpoint. The counter is restored separately and left untouched.
        """
        with self._suitor_lock:
            self._require(VertexState.CANDIDATE)
            if proposer != self.tree.parent:
                raise ValueError(
                    f"Vertex {self.variable.id}: suitor {proposer} is not the proposed parent {self.tree.parent}"
                )
            self._suitors.append((proposer, proposer_height))

    def settle_candidacy(self) -> Tuple[int, List[int]]:
        """
        CANDIDATE -> BOUNDARY under the lowest-id suitor.

        Call once all proposals of the round have landed.

        Returns:
            (accepted parent, rejected proposers)
        """
        with self._suitor_lock:
            self._require(VertexState.CANDIDATE)
            if not self._suitors:
                raise InvalidTransitionError(f"Vertex {self.variable.id} has no recorded suitors")
            parent, parent_height = min(self._suitors)
            losers = sorted({vid for vid, _ in self._suitors if vid != parent})
            self.tree = Boundary(parent, parent_height + 1)
            self._suitors.clear()
            self.child_candidates.reset()
        return parent, losers

    def reject_candidacy(self) -> None:
        """CANDIDATE -> AVAILABLE, dropping every suitor."""
        with self._suitor_lock:
            self._require(VertexState.CANDIDATE)
            self.tree = Available()
            self._suitors.clear()
            self.child_candidates.reset()

    def finish_frontier(self) -> None:
        """BOUNDARY -> TREE_NODE once no more neighbours can be recruited."""
        self._require(VertexState.BOUNDARY)
        self.tree = TreeNode(self.tree.parent, self.tree.height)

    def mark_up(self) -> int:
        """Count one child's upward message; returns the new count."""
        self._require(VertexState.TREE_NODE)
        t = self.tree
        self.tree = TreeNode(t.parent, t.height, t.marked_up + 1)
        return t.marked_up + 1

    def calibrate(self, num_children: int) -> None:
        """TREE_NODE -> CALIBRATED once every child has reported."""
        self._require(VertexState.TREE_NODE)
        if self.tree.marked_up != num_children:
            raise InvalidTransitionError(
                f"Vertex {self.variable.id}: {self.tree.marked_up} of {num_children} children reported"
            )
        self.tree = Calibrated(self.tree.parent, self.tree.height)

    def reset_tree(self) -> None:
        """Back to AVAILABLE for the next round."""
        with self._suitor_lock:
            self.tree = Available()
            self._suitors.clear()
            self.child_candidates.reset()

    def __eq__(self, other) -> bool:
        """
        Compare the checkpointed fields.

        marked_up and the suitor list are per-round scratch that checkpoints
        do not store, so they are left out.
        """
        if not isinstance(other, VertexData):
            return NotImplemented
        return (
            self.variable == other.variable
            and self.asg == other.asg
            and self.factor_ids == other.factor_ids
            and self.belief == other.belief
            and self.tmp_bp_belief == other.tmp_bp_belief
            and self.updates == other.updates
            and self.state == other.state
            and self.parent == other.parent
            and self.height == other.height
            and self.child_candidates.value == other.child_candidates.value
        )

    def __repr__(self) -> str:
        return (
            f"VertexData(var={self.variable.id}, state={self.state.name}, "
            f"parent={self.parent_vid}, updates={self.updates})"
        )


@dataclass
class EdgeData:
    """
    Directed edge record (source -> target).

    Attributes:
        weight: Tree-growth priority, computed elsewhere
        message: BP message over the target's domain
        edge_factor: Pairwise potential over {source, target}
        exploring: Set while a growth attempt is traversing this edge
    """
    weight: float = 0.0
    message: Optional[TableFactor] = None
    edge_factor: Optional[TableFactor] = None
    exploring: bool = False

    @classmethod
    def between(cls, source: Variable, target: Variable) -> "EdgeData":
        return cls(
            weight=0.0,
            message=TableFactor(Domain([target])),
            edge_factor=TableFactor(Domain([source]) + Domain([target])),
            exploring=False,
        )
