"""
Graph module: pairwise clique graph, vertex/edge records and tree state.
"""

from pgibbs.graph.tree import (
    NULL_VID,
    VertexState,
    InvalidTransitionError,
    AtomicCounter,
    Available,
    Candidate,
    Boundary,
    TreeNode,
    Calibrated,
)
from pgibbs.graph.records import VertexData, EdgeData
from pgibbs.graph.pairwise import PairwiseGraph
from pgibbs.graph.clique import construct_clique_graph, reset_tree_state, update_range

__all__ = [
    "NULL_VID",
    "VertexState",
    "InvalidTransitionError",
    "AtomicCounter",
    "Available",
    "Candidate",
    "Boundary",
    "TreeNode",
    "Calibrated",
    "VertexData",
    "EdgeData",
    "PairwiseGraph",
    "construct_clique_graph",
    "reset_tree_state",
    "update_range",
]
