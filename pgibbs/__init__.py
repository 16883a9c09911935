"""
pgibbs: model and graph layer for parallel tree-blocked Gibbs sampling

Turns a collection of discrete log-space factors into a pairwise Markov
random field and carries the per-vertex state used to grow disjoint
sampling trees concurrently.

Key components:
- algebra: Variables, canonical domains, assignments, log-space factors
- model: Factorized model and the text model loader
- graph: Clique graph builder, vertex/edge records, tree-growth state
- io: Binary checkpoints and text reports
- config: Run-wide settings
"""

__version__ = "1.0.0"
__author__ = "pgibbs Team"

from pgibbs.algebra import Variable, Domain, Assignment, TableFactor, NEG_MAX
from pgibbs.model import FactorizedModel, ModelFormatError, parse_alchemy, load_alchemy
from pgibbs.graph import (
    NULL_VID,
    VertexState,
    InvalidTransitionError,
    VertexData,
    EdgeData,
    PairwiseGraph,
    construct_clique_graph,
    reset_tree_state,
    update_range,
)
from pgibbs.io import (
    CheckpointFormatError,
    save_checkpoint,
    load_checkpoint,
    save_beliefs,
    save_assignments,
    save_colors,
    save_tree_state,
)
from pgibbs.config import SamplerConfig

__all__ = [
    # Algebra
    "Variable",
    "Domain",
    "Assignment",
    "TableFactor",
    "NEG_MAX",
    # Model
    "FactorizedModel",
    "ModelFormatError",
    "parse_alchemy",
    "load_alchemy",
    # Graph
    "NULL_VID",
    "VertexState",
    "InvalidTransitionError",
    "VertexData",
    "EdgeData",
    "PairwiseGraph",
    "construct_clique_graph",
    "reset_tree_state",
    "update_range",
    # IO
    "CheckpointFormatError",
    "save_checkpoint",
    "load_checkpoint",
    "save_beliefs",
    "save_assignments",
    "save_colors",
    "save_tree_state",
    # Config
    "SamplerConfig",
]
