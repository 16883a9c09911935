"""
pgibbs/graph/clique.py

Construction of the pairwise clique graph from a factorized model.

One vertex per variable (vertex id == variable id) and, for every pair of
variables sharing a factor, a directed edge each way.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

import numpy as np

from pgibbs.config import SamplerConfig
from pgibbs.graph.pairwise import PairwiseGraph
from pgibbs.graph.records import EdgeData, VertexData
from pgibbs.model.factorized import FactorizedModel

logger = logging.getLogger(__name__)


def construct_clique_graph(
    model: FactorizedModel,
    rng: Optional[np.random.Generator] = None,
    config: Optional[SamplerConfig] = None,
) -> PairwiseGraph:
    """
    Build the pairwise graph for a model.

    Args:
        model: Source model; read only
        rng: Generator for the initial random assignment
        config: Supplies the belief initialization value and seed

    Returns:
        PairwiseGraph with fresh vertex and edge records

    Raises:
        ValueError: if variable ids are not dense or a vertex id mismatches
    """
    if config is None:
        config = SamplerConfig()
    if rng is None:
        rng = config.rng()
    model.validate()

    graph = PairwiseGraph()
    for variable in model.variables():
        vdata = VertexData(
            variable,
            model.factor_ids(variable),
            rng=rng,
            belief_init=config.belief_init,
        )
        vid = graph.add_vertex(vdata)
        if vid != variable.id:
            raise ValueError(f"Vertex id {vid} does not match variable id {variable.id}")

    factors = model.factors()
    for vid, vdata in enumerate(graph.vertices):
        neighbors = {}
        for fid in vdata.factor_ids:
            for var in factors[fid].domain.variables:
                if var.id != vid:
                    neighbors[var.id] = var
        for nid in sorted(neighbors):
            graph.add_edge(vid, nid, EdgeData.between(vdata.variable, neighbors[nid]))

    graph.compute_coloring()
    logger.info("constructed clique graph: %d vertices, %d edges", graph.num_vertices, graph.num_edges)
    return graph


def reset_tree_state(graph: PairwiseGraph) -> None:
    """Clear tree-growth fields on every vertex and edge for a new round."""
    for vdata in graph.vertices:
        vdata.reset_tree()
    for _, _, edata in graph.edges():
        edata.exploring = False


def update_range(graph: PairwiseGraph) -> Tuple[int, int]:
    """(fewest, most) block-sample updates over all vertices."""
    if not graph.vertices:
        return 0, 0
    counts = [v.updates for v in graph.vertices]
    return min(counts), max(counts)
