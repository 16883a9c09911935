"""
pgibbs/io/checkpoint.py

Binary checkpoints of a model and its pairwise graph.

Field order (each field tagged, see archive.py):

    header
    model:   variables, factors, reverse index, names, factor weights
    graph:   vertex count, vertex records, edge count, (source, target, edge record)*

Vertex record: variable, assignment, factor ids, belief, tmp_bp_belief,
updates, parent (NULL_VID for none), state enumerant, height,
child_candidates. Edge record: weight, message, edge_factor, exploring.

Checkpoints are taken between rounds. marked_up and suitor lists are not
stored; a loaded CANDIDATE gets its tentative parent back as its one suitor,
so it can still be settled.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Tuple, Union

from pgibbs.graph.pairwise import PairwiseGraph
from pgibbs.graph.records import EdgeData, VertexData
from pgibbs.graph.tree import VertexState, tree_state_from_fields
from pgibbs.io.archive import CheckpointFormatError, IArchive, OArchive
from pgibbs.model.factorized import FactorizedModel

logger = logging.getLogger(__name__)


def save_model(arc: OArchive, model: FactorizedModel) -> None:
    variables = model.variables()
    arc.write_list_len(len(variables))
    for v in variables:
        arc.write_variable(v)

    factors = model.factors()
    arc.write_list_len(len(factors))
    for f in factors:
        arc.write_factor(f)

    index = model.var_to_factor()
    arc.write_list_len(len(index))
    for var_id, fids in index.items():
        arc.write_u64(var_id)
        arc.write_u64_list(fids)

    arc.write_str_list(model.var_names())

    weights = model.weights()
    arc.write_list_len(len(weights))
    for w in weights:
        arc.write_bool(w is not None)
        if w is not None:
            arc.write_f64(w)


def load_model(arc: IArchive) -> FactorizedModel:
    variables = [arc.read_variable() for _ in range(arc.read_list_len())]
    factors = [arc.read_factor() for _ in range(arc.read_list_len())]
    index = {}
    for _ in range(arc.read_list_len()):
        var_id = arc.read_u64()
        index[var_id] = arc.read_u64_list()
    names = arc.read_str_list()
    weights = []
    for _ in range(arc.read_list_len()):
        weights.append(arc.read_f64() if arc.read_bool() else None)
    if len(weights) != len(factors):
        raise CheckpointFormatError(f"{len(weights)} weights stored for {len(factors)} factors")
    try:
        return FactorizedModel.from_parts(variables, factors, index, names, weights)
    except ValueError as e:
        raise CheckpointFormatError(str(e)) from None


def save_vertex(arc: OArchive, vdata: VertexData) -> None:
    arc.write_variable(vdata.variable)
    arc.write_assignment(vdata.asg)
    arc.write_u64_list(vdata.factor_ids)
    arc.write_factor(vdata.belief)
    arc.write_factor(vdata.tmp_bp_belief)
    arc.write_u64(vdata.updates)
    arc.write_i64(vdata.parent_vid)
    arc.write_u32(int(vdata.state))
    arc.write_u64(vdata.height)
    arc.write_u64(vdata.child_candidates.value)


def load_vertex(arc: IArchive) -> VertexData:
    variable = arc.read_variable()
    asg = arc.read_assignment()
    factor_ids = arc.read_u64_list()
    belief = arc.read_factor()
    tmp_bp_belief = arc.read_factor()
    updates = arc.read_u64()
    parent = arc.read_i64()
    state = arc.read_u32()
    height = arc.read_u64()
    candidates = arc.read_u64()
    try:
        vdata = VertexData(variable, factor_ids, asg)
        tree = tree_state_from_fields(state, parent, height)
    except ValueError as e:
        raise CheckpointFormatError(str(e)) from None
    vdata.belief = belief
    vdata.tmp_bp_belief = tmp_bp_belief
    vdata.updates = updates
    vdata.tree = tree
    vdata.child_candidates.reset(candidates)
    return vdata


def save_edge(arc: OArchive, edata: EdgeData) -> None:
    if edata.message is None or edata.edge_factor is None:
        raise ValueError("edge record has no message or edge factor table")
    arc.write_f64(edata.weight)
    arc.write_factor(edata.message)
    arc.write_factor(edata.edge_factor)
    arc.write_bool(edata.exploring)


def load_edge(arc: IArchive) -> EdgeData:
    return EdgeData(
        weight=arc.read_f64(),
        message=arc.read_factor(),
        edge_factor=arc.read_factor(),
        exploring=arc.read_bool(),
    )


def save_graph(arc: OArchive, graph: PairwiseGraph) -> None:
    arc.write_list_len(graph.num_vertices)
    for vdata in graph.vertices:
        save_vertex(arc, vdata)
    arc.write_list_len(graph.num_edges)
    for source, target, edata in graph.edges():
        arc.write_u64(source)
        arc.write_u64(target)
        save_edge(arc, edata)


def load_graph(arc: IArchive) -> PairwiseGraph:
    graph = PairwiseGraph()
    for _ in range(arc.read_list_len()):
        vdata = load_vertex(arc)
        vid = graph.add_vertex(vdata)
        if vid != vdata.variable.id:
            raise CheckpointFormatError(f"vertex {vid} stores variable {vdata.variable.id}")
    # Suitor lists are not stored; a CANDIDATE keeps its tentative parent as the sole suitor
    for vid, vdata in enumerate(graph.vertices):
        if vdata.state == VertexState.CANDIDATE:
            if not 0 <= vdata.parent < graph.num_vertices:
                raise CheckpointFormatError(f"vertex {vid} proposed to unknown parent {vdata.parent}")
            vdata.restore_suitor(vdata.parent, graph.vertex_data(vdata.parent).height)
    for _ in range(arc.read_list_len()):
        source = arc.read_u64()
        target = arc.read_u64()
        edata = load_edge(arc)
        try:
            graph.add_edge(source, target, edata)
        except (KeyError, ValueError) as e:
            raise CheckpointFormatError(str(e)) from None
    graph.compute_coloring()
    return graph


def save_checkpoint(path: Union[str, Path], model: FactorizedModel, graph: PairwiseGraph) -> None:
    """Write model and graph state to a binary checkpoint file."""
    with open(path, "wb") as f:
        arc = OArchive(f)
        arc.write_header()
        save_model(arc, model)
        save_graph(arc, graph)
    logger.info("saved checkpoint %s (%d vertices, %d edges)", path, graph.num_vertices, graph.num_edges)


def load_checkpoint(path: Union[str, Path]) -> Tuple[FactorizedModel, PairwiseGraph]:
    """
    Read a checkpoint written by save_checkpoint.

    Raises:
        CheckpointFormatError: on truncated, corrupt or inconsistent files
    """
    with open(path, "rb") as f:
        arc = IArchive(f)
        arc.read_header()
        model = load_model(arc)
        graph = load_graph(arc)
        if f.read(1):
            raise CheckpointFormatError("trailing bytes after graph section")
    if [v.variable for v in graph.vertices] != model.variables():
        raise CheckpointFormatError("graph vertices do not match model variables")
    logger.info("loaded checkpoint %s (%d vertices, %d edges)", path, graph.num_vertices, graph.num_edges)
    return model, graph
