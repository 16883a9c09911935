"""
pgibbs/io/reports.py

Tab-separated text exports for analysis. One line per vertex, in vertex
id order. These files are written only; nothing reads them back.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from pgibbs.graph.pairwise import PairwiseGraph

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def save_beliefs(graph: PairwiseGraph, path: PathLike, precision: int = 16) -> None:
    """Write `updates<TAB>p(0)<TAB>...<TAB>p(k-1)` from each normalized belief."""
    with open(path, "w", encoding="utf-8") as f:
        for vdata in graph.vertices:
            probs = vdata.belief.marginal_probs()
            cells = [str(vdata.updates)] + [f"{p:.{precision}g}" for p in probs]
            f.write("\t".join(cells) + "\n")
    logger.debug("wrote beliefs for %d vertices to %s", graph.num_vertices, path)


def save_assignments(graph: PairwiseGraph, path: PathLike) -> None:
    """Write each vertex's current sampled value."""
    with open(path, "w", encoding="utf-8") as f:
        for vid, vdata in enumerate(graph.vertices):
            f.write(f"{vdata.asg.asg(vid)}\n")
    logger.debug("wrote assignments for %d vertices to %s", graph.num_vertices, path)


def save_colors(graph: PairwiseGraph, path: PathLike) -> None:
    """Write each vertex's colour from the graph colouring."""
    with open(path, "w", encoding="utf-8") as f:
        for vid in range(graph.num_vertices):
            f.write(f"{graph.color(vid)}\n")
    logger.debug("wrote colours for %d vertices to %s", graph.num_vertices, path)


def save_tree_state(graph: PairwiseGraph, path: PathLike) -> None:
    """Write `vid<TAB>state<TAB>parent` with raw state enumerants."""
    with open(path, "w", encoding="utf-8") as f:
        for vid, vdata in enumerate(graph.vertices):
            f.write(f"{vid}\t{int(vdata.state)}\t{vdata.parent_vid}\n")
    logger.debug("wrote tree state for %d vertices to %s", graph.num_vertices, path)
