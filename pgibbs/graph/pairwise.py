"""
pgibbs/graph/pairwise.py

Pairwise Markov random field storage.

Vertices live in a dense list indexed by vertex id; the directed edge set
is a networkx DiGraph whose "data" edge attribute holds the EdgeData.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Tuple

import networkx as nx

from pgibbs.graph.records import EdgeData, VertexData


class PairwiseGraph:
    """
    Directed graph with one VertexData per vertex and one EdgeData per edge.
    """

    def __init__(self):
        self.vertices: List[VertexData] = []
        self.g = nx.DiGraph()
        self._colors: Dict[int, int] = {}

    def add_vertex(self, vdata: VertexData) -> int:
        """Append a vertex and return its id."""
        vid = len(self.vertices)
        self.vertices.append(vdata)
        self.g.add_node(vid)
        return vid

    def add_edge(self, source: int, target: int, edata: EdgeData) -> None:
        if not (0 <= source < len(self.vertices) and 0 <= target < len(self.vertices)):
            raise KeyError(f"Edge ({source}, {target}) references an unknown vertex")
        if source == target:
            raise ValueError(f"Self edge on vertex {source}")
        self.g.add_edge(source, target, data=edata)

    def vertex_data(self, vid: int) -> VertexData:
        return self.vertices[vid]

    def edge_data(self, source: int, target: int) -> EdgeData:
        data = self.g.get_edge_data(source, target)
        if data is None:
            raise KeyError(f"No edge ({source}, {target})")
        return data["data"]

    def has_edge(self, source: int, target: int) -> bool:
        return self.g.has_edge(source, target)

    def out_neighbors(self, vid: int) -> List[int]:
        return sorted(self.g.successors(vid))

    def in_neighbors(self, vid: int) -> List[int]:
        return sorted(self.g.predecessors(vid))

    def edges(self) -> Iterator[Tuple[int, int, EdgeData]]:
        """All directed edges ordered by (source, target)."""
        for u, v in sorted(self.g.edges()):
            yield u, v, self.g.edges[u, v]["data"]

    @property
    def num_vertices(self) -> int:
        return len(self.vertices)

    @property
    def num_edges(self) -> int:
        return self.g.number_of_edges()

    def compute_coloring(self) -> Dict[int, int]:
        """Greedy colouring of the undirected view; adjacent vertices differ."""
        undirected = self.g.to_undirected(as_view=True)
        self._colors = nx.coloring.greedy_color(undirected, strategy="largest_first")
        return dict(self._colors)

    def color(self, vid: int) -> int:
        if not self._colors and self.vertices:
            self.compute_coloring()
        return self._colors[vid]

    def __repr__(self) -> str:
        return f"PairwiseGraph(vertices={self.num_vertices}, edges={self.num_edges})"
