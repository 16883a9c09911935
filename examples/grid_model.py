"""
Example: one round of concurrent tree growth on a 3x3 grid.

  X00 -- X01 -- X02
   |      |      |
  X10 -- X11 -- X12
   |      |      |
  X20 -- X21 -- X22

Every frontier vertex bids for its available neighbours from its own
thread; each contested vertex then settles on its lowest-id suitor.
"""

from concurrent.futures import ThreadPoolExecutor

import numpy as np

from pgibbs import (
    VertexState,
    construct_clique_graph,
    parse_alchemy,
    reset_tree_state,
)


def grid_model_text(n: int = 3, J: float = 0.5) -> str:
    """Ising-like grid in the text factor format."""
    names = [f"X{i}{j}" for i in range(n) for j in range(n)]
    lines = ["variables:"] + [f"{name}\t2" for name in names] + ["factors:"]
    psi = [J, -J, -J, J]
    for i in range(n):
        for j in range(n):
            if j + 1 < n:
                lines.append(f"X{i}{j}/X{i}{j+1}// " + " ".join(map(str, psi)))
            if i + 1 < n:
                lines.append(f"X{i}{j}/X{i+1}{j}// " + " ".join(map(str, psi)))
    return "\n".join(lines) + "\n"


def grow_one_tree(graph, root: int = 0, max_height: int = 10):
    """Grow a single tree breadth-first from root; returns the tree's vertices."""
    graph.vertex_data(root).make_root()
    frontier = [root]
    members = [root]

    while frontier:
        def bid(vid):
            vdata = graph.vertex_data(vid)
            for nid in graph.out_neighbors(vid):
                if vdata.height < max_height:
                    graph.vertex_data(nid).propose(vid, vdata.height)

        with ThreadPoolExecutor(max_workers=4) as pool:
            list(pool.map(bid, frontier))

        next_frontier = []
        for vid, vdata in enumerate(graph.vertices):
            if vdata.state == VertexState.CANDIDATE:
                vdata.settle_candidacy()
                next_frontier.append(vid)
        for vid in frontier:
            graph.vertex_data(vid).finish_frontier()
        frontier = next_frontier
        members.extend(next_frontier)
    return members


def main():
    model = parse_alchemy(grid_model_text())
    graph = construct_clique_graph(model, rng=np.random.default_rng(0))
    print(f"Model: {model}")
    print(f"Graph: {graph}")

    members = grow_one_tree(graph)
    print(f"\nTree with {len(members)} vertices:")
    for vid in members:
        vdata = graph.vertex_data(vid)
        print(f"  {model.var_name(vid)}: parent={vdata.parent_vid} height={vdata.height}")

    reset_tree_state(graph)
    assert all(v.state == VertexState.AVAILABLE for v in graph.vertices)
    print("\nRound reset: all vertices AVAILABLE")


if __name__ == "__main__":
    main()
