#!/usr/bin/env python3
"""
pgibbs: model and graph layer for parallel tree-blocked Gibbs sampling

Usage:
    # Summarize a model and its clique graph
    python main.py inspect --input model.txt

    # Build the graph and write a checkpoint
    python main.py checkpoint --input model.txt --output run.ckpt --seed 7

    # Write text reports from a model or a checkpoint
    python main.py export --checkpoint run.ckpt --out-dir reports/

    # Run tests
    python main.py test
"""

from __future__ import annotations

import argparse
import logging
import subprocess
import sys
from pathlib import Path
from typing import Tuple

import numpy as np

from pgibbs import (
    __version__,
    FactorizedModel,
    PairwiseGraph,
    SamplerConfig,
    VertexState,
    construct_clique_graph,
    load_alchemy,
    load_checkpoint,
    save_assignments,
    save_beliefs,
    save_checkpoint,
    save_colors,
    save_tree_state,
    update_range,
)

logger = logging.getLogger("pgibbs.main")


def build_from_args(args, config: SamplerConfig) -> Tuple[FactorizedModel, PairwiseGraph]:
    """Load a checkpoint if one was given, else parse the model and build the graph."""
    if getattr(args, "checkpoint", None):
        print(f"Loading checkpoint from: {args.checkpoint}")
        return load_checkpoint(args.checkpoint)
    if not args.input:
        raise ValueError("Must specify --input MODEL (or --checkpoint FILE)")
    print(f"Loading model from: {args.input}")
    model = load_alchemy(args.input, default_arity=config.default_arity)
    graph = construct_clique_graph(model, config=config)
    return model, graph


def cmd_inspect(args, config: SamplerConfig) -> int:
    """Execute the inspect command."""
    model, graph = build_from_args(args, config)

    print(f"\nModel:")
    print(f"  Variables: {model.num_variables}")
    print(f"  Factors: {model.num_factors}")
    weighted = sum(1 for w in model.weights() if w is not None)
    if weighted:
        print(f"  Weighted factors: {weighted}")

    print(f"\nClique graph:")
    print(f"  Vertices: {graph.num_vertices}")
    print(f"  Directed edges: {graph.num_edges}")
    colors = {graph.color(v) for v in range(graph.num_vertices)}
    print(f"  Colours: {len(colors)}")
    lo, hi = update_range(graph)
    print(f"  Updates: min {lo}, max {hi}")

    states = {}
    for vdata in graph.vertices:
        states[vdata.state] = states.get(vdata.state, 0) + 1
    print(f"\nTree state:")
    for state in VertexState:
        print(f"  {state.name}: {states.get(state, 0)}")

    if args.verbose:
        print(f"\nVertices:")
        for vid, vdata in enumerate(graph.vertices):
            name = model.var_name(vid) if vid < len(model.var_names()) else f"v{vid}"
            print(
                f"  {vid} {name}: arity {vdata.variable.arity}, "
                f"{len(vdata.factor_ids)} factors, neighbours {graph.out_neighbors(vid)}"
            )
    return 0


def cmd_checkpoint(args, config: SamplerConfig) -> int:
    """Execute the checkpoint command."""
    model, graph = build_from_args(args, config)
    save_checkpoint(args.output, model, graph)
    print(f"\nCheckpoint saved to: {args.output}")
    return 0


def cmd_export(args, config: SamplerConfig) -> int:
    """Execute the export command."""
    model, graph = build_from_args(args, config)
    out = Path(args.out_dir)
    out.mkdir(parents=True, exist_ok=True)

    save_beliefs(graph, out / "beliefs.tsv", precision=config.report_precision)
    save_assignments(graph, out / "samples.tsv")
    save_colors(graph, out / "colors.tsv")
    save_tree_state(graph, out / "tree_state.tsv")
    print(f"\nReports written to: {out}")
    return 0


def cmd_test(args, config: SamplerConfig) -> int:
    """Execute the test command."""
    test_dir = Path(__file__).parent / "tests"
    if not test_dir.exists():
        print(f"Test directory not found: {test_dir}")
        return 1

    cmd = [sys.executable, "-m", "pytest", str(test_dir)]
    if args.verbose:
        cmd.append("-v")
    if args.coverage:
        cmd.extend(["--cov=pgibbs", "--cov-report=term-missing"])

    print(f"Running: {' '.join(cmd)}")
    result = subprocess.run(cmd, cwd=Path(__file__).parent)
    return result.returncode


def cmd_info(args, config: SamplerConfig) -> int:
    """Display system information."""
    print(f"pgibbs v{__version__}")
    print("Model and graph layer for parallel tree-blocked Gibbs sampling")
    print()
    print("Tree states:")
    for state in VertexState:
        print(f"  {int(state)} {state.name}")
    print()
    print("Python:", sys.version.split()[0])
    print("NumPy:", np.__version__)

    import scipy
    import networkx
    print("SciPy:", scipy.__version__)
    print("NetworkX:", networkx.__version__)
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="pgibbs",
        description="pgibbs: clique graphs and tree state for blocked Gibbs sampling",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  pgibbs inspect --input model.txt -v
  pgibbs checkpoint --input model.txt --output run.ckpt --seed 7
  pgibbs export --checkpoint run.ckpt --out-dir reports/
  pgibbs info
""",
    )

    parser.add_argument("--version", "-V", action="version", version=f"pgibbs {__version__}")
    parser.add_argument("--log-level", dest="log_level", default=None,
                        help="Logging level (default: WARNING)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    def add_source_args(p):
        p.add_argument("--input", "-i", type=str, help="Model file in the text factor format")
        p.add_argument("--default-arity", dest="default_arity", type=int, default=None,
                       help="Arity for variables without one (default: 2)")
        p.add_argument("--seed", type=int, default=None, help="Seed for the initial assignment")

    inspect_parser = subparsers.add_parser("inspect", help="Summarize a model and its clique graph")
    add_source_args(inspect_parser)
    inspect_parser.add_argument("--checkpoint", "-c", type=str, help="Read state from a checkpoint instead")
    inspect_parser.add_argument("--verbose", "-v", action="store_true", help="List every vertex")

    ckpt_parser = subparsers.add_parser("checkpoint", help="Build the graph and save a checkpoint")
    add_source_args(ckpt_parser)
    ckpt_parser.add_argument("--output", "-o", type=str, required=True, help="Checkpoint file to write")

    export_parser = subparsers.add_parser("export", help="Write belief/sample/colour/tree reports")
    add_source_args(export_parser)
    export_parser.add_argument("--checkpoint", "-c", type=str, help="Read state from a checkpoint instead")
    export_parser.add_argument("--out-dir", "-o", dest="out_dir", type=str, required=True,
                               help="Directory for report files")
    export_parser.add_argument("--precision", dest="report_precision", type=int, default=None,
                               help="Significant digits in belief reports (default: 16)")

    test_parser = subparsers.add_parser("test", help="Run test suite")
    test_parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    test_parser.add_argument("--coverage", action="store_true", help="With coverage")

    subparsers.add_parser("info", help="Show system information")

    args = parser.parse_args(argv)
    config = SamplerConfig.from_args(args)
    config.configure_logging()

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "inspect": cmd_inspect,
        "checkpoint": cmd_checkpoint,
        "export": cmd_export,
        "test": cmd_test,
        "info": cmd_info,
    }
    try:
        return commands[args.command](args, config)
    except (OSError, ValueError) as e:
        logger.debug("command %s failed", args.command, exc_info=True)
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
