"""
graph_hardening/cli.py - Command-line interface for the hardening pipeline.

Usage:
    graph-hardening run NODES_CSV EDGES_CSV --output hardened_edges.csv
    graph-hardening check NODES_CSV EDGES_CSV

Nodes CSV columns: name, x, y[, z].   Edges CSV columns: source, target.

`run` connects every component, removes every bridge and writes the final
edge list. `check` only reports components and bridges; it exits 0 when the
graph is already connected and bridgeless, 2 otherwise.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time

import networkx as nx

from graph_hardening.exceptions import GraphHardeningError


# ── Logging setup ─────────────────────────────────────────────────────────────

def _setup_logging(level: str = "INFO") -> None:
    """Configure root logger with timestamps."""
    numeric = getattr(logging, level.upper(), logging.INFO)
    fmt = "%(asctime)s  %(levelname)-8s  %(name)s - %(message)s"
    datefmt = "%H:%M:%S"
    logging.basicConfig(level=numeric, format=fmt, datefmt=datefmt, stream=sys.stderr)


logger = logging.getLogger("graph_hardening.cli")


# ── Subcommand: run ───────────────────────────────────────────────────────────

def cmd_run(args: argparse.Namespace) -> int:
    """Load the graph, harden it and write the resulting edge list."""
    _setup_logging(args.log_level)

    from graph_hardening.config import HardeningConfig
    from graph_hardening.graph.builder import build_graph_from_csv, export_edges_csv
    from graph_hardening.pipeline import run_hardening_pipeline

    config = HardeningConfig(
        trace_tree=not args.no_trace,
        verify_result=args.verify,
    )

    t0 = time.monotonic()
    try:
        G = build_graph_from_csv(args.nodes_csv, args.edges_csv, config=config)
        result = run_hardening_pipeline(G, config=config)
    except GraphHardeningError as exc:
        logger.error("Hardening failed: %s", exc)
        return 1
    elapsed = time.monotonic() - t0

    if args.output:
        export_edges_csv(G, args.output)

    print()
    print("=" * 60)
    print("  GRAPH HARDENING - RUN COMPLETE")
    print("=" * 60)
    print(f"  Elapsed          : {elapsed:.2f}s")
    print(f"  Nodes            : {G.number_of_nodes()}")
    print(f"  Edges before     : {result.edges_before}")
    print(f"  Edges after      : {G.number_of_edges()}")
    print(f"  Connecting edges : {len(result.connecting_edges)}")
    print(f"  Bridges found    : {len(result.bridges)}")
    print(f"  Edges added      : {len(result.added_edges)}")
    for a, b in result.added_edges:
        print(f"    + {a} -- {b}")
    if args.output:
        print(f"  Edge list saved  : {args.output}")
    print("=" * 60)

    return 0


# ── Subcommand: check ─────────────────────────────────────────────────────────

def cmd_check(args: argparse.Namespace) -> int:
    """Report components and bridges without changing anything."""
    _setup_logging(args.log_level)

    from graph_hardening.graph.builder import build_graph_from_csv
    from graph_hardening.metrics.bridges import find_bridge_edges

    try:
        G = build_graph_from_csv(args.nodes_csv, args.edges_csv)
    except GraphHardeningError as exc:
        logger.error("Could not load graph: %s", exc)
        return 1

    components = nx.number_connected_components(G) if G.number_of_nodes() else 0
    bridges = find_bridge_edges(G)

    print(f"  Nodes       : {G.number_of_nodes()}")
    print(f"  Edges       : {G.number_of_edges()}")
    print(f"  Components  : {components}")
    print(f"  Bridges     : {len(bridges)}")
    for u, v in bridges:
        print(f"    ! {u} -- {v}")

    return 0 if components <= 1 and not bridges else 2


# ── Argument parser ───────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="graph-hardening",
        description="Connect a positioned node graph and remove every bridge edge.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO; DEBUG shows tree traces)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_input_args(p: argparse.ArgumentParser) -> None:
        p.add_argument("nodes_csv", metavar="NODES_CSV", help="CSV with name,x,y[,z]")
        p.add_argument("edges_csv", metavar="EDGES_CSV", help="CSV with source,target")

    # run
    p_run = subparsers.add_parser(
        "run",
        help="Connect components, fix bridges, write the final edge list",
    )
    add_input_args(p_run)
    p_run.add_argument(
        "--output",
        default=None,
        metavar="PATH",
        help="Write the hardened edge list to this CSV",
    )
    p_run.add_argument(
        "--no-trace", action="store_true",
        help="Skip the tree / node detail / connection dumps",
    )
    p_run.add_argument(
        "--verify", action="store_true",
        help="Cross-check the result with networkx and fail if a bridge remains",
    )
    p_run.set_defaults(func=cmd_run)

    # check
    p_check = subparsers.add_parser(
        "check",
        help="Report components and bridges without modifying anything",
    )
    add_input_args(p_check)
    p_check.set_defaults(func=cmd_check)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
