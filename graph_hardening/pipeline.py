"""
graph_hardening/pipeline.py - Single-call pipeline orchestrator.

Provides run_hardening_pipeline(), which runs the whole sequence in the
required order and returns every intermediate result, and
connect_and_fix_bridges(), the fire-and-forget entry point whose only
effect is the mutated adjacency.

Usage:
    from graph_hardening.pipeline import connect_and_fix_bridges
    connect_and_fix_bridges(G)          # G is now connected and bridgeless
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Union

import networkx as nx

from graph_hardening.config import DEFAULT_CONFIG, HardeningConfig
from graph_hardening.exceptions import InvariantViolation
from graph_hardening.graph.builder import graph_from_nodes, write_back_edges
from graph_hardening.graph.repair import BridgeFix, BridgeRepairer
from graph_hardening.graph.spanning_tree import SpanningTree
from graph_hardening.metrics.bridges import BridgeAnalyzer, find_bridge_edges
from graph_hardening.reports import trace

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """
    Complete output of a single hardening run.

    The graph itself is mutated in place; this record explains what changed.
    """

    G: nx.Graph
    tree: SpanningTree
    edges_before: int

    # Component connector
    connecting_edges: list[tuple[str, str]] = field(default_factory=list)

    # Bridge analysis (pre-repair) and repair
    bridges: list[tuple[str, str]] = field(default_factory=list)
    bridge_fixes: list[BridgeFix] = field(default_factory=list)

    @property
    def added_edges(self) -> list[tuple[str, str]]:
        """Every edge the run inserted, connecting edges first."""
        return self.connecting_edges + [
            fix.connected for fix in self.bridge_fixes if fix.added
        ]


def run_hardening_pipeline(
    G: nx.Graph,
    config: HardeningConfig = DEFAULT_CONFIG,
    log: Optional[logging.Logger] = None,
) -> PipelineResult:
    """
    Make G a single connected component with no bridge edges.

    Dependency order:
        1. Tree builder         - spanning tree from the first node of G
        2. Component connector  - join unreachable components by nearest node
        3. Bridge analyzer      - postorder, descendants, jump low/high
        4. Bridge repairer      - one new edge per bridge, single pass

    Args:
        G:      Undirected graph, mutated in place. Only edges are added.
        config: HardeningConfig instance.
        log:    Optional logger that receives all trace output.

    Returns:
        PipelineResult describing the tree and every inserted edge.

    Raises:
        EmptyGraphError:      G has no nodes.
        GraphValidationError: G is directed, or a node needed for a distance
                              query has no usable position.
        BridgeRepairError:    a bridge cannot be repaired (fewer than
                              config.fallback_min_nodes nodes).
        InvariantViolation:   internal inconsistency, or config.verify_result
                              is set and the result is not bridgeless.
    """
    log = log or logger
    edges_before = G.number_of_edges()

    tree = SpanningTree(G, config=config, log=log)
    connecting_edges = tree.connect_components()
    if config.trace_tree:
        trace.emit(log, "Spanning tree", trace.format_tree(tree))

    analyzer = BridgeAnalyzer(tree, log=log)
    bridges = analyzer.analyze()
    if config.trace_tree:
        trace.emit(log, "Tree node details", trace.format_node_detail(tree))

    fixes = BridgeRepairer(tree, config=config, log=log).repair()
    if config.trace_tree:
        trace.emit(
            log,
            "Graph connections, w/ new connections and no bridges",
            trace.format_connections(tree),
        )

    result = PipelineResult(
        G=G,
        tree=tree,
        edges_before=edges_before,
        connecting_edges=connecting_edges,
        bridges=[(parent.node, child.node) for parent, child in bridges],
        bridge_fixes=fixes,
    )

    log.info(
        "Hardening complete: %d nodes, %d -> %d edges (%d connecting, %d bridge fixes).",
        G.number_of_nodes(),
        edges_before,
        G.number_of_edges(),
        len(connecting_edges),
        sum(1 for fix in fixes if fix.added),
    )

    if config.verify_result:
        verify_hardened(G)

    return result


def verify_hardened(G: nx.Graph) -> None:
    """
    Raise InvariantViolation unless G is connected and has no bridges.
    """
    if G.number_of_nodes() > 0 and not nx.is_connected(G):
        raise InvariantViolation(
            f"graph still has {nx.number_connected_components(G)} components"
        )
    remaining = find_bridge_edges(G)
    if remaining:
        raise InvariantViolation(f"graph still has bridges: {remaining}")


def connect_and_fix_bridges(
    nodes: Union[nx.Graph, Iterable[Any]],
    config: HardeningConfig = DEFAULT_CONFIG,
    log: Optional[logging.Logger] = None,
) -> None:
    """
    Connect all components of the node graph and eliminate every bridge.

    Accepts either an nx.Graph (mutated in place) or an ordered iterable of
    node objects exposing `name`, `position` and `connected_nodes`; in the
    latter case new edges are appended to both endpoints' connected_nodes.

    No nodes are created and no edges are removed. Returns nothing; success
    is the mutated adjacency.
    """
    if isinstance(nodes, nx.Graph):
        run_hardening_pipeline(nodes, config=config, log=log)
        return

    G = graph_from_nodes(nodes, config=config)
    run_hardening_pipeline(G, config=config, log=log)
    write_back_edges(G)
