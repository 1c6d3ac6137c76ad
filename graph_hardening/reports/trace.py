"""
graph_hardening/reports/trace.py - Human-readable trace dumps of the tree.

Three dumps, each one line per tree node in pre-order:
    format_tree         - children and unused connections
    format_node_detail  - postorder, descendant count, jump low/high
    format_connections  - the node's graph adjacency

emit() writes a dump to a logger. Output is purely observational; nothing
here feeds back into the pipeline.
"""

import logging

from graph_hardening.graph.spanning_tree import SpanningTree


def _join(names) -> str:
    names = list(names)
    return ", ".join(str(n) for n in names) if names else "NONE"


def format_tree(tree: SpanningTree) -> list[str]:
    return [
        f"Node {t.node} w/ children {_join(t.child_names())}, "
        f"unused connections to {_join(t.unused_connections)}"
        for t in tree.preorder()
    ]


def format_node_detail(tree: SpanningTree) -> list[str]:
    return [
        f"Node {t.node} Postorder {t.postorder} numDesc {t.num_descendants} "
        f"low {t.lowest_with_jump} high {t.highest_with_jump}"
        for t in tree.preorder()
    ]


def format_connections(tree: SpanningTree) -> list[str]:
    return [
        f"Node {t.node} w/ graph connections {_join(tree.G.adj[t.node])}"
        for t in tree.preorder()
    ]


def emit(log: logging.Logger, title: str, lines: list[str], level: int = logging.DEBUG) -> None:
    """Write a titled dump to `log`, one record per line."""
    if not log.isEnabledFor(level):
        return
    log.log(level, "%s", title)
    for line in lines:
        log.log(level, "  %s", line)
