"""
graph_hardening/graph/repair.py - Bridge repair.

For every tree edge (parent, child) that BridgeAnalyzer flagged as a bridge,
one new graph edge is added so that the bridge lies on a cycle:

    1. grandparent -- child         when parent is not the root
    2. parent -- child's 1st child  when parent is the root and child has children
    3. child -- first other node    last resort: root-adjacent leaf

Adding an edge can only take bridge status away, never create it, so a
single top-down pass over the pre-repair analysis is enough and nothing is
renumbered after a fix.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from graph_hardening.config import DEFAULT_CONFIG, HardeningConfig
from graph_hardening.exceptions import BridgeRepairError
from graph_hardening.graph.spanning_tree import SpanningTree
from graph_hardening.graph.tree_node import SpanningTreeNode
from graph_hardening.metrics.bridges import is_bridge

logger = logging.getLogger(__name__)


RULE_GRANDPARENT = "grandparent"
RULE_GRANDCHILD = "grandchild"
RULE_FALLBACK = "fallback"


@dataclass
class BridgeFix:
    """One repaired bridge and the edge chosen to repair it."""

    bridge: tuple[str, str]       # (parent, child) tree edge that was a bridge
    connected: tuple[str, str]    # endpoints of the repair edge
    rule: str                     # RULE_GRANDPARENT | RULE_GRANDCHILD | RULE_FALLBACK
    added: bool = True            # False if an earlier fix already created the edge


class BridgeRepairer:
    """
    Adds one graph edge per bridge of an analysed SpanningTree.

    Args:
        tree:   SpanningTree annotated by BridgeAnalyzer.analyze().
        config: HardeningConfig (fallback_min_nodes).
        log:    Optional logger replacing the module logger.
    """

    def __init__(
        self,
        tree: SpanningTree,
        config: HardeningConfig = DEFAULT_CONFIG,
        log: Optional[logging.Logger] = None,
    ):
        self.tree = tree
        self.G = tree.G
        self.config = config
        self._log = log or logger

    def repair(self) -> list[BridgeFix]:
        """
        Walk the tree top-down and fix every bridge.

        Returns:
            fixes: One BridgeFix per bridge, in the order they were handled.

        Raises:
            BridgeRepairError: a root-adjacent leaf bridge in a graph with too
                few nodes to offer a third endpoint.
        """
        fixes: list[BridgeFix] = []
        for parent, child in list(self.tree.edges()):
            if not is_bridge(child):
                continue
            a, b, rule = self._choose_endpoints(parent, child)
            fix = BridgeFix(bridge=(parent.node, child.node), connected=(a, b), rule=rule)

            if self.G.has_edge(a, b):
                fix.added = False
                self._log.info(
                    "Bridge between %s and %s already broken by existing edge %s -- %s",
                    parent.node,
                    child.node,
                    a,
                    b,
                )
            else:
                self.G.add_edge(a, b)
                self._log.info(
                    "Fixed bridge between %s and %s by connecting nodes %s and %s",
                    parent.node,
                    child.node,
                    a,
                    b,
                )
            fixes.append(fix)
        return fixes

    def _choose_endpoints(
        self,
        parent: SpanningTreeNode,
        child: SpanningTreeNode,
    ) -> tuple[str, str, str]:
        grandparent = self.tree.parent_of(parent)
        if grandparent is not None:
            return grandparent.node, child.node, RULE_GRANDPARENT

        if child.children:
            return parent.node, child.children[0].node, RULE_GRANDCHILD

        return self._fallback_node(parent, child), child.node, RULE_FALLBACK

    def _fallback_node(self, parent: SpanningTreeNode, child: SpanningTreeNode) -> str:
        """First node in graph order that is neither endpoint of the bridge."""
        if self.G.number_of_nodes() < self.config.fallback_min_nodes:
            raise BridgeRepairError(
                f"cannot repair bridge between {parent.node} and {child.node}: "
                f"graph has {self.G.number_of_nodes()} nodes, at least "
                f"{self.config.fallback_min_nodes} are needed"
            )
        for name in self.G.nodes:
            if name != child.node and name != parent.node:
                return name
        raise BridgeRepairError(
            f"cannot repair bridge between {parent.node} and {child.node}: "
            f"no third node available"
        )
