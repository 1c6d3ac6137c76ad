"""
graph_hardening/metrics/bridges.py - Bridge Edge Detection (Single Points of Failure).

A bridge is an edge whose removal would split the graph into two components.
In a level or dialogue graph that means one broken link strands every node
on the far side of it.

Detection is Tarjan's bridge-finding algorithm expressed over the spanning
tree built by graph_hardening.graph.spanning_tree:

    1. Postorder marking   - number nodes 1..N, children before parents.
    2. Descendant counting - subtree sizes, so that the subtree of X owns
                             exactly the postorder range
                             [X.postorder - X.num_descendants + 1, X.postorder].
    3. Jump-low            - lowest postorder reachable from X's subtree when
                             at most one non-tree edge may be crossed.
    4. Jump-high           - the same, highest.

A tree edge (parent, child) is a bridge iff nothing reachable from the
child's subtree with one jump lands outside the child's own range.

find_bridge_edges() wraps nx.bridges() as an independent oracle for
verification and reporting.
"""

import logging
from typing import Callable, Optional

import networkx as nx

from graph_hardening.exceptions import InvariantViolation
from graph_hardening.graph.spanning_tree import SpanningTree
from graph_hardening.graph.tree_node import SpanningTreeNode

logger = logging.getLogger(__name__)


def is_bridge(child: SpanningTreeNode) -> bool:
    """
    Bridge test for the tree edge between `child` and its parent.

    Requires the tree to have been annotated by BridgeAnalyzer.analyze().
    """
    return (
        child.highest_with_jump <= child.postorder
        and child.lowest_with_jump > child.postorder - child.num_descendants
    )


class BridgeAnalyzer:
    """
    Annotates a finished SpanningTree with postorder numbers, subtree sizes
    and one-jump low/high bounds, and reports which tree edges are bridges.

    The tree must already span every graph node (run connect_components()
    first); the analyzer never mutates the graph.
    """

    def __init__(self, tree: SpanningTree, log: Optional[logging.Logger] = None):
        self.tree = tree
        self._log = log or logger

    def analyze(self) -> list[tuple[SpanningTreeNode, SpanningTreeNode]]:
        """Run the four passes in order and return the bridge tree edges."""
        self.mark_postorder()
        self.count_descendants()
        self.mark_jump_sentinels()
        self.count_low_jump()
        self.count_high_jump()
        self.check_invariants()

        bridges = self.bridges()
        self._log.info(
            "Bridge analysis complete: %d bridges found in %d-node tree.",
            len(bridges),
            len(self.tree),
        )
        return bridges

    def mark_postorder(self) -> None:
        counter = 1
        for tree_node in self.tree.postorder():
            tree_node.postorder = counter
            counter += 1

    def count_descendants(self) -> None:
        for tree_node in self.tree.postorder():
            tree_node.num_descendants = 1 + sum(
                child.num_descendants for child in tree_node.children
            )

    def mark_jump_sentinels(self) -> None:
        """Reset low above and high below any real postorder number."""
        ceiling = self.tree.root.postorder + 1
        for tree_node in self.tree.preorder():
            tree_node.lowest_with_jump = ceiling
            tree_node.highest_with_jump = 0

    def count_low_jump(self) -> None:
        self._propagate_jump_bound("lowest_with_jump", min)

    def count_high_jump(self) -> None:
        self._propagate_jump_bound("highest_with_jump", max)

    def _propagate_jump_bound(
        self,
        attr: str,
        best: Callable[[int, int], int],
    ) -> None:
        """
        Evaluate bound(X, jumped) for the whole tree without recursion.

            bound(X, jumped) = best of
                X.postorder,
                bound(child, jumped)      for every child of X,
                bound(target, True)       for every unused connection of X,
                                          only while jumped is False.

        Each node keeps the best value ever computed for it under `attr`.
        Results are memoised per (name, jumped), so a node that is the target
        of several jumps is only evaluated once per mode.
        """
        results: dict[tuple[str, bool], int] = {}
        # Frame: (tree node, jumped, resolved jump targets or None if unexpanded)
        stack: list[tuple[SpanningTreeNode, bool, Optional[list[SpanningTreeNode]]]] = [
            (self.tree.root, False, None)
        ]
        while stack:
            tree_node, jumped, targets = stack.pop()
            key = (tree_node.node, jumped)
            if key in results and targets is None:
                continue

            if targets is None:
                targets = [] if jumped else self._jump_targets(tree_node)
                stack.append((tree_node, jumped, targets))
                for child in tree_node.children:
                    stack.append((child, jumped, None))
                for target in targets:
                    if (target.node, True) not in results:
                        stack.append((target, True, None))
                continue

            value = tree_node.postorder
            for child in tree_node.children:
                value = best(value, results[(child.node, jumped)])
            for target in targets:
                value = best(value, results[(target.node, True)])

            results[key] = value
            setattr(tree_node, attr, best(getattr(tree_node, attr), value))

    def _jump_targets(self, tree_node: SpanningTreeNode) -> list[SpanningTreeNode]:
        targets = []
        for name in tree_node.unused_connections:
            target = self.tree.find(name)
            if target is not None:
                targets.append(target)
        return targets

    def bridges(self) -> list[tuple[SpanningTreeNode, SpanningTreeNode]]:
        """(parent, child) tree edges that are bridges, top-down."""
        return [
            (parent, child)
            for parent, child in self.tree.edges()
            if is_bridge(child)
        ]

    def check_invariants(self) -> None:
        """
        Verify the annotations are internally consistent.

        Checks, for every node: a positive subtree size, the children's
        postorder ranges tiling the node's own range in order, and
        low <= postorder <= high.

        Raises:
            InvariantViolation: on the first inconsistency found.
        """
        root = self.tree.root
        if root.num_descendants != len(self.tree) or root.postorder != len(self.tree):
            raise InvariantViolation(
                f"root {root.node} numbering does not cover the tree: "
                f"postorder={root.postorder}, num_descendants={root.num_descendants}, "
                f"size={len(self.tree)}"
            )

        for tree_node in self.tree.preorder():
            if tree_node.num_descendants < 1:
                raise InvariantViolation(
                    f"node {tree_node.node} has descendant count {tree_node.num_descendants}"
                )
            expected_start, _ = tree_node.subtree_range
            for child in tree_node.children:
                child_start, child_end = child.subtree_range
                if child_start != expected_start:
                    raise InvariantViolation(
                        f"postorder range of {child.node} starts at {child_start}, "
                        f"expected {expected_start}"
                    )
                expected_start = child_end + 1
            if expected_start != tree_node.postorder:
                raise InvariantViolation(
                    f"children of {tree_node.node} do not end just below its "
                    f"postorder {tree_node.postorder}"
                )
            if not (
                tree_node.lowest_with_jump
                <= tree_node.postorder
                <= tree_node.highest_with_jump
            ):
                raise InvariantViolation(
                    f"node {tree_node.node} jump bounds "
                    f"[{tree_node.lowest_with_jump}, {tree_node.highest_with_jump}] "
                    f"exclude its postorder {tree_node.postorder}"
                )


def find_bridge_edges(G: nx.Graph) -> list[tuple[str, str]]:
    """
    Find bridge edges with NetworkX's Tarjan implementation.

    Args:
        G: Undirected graph. Directed graphs are converted to undirected.

    Returns:
        bridges: List of (u, v) edge tuples that are bridges. Order is
                 arbitrary; (u, v) and (v, u) denote the same bridge.

    Notes:
        - Self-loops are dropped before detection; they can never be bridges.
        - An empty list is returned for an empty graph.
    """
    G_u = nx.Graph(G.to_undirected() if G.is_directed() else G)
    G_u.remove_edges_from(list(nx.selfloop_edges(G_u)))

    bridges: list[tuple[str, str]] = list(nx.bridges(G_u))

    logger.debug(
        "Bridge detection complete: %d bridges found in %d-node graph.",
        len(bridges),
        G_u.number_of_nodes(),
    )

    return bridges
