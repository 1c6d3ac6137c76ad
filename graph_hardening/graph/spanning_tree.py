"""
graph_hardening/graph/spanning_tree.py - Spanning tree over a positioned node graph.

Two layers:
    graph  - the caller's nx.Graph (node names, positions, adjacency)
    tree   - an arena of SpanningTreeNode objects keyed by node name

The tree references graph nodes by name only. Lookups (find, contains) are
dictionary hits on the arena, never searches through the tree.

Construction happens in two steps:
    1. build()              - depth-first walk from the first graph node.
                              Every graph edge becomes either a tree edge
                              (parent -> child) or an unused connection
                              recorded on both endpoints.
    2. connect_components() - while graph nodes remain unplaced, join the
                              first of them to its nearest tree node with a
                              new edge and fold its component in with build().

Both walks use explicit stacks, so tree depth is not limited by the
interpreter recursion limit.
"""

import logging
from typing import Iterator, Optional

import networkx as nx
import numpy as np

from graph_hardening.config import DEFAULT_CONFIG, HardeningConfig
from graph_hardening.exceptions import GraphValidationError
from graph_hardening.graph.builder import node_position, validate_graph
from graph_hardening.graph.tree_node import SpanningTreeNode

logger = logging.getLogger(__name__)


class SpanningTree:
    """
    Rooted spanning tree overlaid on an undirected nx.Graph.

    The root is the first node of G. Creating a SpanningTree runs the initial
    build() from the root; nodes unreachable from it stay in the unplaced
    pool until connect_components() is called.

    Args:
        G:      Undirected graph. Mutated only by connect_components().
        config: HardeningConfig (position attribute name).
        log:    Optional logger that receives trace output instead of the
                module logger.

    Raises:
        EmptyGraphError:      G has no nodes.
        GraphValidationError: G is directed.
    """

    def __init__(
        self,
        G: nx.Graph,
        config: HardeningConfig = DEFAULT_CONFIG,
        log: Optional[logging.Logger] = None,
    ):
        validate_graph(G)
        self.G = G
        self.config = config
        self._log = log or logger

        self._nodes: dict[str, SpanningTreeNode] = {}
        # Insertion-ordered pool of graph nodes not yet placed in the tree.
        self._unplaced: dict[str, None] = dict.fromkeys(G.nodes)

        self.root = self._place(next(iter(G.nodes)), parent=None)
        self.build(self.root)

    # ── Arena access ──────────────────────────────────────────────────────────

    def __contains__(self, name: str) -> bool:
        return name in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[SpanningTreeNode]:
        return self.preorder()

    @property
    def unplaced(self) -> list[str]:
        """Graph nodes not yet part of the tree, in graph order."""
        return list(self._unplaced)

    def find(self, name: str) -> Optional[SpanningTreeNode]:
        """Return the tree node for `name`, or None (with a warning) if absent."""
        tree_node = self._nodes.get(name)
        if tree_node is None:
            self._log.warning("Could not find node with name %s", name)
        return tree_node

    def parent_of(self, tree_node: SpanningTreeNode) -> Optional[SpanningTreeNode]:
        if tree_node.parent is None:
            return None
        return self._nodes[tree_node.parent]

    def preorder(self) -> Iterator[SpanningTreeNode]:
        """Yield tree nodes parent-first, children in discovery order."""
        stack = [self.root]
        while stack:
            tree_node = stack.pop()
            yield tree_node
            stack.extend(reversed(tree_node.children))

    def postorder(self) -> Iterator[SpanningTreeNode]:
        """Yield tree nodes children-first, the root last."""
        stack: list[tuple[SpanningTreeNode, bool]] = [(self.root, False)]
        while stack:
            tree_node, expanded = stack.pop()
            if expanded:
                yield tree_node
                continue
            stack.append((tree_node, True))
            for child in reversed(tree_node.children):
                stack.append((child, False))

    def edges(self) -> Iterator[tuple[SpanningTreeNode, SpanningTreeNode]]:
        """Yield (parent, child) tree edges top-down."""
        for tree_node in self.preorder():
            for child in tree_node.children:
                yield tree_node, child

    # ── Tree builder ──────────────────────────────────────────────────────────

    def build(
        self,
        start: SpanningTreeNode,
        parent: Optional[SpanningTreeNode] = None,
    ) -> None:
        """
        Depth-first discovery of the tree below `start`.

        For every graph neighbor of the current node:
            - already recorded as unused here      -> skip (re-entry)
            - already placed, not parent or child  -> record as unused
            - not placed yet                       -> new child, descend

        Safe to call again on an existing tree node after edges were added
        to the graph: only the new edges are discovered.

        Args:
            start:  Tree node to (re)start discovery from.
            parent: Its parent tree node. Resolved from the arena if omitted.
        """
        if parent is None:
            parent = self.parent_of(start)

        stack = [(start, parent, iter(list(self.G.adj[start.node])))]
        while stack:
            tree_node, parent_node, neighbors = stack[-1]
            for neighbor in neighbors:
                if neighbor == tree_node.node:
                    self._log.debug("Ignoring self-adjacency on %s", neighbor)
                    continue
                if neighbor in tree_node.unused_connections:
                    continue
                placed = self._nodes.get(neighbor)
                if placed is not None:
                    if parent_node is not None and neighbor == parent_node.node:
                        continue
                    if placed.parent == tree_node.node:
                        continue
                    tree_node.unused_connections.append(neighbor)
                    continue
                child = self._place(neighbor, parent=tree_node)
                stack.append((child, tree_node, iter(list(self.G.adj[neighbor]))))
                break
            else:
                stack.pop()

    def _place(
        self,
        name: str,
        parent: Optional[SpanningTreeNode],
    ) -> SpanningTreeNode:
        tree_node = SpanningTreeNode(
            node=name, parent=parent.node if parent is not None else None
        )
        self._nodes[name] = tree_node
        self._unplaced.pop(name, None)
        if parent is not None:
            parent.children.append(tree_node)
        return tree_node

    # ── Component connector ───────────────────────────────────────────────────

    def connect_components(self) -> list[tuple[str, str]]:
        """
        Join every unplaced component to the tree.

        Each pass takes the first unplaced node, links it to the nearest tree
        node (Euclidean distance over the whole current tree) with a new
        graph edge, and rebuilds from that tree node, which folds the node's
        whole component into the tree.

        Returns:
            added: (tree_node, joined_node) name pairs, one per new edge.
        """
        added: list[tuple[str, str]] = []
        while self._unplaced:
            name = next(iter(self._unplaced))
            closest = self.closest_to(name)
            self.G.add_edge(closest.node, name)
            self._log.info(
                "Adding edge between %s and %s to connect components",
                closest.node,
                name,
            )
            added.append((closest.node, name))
            self.build(closest, self.parent_of(closest))
        return added

    def closest_to(self, name: str) -> SpanningTreeNode:
        """
        Return the tree node nearest to graph node `name`.

        Ties resolve to the first candidate in pre-order (the root first).
        """
        target = node_position(self.G, name, self.config)
        candidates = list(self.preorder())
        coords = []
        for candidate in candidates:
            position = node_position(self.G, candidate.node, self.config)
            if position.shape != target.shape:
                raise GraphValidationError(
                    f"nodes '{candidate.node}' and '{name}' have positions of "
                    f"different dimensionality",
                    details={"nodes": (candidate.node, name)},
                )
            coords.append(position)
        distances = np.linalg.norm(np.vstack(coords) - target, axis=1)
        return candidates[int(np.argmin(distances))]
