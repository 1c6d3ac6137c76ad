"""
graph_hardening/graph/tree_node.py - Spanning-tree overlay node.

A SpanningTreeNode annotates one graph node with its place in the spanning
tree (parent, children, non-tree adjacencies) and with the numbers the
bridge analyzer computes over that tree.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(eq=False)
class SpanningTreeNode:
    """
    One node of the spanning-tree overlay.

    Attributes:
        node:               Name (graph key) of the wrapped graph node.
        parent:             Name of the parent tree node, None for the root.
        children:           Child tree nodes in discovery order.
        unused_connections: Graph neighbors that are neither the parent nor a
                            child, i.e. the far ends of non-tree edges.
        postorder:          1-based post-order rank, unique across the tree.
        num_descendants:    Size of the subtree rooted here, self included.
        lowest_with_jump:   Lowest postorder reachable from this subtree when
                            at most one non-tree edge may be crossed.
        highest_with_jump:  Highest postorder reachable the same way.
    """

    node: str
    parent: Optional[str] = None
    children: list["SpanningTreeNode"] = field(default_factory=list)
    unused_connections: list[str] = field(default_factory=list)
    postorder: int = 0
    num_descendants: int = 0
    lowest_with_jump: int = 0
    highest_with_jump: int = 0

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def subtree_range(self) -> tuple[int, int]:
        """Inclusive (first, last) postorder numbers owned by this subtree."""
        return self.postorder - self.num_descendants + 1, self.postorder

    def child_names(self) -> list[str]:
        return [child.node for child in self.children]

    def __repr__(self) -> str:
        return (
            f"SpanningTreeNode({self.node!r}, post={self.postorder}, "
            f"nd={self.num_descendants}, low={self.lowest_with_jump}, "
            f"high={self.highest_with_jump})"
        )
