"""
graph_hardening - Connectivity hardening for procedurally assembled node graphs.

Builds a spanning tree over an undirected graph of positioned nodes, joins
any disconnected components by nearest-node edges, finds every bridge with a
postorder variant of Tarjan's algorithm and inserts edges until no single
edge removal can partition the graph.

Entry point:
    graph_hardening.pipeline.connect_and_fix_bridges(G)
"""

__version__ = "0.1.0"

from graph_hardening.pipeline import connect_and_fix_bridges, run_hardening_pipeline

__all__ = ["connect_and_fix_bridges", "run_hardening_pipeline"]
