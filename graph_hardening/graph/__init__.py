"""
graph_hardening.graph - NetworkX graph construction, spanning tree and repair.

Modules:
    builder        - Load the node graph from CSV, records or node objects.
    tree_node      - SpanningTreeNode overlay record.
    spanning_tree  - Tree builder + component connector.
    repair         - Bridge repairer.

All graphs are undirected NetworkX Graphs:
    Node key       : unique node name
    Node attribute : position (config.position_attr)
"""
