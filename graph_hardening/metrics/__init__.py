"""
graph_hardening.metrics - Structural analysis over the spanning tree.

Modules:
    bridges - Postorder / descendant / jump-bound annotation and the bridge
              test, plus an nx.bridges() oracle.
"""
