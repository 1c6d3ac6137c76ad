"""
graph_hardening.reports - Trace output for the hardening pipeline.

Modules:
    trace - Line-per-node dumps of the spanning tree, the bridge analysis
            numbers and the final graph connections.
"""
