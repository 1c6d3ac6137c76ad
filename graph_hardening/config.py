"""
graph_hardening/config.py - All tunable parameters for graph hardening.

Nothing in the tree, analysis or repair modules reads a hardcoded attribute
name or limit. Every knob lives here so that a caller with a different node
schema only has to construct a new HardeningConfig.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class HardeningConfig:
    """
    Immutable configuration for the connect-and-fix-bridges pipeline.

    Override by constructing a new HardeningConfig with the desired values.
    """

    # ── Node schema ───────────────────────────────────────────────────────────
    position_attr: str = "position"
    # Node attribute holding the spatial position (sequence of 2 or 3 floats).
    # Used only by the component connector for nearest-node distance queries.

    # ── Trace output ──────────────────────────────────────────────────────────
    trace_tree: bool = True
    # Emit the tree shape, per-node postorder/low/high detail and the final
    # graph connections at DEBUG level. Purely observational.

    # ── Verification ──────────────────────────────────────────────────────────
    verify_result: bool = False
    # After repair, cross-check the graph with nx.is_connected / nx.bridges
    # and raise InvariantViolation if either property does not hold.

    # ── Bridge repair ─────────────────────────────────────────────────────────
    fallback_min_nodes: int = 3
    # The last-resort repair (root-adjacent leaf bridge) needs a node that is
    # neither endpoint of the bridge. Fewer distinct nodes than this is an error.


# Singleton default. Import this everywhere instead of constructing anew.
DEFAULT_CONFIG = HardeningConfig()
