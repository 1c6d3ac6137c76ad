"""
Custom exceptions for the graph hardening package.
"""


class GraphHardeningError(Exception):
    """Base exception class for graph hardening errors."""
    pass


class EmptyGraphError(GraphHardeningError):
    """Raised when the pipeline is handed a graph with no nodes."""

    def __init__(self, message: str = "empty graph: no nodes to build a spanning tree from"):
        super().__init__(message)


class GraphValidationError(GraphHardeningError):
    """Raised when the input graph is malformed."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.details = details or {}


class BridgeRepairError(GraphHardeningError):
    """Raised when a bridge cannot be repaired with the available nodes."""
    pass


class InvariantViolation(GraphHardeningError):
    """Raised when an internal consistency check fails (a programming error)."""
    pass
