"""
graph_hardening/tests/conftest.py - Shared pytest fixtures for the test suite.

Fixtures:
    make_graph      - factory: build an nx.Graph from edges + positions.
    path_graph      - A-B-C-D-E on a line (every edge is a bridge).
    two_triangles   - {A,B,C} and {D,E,F}, far apart, no edge between them.
    square          - 4-cycle A-B-C-D (no bridges).
    random_graphs   - deterministic sparse random graphs with positions.
"""

import networkx as nx
import numpy as np
import pytest

SEED = 41


def _build(edges, positions=None, nodes=None):
    G = nx.Graph()
    order = list(nodes or (positions.keys() if positions else []))
    for u, v in edges:
        for n in (u, v):
            if n not in order:
                order.append(n)
    for n in order:
        if positions and n in positions:
            G.add_node(n, position=tuple(float(c) for c in positions[n]))
        else:
            G.add_node(n)
    G.add_edges_from(edges)
    return G


@pytest.fixture
def make_graph():
    """Return the graph factory: make_graph(edges, positions=None, nodes=None)."""
    return _build


@pytest.fixture
def path_graph() -> nx.Graph:
    """A-B-C-D-E, unit spacing on the x axis."""
    positions = {n: (i, 0) for i, n in enumerate("ABCDE")}
    return _build([("A", "B"), ("B", "C"), ("C", "D"), ("D", "E")], positions)


@pytest.fixture
def two_triangles() -> nx.Graph:
    """
    Two disconnected triangles.

    B (1, 0) and D (5, 0) are the closest cross-component pair.
    """
    positions = {
        "A": (0, 0), "B": (1, 0), "C": (0.5, 1),
        "D": (5, 0), "E": (6, 0), "F": (5.5, 1),
    }
    edges = [
        ("A", "B"), ("B", "C"), ("C", "A"),
        ("D", "E"), ("E", "F"), ("F", "D"),
    ]
    return _build(edges, positions)


@pytest.fixture
def square() -> nx.Graph:
    positions = {"A": (0, 0), "B": (1, 0), "C": (1, 1), "D": (0, 1)}
    return _build([("A", "B"), ("B", "C"), ("C", "D"), ("D", "A")], positions)


def _random_positioned_graph(n: int, m: int, seed: int) -> nx.Graph:
    G_raw = nx.gnm_random_graph(n, m, seed=seed)
    rng = np.random.default_rng(seed)
    coords = rng.uniform(0.0, 100.0, size=(n, 2))
    G = nx.Graph()
    for i in range(n):
        G.add_node(f"n{i:02d}", position=tuple(coords[i]))
    G.add_edges_from((f"n{u:02d}", f"n{v:02d}") for u, v in G_raw.edges())
    return G


@pytest.fixture
def random_graphs() -> list[nx.Graph]:
    """
    Deterministic random graphs of varying density (SEED-based).

    Sparse ones have several components and many bridges; dense ones few.
    """
    specs = [(6, 3), (8, 7), (10, 9), (12, 14), (15, 20), (20, 19), (25, 40)]
    return [
        _random_positioned_graph(n, m, SEED + i)
        for i, (n, m) in enumerate(specs)
    ]
