"""
graph_hardening/tests/test_builder.py - Tests for graph_hardening.graph.builder.

Tests verify:
- build_graph_from_records keeps node order and stores positions.
- build_graph_from_csv loads nodes/edges CSVs, skipping blank names.
- Duplicate names and dangling edges raise GraphValidationError.
- graph_from_nodes / write_back_edges round-trip node objects.
- validate_graph and node_position reject unusable input.
- export_edges_csv writes the edge list.
"""

from dataclasses import dataclass, field

import networkx as nx
import numpy as np
import pandas as pd
import pytest

from graph_hardening.config import HardeningConfig
from graph_hardening.exceptions import EmptyGraphError, GraphValidationError
from graph_hardening.graph.builder import (
    build_graph_from_csv,
    build_graph_from_records,
    export_edges_csv,
    graph_from_nodes,
    node_position,
    validate_graph,
    write_back_edges,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

@dataclass(eq=False)
class Room:
    name: str
    position: tuple
    connected_nodes: list = field(default_factory=list)


def write_csvs(tmp_path, nodes_rows, edge_rows):
    nodes_path = tmp_path / "nodes.csv"
    edges_path = tmp_path / "edges.csv"
    pd.DataFrame(nodes_rows).to_csv(nodes_path, index=False)
    pd.DataFrame(edge_rows, columns=["source", "target"]).to_csv(edges_path, index=False)
    return str(nodes_path), str(edges_path)


# ── build_graph_from_records ─────────────────────────────────────────────────

class TestBuildGraphFromRecords:

    def test_returns_undirected_graph(self):
        G = build_graph_from_records([{"name": "A", "position": (0, 0)}], [])
        assert isinstance(G, nx.Graph)
        assert not G.is_directed()

    def test_keeps_record_order(self):
        records = [{"name": n, "position": (i, 0)} for i, n in enumerate("CAB")]
        G = build_graph_from_records(records, [("A", "B")])
        assert list(G.nodes) == ["C", "A", "B"]

    def test_positions_stored_as_float_tuples(self):
        G = build_graph_from_records([{"name": "A", "position": [1, 2, 3]}], [])
        assert G.nodes["A"]["position"] == (1.0, 2.0, 3.0)

    def test_custom_position_attribute(self):
        config = HardeningConfig(position_attr="pos")
        G = build_graph_from_records([{"name": "A", "position": (1, 2)}], [], config=config)
        assert G.nodes["A"]["pos"] == (1.0, 2.0)

    def test_extra_keys_become_attributes(self):
        G = build_graph_from_records([{"name": "A", "kind": "hub"}], [])
        assert G.nodes["A"]["kind"] == "hub"

    def test_duplicate_name_rejected(self):
        with pytest.raises(GraphValidationError, match="duplicate"):
            build_graph_from_records([{"name": "A"}, {"name": "A"}], [])

    def test_dangling_edge_rejected(self):
        with pytest.raises(GraphValidationError) as excinfo:
            build_graph_from_records([{"name": "A"}], [("A", "Z")])
        assert excinfo.value.details == {"source": "A", "target": "Z"}


# ── build_graph_from_csv ─────────────────────────────────────────────────────

class TestBuildGraphFromCsv:

    def test_loads_nodes_and_edges(self, tmp_path):
        nodes_path, edges_path = write_csvs(
            tmp_path,
            [{"name": "A", "x": 0, "y": 0}, {"name": "B", "x": 1, "y": 2}],
            [("A", "B")],
        )
        G = build_graph_from_csv(nodes_path, edges_path)
        assert list(G.nodes) == ["A", "B"]
        assert G.has_edge("A", "B")
        assert G.nodes["B"]["position"] == (1.0, 2.0)
        assert G.graph["source"] == "csv"

    def test_three_dimensional_positions(self, tmp_path):
        nodes_path, edges_path = write_csvs(
            tmp_path, [{"name": "A", "x": 0, "y": 0, "z": 5}], []
        )
        G = build_graph_from_csv(nodes_path, edges_path)
        assert G.nodes["A"]["position"] == (0.0, 0.0, 5.0)

    def test_blank_names_skipped(self, tmp_path):
        nodes_path, edges_path = write_csvs(
            tmp_path,
            [{"name": "A", "x": 0, "y": 0}, {"name": None, "x": 1, "y": 1}],
            [],
        )
        G = build_graph_from_csv(nodes_path, edges_path)
        assert list(G.nodes) == ["A"]

    def test_missing_name_column(self, tmp_path):
        nodes_path, edges_path = write_csvs(tmp_path, [{"label": "A"}], [])
        with pytest.raises(GraphValidationError, match="name"):
            build_graph_from_csv(nodes_path, edges_path)

    def test_missing_edge_columns(self, tmp_path):
        nodes_path, _ = write_csvs(tmp_path, [{"name": "A", "x": 0, "y": 0}], [])
        bad_edges = tmp_path / "bad_edges.csv"
        pd.DataFrame({"from": ["A"], "to": ["A"]}).to_csv(bad_edges, index=False)
        with pytest.raises(GraphValidationError, match="missing columns"):
            build_graph_from_csv(nodes_path, str(bad_edges))

    def test_edge_to_unknown_node(self, tmp_path):
        nodes_path, edges_path = write_csvs(
            tmp_path, [{"name": "A", "x": 0, "y": 0}], [("A", "ghost")]
        )
        with pytest.raises(GraphValidationError, match="ghost"):
            build_graph_from_csv(nodes_path, edges_path)


# ── Node object adapter ──────────────────────────────────────────────────────

class TestNodeObjects:

    def test_graph_from_nodes(self):
        a, b = Room("A", (0, 0)), Room("B", (1, 0))
        a.connected_nodes.append(b)
        b.connected_nodes.append(a)
        G = graph_from_nodes([a, b])
        assert list(G.nodes) == ["A", "B"]
        assert G.has_edge("A", "B")
        assert G.nodes["A"]["source_object"] is a

    def test_one_sided_adjacency_symmetrised(self, caplog):
        a, b = Room("A", (0, 0)), Room("B", (1, 0))
        a.connected_nodes.append(b)
        with caplog.at_level("WARNING"):
            G = graph_from_nodes([a, b])
        assert G.has_edge("B", "A")
        assert "one-sided" in caplog.text

    def test_neighbor_outside_collection_rejected(self):
        a, stray = Room("A", (0, 0)), Room("stray", (1, 0))
        a.connected_nodes.append(stray)
        stray.connected_nodes.append(a)
        with pytest.raises(GraphValidationError, match="stray"):
            graph_from_nodes([a])

    def test_write_back_appends_new_edges_only(self):
        a, b, c = Room("A", (0, 0)), Room("B", (1, 0)), Room("C", (2, 0))
        a.connected_nodes.append(b)
        b.connected_nodes.append(a)
        G = graph_from_nodes([a, b, c])
        G.add_edge("A", "C")

        assert write_back_edges(G) == 2
        assert a.connected_nodes == [b, c]
        assert c.connected_nodes == [a]
        assert b.connected_nodes == [a]

    def test_write_back_supports_sets(self):
        @dataclass(eq=False)
        class SetRoom:
            name: str
            position: tuple
            connected_nodes: set = field(default_factory=set)

        a, b = SetRoom("A", (0, 0)), SetRoom("B", (1, 0))
        G = graph_from_nodes([a, b])
        G.add_edge("A", "B")
        write_back_edges(G)
        assert a.connected_nodes == {b}
        assert b.connected_nodes == {a}


# ── Validation ───────────────────────────────────────────────────────────────

def test_validate_empty_graph():
    with pytest.raises(EmptyGraphError):
        validate_graph(nx.Graph())


def test_validate_directed_graph():
    G = nx.DiGraph()
    G.add_node("A")
    with pytest.raises(GraphValidationError, match="directed"):
        validate_graph(G)


def test_node_position_as_array():
    G = build_graph_from_records([{"name": "A", "position": (3, 4)}], [])
    np.testing.assert_array_equal(node_position(G, "A"), np.array([3.0, 4.0]))


def test_node_position_missing():
    G = nx.Graph()
    G.add_node("A")
    with pytest.raises(GraphValidationError) as excinfo:
        node_position(G, "A")
    assert excinfo.value.details == {"node": "A"}


def test_node_position_malformed():
    G = nx.Graph()
    G.add_node("A", position=[[1, 2], [3, 4]])
    with pytest.raises(GraphValidationError, match="malformed"):
        node_position(G, "A")


# ── Export ───────────────────────────────────────────────────────────────────

def test_export_edges_csv(tmp_path, path_graph):
    out = tmp_path / "edges_out.csv"
    df = export_edges_csv(path_graph, str(out))
    assert list(df.columns) == ["source", "target"]
    reloaded = pd.read_csv(out)
    assert len(reloaded) == path_graph.number_of_edges()
