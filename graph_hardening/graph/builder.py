"""
graph_hardening/graph/builder.py - NetworkX graph construction layer.

Every stage of the pipeline operates on an undirected nx.Graph:
    node key       - the node's unique, stable name
    node attribute - spatial position under config.position_attr
    adjacency      - G.adj (symmetric by construction)

Graph node order (insertion order) is significant: the first node becomes
the spanning-tree root and the order decides the last-resort repair target.

This module builds that graph from CSV extracts, from plain records, or from
caller-owned node objects, and writes the hardened edge set back out again.
"""

import logging
from typing import Any, Iterable

import networkx as nx
import numpy as np
import pandas as pd

from graph_hardening.config import DEFAULT_CONFIG, HardeningConfig
from graph_hardening.exceptions import EmptyGraphError, GraphValidationError

logger = logging.getLogger(__name__)


_POSITION_COLUMNS = ("x", "y", "z")


def build_graph_from_records(
    nodes: Iterable[dict],
    edges: Iterable[tuple[str, str]],
    config: HardeningConfig = DEFAULT_CONFIG,
) -> nx.Graph:
    """
    Build a positioned node graph from plain Python records.

    Args:
        nodes:  Iterable of dicts with a 'name' key and a 'position' key
                (sequence of floats). Extra keys become node attributes.
        edges:  Iterable of (source, target) name pairs.
        config: HardeningConfig; position is stored under config.position_attr.

    Returns:
        G: nx.Graph with one node per record, in record order.

    Raises:
        GraphValidationError: duplicate node names, or an edge that refers
            to a node that was not declared.
    """
    G = nx.Graph()
    for record in nodes:
        attrs = dict(record)
        name = attrs.pop("name")
        if name in G:
            raise GraphValidationError(
                f"duplicate node name '{name}'", details={"node": name}
            )
        position = attrs.pop("position", None)
        if position is not None:
            attrs[config.position_attr] = tuple(float(c) for c in position)
        G.add_node(name, **attrs)

    for source, target in edges:
        _add_declared_edge(G, source, target)

    logger.info(
        "Graph construction complete: %d nodes, %d edges.",
        G.number_of_nodes(),
        G.number_of_edges(),
    )
    return G


def build_graph_from_csv(
    nodes_path: str,
    edges_path: str,
    config: HardeningConfig = DEFAULT_CONFIG,
) -> nx.Graph:
    """
    Build the node graph from a nodes CSV and an edges CSV.

    Nodes CSV columns: name, x, y and optionally z.
    Edges CSV columns: source, target.

    Rows with a blank name are skipped. Node order follows the CSV row order,
    so the first row becomes the spanning-tree root.

    Args:
        nodes_path: Path to the nodes CSV.
        edges_path: Path to the edges CSV.
        config:     HardeningConfig instance.

    Returns:
        G: nx.Graph with positioned nodes and undirected edges.
    """
    logger.info("Loading nodes from: %s", nodes_path)
    df_nodes = pd.read_csv(nodes_path, dtype={"name": str})
    if "name" not in df_nodes.columns:
        raise GraphValidationError(
            "nodes CSV has no 'name' column", details={"path": nodes_path}
        )

    position_cols = [c for c in _POSITION_COLUMNS if c in df_nodes.columns]
    for col in position_cols:
        df_nodes[col] = pd.to_numeric(df_nodes[col], errors="coerce")

    records: list[dict] = []
    for _, row in df_nodes.iterrows():
        name = row.get("name")
        if pd.isna(name) or not str(name).strip():
            logger.debug("Skipping node row with empty name: %s", row.to_dict())
            continue
        record: dict[str, Any] = {"name": str(name).strip()}
        if position_cols and not any(pd.isna(row[c]) for c in position_cols):
            record["position"] = [float(row[c]) for c in position_cols]
        records.append(record)

    logger.info("Loading edges from: %s", edges_path)
    df_edges = pd.read_csv(edges_path, dtype=str)
    missing = {"source", "target"} - set(df_edges.columns)
    if missing:
        raise GraphValidationError(
            f"edges CSV is missing columns: {sorted(missing)}",
            details={"path": edges_path},
        )
    edges = [
        (str(row["source"]).strip(), str(row["target"]).strip())
        for _, row in df_edges.dropna(subset=["source", "target"]).iterrows()
    ]

    G = build_graph_from_records(records, edges, config=config)
    G.graph["source"] = "csv"
    G.graph["nodes_path"] = nodes_path
    G.graph["edges_path"] = edges_path
    return G


def graph_from_nodes(
    node_objects: Iterable[Any],
    config: HardeningConfig = DEFAULT_CONFIG,
) -> nx.Graph:
    """
    Build a graph from caller-owned node objects.

    Each object must expose `name`, `position` and `connected_nodes` (a
    mutable collection of other node objects). The object itself is kept on
    the graph node under the 'source_object' attribute so that new edges can
    be written back with write_back_edges().

    One-sided adjacency (A lists B but B does not list A) is symmetrised
    and logged as a warning.
    """
    G = nx.Graph()
    objects = list(node_objects)
    for obj in objects:
        if obj.name in G:
            raise GraphValidationError(
                f"duplicate node name '{obj.name}'", details={"node": obj.name}
            )
        attrs: dict[str, Any] = {"source_object": obj}
        if getattr(obj, "position", None) is not None:
            attrs[config.position_attr] = tuple(float(c) for c in obj.position)
        G.add_node(obj.name, **attrs)

    for obj in objects:
        for neighbor in obj.connected_nodes:
            neighbor_names = {n.name for n in neighbor.connected_nodes}
            if obj.name not in neighbor_names:
                logger.warning(
                    "Adjacency %s -> %s is one-sided; treating it as undirected.",
                    obj.name,
                    neighbor.name,
                )
            _add_declared_edge(G, obj.name, neighbor.name)

    return G


def write_back_edges(G: nx.Graph) -> int:
    """
    Mirror the graph's adjacency onto the 'source_object' of every node.

    Neighbors already present in an object's connected_nodes are left alone,
    so only edges added by the pipeline are appended.

    Returns:
        added: number of (directed) adjacency entries appended.
    """
    added = 0
    for name, data in G.nodes(data=True):
        obj = data.get("source_object")
        if obj is None:
            continue
        present = {n.name for n in obj.connected_nodes}
        for neighbor in G.adj[name]:
            if neighbor in present:
                continue
            neighbor_obj = G.nodes[neighbor]["source_object"]
            if hasattr(obj.connected_nodes, "append"):
                obj.connected_nodes.append(neighbor_obj)
            else:
                obj.connected_nodes.add(neighbor_obj)
            added += 1
    return added


def validate_graph(G: nx.Graph) -> None:
    """
    Reject inputs the pipeline cannot operate on.

    Raises:
        EmptyGraphError:      G has no nodes.
        GraphValidationError: G is directed.
    """
    if G.number_of_nodes() == 0:
        raise EmptyGraphError()
    if G.is_directed():
        raise GraphValidationError(
            "directed graphs are not supported; pass G.to_undirected()",
            details={"graph_type": type(G).__name__},
        )


def node_position(
    G: nx.Graph,
    node: str,
    config: HardeningConfig = DEFAULT_CONFIG,
) -> np.ndarray:
    """Return the node's position as a 1-D float array."""
    raw = G.nodes[node].get(config.position_attr)
    if raw is None:
        raise GraphValidationError(
            f"node '{node}' has no '{config.position_attr}' attribute",
            details={"node": node},
        )
    position = np.asarray(raw, dtype=float)
    if position.ndim != 1 or position.size == 0:
        raise GraphValidationError(
            f"node '{node}' has a malformed position: {raw!r}",
            details={"node": node, "position": raw},
        )
    return position


def export_edges_csv(G: nx.Graph, path: str) -> pd.DataFrame:
    """
    Write the graph's edge list to CSV (columns: source, target).

    Returns the DataFrame that was written.
    """
    df = pd.DataFrame(list(G.edges()), columns=["source", "target"])
    df.to_csv(path, index=False)
    logger.info("Wrote %d edges to %s", len(df), path)
    return df


def _add_declared_edge(G: nx.Graph, source: str, target: str) -> None:
    for endpoint in (source, target):
        if endpoint not in G:
            raise GraphValidationError(
                f"edge {source} -- {target} refers to unknown node '{endpoint}'",
                details={"source": source, "target": target},
            )
    G.add_edge(source, target)
