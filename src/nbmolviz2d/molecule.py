"""Conversion between networkx graphs and the view's graph snapshot.

The view wants ``{"nodes": [...], "links": [...]}`` where every record has
an ``id`` and links name their endpoints by node *position*. networkx's
node-link JSON names endpoints by node *id*; ``normalize_graph`` accepts
either.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import networkx as nx


def link_id(u: Any, v: Any) -> str:
    return f"{u}-{v}"


def graph_from_networkx(G: nx.Graph) -> dict[str, Any]:
    """Build a graph snapshot from a networkx graph.

    Node attributes are copied onto the node records; edge attributes
    (``distance``, ``strength``, ``label``, ...) onto the link records.

    Example:
        >>> G = nx.Graph()
        >>> G.add_node("C1", atom="C")
        >>> G.add_node("O1", atom="O")
        >>> G.add_edge("C1", "O1", distance=25)
        >>> graph_from_networkx(G)["links"]
        [{'distance': 25, 'id': 'C1-O1', 'source': 0, 'target': 1}]
    """
    position: dict[Any, int] = {}
    nodes = []
    for i, (node_id, attrs) in enumerate(G.nodes(data=True)):
        position[node_id] = i
        nodes.append({**attrs, "id": node_id})

    links = [
        {**attrs, "id": link_id(u, v), "source": position[u], "target": position[v]}
        for u, v, attrs in G.edges(data=True)
    ]
    return {"nodes": nodes, "links": links}


def graph_to_networkx(graph: dict[str, Any]) -> nx.Graph:
    """Build a networkx graph from a snapshot. Layout fields come along as attributes."""
    G = nx.Graph()
    nodes = graph.get("nodes", [])
    for node in nodes:
        G.add_node(node["id"], **{k: v for k, v in node.items() if k != "id"})
    for link in graph.get("links", []):
        u = nodes[link["source"]]["id"]
        v = nodes[link["target"]]["id"]
        G.add_edge(u, v, **{k: v_ for k, v_ in link.items() if k not in ("source", "target")})
    return G


def normalize_graph(data: dict[str, Any]) -> dict[str, Any]:
    """Return a snapshot with ids on every record and positional link endpoints.

    Nodes without an ``id`` get their position. Link endpoints that are not
    already valid positions are looked up as node ids. Accepts ``edges`` as
    an alias for ``links``.
    """
    nodes = [dict(node) for node in data.get("nodes", [])]
    for i, node in enumerate(nodes):
        node.setdefault("id", i)
    position = {node["id"]: i for i, node in enumerate(nodes)}

    raw_links = data.get("links", data.get("edges", []))
    positional = all(
        isinstance(link.get(end), int) and 0 <= link[end] < len(nodes)
        for link in raw_links
        for end in ("source", "target")
    )

    links = []
    for link in raw_links:
        link = dict(link)
        if not positional:
            try:
                link["source"] = position[link["source"]]
                link["target"] = position[link["target"]]
            except KeyError as e:
                raise ValueError(f"Link endpoint {e.args[0]!r} is not a node id") from None
        link.setdefault("id", link_id(nodes[link["source"]]["id"], nodes[link["target"]]["id"]))
        links.append(link)

    return {"nodes": nodes, "links": links}


def load_graph(path: str | Path) -> dict[str, Any]:
    """Read a snapshot (or networkx node-link JSON) from a file."""
    with open(path) as f:
        return normalize_graph(json.load(f))
