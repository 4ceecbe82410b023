"""Global navigation graph construction across floors.

Purpose:
- Convert per-floor node/edge records into floor-qualified graph records.
- Stitch floors together with synthetic transfer edges between stairs and
  elevator nodes that share a connection key.
- Build the symmetric adjacency cache queried by the path planner.

Usage example:
    >>> from wayfinder.graph_builder import build_global_graph
    >>> from wayfinder.models import FloorRecords
    >>> graph = build_global_graph([FloorRecords(floor_id=1, nodes=[...], edges=[...])])
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Iterable

from wayfinder.models import (
    AdjacencyEntry,
    Edge,
    EdgeType,
    FloorRecords,
    Node,
    NodeType,
    parse_edge_type,
    parse_node_type,
    qualify_node_id,
)

logger = logging.getLogger(__name__)

TRANSFER_FLOOR_PENALTY = 150.0
DEFAULT_EDGE_DIST = 1.0

Adjacency = dict[str, list[AdjacencyEntry]]


@dataclass
class Graph:
    """Global node map, edge list and adjacency cache.

    Built wholesale per data load; only the adjacency cache may be rebuilt
    afterwards, and only when found empty.
    """

    nodes: dict[str, Node] = field(default_factory=dict)
    edges: list[Edge] = field(default_factory=list)
    adjacency: Adjacency = field(default_factory=dict)

    def get_node(self, node_id: str) -> Node | None:
        return self.nodes.get(node_id)

    def ensure_adjacency(self) -> Adjacency:
        """Return the adjacency cache, rebuilding it if it is empty."""
        if not self.adjacency and self.nodes:
            logger.warning("Adjacency cache empty, rebuilding from %d edges", len(self.edges))
            self.adjacency = build_adjacency(self.nodes, self.edges)
        return self.adjacency

    def floor_ids(self) -> list[int]:
        return sorted({node.floor_id for node in self.nodes.values()})

    def nodes_on_floor(self, floor_id: int) -> list[Node]:
        return [node for node in self.nodes.values() if node.floor_id == floor_id]

    def transfer_edges(self) -> list[Edge]:
        return [edge for edge in self.edges if edge.floor_id is None]


def _node_from_record(floor_id: int, record: dict) -> Node:
    local_id = str(record["id"])
    x = float(record.get("x", 0.0))
    y = float(record.get("y", 0.0))
    name = record.get("name") or None
    connection_id = record.get("connectionId", record.get("connection_id")) or None
    return Node(
        id=qualify_node_id(floor_id, local_id),
        floor_id=int(floor_id),
        local_x=x,
        local_y=y,
        type=parse_node_type(record.get("type")),
        name=str(name) if name is not None else None,
        connection_id=str(connection_id) if connection_id is not None else None,
        local_id=local_id,
        world_x=x,
        world_y=y,
    )


def _edge_from_record(floor_id: int, record: dict, default_dist: float = DEFAULT_EDGE_DIST) -> Edge:
    raw_dist = record.get("dist")
    if isinstance(raw_dist, (int, float)) and not isinstance(raw_dist, bool):
        dist = float(raw_dist)
    else:
        dist = float(default_dist)
    if not math.isfinite(dist) or dist < 0:
        raise ValueError(f"edge dist must be finite and >= 0, got {dist}")
    blocked = record.get("barrierFreeBlocked", record.get("barrier_free_blocked", False))
    return Edge(
        source=qualify_node_id(floor_id, str(record["from"])),
        target=qualify_node_id(floor_id, str(record["to"])),
        dist=dist,
        type=parse_edge_type(record.get("type")),
        floor_id=int(floor_id),
        barrier_free_blocked=bool(blocked),
    )


def collect_floor_graph(
    floor_sets: Iterable[FloorRecords],
    default_dist: float = DEFAULT_EDGE_DIST,
) -> tuple[dict[str, Node], list[Edge]]:
    """Convert raw floor records into qualified nodes and intra-floor edges.

    Edges whose endpoints are absent from the node set, or whose record is
    malformed, are dropped with a warning. Edges without a numeric dist get
    default_dist.
    """
    nodes: dict[str, Node] = {}
    pending_edges: list[tuple[int, dict]] = []

    for floor in floor_sets:
        for record in floor.nodes:
            try:
                node = _node_from_record(floor.floor_id, record)
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping malformed node on floor %s: %s", floor.floor_id, exc)
                continue
            if node.id in nodes:
                logger.warning("Duplicate node id %s on floor %s, keeping first", node.id, floor.floor_id)
                continue
            nodes[node.id] = node
        pending_edges.extend((floor.floor_id, record) for record in floor.edges)

    edges: list[Edge] = []
    for floor_id, record in pending_edges:
        try:
            edge = _edge_from_record(floor_id, record, default_dist)
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping malformed edge on floor %s: %s", floor_id, exc)
            continue
        if edge.source not in nodes or edge.target not in nodes:
            logger.warning("Dropping edge %s -> %s: endpoint not found", edge.source, edge.target)
            continue
        edges.append(edge)

    return nodes, edges


def connection_key(node: Node) -> str | None:
    """Return the key that groups a node with its counterparts on other floors."""
    if node.is_connector and node.name:
        return node.name
    if node.connection_id:
        return node.connection_id
    return None


def _transfer_type(a: Node, b: Node) -> EdgeType:
    if a.type == NodeType.ELEVATOR and b.type == NodeType.ELEVATOR:
        return EdgeType.ELEVATOR
    if a.type == NodeType.STAIRS and b.type == NodeType.STAIRS:
        return EdgeType.STAIRS
    return EdgeType.TRANSFER


def build_transfer_edges(nodes: dict[str, Node], floor_penalty: float = TRANSFER_FLOOR_PENALTY) -> list[Edge]:
    """Connect every pair of nodes sharing a connection key.

    Each group becomes a clique; weight grows with the number of floors
    crossed so that stepping floor by floor is never worse than skipping.
    """
    groups: dict[str, list[Node]] = {}
    for node in nodes.values():
        key = connection_key(node)
        if key is None:
            continue
        groups.setdefault(key, []).append(node)

    transfers: list[Edge] = []
    for key, members in groups.items():
        if len(members) < 2:
            continue
        for i in range(len(members)):
            for j in range(i + 1, len(members)):
                a, b = members[i], members[j]
                transfers.append(
                    Edge(
                        source=a.id,
                        target=b.id,
                        dist=abs(a.floor_id - b.floor_id) * float(floor_penalty),
                        type=_transfer_type(a, b),
                        floor_id=None,
                    )
                )
        logger.debug("Connection %r links %d nodes", key, len(members))

    return transfers


def build_adjacency(nodes: dict[str, Node], edges: Iterable[Edge]) -> Adjacency:
    """Build the symmetric adjacency cache: two entries per undirected edge."""
    adjacency: Adjacency = {node_id: [] for node_id in nodes}
    for edge in edges:
        adjacency.setdefault(edge.source, []).append(
            AdjacencyEntry(edge.target, edge.dist, edge.type, edge.barrier_free_blocked)
        )
        adjacency.setdefault(edge.target, []).append(
            AdjacencyEntry(edge.source, edge.dist, edge.type, edge.barrier_free_blocked)
        )
    return adjacency


def build_global_graph(
    floor_sets: Iterable[FloorRecords],
    floor_penalty: float = TRANSFER_FLOOR_PENALTY,
    default_dist: float = DEFAULT_EDGE_DIST,
) -> Graph:
    """Build the global graph from per-floor node/edge records.

    Args:
        floor_sets: Per-floor records; node and edge ids are floor-local.
        floor_penalty: Transfer weight per floor level crossed.
        default_dist: Weight of intra-floor edges that carry no dist.

    Returns:
        Graph with intra-floor edges, transfer edges and adjacency cache.
    """
    nodes, edges = collect_floor_graph(floor_sets, default_dist=default_dist)
    transfers = build_transfer_edges(nodes, floor_penalty=floor_penalty)
    all_edges = edges + transfers
    graph = Graph(nodes=nodes, edges=all_edges, adjacency=build_adjacency(nodes, all_edges))
    logger.info(
        "Global graph finalized: %d nodes, %d edges (%d transfers)",
        len(nodes),
        len(all_edges),
        len(transfers),
    )
    return graph
