"""Typed records for the venue navigation graph and view state.

Purpose:
- Define node/edge type enums and their lookup tables.
- Hold graph records (nodes, edges, adjacency entries).
- Hold per-floor visual state and the camera transform.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class NodeType(str, Enum):
    """Semantic node category as tagged in floor data."""

    ROOM = "room"
    TOILET = "toilet"
    STAIRS = "stairs"
    ELEVATOR = "elevator"
    ENTRANCE = "entrance"
    VENDING = "vending"
    AREA = "area"
    JUNCTION = "junction"


class EdgeType(str, Enum):
    """Traversal kind of an edge; drives routing cost modifiers."""

    WALK = "walk"
    STAIRS = "stairs"
    ELEVATOR = "elevator"
    TRANSFER = "transfer"


# Display label and list order per node type.
NODE_TYPE_LABELS: dict[NodeType, str] = {
    NodeType.ROOM: "教室",
    NodeType.TOILET: "トイレ",
    NodeType.STAIRS: "階段",
    NodeType.ELEVATOR: "EV",
    NodeType.ENTRANCE: "入口",
    NodeType.VENDING: "自販機",
    NodeType.AREA: "エリア",
    NodeType.JUNCTION: "Others",
}

NODE_TYPE_ORDER: dict[NodeType, int] = {
    NodeType.ROOM: 1,
    NodeType.AREA: 2,
    NodeType.ENTRANCE: 3,
    NodeType.TOILET: 4,
    NodeType.STAIRS: 5,
    NodeType.ELEVATOR: 6,
    NodeType.VENDING: 7,
    NodeType.JUNCTION: 99,
}

CONNECTOR_TYPES = frozenset({NodeType.STAIRS, NodeType.ELEVATOR})


def parse_node_type(raw: str | None) -> NodeType:
    """Map a raw type tag to NodeType; unknown or missing tags become junctions."""
    if not raw:
        return NodeType.JUNCTION
    try:
        return NodeType(str(raw).strip().lower())
    except ValueError:
        return NodeType.JUNCTION


def parse_edge_type(raw: str | None) -> EdgeType:
    """Map a raw edge type tag to EdgeType; unknown or missing tags walk."""
    if not raw:
        return EdgeType.WALK
    try:
        return EdgeType(str(raw).strip().lower())
    except ValueError:
        return EdgeType.WALK


def qualify_node_id(floor_id: int, local_id: str) -> str:
    """Build the globally unique node id for a floor-local id."""
    return f"{floor_id}_{local_id}"


@dataclass(slots=True)
class Node:
    """Graph vertex with immutable floor-local and derived world coordinates."""

    id: str
    floor_id: int
    local_x: float
    local_y: float
    type: NodeType = NodeType.JUNCTION
    name: str | None = None
    connection_id: str | None = None
    local_id: str | None = None
    world_x: float = 0.0
    world_y: float = 0.0

    @property
    def is_connector(self) -> bool:
        return self.type in CONNECTOR_TYPES

    @property
    def label(self) -> str:
        return NODE_TYPE_LABELS[self.type]


@dataclass(slots=True)
class Edge:
    """Undirected weighted connection between two node ids."""

    source: str
    target: str
    dist: float = 1.0
    type: EdgeType = EdgeType.WALK
    floor_id: int | None = None
    barrier_free_blocked: bool = False


@dataclass(slots=True)
class AdjacencyEntry:
    """One directed half of an undirected edge in the adjacency cache."""

    to: str
    dist: float
    type: EdgeType
    barrier_free_blocked: bool = False


@dataclass(slots=True)
class FloorConfig:
    """Static per-floor configuration supplied by the asset provider."""

    floor_id: int
    name: str = ""
    label: str = ""
    nodes_path: str | None = None
    edges_path: str | None = None
    image_path: str | None = None
    image_width: float | None = None
    image_height: float | None = None


@dataclass(slots=True)
class FloorRecords:
    """Raw node/edge records of one floor, as read from floor data."""

    floor_id: int
    nodes: list[dict] = field(default_factory=list)
    edges: list[dict] = field(default_factory=list)


@dataclass(slots=True)
class FloorVisual:
    """Vertical stacking offset and presentation state of one floor."""

    floor_id: int
    y_offset: float = 0.0
    scale: float = 1.0
    opacity: float = 1.0
    height: float = 0.0


@dataclass(slots=True)
class Transform:
    """Camera transform: scale, translation and rotation in degrees."""

    k: float = 1.0
    x: float = 0.0
    y: float = 0.0
    rotation: float = 0.0

    def copy(self) -> "Transform":
        return Transform(k=self.k, x=self.x, y=self.y, rotation=self.rotation)
