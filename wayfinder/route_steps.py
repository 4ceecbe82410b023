"""Turn a node-id route into floor segments, transfers and itinerary steps."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from wayfinder.graph_builder import Graph
from wayfinder.models import Node


@dataclass(slots=True)
class Transfer:
    """A floor change between two consecutive route nodes."""

    departure: Node
    arrival: Node
    departure_label: str
    arrival_label: str


@dataclass(slots=True)
class RouteStep:
    """One itinerary line shown next to the map."""

    node_id: str
    floor_id: int
    title: str
    detail: str
    kind: str  # start | end | depart | arrive | waypoint


def _resolve(graph: Graph, path: Sequence[str]) -> list[Node]:
    return [graph.nodes[node_id] for node_id in path if node_id in graph.nodes]


def split_by_floor(graph: Graph, path: Sequence[str]) -> list[list[Node]]:
    """Group a route into contiguous runs of nodes on the same floor."""
    segments: list[list[Node]] = []
    current: list[Node] = []
    for node in _resolve(graph, path):
        if current and current[-1].floor_id != node.floor_id:
            segments.append(current)
            current = []
        current.append(node)
    if current:
        segments.append(current)
    return segments


def transfer_points(graph: Graph, path: Sequence[str]) -> list[Transfer]:
    """List every floor change along a route."""
    nodes = _resolve(graph, path)
    transfers: list[Transfer] = []
    for a, b in zip(nodes, nodes[1:]):
        if a.floor_id == b.floor_id:
            continue
        departure_label = f"{b.floor_id}階へ"
        if a.name and a.is_connector:
            departure_label = f"{a.name} ({b.floor_id}階へ)"
        transfers.append(
            Transfer(
                departure=a,
                arrival=b,
                departure_label=departure_label,
                arrival_label=f"{a.floor_id}階から",
            )
        )
    return transfers


def build_route_steps(graph: Graph, path: Sequence[str]) -> list[RouteStep]:
    """Build the itinerary for a route.

    Start, end and floor-change nodes always appear; other nodes appear only
    if they have a name.
    """
    nodes = _resolve(graph, path)
    steps: list[RouteStep] = []
    last = len(nodes) - 1

    for index, node in enumerate(nodes):
        prev_node = nodes[index - 1] if index > 0 else None
        next_node = nodes[index + 1] if index < last else None
        arrives = prev_node is not None and prev_node.floor_id != node.floor_id
        departs = next_node is not None and next_node.floor_id != node.floor_id

        is_start = index == 0
        is_end = index == last
        if not node.name and not (is_start or is_end or arrives or departs):
            continue

        title = node.name or ""
        if arrives:
            title, kind = f"{node.floor_id}階に到着", "arrive"
        elif departs:
            title, kind = f"{next_node.floor_id}階へ移動", "depart"
        else:
            kind = "waypoint"
        if not title:
            title = node.label
        if is_start:
            kind = "start"
        elif is_end:
            kind = "end"

        steps.append(
            RouteStep(
                node_id=node.id,
                floor_id=node.floor_id,
                title=title,
                detail=f"{node.floor_id}階",
                kind=kind,
            )
        )

    return steps
