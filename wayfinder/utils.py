"""Helpers converting engine records into JSON-safe payloads."""

from __future__ import annotations

import re
from typing import Any, Iterable

from wayfinder.config import OrderConfig
from wayfinder.models import NODE_TYPE_ORDER, FloorVisual, Node, Transform
from wayfinder.route_steps import RouteStep


def node_payload(node: Node) -> dict[str, Any]:
    """Serialize a node with both local and world coordinates."""
    return {
        "id": node.id,
        "floor_id": node.floor_id,
        "type": node.type.value,
        "label": node.label,
        "name": node.name,
        "connection_id": node.connection_id,
        "local": {"x": float(node.local_x), "y": float(node.local_y)},
        "world": {"x": float(node.world_x), "y": float(node.world_y)},
    }


def visuals_payload(visuals: dict[int, FloorVisual]) -> list[dict[str, Any]]:
    return [
        {
            "floor_id": v.floor_id,
            "y_offset": float(v.y_offset),
            "scale": float(v.scale),
            "opacity": float(v.opacity),
            "height": float(v.height),
        }
        for v in visuals.values()
    ]


def transform_payload(transform: Transform) -> dict[str, float]:
    return {
        "k": float(transform.k),
        "x": float(transform.x),
        "y": float(transform.y),
        "rotation": float(transform.rotation),
    }


def steps_payload(steps: Iterable[RouteStep]) -> list[dict[str, Any]]:
    return [
        {"node_id": s.node_id, "floor_id": s.floor_id, "title": s.title, "detail": s.detail, "kind": s.kind}
        for s in steps
    ]


SORT_MODES = ("default", "floor", "name")


def natural_key(text: str) -> list[Any]:
    """Sort key comparing digit runs numerically ("Room 9" < "Room 10")."""
    return [(0, int(part)) if part.isdigit() else (1, part.casefold()) for part in re.split(r"(\d+)", text) if part]


def sort_nodes(nodes: Iterable[Node], order: OrderConfig, sort_by: str = "default") -> list[Node]:
    """Order nodes for destination lists.

    default: configured priority, then type order, then name.
    floor: floor id, then type order, then name.
    name: name only.
    """
    if sort_by not in SORT_MODES:
        raise ValueError(f"sort_by must be one of {SORT_MODES}, got {sort_by!r}")

    def key(node: Node) -> tuple[Any, ...]:
        title = natural_key(node.name or node.id)
        if sort_by == "name":
            return (title,)
        rank = NODE_TYPE_ORDER[node.type]
        if sort_by == "floor":
            return (node.floor_id, rank, title)
        return (order.priority(node.name), rank, title)

    return sorted(nodes, key=key)
