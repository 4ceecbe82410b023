"""Vertical floor stacking and world-coordinate derivation.

Floors are stacked top-down (highest floor id first) in one world space.
When the active route spans several floors, the floors strictly between the
route's lowest and highest floor are shrunk, faded and packed tighter so the
route stays compact on screen.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from wayfinder.config import LayoutConfig
from wayfinder.graph_builder import Graph
from wayfinder.models import FloorConfig, FloorVisual


def _floor_heights(graph: Graph, floors: Iterable[FloorConfig], config: LayoutConfig) -> dict[int, float]:
    heights: dict[int, float] = {}
    for floor in floors:
        height = floor.image_height if floor.image_height else config.default_floor_height
        heights[int(floor.floor_id)] = float(height)
    for floor_id in graph.floor_ids():
        heights.setdefault(floor_id, float(config.default_floor_height))
    return heights


def intermediate_floors(
    graph: Graph,
    path: Sequence[str],
    floor_ids: Iterable[int] | None = None,
) -> set[int]:
    """Return floors strictly between the lowest and highest floor on a path.

    Candidates are floor_ids when given (floors without nodes included),
    otherwise the floors that own nodes.
    """
    path_floors = {graph.nodes[node_id].floor_id for node_id in path if node_id in graph.nodes}
    if len(path_floors) < 2:
        return set()
    low, high = min(path_floors), max(path_floors)
    candidates = graph.floor_ids() if floor_ids is None else floor_ids
    return {floor_id for floor_id in candidates if low < floor_id < high}


def compute_floor_visuals(
    graph: Graph,
    path: Sequence[str],
    floors: Iterable[FloorConfig],
    config: LayoutConfig | None = None,
) -> dict[int, FloorVisual]:
    """Compute stacking offset, scale and opacity for every floor.

    Args:
        graph: Global graph (used to resolve path floors).
        path: Active route node ids; empty when no route is shown.
        floors: Static floor configuration.
        config: Stacking parameters.

    Returns:
        Mapping floor_id -> FloorVisual, ordered top-down.
    """
    config = config or LayoutConfig()
    heights = _floor_heights(graph, floors, config)
    squeezed = intermediate_floors(graph, path, heights)

    visuals: dict[int, FloorVisual] = {}
    current_y = 0.0
    for floor_id in sorted(heights, reverse=True):
        if floor_id in squeezed:
            scale = config.intermediate_scale
            opacity = config.intermediate_opacity
            gap = config.floor_gap * config.intermediate_gap_factor
        else:
            scale = 1.0
            opacity = 1.0
            gap = config.floor_gap

        height = heights[floor_id] * scale
        visuals[floor_id] = FloorVisual(
            floor_id=floor_id,
            y_offset=current_y,
            scale=scale,
            opacity=opacity,
            height=height,
        )
        current_y += height + gap

    return visuals


def apply_world_coordinates(graph: Graph, visuals: dict[int, FloorVisual]) -> None:
    """Recompute world coordinates of all nodes from their local coordinates."""
    for node in graph.nodes.values():
        visual = visuals.get(node.floor_id)
        scale = visual.scale if visual is not None else 1.0
        y_offset = visual.y_offset if visual is not None else 0.0
        node.world_x = node.local_x * scale
        node.world_y = node.local_y * scale + y_offset


def layout_floors(
    graph: Graph,
    path: Sequence[str],
    floors: Iterable[FloorConfig],
    config: LayoutConfig | None = None,
) -> dict[int, FloorVisual]:
    """Compute floor visuals for a path and apply them to every node."""
    visuals = compute_floor_visuals(graph, path, floors, config)
    apply_world_coordinates(graph, visuals)
    return visuals


def floor_at_world_y(visuals: dict[int, FloorVisual], world_y: float, gap: float) -> int | None:
    """Return the floor whose band, widened by half a gap, contains world_y."""
    for visual in sorted(visuals.values(), key=lambda v: v.y_offset):
        if visual.y_offset - gap / 2 <= world_y < visual.y_offset + visual.height + gap / 2:
            return visual.floor_id
    return None
