"""Navigation session: the explicit engine context for one view.

A session ties the global graph, active route, floor layout and viewport
together. Graph, path and layout are replaced wholesale, never patched.
"""

from __future__ import annotations

import logging
from typing import Iterable

from wayfinder.config import Config
from wayfinder.floor_layout import floor_at_world_y, layout_floors
from wayfinder.graph_builder import Graph, build_global_graph
from wayfinder.models import FloorRecords, FloorVisual, Node
from wayfinder.pathfinding import Path, TargetQuery, plan
from wayfinder.viewport import ViewportController

logger = logging.getLogger(__name__)


class NavigationSession:
    """Holds graph, route, floor visuals and viewport for one view session."""

    def __init__(self, config: Config | None = None) -> None:
        self.config = config or Config.default()
        self.graph = Graph()
        self.path: Path = []
        self.target: str | TargetQuery | None = None
        self.visuals: dict[int, FloorVisual] = {}
        self.viewport = ViewportController(self.config.viewport)
        self._accessible = False

    @property
    def accessible(self) -> bool:
        return self._accessible

    def set_accessible(self, enabled: bool, replan: bool = True) -> Path:
        """Switch routing mode; an active route is planned again unless replan is False."""
        self._accessible = bool(enabled)
        if replan and self.path and self.target is not None:
            return self.route(self.path[0], self.target)
        return self.path

    def load(self, floor_sets: Iterable[FloorRecords]) -> Graph:
        """Rebuild the graph from scratch and reset route and layout."""
        self.graph = build_global_graph(
            floor_sets,
            floor_penalty=self.config.graph.transfer_floor_penalty,
            default_dist=self.config.graph.default_edge_dist,
        )
        self.path = []
        self.target = None
        self._relayout()
        self.show_default_floor()
        return self.graph

    def show_default_floor(self) -> bool:
        """Jump the viewport to the configured start floor without animating."""
        if not self.focus_floor(self.config.default_floor_id):
            logger.warning("Default floor %s has no layout, view unchanged", self.config.default_floor_id)
            return False
        self.viewport.finish()
        return True

    def _relayout(self) -> None:
        self.visuals = layout_floors(self.graph, self.path, self.config.floors, self.config.layout)

    def get_node(self, node_id: str) -> Node | None:
        return self.graph.get_node(node_id)

    def route(self, start_id: str, target: str | TargetQuery) -> Path:
        """Plan a route, re-lay out floors for it and frame it in the viewport."""
        path = plan(self.graph, start_id, target, accessible=self._accessible, config=self.config.routing)
        self.path = path
        self.target = target if path else None
        self._relayout()

        if path:
            nodes = [self.graph.nodes[node_id] for node_id in path]
            self.viewport.fit_to_path(nodes)
        return path

    def clear_route(self) -> None:
        self.path = []
        self.target = None
        self._relayout()

    def focus_floor(self, floor_id: int) -> bool:
        """Centre the viewport on one floor; False if the floor is unknown."""
        visual = self.visuals.get(floor_id)
        if visual is None:
            return False
        width = next(
            (f.image_width for f in self.config.floors if f.floor_id == floor_id and f.image_width),
            None,
        )
        if width is None:
            nodes = self.graph.nodes_on_floor(floor_id)
            width = max((n.local_x for n in nodes), default=0.0) or 2000.0
        self.viewport.focus_floor(visual, float(width))
        return True

    def current_floor(self) -> int | None:
        """Floor shown at the centre of the canvas."""
        vp = self.viewport
        _, world_y = vp.screen_to_world(vp.canvas_width / 2, vp.canvas_height / 2)
        return floor_at_world_y(self.visuals, world_y, self.config.layout.floor_gap)
