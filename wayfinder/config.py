"""Engine configuration and defaults for wayfinder."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from wayfinder.models import FloorConfig


@dataclass
class GraphConfig:
    """Graph stitching parameters."""

    transfer_floor_penalty: float = 150.0
    default_edge_dist: float = 1.0


@dataclass
class LayoutConfig:
    """Floor stacking parameters (world units = floor image pixels)."""

    floor_gap: float = 200.0
    default_floor_height: float = 1000.0
    intermediate_scale: float = 0.6
    intermediate_opacity: float = 0.3
    intermediate_gap_factor: float = 0.1


@dataclass
class RoutingConfig:
    """Edge cost modifiers per routing mode."""

    accessible_elevator_factor: float = 0.1
    accessible_stairs_penalty: float = 50000.0
    default_elevator_penalty: float = 2000.0


@dataclass
class ViewportConfig:
    """Camera limits and fitting parameters."""

    canvas_width: float = 800.0
    canvas_height: float = 600.0
    k_min: float = 0.1
    k_max: float = 5.0
    padding: float = 100.0
    bounds_scale_min: float = 0.2
    bounds_scale_max: float = 3.0
    path_scale_min: float = 0.2
    path_scale_max: float = 2.0
    min_extent: float = 1.0
    auto_heading: bool = True
    heading_offset_deg: float = 15.0
    focus_scale: float = 1.5
    floor_focus_scale: float = 0.5
    zoom_in_factor: float = 1.2
    zoom_out_factor: float = 0.8


@dataclass
class OrderConfig:
    """Display priorities passed through to the presentation layer."""

    default: int = 9999
    items: dict[str, int] = field(default_factory=dict)

    def priority(self, name: str | None) -> int:
        """Lowest priority among keys contained in the name, else the default."""
        text = (name or "").strip()
        matches = [int(value) for key, value in self.items.items() if key and key in text]
        return min([self.default, *matches])


def _default_floors() -> list[FloorConfig]:
    return [
        FloorConfig(
            floor_id=i,
            name=f"{i}F",
            label=f"{i}階",
            nodes_path=f"JSON/{i}.json",
            edges_path=f"JSON/{i}.json",
            image_path=f"images/floor{i}.png",
        )
        for i in (1, 2, 3, 4)
    ]


def _floor_from_dict(data: dict[str, Any]) -> FloorConfig:
    if "floor_id" not in data and "id" not in data:
        raise ValueError("floor entry requires floor_id")
    floor_id = int(data.get("floor_id", data.get("id")))
    nodes_path = data.get("nodes_path", data.get("json_path"))
    return FloorConfig(
        floor_id=floor_id,
        name=str(data.get("name", f"{floor_id}F")),
        label=str(data.get("label", data.get("name", f"{floor_id}F"))),
        nodes_path=nodes_path,
        edges_path=data.get("edges_path", nodes_path),
        image_path=data.get("image_path"),
        image_width=float(data["image_width"]) if data.get("image_width") is not None else None,
        image_height=float(data["image_height"]) if data.get("image_height") is not None else None,
    )


@dataclass
class Config:
    """Top-level configuration."""

    graph: GraphConfig = field(default_factory=GraphConfig)
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    routing: RoutingConfig = field(default_factory=RoutingConfig)
    viewport: ViewportConfig = field(default_factory=ViewportConfig)
    order: OrderConfig = field(default_factory=OrderConfig)
    floors: list[FloorConfig] = field(default_factory=_default_floors)
    default_floor_id: int = 2

    def validate(self) -> None:
        """Raise ValueError on settings the engine cannot work with."""
        vp = self.viewport
        if vp.k_min <= 0 or vp.k_max < vp.k_min:
            raise ValueError("viewport k_min must be > 0 and <= k_max")
        if vp.canvas_width <= 0 or vp.canvas_height <= 0:
            raise ValueError("viewport canvas size must be > 0")
        if vp.min_extent <= 0:
            raise ValueError("viewport min_extent must be > 0")
        if self.layout.floor_gap < 0 or self.layout.default_floor_height <= 0:
            raise ValueError("layout floor_gap must be >= 0 and default_floor_height > 0")
        if self.graph.transfer_floor_penalty < 0 or self.graph.default_edge_dist < 0:
            raise ValueError("graph transfer_floor_penalty and default_edge_dist must be >= 0")
        floor_ids = [f.floor_id for f in self.floors]
        if len(set(floor_ids)) != len(floor_ids):
            raise ValueError("floor ids must be unique")

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Config":
        """Load configuration from a YAML file."""
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        graph_data = data.get("graph", {})
        layout_data = data.get("layout", {})
        routing_data = data.get("routing", {})
        viewport_data = data.get("viewport", {})
        order_data = data.get("order", {})
        floors_data = data.get("floors")

        config = cls(
            graph=GraphConfig(**graph_data) if graph_data else GraphConfig(),
            layout=LayoutConfig(**layout_data) if layout_data else LayoutConfig(),
            routing=RoutingConfig(**routing_data) if routing_data else RoutingConfig(),
            viewport=ViewportConfig(**viewport_data) if viewport_data else ViewportConfig(),
            order=OrderConfig(
                default=int(order_data.get("default", 9999)),
                items={str(k): int(v) for k, v in (order_data.get("items") or {}).items()},
            ),
            floors=[_floor_from_dict(f) for f in floors_data] if floors_data else _default_floors(),
            default_floor_id=int(data.get("default_floor_id", 2)),
        )
        config.validate()
        return config

    @classmethod
    def default(cls) -> "Config":
        return cls()
