"""FastAPI routes exposing venue loading, route planning and viewport control.

The renderer/UI is an external client: it posts floor data once, requests
routes, and drives viewport animation by posting progress ticks.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field, model_validator

from wayfinder.config import Config
from wayfinder.loader import load_order, load_venue
from wayfinder.models import FloorConfig, FloorRecords, NodeType
from wayfinder.pathfinding import TARGET_ALIASES, path_cost
from wayfinder.route_steps import build_route_steps
from wayfinder.session import NavigationSession
from wayfinder.utils import SORT_MODES, node_payload, sort_nodes, steps_payload, transform_payload, visuals_payload

logger = logging.getLogger(__name__)


@dataclass
class ApiState:
    """In-memory state for the latest loaded venue."""

    config: Config = field(default_factory=Config.default)
    session: NavigationSession | None = None


STATE = ApiState()


class NodeRecord(BaseModel):
    """Floor-local node record."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    x: float
    y: float
    type: str | None = None
    name: str | None = None
    connection_id: str | None = Field(default=None, alias="connectionId")


class EdgeRecord(BaseModel):
    """Floor-local edge record; dist defaults to 1 when omitted."""

    model_config = ConfigDict(populate_by_name=True)

    source: str = Field(..., alias="from")
    target: str = Field(..., alias="to")
    dist: float | None = Field(default=None, ge=0)
    type: str | None = None
    barrier_free_blocked: bool = Field(default=False, alias="barrierFreeBlocked")


class FloorPayload(BaseModel):
    """One floor's static configuration and graph records."""

    floor_id: int
    name: str | None = None
    image_width: float | None = Field(default=None, gt=0)
    image_height: float | None = Field(default=None, gt=0)
    nodes: list[NodeRecord] = Field(default_factory=list)
    edges: list[EdgeRecord] = Field(default_factory=list)


class VenuePayload(BaseModel):
    """Full venue load request."""

    floors: list[FloorPayload] = Field(..., min_length=1)

    @model_validator(mode="after")
    def validate_floor_ids(self) -> "VenuePayload":
        """Ensure each floor id appears once."""
        ids = [f.floor_id for f in self.floors]
        if len(set(ids)) != len(ids):
            raise ValueError("floor_id values must be unique")
        return self


class RouteRequest(BaseModel):
    """Route query; target is a node id or NEAREST_* alias."""

    start_id: str
    target: str
    accessible: bool | None = None


class RouteResponse(BaseModel):
    """Planned route with everything the renderer needs to draw it."""

    path: list[str]
    cost: float
    nodes: list[dict[str, Any]]
    steps: list[dict[str, Any]]
    floors: list[dict[str, Any]]
    transform: dict[str, float]
    target_transform: dict[str, float] | None = None


class AccessibilityRequest(BaseModel):
    enabled: bool


class PanRequest(BaseModel):
    dx: float
    dy: float


class ZoomRequest(BaseModel):
    factor: float = Field(..., gt=0)


class RotationRequest(BaseModel):
    angle_deg: float


class FocusRequest(BaseModel):
    """Focus on a node or on a whole floor."""

    node_id: str | None = None
    floor_id: int | None = None
    scale: float | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def validate_inputs(self) -> "FocusRequest":
        """Ensure caller provides exactly one focus subject."""
        if (self.node_id is None) == (self.floor_id is None):
            raise ValueError("Provide either node_id or floor_id")
        return self


class TickRequest(BaseModel):
    t: float = Field(..., ge=0.0, le=1.0)


def _floor_records(payload: VenuePayload) -> list[FloorRecords]:
    return [
        FloorRecords(
            floor_id=floor.floor_id,
            nodes=[n.model_dump(by_alias=True, exclude_none=True) for n in floor.nodes],
            edges=[e.model_dump(by_alias=True, exclude_none=True) for e in floor.edges],
        )
        for floor in payload.floors
    ]


def _floor_configs(payload: VenuePayload) -> list[FloorConfig]:
    return [
        FloorConfig(
            floor_id=floor.floor_id,
            name=floor.name or f"{floor.floor_id}F",
            label=floor.name or f"{floor.floor_id}F",
            image_width=floor.image_width,
            image_height=floor.image_height,
        )
        for floor in payload.floors
    ]


def _session_or_400() -> NavigationSession:
    """Get the loaded venue session or raise 400."""
    if STATE.session is None:
        raise HTTPException(status_code=400, detail="No venue loaded yet")
    return STATE.session


def _viewport_payload(session: NavigationSession) -> dict[str, Any]:
    vp = session.viewport
    return {
        "state": vp.state.value,
        "transform": transform_payload(vp.transform),
        "target": transform_payload(vp.target) if vp.target is not None else None,
        "current_floor": session.current_floor(),
    }


def _load_from_config(config: Config, data_dir: str) -> NavigationSession:
    session = NavigationSession(config)
    session.load(load_venue(config.floors, data_dir))
    return session


def create_app(config: Config | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    config_path = os.getenv("WAYFINDER_CONFIG", "").strip()
    if config is None:
        config = Config.from_yaml(config_path) if config_path else Config.default()

    data_dir = os.getenv("WAYFINDER_DATA_DIR", "").strip()
    order_file = os.getenv("WAYFINDER_ORDER_FILE", "").strip()
    if not order_file and data_dir:
        order_file = str(Path(data_dir) / "JSON" / "order.json")
    if order_file:
        config = replace(config, order=load_order(order_file, config.order))
    STATE.config = config

    if data_dir and STATE.session is None:
        STATE.session = _load_from_config(config, data_dir)

    app = FastAPI(title="Wayfinder API", version="1.0.0")

    raw_origins = os.getenv("WAYFINDER_CORS_ORIGINS", "*").strip()
    if raw_origins == "*":
        cors_origins = ["*"]
        allow_credentials = False
    else:
        cors_origins = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]
        allow_credentials = True

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health() -> dict[str, Any]:
        """Health endpoint with venue metadata."""
        session = STATE.session
        return {
            "status": "ok",
            "version": app.version,
            "venue_loaded": session is not None,
            "node_count": len(session.graph.nodes) if session is not None else 0,
        }

    @app.post("/venue")
    async def load_venue_payload(payload: VenuePayload) -> dict[str, Any]:
        """Replace the venue graph wholesale with the posted floors."""
        session = NavigationSession(replace(STATE.config, floors=_floor_configs(payload)))
        graph = session.load(_floor_records(payload))
        STATE.session = session

        return {
            "floor_count": len(payload.floors),
            "node_count": len(graph.nodes),
            "edge_count": len(graph.edges),
            "transfer_count": len(graph.transfer_edges()),
            "floors": visuals_payload(session.visuals),
        }

    @app.get("/floors")
    async def get_floors() -> dict[str, Any]:
        """Return floor configuration and current visual state."""
        session = _session_or_400()
        return {
            "floors": [
                {"floor_id": f.floor_id, "name": f.name, "label": f.label}
                for f in session.config.floors
            ],
            "visuals": visuals_payload(session.visuals),
        }

    @app.get("/nodes")
    async def get_nodes(
        floor_id: int | None = Query(default=None),
        node_type: str | None = Query(default=None, alias="type"),
        sort_by: str = Query(default="default", alias="sort"),
    ) -> dict[str, Any]:
        """List nodes, optionally filtered by floor and type, in destination-list order."""
        session = _session_or_400()
        if node_type is not None and node_type not in {t.value for t in NodeType}:
            raise HTTPException(status_code=400, detail=f"Unknown node type '{node_type}'")
        if sort_by not in SORT_MODES:
            raise HTTPException(status_code=400, detail=f"Unknown sort mode '{sort_by}'")

        order = session.config.order
        selected = [
            node
            for node in session.graph.nodes.values()
            if (floor_id is None or node.floor_id == floor_id)
            and (node_type is None or node.type.value == node_type)
        ]
        nodes = [
            {**node_payload(node), "priority": order.priority(node.name)}
            for node in sort_nodes(selected, order, sort_by)
        ]
        return {"nodes": nodes}

    @app.get("/nodes/{node_id}")
    async def get_node(node_id: str) -> dict[str, Any]:
        """Resolve one node, world coordinates included."""
        session = _session_or_400()
        node = session.get_node(node_id)
        if node is None:
            raise HTTPException(status_code=404, detail=f"Node '{node_id}' was not found")
        return node_payload(node)

    @app.post("/route", response_model=RouteResponse)
    async def post_route(payload: RouteRequest) -> RouteResponse:
        """Plan a route and frame it in the viewport."""
        session = _session_or_400()

        if session.get_node(payload.start_id) is None:
            raise HTTPException(status_code=404, detail=f"start node '{payload.start_id}' was not found")
        if payload.target not in TARGET_ALIASES and session.get_node(payload.target) is None:
            raise HTTPException(status_code=404, detail=f"target node '{payload.target}' was not found")

        if payload.accessible is not None and payload.accessible != session.accessible:
            session.set_accessible(payload.accessible, replan=False)

        path = session.route(payload.start_id, payload.target)
        if not path:
            raise HTTPException(status_code=404, detail="No route found")

        target = session.viewport.target
        return RouteResponse(
            path=path,
            cost=path_cost(session.graph, path, session.accessible, session.config.routing),
            nodes=[node_payload(session.graph.nodes[node_id]) for node_id in path],
            steps=steps_payload(build_route_steps(session.graph, path)),
            floors=visuals_payload(session.visuals),
            transform=transform_payload(session.viewport.transform),
            target_transform=transform_payload(target) if target is not None else None,
        )

    @app.delete("/route")
    async def delete_route() -> dict[str, Any]:
        """Clear the active route and reset floor layout."""
        session = _session_or_400()
        session.clear_route()
        return {"path": [], "floors": visuals_payload(session.visuals)}

    @app.get("/route/steps")
    async def get_route_steps() -> dict[str, Any]:
        """Itinerary of the active route."""
        session = _session_or_400()
        return {"path": session.path, "steps": steps_payload(build_route_steps(session.graph, session.path))}

    @app.post("/accessibility")
    async def post_accessibility(payload: AccessibilityRequest) -> dict[str, Any]:
        """Toggle accessible routing; an active route is planned again."""
        session = _session_or_400()
        path = session.set_accessible(payload.enabled)
        return {"accessible": session.accessible, "path": path}

    @app.get("/viewport")
    async def get_viewport() -> dict[str, Any]:
        return _viewport_payload(_session_or_400())

    @app.post("/viewport/pan")
    async def post_pan(payload: PanRequest) -> dict[str, Any]:
        session = _session_or_400()
        session.viewport.pan_by(payload.dx, payload.dy)
        return _viewport_payload(session)

    @app.post("/viewport/zoom")
    async def post_zoom(payload: ZoomRequest) -> dict[str, Any]:
        session = _session_or_400()
        session.viewport.zoom_by(payload.factor)
        return _viewport_payload(session)

    @app.post("/viewport/rotation")
    async def post_rotation(payload: RotationRequest) -> dict[str, Any]:
        session = _session_or_400()
        session.viewport.set_rotation(payload.angle_deg)
        return _viewport_payload(session)

    @app.post("/viewport/focus")
    async def post_focus(payload: FocusRequest) -> dict[str, Any]:
        """Focus the camera on a node or floor."""
        session = _session_or_400()
        if payload.node_id is not None:
            node = session.get_node(payload.node_id)
            if node is None:
                raise HTTPException(status_code=404, detail=f"Node '{payload.node_id}' was not found")
            session.viewport.focus_node(node, payload.scale)
        elif not session.focus_floor(int(payload.floor_id)):
            raise HTTPException(status_code=404, detail=f"Floor {payload.floor_id} was not found")
        return _viewport_payload(session)

    @app.post("/viewport/tick")
    async def post_tick(payload: TickRequest) -> dict[str, Any]:
        """Advance the in-flight viewport animation to progress t."""
        session = _session_or_400()
        session.viewport.tick(payload.t)
        return _viewport_payload(session)

    @app.get("/order")
    async def get_order() -> dict[str, Any]:
        """Display priorities for destination lists."""
        order = STATE.config.order
        return {"default": order.default, "items": order.items}

    return app
