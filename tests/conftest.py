"""Pytest global fixtures and test isolation hooks."""

from __future__ import annotations

import pytest

from wayfinder.api import STATE
from wayfinder.config import Config
from wayfinder.graph_builder import Graph, build_global_graph
from wayfinder.models import FloorRecords


def venue_floor_records() -> list[FloorRecords]:
    """Three floors linked by a named staircase and a named elevator."""
    floor1 = FloorRecords(
        floor_id=1,
        nodes=[
            {"id": "e", "x": 0, "y": 0, "type": "entrance", "name": "メインエントランス"},
            {"id": "j1", "x": 100, "y": 0, "type": "junction"},
            {"id": "s", "x": 200, "y": 0, "type": "stairs", "name": "Stairs A"},
            {"id": "ev", "x": 200, "y": 100, "type": "elevator", "name": "EV"},
            {"id": "v1", "x": 50, "y": 50, "type": "vending", "name": "自販機"},
        ],
        edges=[
            {"from": "e", "to": "j1", "dist": 100},
            {"from": "j1", "to": "s", "dist": 100},
            {"from": "j1", "to": "ev", "dist": 120},
            {"from": "e", "to": "v1", "dist": 70},
        ],
    )
    floor2 = FloorRecords(
        floor_id=2,
        nodes=[
            {"id": "s", "x": 200, "y": 0, "type": "stairs", "name": "Stairs A"},
            {"id": "ev", "x": 200, "y": 100, "type": "elevator", "name": "EV"},
            {"id": "r201", "x": 400, "y": 0, "type": "room", "name": "Room 201"},
            {"id": "t2m", "x": 300, "y": 200, "type": "toilet", "name": "男子トイレ"},
        ],
        edges=[
            {"from": "s", "to": "r201", "dist": 200},
            {"from": "ev", "to": "r201", "dist": 250},
            {"from": "s", "to": "t2m", "dist": 150},
        ],
    )
    floor3 = FloorRecords(
        floor_id=3,
        nodes=[
            {"id": "s", "x": 200, "y": 0, "type": "stairs", "name": "Stairs A"},
            {"id": "ev", "x": 200, "y": 100, "type": "elevator", "name": "EV"},
            {"id": "t3f", "x": 250, "y": 50, "type": "toilet", "name": "女性トイレ"},
        ],
        edges=[
            {"from": "s", "to": "t3f", "dist": 60},
            {"from": "ev", "to": "t3f", "dist": 80},
        ],
    )
    return [floor1, floor2, floor3]


@pytest.fixture(autouse=True)
def reset_api_state() -> None:
    """Reset in-memory API state before each test."""
    STATE.session = None
    STATE.config = Config.default()


@pytest.fixture()
def venue_records() -> list[FloorRecords]:
    return venue_floor_records()


@pytest.fixture()
def venue_graph() -> Graph:
    """Built three-floor venue graph."""
    return build_global_graph(venue_floor_records())


@pytest.fixture()
def venue_payload() -> dict:
    """POST /venue body for the three-floor venue."""
    return {
        "floors": [
            {"floor_id": r.floor_id, "name": f"{r.floor_id}F", "nodes": r.nodes, "edges": r.edges}
            for r in venue_floor_records()
        ]
    }
