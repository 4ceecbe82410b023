"""Unit tests for wayfinder.pathfinding."""

from __future__ import annotations

import logging
import math
import random

import pytest

from wayfinder.graph_builder import Graph, build_global_graph
from wayfinder.models import AdjacencyEntry, EdgeType, FloorRecords, NodeType
from wayfinder.pathfinding import (
    NEAREST_VENDING,
    TargetQuery,
    cost_rules,
    path_cost,
    plan,
    resolve_targets,
)


def _single_floor(nodes: list[str], edges: list[dict]) -> Graph:
    return build_global_graph(
        [FloorRecords(floor_id=1, nodes=[{"id": n, "x": 0, "y": 0} for n in nodes], edges=edges)]
    )


def test_default_mode_prefers_stairs(venue_graph) -> None:
    """Elevators carry a mild penalty outside accessible mode."""
    path = plan(venue_graph, "1_e", "2_r201")

    assert path == ["1_e", "1_j1", "1_s", "2_s", "2_r201"]
    assert path_cost(venue_graph, path) == pytest.approx(550.0)


def test_accessible_mode_prefers_elevator(venue_graph) -> None:
    path = plan(venue_graph, "1_e", "2_r201", accessible=True)

    assert path == ["1_e", "1_j1", "1_ev", "2_ev", "2_r201"]
    assert path_cost(venue_graph, path, accessible=True) == pytest.approx(485.0)


def test_accessible_mode_picks_elevator_over_parallel_stairs() -> None:
    """Elevator (100 -> 10) must beat stairs (50 -> 50050) between the same nodes."""
    graph = _single_floor(
        ["a", "x", "y", "b"],
        [
            {"from": "a", "to": "x", "dist": 100, "type": "elevator"},
            {"from": "x", "to": "b", "dist": 0},
            {"from": "a", "to": "y", "dist": 50, "type": "stairs"},
            {"from": "y", "to": "b", "dist": 0},
        ],
    )

    assert plan(graph, "1_a", "1_b", accessible=True) == ["1_a", "1_x", "1_b"]
    assert plan(graph, "1_a", "1_b", accessible=False) == ["1_a", "1_y", "1_b"]

    parallel = _single_floor(
        ["a", "b"],
        [
            {"from": "a", "to": "b", "dist": 100, "type": "elevator"},
            {"from": "a", "to": "b", "dist": 50, "type": "stairs"},
        ],
    )
    path = plan(parallel, "1_a", "1_b", accessible=True)
    assert path == ["1_a", "1_b"]
    assert path_cost(parallel, path, accessible=True) == pytest.approx(10.0)


def test_blocked_edges_only_excluded_in_accessible_mode() -> None:
    graph = _single_floor(
        ["a", "b", "c"],
        [
            {"from": "a", "to": "b", "dist": 1, "barrierFreeBlocked": True},
            {"from": "a", "to": "c", "dist": 5},
            {"from": "c", "to": "b", "dist": 5},
        ],
    )

    assert plan(graph, "1_a", "1_b") == ["1_a", "1_b"]
    assert plan(graph, "1_a", "1_b", accessible=True) == ["1_a", "1_c", "1_b"]


def test_cost_modifiers_move_weights_in_expected_direction() -> None:
    accessible = cost_rules(accessible=True)
    default = cost_rules(accessible=False)
    for base in (0.5, 1.0, 42.0, 300.0):
        elevator = AdjacencyEntry("n", base, EdgeType.ELEVATOR)
        stairs = AdjacencyEntry("n", base, EdgeType.STAIRS)
        walk = AdjacencyEntry("n", base, EdgeType.WALK)

        assert accessible.weight(elevator) < base
        assert accessible.weight(stairs) > base
        assert accessible.weight(walk) == base
        assert default.weight(elevator) > base
        assert default.weight(stairs) == base

    blocked = AdjacencyEntry("n", 3.0, EdgeType.WALK, barrier_free_blocked=True)
    assert accessible.weight(blocked) is None
    assert default.weight(blocked) == 3.0


def test_nearest_queries_resolve_by_type_and_keyword(venue_graph) -> None:
    assert resolve_targets(venue_graph, "NEAREST_VENDING") == {"1_v1"}
    assert resolve_targets(venue_graph, "NEAREST_MALE") == {"2_t2m"}
    assert resolve_targets(venue_graph, "NEAREST_FEMALE") == {"3_t3f"}
    assert resolve_targets(venue_graph, TargetQuery(NodeType.ROOM)) == {"2_r201"}


def test_nearest_male_restroom_route(venue_graph) -> None:
    path = plan(venue_graph, "1_e", "NEAREST_MALE")
    assert path == ["1_e", "1_j1", "1_s", "2_s", "2_t2m"]


def test_nearest_female_restroom_route_crosses_two_floors(venue_graph) -> None:
    path = plan(venue_graph, "1_e", "NEAREST_FEMALE")

    assert path[0] == "1_e"
    assert path[-1] == "3_t3f"
    assert path_cost(venue_graph, path) == pytest.approx(560.0)


def test_nearest_vending_from_upper_floor(venue_graph) -> None:
    path = plan(venue_graph, "2_r201", NEAREST_VENDING)
    assert path == ["2_r201", "2_s", "1_s", "1_j1", "1_e", "1_v1"]


def test_unknown_start_returns_empty(venue_graph, caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="wayfinder.pathfinding"):
        assert plan(venue_graph, "9_nowhere", "2_r201") == []
    assert "Start node not found" in caplog.text


def test_unknown_target_returns_empty(venue_graph) -> None:
    assert plan(venue_graph, "1_e", "9_nowhere") == []


def test_empty_query_skips_search() -> None:
    """No vending machines tagged: empty path without touching the adjacency cache."""
    graph = _single_floor(["a", "b"], [{"from": "a", "to": "b"}])
    graph.adjacency = {}

    assert plan(graph, "1_a", "NEAREST_VENDING") == []
    assert graph.adjacency == {}


def test_disconnected_graph_returns_empty() -> None:
    graph = _single_floor(["a", "b", "c"], [{"from": "a", "to": "b", "dist": 1}])
    assert plan(graph, "1_a", "1_c") == []


def test_start_equal_to_target() -> None:
    graph = _single_floor(["a", "b"], [{"from": "a", "to": "b"}])
    assert plan(graph, "1_a", "1_a") == ["1_a"]


def test_empty_adjacency_is_rebuilt_on_demand(venue_graph) -> None:
    venue_graph.adjacency = {}
    assert plan(venue_graph, "1_e", "1_v1") == ["1_e", "1_v1"]
    assert venue_graph.adjacency


def _brute_force_cost(graph: Graph, start: str, goal: str, accessible: bool) -> float:
    """Minimum effective cost over every simple path (tiny graphs only)."""
    rules = cost_rules(accessible)
    best = math.inf

    def cheapest(a: str, b: str) -> float:
        weights = [rules.weight(e) for e in graph.adjacency[a] if e.to == b]
        weights = [w for w in weights if w is not None]
        return min(weights) if weights else math.inf

    def walk(node: str, seen: set[str], cost: float) -> None:
        nonlocal best
        if cost >= best:
            return
        if node == goal:
            best = cost
            return
        for nxt in {e.to for e in graph.adjacency[node]}:
            if nxt in seen:
                continue
            step = cheapest(node, nxt)
            if math.isfinite(step):
                walk(nxt, seen | {nxt}, cost + step)

    walk(start, {start}, 0.0)
    return best


def _random_graph(rng: random.Random, node_count: int) -> Graph:
    nodes = [f"n{i}" for i in range(node_count)]
    edges = []
    for i in range(node_count):
        for j in range(i + 1, node_count):
            if rng.random() < 0.35:
                edges.append(
                    {
                        "from": nodes[i],
                        "to": nodes[j],
                        "dist": round(rng.uniform(0, 100), 2),
                        "type": rng.choice([t.value for t in EdgeType]),
                        "barrierFreeBlocked": rng.random() < 0.15,
                    }
                )
    return _single_floor(nodes, edges)


@pytest.mark.parametrize("seed", range(20))
@pytest.mark.parametrize("accessible", [False, True])
def test_dijkstra_matches_brute_force(seed: int, accessible: bool) -> None:
    """Returned route cost must equal the exhaustive minimum on small graphs."""
    rng = random.Random(seed)
    graph = _random_graph(rng, rng.randint(4, 9))
    ids = sorted(graph.nodes)
    start, goal = rng.sample(ids, 2)

    expected = _brute_force_cost(graph, start, goal, accessible)
    path = plan(graph, start, goal, accessible=accessible)

    if math.isinf(expected):
        assert path == []
    else:
        assert path[0] == start
        assert path[-1] == goal
        assert path_cost(graph, path, accessible=accessible) == pytest.approx(expected)
