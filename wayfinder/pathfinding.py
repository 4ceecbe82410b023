"""Accessibility-aware Dijkstra routing over the global venue graph.

Purpose:
- Compute shortest routes between nodes across floors.
- Resolve "nearest of a kind" destinations (vending machine, restroom).
- Apply per-mode edge cost rules (accessible vs. default routing).

Usage example:
    >>> from wayfinder.pathfinding import plan
    >>> plan(graph, "1_entrance", "NEAREST_VENDING", accessible=True)
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Sequence

from wayfinder.config import RoutingConfig
from wayfinder.graph_builder import Graph
from wayfinder.models import AdjacencyEntry, EdgeType, Node, NodeType
from wayfinder.priority_queue import MinHeap

logger = logging.getLogger(__name__)

Path = list[str]

MALE_KEYWORDS = ("男性", "男子")
FEMALE_KEYWORDS = ("女性", "女子")


@dataclass(frozen=True, slots=True)
class TargetQuery:
    """Destination predicate: nearest node of a type whose name has a keyword."""

    node_type: NodeType
    keywords: tuple[str, ...] = ()

    def matches(self, node: Node) -> bool:
        if node.type != self.node_type:
            return False
        if not self.keywords:
            return True
        return bool(node.name) and any(k in node.name for k in self.keywords)


NEAREST_MALE = TargetQuery(NodeType.TOILET, MALE_KEYWORDS)
NEAREST_FEMALE = TargetQuery(NodeType.TOILET, FEMALE_KEYWORDS)
NEAREST_VENDING = TargetQuery(NodeType.VENDING)

TARGET_ALIASES: dict[str, TargetQuery] = {
    "NEAREST_MALE": NEAREST_MALE,
    "NEAREST_FEMALE": NEAREST_FEMALE,
    "NEAREST_VENDING": NEAREST_VENDING,
}

# (scale, offset) applied to an edge's base dist.
CostRule = tuple[float, float]


@dataclass(frozen=True, slots=True)
class CostRules:
    """Effective-weight table for one routing mode."""

    by_type: dict[EdgeType, CostRule]
    exclude_blocked: bool

    def weight(self, entry: AdjacencyEntry) -> float | None:
        """Return the effective weight of an edge, or None if it is excluded."""
        if self.exclude_blocked and entry.barrier_free_blocked:
            return None
        scale, offset = self.by_type.get(entry.type, (1.0, 0.0))
        return entry.dist * scale + offset


def cost_rules(accessible: bool, config: RoutingConfig | None = None) -> CostRules:
    """Build the cost table for accessible or default routing."""
    config = config or RoutingConfig()
    if accessible:
        return CostRules(
            by_type={
                EdgeType.ELEVATOR: (config.accessible_elevator_factor, 0.0),
                EdgeType.STAIRS: (1.0, config.accessible_stairs_penalty),
            },
            exclude_blocked=True,
        )
    return CostRules(
        by_type={EdgeType.ELEVATOR: (1.0, config.default_elevator_penalty)},
        exclude_blocked=False,
    )


def resolve_targets(graph: Graph, target: str | TargetQuery) -> set[str]:
    """Resolve a node id, alias or query into the set of acceptable end nodes."""
    if isinstance(target, str) and target in TARGET_ALIASES:
        target = TARGET_ALIASES[target]

    if isinstance(target, TargetQuery):
        return {node.id for node in graph.nodes.values() if target.matches(node)}

    if target in graph.nodes:
        return {target}
    logger.warning("End node not found: %s", target)
    return set()


def _reconstruct(prev: dict[str, str], end: str) -> Path:
    path = [end]
    current = end
    while current in prev:
        current = prev[current]
        path.append(current)
    path.reverse()
    return path


def dijkstra(
    graph: Graph,
    start_id: str,
    targets: set[str],
    weight: Callable[[AdjacencyEntry], float | None],
) -> Path:
    """Run Dijkstra from start until any target is settled.

    Args:
        graph: Global graph; its adjacency cache is rebuilt if empty.
        start_id: Existing start node id.
        targets: Node ids that end the search.
        weight: Effective edge weight, None to skip the edge. Must be >= 0.

    Returns:
        Node ids from start to the nearest target. Empty list if unreachable.
    """
    adjacency = graph.ensure_adjacency()

    dist: dict[str, float] = {start_id: 0.0}
    prev: dict[str, str] = {}
    visited: set[str] = set()
    heap: MinHeap[str] = MinHeap()
    heap.push(start_id, 0.0)

    while heap:
        current, current_dist = heap.pop()

        if current in visited:
            continue
        if current_dist > dist.get(current, math.inf):
            continue
        visited.add(current)

        if current in targets:
            return _reconstruct(prev, current)

        for entry in adjacency.get(current, []):
            if entry.to in visited:
                continue
            step = weight(entry)
            if step is None:
                continue

            tentative = current_dist + step
            if tentative < dist.get(entry.to, math.inf):
                dist[entry.to] = tentative
                prev[entry.to] = current
                heap.push(entry.to, tentative)

    return []


def plan(
    graph: Graph,
    start_id: str,
    target: str | TargetQuery,
    accessible: bool = False,
    config: RoutingConfig | None = None,
) -> Path:
    """Compute the cheapest route from a start node to a target.

    Args:
        graph: Global graph.
        start_id: Start node id.
        target: Node id, alias (`NEAREST_MALE`, `NEAREST_FEMALE`,
            `NEAREST_VENDING`) or TargetQuery.
        accessible: Exclude blocked edges, prefer elevators, avoid stairs.
        config: Cost modifiers.

    Returns:
        Ordered node ids, first = start, last = destination. Empty list if
        the start or target cannot be resolved or no route exists.
    """
    if start_id not in graph.nodes:
        logger.warning("Start node not found: %s", start_id)
        return []

    targets = resolve_targets(graph, target)
    if not targets:
        logger.warning("No target nodes found for %s", target)
        return []

    rules = cost_rules(accessible, config)
    path = dijkstra(graph, start_id, targets, rules.weight)
    logger.info("Route %s -> %s (accessible=%s): %d nodes", start_id, target, accessible, len(path))
    return path


def path_cost(
    graph: Graph,
    path: Sequence[str],
    accessible: bool = False,
    config: RoutingConfig | None = None,
) -> float:
    """Total effective weight of a path, using the cheapest parallel edge per hop.

    Returns math.inf if a hop has no usable edge.
    """
    rules = cost_rules(accessible, config)
    adjacency = graph.ensure_adjacency()
    total = 0.0
    for a, b in zip(path, path[1:]):
        weights = [
            w for w in (rules.weight(entry) for entry in adjacency.get(a, []) if entry.to == b) if w is not None
        ]
        if not weights:
            return math.inf
        total += min(weights)
    return total
