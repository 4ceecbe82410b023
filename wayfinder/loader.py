"""Load per-floor node/edge JSON data and display order priorities.

Floor JSON schema:
    {
      "nodes": [{"id": "101", "x": 120, "y": 340, "type": "room", "name": "..."}],
      "edges": [{"from": "101", "to": "j1", "dist": 35, "barrierFreeBlocked": false}]
    }
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable

from wayfinder.config import OrderConfig
from wayfinder.models import FloorConfig, FloorRecords

logger = logging.getLogger(__name__)


def _read_json(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Floor data not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Failed to parse {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object")
    return data


def _record_list(data: dict[str, Any], key: str, path: Path) -> list[dict]:
    records = data.get(key, [])
    if not isinstance(records, list):
        raise ValueError(f"{path}: '{key}' must be a JSON list")
    return [r for r in records if isinstance(r, dict)]


def load_floor_records(floor: FloorConfig, base_dir: str | Path = ".") -> FloorRecords:
    """Read one floor's nodes and edges.

    Args:
        floor: Floor configuration naming the node and edge files.
        base_dir: Directory that relative paths resolve against.

    Returns:
        FloorRecords tagged with the floor id.

    Raises:
        FileNotFoundError: If a data file is missing.
        ValueError: If a data file cannot be parsed.
    """
    if not floor.nodes_path:
        raise ValueError(f"Floor {floor.floor_id} has no nodes_path")

    base = Path(base_dir)
    nodes_file = base / floor.nodes_path
    nodes_data = _read_json(nodes_file)

    edges_file = base / floor.edges_path if floor.edges_path else nodes_file
    edges_data = nodes_data if edges_file == nodes_file else _read_json(edges_file)

    records = FloorRecords(
        floor_id=floor.floor_id,
        nodes=_record_list(nodes_data, "nodes", nodes_file),
        edges=_record_list(edges_data, "edges", edges_file),
    )
    logger.info("Floor %s: loaded %d nodes, %d edges", floor.floor_id, len(records.nodes), len(records.edges))
    return records


def load_venue(floors: Iterable[FloorConfig], base_dir: str | Path = ".") -> list[FloorRecords]:
    """Load every configured floor, skipping floors whose data cannot be read."""
    loaded: list[FloorRecords] = []
    for floor in floors:
        try:
            loaded.append(load_floor_records(floor, base_dir))
        except (FileNotFoundError, ValueError) as exc:
            logger.error("Failed to load floor %s: %s", floor.floor_id, exc)
    return loaded


def load_order(path: str | Path | None, default: OrderConfig | None = None) -> OrderConfig:
    """Load display priorities, falling back to the embedded default."""
    fallback = default or OrderConfig()
    if path is None:
        return fallback
    try:
        data = _read_json(Path(path))
        return OrderConfig(
            default=int(data.get("default", fallback.default)),
            items={str(k): int(v) for k, v in (data.get("items") or {}).items()},
        )
    except (FileNotFoundError, ValueError, TypeError) as exc:
        logger.warning("Using embedded default order (%s)", exc)
        return fallback
