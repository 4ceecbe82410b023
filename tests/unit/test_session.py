"""Unit tests for wayfinder.session."""

from __future__ import annotations

import logging

import pytest

from wayfinder.config import Config, GraphConfig
from wayfinder.models import FloorRecords, Transform
from wayfinder.session import NavigationSession
from wayfinder.viewport import ViewState


@pytest.fixture()
def session(venue_records) -> NavigationSession:
    sess = NavigationSession()
    sess.load(venue_records)
    return sess


def test_load_builds_graph_and_default_layout(session) -> None:
    assert len(session.graph.nodes) == 12
    assert session.path == []
    assert set(session.visuals) == {1, 2, 3, 4}
    assert all(v.scale == 1.0 for v in session.visuals.values())
    assert session.current_floor() == 2


def test_route_frames_path_in_viewport(session) -> None:
    path = session.route("1_e", "2_r201")

    assert path == ["1_e", "1_j1", "1_s", "2_s", "2_r201"]
    assert session.target == "2_r201"
    assert session.viewport.state == ViewState.ANIMATING
    assert session.viewport.target.k <= session.config.viewport.path_scale_max


def test_multi_floor_route_squeezes_floors_between(session) -> None:
    session.route("1_e", "NEAREST_FEMALE")

    assert session.path[-1] == "3_t3f"
    assert session.visuals[2].scale == pytest.approx(0.6)
    assert session.visuals[3].scale == 1.0


def test_toggling_accessibility_replans_active_route(session) -> None:
    session.route("1_e", "2_r201")
    path = session.set_accessible(True)

    assert session.accessible is True
    assert path == ["1_e", "1_j1", "1_ev", "2_ev", "2_r201"]
    assert session.path == path


def test_toggling_accessibility_without_route(session) -> None:
    assert session.set_accessible(True) == []
    assert session.accessible is True


def test_clear_route_restores_layout(session) -> None:
    session.route("1_e", "NEAREST_FEMALE")
    session.clear_route()

    assert session.path == []
    assert session.target is None
    assert session.visuals[2].scale == 1.0


def test_failed_route_clears_target(session) -> None:
    assert session.route("9_nowhere", "2_r201") == []
    assert session.target is None


def test_focus_floor_and_current_floor(session) -> None:
    assert session.focus_floor(2) is True
    session.viewport.finish()

    assert session.current_floor() == 2
    assert session.focus_floor(9) is False


def test_reload_resets_route(session, venue_records) -> None:
    session.route("1_e", "2_r201")
    session.load(venue_records[:1])

    assert session.path == []
    assert session.get_node("2_r201") is None
    assert session.get_node("1_e") is not None


def test_load_shows_configured_default_floor(venue_records) -> None:
    sess = NavigationSession(Config(default_floor_id=3))
    sess.load(venue_records)

    assert sess.viewport.state == ViewState.IDLE
    assert sess.current_floor() == 3


def test_missing_default_floor_leaves_view_unchanged(venue_records, caplog) -> None:
    sess = NavigationSession(Config(default_floor_id=9))
    with caplog.at_level(logging.WARNING, logger="wayfinder.session"):
        sess.load(venue_records)

    assert sess.viewport.transform == Transform()
    assert "Default floor 9" in caplog.text


def test_configured_default_edge_dist_is_used() -> None:
    sess = NavigationSession(Config(graph=GraphConfig(default_edge_dist=7.0)))
    floor = FloorRecords(
        floor_id=1,
        nodes=[{"id": "a", "x": 0, "y": 0}, {"id": "b", "x": 1, "y": 0}],
        edges=[{"from": "a", "to": "b"}, {"from": "b", "to": "a", "dist": 2}],
    )
    sess.load([floor])

    assert [edge.dist for edge in sess.graph.edges] == [7.0, 2.0]


def test_mode_switch_without_replan_keeps_route(session) -> None:
    session.route("1_e", "2_r201")
    path = session.set_accessible(True, replan=False)

    assert session.accessible is True
    assert path == ["1_e", "1_j1", "1_s", "2_s", "2_r201"]
