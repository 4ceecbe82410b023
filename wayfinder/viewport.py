"""Camera transform control for presenting venue maps and routes.

Screen mapping (C = canvas centre, R = rotation matrix):

    screen = C + R(rotation) @ (k * world + t - C)

so translation lives in the unrotated frame and a fitted box centre stays at
the canvas centre whatever the rotation. Animation is not scheduled here:
callers step it with `tick(t)` from their own frame driver.
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Callable, Sequence

import numpy as np

from wayfinder.config import ViewportConfig
from wayfinder.models import FloorVisual, Node, Transform

logger = logging.getLogger(__name__)


class ViewState(str, Enum):
    """Interaction state of the viewport."""

    IDLE = "idle"
    DRAGGING = "dragging"
    ANIMATING = "animating"


def rotation_matrix(angle_deg: float) -> np.ndarray:
    theta = math.radians(angle_deg)
    c, s = math.cos(theta), math.sin(theta)
    return np.array([[c, -s], [s, c]], dtype=float)


def shortest_rotation(current_deg: float, target_deg: float) -> float:
    """Return the target angle reached from current by the shortest turn.

    The result is equivalent to target_deg modulo 360 and lies within 180
    degrees of current_deg.
    """
    delta = math.fmod(target_deg - current_deg, 360.0)
    if delta > 180.0:
        delta -= 360.0
    elif delta < -180.0:
        delta += 360.0
    return current_deg + delta


def pan_delta(dx: float, dy: float, rotation_deg: float) -> tuple[float, float]:
    """Convert a screen-space drag into a translation delta.

    Solves R(rotation) @ (dtx, dty) = (dx, dy).
    """
    dtx, dty = rotation_matrix(rotation_deg).T @ np.array([dx, dy], dtype=float)
    return float(dtx), float(dty)


def heading_for_segment(a: Node, b: Node, offset_deg: float = 15.0) -> float:
    """Rotation that points the travel direction a -> b up on screen."""
    angle = math.atan2(b.world_y - a.world_y, b.world_x - a.world_x)
    return -90.0 - math.degrees(angle) + offset_deg


def ease_cubic_out(t: float) -> float:
    return 1.0 - (1.0 - t) ** 3


def interpolate(
    start: Transform,
    end: Transform,
    t: float,
    ease: Callable[[float], float] | None = None,
) -> Transform:
    """Blend two transforms; t is clamped to [0, 1].

    Rotation is blended linearly between the stored angles; targets built by
    the controller are already on the shortest turn from the start.
    """
    t = min(1.0, max(0.0, float(t)))
    if ease is not None:
        t = ease(t)
    return Transform(
        k=start.k + (end.k - start.k) * t,
        x=start.x + (end.x - start.x) * t,
        y=start.y + (end.y - start.y) * t,
        rotation=start.rotation + (end.rotation - start.rotation) * t,
    )


def _is_finite(transform: Transform) -> bool:
    return all(math.isfinite(v) for v in (transform.k, transform.x, transform.y, transform.rotation))


class ViewportController:
    """Owns the camera transform and computes pan/zoom/fit targets."""

    def __init__(self, config: ViewportConfig | None = None, transform: Transform | None = None) -> None:
        self.config = config or ViewportConfig()
        self.canvas_width = float(self.config.canvas_width)
        self.canvas_height = float(self.config.canvas_height)
        self.transform = transform.copy() if transform is not None else Transform()
        self.transform.k = self.clamp_scale(self.transform.k)
        self.state = ViewState.IDLE
        self._anim_start: Transform | None = None
        self._anim_target: Transform | None = None

    # ------------------------------------------------------------------ #
    # Geometry helpers
    # ------------------------------------------------------------------ #

    @property
    def center(self) -> np.ndarray:
        return np.array([self.canvas_width / 2, self.canvas_height / 2], dtype=float)

    @property
    def target(self) -> Transform | None:
        """In-flight animation target, if any."""
        return self._anim_target

    def resize(self, width: float, height: float) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("canvas size must be > 0")
        self.canvas_width = float(width)
        self.canvas_height = float(height)

    def clamp_scale(self, k: float) -> float:
        return min(self.config.k_max, max(self.config.k_min, k))

    def world_to_screen(self, x: float, y: float) -> tuple[float, float]:
        tr = self.transform
        local = tr.k * np.array([x, y], dtype=float) + np.array([tr.x, tr.y]) - self.center
        sx, sy = rotation_matrix(tr.rotation) @ local + self.center
        return float(sx), float(sy)

    def screen_to_world(self, sx: float, sy: float) -> tuple[float, float]:
        tr = self.transform
        local = rotation_matrix(tr.rotation).T @ (np.array([sx, sy], dtype=float) - self.center)
        wx, wy = (local + self.center - np.array([tr.x, tr.y])) / tr.k
        return float(wx), float(wy)

    def _centered_on(self, wx: float, wy: float, k: float, rotation: float) -> Transform:
        return Transform(
            k=k,
            x=self.canvas_width / 2 - wx * k,
            y=self.canvas_height / 2 - wy * k,
            rotation=rotation,
        )

    # ------------------------------------------------------------------ #
    # State machine
    # ------------------------------------------------------------------ #

    def pointer_down(self) -> None:
        """Start a drag; an in-flight animation is abandoned where it is."""
        self._clear_animation()
        self.state = ViewState.DRAGGING

    def pointer_up(self) -> None:
        if self.state == ViewState.DRAGGING:
            self.state = ViewState.IDLE

    def _clear_animation(self) -> None:
        self._anim_start = None
        self._anim_target = None
        if self.state == ViewState.ANIMATING:
            self.state = ViewState.IDLE

    def animate_to(self, target: Transform) -> Transform | None:
        """Start (or replace) the animation towards target.

        Returns the accepted target, or None if it has non-finite values.
        """
        if not _is_finite(target):
            logger.warning("Ignoring non-finite transform target: %s", target)
            return None
        accepted = Transform(k=self.clamp_scale(target.k), x=target.x, y=target.y, rotation=target.rotation)
        self._anim_start = self.transform.copy()
        self._anim_target = accepted
        self.state = ViewState.ANIMATING
        return accepted

    def tick(self, t: float, ease: Callable[[float], float] | None = None) -> Transform:
        """Advance the animation to progress t in [0, 1] and return the transform."""
        if self.state != ViewState.ANIMATING or self._anim_start is None or self._anim_target is None:
            return self.transform

        if t >= 1.0:
            self.transform = self._anim_target.copy()
            self._clear_animation()
            return self.transform

        frame = interpolate(self._anim_start, self._anim_target, t, ease)
        frame.k = self.clamp_scale(frame.k)
        self.transform = frame
        return self.transform

    def finish(self) -> Transform:
        """Jump to the end of any in-flight animation."""
        return self.tick(1.0)

    # ------------------------------------------------------------------ #
    # Operations
    # ------------------------------------------------------------------ #

    def pan_by(self, dx: float, dy: float) -> Transform:
        """Translate by a screen-space drag delta, honouring current rotation."""
        if self.state == ViewState.ANIMATING:
            self._clear_animation()
        dtx, dty = pan_delta(dx, dy, self.transform.rotation)
        self.transform = Transform(
            k=self.clamp_scale(self.transform.k),
            x=self.transform.x + dtx,
            y=self.transform.y + dty,
            rotation=self.transform.rotation,
        )
        return self.transform

    def zoom_by(self, factor: float) -> Transform | None:
        """Scale about the canvas centre."""
        if not math.isfinite(factor) or factor <= 0:
            logger.warning("Ignoring invalid zoom factor: %s", factor)
            return None
        tr = self.transform
        k = self.clamp_scale(tr.k * factor)
        cx, cy = self.center
        target = Transform(
            k=k,
            x=cx - k * (cx - tr.x) / tr.k,
            y=cy - k * (cy - tr.y) / tr.k,
            rotation=tr.rotation,
        )
        return self.animate_to(target)

    def zoom_in(self) -> Transform | None:
        return self.zoom_by(self.config.zoom_in_factor)

    def zoom_out(self) -> Transform | None:
        return self.zoom_by(self.config.zoom_out_factor)

    def fit_transform(
        self,
        nodes: Sequence[Node],
        scale_min: float,
        scale_max: float,
        rotation: float | None = None,
    ) -> Transform | None:
        """Compute the transform framing the nodes' world bounding box.

        Returns None for an empty node list or non-finite results.
        """
        if not nodes:
            return None

        coords = np.array([[n.world_x, n.world_y] for n in nodes], dtype=float)
        lo = coords.min(axis=0)
        hi = coords.max(axis=0)
        padding = self.config.padding
        extent = hi - lo + 2 * padding
        extent = np.where(extent > self.config.min_extent, extent, self.config.min_extent)
        center = (lo + hi) / 2

        k = min(self.canvas_width / extent[0], self.canvas_height / extent[1])
        k = self.clamp_scale(min(scale_max, max(scale_min, k)))

        target = self._centered_on(
            float(center[0]),
            float(center[1]),
            float(k),
            self.transform.rotation if rotation is None else rotation,
        )
        if not _is_finite(target):
            logger.warning("Fit aborted, non-finite transform for %d nodes", len(nodes))
            return None
        return target

    def fit_to_bounds(self, nodes: Sequence[Node]) -> Transform | None:
        """Animate to frame the given nodes; rotation is kept."""
        target = self.fit_transform(nodes, self.config.bounds_scale_min, self.config.bounds_scale_max)
        if target is None:
            return None
        return self.animate_to(target)

    def fit_to_path(self, nodes: Sequence[Node]) -> Transform | None:
        """Animate to frame a route, turning its first leg to point up."""
        if not nodes:
            return None
        if self.config.auto_heading and len(nodes) >= 2:
            heading = heading_for_segment(nodes[0], nodes[1], self.config.heading_offset_deg)
        else:
            heading = 0.0
        rotation = shortest_rotation(self.transform.rotation, heading)

        target = self.fit_transform(
            nodes,
            self.config.path_scale_min,
            self.config.path_scale_max,
            rotation=rotation,
        )
        if target is None:
            return None
        return self.animate_to(target)

    def focus_node(self, node: Node, scale: float | None = None) -> Transform | None:
        """Centre a node at the given zoom level."""
        k = self.clamp_scale(self.config.focus_scale if scale is None else scale)
        return self.animate_to(self._centered_on(node.world_x, node.world_y, k, self.transform.rotation))

    def pan_to_node(self, node: Node) -> Transform | None:
        """Centre a node, zooming in only if the view is too far out to read."""
        k = self.transform.k
        if k < 0.5:
            k = 0.8
        return self.animate_to(self._centered_on(node.world_x, node.world_y, k, self.transform.rotation))

    def focus_floor(self, visual: FloorVisual, floor_width: float) -> Transform | None:
        """Centre a whole floor at the configured overview scale."""
        center_x = floor_width * visual.scale / 2
        center_y = visual.y_offset + visual.height / 2
        k = self.clamp_scale(self.config.floor_focus_scale)
        return self.animate_to(self._centered_on(center_x, center_y, k, self.transform.rotation))

    def fit_to_screen(self, image_width: float, image_height: float) -> Transform | None:
        """Fit a whole floor image into the canvas with a 5% margin."""
        if image_width <= 0 or image_height <= 0:
            return None
        k = self.clamp_scale(min(self.canvas_width / image_width, self.canvas_height / image_height) * 0.95)
        target = Transform(
            k=k,
            x=(self.canvas_width - image_width * k) / 2,
            y=(self.canvas_height - image_height * k) / 2,
            rotation=shortest_rotation(self.transform.rotation, 0.0),
        )
        return self.animate_to(target)

    def set_rotation(self, angle_deg: float) -> Transform | None:
        """Turn to an absolute angle along the shortest direction."""
        tr = self.transform
        rotation = shortest_rotation(tr.rotation, angle_deg)
        return self.animate_to(Transform(k=tr.k, x=tr.x, y=tr.y, rotation=rotation))
