# plotlayout/core/gestures.py
"""
Pointer model, gesture configuration, zoom factor value type and the
centroid/pan/zoom helpers shared by the zoom and pan handlers.

Only pointers that were pressed in both the previous and the current batch
contribute to centroids, so a finger landing or lifting never produces a jump.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

from plotlayout.core.error_codes import ZOOM_FACTOR_UNSPECIFIED, require
from plotlayout.core.geometry import Point

ZERO: Point = (0.0, 0.0)


@dataclass(frozen=True)
class GestureConfig:
    """
    Pan/zoom enablement per axis. Consumption flags let an embedding host keep
    receiving pointer changes (native scroll, browser zoom) while this handler
    still reports pan callbacks.
    """
    pan_x_enabled: bool = False
    pan_y_enabled: bool = False
    pan_x_consumption_enabled: bool = True
    pan_y_consumption_enabled: bool = True
    zoom_x_enabled: bool = False
    zoom_y_enabled: bool = False
    independent_zoom_enabled: bool = False
    pan_fling_animation_enabled: bool = True

    @property
    def pan_enabled(self) -> bool:
        return self.pan_x_enabled or self.pan_y_enabled

    @property
    def zoom_enabled(self) -> bool:
        return self.zoom_x_enabled or self.zoom_y_enabled

    @property
    def gestures_enabled(self) -> bool:
        return self.pan_enabled or self.zoom_enabled


class ZoomFactor:
    """Multiplicative scale per axis. UNSPECIFIED raises on access."""

    NEUTRAL_POINT: float = 1.0
    NEUTRAL: ZoomFactor
    UNSPECIFIED: ZoomFactor

    __slots__ = ("_x", "_y")

    def __init__(self, x: float, y: float) -> None:
        self._x = float(x)
        self._y = float(y)

    def _check(self) -> None:
        require(not (math.isnan(self._x) and math.isnan(self._y)), ZOOM_FACTOR_UNSPECIFIED)

    @property
    def is_specified(self) -> bool:
        return not (math.isnan(self._x) and math.isnan(self._y))

    @property
    def x(self) -> float:
        self._check()
        return self._x

    @property
    def y(self) -> float:
        self._check()
        return self._y

    def copy(self, x: float | None = None, y: float | None = None) -> ZoomFactor:
        return ZoomFactor(self.x if x is None else x, self.y if y is None else y)

    def __iter__(self):
        yield self.x
        yield self.y

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ZoomFactor):
            return NotImplemented
        if not self.is_specified or not other.is_specified:
            return self.is_specified == other.is_specified
        return self._x == other._x and self._y == other._y

    def __hash__(self) -> int:
        return hash((self._x, self._y)) if self.is_specified else hash("unspecified")

    def __repr__(self) -> str:
        if not self.is_specified:
            return "ZoomFactor.UNSPECIFIED"
        return f"ZoomFactor(x={self._x}, y={self._y})"


ZoomFactor.NEUTRAL = ZoomFactor(ZoomFactor.NEUTRAL_POINT, ZoomFactor.NEUTRAL_POINT)
ZoomFactor.UNSPECIFIED = ZoomFactor(math.nan, math.nan)


@dataclass
class PointerInputChange:
    """One pointer's state in a batch. consumed is shared with other handlers."""
    id: int
    position: Point
    previous_position: Point
    pressed: bool = True
    previous_pressed: bool = True
    uptime_ms: float = 0.0
    consumed: bool = False

    def consume(self) -> None:
        self.consumed = True

    def position_changed(self) -> bool:
        return self.position != self.previous_position

    @property
    def is_tracked(self) -> bool:
        return self.pressed and self.previous_pressed


@dataclass
class PointerEvent:
    changes: list[PointerInputChange] = field(default_factory=list)

    @property
    def any_consumed(self) -> bool:
        return any(c.consumed for c in self.changes)

    @property
    def any_pressed(self) -> bool:
        return any(c.pressed for c in self.changes)


def _tracked_positions(event: PointerEvent, use_current: bool) -> np.ndarray:
    pts = [c.position if use_current else c.previous_position for c in event.changes if c.is_tracked]
    return np.asarray(pts, dtype=float).reshape(-1, 2)


def calculate_centroid(event: PointerEvent, use_current: bool = True) -> Point | None:
    """Mean position of tracked pointers, or None when there are none."""
    pts = _tracked_positions(event, use_current)
    if len(pts) == 0:
        return None
    c = pts.mean(axis=0)
    return (float(c[0]), float(c[1]))


def calculate_pan(event: PointerEvent) -> Point:
    current = calculate_centroid(event, use_current=True)
    previous = calculate_centroid(event, use_current=False)
    if current is None or previous is None:
        return ZERO
    return (current[0] - previous[0], current[1] - previous[1])


def calculate_centroid_size(event: PointerEvent, use_current: bool = True) -> float:
    """Mean distance of tracked pointers from their centroid."""
    pts = _tracked_positions(event, use_current)
    if len(pts) == 0:
        return 0.0
    return float(np.linalg.norm(pts - pts.mean(axis=0), axis=1).mean())


def calculate_centroid_size_xy(event: PointerEvent, use_current: bool = True) -> Point:
    """Mean per-axis distance of tracked pointers from their centroid."""
    pts = _tracked_positions(event, use_current)
    if len(pts) == 0:
        return ZERO
    d = np.abs(pts - pts.mean(axis=0)).mean(axis=0)
    return (float(d[0]), float(d[1]))


def calculate_zoom(event: PointerEvent) -> float:
    """Combined zoom: ratio of current to previous centroid size (1 when undefined)."""
    current = calculate_centroid_size(event, use_current=True)
    previous = calculate_centroid_size(event, use_current=False)
    if previous == 0.0:
        return ZoomFactor.NEUTRAL_POINT
    return current / previous


def calculate_zoom_xy(event: PointerEvent) -> ZoomFactor:
    """Independent per-axis zoom ratios; NEUTRAL when either spread is zero."""
    current = calculate_centroid_size_xy(event, use_current=True)
    previous = calculate_centroid_size_xy(event, use_current=False)
    if current == ZERO or previous == ZERO:
        return ZoomFactor.NEUTRAL
    x = current[0] / previous[0] if previous[0] != 0 else ZoomFactor.NEUTRAL_POINT
    y = current[1] / previous[1] if previous[1] != 0 else ZoomFactor.NEUTRAL_POINT
    return ZoomFactor(x, y)


def apply_pan_locks(pan: Point, pan_x_enabled: bool, pan_y_enabled: bool) -> Point:
    return (pan[0] if pan_x_enabled else 0.0, pan[1] if pan_y_enabled else 0.0)


def apply_zoom_locks(zoom: ZoomFactor, zoom_x_enabled: bool, zoom_y_enabled: bool) -> ZoomFactor:
    return ZoomFactor(
        zoom.x if zoom_x_enabled else ZoomFactor.NEUTRAL_POINT,
        zoom.y if zoom_y_enabled else ZoomFactor.NEUTRAL_POINT,
    )


def first_two_touches(event: PointerEvent) -> tuple[Point, Point] | None:
    tracked = [c.position for c in event.changes if c.is_tracked]
    if len(tracked) < 2:
        return None
    return tracked[0], tracked[1]


def is_horizontal_zoom(event: PointerEvent) -> bool | None:
    """
    True when the first two tracked touches are further apart in x than in y,
    False otherwise, None with fewer than two tracked touches.
    """
    touches = first_two_touches(event)
    if touches is None:
        return None
    (x1, y1), (x2, y2) = touches
    return abs(x1 - x2) > abs(y1 - y2)


def consume_changed_positions(event: PointerEvent, config: GestureConfig | None = None) -> None:
    """
    Mark moved pointers consumed. With a config, a change is consumed only if
    it moved along an axis whose consumption is enabled.
    """
    for change in event.changes:
        if not change.position_changed():
            continue
        if config is None:
            change.consume()
            continue
        dx = change.position[0] - change.previous_position[0]
        dy = change.position[1] - change.previous_position[1]
        if (dx != 0 and config.pan_x_consumption_enabled) or (dy != 0 and config.pan_y_consumption_enabled):
            change.consume()


def calculate_zoom_motion(zoom: float, size: float) -> float:
    return abs(ZoomFactor.NEUTRAL_POINT - zoom) * size


def get_max_zoom_deviation(zoom_x: float, zoom_y: float) -> float:
    """The component of (zoom_x, zoom_y) further from neutral; ties go to y."""
    dx = abs(zoom_x - ZoomFactor.NEUTRAL_POINT)
    dy = abs(zoom_y - ZoomFactor.NEUTRAL_POINT)
    return zoom_x if dx > dy else zoom_y
