# plotlayout/core/zoom.py
"""
Zoom handlers: turn one pointer batch into a ZoomFactor and report it.

StickyAxisZoomHandler zooms one axis at a time (the axis fixed when the gesture
started). LockedRatioZoomHandler zooms both axes by the same factor.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable

from plotlayout.core.config import MIN_TOUCHES_DISTANCE_PX
from plotlayout.core.geometry import Point
from plotlayout.core.gestures import (
    GestureConfig,
    PointerEvent,
    ZoomFactor,
    apply_zoom_locks,
    calculate_centroid,
    calculate_zoom,
    calculate_zoom_xy,
    first_two_touches,
)


Size = tuple[int, int]
OnZoomChange = Callable[[Size, Point, ZoomFactor], None]


class ZoomHandler(ABC):
    @abstractmethod
    def handle(
        self,
        size: Size,
        event: PointerEvent,
        is_horizontal_zoom: bool,
        config: GestureConfig,
        on_zoom_change: OnZoomChange,
    ) -> bool:
        """
        Report a zoom for this batch if one is allowed. size is the pointer
        input region; the centroid passed to on_zoom_change is in that region's
        coordinates. Returns True when a zoom was reported.
        """


def reset_orthogonal_axis(zoom: ZoomFactor, is_horizontal_zoom: bool) -> ZoomFactor:
    """Keep only the zoom along the locked axis."""
    return ZoomFactor(
        zoom.x if is_horizontal_zoom else ZoomFactor.NEUTRAL_POINT,
        zoom.y if not is_horizontal_zoom else ZoomFactor.NEUTRAL_POINT,
    )


def touches_far_enough(event: PointerEvent, min_distance: float, is_horizontal_zoom: bool) -> bool:
    """Two tracked touches further apart than min_distance along the locked axis."""
    touches = first_two_touches(event)
    if touches is None:
        return False
    (x1, y1), (x2, y2) = touches
    gap = abs(x1 - x2) if is_horizontal_zoom else abs(y1 - y2)
    return gap > min_distance


class StickyAxisZoomHandler(ZoomHandler):
    def __init__(self, min_touches_distance: float = MIN_TOUCHES_DISTANCE_PX) -> None:
        self.min_touches_distance = min_touches_distance

    def handle(
        self,
        size: Size,
        event: PointerEvent,
        is_horizontal_zoom: bool,
        config: GestureConfig,
        on_zoom_change: OnZoomChange,
    ) -> bool:
        zoom = apply_zoom_locks(calculate_zoom_xy(event), config.zoom_x_enabled, config.zoom_y_enabled)
        zoom = reset_orthogonal_axis(zoom, is_horizontal_zoom)

        allowed = (
            config.zoom_enabled
            and zoom != ZoomFactor.NEUTRAL
            and touches_far_enough(event, self.min_touches_distance, is_horizontal_zoom)
        )
        if not allowed:
            return False

        centroid = calculate_centroid(event, use_current=False)
        if centroid is None:
            return False
        on_zoom_change(size, centroid, zoom)
        return True


class LockedRatioZoomHandler(ZoomHandler):
    def handle(
        self,
        size: Size,
        event: PointerEvent,
        is_horizontal_zoom: bool,
        config: GestureConfig,
        on_zoom_change: OnZoomChange,
    ) -> bool:
        # a locked ratio needs both axes
        if config.zoom_x_enabled and config.zoom_y_enabled:
            change = calculate_zoom(event)
        else:
            change = ZoomFactor.NEUTRAL_POINT
        zoom = ZoomFactor(change, change)

        if not config.zoom_enabled or zoom == ZoomFactor.NEUTRAL:
            return False

        centroid = calculate_centroid(event, use_current=False)
        if centroid is None:
            return False
        on_zoom_change(size, centroid, zoom)
        return True
