# plotlayout/core/pan.py
"""
Pan handling: centroid translation per batch, release-velocity estimation and
the fling launched from it.
"""

from __future__ import annotations

from collections import deque
from typing import Callable

import numpy as np

from plotlayout.core.config import (
    VELOCITY_TRACKER_ASSUME_STOPPED_MS,
    VELOCITY_TRACKER_HORIZON_MS,
    VELOCITY_TRACKER_MIN_SAMPLES,
)
from plotlayout.core.fling import CancellationToken, PanFlingBehavior
from plotlayout.core.geometry import Point
from plotlayout.core.gestures import (
    ZERO,
    GestureConfig,
    PointerEvent,
    PointerInputChange,
    apply_pan_locks,
    calculate_pan,
)

Size = tuple[int, int]
OnPanChange = Callable[[Size, Point], bool]


class VelocityTracker:
    """
    Least-squares velocity (px/s) of one pointer from its recent positions.
    Samples older than the horizon, or separated from the newer ones by a
    pause, are ignored.
    """

    def __init__(self, horizon_ms: float = VELOCITY_TRACKER_HORIZON_MS) -> None:
        self.horizon_ms = horizon_ms
        self._samples: deque[tuple[float, float, float]] = deque(maxlen=20)

    def add_position(self, uptime_ms: float, position: Point) -> None:
        self._samples.append((float(uptime_ms), float(position[0]), float(position[1])))

    def add_pointer_input_change(self, change: PointerInputChange) -> None:
        self.add_position(change.uptime_ms, change.position)

    def reset(self) -> None:
        self._samples.clear()

    def _recent(self) -> np.ndarray:
        if not self._samples:
            return np.empty((0, 3))
        newest = self._samples[-1][0]
        kept = []
        prev_t = newest
        for s in reversed(self._samples):
            if newest - s[0] > self.horizon_ms or prev_t - s[0] > VELOCITY_TRACKER_ASSUME_STOPPED_MS:
                break
            kept.append(s)
            prev_t = s[0]
        return np.asarray(kept[::-1], dtype=float)

    def calculate_velocity(self) -> Point:
        data = self._recent()
        if len(data) < 2:
            return ZERO
        t = data[:, 0] - data[-1, 0]
        if np.ptp(t) == 0:
            return ZERO
        degree = 2 if len(data) >= VELOCITY_TRACKER_MIN_SAMPLES else 1
        # derivative at the newest sample (t = 0) is the linear coefficient
        vx = np.polyfit(t, data[:, 1], degree)[-2]
        vy = np.polyfit(t, data[:, 2], degree)[-2]
        return (float(vx) * 1000.0, float(vy) * 1000.0)


class PanHandler:
    def handle(
        self,
        size: Size,
        event: PointerEvent,
        config: GestureConfig,
        velocity_tracker: VelocityTracker,
        on_pan_change: OnPanChange,
    ) -> bool:
        """Report the batch's pan if allowed. Returns the callback's consumed flag."""
        pan = apply_pan_locks(calculate_pan(event), config.pan_x_enabled, config.pan_y_enabled)
        if not config.pan_enabled or pan == ZERO:
            return False

        # velocity is only tracked for single-pointer pans
        if len(event.changes) == 1:
            velocity_tracker.add_pointer_input_change(event.changes[0])
        return bool(on_pan_change(size, pan))


class PanFlingHandler:
    def __init__(self, behavior: PanFlingBehavior | None = None) -> None:
        self.behavior = behavior or PanFlingBehavior()

    async def perform(
        self,
        size: Size,
        velocity_tracker: VelocityTracker,
        on_pan_change: OnPanChange,
        token: CancellationToken | None = None,
    ) -> None:
        velocity = velocity_tracker.calculate_velocity()
        await self.behavior.perform_fling(velocity, lambda pan: on_pan_change(size, pan), token)
