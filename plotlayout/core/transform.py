# plotlayout/core/transform.py
"""
Transform gesture detection: one GestureSession per gesture (first pointer
down to last pointer up) feeding zoom and pan handlers, and an async driver
that runs sessions over a pointer event stream and launches a fling on
release.

Per batch, zoom is evaluated before pan. A batch in which any change was
already consumed by another handler is skipped; the gesture itself goes on.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import AsyncIterable

from plotlayout.core.config import MIN_TOUCHES_DISTANCE_PX
from plotlayout.core.fling import CancellationToken
from plotlayout.core.gestures import (
    GestureConfig,
    PointerEvent,
    consume_changed_positions,
    is_horizontal_zoom,
)
from plotlayout.core.pan import OnPanChange, PanFlingHandler, PanHandler, Size, VelocityTracker
from plotlayout.core.zoom import LockedRatioZoomHandler, OnZoomChange, StickyAxisZoomHandler, ZoomHandler

logger = logging.getLogger(__name__)


class GestureState(Enum):
    IDLE = "idle"
    TRACKING = "tracking"
    ENDED = "ended"


class GestureSession:
    """
    State of a single gesture. The zoom axis is decided once, from the first
    batch with two tracked touches, and kept until the gesture ends.
    """

    def __init__(
        self,
        size: Size,
        config: GestureConfig,
        zoom_handler: ZoomHandler,
        pan_handler: PanHandler,
        on_zoom_change: OnZoomChange,
        on_pan_change: OnPanChange,
    ) -> None:
        self.size = size
        self.config = config
        self.zoom_handler = zoom_handler
        self.pan_handler = pan_handler
        self.on_zoom_change = on_zoom_change
        self.on_pan_change = on_pan_change
        self.state = GestureState.IDLE
        self.is_horizontal_zoom: bool | None = None
        self.velocity_tracker = VelocityTracker()
        self.skipped_frames = 0

    @property
    def direction_locked(self) -> bool:
        return self.is_horizontal_zoom is not None

    def process(self, event: PointerEvent) -> GestureState:
        """Feed one batch; returns the state after it."""
        if self.state is GestureState.ENDED:
            return self.state

        if self.state is GestureState.IDLE:
            # the first down only starts tracking
            if event.any_pressed:
                self.state = GestureState.TRACKING
                logger.debug("Gesture started")
            return self.state

        if event.any_consumed:
            self.skipped_frames += 1
        else:
            self._handle_frame(event)

        if not event.any_pressed:
            self.state = GestureState.ENDED
            logger.debug("Gesture ended (horizontal zoom: %s)", self.is_horizontal_zoom)
        return self.state

    def _handle_frame(self, event: PointerEvent) -> None:
        if self.is_horizontal_zoom is None:
            self.is_horizontal_zoom = is_horizontal_zoom(event)
            if self.is_horizontal_zoom is not None:
                logger.debug("Zoom axis locked: %s", "horizontal" if self.is_horizontal_zoom else "vertical")

        zoom_consumed = False
        if self.is_horizontal_zoom is not None:
            zoom_consumed = self.zoom_handler.handle(
                self.size, event, self.is_horizontal_zoom, self.config, self.on_zoom_change
            )
        pan_consumed = self.pan_handler.handle(
            self.size, event, self.config, self.velocity_tracker, self.on_pan_change
        )

        if zoom_consumed or pan_consumed:
            consume_changed_positions(event, self.config)

    @property
    def should_fling(self) -> bool:
        return (
            self.state is GestureState.ENDED
            and self.config.pan_enabled
            and self.config.pan_fling_animation_enabled
        )


class TransformGesturesHandler:
    """
    Runs gesture sessions over a stream of pointer batches. A fling started on
    release is cancelled as soon as the next gesture's first pointer goes down.
    The fling belongs to the detector call that launched it: a detector that
    runs out of events waits for it, one that is cancelled or fails cancels it.
    """

    def __init__(
        self,
        zoom_handler: ZoomHandler,
        pan_handler: PanHandler | None = None,
        pan_fling_handler: PanFlingHandler | None = None,
    ) -> None:
        self.zoom_handler = zoom_handler
        self.pan_handler = pan_handler or PanHandler()
        self.pan_fling_handler = pan_fling_handler or PanFlingHandler()
        self._fling_task: asyncio.Task | None = None
        self._fling_token: CancellationToken | None = None

    @classmethod
    def create(
        cls,
        config: GestureConfig,
        min_touches_distance: float = MIN_TOUCHES_DISTANCE_PX,
        pan_fling_handler: PanFlingHandler | None = None,
    ) -> TransformGesturesHandler:
        """Sticky-axis zoom when independent zoom is enabled, otherwise locked-ratio zoom."""
        if config.independent_zoom_enabled:
            zoom: ZoomHandler = StickyAxisZoomHandler(min_touches_distance)
        else:
            zoom = LockedRatioZoomHandler()
        return cls(zoom, PanHandler(), pan_fling_handler)

    def cancel_fling(self) -> None:
        if self._fling_token is not None:
            self._fling_token.cancel()
            self._fling_token = None

    def new_session(
        self,
        size: Size,
        config: GestureConfig,
        on_zoom_change: OnZoomChange,
        on_pan_change: OnPanChange,
    ) -> GestureSession:
        return GestureSession(size, config, self.zoom_handler, self.pan_handler, on_zoom_change, on_pan_change)

    async def detect_transform_gestures(
        self,
        events: AsyncIterable[PointerEvent],
        size: Size,
        config: GestureConfig,
        on_zoom_change: OnZoomChange,
        on_pan_change: OnPanChange,
    ) -> None:
        session: GestureSession | None = None
        finished = False
        try:
            async for event in events:
                if session is None:
                    if not event.any_pressed:
                        continue
                    self.cancel_fling()
                    session = self.new_session(size, config, on_zoom_change, on_pan_change)

                if session.process(event) is GestureState.ENDED:
                    if session.should_fling:
                        self._launch_fling(session)
                    session = None
            finished = True
        finally:
            task, self._fling_task = self._fling_task, None
            if task is not None:
                if finished:
                    await task
                else:
                    self.cancel_fling()
                    task.cancel()

    def _launch_fling(self, session: GestureSession) -> None:
        token = CancellationToken()
        self._fling_token = token
        self._fling_task = asyncio.get_running_loop().create_task(
            self.pan_fling_handler.perform(session.size, session.velocity_tracker, session.on_pan_change, token)
        )
        self._fling_task.add_done_callback(_log_fling_failure)


def _log_fling_failure(task: asyncio.Task) -> None:
    if task.cancelled():
        logger.debug("Fling task cancelled")
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Fling failed: %s", exc, exc_info=exc)
