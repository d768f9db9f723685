# plotlayout/core/fling.py
"""
Inertial pan fling. An exponential decay turns the release speed into a
cumulative travel distance over time; each frame reports the distance covered
since the previous frame along the release direction.
"""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterator

from plotlayout.core.config import (
    FLING_ABS_VELOCITY_THRESHOLD,
    FLING_FRAME_INTERVAL_MS,
    FLING_FRICTION_MULTIPLIER,
    MIN_FLING_MOVEMENT_THRESHOLD,
)
from plotlayout.core.geometry import Point

logger = logging.getLogger(__name__)

# Base friction of the exponential decay, per second
EXPONENTIAL_DECAY_FRICTION: float = -4.2


class CancellationToken:
    """Set by the owner of a fling to stop it at the next frame."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


@dataclass(frozen=True)
class ExponentialDecaySpec:
    """
    value(t) = v0 / f * (exp(f * t) - 1), with f = -4.2 * friction_multiplier
    and t in seconds. Ends once |velocity| drops below abs_velocity_threshold.
    """
    friction_multiplier: float = FLING_FRICTION_MULTIPLIER
    abs_velocity_threshold: float = FLING_ABS_VELOCITY_THRESHOLD

    @property
    def friction(self) -> float:
        return EXPONENTIAL_DECAY_FRICTION * max(self.friction_multiplier, 1e-4)

    def value_at(self, play_time_ms: float, initial_value: float, initial_velocity: float) -> float:
        t = play_time_ms / 1000.0
        return initial_value + initial_velocity / self.friction * (math.exp(self.friction * t) - 1.0)

    def velocity_at(self, play_time_ms: float, initial_velocity: float) -> float:
        return initial_velocity * math.exp(self.friction * play_time_ms / 1000.0)

    def duration_ms(self, initial_velocity: float) -> float:
        speed = abs(initial_velocity)
        if speed <= self.abs_velocity_threshold:
            return 0.0
        return 1000.0 * math.log(self.abs_velocity_threshold / speed) / self.friction

    def target_value(self, initial_value: float, initial_velocity: float) -> float:
        return initial_value - initial_velocity / self.friction


Sleep = Callable[[float], Awaitable[None]]


class PanFlingBehavior:
    """
    sleep is awaited with the frame interval in seconds between frames;
    tests pass a fake to run without wall-clock delays.
    """

    def __init__(
        self,
        decay_spec: ExponentialDecaySpec | None = None,
        frame_ms: float = FLING_FRAME_INTERVAL_MS,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.decay_spec = decay_spec or ExponentialDecaySpec()
        self.frame_ms = frame_ms
        self._sleep = sleep

    def _frames(self, velocity: Point) -> Iterator[Point | None]:
        """One item per frame: the pan for that frame, or None when it moved too little."""
        speed = math.hypot(velocity[0], velocity[1])
        if speed == 0.0 or math.isnan(speed):
            return
        dx, dy = velocity[0] / speed, velocity[1] / speed
        duration = self.decay_spec.duration_ms(speed)

        last = 0.0
        t = 0.0
        while t < duration:
            t = min(t + self.frame_ms, duration)
            value = self.decay_spec.value_at(t, 0.0, speed)
            delta = value - last
            last = value
            if abs(delta) < MIN_FLING_MOVEMENT_THRESHOLD:
                yield None
            else:
                yield (dx * delta, dy * delta)

    def iter_fling_deltas(self, velocity: Point) -> Iterator[Point]:
        """Pan offsets the fling would report, without waiting between frames."""
        for pan in self._frames(velocity):
            if pan is not None:
                yield pan

    async def perform_fling(
        self,
        velocity: Point,
        block: Callable[[Point], object],
        token: CancellationToken | None = None,
    ) -> None:
        frames = 0
        for pan in self._frames(velocity):
            await self._sleep(self.frame_ms / 1000.0)
            if token is not None and token.cancelled:
                logger.debug("Fling cancelled after %d frames", frames)
                return
            frames += 1
            if pan is not None:
                block(pan)
        logger.debug("Fling finished after %d frames", frames)
