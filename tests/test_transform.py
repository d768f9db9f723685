# tests/test_transform.py
"""
Gesture sessions and the async transform detector: tracking lifecycle,
sticky zoom axis, skipped batches, fling launch and fling cancellation.
"""

from __future__ import annotations

import asyncio

import pytest

from plotlayout.core.fling import PanFlingBehavior
from plotlayout.core.gestures import GestureConfig, PointerEvent, PointerInputChange
from plotlayout.core.pan import PanFlingHandler
from plotlayout.core.transform import GestureState, TransformGesturesHandler

SIZE = (400, 300)


def down(pid: int, pos: tuple[float, float], t: float = 0.0) -> PointerInputChange:
    return PointerInputChange(pid, pos, pos, pressed=True, previous_pressed=False, uptime_ms=t)


def move(pid: int, prev: tuple[float, float], cur: tuple[float, float], t: float = 0.0) -> PointerInputChange:
    return PointerInputChange(pid, cur, prev, uptime_ms=t)


def up(pid: int, pos: tuple[float, float], t: float = 0.0) -> PointerInputChange:
    return PointerInputChange(pid, pos, pos, pressed=False, previous_pressed=True, uptime_ms=t)


def drag(start_t: float = 0.0) -> list[PointerEvent]:
    """Single pointer dragged right at 1 px/ms, then released."""
    return [
        PointerEvent([down(0, (0.0, 0.0), start_t)]),
        PointerEvent([move(0, (0.0, 0.0), (10.0, 0.0), start_t + 10)]),
        PointerEvent([move(0, (10.0, 0.0), (20.0, 0.0), start_t + 20)]),
        PointerEvent([move(0, (20.0, 0.0), (30.0, 0.0), start_t + 30)]),
        PointerEvent([up(0, (30.0, 0.0), start_t + 40)]),
    ]


async def _stream(events: list[PointerEvent]):
    for e in events:
        yield e


async def _no_wait(_seconds: float) -> None:
    await asyncio.sleep(0)


def _recorder(out: list, result: bool = True):
    def on_change(*args) -> bool:
        out.append(args)
        return result
    return on_change


def test_session_lifecycle() -> None:
    config = GestureConfig(pan_x_enabled=True, pan_y_enabled=True)
    handler = TransformGesturesHandler.create(config)
    pans: list = []
    session = handler.new_session(SIZE, config, _recorder([]), _recorder(pans))

    assert session.state is GestureState.IDLE
    assert session.process(PointerEvent([up(0, (0.0, 0.0))])) is GestureState.IDLE
    assert session.process(PointerEvent([down(0, (0.0, 0.0))])) is GestureState.TRACKING
    assert pans == []
    assert session.process(PointerEvent([move(0, (0.0, 0.0), (3.0, 4.0))])) is GestureState.TRACKING
    assert session.process(PointerEvent([up(0, (3.0, 4.0))])) is GestureState.ENDED
    assert [p[1] for p in pans] == [(3.0, 4.0)]
    assert session.should_fling


def test_pan_lock_reports_locked_axis_only() -> None:
    config = GestureConfig(pan_x_enabled=True, pan_fling_animation_enabled=False)
    handler = TransformGesturesHandler.create(config)
    pans: list = []
    moved = move(0, (0.0, 0.0), (10.0, 10.0))
    events = [
        PointerEvent([down(0, (0.0, 0.0))]),
        PointerEvent([moved]),
        PointerEvent([up(0, (10.0, 10.0))]),
    ]

    asyncio.run(handler.detect_transform_gestures(_stream(events), SIZE, config, _recorder([]), _recorder(pans)))

    assert [p[1] for p in pans] == [(10.0, 0.0)]
    assert moved.consumed


def test_sticky_zoom_axis_is_kept_for_the_gesture() -> None:
    config = GestureConfig(zoom_x_enabled=True, zoom_y_enabled=True, independent_zoom_enabled=True)
    handler = TransformGesturesHandler.create(config)
    zooms: list = []
    session = handler.new_session(SIZE, config, _recorder(zooms), _recorder([]))

    session.process(PointerEvent([down(0, (100.0, 100.0)), down(1, (200.0, 105.0))]))
    session.process(PointerEvent([move(0, (100.0, 100.0), (80.0, 100.0)), move(1, (200.0, 105.0), (220.0, 105.0))]))
    assert session.is_horizontal_zoom is True
    assert session.direction_locked

    # fingers now spread mostly vertically; the axis stays horizontal
    session.process(PointerEvent([move(0, (80.0, 100.0), (80.0, 50.0)), move(1, (220.0, 105.0), (220.0, 200.0))]))
    assert session.is_horizontal_zoom is True

    assert len(zooms) == 1
    zoom = zooms[0][2]
    assert zoom.x == pytest.approx(1.4)
    assert all(z[2].y == 1.0 for z in zooms)


def test_consumed_batch_is_skipped_but_gesture_continues() -> None:
    config = GestureConfig(pan_x_enabled=True, pan_y_enabled=True)
    handler = TransformGesturesHandler.create(config)
    pans: list = []
    session = handler.new_session(SIZE, config, _recorder([]), _recorder(pans))

    session.process(PointerEvent([down(0, (0.0, 0.0))]))
    taken = move(0, (0.0, 0.0), (5.0, 0.0))
    taken.consume()
    assert session.process(PointerEvent([taken])) is GestureState.TRACKING
    assert session.skipped_frames == 1
    assert pans == []

    session.process(PointerEvent([move(0, (5.0, 0.0), (9.0, 0.0))]))
    assert [p[1] for p in pans] == [(4.0, 0.0)]


def test_release_launches_fling() -> None:
    config = GestureConfig(pan_x_enabled=True, pan_y_enabled=True)
    fling = PanFlingHandler(PanFlingBehavior(sleep=_no_wait))
    handler = TransformGesturesHandler.create(config, pan_fling_handler=fling)
    pans: list = []

    asyncio.run(handler.detect_transform_gestures(_stream(drag()), SIZE, config, _recorder([]), _recorder(pans)))

    drag_pans, fling_pans = pans[:3], pans[3:]
    assert [p[1] for p in drag_pans] == [(10.0, 0.0)] * 3
    assert fling_pans
    assert all(p[1][0] > 0 and p[1][1] == pytest.approx(0.0, abs=1e-6) for p in fling_pans)


def test_next_gesture_cancels_fling() -> None:
    config = GestureConfig(pan_x_enabled=True, pan_y_enabled=True)
    fling = PanFlingHandler(PanFlingBehavior(sleep=_no_wait))
    handler = TransformGesturesHandler.create(config, pan_fling_handler=fling)
    pans: list = []
    events = drag() + [PointerEvent([down(0, (50.0, 50.0), 60.0)])]

    asyncio.run(handler.detect_transform_gestures(_stream(events), SIZE, config, _recorder([]), _recorder(pans)))

    assert len(pans) == 3


def test_fling_disabled() -> None:
    config = GestureConfig(pan_x_enabled=True, pan_fling_animation_enabled=False)
    handler = TransformGesturesHandler.create(config)
    pans: list = []

    asyncio.run(handler.detect_transform_gestures(_stream(drag()), SIZE, config, _recorder([]), _recorder(pans)))

    assert len(pans) == 3


def test_cancelled_detector_stops_its_fling() -> None:
    config = GestureConfig(pan_x_enabled=True, pan_y_enabled=True)
    fling = PanFlingHandler(PanFlingBehavior(sleep=_no_wait))
    handler = TransformGesturesHandler.create(config, pan_fling_handler=fling)
    pans: list = []

    async def run() -> None:
        held_open = asyncio.Event()

        async def events():
            for e in drag():
                yield e
            await held_open.wait()

        detector = asyncio.create_task(
            handler.detect_transform_gestures(events(), SIZE, config, _recorder([]), _recorder(pans))
        )
        while len(pans) < 5:
            await asyncio.sleep(0)
        detector.cancel()
        with pytest.raises(asyncio.CancelledError):
            await detector

        at_cancel = len(pans)
        for _ in range(50):
            await asyncio.sleep(0)
        assert len(pans) == at_cancel

    asyncio.run(run())


def test_fling_failure_reaches_the_detector() -> None:
    config = GestureConfig(pan_x_enabled=True, pan_y_enabled=True)
    fling = PanFlingHandler(PanFlingBehavior(sleep=_no_wait))
    handler = TransformGesturesHandler.create(config, pan_fling_handler=fling)
    pans: list = []

    def on_pan(*args) -> bool:
        pans.append(args)
        if len(pans) > 3:
            raise RuntimeError("pan target gone")
        return True

    with pytest.raises(RuntimeError, match="pan target gone"):
        asyncio.run(handler.detect_transform_gestures(_stream(drag()), SIZE, config, _recorder([]), on_pan))
