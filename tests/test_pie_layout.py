# tests/test_pie_layout.py
"""
Pie measure policy: slice data, precondition errors, the diameter search
against an exhaustive scan, centering, connectors and placements.
"""

from __future__ import annotations

import math

import pytest

from plotlayout.core.error_codes import (
    HOLE_SIZE_OUT_OF_RANGE,
    INVALID_EXTEND_ANGLE,
    INVALID_SEARCH_RANGE,
    LENGTH_MISMATCH,
    MAX_DIAMETER_UNSPECIFIED,
    MIN_DIAMETER_NEGATIVE,
    LayoutPreconditionError,
)
from plotlayout.core.geometry import deg
from plotlayout.core.label_position import (
    CircularLabelPositionProvider,
    ExternalLabelPosition,
    InternalLabelPosition,
    InternalOrExternal,
)
from plotlayout.core.pie_layout import (
    PieMeasurePolicy,
    apply_placements,
    compute_pie_layout,
    make_pie_slice_data,
)
from plotlayout.core.text_metrics import FixedSizeLabel
from plotlayout.core.types import Constraints, PlacementLog


def test_make_pie_slice_data() -> None:
    slices = make_pie_slice_data([1.0, 1.0, 2.0])
    assert [s.start_angle.degrees for s in slices] == pytest.approx([-90.0, 0.0, 90.0])
    assert [s.angle.degrees for s in slices] == pytest.approx([90.0, 90.0, 180.0])
    assert slices[2].center_angle.degrees == pytest.approx(180.0)


def test_make_pie_slice_data_beta_and_extend() -> None:
    half = make_pie_slice_data([1.0, 1.0], beta=0.5)
    assert [s.angle.degrees for s in half] == pytest.approx([90.0, 90.0])

    semi = make_pie_slice_data([1.0, 3.0], start_angle=deg(180), extend_angle=deg(180))
    assert [s.start_angle.degrees for s in semi] == pytest.approx([180.0, 225.0])
    assert [s.angle.degrees for s in semi] == pytest.approx([45.0, 135.0])


def test_make_pie_slice_data_zero_sum() -> None:
    slices = make_pie_slice_data([0.0, 0.0])
    assert all(s.angle.degrees == 0.0 for s in slices)
    assert all(s.start_angle.degrees == -90.0 for s in slices)


@pytest.mark.parametrize(
    "kwargs,error_key",
    [
        ({"hole_size": 1.5}, HOLE_SIZE_OUT_OF_RANGE),
        ({"hole_size": -0.1}, HOLE_SIZE_OUT_OF_RANGE),
        ({"max_pie_diameter": None}, MAX_DIAMETER_UNSPECIFIED),
        ({"max_pie_diameter": math.nan}, MAX_DIAMETER_UNSPECIFIED),
        ({"min_pie_diameter": -1.0}, MIN_DIAMETER_NEGATIVE),
        ({"min_pie_diameter": 200.0, "max_pie_diameter": 100.0}, INVALID_SEARCH_RANGE),
        ({"extend_angle": deg(0)}, INVALID_EXTEND_ANGLE),
        ({"extend_angle": deg(361)}, INVALID_EXTEND_ANGLE),
    ],
)
def test_compute_pie_layout_preconditions(kwargs: dict, error_key: str) -> None:
    labels = [FixedSizeLabel(30, 10)] * 2
    with pytest.raises(LayoutPreconditionError) as exc:
        compute_pie_layout([1.0, 2.0], labels, Constraints(400, 400), **kwargs)
    assert exc.value.error_key == error_key


def test_compute_pie_layout_length_mismatch() -> None:
    with pytest.raises(LayoutPreconditionError) as exc:
        compute_pie_layout([1.0, 2.0], [FixedSizeLabel(30, 10)], Constraints(400, 400))
    assert exc.value.error_key == LENGTH_MISMATCH


def test_diameter_matches_exhaustive_scan() -> None:
    values = [1.0, 1.0, 1.0]
    labels = [FixedSizeLabel(120, 16)] * 3
    constraints = Constraints(400, 400)
    layout = compute_pie_layout(values, labels, constraints, min_pie_diameter=100, max_pie_diameter=300)

    assert 100 <= layout.diameter <= 300
    assert layout.size.width <= 400 and layout.size.height <= 400

    provider = CircularLabelPositionProvider()
    policy = PieMeasurePolicy(layout.slices, 0.0, provider)

    def fits(d: float) -> bool:
        positions = provider.compute_label_positions(d, 0.0, layout.label_sizes, layout.slices)
        s = policy.compute_size(layout.label_sizes, positions, d)
        return s.width < 400 and s.height < 400

    assert fits(layout.diameter)
    best = 100
    for d in range(100, 301):
        if fits(float(d)):
            best = d
    assert layout.diameter in (best - 1, best)


def test_diameter_capped_by_max() -> None:
    layout = compute_pie_layout(
        [1.0, 2.0], [FixedSizeLabel(20, 10)] * 2, Constraints(2000, 2000), max_pie_diameter=300
    )
    # bisection approaches the cap from below, then floors
    assert 299 <= layout.diameter <= 300
    assert layout.warnings == []


def test_infinite_max_diameter_is_allowed() -> None:
    layout = compute_pie_layout(
        [1.0, 2.0], [FixedSizeLabel(20, 10)] * 2, Constraints(500, 500), max_pie_diameter=math.inf
    )
    assert 100 <= layout.diameter < 500


def test_unbounded_pie_is_rejected() -> None:
    labels = [FixedSizeLabel(20, 10)] * 2
    with pytest.raises(LayoutPreconditionError) as exc:
        compute_pie_layout([1.0, 2.0], labels, Constraints(math.inf, math.inf), max_pie_diameter=math.inf)
    assert exc.value.error_key == INVALID_SEARCH_RANGE

    layout = compute_pie_layout([1.0, 2.0], labels, Constraints(math.inf, math.inf), max_pie_diameter=200.0)
    assert 199 <= layout.diameter <= 200


def test_minimum_diameter_when_labels_cannot_fit() -> None:
    layout = compute_pie_layout(
        [1.0, 1.0], [FixedSizeLabel(100, 20)] * 2, Constraints(150, 150), min_pie_diameter=100
    )
    assert layout.diameter == 100
    assert "labels_exceed_constraints" in layout.warnings
    assert layout.size.width <= 150 and layout.size.height <= 150


def test_labels_measured_against_remaining_width() -> None:
    layout = compute_pie_layout([1.0, 1.0], [FixedSizeLabel(500, 20)] * 2, Constraints(400, 400))
    for size in layout.label_sizes:
        assert size.width <= (400 - layout.diameter) / 2.0 + 1e-9


def test_force_centered_pie() -> None:
    labels = [FixedSizeLabel(80, 16), FixedSizeLabel(20, 16)]
    layout = compute_pie_layout([1.0, 3.0], labels, Constraints(500, 400), force_centered_pie=True)
    pie = layout.placements.pie
    assert abs(pie.x + layout.diameter / 2.0 - layout.size.width / 2.0) <= 1.0
    assert abs(pie.y + layout.diameter / 2.0 - layout.size.height / 2.0) <= 1.0


def test_placements_stay_inside_layout() -> None:
    labels = [FixedSizeLabel(60, 14)] * 5
    layout = compute_pie_layout([5.0, 1.0, 1.0, 2.0, 3.0], labels, Constraints(500, 400))
    p = layout.placements
    assert p.pie.x >= 0 and p.pie.y >= 0
    for size, placement in zip(layout.label_sizes, p.labels):
        assert placement is not None
        assert placement.x >= 0 and placement.y >= 0
        assert placement.x + size.width <= layout.size.width + 1
        assert placement.y + size.height <= layout.size.height + 1


def test_connectors_join_slice_and_label_anchor() -> None:
    labels = [FixedSizeLabel(60, 14)] * 3
    layout = compute_pie_layout([1.0, 2.0, 3.0], labels, Constraints(500, 400))
    p = layout.placements

    for pos, size, geometry, label_at, conn_at in zip(
        layout.label_positions, layout.label_sizes, layout.connectors, p.labels, p.connectors
    ):
        assert isinstance(pos, ExternalLabelPosition)
        assert geometry is not None and conn_at is not None
        # local frame: the nearer endpoint sits at the half-diameter margin
        left = min(geometry.start_position[0], geometry.end_position[0])
        top = min(geometry.start_position[1], geometry.end_position[1])
        assert left == pytest.approx(layout.diameter / 2.0)
        assert top == pytest.approx(layout.diameter / 2.0)

        end_x = conn_at.x + geometry.end_position[0]
        end_y = conn_at.y + geometry.end_position[1]
        anchor_x = label_at.x + (size.width if pos.anchor_angle.degrees == 0.0 else 0.0)
        assert abs(end_x - anchor_x) <= 1.5
        assert abs(end_y - (label_at.y + size.height / 2.0)) <= 1.5


def test_internal_labels_have_no_connectors() -> None:
    labels = [FixedSizeLabel(8, 8)] * 3
    layout = compute_pie_layout(
        [1.0, 1.0, 1.0], labels, Constraints(400, 400), label_placement=InternalOrExternal()
    )
    assert all(isinstance(p, InternalLabelPosition) for p in layout.label_positions)
    assert layout.connectors == [None, None, None]
    assert layout.placements.connectors == [None, None, None]


def test_hole_geometry() -> None:
    layout = compute_pie_layout(
        [1.0, 2.0], [FixedSizeLabel(30, 10)] * 2, Constraints(400, 400), hole_size=0.5
    )
    hd = layout.diameter * 0.5
    assert layout.hole_diameter == pytest.approx(hd)
    assert layout.hole_padding == pytest.approx(hd - hd / math.sqrt(2.0))
    pie, hole = layout.placements.pie, layout.placements.hole
    assert abs((hole.x + hd / 2.0) - (pie.x + layout.diameter / 2.0)) <= 1.0


def test_apply_placements() -> None:
    labels = [FixedSizeLabel(40, 12)] * 2
    layout = compute_pie_layout([1.0, 1.0], labels, Constraints(400, 400))
    pie, hole = PlacementLog("pie"), PlacementLog("hole")
    label_logs = [PlacementLog(f"label{i}") for i in range(2)]
    connector_logs = [PlacementLog(f"connector{i}") for i in range(2)]

    apply_placements(layout, pie, hole, label_logs, connector_logs)

    assert pie.last == layout.placements.pie
    assert hole.last == layout.placements.hole
    assert [log.last for log in label_logs] == layout.placements.labels
    assert [log.last for log in connector_logs] == layout.placements.connectors
