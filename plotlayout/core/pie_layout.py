# plotlayout/core/pie_layout.py
"""
Pie/donut measure policy: find the largest pie diameter for which the pie and
its labels fit the constraints, then compute integer placements for the pie,
the hole, every label and every connector.

The diameter search relies on label extents growing monotonically with the
diameter, so a bisection (maximize) replaces a linear scan. Labels are
measured twice: first against a rough width budget, then against the budget
left by the first-pass diameter.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Sequence

from plotlayout.core.config import (
    DEFAULT_LABEL_SPACING,
    DEFAULT_MAX_PIE_DIAMETER,
    DEFAULT_MIN_PIE_DIAMETER,
    DEGREES_FULL_CIRCLE,
    DIAMETER_SEARCH_TOLERANCE,
    INIT_OUTER_RADIUS,
    LAYOUT_DEBUG,
    PIE_START_ANGLE_DEG,
)
from plotlayout.core.error_codes import (
    HOLE_SIZE_OUT_OF_RANGE,
    INVALID_EXTEND_ANGLE,
    INVALID_SEARCH_RANGE,
    LENGTH_MISMATCH,
    MAX_DIAMETER_UNSPECIFIED,
    MIN_DIAMETER_NEGATIVE,
    require,
)
from plotlayout.core.geometry import (
    AngularValue,
    Point,
    bounding_extents,
    circumscribed_square_size,
    deg,
    label_box,
    maximize,
    offset_add,
    offset_sub,
    polar_to_cartesian,
)
from plotlayout.core.label_position import (
    EXTERNAL,
    CircularLabelPositionProvider,
    ExternalLabelPosition,
    LabelPosition,
    LabelPositionProvider,
    PieLabelPlacement,
    position_or_none,
)
from plotlayout.core.types import (
    ConnectorGeometry,
    Constraints,
    LabelSize,
    LayoutSize,
    Measurable,
    PieSliceData,
    Placeable,
    Placement,
)

logger = logging.getLogger(__name__)


def make_pie_slice_data(
    values: Sequence[float],
    beta: float = 1.0,
    start_angle: AngularValue = deg(PIE_START_ANGLE_DEG),
    extend_angle: AngularValue = deg(DEGREES_FULL_CIRCLE),
) -> list[PieSliceData]:
    """
    Slice extents proportional to values, laid clockwise from start_angle over
    extend_angle. beta in [0, 1] scales every extent (draw-in animation).
    A zero total is treated as 1 so every slice gets a zero extent.
    """
    total = float(sum(float(v) for v in values))
    if total == 0.0:
        if values:
            logger.warning("Pie values sum to zero; drawing empty slices")
        total = 1.0

    out: list[PieSliceData] = []
    start = start_angle.degrees
    extend = extend_angle.degrees
    for v in values:
        extent = float(v) / total * extend * beta
        out.append(PieSliceData(deg(start), deg(extent)))
        start += extent
    return out


@dataclass(frozen=True)
class PiePlacements:
    """Integer top-left corners for the pie body, the hole, labels and connectors (None = not drawn)."""
    pie: Placement
    hole: Placement
    labels: list[Placement | None]
    connectors: list[Placement | None]


@dataclass
class PieLayout:
    """Everything a renderer needs to draw one pie at the chosen size."""
    diameter: float
    size: LayoutSize
    hole_diameter: float
    hole_padding: float
    slices: list[PieSliceData]
    label_sizes: list[LabelSize]
    label_positions: list[LabelPosition]
    connectors: list[ConnectorGeometry | None]
    placements: PiePlacements
    init_outer_radius: float = INIT_OUTER_RADIUS
    warnings: list[str] = field(default_factory=list)


class PieMeasurePolicy:
    """
    force_centered_pie keeps the pie centered in the layout box by sizing the
    box symmetrically around the pie center, at the cost of a smaller pie when
    labels are lopsided.
    """

    def __init__(
        self,
        slices: Sequence[PieSliceData],
        hole_size: float,
        label_position_provider: LabelPositionProvider,
        init_outer_radius: float = INIT_OUTER_RADIUS,
        force_centered_pie: bool = False,
    ) -> None:
        self.slices = list(slices)
        self.hole_size = hole_size
        self.label_position_provider = label_position_provider
        self.init_outer_radius = init_outer_radius
        self.force_centered_pie = force_centered_pie

    def find_max_diameter(
        self,
        constraints: Constraints,
        label_sizes: Sequence[LabelSize],
        min_diameter: float,
        max_diameter: float = math.inf,
    ) -> float:
        """Bisection for the largest diameter whose pie + labels fit inside constraints."""
        upper = max(min(constraints.max_width, constraints.max_height), min_diameter)
        upper = min(upper, max(max_diameter, min_diameter))
        require(
            math.isfinite(upper),
            INVALID_SEARCH_RANGE,
            "pie needs a bounded width or height, or a finite max_pie_diameter",
        )

        def fits(d: float) -> bool:
            if d <= min_diameter:
                return True
            ok = self._check_diameter(d, label_sizes, constraints)
            if LAYOUT_DEBUG:
                logger.debug("diameter probe %.3f -> %s", d, ok)
            return ok

        return maximize(min_diameter, upper, fits, DIAMETER_SEARCH_TOLERANCE)

    def _check_diameter(
        self,
        diameter: float,
        label_sizes: Sequence[LabelSize],
        constraints: Constraints,
    ) -> bool:
        positions = self.label_position_provider.compute_label_positions(
            diameter, self.hole_size, label_sizes, self.slices
        )
        s = self.compute_size(label_sizes, positions, diameter)
        return s.width < constraints.max_width and s.height < constraints.max_height

    def compute_size(
        self,
        label_sizes: Sequence[LabelSize],
        positions: Sequence[LabelPosition],
        diameter: float,
    ) -> LayoutSize:
        """
        Size needed for the pie plus its labels. Label positions are relative to
        the pie center, so the centered size is twice the largest extent.
        """
        boxes = []
        for size, pos in zip(label_sizes, positions):
            p = position_or_none(pos)
            if p is not None:
                boxes.append(label_box(p, size.as_tuple()))
        min_x, min_y, max_x, max_y = bounding_extents(boxes, diameter / 2.0)

        if self.force_centered_pie:
            return LayoutSize(2.0 * max(abs(max_x), abs(min_x)), 2.0 * max(abs(max_y), abs(min_y)))
        return LayoutSize(max_x - min_x, max_y - min_y)

    def measure(
        self,
        labels: Sequence[Measurable],
        constraints: Constraints,
        min_diameter: float,
        max_diameter: float,
    ) -> tuple[float, list[LabelSize]]:
        """Return (diameter, label sizes). The diameter is floored to whole pixels."""
        budget = max((constraints.max_width - min_diameter) / 2.0, constraints.min_width)
        sizes = [m.measure(budget, constraints.max_height) for m in labels]
        d = _clamp(
            self.find_max_diameter(constraints, sizes, min_diameter, max_diameter),
            min_diameter,
            max_diameter,
        )

        exact_budget = max((constraints.max_width - d) / 2.0, constraints.min_width)
        if labels and exact_budget != budget:
            sizes = [m.measure(exact_budget, constraints.max_height) for m in labels]
            d = _clamp(
                self.find_max_diameter(constraints, sizes, min_diameter, max_diameter),
                min_diameter,
                max_diameter,
            )

        diameter = float(math.floor(d))
        logger.info("Pie diameter %.0f for constraints %sx%s", diameter, constraints.max_width, constraints.max_height)
        return diameter, sizes

    def compute_label_connectors(
        self,
        positions: Sequence[LabelPosition],
        diameter: float,
    ) -> list[tuple[Point, ConnectorGeometry] | None]:
        """
        For each external label: the translation into the connector's local box
        and the connector geometry in that box. Other labels get None.
        """
        out: list[tuple[Point, ConnectorGeometry] | None] = []
        for s, pos in zip(self.slices, positions):
            if not isinstance(pos, ExternalLabelPosition):
                out.append(None)
                continue
            start_angle = s.center_angle
            start = polar_to_cartesian(diameter / 2.0 * self.init_outer_radius, start_angle)
            end = pos.anchor_point

            # top-left at the origin plus a half-diameter margin so curves bending
            # into negative coordinates are not clipped
            left = min(start[0], end[0])
            top = min(start[1], end[1])
            translate = (-left + diameter / 2.0, -top + diameter / 2.0)
            out.append((
                translate,
                ConnectorGeometry(
                    start_position=offset_add(start, translate),
                    end_position=offset_add(end, translate),
                    start_angle=start_angle,
                    end_angle=pos.anchor_angle,
                ),
            ))
        return out

    def layout(
        self,
        size: LayoutSize,
        positions: Sequence[LabelPosition],
        connector_translations: Sequence[Point | None],
        diameter: float,
        hole_diameter: float,
    ) -> PiePlacements:
        """Integer placements relative to the layout origin."""
        points = [p for p in (position_or_none(pos) for pos in positions) if p is not None]
        if self.force_centered_pie:
            translation = (size.width / 2.0, size.height / 2.0)
        else:
            min_x = min((p[0] for p in points), default=0.0)
            min_y = min((p[1] for p in points), default=0.0)
            translation = (max(-min_x, diameter / 2.0), max(-min_y, diameter / 2.0))

        labels: list[Placement | None] = []
        for pos in positions:
            p = position_or_none(pos)
            labels.append(None if p is None else _to_placement(offset_add(p, translation)))

        connectors = [
            None if t is None else _to_placement(offset_sub(translation, t))
            for t in connector_translations
        ]

        pie = _to_placement(offset_sub(translation, (diameter / 2.0, diameter / 2.0)))
        hole = _to_placement(offset_sub(translation, (hole_diameter / 2.0, hole_diameter / 2.0)))
        return PiePlacements(pie=pie, hole=hole, labels=labels, connectors=connectors)


def compute_pie_layout(
    values: Sequence[float],
    labels: Sequence[Measurable],
    constraints: Constraints,
    *,
    label_position_provider: LabelPositionProvider | None = None,
    label_spacing: float = DEFAULT_LABEL_SPACING,
    label_placement: PieLabelPlacement = EXTERNAL,
    hole_size: float = 0.0,
    min_pie_diameter: float = DEFAULT_MIN_PIE_DIAMETER,
    max_pie_diameter: float | None = DEFAULT_MAX_PIE_DIAMETER,
    force_centered_pie: bool = False,
    start_angle: AngularValue = deg(PIE_START_ANGLE_DEG),
    extend_angle: AngularValue = deg(DEGREES_FULL_CIRCLE),
    init_outer_radius: float = INIT_OUTER_RADIUS,
) -> PieLayout:
    """
    Compute a complete pie/donut layout for the given values and label
    measurables. max_pie_diameter may be math.inf but not None.
    label_position_provider overrides label_spacing / label_placement.
    """
    require(0.0 <= hole_size <= 1.0, HOLE_SIZE_OUT_OF_RANGE, f"holeSize={hole_size}")
    require(
        max_pie_diameter is not None and not math.isnan(max_pie_diameter),
        MAX_DIAMETER_UNSPECIFIED,
    )
    require(min_pie_diameter >= 0.0, MIN_DIAMETER_NEGATIVE, f"minPieDiameter={min_pie_diameter}")
    require(
        min_pie_diameter <= max_pie_diameter,
        INVALID_SEARCH_RANGE,
        f"minPieDiameter={min_pie_diameter} > maxPieDiameter={max_pie_diameter}",
    )
    require(
        0.0 < extend_angle.degrees <= DEGREES_FULL_CIRCLE,
        INVALID_EXTEND_ANGLE,
        f"pieExtendAngle={extend_angle.degrees}",
    )
    require(len(labels) == len(values), LENGTH_MISMATCH, f"{len(labels)} labels, {len(values)} values")

    slices = make_pie_slice_data(values, 1.0, start_angle, extend_angle)
    provider = label_position_provider or CircularLabelPositionProvider(label_spacing, label_placement)
    policy = PieMeasurePolicy(slices, hole_size, provider, init_outer_radius, force_centered_pie)

    diameter, label_sizes = policy.measure(labels, constraints, min_pie_diameter, max_pie_diameter)
    positions = provider.compute_label_positions(diameter * init_outer_radius, hole_size, label_sizes, slices)

    raw = policy.compute_size(label_sizes, positions, diameter)
    # +1 for the fraction dropped by the integer placements
    size = LayoutSize(
        min(raw.width + 1.0, constraints.max_width),
        min(raw.height + 1.0, constraints.max_height),
    )

    connectors = policy.compute_label_connectors(positions, diameter)
    hole_diameter = diameter * hole_size
    hole_padding = hole_diameter - circumscribed_square_size(hole_diameter)

    placements = policy.layout(
        size,
        positions,
        [c[0] if c is not None else None for c in connectors],
        diameter,
        hole_diameter,
    )

    warnings: list[str] = []
    if raw.width >= constraints.max_width or raw.height >= constraints.max_height:
        warnings.append("labels_exceed_constraints")
        logger.warning("Pie labels exceed constraints at minimum diameter %.0f", diameter)

    return PieLayout(
        diameter=diameter,
        size=size,
        hole_diameter=hole_diameter,
        hole_padding=hole_padding,
        slices=slices,
        label_sizes=label_sizes,
        label_positions=positions,
        connectors=[c[1] if c is not None else None for c in connectors],
        placements=placements,
        init_outer_radius=init_outer_radius,
        warnings=warnings,
    )


def apply_placements(
    layout: PieLayout,
    pie: Placeable,
    hole: Placeable,
    labels: Sequence[Placeable],
    connectors: Sequence[Placeable],
) -> None:
    """Hand the computed placements to the rendering collaborator's placeables."""
    p = layout.placements
    pie.place(p.pie.x, p.pie.y)
    hole.place(p.hole.x, p.hole.y)
    for placeable, placement in zip(labels, p.labels):
        if placement is not None:
            placeable.place(placement.x, placement.y)
    for placeable, placement in zip(connectors, p.connectors):
        if placement is not None:
            placeable.place(placement.x, placement.y)


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(value, hi))


def _to_placement(p: Point) -> Placement:
    # truncation toward zero, as an int() cast of the float position
    return Placement(int(p[0]), int(p[1]))
