# plotlayout/core/polar_layout.py
"""
Polar (radar/spider) graph layout: axis models that map data values to angles
and radial fractions, and the measure policy that sizes the grid radius so the
angular axis labels fit around it within the constraints, keeping the pole
centered.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Generic, Protocol, Sequence, TypeVar

from shapely.geometry import Polygon

from plotlayout.core.config import (
    DIAMETER_SEARCH_TOLERANCE,
    POLAR_ANGULAR_LABEL_GAP,
    POLAR_DEFAULT_ANGULAR_TICKS,
    POLAR_RADIAL_LABEL_GAP,
)
from plotlayout.core.error_codes import (
    INVALID_SEARCH_RANGE,
    LENGTH_MISMATCH,
    NEGATIVE_GAP,
    TOO_FEW_TICKS,
    UNKNOWN_CATEGORY,
    require,
)
from plotlayout.core.geometry import (
    AngularValue,
    Point,
    bounding_extents,
    deg,
    label_box,
    maximize,
    normalize_degrees,
    offset_add,
    polar_to_cartesian,
    rad,
)
from plotlayout.core.types import Constraints, LabelSize, LayoutSize, Measurable, Placement

logger = logging.getLogger(__name__)

R = TypeVar("R")
T = TypeVar("T")


class AngleDirection(Enum):
    """Direction in which angles increase on the graph. Counterclockwise is the math convention."""
    CLOCKWISE = "clockwise"
    COUNTERCLOCKWISE = "counterclockwise"


class AngleZero(Enum):
    """Where angle 0 sits. 3 o'clock is the math convention, 12 o'clock is usual for category charts."""
    THREE_OCLOCK = 0.0
    SIX_OCLOCK = math.pi / 2.0
    NINE_OCLOCK = math.pi
    TWELVE_OCLOCK = -math.pi / 2.0


@dataclass(frozen=True)
class PolarPoint(Generic[R, T]):
    r: R
    theta: T


class AngularAxisModel(Protocol[T]):
    angle_direction: AngleDirection
    angle_zero: AngleZero

    @property
    def tick_values(self) -> list[T]: ...

    def compute_offset(self, point: T) -> AngularValue: ...


@dataclass(frozen=True)
class CategoryAngularAxisModel(Generic[T]):
    """Categories evenly spaced around the circle; plotted values must be one of them."""
    categories: tuple[T, ...]
    angle_direction: AngleDirection = AngleDirection.CLOCKWISE
    angle_zero: AngleZero = AngleZero.TWELVE_OCLOCK

    @property
    def tick_values(self) -> list[T]:
        return list(self.categories)

    def compute_offset(self, point: T) -> AngularValue:
        require(point in self.categories, UNKNOWN_CATEGORY, repr(point))
        index = self.categories.index(point)
        return rad(index * 2.0 * math.pi / len(self.categories))


def _default_angular_ticks() -> tuple[AngularValue, ...]:
    n = POLAR_DEFAULT_ANGULAR_TICKS
    return tuple(rad(2.0 * math.pi * i / n) for i in range(n))


@dataclass(frozen=True)
class AngularValueAxisModel:
    """Angular axis whose values are angles already."""
    ticks: tuple[AngularValue, ...] = field(default_factory=_default_angular_ticks)
    angle_direction: AngleDirection = AngleDirection.COUNTERCLOCKWISE
    angle_zero: AngleZero = AngleZero.THREE_OCLOCK

    @property
    def tick_values(self) -> list[AngularValue]:
        return list(self.ticks)

    def compute_offset(self, point: AngularValue) -> AngularValue:
        return point


class FloatRadialAxisModel:
    """Linear radial axis; compute_offset gives the fraction of the plot radius."""

    def __init__(self, tick_values: Sequence[float]) -> None:
        require(len(tick_values) >= 2, TOO_FEW_TICKS, f"got {len(tick_values)}")
        self.tick_values = [float(v) for v in tick_values]
        ordered = sorted(self.tick_values)
        self._first = ordered[0]
        self._range = ordered[-1] - ordered[0]

    def compute_offset(self, point: float) -> float:
        if self._range == 0:
            return 0.0
        return (point - self._first) / self._range


def to_polar_angle(model: AngularAxisModel, angle: AngularValue) -> AngularValue:
    """Screen angle (clockwise from 3 o'clock, radians) for an axis-space angle."""
    sign = 1.0 if model.angle_direction is AngleDirection.CLOCKWISE else -1.0
    return rad(sign * angle.radians + model.angle_zero.value)


def polar_to_cartesian_plot(
    point: PolarPoint,
    angular_model: AngularAxisModel,
    radial_model: FloatRadialAxisModel,
    size: tuple[float, float],
) -> Point:
    """Point relative to the pole for a plot area of the given (width, height)."""
    theta = to_polar_angle(angular_model, angular_model.compute_offset(point.theta))
    r = min(size[0] / 2.0, size[1] / 2.0) * radial_model.compute_offset(point.r)
    return polar_to_cartesian(r, theta)


@dataclass(frozen=True)
class AngularSector:
    """Section of the circle from min_angle clockwise to max_angle."""
    min_angle: AngularValue
    max_angle: AngularValue

    def contains(self, angle: AngularValue) -> bool:
        lo = normalize_degrees(self.min_angle.degrees)
        hi = normalize_degrees(self.max_angle.degrees)
        a = normalize_degrees(angle.degrees)
        if lo > hi:
            # straddles 0 degrees
            return a > lo or a < hi
        return lo <= a <= hi


# Anchor of an angular label relative to its nominal point, first matching sector wins
_LABEL_ANCHORS: list[tuple[AngularSector, Callable[[float, float], Point]]] = [
    (AngularSector(deg(255.0), deg(285.0)), lambda w, h: (-w / 2.0, -h)),  # top
    (AngularSector(deg(75.0), deg(105.0)), lambda w, h: (-w / 2.0, 0.0)),  # bottom
    (AngularSector(deg(-15.0), deg(15.0)), lambda w, h: (0.0, -h / 2.0)),  # right
    (AngularSector(deg(165.0), deg(195.0)), lambda w, h: (-w, -h / 2.0)),  # left
    (AngularSector(deg(285.0), deg(345.0)), lambda w, h: (0.0, -h)),
    (AngularSector(deg(15.0), deg(75.0)), lambda w, h: (0.0, 0.0)),
    (AngularSector(deg(105.0), deg(165.0)), lambda w, h: (-w, 0.0)),
    (AngularSector(deg(195.0), deg(255.0)), lambda w, h: (-w, -h)),
]


def label_anchor_offset(angle: AngularValue, size: LabelSize) -> Point:
    """Offset from the nominal label point to the label's top-left corner."""
    for sector, offset in _LABEL_ANCHORS:
        if sector.contains(angle):
            return offset(size.width, size.height)
    return (0.0, 0.0)


@dataclass
class PolarLayout:
    plot_radius: float
    size: LayoutSize
    grid: Placement
    content: Placement
    angular_label_sizes: list[LabelSize]
    angular_labels: list[Placement]
    radial_label_sizes: list[LabelSize]
    radial_labels: list[Placement]


class PolarGraphMeasurePolicy:
    """
    angular_label_gap: distance between the outermost grid circle and the
    angular labels. radial_label_gap: distance between the radial labels and
    the axis line.
    """

    def __init__(
        self,
        angular_model: AngularAxisModel,
        radial_model: FloatRadialAxisModel,
        angular_label_gap: float = POLAR_ANGULAR_LABEL_GAP,
        radial_label_gap: float = POLAR_RADIAL_LABEL_GAP,
    ) -> None:
        require(angular_label_gap >= 0, NEGATIVE_GAP, f"angularLabelGap={angular_label_gap}")
        require(radial_label_gap >= 0, NEGATIVE_GAP, f"radialLabelGap={radial_label_gap}")
        self.angular_model = angular_model
        self.radial_model = radial_model
        self.angular_label_gap = angular_label_gap
        self.radial_label_gap = radial_label_gap

    def label_angles(self) -> list[AngularValue]:
        m = self.angular_model
        return [to_polar_angle(m, m.compute_offset(t)) for t in m.tick_values]

    def label_boxes(self, radius: float, label_sizes: Sequence[LabelSize]) -> list[Polygon]:
        """Angular label boxes around a circle of the given radius, pole at the origin."""
        out = []
        for angle, size in zip(self.label_angles(), label_sizes):
            p = offset_add(polar_to_cartesian(radius, angle), label_anchor_offset(angle, size))
            out.append(label_box(p, size.as_tuple()))
        return out

    def calculate_plot_size(self, radius: float, label_sizes: Sequence[LabelSize]) -> LayoutSize:
        """
        Square size keeping the pole centered with labels around a circle of
        radius (grid radius + label gap).
        """
        min_x, min_y, max_x, max_y = bounding_extents(self.label_boxes(radius, label_sizes), radius)
        width = 2.0 * max(abs(max_x), abs(min_x))
        height = 2.0 * max(abs(max_y), abs(min_y))
        side = max(width, height, 0.0)
        return LayoutSize(side, side)

    def calculate_plot_radius(self, constraints: Constraints, label_sizes: Sequence[LabelSize]) -> float:
        upper = min(constraints.max_width, constraints.max_height) / 2.0
        require(math.isfinite(upper), INVALID_SEARCH_RANGE, "polar graph needs a bounded width or height")

        def fits(radius: float) -> bool:
            s = self.calculate_plot_size(radius + self.angular_label_gap, label_sizes)
            return s.width < constraints.max_width and s.height < constraints.max_height

        return maximize(0.0, upper, fits, DIAMETER_SEARCH_TOLERANCE)

    def measure(
        self,
        angular_labels: Sequence[Measurable],
        radial_labels: Sequence[Measurable],
        constraints: Constraints,
    ) -> PolarLayout:
        """Two passes: approximate label sizes, then labels re-measured in the room left by that radius."""
        angles = self.label_angles()
        require(len(angular_labels) == len(angles), LENGTH_MISMATCH, "angular labels vs ticks")
        require(
            len(radial_labels) == len(self.radial_model.tick_values),
            LENGTH_MISMATCH,
            "radial labels vs ticks",
        )
        w, h = constraints.max_width, constraints.max_height

        approx = [m.measure(w / 2.0, h / 2.0) for m in angular_labels]
        radius = self.calculate_plot_radius(constraints, approx)

        reach = radius + self.angular_label_gap
        angular_sizes = [
            m.measure(
                max(0.0, w / 2.0 - reach * abs(math.cos(a.radians))),
                max(0.0, h / 2.0 - reach * abs(math.sin(a.radians))),
            )
            for m, a in zip(angular_labels, angles)
        ]
        radius = self.calculate_plot_radius(constraints, angular_sizes)
        logger.info("Polar plot radius %.2f", radius)

        n = len(radial_labels)
        radial_sizes = [m.measure(radius, radius / n) for m in radial_labels]

        reach = radius + self.angular_label_gap
        size = self.calculate_plot_size(reach, angular_sizes)
        cx, cy = size.width / 2.0, size.height / 2.0

        angular_places = []
        for a, s in zip(angles, angular_sizes):
            nominal = (cx + reach * math.cos(a.radians), cy + reach * math.sin(a.radians))
            p = offset_add(nominal, label_anchor_offset(a, s))
            angular_places.append(Placement(int(p[0]), int(p[1])))

        radial_places = []
        for tick, s in zip(self.radial_model.tick_values, radial_sizes):
            r = self.radial_model.compute_offset(tick) * radius
            radial_places.append(Placement(int(cx + self.radial_label_gap), int((size.height - s.height) / 2.0 - r)))

        corner = Placement(round(cx - radius), round(cy - radius))
        return PolarLayout(
            plot_radius=radius,
            size=LayoutSize(float(round(size.width)), float(round(size.height))),
            grid=corner,
            content=corner,
            angular_label_sizes=angular_sizes,
            angular_labels=angular_places,
            radial_label_sizes=radial_sizes,
            radial_labels=radial_places,
        )
