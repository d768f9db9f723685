# plotlayout/core/label_position.py
"""
Pie slice label positioning.

CircularLabelPositionProvider places labels around the outside of the pie on a
circle of diameter pie_diameter * label_spacing, stacking them vertically per
quadrant so labels in the same half never overlap. Internal placement puts a
label inside its slice when all four of its corners fit strictly inside the
slice's ring sector.

All positions are top-left corners in a frame centered on the pie center,
x to the right, y down.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, Sequence, Union

from plotlayout.core.config import DEFAULT_INTERNAL_LABEL_RADIUS, DEFAULT_LABEL_SPACING
from plotlayout.core.error_codes import (
    INVALID_RADIUS,
    LABEL_SPACING_TOO_SMALL,
    LENGTH_MISMATCH,
    require,
)
from plotlayout.core.geometry import (
    AngularValue,
    PolarCoordinate,
    Point,
    cartesian_to_polar,
    cos,
    deg,
    normalize_degrees,
    polar_to_cartesian,
    sin,
    y_to_theta,
)
from plotlayout.core.types import LabelSize, PieSliceData

logger = logging.getLogger(__name__)


class Quadrant(Enum):
    """Angular range (degrees, clockwise from 3 o'clock) of each quadrant, both ends inclusive."""
    NORTH_EAST = (-90.0, 0.0)
    SOUTH_EAST = (0.0, 90.0)
    SOUTH_WEST = (90.0, 180.0)
    NORTH_WEST = (180.0, 270.0)

    @classmethod
    def from_angle(cls, angle: AngularValue | float) -> Quadrant:
        """
        First quadrant, in declaration order, whose range contains the angle.
        Angles are first wrapped into (-90, 270], so -90 is read as 270. Shared
        boundaries resolve to the earlier quadrant: 0 -> NE, 90 -> SE,
        180 -> SW, 270 -> NW, -90 -> NW.
        """
        a = angle.degrees if isinstance(angle, AngularValue) else float(angle)
        a = 270.0 - normalize_degrees(270.0 - a)
        for q in cls:
            lo, hi = q.value
            if lo <= a <= hi:
                return q
        raise ValueError(f"No quadrant for angle {a!r}")

    @property
    def is_west(self) -> bool:
        return self in (Quadrant.NORTH_WEST, Quadrant.SOUTH_WEST)

    @property
    def is_south(self) -> bool:
        return self in (Quadrant.SOUTH_WEST, Quadrant.SOUTH_EAST)

    @property
    def is_north(self) -> bool:
        return self in (Quadrant.NORTH_WEST, Quadrant.NORTH_EAST)


# ----- Placement strategy -----


class PieLabelPlacement:
    """Where pie labels may go: outside the pie, inside slices, or inside with external fallback."""


@dataclass(frozen=True)
class External(PieLabelPlacement):
    pass


@dataclass(frozen=True)
class Internal(PieLabelPlacement):
    """Inside the slice only; labels that do not fit are not shown. radius is relative to the outer radius."""
    radius: float = DEFAULT_INTERNAL_LABEL_RADIUS

    def __post_init__(self) -> None:
        require(0.0 < self.radius < 1.0, INVALID_RADIUS, f"radius={self.radius}")


@dataclass(frozen=True)
class InternalOrExternal(PieLabelPlacement):
    """Inside the slice when the label fits, otherwise outside."""
    radius: float = DEFAULT_INTERNAL_LABEL_RADIUS

    def __post_init__(self) -> None:
        require(0.0 < self.radius < 1.0, INVALID_RADIUS, f"radius={self.radius}")


EXTERNAL = External()


# ----- Positions -----


@dataclass(frozen=True)
class ExternalLabelPosition:
    """
    A label outside the pie. anchor_point is where a connector attaches, and
    anchor_angle is the direction (clockwise from 3 o'clock) in which the
    connector leaves the label toward the pie.
    """
    position: Point
    anchor_point: Point
    anchor_angle: AngularValue


@dataclass(frozen=True)
class InternalLabelPosition:
    position: Point


@dataclass(frozen=True)
class NoLabelPosition:
    """The label is not positioned and should not be shown."""


NO_LABEL = NoLabelPosition()

LabelPosition = Union[ExternalLabelPosition, InternalLabelPosition, NoLabelPosition]


def position_or_none(label_position: LabelPosition) -> Point | None:
    if isinstance(label_position, (ExternalLabelPosition, InternalLabelPosition)):
        return label_position.position
    return None


class LabelPositionProvider(Protocol):
    """
    Computes one LabelPosition per slice, in input order. Called repeatedly
    during the diameter search, so implementations must not keep state
    between calls.
    """

    def compute_label_positions(
        self,
        pie_diameter: float,
        hole_size: float,
        label_sizes: Sequence[LabelSize],
        slices: Sequence[PieSliceData],
    ) -> list[LabelPosition]: ...


@dataclass(frozen=True)
class _SliceLabel:
    index: int
    slice: PieSliceData
    size: LabelSize
    center_angle: AngularValue


@dataclass
class _YState:
    last: float
    max: float


class CircularLabelPositionProvider:
    """
    Places labels circularly around the outer perimeter of the pie and adjusts
    them vertically so adjacent labels do not overlap.

    label_spacing: distance from the pie center at which external labels sit,
    relative to the pie diameter (1 is the pie edge). 1.05 to 1.4 work well.
    """

    def __init__(
        self,
        label_spacing: float = DEFAULT_LABEL_SPACING,
        label_placement: PieLabelPlacement = EXTERNAL,
    ) -> None:
        require(label_spacing > 1.0, LABEL_SPACING_TOO_SMALL, f"labelSpacing={label_spacing}")
        self.label_spacing = label_spacing
        self.label_placement = label_placement

    def compute_label_positions(
        self,
        pie_diameter: float,
        hole_size: float,
        label_sizes: Sequence[LabelSize],
        slices: Sequence[PieSliceData],
    ) -> list[LabelPosition]:
        require(
            len(label_sizes) == len(slices),
            LENGTH_MISMATCH,
            f"{len(label_sizes)} labels, {len(slices)} slices",
        )
        groups = self._group_labels(label_sizes, slices)
        out: dict[int, LabelPosition] = {}

        # last: y the next external label may not cross; max: lowest bottom seen in the north pass
        y = _YState(math.inf, -math.inf)
        for item in reversed(groups[Quadrant.NORTH_EAST]):
            out[item.index] = self._compute_in_quadrant(pie_diameter, hole_size, item, Quadrant.NORTH_EAST, y)

        y.last = y.max
        for item in groups[Quadrant.SOUTH_EAST]:
            out[item.index] = self._compute_in_quadrant(pie_diameter, hole_size, item, Quadrant.SOUTH_EAST, y)

        y.last, y.max = math.inf, -math.inf
        for item in groups[Quadrant.NORTH_WEST]:
            out[item.index] = self._compute_in_quadrant(pie_diameter, hole_size, item, Quadrant.NORTH_WEST, y)

        y.last = y.max
        for item in reversed(groups[Quadrant.SOUTH_WEST]):
            out[item.index] = self._compute_in_quadrant(pie_diameter, hole_size, item, Quadrant.SOUTH_WEST, y)

        return [out[i] for i in range(len(slices))]

    def _group_labels(
        self,
        label_sizes: Sequence[LabelSize],
        slices: Sequence[PieSliceData],
    ) -> dict[Quadrant, list[_SliceLabel]]:
        groups: dict[Quadrant, list[_SliceLabel]] = {q: [] for q in Quadrant}
        for index, (size, s) in enumerate(zip(label_sizes, slices)):
            center = s.center_angle
            quadrant = Quadrant.from_angle(center)
            groups[quadrant].append(_SliceLabel(index, s, size, center))
        logger.debug(
            "Label quadrants: %s",
            {q.name: [item.index for item in items] for q, items in groups.items()},
        )
        return groups

    def _compute_in_quadrant(
        self,
        pie_diameter: float,
        hole_size: float,
        item: _SliceLabel,
        quadrant: Quadrant,
        y: _YState,
    ) -> LabelPosition:
        placement = self.label_placement
        if not isinstance(placement, External):
            internal = self._compute_internal(pie_diameter, hole_size, item)
            if internal is not NO_LABEL or not isinstance(placement, InternalOrExternal):
                return internal

        pos = self._compute_external(pie_diameter, item, quadrant, y.last)
        if quadrant.is_north:
            y.last = pos.position[1]
            y.max = max(y.max, pos.position[1] + item.size.height)
        else:
            y.last = pos.position[1] + item.size.height
        return pos

    def _compute_external(
        self,
        pie_diameter: float,
        item: _SliceLabel,
        quadrant: Quadrant,
        last_y: float,
    ) -> ExternalLabelPosition:
        """
        Top-left and connector anchor of an external label. last_y is the
        y-coordinate of the previous label in this half that this label may
        not cross.
        """
        angle = item.center_angle
        w, h = item.size.width, item.size.height
        r = pie_diameter * self.label_spacing / 2.0
        west = quadrant.is_west

        natural_top = r * sin(angle) - h / 2.0
        if quadrant.is_south:
            top = max(natural_top, last_y)
        else:
            top = min(natural_top, last_y - h)
        bottom = top + h

        # closest x to the pie center the label may take without crossing the label circle
        x_limit = r * cos(angle)
        x = _clear_circle_x(r, top, bottom, x_limit, west)

        position = (x - w, top) if west else (x, top)
        anchor = (position[0] + (w if west else 0.0), position[1] + h / 2.0)
        return ExternalLabelPosition(position, anchor, deg(0.0) if west else deg(180.0))

    def _compute_internal(
        self,
        pie_diameter: float,
        hole_size: float,
        item: _SliceLabel,
    ) -> LabelPosition:
        placement = self.label_placement
        if not isinstance(placement, (Internal, InternalOrExternal)):
            return NO_LABEL

        s = item.slice
        inner = pie_diameter / 2.0 * hole_size
        outer = pie_diameter / 2.0
        cx, cy = polar_to_cartesian(outer * placement.radius, s.start_angle + deg(s.angle.degrees / 2.0))
        hw, hh = item.size.width / 2.0, item.size.height / 2.0

        corners = [
            (cx - hw, cy - hh),
            (cx + hw, cy - hh),
            (cx - hw, cy + hh),
            (cx + hw, cy + hh),
        ]
        if all(_in_slice(inner, outer, s, cartesian_to_polar(c)) for c in corners):
            return InternalLabelPosition((cx - hw, cy - hh))
        return NO_LABEL


def _clear_circle_x(r: float, top: float, bottom: float, x_limit: float, west: bool) -> float:
    """
    Invert the label circle at the label's top and bottom y. West labels take
    the smallest candidate x, east labels the largest. A y outside the circle
    gives no candidate.
    """
    candidates: list[float] = []
    for yy in (top, bottom):
        t1, t2 = y_to_theta(yy, r)
        if math.isnan(t1):
            continue
        xs = (math.cos(t1), math.cos(t2))
        candidates.append(r * (min(xs) if west else max(xs)))
    if not candidates:
        return x_limit
    if west:
        return min(min(candidates), x_limit)
    return max(max(candidates), x_limit)


def _in_slice(inner: float, outer: float, s: PieSliceData, pt: PolarCoordinate) -> bool:
    """Point strictly inside the ring radii and within [start, start + angle) with wraparound."""
    start = normalize_degrees(s.start_angle.degrees)
    end = start + s.angle.degrees
    a = pt.angle.degrees
    while a < start:
        a += 360.0
    return a < end and inner < pt.radius < outer
