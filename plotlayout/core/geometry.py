# plotlayout/core/geometry.py
"""
Geometry helpers: angular values with explicit units, polar/cartesian conversion,
y-to-angle inversion on a circle, bounding extents of label boxes, and the
monotonic maximizer used by the diameter and radius searches.

Coordinates are screen coordinates: x to the right, y down, 0 degrees pointing
right and angles increasing clockwise.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable

from shapely.geometry import Polygon, box
from shapely.ops import unary_union

from plotlayout.core.config import MAXIMIZE_TOLERANCE
from plotlayout.core.error_codes import INVALID_SEARCH_RANGE, require

logger = logging.getLogger(__name__)

Point = tuple[float, float]

DEG2RAD: float = math.pi / 180.0


class AngleUnit(str, Enum):
    DEGREES = "deg"
    RADIANS = "rad"


@dataclass(frozen=True)
class AngularValue:
    """An angle that always carries its unit. Arithmetic keeps the left operand's unit."""
    value: float
    unit: AngleUnit = AngleUnit.DEGREES

    @property
    def degrees(self) -> float:
        if self.unit is AngleUnit.DEGREES:
            return self.value
        return self.value / DEG2RAD

    @property
    def radians(self) -> float:
        if self.unit is AngleUnit.RADIANS:
            return self.value
        return self.value * DEG2RAD

    def to_degrees(self) -> AngularValue:
        return AngularValue(self.degrees, AngleUnit.DEGREES)

    def to_radians(self) -> AngularValue:
        return AngularValue(self.radians, AngleUnit.RADIANS)

    def _in_my_unit(self, other: AngularValue) -> float:
        return other.degrees if self.unit is AngleUnit.DEGREES else other.radians

    def __add__(self, other: AngularValue) -> AngularValue:
        return AngularValue(self.value + self._in_my_unit(other), self.unit)

    def __sub__(self, other: AngularValue) -> AngularValue:
        return AngularValue(self.value - self._in_my_unit(other), self.unit)

    def __mul__(self, k: float) -> AngularValue:
        return AngularValue(self.value * k, self.unit)

    __rmul__ = __mul__

    def __truediv__(self, k: float) -> AngularValue:
        return AngularValue(self.value / k, self.unit)

    def __neg__(self) -> AngularValue:
        return AngularValue(-self.value, self.unit)


def deg(value: float) -> AngularValue:
    return AngularValue(float(value), AngleUnit.DEGREES)


def rad(value: float) -> AngularValue:
    return AngularValue(float(value), AngleUnit.RADIANS)


def sin(angle: AngularValue) -> float:
    return math.sin(angle.radians)


def cos(angle: AngularValue) -> float:
    return math.cos(angle.radians)


@dataclass(frozen=True)
class PolarCoordinate:
    radius: float
    angle: AngularValue


def normalize_degrees(angle_deg: float) -> float:
    """Map any angle in degrees into [0, 360)."""
    a = math.fmod(angle_deg, 360.0)
    if a < 0:
        a += 360.0
    # fmod(-1e-17) + 360 rounds to 360.0
    return 0.0 if a >= 360.0 else a


def polar_to_cartesian(radius: float, angle: AngularValue) -> Point:
    """(r, theta) -> (x, y) with the pole at the origin."""
    theta = angle.radians
    return (radius * math.cos(theta), radius * math.sin(theta))


def cartesian_to_polar(point: Point) -> PolarCoordinate:
    """(x, y) -> (r, theta); theta in radians within (-pi, pi]."""
    x, y = point
    return PolarCoordinate(math.hypot(x, y), rad(math.atan2(y, x)))


def y_to_theta(y: float, radius: float) -> tuple[float, float]:
    """
    The two angles (radians) at which a circle of the given radius reaches y.
    Both are NaN when |y| > radius.
    """
    if radius == 0:
        return (math.nan, math.nan)
    ratio = y / radius
    if ratio < -1.0 or ratio > 1.0:
        return (math.nan, math.nan)
    theta = math.asin(ratio)
    return (theta, math.pi - theta)


def circumscribed_square_size(diameter: float) -> float:
    """Edge length of the square inscribed in a circle of the given diameter."""
    return diameter / math.sqrt(2.0)


def offset_add(a: Point, b: Point) -> Point:
    return (a[0] + b[0], a[1] + b[1])


def offset_sub(a: Point, b: Point) -> Point:
    return (a[0] - b[0], a[1] - b[1])


def label_box(position: Point, size: tuple[float, float]) -> Polygon:
    """Axis-aligned box for a label whose top-left corner is at position."""
    x, y = position
    w, h = size
    return box(x, y, x + w, y + h)


def bounding_extents(
    boxes: Iterable[Polygon],
    radius: float,
) -> tuple[float, float, float, float]:
    """
    Return (minx, miny, maxx, maxy) covering a circle of the given radius
    centered at the origin together with all boxes.
    """
    parts = [box(-radius, -radius, radius, radius)]
    parts.extend(b for b in boxes if b is not None and not b.is_empty)
    if len(parts) == 1:
        return (-radius, -radius, radius, radius)
    b = unary_union(parts).bounds
    return (b[0], b[1], b[2], b[3])


def _converged(lo: float, hi: float, tolerance: float) -> bool:
    span = abs(hi - lo)
    if lo == 0:
        return span < tolerance
    return span / abs(lo) < tolerance


def maximize(
    min_value: float,
    max_value: float,
    predicate: Callable[[float], bool],
    tolerance: float = MAXIMIZE_TOLERANCE,
) -> float:
    """
    Find the largest value in [min_value, max_value], to within tolerance, for
    which predicate returns True. predicate must be monotonic (True up to some
    threshold, False above it) and predicate(min_value) is assumed True.

    max_value may be +inf: the probe doubles until a failing probe bounds the
    interval, then bisects. Convergence is relative to |min| when min != 0 and
    absolute when min == 0.
    """
    require(math.isfinite(min_value), INVALID_SEARCH_RANGE, f"min={min_value}")
    require(not math.isnan(max_value), INVALID_SEARCH_RANGE, "max is NaN")
    require(min_value <= max_value, INVALID_SEARCH_RANGE, f"min={min_value} > max={max_value}")
    require(tolerance > 0, INVALID_SEARCH_RANGE, f"tolerance={tolerance}")

    lo, hi = float(min_value), float(max_value)
    while not _converged(lo, hi, tolerance):
        if math.isinf(hi):
            test = 1.0 if lo <= 0 else lo * 2.0
            if math.isinf(test):
                logger.warning("maximize: unbounded predicate, stopping at %g", lo)
                break
        else:
            test = lo + (hi - lo) / 2.0
        if predicate(test):
            lo = test
        else:
            hi = test
    return lo
