# plotlayout/core/connectors.py
"""
Label connector strategies. A connector turns a ConnectorContext (endpoints and
attachment angles in connector-local coordinates) into a ConnectorPath that a
rendering backend can stroke.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal, Protocol

from plotlayout.core.geometry import AngularValue, Point, offset_add, polar_to_cartesian
from plotlayout.core.types import ConnectorGeometry

PathOp = Literal["move", "line", "cubic"]


@dataclass(frozen=True)
class ConnectorContext:
    start_position: Point
    end_position: Point
    start_angle: AngularValue
    end_angle: AngularValue

    @classmethod
    def from_geometry(cls, g: ConnectorGeometry) -> ConnectorContext:
        return cls(g.start_position, g.end_position, g.start_angle, g.end_angle)

    @property
    def length(self) -> float:
        return math.hypot(
            self.start_position[0] - self.end_position[0],
            self.start_position[1] - self.end_position[1],
        )


@dataclass(frozen=True)
class PathSegment:
    op: PathOp
    points: tuple[Point, ...]


@dataclass(frozen=True)
class ConnectorPath:
    segments: tuple[PathSegment, ...]

    def vertices(self) -> list[Point]:
        return [p for s in self.segments for p in s.points]


class LabelConnector(Protocol):
    def render(self, context: ConnectorContext) -> ConnectorPath: ...


class StraightLineConnector:
    def render(self, context: ConnectorContext) -> ConnectorPath:
        return ConnectorPath((
            PathSegment("move", (context.start_position,)),
            PathSegment("line", (context.end_position,)),
        ))


class BezierLabelConnector:
    """
    Cubic curve leaving the slice along start_angle and entering the label
    along end_angle; both control points sit half the chord length out.
    """

    def render(self, context: ConnectorContext) -> ConnectorPath:
        half = context.length / 2.0
        cp1 = offset_add(context.start_position, polar_to_cartesian(half, context.start_angle))
        cp2 = offset_add(context.end_position, polar_to_cartesian(half, context.end_angle))
        return ConnectorPath((
            PathSegment("move", (context.start_position,)),
            PathSegment("cubic", (cp1, cp2, context.end_position)),
        ))
