# plotlayout/core/types.py
"""
Dataclasses shared by the pie and polar layout passes: slice angular data,
measured label sizes, layout constraints and integer placements.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from plotlayout.core.geometry import AngularValue, Point


@dataclass(frozen=True)
class PieSliceData:
    """Angular extent of one slice. start_angle + angle is the clockwise end."""
    start_angle: AngularValue
    angle: AngularValue

    @property
    def center_angle(self) -> AngularValue:
        return self.start_angle + self.angle / 2.0


@dataclass(frozen=True)
class LabelSize:
    """Measured width/height of a label, in px."""
    width: float
    height: float

    def as_tuple(self) -> tuple[float, float]:
        return (self.width, self.height)


@dataclass(frozen=True)
class Constraints:
    """Upper bound box offered to a layout pass. max_* may be math.inf."""
    max_width: float
    max_height: float
    min_width: float = 0.0
    min_height: float = 0.0


@dataclass(frozen=True)
class Placement:
    """Integer top-left corner relative to the layout origin."""
    x: int
    y: int


@dataclass
class LayoutSize:
    width: float
    height: float


class Measurable(Protocol):
    """Measurement collaborator: natural size of some content within a max box."""

    def measure(self, max_width: float, max_height: float) -> LabelSize: ...


class Placeable(Protocol):
    """Placement collaborator: arranges a measured element's top-left corner."""

    def place(self, x: int, y: int) -> None: ...


@dataclass(frozen=True)
class ConnectorGeometry:
    """
    Connector endpoints in a connector-local frame (top-left at the origin plus
    a half-diameter margin) and the attachment angles at either end.
    """
    start_position: Point
    end_position: Point
    start_angle: AngularValue
    end_angle: AngularValue


@dataclass
class PlacementLog:
    """Collects place() calls; handy as a Placeable in tests and reports."""
    name: str
    calls: list[Placement] = field(default_factory=list)

    def place(self, x: int, y: int) -> None:
        self.calls.append(Placement(int(x), int(y)))

    @property
    def last(self) -> Placement | None:
        return self.calls[-1] if self.calls else None
