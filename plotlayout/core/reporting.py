# plotlayout/core/reporting.py
"""
Serialize computed layouts to plain dicts / layout.json for inspection and
regression fixtures.
"""

from __future__ import annotations

import json
from pathlib import Path

from plotlayout.core.config import (
    DEFAULT_LABEL_SPACING,
    DIAMETER_SEARCH_TOLERANCE,
)
from plotlayout.core.label_position import (
    ExternalLabelPosition,
    InternalLabelPosition,
    LabelPosition,
)
from plotlayout.core.pie_layout import PieLayout
from plotlayout.core.polar_layout import PolarLayout
from plotlayout.core.types import Placement


def _xy(p: tuple[float, float]) -> dict:
    return {"x": float(p[0]), "y": float(p[1])}


def _placement(p: Placement | None) -> dict | None:
    return None if p is None else {"x": p.x, "y": p.y}


def label_position_to_dict(pos: LabelPosition) -> dict:
    if isinstance(pos, ExternalLabelPosition):
        return {
            "kind": "external",
            "position": _xy(pos.position),
            "anchor_point": _xy(pos.anchor_point),
            "anchor_angle_deg": pos.anchor_angle.degrees,
        }
    if isinstance(pos, InternalLabelPosition):
        return {"kind": "internal", "position": _xy(pos.position)}
    return {"kind": "none"}


def pie_layout_to_dict(layout: PieLayout) -> dict:
    """Structure for layout.json (pie)."""
    p = layout.placements
    return {
        "kind": "pie",
        "diameter": layout.diameter,
        "size": {"width": layout.size.width, "height": layout.size.height},
        "hole": {
            "diameter": layout.hole_diameter,
            "padding": layout.hole_padding,
            "placement": _placement(p.hole),
        },
        "pie_placement": _placement(p.pie),
        "slices": [
            {
                "start_angle_deg": s.start_angle.degrees,
                "angle_deg": s.angle.degrees,
                "label_size": {"width": size.width, "height": size.height},
                "label": label_position_to_dict(pos),
                "label_placement": _placement(lp),
                "connector": None if c is None else {
                    "start": _xy(c.start_position),
                    "end": _xy(c.end_position),
                    "start_angle_deg": c.start_angle.degrees,
                    "end_angle_deg": c.end_angle.degrees,
                    "placement": _placement(cp),
                },
            }
            for s, size, pos, lp, c, cp in zip(
                layout.slices,
                layout.label_sizes,
                layout.label_positions,
                p.labels,
                layout.connectors,
                p.connectors,
            )
        ],
        "warnings": list(layout.warnings),
        "config": {
            "INIT_OUTER_RADIUS": layout.init_outer_radius,
            "DEFAULT_LABEL_SPACING": DEFAULT_LABEL_SPACING,
            "DIAMETER_SEARCH_TOLERANCE": DIAMETER_SEARCH_TOLERANCE,
        },
    }


def polar_layout_to_dict(layout: PolarLayout) -> dict:
    """Structure for layout.json (polar)."""
    return {
        "kind": "polar",
        "plot_radius": layout.plot_radius,
        "size": {"width": layout.size.width, "height": layout.size.height},
        "grid_placement": _placement(layout.grid),
        "angular_labels": [
            {"width": s.width, "height": s.height, "placement": _placement(p)}
            for s, p in zip(layout.angular_label_sizes, layout.angular_labels)
        ],
        "radial_labels": [
            {"width": s.width, "height": s.height, "placement": _placement(p)}
            for s, p in zip(layout.radial_label_sizes, layout.radial_labels)
        ],
    }


def write_layout_json(path: str | Path, layout: PieLayout | PolarLayout) -> Path:
    """Write layout.json. Creates parent directories. Returns the path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(layout, PieLayout):
        data = pie_layout_to_dict(layout)
    else:
        data = polar_layout_to_dict(layout)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path
