# plotlayout/core/render.py
"""
Matplotlib debug PNG of a computed pie layout: slices, hole, label boxes and
connectors drawn at their final placements. A developer aid for checking the
layout, not a chart renderer.
"""

from __future__ import annotations

from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
from matplotlib.patches import Circle, PathPatch, Rectangle, Wedge
from matplotlib.path import Path as MplPath

from plotlayout.core.config import RENDER_HEIGHT_PX, RENDER_WIDTH_PX
from plotlayout.core.connectors import (
    ConnectorContext,
    ConnectorPath,
    LabelConnector,
    StraightLineConnector,
)
from plotlayout.core.geometry import offset_add
from plotlayout.core.pie_layout import PieLayout

_MPL_CODES = {"move": [MplPath.MOVETO], "line": [MplPath.LINETO], "cubic": [MplPath.CURVE4] * 3}


def connector_to_mpl_path(path: ConnectorPath, translation: tuple[float, float] = (0.0, 0.0)) -> MplPath:
    verts = []
    codes = []
    for seg in path.segments:
        verts.extend(offset_add(p, translation) for p in seg.points)
        codes.extend(_MPL_CODES[seg.op])
    return MplPath(verts, codes)


def _new_fig(width_px: int, height_px: int) -> tuple[plt.Figure, plt.Axes]:
    fig = plt.figure(figsize=(width_px / 100.0, height_px / 100.0), dpi=100)
    ax = fig.add_axes([0, 0, 1, 1])
    ax.axis("off")
    return fig, ax


def render_pie_debug(
    layout: PieLayout,
    output_path: str | Path,
    connector: LabelConnector | None = None,
    width_px: int = RENDER_WIDTH_PX,
    height_px: int = RENDER_HEIGHT_PX,
) -> Path:
    """Render the layout in its own pixel frame (y down). Returns the PNG path."""
    connector = connector or StraightLineConnector()
    p = layout.placements
    fig, ax = _new_fig(width_px, height_px)

    ax.add_patch(Rectangle((0, 0), layout.size.width, layout.size.height, fill=False, edgecolor="gray", linestyle=":"))

    r = layout.diameter / 2.0
    center = (p.pie.x + r, p.pie.y + r)
    outer = r * layout.init_outer_radius
    cmap = plt.get_cmap("tab10")
    for i, s in enumerate(layout.slices):
        start = s.start_angle.degrees
        ax.add_patch(
            Wedge(center, outer, start, start + s.angle.degrees, facecolor=cmap(i % 10), edgecolor="white")
        )

    if layout.hole_diameter > 0:
        hr = layout.hole_diameter / 2.0
        ax.add_patch(Circle((p.hole.x + hr, p.hole.y + hr), hr, facecolor="white", edgecolor="navy"))

    for size, placement in zip(layout.label_sizes, p.labels):
        if placement is None:
            continue
        ax.add_patch(Rectangle((placement.x, placement.y), size.width, size.height, fill=False, edgecolor="black"))

    for geometry, placement in zip(layout.connectors, p.connectors):
        if geometry is None or placement is None:
            continue
        path = connector.render(ConnectorContext.from_geometry(geometry))
        mpl_path = connector_to_mpl_path(path, (placement.x, placement.y))
        ax.add_patch(PathPatch(mpl_path, fill=False, edgecolor="black", linewidth=1))

    pad = 5.0
    ax.set_xlim(-pad, layout.size.width + pad)
    ax.set_ylim(layout.size.height + pad, -pad)
    ax.set_aspect("equal", adjustable="box")

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, dpi=100, facecolor="white")
    plt.close(fig)
    return output_path
