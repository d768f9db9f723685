# plotlayout/core/config.py
"""
Central configuration for circular plot layout and gesture handling.
All tunable values live here; no magic numbers in other modules.
"""

from __future__ import annotations

import logging
import os

# ----- Pie geometry -----
DEFAULT_LABEL_SPACING: float = 1.1
"""Label circle diameter relative to the pie diameter. Values of 1.05 to 1.4 work well."""

INIT_OUTER_RADIUS: float = 0.95
"""Outer radius of the drawn slices as a fraction of the measured pie size (room for hover expansion)."""

DEFAULT_INTERNAL_LABEL_RADIUS: float = 0.7
"""Radial position of internal labels relative to the slice outer radius."""

DEFAULT_MIN_PIE_DIAMETER: float = 100.0
DEFAULT_MAX_PIE_DIAMETER: float = 300.0

PIE_START_ANGLE_DEG: float = -90.0
"""First slice starts at the top of the pie; angles grow clockwise."""

DEGREES_FULL_CIRCLE: float = 360.0

# ----- Numerical search -----
MAXIMIZE_TOLERANCE: float = 0.01
"""Default relative tolerance for maximize()."""

DIAMETER_SEARCH_TOLERANCE: float = 1e-4
"""Tolerance for the pie diameter and polar radius searches."""

# ----- Polar graph -----
POLAR_ANGULAR_LABEL_GAP: float = 8.0
"""Distance (px) between the outermost grid circle and the angular axis labels."""

POLAR_RADIAL_LABEL_GAP: float = 8.0
"""Distance (px) between the radial axis labels and the axis line."""

POLAR_DEFAULT_ANGULAR_TICKS: int = 8

# ----- Gestures -----
MIN_TOUCHES_DISTANCE_PX: float = 48.0
"""Touches closer than this on the zoom axis do not produce a zoom (avoids huge ratios)."""

VELOCITY_TRACKER_HORIZON_MS: float = 100.0
"""Only samples this recent are used when estimating release velocity."""

VELOCITY_TRACKER_MIN_SAMPLES: int = 3

VELOCITY_TRACKER_ASSUME_STOPPED_MS: float = 40.0
"""A gap this long between samples means the pointer stopped before release."""

# ----- Fling -----
MIN_FLING_MOVEMENT_THRESHOLD: float = 0.5
"""Fling ticks that move less than this (px) are not reported."""

FLING_FRICTION_MULTIPLIER: float = 1.0
FLING_ABS_VELOCITY_THRESHOLD: float = 0.1
"""Fling stops once speed (px/s) decays below this."""

FLING_FRAME_INTERVAL_MS: float = 16.0

# ----- Rendering (debug output) -----
RENDER_WIDTH_PX: int = 800
RENDER_HEIGHT_PX: int = 600
DEFAULT_FONT_FAMILY: str = "DejaVu Sans"

# ----- Logging / debug flags -----
LOG_LEVEL: str = os.environ.get("PLOTLAYOUT_LOG_LEVEL", "WARNING").upper()

LAYOUT_DEBUG: bool = os.environ.get("PLOTLAYOUT_LAYOUT_DEBUG", "").lower() in ("1", "true", "yes")
"""Log every diameter probe. Set env PLOTLAYOUT_LAYOUT_DEBUG=1 to enable."""


def configure_logging(level: str | None = None) -> None:
    """basicConfig for scripts and hosts; library modules only create loggers."""
    name = (level or LOG_LEVEL).upper()
    logging.basicConfig(level=getattr(logging, name, logging.WARNING))
