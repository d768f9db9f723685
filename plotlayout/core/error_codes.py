"""
Structured error codes for layout and gesture precondition failures.
Raise through require(); map keys to messages with user_message().
"""

from __future__ import annotations

HOLE_SIZE_OUT_OF_RANGE = "hole_size_out_of_range"
MAX_DIAMETER_UNSPECIFIED = "max_diameter_unspecified"
MIN_DIAMETER_NEGATIVE = "min_diameter_negative"
LABEL_SPACING_TOO_SMALL = "label_spacing_too_small"
LENGTH_MISMATCH = "length_mismatch"
INVALID_RADIUS = "invalid_radius"
INVALID_EXTEND_ANGLE = "invalid_extend_angle"
INVALID_SEARCH_RANGE = "invalid_search_range"
ZOOM_FACTOR_UNSPECIFIED = "zoom_factor_unspecified"
TOO_FEW_TICKS = "too_few_ticks"
UNKNOWN_CATEGORY = "unknown_category"
NEGATIVE_GAP = "negative_gap"

USER_MESSAGES: dict[str, str] = {
    HOLE_SIZE_OUT_OF_RANGE: "holeSize must be between 0 and 1.",
    MAX_DIAMETER_UNSPECIFIED: "maxPieDiameter cannot be unspecified; use infinity for no limit.",
    MIN_DIAMETER_NEGATIVE: "minPieDiameter must not be negative.",
    LABEL_SPACING_TOO_SMALL: "labelSpacing must be greater than 1.",
    LENGTH_MISMATCH: "Labels and slices must have the same length.",
    INVALID_RADIUS: "Internal label radius must be between 0 and 1, exclusive.",
    INVALID_EXTEND_ANGLE: "pieExtendAngle must be between 0 and 360, exclusive of 0.",
    INVALID_SEARCH_RANGE: "Search range is invalid: min must be finite and not greater than max.",
    ZOOM_FACTOR_UNSPECIFIED: "ZoomFactor is unspecified.",
    TOO_FEW_TICKS: "tickValues must have at least 2 values.",
    UNKNOWN_CATEGORY: "The provided category is not a valid value for this axis.",
    NEGATIVE_GAP: "Label gaps must not be negative.",
}


class LayoutPreconditionError(ValueError):
    """Invalid configuration passed at a call boundary. Never clamped."""

    def __init__(self, error_key: str, detail: str | None = None) -> None:
        self.error_key = error_key
        message = user_message(error_key)
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


def user_message(error_key: str | None, fallback: str = "Invalid layout configuration.") -> str:
    """Return a readable message for the given error key."""
    if not error_key:
        return fallback
    return USER_MESSAGES.get(error_key, fallback)


def require(condition: bool, error_key: str, detail: str | None = None) -> None:
    """Raise LayoutPreconditionError(error_key) unless condition holds."""
    if not condition:
        raise LayoutPreconditionError(error_key, detail)
