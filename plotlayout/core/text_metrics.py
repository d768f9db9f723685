# plotlayout/core/text_metrics.py
"""
Measure label text with Pillow. Sizes are in px at 72 DPI (1 pt = 1 px).
TextLabel is the default measurement collaborator for layout passes.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass
from functools import lru_cache

from PIL import Image, ImageDraw, ImageFont

from plotlayout.core.config import DEFAULT_FONT_FAMILY
from plotlayout.core.types import LabelSize

_font_warning_emitted: set[str] = set()


@lru_cache(maxsize=32)
def _load_font(font_family: str, font_size_pt: float):
    """Load a PIL ImageFont; fall back with a warning if the font is not found."""
    size = max(1, int(round(font_size_pt)))
    candidates = [
        font_family + ".ttf",
        font_family.replace(" ", "") + ".ttf",
        "DejaVuSans.ttf",
        "arial.ttf",
        "Arial.ttf",
    ]
    for name in candidates:
        try:
            return ImageFont.truetype(name, size=size)
        except OSError:
            continue
    if font_family not in _font_warning_emitted:
        _font_warning_emitted.add(font_family)
        warnings.warn(f"Font not found: {font_family!r}; using default.", UserWarning)
    return ImageFont.load_default()


@lru_cache(maxsize=1024)
def measure_text_px(text: str, font_family: str, font_size_pt: float) -> tuple[float, float]:
    """Return (width, height) of the rendered text. Cached, so stable within a pass."""
    font = _load_font(font_family, font_size_pt)
    draw = ImageDraw.Draw(Image.new("RGB", (1, 1)))
    lines = text.split("\n")
    width = 0.0
    height = 0.0
    for line in lines:
        bbox = draw.textbbox((0, 0), line or " ", font=font)
        width = max(width, float(bbox[2] - bbox[0]) if line else 0.0)
        height += float(bbox[3] - bbox[1])
    size_used = float(getattr(font, "size", font_size_pt) or font_size_pt)
    scale = font_size_pt / max(1.0, size_used)
    return (width * scale, height * scale)


@dataclass(frozen=True)
class TextLabel:
    """A text label; measure() clamps its natural size to the offered box."""
    text: str
    font_family: str = DEFAULT_FONT_FAMILY
    font_size_pt: float = 12.0

    def natural_size(self) -> LabelSize:
        w, h = measure_text_px(self.text, self.font_family, self.font_size_pt)
        return LabelSize(w, h)

    def measure(self, max_width: float, max_height: float) -> LabelSize:
        n = self.natural_size()
        return LabelSize(max(0.0, min(n.width, max_width)), max(0.0, min(n.height, max_height)))


@dataclass(frozen=True)
class FixedSizeLabel:
    """Label with a known size, for hosts that measure text themselves."""
    width: float
    height: float

    def measure(self, max_width: float, max_height: float) -> LabelSize:
        return LabelSize(max(0.0, min(self.width, max_width)), max(0.0, min(self.height, max_height)))
