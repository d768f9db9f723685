# tests/test_text_metrics.py
"""Label measurement: Pillow text sizes and clamping to the offered box."""

from __future__ import annotations

from plotlayout.core.text_metrics import FixedSizeLabel, TextLabel, measure_text_px
from plotlayout.core.types import LabelSize


def test_measure_text_is_positive_and_stable() -> None:
    w1, h1 = measure_text_px("Revenue", "DejaVu Sans", 12.0)
    w2, h2 = measure_text_px("Revenue", "DejaVu Sans", 12.0)
    assert w1 > 0 and h1 > 0
    assert (w1, h1) == (w2, h2)


def test_longer_text_is_wider() -> None:
    short = TextLabel("Q1").natural_size()
    long = TextLabel("Q1 operating expenses").natural_size()
    assert long.width > short.width


def test_multiline_text_is_taller() -> None:
    one = TextLabel("North").natural_size()
    two = TextLabel("North\nAmerica").natural_size()
    assert two.height > one.height


def test_text_label_clamps_to_box() -> None:
    label = TextLabel("A fairly long slice label")
    natural = label.natural_size()
    clamped = label.measure(10.0, 5.0)
    assert clamped.width <= 10.0 and clamped.height <= 5.0
    assert label.measure(1e6, 1e6) == natural


def test_fixed_size_label() -> None:
    label = FixedSizeLabel(40, 12)
    assert label.measure(100, 100) == LabelSize(40, 12)
    assert label.measure(25, 100) == LabelSize(25, 12)
    assert label.measure(-5, 100).width == 0.0
