# pointlabel/core/text_metrics.py
"""
Measure label boxes in pixels using Pillow.
Width comes from the font's text bbox; height is the font size, the same
em-based estimate the chart layer uses when it lays text out.
Font files are resolved through matplotlib's font manager, which ships
DejaVu Sans, so measuring and rendering use the same face.
"""

from __future__ import annotations

import math
import warnings
from functools import lru_cache

from matplotlib import font_manager
from PIL import Image, ImageDraw, ImageFont

from pointlabel.core.config import DEFAULT_FONT_FAMILY, DEFAULT_FONT_SIZE_PX
from pointlabel.core.types import Anchor


@lru_cache(maxsize=32)
def _load_font(font_family: str, font_size_px: int) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
    """TrueType face for font_family at font_size_px; Pillow's default font if it cannot be opened."""
    path = font_manager.findfont(font_manager.FontProperties(family=font_family), fallback_to_default=True)
    try:
        return ImageFont.truetype(path, size=font_size_px)
    except OSError:
        warnings.warn(f"Cannot open font {font_family!r} ({path}); measuring with Pillow default.", UserWarning)
        return ImageFont.load_default()


def measure_label(
    text: str,
    font_family: str = DEFAULT_FONT_FAMILY,
    font_size_px: float = DEFAULT_FONT_SIZE_PX,
) -> tuple[float, float]:
    """Return (width_px, height_px) for text; empty text measures (0, font size)."""
    height = float(font_size_px)
    if not text:
        return (0.0, height)
    size = max(1, int(round(font_size_px)))
    font = _load_font(font_family, size)
    draw = ImageDraw.Draw(Image.new("RGB", (1, 1)))
    left, _, right, _ = draw.textbbox((0, 0), text, font=font)
    width = float(right - left)
    # bitmap fallback fonts ignore the requested size
    size_used = getattr(font, "size", size)
    if size_used and size_used != size:
        width *= size / float(size_used)
    return (math.ceil(width * 100.0) / 100.0, height)


def anchor_from_text(
    x: float,
    y: float,
    text: str,
    font_family: str = DEFAULT_FONT_FAMILY,
    font_size_px: float = DEFAULT_FONT_SIZE_PX,
    fill_color: str | None = None,
) -> Anchor:
    """Anchor at (x, y) with its label box measured from text."""
    width, height = measure_label(text, font_family, font_size_px)
    return Anchor(x=float(x), y=float(y), text=text, width=width, height=height, fill_color=fill_color)
