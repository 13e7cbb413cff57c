"""
Module: builder.images.placeholder

Purpose:
    The fixed-size stand-in used when an image cannot be loaded: a
    300x200 light grey box with a border and an "Image unavailable" note.

Key Functions:
    - placeholder_image(): New placeholder ResolvedImage

Dependencies:
    - PIL: Image drawing

Used By:
    - builder.images.measurer: Failure substitution
"""

from __future__ import annotations

import logging

from PIL import Image, ImageDraw, ImageFont

from ..layout.models import PLACEHOLDER_HEIGHT, PLACEHOLDER_WIDTH, ResolvedImage

logger = logging.getLogger(__name__)

BACKGROUND_COLOR = "#f3f4f6"
BORDER_COLOR = "#d1d5db"
TEXT_COLOR = "#6b7280"
PLACEHOLDER_TEXT = "Image unavailable"


def placeholder_image() -> ResolvedImage:
    """
    Build a placeholder image.

    A fresh image per call; ResolvedImage is immutable but PIL images
    are not, and the renderer may convert them.
    """
    img = Image.new("RGB", (PLACEHOLDER_WIDTH, PLACEHOLDER_HEIGHT), BACKGROUND_COLOR)
    draw = ImageDraw.Draw(img)
    draw.rectangle(
        (0, 0, PLACEHOLDER_WIDTH - 1, PLACEHOLDER_HEIGHT - 1),
        outline=BORDER_COLOR,
        width=2,
    )

    font = _load_font(16)
    text_bbox = draw.textbbox((0, 0), PLACEHOLDER_TEXT, font=font)
    text_x = (PLACEHOLDER_WIDTH - (text_bbox[2] - text_bbox[0])) // 2
    text_y = (PLACEHOLDER_HEIGHT - (text_bbox[3] - text_bbox[1])) // 2
    draw.text((text_x, text_y), PLACEHOLDER_TEXT, fill=TEXT_COLOR, font=font)

    return ResolvedImage(
        pixel_data=img,
        width=PLACEHOLDER_WIDTH,
        height=PLACEHOLDER_HEIGHT,
        is_placeholder=True,
    )


def _load_font(size: int):
    """TrueType font if one is installed, Pillow's default otherwise."""
    for font_name in ("DejaVuSans.ttf", "arial.ttf", "Arial.ttf"):
        try:
            return ImageFont.truetype(font_name, size)
        except (IOError, OSError):
            continue
    logger.debug("Could not load TrueType font, using default")
    return ImageFont.load_default()
