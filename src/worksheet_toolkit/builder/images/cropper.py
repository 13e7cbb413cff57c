"""
Module: builder.images.cropper

Purpose:
    Size limits applied to decoded images before layout.
    Very tall answer scans are cut from the top, and oversized images
    can be downscaled to keep PDF output small.

Key Functions:
    - crop_to_height(): Keep the top `max_height` pixels
    - fit_width(): Downscale proportionally to a maximum pixel width

Dependencies:
    - PIL: Image manipulation

Used By:
    - builder.images.measurer: After decoding
"""

from __future__ import annotations

from PIL import Image


def crop_to_height(image: Image.Image, max_height: int) -> Image.Image:
    """
    Crop an image to at most `max_height` pixels, keeping the top.

    Args:
        image: Source image
        max_height: Height limit in pixels

    Returns:
        The same image if it already fits, otherwise a cropped copy

    Raises:
        ValueError: If max_height is not positive

    Example:
        >>> crop_to_height(Image.new("RGB", (100, 3000)), 2000).size
        (100, 2000)
    """
    if max_height <= 0:
        raise ValueError(f"max_height must be positive: {max_height}")
    if image.height <= max_height:
        return image
    return image.crop((0, 0, image.width, max_height))


def fit_width(image: Image.Image, max_width: int) -> Image.Image:
    """
    Downscale an image so it is no wider than `max_width`.

    Aspect ratio is preserved; narrower images are returned unchanged.

    Raises:
        ValueError: If max_width is not positive
    """
    if max_width <= 0:
        raise ValueError(f"max_width must be positive: {max_width}")
    if image.width <= max_width:
        return image
    height = max(1, round(image.height * max_width / image.width))
    return image.resize((max_width, height), Image.LANCZOS)
