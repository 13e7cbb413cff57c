"""
Module: builder.images.decoder

Purpose:
    Decoding capability used by the measurer. Keeps image decoding
    behind a small interface so layout code never touches a codec.

Key Classes:
    - ImageDecoder: Abstract decoder interface
    - PillowImageDecoder: Pillow-backed implementation

Dependencies:
    - PIL: Image decoding

Used By:
    - builder.images.measurer: ImageMeasurer
"""

from __future__ import annotations

import io
import struct
from abc import ABC, abstractmethod

from PIL import Image, UnidentifiedImageError

from ..errors import ImageDecodeError

# Pillow plugins report corrupt data with a mix of exception types
_DECODE_ERRORS = (
    UnidentifiedImageError,
    Image.DecompressionBombError,
    OSError,
    ValueError,
    SyntaxError,
    EOFError,
    IndexError,
    TypeError,
    struct.error,
)


class ImageDecoder(ABC):
    """
    Abstract interface for turning fetched bytes into pixels.

    Implementations must raise ImageDecodeError for anything that is
    not a usable image.
    """

    @abstractmethod
    def decode(self, data: bytes) -> Image.Image:
        """
        Decode image bytes.

        Args:
            data: Encoded image (PNG, JPEG, ...)

        Returns:
            Fully loaded PIL Image

        Raises:
            ImageDecodeError: If the bytes cannot be decoded
        """


class PillowImageDecoder(ImageDecoder):
    """Decode with Pillow, normalizing palette/CMYK images to RGB(A)."""

    def decode(self, data: bytes) -> Image.Image:
        if not data:
            raise ImageDecodeError("Image data is empty")
        try:
            with Image.open(io.BytesIO(data)) as img:
                img.load()
                if img.mode not in ("RGB", "RGBA", "L"):
                    return img.convert("RGBA" if "transparency" in img.info else "RGB")
                return img.copy()
        except _DECODE_ERRORS as e:
            raise ImageDecodeError(f"Cannot decode image: {e}") from e
