"""
Module: builder.images

Purpose:
    Image access for the worksheet builder: fetching, decoding,
    size limits and the placeholder used for unavailable images.

Key Classes:
    - ImageMeasurer: Concurrent fetch + measure with placeholder fallback
    - ImageDecoder: Abstract decoding interface
    - PillowImageDecoder: Pillow implementation

Key Functions:
    - crop_to_height(): Keep the top part of a tall image
    - fit_width(): Downscale to a maximum width
    - placeholder_image(): Stand-in for failed images

Dependencies:
    - httpx: Image proxy requests
    - PIL: Decoding

Used By:
    - builder.controller: Generation pipeline
"""

from .decoder import ImageDecoder, PillowImageDecoder
from .cropper import crop_to_height, fit_width
from .placeholder import placeholder_image
from .measurer import ImageMeasurer, decode_data_url

__all__ = [
    "ImageDecoder",
    "PillowImageDecoder",
    "crop_to_height",
    "fit_width",
    "placeholder_image",
    "ImageMeasurer",
    "decode_data_url",
]
