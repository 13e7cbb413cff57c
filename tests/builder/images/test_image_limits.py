"""
Unit tests for image size limits, decoding and the placeholder.
"""

import pytest
from PIL import Image

from worksheet_toolkit.builder.errors import ImageDecodeError
from worksheet_toolkit.builder.images import (
    PillowImageDecoder,
    crop_to_height,
    fit_width,
    placeholder_image,
)


class TestCropToHeight:
    def test_crop_taller_image(self):
        # Arrange
        img = Image.new("RGB", (100, 3000), color="white")
        img.putpixel((0, 0), (255, 0, 0))

        # Act
        result = crop_to_height(img, 2000)

        # Assert
        assert result.size == (100, 2000)
        assert result.getpixel((0, 0)) == (255, 0, 0)

    def test_shorter_image_unchanged(self):
        img = Image.new("RGB", (100, 50))

        assert crop_to_height(img, 2000) is img

    def test_invalid_limit_raises(self):
        with pytest.raises(ValueError):
            crop_to_height(Image.new("RGB", (10, 10)), 0)


class TestFitWidth:
    def test_wide_image_scaled_proportionally(self):
        result = fit_width(Image.new("RGB", (1000, 500)), 250)

        assert result.size == (250, 125)

    def test_narrow_image_unchanged(self):
        img = Image.new("RGB", (100, 500))

        assert fit_width(img, 250) is img

    def test_very_flat_image_keeps_one_pixel(self):
        assert fit_width(Image.new("RGB", (5000, 1)), 100).size == (100, 1)

    def test_invalid_limit_raises(self):
        with pytest.raises(ValueError):
            fit_width(Image.new("RGB", (10, 10)), -1)


class TestPillowImageDecoder:
    def test_when_png_then_decoded(self, make_png):
        img = PillowImageDecoder().decode(make_png(64, 32))

        assert img.size == (64, 32)

    def test_when_palette_image_then_converted(self):
        # Arrange
        import io
        buf = io.BytesIO()
        Image.new("P", (8, 8)).save(buf, format="GIF")

        # Act
        img = PillowImageDecoder().decode(buf.getvalue())

        # Assert
        assert img.mode in ("RGB", "RGBA", "L")

    @pytest.mark.parametrize("data", [b"", b"not an image"])
    def test_when_garbage_then_decode_error(self, data):
        with pytest.raises(ImageDecodeError):
            PillowImageDecoder().decode(data)

    def test_when_chunk_after_pixel_data_broken_then_decode_error(self, corrupt_png):
        # Pillow reports this one as SyntaxError while loading
        with pytest.raises(ImageDecodeError):
            PillowImageDecoder().decode(corrupt_png(20, 10))


class TestPlaceholder:
    def test_placeholder_has_fixed_size(self):
        img = placeholder_image()

        assert (img.width, img.height) == (300, 200)
        assert img.pixel_data.size == (300, 200)
        assert img.is_placeholder
