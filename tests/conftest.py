import io
import os
import sys
from pathlib import Path

import pytest
from PIL import Image

# Add src to sys.path so we can import worksheet_toolkit
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

# Qt widgets run headless under pytest-qt
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from worksheet_toolkit.builder.layout.models import RenderedItem, ResolvedImage  # noqa: E402


def png_bytes(width: int, height: int, color: str = "white") -> bytes:
    """Encode a solid-color PNG."""
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color=color).save(buf, format="PNG")
    return buf.getvalue()


def corrupt_png_bytes(width: int, height: int) -> bytes:
    """PNG whose header parses but whose trailing chunk type is invalid."""
    data = png_bytes(width, height)
    end = data.rindex(b"IEND")
    return data[:end] + b"IEN\xc0" + data[end + 4:]


# Common test fixtures
@pytest.fixture
def make_png():
    """Factory for PNG bytes of a given size."""
    return png_bytes


@pytest.fixture
def corrupt_png():
    """Factory for PNG bytes that fail only once pixel data is loaded."""
    return corrupt_png_bytes


@pytest.fixture
def sample_image(tmp_path: Path):
    """Create a simple test image on disk."""
    img = Image.new("RGB", (200, 100), color="white")
    img_path = tmp_path / "sample.png"
    img.save(img_path)
    return img_path


@pytest.fixture
def resolved_factory():
    """Factory for ResolvedImages with real pixel data."""
    def _create(width: int, height: int, *, is_placeholder: bool = False) -> ResolvedImage:
        pixels = Image.new("RGB", (max(width, 1), max(height, 1)), color="white")
        return ResolvedImage(pixels, width, height, is_placeholder=is_placeholder)
    return _create


@pytest.fixture
def item_factory():
    """Factory for RenderedItems with a given render height (no pixels)."""
    def _create(render_height: float, index: int = 0, header_height: float = 0.0) -> RenderedItem:
        return RenderedItem(
            resolved_image=ResolvedImage(None, 240, int(render_height)),
            render_height=render_height,
            sequence_index=index,
            header_height=header_height,
        )
    return _create


@pytest.fixture
def items_from_heights(item_factory):
    """Build an ordered item list from render heights."""
    def _create(heights, header_height: float = 0.0):
        return [item_factory(h, i, header_height) for i, h in enumerate(heights)]
    return _create


@pytest.fixture
def sample_pdf(resolved_factory):
    """Three-page worksheet PDF (one tall item per column)."""
    from worksheet_toolkit.builder.layout import build_document, to_rendered_items
    from worksheet_toolkit.builder.output import render_document

    items = to_rendered_items([resolved_factory(100, 250) for _ in range(5)])
    return render_document(build_document(items, show_header=False))
