"""
Module: builder.output.preview

Purpose:
    Read-only preview of generated PDF bytes: page rasterization for
    on-screen display, zoom and page-jump state, and saving under a
    sanitized download name.

Key Classes:
    - PdfPreview: Open PDF with zoom/page state and a small render cache

Key Functions:
    - sanitize_filename(): Strip characters that are illegal in filenames
    - download_filename(): "{title}_{author}.pdf", sanitized

Dependencies:
    - fitz (PyMuPDF): PDF rasterization
    - PIL: Page images

Used By:
    - gui.viewer: PdfViewerWindow
    - cli: `view` command
    - builder.controller: Download filename
"""

from __future__ import annotations

import logging
import re
from collections import OrderedDict
from pathlib import Path
from typing import Optional, Tuple

import fitz
from PIL import Image

from ..errors import PreviewError

logger = logging.getLogger(__name__)

MIN_ZOOM = 0.25
MAX_ZOOM = 4.0
ZOOM_STEP = 1.2
DEFAULT_CACHE_PAGES = 8

_ILLEGAL_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]')


def sanitize_filename(name: str, fallback: str = "worksheet") -> str:
    """
    Remove characters that are not allowed in file names.

    Example:
        >>> sanitize_filename('Unit 3: "Markets"?')
        'Unit 3 Markets'
    """
    cleaned = _ILLEGAL_FILENAME_CHARS.sub("", name)
    cleaned = re.sub(r"\s+", " ", cleaned).strip(" .")
    return cleaned or fallback


def download_filename(title: str, author: str) -> str:
    """Default download name for a worksheet PDF."""
    stem = "_".join(part for part in (title.strip(), author.strip()) if part)
    return f"{sanitize_filename(stem)}.pdf"


def clamp_zoom(zoom: float) -> float:
    return min(MAX_ZOOM, max(MIN_ZOOM, zoom))


class PdfPreview:
    """
    Open PDF for previewing.

    Rendered pages are kept in a small LRU cache keyed by (page, zoom),
    so scrolling back and forth does not re-rasterize.

    Example:
        >>> preview = PdfPreview(pdf_bytes)
        >>> preview.page_count
        2
        >>> preview.render_page(0).size
        (595, 842)
    """

    def __init__(self, pdf_bytes: bytes, *, max_cached_pages: int = DEFAULT_CACHE_PAGES):
        """
        Raises:
            PreviewError: If the bytes are empty or not a readable PDF
        """
        if not pdf_bytes:
            raise PreviewError("PDF blob is empty")
        try:
            self._doc = fitz.open(stream=pdf_bytes, filetype="pdf")
        except (fitz.FileDataError, RuntimeError, ValueError) as e:
            raise PreviewError(f"Cannot open PDF: {e}") from e

        self._bytes = pdf_bytes
        self._zoom = 1.0
        self._current_page = 0
        self._max_cached = max_cached_pages
        self._cache: "OrderedDict[Tuple[int, float], Image.Image]" = OrderedDict()

    def __enter__(self) -> "PdfPreview":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._cache.clear()
        self._doc.close()

    @property
    def pdf_bytes(self) -> bytes:
        return self._bytes

    @property
    def page_count(self) -> int:
        return self._doc.page_count

    # Zoom

    @property
    def zoom(self) -> float:
        return self._zoom

    def set_zoom(self, zoom: float) -> float:
        self._zoom = clamp_zoom(zoom)
        return self._zoom

    def zoom_in(self) -> float:
        return self.set_zoom(self._zoom * ZOOM_STEP)

    def zoom_out(self) -> float:
        return self.set_zoom(self._zoom / ZOOM_STEP)

    def fit_width_zoom(self, available_width: float) -> float:
        """Zoom at which the first page fills `available_width` pixels."""
        if self.page_count == 0 or available_width <= 0:
            return self._zoom
        return clamp_zoom(available_width / self._doc[0].rect.width)

    # Navigation

    @property
    def current_page(self) -> int:
        """Current page, 0-indexed."""
        return self._current_page

    def jump_to(self, page_number: int) -> int:
        """
        Move to a 1-indexed page number, clamped to the document.

        Returns:
            The 0-indexed page actually selected
        """
        last = max(self.page_count - 1, 0)
        self._current_page = min(max(page_number - 1, 0), last)
        return self._current_page

    # Rendering

    def page_size(self, index: int) -> Tuple[float, float]:
        """Page size in points."""
        rect = self._page(index).rect
        return rect.width, rect.height

    def render_page(self, index: int, zoom: Optional[float] = None) -> Image.Image:
        """
        Rasterize one page.

        Args:
            index: 0-indexed page
            zoom: Scale factor (1.0 = 72 DPI); defaults to the current zoom

        Returns:
            RGB PIL Image
        """
        zoom = clamp_zoom(zoom if zoom is not None else self._zoom)
        key = (index, round(zoom, 4))

        if key in self._cache:
            self._cache.move_to_end(key)
            return self._cache[key]

        page = self._page(index)
        pix = page.get_pixmap(matrix=fitz.Matrix(zoom, zoom), alpha=False)
        image = Image.frombytes("RGB", (pix.width, pix.height), pix.samples)

        if len(self._cache) >= self._max_cached:
            self._cache.popitem(last=False)
        self._cache[key] = image
        logger.debug(f"Rendered preview page {index + 1} at {zoom:.2f}x")
        return image

    def _page(self, index: int) -> "fitz.Page":
        if not 0 <= index < self.page_count:
            raise IndexError(f"Page {index} out of range (0-{self.page_count - 1})")
        return self._doc[index]

    # Output

    def save(self, directory: Path, title: str = "", author: str = "") -> Path:
        """
        Write the original PDF bytes under the sanitized download name.

        Returns:
            Path of the written file
        """
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / download_filename(title, author)
        path.write_bytes(self._bytes)
        logger.info(f"Saved worksheet PDF to {path}")
        return path
