"""
Module: builder.output.engine

Purpose:
    Process-wide PDF engine. The PDF library and its fonts are loaded
    lazily on first use and reused for every later generation.

    Concurrent first callers share one in-flight initialization. A
    failed initialization is not cached, so generating again retries it.

Key Functions:
    - get_engine(): The shared PdfEngine (initializing it if needed)
    - render_pdf(): DocumentDefinition -> non-empty PDF bytes
    - load_engine(): Blocking initialization (runs in a worker thread)
    - reset_engine(): Drop the shared engine

Key Classes:
    - PdfEngine: Loaded engine with its registered fonts

Dependencies:
    - reportlab: PDF generation and TTF font registration (imported lazily)

Used By:
    - builder.controller: Generation pipeline
"""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from ..errors import EmptyPdfError, RenderError, RendererInitError
from ..layout.document import DocumentDefinition

logger = logging.getLogger(__name__)

REGULAR_FONT_NAME = "WorksheetSans"
BOLD_FONT_NAME = "WorksheetSans-Bold"

_engine: Optional["PdfEngine"] = None
_engine_task: Optional[asyncio.Task] = None
_lock = threading.Lock()


@dataclass(frozen=True)
class PdfEngine:
    """
    Initialized PDF engine (immutable, shared read-only).

    Attributes:
        regular_font: Registered regular font, or None for the document default
        bold_font: Registered bold font, or None for the default's bold variant
    """

    regular_font: Optional[str] = None
    bold_font: Optional[str] = None

    def render(self, doc: DocumentDefinition) -> bytes:
        """Render synchronously. Call through render_pdf() from async code."""
        from .renderer import render_document

        return render_document(doc, regular_font=self.regular_font, bold_font=self.bold_font)


def load_engine(
    font_path: Optional[Union[str, Path]] = None,
    bold_font_path: Optional[Union[str, Path]] = None,
) -> PdfEngine:
    """
    Load the PDF library and register fonts. Blocking.

    Args:
        font_path: TrueType font for body text
        bold_font_path: TrueType font for bold text (defaults to font_path)

    Returns:
        PdfEngine

    Raises:
        ImportError: If ReportLab is not installed
        OSError / TTFError: If a font file cannot be loaded
    """
    from reportlab.pdfbase import pdfmetrics
    from reportlab.pdfbase.ttfonts import TTFont

    if font_path is None:
        if bold_font_path is not None:
            logger.warning("Bold font given without a regular font; using built-in fonts")
        return PdfEngine()

    pdfmetrics.registerFont(TTFont(REGULAR_FONT_NAME, str(font_path)))
    pdfmetrics.registerFont(TTFont(BOLD_FONT_NAME, str(bold_font_path or font_path)))
    logger.info(f"Registered fonts from {font_path}")
    return PdfEngine(regular_font=REGULAR_FONT_NAME, bold_font=BOLD_FONT_NAME)


async def _initialize(font_path, bold_font_path) -> PdfEngine:
    global _engine, _engine_task
    try:
        engine = await asyncio.to_thread(load_engine, font_path, bold_font_path)
    except Exception as e:
        with _lock:
            _engine_task = None
        logger.error(f"PDF engine failed to initialize: {e}")
        raise RendererInitError(f"PDF library failed to load, please refresh: {e}") from e

    with _lock:
        _engine = engine
    logger.info("PDF engine ready")
    return engine


async def get_engine(
    font_path: Optional[Union[str, Path]] = None,
    bold_font_path: Optional[Union[str, Path]] = None,
) -> PdfEngine:
    """
    Shared PDF engine, initializing it on first use.

    Fonts only apply to the initialization that actually runs; once an
    engine exists it is returned as-is.

    Raises:
        RendererInitError: If initialization fails
    """
    global _engine_task
    if _engine is not None:
        return _engine

    loop = asyncio.get_running_loop()
    with _lock:
        if _engine is not None:
            return _engine
        task = _engine_task
        if task is None or task.get_loop() is not loop:
            task = loop.create_task(_initialize(font_path, bold_font_path))
            _engine_task = task
    return await task


def reset_engine() -> None:
    """Forget the shared engine so the next call initializes again."""
    global _engine, _engine_task
    with _lock:
        _engine = None
        _engine_task = None


async def render_pdf(doc: DocumentDefinition, *, engine: Optional[PdfEngine] = None) -> bytes:
    """
    Render a document to PDF bytes off the event loop.

    Args:
        doc: Document to render
        engine: Engine to use (the shared one by default)

    Returns:
        Non-empty PDF bytes

    Raises:
        RendererInitError: Engine could not be initialized
        EmptyPdfError: Rendering produced zero bytes
        RenderError: Rendering failed
    """
    if engine is None:
        engine = await get_engine()

    try:
        data = await asyncio.to_thread(engine.render, doc)
    except RenderError:
        raise
    except Exception as e:
        raise RenderError(f"Could not render PDF: {e}") from e

    if not data:
        raise EmptyPdfError("PDF blob is empty")
    return data
