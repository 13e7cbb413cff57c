"""
Module: builder.output

Purpose:
    PDF output for worksheets: the lazily loaded process-wide engine,
    serialization of the document tree with ReportLab, and the PyMuPDF
    preview used by the viewer.

Key Functions:
    - render_pdf(): Render a DocumentDefinition to PDF bytes
    - get_engine(): Shared PDF engine
    - render_document(): Synchronous serialization (imported on first use)

Key Classes:
    - PdfEngine: Loaded engine with registered fonts
    - PdfPreview: Page rasterization, zoom and page jump

Dependencies:
    - reportlab: PDF generation
    - fitz (PyMuPDF): Preview rasterization
    - PIL: Image handling

Used By:
    - builder.controller: Pipeline orchestration
    - gui.viewer: Preview window
"""

from .engine import PdfEngine, get_engine, load_engine, render_pdf, reset_engine
from .preview import PdfPreview, download_filename, sanitize_filename

__all__ = [
    "PdfEngine",
    "get_engine",
    "load_engine",
    "render_pdf",
    "reset_engine",
    "render_document",
    "PdfPreview",
    "download_filename",
    "sanitize_filename",
]


def __getattr__(name):
    # renderer imports reportlab; load it on first access only
    if name == "render_document":
        from .renderer import render_document
        return render_document
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
