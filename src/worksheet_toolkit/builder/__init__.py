"""
Module: builder

Purpose:
    Worksheet building pipeline: turns an ordered list of problems into
    a two-column A4 PDF with an optional answer key.

Key Functions:
    - generate_worksheet(): Main entry point (async)
    - generate_worksheet_sync(): Blocking wrapper

Key Classes:
    - BuilderConfig: Configuration for building
    - GenerationRequest / GenerationTracker / GenerationResult: Requests and results
    - LayoutConfig: Page layout configuration

Dependencies:
    - httpx: Image fetching
    - PIL: Image decoding
    - reportlab: PDF generation
    - fitz (PyMuPDF): Preview

Used By:
    - worksheet_toolkit.cli: Command line
    - worksheet_toolkit.gui: Viewer
"""

from .config import BuilderConfig
from .errors import (
    EmptyPdfError,
    GenerationError,
    OverrideLookupError,
    RenderError,
    RendererInitError,
    WorksheetError,
)
from .layout import LayoutConfig, WorksheetInfo
from .controller import (
    GenerationProgress,
    GenerationRequest,
    GenerationResult,
    GenerationStage,
    GenerationTracker,
    generate_worksheet,
    generate_worksheet_sync,
)

__all__ = [
    # Config
    "BuilderConfig",
    "LayoutConfig",
    "WorksheetInfo",
    # Errors
    "WorksheetError",
    "GenerationError",
    "OverrideLookupError",
    "RenderError",
    "RendererInitError",
    "EmptyPdfError",
    # Controller
    "GenerationProgress",
    "GenerationRequest",
    "GenerationResult",
    "GenerationStage",
    "GenerationTracker",
    "generate_worksheet",
    "generate_worksheet_sync",
]
