"""
Module: builder.errors

Purpose:
    Exception hierarchy for worksheet generation.

    Only two boundaries can fail in a user-visible way: fetching the
    edited-content overrides (before any image work) and rendering the
    PDF. Image fetch/decode failures never leave the measurer; they are
    absorbed into the placeholder image.

Key Classes:
    - WorksheetError: Base class
    - GenerationError / OverrideLookupError: Controller failures
    - RenderError / RendererInitError / EmptyPdfError: PDF output failures
    - ImageFetchError / ImageDecodeError: Internal to the measurer
    - PreviewError: Preview could not open the PDF

Used By:
    - builder.controller, builder.output, builder.images, gui.viewer, cli
"""

from __future__ import annotations


class WorksheetError(Exception):
    """Base error for worksheet generation."""
    pass


class GenerationError(WorksheetError):
    """Error during the generation pipeline."""
    pass


class OverrideLookupError(GenerationError):
    """Edited-content override data could not be fetched."""
    pass


class RenderError(WorksheetError):
    """PDF could not be rendered. Retry by generating again."""
    pass


class RendererInitError(RenderError):
    """PDF engine failed to initialize."""
    pass


class EmptyPdfError(RenderError):
    """Rendering finished but produced zero bytes."""
    pass


class ImageFetchError(WorksheetError):
    """Image bytes could not be fetched."""
    pass


class ImageDecodeError(WorksheetError):
    """Fetched bytes are not a decodable image."""
    pass


class PreviewError(WorksheetError):
    """PDF bytes could not be opened for preview."""
    pass
