"""
Module: builder.layout

Purpose:
    Two-column page layout for worksheets.
    Sizes measured images to the column width, packs them greedily into
    columns and pages, and wraps the result into a document tree.

Key Functions:
    - normalize(): Render height at the column width
    - pack(): Fill one column
    - build_content(): Column items -> nodes
    - assemble(): Items -> pages
    - build_document(): Problems + answers -> DocumentDefinition

Key Classes:
    - LayoutConfig: Configuration for page layout
    - ResolvedImage, RenderedItem, Column, Page: Layout models
    - DocumentDefinition, WorksheetInfo: Document output

Dependencies:
    - PIL: Image type
    - worksheet_toolkit.core.models: ProblemMetadata

Used By:
    - builder.controller: Generation pipeline
    - builder.output.renderer: Serialization
"""

from .config import LayoutConfig
from .models import ResolvedImage, RenderedItem, Column, Page, PackResult
from .nodes import (
    BadgeRowNode,
    ColumnSlot,
    ColumnsNode,
    ImageNode,
    Margin,
    PageBreakNode,
    RuleNode,
    StackNode,
    TextNode,
)
from .normalizer import normalize, to_rendered_items
from .packer import pack
from .columns import build_content
from .paginator import assemble, flatten_pages
from .document import DocumentDefinition, WorksheetInfo, build_document

__all__ = [
    # Config
    "LayoutConfig",
    # Models
    "ResolvedImage",
    "RenderedItem",
    "Column",
    "Page",
    "PackResult",
    # Nodes
    "BadgeRowNode",
    "ColumnSlot",
    "ColumnsNode",
    "ImageNode",
    "Margin",
    "PageBreakNode",
    "RuleNode",
    "StackNode",
    "TextNode",
    # Functions
    "normalize",
    "to_rendered_items",
    "pack",
    "build_content",
    "assemble",
    "flatten_pages",
    "build_document",
    "DocumentDefinition",
    "WorksheetInfo",
]
