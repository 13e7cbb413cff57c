"""
Module: builder.layout.models

Purpose:
    Data models for the layout engine.
    Immutable dataclasses representing measured images, sized items,
    packed columns and assembled pages.

Key Classes:
    - ResolvedImage: Decoded image with natural pixel size
    - RenderedItem: Image scaled to the column width, with its order index
    - PackResult: Output of the column packer
    - Column: Packed run of items for one half of a page
    - Page: Two columns plus their renderer-agnostic content

Dependencies:
    - PIL: Image type
    - dataclasses (std)

Used By:
    - builder.images.measurer: Creates ResolvedImages
    - builder.layout.normalizer: Creates RenderedItems
    - builder.layout.packer / paginator: Creates Columns and Pages
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from PIL import Image

from worksheet_toolkit.core.models import ProblemMetadata

from .nodes import ColumnsNode

PLACEHOLDER_WIDTH = 300
PLACEHOLDER_HEIGHT = 200


@dataclass(frozen=True)
class ResolvedImage:
    """
    Measured image (immutable).

    Attributes:
        pixel_data: Decoded PIL image (None only for synthetic test images)
        width: Natural width in pixels
        height: Natural height in pixels
        is_placeholder: True when the real image failed to load

    Invariant:
        width > 0 and height > 0, or the image is the 300x200 placeholder.
    """

    pixel_data: Optional[Image.Image]
    width: int
    height: int
    is_placeholder: bool = False

    @property
    def aspect_ratio(self) -> float:
        """Height over width (0 for degenerate sizes)."""
        return self.height / self.width if self.width > 0 else 0.0


@dataclass(frozen=True)
class RenderedItem:
    """
    An image sized for a column (immutable).

    Attributes:
        resolved_image: The measured image
        render_height: Image height at the column width
        sequence_index: Position in the original ordering (the only
            ordering authority)
        header_height: Fixed height of the label/badge header above the image
        metadata: Problem metadata for the badge row
        label: Numbering text; defaults to "{sequence_index + 1}."
    """

    resolved_image: ResolvedImage
    render_height: float
    sequence_index: int
    header_height: float = 0.0
    metadata: Optional[ProblemMetadata] = None
    label: Optional[str] = None

    @property
    def block_height(self) -> float:
        """Height of the whole item (header + image), used for packing."""
        return self.render_height + self.header_height

    @property
    def number_label(self) -> str:
        return self.label if self.label is not None else f"{self.sequence_index + 1}."


@dataclass(frozen=True)
class Column:
    """
    Packed run of items for one column.

    Attributes:
        items: Items in original order
        height: Cumulative packing height (block heights + inter-item margins)
    """

    items: Tuple[RenderedItem, ...] = ()
    height: float = 0.0

    @property
    def is_empty(self) -> bool:
        return len(self.items) == 0

    @property
    def content_height(self) -> float:
        """Sum of block heights, without packing margins."""
        return sum(item.block_height for item in self.items)


@dataclass(frozen=True)
class PackResult:
    """
    Column packer output.

    Attributes:
        accepted: Items placed in this column
        remaining: Items left for the next column
        height: Cumulative packing height of `accepted`
    """

    accepted: Tuple[RenderedItem, ...]
    remaining: Tuple[RenderedItem, ...]
    height: float

    @property
    def column(self) -> Column:
        return Column(items=self.accepted, height=self.height)


@dataclass(frozen=True)
class Page:
    """
    One two-column page.

    Attributes:
        index: Page number within its sequence (0-indexed)
        left: Left column
        right: Right column (empty when the queue ran out)
        content: Renderer-agnostic columns node for this page
    """

    index: int
    left: Column
    right: Column
    content: ColumnsNode

    @property
    def columns(self) -> Tuple[Column, ...]:
        """Non-empty columns, left first."""
        return tuple(c for c in (self.left, self.right) if not c.is_empty)

    @property
    def items(self) -> Tuple[RenderedItem, ...]:
        return self.left.items + self.right.items

    @property
    def item_count(self) -> int:
        return len(self.left.items) + len(self.right.items)
