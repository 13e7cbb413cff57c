"""
Module: builder.layout.paginator

Purpose:
    Arrange sized items onto two-column pages. Each page packs a left
    column, then a right column from what the left one left over.
    Items never straddle a page break and never change order.

Key Functions:
    - assemble(): Items -> list of Pages
    - flatten_pages(): Pages -> content nodes with page-break markers

Algorithm:
    1. Pack the left column from the head of the queue
    2. Pack the right column from the left column's remainder
    3. Build both columns' nodes and emit the page
    4. Repeat until the queue is empty
    The packer always accepts at least one item, so this takes at most
    one iteration per item.

Dependencies:
    - builder.layout.packer: pack
    - builder.layout.columns: build_content
    - builder.layout.models: Page, Column

Used By:
    - builder.layout.document: Problem and answer sequences
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from .columns import build_content
from .config import LayoutConfig
from .models import Page, RenderedItem
from .nodes import ColumnSlot, ColumnsNode, LayoutNode, PageBreakNode
from .packer import pack

logger = logging.getLogger(__name__)


def assemble(
    items: Sequence[RenderedItem],
    max_column_height: Optional[float] = None,
    config: Optional[LayoutConfig] = None,
    *,
    first_page_height: Optional[float] = None,
) -> list[Page]:
    """
    Paginate items into two-column pages.

    Args:
        items: Sized items in display order
        max_column_height: Column height limit (defaults to the config's)
        config: Layout configuration
        first_page_height: Column height for page 1 only, when the page
            also carries a header block

    Returns:
        Pages in order; empty for no items
    """
    config = config or LayoutConfig()
    if max_column_height is None:
        max_column_height = config.max_column_height

    pages: list[Page] = []
    queue: Sequence[RenderedItem] = tuple(items)

    while queue:
        height = max_column_height
        if not pages and first_page_height is not None:
            height = first_page_height

        left = pack(queue, height, inter_item_margin=config.inter_item_margin)
        right = pack(left.remaining, height, inter_item_margin=config.inter_item_margin)
        queue = right.remaining

        content = ColumnsNode(
            columns=(
                ColumnSlot(config.column_width, tuple(build_content(left.accepted, height, config))),
                ColumnSlot(config.column_width, tuple(build_content(right.accepted, height, config))),
            ),
            column_gap=config.column_gap,
        )
        pages.append(Page(index=len(pages), left=left.column, right=right.column, content=content))

    if pages:
        logger.info(f"Paginated {len(items)} items onto {len(pages)} pages")
    return pages


def flatten_pages(pages: Sequence[Page]) -> list[LayoutNode]:
    """Page contents separated by page breaks (none after the last page)."""
    nodes: list[LayoutNode] = []
    for page in pages:
        if nodes:
            nodes.append(PageBreakNode())
        nodes.append(page.content)
    return nodes
