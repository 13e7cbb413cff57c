"""
Module: builder.layout.columns

Purpose:
    Turn a packed column into layout nodes. Every item becomes an
    unbreakable stack (number label, badge row, image at column width).
    Leftover height is spread between the items so the column reads as
    evenly spaced instead of leaving a block of trailing whitespace.

Key Functions:
    - build_content(): Column items -> list of StackNodes
    - item_stack(): Stack for a single item
    - column_gap_size(): Gap placed below each non-final item

Dependencies:
    - builder.layout.nodes: StackNode, TextNode, ImageNode
    - builder.layout.badges: badge_row

Used By:
    - builder.layout.paginator: Page content
"""

from __future__ import annotations

from typing import Optional, Sequence

from .badges import badge_row
from .config import LayoutConfig
from .models import RenderedItem
from .nodes import ImageNode, Margin, NO_MARGIN, StackNode, TextNode


def column_gap_size(items: Sequence[RenderedItem], max_height: float, config: LayoutConfig) -> float:
    """
    Vertical gap below every item except the last.

    Justified columns share the slack evenly but never go below
    `config.minimum_gap` (the column may be slightly over-full). Packed
    columns always use `minimum_gap`.
    """
    if len(items) < 2:
        return 0.0
    if not config.justify:
        return config.minimum_gap
    slack = max_height - sum(item.block_height for item in items)
    return max(config.minimum_gap, slack / (len(items) - 1))


def item_stack(item: RenderedItem, config: LayoutConfig, margin: Margin = NO_MARGIN) -> StackNode:
    """Unbreakable stack for one item; its content height equals item.block_height."""
    children = []
    if config.show_numbers:
        children.append(
            TextNode(
                text=item.number_label,
                font_size=config.number_font_size,
                bold=True,
                margin=Margin.below(config.number_margin),
            )
        )
    badges = badge_row(item.metadata, config)
    if badges is not None:
        children.append(badges)
    children.append(
        ImageNode(
            image=item.resolved_image,
            width=config.column_width,
            height=item.render_height,
        )
    )
    return StackNode(children=tuple(children), margin=margin, unbreakable=True)


def build_content(
    items: Sequence[RenderedItem],
    max_height: float,
    config: Optional[LayoutConfig] = None,
) -> list[StackNode]:
    """
    Layout nodes for one column.

    Args:
        items: Packed column items in display order
        max_height: Column height the slack is measured against
        config: Layout configuration

    Returns:
        One StackNode per item; empty for an empty column
    """
    config = config or LayoutConfig()
    gap = column_gap_size(items, max_height, config)
    last = len(items) - 1
    return [
        item_stack(item, config, Margin.below(gap) if position < last else NO_MARGIN)
        for position, item in enumerate(items)
    ]
