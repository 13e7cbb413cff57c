"""
Module: builder.layout.packer

Purpose:
    Greedy single-column packing. Takes items from the front of the
    queue while they fit; the first item that does not fit ends the
    column and everything from it onward is returned untouched.

Key Functions:
    - pack(): Fill one column from the head of the queue

Algorithm:
    Each item costs its block height plus a fixed inter-item margin
    (a worst-case allowance for the gap later inserted below it). Items
    are never reordered or skipped, so a smaller later item can't jump
    ahead of a larger earlier one. A column that is still empty always
    accepts its first item, even if that item alone is too tall.

Dependencies:
    - builder.layout.models: RenderedItem, PackResult

Used By:
    - builder.layout.paginator: Left and right column of each page
"""

from __future__ import annotations

import logging
from typing import Sequence

from .models import PackResult, RenderedItem

logger = logging.getLogger(__name__)

DEFAULT_INTER_ITEM_MARGIN = 20


def pack(
    items: Sequence[RenderedItem],
    max_height: float,
    *,
    inter_item_margin: float = DEFAULT_INTER_ITEM_MARGIN,
) -> PackResult:
    """
    Fill one column from the front of `items`.

    Args:
        items: Queue of items in display order
        max_height: Height limit of the column
        inter_item_margin: Spacing allowance added per item

    Returns:
        PackResult with the accepted prefix, the untouched remainder and
        the cumulative packing height of the prefix
    """
    accepted: list[RenderedItem] = []
    height = 0.0

    for position, item in enumerate(items):
        cost = item.block_height + inter_item_margin
        if accepted and height + cost > max_height:
            return PackResult(tuple(accepted), tuple(items[position:]), height)

        if not accepted and cost > max_height:
            logger.warning(
                f"Item {item.sequence_index + 1} needs {cost:.1f}pt, "
                f"column holds {max_height:.1f}pt; placing it alone"
            )
            return PackResult((item,), tuple(items[position + 1:]), cost)

        accepted.append(item)
        height += cost

    return PackResult(tuple(accepted), (), height)
