"""
Module: builder.layout.badges

Purpose:
    Metadata badge rows shown above a problem image (chapter path,
    problem type, difficulty, correct rate, exam year, tags).

Key Functions:
    - badge_row(): Badge row node for one item, or None
    - wrap_labels(): Break badge labels into lines that fit a width

Dependencies:
    - builder.layout.nodes: BadgeRowNode
    - core.models: ProblemMetadata

Used By:
    - builder.layout.columns: Item stacks
    - builder.output.renderer: Line wrapping at draw time
"""

from __future__ import annotations

from typing import Callable, Optional, Sequence

from worksheet_toolkit.core.models import ProblemMetadata

from .config import LayoutConfig
from .nodes import BadgeRowNode, Margin

BADGE_BOTTOM_MARGIN = 8


def badge_row(metadata: Optional[ProblemMetadata], config: LayoutConfig) -> Optional[BadgeRowNode]:
    """
    Build the badge row for an item.

    The node plus its bottom margin is exactly `config.badge_row_height`,
    the same amount the item reserved while being packed.

    Returns:
        BadgeRowNode, or None when badges are off or there is nothing to show
    """
    if not config.show_badges or metadata is None:
        return None
    labels = metadata.badge_labels()
    if not labels:
        return None
    return BadgeRowNode(
        labels=tuple(labels),
        height=config.badge_row_height - BADGE_BOTTOM_MARGIN,
        font_size=config.badge_font_size,
        max_lines=config.badge_max_lines,
        margin=Margin.below(BADGE_BOTTOM_MARGIN),
    )


def wrap_labels(
    labels: Sequence[str],
    text_width: Callable[[str], float],
    max_width: float,
    separator: str = "  ·  ",
    max_lines: int = 3,
) -> list[str]:
    """
    Greedy line wrapping of badge labels.

    Labels are never split. A label wider than `max_width` gets a line
    of its own. Whatever does not fit in `max_lines` is dropped and the
    last line is ended with an ellipsis.

    Args:
        labels: Badge texts in display order
        text_width: Measures a string in points
        max_width: Available width in points
        separator: Drawn between labels on the same line
        max_lines: Maximum number of lines

    Example:
        >>> wrap_labels(["a", "b", "c"], len, 7, separator=" ")
        ['a b c']
    """
    lines: list[str] = []
    current = ""
    for label in labels:
        candidate = f"{current}{separator}{label}" if current else label
        if not current or text_width(candidate) <= max_width:
            current = candidate
            continue
        lines.append(current)
        current = label
    if current:
        lines.append(current)

    if len(lines) > max_lines:
        lines = lines[:max_lines]
        lines[-1] = lines[-1] + " …"
    return lines
