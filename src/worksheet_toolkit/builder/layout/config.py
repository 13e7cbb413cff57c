"""
Module: builder.layout.config

Purpose:
    Configuration for the two-column page layout engine.
    Defines page geometry, column geometry, packing margins and the
    fixed heights of the per-item header (numbering label, badge row).

Key Classes:
    - LayoutConfig: Immutable layout configuration

Dependencies:
    - dataclasses (std)

Used By:
    - builder.layout.normalizer: Header heights for packing
    - builder.layout.packer / columns / paginator: Column geometry
    - builder.layout.document: Page geometry
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from worksheet_toolkit.core.models import ProblemMetadata


# A4 in PDF points
A4_WIDTH_PT = 595.28
A4_HEIGHT_PT = 841.89

# 842 - 60 (top) - 30 (bottom) - 30 (footer)
DEFAULT_MAX_COLUMN_HEIGHT = 722
# 842 - 25 - 25 - 12, tighter packing for the answer key
ANSWER_MAX_COLUMN_HEIGHT = 780

FALLBACK_RENDER_HEIGHT = 200


@dataclass(frozen=True)
class LayoutConfig:
    """
    Configuration for page layout (immutable).

    Attributes:
        page_width: Page width in points
        page_height: Page height in points
        margin_left / margin_top / margin_right / margin_bottom: Page margins
        column_width: Render width of every image (points)
        column_gap: Horizontal gap between the two columns
        max_column_height: Packing limit for one column
        inter_item_margin: Worst-case spacing added per item while packing
        minimum_gap: Smallest gap between items when distributing slack
        justify: Spread leftover height evenly between items
        show_numbers: Prefix every item with a "N." label
        number_font_size / number_margin: Label font size and gap below it
        show_badges: Draw a metadata badge row above the image
        badge_row_height: Reserved height of a badge row (incl. its margin)
        badge_font_size / badge_max_lines: Badge row text settings
        fallback_height: Render height used for images with no valid width

    Example:
        >>> config = LayoutConfig()
        >>> config.number_label_height
        17
    """

    # Page geometry
    page_width: float = A4_WIDTH_PT
    page_height: float = A4_HEIGHT_PT
    margin_left: float = 40
    margin_top: float = 30
    margin_right: float = 40
    margin_bottom: float = 30

    # Columns
    column_width: float = 240
    column_gap: float = 15
    max_column_height: float = DEFAULT_MAX_COLUMN_HEIGHT

    # Spacing
    inter_item_margin: float = 20
    minimum_gap: float = 10
    justify: bool = True

    # Item header
    show_numbers: bool = True
    number_font_size: float = 12
    number_margin: float = 5
    show_badges: bool = True
    badge_row_height: float = 33  # 3 lines of 7pt + 2 gaps + 8pt bottom margin
    badge_font_size: float = 7
    badge_max_lines: int = 3

    fallback_height: float = FALLBACK_RENDER_HEIGHT

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.page_width <= 0 or self.page_height <= 0:
            raise ValueError(f"Page size must be positive: {self.page_width}x{self.page_height}")
        if self.content_width <= 0:
            raise ValueError("Margins exceed page width")
        if self.content_height <= 0:
            raise ValueError("Margins exceed page height")
        if self.column_width <= 0:
            raise ValueError(f"column_width must be positive: {self.column_width}")
        if 2 * self.column_width + self.column_gap > self.content_width:
            raise ValueError(
                f"Two columns of {self.column_width}pt plus {self.column_gap}pt gap "
                f"exceed content width {self.content_width:.2f}pt"
            )
        if not 0 < self.max_column_height <= self.content_height:
            raise ValueError(
                f"max_column_height must be in (0, {self.content_height:.2f}]: "
                f"{self.max_column_height}"
            )
        if self.inter_item_margin < 0 or self.minimum_gap < 0:
            raise ValueError("Spacing values must be non-negative")
        if self.fallback_height <= 0:
            raise ValueError(f"fallback_height must be positive: {self.fallback_height}")

    @classmethod
    def answer_key(cls, **overrides) -> "LayoutConfig":
        """
        Preset for the answer key: taller columns, tight constant gaps,
        smaller labels, no badges.
        """
        params = dict(
            max_column_height=ANSWER_MAX_COLUMN_HEIGHT,
            inter_item_margin=5,
            minimum_gap=5,
            justify=False,
            number_font_size=10,
            number_margin=1,
            show_badges=False,
        )
        params.update(overrides)
        return cls(**params)

    def with_column_height(self, max_column_height: float) -> "LayoutConfig":
        return replace(self, max_column_height=max_column_height)

    @property
    def content_width(self) -> float:
        """Width available for content (excluding margins)."""
        return self.page_width - self.margin_left - self.margin_right

    @property
    def content_height(self) -> float:
        """Height available for content (excluding margins)."""
        return self.page_height - self.margin_top - self.margin_bottom

    @property
    def number_label_height(self) -> float:
        return self.number_font_size + self.number_margin if self.show_numbers else 0

    def item_header_height(self, metadata: Optional[ProblemMetadata] = None) -> float:
        """
        Fixed height drawn above an item's image.

        Included in the packing height so columns with badges never
        overflow the page.
        """
        height = self.number_label_height
        if self.show_badges and metadata is not None and metadata.has_badges:
            height += self.badge_row_height
        return height
