"""
Module: builder.layout.document

Purpose:
    Wrap paginated problem and answer sequences into one renderer-agnostic
    document: A4 geometry, page margins, a running footer, the worksheet
    header block and PDF metadata.

Key Functions:
    - build_document(): Items -> DocumentDefinition
    - header_block(): Worksheet header nodes
    - page_footer(): Footer nodes for one page

Key Classes:
    - WorksheetInfo: Title, author, subject and creation date
    - DocumentDefinition: Everything the renderer needs

Dependencies:
    - builder.layout.paginator: assemble, flatten_pages
    - builder.layout.nodes: Layout tree

Used By:
    - builder.controller: Generation pipeline
    - builder.output.renderer: Serialization to PDF
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional, Sequence, Tuple

from .config import LayoutConfig
from .models import Page, RenderedItem
from .nodes import (
    LayoutNode,
    Margin,
    PageBreakNode,
    RuleNode,
    StackNode,
    TextNode,
)
from .paginator import assemble, flatten_pages

logger = logging.getLogger(__name__)

DEFAULT_SUBJECT = "Worksheet"
DEFAULT_FONT = "Helvetica"

SUBJECT_COLOR = "#FF00A1"
TITLE_COLOR = "#6A6A6A"
INFO_COLOR = "#888888"
DIVIDER_COLOR = "#e0e0e0"
PAGE_NUMBER_COLOR = "#666666"

FooterFactory = Callable[[int, int], Tuple[LayoutNode, ...]]


@dataclass(frozen=True)
class WorksheetInfo:
    """
    Descriptive data for the header block and PDF metadata.

    Attributes:
        title: Worksheet title
        author: Creator name
        subject: Subject heading (large pink title)
        created_at: Creation time; defaults to now
    """

    title: str = ""
    author: str = ""
    subject: str = DEFAULT_SUBJECT
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def date_label(self) -> str:
        return self.created_at.strftime("%Y.%m.%d")

    def info_line(self, problem_count: int) -> str:
        return f"{self.date_label} | {problem_count} problems | {self.author} | Name _______________"


@dataclass(frozen=True)
class DocumentDefinition:
    """
    Renderer-agnostic document (immutable).

    Attributes:
        page_width / page_height: Page size in points
        margins: Page margins
        content: Top-level nodes; PageBreakNodes separate physical pages
        footer: (page_number, page_count) -> nodes, drawn in the bottom margin
        info: Title/author/subject for the PDF metadata
        default_font: Base font name
        problem_page_count / answer_page_count: Pages of each sequence
    """

    page_width: float
    page_height: float
    margins: Margin
    content: Tuple[LayoutNode, ...]
    footer: FooterFactory
    info: WorksheetInfo = field(default_factory=WorksheetInfo)
    default_font: str = DEFAULT_FONT
    problem_page_count: int = 0
    answer_page_count: int = 0

    @property
    def page_count(self) -> int:
        """Physical pages; an empty document still renders one blank page."""
        return 1 + sum(1 for node in self.content if isinstance(node, PageBreakNode))

    @property
    def content_width(self) -> float:
        return self.page_width - self.margins.left - self.margins.right


def page_footer(page_number: int, page_count: int, page_width: float) -> Tuple[LayoutNode, ...]:
    """Full-width divider with the page number centered below it."""
    return (
        RuleNode(x1=0, x2=page_width, line_width=1, color=DIVIDER_COLOR),
        TextNode(
            text=str(page_number),
            font_size=10,
            color=PAGE_NUMBER_COLOR,
            alignment="center",
            margin=Margin(0, 8, 0, 0),
        ),
    )


def header_block(info: WorksheetInfo, problem_count: int, config: LayoutConfig) -> StackNode:
    """
    Worksheet header: subject, title, info line and a full-width divider.

    The divider starts at the page's left edge, so its x1 is negative
    relative to the content origin.
    """
    if info.title:
        title = TextNode(info.title, font_size=16, color=TITLE_COLOR, margin=Margin.below(20))
    else:
        title = TextNode("", margin=Margin.below(12))

    return StackNode(
        children=(
            TextNode(
                info.subject or DEFAULT_SUBJECT,
                font_size=20,
                bold=True,
                color=SUBJECT_COLOR,
                margin=Margin.below(8),
            ),
            title,
            TextNode(info.info_line(problem_count), font_size=9, color=INFO_COLOR, margin=Margin.below(20)),
            RuleNode(
                x1=-config.margin_left,
                x2=config.page_width - config.margin_left,
                line_width=1,
                color=DIVIDER_COLOR,
                margin=Margin.below(20),
            ),
        ),
    )


def _sequence(
    items: Sequence[RenderedItem],
    config: LayoutConfig,
    header: Optional[StackNode],
) -> Tuple[list[LayoutNode], list[Page]]:
    """Paginate one sequence, with the header on its first page."""
    first_page_height = None
    if header is not None:
        first_page_height = max(config.max_column_height - header.outer_height, 0)
    pages = assemble(items, config.max_column_height, config, first_page_height=first_page_height)

    nodes = flatten_pages(pages)
    if header is not None:
        nodes.insert(0, header)
    return nodes, pages


def build_document(
    problem_items: Sequence[RenderedItem],
    answer_items: Sequence[RenderedItem] = (),
    info: Optional[WorksheetInfo] = None,
    *,
    problem_layout: Optional[LayoutConfig] = None,
    answer_layout: Optional[LayoutConfig] = None,
    show_header: bool = True,
    default_font: str = DEFAULT_FONT,
) -> DocumentDefinition:
    """
    Build the full worksheet document.

    Problems and answers are paginated independently; the answer key
    starts on a fresh page after the last problem page.

    Args:
        problem_items: Sized problem images in display order
        answer_items: Sized answer images (may be empty)
        info: Header and metadata text
        problem_layout: Layout for problems (default LayoutConfig())
        answer_layout: Layout for answers (default LayoutConfig.answer_key())
        show_header: Draw the header block on each sequence's first page
        default_font: Base font name for the renderer

    Returns:
        DocumentDefinition; never raises for empty input
    """
    info = info or WorksheetInfo()
    problem_layout = problem_layout or LayoutConfig()
    answer_layout = answer_layout or LayoutConfig.answer_key()
    with_header = show_header and bool(problem_items)

    problem_header = header_block(info, len(problem_items), problem_layout) if with_header else None
    content, problem_pages = _sequence(problem_items, problem_layout, problem_header)

    answer_pages: list[Page] = []
    if answer_items:
        answer_header = header_block(info, len(problem_items), answer_layout) if with_header else None
        answer_nodes, answer_pages = _sequence(answer_items, answer_layout, answer_header)
        if content:
            content.append(PageBreakNode())
        content.extend(answer_nodes)

    page_width = problem_layout.page_width

    def footer(page_number: int, page_count: int) -> Tuple[LayoutNode, ...]:
        return page_footer(page_number, page_count, page_width)

    document = DocumentDefinition(
        page_width=problem_layout.page_width,
        page_height=problem_layout.page_height,
        margins=Margin(
            problem_layout.margin_left,
            problem_layout.margin_top,
            problem_layout.margin_right,
            problem_layout.margin_bottom,
        ),
        content=tuple(content),
        footer=footer,
        info=info,
        default_font=default_font,
        problem_page_count=len(problem_pages),
        answer_page_count=len(answer_pages),
    )
    logger.info(
        f"Document built: {len(problem_pages)} problem pages, "
        f"{len(answer_pages)} answer pages"
    )
    return document
