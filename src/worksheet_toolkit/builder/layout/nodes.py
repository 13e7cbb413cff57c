"""
Module: builder.layout.nodes

Purpose:
    Renderer-agnostic document tree. Layout components build these
    nodes; only builder.output.renderer knows how to draw them, so the
    whole layout engine is testable without a PDF engine.

Key Classes:
    - Margin: (left, top, right, bottom) in points
    - ImageNode, TextNode, BadgeRowNode, RuleNode: Leaf nodes
    - StackNode: Vertical stack of nodes
    - ColumnsNode / ColumnSlot: Side-by-side fixed-width stacks
    - PageBreakNode: Explicit page break marker

Dependencies:
    - dataclasses (std)

Used By:
    - builder.layout.columns / paginator / document: Tree construction
    - builder.output.renderer: Serialization to PDF
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, NamedTuple, Optional, Tuple, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from .models import ResolvedImage


class NodeKind(str, Enum):
    IMAGE = "image"
    TEXT = "text"
    BADGES = "badges"
    RULE = "rule"
    STACK = "stack"
    COLUMNS = "columns"
    PAGE_BREAK = "page_break"


class Margin(NamedTuple):
    """Outer spacing of a node: left, top, right, bottom."""

    left: float = 0
    top: float = 0
    right: float = 0
    bottom: float = 0

    @classmethod
    def below(cls, amount: float) -> "Margin":
        return cls(0, 0, 0, amount)

    @property
    def vertical(self) -> float:
        return self.top + self.bottom


NO_MARGIN = Margin()


@dataclass(frozen=True)
class ImageNode:
    """Image drawn at an explicit size (aspect ratio already applied)."""

    kind: ClassVar[NodeKind] = NodeKind.IMAGE

    image: "ResolvedImage"
    width: float
    height: float
    alignment: str = "center"
    margin: Margin = NO_MARGIN

    @property
    def outer_height(self) -> float:
        return self.height + self.margin.vertical


@dataclass(frozen=True)
class TextNode:
    """Single line of text. An empty string only contributes its margins."""

    kind: ClassVar[NodeKind] = NodeKind.TEXT

    text: str
    font_size: float = 10
    bold: bool = False
    color: str = "#000000"
    alignment: str = "left"
    margin: Margin = NO_MARGIN

    @property
    def outer_height(self) -> float:
        body = self.font_size if self.text else 0
        return body + self.margin.vertical


@dataclass(frozen=True)
class BadgeRowNode:
    """
    Wrapping row of metadata badges.

    Occupies exactly `height` (+ margins) regardless of how many lines
    the labels wrap to, so the packing height stays exact. Labels past
    `max_lines` are dropped by the renderer.
    """

    kind: ClassVar[NodeKind] = NodeKind.BADGES

    labels: Tuple[str, ...]
    height: float
    font_size: float = 7
    max_lines: int = 3
    line_gap: float = 2
    separator: str = "  ·  "
    color: str = "#374151"
    background: str = "#f3f4f6"
    margin: Margin = NO_MARGIN

    @property
    def outer_height(self) -> float:
        return self.height + self.margin.vertical


@dataclass(frozen=True)
class RuleNode:
    """Horizontal line from x1 to x2, relative to the content origin."""

    kind: ClassVar[NodeKind] = NodeKind.RULE

    x1: float
    x2: float
    line_width: float = 1
    color: str = "#e0e0e0"
    margin: Margin = NO_MARGIN

    @property
    def outer_height(self) -> float:
        return self.line_width + self.margin.vertical


@dataclass(frozen=True)
class StackNode:
    """Children drawn top to bottom. Unbreakable stacks never straddle pages."""

    kind: ClassVar[NodeKind] = NodeKind.STACK

    children: Tuple["LayoutNode", ...]
    margin: Margin = NO_MARGIN
    unbreakable: bool = True

    @property
    def outer_height(self) -> float:
        return sum(child.outer_height for child in self.children) + self.margin.vertical


@dataclass(frozen=True)
class ColumnSlot:
    width: float
    stack: Tuple["LayoutNode", ...] = ()

    @property
    def height(self) -> float:
        return sum(node.outer_height for node in self.stack)


@dataclass(frozen=True)
class ColumnsNode:
    """Fixed-width columns placed left to right with `column_gap` between them."""

    kind: ClassVar[NodeKind] = NodeKind.COLUMNS

    columns: Tuple[ColumnSlot, ...]
    column_gap: float = 15
    margin: Margin = NO_MARGIN

    @property
    def outer_height(self) -> float:
        body = max((slot.height for slot in self.columns), default=0)
        return body + self.margin.vertical


@dataclass(frozen=True)
class PageBreakNode:
    """Everything after this marker starts on a new physical page."""

    kind: ClassVar[NodeKind] = NodeKind.PAGE_BREAK

    outer_height: float = field(default=0, init=False)


LayoutNode = Union[
    ImageNode,
    TextNode,
    BadgeRowNode,
    RuleNode,
    StackNode,
    ColumnsNode,
    PageBreakNode,
]


def iter_images(nodes) -> "list[ImageNode]":
    """Image nodes of a tree in drawing order."""
    found: list[ImageNode] = []
    for node in nodes:
        if isinstance(node, ImageNode):
            found.append(node)
        elif isinstance(node, StackNode):
            found.extend(iter_images(node.children))
        elif isinstance(node, ColumnsNode):
            for slot in node.columns:
                found.extend(iter_images(slot.stack))
    return found


def find_text(nodes, text: str) -> Optional[TextNode]:
    """First text node with exactly `text`, searched depth first."""
    for node in nodes:
        if isinstance(node, TextNode) and node.text == text:
            return node
        children = ()
        if isinstance(node, StackNode):
            children = node.children
        elif isinstance(node, ColumnsNode):
            children = tuple(n for slot in node.columns for n in slot.stack)
        hit = find_text(children, text)
        if hit is not None:
            return hit
    return None
