"""
Module: builder.output.renderer

Purpose:
    Serialize a DocumentDefinition onto a ReportLab canvas.
    Walks the node tree top-down, keeping a cursor measured from the
    top of the page, and converts to PDF's bottom-up coordinates only
    when drawing.

Key Functions:
    - render_document(): DocumentDefinition -> PDF bytes

Dependencies:
    - reportlab: PDF generation
    - PIL: Image handling
    - builder.layout: Node tree

Used By:
    - builder.output.engine: PdfEngine.render
"""

from __future__ import annotations

import io
import logging
from typing import Optional

from PIL import Image
from reportlab.lib.colors import HexColor
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from ..layout.badges import wrap_labels
from ..layout.document import DocumentDefinition
from ..layout.nodes import (
    BadgeRowNode,
    ColumnsNode,
    ImageNode,
    PageBreakNode,
    RuleNode,
    StackNode,
    TextNode,
)

logger = logging.getLogger(__name__)

# Footer sits in the bottom margin, this far below the content area
FOOTER_TOP_OFFSET = 5
# Baseline position within a text line, as a fraction of the font size
BASELINE_RATIO = 0.8
# Rounding slack before a page counts as overflowing
OVERFLOW_TOLERANCE = 0.5

BOLD_VARIANTS = {
    "Helvetica": "Helvetica-Bold",
    "Times-Roman": "Times-Bold",
    "Courier": "Courier-Bold",
}

PLACEHOLDER_FILL = "#f3f4f6"


class _Fonts:
    def __init__(self, regular: str, bold: str):
        self.regular = regular
        self.bold = bold

    def pick(self, bold: bool) -> str:
        return self.bold if bold else self.regular


def render_document(
    doc: DocumentDefinition,
    *,
    regular_font: Optional[str] = None,
    bold_font: Optional[str] = None,
) -> bytes:
    """
    Render a document to PDF bytes.

    Args:
        doc: Document to render
        regular_font: Registered font name (defaults to doc.default_font)
        bold_font: Registered bold font name

    Returns:
        PDF file contents

    Example:
        >>> pdf = render_document(build_document(items))
        >>> pdf[:5]
        b'%PDF-'
    """
    regular = regular_font or doc.default_font
    fonts = _Fonts(regular, bold_font or BOLD_VARIANTS.get(regular, regular))

    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=(doc.page_width, doc.page_height))
    c.setTitle(doc.info.title)
    c.setAuthor(doc.info.author)
    c.setSubject(doc.info.subject)
    c.setCreator("worksheet_toolkit")

    page_count = doc.page_count
    page_number = 1
    top = doc.margins.top

    for node in doc.content:
        if isinstance(node, PageBreakNode):
            _finish_page(c, doc, fonts, page_number, page_count, top)
            page_number += 1
            top = doc.margins.top
            continue
        top = _draw_node(c, node, doc.margins.left, top, doc.content_width, doc.page_height, fonts)

    _finish_page(c, doc, fonts, page_number, page_count, top)
    c.save()

    data = buffer.getvalue()
    logger.info(f"Rendered {page_count} pages ({len(data)} bytes)")
    return data


def _finish_page(
    c: canvas.Canvas,
    doc: DocumentDefinition,
    fonts: _Fonts,
    page_number: int,
    page_count: int,
    top: float,
) -> None:
    """Draw the footer and close the current page."""
    content_bottom = doc.page_height - doc.margins.bottom
    if top > content_bottom + OVERFLOW_TOLERANCE:
        logger.warning(
            f"Page {page_number} content overflows by {top - content_bottom:.1f}pt"
        )

    footer_top = content_bottom + FOOTER_TOP_OFFSET
    for node in doc.footer(page_number, page_count):
        footer_top = _draw_node(c, node, 0, footer_top, doc.page_width, doc.page_height, fonts)
    c.showPage()


def _draw_node(
    c: canvas.Canvas,
    node,
    x: float,
    top: float,
    width: float,
    page_height: float,
    fonts: _Fonts,
) -> float:
    """
    Draw one node with its top edge (outer margin included) at `top`.

    Returns:
        The cursor position below the node
    """
    if isinstance(node, PageBreakNode):
        return top

    margin = node.margin
    inner_x = x + margin.left
    inner_width = width - margin.left - margin.right
    inner_top = top + margin.top

    if isinstance(node, TextNode):
        _draw_text(c, node, inner_x, inner_top, inner_width, page_height, fonts)
    elif isinstance(node, ImageNode):
        _draw_image(c, node, inner_x, inner_top, inner_width, page_height)
    elif isinstance(node, BadgeRowNode):
        _draw_badges(c, node, inner_x, inner_top, inner_width, page_height, fonts)
    elif isinstance(node, RuleNode):
        _draw_rule(c, node, inner_x, inner_top, page_height)
    elif isinstance(node, StackNode):
        cursor = inner_top
        for child in node.children:
            cursor = _draw_node(c, child, inner_x, cursor, inner_width, page_height, fonts)
    elif isinstance(node, ColumnsNode):
        slot_x = inner_x
        for slot in node.columns:
            cursor = inner_top
            for child in slot.stack:
                cursor = _draw_node(c, child, slot_x, cursor, slot.width, page_height, fonts)
            slot_x += slot.width + node.column_gap
    else:
        raise TypeError(f"Unknown layout node: {type(node).__name__}")

    return top + node.outer_height


def _draw_text(c, node: TextNode, x, top, width, page_height, fonts: _Fonts) -> None:
    if not node.text:
        return
    font = fonts.pick(node.bold)
    baseline = page_height - top - node.font_size * BASELINE_RATIO

    c.saveState()
    c.setFont(font, node.font_size)
    c.setFillColor(HexColor(node.color))
    if node.alignment == "center":
        c.drawCentredString(x + width / 2, baseline, node.text)
    elif node.alignment == "right":
        c.drawRightString(x + width, baseline, node.text)
    else:
        c.drawString(x, baseline, node.text)
    c.restoreState()


def _draw_image(c, node: ImageNode, x, top, width, page_height) -> None:
    if node.alignment == "center":
        x += max(0, (width - node.width) / 2)
    elif node.alignment == "right":
        x += max(0, width - node.width)
    y = page_height - top - node.height

    pixels = node.image.pixel_data
    if pixels is None:
        c.saveState()
        c.setFillColor(HexColor(PLACEHOLDER_FILL))
        c.rect(x, y, node.width, node.height, stroke=0, fill=1)
        c.restoreState()
        return

    c.drawImage(
        _pil_to_reader(pixels),
        x,
        y,
        width=node.width,
        height=node.height,
        mask="auto",
    )


def _draw_badges(c, node: BadgeRowNode, x, top, width, page_height, fonts: _Fonts) -> None:
    font = fonts.regular
    lines = wrap_labels(
        node.labels,
        lambda text: stringWidth(text, font, node.font_size),
        width,
        separator=node.separator,
        max_lines=node.max_lines,
    )

    c.saveState()
    c.setFont(font, node.font_size)
    line_top = top
    for line in lines:
        baseline = page_height - line_top - node.font_size * BASELINE_RATIO
        line_width = min(stringWidth(line, font, node.font_size) + 4, width)
        c.setFillColor(HexColor(node.background))
        c.rect(x, page_height - line_top - node.font_size, line_width, node.font_size, stroke=0, fill=1)
        c.setFillColor(HexColor(node.color))
        c.drawString(x + 2, baseline, line)
        line_top += node.font_size + node.line_gap
    c.restoreState()


def _draw_rule(c, node: RuleNode, x, top, page_height) -> None:
    y = page_height - top - node.line_width / 2
    c.saveState()
    c.setStrokeColor(HexColor(node.color))
    c.setLineWidth(node.line_width)
    c.line(x + node.x1, y, x + node.x2, y)
    c.restoreState()


def _pil_to_reader(img: Image.Image) -> ImageReader:
    """
    Convert PIL image to ReportLab ImageReader.

    Args:
        img: PIL Image object

    Returns:
        ImageReader for use with ReportLab
    """
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    buf.seek(0)
    return ImageReader(buf)
