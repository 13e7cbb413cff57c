"""
Module: builder.layout.normalizer

Purpose:
    Convert measured images into column-width render heights.
    Every image is drawn at the same width, so its height follows
    from the aspect ratio.

Key Functions:
    - normalize(): Render height of one image at a target width
    - to_rendered_items(): Build the ordered RenderedItem list

Dependencies:
    - builder.layout.models: ResolvedImage, RenderedItem
    - builder.layout.config: LayoutConfig

Used By:
    - builder.controller: Between measurement and pagination
"""

from __future__ import annotations

from typing import Optional, Sequence

from worksheet_toolkit.core.models import ProblemMetadata

from .config import FALLBACK_RENDER_HEIGHT, LayoutConfig
from .models import RenderedItem, ResolvedImage


def normalize(
    img: ResolvedImage,
    target_width: float,
    fallback_height: float = FALLBACK_RENDER_HEIGHT,
) -> float:
    """
    Height of `img` when drawn at `target_width`.

    Images with no usable size get `fallback_height` so a broken image
    still occupies a sane slot instead of a zero-height one.

    Example:
        >>> normalize(ResolvedImage(None, 480, 300), 240)
        150.0
    """
    if img.width <= 0 or img.height <= 0:
        return fallback_height
    return target_width * img.height / img.width


def to_rendered_items(
    images: Sequence[ResolvedImage],
    config: Optional[LayoutConfig] = None,
    *,
    metadata: Optional[Sequence[Optional[ProblemMetadata]]] = None,
    labels: Optional[Sequence[Optional[str]]] = None,
) -> list[RenderedItem]:
    """
    Size every image for the column and attach its header height.

    Args:
        images: Measured images in display order
        config: Layout configuration (column width, header sizes)
        metadata: Per-image badge metadata, aligned with `images`
        labels: Per-image numbering text, aligned with `images`

    Returns:
        RenderedItems whose sequence_index is the input position
    """
    config = config or LayoutConfig()
    if metadata is not None and len(metadata) != len(images):
        raise ValueError("metadata must align with images")
    if labels is not None and len(labels) != len(images):
        raise ValueError("labels must align with images")

    items = []
    for index, image in enumerate(images):
        meta = metadata[index] if metadata is not None else None
        if not config.show_badges:
            meta = None
        items.append(
            RenderedItem(
                resolved_image=image,
                render_height=normalize(image, config.column_width, config.fallback_height),
                sequence_index=index,
                header_height=config.item_header_height(meta),
                metadata=meta,
                label=labels[index] if labels is not None else None,
            )
        )
    return items
