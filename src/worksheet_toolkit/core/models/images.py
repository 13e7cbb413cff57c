"""
Module: images

Purpose:
    Type alias for the opaque image references carried by problem records.

Key Functions:
    - describe_ref(): Short printable form of a reference for logs

Used By:
    - core.models.problems.ProblemRecord
    - builder.images.measurer: Resolves references to pixels
"""

from __future__ import annotations

from pathlib import Path
from typing import Union

# http(s) URL, data: URL, local path, or already-fetched bytes
ImageRef = Union[str, Path, bytes]

_MAX_DESCRIBE_LENGTH = 80


def describe_ref(ref: ImageRef) -> str:
    """
    Short, log-friendly description of an image reference.

    Data URLs and raw bytes are summarized instead of printed in full.

    Example:
        >>> describe_ref(b"\\x89PNG...")
        '<bytes len=7>'
    """
    if isinstance(ref, bytes):
        return f"<bytes len={len(ref)}>"
    text = str(ref)
    if text.startswith("data:"):
        return f"<data-url len={len(text)}>"
    if len(text) > _MAX_DESCRIBE_LENGTH:
        return text[: _MAX_DESCRIBE_LENGTH - 3] + "..."
    return text
