"""
Module: builder.config

Purpose:
    Configuration dataclass for worksheet generation. Immutable
    configuration with validation on construction.

Key Classes:
    - BuilderConfig: Main configuration for building worksheets

Dependencies:
    - dataclasses (std)
    - builder.layout.config: LayoutConfig

Used By:
    - builder.controller: generate_worksheet
    - cli: Built from command-line options
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .layout.config import LayoutConfig

PROXY_URL_ENV = "WORKSHEET_IMAGE_PROXY_URL"


def _proxy_from_env() -> Optional[str]:
    return os.environ.get(PROXY_URL_ENV) or None


@dataclass(frozen=True)
class BuilderConfig:
    """
    Configuration for building worksheets (immutable).

    Attributes:
        proxy_url: Image proxy endpoint (`GET <proxy_url>?url=<image url>`);
            defaults to $WORKSHEET_IMAGE_PROXY_URL, None fetches directly
        request_timeout: Per-image HTTP timeout in seconds
        max_concurrent_fetches: Simultaneous image downloads
        answer_max_height_px: Answer images taller than this are cropped
        max_pixel_width: Optional downscale limit for every image
        font_path: TrueType font for text (built-in Helvetica if None)
        bold_font_path: TrueType bold font (defaults to font_path)
        problem_layout: Layout for the problem pages
        answer_layout: Layout for the answer key pages
        show_header: Draw the worksheet header block

    Example:
        >>> config = BuilderConfig(proxy_url="https://example.com/api/image-proxy")
        >>> config.answer_layout.justify
        False
    """

    # Image fetching
    proxy_url: Optional[str] = field(default_factory=_proxy_from_env)
    request_timeout: float = 15.0
    max_concurrent_fetches: int = 16

    # Image limits
    answer_max_height_px: Optional[int] = 2000
    max_pixel_width: Optional[int] = None

    # Fonts
    font_path: Optional[Path] = None
    bold_font_path: Optional[Path] = None

    # Layout
    problem_layout: LayoutConfig = field(default_factory=LayoutConfig)
    answer_layout: LayoutConfig = field(default_factory=LayoutConfig.answer_key)
    show_header: bool = True

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.request_timeout <= 0:
            raise ValueError(f"request_timeout must be positive: {self.request_timeout}")
        if self.max_concurrent_fetches < 1:
            raise ValueError(f"max_concurrent_fetches must be >= 1: {self.max_concurrent_fetches}")
        if self.answer_max_height_px is not None and self.answer_max_height_px <= 0:
            raise ValueError(f"answer_max_height_px must be positive: {self.answer_max_height_px}")
        if self.max_pixel_width is not None and self.max_pixel_width <= 0:
            raise ValueError(f"max_pixel_width must be positive: {self.max_pixel_width}")
        if self.proxy_url is not None and not self.proxy_url.startswith(("http://", "https://")):
            raise ValueError(f"proxy_url must be an http(s) URL: {self.proxy_url!r}")
        if self.font_path is not None and not Path(self.font_path).is_file():
            raise ValueError(f"Font file not found: {self.font_path}")
        if self.bold_font_path is not None and not Path(self.bold_font_path).is_file():
            raise ValueError(f"Font file not found: {self.bold_font_path}")
