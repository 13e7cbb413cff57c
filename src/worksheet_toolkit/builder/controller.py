"""
Module: builder.controller

Purpose:
    Orchestrate one worksheet generation.
    Overrides -> Measure -> Normalize -> Layout -> Engine -> Render

Key Functions:
    - generate_worksheet(): Main entry point (async)
    - generate_worksheet_sync(): Blocking wrapper for scripts and the CLI

Key Classes:
    - GenerationRequest: Problems + worksheet info, tagged with a token
    - GenerationTracker: Hands out tokens and drops stale results
    - GenerationProgress / GenerationStage: Progress callback payload
    - GenerationResult: PDF bytes plus page counts and timings

Dependencies:
    - httpx: Shared client for image fetching
    - builder.images: ImageMeasurer
    - builder.layout: Normalization and document building
    - builder.output: PDF engine

Used By:
    - cli: `build` command
    - gui.viewer: Retry
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Dict, Mapping, Optional, Sequence, Tuple, Union

import httpx

from worksheet_toolkit.core.models import ImageRef, ProblemRecord

from .config import BuilderConfig
from .errors import OverrideLookupError
from .images import ImageMeasurer, placeholder_image
from .layout import ResolvedImage, WorksheetInfo, build_document, to_rendered_items
from .output import download_filename, get_engine, render_pdf

logger = logging.getLogger(__name__)

OverrideLookup = Callable[
    [Sequence[str]],
    Union[Mapping[str, str], Awaitable[Mapping[str, str]]],
]


class GenerationStage(str, Enum):
    FETCHING_IMAGES = "fetching_images"
    LAYING_OUT = "laying_out"
    LOADING_LIBRARY = "loading_library"
    GENERATING = "generating"
    COMPLETE = "complete"


@dataclass(frozen=True)
class GenerationProgress:
    """Progress callback payload; percent runs 0-100."""

    stage: GenerationStage
    percent: int
    message: str = ""


ProgressCallback = Callable[[GenerationProgress], None]


@dataclass(frozen=True)
class GenerationRequest:
    """
    One generation attempt (immutable).

    Attributes:
        token: Monotonic id from GenerationTracker
        problems: Problems in display order
        info: Header/metadata text
        include_answers: Append the answer key
    """

    token: int
    problems: Tuple[ProblemRecord, ...]
    info: WorksheetInfo = field(default_factory=WorksheetInfo)
    include_answers: bool = True


@dataclass(frozen=True)
class GenerationResult:
    """
    Generated worksheet (immutable).

    Attributes:
        token: Token of the request that produced it
        pdf_bytes: Non-empty PDF
        page_count: Total physical pages
        problem_page_count / answer_page_count: Pages per sequence
        placeholder_count: Images that could not be loaded
        timings: Seconds per pipeline step
        filename: Sanitized download name
    """

    token: int
    pdf_bytes: bytes
    page_count: int
    problem_page_count: int
    answer_page_count: int
    placeholder_count: int
    timings: Dict[str, float]
    filename: str


class GenerationTracker:
    """
    Guards against late results overwriting newer ones.

    Every new request gets a higher token; only the result for the most
    recent token is accepted.

    Example:
        >>> tracker = GenerationTracker()
        >>> first = tracker.next_request(problems)
        >>> second = tracker.next_request(problems)
        >>> tracker.is_current(first.token)
        False
    """

    def __init__(self):
        self._token = 0
        self._lock = threading.Lock()

    @property
    def current_token(self) -> int:
        return self._token

    def next_request(
        self,
        problems: Sequence[ProblemRecord],
        info: Optional[WorksheetInfo] = None,
        *,
        include_answers: bool = True,
    ) -> GenerationRequest:
        with self._lock:
            self._token += 1
            token = self._token
        return GenerationRequest(
            token=token,
            problems=tuple(problems),
            info=info or WorksheetInfo(),
            include_answers=include_answers,
        )

    def is_current(self, token: int) -> bool:
        return token == self._token

    def accept(self, result: GenerationResult) -> bool:
        """True if `result` belongs to the latest request."""
        if not self.is_current(result.token):
            logger.info(f"Discarding stale result for request {result.token} (current {self._token})")
            return False
        return True


async def generate_worksheet(
    request: GenerationRequest,
    config: Optional[BuilderConfig] = None,
    *,
    override_lookup: Optional[OverrideLookup] = None,
    client: Optional[httpx.AsyncClient] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> GenerationResult:
    """
    Generate a worksheet PDF.

    Pipeline:
    1. Look up edited-image overrides (fails fast, before any image work)
    2. Measure problem and answer images concurrently
    3. Size items and build the document
    4. Load the PDF engine (first call only)
    5. Render and check the output is non-empty

    Args:
        request: What to generate
        config: Builder configuration
        override_lookup: resource ids -> override image URL (sync or async)
        client: Shared HTTP client (one is created per call if omitted)
        on_progress: Called at every stage

    Returns:
        GenerationResult

    Raises:
        OverrideLookupError: Override data could not be fetched
        RendererInitError: PDF engine failed to load
        EmptyPdfError: Rendering produced zero bytes
        RenderError: Rendering failed
    """
    config = config or BuilderConfig()
    problems = request.problems
    answered = [p for p in problems if p.has_answer] if request.include_answers else []
    timings: Dict[str, float] = {}
    start_time = time.perf_counter()

    def report(stage: GenerationStage, percent: int, message: str = "") -> None:
        if on_progress is not None:
            on_progress(GenerationProgress(stage, percent, message))

    logger.info(
        f"Generating worksheet {request.token}: {len(problems)} problems, "
        f"{len(answered)} answers"
    )

    # 1. Overrides
    report(GenerationStage.FETCHING_IMAGES, 0, "Checking for edited images")
    step = time.perf_counter()
    resource_ids = [p.id for p in problems] + [p.answer_resource_id for p in answered]
    overrides = await _lookup_overrides(override_lookup, resource_ids)
    timings["overrides"] = time.perf_counter() - step

    # 2. Images
    report(GenerationStage.FETCHING_IMAGES, 10, f"Loading {len(problems) + len(answered)} images")
    step = time.perf_counter()
    async with ImageMeasurer(
        client,
        proxy_url=config.proxy_url,
        timeout=config.request_timeout,
        max_concurrent=config.max_concurrent_fetches,
    ) as measurer:
        problem_images, answer_images = await asyncio.gather(
            _measure_with_fallback(
                measurer,
                [(overrides.get(p.id), p.image_ref) for p in problems],
                max_pixel_width=config.max_pixel_width,
            ),
            _measure_with_fallback(
                measurer,
                [(overrides.get(p.answer_resource_id), p.answer_ref) for p in answered],
                max_height=config.answer_max_height_px,
                max_pixel_width=config.max_pixel_width,
            ),
        )
    timings["images"] = time.perf_counter() - step
    placeholder_count = sum(1 for img in (*problem_images, *answer_images) if img.is_placeholder)
    if placeholder_count:
        logger.warning(f"{placeholder_count} images unavailable, using placeholders")

    # 3. Layout
    report(GenerationStage.LAYING_OUT, 40, "Laying out pages")
    step = time.perf_counter()
    problem_items = to_rendered_items(
        problem_images,
        config.problem_layout,
        metadata=[p.metadata for p in problems],
    )
    # Answers keep the number of their problem, not their position in the key
    answer_labels = [
        f"{index + 1}." for index, p in enumerate(problems) if p.has_answer
    ] if request.include_answers else []
    answer_items = to_rendered_items(
        answer_images,
        config.answer_layout,
        labels=answer_labels,
    )
    document = build_document(
        problem_items,
        answer_items,
        request.info,
        problem_layout=config.problem_layout,
        answer_layout=config.answer_layout,
        show_header=config.show_header,
    )
    timings["layout"] = time.perf_counter() - step

    # 4. Engine
    report(GenerationStage.LOADING_LIBRARY, 60, "Loading PDF library")
    step = time.perf_counter()
    engine = await get_engine(config.font_path, config.bold_font_path)
    timings["engine"] = time.perf_counter() - step

    # 5. Render
    report(GenerationStage.GENERATING, 80, "Generating PDF")
    step = time.perf_counter()
    pdf_bytes = await render_pdf(document, engine=engine)
    timings["render"] = time.perf_counter() - step
    timings["total"] = time.perf_counter() - start_time

    report(GenerationStage.COMPLETE, 100, "Done")
    logger.info(
        "Worksheet generated in {total:.2f}s (overrides {overrides:.2f}s, images {images:.2f}s, "
        "layout {layout:.2f}s, engine {engine:.2f}s, render {render:.2f}s)".format(**timings)
    )

    return GenerationResult(
        token=request.token,
        pdf_bytes=pdf_bytes,
        page_count=document.page_count,
        problem_page_count=document.problem_page_count,
        answer_page_count=document.answer_page_count,
        placeholder_count=placeholder_count,
        timings=timings,
        filename=download_filename(request.info.title, request.info.author),
    )


def generate_worksheet_sync(
    request: GenerationRequest,
    config: Optional[BuilderConfig] = None,
    **kwargs,
) -> GenerationResult:
    """Run generate_worksheet() on a fresh event loop."""
    return asyncio.run(generate_worksheet(request, config, **kwargs))


async def _lookup_overrides(
    lookup: Optional[OverrideLookup],
    resource_ids: Sequence[str],
) -> Mapping[str, str]:
    """Edited-image URLs by resource id; empty when no lookup is configured."""
    if lookup is None or not resource_ids:
        return {}
    try:
        result = lookup(list(dict.fromkeys(resource_ids)))
        if inspect.isawaitable(result):
            result = await result
    except Exception as e:
        raise OverrideLookupError(f"Could not fetch override data: {e}") from e

    if result is None:
        return {}
    if not isinstance(result, Mapping):
        raise OverrideLookupError(
            f"Could not fetch override data: expected a mapping, got {type(result).__name__}"
        )
    overrides = {key: url for key, url in result.items() if isinstance(url, str) and url}
    if overrides:
        logger.info(f"Using {len(overrides)} edited images")
    return overrides


async def _measure_with_fallback(
    measurer: ImageMeasurer,
    refs: Sequence[Tuple[Optional[ImageRef], ImageRef]],
    **limits,
) -> list[ResolvedImage]:
    """
    Measure (override, default) pairs in order.

    The override is tried first; if it is unavailable the default is
    tried; if both fail the placeholder stands.
    """

    async def resolve(override: Optional[ImageRef], default: ImageRef) -> ResolvedImage:
        if override:
            image = await measurer.measure(override, **limits)
            if not image.is_placeholder:
                return image
            logger.debug("Edited image unavailable, falling back to the original")
        return await measurer.measure(default, **limits)

    results = await asyncio.gather(
        *(resolve(override, default) for override, default in refs),
        return_exceptions=True,
    )
    return [
        placeholder_image() if isinstance(result, BaseException) else result
        for result in results
    ]
