"""
Module: builder.images.measurer

Purpose:
    Resolve image references to decoded pixels and natural sizes.
    All images of a generation pass are fetched concurrently; a failed
    image never fails the pass, it becomes the placeholder instead.

Key Classes:
    - ImageMeasurer: Async fetch + decode with per-pass memoization

Algorithm:
    1. Fetch bytes: raw bytes as-is, data: URLs decoded, local paths
       read in a worker thread, http(s) URLs through the image proxy
    2. Decode via the ImageDecoder (worker thread)
    3. Optionally crop to a max height and downscale to a max width
    4. Any failure -> placeholder (logged at debug level)

Dependencies:
    - httpx: Async HTTP client
    - PIL: Decoding and resizing (via decoder / cropper)

Used By:
    - builder.controller: Generation pipeline
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
from pathlib import Path
from typing import Hashable, Optional, Sequence
from urllib.parse import unquote_to_bytes

import httpx

from worksheet_toolkit.core.models import ImageRef
from worksheet_toolkit.core.models.images import describe_ref

from ..errors import ImageDecodeError, ImageFetchError
from ..layout.models import ResolvedImage
from .cropper import crop_to_height, fit_width
from .decoder import ImageDecoder, PillowImageDecoder
from .placeholder import placeholder_image

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15.0
DEFAULT_MAX_CONCURRENT = 16

_RESOLVE_ERRORS = (
    ImageFetchError,
    ImageDecodeError,
    httpx.HTTPError,
    httpx.InvalidURL,
    OSError,
    ValueError,
)


class ImageMeasurer:
    """
    Fetches and measures images for one generation pass.

    Results are memoized per (reference, max_height, max_pixel_width),
    so the same image requested twice is fetched once. Create a new
    measurer per pass.

    Example:
        >>> async with ImageMeasurer(proxy_url="https://example.com/api/image-proxy") as m:
        ...     images = await m.measure_all(["https://cdn.example.com/p1.png"])
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        decoder: Optional[ImageDecoder] = None,
        *,
        proxy_url: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_concurrent: int = DEFAULT_MAX_CONCURRENT,
    ):
        """
        Args:
            client: Shared HTTP client; one is created (and closed) if omitted
            decoder: Image decoder (Pillow by default)
            proxy_url: Image proxy endpoint taking a `url` query parameter
            timeout: Per-request timeout in seconds
            max_concurrent: Limit on simultaneous fetches
        """
        if max_concurrent < 1:
            raise ValueError(f"max_concurrent must be >= 1: {max_concurrent}")
        self._client = client
        self._owns_client = client is None
        self._decoder = decoder or PillowImageDecoder()
        self._proxy_url = proxy_url
        self._timeout = timeout
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._tasks: dict[Hashable, asyncio.Task] = {}

    async def __aenter__(self) -> "ImageMeasurer":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this measurer created it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout, follow_redirects=True)
        return self._client

    async def measure(
        self,
        ref: ImageRef,
        *,
        max_height: Optional[int] = None,
        max_pixel_width: Optional[int] = None,
    ) -> ResolvedImage:
        """
        Resolve one image. Never raises for a bad image.

        Args:
            ref: URL, data URL, local path or raw bytes
            max_height: Crop taller images to this many pixels (from the top)
            max_pixel_width: Downscale wider images to this many pixels

        Returns:
            ResolvedImage, or the placeholder on any failure
        """
        key = (_ref_key(ref), max_height, max_pixel_width)
        task = self._tasks.get(key)
        if task is None:
            task = asyncio.ensure_future(self._resolve(ref, max_height, max_pixel_width))
            self._tasks[key] = task
        # Shared by every caller with this key, so a cancelled caller must not cancel it
        return await asyncio.shield(task)

    async def measure_all(
        self,
        refs: Sequence[ImageRef],
        *,
        max_height: Optional[int] = None,
        max_pixel_width: Optional[int] = None,
    ) -> list[ResolvedImage]:
        """
        Resolve many images concurrently, preserving input order.

        Every outcome is collected before returning; a failed entry is
        replaced by the placeholder rather than failing the batch.
        """
        results = await asyncio.gather(
            *(self.measure(ref, max_height=max_height, max_pixel_width=max_pixel_width) for ref in refs),
            return_exceptions=True,
        )
        resolved = []
        for ref, result in zip(refs, results):
            if isinstance(result, BaseException):
                logger.debug(f"Measuring {describe_ref(ref)} raised {result!r}, using placeholder")
                result = placeholder_image()
            resolved.append(result)
        return resolved

    async def _resolve(
        self,
        ref: ImageRef,
        max_height: Optional[int],
        max_pixel_width: Optional[int],
    ) -> ResolvedImage:
        try:
            async with self._semaphore:
                data = await self._fetch(ref)
            return await asyncio.to_thread(self._decode, data, max_height, max_pixel_width)
        except _RESOLVE_ERRORS as e:
            logger.debug(f"Image {describe_ref(ref)} unavailable ({e}), using placeholder")
            return placeholder_image()
        except Exception as e:
            logger.warning(f"Unexpected error resolving {describe_ref(ref)}: {e!r}, using placeholder")
            return placeholder_image()

    def _decode(
        self,
        data: bytes,
        max_height: Optional[int],
        max_pixel_width: Optional[int],
    ) -> ResolvedImage:
        img = self._decoder.decode(data)
        if img.width <= 0 or img.height <= 0:
            raise ImageDecodeError(f"Image has no area: {img.width}x{img.height}")
        if max_height is not None:
            img = crop_to_height(img, max_height)
        if max_pixel_width is not None:
            img = fit_width(img, max_pixel_width)
        return ResolvedImage(pixel_data=img, width=img.width, height=img.height)

    async def _fetch(self, ref: ImageRef) -> bytes:
        """Raw bytes for a reference."""
        if isinstance(ref, bytes):
            data = ref
        elif isinstance(ref, Path):
            data = await _read_file(ref)
        elif ref.startswith("data:"):
            data = decode_data_url(ref)
        elif ref.startswith(("http://", "https://")):
            data = await self._fetch_http(ref)
        else:
            data = await _read_file(Path(ref))

        if not data:
            raise ImageFetchError(f"No data for {describe_ref(ref)}")
        return data

    async def _fetch_http(self, url: str) -> bytes:
        client = self._get_client()
        if self._proxy_url:
            response = await client.get(self._proxy_url, params={"url": url}, timeout=self._timeout)
        else:
            response = await client.get(url, timeout=self._timeout)
        response.raise_for_status()
        return response.content


async def _read_file(path: Path) -> bytes:
    try:
        return await asyncio.to_thread(path.read_bytes)
    except OSError as e:
        raise ImageFetchError(f"Cannot read {path}: {e}") from e


def decode_data_url(url: str) -> bytes:
    """
    Payload of a `data:` URL.

    Raises:
        ImageFetchError: If the URL is malformed
    """
    header, sep, payload = url.partition(",")
    if not sep:
        raise ImageFetchError("Malformed data URL")
    if header.endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=False)
        except binascii.Error as e:
            raise ImageFetchError(f"Bad base64 in data URL: {e}") from e
    return unquote_to_bytes(payload)


def _ref_key(ref: ImageRef) -> Hashable:
    if isinstance(ref, Path):
        return ("path", str(ref))
    return ref
