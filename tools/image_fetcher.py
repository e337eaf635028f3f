"""Fetch product reference images for the look renderer."""

from __future__ import annotations

import base64
import contextvars
import logging
import re
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Sequence
from urllib.parse import urlparse

import requests

from tools.observability import instrument_tool

logger = logging.getLogger(__name__)

MAX_IMAGE_WORKERS = 4
_DATA_URI_PATTERN = re.compile(r"^data:(?P<mime>image/[\w.+-]+);base64,(?P<data>.+)$", re.DOTALL)


class ImageFetchError(RuntimeError):
    """Raised when a reference image cannot be retrieved or is not an image."""


def _decode_data_uri(uri: str) -> Dict[str, object]:
    match = _DATA_URI_PATTERN.match(uri)
    if not match:
        raise ImageFetchError("Unsupported data URI")
    try:
        data = base64.b64decode(match.group("data"), validate=True)
    except ValueError as exc:
        raise ImageFetchError(f"Invalid base64 payload: {exc}") from exc
    return {"mime_type": match.group("mime"), "data": data}


def fetch_image(url: str, timeout: Optional[float] = 10.0) -> Dict[str, object]:
    """Download one image and return it as an inline part.

    Raises:
        ImageFetchError: For invalid URLs, network failures, non-2xx responses
            or content that is not an image.
    """

    if url.startswith("data:"):
        return _decode_data_uri(url)

    parsed = urlparse(url)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ImageFetchError(f"Unsupported or invalid image URL: {url}")
    try:
        response = requests.get(url, timeout=timeout)
    except requests.RequestException as exc:
        raise ImageFetchError(f"Network error fetching {url}: {exc}") from exc

    if not 200 <= response.status_code < 300:
        raise ImageFetchError(f"Failed to fetch {url}: HTTP {response.status_code}")
    mime_type = (response.headers.get("Content-Type") or "").split(";")[0].strip().lower()
    if not mime_type.startswith("image/"):
        raise ImageFetchError(f"Not an image ({mime_type or 'unknown'}): {url}")
    return {"mime_type": mime_type, "data": response.content}


@instrument_tool("fetch_reference_images")
def fetch_reference_images(urls: Sequence[str], timeout: Optional[float] = 10.0) -> List[Dict[str, object]]:
    """Fetch reference images concurrently, keeping input order.

    Images that fail are logged and skipped; the renderer works with whatever
    subset could be retrieved.
    """

    unique_urls = list(dict.fromkeys(url for url in urls if url))
    if not unique_urls:
        return []

    images: List[Dict[str, object]] = []
    with ThreadPoolExecutor(max_workers=min(MAX_IMAGE_WORKERS, len(unique_urls))) as executor:
        futures = [
            executor.submit(contextvars.copy_context().run, fetch_image, url, timeout) for url in unique_urls
        ]
        for url, future in zip(unique_urls, futures):
            try:
                images.append(future.result())
            except ImageFetchError as exc:
                logger.warning("Skipping reference image", extra={"url": url, "error": str(exc)})
    return images


__all__ = ["ImageFetchError", "fetch_image", "fetch_reference_images"]
