# src/extraction/url.py — v1
"""Remote image inputs: URL detection and download via httpx."""

from __future__ import annotations

import logging
from pathlib import PurePosixPath
from urllib.parse import unquote, urlparse

import httpx
from pydantic import BaseModel

from m2md.extraction.metadata import SUPPORTED_EXTENSIONS, extension_from_mime_type
from m2md.version import __version__

logger = logging.getLogger(__name__)

IMAGE_CONTENT_TYPES = frozenset({"image/png", "image/jpeg", "image/webp", "image/gif"})

USER_AGENT = f"m2md/{__version__} (image-to-markdown CLI tool)"
DEFAULT_TIMEOUT_S = 30.0


class ContentTypeError(Exception):
    """Raised when a URL responds with something other than an image."""

    def __init__(self, url: str, content_type: str) -> None:
        self.url = url
        self.content_type = content_type
        super().__init__(f"URL is not an image ({content_type}): {url}")


class FetchedImage(BaseModel):
    """Downloaded image bytes plus the name they will be saved under."""

    data: bytes
    mime_type: str
    filename: str


def is_url(value: str) -> bool:
    return value.startswith("http://") or value.startswith("https://")


def looks_like_image_url(value: str) -> bool:
    """True when the URL path ends with a supported image extension."""
    try:
        path = urlparse(value).path.lower()
    except ValueError:
        return False
    return any(path.endswith(ext) for ext in SUPPORTED_EXTENSIONS)


def filename_from_url(url: str) -> str:
    """Last URL path segment, percent-decoded; ``"image"`` when there is none."""
    try:
        path = urlparse(url).path
    except ValueError:
        return "image"
    segments = [s for s in path.split("/") if s]
    if not segments:
        return "image"
    return unquote(segments[-1])


async def fetch_image(
    url: str,
    client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_TIMEOUT_S,
) -> FetchedImage:
    """Download an image URL.

    Raises:
        httpx.HTTPStatusError: On a non-2xx response.
        ContentTypeError: If the response is not an image.
    """
    owns_client = client is None
    http = client or httpx.AsyncClient(
        follow_redirects=True,
        timeout=timeout,
        headers={"User-Agent": USER_AGENT},
    )
    try:
        response = await http.get(url)
        response.raise_for_status()
    finally:
        if owns_client:
            await http.aclose()

    content_type = response.headers.get("content-type", "").split(";")[0].strip().lower()
    if content_type not in IMAGE_CONTENT_TYPES:
        raise ContentTypeError(url, content_type)

    filename = filename_from_url(url)
    if PurePosixPath(filename).suffix.lower() not in SUPPORTED_EXTENSIONS:
        filename += extension_from_mime_type(content_type)

    logger.debug("Fetched %s (%s, %d bytes)", url, content_type, len(response.content))
    return FetchedImage(data=response.content, mime_type=content_type, filename=filename)
