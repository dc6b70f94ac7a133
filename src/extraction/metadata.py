# src/extraction/metadata.py — v2
"""Image metadata extraction: format checks, dimensions, size and content hash.

Dimensions are read with Pillow. Files Pillow cannot identify still produce
metadata, with ``width``/``height`` left as None and the format taken from
the extension.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path

from PIL import Image, UnidentifiedImageError
from pydantic import BaseModel, ConfigDict

from m2md.cache.key import compute_content_hash
from m2md.core.sizes import human_size

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS: tuple[str, ...] = (".png", ".jpg", ".jpeg", ".webp", ".gif")

_MIME_MAP: dict[str, str] = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
    ".gif": "image/gif",
}

# Pillow format names and bare extensions → display names
_FORMAT_NAMES: dict[str, str] = {
    "png": "PNG",
    "jpg": "JPEG",
    "jpeg": "JPEG",
    "mpo": "JPEG",
    "webp": "WebP",
    "gif": "GIF",
}


class UnsupportedFormatError(ValueError):
    """Raised when a file extension is not in the supported set."""

    def __init__(self, extension: str) -> None:
        self.extension = extension
        super().__init__(
            f"Unsupported image format: {self.extension or '(none)'}. "
            f"Supported formats: {', '.join(SUPPORTED_EXTENSIONS)}"
        )


class ImageNotFoundError(FileNotFoundError):
    """Raised when the input image does not exist."""

    def __init__(self, path: str | Path) -> None:
        self.path = str(path)
        super().__init__(f"File not found: {path}")


class ImageMetadata(BaseModel):
    """Derived facts about one image source."""

    model_config = ConfigDict(frozen=True)

    filename: str
    basename: str
    extension: str
    format: str
    width: int | None = None
    height: int | None = None
    size_bytes: int
    size_human: str
    sha256: str

    @property
    def dimensions(self) -> str:
        """``WxH`` or ``unknown``."""
        if self.width and self.height:
            return f"{self.width}x{self.height}"
        return "unknown"


def is_supported_format(path: str | Path) -> bool:
    return Path(path).suffix.lower() in SUPPORTED_EXTENSIONS


def get_supported_formats() -> list[str]:
    return list(SUPPORTED_EXTENSIONS)


def mime_type_from_extension(extension: str) -> str:
    """Map ``.png``/``.jpg``/… to a MIME type.

    Raises:
        UnsupportedFormatError: For anything outside the supported set.
    """
    mime = _MIME_MAP.get(extension.lower())
    if mime is None:
        raise UnsupportedFormatError(extension)
    return mime


def extension_from_mime_type(mime_type: str) -> str:
    """Best-effort reverse of mime_type_from_extension (defaults to ``.png``)."""
    lower = mime_type.lower()
    if "png" in lower:
        return ".png"
    if "jpeg" in lower or "jpg" in lower:
        return ".jpg"
    if "webp" in lower:
        return ".webp"
    if "gif" in lower:
        return ".gif"
    return ".png"


def check_supported(path: str | Path) -> None:
    """Pre-flight format check, no I/O."""
    if not is_supported_format(path):
        raise UnsupportedFormatError(Path(path).suffix)


def extract_metadata(path: str | Path) -> tuple[ImageMetadata, bytes]:
    """Read an image file once and derive its metadata.

    Returns:
        (metadata, raw bytes) so callers never read the file twice.

    Raises:
        ImageNotFoundError: If the path does not exist.
    """
    file_path = Path(path)
    try:
        data = file_path.read_bytes()
    except FileNotFoundError as e:
        raise ImageNotFoundError(file_path) from e
    return _build_metadata(data, file_path.name, file_path.suffix.lower()), data


def extract_metadata_from_bytes(
    data: bytes,
    filename: str,
    mime_type: str | None = None,
) -> ImageMetadata:
    """Metadata for an in-memory image (URL fetch, clipboard, tests)."""
    name = Path(filename).name
    ext = extension_from_mime_type(mime_type) if mime_type else Path(name).suffix.lower()
    return _build_metadata(data, name, ext)


def _build_metadata(data: bytes, filename: str, extension: str) -> ImageMetadata:
    width, height, detected = _probe_image(data)
    key = detected or extension.lstrip(".")
    return ImageMetadata(
        filename=filename,
        basename=Path(filename).stem,
        extension=extension,
        format=_FORMAT_NAMES.get(key, key.upper() if key else "unknown"),
        width=width,
        height=height,
        size_bytes=len(data),
        size_human=human_size(len(data)),
        sha256=compute_content_hash(data),
    )


def _probe_image(data: bytes) -> tuple[int | None, int | None, str | None]:
    """Return (width, height, lowercase Pillow format) or Nones."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            width, height = img.size
            fmt = (img.format or "").lower() or None
            return width, height, fmt
    except (UnidentifiedImageError, OSError, ValueError) as e:
        logger.debug("Could not read image dimensions: %s", e)
        return None, None, None
