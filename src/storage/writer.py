# src/storage/writer.py — v1
"""Markdown output paths and file writes.

By default the markdown lands next to its image (``photo.png`` →
``photo.md``). ``--output`` redirects to a directory and ``--name`` applies
a filename pattern.
"""

from __future__ import annotations

import re
from datetime import date
from pathlib import Path

_SLUG_STRIP = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """Lowercase, non-alphanumeric runs → "-", no leading/trailing dash."""
    return _SLUG_STRIP.sub("-", text.lower()).strip("-")


def sidecar_path(image_path: str | Path, output_dir: str | Path | None = None) -> Path:
    """``<dir>/<stem>.md`` where dir is ``output_dir`` or the image's own directory."""
    image = Path(image_path)
    directory = Path(output_dir) if output_dir else image.parent
    return directory / f"{image.stem}.md"


def format_output_path(
    image_path: str | Path,
    pattern: str,
    *,
    date_str: str | None = None,
    image_type: str | None = None,
    subject: str | None = None,
    output_dir: str | Path | None = None,
) -> Path:
    """Build an output path from a naming pattern.

    Placeholders: ``{filename}`` (image stem), ``{date}`` (YYYY-MM-DD),
    ``{type}`` (slug, default "image") and ``{subject}`` (slug, default the
    stem). ``.md`` is appended when missing.
    """
    image = Path(image_path)
    stem = image.stem
    name = (
        pattern.replace("{filename}", stem)
        .replace("{date}", date_str or date.today().isoformat())
        .replace("{type}", slugify(image_type or "image"))
        .replace("{subject}", slugify(subject or stem))
    )
    if not name.endswith(".md"):
        name += ".md"
    directory = Path(output_dir) if output_dir else image.parent
    return directory / name


async def write_markdown(markdown: str, output_path: str | Path) -> Path:
    """Write markdown as UTF-8, creating parent directories."""
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(markdown, encoding="utf-8")
    return path


async def write_image(data: bytes, output_path: str | Path) -> Path:
    """Save downloaded image bytes next to their markdown."""
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return path
