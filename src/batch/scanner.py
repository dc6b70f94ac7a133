# src/batch/scanner.py — v2
"""Input discovery: expand files and directories into supported image paths."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from m2md.extraction.metadata import is_supported_format

logger = logging.getLogger(__name__)


def discover_images(inputs: Iterable[str | Path], recursive: bool = False) -> list[Path]:
    """Resolve inputs into a sorted list of absolute image paths.

    Args:
        inputs: File and directory paths. Missing paths are skipped.
        recursive: Descend into subdirectories of directory inputs.

    Returns:
        Sorted, de-duplicated absolute paths with supported extensions.
    """
    found: set[Path] = set()
    for raw in inputs:
        path = Path(raw).expanduser().resolve()
        if path.is_dir():
            found.update(_scan_directory(path, recursive))
        elif path.is_file():
            if is_supported_format(path):
                found.add(path)
            else:
                logger.debug("Skipping unsupported file %s", path)
        else:
            logger.debug("Skipping missing path %s", path)

    images = sorted(found)
    logger.info("Discovered %d image(s) (recursive=%s)", len(images), recursive)
    return images


def _scan_directory(root: Path, recursive: bool) -> list[Path]:
    pattern_fn = root.rglob if recursive else root.glob
    return [p for p in pattern_fn("*") if p.is_file() and is_supported_format(p)]


def resolve_file_args(args: list[str]) -> list[str]:
    """Rejoin an unquoted filename containing spaces.

    ``m2md Screenshot 2026-02-13 at 17.07.21.png`` arrives as several
    arguments. When none of them exists on its own but their space-joined
    form does, that single path is returned. Otherwise ``args`` is
    returned unchanged.
    """
    if len(args) <= 1:
        return args
    if any(Path(a).expanduser().exists() for a in args):
        return args
    joined = " ".join(args)
    if Path(joined).expanduser().exists():
        return [joined]
    return args
