# src/logging/handlers.py — v2
"""File rotation handler for log files.

Rotation is size-based; ``retention`` is the number of backups kept.
"""

from __future__ import annotations

import logging
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

from m2md.core.sizes import KIB, MIB

_UNITS: dict[str, int] = {"B": 1, "KB": KIB, "MB": MIB, "GB": 1024 * MIB}
_SIZE_RE = re.compile(r"^(\d+(?:\.\d+)?)\s*(B|KB|MB|GB)$", re.IGNORECASE)


def parse_size(size_str: str) -> int:
    """Parse a size string like '10MB' or '1.5 GB' into bytes.

    Raises:
        ValueError: On anything that is not ``<number><B|KB|MB|GB>``.
    """
    match = _SIZE_RE.match(size_str.strip())
    if not match:
        raise ValueError(f"Invalid size format: {size_str!r}. Use e.g. '10MB'.")
    return int(float(match.group(1)) * _UNITS[match.group(2).upper()])


def create_rotating_handler(
    log_file: str | Path,
    rotation: str = "10MB",
    retention: int = 30,
) -> logging.Handler:
    """Create a rotating file handler, creating parent directories.

    Args:
        log_file: Path to log file.
        rotation: Max file size before rotation (e.g. "10MB").
        retention: Number of backup files to keep.
    """
    path = Path(log_file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        filename=str(path),
        maxBytes=parse_size(rotation),
        backupCount=retention,
        encoding="utf-8",
    )
