# src/core/sizes.py — v1
"""Byte-size helpers shared by metadata extraction, cache stats and batch routing."""

from __future__ import annotations

KIB = 1024
MIB = 1024 * 1024


def human_size(num_bytes: int) -> str:
    """Format a byte count as ``B``, ``KB`` or ``MB`` with one decimal."""
    if num_bytes < KIB:
        return f"{num_bytes} B"
    if num_bytes < MIB:
        return f"{num_bytes / KIB:.1f} KB"
    return f"{num_bytes / MIB:.1f} MB"


def megabytes(num_bytes: int, digits: int = 1) -> str:
    """Render a byte count in MB without a unit suffix (``"20.0"``)."""
    return f"{num_bytes / MIB:.{digits}f}"
