# src/__init__.py — v1
"""m2md: convert images to structured markdown with AI vision."""

from m2md.version import __version__

__all__ = ["__version__"]
