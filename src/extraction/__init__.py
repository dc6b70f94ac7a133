# src/extraction/__init__.py — v1
"""Image metadata and URL fetching."""
