# src/pipeline/__init__.py — v1
"""Single-image processing pipeline."""
