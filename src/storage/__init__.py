# src/storage/__init__.py — v1
"""Output path derivation and file writing."""
