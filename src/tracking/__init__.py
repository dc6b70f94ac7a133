# src/tracking/__init__.py — v1
"""Token cost estimation."""
