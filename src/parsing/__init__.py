# src/parsing/__init__.py — v1
"""Provider response parsing and taxonomy validation."""
