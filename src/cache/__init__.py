# src/cache/__init__.py — v1
"""Result cache keyed by image content and output-affecting options."""
