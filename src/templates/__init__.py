# src/templates/__init__.py — v1
"""Markdown templates and the rendering engine."""
