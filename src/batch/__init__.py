# src/batch/__init__.py — v1
"""Input discovery and bounded-concurrency batch runs."""
