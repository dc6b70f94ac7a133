# src/config/__init__.py — v1
"""Settings, project config files and resolved run options."""
