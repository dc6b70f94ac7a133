# src/prompts/__init__.py — v1
"""System and user prompts for analysis and comparison."""
