# src/llm/adapters/__init__.py — v1
"""Concrete vision provider adapters."""
