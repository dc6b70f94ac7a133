# src/llm/__init__.py — v1
"""Vision provider abstraction."""
