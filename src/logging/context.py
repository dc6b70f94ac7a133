# src/logging/context.py — v2
"""Contextual logging support: attach source, provider and batch_id to records.

Context variables are task-local, so concurrent batch workers each log
their own current item.
"""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

_batch_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "batch_id", default=None
)
_source: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "source", default=None
)
_provider: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "provider", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    batch_id: str | None = None
    source: str | None = None
    provider: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        batch_id=_batch_id.get(),
        source=_source.get(),
        provider=_provider.get(),
    )


def set_batch_context(batch_id: str) -> None:
    """Set run-level context (called once per CLI invocation)."""
    _batch_id.set(batch_id)


def set_item_context(source: str, provider: str | None = None) -> None:
    """Set item-level context (called by each worker per item)."""
    _source.set(source)
    _provider.set(provider)


def clear_context() -> None:
    """Reset all context variables."""
    _batch_id.set(None)
    _source.set(None)
    _provider.set(None)
