# src/cache/base_cache_store.py — v2
"""Abstract cache store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from m2md.cache.models import CacheEntry, CacheStats


class BaseCacheStore(ABC):
    """Unified interface for cache storage backends.

    ``get`` never raises: a missing or unreadable record is reported as
    ``None``. ``put`` propagates storage errors.
    """

    @abstractmethod
    async def get(self, key: str) -> CacheEntry | None:
        """Retrieve cache entry by key, or None when absent/corrupt."""

    @abstractmethod
    async def put(self, key: str, entry: CacheEntry) -> None:
        """Store cache entry, overwriting any previous one."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove cache entry."""

    @abstractmethod
    async def clear(self) -> int:
        """Remove every entry and return how many were removed."""

    @abstractmethod
    async def stats(self) -> CacheStats:
        """Entry count, total size and location."""
