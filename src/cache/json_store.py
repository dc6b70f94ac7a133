# src/cache/json_store.py — v3
"""JSON file-based cache store.

Stores each entry as ``<key>.json`` directly under the cache root. Writes go
through a temporary file and an atomic rename, so an entry on disk is either
absent or complete.
"""

from __future__ import annotations

import functools
import logging
import os
import uuid
from collections.abc import Mapping
from pathlib import Path

from m2md.cache.base_cache_store import BaseCacheStore
from m2md.cache.models import CacheEntry, CacheStats
from m2md.core.sizes import human_size

logger = logging.getLogger(__name__)

CACHE_DIR_ENV = "M2MD_CACHE_DIR"
XDG_CACHE_ENV = "XDG_CACHE_HOME"
_APP_DIR = "m2md"


def resolve_cache_dir(environ: Mapping[str, str] | None = None) -> Path:
    """Resolve the cache root from an environment mapping.

    Order: ``M2MD_CACHE_DIR`` → ``$XDG_CACHE_HOME/m2md`` → ``~/.cache/m2md``.
    """
    env = os.environ if environ is None else environ
    override = env.get(CACHE_DIR_ENV)
    if override:
        return Path(override).expanduser()
    xdg = env.get(XDG_CACHE_ENV)
    if xdg:
        return Path(xdg).expanduser() / _APP_DIR
    return Path.home() / ".cache" / _APP_DIR


@functools.lru_cache(maxsize=1)
def default_cache_dir() -> Path:
    """Cache root for this process, resolved from the environment once."""
    return resolve_cache_dir()


class JsonCacheStore(BaseCacheStore):
    """File-based cache store using one JSON file per key."""

    def __init__(self, cache_root: Path | str | None = None) -> None:
        if cache_root is None:
            self._root = default_cache_dir()
        else:
            self._root = Path(cache_root).expanduser()

    @property
    def root(self) -> Path:
        return self._root

    async def get(self, key: str) -> CacheEntry | None:
        """Retrieve cache entry by key."""
        path = self._entry_path(key)
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.debug("Cache read failed for %s: %s", key, e)
            return None
        try:
            return CacheEntry.model_validate_json(data)
        except ValueError as e:
            logger.debug("Ignoring corrupt cache entry %s: %s", key, e)
            return None

    async def put(self, key: str, entry: CacheEntry) -> None:
        """Store a cache entry."""
        self._root.mkdir(parents=True, exist_ok=True)
        path = self._entry_path(key)
        tmp_path = path.with_name(f"{path.stem}.{uuid.uuid4().hex}.tmp")
        try:
            tmp_path.write_text(entry.model_dump_json(indent=2), encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise

    async def delete(self, key: str) -> None:
        """Remove a cache entry."""
        self._entry_path(key).unlink(missing_ok=True)

    async def clear(self) -> int:
        """Delete every ``*.json`` record under the cache root."""
        if not self._root.is_dir():
            return 0
        count = 0
        for path in self._root.glob("*.json"):
            path.unlink()
            count += 1
        logger.info("Cleared %d cache entries from %s", count, self._root)
        return count

    async def stats(self) -> CacheStats:
        """Count records and their total size."""
        count = 0
        total = 0
        if self._root.is_dir():
            for path in self._root.glob("*.json"):
                count += 1
                total += path.stat().st_size
        return CacheStats(
            count=count,
            total_bytes=total,
            human_size=human_size(total),
            location=str(self._root),
        )

    def _entry_path(self, key: str) -> Path:
        """Return file path for a cache key."""
        safe_key = key.replace("/", "_").replace("\\", "_")
        return self._root / f"{safe_key}.json"
