# src/cache/key.py — v3
"""Content hashing and cache-key derivation.

The cache key is a SHA-256 digest over the image content hash and every
option that influences the rendered output, joined with a fixed delimiter.
"""

from __future__ import annotations

import hashlib

from m2md.cache.models import CacheKeyOptions

KEY_DELIMITER = "|"


def compute_content_hash(raw_bytes: bytes) -> str:
    """SHA-256 hex digest of raw image bytes."""
    return hashlib.sha256(raw_bytes).hexdigest()


def build_cache_key(
    content_hash: str,
    options: CacheKeyOptions | None = None,
) -> str:
    """Derive the cache key for an image under a given option set.

    Args:
        content_hash: SHA-256 of the image bytes.
        options: Output-affecting options. ``None`` means all unset.

    Returns:
        64-character hex digest.
    """
    opts = options or CacheKeyOptions()
    parts = [
        content_hash,
        opts.model or "",
        opts.prompt or "",
        opts.template_name or "",
        opts.note or "",
        opts.provider or "",
    ]
    return hashlib.sha256(KEY_DELIMITER.join(parts).encode("utf-8")).hexdigest()
