# src/cache/models.py — v2
"""Cache domain models: CacheKeyOptions, CacheEntry, CacheStats.

Entries are persisted as one JSON document per key. Fields added after the
first release are optional on read so that older files keep deserializing.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class CacheKeyOptions(BaseModel):
    """Every option that changes the rendered markdown for a given image.

    Unset options take part in the key as empty strings, so ``model=None``
    and ``model=""`` address the same entry.
    """

    model: str | None = None
    prompt: str | None = None
    template_name: str | None = None
    note: str | None = None
    provider: str | None = None


class CacheEntry(BaseModel):
    """Result of one successful, validated provider call."""

    model_config = ConfigDict(extra="ignore")

    hash: str
    markdown: str
    description: str = ""
    extracted_text: str = ""
    model: str = "default"
    cached_at: datetime

    # Classification fields (added with the rich response format)
    type: str = "other"
    category: str = ""
    style: str = ""
    mood: str = ""
    medium: str = ""
    composition: str = ""
    palette: str = ""
    subject: str = ""
    colors: str = ""
    tags: str = ""


class CacheStats(BaseModel):
    """Summary of the on-disk cache."""

    count: int
    total_bytes: int
    human_size: str
    location: str
