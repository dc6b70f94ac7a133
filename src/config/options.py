# src/config/options.py — v1
"""Fully resolved options for processing one image."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from m2md.cache.models import CacheKeyOptions
from m2md.llm.base_client import BaseProvider
from m2md.parsing.taxonomy import Taxonomy


class ProcessOptions(BaseModel):
    """Every option that affects a single-image run.

    Attributes:
        provider: Provider instance that performs the vision call.
        provider_name: Provider identifier; part of the cache key. Defaults
            to ``provider.provider_name``.
        model: Model id, or None for the provider default. Part of the key.
        prompt: Extra instructions appended to the system prompt. Part of the key.
        note: Focus directive appended to the system prompt. Part of the key.
        template: Template source text; None renders the default template.
        template_name: Name or path the template came from. Part of the key.
        no_cache: Skip cache lookup and do not store the result.
        taxonomy: Vocabularies for prompting and validation; None = defaults.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    provider: BaseProvider
    provider_name: str | None = None
    model: str | None = None
    prompt: str | None = None
    note: str | None = None
    template: str | None = None
    template_name: str | None = None
    no_cache: bool = False
    taxonomy: Taxonomy | None = None

    @property
    def effective_provider_name(self) -> str:
        return self.provider_name or self.provider.provider_name

    def cache_key_options(self) -> CacheKeyOptions:
        """Subset of options that identifies a cached render."""
        return CacheKeyOptions(
            model=self.model,
            prompt=self.prompt,
            template_name=self.template_name,
            note=self.note,
            provider=self.effective_provider_name,
        )
