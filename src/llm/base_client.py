# src/llm/base_client.py — v2
"""Abstract vision provider interface.

The pipeline only relies on this contract: a call returns non-empty text or
raises. Retries and authentication belong to the adapters.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from m2md.llm.models import AnalyzeOptions, ImageInput, ProviderResponse


class NoTextResponseError(RuntimeError):
    """Raised when a provider answer carries no text content."""

    def __init__(self, provider: str) -> None:
        self.provider = provider
        super().__init__(f"No text response from {provider} API")


class BaseProvider(ABC):
    """Unified interface for vision-capable providers."""

    @abstractmethod
    async def analyze(self, image: ImageInput, options: AnalyzeOptions) -> ProviderResponse:
        """Describe a single image."""

    @abstractmethod
    async def compare(
        self, images: list[ImageInput], options: AnalyzeOptions
    ) -> ProviderResponse:
        """Compare several images in one call."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (anthropic, openai)."""

    @property
    @abstractmethod
    def default_model(self) -> str:
        """Model used when the caller does not pick one."""

    @property
    @abstractmethod
    def max_image_bytes(self) -> int:
        """Largest accepted image payload in bytes."""
