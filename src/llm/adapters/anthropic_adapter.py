# src/llm/adapters/anthropic_adapter.py — v3
"""Anthropic Claude adapter implementing BaseProvider.

Uses the official anthropic SDK, which retries transient failures itself
(``max_retries``).
"""

from __future__ import annotations

import base64
import logging
import time
from typing import Any

from m2md.core.sizes import MIB
from m2md.llm.base_client import BaseProvider, NoTextResponseError
from m2md.llm.models import AnalyzeOptions, ImageInput, ProviderResponse, TokenUsage

logger = logging.getLogger(__name__)


class AnthropicProvider(BaseProvider):
    """Adapter for Anthropic Claude vision models."""

    DEFAULT_MODEL = "claude-sonnet-4-5-20250929"
    DEFAULT_MAX_IMAGE_BYTES = 5 * MIB

    def __init__(
        self,
        api_key: str | None = None,
        max_image_bytes: int = DEFAULT_MAX_IMAGE_BYTES,
        max_tokens: int = 4096,
        max_retries: int = 3,
    ) -> None:
        self._api_key = api_key
        self._max_image_bytes = max_image_bytes
        self._max_tokens = max_tokens
        self._max_retries = max_retries
        self.__client = None  # Lazy initialization

    @property
    def _client(self):
        """Lazy-init Anthropic client (only on first API call)."""
        if self.__client is None:
            try:
                import anthropic
            except ImportError as e:
                raise ImportError(
                    "anthropic package required: pip install anthropic"
                ) from e
            self.__client = anthropic.AsyncAnthropic(
                api_key=self._api_key or None,
                max_retries=self._max_retries,
            )
        return self.__client

    async def analyze(self, image: ImageInput, options: AnalyzeOptions) -> ProviderResponse:
        return await self._create([image], options)

    async def compare(
        self, images: list[ImageInput], options: AnalyzeOptions
    ) -> ProviderResponse:
        return await self._create(images, options)

    @property
    def provider_name(self) -> str:
        return "anthropic"

    @property
    def default_model(self) -> str:
        return self.DEFAULT_MODEL

    @property
    def max_image_bytes(self) -> int:
        return self._max_image_bytes

    # --- Internal helpers ---

    async def _create(
        self, images: list[ImageInput], options: AnalyzeOptions
    ) -> ProviderResponse:
        content: list[dict[str, Any]] = [self._image_block(img) for img in images]
        content.append({"type": "text", "text": options.user_prompt})

        model = options.model or self.DEFAULT_MODEL
        start = time.monotonic()
        response = await self._client.messages.create(
            model=model,
            max_tokens=self._max_tokens,
            system=options.system_prompt,
            messages=[{"role": "user", "content": content}],
        )
        latency_ms = int((time.monotonic() - start) * 1000)
        logger.debug("anthropic call: model=%s images=%d latency=%dms", model, len(images), latency_ms)

        text = self._extract_text(response)
        if not text:
            raise NoTextResponseError(self.provider_name)

        return ProviderResponse(
            text=text,
            usage=TokenUsage(
                input_tokens=response.usage.input_tokens,
                output_tokens=response.usage.output_tokens,
            ),
            model=response.model,
        )

    @staticmethod
    def _image_block(image: ImageInput) -> dict[str, Any]:
        return {
            "type": "image",
            "source": {
                "type": "base64",
                "media_type": image.mime_type,
                "data": base64.b64encode(image.data).decode("ascii"),
            },
        }

    @staticmethod
    def _extract_text(response: Any) -> str:
        """First text block of the response, or ""."""
        for block in response.content:
            if getattr(block, "type", None) == "text":
                return block.text
        return ""
