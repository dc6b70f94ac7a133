# src/llm/adapters/openai_adapter.py — v2
"""OpenAI GPT adapter implementing BaseProvider.

Images travel as base64 data URIs in ``image_url`` content parts.
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


class OpenAIProvider(BaseProvider):
    """OpenAI GPT vision adapter."""

    DEFAULT_MODEL = "gpt-4o"
    DEFAULT_MAX_IMAGE_BYTES = 20 * MIB

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
        self.__client = None

    @property
    def _client(self):
        if self.__client is None:
            try:
                import openai
            except ImportError as e:
                raise ImportError("openai package required: pip install openai") from e
            self.__client = openai.AsyncOpenAI(
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
        return "openai"

    @property
    def default_model(self) -> str:
        return self.DEFAULT_MODEL

    @property
    def max_image_bytes(self) -> int:
        return self._max_image_bytes

    async def _create(
        self, images: list[ImageInput], options: AnalyzeOptions
    ) -> ProviderResponse:
        content: list[dict[str, Any]] = [
            {"type": "image_url", "image_url": {"url": self._data_uri(img)}}
            for img in images
        ]
        content.append({"type": "text", "text": options.user_prompt})

        model = options.model or self.DEFAULT_MODEL
        t0 = time.monotonic()
        resp = await self._client.chat.completions.create(
            model=model,
            max_tokens=self._max_tokens,
            messages=[
                {"role": "system", "content": options.system_prompt},
                {"role": "user", "content": content},
            ],
        )
        latency = int((time.monotonic() - t0) * 1000)
        logger.debug("openai call: model=%s images=%d latency=%dms", model, len(images), latency)

        text = resp.choices[0].message.content if resp.choices else None
        if not text:
            raise NoTextResponseError(self.provider_name)

        usage = resp.usage
        return ProviderResponse(
            text=text,
            usage=TokenUsage(
                input_tokens=usage.prompt_tokens,
                output_tokens=usage.completion_tokens,
            ) if usage else None,
            model=resp.model,
        )

    @staticmethod
    def _data_uri(image: ImageInput) -> str:
        encoded = base64.b64encode(image.data).decode("ascii")
        return f"data:{image.mime_type};base64,{encoded}"
