# tests/unit/llm/adapters/test_unit_adapters.py — v1
"""Tests for the Anthropic and OpenAI adapters with mocked SDK clients."""

from __future__ import annotations

import base64
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from m2md.llm.adapters.anthropic_adapter import AnthropicProvider
from m2md.llm.adapters.openai_adapter import OpenAIProvider
from m2md.llm.base_client import NoTextResponseError
from m2md.llm.models import AnalyzeOptions, ImageInput

_IMAGE = ImageInput(data=b"\x89PNGdata", mime_type="image/png", filename="a.png")
_OPTIONS = AnalyzeOptions(system_prompt="sys", user_prompt="describe")


def _anthropic_with(response) -> tuple[AnthropicProvider, MagicMock]:
    provider = AnthropicProvider(api_key="sk-ant-test")
    client = MagicMock()
    client.messages.create = AsyncMock(return_value=response)
    provider._AnthropicProvider__client = client
    return provider, client


def _openai_with(response) -> tuple[OpenAIProvider, MagicMock]:
    provider = OpenAIProvider(api_key="sk-test")
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=response)
    provider._OpenAIProvider__client = client
    return provider, client


def _anthropic_response(*blocks) -> SimpleNamespace:
    return SimpleNamespace(
        content=list(blocks),
        usage=SimpleNamespace(input_tokens=100, output_tokens=20),
        model="claude-sonnet-4-5-20250929",
    )


def _openai_response(text: str | None) -> SimpleNamespace:
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=text))],
        usage=SimpleNamespace(prompt_tokens=90, completion_tokens=30),
        model="gpt-4o-2024-08-06",
    )


class TestAnthropicProvider:
    def test_properties(self):
        provider = AnthropicProvider()
        assert provider.provider_name == "anthropic"
        assert provider.default_model == "claude-sonnet-4-5-20250929"
        assert provider.max_image_bytes == 5 * 1024 * 1024

    @pytest.mark.asyncio
    async def test_analyze(self):
        provider, client = _anthropic_with(
            _anthropic_response(SimpleNamespace(type="text", text="TYPE: photo"))
        )
        result = await provider.analyze(_IMAGE, _OPTIONS)

        assert result.text == "TYPE: photo"
        assert result.usage.total_tokens == 120
        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["model"] == "claude-sonnet-4-5-20250929"
        assert kwargs["system"] == "sys"
        content = kwargs["messages"][0]["content"]
        assert content[0]["source"]["media_type"] == "image/png"
        assert base64.b64decode(content[0]["source"]["data"]) == _IMAGE.data
        assert content[-1] == {"type": "text", "text": "describe"}

    @pytest.mark.asyncio
    async def test_compare_sends_all_images_first(self):
        provider, client = _anthropic_with(
            _anthropic_response(SimpleNamespace(type="text", text="SUMMARY: x"))
        )
        await provider.compare([_IMAGE, _IMAGE], _OPTIONS.model_copy(update={"model": "claude-opus-4-6"}))
        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["model"] == "claude-opus-4-6"
        assert [b["type"] for b in kwargs["messages"][0]["content"]] == ["image", "image", "text"]

    @pytest.mark.asyncio
    async def test_no_text_block(self):
        provider, _ = _anthropic_with(_anthropic_response(SimpleNamespace(type="tool_use")))
        with pytest.raises(NoTextResponseError):
            await provider.analyze(_IMAGE, _OPTIONS)


class TestOpenAIProvider:
    def test_properties(self):
        provider = OpenAIProvider()
        assert provider.provider_name == "openai"
        assert provider.max_image_bytes == 20 * 1024 * 1024

    @pytest.mark.asyncio
    async def test_analyze(self):
        provider, client = _openai_with(_openai_response("DESCRIPTION: x"))
        result = await provider.analyze(_IMAGE, _OPTIONS)

        assert result.text == "DESCRIPTION: x"
        assert result.usage.input_tokens == 90
        assert result.model == "gpt-4o-2024-08-06"
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        system, user = kwargs["messages"]
        assert system == {"role": "system", "content": "sys"}
        url = user["content"][0]["image_url"]["url"]
        assert url.startswith("data:image/png;base64,")

    @pytest.mark.asyncio
    async def test_empty_content(self):
        provider, _ = _openai_with(_openai_response(None))
        with pytest.raises(NoTextResponseError, match="openai"):
            await provider.analyze(_IMAGE, _OPTIONS)
