# src/llm/models.py — v2
"""Provider-facing types: ImageInput, AnalyzeOptions, ProviderResponse."""

from __future__ import annotations

from pydantic import BaseModel


class ImageInput(BaseModel):
    """Image payload for a vision call."""

    data: bytes
    mime_type: str
    filename: str


class AnalyzeOptions(BaseModel):
    """Per-call options. ``model=None`` means the provider's default model."""

    model: str | None = None
    system_prompt: str
    user_prompt: str


class TokenUsage(BaseModel):
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


class ProviderResponse(BaseModel):
    """Normalized answer from any provider. ``text`` is never empty."""

    text: str
    usage: TokenUsage | None = None
    model: str | None = None
