# src/batch/models.py — v2
"""Batch processing models: WorkItem, WorkPlan, ItemResult, BatchSummary."""

from __future__ import annotations

from pathlib import PurePath
from typing import Literal

from pydantic import BaseModel, Field

from m2md.llm.models import TokenUsage


class WorkItem(BaseModel):
    """One image to process: a local path or a URL."""

    kind: Literal["file", "url"]
    source: str
    size_bytes: int | None = None
    use_alt: bool = False

    @property
    def label(self) -> str:
        """Display name: basename for files, full URL otherwise."""
        if self.kind == "file":
            return PurePath(self.source).name
        return self.source


class SkippedFile(BaseModel):
    """A local file excluded before any provider call."""

    path: str
    filename: str
    size_bytes: int
    reason: str


class WorkPlan(BaseModel):
    """Routing decided once, before the run starts."""

    items: list[WorkItem] = Field(default_factory=list)
    skipped: list[SkippedFile] = Field(default_factory=list)
    primary_provider: str
    primary_limit: int
    alt_provider: str | None = None
    alt_model: str | None = None
    alt_limit: int | None = None

    @property
    def needs_alt(self) -> bool:
        return any(item.use_alt for item in self.items)


class ItemResult(BaseModel):
    """Outcome of one work item."""

    source: str
    success: bool
    output_path: str | None = None
    image_path: str | None = None
    markdown: str | None = None
    cached: bool = False
    use_alt: bool = False
    refused: bool = False
    error: str | None = None
    usage: TokenUsage | None = None
    model: str | None = None


class BatchSummary(BaseModel):
    """Aggregate of a batch run. Results keep discovery order."""

    results: list[ItemResult] = Field(default_factory=list)
    skipped: list[SkippedFile] = Field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.success)

    @property
    def cached(self) -> int:
        return sum(1 for r in self.results if r.cached)

    @property
    def any_failure(self) -> bool:
        return self.failed > 0

    @property
    def input_tokens(self) -> int:
        return sum(r.usage.input_tokens for r in self.results if r.usage)

    @property
    def output_tokens(self) -> int:
        return sum(r.usage.output_tokens for r in self.results if r.usage)

    @property
    def model(self) -> str | None:
        """Last model reported by the provider, if any."""
        models = [r.model for r in self.results if r.model]
        return models[-1] if models else None
