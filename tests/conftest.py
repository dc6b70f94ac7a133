# tests/conftest.py — v2
"""Shared test fixtures for all unit and integration tests.

Provides a scripted vision provider, real tiny images written with Pillow,
and a cache store rooted in a temp directory. No network access.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path

import pytest
from PIL import Image

from m2md.cache.json_store import JsonCacheStore
from m2md.config.options import ProcessOptions
from m2md.config.settings import Settings
from m2md.llm.base_client import BaseProvider
from m2md.llm.models import AnalyzeOptions, ImageInput, ProviderResponse, TokenUsage

RICH_RESPONSE = """TYPE: screenshot
CATEGORY: ui-design
STYLE: minimalist, flat
MOOD: calm, modern
MEDIUM: screen-capture
COMPOSITION: grid, centered
PALETTE: warm-white, slate-gray, electric-blue
SUBJECT: Settings page of a note-taking app
TAGS: dark-mode toggle, sidebar-nav, form-layout
DESCRIPTION:
- Two-column layout with a sidebar on the left
- Toggle switches aligned to the right edge
EXTRACTED_TEXT:
**Heading:** Settings
**Label:** Dark mode"""

LEGACY_RESPONSE = """DESCRIPTION:
- A bar chart with five bars
EXTRACTED_TEXT:
Q1 Q2 Q3 Q4 Q5"""


class FakeProvider(BaseProvider):
    """Scripted provider: returns queued texts and records every call."""

    def __init__(
        self,
        texts: list[str] | None = None,
        name: str = "anthropic",
        model: str = "claude-sonnet-4-5-20250929",
        max_image_bytes: int = 5 * 1024 * 1024,
    ) -> None:
        self._texts = list(texts or [RICH_RESPONSE])
        self._name = name
        self._model = model
        self._max_image_bytes = max_image_bytes
        self.calls: list[tuple[list[ImageInput], AnalyzeOptions]] = []

    async def analyze(self, image: ImageInput, options: AnalyzeOptions) -> ProviderResponse:
        return self._respond([image], options)

    async def compare(
        self, images: list[ImageInput], options: AnalyzeOptions
    ) -> ProviderResponse:
        return self._respond(images, options)

    @property
    def provider_name(self) -> str:
        return self._name

    @property
    def default_model(self) -> str:
        return self._model

    @property
    def max_image_bytes(self) -> int:
        return self._max_image_bytes

    def _respond(self, images: list[ImageInput], options: AnalyzeOptions) -> ProviderResponse:
        self.calls.append((images, options))
        text = self._texts[0] if len(self._texts) == 1 else self._texts.pop(0)
        return ProviderResponse(
            text=text,
            usage=TokenUsage(input_tokens=1200, output_tokens=250),
            model=options.model or self._model,
        )


def make_png(width: int = 4, height: int = 3, color: tuple[int, int, int] = (255, 0, 0)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buf, format="PNG")
    return buf.getvalue()


def make_jpeg(width: int = 8, height: int = 6) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), (0, 128, 255)).save(buf, format="JPEG")
    return buf.getvalue()


# === FIXTURES ===


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def png_file(tmp_path: Path) -> Path:
    """4x3 PNG image on disk."""
    path = tmp_path / "screenshot.png"
    path.write_bytes(make_png())
    return path


@pytest.fixture
def jpeg_file(tmp_path: Path) -> Path:
    path = tmp_path / "photo.jpg"
    path.write_bytes(make_jpeg())
    return path


@pytest.fixture
def cache_store(tmp_path: Path) -> JsonCacheStore:
    return JsonCacheStore(tmp_path / "cache")


@pytest.fixture
def process_options(fake_provider: FakeProvider) -> ProcessOptions:
    return ProcessOptions(provider=fake_provider)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings isolated from the real environment and .env file."""
    return Settings(
        _env_file=None,
        anthropic_api_key="sk-ant-test",
        openai_api_key="",
        cache_dir=str(tmp_path / "cache"),
    )


@pytest.fixture
def provider_factory() -> type[FakeProvider]:
    """FakeProvider class, for tests that script their own answers."""
    return FakeProvider


@pytest.fixture
def png_factory():
    """``png_factory(width, height, color)`` → PNG bytes."""
    return make_png


@pytest.fixture
def rich_response() -> str:
    return RICH_RESPONSE


@pytest.fixture
def legacy_response() -> str:
    return LEGACY_RESPONSE


@pytest.fixture(autouse=True)
def _reset_m2md_logger():
    """Undo setup_logging() between tests so caplog sees m2md records."""
    yield
    root = logging.getLogger("m2md")
    root.handlers.clear()
    root.propagate = True
    root.setLevel(logging.NOTSET)
