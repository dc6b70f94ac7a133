# tests/unit/config/test_unit_settings.py — v1
"""Tests for config/settings.py — env loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from m2md.config.settings import ConfigurationError, Settings, load_settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in (
        "ANTHROPIC_API_KEY", "OPENAI_API_KEY", "XDG_CACHE_HOME",
        "M2MD_PROVIDER", "M2MD_CONCURRENCY", "M2MD_CACHE_DIR", "M2MD_LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)


class TestSettingsDefaults:
    def test_defaults(self):
        s = Settings(_env_file=None)
        assert s.provider == "anthropic"
        assert s.model == ""
        assert s.concurrency == 5
        assert s.anthropic_max_image_bytes == 5 * 1024 * 1024
        assert s.openai_max_image_bytes == 20 * 1024 * 1024
        assert s.log_level == "WARNING"
        assert s.cache_enabled is True


class TestSettingsEnv:
    def test_conventional_key_names(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-oai")
        s = Settings(_env_file=None)
        assert s.api_key_for("anthropic") == "sk-ant"
        assert s.api_key_for("openai") == "sk-oai"
        assert s.api_key_for("gemini") == ""

    def test_prefixed_values(self, monkeypatch):
        monkeypatch.setenv("M2MD_PROVIDER", "openai")
        monkeypatch.setenv("M2MD_CONCURRENCY", "2")
        s = Settings(_env_file=None)
        assert s.provider == "openai"
        assert s.concurrency == 2

    def test_cache_dir_resolution(self, monkeypatch, tmp_path):
        monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path))
        assert Settings(_env_file=None).resolved_cache_dir() == tmp_path / "m2md"
        monkeypatch.setenv("M2MD_CACHE_DIR", str(tmp_path / "own"))
        assert Settings(_env_file=None).resolved_cache_dir() == tmp_path / "own"

    def test_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("M2MD_LOG_LEVEL=DEBUG\nOPENAI_API_KEY=sk-file\n", encoding="utf-8")
        s = Settings(_env_file=env_file)
        assert s.log_level == "DEBUG"
        assert s.openai_api_key == "sk-file"


class TestSettingsValidation:
    def test_concurrency_positive(self):
        with pytest.raises(ValidationError, match="concurrency"):
            Settings(_env_file=None, concurrency=0)

    def test_unknown_provider(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, provider="gemini")

    def test_bad_log_rotation(self):
        with pytest.raises(ValidationError, match="Invalid size format"):
            Settings(_env_file=None, log_rotation="lots")

    def test_non_positive_limits(self):
        with pytest.raises((ConfigurationError, ValidationError)):
            Settings(_env_file=None, openai_max_image_bytes=0)

    def test_max_image_bytes_for(self):
        s = Settings(_env_file=None, anthropic_max_image_bytes=10)
        assert s.max_image_bytes_for("anthropic") == 10
        assert s.max_image_bytes_for("openai") == 20 * 1024 * 1024


class TestLoadSettings:
    def test_overrides(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        s = load_settings(concurrency=3, log_file=Path("x.log"))
        assert s.concurrency == 3
        assert s.log_file == Path("x.log")
