# tests/unit/config/test_unit_loader.py — v1
"""Tests for config/loader.py and config/options.py."""

from __future__ import annotations

import json

import pytest

from m2md.config.loader import (
    ConfigLoader,
    FileConfig,
    UnknownTierError,
    merge_options,
    resolve_tier,
)
from m2md.config.options import ProcessOptions


class TestConfigLoader:
    def test_no_file_gives_defaults(self, tmp_path):
        loader = ConfigLoader(tmp_path)
        config = loader.load()
        assert config == FileConfig()
        assert loader.loaded
        assert loader.source is None

    def test_json_file(self, tmp_path):
        (tmp_path / "m2md.config.json").write_text(
            json.dumps({"model": "gpt-4o-mini", "cache": False, "unknown": 1}), encoding="utf-8"
        )
        loader = ConfigLoader(tmp_path)
        config = loader.load()
        assert config.model == "gpt-4o-mini"
        assert config.as_options() == {"model": "gpt-4o-mini", "no_cache": True}
        assert loader.source == tmp_path / "m2md.config.json"

    def test_yaml_rc_with_taxonomy(self, tmp_path):
        (tmp_path / ".m2mdrc.yaml").write_text(
            "template: minimal\ntaxonomy:\n  types: [hologram]\n", encoding="utf-8"
        )
        config = ConfigLoader(tmp_path).load()
        assert config.template == "minimal"
        assert config.taxonomy.types == ["hologram"]

    def test_search_order(self, tmp_path):
        (tmp_path / ".m2mdrc").write_text("note: first\n", encoding="utf-8")
        (tmp_path / ".m2mdrc.yml").write_text("note: later\n", encoding="utf-8")
        assert ConfigLoader(tmp_path).load().note == "first"

    def test_package_json_section(self, tmp_path):
        (tmp_path / "package.json").write_text(
            json.dumps({"name": "site", "m2md": {"provider": "openai"}}), encoding="utf-8"
        )
        assert ConfigLoader(tmp_path).load().provider == "openai"

    def test_package_json_without_section_ignored(self, tmp_path):
        (tmp_path / "package.json").write_text('{"name": "site"}', encoding="utf-8")
        assert ConfigLoader(tmp_path).load() == FileConfig()

    def test_malformed_file_ignored(self, tmp_path, caplog):
        (tmp_path / "m2md.config.json").write_text("{broken", encoding="utf-8")
        with caplog.at_level("WARNING"):
            assert ConfigLoader(tmp_path).load() == FileConfig()
        assert "Ignoring malformed config file" in caplog.text

    def test_loaded_once_until_reset(self, tmp_path):
        loader = ConfigLoader(tmp_path)
        loader.load()
        (tmp_path / ".m2mdrc.json").write_text('{"note": "new"}', encoding="utf-8")
        assert loader.load().note is None
        loader.reset()
        assert not loader.loaded
        assert loader.load().note == "new"


class TestMergeOptions:
    def test_cli_wins_and_gaps_filled(self):
        file_config = FileConfig(model="file-model", template="minimal", recursive=True)
        merged = merge_options({"model": "cli-model", "template": None, "recursive": None}, file_config)
        assert merged == {"model": "cli-model", "template": "minimal", "recursive": True}


class TestResolveTier:
    def test_fast(self):
        assert resolve_tier({"tier": "fast"}) == {
            "tier": "fast", "provider": "openai", "model": "gpt-4o-mini",
        }

    def test_explicit_model_kept(self):
        resolved = resolve_tier({"tier": "quality", "model": "claude-opus-4-6"})
        assert resolved["provider"] == "anthropic"
        assert resolved["model"] == "claude-opus-4-6"

    def test_no_tier(self):
        assert resolve_tier({"model": "x"}) == {"model": "x"}

    def test_unknown(self):
        with pytest.raises(UnknownTierError, match="Supported: fast, quality"):
            resolve_tier({"tier": "turbo"})


class TestProcessOptions:
    def test_cache_key_options(self, fake_provider):
        opts = ProcessOptions(provider=fake_provider, model="m", note="n", template_name="minimal")
        key_opts = opts.cache_key_options()
        assert key_opts.provider == "anthropic"
        assert key_opts.model == "m"
        assert key_opts.template_name == "minimal"
        assert key_opts.prompt is None

    def test_provider_name_override(self, fake_provider):
        opts = ProcessOptions(provider=fake_provider, provider_name="openai")
        assert opts.effective_provider_name == "openai"
