# src/config/loader.py — v1
"""Project config file discovery and CLI option merging.

A project may pin defaults (model, template, taxonomy extensions, …) in one
of ``CONFIG_SEARCH_PLACES`` in the working directory. ``ConfigLoader`` owns
the loaded state: the entry point constructs one and passes it along, so
there is no process-wide cache.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from m2md.parsing.taxonomy import TaxonomyOverrides

logger = logging.getLogger(__name__)

CONFIG_SEARCH_PLACES: tuple[str, ...] = (
    "m2md.config.json",
    ".m2mdrc",
    ".m2mdrc.json",
    ".m2mdrc.yaml",
    ".m2mdrc.yml",
    "package.json",
)
PACKAGE_JSON_KEY = "m2md"

TIER_MAP: dict[str, dict[str, str]] = {
    "fast": {"provider": "openai", "model": "gpt-4o-mini"},
    "quality": {"provider": "anthropic", "model": "claude-sonnet-4-5-20250929"},
}


class UnknownTierError(ValueError):
    """Raised when a tier name is not in TIER_MAP."""

    def __init__(self, tier: str) -> None:
        self.tier = tier
        super().__init__(f"Unknown tier: {tier}. Supported: {', '.join(TIER_MAP)}")


class FileConfig(BaseModel):
    """Recognised keys of a project config file. Unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore")

    provider: str | None = None
    model: str | None = None
    tier: str | None = None
    prompt: str | None = None
    note: str | None = None
    template: str | None = None
    output: str | None = None
    name: str | None = None
    recursive: bool | None = None
    cache: bool | None = None
    concurrency: int | None = None
    taxonomy: TaxonomyOverrides | None = None

    def as_options(self) -> dict[str, Any]:
        """Set keys in CLI option naming (``cache: false`` → ``no_cache``)."""
        values = self.model_dump(exclude_none=True, exclude={"cache", "taxonomy"})
        if self.cache is not None:
            values["no_cache"] = not self.cache
        return values


class ConfigLoader:
    """Loads the project config file at most once per instance."""

    def __init__(self, search_dir: Path | str | None = None) -> None:
        self._search_dir = Path(search_dir) if search_dir is not None else Path.cwd()
        self._config: FileConfig | None = None
        self._source: Path | None = None

    @property
    def loaded(self) -> bool:
        return self._config is not None

    @property
    def source(self) -> Path | None:
        """File the config came from, or None when defaults are in use."""
        return self._source

    def load(self) -> FileConfig:
        """Discover, parse and validate the config file.

        Malformed or invalid files are logged and treated as empty.
        """
        if self._config is not None:
            return self._config

        self._config = FileConfig()
        for name in CONFIG_SEARCH_PLACES:
            path = self._search_dir / name
            if not path.is_file():
                continue
            try:
                data = _read_config_file(path)
            except (OSError, ValueError, yaml.YAMLError) as e:
                logger.warning("Ignoring malformed config file %s: %s", path, e)
                break
            if data is None:
                continue
            try:
                self._config = FileConfig.model_validate(data)
            except ValidationError as e:
                logger.warning("Ignoring invalid config file %s: %s", path, e)
                break
            self._source = path
            logger.debug("Loaded config from %s", path)
            break
        return self._config

    def reset(self) -> None:
        """Return to the not-loaded state."""
        self._config = None
        self._source = None


def _read_config_file(path: Path) -> Mapping[str, Any] | None:
    """Parse one candidate file. None means "not a config, keep searching"."""
    text = path.read_text(encoding="utf-8")
    if path.name == "package.json":
        data = json.loads(text)
        section = data.get(PACKAGE_JSON_KEY) if isinstance(data, dict) else None
        return section or None
    if path.suffix == ".json":
        data = json.loads(text)
    else:
        # YAML is a superset of JSON, so extensionless rc files take either
        data = yaml.safe_load(text)
    if not data:
        return None
    if not isinstance(data, dict):
        raise ValueError("config root must be a mapping")
    return data


def merge_options(cli: Mapping[str, Any], file_config: FileConfig) -> dict[str, Any]:
    """CLI values win; keys the CLI left as None are filled from the file."""
    merged = dict(cli)
    for key, value in file_config.as_options().items():
        if merged.get(key) is None:
            merged[key] = value
    return merged


def resolve_tier(options: Mapping[str, Any]) -> dict[str, Any]:
    """Expand ``tier`` into provider/model where those are still unset.

    Raises:
        UnknownTierError: If ``tier`` is set but not recognised.
    """
    resolved = dict(options)
    tier = resolved.get("tier")
    if not tier:
        return resolved
    if tier not in TIER_MAP:
        raise UnknownTierError(tier)
    for key, value in TIER_MAP[tier].items():
        if resolved.get(key) is None:
            resolved[key] = value
    return resolved
