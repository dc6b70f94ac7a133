# src/config/settings.py — v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for deployment-specific settings: provider choice,
API keys, payload limits, cache location and logging. Project-level
preferences (templates, taxonomy, default flags) live in the config file
handled by ``m2md.config.loader``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from m2md.cache.json_store import CACHE_DIR_ENV, XDG_CACHE_ENV, resolve_cache_dir
from m2md.core.sizes import MIB
from m2md.logging.handlers import parse_size


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from environment and .env file.

    Variables use the ``M2MD_`` prefix, except the provider API keys and
    ``XDG_CACHE_HOME`` which keep their conventional names.
    """

    model_config = SettingsConfigDict(
        env_prefix="M2MD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # === Provider ===
    provider: Literal["anthropic", "openai"] = "anthropic"
    model: str = ""

    anthropic_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("ANTHROPIC_API_KEY", "M2MD_ANTHROPIC_API_KEY"),
    )
    openai_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("OPENAI_API_KEY", "M2MD_OPENAI_API_KEY"),
    )

    # === Payload limits ===
    anthropic_max_image_bytes: int = 5 * MIB
    openai_max_image_bytes: int = 20 * MIB
    large_file_warning_bytes: int = 15 * MIB

    # === Batch ===
    concurrency: int = 5

    # === Cache ===
    cache_enabled: bool = True
    cache_dir: str = ""
    xdg_cache_home: str = Field(
        default="",
        validation_alias=AliasChoices("XDG_CACHE_HOME", "M2MD_XDG_CACHE_HOME"),
    )

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("concurrency")
    @classmethod
    def validate_concurrency(cls, v: int) -> int:
        """Concurrency must be a positive integer."""
        if v < 1:
            raise ValueError("concurrency must be >= 1")
        return v

    @field_validator("log_rotation")
    @classmethod
    def validate_log_rotation(cls, v: str) -> str:
        """LOG_ROTATION must be a size such as "10MB"."""
        parse_size(v)
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.anthropic_max_image_bytes <= 0 or self.openai_max_image_bytes <= 0:
            errors.append("provider max image sizes must be positive")

        if self.large_file_warning_bytes <= 0:
            errors.append("LARGE_FILE_WARNING_BYTES must be positive")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    def resolved_cache_dir(self) -> Path:
        """Cache root following M2MD_CACHE_DIR → XDG_CACHE_HOME → ~/.cache."""
        return resolve_cache_dir({
            CACHE_DIR_ENV: self.cache_dir,
            XDG_CACHE_ENV: self.xdg_cache_home,
        })

    def api_key_for(self, provider: str) -> str:
        """API key configured for ``provider`` ("" when unset or unknown)."""
        if provider == "anthropic":
            return self.anthropic_api_key
        if provider == "openai":
            return self.openai_api_key
        return ""

    def max_image_bytes_for(self, provider: str) -> int:
        if provider == "openai":
            return self.openai_max_image_bytes
        return self.anthropic_max_image_bytes


def load_settings(**overrides: object) -> Settings:
    """Load settings from environment/.env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or CLI flags).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
