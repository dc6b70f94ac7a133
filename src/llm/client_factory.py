# src/llm/client_factory.py — v3
"""Factory: instantiate a vision provider from its name.

Also answers the routing questions the batch planner asks before any
network call: which provider is the alternate, whether its credential is
present, and how large an image it accepts.
"""

from __future__ import annotations

import importlib
import logging

from m2md.config.settings import Settings, load_settings
from m2md.llm.base_client import BaseProvider

logger = logging.getLogger(__name__)

# Registry of provider name → adapter class path (lazy import).
_PROVIDER_REGISTRY: dict[str, str] = {
    "anthropic": "m2md.llm.adapters.anthropic_adapter.AnthropicProvider",
    "openai": "m2md.llm.adapters.openai_adapter.OpenAIProvider",
}

_ALTERNATES: dict[str, str] = {"anthropic": "openai", "openai": "anthropic"}

_CREDENTIAL_ENV: dict[str, str] = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
}


class UnsupportedProviderError(ValueError):
    """Raised when a provider is not registered."""


class MissingCredentialError(Exception):
    """Raised when a provider is requested without its API key."""

    def __init__(self, provider: str) -> None:
        self.provider = provider
        self.env_var = _CREDENTIAL_ENV.get(provider, f"{provider.upper()}_API_KEY")
        super().__init__(f"{self.env_var} is not set (required for provider {provider!r})")


def create_provider(
    name: str,
    settings: Settings | None = None,
    **kwargs: object,
) -> BaseProvider:
    """Instantiate the adapter registered under ``name``.

    Args:
        name: Provider identifier (anthropic, openai).
        settings: Application settings (API keys, payload limits).
        **kwargs: Extra adapter constructor arguments.

    Raises:
        UnsupportedProviderError: If provider is not registered.
        MissingCredentialError: If no API key is configured.
    """
    adapter_cls = _adapter_class(name)
    cfg = settings or load_settings()

    init_kwargs = dict(kwargs)
    init_kwargs.setdefault("api_key", cfg.api_key_for(name))
    if not init_kwargs["api_key"]:
        raise MissingCredentialError(name)
    init_kwargs.setdefault("max_image_bytes", cfg.max_image_bytes_for(name))

    logger.debug("Creating provider: %s", name)
    return adapter_cls(**init_kwargs)


def alternate_provider_name(name: str) -> str | None:
    """The provider used for files too large for ``name`` (None if there is none)."""
    _adapter_class(name)
    return _ALTERNATES.get(name)


def has_credentials(name: str, settings: Settings) -> bool:
    return bool(settings.api_key_for(name))


def default_model_for(name: str) -> str:
    """Default model of a registered provider, without instantiating it."""
    return _adapter_class(name).DEFAULT_MODEL


def available_providers() -> list[str]:
    return sorted(_PROVIDER_REGISTRY)


def _adapter_class(name: str) -> type:
    if name not in _PROVIDER_REGISTRY:
        raise UnsupportedProviderError(
            f"Unsupported provider: {name!r}. "
            f"Available: {', '.join(sorted(_PROVIDER_REGISTRY))}"
        )
    module_path, class_name = _PROVIDER_REGISTRY[name].rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)
