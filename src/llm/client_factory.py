# src/llm/client_factory.py — v4
"""Factory: build the LLM client named by LLM_PROVIDER.

Adapters are registered by dotted class path and imported on first use, so
an unused provider SDK never has to be installed.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Callable
from typing import Any

from readlearn.config.settings import Settings
from readlearn.llm.base_client import BaseLLMClient

logger = logging.getLogger(__name__)

_ADAPTERS: dict[str, str] = {
    "anthropic": "readlearn.llm.adapters.anthropic_adapter.AnthropicAdapter",
}

# Constructor arguments each provider takes from settings, besides the model.
_SETTINGS_ARGS: dict[str, Callable[[Settings], dict[str, Any]]] = {
    "anthropic": lambda s: {"api_key": s.anthropic_api_key, "timeout_s": s.llm_timeout_s},
}


class UnsupportedProviderError(ValueError):
    """Raised when a provider is not registered."""


def create_llm_client(
    settings: Settings,
    provider: str | None = None,
    **overrides: Any,
) -> BaseLLMClient:
    """Build the configured client.

    Args:
        settings: LLM_PROVIDER, LLM_MODEL, credentials and timeout.
        provider: Overrides LLM_PROVIDER.
        **overrides: Constructor arguments taking precedence over settings.

    Raises:
        UnsupportedProviderError: If the provider is not registered.
    """
    provider = provider or settings.llm_provider
    class_path = _ADAPTERS.get(provider)
    if class_path is None:
        raise UnsupportedProviderError(
            f"Unsupported LLM provider: {provider!r}. "
            f"Available: {', '.join(sorted(_ADAPTERS))}"
        )

    init_args: dict[str, Any] = {"model": settings.llm_model}
    settings_args = _SETTINGS_ARGS.get(provider)
    if settings_args is not None:
        init_args.update(settings_args(settings))
    init_args.update(overrides)

    if provider == "anthropic" and not init_args.get("api_key"):
        logger.warning("ANTHROPIC_API_KEY is not set; remote classification will fail")

    logger.debug("LLM client: provider=%s model=%s", provider, init_args["model"])
    return _load_class(class_path)(**init_args)


def _load_class(class_path: str) -> type:
    module_name, _, class_name = class_path.rpartition(".")
    return getattr(importlib.import_module(module_name), class_name)
