"""Builds an :class:`LLMProvider` from a :class:`ProviderConfig`."""

from __future__ import annotations

from importlib import import_module
from typing import Dict, Type

from .base import LLMProvider
from .config import ProviderConfig, load_provider_config
from .exceptions import ProviderConfigError

# SDK-backed adapters are imported on first use so offline runs with the mock
# provider never load google-genai or openai.
PROVIDER_MAP: Dict[str, str] = {
    "gemini": "book_drafter_providers.gemini:GeminiProvider",
    "openai": "book_drafter_providers.openai:OpenAIProvider",
    "mock": "book_drafter_providers.mock:MockProvider",
}


def provider_class(name: str) -> Type[LLMProvider]:
    target = PROVIDER_MAP.get((name or "").lower())
    if target is None:
        known = ", ".join(sorted(PROVIDER_MAP))
        raise ProviderConfigError(f"Unknown provider: {name} (expected one of {known})")
    module_name, _, class_name = target.partition(":")
    return getattr(import_module(module_name), class_name)


class ProviderFactory:
    @staticmethod
    def create(config: ProviderConfig | None = None) -> LLMProvider:
        """Instantiate the provider named by ``config`` (default: environment)."""

        if config is None:
            config = load_provider_config()
        return provider_class(config.name)(config)
