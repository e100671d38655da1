"""Provider resolution for orchestrator sessions."""

from __future__ import annotations

import os

from book_drafter_providers import (
    LLMProvider,
    ProviderConfig,
    ProviderFactory,
    load_provider_config,
    mock_provider_config,
)
from book_drafter_providers.config import PROVIDER_ENV_VAR

from .models import ProviderOverride


def resolve_provider_config(override: ProviderOverride | None) -> ProviderConfig:
    """Combine environment configuration with a per-request override."""

    provider_name = override.name if override and override.name else os.getenv(PROVIDER_ENV_VAR, "mock")
    if provider_name.lower() == "mock":
        return mock_provider_config()

    config = load_provider_config(prefix=provider_name)
    if override is None:
        return config

    update_kwargs = {}
    if override.model:
        update_kwargs["model"] = override.model

    settings_updates = {
        key: value
        for key, value in (
            ("temperature", override.temperature),
            ("max_output_tokens", override.max_output_tokens),
            ("top_p", override.top_p),
            ("thinking_budget", override.thinking_budget),
            ("timeout_seconds", override.timeout_seconds),
        )
        if value is not None
    }
    if settings_updates:
        update_kwargs["settings"] = config.settings.model_copy(update=settings_updates)

    if update_kwargs:
        config = config.model_copy(update=update_kwargs)
    return config


def create_provider(override: ProviderOverride | None = None) -> LLMProvider:
    return ProviderFactory.create(resolve_provider_config(override))


__all__ = ["create_provider", "resolve_provider_config"]
