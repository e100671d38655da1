"""Unified provider abstraction for Gemini, ChatGPT, and an offline mock."""

from .base import (
    GroundingChunk,
    LLMProvider,
    ProviderCapabilities,
    ProviderRequest,
    ProviderResponse,
)
from .config import ProviderConfig, ProviderSettings, load_provider_config, mock_provider_config
from .factory import ProviderFactory
from .mock import MockProvider

__all__ = [
    "GroundingChunk",
    "LLMProvider",
    "ProviderCapabilities",
    "ProviderRequest",
    "ProviderResponse",
    "ProviderConfig",
    "ProviderSettings",
    "load_provider_config",
    "mock_provider_config",
    "ProviderFactory",
    "MockProvider",
]
