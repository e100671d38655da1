"""Configuration models and helpers for provider selection."""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

PROVIDER_ENV_VAR = "LLM_PROVIDER"
DEFAULT_PROVIDER = "gemini"


class ProviderSettings(BaseModel):
    """Per-call default parameters."""

    model_config = ConfigDict(frozen=True)

    temperature: float = Field(0.7, ge=0, le=2)
    max_output_tokens: int | None = Field(None, ge=16)
    top_p: float | None = Field(None, ge=0, le=1)
    json_mode: bool = Field(False)
    thinking_budget: int | None = Field(
        None,
        description=(
            "Default thinking token budget for Gemini 2.5 models; use -1 for dynamic thinking"
        ),
    )
    timeout_seconds: float | None = Field(
        None, gt=0, description="Client-side timeout for a single generation request"
    )


class ProviderConfig(BaseModel):
    """Configuration for a single provider instance."""

    model_config = ConfigDict(frozen=True)

    name: str
    api_key: str
    model: str
    settings: ProviderSettings = Field(default_factory=ProviderSettings)


def mock_provider_config() -> ProviderConfig:
    """Credential-free configuration for the offline mock provider."""

    return ProviderConfig(name="mock", api_key="mock", model="mock", settings=ProviderSettings())


def load_provider_config(prefix: str | None = None) -> ProviderConfig:
    """Load configuration from environment variables.

    Args:
        prefix: Optional prefix for environment variables (default uses provider name).

    Environment variables used (assuming prefix "GEMINI"):
        GEMINI_API_KEY
        GEMINI_MODEL
        GEMINI_TEMPERATURE (optional)
        GEMINI_MAX_OUTPUT_TOKENS (optional)
        GEMINI_TOP_P (optional)
        GEMINI_JSON_MODE (optional boolean)
        GEMINI_THINKING_BUDGET (optional)
        GEMINI_TIMEOUT_SECONDS (optional)

    Returns:
        ProviderConfig object populated from environment variables.

    Raises:
        ValidationError: If required variables are missing or invalid.
    """

    provider_name = (prefix or os.getenv(PROVIDER_ENV_VAR, DEFAULT_PROVIDER)).upper()
    if provider_name == "MOCK":
        return mock_provider_config()
    env_prefix = provider_name

    def read_env(key: str, default: Any | None = None) -> Any:
        return os.getenv(f"{env_prefix}_{key}", default)

    def parse_bool(value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if value is None:
            return False
        return str(value).strip().lower() in {"true", "1", "yes", "on"}

    def parse_optional(key: str, cast, message: str):
        raw = read_env(key)
        if raw in (None, ""):
            return None
        try:
            return cast(str(raw).strip())
        except (TypeError, ValueError) as exc:
            raise ValidationError.from_exception_data(
                "ProviderConfig",
                [
                    {
                        "type": "value_error",
                        "loc": ("settings", key.lower()),
                        "input": raw,
                        "ctx": {"error": message},
                    }
                ],
            ) from exc

    api_key = read_env("API_KEY")
    model = read_env("MODEL")
    if not api_key or not model:
        raise ValidationError.from_exception_data(
            "ProviderConfig",
            [
                {
                    "type": "value_error",
                    "loc": ("api_key",),
                    "input": None,
                    "ctx": {"error": f"{env_prefix}_API_KEY or {env_prefix}_MODEL not configured"},
                }
            ],
        )

    max_output_tokens = parse_optional(
        "MAX_OUTPUT_TOKENS", int, "MAX_OUTPUT_TOKENS must be a positive integer"
    )
    if max_output_tokens is not None and max_output_tokens <= 0:
        max_output_tokens = None

    temperature = parse_optional("TEMPERATURE", float, "TEMPERATURE must be a float")

    settings = ProviderSettings(
        temperature=0.7 if temperature is None else temperature,
        max_output_tokens=max_output_tokens,
        top_p=parse_optional("TOP_P", float, "TOP_P must be a float between 0 and 1"),
        json_mode=parse_bool(read_env("JSON_MODE", "false")),
        thinking_budget=parse_optional(
            "THINKING_BUDGET", int, "THINKING_BUDGET must be an integer"
        ),
        timeout_seconds=parse_optional(
            "TIMEOUT_SECONDS", float, "TIMEOUT_SECONDS must be a positive number"
        ),
    )

    return ProviderConfig(name=provider_name.lower(), api_key=api_key, model=model, settings=settings)
