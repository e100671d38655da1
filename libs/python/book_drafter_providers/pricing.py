"""Static pricing tables and helpers for estimating provider cost."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping


@dataclass(frozen=True)
class _TokenPricing:
    """Per-model pricing expressed as USD per one million tokens."""

    input_per_million: float
    output_per_million: float


_OPENAI_PRICING: Mapping[str, _TokenPricing] = {
    "gpt-4.1": _TokenPricing(input_per_million=2.0, output_per_million=8.0),
    "gpt-4.1-mini": _TokenPricing(input_per_million=0.4, output_per_million=1.6),
    "gpt-4o": _TokenPricing(input_per_million=2.5, output_per_million=10.0),
    "gpt-4o-mini": _TokenPricing(input_per_million=0.15, output_per_million=0.6),
}

_GEMINI_PRICING: Mapping[str, _TokenPricing] = {
    "gemini-2.5-pro": _TokenPricing(input_per_million=1.25, output_per_million=10.0),
    "gemini-2.5-flash": _TokenPricing(input_per_million=0.30, output_per_million=2.5),
    "gemini-2.5-flash-lite": _TokenPricing(input_per_million=0.10, output_per_million=0.4),
}

_PROVIDER_PRICING: Dict[str, Mapping[str, _TokenPricing]] = {
    "openai": _OPENAI_PRICING,
    "gemini": _GEMINI_PRICING,
}


def estimate_cost(
    provider: str,
    model: str,
    prompt_tokens: int | float | None,
    completion_tokens: int | float | None,
) -> float | None:
    """Approximate cost in USD for a provider response.

    Returns ``0.0`` for the mock provider and ``None`` when the model is not
    in the pricing table.
    """

    provider_key = (provider or "").lower()
    if provider_key == "mock":
        return 0.0

    pricing = _PROVIDER_PRICING.get(provider_key, {}).get((model or "").lower())
    if pricing is None:
        return None

    prompt_value = max(float(prompt_tokens or 0.0), 0.0)
    completion_value = max(float(completion_tokens or 0.0), 0.0)
    cost = (
        prompt_value * pricing.input_per_million
        + completion_value * pricing.output_per_million
    ) / 1_000_000.0
    return round(cost, 6)


__all__ = ["estimate_cost"]
