"""Provider-neutral request/response types for the generation service."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, MutableMapping


@dataclass(slots=True)
class ProviderRequest:
    """One generation call.

    ``json_schema`` asks for schema-constrained JSON output; ``enable_search``
    asks the provider to ground the answer with web search. ``metadata``
    carries the pipeline stage and related identifiers; providers may read it
    but must not depend on it for correctness.
    """

    prompt: str
    system_prompt: str | None = None
    json_schema: Mapping[str, Any] | None = None
    enable_search: bool = False
    temperature: float | None = None
    max_output_tokens: int | None = None
    top_p: float | None = None
    thinking_budget: int | None = None
    metadata: MutableMapping[str, Any] = field(default_factory=dict)

    @property
    def stage(self) -> str | None:
        return self.metadata.get("stage")


@dataclass(slots=True, frozen=True)
class GroundingChunk:
    """Web source the provider reported for a grounded answer."""

    uri: str | None = None
    title: str | None = None


@dataclass(slots=True)
class ProviderResponse:
    text: str
    raw: Any
    model: str
    prompt_tokens: int
    completion_tokens: int
    grounding: list[GroundingChunk] = field(default_factory=list)
    cost_usd: float | None = None
    latency_ms: float | None = None
    received_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


@dataclass(slots=True)
class ProviderCapabilities:
    supports_json_mode: bool = False
    supports_search_grounding: bool = False
    supports_thinking: bool = False
    max_input_tokens: int | None = None
    max_output_tokens: int | None = None


class LLMProvider(ABC):
    """A text generation backend.

    Implementations translate :class:`ProviderRequest` into their SDK call and
    raise :class:`~book_drafter_providers.exceptions.ProviderError` subclasses
    on failure. They never retry.
    """

    name: str

    @abstractmethod
    def capabilities(self) -> ProviderCapabilities:
        """Describe what this backend supports."""

    @abstractmethod
    async def generate(self, request: ProviderRequest) -> ProviderResponse:
        """Run one generation call."""

    def generate_sync(self, request: ProviderRequest) -> ProviderResponse:
        """Run :meth:`generate` to completion outside an event loop."""

        return asyncio.run(self.generate(request))
