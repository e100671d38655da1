"""Google Gemini provider implementation."""

from __future__ import annotations

import time
from typing import Any, Dict

from google import genai
from google.genai import types

from .base import (
    GroundingChunk,
    LLMProvider,
    ProviderCapabilities,
    ProviderRequest,
    ProviderResponse,
)
from .config import ProviderConfig
from .exceptions import ProviderResponseError
from .pricing import estimate_cost


class GeminiProvider(LLMProvider):
    name = "gemini"

    def __init__(self, config: ProviderConfig) -> None:
        self._config = config
        http_options = None
        if config.settings.timeout_seconds:
            # google-genai expects the timeout in milliseconds.
            http_options = types.HttpOptions(timeout=int(config.settings.timeout_seconds * 1000))
        self._client = genai.Client(api_key=config.api_key, http_options=http_options)

    def capabilities(self) -> ProviderCapabilities:
        return ProviderCapabilities(
            supports_json_mode=True,
            supports_search_grounding=True,
            max_input_tokens=None,
            max_output_tokens=self._config.settings.max_output_tokens,
            supports_thinking=True,
        )

    async def generate(self, request: ProviderRequest) -> ProviderResponse:
        settings = self._config.settings
        temperature = (
            request.temperature if request.temperature is not None else settings.temperature
        )

        config_kwargs: Dict[str, Any] = {"temperature": temperature}
        if request.system_prompt:
            config_kwargs["system_instruction"] = request.system_prompt

        top_p = request.top_p if request.top_p is not None else settings.top_p
        if top_p is not None:
            config_kwargs["top_p"] = top_p

        max_output = (
            request.max_output_tokens
            if request.max_output_tokens is not None
            else settings.max_output_tokens
        )
        if max_output:
            config_kwargs["max_output_tokens"] = max_output

        if request.json_schema:
            config_kwargs["response_mime_type"] = "application/json"
            config_kwargs["response_schema"] = request.json_schema
        elif settings.json_mode and not request.enable_search:
            config_kwargs["response_mime_type"] = "application/json"

        if request.enable_search:
            config_kwargs["tools"] = [types.Tool(google_search=types.GoogleSearch())]

        thinking_budget = (
            request.thinking_budget
            if request.thinking_budget is not None
            else settings.thinking_budget
        )
        if thinking_budget is not None:
            config_kwargs["thinking_config"] = types.ThinkingConfig(thinking_budget=thinking_budget)

        start = time.perf_counter()
        response = await self._client.aio.models.generate_content(
            model=self._config.model,
            contents=request.prompt,
            config=types.GenerateContentConfig(**config_kwargs),
        )
        latency_ms = (time.perf_counter() - start) * 1000

        text = getattr(response, "text", None)
        if not text:
            raise ProviderResponseError("Gemini response missing text content")

        usage = getattr(response, "usage_metadata", None)
        prompt_tokens = (getattr(usage, "prompt_token_count", None) or 0) if usage else 0
        completion_tokens = (getattr(usage, "candidates_token_count", None) or 0) if usage else 0
        cost_usd = estimate_cost(
            provider=self._config.name,
            model=self._config.model,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
        )

        return ProviderResponse(
            text=text,
            raw=response,
            model=self._config.model,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            grounding=extract_grounding(response),
            cost_usd=cost_usd,
            latency_ms=latency_ms,
        )


def extract_grounding(response: Any) -> list[GroundingChunk]:
    """Collect web grounding chunks from the first candidate of a response."""

    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    metadata = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []

    grounding: list[GroundingChunk] = []
    for chunk in chunks:
        web = getattr(chunk, "web", None)
        if web is None:
            continue
        uri = getattr(web, "uri", None)
        title = getattr(web, "title", None)
        if uri or title:
            grounding.append(GroundingChunk(uri=uri, title=title))
    return grounding
