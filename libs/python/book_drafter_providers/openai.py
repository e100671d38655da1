"""OpenAI Chat Completions adapter."""

from __future__ import annotations

import time
from typing import Any, Dict, List

from openai import AsyncOpenAI, OpenAIError

from .base import LLMProvider, ProviderCapabilities, ProviderRequest, ProviderResponse
from .config import ProviderConfig
from .exceptions import ProviderCapabilityError, ProviderError, ProviderResponseError
from .pricing import estimate_cost


class OpenAIProvider(LLMProvider):
    """Chat Completions backend.

    Outlines use the ``json_schema`` response format. Search grounding is not
    offered, so the pipeline writes sections without web sources when this
    provider is selected.
    """

    name = "openai"

    def __init__(self, config: ProviderConfig) -> None:
        self._config = config
        client_kwargs: Dict[str, Any] = {"api_key": config.api_key}
        if config.settings.timeout_seconds:
            client_kwargs["timeout"] = config.settings.timeout_seconds
        self._client = AsyncOpenAI(**client_kwargs)

    def capabilities(self) -> ProviderCapabilities:
        return ProviderCapabilities(
            supports_json_mode=True,
            max_output_tokens=self._config.settings.max_output_tokens,
        )

    async def generate(self, request: ProviderRequest) -> ProviderResponse:
        if request.enable_search:
            raise ProviderCapabilityError("OpenAI provider does not support search grounding")

        start = time.perf_counter()
        try:
            completion = await self._client.chat.completions.create(**self._params(request))
        except OpenAIError as exc:
            raise ProviderError(f"OpenAI request failed: {exc}") from exc
        latency_ms = (time.perf_counter() - start) * 1000

        choices = getattr(completion, "choices", None) or []
        text = (choices[0].message.content or "") if choices else ""
        if not text.strip():
            raise ProviderResponseError("OpenAI response missing content")

        usage = getattr(completion, "usage", None)
        prompt_tokens = getattr(usage, "prompt_tokens", 0) or 0
        completion_tokens = getattr(usage, "completion_tokens", 0) or 0
        return ProviderResponse(
            text=text,
            raw=completion,
            model=completion.model,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            cost_usd=estimate_cost(
                provider=self.name,
                model=completion.model,
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
            ),
            latency_ms=latency_ms,
        )

    def _params(self, request: ProviderRequest) -> Dict[str, Any]:
        settings = self._config.settings
        messages: List[Dict[str, str]] = []
        if request.system_prompt:
            messages.append({"role": "system", "content": request.system_prompt})
        messages.append({"role": "user", "content": request.prompt})

        params: Dict[str, Any] = {
            "model": self._config.model,
            "messages": messages,
            "temperature": (
                settings.temperature if request.temperature is None else request.temperature
            ),
        }
        top_p = settings.top_p if request.top_p is None else request.top_p
        if top_p is not None:
            params["top_p"] = top_p
        max_tokens = request.max_output_tokens or settings.max_output_tokens
        if max_tokens:
            params["max_tokens"] = max_tokens

        if request.json_schema:
            params["response_format"] = {
                "type": "json_schema",
                "json_schema": {"name": "book_outline", "schema": dict(request.json_schema)},
            }
        elif settings.json_mode:
            params["response_format"] = {"type": "json_object"}
        return params
