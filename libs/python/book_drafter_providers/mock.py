"""Deterministic mock provider for tests and offline development.

The mock reads the ``metadata`` the pipeline engines attach to each request
(``stage``, ``topic``, ``chapter_count``, ``section_title``, ``sources``) so
that a full outline → sections → references run can be exercised without
network access.
"""

from __future__ import annotations

import json
import re
from typing import Any

from .base import (
    GroundingChunk,
    LLMProvider,
    ProviderCapabilities,
    ProviderRequest,
    ProviderResponse,
)
from .config import ProviderConfig, mock_provider_config

DEFAULT_TEXT = "Mock response generated for testing."
SECTIONS_PER_CHAPTER = 3


class MockProvider(LLMProvider):
    name = "mock"

    def __init__(self, config: ProviderConfig | None = None) -> None:
        self._config = config or mock_provider_config()

    def capabilities(self) -> ProviderCapabilities:
        return ProviderCapabilities(
            supports_json_mode=True,
            supports_search_grounding=True,
            max_input_tokens=32000,
            max_output_tokens=2000,
        )

    async def generate(self, request: ProviderRequest) -> ProviderResponse:
        stage = request.metadata.get("stage")
        grounding: list[GroundingChunk] = []
        if request.json_schema:
            text = json.dumps(self._outline_payload(request.metadata))
        elif stage == "references":
            text = "\n".join(self._reference_lines(request.metadata))
        else:
            section_title = str(request.metadata.get("section_title") or "Section")
            text = (
                f"{DEFAULT_TEXT} This passage covers {section_title} "
                f"and was produced without contacting any external service."
            )
            if request.enable_search:
                slug = re.sub(r"[^a-z0-9]+", "-", section_title.lower()).strip("-") or "source"
                grounding.append(
                    GroundingChunk(uri=f"https://example.org/{slug}", title=f"Notes on {section_title}")
                )

        return ProviderResponse(
            text=text,
            raw={"mock": True, "stage": stage},
            model="mock",
            prompt_tokens=len(request.prompt.split()),
            completion_tokens=len(text.split()),
            grounding=grounding,
            cost_usd=0.0,
            latency_ms=1.0,
        )

    @staticmethod
    def _outline_payload(metadata: dict[str, Any]) -> dict[str, Any]:
        topic = str(metadata.get("topic") or "Mock Book")
        chapter_count = int(metadata.get("chapter_count") or 5)
        return {
            "title": topic,
            "introduction": {"title": "Introduction"},
            "chapters": [
                {
                    "title": f"Chapter {index}",
                    "sections": [
                        f"Section {index}.{sub}" for sub in range(1, SECTIONS_PER_CHAPTER + 1)
                    ],
                }
                for index in range(1, chapter_count + 1)
            ],
            "conclusion": {"title": "Conclusion"},
        }

    @staticmethod
    def _reference_lines(metadata: dict[str, Any]) -> list[str]:
        lines = []
        for source in metadata.get("sources") or []:
            title = source.get("title") or source.get("uri")
            uri = source.get("uri")
            lines.append(f"{title}. {uri}" if uri else f"{title}.")
        return sorted(lines)
