"""Scripted provider used to drive the pipeline deterministically in tests."""

from __future__ import annotations

import asyncio
import json
import re
from typing import Callable, Optional

from book_drafter_providers.base import (
    GroundingChunk,
    LLMProvider,
    ProviderCapabilities,
    ProviderRequest,
    ProviderResponse,
)
from book_drafter_providers.exceptions import ProviderError


def outline_payload(title: str, chapter_count: int, sections_per_chapter: int = 3) -> dict:
    return {
        "title": title,
        "introduction": {"title": "Why policy matters"},
        "chapters": [
            {
                "title": f"Chapter {chapter}",
                "sections": [
                    f"Section {chapter}.{section}"
                    for section in range(1, sections_per_chapter + 1)
                ],
            }
            for chapter in range(1, chapter_count + 1)
        ],
        "conclusion": {"title": "Looking ahead"},
    }


def default_section_text(title: str) -> str:
    return (
        f"## {title}\n\nThe transition depends on stable incentives (Smith, 2020).\n"
        f"###REFERENCIAS###\nSmith, J. (2020). Notes on {title}. Policy Press.\n"
    )


class ScriptedProvider(LLMProvider):
    """Answers each pipeline stage from the request metadata and records every request."""

    name = "stub"

    def __init__(
        self,
        *,
        outline: Optional[dict] = None,
        outline_text: Optional[str] = None,
        section_text: Callable[[str], str] = default_section_text,
        references_text: str = "Smith, J. (2020). Policy notes.\nZhou, L. (2019). Grid storage.",
        fail_on_section: Optional[str] = None,
        fail_references: bool = False,
        supports_search: bool = True,
        yield_control: bool = False,
    ) -> None:
        self.outline = outline
        self.outline_text = outline_text
        self.section_text = section_text
        self.references_text = references_text
        self.fail_on_section = fail_on_section
        self.fail_references = fail_references
        self.supports_search = supports_search
        self.yield_control = yield_control
        self.requests: list[ProviderRequest] = []

    def capabilities(self) -> ProviderCapabilities:
        return ProviderCapabilities(
            supports_json_mode=True, supports_search_grounding=self.supports_search
        )

    def requests_for(self, stage: str) -> list[ProviderRequest]:
        return [request for request in self.requests if request.metadata.get("stage") == stage]

    async def generate(self, request: ProviderRequest) -> ProviderResponse:
        self.requests.append(request)
        if self.yield_control:
            await asyncio.sleep(0)

        stage = request.metadata.get("stage")
        grounding: list[GroundingChunk] = []
        if stage == "outline":
            if self.outline_text is not None:
                text = self.outline_text
            else:
                text = json.dumps(
                    self.outline
                    or outline_payload(
                        request.metadata["topic"], request.metadata["chapter_count"]
                    )
                )
        elif stage == "references":
            if self.fail_references:
                raise ProviderError("reference service unavailable")
            text = self.references_text
        else:
            title = request.metadata["section_title"]
            if title == self.fail_on_section:
                raise ProviderError(f"upstream failure while writing {title}")
            text = self.section_text(title)
            if request.enable_search:
                slug = re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")
                grounding.append(
                    GroundingChunk(uri=f"https://example.org/{slug}", title=f"Source for {title}")
                )

        return ProviderResponse(
            text=text,
            raw={},
            model="stub-model",
            prompt_tokens=len(request.prompt.split()),
            completion_tokens=len(text.split()),
            grounding=grounding,
        )
