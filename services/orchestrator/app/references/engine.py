"""Deduplicates grounding sources and asks for one formatted bibliography."""

from __future__ import annotations

import logging
import re
from typing import Iterable, List

from book_drafter_observability import observe_provider_response
from book_drafter_providers import LLMProvider, ProviderRequest, ProviderResponse
from book_drafter_providers.exceptions import ProviderResponseError
from book_drafter_schemas import (
    GroundingSource,
    OutputLanguage,
    PipelineStage,
    ReferenceConsolidationError,
)

from ..localization import LanguagePack, get_language_pack
from ..settings import SERVICE_NAME
from .prompts import REFERENCES_PROMPT

logger = logging.getLogger(__name__)

_LIST_MARKER = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s+")


def dedupe_sources(
    sources: Iterable[GroundingSource], limit: int | None = None
) -> List[GroundingSource]:
    """Drop empty entries and duplicates, keeping the first occurrence.

    Sources are keyed by URI; those without one are keyed by their
    case-folded title. ``limit`` caps the result after deduplication.
    """

    seen: set[tuple[str, str]] = set()
    unique: List[GroundingSource] = []
    for source in sources:
        if source.is_empty:
            continue
        uri = (source.uri or "").strip()
        key = ("uri", uri) if uri else ("title", (source.title or "").strip().casefold())
        if key in seen:
            continue
        seen.add(key)
        unique.append(source)
        if limit is not None and len(unique) >= limit:
            break
    return unique


async def consolidate_references(
    sources: Iterable[GroundingSource],
    book_topic: str,
    output_language: OutputLanguage,
    provider: LLMProvider,
    limit: int | None = None,
) -> List[str]:
    """Return the book's bibliography, one citation per line.

    No request is made when there are no usable sources.

    Raises:
        ReferenceConsolidationError: If the call fails or returns no lines.
    """

    unique = dedupe_sources(sources, limit)
    if not unique:
        return []

    pack = get_language_pack(output_language)
    prompt = pack.render(
        REFERENCES_PROMPT,
        references_task=pack.references_task.format(topic=book_topic),
        source_lines="\n".join(
            f"{index}. {_describe(source)}" for index, source in enumerate(unique, start=1)
        ),
    )

    try:
        response = await _request_references(provider, prompt, pack, unique)
        references = parse_reference_lines(response.text)
        if not references:
            raise ProviderResponseError("Reference response was empty")
    except Exception as exc:
        logger.exception(
            "Reference consolidation failed",
            extra={"provider": provider.name, "sources": len(unique)},
        )
        raise ReferenceConsolidationError(pack.references_error) from exc

    logger.info(
        "References consolidated",
        extra={"sources": len(unique), "references": len(references)},
    )
    return references


def parse_reference_lines(text: str) -> List[str]:
    lines = []
    for line in (text or "").splitlines():
        cleaned = _LIST_MARKER.sub("", line).strip()
        if cleaned:
            lines.append(cleaned)
    return lines


def _describe(source: GroundingSource) -> str:
    title = (source.title or "").strip()
    uri = (source.uri or "").strip()
    if title and uri:
        return f"{title} <{uri}>"
    return title or uri


async def _request_references(
    provider: LLMProvider,
    prompt: str,
    pack: LanguagePack,
    sources: List[GroundingSource],
) -> ProviderResponse:
    request = ProviderRequest(
        prompt=prompt,
        system_prompt=pack.references_system,
        temperature=0.2,
        metadata={
            "stage": PipelineStage.REFERENCES.value,
            "language": pack.code,
            "sources": [source.model_dump() for source in sources],
        },
    )
    response = await provider.generate(request)
    observe_provider_response(
        stage=PipelineStage.REFERENCES.value,
        provider=provider.name,
        service_name=SERVICE_NAME,
        response=response,
    )
    return response
