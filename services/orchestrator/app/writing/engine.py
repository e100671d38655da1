"""Writes the prose for one outline leaf and splits off its reference list."""

from __future__ import annotations

import logging
import re
from time import perf_counter
from typing import Iterable, List, Tuple

from book_drafter_observability import observe_provider_response
from book_drafter_providers import LLMProvider, ProviderRequest, ProviderResponse
from book_drafter_providers.exceptions import ProviderResponseError
from book_drafter_schemas import (
    GenerationParameters,
    GroundingSource,
    PipelineStage,
    PublicationType,
    SectionContent,
    SectionGenerationError,
)

from ..context import summarise_prompt
from ..localization import LANGUAGE_PACKS, LanguagePack, get_language_pack
from ..settings import SERVICE_NAME
from .prompts import SECTION_PROMPT, SOURCE_MATERIAL_BLOCK

logger = logging.getLogger(__name__)

REFERENCE_SENTINELS: Tuple[str, ...] = tuple(
    pack.reference_sentinel for pack in LANGUAGE_PACKS.values()
)


async def write_section(
    book_title: str,
    chapter_title: str,
    section_title: str,
    params: GenerationParameters,
    words_per_section: int,
    include_references: bool,
    provider: LLMProvider,
    *,
    context_token_limit: int | None = None,
) -> SectionContent:
    """Generate one section and return its cleaned text, references and sources.

    Raises:
        SectionGenerationError: If the call fails or yields no usable text.
    """

    pack = get_language_pack(params.output_language)
    enable_search = include_references and provider.capabilities().supports_search_grounding
    if include_references and not enable_search:
        logger.warning(
            "Provider does not support search grounding; writing without it",
            extra={"provider": provider.name},
        )

    prompt = build_section_prompt(
        book_title,
        chapter_title,
        section_title,
        params,
        words_per_section,
        include_references,
        pack,
        context_token_limit=context_token_limit,
    )

    start = perf_counter()
    try:
        response = await _request_section(provider, prompt, pack, section_title, enable_search)
        text, references = parse_section_text(response.text, section_title)
        if not text:
            raise ProviderResponseError("Section response contained no prose")
    except Exception as exc:
        logger.exception(
            "Section generation failed",
            extra={"provider": provider.name, "section": section_title},
        )
        raise SectionGenerationError(
            pack.section_error.format(title=section_title), section_title
        ) from exc

    sources = [
        GroundingSource(uri=chunk.uri, title=chunk.title)
        for chunk in response.grounding
        if chunk.uri or chunk.title
    ]
    logger.info(
        "Section written",
        extra={
            "section": section_title,
            "characters": len(text),
            "references": len(references),
            "sources": len(sources),
            "elapsed_ms": round((perf_counter() - start) * 1000, 1),
        },
    )
    return SectionContent(title=section_title, text=text, references=references, sources=sources)


def build_section_prompt(
    book_title: str,
    chapter_title: str,
    section_title: str,
    params: GenerationParameters,
    words_per_section: int,
    include_references: bool,
    pack: LanguagePack,
    *,
    context_token_limit: int | None = None,
) -> str:
    directives = [
        pack.section_word_count.format(words=words_per_section),
        pack.section_style,
    ]
    if include_references:
        directives.append(
            pack.search_academic
            if params.publication_type is PublicationType.ACADEMIC
            else pack.search_general
        )
    directives.append(pack.citations)
    directives.append(pack.dialogue)
    if include_references:
        directives.append(pack.references_instruction.format(sentinel=pack.reference_sentinel))

    source_block = ""
    if params.source_material:
        source_material, _ = summarise_prompt(params.source_material, context_token_limit)
        source_block = pack.render(SOURCE_MATERIAL_BLOCK, source_material=source_material)

    return pack.render(
        SECTION_PROMPT,
        book_title=book_title,
        publication_type=pack.publication_type(params.publication_type),
        tone=pack.tone(params.tone),
        audience=pack.audience(params.audience),
        source_block=source_block,
        chapter_title=chapter_title,
        section_title=section_title,
        directives="\n".join(directives),
    )


def parse_section_text(
    raw: str,
    section_title: str,
    sentinels: Iterable[str] = REFERENCE_SENTINELS,
) -> Tuple[str, List[str]]:
    """Split a raw response into ``(body, references)``.

    The body is everything before the first sentinel marker, cleaned of a
    leading repetition of ``section_title``. Without a marker the reference
    list is empty.
    """

    body, trailer = raw or "", ""
    positions = [(body.find(marker), marker) for marker in sentinels if marker in body]
    if positions:
        index, marker = min(positions)
        body, trailer = body[:index], body[index + len(marker) :]

    references = [line.strip() for line in trailer.splitlines() if line.strip()]
    return clean_generated_text(body, section_title), references


def clean_generated_text(text: str, title: str) -> str:
    """Strip a leading copy of ``title`` (optionally a markdown heading) from ``text``."""

    trimmed_text = text.strip()
    trimmed_title = title.strip()
    if not trimmed_title:
        return trimmed_text

    escaped = re.escape(trimmed_title)
    pattern = re.compile(rf"^(?:#+\s*{escaped}|{escaped})(?=\W|$)\s*\n?", re.IGNORECASE)
    return pattern.sub("", trimmed_text, count=1).strip()


async def _request_section(
    provider: LLMProvider,
    prompt: str,
    pack: LanguagePack,
    section_title: str,
    enable_search: bool,
) -> ProviderResponse:
    request = ProviderRequest(
        prompt=prompt,
        system_prompt=pack.section_system,
        enable_search=enable_search,
        metadata={
            "stage": PipelineStage.SECTION.value,
            "section_title": section_title,
            "language": pack.code,
        },
    )
    response = await provider.generate(request)
    observe_provider_response(
        stage=PipelineStage.SECTION.value,
        provider=provider.name,
        service_name=SERVICE_NAME,
        response=response,
    )
    return response
