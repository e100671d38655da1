"""Outline generation: topic and parameters in, validated book skeleton out."""

from __future__ import annotations

import json
import logging

from pydantic import ValidationError

from book_drafter_observability import observe_provider_response
from book_drafter_providers import LLMProvider, ProviderRequest, ProviderResponse
from book_drafter_providers.exceptions import ProviderResponseError
from book_drafter_schemas import (
    GenerationParameters,
    Outline,
    OutlineGenerationError,
    PipelineStage,
)
from book_drafter_schemas.utils.validators import ensure_not_blank

from ..context import summarise_prompt
from ..localization import LanguagePack, get_language_pack
from ..settings import SERVICE_NAME
from .prompts import OUTLINE_PROMPT, SOURCE_MATERIAL_BLOCK

logger = logging.getLogger(__name__)

_TITLE_NODE = {
    "type": "object",
    "properties": {"title": {"type": "string"}},
    "required": ["title"],
}

OUTLINE_JSON_SCHEMA = {
    "type": "object",
    "properties": {
        "title": {"type": "string", "description": "Main title of the book."},
        "introduction": _TITLE_NODE,
        "chapters": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "title": {"type": "string"},
                    "sections": {"type": "array", "items": {"type": "string"}},
                },
                "required": ["title", "sections"],
            },
        },
        "conclusion": _TITLE_NODE,
    },
    "required": ["title", "introduction", "chapters", "conclusion"],
}


async def generate_outline(
    topic: str,
    params: GenerationParameters,
    provider: LLMProvider,
    *,
    context_token_limit: int | None = None,
) -> Outline:
    """Ask the provider for a structured outline and validate it.

    Raises:
        BookValidationError: If ``topic`` is blank. No request is made.
        OutlineGenerationError: If the call fails or the payload does not
            describe a book with exactly ``params.chapter_count`` chapters.
    """

    pack = get_language_pack(params.output_language)
    topic = ensure_not_blank(topic, field_name="topic", message=pack.topic_required)
    prompt = build_outline_prompt(topic, params, pack, context_token_limit=context_token_limit)

    try:
        response = await _request_outline(provider, prompt, pack, topic, params)
        outline = _parse_outline(response.text)
    except Exception as exc:
        logger.exception(
            "Outline generation failed",
            extra={"provider": provider.name, "stage": PipelineStage.OUTLINE.value},
        )
        raise OutlineGenerationError(pack.outline_error) from exc

    if len(outline.chapters) != params.chapter_count:
        logger.warning(
            "Outline chapter count mismatch",
            extra={"expected": params.chapter_count, "received": len(outline.chapters)},
        )
        raise OutlineGenerationError(pack.outline_error)

    logger.info(
        "Outline generated",
        extra={"chapters": len(outline.chapters), "total_sections": outline.total_sections},
    )
    return outline


def build_outline_prompt(
    topic: str,
    params: GenerationParameters,
    pack: LanguagePack,
    *,
    context_token_limit: int | None = None,
) -> str:
    source_block = ""
    if params.source_material:
        source_material, trimmed = summarise_prompt(params.source_material, context_token_limit)
        if trimmed:
            logger.info("Source material trimmed for outline request")
        source_block = pack.render(SOURCE_MATERIAL_BLOCK, source_material=source_material)

    return pack.render(
        OUTLINE_PROMPT,
        source_block=source_block,
        publication_type=pack.publication_type(params.publication_type),
        tone=pack.tone(params.tone),
        audience=pack.audience(params.audience),
        topic=topic,
        outline_word_count=pack.outline_word_count.format(
            word_count=pack.format_number(params.target_word_count)
        ),
        outline_chapters=pack.outline_chapters.format(chapter_count=params.chapter_count),
    )


async def _request_outline(
    provider: LLMProvider,
    prompt: str,
    pack: LanguagePack,
    topic: str,
    params: GenerationParameters,
) -> ProviderResponse:
    request = ProviderRequest(
        prompt=prompt,
        system_prompt=pack.outline_system,
        json_schema=OUTLINE_JSON_SCHEMA,
        metadata={
            "stage": PipelineStage.OUTLINE.value,
            "topic": topic,
            "chapter_count": params.chapter_count,
            "language": pack.code,
        },
    )
    response = await provider.generate(request)
    observe_provider_response(
        stage=PipelineStage.OUTLINE.value,
        provider=provider.name,
        service_name=SERVICE_NAME,
        response=response,
    )
    return response


def _parse_outline(payload: str) -> Outline:
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise ProviderResponseError("Outline response was not valid JSON") from exc
    try:
        return Outline.model_validate(data)
    except ValidationError as exc:
        raise ProviderResponseError("Outline response did not match the outline schema") from exc
