"""Tests for outline generation and its parsing boundary."""

from __future__ import annotations

import json

import pytest

from book_drafter_schemas import (
    BookValidationError,
    GenerationParameters,
    OutlineGenerationError,
    OutputLanguage,
    PublicationType,
)

from services.orchestrator.app.outline import OUTLINE_JSON_SCHEMA, generate_outline
from tests.utils.prompts import extract_labelled_value
from tests.utils.providers import ScriptedProvider, outline_payload


pytestmark = pytest.mark.anyio("asyncio")


@pytest.fixture
def anyio_backend():
    return "asyncio"


async def test_outline_has_exactly_requested_chapters() -> None:
    provider = ScriptedProvider()
    params = GenerationParameters(chapter_count=7)

    outline = await generate_outline("Renewable energy policy", params, provider)

    assert len(outline.chapters) == 7
    assert outline.total_sections == 7 * 3 + 2
    request = provider.requests[0]
    assert request.json_schema == OUTLINE_JSON_SCHEMA
    assert request.metadata["stage"] == "outline"
    assert "editor" in request.system_prompt


async def test_blank_topic_fails_before_any_request() -> None:
    provider = ScriptedProvider()

    with pytest.raises(BookValidationError) as exc:
        await generate_outline("   ", GenerationParameters(), provider)

    assert exc.value.message == "Por favor, introduce un tema o un artículo."
    assert provider.requests == []


async def test_chapter_count_mismatch_is_rejected() -> None:
    provider = ScriptedProvider(outline=outline_payload("Short book", chapter_count=3))

    with pytest.raises(OutlineGenerationError):
        await generate_outline("Short book", GenerationParameters(chapter_count=5), provider)


async def test_malformed_payload_raises_localized_error_with_cause() -> None:
    provider = ScriptedProvider(outline_text="{not json")
    params = GenerationParameters(output_language=OutputLanguage.EN)

    with pytest.raises(OutlineGenerationError) as exc:
        await generate_outline("Solar cities", params, provider)

    assert exc.value.message.startswith("Could not generate the book outline")
    assert exc.value.__cause__ is not None


async def test_schema_mismatch_raises_outline_error() -> None:
    payload = outline_payload("Wind", chapter_count=5)
    del payload["conclusion"]
    provider = ScriptedProvider(outline_text=json.dumps(payload))

    with pytest.raises(OutlineGenerationError):
        await generate_outline("Wind", GenerationParameters(chapter_count=5), provider)


async def test_prompt_is_rendered_in_output_language() -> None:
    provider = ScriptedProvider()
    params = GenerationParameters(
        chapter_count=5,
        target_word_count=25_000,
        publication_type=PublicationType.GENERAL,
        output_language=OutputLanguage.EN,
        source_material="Field notes about community solar cooperatives.",
    )

    await generate_outline("Community solar", params, provider)

    prompt = provider.requests[0].prompt
    assert extract_labelled_value(prompt, "- **Main Topic:**") == "Community solar"
    assert extract_labelled_value(prompt, "- **Type:**") == "general dissemination"
    assert "25,000 words" in prompt
    assert "5 main chapters" in prompt
    assert "Field notes about community solar cooperatives." in prompt
    assert "title case" in prompt


async def test_spanish_prompt_uses_spanish_number_format() -> None:
    provider = ScriptedProvider()

    await generate_outline("Política energética", GenerationParameters(), provider)

    prompt = provider.requests[0].prompt
    assert "25.000 palabras" in prompt
    assert extract_labelled_value(prompt, "- **Tipo:**") == "académica"
