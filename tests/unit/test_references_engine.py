"""Tests for source deduplication and the consolidated bibliography."""

from __future__ import annotations

import pytest

from book_drafter_schemas import GroundingSource, OutputLanguage, ReferenceConsolidationError

from services.orchestrator.app.references import consolidate_references, dedupe_sources
from services.orchestrator.app.references.engine import parse_reference_lines
from tests.utils.providers import ScriptedProvider


pytestmark = pytest.mark.anyio("asyncio")


@pytest.fixture
def anyio_backend():
    return "asyncio"


SOURCES = [
    GroundingSource(uri="https://a.example", title="First A"),
    GroundingSource(uri=None, title=None),
    GroundingSource(uri="https://b.example", title="B"),
    GroundingSource(uri="https://a.example", title="Second A"),
    GroundingSource(uri=None, title="Report"),
    GroundingSource(uri="", title="report"),
]


def test_dedupe_keeps_first_occurrence_and_drops_empty_entries() -> None:
    unique = dedupe_sources(SOURCES)
    assert [(source.uri, source.title) for source in unique] == [
        ("https://a.example", "First A"),
        ("https://b.example", "B"),
        (None, "Report"),
    ]


def test_dedupe_is_idempotent() -> None:
    once = dedupe_sources(SOURCES)
    assert dedupe_sources(once) == once


def test_dedupe_limit_applies_after_deduplication() -> None:
    assert [source.title for source in dedupe_sources(SOURCES, limit=2)] == ["First A", "B"]


def test_reference_lines_drop_markers_and_blank_lines() -> None:
    text = "1. Adams, B. (2021).\n\n- Lee, K. (2020).\n* Ortiz, M. (2018).\nZhou, L. (2019)."
    assert parse_reference_lines(text) == [
        "Adams, B. (2021).",
        "Lee, K. (2020).",
        "Ortiz, M. (2018).",
        "Zhou, L. (2019).",
    ]


async def test_empty_sources_make_no_request() -> None:
    provider = ScriptedProvider()

    references = await consolidate_references(
        [GroundingSource()], "Renewable energy policy", OutputLanguage.ES, provider
    )

    assert references == []
    assert provider.requests == []


async def test_consolidation_lists_unique_sources_in_prompt() -> None:
    provider = ScriptedProvider()

    references = await consolidate_references(
        SOURCES, "Renewable energy policy", OutputLanguage.EN, provider
    )

    assert references == ["Smith, J. (2020). Policy notes.", "Zhou, L. (2019). Grid storage."]
    request = provider.requests[0]
    assert request.metadata["stage"] == "references"
    assert len(request.metadata["sources"]) == 3
    assert "1. First A <https://a.example>" in request.prompt
    assert "3. Report" in request.prompt
    assert "Second A" not in request.prompt
    assert '"Renewable energy policy"' in request.prompt


async def test_provider_failure_raises_consolidation_error() -> None:
    provider = ScriptedProvider(fail_references=True)

    with pytest.raises(ReferenceConsolidationError) as exc:
        await consolidate_references(SOURCES, "Topic", OutputLanguage.EN, provider)

    assert exc.value.message == "Could not consolidate the reference list."


async def test_blank_response_raises_consolidation_error() -> None:
    provider = ScriptedProvider(references_text="\n  \n")

    with pytest.raises(ReferenceConsolidationError):
        await consolidate_references(SOURCES, "Topic", OutputLanguage.ES, provider)
