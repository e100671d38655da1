"""Tests for the mock provider and factory."""

import asyncio
import json
from types import SimpleNamespace

import pytest

from book_drafter_providers import (
    MockProvider,
    ProviderConfig,
    ProviderFactory,
    ProviderRequest,
    ProviderSettings,
)
from book_drafter_providers.exceptions import ProviderConfigError
from book_drafter_providers.gemini import extract_grounding


def test_mock_generate_sync() -> None:
    provider = MockProvider()
    response = provider.generate_sync(ProviderRequest(prompt="Hello world"))
    assert response.model == "mock"
    assert "Mock response" in response.text
    assert response.prompt_tokens > 0


def test_factory_creates_mock_when_config_provided() -> None:
    config = ProviderConfig(name="mock", api_key="mock", model="mock", settings=ProviderSettings())
    provider = ProviderFactory.create(config)
    assert isinstance(provider, MockProvider)


def test_mock_outline_follows_requested_chapter_count() -> None:
    provider = MockProvider()
    request = ProviderRequest(
        prompt="Outline",
        json_schema={"type": "object"},
        metadata={"stage": "outline", "topic": "Tidal power", "chapter_count": 6},
    )
    payload = json.loads(asyncio.run(provider.generate(request)).text)
    assert payload["title"] == "Tidal power"
    assert len(payload["chapters"]) == 6
    assert payload["chapters"][0]["sections"] == ["Section 1.1", "Section 1.2", "Section 1.3"]


def test_mock_search_returns_grounding_chunks() -> None:
    provider = MockProvider()
    request = ProviderRequest(
        prompt="Write",
        enable_search=True,
        metadata={"stage": "section", "section_title": "Feed-in Tariffs"},
    )
    response = asyncio.run(provider.generate(request))
    assert "Feed-in Tariffs" in response.text
    assert [chunk.uri for chunk in response.grounding] == ["https://example.org/feed-in-tariffs"]


def test_mock_references_are_sorted() -> None:
    provider = MockProvider()
    request = ProviderRequest(
        prompt="Cite",
        metadata={
            "stage": "references",
            "sources": [
                {"uri": "https://b.example", "title": "Beta"},
                {"uri": "https://a.example", "title": "Alpha"},
            ],
        },
    )
    lines = asyncio.run(provider.generate(request)).text.splitlines()
    assert lines == ["Alpha. https://a.example", "Beta. https://b.example"]


def test_gemini_grounding_extraction_reads_first_candidate() -> None:
    response = SimpleNamespace(
        candidates=[
            SimpleNamespace(
                grounding_metadata=SimpleNamespace(
                    grounding_chunks=[
                        SimpleNamespace(web=SimpleNamespace(uri="https://a.example", title="A")),
                        SimpleNamespace(web=None),
                        SimpleNamespace(web=SimpleNamespace(uri=None, title=None)),
                    ]
                )
            )
        ]
    )
    chunks = extract_grounding(response)
    assert [(chunk.uri, chunk.title) for chunk in chunks] == [("https://a.example", "A")]
    assert extract_grounding(SimpleNamespace(candidates=None)) == []


def test_factory_rejects_unknown_provider() -> None:
    config = ProviderConfig(name="claude", api_key="k", model="m", settings=ProviderSettings())
    with pytest.raises(ProviderConfigError, match="Unknown provider: claude"):
        ProviderFactory.create(config)
