"""Tests for the in-memory session registry."""

from __future__ import annotations

import asyncio

import pytest

from book_drafter_schemas import GenerationParameters, GenerationState

from services.orchestrator.app.sessions import SessionRegistry
from services.orchestrator.app.settings import PipelineSettings
from tests.utils.providers import ScriptedProvider


pytestmark = pytest.mark.anyio("asyncio")


@pytest.fixture
def anyio_backend():
    return "asyncio"


def _registry() -> SessionRegistry:
    return SessionRegistry(
        PipelineSettings(), provider_builder=lambda override: ScriptedProvider(yield_control=True)
    )


async def test_remove_cancels_running_generation() -> None:
    registry = _registry()
    session = registry.create()
    await session.orchestrator.generate_outline("Wind", GenerationParameters(chapter_count=5))

    task = registry.start_generation(session)
    await asyncio.sleep(0)
    assert session.orchestrator.state is GenerationState.SECTIONS_GENERATING

    removed = registry.remove(session.session_id)
    await asyncio.gather(task, return_exceptions=True)

    assert removed is session
    assert len(registry) == 0
    assert task.done()
    assert session.orchestrator.state is GenerationState.OUTLINE_READY
    with pytest.raises(KeyError):
        registry.get(session.session_id)


async def test_remove_unknown_session_raises_key_error() -> None:
    registry = _registry()
    with pytest.raises(KeyError):
        registry.remove("missing")
