"""Prefect flow running a complete book generation in one call."""

from __future__ import annotations

import logging
from time import perf_counter
from uuid import uuid4

from prefect import flow

from book_drafter_observability import log_context
from book_drafter_schemas import GeneratedBook, GenerationParameters

from .models import ProviderOverride
from .pipeline import GenerationOrchestrator
from .providers import create_provider
from .settings import PipelineSettings, load_pipeline_settings

logger = logging.getLogger(__name__)


@flow(name="book-drafter-flow", version="0.1.0")
async def run_book_flow(
    topic: str,
    parameters: GenerationParameters,
    provider_override: ProviderOverride | None = None,
    settings: PipelineSettings | None = None,
) -> GeneratedBook:
    """Generate the outline and immediately write the whole book."""

    settings = settings or load_pipeline_settings()
    provider = create_provider(provider_override)
    run_id = str(uuid4())
    orchestrator = GenerationOrchestrator(
        provider,
        include_references=settings.include_references,
        reference_limit=settings.reference_limit,
        context_token_limit=settings.context_token_limit,
        session_id=run_id,
    )

    start = perf_counter()
    with log_context(run_id=run_id, provider=provider.name):
        logger.info(
            "Starting one-shot book run",
            extra={
                "chapter_count": parameters.chapter_count,
                "target_word_count": parameters.target_word_count,
            },
        )
        await orchestrator.generate_outline(topic, parameters)
        book = await orchestrator.generate_book()
        logger.info(
            "Completed one-shot book run",
            extra={
                "word_count": orchestrator.progress.word_count,
                "elapsed_ms": round((perf_counter() - start) * 1000, 1),
            },
        )
    return book
