"""In-memory registry of generation sessions."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, Optional
from uuid import uuid4

from book_drafter_providers import LLMProvider
from book_drafter_schemas import BookDrafterError, GeneratedBook

from .models import ProviderOverride
from .pipeline import GenerationOrchestrator
from .providers import create_provider
from .settings import PipelineSettings

logger = logging.getLogger(__name__)

ProviderBuilder = Callable[[Optional[ProviderOverride]], LLMProvider]


@dataclass
class GenerationSession:
    session_id: str
    orchestrator: GenerationOrchestrator
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    task: Optional["asyncio.Task[GeneratedBook]"] = None


class SessionRegistry:
    """Holds one orchestrator per session for the lifetime of the process."""

    def __init__(
        self,
        settings: PipelineSettings,
        provider_builder: ProviderBuilder = create_provider,
    ) -> None:
        self.settings = settings
        self._provider_builder = provider_builder
        self._sessions: Dict[str, GenerationSession] = {}

    def create(self, override: ProviderOverride | None = None) -> GenerationSession:
        session_id = str(uuid4())
        orchestrator = GenerationOrchestrator(
            self._provider_builder(override),
            include_references=self.settings.include_references,
            reference_limit=self.settings.reference_limit,
            context_token_limit=self.settings.context_token_limit,
            session_id=session_id,
        )
        session = GenerationSession(session_id=session_id, orchestrator=orchestrator)
        self._sessions[session_id] = session
        logger.info("Session created", extra={"session_id": session_id})
        return session

    def get(self, session_id: str) -> GenerationSession:
        """Return the session; raises ``KeyError`` when it does not exist."""

        return self._sessions[session_id]

    def remove(self, session_id: str) -> GenerationSession:
        """Stop any run of the session and forget it; raises ``KeyError`` when unknown."""

        session = self._sessions.pop(session_id)
        session.orchestrator.cancel()
        if session.task is not None and not session.task.done():
            session.task.cancel()
        logger.info("Session removed", extra={"session_id": session_id})
        return session

    def use_provider(self, session: GenerationSession, override: ProviderOverride) -> None:
        session.orchestrator.use_provider(self._provider_builder(override))

    def start_generation(self, session: GenerationSession) -> "asyncio.Task[GeneratedBook]":
        """Run ``generate_book`` in the background and keep a handle on the task."""

        task = asyncio.create_task(session.orchestrator.generate_book())
        task.add_done_callback(lambda done: _log_task_outcome(session.session_id, done))
        session.task = task
        return task

    def __len__(self) -> int:
        return len(self._sessions)


def _log_task_outcome(session_id: str, task: "asyncio.Task[GeneratedBook]") -> None:
    if task.cancelled():
        logger.info("Background generation task cancelled", extra={"session_id": session_id})
        return
    exc = task.exception()
    if exc is None:
        logger.info("Background generation finished", extra={"session_id": session_id})
    elif isinstance(exc, BookDrafterError):
        logger.warning(
            "Background generation stopped",
            extra={"session_id": session_id, "error": exc.message},
        )
    else:
        logger.error(
            "Background generation crashed",
            extra={"session_id": session_id},
            exc_info=exc,
        )
