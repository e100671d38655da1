"""Generation orchestrator: outline, sequential section writing, references.

The orchestrator owns the only mutable copy of the book being written. Every
value handed out through accessors or to observers is a deep copy.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from time import perf_counter
from typing import Awaitable, Callable, Dict, FrozenSet, List, Optional, Union
from uuid import uuid4

from book_drafter_observability import (
    log_context,
    observe_generation_progress,
    observe_stage_duration,
)
from book_drafter_providers import LLMProvider
from book_drafter_schemas import (
    BookDrafterError,
    GeneratedBook,
    GenerationCancelledError,
    GenerationParameters,
    GenerationState,
    InvalidTransitionError,
    Outline,
    PipelineStage,
    ProgressSnapshot,
    ReferenceConsolidationError,
    SectionContent,
)
from book_drafter_schemas.utils.validators import count_words, ensure_not_blank

from .localization import LanguagePack, get_language_pack
from .outline import generate_outline
from .references import consolidate_references
from .settings import SERVICE_NAME
from .writing import write_section

logger = logging.getLogger(__name__)

Observer = Callable[[ProgressSnapshot], Union[Awaitable[None], None]]
OutlineEngine = Callable[..., Awaitable[Outline]]
SectionEngine = Callable[..., Awaitable[SectionContent]]
ReferenceEngine = Callable[..., Awaitable[List[str]]]

ALLOWED_TRANSITIONS: Dict[GenerationState, FrozenSet[GenerationState]] = {
    GenerationState.IDLE: frozenset({GenerationState.OUTLINE_GENERATING}),
    GenerationState.OUTLINE_GENERATING: frozenset(
        {GenerationState.OUTLINE_READY, GenerationState.ERROR}
    ),
    GenerationState.OUTLINE_READY: frozenset(
        {GenerationState.SECTIONS_GENERATING, GenerationState.IDLE}
    ),
    GenerationState.SECTIONS_GENERATING: frozenset(
        {GenerationState.COMPLETE, GenerationState.ERROR}
    ),
    GenerationState.ERROR: frozenset({GenerationState.IDLE, GenerationState.OUTLINE_READY}),
    GenerationState.COMPLETE: frozenset({GenerationState.IDLE}),
}

_RUNNING_STATES = frozenset(
    {GenerationState.OUTLINE_GENERATING, GenerationState.SECTIONS_GENERATING}
)


@dataclass(frozen=True)
class StateTransition:
    source: GenerationState
    target: GenerationState
    at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def compute_word_budget(total_sections: int, target_word_count: int) -> int:
    """Words requested per leaf: ``target / total`` rounded half-up, 0 without leaves."""

    if total_sections <= 0:
        return 0
    return (2 * target_word_count + total_sections) // (2 * total_sections)


def progress_percentage(completed: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return min(completed / total * 100, 100.0)


class GenerationOrchestrator:
    """Drives one book through ``IDLE → … → COMPLETE``.

    Engines are injectable so that tests can substitute them; by default the
    outline, writing and reference stage engines are used.
    """

    def __init__(
        self,
        provider: LLMProvider,
        *,
        include_references: bool = True,
        reference_limit: int | None = None,
        context_token_limit: int | None = None,
        session_id: str | None = None,
        outline_engine: OutlineEngine = generate_outline,
        section_engine: SectionEngine = write_section,
        reference_engine: ReferenceEngine = consolidate_references,
    ) -> None:
        self._provider = provider
        self.include_references = include_references
        self.reference_limit = reference_limit
        self.context_token_limit = context_token_limit
        self.session_id = session_id
        self._outline_engine = outline_engine
        self._section_engine = section_engine
        self._reference_engine = reference_engine

        self._run_lock = asyncio.Lock()
        self._observers: List[Observer] = []
        self._history: List[StateTransition] = []
        self._state = GenerationState.IDLE
        self._cancel_requested = False
        self._clear()

    @property
    def state(self) -> GenerationState:
        return self._state

    @property
    def provider(self) -> LLMProvider:
        return self._provider

    @property
    def topic(self) -> Optional[str]:
        return self._topic

    @property
    def outline(self) -> Optional[Outline]:
        return self._outline

    @property
    def parameters(self) -> Optional[GenerationParameters]:
        return self._parameters

    @property
    def book(self) -> Optional[GeneratedBook]:
        """Deep copy of the accumulator; partial while a run is active or after a failure."""

        return self._book.model_copy(deep=True) if self._book is not None else None

    partial_book = book

    @property
    def progress(self) -> ProgressSnapshot:
        return self._snapshot()

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    @property
    def history(self) -> List[StateTransition]:
        return list(self._history)

    @property
    def is_running(self) -> bool:
        return self._state in _RUNNING_STATES

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register ``observer`` for progress snapshots; returns an unsubscribe callable."""

        self._observers.append(observer)

        def _unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return _unsubscribe

    def use_provider(self, provider: LLMProvider) -> None:
        if self._state is not GenerationState.IDLE:
            raise InvalidTransitionError("The provider can only be changed before an outline exists")
        self._provider = provider

    async def generate_outline(self, topic: str, params: GenerationParameters) -> Outline:
        """Produce the outline for ``topic``; leaves the orchestrator in ``OUTLINE_READY``.

        Raises:
            BookValidationError: Blank topic, state is left unchanged.
            InvalidTransitionError: Not in ``IDLE``.
            OutlineGenerationError: The outline call failed; state settles to ``IDLE``.
        """

        self._require(GenerationState.IDLE, "An outline can only be generated from IDLE")
        pack = get_language_pack(params.output_language)
        topic = ensure_not_blank(topic, field_name="topic", message=pack.topic_required)

        self._topic = topic
        self._parameters = params
        self._last_error = None
        self._current_task = pack.task_outline
        await self._transition(GenerationState.OUTLINE_GENERATING)

        start = perf_counter()
        with log_context(session_id=self.session_id, stage=PipelineStage.OUTLINE.value):
            try:
                outline = await self._outline_engine(
                    topic,
                    params,
                    self._provider,
                    context_token_limit=self.context_token_limit,
                )
            except asyncio.CancelledError:
                observe_stage_duration(
                    PipelineStage.OUTLINE.value,
                    perf_counter() - start,
                    service_name=SERVICE_NAME,
                    status="cancelled",
                )
                await self._fail(pack.cancelled, GenerationState.IDLE)
                raise
            except Exception as exc:
                observe_stage_duration(
                    PipelineStage.OUTLINE.value,
                    perf_counter() - start,
                    service_name=SERVICE_NAME,
                    status="error",
                )
                await self._fail(_error_message(exc), GenerationState.IDLE)
                raise

            observe_stage_duration(
                PipelineStage.OUTLINE.value, perf_counter() - start, service_name=SERVICE_NAME
            )
            logger.info("Outline ready", extra={"total_sections": outline.total_sections})

        self._outline = outline
        self._book = GeneratedBook.skeleton(outline, params.output_language)
        self._total = outline.total_sections
        self._current_task = ""
        await self._transition(GenerationState.OUTLINE_READY)
        return outline

    async def generate_book(self) -> GeneratedBook:
        """Write every leaf of the confirmed outline in order and return the finished book.

        Raises:
            InvalidTransitionError: No confirmed outline, or a run is already active.
            SectionGenerationError: A leaf failed; state settles to ``OUTLINE_READY``.
            GenerationCancelledError: :meth:`cancel` was called during the run.
        """

        if self._run_lock.locked():
            raise InvalidTransitionError("A generation run is already in progress")
        self._require(GenerationState.OUTLINE_READY, "The book can only be generated from OUTLINE_READY")

        async with self._run_lock:
            outline, params = self._outline, self._parameters
            assert outline is not None and params is not None
            pack = get_language_pack(params.output_language)

            self._cancel_requested = False
            self._last_error = None
            self._book = GeneratedBook.skeleton(outline, params.output_language)
            self._total = outline.total_sections
            self._completed = 0
            self._words = 0
            self._percentage = 0.0
            words_per_section = compute_word_budget(self._total, params.target_word_count)
            await self._transition(GenerationState.SECTIONS_GENERATING)

            run_id = str(uuid4())
            with log_context(session_id=self.session_id, run_id=run_id):
                logger.info(
                    "Starting section generation",
                    extra={"total_sections": self._total, "words_per_section": words_per_section},
                )
                try:
                    await self._write_all(outline, params, pack, words_per_section)
                    self._percentage = 100.0
                    if self.include_references:
                        await self._consolidate(pack)
                except asyncio.CancelledError:
                    await self._fail(pack.cancelled, GenerationState.OUTLINE_READY)
                    raise
                except Exception as exc:
                    await self._fail(_error_message(exc), GenerationState.OUTLINE_READY)
                    raise

                self._current_task = pack.task_complete
                await self._transition(GenerationState.COMPLETE)
                logger.info(
                    "Book complete",
                    extra={"word_count": self._words, "references": len(self._book.references)},
                )

        return self._book.model_copy(deep=True)

    def cancel(self) -> bool:
        """Request cancellation before the next leaf.

        Returns ``False`` when no leaf is left to skip: no active run, or the
        conclusion is already written and only references remain.
        """

        if self._state is not GenerationState.SECTIONS_GENERATING:
            return False
        if self._total and self._completed >= self._total:
            return False
        self._cancel_requested = True
        logger.info("Cancellation requested", extra={"session_id": self.session_id})
        return True

    async def reset(self) -> None:
        """Discard outline, book and progress and return to ``IDLE``."""

        if self.is_running or self._run_lock.locked():
            raise InvalidTransitionError("Cannot reset while a generation is running")
        self._clear()
        if self._state is not GenerationState.IDLE:
            await self._transition(GenerationState.IDLE)

    async def _write_all(
        self,
        outline: Outline,
        params: GenerationParameters,
        pack: LanguagePack,
        words_per_section: int,
    ) -> None:
        book = self._book
        assert book is not None

        def place_introduction(content: SectionContent) -> None:
            book.introduction = content

        await self._write_leaf(
            chapter_title=pack.introduction_title,
            section_title=outline.introduction.title,
            task=pack.task_introduction.format(title=outline.introduction.title),
            place=place_introduction,
            params=params,
            words_per_section=words_per_section,
        )

        chapter_total = len(outline.chapters)
        for chapter_number, chapter in enumerate(outline.chapters, start=1):
            target = book.chapters[chapter_number - 1]
            for section_title in chapter.sections:
                await self._write_leaf(
                    chapter_title=chapter.title,
                    section_title=section_title,
                    task=pack.task_section.format(
                        chapter_number=chapter_number,
                        chapter_total=chapter_total,
                        title=section_title,
                    ),
                    place=target.content.append,
                    params=params,
                    words_per_section=words_per_section,
                )

        def place_conclusion(content: SectionContent) -> None:
            book.conclusion = content

        await self._write_leaf(
            chapter_title=pack.conclusion_title,
            section_title=outline.conclusion.title,
            task=pack.task_conclusion.format(title=outline.conclusion.title),
            place=place_conclusion,
            params=params,
            words_per_section=words_per_section,
        )

    async def _write_leaf(
        self,
        *,
        chapter_title: str,
        section_title: str,
        task: str,
        place: Callable[[SectionContent], None],
        params: GenerationParameters,
        words_per_section: int,
    ) -> None:
        if self._cancel_requested:
            raise GenerationCancelledError(get_language_pack(params.output_language).cancelled)

        self._current_task = task
        assert self._outline is not None
        start = perf_counter()
        with log_context(stage=PipelineStage.SECTION.value, section=section_title):
            try:
                content = await self._section_engine(
                    self._outline.title,
                    chapter_title,
                    section_title,
                    params,
                    words_per_section,
                    self.include_references,
                    self._provider,
                    context_token_limit=self.context_token_limit,
                )
            except BaseException:
                observe_stage_duration(
                    PipelineStage.SECTION.value,
                    perf_counter() - start,
                    service_name=SERVICE_NAME,
                    status="error",
                )
                raise
            observe_stage_duration(
                PipelineStage.SECTION.value, perf_counter() - start, service_name=SERVICE_NAME
            )

        place(content)
        words = count_words(content.text)
        self._words += words
        self._completed += 1
        self._percentage = progress_percentage(self._completed, self._total)
        observe_generation_progress(
            service_name=SERVICE_NAME, percentage=self._percentage, words_added=words
        )
        await self._publish()

    async def _consolidate(self, pack: LanguagePack) -> None:
        book = self._book
        assert book is not None and self._outline is not None
        self._current_task = pack.task_references
        await self._publish()

        start = perf_counter()
        status = "success"
        with log_context(stage=PipelineStage.REFERENCES.value):
            try:
                references = await self._reference_engine(
                    book.all_sources(),
                    self._outline.title,
                    book.output_language,
                    self._provider,
                    limit=self.reference_limit,
                )
            except ReferenceConsolidationError as exc:
                status = "degraded"
                logger.warning(
                    "Falling back to per-section references",
                    extra={"error": exc.message},
                )
                book.references = book.section_references()
                book.references_degraded = True
            else:
                book.references = references or book.section_references()
            finally:
                observe_stage_duration(
                    PipelineStage.REFERENCES.value,
                    perf_counter() - start,
                    service_name=SERVICE_NAME,
                    status=status,
                )

    async def _fail(self, message: str, settle_to: GenerationState) -> None:
        self._last_error = message
        self._current_task = message
        logger.error(
            "Generation failed",
            extra={"state": self._state.value, "settle_to": settle_to.value, "error": message},
        )
        await self._transition(GenerationState.ERROR)
        if settle_to is GenerationState.IDLE:
            last_error = self._last_error
            self._clear()
            self._last_error = last_error
        await self._transition(settle_to)

    async def _transition(self, target: GenerationState) -> None:
        if target not in ALLOWED_TRANSITIONS[self._state]:
            raise InvalidTransitionError(
                f"Illegal transition {self._state.value} -> {target.value}"
            )
        self._history.append(StateTransition(source=self._state, target=target))
        logger.debug(
            "State transition",
            extra={"state": target.value, "previous_state": self._state.value},
        )
        self._state = target
        await self._publish()

    async def _publish(self) -> None:
        snapshot = self._snapshot()
        for observer in list(self._observers):
            try:
                result = observer(snapshot.model_copy(deep=True))
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Progress observer raised")

    def _snapshot(self) -> ProgressSnapshot:
        return ProgressSnapshot(
            state=self._state,
            total_sections=self._total,
            completed_sections=self._completed,
            percentage=self._percentage,
            word_count=self._words,
            current_task=self._current_task,
            book=self._book.model_copy(deep=True) if self._book is not None else None,
        )

    def _require(self, state: GenerationState, message: str) -> None:
        if self._state is not state:
            raise InvalidTransitionError(f"{message} (current state: {self._state.value})")

    def _clear(self) -> None:
        self._topic: Optional[str] = None
        self._parameters: Optional[GenerationParameters] = None
        self._outline: Optional[Outline] = None
        self._book: Optional[GeneratedBook] = None
        self._total = 0
        self._completed = 0
        self._words = 0
        self._percentage = 0.0
        self._current_task = ""
        self._last_error: Optional[str] = None
        self._cancel_requested = False


def _error_message(exc: BaseException) -> str:
    if isinstance(exc, BookDrafterError):
        return exc.message
    return str(exc) or exc.__class__.__name__


__all__ = [
    "ALLOWED_TRANSITIONS",
    "GenerationOrchestrator",
    "Observer",
    "StateTransition",
    "compute_word_budget",
    "progress_percentage",
]
