"""FastAPI entrypoint for the book generation orchestrator."""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Literal

from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from book_drafter_observability import log_context, setup_fastapi_metrics, setup_logging
from book_drafter_providers.exceptions import ProviderConfigError
from book_drafter_schemas import (
    BookDrafterError,
    BookValidationError,
    GeneratedBook,
    GenerationCancelledError,
    GenerationState,
    InvalidTransitionError,
    Outline,
)
from book_drafter_schemas.utils.validators import count_words

from .export import MEDIA_TYPES, export_filename, render_docx, render_html
from .flows import run_book_flow
from .models import (
    BookRunRequest,
    CreateSessionRequest,
    GenerationAccepted,
    OutlineRequest,
    SessionView,
    SourceMaterialRequest,
    SourceMaterialResponse,
    TransitionView,
)
from .sessions import GenerationSession, SessionRegistry
from .settings import SERVICE_NAME, load_pipeline_settings
from .source_material import extract_source_text

setup_logging(SERVICE_NAME)
logger = logging.getLogger(__name__)

app = FastAPI(title="Book Drafter Orchestrator", version="0.1.0")
setup_fastapi_metrics(app, service_name=SERVICE_NAME)
app.state.registry = SessionRegistry(load_pipeline_settings())

_ERROR_STATUS = {
    BookValidationError: status.HTTP_400_BAD_REQUEST,
    InvalidTransitionError: status.HTTP_409_CONFLICT,
    GenerationCancelledError: status.HTTP_409_CONFLICT,
}


@app.exception_handler(BookDrafterError)
async def _book_drafter_error_handler(request: Request, exc: BookDrafterError) -> JSONResponse:
    status_code = next(
        (code for error_type, code in _ERROR_STATUS.items() if isinstance(exc, error_type)),
        status.HTTP_502_BAD_GATEWAY,
    )
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


def _registry(request: Request) -> SessionRegistry:
    return request.app.state.registry


def _get_session(request: Request, session_id: str) -> GenerationSession:
    try:
        return _registry(request).get(session_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Session not found") from exc


def _session_view(session: GenerationSession) -> SessionView:
    orchestrator = session.orchestrator
    progress = orchestrator.progress
    return SessionView(
        session_id=session.session_id,
        state=orchestrator.state,
        created_at=session.created_at,
        topic=orchestrator.topic,
        parameters=orchestrator.parameters,
        outline=orchestrator.outline,
        progress=progress.model_copy(update={"book": None}),
        book=progress.book,
        error=orchestrator.last_error,
        history=[
            TransitionView(source=item.source, target=item.target, at=item.at)
            for item in orchestrator.history
        ],
    )


@app.get("/health", tags=["health"])
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post(
    "/sessions",
    response_model=SessionView,
    status_code=status.HTTP_201_CREATED,
    tags=["sessions"],
)
async def create_session(request: Request, payload: CreateSessionRequest | None = None) -> SessionView:
    override = payload.provider if payload else None
    try:
        session = _registry(request).create(override)
    except (ValidationError, ProviderConfigError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _session_view(session)


@app.get("/sessions/{session_id}", response_model=SessionView, tags=["sessions"])
async def get_session(request: Request, session_id: str) -> SessionView:
    return _session_view(_get_session(request, session_id))


@app.delete(
    "/sessions/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    tags=["sessions"],
)
async def delete_session(request: Request, session_id: str) -> Response:
    try:
        _registry(request).remove(session_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Session not found") from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.post("/sessions/{session_id}/outline", response_model=Outline, tags=["sessions"])
async def create_outline(request: Request, session_id: str, payload: OutlineRequest) -> Outline:
    session = _get_session(request, session_id)
    if payload.provider is not None:
        try:
            _registry(request).use_provider(session, payload.provider)
        except (ValidationError, ProviderConfigError) as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    with log_context(session_id=session_id, route="/sessions/{session_id}/outline"):
        logger.info(
            "Outline requested",
            extra={
                "chapter_count": payload.parameters.chapter_count,
                "output_language": payload.parameters.output_language.value,
            },
        )
        return await session.orchestrator.generate_outline(payload.topic, payload.parameters)


@app.post(
    "/sessions/{session_id}/generate",
    response_model=None,
    status_code=status.HTTP_202_ACCEPTED,
    tags=["sessions"],
)
async def generate_book(
    request: Request, response: Response, session_id: str, wait: bool = False
) -> GenerationAccepted | SessionView:
    """Start writing the confirmed outline; ``wait=true`` returns only once the run ends."""

    session = _get_session(request, session_id)
    orchestrator = session.orchestrator
    if orchestrator.state is not GenerationState.OUTLINE_READY or (
        session.task is not None and not session.task.done()
    ):
        raise InvalidTransitionError(
            f"Generation cannot start from {orchestrator.state.value}"
        )

    if wait:
        await orchestrator.generate_book()
        response.status_code = status.HTTP_200_OK
        return _session_view(session)

    _registry(request).start_generation(session)
    return GenerationAccepted(session_id=session_id, state=GenerationState.SECTIONS_GENERATING)


@app.post("/sessions/{session_id}/cancel", tags=["sessions"])
async def cancel_generation(request: Request, session_id: str) -> dict[str, object]:
    session = _get_session(request, session_id)
    cancelled = session.orchestrator.cancel()
    return {"cancelled": cancelled, "state": session.orchestrator.state.value}


@app.post("/sessions/{session_id}/reset", response_model=SessionView, tags=["sessions"])
async def reset_session(request: Request, session_id: str) -> SessionView:
    session = _get_session(request, session_id)
    await session.orchestrator.reset()
    return _session_view(session)


@app.get("/sessions/{session_id}/export/{fmt}", tags=["export"])
async def export_book(request: Request, session_id: str, fmt: Literal["docx", "html"]) -> Response:
    session = _get_session(request, session_id)
    orchestrator = session.orchestrator
    book = orchestrator.book
    if orchestrator.state is not GenerationState.COMPLETE or book is None:
        raise InvalidTransitionError("The book can only be exported once generation is complete")

    content: bytes | str = render_docx(book) if fmt == "docx" else render_html(book)
    filename = export_filename(book, fmt)
    return Response(
        content=content,
        media_type=MEDIA_TYPES[fmt],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.post("/source-material", response_model=SourceMaterialResponse, tags=["source-material"])
async def upload_source_material(payload: SourceMaterialRequest) -> SourceMaterialResponse:
    with log_context(route="/source-material", method="POST"):
        try:
            raw = base64.b64decode(payload.content_base64, validate=True)
        except (ValueError, binascii.Error) as exc:
            logger.warning("Failed to decode base64 payload")
            raise HTTPException(status_code=400, detail="Invalid base64 encoding") from exc

        text = extract_source_text(raw, payload.filename)
        return SourceMaterialResponse(
            filename=payload.filename, text=text, word_count=count_words(text)
        )


@app.post("/books", response_model=GeneratedBook, tags=["books"])
async def generate_book_in_one_call(request: Request, payload: BookRunRequest) -> GeneratedBook:
    """Outline and full book in a single request, executed as a Prefect flow."""

    with log_context(route="/books", method="POST"):
        logger.info("Dispatching one-shot book run")
        return await run_book_flow(
            payload.topic,
            payload.parameters,
            provider_override=payload.provider,
            settings=_registry(request).settings,
        )
