"""Pydantic models for the orchestrator API."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field

from book_drafter_schemas import (
    GeneratedBook,
    GenerationParameters,
    GenerationState,
    Outline,
    ProgressSnapshot,
)


class ProviderOverride(BaseModel):
    name: Optional[str] = Field(None, description="Provider identifier: gemini, openai, mock")
    model: Optional[str] = None
    temperature: Optional[float] = Field(None, ge=0, le=2)
    max_output_tokens: Optional[int] = Field(None, ge=16)
    top_p: Optional[float] = Field(None, ge=0, le=1)
    thinking_budget: Optional[int] = Field(
        None,
        description="Gemini 2.5 thinking budget in tokens; -1 enables dynamic thinking",
    )
    timeout_seconds: Optional[float] = Field(None, gt=0)


class CreateSessionRequest(BaseModel):
    provider: ProviderOverride | None = None


class OutlineRequest(BaseModel):
    topic: str = Field(..., description="Topic or full article the book is built from")
    parameters: GenerationParameters = Field(default_factory=GenerationParameters)
    provider: ProviderOverride | None = None


class BookRunRequest(OutlineRequest):
    """One-shot request: outline and full book in a single call."""


class TransitionView(BaseModel):
    source: GenerationState
    target: GenerationState
    at: datetime


class SessionView(BaseModel):
    session_id: str
    state: GenerationState
    created_at: datetime
    topic: Optional[str] = None
    parameters: Optional[GenerationParameters] = None
    outline: Optional[Outline] = None
    progress: Optional[ProgressSnapshot] = None
    book: Optional[GeneratedBook] = None
    error: Optional[str] = None
    history: List[TransitionView] = Field(default_factory=list)


class GenerationAccepted(BaseModel):
    session_id: str
    state: GenerationState
    accepted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class SourceMaterialRequest(BaseModel):
    filename: str = Field(..., min_length=1)
    content_base64: str


class SourceMaterialResponse(BaseModel):
    filename: str
    text: str
    word_count: int
