"""Shared schemas for the Book Drafter pipeline."""

from .enums import (
    Audience,
    GenerationState,
    LeafKind,
    OutputLanguage,
    PipelineStage,
    PublicationType,
    Tone,
)
from .errors import (
    BookDrafterError,
    BookValidationError,
    GenerationCancelledError,
    InvalidTransitionError,
    OutlineGenerationError,
    ReferenceConsolidationError,
    SectionGenerationError,
)
from .models.book import (
    GeneratedBook,
    GeneratedChapter,
    GenerationParameters,
    GroundingSource,
    Outline,
    OutlineChapter,
    OutlineNode,
    ProgressSnapshot,
    SectionContent,
)

__all__ = [
    "Audience",
    "GenerationState",
    "LeafKind",
    "OutputLanguage",
    "PipelineStage",
    "PublicationType",
    "Tone",
    "BookDrafterError",
    "BookValidationError",
    "GenerationCancelledError",
    "InvalidTransitionError",
    "OutlineGenerationError",
    "ReferenceConsolidationError",
    "SectionGenerationError",
    "GeneratedBook",
    "GeneratedChapter",
    "GenerationParameters",
    "GroundingSource",
    "Outline",
    "OutlineChapter",
    "OutlineNode",
    "ProgressSnapshot",
    "SectionContent",
]
