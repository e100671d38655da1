"""Typed failures raised by the generation pipeline.

Every error carries a single human-readable ``message`` that is safe to show
to the end user. The underlying cause, when any, is chained via ``__cause__``.
"""

from __future__ import annotations


class BookDrafterError(RuntimeError):
    """Base class for pipeline failures."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BookValidationError(BookDrafterError, ValueError):
    """Raised for empty or missing required input before any external call."""


class OutlineGenerationError(BookDrafterError):
    """Raised when the outline could not be produced or parsed."""


class SectionGenerationError(BookDrafterError):
    """Raised when a single section could not be written."""

    def __init__(self, message: str, section_title: str) -> None:
        super().__init__(message)
        self.section_title = section_title


class ReferenceConsolidationError(BookDrafterError):
    """Raised when the consolidated reference list could not be produced."""


class InvalidTransitionError(BookDrafterError):
    """Raised when an operation is not allowed in the current state."""


class GenerationCancelledError(BookDrafterError):
    """Raised when a running generation was cancelled between sections."""
