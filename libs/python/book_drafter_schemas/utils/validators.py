"""Reusable validation helpers."""

from __future__ import annotations

from ..errors import BookValidationError


def ensure_not_blank(value: str | None, *, field_name: str, message: str | None = None) -> str:
    """Return ``value`` stripped of surrounding whitespace.

    Args:
        value: Input text to evaluate.
        field_name: Name used in the default error message.
        message: Optional user-facing message overriding the default.

    Returns:
        The trimmed string when validation succeeds.

    Raises:
        BookValidationError: If the value is missing or only whitespace.
    """

    trimmed = (value or "").strip()
    if not trimmed:
        raise BookValidationError(message or f"{field_name} must not be empty")
    return trimmed


def count_words(value: str | None) -> int:
    """Whitespace-delimited token count; empty text counts as zero."""

    if not value:
        return 0
    return len(value.split())
