"""Context trimming helpers to keep source material within a token budget."""

from __future__ import annotations

from typing import Tuple

from .settings import DEFAULT_CONTEXT_TOKEN_LIMIT

MIN_TOKEN_LIMIT = 256
CHARS_PER_TOKEN = 4


def summarise_prompt(text: str, token_limit: int | None = None) -> Tuple[str, bool]:
    """Reduce oversized text to a head and tail excerpt.

    Args:
        text: Source material or any other free text embedded in a prompt.
        token_limit: Soft budget in tokens, defaults to ``CONTEXT_TOKEN_LIMIT``.

    Returns:
        A tuple of ``(possibly_trimmed_text, was_trimmed)``.
    """

    if not text:
        return text, False

    limit = max(token_limit or DEFAULT_CONTEXT_TOKEN_LIMIT, MIN_TOKEN_LIMIT)
    if len(text) // CHARS_PER_TOKEN <= limit:
        return text, False

    max_chars = limit * CHARS_PER_TOKEN
    head = text[: max_chars // 2].strip()
    tail = text[-(max_chars - max_chars // 2) :].strip()

    return f"{head}\n\n[...]\n\n{tail}", True


__all__ = ["summarise_prompt"]
