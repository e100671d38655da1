"""Extract plain text from user-uploaded base material."""

from __future__ import annotations

import io
import logging

from docx import Document

from book_drafter_schemas import BookValidationError

logger = logging.getLogger(__name__)


def extract_source_text(raw: bytes, filename: str) -> str:
    """Return the non-empty paragraphs of a ``.docx`` or text upload joined by newlines.

    Raises:
        BookValidationError: If the upload is empty or yields no text.
    """

    if not raw:
        raise BookValidationError("Source material is empty")

    paragraphs = _extract_paragraphs(raw, filename)
    if not paragraphs:
        raise BookValidationError(f"No readable text found in {filename}")

    logger.info(
        "Source material extracted",
        extra={"document_filename": filename, "paragraph_count": len(paragraphs)},
    )
    return "\n".join(paragraphs)


def _extract_paragraphs(raw: bytes, filename: str) -> list[str]:
    if filename.lower().endswith(".docx"):
        with io.BytesIO(raw) as buffer:
            document = Document(buffer)
        return [para.text.strip() for para in document.paragraphs if para.text and para.text.strip()]

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        text = raw.decode("latin-1", errors="ignore")
    return [line.strip() for line in text.splitlines() if line.strip()]


__all__ = ["extract_source_text"]
