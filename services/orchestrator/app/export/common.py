"""Helpers shared by the export renderers."""

from __future__ import annotations

import re

from book_drafter_schemas import GeneratedBook

_MARKDOWN_LINK = re.compile(r"\[([^\]]+)\]\([^)]+\)")
_FILENAME_UNSAFE = re.compile(r"[\s\W]+")

MEDIA_TYPES = {
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "html": "text/html; charset=utf-8",
}


def strip_markdown_links(reference: str) -> str:
    """Replace ``[label](url)`` with ``label``."""

    return _MARKDOWN_LINK.sub(r"\1", reference)


def book_references(book: GeneratedBook) -> list[str]:
    """Sorted reference lines to print: the consolidated list, else per-section ones."""

    return sorted(book.references) if book.references else book.section_references()


def export_filename(book: GeneratedBook, extension: str) -> str:
    stem = _FILENAME_UNSAFE.sub("_", book.title.lower()).strip("_") or "book"
    return f"{stem}.{extension.lstrip('.')}"
