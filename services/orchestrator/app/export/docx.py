"""Word export built with python-docx."""

from __future__ import annotations

import io
import re
from typing import Iterable

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Inches, Pt

from book_drafter_schemas import GeneratedBook

from ..localization import get_language_pack
from .common import book_references, strip_markdown_links

BODY_FONT = "Aptos"
HEADING_SIZES = {1: 18, 2: 16, 3: 14}

_HEADING_LINE = re.compile(r"^(#{1,3})\s+(.*)$")
_INLINE_MARKUP = re.compile(r"(\*\*.*?\*\*|\*.*?\*)")


def render_docx(book: GeneratedBook) -> bytes:
    """Render ``book`` as a .docx document and return its bytes.

    Introduction, every chapter, the conclusion and the reference list each
    start on a new page. Markdown headings (``#`` to ``###``) inside section
    text become Word headings and ``**bold**``/``*italic*`` become runs.
    """

    pack = get_language_pack(book.output_language)
    document = Document()
    _configure_styles(document)

    document.add_heading(book.title, level=0)

    document.add_page_break()
    document.add_heading(book.introduction.title, level=1)
    _add_body(document, book.introduction.text)

    for number, chapter in enumerate(book.chapters, start=1):
        document.add_page_break()
        document.add_heading(pack.chapter_heading.format(number=number, title=chapter.title), level=1)
        for section in chapter.content:
            document.add_heading(section.title, level=2)
            _add_body(document, section.text)

    document.add_page_break()
    document.add_heading(book.conclusion.title, level=1)
    _add_body(document, book.conclusion.text)

    references = book_references(book)
    if references:
        document.add_page_break()
        document.add_heading(pack.references_heading, level=1)
        _add_references(document, references)

    with io.BytesIO() as buffer:
        document.save(buffer)
        return buffer.getvalue()


def _configure_styles(document) -> None:
    normal = document.styles["Normal"]
    normal.font.name = BODY_FONT
    normal.font.size = Pt(12)
    normal.paragraph_format.space_before = Pt(0)
    normal.paragraph_format.space_after = Pt(8)

    for level, size in HEADING_SIZES.items():
        style = document.styles[f"Heading {level}"]
        style.font.name = BODY_FONT
        style.font.size = Pt(size)
        style.font.bold = True
        style.paragraph_format.space_after = Pt(12)


def _add_body(document, text: str) -> None:
    for line in text.split("\n"):
        stripped = line.strip()
        if not stripped:
            continue
        heading = _HEADING_LINE.match(stripped)
        if heading:
            document.add_heading(heading.group(2), level=len(heading.group(1)))
            continue

        paragraph = document.add_paragraph()
        paragraph.alignment = WD_ALIGN_PARAGRAPH.JUSTIFY
        for part in _INLINE_MARKUP.split(stripped):
            if not part:
                continue
            if len(part) >= 4 and part.startswith("**") and part.endswith("**"):
                paragraph.add_run(part[2:-2]).bold = True
            elif len(part) >= 2 and part.startswith("*") and part.endswith("*"):
                paragraph.add_run(part[1:-1]).italic = True
            else:
                paragraph.add_run(part)


def _add_references(document, references: Iterable[str]) -> None:
    for reference in references:
        paragraph = document.add_paragraph(strip_markdown_links(reference))
        paragraph.paragraph_format.left_indent = Inches(0.5)
        paragraph.paragraph_format.first_line_indent = Inches(-0.5)
