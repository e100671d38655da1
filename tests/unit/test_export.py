"""Tests for the Word and HTML exporters."""

from __future__ import annotations

import io

from docx import Document

from book_drafter_schemas import GeneratedBook, Outline, OutputLanguage, SectionContent

from services.orchestrator.app.export import (
    book_references,
    export_filename,
    render_docx,
    render_html,
    strip_markdown_links,
)


def _book(language: OutputLanguage = OutputLanguage.ES) -> GeneratedBook:
    outline = Outline.model_validate(
        {
            "title": "Política energética: ¿qué sigue?",
            "introduction": {"title": "Introducción"},
            "chapters": [
                {"title": "Mercados", "sections": ["Precios"]},
                {"title": "Redes", "sections": ["Almacenamiento"]},
            ],
            "conclusion": {"title": "Conclusión"},
        }
    )
    book = GeneratedBook.skeleton(outline, language)
    book.introduction = SectionContent(title="Introducción", text="Texto de **apertura** y *matices*.")
    book.chapters[0].content.append(
        SectionContent(title="Precios", text="# Subastas\nLos precios <bajan> rápido.")
    )
    book.chapters[1].content.append(SectionContent(title="Almacenamiento", text="Baterías."))
    book.conclusion = SectionContent(
        title="Conclusión", text="Cierre.", references=["Lee, K. (2021). [Grid](https://x.example)."]
    )
    book.references = ["Zhou, L. (2019). [Storage](https://z.example).", "Adams, B. (2021)."]
    return book


def test_strip_markdown_links_keeps_label() -> None:
    assert strip_markdown_links("See [Grid report](https://x.example) now") == "See Grid report now"


def test_book_references_prefer_consolidated_list() -> None:
    book = _book()
    assert book_references(book) == ["Adams, B. (2021).", "Zhou, L. (2019). [Storage](https://z.example)."]
    book.references = []
    assert book_references(book) == ["Lee, K. (2021). [Grid](https://x.example)."]


def test_export_filename_slugifies_title() -> None:
    assert export_filename(_book(), "docx") == "política_energética_qué_sigue.docx"
    assert export_filename(_book(), ".html").endswith(".html")


def test_render_docx_structure() -> None:
    data = render_docx(_book())
    document = Document(io.BytesIO(data))
    paragraphs = [(paragraph.style.name, paragraph.text) for paragraph in document.paragraphs]
    texts = [text for _, text in paragraphs]

    assert ("Title", "Política energética: ¿qué sigue?") in paragraphs
    assert ("Heading 1", "Capítulo 1: Mercados") in paragraphs
    assert ("Heading 1", "Capítulo 2: Redes") in paragraphs
    assert ("Heading 2", "Precios") in paragraphs
    assert ("Heading 1", "Subastas") in paragraphs
    assert ("Heading 1", "Referencias") in paragraphs
    assert "Zhou, L. (2019). Storage." in texts
    assert "Texto de apertura y matices." in texts

    opening = next(p for p in document.paragraphs if p.text.startswith("Texto de"))
    assert [(run.text, bool(run.bold), bool(run.italic)) for run in opening.runs] == [
        ("Texto de ", False, False),
        ("apertura", True, False),
        (" y ", False, False),
        ("matices", False, True),
        (".", False, False),
    ]


def test_render_docx_english_headings() -> None:
    document = Document(io.BytesIO(render_docx(_book(OutputLanguage.EN))))
    texts = [paragraph.text for paragraph in document.paragraphs]
    assert "Chapter 1: Mercados" in texts
    assert "References" in texts


def test_render_html_escapes_all_text() -> None:
    html = render_html(_book())

    assert html.startswith("<!DOCTYPE html>")
    assert '<html lang="es">' in html
    assert "Capítulo 2: Redes" in html
    assert "&lt;bajan&gt;" in html
    assert "<bajan>" not in html
    assert "Zhou, L. (2019). Storage." in html
    assert html.index("Adams, B. (2021).") < html.index("Zhou, L. (2019).")
