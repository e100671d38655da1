"""Renderers turning a finished book into downloadable files."""

from .common import MEDIA_TYPES, book_references, export_filename, strip_markdown_links
from .docx import render_docx
from .html import render_html

__all__ = [
    "MEDIA_TYPES",
    "book_references",
    "export_filename",
    "render_docx",
    "render_html",
    "strip_markdown_links",
]
