"""Standalone HTML export."""

from __future__ import annotations

from html import escape

from book_drafter_schemas import GeneratedBook, SectionContent

from ..localization import get_language_pack
from .common import book_references, strip_markdown_links

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="{lang}">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>{title}</title>
<style>
body {{ font-family: Calibri, 'Segoe UI', Roboto, 'Helvetica Neue', sans-serif; line-height: 1.6;
       color: #212121; max-width: 800px; margin: 0 auto; padding: 2rem; background: #f5f5f5; }}
article {{ background: #fff; padding: 2rem 3rem; border-radius: 8px; }}
.book-title {{ font-size: 2.5rem; color: #002171; text-align: center; }}
.h1 {{ font-size: 2rem; color: #0d47a1; border-bottom: 2px solid #42a5f5; padding-bottom: .5rem; }}
.h2 {{ font-size: 1.5rem; color: #1976d2; }}
.content {{ text-align: justify; white-space: pre-wrap; line-height: 1.7; }}
.references p {{ text-indent: -0.5in; padding-left: 0.5in; word-break: break-all; }}
</style>
</head>
<body>
<article>
<h1 class="book-title">{title}</h1>
{body}
</article>
</body>
</html>
"""


def render_html(book: GeneratedBook) -> str:
    """Render ``book`` as a single self-contained HTML page; all text is escaped."""

    pack = get_language_pack(book.output_language)
    parts = [_leaf_section(book.introduction)]

    for number, chapter in enumerate(book.chapters, start=1):
        heading = pack.chapter_heading.format(number=number, title=chapter.title)
        sections = "\n".join(
            f'<div class="section-content">\n<h3 class="h2">{escape(section.title)}</h3>\n'
            f'<div class="content">{escape(section.text)}</div>\n</div>'
            for section in chapter.content
        )
        parts.append(f'<section>\n<h2 class="h1">{escape(heading)}</h2>\n{sections}\n</section>')

    parts.append(_leaf_section(book.conclusion))

    references = book_references(book)
    if references:
        items = "\n".join(f"<p>{escape(strip_markdown_links(ref))}</p>" for ref in references)
        parts.append(
            f'<section>\n<h2 class="h1">{escape(pack.references_heading)}</h2>\n'
            f'<div class="references">\n{items}\n</div>\n</section>'
        )

    return PAGE_TEMPLATE.format(lang=pack.code, title=escape(book.title), body="\n".join(parts))


def _leaf_section(content: SectionContent) -> str:
    return (
        f'<section>\n<h2 class="h1">{escape(content.title)}</h2>\n'
        f'<div class="content">{escape(content.text)}</div>\n</section>'
    )
