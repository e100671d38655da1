from .engine import (
    build_section_prompt,
    clean_generated_text,
    parse_section_text,
    write_section,
)

__all__ = [
    "build_section_prompt",
    "clean_generated_text",
    "parse_section_text",
    "write_section",
]
