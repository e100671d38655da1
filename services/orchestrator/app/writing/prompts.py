"""Prompt templates for single-section writing requests."""

from __future__ import annotations

SECTION_PROMPT = """
{section_task}

{book_context}
{overall_topic_label} "{book_title}"
{publication_type_label} {publication_type}
{desired_tone_label} {tone}
{section_audience_label} {audience}
{source_block}
{section_to_write}
{chapter_label} "{chapter_title}"
{section_label} "{section_title}"

{writing_instructions}
{directives}
""".strip()


SOURCE_MATERIAL_BLOCK = """
{base_material_label}
{source_material}
"""
