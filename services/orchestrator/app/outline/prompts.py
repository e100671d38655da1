"""Prompt templates for the outline request."""

from __future__ import annotations

OUTLINE_PROMPT = """
{outline_main}
{source_block}
{publication_params}
{type_label} {publication_type}
{tone_label} {tone}
{audience_label} {audience}
{main_topic_label} {topic}

{structure_requirements}
{outline_word_count}
{outline_chapters}
{outline_sections}
{outline_casing}
""".strip()


SOURCE_MATERIAL_BLOCK = """
{base_material_label}
{source_material}
"""
