"""Prompt templates for the end-of-run bibliography pass."""

from __future__ import annotations

REFERENCES_PROMPT = """
{references_task}

{sources_label}
{source_lines}

{references_rules}
""".strip()
