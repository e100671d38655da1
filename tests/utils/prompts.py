"""Helpers for reading labelled values back out of rendered prompts."""

from __future__ import annotations


def extract_labelled_value(prompt: str, label: str) -> str:
    """Return the text following ``label`` on its line, without surrounding quotes."""

    start = prompt.find(label)
    if start == -1:
        raise ValueError(f"Label '{label}' not found in prompt")

    start += len(label)
    end = prompt.find("\n", start)
    if end == -1:
        end = len(prompt)
    return prompt[start:end].strip().strip('"')
