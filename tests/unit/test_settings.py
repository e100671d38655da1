"""Tests for pipeline settings and prompt trimming."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from services.orchestrator.app.context import summarise_prompt
from services.orchestrator.app.settings import (
    CONTEXT_TOKEN_LIMIT_ENV_VAR,
    INCLUDE_REFERENCES_ENV_VAR,
    REFERENCE_LIMIT_ENV_VAR,
    load_pipeline_settings,
)


@pytest.fixture(autouse=True)
def clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (INCLUDE_REFERENCES_ENV_VAR, REFERENCE_LIMIT_ENV_VAR, CONTEXT_TOKEN_LIMIT_ENV_VAR):
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    settings = load_pipeline_settings()
    assert settings.include_references is True
    assert settings.reference_limit is None
    assert settings.context_token_limit == 12000


def test_values_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(INCLUDE_REFERENCES_ENV_VAR, "no")
    monkeypatch.setenv(REFERENCE_LIMIT_ENV_VAR, "25")
    monkeypatch.setenv(CONTEXT_TOKEN_LIMIT_ENV_VAR, " 4000 ")

    settings = load_pipeline_settings()

    assert settings.include_references is False
    assert settings.reference_limit == 25
    assert settings.context_token_limit == 4000


@pytest.mark.parametrize("name", [REFERENCE_LIMIT_ENV_VAR, CONTEXT_TOKEN_LIMIT_ENV_VAR])
def test_non_integer_values_are_rejected(monkeypatch: pytest.MonkeyPatch, name: str) -> None:
    monkeypatch.setenv(name, "lots")
    with pytest.raises(ValidationError):
        load_pipeline_settings()


def test_reference_limit_must_be_positive(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(REFERENCE_LIMIT_ENV_VAR, "0")
    with pytest.raises(ValidationError):
        load_pipeline_settings()


def test_short_text_is_untouched() -> None:
    assert summarise_prompt("A short brief.", 1000) == ("A short brief.", False)
    assert summarise_prompt("", 1000) == ("", False)


def test_long_text_keeps_head_and_tail() -> None:
    text = "H" * 2000 + "M" * 4000 + "T" * 2000

    trimmed, was_trimmed = summarise_prompt(text, 300)

    assert was_trimmed
    head, tail = trimmed.split("\n\n[...]\n\n")
    assert head == "H" * 600
    assert tail == "T" * 600


def test_token_limit_has_a_floor() -> None:
    text = "x" * 1000
    assert summarise_prompt(text, 10) == (text, False)
