"""Pipeline-level settings loaded from the environment."""

from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, Field, ValidationError

INCLUDE_REFERENCES_ENV_VAR = "BOOK_DRAFTER_INCLUDE_REFERENCES"
REFERENCE_LIMIT_ENV_VAR = "BOOK_DRAFTER_REFERENCE_LIMIT"
CONTEXT_TOKEN_LIMIT_ENV_VAR = "CONTEXT_TOKEN_LIMIT"
DEFAULT_CONTEXT_TOKEN_LIMIT = 12000

SERVICE_NAME = "orchestrator"


class PipelineSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    include_references: bool = True
    reference_limit: int | None = Field(None, ge=1)
    context_token_limit: int = Field(DEFAULT_CONTEXT_TOKEN_LIMIT, ge=256)


def load_pipeline_settings() -> PipelineSettings:
    """Read :class:`PipelineSettings` from ``BOOK_DRAFTER_*`` variables.

    Raises:
        ValidationError: If a numeric variable is not a valid integer.
    """

    include_raw = os.getenv(INCLUDE_REFERENCES_ENV_VAR)
    include_references = (
        include_raw.strip().lower() in {"true", "1", "yes", "on"} if include_raw else True
    )

    def parse_int(name: str) -> int | None:
        raw = os.getenv(name)
        if raw in (None, ""):
            return None
        try:
            return int(raw.strip())
        except ValueError as exc:
            raise ValidationError.from_exception_data(
                "PipelineSettings",
                [
                    {
                        "type": "value_error",
                        "loc": (name.lower(),),
                        "input": raw,
                        "ctx": {"error": f"{name} must be an integer"},
                    }
                ],
            ) from exc

    context_limit = parse_int(CONTEXT_TOKEN_LIMIT_ENV_VAR)
    return PipelineSettings(
        include_references=include_references,
        reference_limit=parse_int(REFERENCE_LIMIT_ENV_VAR),
        context_token_limit=DEFAULT_CONTEXT_TOKEN_LIMIT if context_limit is None else context_limit,
    )


__all__ = ["PipelineSettings", "SERVICE_NAME", "load_pipeline_settings"]
