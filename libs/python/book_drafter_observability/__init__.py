"""Shared observability helpers used across Book Drafter services."""

from .logging import current_log_context, log_context, setup_logging
from .metrics import (
    observe_generation_progress,
    observe_provider_response,
    observe_stage_duration,
    setup_fastapi_metrics,
)

__all__ = [
    "current_log_context",
    "setup_logging",
    "log_context",
    "setup_fastapi_metrics",
    "observe_generation_progress",
    "observe_provider_response",
    "observe_stage_duration",
]
