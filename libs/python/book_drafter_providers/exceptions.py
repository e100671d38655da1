"""Errors raised by provider adapters.

The pipeline engines wrap these into the user-facing errors of
``book_drafter_schemas.errors``; nothing above the engines sees them directly.
"""

from __future__ import annotations


class ProviderError(RuntimeError):
    """Base error raised for provider failures."""


class ProviderConfigError(ProviderError):
    """Missing or invalid provider configuration."""


class ProviderResponseError(ProviderError):
    """The provider answered, but the answer cannot be used."""


class ProviderCapabilityError(ProviderError):
    """The request asks for a feature the provider does not offer."""
