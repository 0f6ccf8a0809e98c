"""
Provider-layer exceptions.

Vendor SDK errors (``anthropic.APIError``, ``openai.APIError``) are not
wrapped; they propagate to the caller, which turns them into a failed
run or a 500 response.
"""

from __future__ import annotations


class ProviderError(Exception):
    """Base exception for provider lookup and usage errors."""

    def __init__(self, message: str, *, provider: str | None = None) -> None:
        self.provider = provider
        super().__init__(message)


class UnknownProviderError(ProviderError):
    """No factory is registered for the requested provider id."""


class UnknownModelError(ProviderError):
    """The provider cannot be derived from a model id."""

    def __init__(self, model: str) -> None:
        self.model = model
        super().__init__(f"Unknown model provider: {model}")
