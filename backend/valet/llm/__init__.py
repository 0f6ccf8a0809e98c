"""
LLM provider layer.

Importing this package registers the built-in providers with the
factory registry.
"""

from valet.llm import anthropic_provider, openai_provider  # noqa: F401  self-registration
from valet.llm.errors import ProviderError, UnknownModelError, UnknownProviderError
from valet.llm.registry import get_provider, get_provider_for_model
from valet.llm.types import ChatMessage, ChatOptions, ChatResult, Citation, ToolConfig, Usage

__all__ = [
    "ChatMessage",
    "ChatOptions",
    "ChatResult",
    "Citation",
    "ToolConfig",
    "Usage",
    "ProviderError",
    "UnknownModelError",
    "UnknownProviderError",
    "get_provider",
    "get_provider_for_model",
]
