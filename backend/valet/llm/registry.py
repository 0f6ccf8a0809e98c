"""
Provider factory registry.

Providers need an API key at construction time, so modules register a
factory on import and instances are built per request::

    provider = get_provider(get_provider_for_model(model), api_key)
"""

from __future__ import annotations

from typing import Callable

from valet.core.constants import ProviderId
from valet.llm.errors import UnknownModelError, UnknownProviderError
from valet.llm.types import AIProvider

ProviderFactory = Callable[[str], AIProvider]

_provider_factories: dict[str, ProviderFactory] = {}

_OPENAI_PREFIXES = ("gpt-", "o3-", "o4-")


def register_provider_factory(provider_id: str, factory: ProviderFactory) -> None:
    _provider_factories[provider_id] = factory


def get_provider(provider_id: str, api_key: str) -> AIProvider:
    """Build a provider instance for *provider_id* using *api_key*."""
    factory = _provider_factories.get(provider_id)
    if factory is None:
        raise UnknownProviderError(f"Unknown provider: {provider_id}", provider=provider_id)
    return factory(api_key)


def get_provider_for_model(model_id: str) -> str:
    """Provider id encoded in a model id (``claude-*``, ``gpt-*``, ``o3-*``, ``o4-*``)."""
    if model_id.startswith("claude-"):
        return ProviderId.ANTHROPIC.value
    if model_id.startswith(_OPENAI_PREFIXES):
        return ProviderId.OPENAI.value
    raise UnknownModelError(model_id)
