"""Model catalog, grouped by provider."""

from __future__ import annotations

from valet.core.constants import ProviderId
from valet.llm.types import ProviderModel

ANTHROPIC_MODELS: tuple[ProviderModel, ...] = (
    ProviderModel("claude-opus-4-5-20251101", "Claude Opus 4.5", ProviderId.ANTHROPIC),
    ProviderModel("claude-sonnet-4-5-20250929", "Claude Sonnet 4.5", ProviderId.ANTHROPIC),
    ProviderModel("claude-haiku-4-5-20251001", "Claude Haiku 4.5", ProviderId.ANTHROPIC),
)

OPENAI_MODELS: tuple[ProviderModel, ...] = (
    ProviderModel("gpt-4.1", "GPT-4.1", ProviderId.OPENAI),
    ProviderModel("gpt-4o", "GPT-4o", ProviderId.OPENAI),
    ProviderModel("o4-mini", "o4-mini", ProviderId.OPENAI),
)

ALL_MODELS: tuple[ProviderModel, ...] = ANTHROPIC_MODELS + OPENAI_MODELS

_MODEL_IDS = frozenset(m.id for m in ALL_MODELS)


def is_known_model(model_id: str) -> bool:
    return model_id in _MODEL_IDS


def models_by_provider() -> dict[str, list[dict[str, str]]]:
    """Catalog shaped for the settings and agent forms."""
    grouped: dict[str, list[dict[str, str]]] = {}
    for model in ALL_MODELS:
        grouped.setdefault(model.provider, []).append(model.to_dict())
    return grouped
