"""
Single-agent orchestration.

Builds the system prompt from an agent's traits and instructions, then
makes one provider call with web_search and web_fetch available. The
model decides which tool (if any) to use.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from valet.core.config import settings
from valet.core.constants import ToolType
from valet.core.logging import get_logger
from valet.llm.pricing import calculate_cost
from valet.llm.registry import get_provider, get_provider_for_model
from valet.llm.types import ChatMessage, ChatOptions, Citation, ToolConfig, Usage

logger = get_logger(__name__)

TRAIT_SEPARATOR = "\n\n---\n\n"


class TraitLike(Protocol):
    name: str
    context: str


def default_tools() -> list[ToolConfig]:
    """Tools every agent run gets."""
    return [
        ToolConfig(type=ToolType.WEB_SEARCH, max_uses=settings.WEB_SEARCH_MAX_USES),
        ToolConfig(type=ToolType.WEB_FETCH, max_uses=settings.WEB_FETCH_MAX_USES),
    ]


def build_trait_context(traits: Sequence[TraitLike]) -> str | None:
    """``## name\\n\\ncontext`` per trait, joined by a horizontal rule."""
    if not traits:
        return None
    return TRAIT_SEPARATOR.join(f"## {t.name}\n\n{t.context}" for t in traits)


def build_system_prompt(instructions: str, trait_context: str | None = None) -> str:
    """Prepend trait context to the agent's instructions."""
    if not trait_context:
        return instructions
    return f"{trait_context}{TRAIT_SEPARATOR}{instructions}"


@dataclass
class AgentRunResult:
    success: bool
    content: str | None = None
    error: str | None = None
    citations: list[Citation] = field(default_factory=list)
    usage: Usage | None = None
    model: str | None = None

    @property
    def cost_usd(self) -> float | None:
        if self.usage is None or self.model is None:
            return None
        return calculate_cost(self.model, self.usage.input_tokens, self.usage.output_tokens)

    def to_dict(self) -> dict[str, Any]:
        if not self.success:
            return {"success": False, "error": self.error}
        return {
            "success": True,
            "content": self.content,
            "citations": [c.to_dict() for c in self.citations],
            "usage": self.usage.to_dict() if self.usage else None,
            "model": self.model,
            "cost_usd": self.cost_usd,
        }


async def run_agent(
    *,
    instructions: str,
    user_input: str,
    api_key: str,
    model: str,
    trait_context: str | None = None,
    tools: list[ToolConfig] | None = None,
) -> AgentRunResult:
    """
    Run one agent against its provider.

    Never raises: any failure (unknown model, SDK error, network error)
    comes back as ``success=False`` with the error message.
    """
    log = logger.bind(model=model)
    try:
        provider = get_provider(get_provider_for_model(model), api_key)
        messages = [
            ChatMessage(role="system", content=build_system_prompt(instructions, trait_context)),
            ChatMessage(role="user", content=user_input),
        ]
        result = await provider.chat(
            messages,
            ChatOptions(model=model, tools=default_tools() if tools is None else tools),
        )
    except Exception as exc:
        log.warning("Agent run failed", error=str(exc), error_type=type(exc).__name__)
        return AgentRunResult(success=False, error=str(exc) or "Unknown error occurred")

    log.info(
        "Agent run completed",
        input_tokens=result.usage.input_tokens,
        output_tokens=result.usage.output_tokens,
        citations=len(result.citations),
    )
    return AgentRunResult(
        success=True,
        content=result.content,
        citations=result.citations,
        usage=result.usage,
        model=model,
    )
