"""Plain text generation, no tools."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from anthropic import AsyncAnthropic

from valet.core.config import settings
from valet.llm.capabilities.response import extract_text, extract_usage
from valet.llm.types import Usage


@dataclass
class TextGenerationResult:
    content: str
    stop_reason: str | None = None
    usage: Usage = field(default_factory=Usage)


async def generate_text(
    client: AsyncAnthropic,
    *,
    model: str,
    system_prompt: str,
    messages: list[dict[str, Any]],
    max_tokens: int | None = None,
) -> TextGenerationResult:
    response = await client.messages.create(
        model=model,
        max_tokens=max_tokens or settings.LLM_MAX_TOKENS,
        system=system_prompt,
        messages=messages,
    )
    return TextGenerationResult(
        content=extract_text(response),
        stop_reason=response.stop_reason,
        usage=extract_usage(response),
    )
