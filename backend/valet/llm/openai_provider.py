"""
OpenAI provider (Chat Completions).

Chat Completions has no server-side web tools: requested tools are
skipped with a warning and results carry no citations.
"""

from __future__ import annotations

import openai
from openai import AsyncOpenAI

from valet.core.config import settings
from valet.core.constants import ProviderId
from valet.core.logging import get_logger
from valet.core.tracing import traceable_step
from valet.llm.models import OPENAI_MODELS
from valet.llm.registry import register_provider_factory
from valet.llm.types import AIProvider, ChatMessage, ChatOptions, ChatResult, ProviderModel, Usage

logger = get_logger(__name__)


class OpenAIProvider(AIProvider):
    id = ProviderId.OPENAI.value

    def __init__(self, api_key: str, client: AsyncOpenAI | None = None) -> None:
        self.client = client or AsyncOpenAI(api_key=api_key)

    @traceable_step(name="openai.chat", run_type="llm", provider="openai")
    async def chat(self, messages: list[ChatMessage], options: ChatOptions) -> ChatResult:
        if options.tools:
            logger.warning(
                "Skipping unsupported tools for OpenAI Chat Completions",
                tools=[t.type.value for t in options.tools],
                model=options.model,
            )

        response = await self.client.chat.completions.create(
            model=options.model,
            max_completion_tokens=options.max_tokens or settings.LLM_MAX_TOKENS,
            messages=[{"role": m.role, "content": m.content} for m in messages],
        )

        content = ""
        if response.choices:
            content = response.choices[0].message.content or ""
        usage = response.usage
        return ChatResult(
            content=content,
            usage=Usage(
                input_tokens=usage.prompt_tokens if usage else 0,
                output_tokens=usage.completion_tokens if usage else 0,
            ),
        )

    async def validate_key(self, api_key: str) -> bool:
        client = AsyncOpenAI(api_key=api_key)
        try:
            await client.models.list()
        except openai.APIError as exc:
            logger.warning("OpenAI key validation failed", error=str(exc))
            return False
        finally:
            await client.close()
        return True

    def get_models(self) -> list[ProviderModel]:
        return list(OPENAI_MODELS)


register_provider_factory(ProviderId.OPENAI.value, OpenAIProvider)
