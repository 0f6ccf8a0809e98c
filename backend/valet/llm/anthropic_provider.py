"""
Anthropic provider.

Dispatches each chat to the matching capability wrapper depending on
which tools were requested, so every Anthropic request goes through
the same single-call code paths.
"""

from __future__ import annotations

import anthropic
from anthropic import AsyncAnthropic

from valet.core.constants import ProviderId, ToolType
from valet.core.logging import get_logger
from valet.core.tracing import traceable_step
from valet.llm.capabilities import (
    generate_text,
    run_with_tools,
    run_with_url_fetch,
    run_with_web_search,
)
from valet.llm.errors import ProviderError
from valet.llm.models import ANTHROPIC_MODELS
from valet.llm.registry import register_provider_factory
from valet.llm.types import AIProvider, ChatMessage, ChatOptions, ChatResult, ProviderModel

logger = get_logger(__name__)

# Cheapest catalog model, used only to validate a key.
KEY_PROBE_MODEL = "claude-haiku-4-5-20251001"


class AnthropicProvider(AIProvider):
    id = ProviderId.ANTHROPIC.value

    def __init__(self, api_key: str, client: AsyncAnthropic | None = None) -> None:
        self.client = client or AsyncAnthropic(api_key=api_key)

    @traceable_step(name="anthropic.chat", run_type="llm", provider="anthropic")
    async def chat(self, messages: list[ChatMessage], options: ChatOptions) -> ChatResult:
        system_prompt = "\n\n".join(m.content for m in messages if m.role == "system")
        conversation = [
            {"role": m.role, "content": m.content} for m in messages if m.role != "system"
        ]
        tools = {t.type: t for t in options.tools}
        search = tools.get(ToolType.WEB_SEARCH)
        fetch = tools.get(ToolType.WEB_FETCH)

        logger.debug(
            "Anthropic chat",
            model=options.model,
            messages=len(conversation),
            tools=sorted(tools),
        )

        if not tools:
            result = await generate_text(
                self.client,
                model=options.model,
                system_prompt=system_prompt,
                messages=conversation,
                max_tokens=options.max_tokens,
            )
            return ChatResult(content=result.content, usage=result.usage)

        if len(conversation) != 1 or conversation[0]["role"] != "user":
            raise ProviderError(
                "Tool-enabled requests take exactly one user message",
                provider=self.id,
            )
        user_input = conversation[0]["content"]

        if search and fetch:
            result = await run_with_tools(
                self.client,
                model=options.model,
                system_prompt=system_prompt,
                user_input=user_input,
                max_searches=search.max_uses,
                max_fetches=fetch.max_uses,
                max_tokens=options.max_tokens,
            )
        elif search:
            result = await run_with_web_search(
                self.client,
                model=options.model,
                system_prompt=system_prompt,
                user_input=user_input,
                max_searches=search.max_uses,
                max_tokens=options.max_tokens,
            )
        else:
            result = await run_with_url_fetch(
                self.client,
                model=options.model,
                system_prompt=system_prompt,
                user_input=user_input,
                max_fetches=fetch.max_uses,
                max_tokens=options.max_tokens,
            )

        return ChatResult(content=result.content, usage=result.usage, citations=result.citations)

    async def validate_key(self, api_key: str) -> bool:
        client = AsyncAnthropic(api_key=api_key)
        try:
            await client.messages.create(
                model=KEY_PROBE_MODEL,
                max_tokens=1,
                messages=[{"role": "user", "content": "hi"}],
            )
        except anthropic.APIError as exc:
            logger.warning("Anthropic key validation failed", error=str(exc))
            return False
        finally:
            await client.close()
        return True

    def get_models(self) -> list[ProviderModel]:
        return list(ANTHROPIC_MODELS)


register_provider_factory(ProviderId.ANTHROPIC.value, AnthropicProvider)
