"""
Single-turn run with the web_fetch tool.

web_fetch is a beta tool and is only enabled with the
``anthropic-beta: web-fetch-2025-09-10`` header. The URL(s) to fetch
must appear in *user_input*.
"""

from __future__ import annotations

from anthropic import AsyncAnthropic

from valet.core.config import settings
from valet.llm.capabilities.response import (
    WEB_FETCH_BETA,
    ToolRunResult,
    to_tool_result,
    web_fetch_tool,
)


async def run_with_url_fetch(
    client: AsyncAnthropic,
    *,
    model: str,
    system_prompt: str,
    user_input: str,
    max_fetches: int | None = None,
    max_content_tokens: int | None = None,
    max_tokens: int | None = None,
) -> ToolRunResult:
    response = await client.messages.create(
        model=model,
        max_tokens=max_tokens or settings.LLM_MAX_TOKENS,
        system=system_prompt,
        messages=[{"role": "user", "content": user_input}],
        tools=[web_fetch_tool(max_fetches, max_content_tokens)],
        extra_headers={"anthropic-beta": WEB_FETCH_BETA},
    )
    return to_tool_result(response)
