"""Single-turn run with the server-side web_search tool."""

from __future__ import annotations

from anthropic import AsyncAnthropic

from valet.core.config import settings
from valet.llm.capabilities.response import ToolRunResult, to_tool_result, web_search_tool


async def run_with_web_search(
    client: AsyncAnthropic,
    *,
    model: str,
    system_prompt: str,
    user_input: str,
    max_searches: int | None = None,
    max_tokens: int | None = None,
) -> ToolRunResult:
    response = await client.messages.create(
        model=model,
        max_tokens=max_tokens or settings.LLM_MAX_TOKENS,
        system=system_prompt,
        messages=[{"role": "user", "content": user_input}],
        tools=[web_search_tool(max_searches)],
    )
    return to_tool_result(response)
