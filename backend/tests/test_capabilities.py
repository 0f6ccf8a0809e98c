"""Capability wrappers and the Anthropic provider, against a stub client."""

from types import SimpleNamespace

import pytest

from valet.core.constants import ToolType
from valet.llm.anthropic_provider import AnthropicProvider
from valet.llm.capabilities import (
    generate_text,
    run_with_tools,
    run_with_url_fetch,
    run_with_web_search,
)
from valet.llm.capabilities.response import WEB_FETCH_BETA, log_tool_errors
from valet.llm.errors import ProviderError
from valet.llm.types import ChatMessage, ChatOptions, ToolConfig

MODEL = "claude-sonnet-4-5-20250929"


def message(*blocks, input_tokens=12, output_tokens=34, stop_reason="end_turn"):
    return SimpleNamespace(
        content=list(blocks),
        usage=SimpleNamespace(input_tokens=input_tokens, output_tokens=output_tokens),
        stop_reason=stop_reason,
    )


def text(value, citations=None):
    return SimpleNamespace(type="text", text=value, citations=citations)


class StubMessages:
    def __init__(self, response):
        self.response = response
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        return self.response


class StubClient:
    def __init__(self, response):
        self.messages = StubMessages(response)


async def test_generate_text_makes_one_plain_call():
    client = StubClient(message(text("Hello"), text(" world")))

    result = await generate_text(
        client,
        model=MODEL,
        system_prompt="Be nice",
        messages=[{"role": "user", "content": "hi"}],
    )

    assert result.content == "Hello world"
    assert result.stop_reason == "end_turn"
    assert result.usage.to_dict() == {"input_tokens": 12, "output_tokens": 34}
    (call,) = client.messages.calls
    assert call["system"] == "Be nice"
    assert call["max_tokens"] == 4096
    assert "tools" not in call


async def test_web_search_collects_citations_with_urls_only():
    response = message(
        {"type": "server_tool_use", "name": "web_search"},
        text(
            "Answer",
            citations=[
                {"url": "https://a.example", "title": "A"},
                {"url": "https://b.example"},
                {"title": "no url"},
            ],
        ),
    )
    client = StubClient(response)

    result = await run_with_web_search(client, model=MODEL, system_prompt="s", user_input="q")

    assert result.content == "Answer"
    assert [c.to_dict() for c in result.citations] == [
        {"url": "https://a.example", "title": "A"},
        {"url": "https://b.example", "title": None},
    ]
    (call,) = client.messages.calls
    assert call["tools"] == [{"type": "web_search_20250305", "name": "web_search", "max_uses": 5}]
    assert call["messages"] == [{"role": "user", "content": "q"}]


async def test_url_fetch_sends_beta_header():
    client = StubClient(message(text("Fetched")))

    result = await run_with_url_fetch(
        client, model=MODEL, system_prompt="s", user_input="https://example.com", max_fetches=2
    )

    assert result.content == "Fetched"
    (call,) = client.messages.calls
    assert call["extra_headers"] == {"anthropic-beta": WEB_FETCH_BETA}
    (tool,) = call["tools"]
    assert tool["type"] == "web_fetch_20250910"
    assert tool["max_uses"] == 2


async def test_run_with_tools_offers_both():
    client = StubClient(message(text("Both")))

    await run_with_tools(client, model=MODEL, system_prompt="s", user_input="q")

    (call,) = client.messages.calls
    assert [t["name"] for t in call["tools"]] == ["web_search", "web_fetch"]
    assert call["extra_headers"] == {"anthropic-beta": WEB_FETCH_BETA}


def test_tool_errors_are_reported():
    response = message(
        {
            "type": "web_search_tool_result",
            "content": {"type": "web_search_tool_result_error", "error_code": "max_uses_exceeded"},
        },
        {"type": "web_fetch_tool_result", "content": {"type": "web_fetch_tool_error", "error_code": "url_not_accessible"}},
        {"type": "web_fetch_tool_result", "content": {"type": "web_fetch_result"}},
    )
    assert log_tool_errors(response) == ["max_uses_exceeded", "url_not_accessible"]


class TestAnthropicProvider:
    def provider(self, response):
        client = StubClient(response)
        return AnthropicProvider("sk-ant-test", client=client), client

    async def test_without_tools_uses_plain_generation(self):
        provider, client = self.provider(message(text("plain")))

        result = await provider.chat(
            [ChatMessage("system", "sys"), ChatMessage("user", "hi")],
            ChatOptions(model=MODEL),
        )

        assert result.content == "plain"
        assert result.citations == []
        assert "tools" not in client.messages.calls[0]

    async def test_both_tools_dispatch_to_combined_call(self):
        provider, client = self.provider(message(text("tooled", citations=[{"url": "https://x"}])))
        options = ChatOptions(
            model=MODEL,
            tools=[ToolConfig(ToolType.WEB_SEARCH, 3), ToolConfig(ToolType.WEB_FETCH, 4)],
        )

        result = await provider.chat([ChatMessage("system", "sys"), ChatMessage("user", "hi")], options)

        assert result.content == "tooled"
        assert result.citations[0].url == "https://x"
        call = client.messages.calls[0]
        assert call["system"] == "sys"
        assert [t["max_uses"] for t in call["tools"]] == [3, 4]

    async def test_search_only(self):
        provider, client = self.provider(message(text("s")))
        options = ChatOptions(model=MODEL, tools=[ToolConfig(ToolType.WEB_SEARCH, 1)])

        await provider.chat([ChatMessage("user", "hi")], options)

        assert [t["name"] for t in client.messages.calls[0]["tools"]] == ["web_search"]

    async def test_tools_need_a_single_user_message(self):
        provider, _ = self.provider(message(text("x")))
        options = ChatOptions(model=MODEL, tools=[ToolConfig(ToolType.WEB_SEARCH)])

        with pytest.raises(ProviderError):
            await provider.chat(
                [ChatMessage("user", "a"), ChatMessage("assistant", "b"), ChatMessage("user", "c")],
                options,
            )
